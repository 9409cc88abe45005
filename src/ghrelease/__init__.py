"""GitHub Release Publisher.

A small command-line tool that (re)creates a tagged release on GitHub or
GitHub Enterprise and uploads a list of local files as release assets.
"""

__version__ = "0.1.0"
