"""Hosting-platform bindings for the release publisher.

The publisher only talks to a RepositoryHost. This package holds the
protocol itself, the GitHub REST binding and an in-memory fake.
"""

from ghrelease.hosts.github import (
    PUBLIC_HOST_URL,
    GitHubHost,
    HostEndpoints,
    InMemoryHost,
    RepositoryHost,
    build_endpoints,
    build_host,
)

__all__ = [
    "PUBLIC_HOST_URL",
    "GitHubHost",
    "HostEndpoints",
    "InMemoryHost",
    "RepositoryHost",
    "build_endpoints",
    "build_host",
]
