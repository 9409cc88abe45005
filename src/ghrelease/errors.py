"""Error taxonomy for the release publisher.

Every failure in a publish run is fatal. The CLI catches GhReleaseError,
logs it and exits non-zero; nothing in the core recovers locally.
"""

from __future__ import annotations


class GhReleaseError(Exception):
    """Base class for all errors raised by ghrelease."""


class ConfigurationError(GhReleaseError):
    """Missing credential or missing/malformed release descriptor."""


class GuardViolation(GhReleaseError):
    """Working directory does not match the target repository name."""


class RemoteLookupError(GhReleaseError):
    """Querying the existing release failed for a reason other than not-found."""


class RemoteMutationError(GhReleaseError):
    """Deleting or creating a release failed."""


class FileAccessError(GhReleaseError):
    """A listed asset path could not be opened or read."""


class AssetUploadError(GhReleaseError):
    """The host rejected or failed an asset upload."""


class HostError(GhReleaseError):
    """Raised by RepositoryHost implementations when a remote call fails.

    The publisher translates it into the step-specific error above.

    Attributes:
        status_code: HTTP status returned by the platform, if any
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
