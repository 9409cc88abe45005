"""Pydantic models describing a release request and the remote objects it produces.

The release descriptor (release.json) is deserialized straight into
ReleaseRequest, so these models are the single source of truth for:
- Descriptor validation in the config layer
- The values the publisher sends to the hosting platform
- Parsing the platform's JSON responses into typed objects

Key design decisions:
- ReleaseRequest is frozen: it is built once from input and never mutated
- Field names are Pythonic; descriptor keys are kept as aliases so existing
  release.json files keep working unchanged
- The release lookup is a tagged result, so a transport failure can never
  be confused with "no such release"
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field, field_validator

from ghrelease.errors import HostError

# ---------------------------------------------------------------------------
# Input Schema
# ---------------------------------------------------------------------------


class ReleaseRequest(BaseModel):
    """Everything needed to publish one release.

    Attributes:
        host_url: Base address of the platform ("https://github.com" or an
                  enterprise instance such as "https://git.example.com")
        owner: Account or organisation owning the repository
        repo_name: Repository name
        tag: Tag the release is keyed on
        description: Release body shown on the release page (may be empty)
        asset_paths: Local files to attach (at least one), uploaded in this order
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    host_url: str = Field(
        ..., alias="github_host", min_length=1, description="Platform base URL"
    )
    owner: str = Field(..., min_length=1, description="Repository owner")
    repo_name: str = Field(..., alias="repo", min_length=1, description="Repository name")
    tag: str = Field(..., min_length=1, description="Release tag")
    description: str = Field("", alias="desc", description="Release body")
    asset_paths: tuple[str, ...] = Field(
        ..., alias="files", min_length=1, description="Files to upload as assets"
    )

    @field_validator("host_url")
    @classmethod
    def check_host_url(cls, value: str) -> str:
        """Require an absolute http(s) URL that httpx can parse."""
        if any(ch.isspace() for ch in value):
            raise ValueError(f"Host URL {value!r} contains whitespace")
        try:
            url = httpx.URL(value)
        except httpx.InvalidURL as exc:
            raise ValueError(f"Invalid host URL {value!r}: {exc}") from exc
        if url.scheme not in ("http", "https") or not url.host:
            raise ValueError(f"Host URL {value!r} must be an absolute http(s) URL")
        return value

    @field_validator("asset_paths")
    @classmethod
    def check_asset_paths(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        """Reject blank entries in the file list."""
        blank = [i for i, path in enumerate(value) if not path.strip()]
        if blank:
            raise ValueError(f"Asset paths must be non-empty (blank entries at {blank})")
        return value

    def to_descriptor(self) -> dict[str, Any]:
        """Serialize back to the descriptor layout (github_host, repo, files, desc)."""
        return self.model_dump(by_alias=True, mode="json")


# ---------------------------------------------------------------------------
# Remote Objects
# ---------------------------------------------------------------------------


class RemoteRelease(BaseModel):
    """A release as reported by the hosting platform.

    Only valid for the duration of a single publish run.
    """

    model_config = ConfigDict(frozen=True)

    id: int = Field(..., description="Opaque platform identifier")
    tag: str = Field(..., description="Tag name")
    name: str | None = Field(None, description="Display name")
    html_url: str = Field("", description="Release page URL")

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> RemoteRelease:
        return cls(
            id=data["id"],
            tag=data.get("tag_name") or "",
            name=data.get("name"),
            html_url=data.get("html_url") or "",
        )


class RemoteAsset(BaseModel):
    """One uploaded file attached to a release."""

    model_config = ConfigDict(frozen=True)

    name: str
    label: str
    release_id: int
    size: int | None = None
    download_url: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any], release_id: int) -> RemoteAsset:
        return cls(
            name=data["name"],
            label=data.get("label") or data["name"],
            release_id=release_id,
            size=data.get("size"),
            download_url=data.get("browser_download_url") or "",
        )


# ---------------------------------------------------------------------------
# Lookup Result
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ReleaseFound:
    """A release with the requested tag exists."""

    release: RemoteRelease


@dataclass(frozen=True)
class ReleaseNotFound:
    """The platform reported that no release carries the requested tag."""


@dataclass(frozen=True)
class LookupFailed:
    """The lookup itself failed (transport, auth, server error...)."""

    cause: HostError


ReleaseLookup = ReleaseFound | ReleaseNotFound | LookupFailed


# ---------------------------------------------------------------------------
# Publish Outcome
# ---------------------------------------------------------------------------


@dataclass
class PublishResult:
    """What a successful publish run left on the platform.

    Attributes:
        release: The newly created release
        assets: Uploaded assets, in upload order
        replaced: Whether a previous release with the same tag was deleted
    """

    release: RemoteRelease
    assets: list[RemoteAsset] = field(default_factory=list)
    replaced: bool = False
