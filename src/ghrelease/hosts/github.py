"""GitHub API binding for publishing releases.

This module talks to GitHub's REST API to look up, delete and create
releases and to upload release assets. It provides:
- RepositoryHost, the protocol the publisher codes against
- build_endpoints(), choosing public vs. enterprise URLs
- GitHubHost, the real httpx-based implementation
- InMemoryHost, a recording fake for tests and dry local runs

Design notes:
- Uses httpx for async HTTP requests, one client per operation
- The token is passed in explicitly; nothing here reads the environment
- No retries: a failed call is reported once and the run stops

GitHub API docs: https://docs.github.com/en/rest/releases
"""

from __future__ import annotations

import mimetypes
from collections.abc import AsyncIterator
from dataclasses import dataclass
from typing import Any, BinaryIO, Protocol
from urllib.parse import quote

import httpx

from ghrelease.errors import HostError
from ghrelease.logging_config import get_logger
from ghrelease.schemas import (
    LookupFailed,
    ReleaseFound,
    ReleaseLookup,
    ReleaseNotFound,
    ReleaseRequest,
    RemoteAsset,
    RemoteRelease,
)

logger = get_logger(__name__)

PUBLIC_HOST_URL = "https://github.com"
PUBLIC_API_URL = "https://api.github.com/"
PUBLIC_UPLOAD_URL = "https://uploads.github.com/"
DEFAULT_CONTENT_TYPE = "application/octet-stream"
UPLOAD_CHUNK_SIZE = 64 * 1024

# ---------------------------------------------------------------------------
# Protocol (Interface)
# ---------------------------------------------------------------------------


class RepositoryHost(Protocol):
    """Remote operations the publisher needs, bound to one repository.

    Implementations raise HostError from delete/create/upload. The lookup
    never raises for remote failures; it returns a tagged result instead.
    """

    async def find_release_by_tag(self, tag: str) -> ReleaseLookup:
        """Look up a release by tag.

        Returns:
            ReleaseFound, ReleaseNotFound (platform said "not found") or
            LookupFailed (anything else went wrong)
        """
        ...

    async def delete_release(self, release_id: int) -> None:
        """Delete a release by its opaque id."""
        ...

    async def create_release(
        self,
        tag: str,
        commitish: str,
        name: str,
        body: str,
        draft: bool = False,
        prerelease: bool = False,
    ) -> RemoteRelease:
        """Create a release and return it."""
        ...

    async def upload_asset(
        self,
        release_id: int,
        file_name: str,
        file_label: str,
        contents: BinaryIO,
    ) -> RemoteAsset:
        """Attach one file, read from an open binary stream, to a release."""
        ...


# ---------------------------------------------------------------------------
# Endpoint Selection
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class HostEndpoints:
    """Base URLs for the REST API and the asset upload service.

    Attributes:
        api_url: Base for release CRUD calls, always ends with "/"
        upload_url: Base for asset uploads, always ends with "/"
        enterprise: Whether this points at a self-hosted instance
    """

    api_url: str
    upload_url: str
    enterprise: bool = False


def build_endpoints(host_url: str) -> HostEndpoints:
    """Pick the public or enterprise endpoints for a platform base URL.

    Args:
        host_url: "https://github.com" or an enterprise base such as
                  "https://git.example.com"

    Returns:
        HostEndpoints for that platform
    """
    base = host_url.rstrip("/")
    if base == PUBLIC_HOST_URL:
        return HostEndpoints(api_url=PUBLIC_API_URL, upload_url=PUBLIC_UPLOAD_URL)
    return HostEndpoints(
        api_url=f"{base}/api/v3/",
        upload_url=f"{base}/api/uploads/",
        enterprise=True,
    )


# ---------------------------------------------------------------------------
# Concrete Implementation
# ---------------------------------------------------------------------------


class GitHubHost:
    """Real GitHub (or GitHub Enterprise) binding using httpx.

    Usage:
        host = GitHubHost("zerogvt", "ghrelease", token="ghp_...",
                          endpoints=build_endpoints("https://github.com"))
        lookup = await host.find_release_by_tag("latest")
    """

    def __init__(
        self,
        owner: str,
        repo: str,
        token: str,
        endpoints: HostEndpoints,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the host binding.

        Args:
            owner: Repository owner
            repo: Repository name
            token: Bearer token used for every request
            endpoints: API and upload base URLs
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (tests pass a MockTransport)
        """
        self.owner = owner
        self.repo = repo
        self.endpoints = endpoints
        self._timeout = timeout
        self._transport = transport
        self._headers: dict[str, str] = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "Authorization": f"Bearer {token}",
        }

    @property
    def _releases_path(self) -> str:
        return f"repos/{quote(self.owner, safe='')}/{quote(self.repo, safe='')}/releases"

    def _client(self, base_url: str) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=base_url,
            headers=self._headers,
            timeout=self._timeout,
            transport=self._transport,
        )

    async def _send(
        self, base_url: str, method: str, url: str, **kwargs: Any
    ) -> httpx.Response:
        """Send one request, turning transport failures into HostError."""
        try:
            async with self._client(base_url) as client:
                return await client.request(method, url, **kwargs)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise HostError(f"{method} {url} failed: {exc}") from exc

    @staticmethod
    def _check(resp: httpx.Response, action: str) -> None:
        if resp.is_success:
            return
        raise HostError(
            f"{action} failed with HTTP {resp.status_code}: {_error_message(resp)}",
            status_code=resp.status_code,
        )

    async def find_release_by_tag(self, tag: str) -> ReleaseLookup:
        """GET repos/{owner}/{repo}/releases/tags/{tag}.

        A 404 is the only response treated as "no such release".
        """
        url = f"{self._releases_path}/tags/{quote(tag, safe='')}"
        try:
            resp = await self._send(self.endpoints.api_url, "GET", url)
            if resp.status_code == 404:
                logger.debug("release_not_found", tag=tag)
                return ReleaseNotFound()
            self._check(resp, f"Looking up release {tag!r}")
            return ReleaseFound(RemoteRelease.from_api(resp.json()))
        except HostError as exc:
            return LookupFailed(exc)
        except (ValueError, KeyError) as exc:
            return LookupFailed(HostError(f"Unexpected release payload for {tag!r}: {exc}"))

    async def delete_release(self, release_id: int) -> None:
        resp = await self._send(
            self.endpoints.api_url, "DELETE", f"{self._releases_path}/{release_id}"
        )
        self._check(resp, f"Deleting release {release_id}")

    async def create_release(
        self,
        tag: str,
        commitish: str,
        name: str,
        body: str,
        draft: bool = False,
        prerelease: bool = False,
    ) -> RemoteRelease:
        payload = {
            "tag_name": tag,
            "target_commitish": commitish,
            "name": name,
            "body": body,
            "draft": draft,
            "prerelease": prerelease,
        }
        resp = await self._send(
            self.endpoints.api_url, "POST", self._releases_path, json=payload
        )
        self._check(resp, f"Creating release {tag!r}")
        try:
            return RemoteRelease.from_api(resp.json())
        except (ValueError, KeyError) as exc:
            raise HostError(f"Unexpected payload creating release {tag!r}: {exc}") from exc

    async def upload_asset(
        self,
        release_id: int,
        file_name: str,
        file_label: str,
        contents: BinaryIO,
    ) -> RemoteAsset:
        """Stream the file to the upload service.

        The body is sent in chunks with an explicit Content-Length, which
        the upload service requires. The Content-Type is guessed from the
        file extension, falling back to application/octet-stream.
        """
        content_type = mimetypes.guess_type(file_name)[0] or DEFAULT_CONTENT_TYPE
        start = contents.tell()
        size = contents.seek(0, 2) - start
        contents.seek(start)
        resp = await self._send(
            self.endpoints.upload_url,
            "POST",
            f"{self._releases_path}/{release_id}/assets",
            params={"name": file_name, "label": file_label},
            content=_stream(contents),
            headers={"Content-Type": content_type, "Content-Length": str(size)},
        )
        self._check(resp, f"Uploading {file_name!r}")
        try:
            return RemoteAsset.from_api(resp.json(), release_id=release_id)
        except (ValueError, KeyError) as exc:
            raise HostError(f"Unexpected payload uploading {file_name!r}: {exc}") from exc


async def _stream(contents: BinaryIO) -> AsyncIterator[bytes]:
    while chunk := contents.read(UPLOAD_CHUNK_SIZE):
        yield chunk


def _error_message(resp: httpx.Response) -> str:
    """Extract GitHub's "message" field, falling back to the raw body."""
    try:
        data = resp.json()
    except ValueError:
        return resp.text.strip() or resp.reason_phrase
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return resp.text.strip()


def build_host(
    request: ReleaseRequest,
    token: str,
    transport: httpx.AsyncBaseTransport | None = None,
) -> GitHubHost:
    """Create the GitHub binding for a release request."""
    endpoints = build_endpoints(request.host_url)
    logger.debug(
        "host_selected",
        api_url=endpoints.api_url,
        upload_url=endpoints.upload_url,
        enterprise=endpoints.enterprise,
    )
    return GitHubHost(
        request.owner,
        request.repo_name,
        token=token,
        endpoints=endpoints,
        transport=transport,
    )


# ---------------------------------------------------------------------------
# In-Memory Implementation (for testing)
# ---------------------------------------------------------------------------


class InMemoryHost:
    """Fake host that keeps releases in memory and records every call.

    Use this in tests when you don't want to hit a real platform. Failures
    are injected per operation name ("find_release_by_tag",
    "delete_release", "create_release", "upload_asset").

    Usage:
        host = InMemoryHost(
            existing=[RemoteRelease(id=123, tag="latest")], next_id=456
        )
        await ReleasePublisher().publish(request, host)
        assert host.operations() == [...]
    """

    def __init__(
        self,
        existing: list[RemoteRelease] | None = None,
        next_id: int = 1,
        failures: dict[str, HostError] | None = None,
        fail_upload_at: int | None = None,
    ) -> None:
        """Initialize the fake.

        Args:
            existing: Releases already present on the "platform"
            next_id: Id handed to the next created release
            failures: Operation name -> error raised (or, for the lookup,
                      returned as LookupFailed) on every call
            fail_upload_at: 1-based index of the upload that should fail
        """
        self.releases: dict[str, RemoteRelease] = {r.tag: r for r in existing or []}
        self.assets: dict[int, list[RemoteAsset]] = {}
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self._next_id = next_id
        self._failures = failures or {}
        self._fail_upload_at = fail_upload_at
        self._uploads = 0

    def operations(self) -> list[str]:
        """Names of the operations called so far, in order."""
        return [name for name, _ in self.calls]

    def calls_to(self, operation: str) -> list[dict[str, Any]]:
        """Arguments of every call to one operation."""
        return [args for name, args in self.calls if name == operation]

    async def find_release_by_tag(self, tag: str) -> ReleaseLookup:
        self.calls.append(("find_release_by_tag", {"tag": tag}))
        if "find_release_by_tag" in self._failures:
            return LookupFailed(self._failures["find_release_by_tag"])
        release = self.releases.get(tag)
        if release is None:
            return ReleaseNotFound()
        return ReleaseFound(release)

    async def delete_release(self, release_id: int) -> None:
        self.calls.append(("delete_release", {"release_id": release_id}))
        if "delete_release" in self._failures:
            raise self._failures["delete_release"]
        for tag, release in list(self.releases.items()):
            if release.id == release_id:
                del self.releases[tag]
                self.assets.pop(release_id, None)
                return
        raise HostError(f"Release {release_id} not found", status_code=404)

    async def create_release(
        self,
        tag: str,
        commitish: str,
        name: str,
        body: str,
        draft: bool = False,
        prerelease: bool = False,
    ) -> RemoteRelease:
        self.calls.append(
            (
                "create_release",
                {
                    "tag": tag,
                    "commitish": commitish,
                    "name": name,
                    "body": body,
                    "draft": draft,
                    "prerelease": prerelease,
                },
            )
        )
        if "create_release" in self._failures:
            raise self._failures["create_release"]
        if tag in self.releases:
            raise HostError(f"Release for tag {tag!r} already exists", status_code=422)
        release = RemoteRelease(id=self._next_id, tag=tag, name=name)
        self._next_id += 1
        self.releases[tag] = release
        self.assets[release.id] = []
        return release

    async def upload_asset(
        self,
        release_id: int,
        file_name: str,
        file_label: str,
        contents: BinaryIO,
    ) -> RemoteAsset:
        data = contents.read()
        self.calls.append(
            (
                "upload_asset",
                {
                    "release_id": release_id,
                    "file_name": file_name,
                    "file_label": file_label,
                    "contents": data,
                    "stream": contents,
                },
            )
        )
        self._uploads += 1
        if "upload_asset" in self._failures:
            raise self._failures["upload_asset"]
        if self._fail_upload_at == self._uploads:
            raise HostError(f"Upload of {file_name!r} rejected", status_code=422)
        if release_id not in self.assets:
            raise HostError(f"Release {release_id} not found", status_code=404)
        asset = RemoteAsset(
            name=file_name, label=file_label, release_id=release_id, size=len(data)
        )
        self.assets[release_id].append(asset)
        return asset
