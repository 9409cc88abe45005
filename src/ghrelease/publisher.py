"""Release publishing workflow.

Brings the remote state for one tag to exactly one release whose asset
list matches the request. The flow is a fixed pipeline:
1. Look up the release by tag
2. If it exists, delete it
3. Create a fresh release on "main"
4. Upload every requested file, in order

Replacing instead of updating keeps re-runs idempotent: a changed file
list never leaves stale assets behind from a previous run.

Every step is fatal on failure. Nothing is retried or rolled back, so a
failed create after a successful delete leaves the tag without a release
until the next run.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import BinaryIO

from ghrelease.errors import (
    AssetUploadError,
    FileAccessError,
    HostError,
    RemoteLookupError,
    RemoteMutationError,
)
from ghrelease.hosts import RepositoryHost
from ghrelease.logging_config import get_logger
from ghrelease.schemas import (
    LookupFailed,
    PublishResult,
    ReleaseFound,
    ReleaseNotFound,
    ReleaseRequest,
    RemoteAsset,
    RemoteRelease,
)

logger = get_logger(__name__)

TARGET_COMMITISH = "main"


class ReleasePublisher:
    """Drives a RepositoryHost through the replace-release pipeline.

    The publisher is stateless; each call to publish() re-derives the
    remote state from a fresh lookup.

    Usage:
        publisher = ReleasePublisher()
        result = await publisher.publish(request, host)
    """

    async def publish(self, request: ReleaseRequest, host: RepositoryHost) -> PublishResult:
        """Replace the release for request.tag and upload its assets.

        Args:
            request: Validated release request
            host: Platform binding for request.owner/request.repo_name

        Returns:
            The created release and its uploaded assets

        Raises:
            RemoteLookupError: The lookup failed for a reason other than not-found
            RemoteMutationError: Deleting the old or creating the new release failed
            FileAccessError: An asset path could not be read
            AssetUploadError: The host rejected an upload
        """
        logger.info("publish_started", tag=request.tag, assets=len(request.asset_paths))

        replaced = await self._delete_existing(request, host)
        release = await self._create(request, host)
        assets = await self._upload_all(request, release, host)

        logger.info(
            "publish_complete",
            tag=request.tag,
            release_id=release.id,
            assets=len(assets),
            replaced=replaced,
        )
        return PublishResult(release=release, assets=assets, replaced=replaced)

    async def _delete_existing(self, request: ReleaseRequest, host: RepositoryHost) -> bool:
        lookup = await host.find_release_by_tag(request.tag)
        if isinstance(lookup, LookupFailed):
            raise RemoteLookupError(
                f"Could not look up release '{request.tag}': {lookup.cause}"
            ) from lookup.cause
        if isinstance(lookup, ReleaseNotFound):
            logger.info("no_existing_release", tag=request.tag)
            return False
        if not isinstance(lookup, ReleaseFound):
            raise RemoteLookupError(
                f"Unexpected lookup result for release '{request.tag}': {lookup!r}"
            )

        existing = lookup.release
        logger.info("deleting_existing_release", tag=request.tag, release_id=existing.id)
        try:
            await host.delete_release(existing.id)
        except HostError as exc:
            raise RemoteMutationError(
                f"Could not delete release '{request.tag}' ({existing.id}): {exc}"
            ) from exc
        return True

    async def _create(self, request: ReleaseRequest, host: RepositoryHost) -> RemoteRelease:
        logger.info("creating_release", tag=request.tag)
        try:
            release = await host.create_release(
                tag=request.tag,
                commitish=TARGET_COMMITISH,
                name=request.tag,
                body=request.description,
                draft=False,
                prerelease=False,
            )
        except HostError as exc:
            raise RemoteMutationError(
                f"Could not create release '{request.tag}': {exc}"
            ) from exc
        logger.info("release_created", tag=request.tag, release_id=release.id)
        return release

    async def _upload_all(
        self,
        request: ReleaseRequest,
        release: RemoteRelease,
        host: RepositoryHost,
    ) -> list[RemoteAsset]:
        assets: list[RemoteAsset] = []
        for raw_path in request.asset_paths:
            path = Path(raw_path)
            handle = _open_asset(path)
            # the handle streams into the upload and is closed on every exit path
            with handle:
                logger.info(
                    "uploading_asset",
                    name=path.name,
                    tag=request.tag,
                    release_id=release.id,
                    size=os.fstat(handle.fileno()).st_size,
                )
                try:
                    asset = await host.upload_asset(
                        release_id=release.id,
                        file_name=path.name,
                        file_label=path.name,
                        contents=handle,
                    )
                except HostError as exc:
                    raise AssetUploadError(
                        f"Could not upload '{path.name}' to release '{request.tag}': {exc}"
                    ) from exc
            assets.append(asset)
        return assets


def _open_asset(path: Path) -> BinaryIO:
    if path.is_dir():
        raise FileAccessError(f"Asset '{path}' is a directory")
    try:
        return path.open("rb")
    except OSError as exc:
        raise FileAccessError(f"Cannot open asset '{path}': {exc}") from exc
