"""CLI entry point for publishing a release.

Usage:
    ghrelease                       # reads ./release.json
    ghrelease --settings other.json
    ghrelease --yolo                # skip the repository-identity check

Exits 0 only after every asset has been uploaded; any failure exits 1.
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys

from ghrelease.config import DEFAULT_SETTINGS_PATH, load_release_request, resolve_token
from ghrelease.errors import GhReleaseError
from ghrelease.guard import check_repository_identity
from ghrelease.hosts import build_host
from ghrelease.logging_config import get_logger, setup_logging
from ghrelease.publisher import ReleasePublisher

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ghrelease",
        description="Create (or replace) a GitHub release and upload its assets",
    )
    parser.add_argument(
        "--settings",
        default=DEFAULT_SETTINGS_PATH,
        help="path to settings file for this release (default: %(default)s)",
    )
    parser.add_argument(
        "--yolo",
        action="store_true",
        help="when yolo is set sanity checks are skipped",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    setup_logging()
    args = build_parser().parse_args(argv)

    try:
        run(settings=args.settings, yolo=args.yolo)
    except GhReleaseError as exc:
        logger.error("publish_failed", error=str(exc), error_type=type(exc).__name__)
        return 1
    return 0


def run(settings: str, yolo: bool) -> None:
    """Load settings, check preconditions and publish.

    Raises:
        GhReleaseError: On any configuration, guard or publish failure.
    """
    request = load_release_request(settings)
    token = resolve_token(os.environ)

    if yolo:
        logger.warning("sanity_checks_skipped", reason="yolo set")
    else:
        check_repository_identity(request.repo_name)

    logger.info("release_setup", **request.to_descriptor())
    host = build_host(request, token)
    result = asyncio.run(ReleasePublisher().publish(request, host))
    logger.info(
        "release_published",
        tag=result.release.tag,
        url=result.release.html_url,
        assets=[asset.name for asset in result.assets],
        replaced=result.replaced,
    )


if __name__ == "__main__":
    sys.exit(main())
