"""Repository-identity sanity check run before publishing."""

from __future__ import annotations

from pathlib import Path

from ghrelease.errors import GuardViolation
from ghrelease.logging_config import get_logger

logger = get_logger(__name__)


def check_repository_identity(repo_name: str, cwd: str | Path | None = None) -> None:
    """Refuse to publish when the current directory is not the target repo.

    The last path segment of cwd must equal repo_name. This catches
    releasing from the wrong checkout when several live on one machine.

    Raises:
        GuardViolation: On mismatch.
    """
    here = Path(cwd) if cwd is not None else Path.cwd()
    have = here.resolve().name
    logger.debug("guard_check", cwd=str(here), have=have, want=repo_name)
    if have != repo_name:
        raise GuardViolation(
            f"You are in repo '{have}' but trying to release to repo '{repo_name}'"
        )
