"""Release descriptor loading and credential resolution.

The descriptor is a small JSON document (release.json by default):

    {
        "github_host": "https://github.com",
        "owner": "zerogvt",
        "repo": "ghrelease",
        "files": ["bin/ghrelease_lin", "bin/ghrelease_osx"],
        "tag": "latest",
        "desc": "description"
    }

Descriptors ending in .yaml or .yml are read with PyYAML instead.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path

import yaml
from pydantic import ValidationError

from ghrelease.errors import ConfigurationError
from ghrelease.schemas import ReleaseRequest

DEFAULT_SETTINGS_PATH = "release.json"
TOKEN_ENV_VAR = "GITHUB_TOKEN"
YAML_SUFFIXES = {".yaml", ".yml"}


def load_release_request(path: str | Path = DEFAULT_SETTINGS_PATH) -> ReleaseRequest:
    """Load and validate a release descriptor.

    Args:
        path: Path to the JSON (or YAML) descriptor.

    Returns:
        A validated, immutable ReleaseRequest.

    Raises:
        ConfigurationError: If the file is missing, unreadable, not valid
            JSON/YAML, or fails validation.
    """
    settings_path = Path(path)
    try:
        text = settings_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Cannot read release settings {path}: {exc}") from exc

    try:
        if settings_path.suffix.lower() in YAML_SUFFIXES:
            raw = yaml.safe_load(text) or {}
        else:
            raw = json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Invalid release settings in {path}: {exc}") from exc

    if not isinstance(raw, dict):
        raise ConfigurationError(
            f"Release settings in {path} must be a mapping, got {type(raw).__name__}"
        )

    try:
        return ReleaseRequest.model_validate(raw)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid release settings in {path}: {exc}") from exc


def resolve_token(environ: Mapping[str, str]) -> str:
    """Read the bearer token from an environment mapping.

    Raises:
        ConfigurationError: If GITHUB_TOKEN is unset or blank.
    """
    token = environ.get(TOKEN_ENV_VAR, "").strip()
    if not token:
        raise ConfigurationError(f"No env var {TOKEN_ENV_VAR}")
    return token
