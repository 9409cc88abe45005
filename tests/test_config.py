"""Tests for descriptor loading and token resolution.

Run with: pytest tests/test_config.py -v
"""

from __future__ import annotations

from pathlib import Path

import pytest

from ghrelease.config import load_release_request, resolve_token
from ghrelease.errors import ConfigurationError
from ghrelease.schemas import ReleaseRequest

TESTDATA = Path(__file__).parent / "testdata"


class TestLoadReleaseRequest:
    def test_reads_release_json(self) -> None:
        request = load_release_request(TESTDATA / "release.json")

        assert request == ReleaseRequest(
            host_url="https://github.com",
            owner="zerogvt",
            repo_name="ghrelease",
            asset_paths=["bin/ghrelease_lin", "bin/ghrelease_osx"],
            tag="latest",
            description="description",
        )

    def test_reads_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "release.yaml"
        path.write_text(
            "github_host: https://git.example.com\n"
            "owner: acme\n"
            "repo: tool\n"
            "files:\n"
            "  - dist/tool.tar.gz\n"
            "tag: v1.2.0\n",
            encoding="utf-8",
        )

        request = load_release_request(path)

        assert request.host_url == "https://git.example.com"
        assert request.asset_paths == ("dist/tool.tar.gz",)
        assert request.description == ""

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="Cannot read"):
            load_release_request(tmp_path / "nope.json")

    def test_malformed_json(self, tmp_path: Path) -> None:
        path = tmp_path / "release.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(ConfigurationError, match="Invalid release settings"):
            load_release_request(path)

    def test_not_a_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "release.json"
        path.write_text('["a", "b"]', encoding="utf-8")

        with pytest.raises(ConfigurationError, match="must be a mapping"):
            load_release_request(path)

    def test_validation_failure(self, tmp_path: Path) -> None:
        path = tmp_path / "release.json"
        path.write_text('{"github_host": "https://github.com", "owner": "o"}', encoding="utf-8")

        with pytest.raises(ConfigurationError, match="tag"):
            load_release_request(path)

    def test_misspelled_files_key_is_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "release.json"
        path.write_text(
            '{"github_host": "https://github.com", "owner": "o", "repo": "r", '
            '"file": ["bin/a"], "tag": "latest", "desc": ""}',
            encoding="utf-8",
        )

        with pytest.raises(ConfigurationError, match="file"):
            load_release_request(path)

    def test_invalid_host_url_is_a_configuration_error(self, tmp_path: Path) -> None:
        path = tmp_path / "release.json"
        path.write_text(
            '{"github_host": "https://exa mple.com", "owner": "o", "repo": "r", '
            '"files": ["bin/a"], "tag": "latest"}',
            encoding="utf-8",
        )

        with pytest.raises(ConfigurationError, match="github_host"):
            load_release_request(path)


class TestResolveToken:
    def test_reads_github_token(self) -> None:
        assert resolve_token({"GITHUB_TOKEN": "abc"}) == "abc"

    @pytest.mark.parametrize("environ", [{}, {"GITHUB_TOKEN": ""}, {"GITHUB_TOKEN": "  "}])
    def test_missing_token(self, environ: dict[str, str]) -> None:
        with pytest.raises(ConfigurationError, match="GITHUB_TOKEN"):
            resolve_token(environ)
