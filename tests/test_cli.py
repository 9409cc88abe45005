"""Tests for the CLI entry point.

The GitHub binding is swapped for InMemoryHost, so these tests run the
whole flow (settings, token, guard, publish) without network access.

Run with: pytest tests/test_cli.py -v
"""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from ghrelease.cli import build_parser, main
from ghrelease.errors import HostError
from ghrelease.hosts import InMemoryHost
from ghrelease.schemas import RemoteRelease

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def checkout(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """A working directory named after the repo, with a descriptor and two assets."""
    repo_dir = tmp_path / "ghrelease"
    (repo_dir / "bin").mkdir(parents=True)
    (repo_dir / "bin" / "ghrelease_lin").write_bytes(b"lin")
    (repo_dir / "bin" / "ghrelease_osx").write_bytes(b"osx")
    (repo_dir / "release.json").write_text(
        json.dumps(
            {
                "github_host": "https://github.com",
                "owner": "zerogvt",
                "repo": "ghrelease",
                "files": ["bin/ghrelease_lin", "bin/ghrelease_osx"],
                "tag": "latest",
                "desc": "description",
            }
        ),
        encoding="utf-8",
    )
    monkeypatch.chdir(repo_dir)
    monkeypatch.setenv("GITHUB_TOKEN", "abc")
    return repo_dir


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


class TestParser:
    def test_defaults(self) -> None:
        args = build_parser().parse_args([])
        assert args.settings == "release.json"
        assert args.yolo is False

    def test_with_args(self) -> None:
        args = build_parser().parse_args(["--yolo", "--settings", "another.json"])
        assert args.yolo is True
        assert args.settings == "another.json"


# ---------------------------------------------------------------------------
# Full runs
# ---------------------------------------------------------------------------


class TestMain:
    def test_publishes_and_exits_zero(self, checkout: Path) -> None:
        host = InMemoryHost(existing=[RemoteRelease(id=123, tag="latest")], next_id=456)

        with patch("ghrelease.cli.build_host", return_value=host) as factory:
            assert main([]) == 0

        request, token = factory.call_args.args
        assert request.repo_name == "ghrelease"
        assert token == "abc"
        assert host.calls_to("delete_release") == [{"release_id": 123}]
        assert [a.name for a in host.assets[456]] == ["ghrelease_lin", "ghrelease_osx"]

    def test_missing_token_exits_before_any_remote_call(
        self, checkout: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("GITHUB_TOKEN")

        with patch("ghrelease.cli.build_host") as factory:
            assert main([]) == 1

        factory.assert_not_called()

    def test_missing_settings_file(self, checkout: Path) -> None:
        with patch("ghrelease.cli.build_host") as factory:
            assert main(["--settings", "nope.json"]) == 1

        factory.assert_not_called()

    def test_guard_mismatch(self, checkout: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        other = checkout.parent / "other-repo"
        other.mkdir()
        monkeypatch.chdir(other)

        with patch("ghrelease.cli.build_host") as factory:
            assert main(["--settings", str(checkout / "release.json")]) == 1

        factory.assert_not_called()

    def test_yolo_skips_guard(self, checkout: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        other = checkout.parent / "other-repo"
        other.mkdir()
        monkeypatch.chdir(other)
        descriptor = json.loads((checkout / "release.json").read_text(encoding="utf-8"))
        descriptor["files"] = [str(checkout / "bin" / "ghrelease_lin")]
        settings = other / "release.json"
        settings.write_text(json.dumps(descriptor), encoding="utf-8")
        host = InMemoryHost()

        with patch("ghrelease.cli.build_host", return_value=host):
            assert main(["--yolo"]) == 0

        assert len(host.calls_to("upload_asset")) == 1

    def test_publish_failure_exits_non_zero(self, checkout: Path) -> None:
        host = InMemoryHost(
            failures={"find_release_by_tag": HostError("Bad credentials", status_code=401)}
        )

        with patch("ghrelease.cli.build_host", return_value=host):
            assert main([]) == 1

        assert host.operations() == ["find_release_by_tag"]
