"""Tests for the release-gate CLI."""
from __future__ import annotations

import json
from pathlib import Path

import pytest

from release_gate.main import main


def _run(argv: list[str], capsys) -> tuple[int, dict]:
    with pytest.raises(SystemExit) as exc_info:
        main(argv)
    out = capsys.readouterr().out
    return exc_info.value.code, json.loads(out) if out.strip().startswith("{") else {}


class TestVersionsCommand:

    def test_prints_versions(self, consistent_tree: Path, capsys) -> None:
        code, out = _run(["versions", "--location", str(consistent_tree)], capsys)
        assert code == 0
        assert out["status"] == "OK"
        assert out["versions"]["aws-config"] == "0.5.1"
        assert list(out["versions"]) == sorted(out["versions"])


class TestPreCommand:

    def test_pass(self, consistent_tree: Path, capsys) -> None:
        code, out = _run(["pre", "--location", str(consistent_tree)], capsys)
        assert code == 0
        assert out == {"status": "PASS", "phase": "pre", "packages": 6}

    def test_mismatch(self, consistent_tree: Path, write_crate, capsys) -> None:
        write_crate("aws-sdk-s3", "0.5.0", {"aws-config": "0.5.1", "aws-types": "0.5.1"})
        code, out = _run(["pre", "--location", str(consistent_tree)], capsys)
        assert code == 1
        assert out["kind"] == "VersionMismatchError"
        assert out["error"] == "Crate named 'aws-sdk-s3' should be at version '0.5.1' but is at '0.5.0'"

    def test_missing_runtime_root(self, tmp_path: Path, write_crate, capsys) -> None:
        write_crate("aws-config", "0.5.1")
        code, out = _run(["pre", "--location", str(tmp_path)], capsys)
        assert code == 1
        assert out["kind"] == "MissingAnchorError"


class TestPostCommand:

    def test_pass(self, consistent_tree: Path, capsys) -> None:
        code, out = _run(["post", "--location", str(consistent_tree)], capsys)
        assert code == 0
        assert out["phase"] == "post"
        assert out["batches"][0] == ["aws-smithy-types-0.35.1"]

    def test_discovery_failure(self, tmp_path: Path, write_crate, capsys) -> None:
        write_crate("a", "1.0.0", {"b": "1.0.0"})
        code, out = _run(["post", "--location", str(tmp_path)], capsys)
        assert code == 1
        assert out["kind"] == "DiscoveryError"
        assert out["code"] == "UNRESOLVED_DEPENDENCY"


class TestCheckCommand:

    def test_pass(self, consistent_tree: Path, capsys) -> None:
        code, out = _run(["check", "--location", str(consistent_tree)], capsys)
        assert code == 0
        assert out["pre"]["status"] == "PASS"
        assert out["post"]["package_count"] == 5

    def test_stops_at_pre(self, tmp_path: Path, write_crate, capsys) -> None:
        write_crate("aws-smithy-types", "0.35.1")
        write_crate("aws-smithy-http", "0.35.0", {"aws-smithy-types": "0.35.1"})
        code, out = _run(["check", "--location", str(tmp_path)], capsys)
        assert code == 1
        assert out["kind"] == "VersionMismatchError"


class TestCliOptions:

    def test_no_command(self, capsys) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 2

    def test_config_file(self, tmp_path: Path, capsys) -> None:
        crate = tmp_path / "tree" / "aws-smithy-types"
        crate.mkdir(parents=True)
        (crate / "Crate.toml").write_text('[package]\nname = "aws-smithy-types"\nversion = "1.0.0"\n')
        config = tmp_path / "gate.yaml"
        config.write_text("manifest_name: Crate.toml\n")
        code, out = _run(["--config", str(config), "pre", "--location", str(tmp_path / "tree")], capsys)
        assert code == 0
        assert out["packages"] == 1

    def test_bad_config(self, tmp_path: Path, consistent_tree: Path, capsys) -> None:
        config = tmp_path / "gate.yaml"
        config.write_text("bogus: true\n")
        code, out = _run(["--config", str(config), "pre", "--location", str(consistent_tree)], capsys)
        assert code == 2
        assert out["kind"] == "ConfigError"
