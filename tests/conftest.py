"""Shared fixtures for release gate tests."""
from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from release_gate.models import SemVer
from release_gate.versions import VersionMap


def crate_manifest(name: str, version: str, deps: dict[str, str] | None = None,
                   publish: bool = True, dep_paths: dict[str, str] | None = None) -> str:
    """Render a minimal Cargo.toml. deps maps local crate name -> version."""
    lines = ["[package]", f'name = "{name}"', f'version = "{version}"']
    if not publish:
        lines.append("publish = false")
    lines.append("")
    lines.append("[dependencies]")
    for dep, dep_version in (deps or {}).items():
        path = (dep_paths or {}).get(dep, f"../{dep}")
        lines.append(f'{dep} = {{ path = "{path}", version = "{dep_version}" }}')
    return "\n".join(lines) + "\n"


@pytest.fixture
def write_crate(tmp_path: Path) -> Callable[..., Path]:
    """Write <tmp_path>/<name>/Cargo.toml and return the manifest path."""

    def _write(name: str, version: str, deps: dict[str, str] | None = None,
               publish: bool = True) -> Path:
        crate_dir = tmp_path / name
        crate_dir.mkdir(parents=True, exist_ok=True)
        manifest = crate_dir / "Cargo.toml"
        manifest.write_text(crate_manifest(name, version, deps, publish))
        return manifest

    return _write


@pytest.fixture
def consistent_tree(tmp_path: Path, write_crate) -> Path:
    """A release tree where every group is at its anchor version."""
    write_crate("aws-smithy-types", "0.35.1")
    write_crate("aws-smithy-http", "0.35.1", {"aws-smithy-types": "0.35.1"})
    write_crate("aws-types", "0.5.1", {"aws-smithy-types": "0.35.1"})
    write_crate("aws-config", "0.5.1", {"aws-types": "0.5.1", "aws-smithy-http": "0.35.1"})
    write_crate("aws-sdk-s3", "0.5.1", {"aws-config": "0.5.1", "aws-types": "0.5.1"})
    write_crate("test-util", "0.1.0", publish=False)
    return tmp_path


@pytest.fixture
def make_versions() -> Callable[..., VersionMap]:
    """Build a version map from (name, version) string pairs."""

    def _make(*pairs: tuple[str, str]) -> VersionMap:
        return {name: SemVer.parse(version) for name, version in pairs}

    return _make
