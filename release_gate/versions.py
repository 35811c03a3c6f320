"""Version map: crate name -> declared version."""
from __future__ import annotations

from pathlib import Path
from typing import Iterable, Iterator

from release_gate.categorize import DISTRIBUTION_ROOT, RUNTIME_ROOT
from release_gate.config import GateConfig
from release_gate.discovery import read_packages
from release_gate.fs import Fs, RealFs
from release_gate.models import DiscoveryError, SemVer

VersionMap = dict[str, SemVer]


def build_version_map(pairs: Iterable[tuple[str, SemVer | str]]) -> VersionMap:
    """Build a name-sorted version map. String versions are parsed."""
    versions: VersionMap = {}
    for name, version in pairs:
        if not isinstance(version, SemVer):
            version = SemVer.parse(version)
        previous = versions.get(name)
        if previous is not None and previous != version:
            raise DiscoveryError(
                "DUPLICATE_PACKAGE",
                f"Crate '{name}' declared at both '{previous}' and '{version}'",
            )
        versions[name] = version
    return {name: versions[name] for name in sorted(versions)}


def iter_sorted(versions: VersionMap) -> Iterator[tuple[str, SemVer]]:
    for name in sorted(versions):
        yield name, versions[name]


def runtime_anchor(versions: VersionMap) -> SemVer | None:
    return versions.get(RUNTIME_ROOT)


def distribution_anchor(versions: VersionMap) -> SemVer | None:
    return versions.get(DISTRIBUTION_ROOT)


async def load_version_map(location: Path, fs: Fs | None = None,
                           config: GateConfig | None = None) -> VersionMap:
    """Read every crate manifest under location and collect its version."""
    packages = await read_packages(fs or RealFs(), location, config)
    return build_version_map((p.name, p.version) for p in packages)
