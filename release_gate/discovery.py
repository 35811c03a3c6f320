"""Package discovery: read every crate manifest under a location, validate the
package graph, and group publishable crates into dependency-ordered batches.

Batching is Kahn's algorithm applied level by level: a batch holds every
remaining crate whose local dependencies were all placed in earlier batches.
Crates inside one batch are sorted by name so the output is reproducible.
"""
from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from release_gate.categorize import categorize
from release_gate.config import GateConfig
from release_gate.fs import Fs
from release_gate.models import (
    DiscoveryError,
    Package,
    PackageBatches,
    PackageHandle,
    SemVer,
    VersionParseError,
)

logger = logging.getLogger(__name__)

_DEPENDENCY_TABLES = ("dependencies", "build-dependencies")


@runtime_checkable
class PackageDiscoverer(Protocol):
    """Capability that re-derives and validates the package graph at a location."""

    async def discover_and_validate(self, location: Path) -> PackageBatches:
        ...


# ---------------------------------------------------------------------------
# Manifest parsing
# ---------------------------------------------------------------------------

def _parse_version(raw: Any, what: str, path: Path, requirement: bool = False) -> SemVer:
    """Parse a package version, or with requirement=True an exact `=X.Y.Z` pin."""
    if not isinstance(raw, str):
        raise DiscoveryError("MANIFEST_PARSE", f"{what} must declare a version string", path)
    text = raw
    if requirement and text.startswith("="):
        text = text[1:].lstrip()
    try:
        return SemVer.parse(text)
    except VersionParseError as e:
        raise DiscoveryError("MANIFEST_PARSE", f"{what}: {e}", path) from e


def _dependency_tables(manifest: dict[str, Any]) -> list[dict[str, Any]]:
    tables = [manifest.get(key) for key in _DEPENDENCY_TABLES]
    targets = manifest.get("target")
    for target in (targets.values() if isinstance(targets, dict) else ()):
        if isinstance(target, dict):
            tables.extend(target.get(key) for key in _DEPENDENCY_TABLES)
    return [t for t in tables if isinstance(t, dict)]


def _local_dependencies(manifest: dict[str, Any], crate: str,
                        path: Path) -> tuple[PackageHandle, ...]:
    """Path dependencies of a crate. Dev-dependencies are ignored."""
    found: dict[str, PackageHandle] = {}
    for table in _dependency_tables(manifest):
        for key, spec in table.items():
            if not isinstance(spec, dict) or "path" not in spec:
                continue
            dep_name = spec.get("package", key)
            version = _parse_version(
                spec.get("version"), f"Local dependency '{dep_name}' of '{crate}'", path,
                requirement=True)
            handle = PackageHandle(dep_name, version)
            previous = found.get(dep_name)
            if previous is not None and previous != handle:
                raise DiscoveryError(
                    "VERSION_CONFLICT",
                    f"'{crate}' declares '{dep_name}' at both "
                    f"'{previous.version}' and '{handle.version}'",
                    path,
                )
            found[dep_name] = handle
    return tuple(found[name] for name in sorted(found))


def parse_manifest(text: str, path: Path) -> Package | None:
    """Parse one manifest. Returns None for manifests without a [package] table."""
    try:
        manifest = tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        raise DiscoveryError("MANIFEST_PARSE", f"Invalid TOML: {e}", path) from e

    package = manifest.get("package")
    if package is None:
        return None
    if not isinstance(package, dict):
        raise DiscoveryError("MANIFEST_PARSE", "[package] must be a table", path)

    name = package.get("name")
    if not isinstance(name, str) or not name.strip():
        raise DiscoveryError("MANIFEST_PARSE", "[package] is missing a name", path)
    version = _parse_version(package.get("version"), f"Crate '{name}'", path)

    publish = package.get("publish", True)
    if isinstance(publish, list):
        publish = bool(publish)
    elif not isinstance(publish, bool):
        raise DiscoveryError("MANIFEST_PARSE", f"Crate '{name}': publish must be a bool or list", path)

    return Package(
        handle=PackageHandle(name, version),
        category=categorize(name),
        manifest_path=path,
        local_dependencies=_local_dependencies(manifest, name, path),
        publish=publish,
    )


async def read_packages(fs: Fs, location: Path,
                        config: GateConfig | None = None) -> list[Package]:
    """Read and parse every manifest under location, sorted by crate name."""
    config = config or GateConfig()
    try:
        paths = await fs.find_files(location, config.manifest_name, config.exclude_dirs)
    except FileNotFoundError as e:
        raise DiscoveryError("MISSING_LOCATION", str(e), Path(location)) from e

    packages: dict[str, Package] = {}
    for path in paths:
        try:
            text = await fs.read_text(path)
        except (OSError, UnicodeDecodeError) as e:
            raise DiscoveryError("MANIFEST_PARSE", f"Cannot read manifest: {e}", path) from e
        package = parse_manifest(text, path)
        if package is None:
            logger.debug("Skipping %s: no [package] table", path)
            continue
        existing = packages.get(package.name)
        if existing is not None:
            raise DiscoveryError(
                "DUPLICATE_PACKAGE",
                f"Crate '{package.name}' is declared more than once",
                details=[str(existing.manifest_path), str(path)],
            )
        packages[package.name] = package

    logger.debug("Read %d package(s) under %s", len(packages), location)
    return [packages[name] for name in sorted(packages)]


# ---------------------------------------------------------------------------
# Graph validation and batching
# ---------------------------------------------------------------------------

def validate_packages(packages: list[Package]) -> None:
    """Every local dependency must resolve to a discovered crate at the same version.

    A published crate may not depend on a `publish = false` crate.
    """
    by_name = {p.name: p for p in packages}
    for package in packages:
        for dep in package.local_dependencies:
            target = by_name.get(dep.name)
            if target is None:
                raise DiscoveryError(
                    "UNRESOLVED_DEPENDENCY",
                    f"Crate '{package.name}' depends on '{dep.name}' which was not discovered",
                    package.manifest_path,
                )
            if target.version != dep.version:
                raise DiscoveryError(
                    "VERSION_CONFLICT",
                    f"Crate '{package.name}' depends on '{dep.name}' at '{dep.version}' "
                    f"but it is at '{target.version}'",
                    package.manifest_path,
                )
            if package.publish and not target.publish:
                raise DiscoveryError(
                    "UNRESOLVED_DEPENDENCY",
                    f"Crate '{package.name}' is published but depends on "
                    f"unpublished '{dep.name}'",
                    package.manifest_path,
                )


def _trace_cycle(stuck: dict[str, set[str]]) -> list[str]:
    """Follow dependencies through the stuck crates until one repeats."""
    current = min(stuck)
    path = [current]
    seen = {current}
    while True:
        nxt = min(stuck[current])
        path.append(nxt)
        if nxt in seen:
            return path[path.index(nxt):]
        seen.add(nxt)
        current = nxt


def batch_packages(packages: list[Package]) -> tuple[tuple[Package, ...], ...]:
    by_name = {p.name: p for p in packages}
    pending = {
        p.name: {d.name for d in p.local_dependencies if d.name in by_name}
        for p in packages
    }

    batches: list[tuple[Package, ...]] = []
    while pending:
        ready = sorted(name for name, deps in pending.items() if not deps)
        if not ready:
            cycle = _trace_cycle(pending)
            raise DiscoveryError(
                "DEPENDENCY_CYCLE",
                f"Dependency cycle detected: {' -> '.join(cycle)}",
                details=sorted(pending),
            )
        batches.append(tuple(by_name[name] for name in ready))
        for name in ready:
            del pending[name]
        for deps in pending.values():
            deps.difference_update(ready)
    return tuple(batches)


class ManifestDiscoverer:
    """PackageDiscoverer that reads crate manifests through an Fs."""

    def __init__(self, fs: Fs, config: GateConfig | None = None):
        self.fs = fs
        self.config = config or GateConfig()

    async def discover_and_validate(self, location: Path) -> PackageBatches:
        packages = await read_packages(self.fs, location, self.config)
        if not packages:
            raise DiscoveryError(
                "NO_PACKAGES",
                f"No '{self.config.manifest_name}' with a [package] table found",
                Path(location),
            )
        validate_packages(packages)

        publishable = [p for p in packages if p.publish]
        unpublished = tuple(p for p in packages if not p.publish)
        batches = batch_packages(publishable)
        logger.info("Discovered %d publishable crate(s) in %d batch(es), %d unpublished",
                    len(publishable), len(batches), len(unpublished))
        return PackageBatches(batches=batches, unpublished=unpublished)


async def discover_and_validate_package_batches(
    fs: Fs, location: Path, config: GateConfig | None = None,
) -> PackageBatches:
    return await ManifestDiscoverer(fs, config).discover_and_validate(location)
