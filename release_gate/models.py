"""Data models and error taxonomy for the release gate."""
from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class ReleaseGateError(Exception):
    """Base class for every error raised by release_gate."""


class ConfigError(ReleaseGateError):
    """Raised when the gate configuration file is invalid."""


class VersionParseError(ReleaseGateError, ValueError):
    """Raised when a version string is not valid SemVer 2.0.0."""


class ValidationError(ReleaseGateError):
    """Raised when a validation phase fails."""


class MissingAnchorError(ValidationError):
    """A required root package is absent from the version map."""

    def __init__(self, package: str) -> None:
        self.package = package
        super().__init__(f"'{package}' crate missing")


class VersionMismatchError(ValidationError):
    """A package is not at its group's anchor version."""

    def __init__(self, name: str, expected: SemVer, actual: SemVer) -> None:
        self.name = name
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Crate named '{name}' should be at version '{expected}' "
            f"but is at '{actual}'"
        )


class DiscoveryError(ValidationError):
    """Package discovery found a structural problem in the manifests.

    code is one of MANIFEST_PARSE, DUPLICATE_PACKAGE, UNRESOLVED_DEPENDENCY,
    VERSION_CONFLICT, DEPENDENCY_CYCLE, NO_PACKAGES, MISSING_LOCATION.
    """

    def __init__(self, code: str, message: str, path: Path | None = None,
                 details: list[str] | None = None) -> None:
        self.code = code
        self.message = message
        self.path = path
        self.details = list(details or [])
        super().__init__(message)

    def __str__(self) -> str:
        if self.path is not None:
            return f"{self.message} ({self.path})"
        return self.message


# ---------------------------------------------------------------------------
# Package category
# ---------------------------------------------------------------------------

class PackageCategory(enum.Enum):
    RUNTIME_SHARED_COMPONENT = "runtime_shared_component"
    DISTRIBUTION_SURFACE = "distribution_surface"
    OTHER = "other"

    @property
    def is_distribution(self) -> bool:
        return self is PackageCategory.DISTRIBUTION_SURFACE


# ---------------------------------------------------------------------------
# Semantic versions
# ---------------------------------------------------------------------------

# SemVer 2.0.0 grammar (semver.org), anchored.
_SEMVER_RE = re.compile(
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-((?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)"
    r"(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+([0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$"
)


@dataclass(frozen=True)
class SemVer:
    """A parsed semantic version. Equality is literal over every component."""
    major: int
    minor: int
    patch: int
    pre: str = ""
    build: str = ""

    @staticmethod
    def parse(text: str) -> SemVer:
        if not isinstance(text, str):
            raise VersionParseError(f"invalid semver {text!r}: not a string")
        m = _SEMVER_RE.fullmatch(text)
        if not m:
            raise VersionParseError(f"invalid semver '{text}'")
        major, minor, patch, pre, build = m.groups()
        return SemVer(int(major), int(minor), int(patch), pre or "", build or "")

    def __str__(self) -> str:
        s = f"{self.major}.{self.minor}.{self.patch}"
        if self.pre:
            s += f"-{self.pre}"
        if self.build:
            s += f"+{self.build}"
        return s


# ---------------------------------------------------------------------------
# Discovered packages
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PackageHandle:
    """A (name, version) pair identifying one crate release."""
    name: str
    version: SemVer

    def __str__(self) -> str:
        return f"{self.name}-{self.version}"

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "version": str(self.version)}


@dataclass(frozen=True)
class Package:
    """One crate parsed from its manifest."""
    handle: PackageHandle
    category: PackageCategory
    manifest_path: Path
    local_dependencies: tuple[PackageHandle, ...] = ()
    publish: bool = True

    @property
    def name(self) -> str:
        return self.handle.name

    @property
    def version(self) -> SemVer:
        return self.handle.version

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "version": str(self.version),
            "category": self.category.value,
            "manifest_path": str(self.manifest_path),
            "local_dependencies": [d.to_dict() for d in self.local_dependencies],
            "publish": self.publish,
        }


@dataclass(frozen=True)
class PackageBatches:
    """Result of a successful discovery: publishable packages in dependency order.

    Every package in batch N depends only on packages in batches < N.
    """
    batches: tuple[tuple[Package, ...], ...] = ()
    unpublished: tuple[Package, ...] = ()

    @property
    def package_count(self) -> int:
        return sum(len(b) for b in self.batches)

    def all_packages(self) -> list[Package]:
        found = [p for b in self.batches for p in b]
        found.extend(self.unpublished)
        return sorted(found, key=lambda p: p.name)

    def to_dict(self) -> dict[str, Any]:
        return {
            "batches": [[str(p.handle) for p in b] for b in self.batches],
            "unpublished": [str(p.handle) for p in self.unpublished],
            "package_count": self.package_count,
        }
