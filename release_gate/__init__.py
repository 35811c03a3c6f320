"""Group-version gate for multi-crate releases."""

from release_gate.categorize import CATEGORY_PREFIXES, DISTRIBUTION_ROOT, RUNTIME_ROOT, categorize
from release_gate.discovery import ManifestDiscoverer, PackageDiscoverer, discover_and_validate_package_batches
from release_gate.fs import Fs, MemoryFs, RealFs
from release_gate.models import (
    ConfigError,
    DiscoveryError,
    MissingAnchorError,
    Package,
    PackageBatches,
    PackageCategory,
    PackageHandle,
    ReleaseGateError,
    SemVer,
    ValidationError,
    VersionMismatchError,
    VersionParseError,
)
from release_gate.validate import validate_post_fix, validate_pre_fix
from release_gate.versions import VersionMap, build_version_map, load_version_map

__version__ = "0.1.0"

__all__ = [
    "CATEGORY_PREFIXES",
    "DISTRIBUTION_ROOT",
    "RUNTIME_ROOT",
    "categorize",
    "ManifestDiscoverer",
    "PackageDiscoverer",
    "discover_and_validate_package_batches",
    "Fs",
    "MemoryFs",
    "RealFs",
    "ConfigError",
    "DiscoveryError",
    "MissingAnchorError",
    "Package",
    "PackageBatches",
    "PackageCategory",
    "PackageHandle",
    "ReleaseGateError",
    "SemVer",
    "ValidationError",
    "VersionMismatchError",
    "VersionParseError",
    "validate_post_fix",
    "validate_pre_fix",
    "VersionMap",
    "build_version_map",
    "load_version_map",
]
