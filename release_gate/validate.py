"""Group-version validations run around the manifest fixer.

Pre-fix (in memory, over the caller's version map):
- every `aws-smithy-` crate matches `aws-smithy-types`
- every `aws-sdk-` / `aws-` crate matches `aws-config`

Post-fix re-discovers the rewritten manifests and validates the package
graph, the same checks publishing runs.
"""
from __future__ import annotations

import logging
from pathlib import Path

from release_gate.categorize import DISTRIBUTION_ROOT, RUNTIME_ROOT, categorize
from release_gate.discovery import ManifestDiscoverer, PackageDiscoverer
from release_gate.fs import Fs, RealFs
from release_gate.models import (
    MissingAnchorError,
    PackageBatches,
    PackageCategory,
    SemVer,
    VersionMismatchError,
)
from release_gate.versions import (
    VersionMap,
    distribution_anchor,
    iter_sorted,
    runtime_anchor,
)

logger = logging.getLogger(__name__)


def validate_pre_fix(versions: VersionMap) -> None:
    """Raise on the first crate (in name order) that breaks its group's version.

    Raises:
        MissingAnchorError: `aws-smithy-types` is absent, or a distribution
            crate exists without `aws-config`.
        VersionMismatchError: a crate differs from its group's anchor.
    """
    logger.info("Pre-validating manifests...")
    expected_runtime = runtime_anchor(versions)
    if expected_runtime is None:
        raise MissingAnchorError(RUNTIME_ROOT)
    expected_distribution = distribution_anchor(versions)

    for name, version in iter_sorted(versions):
        category = categorize(name)
        if category is PackageCategory.RUNTIME_SHARED_COMPONENT:
            confirm_version(name, expected_runtime, version)
        elif category.is_distribution:
            if expected_distribution is None:
                raise MissingAnchorError(DISTRIBUTION_ROOT)
            confirm_version(name, expected_distribution, version)


def confirm_version(name: str, expected: SemVer, actual: SemVer) -> None:
    if expected != actual:
        raise VersionMismatchError(name, expected, actual)


async def validate_post_fix(location: Path,
                            discoverer: PackageDiscoverer | None = None,
                            fs: Fs | None = None) -> PackageBatches:
    """Re-discover and validate every package at location after fixing.

    Without a discoverer, a ManifestDiscoverer reads through fs (RealFs by
    default). Passing both discoverer and fs raises TypeError.

    Errors from the discoverer propagate unchanged. Callers must not run two
    post-fix validations over the same location concurrently.
    """
    if discoverer is not None and fs is not None:
        raise TypeError("validate_post_fix() takes either discoverer or fs, not both")
    logger.info("Post-validating manifests...")
    if discoverer is None:
        discoverer = ManifestDiscoverer(fs or RealFs())
    return await discoverer.discover_and_validate(Path(location))
