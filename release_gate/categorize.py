"""Crate name categorization by prefix."""
from __future__ import annotations

from release_gate.models import PackageCategory

RUNTIME_ROOT = "aws-smithy-types"
DISTRIBUTION_ROOT = "aws-config"

# Fixed table. When several prefixes match, the longest one wins, so
# "aws-smithy-" takes precedence over "aws-".
CATEGORY_PREFIXES: tuple[tuple[str, PackageCategory], ...] = (
    ("aws-smithy-", PackageCategory.RUNTIME_SHARED_COMPONENT),
    ("aws-sdk-", PackageCategory.DISTRIBUTION_SURFACE),
    ("aws-", PackageCategory.DISTRIBUTION_SURFACE),
)

_BY_LENGTH = sorted(CATEGORY_PREFIXES, key=lambda entry: len(entry[0]), reverse=True)


def categorize(name: str) -> PackageCategory:
    """Return the category for a crate name. Never fails."""
    for prefix, category in _BY_LENGTH:
        if name.startswith(prefix):
            return category
    return PackageCategory.OTHER
