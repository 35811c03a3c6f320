"""Tests for crate categorization."""
from __future__ import annotations

import pytest

from release_gate.categorize import CATEGORY_PREFIXES, categorize
from release_gate.models import PackageCategory


class TestCategorize:

    @pytest.mark.parametrize("name", [
        "aws-smithy-types", "aws-smithy-http", "aws-smithy-client", "aws-smithy-",
    ])
    def test_runtime_shared(self, name: str) -> None:
        assert categorize(name) is PackageCategory.RUNTIME_SHARED_COMPONENT

    @pytest.mark.parametrize("name", [
        "aws-config", "aws-types", "aws-sdk-s3", "aws-sdk-dynamodb", "aws-sigv4", "aws-",
    ])
    def test_distribution_surface(self, name: str) -> None:
        assert categorize(name) is PackageCategory.DISTRIBUTION_SURFACE

    @pytest.mark.parametrize("name", [
        "", "tokio", "smithy-json", "aws", "AWS-config", "inlineable", "my-aws-smithy-types",
    ])
    def test_other(self, name: str) -> None:
        assert categorize(name) is PackageCategory.OTHER

    def test_longest_prefix_wins(self) -> None:
        # "aws-smithy-" and "aws-" both match; the runtime rule is more specific.
        assert "aws-smithy-http".startswith("aws-")
        assert categorize("aws-smithy-http") is PackageCategory.RUNTIME_SHARED_COMPONENT

    def test_every_prefix_maps_to_its_category(self) -> None:
        for prefix, category in CATEGORY_PREFIXES:
            assert categorize(prefix + "x") is category

    def test_is_distribution(self) -> None:
        assert PackageCategory.DISTRIBUTION_SURFACE.is_distribution
        assert not PackageCategory.RUNTIME_SHARED_COMPONENT.is_distribution
        assert not PackageCategory.OTHER.is_distribution
