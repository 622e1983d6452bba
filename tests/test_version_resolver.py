"""Tests for version spec parsing and maximum-satisfying resolution."""

import pytest

from versioning.models import ResolutionMode
from versioning.parser import parse_version_spec
from versioning.resolver import resolve_version, sort_versions


SUPPORTED = ("2.0.0", "2.1.5", "3.0.0")


class TestParseVersionSpec:
    """Mode detection for requested versions."""

    @pytest.mark.parametrize("raw", [None, "", "   "])
    def test_blank_is_unspecified(self, raw):
        assert parse_version_spec(raw) is None

    def test_latest_keyword(self):
        spec = parse_version_spec("Latest")
        assert spec.mode == ResolutionMode.LATEST

    @pytest.mark.parametrize("raw", ["2", "3.7", "^1.2.0", "~2.1", ">=8", "1.x", "1.0.0 - 2.0.0", ">=1 <3"])
    def test_ranges(self, raw):
        assert parse_version_spec(raw).mode == ResolutionMode.RANGE

    def test_full_triple_is_exact(self):
        spec = parse_version_spec("1.2.3")
        assert spec.mode == ResolutionMode.EXACT
        assert spec.include_prerelease is False

    def test_prerelease_flag(self):
        assert parse_version_spec("2.0.0-rc.1").include_prerelease is True


class TestResolveVersion:
    """Selection rules of resolve_version."""

    def test_partial_major_picks_highest_match(self):
        result = resolve_version("2", SUPPORTED, "2.0.0")
        assert result.ok
        assert result.resolved_version == "2.1.5"
        assert result.resolution_mode == ResolutionMode.RANGE

    def test_unspecified_uses_default_not_maximum(self):
        result = resolve_version(None, SUPPORTED, "2.0.0")
        assert result.resolved_version == "2.0.0"
        assert result.resolution_mode == ResolutionMode.DEFAULT

    def test_default_outside_supported_fails(self):
        result = resolve_version(None, SUPPORTED, "9.9.9")
        assert not result.ok
        assert "9.9.9" in result.error

    def test_exact_member_returned_as_is(self):
        result = resolve_version("2.0.0", SUPPORTED, "3.0.0")
        assert result.resolved_version == "2.0.0"

    def test_latest_returns_maximum(self):
        assert resolve_version("latest", SUPPORTED, "2.0.0").resolved_version == "3.0.0"

    def test_unsatisfiable_reports_supported(self):
        result = resolve_version("4", SUPPORTED, "2.0.0")
        assert not result.ok
        assert result.resolved_version is None
        assert result.supported == SUPPORTED
        assert result.requested == "4"

    def test_garbage_spec_fails(self):
        result = resolve_version("not-a-version!", SUPPORTED, "2.0.0")
        assert not result.ok

    def test_ordering_is_semantic(self):
        result = resolve_version(">=9", ("9.0.0", "10.0.0", "8.0.0"), "9.0.0")
        assert result.resolved_version == "10.0.0"

    def test_partial_supported_versions_returned_verbatim(self):
        result = resolve_version("3", ("2.7", "3.6", "3.7"), "3.6")
        assert result.resolved_version == "3.7"

    def test_npm_range_operators(self):
        supported = ("12.22.12", "14.21.3", "16.20.2")
        assert resolve_version("^14.0.0", supported, "16.20.2").resolved_version == "14.21.3"
        assert resolve_version("<16", supported, "16.20.2").resolved_version == "14.21.3"
        assert resolve_version("~12.22", supported, "16.20.2").resolved_version == "12.22.12"

    def test_prerelease_skipped_unless_requested(self):
        supported = ("1.0.0", "1.1.0-beta.1")
        assert resolve_version("1", supported, "1.0.0").resolved_version == "1.0.0"
        assert resolve_version("1.1.0-beta.1", supported, "1.0.0").resolved_version == "1.1.0-beta.1"

    def test_normalizer_applied_before_comparison(self):
        result = resolve_version("v2", SUPPORTED, "2.0.0", normalize=lambda v: v.lstrip("v"))
        assert result.resolved_version == "2.1.5"
        assert result.requested == "v2"


def test_sort_versions_is_semantic():
    assert sort_versions(["10.0.0", "9.1", "9.0.0"]) == ["9.0.0", "9.1", "10.0.0"]
    assert sort_versions(["1.0.0", "2.0.0"], reverse=True) == ["2.0.0", "1.0.0"]
