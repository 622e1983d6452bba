"""Tests for the compatible-platform resolver."""

import pytest

from generation.compatibility import CompatiblePlatformResolver, tool_versions
from generation.errors import DetectionParseError, ErrorKind

from fakes import FakePlatform


def _resolver(*platforms):
    return CompatiblePlatformResolver(list(platforms))


class TestExplicitPlatform:
    """Explicitly requested platform names and versions."""

    def test_unknown_platform_lists_enabled_platforms(self, make_context):
        resolver = _resolver(
            FakePlatform("test1"),
            FakePlatform("off", enabled=False),
            FakePlatform("test2"),
        )
        resolution = resolver.resolve(make_context(platform="nope"))
        assert not resolution.ok
        assert resolution.error.kind == ErrorKind.UNSUPPORTED_PLATFORM
        assert resolution.error.message == (
            "'nope' platform is not supported. Supported platforms are: test1, test2"
        )
        assert resolution.error.supported_platforms == ("test1", "test2")

    def test_disabled_platform_is_unsupported(self, make_context):
        resolver = _resolver(FakePlatform("test1"), FakePlatform("off", enabled=False))
        resolution = resolver.resolve(make_context(platform="off"))
        assert resolution.error.kind == ErrorKind.UNSUPPORTED_PLATFORM

    def test_name_match_is_case_insensitive(self, make_context):
        resolver = _resolver(FakePlatform("test"))
        resolution = resolver.resolve(make_context(platform="TEST", platform_version="1.0.0"))
        assert resolution.ok
        assert resolution.main.name == "test"

    def test_unsupported_version(self, make_context):
        resolver = _resolver(FakePlatform("test", supported_versions=("1.0.0",)))
        resolution = resolver.resolve(make_context(platform="test", platform_version="2.0.0"))
        assert resolution.error.kind == ErrorKind.UNSUPPORTED_VERSION
        assert resolution.error.message == (
            "Platform 'test' version '2.0.0' is unsupported. Supported versions: 1.0.0"
        )
        assert resolution.error.requested_version == "2.0.0"
        assert resolution.error.supported_versions == ("1.0.0",)

    def test_explicit_version_skips_detection(self, make_context):
        platform = FakePlatform("test", detected_version="1.0.0")
        resolution = _resolver(platform).resolve(make_context(platform="test", platform_version="1.0.0"))
        assert resolution.ok
        assert platform.detect_calls == 0

    def test_explicit_name_without_version_detects_once(self, make_context):
        platform = FakePlatform(
            "test", supported_versions=("1.0.0", "2.0.0"), default_version="1.0.0", detected_version="2.0.0"
        )
        resolution = _resolver(platform).resolve(make_context(platform="test"))
        assert resolution.main.version == "2.0.0"
        assert platform.detect_calls == 1

    def test_explicit_name_not_detected_uses_default(self, make_context):
        platform = FakePlatform("test", detects=False, default_version="1.0.0")
        resolution = _resolver(platform).resolve(make_context(platform="test"))
        assert resolution.ok
        assert resolution.main.version == "1.0.0"
        assert resolution.main.detection is None

    def test_first_registered_name_wins(self, make_context):
        first = FakePlatform("dup", supported_versions=("1.0.0",))
        second = FakePlatform("dup", supported_versions=("2.0.0",), default_version="2.0.0")
        resolution = _resolver(first, second).resolve(make_context(platform="dup"))
        assert resolution.main.platform is first


class TestDetection:
    """Detection-driven resolution."""

    def test_nothing_detected(self, make_context):
        resolver = _resolver(FakePlatform("a", detects=False), FakePlatform("b", detects=False))
        resolution = resolver.resolve(make_context())
        assert resolution.error.kind == ErrorKind.UNABLE_TO_DETECT_PLATFORM

    def test_first_detecting_platform_is_main(self, make_context):
        resolver = _resolver(
            FakePlatform("a", detects=False),
            FakePlatform("b"),
            FakePlatform("c"),
        )
        resolution = resolver.resolve(make_context())
        assert [rp.name for rp in resolution.platforms] == ["b"]

    def test_disabled_platforms_not_detected(self, make_context):
        disabled = FakePlatform("a", enabled=False)
        resolution = _resolver(disabled, FakePlatform("b")).resolve(make_context())
        assert resolution.main.name == "b"
        assert disabled.detect_calls == 0

    def test_default_version_when_detector_has_none(self, make_context):
        platform = FakePlatform("a", supported_versions=("1.0.0", "2.0.0"), default_version="1.0.0")
        resolution = _resolver(platform).resolve(make_context())
        assert resolution.main.version == "1.0.0"

    def test_detected_range_resolved(self, make_context):
        platform = FakePlatform(
            "a", supported_versions=("2.0.0", "2.1.5", "3.0.0"), default_version="3.0.0", detected_version="2"
        )
        resolution = _resolver(platform).resolve(make_context())
        assert resolution.main.version == "2.1.5"

    def test_version_override_beats_detected(self, make_context):
        platform = FakePlatform(
            "a", supported_versions=("1.0.0", "2.0.0"), default_version="1.0.0", detected_version="1.0.0"
        )
        resolution = _resolver(platform).resolve(make_context(version_overrides={"a": "2.0.0"}))
        assert resolution.main.version == "2.0.0"

    def test_parse_failure_is_reported(self, make_context):
        error = DetectionParseError("a", "a.json", "bad json")
        resolution = _resolver(FakePlatform("a", detect_error=error)).resolve(make_context())
        assert resolution.error.kind == ErrorKind.DETECTION_PARSE_FAILURE
        assert "a.json" in resolution.error.message

    def test_detector_exceptions_other_than_parse_errors_propagate(self, make_context):
        resolver = _resolver(FakePlatform("a", detect_error=RuntimeError("boom")))
        with pytest.raises(RuntimeError):
            resolver.resolve(make_context())


class TestMultiPlatform:
    """Multi-platform resolution."""

    def test_single_platform_when_disabled(self, make_context):
        resolver = _resolver(FakePlatform("a"), FakePlatform("b"))
        resolution = resolver.resolve(make_context(multi_platform_enabled=False))
        assert len(resolution.platforms) == 1

    def test_all_detected_platforms_in_registry_order(self, make_context):
        resolver = _resolver(FakePlatform("a"), FakePlatform("b"), FakePlatform("c"))
        resolution = resolver.resolve(make_context(multi_platform_enabled=True))
        assert [rp.name for rp in resolution.platforms] == ["a", "b", "c"]

    def test_explicit_main_first_then_registry_order(self, make_context):
        resolver = _resolver(FakePlatform("a"), FakePlatform("b"), FakePlatform("c"))
        resolution = resolver.resolve(
            make_context(platform="c", platform_version="1.0.0", multi_platform_enabled=True)
        )
        assert [rp.name for rp in resolution.platforms] == ["c", "a", "b"]

    def test_opted_out_platform_excluded(self, make_context):
        resolver = _resolver(FakePlatform("a"), FakePlatform("b", multi_platform=False), FakePlatform("c"))
        resolution = resolver.resolve(make_context(multi_platform_enabled=True))
        assert [rp.name for rp in resolution.platforms] == ["a", "c"]

    def test_main_not_redetected(self, make_context):
        main = FakePlatform("a")
        _resolver(main, FakePlatform("b")).resolve(make_context(multi_platform_enabled=True))
        assert main.detect_calls == 1

    def test_undetected_secondary_excluded(self, make_context):
        resolver = _resolver(FakePlatform("a"), FakePlatform("b", detects=False))
        resolution = resolver.resolve(make_context(multi_platform_enabled=True))
        assert [rp.name for rp in resolution.platforms] == ["a"]

    def test_secondary_uses_override(self, make_context):
        resolver = _resolver(
            FakePlatform("a"),
            FakePlatform("b", supported_versions=("1.0.0", "2.0.0"), default_version="1.0.0"),
        )
        resolution = resolver.resolve(
            make_context(multi_platform_enabled=True, version_overrides={"b": "2"})
        )
        assert tool_versions(resolution) == {"a": "1.0.0", "b": "2.0.0"}

    def test_secondary_unsupported_version_fails(self, make_context):
        resolver = _resolver(
            FakePlatform("a"), FakePlatform("b", detected_version="9.0.0")
        )
        resolution = resolver.resolve(make_context(multi_platform_enabled=True))
        assert resolution.error.kind == ErrorKind.UNSUPPORTED_VERSION
        assert resolution.error.platform == "b"
