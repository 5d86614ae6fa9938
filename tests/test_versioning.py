"""
Tests for the version model and version parsing.
"""

import pytest

from buildprep.core.models.version import Version, normalize_version, strip_version_prefix
from buildprep.core.services.versioning import (
    compare_versions,
    extract_version_text,
    parse_version,
    version_sort_key,
)

# ── Version model ────────────────────────────────────────────────────


class TestNormalize:
    def test_plain(self):
        assert normalize_version("3.16.0") == (3, 16, 0)

    def test_prefix_and_suffix(self):
        assert normalize_version("v3.16.0-rc1") == (3, 16, 0)

    def test_ffmpeg_style_prefix(self):
        assert normalize_version("n7.1.2") == (7, 1, 2)

    def test_nothing_numeric(self):
        assert normalize_version("unknown") == ()

    def test_strip_prefix_only_one_char(self):
        assert strip_version_prefix("v1.2") == "1.2"
        assert strip_version_prefix("1.2") == "1.2"


class TestVersion:
    def test_zero_padding_equality(self):
        assert Version("1.2") == Version("1.2.0")
        assert hash(Version("1.2")) == hash(Version("1.2.0"))

    def test_ordering(self):
        assert Version("3.15.2") < Version("3.16.0")
        assert Version("10.0.22631.0") > Version("10.0.19041.0")
        assert Version("1.10") > Version("1.9")

    def test_compares_with_strings(self):
        assert Version("19.41.34120") >= "19.41"
        assert Version("2.0") == "v2.0.0"

    def test_from_parts(self):
        assert str(Version((1, 2, 3))) == "1.2.3"

    def test_negative_rejected(self):
        with pytest.raises(ValueError):
            Version((1, -2))

    def test_empty_is_falsy(self):
        assert not Version("abc")


# ── Comparison laws ──────────────────────────────────────────────────


class TestCompareVersions:
    @pytest.mark.parametrize(
        "a,b",
        [("1.2.3", "1.2.4"), ("0.15.1", "0.16"), ("3.16.0", "3.9.9"), ("22.0.0", "22")],
    )
    def test_antisymmetric(self, a, b):
        assert compare_versions(a, b) == -compare_versions(b, a)

    @pytest.mark.parametrize("v", ["1", "1.2.3", "10.0.22631.0", "0.0.0"])
    def test_reflexive(self, v):
        assert compare_versions(v, v) == 0

    def test_missing_segments_are_zero(self):
        assert compare_versions("1.2", "1.2.0") == 0
        assert compare_versions("1.2", "1.2.1") == -1

    def test_sort_key_consistent_with_compare(self):
        names = ["14.41.34120", "14.38.33130", "14.9.1"]
        assert sorted(names, key=version_sort_key)[-1] == "14.41.34120"
        assert version_sort_key("1.2") == version_sort_key("1.2.0")


# ── Parsing ──────────────────────────────────────────────────────────


class TestParseVersion:
    def test_cmake(self):
        assert parse_version("cmake version 3.28.1\n\nCMake suite maintained by Kitware") == "3.28.1"

    def test_node(self):
        assert str(parse_version("v22.1.0\n")) == "22.1.0"

    def test_msvc_banner_on_stderr(self):
        banner = (
            "Microsoft (R) C/C++ Optimizing Compiler Version 19.41.34120 for x64\n"
            "Copyright (C) Microsoft Corporation.  All rights reserved.\n"
        )
        version = parse_version("", banner)
        assert version is not None
        assert version.parts == (19, 41, 34120)

    def test_git_windows_suffix(self):
        assert parse_version("git version 2.43.0.windows.1") == "2.43.0"

    def test_undotted_fallback(self):
        assert parse_version("build 12") == "12"

    def test_no_digits(self):
        assert parse_version("no digits here") is None
        assert parse_version("", "") is None
        assert parse_version(None) is None

    def test_custom_pattern(self):
        out = "go version go1.23.4 linux/amd64"
        assert parse_version(out, pattern=r"go version go(\d+\.\d+(?:\.\d+)?)") == "1.23.4"

    def test_custom_pattern_no_match(self):
        assert parse_version("something else", pattern=r"go(\d+\.\d+)") is None

    def test_extract_prefers_dotted_token(self):
        assert extract_version_text("clang 18 version 18.1.3") == "18.1.3"
