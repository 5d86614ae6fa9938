"""
Tests for the environment overlay.
"""

from buildprep.core.models.environment import EnvironmentOverlay


class TestEnvironmentOverlay:
    def test_defaults_to_process_environment(self, monkeypatch):
        monkeypatch.setenv("BUILDPREP_TEST_VAR", "yes")
        assert EnvironmentOverlay().get("BUILDPREP_TEST_VAR") == "yes"

    def test_add_prepends(self):
        overlay = EnvironmentOverlay(base={"PATH": "/usr/bin:/bin"}, separator=":")
        assert overlay.add("PATH", "/opt/sdk/bin")
        assert overlay.get("PATH") == "/opt/sdk/bin:/usr/bin:/bin"

    def test_add_is_idempotent(self):
        overlay = EnvironmentOverlay(base={}, separator=":")
        assert overlay.add("LIB", "/sdk/lib")
        assert not overlay.add("LIB", "/sdk/lib")
        assert overlay.entries("LIB") == ["/sdk/lib"]

    def test_existing_entry_not_duplicated(self):
        overlay = EnvironmentOverlay(base={"PATH": "/usr/bin"}, separator=":")
        assert not overlay.add("PATH", "/usr/bin/")
        assert overlay.added == {}

    def test_empty_path_ignored(self):
        overlay = EnvironmentOverlay(base={})
        assert not overlay.add("PATH", "")

    def test_merge_reports_only_new(self):
        overlay = EnvironmentOverlay(base={"INCLUDE": "/a"}, separator=";")
        added = overlay.merge({"INCLUDE": ["/a", "/b"], "LIB": ["/c"]})
        assert added == [("INCLUDE", "/b"), ("LIB", "/c")]
        assert overlay.get("INCLUDE") == "/b;/a"

    def test_order_of_additions_kept(self):
        overlay = EnvironmentOverlay(base={}, separator=":")
        overlay.merge({"PATH": ["/one", "/two"]})
        overlay.add("PATH", "/three")
        assert overlay.entries("PATH") == ["/one", "/two", "/three"]

    def test_get_unset(self):
        assert EnvironmentOverlay(base={}).get("NOPE") is None

    def test_as_env_overrides(self):
        overlay = EnvironmentOverlay(base={"HOME": "/home/me", "CC": "gcc"}, separator=":")
        overlay.add("PATH", "/sdk/bin")
        env = overlay.as_env({"CC": "clang", "EMPTY": None})
        assert env == {"HOME": "/home/me", "CC": "clang", "PATH": "/sdk/bin", "EMPTY": ""}

    def test_base_not_mutated(self):
        base = {"PATH": "/usr/bin"}
        overlay = EnvironmentOverlay(base=base, separator=":")
        overlay.add("PATH", "/x")
        assert base == {"PATH": "/usr/bin"}
