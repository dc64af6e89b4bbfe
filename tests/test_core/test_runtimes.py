"""Tests for runtime profiles."""

import dataclasses

import pytest

from autoinject.core.config import InstrumentationConfig
from autoinject.core.exceptions import ConfigError, UnknownRuntimeError
from autoinject.core.runtimes import (
    DOTNET,
    MOUNT_PATH,
    RequiredEnvVar,
    RuntimeProfile,
    get_runtime,
    list_runtimes,
    register_runtime,
    reset_runtimes,
)


class TestBuiltinProfiles:
    """Tests for the shipped runtime tables."""

    def test_builtin_names(self):
        assert list_runtimes() == ["dotnet", "java", "nodejs", "python"]

    def test_dotnet_order(self):
        """Table order is part of the agent contract."""
        assert [e.name for e in DOTNET.env] == [
            "CORECLR_ENABLE_PROFILING",
            "CORECLR_PROFILER",
            "CORECLR_PROFILER_PATH",
            "DOTNET_STARTUP_HOOKS",
            "DOTNET_ADDITIONAL_DEPS",
            "OTEL_DOTNET_AUTO_HOME",
            "DOTNET_SHARED_STORE",
        ]

    def test_dotnet_concatenating_entries(self):
        concatenating = {e.name for e in DOTNET.env if e.concatenate}
        assert concatenating == {"DOTNET_STARTUP_HOOKS", "DOTNET_ADDITIONAL_DEPS", "DOTNET_SHARED_STORE"}

    def test_paths_under_mount(self):
        """Every path-valued entry points into the shared mount."""
        for name in list_runtimes():
            for entry in get_runtime(name).env:
                if "/" in entry.value:
                    assert MOUNT_PATH in entry.value

    def test_profiles_are_immutable(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            DOTNET.name = "other"  # type: ignore[misc]


class TestProfileValidation:
    """Tests for RuntimeProfile construction."""

    def test_duplicate_name_rejected(self):
        with pytest.raises(ConfigError, match="more than once"):
            RuntimeProfile(name="bad", env=(RequiredEnvVar("X", "a"), RequiredEnvVar("X", "b")))

    def test_empty_init_command_rejected(self):
        with pytest.raises(ConfigError, match="empty init command"):
            RuntimeProfile(name="bad", env=(), init_command=())

    def test_from_dict(self):
        profile = RuntimeProfile.from_dict("ruby", {
            "env": [
                {"name": "RUBYOPT", "value": "-rboot", "concatenate": True, "separator": " "},
                {"name": "OTEL_RUBY_HOME", "value": "/otel-auto-instrumentation"},
            ],
            "initCommand": ["cp", "-r", "/gems", "/otel-auto-instrumentation/"],
        })
        assert profile.env[0] == RequiredEnvVar("RUBYOPT", "-rboot", True, " ")
        assert profile.env[1].concatenate is False
        assert profile.env[1].separator == ":"
        assert profile.init_command == ("cp", "-r", "/gems", "/otel-auto-instrumentation/")

    def test_from_dict_default_init_command(self):
        profile = RuntimeProfile.from_dict("go", {"env": []})
        assert profile.init_command == DOTNET.init_command


class TestRegistry:
    """Tests for the runtime registry."""

    def test_unknown_runtime(self):
        with pytest.raises(UnknownRuntimeError) as exc_info:
            get_runtime("cobol")
        assert exc_info.value.runtime == "cobol"
        assert "dotnet" in exc_info.value.available

    def test_register_runtime(self):
        profile = RuntimeProfile(name="php", env=(RequiredEnvVar("PHP_INI_SCAN_DIR", "/x", True),))
        register_runtime(profile)
        assert get_runtime("php") is profile
        assert "php" in list_runtimes()

    def test_registrations_reset_between_tests(self):
        """Autouse fixture drops registrations from other tests."""
        assert "php" not in list_runtimes()

    def test_registered_runtime_reaches_config_lookup(self):
        """Library registrations are the fallback after config-defined profiles."""
        registered = RuntimeProfile(name="php", env=(RequiredEnvVar("PHP_INI_SCAN_DIR", "/x"),))
        register_runtime(registered)
        assert InstrumentationConfig().profile_for("php") is registered

        config = InstrumentationConfig.from_dict(
            {"customRuntimes": {"php": {"env": [{"name": "PHP_INI_SCAN_DIR", "value": "/y"}]}}}
        )
        assert config.profile_for("php").env[0].value == "/y"

    def test_reset_restores_builtins(self):
        register_runtime(RuntimeProfile(name="php", env=()))
        reset_runtimes()
        assert list_runtimes() == ["dotnet", "java", "nodejs", "python"]
