"""Per-runtime injection profiles.

A profile is the fixed, ordered list of env vars an auto-instrumentation
agent needs plus the command its init container runs to stage the agent
payload into the shared volume. Names, values and paths form the contract
with the agent and must match what it expects at container start.

New runtimes are added by data. The CLI and config files declare them under
``customRuntimes`` in the Instrumentation resource (see
InstrumentationConfig.profiles), which never touches the registry below.

The registry is an extension point for code embedding the package as a
library: register_runtime() makes a profile visible process-wide, including
to InstrumentationConfig.profile_for as the fallback after config-defined
profiles. reset_runtimes() restores the built-in set.
"""

from dataclasses import dataclass
from typing import Any

from .exceptions import ConfigError, UnknownRuntimeError

VOLUME_NAME = "opentelemetry-auto-instrumentation"
INIT_CONTAINER_NAME = VOLUME_NAME
MOUNT_PATH = "/otel-auto-instrumentation"

# Where distribution images keep the payload copied into MOUNT_PATH
PAYLOAD_SOURCE_PATH = "/autoinstrumentation"

DEFAULT_SEPARATOR = ":"

_COPY_PAYLOAD = ("cp", "-a", f"{PAYLOAD_SOURCE_PATH}/.", f"{MOUNT_PATH}/")


@dataclass(frozen=True)
class RequiredEnvVar:
    """One entry of a runtime's required env var table.

    Attributes:
        name: Env var name
        value: Value to inject
        concatenate: Join with an existing literal value instead of keeping it
        separator: Delimiter used when concatenating
    """

    name: str
    value: str
    concatenate: bool = False
    separator: str = DEFAULT_SEPARATOR

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RequiredEnvVar":
        return cls(
            name=data["name"],
            value=str(data["value"]),
            concatenate=bool(data.get("concatenate", False)),
            separator=data.get("separator", DEFAULT_SEPARATOR),
        )


@dataclass(frozen=True)
class RuntimeProfile:
    """Immutable injection table for one managed runtime."""

    name: str
    env: tuple[RequiredEnvVar, ...]
    init_command: tuple[str, ...] = _COPY_PAYLOAD

    def __post_init__(self) -> None:
        seen: set[str] = set()
        for entry in self.env:
            if entry.name in seen:
                raise ConfigError(
                    f"runtime '{self.name}' sets env var {entry.name} more than once",
                    config_key=self.name,
                )
            seen.add(entry.name)
        if not self.init_command:
            raise ConfigError(
                f"runtime '{self.name}' has an empty init command",
                config_key=self.name,
            )

    @classmethod
    def from_dict(cls, name: str, data: dict[str, Any]) -> "RuntimeProfile":
        """Build a profile from a config mapping.

        Expected shape:
            env: [{name, value, concatenate?, separator?}, ...]
            initCommand: [cp, -a, /autoinstrumentation/., /otel-auto-instrumentation/]
        """
        init_command = data.get("initCommand")
        return cls(
            name=name,
            env=tuple(RequiredEnvVar.from_dict(e) for e in data.get("env") or []),
            init_command=tuple(init_command) if init_command else _COPY_PAYLOAD,
        )


DOTNET = RuntimeProfile(
    name="dotnet",
    env=(
        RequiredEnvVar("CORECLR_ENABLE_PROFILING", "1"),
        RequiredEnvVar("CORECLR_PROFILER", "{918728DD-259F-4A6A-AC2B-B85E1B658318}"),
        RequiredEnvVar(
            "CORECLR_PROFILER_PATH",
            f"{MOUNT_PATH}/OpenTelemetry.AutoInstrumentation.Native.so",
        ),
        RequiredEnvVar(
            "DOTNET_STARTUP_HOOKS",
            f"{MOUNT_PATH}/netcoreapp3.1/OpenTelemetry.AutoInstrumentation.StartupHook.dll",
            concatenate=True,
        ),
        RequiredEnvVar("DOTNET_ADDITIONAL_DEPS", f"{MOUNT_PATH}/AdditionalDeps", concatenate=True),
        RequiredEnvVar("OTEL_DOTNET_AUTO_HOME", MOUNT_PATH),
        RequiredEnvVar("DOTNET_SHARED_STORE", f"{MOUNT_PATH}/store", concatenate=True),
    ),
)

JAVA = RuntimeProfile(
    name="java",
    env=(
        RequiredEnvVar(
            "JAVA_TOOL_OPTIONS",
            f"-javaagent:{MOUNT_PATH}/javaagent.jar",
            concatenate=True,
            separator=" ",
        ),
    ),
    init_command=("cp", "/javaagent.jar", f"{MOUNT_PATH}/javaagent.jar"),
)

NODEJS = RuntimeProfile(
    name="nodejs",
    env=(
        RequiredEnvVar(
            "NODE_OPTIONS",
            f"--require {MOUNT_PATH}/autoinstrumentation.js",
            concatenate=True,
            separator=" ",
        ),
    ),
)

PYTHON = RuntimeProfile(
    name="python",
    env=(
        RequiredEnvVar(
            "PYTHONPATH",
            f"{MOUNT_PATH}/opentelemetry/instrumentation/auto_instrumentation:{MOUNT_PATH}",
            concatenate=True,
        ),
        RequiredEnvVar("OTEL_TRACES_EXPORTER", "otlp_proto_http"),
        RequiredEnvVar("OTEL_METRICS_EXPORTER", "none"),
    ),
)

_BUILTIN = {p.name: p for p in (DOTNET, JAVA, NODEJS, PYTHON)}
_registry: dict[str, RuntimeProfile] = dict(_BUILTIN)


def get_runtime(name: str) -> RuntimeProfile:
    """Look up a registered runtime profile.

    Raises:
        UnknownRuntimeError: If no profile is registered under ``name``.
    """
    try:
        return _registry[name]
    except KeyError:
        raise UnknownRuntimeError(name, list(_registry)) from None


def list_runtimes() -> list[str]:
    return sorted(_registry)


def register_runtime(profile: RuntimeProfile) -> None:
    """Register (or replace) a runtime profile for the whole process.

    Library use only. Config-defined runtimes take precedence over
    registered ones of the same name.
    """
    _registry[profile.name] = profile


def reset_runtimes() -> None:
    """Drop profiles added with register_runtime, keeping the built-in ones."""
    _registry.clear()
    _registry.update(_BUILTIN)
