"""Configuration management."""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import jsonschema
import yaml

from .exceptions import ConfigError
from .log_config import LoggingConfig
from .models import EnvVar
from .runtimes import RuntimeProfile, get_runtime

CUSTOM_RUNTIMES_KEY = "customRuntimes"

# Instrumentation resource fields that are not per-runtime sections
_NON_RUNTIME_KEYS = {CUSTOM_RUNTIMES_KEY, "env", "exporter", "propagators", "sampler", "resource"}

_ENV_VAR_SCHEMA = {
    "type": "object",
    "required": ["name"],
    "properties": {
        "name": {"type": "string", "minLength": 1},
        "value": {"type": "string"},
        "valueFrom": {"type": "object"},
    },
}

INSTRUMENTATION_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "env": {"type": "array", "items": _ENV_VAR_SCHEMA},
        "exporter": {},
        "propagators": {},
        "sampler": {},
        "resource": {},
        CUSTOM_RUNTIMES_KEY: {
            "type": "object",
            "additionalProperties": {
                "type": "object",
                "required": ["env"],
                "properties": {
                    "env": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "required": ["name", "value"],
                            "properties": {
                                "name": {"type": "string", "minLength": 1},
                                "value": {"type": "string"},
                                "concatenate": {"type": "boolean"},
                                "separator": {"type": "string"},
                            },
                        },
                    },
                    "initCommand": {
                        "type": "array",
                        "minItems": 1,
                        "items": {"type": "string"},
                    },
                },
            },
        },
    },
    "additionalProperties": {
        "type": "object",
        "required": ["image"],
        "properties": {
            "image": {"type": "string", "minLength": 1},
            "env": {"type": "array", "items": _ENV_VAR_SCHEMA},
        },
    },
}


@dataclass
class RuntimeInjectionSpec:
    """Per-runtime settings from the Instrumentation resource.

    Attributes:
        image: Distribution image holding the agent payload
        env: User-declared env vars, merged at lowest precedence
    """
    image: str
    env: list[EnvVar] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RuntimeInjectionSpec":
        return cls(
            image=data["image"],
            env=[EnvVar.from_dict(e) for e in data.get("env") or []],
        )


@dataclass
class InstrumentationConfig:
    """Instrumentation resource: runtime sections plus data-defined runtimes.

    Example document:
        spec:
          env:
            - name: OTEL_EXPORTER_OTLP_ENDPOINT
              value: http://collector:4318
          dotnet:
            image: ghcr.io/example/autoinstrumentation-dotnet:1.0.0
            env:
              - name: OTEL_SERVICE_NAME
                value: checkout
          customRuntimes:
            ruby:
              env:
                - {name: RUBYOPT, value: "-r/otel-auto-instrumentation/boot", concatenate: true, separator: " "}

    Top-level ``env`` entries apply to every runtime. A runtime section that
    names the same variable wins.
    """
    runtimes: dict[str, RuntimeInjectionSpec] = field(default_factory=dict)
    profiles: dict[str, RuntimeProfile] = field(default_factory=dict)
    env: list[EnvVar] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "InstrumentationConfig":
        """Build from a parsed document.

        Accepts either a full resource (with ``spec``) or the spec mapping.

        Raises:
            ConfigError: If the document does not match INSTRUMENTATION_SCHEMA.
        """
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError("instrumentation config must be a mapping")
        spec = data["spec"] if "spec" in data else data
        if spec is None:
            spec = {}

        try:
            jsonschema.validate(spec, INSTRUMENTATION_SCHEMA)
        except jsonschema.ValidationError as e:
            path = ".".join(str(p) for p in e.absolute_path) or None
            raise ConfigError(e.message, config_key=path) from e

        profiles = {
            name: RuntimeProfile.from_dict(name, profile)
            for name, profile in (spec.get(CUSTOM_RUNTIMES_KEY) or {}).items()
        }
        runtimes = {
            name: RuntimeInjectionSpec.from_dict(section)
            for name, section in spec.items()
            if name not in _NON_RUNTIME_KEYS
        }
        shared = [EnvVar.from_dict(e) for e in spec.get("env") or []]
        return cls(runtimes=runtimes, profiles=profiles, env=shared)

    @classmethod
    def from_yaml(cls, config_path: Path | str) -> "InstrumentationConfig":
        """Load configuration from a YAML (or JSON) file.

        Raises:
            ConfigError: If the file is missing, unparsable or invalid.
        """
        path = Path(config_path)
        if not path.exists():
            raise ConfigError(f"file not found: {path}", config_key=str(path))
        try:
            with open(path) as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"invalid YAML in {path}: {e}", config_key=str(path)) from e
        return cls.from_dict(data)

    def get(self, runtime: str) -> RuntimeInjectionSpec:
        """Get the injection settings for a runtime.

        Raises:
            ConfigError: If the runtime has no section in this config.
        """
        if runtime not in self.runtimes:
            available = sorted(self.runtimes)
            raise ConfigError(
                f"runtime '{runtime}' is not configured. Configured: {available}",
                config_key=runtime,
            )
        section = self.runtimes[runtime]
        if not self.env:
            return section
        named = {e.name for e in section.env}
        shared = [e for e in self.env if e.name not in named]
        return RuntimeInjectionSpec(image=section.image, env=section.env + shared)

    def profile_for(self, runtime: str) -> RuntimeProfile:
        """Resolve the injection table, preferring data-defined runtimes."""
        if runtime in self.profiles:
            return self.profiles[runtime]
        return get_runtime(runtime)


@dataclass
class AppConfig:
    """Main application configuration.

    Environment Variables:
        INSTRUMENTATION_CONFIG: Path to the Instrumentation YAML
        LOG_LEVEL, LOG_FORMAT, LOG_COLOR: see LoggingConfig.from_env
    """
    instrumentation_path: Path = field(default_factory=lambda: Path("instrumentation.yaml"))
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_env(cls) -> "AppConfig":
        return cls(
            instrumentation_path=Path(
                os.environ.get("INSTRUMENTATION_CONFIG", "instrumentation.yaml")
            ),
            logging=LoggingConfig.from_env(),
        )
