"""Auto-instrumentation injection for Kubernetes pods."""
from .core.config import AppConfig, InstrumentationConfig, RuntimeInjectionSpec
from .core.exceptions import ConfigError, InjectorError, ManifestError, UnknownRuntimeError
from .core.log_config import LoggingConfig
from .core.models import Container, EnvVar, Pod, PodSpec, Volume, VolumeMount
from .core.runtimes import (
    DOTNET,
    INIT_CONTAINER_NAME,
    JAVA,
    MOUNT_PATH,
    NODEJS,
    PYTHON,
    VOLUME_NAME,
    RequiredEnvVar,
    RuntimeProfile,
    get_runtime,
    list_runtimes,
    register_runtime,
)
from .services.env_merger import EnvMerger, MergeAction, MergeResult
from .services.injector import InjectionOrchestrator, InjectionResult, is_init_container_missing

__all__ = [
    "DOTNET",
    "INIT_CONTAINER_NAME",
    "JAVA",
    "MOUNT_PATH",
    "NODEJS",
    "PYTHON",
    "VOLUME_NAME",
    "AppConfig",
    "ConfigError",
    "Container",
    "EnvMerger",
    "EnvVar",
    "InjectionOrchestrator",
    "InjectionResult",
    "InjectorError",
    "InstrumentationConfig",
    "LoggingConfig",
    "ManifestError",
    "MergeAction",
    "MergeResult",
    "Pod",
    "PodSpec",
    "RequiredEnvVar",
    "RuntimeInjectionSpec",
    "RuntimeProfile",
    "UnknownRuntimeError",
    "Volume",
    "VolumeMount",
    "get_runtime",
    "is_init_container_missing",
    "list_runtimes",
    "register_runtime",
]
