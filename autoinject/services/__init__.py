"""Env var merging and injection orchestration."""
from .env_merger import EnvMerger, MergeAction, MergeResult
from .injector import InjectionOrchestrator, InjectionResult, is_init_container_missing

__all__ = [
    "EnvMerger",
    "InjectionOrchestrator",
    "InjectionResult",
    "MergeAction",
    "MergeResult",
    "is_init_container_missing",
]
