"""Conflict-aware merging of env vars into a container.

Values the workload owner set explicitly are never overwritten. A variable
sourced through ``valueFrom`` is a conflict: the merge fails and the caller
is expected to abort injection for that container.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from ..core.models import Container, EnvVar
from ..core.runtimes import DEFAULT_SEPARATOR


class MergeAction(Enum):
    """What a merge did to the container's env list."""
    ADDED = "added"
    KEPT = "kept"
    CONCATENATED = "concatenated"
    CONFLICT = "conflict"


@dataclass
class MergeResult:
    """Typed result of a single env var merge.

    Truthy exactly when the merge succeeded, so it can be used where a plain
    success flag is expected:

        if not merger.try_set(container, "X", "a", concatenate=False):
            return pod

    On conflict ``env_var`` and ``container`` identify the offending entry.
    """

    success: bool
    action: MergeAction
    env_var: str
    container: str
    message: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "success": self.success,
            "action": self.action.value,
            "env_var": self.env_var,
            "container": self.container,
        }
        if self.message:
            result["message"] = self.message
        return result

    def __bool__(self) -> bool:
        return self.success


class EnvMerger:
    """Adds, keeps or concatenates env vars on a container.

    Args:
        runtime: Runtime name used in diagnostics
        logger: Diagnostic sink for conflicts (defaults to the module logger)
    """

    def __init__(
        self, runtime: str = "auto-instrumentation", logger: logging.Logger | None = None
    ):
        self.runtime = runtime
        self._log = logger or logging.getLogger(__name__)

    def try_set(
        self,
        container: Container,
        name: str,
        value: str,
        concatenate: bool,
        separator: str = DEFAULT_SEPARATOR,
    ) -> MergeResult:
        """Set ``name`` on ``container`` unless the owner already configured it.

        Args:
            container: Container whose env list is mutated in place
            name: Env var name
            value: Value to inject
            concatenate: Join with an existing literal value, existing first
            separator: Delimiter used when concatenating

        Returns:
            MergeResult; failure only when the existing entry uses valueFrom
        """
        idx = container.find_env(name)
        if idx < 0:
            container.env.append(EnvVar(name=name, value=value))
            return MergeResult(True, MergeAction.ADDED, name, container.name)

        existing = container.env[idx]
        if existing.has_value_from:
            message = (
                f"Skipping {self.runtime} injection, "
                "the container defines env var value via ValueFrom"
            )
            self._log.info(
                message,
                extra={"env_var": name, "container": container.name, "runtime": self.runtime},
            )
            return MergeResult(False, MergeAction.CONFLICT, name, container.name, message)

        if not concatenate:
            return MergeResult(True, MergeAction.KEPT, name, container.name)

        existing.value = f"{existing.value}{separator}{value}"
        existing.value_set = True
        return MergeResult(True, MergeAction.CONCATENATED, name, container.name)

    def set_if_absent(self, container: Container, env_var: EnvVar) -> bool:
        """Append a copy of ``env_var`` only when its name is not set yet.

        Never fails and never concatenates: whatever the container already
        defines (literal or valueFrom) is left alone.
        """
        if container.find_env(env_var.name) >= 0:
            return False
        container.env.append(EnvVar.from_dict(env_var.to_dict()))
        return True
