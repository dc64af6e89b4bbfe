"""Auto-instrumentation injection into a pod.

InjectionOrchestrator applies one runtime's env var table to a single
container and, once per pod, provisions the shared payload volume and the
init container that fills it. Callers process qualifying containers one at
a time and in order; the once-per-pod check is not safe under interleaving.
"""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from ..core.config import RuntimeInjectionSpec
from ..core.models import Container, Pod, Volume, VolumeMount
from ..core.runtimes import INIT_CONTAINER_NAME, MOUNT_PATH, VOLUME_NAME, RuntimeProfile
from .env_merger import EnvMerger, MergeResult

logger = logging.getLogger(__name__)


def is_init_container_missing(pod: Pod) -> bool:
    """True until the payload init container has been added to the pod."""
    return not pod.spec.has_init_container(INIT_CONTAINER_NAME)


@dataclass
class InjectionResult:
    """Outcome of injecting one container.

    Attributes:
        pod: The pod to admit. On abort this is the caller's pod, untouched.
        container: Name of the target container
        injected: Whether env vars and the volume mount were applied
        provisioned: Whether this call added the shared volume and init container
        conflict: The failing merge when injection was aborted
    """

    pod: Pod
    container: str
    injected: bool
    provisioned: bool = False
    conflict: MergeResult | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "container": self.container,
            "injected": self.injected,
            "provisioned": self.provisioned,
        }
        if self.conflict is not None:
            result["conflict"] = self.conflict.to_dict()
        return result

    def __bool__(self) -> bool:
        return self.injected


class InjectionOrchestrator:
    """Injects one runtime's auto-instrumentation into pod containers.

    Usage:
        orchestrator = InjectionOrchestrator(DOTNET)
        pod = orchestrator.inject(pod, spec, index=0)

    Args:
        profile: Runtime injection table
        merger: Env merger (defaults to one labelled with the runtime name)
        init_container_missing: Once-per-pod provisioning check
    """

    def __init__(
        self,
        profile: RuntimeProfile,
        merger: EnvMerger | None = None,
        init_container_missing: Callable[[Pod], bool] = is_init_container_missing,
    ):
        self.profile = profile
        self.merger = merger or EnvMerger(runtime=profile.name)
        self._init_container_missing = init_container_missing

    def inject(self, pod: Pod, spec: RuntimeInjectionSpec, index: int) -> Pod:
        """Return ``pod`` with the container at ``index`` instrumented.

        The input pod is not modified. If a required env var conflicts,
        the input pod is returned as-is (fail-open).
        """
        return self.run(pod, spec, index).pod

    def run(self, pod: Pod, spec: RuntimeInjectionSpec, index: int) -> InjectionResult:
        """Inject the container at ``index`` and report what happened.

        ``index`` must be in range. A negative index is rejected rather than
        counted from the end, so IndexError is raised for either case.
        """
        if index < 0:
            raise IndexError(f"container index {index} out of range")
        mutated = pod.copy()
        container = mutated.spec.containers[index]

        for env_var in spec.env:
            self.merger.set_if_absent(container, env_var)

        for required in self.profile.env:
            merged = self.merger.try_set(
                container,
                required.name,
                required.value,
                required.concatenate,
                required.separator,
            )
            if not merged:
                return InjectionResult(
                    pod=pod, container=container.name, injected=False, conflict=merged
                )

        container.volume_mounts.append(VolumeMount(name=VOLUME_NAME, mount_path=MOUNT_PATH))

        provisioned = False
        if self._init_container_missing(mutated):
            mutated.spec.volumes.append(Volume.empty(VOLUME_NAME))
            mutated.spec.init_containers.append(self._init_container(spec))
            provisioned = True

        mutated.spec.containers[index] = container
        logger.debug(
            f"Injected {self.profile.name} auto-instrumentation",
            extra={"container": container.name, "pod": mutated.name, "runtime": self.profile.name},
        )
        return InjectionResult(
            pod=mutated, container=container.name, injected=True, provisioned=provisioned
        )

    def run_many(
        self, pod: Pod, spec: RuntimeInjectionSpec, indices: Iterable[int]
    ) -> list[InjectionResult]:
        """Inject several containers strictly in order.

        Each call sees the pod produced by the previous one, so the shared
        volume and init container are added at most once.
        """
        results = []
        for index in indices:
            result = self.run(pod, spec, index)
            results.append(result)
            pod = result.pod
        return results

    def inject_many(self, pod: Pod, spec: RuntimeInjectionSpec, indices: Iterable[int]) -> Pod:
        results = self.run_many(pod, spec, indices)
        return results[-1].pod if results else pod

    def _init_container(self, spec: RuntimeInjectionSpec) -> Container:
        return Container(
            name=INIT_CONTAINER_NAME,
            image=spec.image,
            command=list(self.profile.init_command),
            volume_mounts=[VolumeMount(name=VOLUME_NAME, mount_path=MOUNT_PATH)],
        )
