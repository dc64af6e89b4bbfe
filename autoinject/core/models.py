"""Pod specification models.

Dataclasses mirroring the subset of the Kubernetes core/v1 schema the
injector reads and writes. Attributes are snake_case, the wire format is
camelCase. Keys a model does not know about are kept in ``extra`` so that
decoding then encoding a manifest does not drop them.
"""

import copy
from dataclasses import dataclass, field
from typing import Any


def _extra(data: dict[str, Any], known: set[str]) -> dict[str, Any]:
    return {k: copy.deepcopy(v) for k, v in data.items() if k not in known}


@dataclass
class EnvVar:
    """Environment variable of a container.

    Either a literal ``value`` or a ``value_from`` reference (secret,
    config map, field ref, ...), never both. ``value_set`` is False when a
    decoded entry carried no ``value`` key, so encoding leaves it out again.
    """

    name: str
    value: str = ""
    value_from: dict[str, Any] | None = None
    extra: dict[str, Any] = field(default_factory=dict)
    value_set: bool = field(default=True, compare=False, repr=False)

    _KEYS = {"name", "value", "valueFrom"}

    @property
    def has_value_from(self) -> bool:
        return self.value_from is not None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EnvVar":
        value_from = data.get("valueFrom")
        return cls(
            name=data["name"],
            value="" if data.get("value") is None else str(data["value"]),
            value_from=copy.deepcopy(value_from) if value_from is not None else None,
            extra=_extra(data, cls._KEYS),
            value_set="value" in data,
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"name": self.name}
        if self.value_from is not None:
            result["valueFrom"] = copy.deepcopy(self.value_from)
        elif self.value_set or self.value:
            result["value"] = self.value
        result.update(copy.deepcopy(self.extra))
        return result


@dataclass
class VolumeMount:
    """Mount of a pod volume into a container."""

    name: str
    mount_path: str
    read_only: bool = False
    extra: dict[str, Any] = field(default_factory=dict)

    _KEYS = {"name", "mountPath", "readOnly"}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "VolumeMount":
        return cls(
            name=data["name"],
            mount_path=data["mountPath"],
            read_only=bool(data.get("readOnly", False)),
            extra=_extra(data, cls._KEYS),
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"name": self.name, "mountPath": self.mount_path}
        if self.read_only:
            result["readOnly"] = True
        result.update(copy.deepcopy(self.extra))
        return result


@dataclass
class Volume:
    """Pod-level volume.

    Only ``emptyDir`` is modelled; any other volume source lives in
    ``extra`` untouched.
    """

    name: str
    empty_dir: dict[str, Any] | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    _KEYS = {"name", "emptyDir"}

    @classmethod
    def empty(cls, name: str) -> "Volume":
        """Create an ephemeral emptyDir volume."""
        return cls(name=name, empty_dir={})

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Volume":
        empty_dir = data.get("emptyDir")
        if "emptyDir" in data and empty_dir is None:
            empty_dir = {}
        return cls(
            name=data["name"],
            empty_dir=copy.deepcopy(empty_dir) if empty_dir is not None else None,
            extra=_extra(data, cls._KEYS),
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"name": self.name}
        if self.empty_dir is not None:
            result["emptyDir"] = copy.deepcopy(self.empty_dir)
        result.update(copy.deepcopy(self.extra))
        return result


@dataclass
class Container:
    """A regular or init container."""

    name: str
    image: str | None = None
    command: list[str] = field(default_factory=list)
    env: list[EnvVar] = field(default_factory=list)
    volume_mounts: list[VolumeMount] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)

    _KEYS = {"name", "image", "command", "env", "volumeMounts"}

    def find_env(self, name: str) -> int:
        """Return the index of the first env var called ``name``, or -1."""
        for idx, env_var in enumerate(self.env):
            if env_var.name == name:
                return idx
        return -1

    def get_env(self, name: str) -> EnvVar | None:
        idx = self.find_env(name)
        return self.env[idx] if idx >= 0 else None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Container":
        return cls(
            name=data["name"],
            image=data.get("image"),
            command=list(data.get("command") or []),
            env=[EnvVar.from_dict(e) for e in data.get("env") or []],
            volume_mounts=[VolumeMount.from_dict(m) for m in data.get("volumeMounts") or []],
            extra=_extra(data, cls._KEYS),
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"name": self.name}
        if self.image is not None:
            result["image"] = self.image
        if self.command:
            result["command"] = list(self.command)
        if self.env:
            result["env"] = [e.to_dict() for e in self.env]
        if self.volume_mounts:
            result["volumeMounts"] = [m.to_dict() for m in self.volume_mounts]
        result.update(copy.deepcopy(self.extra))
        return result


@dataclass
class PodSpec:
    """Pod-level specification: containers, init containers and volumes."""

    containers: list[Container] = field(default_factory=list)
    init_containers: list[Container] = field(default_factory=list)
    volumes: list[Volume] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)

    _KEYS = {"containers", "initContainers", "volumes"}

    def has_init_container(self, name: str) -> bool:
        return any(c.name == name for c in self.init_containers)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PodSpec":
        return cls(
            containers=[Container.from_dict(c) for c in data.get("containers") or []],
            init_containers=[Container.from_dict(c) for c in data.get("initContainers") or []],
            volumes=[Volume.from_dict(v) for v in data.get("volumes") or []],
            extra=_extra(data, cls._KEYS),
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"containers": [c.to_dict() for c in self.containers]}
        if self.init_containers:
            result["initContainers"] = [c.to_dict() for c in self.init_containers]
        if self.volumes:
            result["volumes"] = [v.to_dict() for v in self.volumes]
        result.update(copy.deepcopy(self.extra))
        return result


@dataclass
class Pod:
    """A pod manifest (the workload being mutated).

    Example:
        pod = Pod.from_dict(yaml.safe_load(manifest))
        pod.spec.containers[0].env
    """

    metadata: dict[str, Any] = field(default_factory=dict)
    spec: PodSpec = field(default_factory=PodSpec)
    extra: dict[str, Any] = field(default_factory=dict)

    _KEYS = {"metadata", "spec"}

    @property
    def name(self) -> str:
        return self.metadata.get("name") or self.metadata.get("generateName") or ""

    def container_index(self, name: str) -> int:
        """Resolve a container name to its index.

        Raises:
            KeyError: If the pod has no container with that name.
        """
        for idx, container in enumerate(self.spec.containers):
            if container.name == name:
                return idx
        available = [c.name for c in self.spec.containers]
        raise KeyError(f"Unknown container: {name}. Available: {available}")

    def copy(self) -> "Pod":
        """Return a deep copy sharing no mutable state with this pod."""
        return copy.deepcopy(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Pod":
        return cls(
            metadata=copy.deepcopy(data.get("metadata") or {}),
            spec=PodSpec.from_dict(data.get("spec") or {}),
            extra=_extra(data, cls._KEYS),
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for key in ("apiVersion", "kind"):
            if key in self.extra:
                result[key] = copy.deepcopy(self.extra[key])
        if self.metadata:
            result["metadata"] = copy.deepcopy(self.metadata)
        result["spec"] = self.spec.to_dict()
        for key, value in self.extra.items():
            if key not in result:
                result[key] = copy.deepcopy(value)
        return result
