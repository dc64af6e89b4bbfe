"""Reading and writing pod manifests.

YAML is a superset of JSON, so yaml.safe_load reads both formats.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Literal

import yaml

from ..core.exceptions import ManifestError
from ..core.models import Pod

STDIN = "-"


def load_manifest(source: str | Path) -> dict[str, Any]:
    """Load a manifest document from a file path, or stdin for "-".

    Raises:
        ManifestError: If the file is missing, unparsable or not a mapping.
    """
    source_name = str(source)
    if source_name == STDIN:
        text = sys.stdin.read()
    else:
        path = Path(source)
        if not path.exists():
            raise ManifestError("file not found", source=source_name)
        text = path.read_text(encoding="utf-8")
    return parse_manifest(text, source_name)


def parse_manifest(text: str, source: str | None = None) -> dict[str, Any]:
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ManifestError(f"invalid YAML/JSON: {e}", source=source) from e
    if not isinstance(data, dict):
        raise ManifestError("manifest must be a mapping", source=source)
    return data


def load_pod(source: str | Path) -> Pod:
    """Load a ``kind: Pod`` manifest.

    Raises:
        ManifestError: If the document is not a pod or is malformed.
    """
    return pod_from_manifest(load_manifest(source), str(source))


def pod_from_manifest(data: dict[str, Any], source: str | None = None) -> Pod:
    kind = data.get("kind")
    if kind is not None and kind != "Pod":
        raise ManifestError(f"expected kind Pod, got {kind}", source=source)
    try:
        return Pod.from_dict(data)
    except (KeyError, TypeError, AttributeError) as e:
        raise ManifestError(f"malformed pod spec: {e!r}", source=source) from e


def dump_manifest(data: dict[str, Any], fmt: Literal["yaml", "json"] = "yaml") -> str:
    """Serialize a manifest to YAML or JSON text."""
    if fmt == "json":
        return json.dumps(data, indent=2, ensure_ascii=False, default=str) + "\n"
    if fmt == "yaml":
        return yaml.safe_dump(data, sort_keys=False, default_flow_style=False)
    raise ManifestError(f"unsupported output format: {fmt}")
