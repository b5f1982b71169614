"""Kubernetes secret manifest plugin.

Reads and rewrites ``kind: Secret`` YAML manifests with PyYAML. Values are
stored base64-encoded under ``data`` as Kubernetes expects; a matching
``stringData`` entry is dropped so the two never disagree.
"""

from __future__ import annotations

import base64
import json
import logging
from pathlib import Path
from typing import Annotated, Any, Dict, Mapping

import yaml

from ..capabilities.native import native_function

logger = logging.getLogger(__name__)


def _load_manifest(path: Path) -> Dict[str, Any]:
    if not path.is_file():
        raise FileNotFoundError(f"secret manifest not found: {path}")
    doc = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(doc, dict):
        raise ValueError(f"{path} does not contain a YAML mapping")
    kind = doc.get("kind")
    if kind is not None and kind != "Secret":
        raise ValueError(f"{path} is a {kind}, not a Secret")
    return doc


def apply_secret_values(doc: Dict[str, Any], values: Mapping[str, str]) -> Dict[str, Any]:
    """Store ``values`` base64-encoded under ``doc['data']``."""
    data = doc.get("data")
    if data is None:
        data = {}
        doc["data"] = data
    if not isinstance(data, dict):
        raise ValueError("secret 'data' must be a mapping")
    string_data = doc.get("stringData")
    for key, value in values.items():
        if not key:
            raise ValueError("secret key must not be empty")
        data[key] = base64.b64encode(str(value).encode("utf-8")).decode("ascii")
        if isinstance(string_data, dict):
            string_data.pop(key, None)
    if isinstance(string_data, dict) and not string_data:
        doc.pop("stringData")
    return doc


class SecretYamlUpdater:
    """Update values in Kubernetes ``Secret`` manifests."""

    def _write(self, path: Path, values: Mapping[str, str]) -> str:
        doc = apply_secret_values(_load_manifest(path), values)
        text = yaml.safe_dump(doc, sort_keys=False, default_flow_style=False)
        path.write_text(text, encoding="utf-8")
        logger.info(f"Updated {len(values)} key(s) in {path}")
        return text

    @native_function("Set one key of a Kubernetes Secret manifest; returns the updated YAML")
    def update_secret(
        self,
        path: Annotated[str, "Path to the Secret YAML file"],
        key: Annotated[str, "Key under data"],
        value: Annotated[str, "Plain-text value; stored base64-encoded"],
    ) -> str:
        return self._write(Path(path), {key: value})

    @native_function("Set several keys of a Kubernetes Secret manifest from a JSON object; returns the updated YAML")
    def update_secrets(
        self,
        path: Annotated[str, "Path to the Secret YAML file"],
        values: Annotated[str, "JSON object mapping keys to plain-text values"],
    ) -> str:
        parsed = json.loads(values) if isinstance(values, str) else values
        if not isinstance(parsed, dict):
            raise ValueError("values must be a JSON object")
        return self._write(Path(path), {str(k): str(v) for k, v in parsed.items()})

    @native_function("Read and decode one key of a Kubernetes Secret manifest")
    def read_secret(
        self,
        path: Annotated[str, "Path to the Secret YAML file"],
        key: Annotated[str, "Key under data"],
    ) -> str:
        doc = _load_manifest(Path(path))
        data = doc.get("data") or {}
        if key in data:
            return base64.b64decode(str(data[key])).decode("utf-8")
        string_data = doc.get("stringData") or {}
        if key in string_data:
            return str(string_data[key])
        raise KeyError(key)
