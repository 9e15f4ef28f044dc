"""
Configuration Loader (``tracking_config.loader``).

Responsibility
--------------
Loads ``workflow.yaml`` and parses it into the frozen dataclasses of
``tracking_config.schema``.  Runtime callers go through
``tracking_config.get_active_config()``.

Invariants enforced
-------------------
* Every parsed object is a frozen dataclass from ``schema.py``.
* ``compute_checksum`` produces a deterministic SHA-256 hash of the raw
  document for configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from tracking_config.schema import (
    BatchSettings,
    TrackingConfiguration,
    WorkflowDefinition,
)


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a single YAML file; an empty file yields an empty dict."""
    with open(path) as f:
        return yaml.safe_load(f) or {}


def _string_tuple(values: Any) -> tuple[str, ...]:
    if values is None:
        return ()
    if isinstance(values, str):
        return (values,)
    return tuple(str(v) for v in values)


def _mapping_of_tuples(data: dict[str, Any] | None) -> tuple[tuple[str, tuple[str, ...]], ...]:
    return tuple(
        (str(key), _string_tuple(value)) for key, value in (data or {}).items()
    )


def parse_workflow(data: dict[str, Any]) -> WorkflowDefinition:
    """Parse the ``workflow`` section.

    Raises:
        KeyError: if ``initial_status``, ``sequence`` or ``transitions`` is
            missing.
    """
    return WorkflowDefinition(
        initial_status=str(data["initial_status"]),
        sequence=_string_tuple(data["sequence"]),
        transitions=_mapping_of_tuples(data["transitions"]),
        terminal_statuses=_string_tuple(data.get("terminal_statuses")),
        gated_statuses=_mapping_of_tuples(data.get("gated_statuses")),
    )


def parse_batch_settings(data: dict[str, Any] | None) -> BatchSettings:
    data = data or {}
    defaults = BatchSettings()
    return BatchSettings(
        chunk_size=int(data.get("chunk_size", defaults.chunk_size)),
        max_bulk_updates=int(data.get("max_bulk_updates", defaults.max_bulk_updates)),
    )


def parse_configuration(data: dict[str, Any]) -> TrackingConfiguration:
    return TrackingConfiguration(
        config_id=str(data.get("config_id", "default")),
        version=int(data.get("version", 1)),
        workflow=parse_workflow(data["workflow"]),
        batch=parse_batch_settings(data.get("batch")),
        checksum=compute_checksum(data),
    )


def load_configuration(path: Path) -> TrackingConfiguration:
    return parse_configuration(load_yaml_file(path))


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON serialization of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
