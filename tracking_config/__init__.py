"""
tracking_config -- single public entrypoint for tracking configuration.

Responsibility:
    ``get_active_config()`` loads the workflow YAML, validates it and
    returns a frozen ``TrackingConfiguration``.  ``bridges`` turns it into
    the kernel's ``StatusWorkflow`` and the configured batch services.

Architecture position:
    Configuration.  Sits above ``tracking_kernel`` and beside
    ``tracking_batch``; the kernel MUST NEVER import from ``tracking_config``.

Failure modes:
    - ``FileNotFoundError`` -- the requested YAML file does not exist.
    - ``ConfigurationError`` -- structural validation failed.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``tracking_config_loaded`` log entry with the config id, version and
    checksum, tying status decisions to the workflow that governed them.
"""

from __future__ import annotations

import logging
from pathlib import Path

from tracking_kernel.exceptions import ConfigurationError

from tracking_config.loader import load_configuration
from tracking_config.schema import BatchSettings, TrackingConfiguration, WorkflowDefinition
from tracking_config.validator import validate_configuration

_logger = logging.getLogger("tracking_kernel.config")

DEFAULT_CONFIG_PATH = Path(__file__).parent / "workflow.yaml"


def get_active_config(path: Path | str | None = None) -> TrackingConfiguration:
    """The ONLY public configuration entrypoint.

    Args:
        path: YAML file to load.  Defaults to the packaged workflow.yaml.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ConfigurationError: If validation reports errors.
    """
    config_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    if not config_path.is_file():
        raise FileNotFoundError(f"Tracking configuration not found: {config_path}")

    config = load_configuration(config_path)

    validation = validate_configuration(config)
    for warning in validation.warnings:
        _logger.warning("tracking_config_warning", extra={"warning": warning})
    if not validation.is_valid:
        raise ConfigurationError(validation.errors)

    _logger.info(
        "tracking_config_loaded",
        extra={
            "config_id": config.config_id,
            "config_version": config.version,
            "checksum": config.checksum,
            "status_count": len(config.workflow.sequence),
            "chunk_size": config.batch.chunk_size,
            "max_bulk_updates": config.batch.max_bulk_updates,
        },
    )

    return config


__all__ = [
    "BatchSettings",
    "DEFAULT_CONFIG_PATH",
    "TrackingConfiguration",
    "WorkflowDefinition",
    "get_active_config",
]
