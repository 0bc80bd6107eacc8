"""
inventory_config -- single public entrypoint for engine configuration.

Responsibility:
    Provides the ONLY way to obtain engine settings at runtime through
    ``get_active_config()``.  Engines never read files or environment
    variables; they receive plain parameters built by
    ``inventory_config.bridges``.

Failure modes:
    - ``FileNotFoundError`` -- the override file does not exist.
    - ``yaml.YAMLError`` -- the override file is not valid YAML.
    - ``ConfigurationError`` -- a value is unknown, malformed or out of range.

Audit relevance:
    Every successful ``get_active_config()`` call emits an
    ``INVENTORY_CONFIG_TRACE`` log entry carrying the settings checksum.
"""

from __future__ import annotations

from pathlib import Path

from inventory_config.loader import load_yaml_file, merge_settings, parse_settings
from inventory_config.schema import (
    DuplicateDetectionSettings,
    EngineSettings,
    ExpirationSettings,
    ScanSettings,
    UsageSettings,
)
from inventory_kernel.logging_config import get_logger

_logger = get_logger("config")

DEFAULTS_PATH = Path(__file__).parent / "defaults.yaml"


def get_active_config(path: Path | str | None = None) -> EngineSettings:
    """Load the shipped defaults, overlay ``path`` if given, and validate.

    Guarantees:
        - The returned ``EngineSettings`` has passed ``validate()``.
        - An ``INVENTORY_CONFIG_TRACE`` log entry is emitted.
    """
    data = load_yaml_file(DEFAULTS_PATH)
    if path is not None:
        data = merge_settings(data, load_yaml_file(Path(path)))

    settings = parse_settings(data)
    settings.validate()

    _logger.info(
        "INVENTORY_CONFIG_TRACE",
        extra={
            "trace_type": "INVENTORY_CONFIG_TRACE",
            "source": str(path) if path is not None else "defaults",
            "version": settings.version,
            "checksum": settings.checksum,
            "trigger_policy": settings.scan.trigger_policy,
        },
    )
    return settings


__all__ = [
    "DEFAULTS_PATH",
    "DuplicateDetectionSettings",
    "EngineSettings",
    "ExpirationSettings",
    "ScanSettings",
    "UsageSettings",
    "get_active_config",
]
