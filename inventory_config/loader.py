"""
Configuration Loader (``inventory_config.loader``).

Responsibility
--------------
Loads YAML settings files and parses them into the frozen dataclasses in
``inventory_config.schema``.  Runtime callers go through
``inventory_config.get_active_config()``; this module is its plumbing.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Unknown section/key or a value of the wrong shape -> ``ConfigurationError``.
"""

from __future__ import annotations

import hashlib
import json
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from inventory_config.schema import (
    DuplicateDetectionSettings,
    EngineSettings,
    ExpirationSettings,
    ScanSettings,
    UsageSettings,
)
from inventory_kernel.exceptions import ConfigurationError

_SECTIONS: dict[str, type] = {
    "duplicates": DuplicateDetectionSettings,
    "expiration": ExpirationSettings,
    "usage": UsageSettings,
    "scan": ScanSettings,
}


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def merge_settings(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Overlay ``overrides`` onto ``base`` one section deep."""
    merged = {k: (dict(v) if isinstance(v, dict) else v) for k, v in base.items()}
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key].update(value)
        else:
            merged[key] = value
    return merged


def compute_checksum(data: dict[str, Any]) -> str:
    """Deterministic SHA-256 of the merged settings dict."""
    canonical = json.dumps(data, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def _whole_number(field_name: str, value: Any) -> int:
    """Parse an integer setting; 2.0 and "7" are accepted, 2.7 and true are not."""
    if isinstance(value, bool):
        raise ConfigurationError(field_name, value, "must be an integer")
    if isinstance(value, float) and not value.is_integer():
        raise ConfigurationError(field_name, value, "must be a whole number")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(field_name, value, f"cannot be parsed: {exc}") from exc


def _coerce(section: str, key: str, value: Any, default: Any) -> Any:
    """Coerce a YAML scalar to the type of the dataclass default."""
    field_name = f"{section}.{key}"
    try:
        if isinstance(default, bool):
            if not isinstance(value, bool):
                raise ConfigurationError(field_name, value, "must be a boolean")
            return value
        if isinstance(default, Decimal):
            return Decimal(str(value))
        if isinstance(default, int):
            return _whole_number(field_name, value)
        return str(value)
    except (TypeError, ValueError, InvalidOperation) as exc:
        raise ConfigurationError(field_name, value, f"cannot be parsed: {exc}") from exc


def parse_section(section: str, data: dict[str, Any] | None) -> Any:
    """Parse one YAML section into its settings dataclass."""
    settings_cls = _SECTIONS[section]
    defaults = settings_cls()
    if data is None:
        return defaults
    if not isinstance(data, dict):
        raise ConfigurationError(section, data, "must be a mapping")

    kwargs: dict[str, Any] = {}
    for key, value in data.items():
        if not hasattr(defaults, key):
            raise ConfigurationError(f"{section}.{key}", value, "unknown setting")
        kwargs[key] = _coerce(section, key, value, getattr(defaults, key))
    return settings_cls(**kwargs)


def parse_settings(data: dict[str, Any]) -> EngineSettings:
    """
    Parse a merged settings dict into ``EngineSettings``.

    Postconditions:
        - The result has NOT been validated; call ``validate()``.
    """
    unknown = set(data) - set(_SECTIONS) - {"version"}
    if unknown:
        name = sorted(unknown)[0]
        raise ConfigurationError(name, data[name], "unknown section")

    return EngineSettings(
        duplicates=parse_section("duplicates", data.get("duplicates")),
        expiration=parse_section("expiration", data.get("expiration")),
        usage=parse_section("usage", data.get("usage")),
        scan=parse_section("scan", data.get("scan")),
        version=_whole_number("version", data.get("version", 1)),
        checksum=compute_checksum(data),
    )
