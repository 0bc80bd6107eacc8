"""
Engine settings schema.

Frozen dataclasses that carry every tunable threshold used by the engines.
The loader parses YAML into these types; ``validate()`` enforces ranges and
raises ``ConfigurationError`` on the first violation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from inventory_kernel.exceptions import ConfigurationError

VALID_TRIGGER_POLICIES = {"collection_size", "content"}


@dataclass(frozen=True)
class DuplicateDetectionSettings:
    """Thresholds for the near-duplicate predicates."""

    name_distance_threshold: int = 2
    price_tolerance: Decimal = Decimal("0.01")
    exclude_soft_deleted: bool = True

    def validate(self) -> None:
        if self.name_distance_threshold < 0:
            raise ConfigurationError(
                "duplicates.name_distance_threshold",
                self.name_distance_threshold,
                "cannot be negative",
            )
        if self.price_tolerance < 0:
            raise ConfigurationError(
                "duplicates.price_tolerance",
                self.price_tolerance,
                "cannot be negative",
            )


@dataclass(frozen=True)
class ExpirationSettings:
    """Tier boundaries (inclusive upper bounds, in days) and default lookahead."""

    critical_days: int = 7
    warning_days: int = 30
    default_lookahead_days: int = 30

    def validate(self) -> None:
        if self.critical_days < 0:
            raise ConfigurationError(
                "expiration.critical_days", self.critical_days, "cannot be negative"
            )
        if self.warning_days < self.critical_days:
            raise ConfigurationError(
                "expiration.warning_days",
                self.warning_days,
                f"must be >= critical_days ({self.critical_days})",
            )
        if self.default_lookahead_days < 0:
            raise ConfigurationError(
                "expiration.default_lookahead_days",
                self.default_lookahead_days,
                "cannot be negative",
            )


@dataclass(frozen=True)
class UsageSettings:
    default_window_days: int = 30

    def validate(self) -> None:
        if self.default_window_days <= 0:
            raise ConfigurationError(
                "usage.default_window_days",
                self.default_window_days,
                "must be positive",
            )


@dataclass(frozen=True)
class ScanSettings:
    """Background duplicate-scan behaviour."""

    trigger_policy: str = "collection_size"  # "collection_size", "content"
    max_workers: int = 1

    def validate(self) -> None:
        if self.trigger_policy not in VALID_TRIGGER_POLICIES:
            raise ConfigurationError(
                "scan.trigger_policy",
                self.trigger_policy,
                f"must be one of {sorted(VALID_TRIGGER_POLICIES)}",
            )
        if self.max_workers < 1:
            raise ConfigurationError(
                "scan.max_workers", self.max_workers, "must be at least 1"
            )


@dataclass(frozen=True)
class EngineSettings:
    """
    Complete, validated engine configuration.

    Contract:
        Produced only by ``inventory_config.get_active_config()`` (or
        constructed directly in tests).  ``checksum`` identifies the source
        YAML so log records can be tied back to the settings in force.
    """

    duplicates: DuplicateDetectionSettings = field(default_factory=DuplicateDetectionSettings)
    expiration: ExpirationSettings = field(default_factory=ExpirationSettings)
    usage: UsageSettings = field(default_factory=UsageSettings)
    scan: ScanSettings = field(default_factory=ScanSettings)
    version: int = 1
    checksum: str = ""

    def validate(self) -> None:
        self.duplicates.validate()
        self.expiration.validate()
        self.usage.validate()
        self.scan.validate()
