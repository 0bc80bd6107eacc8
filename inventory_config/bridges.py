"""
Config -> Engine Bridges.

Functions that turn ``EngineSettings`` into configured engine instances.
They live in inventory_config (the producer) because engines must NEVER
import inventory_config.

Usage:
    from inventory_config import get_active_config
    from inventory_config.bridges import build_duplicate_detector

    settings = get_active_config()
    detector = build_duplicate_detector(settings)
"""

from __future__ import annotations

from inventory_config.schema import EngineSettings
from inventory_engines.duplicates import DuplicateDetector
from inventory_engines.expiration import ExpirationClassifier
from inventory_engines.ledger import LedgerAggregator
from inventory_kernel.domain.clock import Clock


def build_duplicate_detector(settings: EngineSettings) -> DuplicateDetector:
    dup = settings.duplicates
    return DuplicateDetector(
        name_distance_threshold=dup.name_distance_threshold,
        price_tolerance=dup.price_tolerance,
        exclude_soft_deleted=dup.exclude_soft_deleted,
    )


def build_expiration_classifier(settings: EngineSettings, clock: Clock) -> ExpirationClassifier:
    return ExpirationClassifier(
        clock,
        critical_days=settings.expiration.critical_days,
        warning_days=settings.expiration.warning_days,
    )


def build_ledger_aggregator(settings: EngineSettings, clock: Clock) -> LedgerAggregator:
    return LedgerAggregator(clock, usage_window_days=settings.usage.default_window_days)
