"""
Module: inventory_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation engines.  This is the canonical import surface for
    inventory_services and for the surrounding application.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import inventory_kernel (and sibling engine modules).
    MUST NOT import inventory_services or inventory_config.

Invariants enforced:
    - Purity: engines NEVER call ``datetime.now()``.  "Now" comes from an
      injected ``Clock``.
    - Decimal-only arithmetic for prices and values.
    - Determinism: identical inputs always produce identical outputs.

Usage:
    from inventory_engines.ledger import LedgerAggregator
    from inventory_engines.expiration import ExpirationClassifier
    from inventory_engines.duplicates import DuplicateDetector
    from inventory_engines.levenshtein import levenshtein_distance
"""

from inventory_engines.duplicates import (
    DuplicateDetector,
    DuplicateGroup,
    DuplicateKind,
    DuplicateReport,
    cluster_greedy,
    normalize_email,
    normalize_name,
)
from inventory_engines.expiration import (
    ExpirationClassifier,
    ExpirationStatus,
    ExpiringLot,
)
from inventory_engines.ledger import (
    ItemMetrics,
    LedgerAggregator,
    VendorPrice,
)
from inventory_engines.levenshtein import levenshtein_distance
from inventory_engines.tracer import traced_engine

__all__ = [
    # Duplicates
    "DuplicateDetector",
    "DuplicateGroup",
    "DuplicateKind",
    "DuplicateReport",
    "cluster_greedy",
    "normalize_email",
    "normalize_name",
    # Expiration
    "ExpirationClassifier",
    "ExpirationStatus",
    "ExpiringLot",
    # Ledger
    "ItemMetrics",
    "LedgerAggregator",
    "VendorPrice",
    # Levenshtein
    "levenshtein_distance",
    # Tracing
    "traced_engine",
]
