"""
Typed Exception Hierarchy for the Inventory Kernel.

===============================================================================
WHY SO FEW EXCEPTIONS
===============================================================================

The analytics engine degrades to ``None`` / ``0`` for ordinary data gaps:
no usage history, no purchase history, a purchase whose vendor was deleted,
negative stock.  Those are results, not errors.  Exceptions are reserved for
caller mistakes that have no meaningful answer (a zero-day usage window, a
negative lookahead) and for misconfiguration.

Every exception has:
  1. A TYPED class (catch by type, not message)
  2. A CODE class attribute (machine-readable, API-safe)
  3. Structured DATA attributes (not just a message string)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    InventoryKernelError (base)
    |
    +-- ConfigurationError
    |
    +-- QueryError
    |   +-- InvalidUsageWindowError
    |   +-- InvalidLookaheadError
    |
    +-- ScanError
        +-- ScanServiceStoppedError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                            | When Raised
----------------|---------------------------------|-------------------------------------
Config          | INVALID_CONFIGURATION           | Settings value out of range/unknown
----------------|---------------------------------|-------------------------------------
Query           | INVALID_USAGE_WINDOW            | Windowed usage rate over <= 0 days
                | INVALID_LOOKAHEAD               | Expiring-within lookahead < 0 days
----------------|---------------------------------|-------------------------------------
Scan            | DUPLICATE_SCAN_SERVICE_STOPPED  | Scan scheduled after shutdown()

===============================================================================
HANDLING PATTERNS
===============================================================================

    try:
        rate = aggregator.calculate_usage_rate(item, over_days=window)
    except InvalidUsageWindowError as e:
        return {"error": e.code, "over_days": e.over_days}
"""

from typing import Any


class InventoryKernelError(Exception):
    """
    Base exception for all inventory kernel errors.

    All subclasses must have a `code` class attribute
    for machine-readable error identification.
    """

    code: str = "INVENTORY_KERNEL_ERROR"


# Configuration exceptions


class ConfigurationError(InventoryKernelError):
    """A configuration value failed validation."""

    code: str = "INVALID_CONFIGURATION"

    def __init__(self, field: str, value: Any, reason: str):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid configuration for {field}={value!r}: {reason}")


# Query exceptions


class QueryError(InventoryKernelError):
    """Base exception for analytics queries that cannot be answered."""

    code: str = "QUERY_ERROR"


class InvalidUsageWindowError(QueryError):
    """A windowed usage rate was requested over a non-positive day count."""

    code: str = "INVALID_USAGE_WINDOW"

    def __init__(self, over_days: int):
        self.over_days = over_days
        super().__init__(f"Usage window must be at least 1 day, got {over_days}")


class InvalidLookaheadError(QueryError):
    """An expiring-soon lookahead was negative."""

    code: str = "INVALID_LOOKAHEAD"

    def __init__(self, days: int):
        self.days = days
        super().__init__(f"Expiration lookahead cannot be negative, got {days}")


# Scan exceptions


class ScanError(InventoryKernelError):
    """Base exception for duplicate-scan service errors."""

    code: str = "SCAN_ERROR"


class ScanServiceStoppedError(ScanError):
    """A scan was scheduled on a service that has been shut down."""

    code: str = "DUPLICATE_SCAN_SERVICE_STOPPED"

    def __init__(self) -> None:
        super().__init__("Duplicate scan service has been shut down")
