"""
Content digests for snapshots and engine inputs.

``content_digest`` backs ``InventorySnapshot.content_fingerprint`` (the
CONTENT scan trigger); ``short_digest`` backs the engine tracer's
``input_fingerprint``.  Both hash the same canonical JSON, so equal
entities produce equal digests across processes.
"""

import hashlib
import json
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID


def _encode(value: Any) -> Any:
    # 9.50 and 9.5 are the same price
    if isinstance(value, Decimal):
        return str(value.normalize())
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (set, frozenset)):
        return sorted(str(v) for v in value)
    raise TypeError(f"cannot digest {type(value).__name__}")


def canonical_json(value: Any) -> str:
    """Sorted-key, whitespace-free JSON of ``value``."""
    return json.dumps(value, sort_keys=True, separators=(",", ":"), default=_encode)


def content_digest(value: Any) -> str:
    """Full SHA-256 hex digest of ``canonical_json(value)``."""
    return hashlib.sha256(canonical_json(value).encode("utf-8")).hexdigest()


def short_digest(value: Any, length: int = 16) -> str:
    return content_digest(value)[:length]
