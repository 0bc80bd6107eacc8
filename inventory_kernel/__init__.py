"""
Inventory Kernel

Pure core of the consumable-inventory analytics engine:
- Immutable entity value objects (items, vendors, purchases, usage)
- Injectable clock for all date-relative math
- Typed exceptions with machine-readable codes
- Structured JSON logging
"""

__version__ = "0.1.0"
