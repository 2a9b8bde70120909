"""
Core domain models for the book shop.
These are framework-agnostic and can be used across all layers.
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional

# Fields a client may change; ``id`` is assigned by the database and never updated.
MUTABLE_FIELDS = ("title", "author", "price", "quantity")

# Column limits of the books table.
TEXT_MAX_LENGTH = 255
PRICE_PRECISION = 10
PRICE_SCALE = 2
PRICE_LIMIT = 10 ** (PRICE_PRECISION - PRICE_SCALE)
QUANTITY_MAX = 2**31 - 1
ID_MAX = 2**63 - 1


@dataclass
class Book:
    """
    A book on sale in the shop.

    ``id`` is ``None`` until the row has been inserted.
    """
    title: str
    author: str
    price: float
    quantity: int = 0
    id: Optional[int] = None

    def mutable_values(self) -> Dict[str, Any]:
        """Column values written by INSERT and UPDATE statements."""
        return {name: getattr(self, name) for name in MUTABLE_FIELDS}
