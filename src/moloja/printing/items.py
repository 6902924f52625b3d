"""Sale item extraction.

Sales written by different versions of the point of sale store their
items in different shapes. Each shape is detected once, in a fixed order
of precedence, and mapped to a list of normalized LineItem rows.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Mapping, Sequence, Tuple

from moloja.printing.text import to_float, to_int

logger = logging.getLogger(__name__)

DEFAULT_ITEM_NAME = "Produto"


class ItemsShape(Enum):
    """Recognized layouts of ``sale["items"]``."""

    CART_ENTRIES = "cart_entries"        # [{product: {...}, quantity}] or flat entries
    PRODUCTS_WRAPPER = "products"        # {products: [...]}
    LEGACY_PRODUCTS = "legacy_products"  # items unusable, sale["products"] present
    UNSUPPORTED = "unsupported"          # bare count or anything else


@dataclass(frozen=True)
class LineItem:
    """One normalized product row of a receipt."""

    name: str
    unit_price: float
    quantity: int

    @property
    def line_total(self) -> float:
        return self.unit_price * self.quantity

    def as_tuple(self) -> Tuple[str, int, float, float]:
        """(name, quantity, unit price, line total)"""
        return (self.name, self.quantity, self.unit_price, self.line_total)


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def _get(source: Any, key: str, default: Any = None) -> Any:
    if isinstance(source, Mapping):
        return source.get(key, default)
    return getattr(source, key, default)


def classify_items(sale: Any) -> Tuple[ItemsShape, Sequence[Any]]:
    """Detect the items layout of a sale.

    Returns:
        The shape and the raw entry list to normalize (empty when
        unsupported)
    """
    items = _get(sale, "items")
    if _is_sequence(items):
        return ItemsShape.CART_ENTRIES, items

    products = _get(items, "products") if isinstance(items, Mapping) else None
    if _is_sequence(products):
        return ItemsShape.PRODUCTS_WRAPPER, products

    legacy = _get(sale, "products")
    if _is_sequence(legacy):
        return ItemsShape.LEGACY_PRODUCTS, legacy

    return ItemsShape.UNSUPPORTED, ()


def normalize_entry(entry: Any) -> LineItem:
    """Normalize one item entry of any supported flavour.

    Name and price come from the nested ``product`` when present, then
    from flat ``productName``/``price`` fields, then ``name``/``price``.
    Price is floored at 0 and quantity at 1.
    """
    product = _get(entry, "product")
    if isinstance(product, Mapping) or (product is not None and hasattr(product, "name")):
        name = _get(product, "name")
        raw_price = _get(product, "price")
    elif _get(entry, "productName") is not None or _get(entry, "product_name") is not None:
        name = _get(entry, "productName") or _get(entry, "product_name")
        raw_price = _get(entry, "price")
    else:
        name = _get(entry, "name")
        raw_price = _get(entry, "price")

    price = to_float(raw_price)
    if price < 0:
        price = 0.0

    quantity = to_int(_get(entry, "quantity"), 1)
    if quantity < 1:
        quantity = 1

    text = str(name).strip() if name is not None else ""
    return LineItem(name=text or DEFAULT_ITEM_NAME, unit_price=price, quantity=quantity)


def extract_items(sale: Any) -> List[LineItem]:
    """Extract the ordered line items of a sale.

    Never raises; unsupported layouts (such as the legacy bare item
    count) produce an empty list.

    Args:
        sale: Sale mapping as returned by the backend

    Returns:
        Normalized line items in sale order
    """
    shape, entries = classify_items(sale)
    if shape is ItemsShape.UNSUPPORTED:
        logger.debug(f"Sale {_get(sale, 'id')!r} has no itemized products")
        return []

    line_items = []
    for entry in entries:
        if entry is None or isinstance(entry, (str, bytes, int, float)):
            logger.debug(f"Skipping malformed item entry {entry!r}")
            continue
        line_items.append(normalize_entry(entry))
    return line_items
