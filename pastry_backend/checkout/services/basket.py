# checkout/services/basket.py

"""
BASKET SERVICE

The basket lives on the client (local storage) as a JSON list of product
dicts with a quantity:

    [{"id": "<uuid>", "name": "Cannolo", "price": 3.5, "quantity": 2}, ...]

`Basket` mirrors the client operations so the server can reason about the
same blob. `reprice()` rebuilds a basket from client lines using catalog
prices only; client-sent prices are never trusted.
"""

from __future__ import annotations

import json
import logging
import uuid
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.core.serializers.json import DjangoJSONEncoder

from checkout.services.exceptions import BasketValidationError
from products.models import Product

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")


def _money(v) -> Decimal:
    if v is None or v == "":
        return Decimal("0.00")
    try:
        return Decimal(str(v)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError, TypeError):
        logger.warning("Invalid money value encountered", extra={"value": v})
        return Decimal("0.00")


def _to_int_qty(value) -> int:
    if isinstance(value, bool):
        raise ValueError("quantity must be a whole integer unit")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        s = value.strip()
        if s.lstrip("-").isdigit():
            return int(s)
    raise ValueError("quantity must be a whole integer unit")


def _as_item(product) -> dict:
    if isinstance(product, Product):
        return {
            "id": str(product.id),
            "name": product.name,
            "price": product.price,
            "category": product.category,
            "image_url": product.image_url,
        }

    if isinstance(product, dict):
        product_id = product.get("id") or product.get("product_id")
        if not product_id:
            raise ValueError("product id is required")
        item = dict(product)
        item.pop("product_id", None)
        item.pop("quantity", None)
        item["id"] = str(product_id)
        return item

    raise ValueError("product must be a Product or a dict")


class Basket:
    def __init__(self, items: list[dict] | None = None):
        self._items: list[dict] = []
        for item in items or []:
            self.add(item, item.get("quantity", 1))

    @property
    def items(self) -> list[dict]:
        return [dict(item) for item in self._items]

    def _find(self, product_id) -> dict | None:
        product_id = str(product_id)
        for item in self._items:
            if item["id"] == product_id:
                return item
        return None

    def add(self, product, quantity: int = 1) -> None:
        """Add a product, merging quantities with an existing line."""
        quantity = _to_int_qty(quantity)
        if quantity < 1:
            raise ValueError("quantity must be >= 1")

        item = _as_item(product)
        existing = self._find(item["id"])
        if existing:
            existing["quantity"] += quantity
            return

        item["quantity"] = quantity
        self._items.append(item)

    def remove(self, product_id) -> None:
        product_id = str(product_id)
        self._items = [item for item in self._items if item["id"] != product_id]

    def update_quantity(self, product_id, quantity: int) -> None:
        quantity = _to_int_qty(quantity)
        if quantity <= 0:
            self.remove(product_id)
            return

        item = self._find(product_id)
        if item:
            item["quantity"] = quantity

    def clear(self) -> None:
        self._items = []

    def total(self) -> Decimal:
        total = sum(
            (_money(item.get("price")) * item["quantity"] for item in self._items),
            Decimal("0.00"),
        )
        return _money(total)

    def items_count(self) -> int:
        return sum(item["quantity"] for item in self._items)

    def item_quantity(self, product_id) -> int:
        item = self._find(product_id)
        return item["quantity"] if item else 0

    def is_empty(self) -> bool:
        return not self._items

    def snapshot(self) -> list[dict]:
        """Order/checkout line snapshot with 2-dp money strings."""
        lines = []
        for item in self._items:
            price = _money(item.get("price"))
            lines.append(
                {
                    "product_id": item["id"],
                    "name": item.get("name") or "",
                    "price": str(price),
                    "quantity": item["quantity"],
                    "line_total": str(_money(price * item["quantity"])),
                }
            )
        return lines

    def to_json(self) -> str:
        return json.dumps(self._items, cls=DjangoJSONEncoder)

    @classmethod
    def from_json(cls, raw) -> "Basket":
        """
        Rebuild a basket from the client blob.
        Anything unreadable yields an empty basket (logged), like a fresh client.
        """
        if not raw:
            return cls()

        try:
            data = json.loads(raw) if isinstance(raw, (str, bytes)) else raw
        except (TypeError, ValueError):
            logger.warning("Unreadable basket JSON; starting empty")
            return cls()

        if not isinstance(data, list):
            logger.warning("Basket JSON is not a list; starting empty")
            return cls()

        basket = cls()
        for entry in data:
            if not isinstance(entry, dict):
                continue
            try:
                basket.add(entry, entry.get("quantity", 1))
            except ValueError:
                logger.warning("Skipping invalid basket line", extra={"line": entry})
        return basket


def reprice(lines) -> Basket:
    """
    Build a Basket from client lines [{"product_id"|"id": ..., "quantity": n}]
    using current catalog prices. Unknown or inactive products are rejected.
    """
    if not lines or not isinstance(lines, (list, tuple)):
        raise BasketValidationError("Items are required")

    wanted: list[tuple[uuid.UUID, int]] = []
    for idx, line in enumerate(lines):
        if not isinstance(line, dict):
            raise BasketValidationError(f"Invalid item at index {idx}")

        raw_id = line.get("product_id") or line.get("id")
        try:
            product_id = uuid.UUID(str(raw_id))
        except (TypeError, ValueError):
            raise BasketValidationError(f"Invalid product id at index {idx}") from None

        try:
            qty = _to_int_qty(line.get("quantity", 1))
        except ValueError as exc:
            raise BasketValidationError(str(exc)) from exc
        if qty < 1:
            raise BasketValidationError("quantity must be >= 1")

        wanted.append((product_id, qty))

    products = Product.objects.in_bulk([pid for pid, _ in wanted])

    basket = Basket()
    for product_id, qty in wanted:
        product = products.get(product_id)
        if product is None or not product.is_active:
            raise BasketValidationError(f"Product not found: {product_id}")
        basket.add(product, qty)

    return basket
