# orders/services/orders.py

"""
ORDER SERVICE

- create_order(): direct storefront order, priced server-side from the catalog
- create_order_for_checkout_session(): paid order for a completed checkout
  session (one order per session, safe to call twice)
- update_order_status(): admin status changes through the model transitions
"""

from __future__ import annotations

import logging

from django.db import transaction

from checkout.services.basket import reprice
from checkout.services.exceptions import BasketValidationError
from orders.models import Order
from orders.services.exceptions import OrderValidationError

logger = logging.getLogger(__name__)


def _clean(value) -> str:
    return str(value or "").strip()


@transaction.atomic
def create_order(
    *,
    items,
    customer_name: str,
    customer_email: str,
    customer_phone: str = "",
    customer_address: str = "",
    notes: str = "",
    user=None,
) -> Order:
    if not items:
        raise OrderValidationError("Items are required")

    customer_name = _clean(customer_name)
    customer_email = _clean(customer_email)
    if not customer_name or not customer_email:
        raise OrderValidationError("Customer name and email are required")

    try:
        basket = reprice(items)
    except BasketValidationError as exc:
        raise OrderValidationError(str(exc)) from exc

    order = Order.objects.create(
        user=user if getattr(user, "is_authenticated", False) else None,
        customer_name=customer_name,
        customer_email=customer_email,
        customer_phone=_clean(customer_phone),
        customer_address=_clean(customer_address),
        notes=_clean(notes),
        items=basket.snapshot(),
        total=basket.total(),
    )

    logger.info(
        "Order created",
        extra={"order_id": str(order.id), "order_no": order.order_no, "total": str(order.total)},
    )
    return order


@transaction.atomic
def create_order_for_checkout_session(session) -> tuple[Order, bool]:
    existing = Order.objects.filter(checkout_session=session).first()
    if existing:
        return existing, False

    customer = session.customer or {}
    order = Order.objects.create(
        user=session.user,
        customer_name=_clean(customer.get("name")) or session.customer_email,
        customer_email=session.customer_email or _clean(customer.get("email")),
        customer_phone=_clean(customer.get("phone")),
        customer_address=_clean(customer.get("address")),
        notes=_clean(customer.get("notes")),
        items=list(session.basket or []),
        total=session.amount_total,
        currency=session.currency,
        is_paid=True,
        checkout_session=session,
    )

    logger.info(
        "Paid order created from checkout session",
        extra={"order_id": str(order.id), "session_id": str(session.id)},
    )
    return order, True


@transaction.atomic
def update_order_status(*, order_id, status: str) -> tuple[Order, bool]:
    """
    Raises Order.DoesNotExist or InvalidOrderTransition.
    Returns (order, changed).
    """
    order = Order.objects.select_for_update().get(id=order_id)
    previous = order.status

    changed = order.apply_status(status)
    if changed:
        order.save(update_fields=["status", "completed_at", "updated_at"])
        logger.info(
            "Order status updated",
            extra={"order_id": str(order.id), "from": previous, "to": order.status},
        )
    return order, changed
