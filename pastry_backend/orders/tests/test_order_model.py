# orders/tests/test_order_model.py

import re
from decimal import Decimal

from django.test import TestCase

from orders.models import Order
from orders.services.exceptions import InvalidOrderTransition


def make_order(**kwargs):
    defaults = {
        "customer_name": "Anna",
        "customer_email": "anna@example.com",
        "total": Decimal("7.00"),
    }
    defaults.update(kwargs)
    return Order.objects.create(**defaults)


class OrderTransitionTests(TestCase):
    """
    GUARANTEES:
    - Orders get a public order number
    - pending -> processing -> completed, completed_at stamped
    - Completed orders cannot be cancelled; nothing returns to pending
    """

    def test_order_number_is_generated(self):
        order = make_order()
        self.assertRegex(order.order_no, re.compile(r"^ORD\d{8}-[0-9A-F]{8}$"))

    def test_happy_path(self):
        order = make_order()

        order.mark_processing()
        self.assertEqual(order.status, Order.STATUS_PROCESSING)

        order.mark_completed()
        self.assertEqual(order.status, Order.STATUS_COMPLETED)
        self.assertIsNotNone(order.completed_at)

    def test_pending_can_complete_directly(self):
        order = make_order()
        order.mark_completed()
        self.assertEqual(order.status, Order.STATUS_COMPLETED)

    def test_completed_cannot_be_cancelled(self):
        order = make_order()
        order.mark_completed()

        with self.assertRaises(InvalidOrderTransition):
            order.cancel()

    def test_cancelled_cannot_be_completed(self):
        order = make_order()
        order.cancel()

        with self.assertRaises(InvalidOrderTransition):
            order.mark_completed()

    def test_apply_status(self):
        order = make_order()

        self.assertTrue(order.apply_status("processing"))
        self.assertFalse(order.apply_status("processing"))

        with self.assertRaises(InvalidOrderTransition):
            order.apply_status("pending")
        with self.assertRaises(InvalidOrderTransition):
            order.apply_status("shipped")

    def test_status_display(self):
        self.assertEqual(make_order().get_status_display(), "Pending")

    def test_items_count(self):
        order = make_order(items=[{"quantity": 2}, {"quantity": 3}])
        self.assertEqual(order.items_count, 5)
