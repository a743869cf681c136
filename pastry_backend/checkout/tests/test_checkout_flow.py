# checkout/tests/test_checkout_flow.py

from datetime import timedelta
from decimal import Decimal
from io import StringIO
from unittest.mock import patch

from django.conf import settings
from django.core.management import call_command
from django.test import SimpleTestCase, TestCase, TransactionTestCase
from django.utils import timezone
from rest_framework.test import APIClient

from checkout.models import CheckoutSession
from checkout.services.checkout_extension import process_checkout_session
from checkout.services.checkout_orchestrator import (
    CheckoutGuard,
    checkout_guard,
    expire_stale_sessions,
    start_checkout,
    wait_for_redirect_url,
)
from checkout.services.exceptions import (
    BasketValidationError,
    CheckoutFailedError,
    CheckoutInProgressError,
    CheckoutTimeoutError,
    InvalidSessionTransition,
    PaymentProviderError,
)
from products.models import Product

GATEWAY = "checkout.services.stripe_gateway.create_checkout_session"
PAY_URL = "https://checkout.stripe.com/c/pay/cs_test_1"


def _checkout_settings(**overrides):
    return {**settings.CHECKOUT, **overrides}


class FakeClock:
    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


class CheckoutGuardTests(SimpleTestCase):
    """
    GUARANTEES:
    - One in-flight checkout per (case-insensitive) key
    - Keys are released even when the checkout raises
    """

    def test_second_hold_for_same_key_is_rejected(self):
        guard = CheckoutGuard()
        with guard.hold("Anna@Example.com"):
            self.assertTrue(guard.is_held("anna@example.com"))
            with self.assertRaisesMessage(CheckoutInProgressError, "Checkout already in progress"):
                with guard.hold("anna@example.com"):
                    pass
            with guard.hold("marco@example.com"):
                pass
        self.assertFalse(guard.is_held("anna@example.com"))

    def test_key_released_after_error(self):
        guard = CheckoutGuard()
        with self.assertRaises(RuntimeError):
            with guard.hold("anna@example.com"):
                raise RuntimeError("boom")

        with guard.hold("anna@example.com"):
            pass


class CheckoutSessionModelTests(TestCase):
    """
    GUARANTEES:
    - Terminal sessions are never re-opened
    - A provider completion still lands on a locally expired session
    """

    def _session(self, status=CheckoutSession.STATUS_OPEN):
        # Non-pending rows are not picked up by the integration
        return CheckoutSession.objects.create(customer_email="anna@example.com", status=status)

    def test_open_needs_url(self):
        session = CheckoutSession(customer_email="anna@example.com")
        with self.assertRaises(InvalidSessionTransition):
            session.mark_open(url="  ")
        session.mark_open(url=PAY_URL, provider_session_id="cs_test_1")
        self.assertEqual(session.status, CheckoutSession.STATUS_OPEN)

    def test_terminal_sessions_do_not_move(self):
        for terminal in CheckoutSession.TERMINAL_STATUSES:
            session = self._session(terminal)
            with self.subTest(status=terminal):
                with self.assertRaises(InvalidSessionTransition):
                    session.mark_open(url=PAY_URL)
                with self.assertRaises(InvalidSessionTransition):
                    session.mark_failed("late error")

    def test_expired_session_can_still_complete(self):
        session = self._session(CheckoutSession.STATUS_EXPIRED)
        session.mark_complete()
        self.assertEqual(session.status, CheckoutSession.STATUS_COMPLETE)
        self.assertIsNotNone(session.completed_at)

        with self.assertRaises(InvalidSessionTransition):
            session.mark_complete()


class StartCheckoutTests(TestCase):
    """
    GUARANTEES:
    - The session snapshot is priced from the catalog
    - Provider line items carry amounts in cents
    - With the integration inline, the row is enriched before the call returns
    """

    def setUp(self):
        self.cannolo = Product.objects.create(name="Cannolo", price=Decimal("3.50"))
        self.customer = {"name": "Anna", "email": "anna@example.com"}

    def _start(self, **kwargs):
        return start_checkout(
            items=[{"product_id": str(self.cannolo.id), "quantity": 2}],
            customer=self.customer,
            success_url="https://shop.example.com/orders",
            cancel_url="https://shop.example.com/basket",
            **kwargs,
        )

    def test_session_written_and_opened_inline(self):
        with patch(GATEWAY, return_value={"id": "cs_test_1", "url": PAY_URL}) as create:
            session = self._start(client_reference="ref-1")

        session.refresh_from_db()
        self.assertEqual(session.status, CheckoutSession.STATUS_OPEN)
        self.assertEqual(session.url, PAY_URL)
        self.assertEqual(session.provider_session_id, "cs_test_1")
        self.assertEqual(session.amount_total, Decimal("7.00"))
        self.assertEqual(session.client_reference, "ref-1")
        self.assertEqual(session.line_items[0]["price_data"]["unit_amount"], 350)
        self.assertEqual(session.line_items[0]["quantity"], 2)

        kwargs = create.call_args.kwargs
        self.assertEqual(kwargs["client_reference_id"], str(session.id))
        self.assertEqual(kwargs["customer_email"], "anna@example.com")

    def test_provider_error_is_written_back(self):
        with patch(GATEWAY, side_effect=PaymentProviderError("Your card was declined")):
            session = self._start()

        session.refresh_from_db()
        self.assertEqual(session.status, CheckoutSession.STATUS_FAILED)
        self.assertEqual(session.error, "Your card was declined")

    def test_zero_total_is_rejected(self):
        free = Product.objects.create(name="Assaggio", price=None)
        with self.assertRaisesMessage(BasketValidationError, "Basket total must be greater than 0"):
            start_checkout(
                items=[{"product_id": str(free.id), "quantity": 1}],
                customer=self.customer,
                success_url="https://shop.example.com/orders",
                cancel_url="https://shop.example.com/basket",
            )
        self.assertFalse(CheckoutSession.objects.exists())

    def test_extension_off_leaves_session_pending(self):
        with self.settings(CHECKOUT=_checkout_settings(EXTENSION_MODE="off")):
            with patch(GATEWAY) as create:
                session = self._start()

        create.assert_not_called()
        session.refresh_from_db()
        self.assertEqual(session.status, CheckoutSession.STATUS_PENDING)

    def test_processing_twice_is_harmless(self):
        with patch(GATEWAY, return_value={"id": "cs_test_1", "url": PAY_URL}) as create:
            session = self._start()
            process_checkout_session(session.id)

        self.assertEqual(create.call_count, 1)


class WaitForRedirectUrlTests(TestCase):
    """
    GUARANTEES:
    - Returns as soon as a URL is written
    - Written errors and terminal states fail fast
    - Gives up after the timeout, leaving the session as it was
    """

    def setUp(self):
        self.clock = FakeClock()

    def _pending(self):
        with self.settings(CHECKOUT=_checkout_settings(EXTENSION_MODE="off")):
            return CheckoutSession.objects.create(customer_email="anna@example.com")

    def _wait(self, session_id, timeout=1.0):
        return wait_for_redirect_url(
            session_id,
            timeout=timeout,
            poll_interval=0.25,
            clock=self.clock,
            sleep=self.clock.sleep,
        )

    def test_returns_url_written_while_waiting(self):
        session = self._pending()

        def sleep(seconds):
            CheckoutSession.objects.filter(id=session.id).update(
                status=CheckoutSession.STATUS_OPEN, url=PAY_URL
            )
            self.clock.sleep(seconds)

        url = wait_for_redirect_url(
            session.id, timeout=1.0, poll_interval=0.25, clock=self.clock, sleep=sleep
        )
        self.assertEqual(url, PAY_URL)
        self.assertEqual(self.clock.now, 0.25)

    def test_written_error_fails(self):
        session = self._pending()
        CheckoutSession.objects.filter(id=session.id).update(
            status=CheckoutSession.STATUS_FAILED, error="No such price"
        )
        with self.assertRaisesMessage(CheckoutFailedError, "No such price"):
            self._wait(session.id)

    def test_expired_session_fails(self):
        session = self._pending()
        CheckoutSession.objects.filter(id=session.id).update(status=CheckoutSession.STATUS_EXPIRED)
        with self.assertRaisesMessage(CheckoutFailedError, "Checkout session is expired"):
            self._wait(session.id)

    def test_missing_session_fails(self):
        session = self._pending()
        session_id = session.id
        session.delete()
        with self.assertRaisesMessage(CheckoutFailedError, "Checkout session not found"):
            self._wait(session_id)

    def test_times_out(self):
        session = self._pending()
        with self.assertRaisesMessage(CheckoutTimeoutError, "Timed out waiting for the payment page"):
            self._wait(session.id, timeout=0.5)

        self.assertEqual(self.clock.sleeps, [0.25, 0.25])
        session.refresh_from_db()
        self.assertEqual(session.status, CheckoutSession.STATUS_PENDING)


class ExpireStaleSessionsTests(TestCase):
    """
    GUARANTEES:
    - Only pending/open sessions older than the cutoff expire
    - The management command reports the count
    """

    def setUp(self):
        now = timezone.now()
        self.old_pending = CheckoutSession.objects.create(
            status=CheckoutSession.STATUS_OPEN, created_at=now - timedelta(hours=3)
        )
        CheckoutSession.objects.filter(id=self.old_pending.id).update(status=CheckoutSession.STATUS_PENDING)
        self.old_open = CheckoutSession.objects.create(
            status=CheckoutSession.STATUS_OPEN, created_at=now - timedelta(hours=2)
        )
        self.old_complete = CheckoutSession.objects.create(
            status=CheckoutSession.STATUS_COMPLETE, created_at=now - timedelta(hours=2)
        )
        self.fresh_open = CheckoutSession.objects.create(status=CheckoutSession.STATUS_OPEN)

    def test_expire_stale_sessions(self):
        expired = expire_stale_sessions(older_than=timedelta(minutes=60))

        self.assertEqual(expired, 2)
        statuses = dict(CheckoutSession.objects.values_list("id", "status"))
        self.assertEqual(statuses[self.old_pending.id], CheckoutSession.STATUS_EXPIRED)
        self.assertEqual(statuses[self.old_open.id], CheckoutSession.STATUS_EXPIRED)
        self.assertEqual(statuses[self.old_complete.id], CheckoutSession.STATUS_COMPLETE)
        self.assertEqual(statuses[self.fresh_open.id], CheckoutSession.STATUS_OPEN)

    def test_command(self):
        out = StringIO()
        call_command("expire_checkout_sessions", "--minutes", "150", stdout=out)

        self.assertIn("Expired 1 checkout session(s).", out.getvalue())
        self.old_pending.refresh_from_db()
        self.assertEqual(self.old_pending.status, CheckoutSession.STATUS_EXPIRED)


class CheckoutApiTests(TestCase):
    """
    POST /api/checkout/ contract.

    GUARANTEES:
    - 200 with the hosted page URL once the integration writes it
    - 202 without waiting
    - 409 while the same checkout is in flight
    - 502 with the provider error, 504 when nothing arrives in time
    """

    url = "/api/checkout/"

    def setUp(self):
        self.client = APIClient()
        self.cannolo = Product.objects.create(name="Cannolo", price=Decimal("3.50"))

    def _payload(self, **overrides):
        payload = {
            "items": [{"id": str(self.cannolo.id), "quantity": 2}],
            "customer": {"name": "Anna", "email": "anna@example.com"},
            "successUrl": "https://shop.example.com/orders",
            "cancelUrl": "https://shop.example.com/basket",
        }
        payload.update(overrides)
        return payload

    def test_checkout_returns_redirect_url(self):
        with patch(GATEWAY, return_value={"id": "cs_test_1", "url": PAY_URL}):
            res = self.client.post(self.url, self._payload(), format="json")

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["url"], PAY_URL)
        session = CheckoutSession.objects.get(id=res.data["sessionId"])
        self.assertEqual(session.status, CheckoutSession.STATUS_OPEN)
        self.assertFalse(checkout_guard.is_held("anna@example.com"))

    def test_checkout_without_waiting(self):
        with patch(GATEWAY, return_value={"id": "cs_test_1", "url": PAY_URL}):
            res = self.client.post(self.url, self._payload(wait=False), format="json")

        self.assertEqual(res.status_code, 202)
        self.assertEqual(res.data["status"], CheckoutSession.STATUS_OPEN)

        poll = self.client.get(f"/api/checkout/sessions/{res.data['sessionId']}/")
        self.assertEqual(poll.status_code, 200)
        self.assertEqual(poll.data["url"], PAY_URL)

    def test_default_urls_point_at_frontend(self):
        payload = self._payload()
        del payload["successUrl"], payload["cancelUrl"]

        with patch(GATEWAY, return_value={"id": "cs_test_1", "url": PAY_URL}):
            res = self.client.post(self.url, payload, format="json")

        session = CheckoutSession.objects.get(id=res.data["sessionId"])
        base = settings.FRONTEND_BASE_URL.rstrip("/")
        self.assertEqual(session.success_url, f"{base}/orders?session_id={{CHECKOUT_SESSION_ID}}")
        self.assertEqual(session.cancel_url, f"{base}/basket")

    def test_duplicate_in_flight_checkout_conflicts(self):
        with checkout_guard.hold("anna@example.com"):
            with patch(GATEWAY) as create:
                res = self.client.post(self.url, self._payload(), format="json")

        self.assertEqual(res.status_code, 409)
        self.assertEqual(res.data["error"], "Checkout already in progress")
        create.assert_not_called()
        self.assertFalse(CheckoutSession.objects.exists())

    def test_idempotency_key_is_the_guard_key(self):
        with checkout_guard.hold("basket-42"):
            res = self.client.post(
                self.url, self._payload(), format="json", HTTP_IDEMPOTENCY_KEY="basket-42"
            )
        self.assertEqual(res.status_code, 409)

    def test_validation_errors(self):
        res = self.client.post(self.url, self._payload(items=[]), format="json")
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["error"], "Items are required")

        res = self.client.post(
            self.url, self._payload(customer={"name": "Anna"}), format="json"
        )
        self.assertEqual(res.status_code, 400)

    def test_provider_error_returns_502(self):
        with patch(GATEWAY, side_effect=PaymentProviderError("Your card was declined")):
            res = self.client.post(self.url, self._payload(), format="json")

        self.assertEqual(res.status_code, 502)
        self.assertEqual(res.data["error"], "Your card was declined")
        session = CheckoutSession.objects.get(id=res.data["sessionId"])
        self.assertEqual(session.status, CheckoutSession.STATUS_FAILED)

    def test_missing_secret_returns_502(self):
        res = self.client.post(self.url, self._payload(), format="json")

        self.assertEqual(res.status_code, 502)
        self.assertEqual(res.data["error"], "Stripe secret key not configured")

    def test_timeout_returns_504_and_session_stays_pending(self):
        with self.settings(CHECKOUT=_checkout_settings(EXTENSION_MODE="off", TIMEOUT_SECONDS=0.05)):
            res = self.client.post(self.url, self._payload(), format="json")

        self.assertEqual(res.status_code, 504)
        self.assertEqual(res.data["error"], "Timed out waiting for the payment page")
        session = CheckoutSession.objects.get(id=res.data["sessionId"])
        self.assertEqual(session.status, CheckoutSession.STATUS_PENDING)
        self.assertFalse(checkout_guard.is_held("anna@example.com"))

    def test_unknown_session_status_is_404(self):
        res = self.client.get("/api/checkout/sessions/00000000-0000-0000-0000-000000000000/")
        self.assertEqual(res.status_code, 404)


class ThreadedCheckoutApiTests(TransactionTestCase):
    """
    POST /api/checkout/ with the integration on a worker thread (the
    production mode).

    GUARANTEES:
    - The worker sees the committed row and writes the URL back
    - A provider error written by the worker surfaces as 502
    """

    url = "/api/checkout/"

    def setUp(self):
        self.client = APIClient()
        self.cannolo = Product.objects.create(name="Cannolo", price=Decimal("3.50"))

    def _post(self):
        payload = {
            "items": [{"id": str(self.cannolo.id), "quantity": 2}],
            "customer": {"name": "Anna", "email": "anna@example.com"},
            "successUrl": "https://shop.example.com/orders",
            "cancelUrl": "https://shop.example.com/basket",
        }
        threaded = _checkout_settings(EXTENSION_MODE="thread", TIMEOUT_SECONDS=5.0)
        with self.settings(CHECKOUT=threaded):
            return self.client.post(self.url, payload, format="json")

    def test_worker_thread_writes_redirect_url(self):
        with patch(GATEWAY, return_value={"id": "cs_test_1", "url": PAY_URL}) as create:
            res = self._post()

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["url"], PAY_URL)
        create.assert_called_once()

        session = CheckoutSession.objects.get(id=res.data["sessionId"])
        self.assertEqual(session.status, CheckoutSession.STATUS_OPEN)
        self.assertEqual(session.provider_session_id, "cs_test_1")
        self.assertFalse(checkout_guard.is_held("anna@example.com"))

    def test_worker_thread_provider_error_returns_502(self):
        with patch(GATEWAY, side_effect=PaymentProviderError("Your card was declined")):
            res = self._post()

        self.assertEqual(res.status_code, 502)
        self.assertIn("Your card was declined", res.data["error"])

        session = CheckoutSession.objects.get()
        self.assertEqual(session.status, CheckoutSession.STATUS_FAILED)
        self.assertFalse(checkout_guard.is_held("anna@example.com"))
