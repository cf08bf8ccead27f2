from decimal import Decimal
from unittest.mock import patch

import stripe
from django.contrib.auth import get_user_model
from django.test import override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.authtoken.models import Token
from rest_framework.test import APITestCase

from orders import lifecycle
from orders.models import Order
from payments import gateway
from profiles.models import Profile
from services.models import Service

User = get_user_model()


def create_user_with_role(username, role):
    user = User.objects.create_user(username, f"{username}@example.com", "pass1234")
    Profile.objects.create(user=user, role=role)
    return user, Token.objects.create(user=user)


def make_intent(status_value, intent_id="pi_test_1", **extra):
    values = {"id": intent_id, "status": status_value, "client_secret": f"{intent_id}_secret_x"}
    values.update(extra)
    return stripe.PaymentIntent.construct_from(values, "sk_test_dummy")


@override_settings(STRIPE_SECRET_KEY="sk_test_dummy")
class PaymentTestBase(APITestCase):
    def setUp(self):
        self.admin, _ = create_user_with_role("admin", "admin")
        self.cust, self.cust_token = create_user_with_role("cust", "client")
        self.other, self.other_token = create_user_with_role("other", "client")
        service = Service.objects.create(
            title="Server Hardening",
            description="Hardening of Linux servers against common attacks.",
            category="Cybersecurity",
            pricing_type="fixed",
            pricing_amount=Decimal("199.99"),
            features=[{"name": "Audit", "description": "", "included": True}],
            delivery_time="5 days",
            created_by=self.admin,
        )
        self.order = lifecycle.create_order(
            self.cust,
            service,
            quantity=1,
            requirements="Two Ubuntu servers behind nginx.",
            contact_preference="email",
        )
        self.auth(self.cust_token)

    def auth(self, token):
        self.client.credentials(HTTP_AUTHORIZATION=f"Token {token.key}")


class MinorUnitsTests(APITestCase):
    def test_rounds_half_up(self):
        self.assertEqual(gateway.to_minor_units(Decimal("12.345")), 1235)
        self.assertEqual(gateway.to_minor_units(Decimal("100")), 10000)


class CreateIntentTests(PaymentTestBase):
    @patch("payments.gateway.stripe.PaymentIntent.create")
    def test_creates_intent_and_stores_id(self, create):
        create.return_value = make_intent("requires_payment_method")
        res = self.client.post(reverse("payment-create-intent"), {"order_id": self.order.id}, format="json")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["payment_intent_id"], "pi_test_1")
        self.assertEqual(res.data["client_secret"], "pi_test_1_secret_x")
        kwargs = create.call_args.kwargs
        self.assertEqual(kwargs["amount"], self.order.total_amount * 100)
        self.assertEqual(kwargs["currency"], "usd")
        self.order.refresh_from_db()
        self.assertEqual(self.order.payment_intent_id, "pi_test_1")

    @patch("payments.gateway.stripe.PaymentIntent.create")
    def test_legacy_path(self, create):
        create.return_value = make_intent("requires_payment_method")
        res = self.client.post(reverse("payment-create-method"), {"order_id": self.order.id}, format="json")
        self.assertEqual(res.status_code, status.HTTP_200_OK)

    @patch("payments.gateway.stripe.PaymentIntent.create")
    def test_foreign_or_non_pending_order_404(self, create):
        self.auth(self.other_token)
        res = self.client.post(reverse("payment-create-intent"), {"order_id": self.order.id}, format="json")
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

        Order.objects.filter(pk=self.order.pk).update(status="approved")
        self.auth(self.cust_token)
        res = self.client.post(reverse("payment-create-intent"), {"order_id": self.order.id}, format="json")
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)
        create.assert_not_called()

    @patch("payments.gateway.stripe.PaymentIntent.create")
    def test_unreachable_processor_502(self, create):
        create.side_effect = stripe.APIConnectionError("network down")
        res = self.client.post(reverse("payment-create-intent"), {"order_id": self.order.id}, format="json")
        self.assertEqual(res.status_code, status.HTTP_502_BAD_GATEWAY)
        self.assertEqual(res.data["message"], "Payment processor unavailable.")
        self.order.refresh_from_db()
        self.assertEqual(self.order.payment_intent_id, "")

    @patch("payments.gateway.stripe.PaymentIntent.create")
    def test_rejected_request_400(self, create):
        create.side_effect = stripe.InvalidRequestError("Amount must be positive.", "amount")
        res = self.client.post(reverse("payment-create-intent"), {"order_id": self.order.id}, format="json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["message"], "Payment processing error.")

    @patch("payments.gateway.stripe.PaymentIntent.create")
    def test_http_client_reused_between_calls(self, create):
        create.return_value = make_intent("requires_payment_method")
        self.client.post(reverse("payment-create-intent"), {"order_id": self.order.id}, format="json")
        first = stripe.default_http_client
        self.client.post(reverse("payment-create-intent"), {"order_id": self.order.id}, format="json")
        self.assertIs(stripe.default_http_client, first)
        self.assertIs(gateway._http_client(gateway.settings.STRIPE_TIMEOUT_SECONDS), first)

    @override_settings(STRIPE_SECRET_KEY="")
    def test_unconfigured_processor_503(self):
        res = self.client.post(reverse("payment-create-intent"), {"order_id": self.order.id}, format="json")
        self.assertEqual(res.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)


class ConfirmPaymentTests(PaymentTestBase):
    def setUp(self):
        super().setUp()
        lifecycle.attach_intent(self.order, "pi_test_1")
        self.payload = {"order_id": self.order.id, "payment_intent_id": "pi_test_1"}

    @patch("payments.gateway.stripe.PaymentIntent.retrieve")
    def test_succeeded_intent_confirms_order(self, retrieve):
        retrieve.return_value = make_intent("succeeded", latest_charge="ch_123")
        res = self.client.post(reverse("payment-confirm"), self.payload, format="json")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["order"]["status"], "payment_confirmed")
        self.assertEqual(res.data["order"]["payment"]["status"], "completed")
        self.assertEqual(res.data["order"]["payment"]["transaction_id"], "ch_123")
        self.assertEqual(res.data["order"]["payment"]["method"], "stripe")

    @patch("payments.gateway.stripe.PaymentIntent.retrieve")
    def test_unfinished_intent_400(self, retrieve):
        retrieve.return_value = make_intent("processing")
        res = self.client.post(reverse("payment-confirm"), self.payload, format="json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, "pending")

    @patch("payments.gateway.stripe.PaymentIntent.retrieve")
    def test_intent_of_other_order_404(self, retrieve):
        retrieve.return_value = make_intent("succeeded", intent_id="pi_other")
        self.payload["payment_intent_id"] = "pi_other"
        res = self.client.post(reverse("payment-confirm"), self.payload, format="json")
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

    @patch("payments.gateway.stripe.PaymentIntent.retrieve")
    def test_second_confirm_400(self, retrieve):
        retrieve.return_value = make_intent("succeeded")
        self.client.post(reverse("payment-confirm"), self.payload, format="json")
        res = self.client.post(reverse("payment-confirm"), self.payload, format="json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)


class ProcessPaymentTests(PaymentTestBase):
    def setUp(self):
        super().setUp()
        self.payload = {"order_id": self.order.id, "payment_method_id": "pm_card_visa"}

    @patch("payments.gateway.stripe.PaymentIntent.create")
    def test_success_path(self, create):
        create.return_value = make_intent("succeeded")
        res = self.client.post(reverse("payment-process"), self.payload, format="json")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertTrue(res.data["success"])
        self.assertEqual(res.data["order"]["status"], "payment_confirmed")
        self.assertEqual(res.data["order"]["payment"]["transaction_id"], "pi_test_1")
        self.assertTrue(create.call_args.kwargs["confirm"])

    @patch("payments.gateway.stripe.PaymentIntent.create")
    def test_requires_action_path(self, create):
        create.return_value = make_intent("requires_action")
        res = self.client.post(reverse("payment-process"), self.payload, format="json")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertFalse(res.data["success"])
        self.assertTrue(res.data["requires_action"])
        self.assertEqual(res.data["payment_intent"]["client_secret"], "pi_test_1_secret_x")
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, "pending")
        self.assertEqual(self.order.payment_status, "pending")

    @patch("payments.gateway.stripe.PaymentIntent.create")
    def test_card_declined_path(self, create):
        create.side_effect = stripe.CardError("Your card was declined.", None, "card_declined")
        res = self.client.post(reverse("payment-process"), self.payload, format="json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(res.data["success"])
        self.assertIn("declined", res.data["message"])
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, "pending")
        self.assertEqual(self.order.payment_status, "failed")

    @patch("payments.gateway.stripe.PaymentIntent.create")
    def test_other_processor_error_mapped(self, create):
        create.side_effect = stripe.RateLimitError("slow down")
        res = self.client.post(reverse("payment-process"), self.payload, format="json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["message"], "Payment processing error.")
        self.order.refresh_from_db()
        self.assertEqual(self.order.payment_status, "pending")

    @patch("payments.gateway.stripe.PaymentIntent.create")
    def test_processor_outage_502(self, create):
        create.side_effect = stripe.APIConnectionError("network down")
        res = self.client.post(reverse("payment-process"), self.payload, format="json")
        self.assertEqual(res.status_code, status.HTTP_502_BAD_GATEWAY)
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, "pending")
        self.assertEqual(self.order.payment_status, "pending")

    def test_foreign_order_403(self):
        self.auth(self.other_token)
        res = self.client.post(reverse("payment-process"), self.payload, format="json")
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

    def test_non_pending_order_400(self):
        Order.objects.filter(pk=self.order.pk).update(status="payment_confirmed")
        res = self.client.post(reverse("payment-process"), self.payload, format="json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_missing_payment_method_400(self):
        res = self.client.post(reverse("payment-process"), {"order_id": self.order.id}, format="json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["errors"][0]["field"], "payment_method_id")
