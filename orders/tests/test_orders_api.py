import re
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.urls import reverse
from rest_framework import status
from rest_framework.authtoken.models import Token
from rest_framework.test import APITestCase

from orders import lifecycle
from orders.models import Order
from profiles.models import Profile
from services.models import Service

User = get_user_model()


def create_user_with_role(username, role):
    user = User.objects.create_user(username, f"{username}@example.com", "pass1234")
    Profile.objects.create(user=user, role=role)
    return user, Token.objects.create(user=user)


def add_service(owner, pricing_type="fixed", amount="250.00", **extra):
    return Service.objects.create(
        title=extra.pop("title", "Network Setup"),
        description="Office network planning and installation.",
        category="Network Infrastructure",
        pricing_type=pricing_type,
        pricing_amount=amount,
        features=[{"name": "Cabling", "description": "", "included": True}],
        delivery_time="1 week",
        created_by=owner,
        **extra,
    )


def place_order(client, service, quantity=1):
    return lifecycle.create_order(
        client,
        service,
        quantity=quantity,
        requirements="Ten workstations and one printer.",
        contact_preference="email",
    )


class OrderCreateTests(APITestCase):
    def setUp(self):
        self.url = reverse("order-list")
        self.admin, self.admin_token = create_user_with_role("admin", "admin")
        self.cust, self.cust_token = create_user_with_role("cust", "client")
        self.service = add_service(self.admin)
        self.payload = {
            "service_id": self.service.id,
            "quantity": 2,
            "requirements": "Ten workstations and one printer.",
            "contact_preference": "email",
        }

    def auth(self, token):
        self.client.credentials(HTTP_AUTHORIZATION=f"Token {token.key}")

    def test_create_order_success_201(self):
        self.auth(self.cust_token)
        res = self.client.post(self.url, self.payload, format="json")
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["status"], "pending")
        self.assertEqual(res.data["client"], self.cust.id)
        self.assertEqual(Decimal(res.data["total_amount"]), Decimal("500.00"))
        self.assertEqual(Decimal(res.data["pricing"]["total"]), Decimal("500.00"))
        self.assertEqual(res.data["payment"]["status"], "pending")
        self.assertRegex(res.data["order_number"], r"^ORD-\d+-[0-9A-Z]{5}$")
        self.assertEqual(res.data["communication"], [])

    def test_total_not_recomputed_after_price_change(self):
        self.auth(self.cust_token)
        res = self.client.post(self.url, self.payload, format="json")
        self.service.pricing_amount = Decimal("999.00")
        self.service.save()
        order = Order.objects.get(id=res.data["id"])
        self.assertEqual(order.total_amount, Decimal("500.00"))

    def test_order_numbers_unique(self):
        self.auth(self.cust_token)
        numbers = {
            self.client.post(self.url, self.payload, format="json").data["order_number"]
            for _ in range(5)
        }
        self.assertEqual(len(numbers), 5)

    def test_quote_priced_service_400(self):
        quoted = add_service(self.admin, pricing_type="quote", amount=None, title="Custom Build")
        self.auth(self.cust_token)
        self.payload["service_id"] = quoted.id
        res = self.client.post(self.url, self.payload, format="json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("quote", res.data["message"].lower())
        self.assertFalse(Order.objects.exists())

    def test_missing_service_404(self):
        self.auth(self.cust_token)
        self.payload["service_id"] = 999999
        res = self.client.post(self.url, self.payload, format="json")
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

    def test_inactive_service_404(self):
        self.service.is_active = False
        self.service.save()
        self.auth(self.cust_token)
        res = self.client.post(self.url, self.payload, format="json")
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

    def test_validation_errors_listed_per_field(self):
        self.auth(self.cust_token)
        self.payload.update(quantity=0, requirements="short", contact_preference="fax")
        res = self.client.post(self.url, self.payload, format="json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        fields = {e["field"] for e in res.data["errors"]}
        self.assertTrue({"quantity", "requirements", "contact_preference"} <= fields)

    def test_admin_cannot_place_order_403(self):
        self.auth(self.admin_token)
        res = self.client.post(self.url, self.payload, format="json")
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

    def test_unauthenticated_401(self):
        res = self.client.post(self.url, self.payload, format="json")
        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertIn("message", res.data)


class OrderListAndDetailTests(APITestCase):
    def setUp(self):
        self.url = reverse("order-list")
        self.admin, self.admin_token = create_user_with_role("admin", "admin")
        self.cust, self.cust_token = create_user_with_role("cust", "client")
        self.other, self.other_token = create_user_with_role("other", "client")
        service = add_service(self.admin)
        self.mine = place_order(self.cust, service)
        self.mine_paid = place_order(self.cust, service)
        Order.objects.filter(pk=self.mine_paid.pk).update(status="payment_confirmed")
        self.foreign = place_order(self.other, service)

    def auth(self, token):
        self.client.credentials(HTTP_AUTHORIZATION=f"Token {token.key}")

    def test_client_sees_only_own_orders(self):
        self.auth(self.cust_token)
        res = self.client.get(self.url)
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        ids = {o["id"] for o in res.data["results"]}
        self.assertEqual(ids, {self.mine.id, self.mine_paid.id})
        self.assertEqual(res.data["pagination"]["total"], 2)

    def test_admin_sees_all_orders(self):
        self.auth(self.admin_token)
        res = self.client.get(self.url)
        self.assertEqual(res.data["pagination"]["total"], 3)

    def test_status_filter(self):
        self.auth(self.cust_token)
        res = self.client.get(self.url, {"status": "payment_confirmed"})
        self.assertEqual([o["id"] for o in res.data["results"]], [self.mine_paid.id])

    def test_unknown_status_filter_400(self):
        self.auth(self.cust_token)
        res = self.client.get(self.url, {"status": "shipped"})
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_bad_page_400(self):
        self.auth(self.cust_token)
        res = self.client.get(self.url, {"page": "0"})
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_foreign_order_detail_404(self):
        self.auth(self.cust_token)
        res = self.client.get(reverse("order-detail", args=[self.foreign.id]))
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

    def test_malformed_id_400(self):
        self.auth(self.cust_token)
        res = self.client.get(reverse("order-detail", args=["not-an-id"]))
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_internal_notes_hidden_from_client(self):
        lifecycle.add_communication(self.mine, self.admin, "Check the invoice first.", is_internal=True)
        lifecycle.add_communication(self.mine, self.admin, "We start on Monday.")
        self.auth(self.cust_token)
        res = self.client.get(reverse("order-detail", args=[self.mine.id]))
        messages = [c["message"] for c in res.data["communication"]]
        self.assertEqual(messages, ["We start on Monday."])

        self.auth(self.admin_token)
        res = self.client.get(reverse("order-detail", args=[self.mine.id]))
        self.assertEqual(len(res.data["communication"]), 2)

    def test_order_number_format(self):
        self.assertTrue(re.match(r"^ORD-\d+-[0-9A-Z]{5}$", self.mine.order_number))
