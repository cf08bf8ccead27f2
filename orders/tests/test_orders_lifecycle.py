from django.core.exceptions import ValidationError as DjangoValidationError
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from common.exceptions import Conflict, InvalidState
from orders import lifecycle
from orders.models import Order, OrderCommunication
from .test_orders_api import add_service, create_user_with_role, place_order


class OrderActionTests(APITestCase):
    def setUp(self):
        self.admin, self.admin_token = create_user_with_role("admin", "admin")
        self.cust, self.cust_token = create_user_with_role("cust", "client")
        self.service = add_service(self.admin)
        self.order = place_order(self.cust, self.service)

    def auth(self, token):
        self.client.credentials(HTTP_AUTHORIZATION=f"Token {token.key}")

    def set_status(self, value):
        Order.objects.filter(pk=self.order.pk).update(status=value)
        self.order.refresh_from_db()

    def test_approve_requires_payment_confirmed(self):
        self.auth(self.admin_token)
        res = self.client.put(reverse("order-approve", args=[self.order.id]), {}, format="json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, "pending")
        self.assertFalse(self.order.communication.exists())

    def test_approve_success_logs_communication(self):
        self.set_status("payment_confirmed")
        self.auth(self.admin_token)
        res = self.client.put(
            reverse("order-approve", args=[self.order.id]), {"admin_notes": "Looks good."}, format="json"
        )
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["status"], "approved")
        self.assertEqual(res.data["approved_by"], self.admin.id)
        self.assertIsNotNone(res.data["approved_at"])
        self.assertEqual(res.data["communication"][-1]["message"], "Order approved. Looks good.")

    def test_approve_already_approved_400(self):
        self.set_status("approved")
        self.auth(self.admin_token)
        res = self.client.put(reverse("order-approve", args=[self.order.id]), {}, format="json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, "approved")
        self.assertIsNone(self.order.approved_at)

    def test_reject_cancelled_order_400(self):
        self.set_status("cancelled")
        self.auth(self.admin_token)
        res = self.client.put(
            reverse("order-reject", args=[self.order.id]),
            {"rejection_reason": "Changed our mind about it."},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, "cancelled")

    def test_client_cannot_approve_403(self):
        self.set_status("payment_confirmed")
        self.auth(self.cust_token)
        res = self.client.put(reverse("order-approve", args=[self.order.id]), {}, format="json")
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

    def test_reject_requires_reason(self):
        self.auth(self.admin_token)
        res = self.client.put(
            reverse("order-reject", args=[self.order.id]), {"rejection_reason": "no"}, format="json"
        )
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["errors"][0]["field"], "rejection_reason")

    def test_reject_success(self):
        self.auth(self.admin_token)
        reason = "Requirements are out of scope."
        res = self.client.put(
            reverse("order-reject", args=[self.order.id]), {"rejection_reason": reason}, format="json"
        )
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["status"], "rejected")
        self.assertEqual(res.data["rejection_reason"], reason)
        self.assertEqual(res.data["communication"][-1]["message"], f"Order rejected. Reason: {reason}")

    def test_reject_completed_order_400(self):
        self.set_status("completed")
        self.auth(self.admin_token)
        res = self.client.put(
            reverse("order-reject", args=[self.order.id]),
            {"rejection_reason": "Changed our mind about it."},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, "completed")

    def test_status_override_is_permissive(self):
        self.set_status("completed")
        self.auth(self.admin_token)
        res = self.client.put(
            reverse("order-status", args=[self.order.id]),
            {"status": "in_progress", "notes": "Reopened after call."},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["status"], "in_progress")
        self.assertEqual(
            res.data["communication"][-1]["message"], "Status updated to in_progress. Reopened after call."
        )

    def test_status_override_without_notes_adds_no_entry(self):
        self.auth(self.admin_token)
        res = self.client.put(reverse("order-status", args=[self.order.id]), {"status": "cancelled"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["communication"], [])

    def test_unknown_status_400(self):
        self.auth(self.admin_token)
        res = self.client.put(reverse("order-status", args=[self.order.id]), {"status": "lost"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_assign_to_admin(self):
        self.auth(self.admin_token)
        res = self.client.put(
            reverse("order-assign", args=[self.order.id]), {"assigned_to": self.admin.id}, format="json"
        )
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["assigned_to"], self.admin.id)

    def test_assign_to_client_400(self):
        self.auth(self.admin_token)
        res = self.client.put(
            reverse("order-assign", args=[self.order.id]), {"assigned_to": self.cust.id}, format="json"
        )
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_action_on_missing_order_404(self):
        self.auth(self.admin_token)
        res = self.client.put(reverse("order-approve", args=[999999]), {}, format="json")
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)


class OrderLifecycleTests(APITestCase):
    def setUp(self):
        self.admin, _ = create_user_with_role("admin", "admin")
        self.cust, _ = create_user_with_role("cust", "client")
        self.order = place_order(self.cust, add_service(self.admin))

    def test_confirm_payment_then_approve(self):
        lifecycle.confirm_payment(self.order, transaction_id="pi_123", intent_id="pi_123")
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, "payment_confirmed")
        self.assertEqual(self.order.payment_status, "completed")
        self.assertIsNotNone(self.order.paid_at)

        lifecycle.approve(self.order, self.admin)
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, "approved")

    def test_confirm_payment_twice_rejected(self):
        lifecycle.confirm_payment(self.order, transaction_id="pi_123")
        with self.assertRaises(InvalidState):
            lifecycle.confirm_payment(self.order, transaction_id="pi_456")

    def test_stale_status_raises_conflict(self):
        Order.objects.filter(pk=self.order.pk).update(status="payment_confirmed")
        stale = Order.objects.get(pk=self.order.pk)
        Order.objects.filter(pk=self.order.pk).update(status="cancelled")
        with self.assertRaises(Conflict):
            lifecycle.approve(stale, self.admin, "too late")
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, "cancelled")
        self.assertFalse(self.order.communication.exists())

    def test_approve_only_from_payment_confirmed(self):
        for value in Order.Status.values:
            with self.subTest(status=value):
                order = place_order(self.cust, self.order.service)
                Order.objects.filter(pk=order.pk).update(status=value)
                order.refresh_from_db()
                if value == "payment_confirmed":
                    lifecycle.approve(order, self.admin)
                    order.refresh_from_db()
                    self.assertEqual(order.status, "approved")
                    self.assertEqual(order.approved_by, self.admin)
                    continue
                with self.assertRaises(InvalidState):
                    lifecycle.approve(order, self.admin, "should not stick")
                order.refresh_from_db()
                self.assertEqual(order.status, value)
                self.assertIsNone(order.approved_by)
                self.assertEqual(order.admin_notes, "")
                self.assertFalse(order.communication.exists())

    def test_reject_refused_only_when_completed_or_cancelled(self):
        reason = "Budget was withdrawn by the client."
        for value in Order.Status.values:
            with self.subTest(status=value):
                order = place_order(self.cust, self.order.service)
                Order.objects.filter(pk=order.pk).update(status=value)
                order.refresh_from_db()
                if value in ("completed", "cancelled"):
                    with self.assertRaises(InvalidState):
                        lifecycle.reject(order, self.admin, reason)
                    order.refresh_from_db()
                    self.assertEqual(order.status, value)
                    self.assertEqual(order.rejection_reason, "")
                    self.assertFalse(order.communication.exists())
                    continue
                lifecycle.reject(order, self.admin, reason)
                order.refresh_from_db()
                self.assertEqual(order.status, "rejected")
                self.assertEqual(order.rejected_by, self.admin)
                self.assertEqual(order.rejection_reason, reason)
                self.assertEqual(order.communication.count(), 1)

    def test_payment_failure_keeps_status(self):
        lifecycle.record_payment_failure(self.order, "pi_failed")
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, "pending")
        self.assertEqual(self.order.payment_status, "failed")

    def test_communication_is_append_only(self):
        entry = lifecycle.add_communication(self.order, self.cust, "Hello there")
        entry.message = "Edited"
        with self.assertRaises(DjangoValidationError):
            entry.save()
        with self.assertRaises(DjangoValidationError):
            entry.delete()
        self.assertEqual(OrderCommunication.objects.get(pk=entry.pk).message, "Hello there")


class OrderCommunicationTests(APITestCase):
    def setUp(self):
        self.admin, self.admin_token = create_user_with_role("admin", "admin")
        self.cust, self.cust_token = create_user_with_role("cust", "client")
        self.other, self.other_token = create_user_with_role("other", "client")
        self.order = place_order(self.cust, add_service(self.admin))
        self.url = reverse("order-communication", args=[self.order.id])

    def auth(self, token):
        self.client.credentials(HTTP_AUTHORIZATION=f"Token {token.key}")

    def test_owner_appends_message(self):
        self.auth(self.cust_token)
        res = self.client.post(self.url, {"message": "When can you start?"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["author"], self.cust.id)
        self.assertFalse(res.data["is_internal"])
        self.assertEqual(self.order.communication.count(), 1)

    def test_entries_keep_order(self):
        self.auth(self.cust_token)
        self.client.post(self.url, {"message": "first"}, format="json")
        self.auth(self.admin_token)
        self.client.post(self.url, {"message": "second"}, format="json")
        messages = list(self.order.communication.values_list("message", flat=True))
        self.assertEqual(messages, ["first", "second"])

    def test_other_client_403(self):
        self.auth(self.other_token)
        res = self.client.post(self.url, {"message": "Hi"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

    def test_client_internal_note_403(self):
        self.auth(self.cust_token)
        res = self.client.post(self.url, {"message": "psst", "is_internal": True}, format="json")
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(self.order.communication.exists())

    def test_admin_internal_note(self):
        self.auth(self.admin_token)
        res = self.client.post(self.url, {"message": "Call them.", "is_internal": True}, format="json")
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertTrue(res.data["is_internal"])

    def test_empty_and_too_long_message_400(self):
        self.auth(self.cust_token)
        res = self.client.post(self.url, {"message": ""}, format="json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        res = self.client.post(self.url, {"message": "x" * 2001}, format="json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_missing_order_404(self):
        self.auth(self.cust_token)
        res = self.client.post(reverse("order-communication", args=[999999]), {"message": "Hi"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)
