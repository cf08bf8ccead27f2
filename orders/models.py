"""Orders app models.

Defines the Order model and its communication log. An Order is placed by a
client against a fixed- or hourly-priced Service; its total is computed once
at creation from the service price and quantity and never recomputed.
"""

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from common.models import CommunicationEntry
from services.models import Service


class Order(models.Model):
    """Represents a client's order for a catalog service."""

    class Status(models.TextChoices):
        PENDING = "pending", "pending"
        PAYMENT_CONFIRMED = "payment_confirmed", "payment_confirmed"
        APPROVED = "approved", "approved"
        REJECTED = "rejected", "rejected"
        IN_PROGRESS = "in_progress", "in_progress"
        UNDER_REVIEW = "under_review", "under_review"
        COMPLETED = "completed", "completed"
        CANCELLED = "cancelled", "cancelled"
        REFUNDED = "refunded", "refunded"

    class ContactPreference(models.TextChoices):
        EMAIL = "email", "email"
        PHONE = "phone", "phone"
        CHAT = "chat", "chat"

    class PaymentStatus(models.TextChoices):
        PENDING = "pending", "pending"
        COMPLETED = "completed", "completed"
        FAILED = "failed", "failed"
        REFUNDED = "refunded", "refunded"

    class PaymentMethod(models.TextChoices):
        STRIPE = "stripe", "stripe"
        PAYPAL = "paypal", "paypal"

    order_number = models.CharField(max_length=40, unique=True)

    client = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="orders_placed",
    )
    service = models.ForeignKey(
        Service,
        on_delete=models.PROTECT,
        related_name="orders",
    )
    assigned_to = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="orders_assigned",
        null=True,
        blank=True,
    )
    source_quote = models.OneToOneField(
        "quotes.Quote",
        on_delete=models.SET_NULL,
        related_name="converted_order",
        null=True,
        blank=True,
    )

    quantity = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    total_amount = models.DecimalField(
        max_digits=12, decimal_places=2, validators=[MinValueValidator(0)]
    )
    pricing_subtotal = models.DecimalField(max_digits=12, decimal_places=2)
    pricing_tax = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    pricing_total = models.DecimalField(max_digits=12, decimal_places=2)
    pricing_currency = models.CharField(max_length=3, default="USD")

    requirements = models.TextField(max_length=5000)
    timeline = models.CharField(max_length=500, blank=True, default="")
    contact_preference = models.CharField(max_length=10, choices=ContactPreference.choices)
    additional_notes = models.TextField(max_length=1000, blank=True, default="")

    status = models.CharField(
        max_length=20, choices=Status.choices, default=Status.PENDING
    )

    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="+",
        null=True,
        blank=True,
    )
    approved_at = models.DateTimeField(null=True, blank=True)
    admin_notes = models.TextField(max_length=1000, blank=True, default="")
    rejected_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="+",
        null=True,
        blank=True,
    )
    rejected_at = models.DateTimeField(null=True, blank=True)
    rejection_reason = models.CharField(max_length=500, blank=True, default="")

    payment_status = models.CharField(
        max_length=20, choices=PaymentStatus.choices, default=PaymentStatus.PENDING
    )
    payment_method = models.CharField(
        max_length=20, choices=PaymentMethod.choices, blank=True, default=""
    )
    payment_transaction_id = models.CharField(max_length=255, blank=True, default="")
    payment_intent_id = models.CharField(max_length=255, blank=True, default="", db_index=True)
    paid_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("-created_at", "-id")
        indexes = [
            models.Index(fields=["client", "status"], name="order_client_status_idx"),
            models.Index(fields=["payment_status"], name="order_payment_status_idx"),
            models.Index(fields=["assigned_to", "status"], name="order_assignee_status_idx"),
        ]

    def __str__(self) -> str:
        """Readable representation for admin and debugging."""
        return f"Order<{self.order_number} {self.status}>"


class OrderCommunication(CommunicationEntry):
    """Append-only message attached to an order."""

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="communication")

    class Meta(CommunicationEntry.Meta):
        pass
