"""Quotes app models.

A Quote is a client's request for a custom-priced Service. The client's
budget (`custom_amount`) and the admin's counter-offer (`quoted_amount`) are
separate fields and may coexist.
"""

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from common.models import CommunicationEntry
from services.models import Service


class Quote(models.Model):
    """Represents a quote request for a quote-priced service."""

    class Status(models.TextChoices):
        PENDING = "pending", "pending"
        ACCEPTED = "accepted", "accepted"
        REJECTED = "rejected", "rejected"
        EXPIRED = "expired", "expired"

    class ContactPreference(models.TextChoices):
        EMAIL = "email", "email"
        PHONE = "phone", "phone"
        CHAT = "chat", "chat"

    class Priority(models.TextChoices):
        LOW = "low", "low"
        MEDIUM = "medium", "medium"
        HIGH = "high", "high"
        URGENT = "urgent", "urgent"

    quote_number = models.CharField(max_length=40, unique=True)

    client = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="quotes_requested",
    )
    service = models.ForeignKey(
        Service,
        on_delete=models.PROTECT,
        related_name="quotes",
    )

    custom_amount = models.DecimalField(
        max_digits=12, decimal_places=2, validators=[MinValueValidator(1)]
    )
    requirements = models.TextField(max_length=5000)
    timeline = models.CharField(max_length=500, blank=True, default="")
    contact_preference = models.CharField(max_length=10, choices=ContactPreference.choices)
    additional_notes = models.TextField(max_length=1000, blank=True, default="")
    priority = models.CharField(max_length=10, choices=Priority.choices, default=Priority.MEDIUM)
    expires_at = models.DateTimeField()

    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)

    quoted_amount = models.DecimalField(
        max_digits=12, decimal_places=2, null=True, blank=True, validators=[MinValueValidator(0)]
    )
    admin_response = models.TextField(max_length=2000, blank=True, default="")
    responded_at = models.DateTimeField(null=True, blank=True)
    responded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="+",
        null=True,
        blank=True,
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("-created_at", "-id")
        indexes = [
            models.Index(fields=["client", "status"], name="quote_client_status_idx"),
            models.Index(fields=["status", "priority"], name="quote_status_priority_idx"),
        ]

    def __str__(self) -> str:
        return f"Quote<{self.quote_number} {self.status}>"

    @property
    def agreed_amount(self):
        """Amount an accepted quote converts at: the admin's quote, else the client's budget."""
        return self.quoted_amount if self.quoted_amount is not None else self.custom_amount


class QuoteCommunication(CommunicationEntry):
    """Append-only message attached to a quote."""

    quote = models.ForeignKey(Quote, on_delete=models.CASCADE, related_name="communication")

    class Meta(CommunicationEntry.Meta):
        pass
