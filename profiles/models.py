"""Profiles app models.

Defines the Profile model that extends the base user with the portal role
(client/admin) and contact metadata. String fields default to empty strings
to avoid nulls in API responses.
"""

from django.db import models
from django.conf import settings


class Profile(models.Model):
    """
    Profile for a single user.

    The role decides which side of the order/quote workflows a user is on:
    clients place orders and request quotes, admins approve, reject and
    respond. A profile is created at most once per user (OneToOne relationship).
    """

    class Role(models.TextChoices):
        CLIENT = "client", "client"
        ADMIN = "admin", "admin"

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="profile",
    )
    role = models.CharField(max_length=20, choices=Role.choices, default=Role.CLIENT)
    company = models.CharField(max_length=200, blank=True, default="")
    phone = models.CharField(max_length=50, blank=True, default="")
    avatar = models.CharField(max_length=255, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        """Readable representation for admin and debugging."""
        return f"Profile<{self.user_id}:{self.user.username} {self.role}>"
