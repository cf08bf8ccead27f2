"""Common abstract models.

`CommunicationEntry` is the shared shape of the message log attached to
orders and quotes. Entries are append-only: once saved they cannot be
changed or deleted through the model API.
"""

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinLengthValidator
from django.db import models


class CommunicationEntry(models.Model):
    """One message in an order/quote communication log."""

    author = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="+",
    )
    message = models.TextField(max_length=2000, validators=[MinLengthValidator(1)])
    is_internal = models.BooleanField(default=False)
    timestamp = models.DateTimeField(auto_now_add=True)

    class Meta:
        abstract = True
        ordering = ("timestamp", "id")

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("Communication entries are append-only.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("Communication entries are append-only.")

    def __str__(self) -> str:
        return f"{self.__class__.__name__}<{self.id} by {self.author_id}>"
