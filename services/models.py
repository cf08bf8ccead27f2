"""Services app models.

Defines the Service model: one entry of the IT-services catalog. The pricing
type decides which workflow applies: `fixed`/`hourly` services are ordered
directly, `quote` services go through a quote request.
"""

from django.conf import settings
from django.core.validators import MaxValueValidator, MinLengthValidator, MinValueValidator
from django.db import models


class Service(models.Model):
    """Represents a catalog service offered by the company."""

    class Category(models.TextChoices):
        WEB_DEVELOPMENT = "Web Development", "Web Development"
        MOBILE_DEVELOPMENT = "Mobile Development", "Mobile Development"
        CLOUD_SERVICES = "Cloud Services", "Cloud Services"
        CYBERSECURITY = "Cybersecurity", "Cybersecurity"
        DATA_ANALYTICS = "Data Analytics", "Data Analytics"
        IT_CONSULTING = "IT Consulting", "IT Consulting"
        DEVOPS = "DevOps", "DevOps"
        AI_ML = "AI/ML", "AI/ML"
        DATABASE_MANAGEMENT = "Database Management", "Database Management"
        NETWORK_INFRASTRUCTURE = "Network Infrastructure", "Network Infrastructure"
        TECHNICAL_SUPPORT = "Technical Support", "Technical Support"
        CUSTOM_SOFTWARE = "Custom Software", "Custom Software"

    class PricingType(models.TextChoices):
        FIXED = "fixed", "fixed"
        HOURLY = "hourly", "hourly"
        QUOTE = "quote", "quote"

    class BillingCycle(models.TextChoices):
        ONE_TIME = "one-time", "one-time"
        MONTHLY = "monthly", "monthly"
        YEARLY = "yearly", "yearly"

    class Difficulty(models.TextChoices):
        BASIC = "Basic", "Basic"
        INTERMEDIATE = "Intermediate", "Intermediate"
        ADVANCED = "Advanced", "Advanced"
        EXPERT = "Expert", "Expert"

    title = models.CharField(max_length=200, validators=[MinLengthValidator(5)])
    description = models.TextField(max_length=2000, validators=[MinLengthValidator(20)])
    category = models.CharField(max_length=50, choices=Category.choices)

    pricing_type = models.CharField(max_length=10, choices=PricingType.choices)
    pricing_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(0)],
    )
    pricing_currency = models.CharField(max_length=3, default="USD")
    billing_cycle = models.CharField(
        max_length=10, choices=BillingCycle.choices, default=BillingCycle.ONE_TIME
    )

    features = models.JSONField(default=list, blank=True)
    technologies = models.JSONField(default=list, blank=True)
    tags = models.JSONField(default=list, blank=True)
    delivery_time = models.CharField(max_length=100)
    difficulty = models.CharField(
        max_length=20, choices=Difficulty.choices, default=Difficulty.INTERMEDIATE
    )

    is_active = models.BooleanField(default=True)
    is_featured = models.BooleanField(default=False)

    rating_average = models.DecimalField(
        max_digits=3,
        decimal_places=2,
        default=0,
        validators=[MinValueValidator(0), MaxValueValidator(5)],
    )
    rating_count = models.PositiveIntegerField(default=0)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="services_created",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "services"
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["category", "is_active"], name="services_cat_active_idx"),
            models.Index(fields=["is_featured", "is_active"], name="services_featured_active_idx"),
            models.Index(fields=["pricing_amount"], name="services_price_idx"),
        ]

    def __str__(self):
        return f"{self.title} (#{self.pk})"

    @property
    def requires_quote(self) -> bool:
        return self.pricing_type == self.PricingType.QUOTE
