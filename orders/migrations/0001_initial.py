import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("services", "0001_initial"),
        ("quotes", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Order",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("order_number", models.CharField(max_length=40, unique=True)),
                ("quantity", models.PositiveIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1)])),
                (
                    "total_amount",
                    models.DecimalField(
                        decimal_places=2, max_digits=12, validators=[django.core.validators.MinValueValidator(0)]
                    ),
                ),
                ("pricing_subtotal", models.DecimalField(decimal_places=2, max_digits=12)),
                ("pricing_tax", models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ("pricing_total", models.DecimalField(decimal_places=2, max_digits=12)),
                ("pricing_currency", models.CharField(default="USD", max_length=3)),
                ("requirements", models.TextField(max_length=5000)),
                ("timeline", models.CharField(blank=True, default="", max_length=500)),
                (
                    "contact_preference",
                    models.CharField(choices=[("email", "email"), ("phone", "phone"), ("chat", "chat")], max_length=10),
                ),
                ("additional_notes", models.TextField(blank=True, default="", max_length=1000)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "pending"),
                            ("payment_confirmed", "payment_confirmed"),
                            ("approved", "approved"),
                            ("rejected", "rejected"),
                            ("in_progress", "in_progress"),
                            ("under_review", "under_review"),
                            ("completed", "completed"),
                            ("cancelled", "cancelled"),
                            ("refunded", "refunded"),
                        ],
                        default="pending",
                        max_length=20,
                    ),
                ),
                ("approved_at", models.DateTimeField(blank=True, null=True)),
                ("admin_notes", models.TextField(blank=True, default="", max_length=1000)),
                ("rejected_at", models.DateTimeField(blank=True, null=True)),
                ("rejection_reason", models.CharField(blank=True, default="", max_length=500)),
                (
                    "payment_status",
                    models.CharField(
                        choices=[
                            ("pending", "pending"),
                            ("completed", "completed"),
                            ("failed", "failed"),
                            ("refunded", "refunded"),
                        ],
                        default="pending",
                        max_length=20,
                    ),
                ),
                (
                    "payment_method",
                    models.CharField(
                        blank=True, choices=[("stripe", "stripe"), ("paypal", "paypal")], default="", max_length=20
                    ),
                ),
                ("payment_transaction_id", models.CharField(blank=True, default="", max_length=255)),
                ("payment_intent_id", models.CharField(blank=True, db_index=True, default="", max_length=255)),
                ("paid_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "approved_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "assigned_to",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="orders_assigned",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "client",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="orders_placed",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "rejected_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "service",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT, related_name="orders", to="services.service"
                    ),
                ),
                (
                    "source_quote",
                    models.OneToOneField(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="converted_order",
                        to="quotes.quote",
                    ),
                ),
            ],
            options={
                "ordering": ("-created_at", "-id"),
                "indexes": [
                    models.Index(fields=["client", "status"], name="order_client_status_idx"),
                    models.Index(fields=["payment_status"], name="order_payment_status_idx"),
                    models.Index(fields=["assigned_to", "status"], name="order_assignee_status_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="OrderCommunication",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("message", models.TextField(max_length=2000, validators=[django.core.validators.MinLengthValidator(1)])),
                ("is_internal", models.BooleanField(default=False)),
                ("timestamp", models.DateTimeField(auto_now_add=True)),
                (
                    "author",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT, related_name="+", to=settings.AUTH_USER_MODEL
                    ),
                ),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="communication", to="orders.order"
                    ),
                ),
            ],
            options={
                "ordering": ("timestamp", "id"),
                "abstract": False,
            },
        ),
    ]
