import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Service",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=200, validators=[django.core.validators.MinLengthValidator(5)])),
                ("description", models.TextField(max_length=2000, validators=[django.core.validators.MinLengthValidator(20)])),
                (
                    "category",
                    models.CharField(
                        choices=[
                            ("Web Development", "Web Development"),
                            ("Mobile Development", "Mobile Development"),
                            ("Cloud Services", "Cloud Services"),
                            ("Cybersecurity", "Cybersecurity"),
                            ("Data Analytics", "Data Analytics"),
                            ("IT Consulting", "IT Consulting"),
                            ("DevOps", "DevOps"),
                            ("AI/ML", "AI/ML"),
                            ("Database Management", "Database Management"),
                            ("Network Infrastructure", "Network Infrastructure"),
                            ("Technical Support", "Technical Support"),
                            ("Custom Software", "Custom Software"),
                        ],
                        max_length=50,
                    ),
                ),
                ("pricing_type", models.CharField(choices=[("fixed", "fixed"), ("hourly", "hourly"), ("quote", "quote")], max_length=10)),
                (
                    "pricing_amount",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        max_digits=12,
                        null=True,
                        validators=[django.core.validators.MinValueValidator(0)],
                    ),
                ),
                ("pricing_currency", models.CharField(default="USD", max_length=3)),
                (
                    "billing_cycle",
                    models.CharField(
                        choices=[("one-time", "one-time"), ("monthly", "monthly"), ("yearly", "yearly")],
                        default="one-time",
                        max_length=10,
                    ),
                ),
                ("features", models.JSONField(blank=True, default=list)),
                ("technologies", models.JSONField(blank=True, default=list)),
                ("tags", models.JSONField(blank=True, default=list)),
                ("delivery_time", models.CharField(max_length=100)),
                (
                    "difficulty",
                    models.CharField(
                        choices=[
                            ("Basic", "Basic"),
                            ("Intermediate", "Intermediate"),
                            ("Advanced", "Advanced"),
                            ("Expert", "Expert"),
                        ],
                        default="Intermediate",
                        max_length=20,
                    ),
                ),
                ("is_active", models.BooleanField(default=True)),
                ("is_featured", models.BooleanField(default=False)),
                (
                    "rating_average",
                    models.DecimalField(
                        decimal_places=2,
                        default=0,
                        max_digits=3,
                        validators=[
                            django.core.validators.MinValueValidator(0),
                            django.core.validators.MaxValueValidator(5),
                        ],
                    ),
                ),
                ("rating_count", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "created_by",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="services_created",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "services",
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["category", "is_active"], name="services_cat_active_idx"),
                    models.Index(fields=["is_featured", "is_active"], name="services_featured_active_idx"),
                    models.Index(fields=["pricing_amount"], name="services_price_idx"),
                ],
            },
        ),
    ]
