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
            name="Listing",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                ("owner_role", models.CharField(max_length=32)),
                ("title", models.CharField(max_length=140)),
                ("description", models.TextField()),
                (
                    "listing_type",
                    models.CharField(
                        choices=[("property", "Property"), ("roommate", "Roommate"), ("room", "Room")],
                        default="property",
                        max_length=16,
                    ),
                ),
                (
                    "price",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        max_digits=10,
                        null=True,
                        validators=[django.core.validators.MinValueValidator(0)],
                    ),
                ),
                ("city", models.CharField(max_length=80)),
                ("area_name", models.CharField(max_length=120)),
                ("address", models.CharField(blank=True, default="", max_length=255)),
                (
                    "property_type",
                    models.CharField(
                        choices=[
                            ("apartment", "Apartment"),
                            ("studio", "Studio"),
                            ("villa", "Villa"),
                            ("room", "Room"),
                            ("house", "House"),
                        ],
                        default="apartment",
                        max_length=16,
                    ),
                ),
                ("bedrooms", models.PositiveSmallIntegerField(blank=True, null=True)),
                ("bathrooms", models.PositiveSmallIntegerField(blank=True, null=True)),
                ("furnished", models.BooleanField(default=False)),
                ("amenities", models.JSONField(blank=True, default=list)),
                (
                    "target_audience",
                    models.CharField(
                        choices=[("students", "Students"), ("family", "Family"), ("all", "All")],
                        default="students",
                        max_length=16,
                    ),
                ),
                (
                    "whatsapp_number",
                    models.CharField(
                        blank=True,
                        default="",
                        max_length=11,
                        validators=[
                            django.core.validators.RegexValidator(
                                "^\\d{10,11}$", "Phone number must be 10-11 digits"
                            )
                        ],
                    ),
                ),
                ("contact_phone", models.CharField(blank=True, default="", max_length=32)),
                ("contact_email", models.EmailField(blank=True, default="", max_length=254)),
                ("views", models.PositiveIntegerField(default=0)),
                ("featured", models.BooleanField(default=False)),
                ("verified", models.BooleanField(default=False)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("active", "Active"),
                            ("inactive", "Inactive"),
                            ("pending", "Pending review"),
                            ("rejected", "Rejected"),
                        ],
                        default="active",
                        max_length=12,
                    ),
                ),
                ("deleted_at", models.DateTimeField(blank=True, null=True)),
                ("purge_at", models.DateTimeField(blank=True, null=True)),
                ("version", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "owner",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="listings",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["owner", "created_at"], name="listing_owner_created_idx"),
                    models.Index(fields=["status", "deleted_at"], name="listing_status_deleted_idx"),
                    models.Index(fields=["purge_at"], name="listing_purge_at_idx"),
                    models.Index(fields=["city"], name="listing_city_idx"),
                ],
            },
        ),
    ]
