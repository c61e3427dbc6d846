from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator, RegexValidator
from django.db import models

from lifecycle import transitions
from lifecycle.soft_delete import SoftDeleteLifecycle

whatsapp_validator = RegexValidator(r"^\d{10,11}$", "Phone number must be 10-11 digits")


class ListingQuerySet(models.QuerySet):
    def live(self):
        return self.filter(deleted_at__isnull=True)

    def soft_deleted(self):
        return self.filter(deleted_at__isnull=False)

    def public(self):
        return self.live().filter(status=Listing.Status.ACTIVE)


class Listing(models.Model):
    """A housing, room or roommate offer."""

    LIFECYCLE_KIND = transitions.Kind.LISTING
    HIDDEN_STATUS = transitions.INACTIVE
    RESTORED_STATUS = transitions.ACTIVE

    class Status(models.TextChoices):
        ACTIVE = transitions.ACTIVE, "Active"
        INACTIVE = transitions.INACTIVE, "Inactive"
        PENDING = transitions.PENDING, "Pending review"
        REJECTED = transitions.REJECTED, "Rejected"

    class ListingType(models.TextChoices):
        PROPERTY = "property", "Property"
        ROOMMATE = "roommate", "Roommate"
        ROOM = "room", "Room"

    class PropertyType(models.TextChoices):
        APARTMENT = "apartment", "Apartment"
        STUDIO = "studio", "Studio"
        VILLA = "villa", "Villa"
        ROOM = "room", "Room"
        HOUSE = "house", "House"

    class Audience(models.TextChoices):
        STUDENTS = "students", "Students"
        FAMILY = "family", "Family"
        ALL = "all", "All"

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="listings",
    )
    owner_role = models.CharField(max_length=32)
    title = models.CharField(max_length=140)
    description = models.TextField()
    listing_type = models.CharField(
        max_length=16, choices=ListingType.choices, default=ListingType.PROPERTY
    )
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(0)],
        null=True,
        blank=True,
    )
    city = models.CharField(max_length=80)
    area_name = models.CharField(max_length=120)
    address = models.CharField(max_length=255, blank=True, default="")
    property_type = models.CharField(
        max_length=16, choices=PropertyType.choices, default=PropertyType.APARTMENT
    )
    bedrooms = models.PositiveSmallIntegerField(null=True, blank=True)
    bathrooms = models.PositiveSmallIntegerField(null=True, blank=True)
    furnished = models.BooleanField(default=False)
    amenities = models.JSONField(default=list, blank=True)
    target_audience = models.CharField(
        max_length=16, choices=Audience.choices, default=Audience.STUDENTS
    )
    whatsapp_number = models.CharField(
        max_length=11, blank=True, default="", validators=[whatsapp_validator]
    )
    contact_phone = models.CharField(max_length=32, blank=True, default="")
    contact_email = models.EmailField(blank=True, default="")
    views = models.PositiveIntegerField(default=0)
    featured = models.BooleanField(default=False)
    verified = models.BooleanField(default=False)

    status = models.CharField(max_length=12, choices=Status.choices, default=Status.ACTIVE)
    deleted_at = models.DateTimeField(null=True, blank=True)
    purge_at = models.DateTimeField(null=True, blank=True)
    version = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ListingQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["owner", "created_at"], name="listing_owner_created_idx"),
            models.Index(fields=["status", "deleted_at"], name="listing_status_deleted_idx"),
            models.Index(fields=["purge_at"], name="listing_purge_at_idx"),
            models.Index(fields=["city"], name="listing_city_idx"),
        ]

    def clean(self):
        if not self.title or len(self.title.strip()) < 3:
            raise ValidationError("Title too short")
        if (self.deleted_at is None) != (self.purge_at is None):
            raise ValidationError("deleted_at and purge_at must be set together")

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def deletion_state(self):
        return SoftDeleteLifecycle().deletion_state(self)

    def lifecycle_state(self) -> transitions.EntityState:
        return transitions.EntityState(
            kind=transitions.Kind.LISTING,
            identity=self.pk,
            status=self.status,
            owner_id=self.owner_id,
            deleted=self.is_deleted,
        )

    def set_lifecycle_status(self, status: str) -> list[str]:
        self.status = status
        return ["status"]

    def __str__(self) -> str:
        return f"{self.title} ({self.pk})"
