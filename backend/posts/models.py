from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from lifecycle import transitions
from listings.models import whatsapp_validator


class PostQuerySet(models.QuerySet):
    def live(self):
        return self.exclude(status=Post.Status.DELETED)

    def public(self):
        return self.filter(status=Post.Status.ACTIVE)


class Post(models.Model):
    """
    A community post that goes through admin moderation.

    ``deleted`` is terminal: a deleted post is never restored, only purged
    once its retention window has passed.
    """

    LIFECYCLE_KIND = transitions.Kind.POST
    HIDDEN_STATUS = transitions.DELETED
    RESTORED_STATUS = None

    class Status(models.TextChoices):
        PENDING = transitions.PENDING, "Pending review"
        ACTIVE = transitions.ACTIVE, "Active"
        REJECTED = transitions.REJECTED, "Rejected"
        DELETED = transitions.DELETED, "Deleted"

    class PostType(models.TextChoices):
        PROPERTY = "property", "Property"
        ROOMMATE = "roommate", "Roommate"
        ROOM = "room", "Room"

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="posts",
    )
    owner_role = models.CharField(max_length=32)
    title = models.CharField(max_length=140)
    description = models.TextField()
    post_type = models.CharField(max_length=16, choices=PostType.choices)
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(0)],
        null=True,
        blank=True,
    )
    city = models.CharField(max_length=80, blank=True, default="")
    area_name = models.CharField(max_length=120, blank=True, default="")
    whatsapp_number = models.CharField(
        max_length=11, blank=True, default="", validators=[whatsapp_validator]
    )
    views = models.PositiveIntegerField(default=0)

    status = models.CharField(max_length=12, choices=Status.choices, default=Status.PENDING)
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="moderated_posts",
    )
    approved_at = models.DateTimeField(null=True, blank=True)
    admin_note = models.TextField(blank=True, default="")

    deleted_at = models.DateTimeField(null=True, blank=True)
    purge_at = models.DateTimeField(null=True, blank=True)
    version = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = PostQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "created_at"], name="post_status_created_idx"),
            models.Index(fields=["purge_at"], name="post_purge_at_idx"),
        ]

    def lifecycle_state(self) -> transitions.EntityState:
        return transitions.EntityState(
            kind=transitions.Kind.POST,
            identity=self.pk,
            status=self.status,
            owner_id=self.owner_id,
            deleted=self.status == self.Status.DELETED,
        )

    def set_lifecycle_status(self, status: str) -> list[str]:
        self.status = status
        return ["status"]

    def __str__(self) -> str:
        return f"{self.title} ({self.pk})"
