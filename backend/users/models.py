from __future__ import annotations

from django.contrib.auth.models import AbstractUser
from django.db import models

from lifecycle import transitions


class User(AbstractUser):
    """Marketplace account; the role decides trust tier and admin powers."""

    LIFECYCLE_KIND = transitions.Kind.ACCOUNT

    class Role(models.TextChoices):
        STUDENT = transitions.STUDENT, "Student"
        AGENT = transitions.AGENT, "Agent"
        OWNER = transitions.OWNER, "Owner"
        SERVICE_PROVIDER = transitions.SERVICE_PROVIDER, "Service provider"
        ADMIN = transitions.ADMIN, "Admin"

    role = models.CharField(max_length=32, choices=Role.choices, default=Role.STUDENT)
    phone = models.CharField(max_length=32, blank=True, default="")
    university = models.CharField(max_length=120, blank=True, default="")
    bio = models.TextField(blank=True, default="")
    is_banned = models.BooleanField(default=False)
    ban_reason = models.TextField(blank=True, default="")
    version = models.PositiveIntegerField(default=0)

    @property
    def is_admin(self) -> bool:
        return self.role == self.Role.ADMIN

    def display_name(self) -> str:
        return (self.get_full_name() or self.username or "User").strip()

    def lifecycle_state(self) -> transitions.EntityState:
        return transitions.EntityState(
            kind=transitions.Kind.ACCOUNT,
            identity=self.pk,
            status=transitions.BANNED if self.is_banned else transitions.ACTIVE,
            owner_id=self.pk,
            role=self.role,
        )

    def set_lifecycle_status(self, status: str) -> list[str]:
        self.is_banned = status == transitions.BANNED
        return ["is_banned"]
