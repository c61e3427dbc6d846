"""Shared pytest configuration and fixtures."""

from __future__ import annotations

from datetime import datetime, timedelta
from datetime import timezone as dt_timezone

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from lifecycle.transitions import Actor
from listings.models import Listing
from posts.models import Post

User = get_user_model()

T0 = datetime(2026, 3, 1, 9, 0, tzinfo=dt_timezone.utc)


class FixedClock:
    """Clock that only moves when a test advances it."""

    def __init__(self, now: datetime = T0):
        self.current = now

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> datetime:
        self.current = self.current + timedelta(**kwargs)
        return self.current


def _create_user(username: str, role: str) -> User:
    return User.objects.create_user(
        username=username,
        email=f"{username}@example.com",
        password="testpass",
        role=role,
    )


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def api_client():
    """DRF API client for request/response helpers."""
    return APIClient()


@pytest.fixture
def student():
    return _create_user("student", User.Role.STUDENT)


@pytest.fixture
def owner_user():
    return _create_user("owner", User.Role.OWNER)


@pytest.fixture
def agent():
    return _create_user("agent", User.Role.AGENT)


@pytest.fixture
def other_user():
    return _create_user("other", User.Role.OWNER)


@pytest.fixture
def admin_user():
    return _create_user("admin", User.Role.ADMIN)


@pytest.fixture
def second_admin():
    return _create_user("admin2", User.Role.ADMIN)


@pytest.fixture
def actor_for():
    return Actor.from_user


@pytest.fixture
def client_for():
    def _client(user):
        client = APIClient()
        client.force_authenticate(user=user)
        return client

    return _client


@pytest.fixture
def listing_factory(owner_user):
    def _make(**overrides):
        values = {
            "owner": owner_user,
            "owner_role": owner_user.role,
            "title": "Two bedroom near campus",
            "description": "Bright flat, five minutes from the university gate.",
            "city": "Cairo",
            "area_name": "Nasr City",
            "price": "4500.00",
            "status": Listing.Status.ACTIVE,
        }
        values.update(overrides)
        return Listing.objects.create(**values)

    return _make


@pytest.fixture
def listing(listing_factory):
    return listing_factory()


@pytest.fixture
def post_factory(student):
    def _make(**overrides):
        values = {
            "owner": student,
            "owner_role": student.role,
            "title": "Looking for a roommate",
            "description": "Third-year engineering student, quiet, non-smoker.",
            "post_type": Post.PostType.ROOMMATE,
            "city": "Cairo",
            "status": Post.Status.PENDING,
        }
        values.update(overrides)
        return Post.objects.create(**values)

    return _make


@pytest.fixture
def post(post_factory):
    return post_factory()
