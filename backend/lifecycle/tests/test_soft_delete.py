from datetime import datetime, timedelta
from datetime import timezone as dt_timezone

import pytest

from lifecycle.errors import InvalidTransition
from lifecycle.soft_delete import Present, SoftDeleted, SoftDeleteLifecycle, default_retention_window
from listings.models import Listing
from posts.models import Post

pytestmark = pytest.mark.django_db

T0 = datetime(2026, 3, 1, 9, 0, tzinfo=dt_timezone.utc)


def test_retention_window_comes_from_settings(settings):
    settings.LISTING_RETENTION_WINDOW = timedelta(hours=6)
    assert default_retention_window() == timedelta(hours=6)
    assert SoftDeleteLifecycle().retention_window == timedelta(hours=6)


def test_soft_delete_sets_deadline_and_hides(listing):
    lifecycle = SoftDeleteLifecycle(timedelta(hours=48))

    lifecycle.soft_delete(listing, T0)

    assert listing.deleted_at == T0
    assert listing.purge_at == T0 + timedelta(hours=48)
    assert listing.status == Listing.Status.INACTIVE
    assert lifecycle.is_deleted(listing)


def test_soft_delete_twice_is_invalid(listing):
    lifecycle = SoftDeleteLifecycle(timedelta(hours=48))
    lifecycle.soft_delete(listing, T0)

    with pytest.raises(InvalidTransition):
        lifecycle.soft_delete(listing, T0 + timedelta(hours=1))
    assert listing.purge_at == T0 + timedelta(hours=48)


def test_restore_clears_fields_and_reactivates(listing_factory):
    listing = listing_factory(status=Listing.Status.PENDING)
    lifecycle = SoftDeleteLifecycle(timedelta(hours=48))
    lifecycle.soft_delete(listing, T0)

    lifecycle.restore(listing)

    assert listing.deleted_at is None
    assert listing.purge_at is None
    # Prior status is not preserved.
    assert listing.status == Listing.Status.ACTIVE


def test_restore_present_listing_is_invalid(listing):
    with pytest.raises(InvalidTransition):
        SoftDeleteLifecycle().restore(listing)


def test_post_cannot_be_restored(post):
    lifecycle = SoftDeleteLifecycle(timedelta(hours=48))
    lifecycle.soft_delete(post, T0)
    assert post.status == Post.Status.DELETED

    with pytest.raises(InvalidTransition):
        lifecycle.restore(post)


def test_purge_eligibility_boundary(listing):
    lifecycle = SoftDeleteLifecycle(timedelta(hours=48))
    assert not lifecycle.is_purge_eligible(listing, T0)

    lifecycle.soft_delete(listing, T0)

    assert not lifecycle.is_purge_eligible(listing, T0 + timedelta(hours=47, minutes=59))
    assert lifecycle.is_purge_eligible(listing, T0 + timedelta(hours=48))
    assert lifecycle.is_purge_eligible(listing, T0 + timedelta(days=3))


def test_deletion_state_is_tagged(listing):
    lifecycle = SoftDeleteLifecycle(timedelta(hours=48))
    assert listing.deletion_state == Present(status=Listing.Status.ACTIVE)

    lifecycle.soft_delete(listing, T0)

    assert lifecycle.deletion_state(listing) == SoftDeleted(
        status=Listing.Status.INACTIVE,
        deleted_at=T0,
        purge_at=T0 + timedelta(hours=48),
    )
