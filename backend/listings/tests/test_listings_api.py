from datetime import timedelta

import pytest
from django.utils import timezone

from listings.models import Listing

pytestmark = pytest.mark.django_db


def listing_payload(**overrides):
    payload = {
        "title": "Studio by the metro",
        "description": "Furnished studio, all bills included.",
        "listing_type": "property",
        "price": "3200.00",
        "city": "Giza",
        "area_name": "Dokki",
        "property_type": "studio",
        "furnished": True,
        "amenities": ["wifi", "ac"],
    }
    payload.update(overrides)
    return payload


def test_owner_creates_active_listing(client_for, owner_user):
    resp = client_for(owner_user).post("/api/listings/", listing_payload(), format="json")

    assert resp.status_code == 201, resp.data
    assert resp.data["status"] == "active"
    assert resp.data["owner"] == owner_user.id
    assert resp.data["owner_role"] == "owner"
    assert resp.data["version"] == 0


def test_student_listing_starts_pending(client_for, student):
    resp = client_for(student).post(
        "/api/listings/", listing_payload(listing_type="roommate"), format="json"
    )

    assert resp.status_code == 201, resp.data
    assert resp.data["status"] == "pending"


def test_client_cannot_set_lifecycle_fields(client_for, student):
    resp = client_for(student).post(
        "/api/listings/",
        listing_payload(status="active", featured=True, deleted_at=timezone.now().isoformat()),
        format="json",
    )

    assert resp.status_code == 201
    listing = Listing.objects.get(pk=resp.data["id"])
    assert listing.status == Listing.Status.PENDING
    assert listing.featured is False
    assert listing.deleted_at is None


def test_banned_user_cannot_create(client_for, owner_user):
    owner_user.is_banned = True
    owner_user.save(update_fields=["is_banned"])

    resp = client_for(owner_user).post("/api/listings/", listing_payload(), format="json")

    assert resp.status_code == 403


def test_public_list_excludes_soft_deleted_and_pending(api_client, listing_factory):
    visible = listing_factory(title="Visible flat")
    listing_factory(title="Pending flat", status=Listing.Status.PENDING)
    now = timezone.now()
    listing_factory(
        title="Deleted flat",
        status=Listing.Status.INACTIVE,
        deleted_at=now,
        purge_at=now + timedelta(hours=48),
    )

    resp = api_client.get("/api/listings/")

    assert resp.status_code == 200
    assert [row["id"] for row in resp.data["results"]] == [visible.id]


def test_soft_delete_returns_deadline_and_hides(client_for, api_client, listing, owner_user):
    resp = client_for(owner_user).delete(f"/api/listings/{listing.id}/")

    assert resp.status_code == 200, resp.data
    listing.refresh_from_db()
    assert listing.status == Listing.Status.INACTIVE
    assert listing.purge_at - listing.deleted_at == timedelta(hours=48)
    assert resp.data["purge_at"] == listing.purge_at

    gone = api_client.get(f"/api/listings/{listing.id}/")
    assert gone.status_code == 410
    assert gone.data["deleted_at"] == listing.deleted_at


def test_soft_delete_twice_is_bad_request(client_for, listing, owner_user):
    client = client_for(owner_user)
    assert client.delete(f"/api/listings/{listing.id}/").status_code == 200

    resp = client.delete(f"/api/listings/{listing.id}/")

    assert resp.status_code == 400


def test_non_owner_delete_is_forbidden(client_for, listing, other_user):
    resp = client_for(other_user).delete(f"/api/listings/{listing.id}/")

    assert resp.status_code == 403
    listing.refresh_from_db()
    assert listing.deleted_at is None


def test_admin_can_delete_any_listing(client_for, listing, admin_user):
    resp = client_for(admin_user).delete(f"/api/listings/{listing.id}/")
    assert resp.status_code == 200


def test_restore_reactivates_listing(client_for, listing, owner_user):
    client = client_for(owner_user)
    client.delete(f"/api/listings/{listing.id}/")

    resp = client.post(f"/api/listings/{listing.id}/restore/", {}, format="json")

    assert resp.status_code == 200, resp.data
    assert resp.data["status"] == "active"
    assert resp.data["deleted_at"] is None
    assert resp.data["purge_at"] is None


def test_restore_present_listing_is_bad_request(client_for, listing, owner_user):
    resp = client_for(owner_user).post(f"/api/listings/{listing.id}/restore/", {}, format="json")
    assert resp.status_code == 400


def test_deleted_endpoint_lists_callers_soft_deleted(client_for, listing_factory, owner_user):
    kept = listing_factory(title="Kept flat")
    removed = listing_factory(title="Removed flat")
    client = client_for(owner_user)
    client.delete(f"/api/listings/{removed.id}/")

    resp = client.get("/api/listings/deleted/")

    assert resp.status_code == 200
    ids = [row["id"] for row in resp.data["results"]]
    assert ids == [removed.id]
    assert kept.id not in ids


def test_admin_approves_pending_listing(client_for, listing_factory, admin_user):
    listing = listing_factory(status=Listing.Status.PENDING)

    resp = client_for(admin_user).post(f"/api/listings/{listing.id}/approve/", {}, format="json")

    assert resp.status_code == 200
    assert resp.data["status"] == "active"


def test_owner_cannot_approve_own_listing(client_for, listing_factory, owner_user):
    listing = listing_factory(status=Listing.Status.PENDING)

    resp = client_for(owner_user).post(f"/api/listings/{listing.id}/approve/", {}, format="json")

    assert resp.status_code == 403


@pytest.mark.parametrize("status", [Listing.Status.REJECTED, Listing.Status.PENDING])
def test_stranger_gets_generic_forbidden_on_hidden_listing(
    client_for, listing_factory, student, other_user, status
):
    hidden = listing_factory(owner=student, owner_role=student.role, status=status)
    client = client_for(other_user)

    assert client.get(f"/api/listings/{hidden.id}/").status_code == 404
    for verb in ("approve", "restore"):
        resp = client.post(f"/api/listings/{hidden.id}/{verb}/", {}, format="json")
        assert resp.status_code == 403
        assert status not in str(resp.data["detail"])


def test_feature_and_verify_toggle(client_for, listing, admin_user):
    client = client_for(admin_user)

    featured = client.post(f"/api/listings/{listing.id}/feature/", {}, format="json")
    verified = client.post(f"/api/listings/{listing.id}/verify/", {}, format="json")

    assert featured.data["featured"] is True
    assert verified.data["verified"] is True
    assert verified.data["status"] == "active"


def test_stale_version_is_conflict(client_for, listing, admin_user):
    client = client_for(admin_user)
    assert (
        client.post(f"/api/listings/{listing.id}/feature/", {"version": 0}, format="json").status_code
        == 200
    )

    resp = client.post(f"/api/listings/{listing.id}/verify/", {"version": 0}, format="json")

    assert resp.status_code == 409


def test_missing_listing_is_not_found(api_client, client_for, owner_user):
    assert api_client.get("/api/listings/999999/").status_code == 404
    assert client_for(owner_user).delete("/api/listings/999999/").status_code == 404
