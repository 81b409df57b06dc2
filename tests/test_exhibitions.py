from datetime import datetime, timedelta

import pytest
from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlmodel import select

from arthub.models.exhibition import Exhibition
from arthub.models.exhibition_access import ExhibitionAccess
from arthub.models.order import Order
from arthub.services.exhibition_access_service import grant_access
from tests.helpers import auth_headers, paid_event, post_webhook


@pytest.fixture
def make_exhibition(session, admin):
    def _make(**fields):
        now = datetime.utcnow()
        fields.setdefault("title", "Spring Salon")
        fields.setdefault("description", "A survey of new regional painting.")
        fields.setdefault("start_date", now + timedelta(days=7))
        fields.setdefault("end_date", now + timedelta(days=14))
        fields.setdefault("location", "Mumbai")
        fields.setdefault("image", "https://example.com/salon.jpg")
        exhibition = Exhibition(organizer_id=admin.id, **fields)
        exhibition.refresh_status()
        session.add(exhibition)
        session.commit()
        session.refresh(exhibition)
        return exhibition

    return _make


def exhibition_payload(**overrides):
    now = datetime.utcnow()
    payload = {
        "title": "Autumn Show",
        "description": "Works on paper from twelve artists.",
        "start_date": (now + timedelta(days=3)).isoformat(),
        "end_date": (now + timedelta(days=10)).isoformat(),
        "location": "Delhi",
        "image": "https://example.com/autumn.jpg",
    }
    payload.update(overrides)
    return payload


class TestExhibitionAdmin:
    def test_admin_creates_exhibition(self, client, admin):
        response = client.post("/exhibitions/", json=exhibition_payload(), headers=auth_headers(admin))

        assert response.status_code == 201
        data = response.json()["exhibition"]
        assert data["status"] == "upcoming"
        assert data["is_free"] is True
        assert data["registration_count"] == 0

    def test_non_admin_is_forbidden(self, client, artist):
        response = client.post("/exhibitions/", json=exhibition_payload(), headers=auth_headers(artist))
        assert response.status_code == 403

    def test_end_must_follow_start(self, client, admin):
        now = datetime.utcnow()
        payload = exhibition_payload(
            start_date=(now + timedelta(days=5)).isoformat(),
            end_date=(now + timedelta(days=1)).isoformat(),
        )

        response = client.post("/exhibitions/", json=payload, headers=auth_headers(admin))

        assert response.status_code == 422

    def test_paid_exhibition_needs_price(self, client, admin):
        payload = exhibition_payload(access_type="paid", price=0)

        response = client.post("/exhibitions/", json=payload, headers=auth_headers(admin))

        assert response.status_code == 422


class TestExhibitionListing:
    def test_status_is_derived_from_dates(self, client, make_exhibition):
        now = datetime.utcnow()
        make_exhibition(title="Past", start_date=now - timedelta(days=10), end_date=now - timedelta(days=5))
        make_exhibition(title="Now", start_date=now - timedelta(days=1), end_date=now + timedelta(days=1))
        make_exhibition(title="Soon")

        upcoming = client.get("/exhibitions/", params={"upcoming": True}).json()["exhibitions"]
        ongoing = client.get("/exhibitions/", params={"status": "ongoing"}).json()["exhibitions"]
        completed = client.get("/exhibitions/", params={"status": "completed"}).json()["exhibitions"]

        assert [e["title"] for e in upcoming] == ["Soon"]
        assert [(e["title"], e["status"]) for e in ongoing] == [("Now", "ongoing")]
        assert [(e["title"], e["status"]) for e in completed] == [("Past", "completed")]

    def test_missing_exhibition(self, client):
        assert client.get("/exhibitions/999").status_code == 404


class TestRegistration:
    def test_register_toggles(self, client, buyer, make_exhibition):
        exhibition = make_exhibition()
        headers = auth_headers(buyer)

        first = client.post(f"/exhibitions/{exhibition.id}/register", headers=headers).json()
        second = client.post(f"/exhibitions/{exhibition.id}/register", headers=headers).json()

        assert first == {"registered": True, "registration_count": 1}
        assert second == {"registered": False, "registration_count": 0}

    def test_detail_shows_registration(self, client, buyer, make_exhibition):
        exhibition = make_exhibition()
        headers = auth_headers(buyer)
        client.post(f"/exhibitions/{exhibition.id}/register", headers=headers)

        data = client.get(f"/exhibitions/{exhibition.id}", headers=headers).json()

        assert data["is_registered"] is True
        assert data["registration_count"] == 1

    def test_full_capacity(self, client, make_user, make_exhibition):
        exhibition = make_exhibition(max_capacity=1)
        client.post(f"/exhibitions/{exhibition.id}/register", headers=auth_headers(make_user()))

        response = client.post(f"/exhibitions/{exhibition.id}/register", headers=auth_headers(make_user()))

        assert response.status_code == 400
        assert response.json()["detail"] == "Exhibition is at full capacity"

    def test_completed_exhibition(self, client, buyer, make_exhibition):
        now = datetime.utcnow()
        exhibition = make_exhibition(start_date=now - timedelta(days=10), end_date=now - timedelta(days=5))

        response = client.post(f"/exhibitions/{exhibition.id}/register", headers=auth_headers(buyer))

        assert response.status_code == 400


class TestExhibitionAccess:
    def test_free_exhibition_grants_access(self, client, session, buyer, make_exhibition):
        exhibition = make_exhibition()
        headers = auth_headers(buyer)

        response = client.post(f"/exhibitions/{exhibition.id}/access", headers=headers)

        assert response.status_code == 200
        assert response.json()["has_access"] is True
        assert response.json()["access_type"] == "free"

        status = client.get(f"/exhibitions/{exhibition.id}/access", headers=headers).json()
        assert status["has_access"] is True
        assert status["access_type"] == "free"

    def test_second_request_is_rejected(self, client, session, buyer, make_exhibition):
        exhibition = make_exhibition()
        headers = auth_headers(buyer)
        client.post(f"/exhibitions/{exhibition.id}/access", headers=headers)

        response = client.post(f"/exhibitions/{exhibition.id}/access", headers=headers)

        assert response.status_code == 400
        assert response.json()["detail"] == "Access already granted for this exhibition"
        assert len(session.exec(select(ExhibitionAccess)).all()) == 1

    def test_no_access_by_default(self, client, buyer, make_exhibition):
        exhibition = make_exhibition()

        data = client.get(f"/exhibitions/{exhibition.id}/access", headers=auth_headers(buyer)).json()

        assert data == {"has_access": False, "access_type": None, "accessed_at": None}

    def test_database_rejects_duplicate_access(self, session, buyer, make_exhibition):
        exhibition = make_exhibition()
        session.add(ExhibitionAccess(user_id=buyer.id, exhibition_id=exhibition.id, access_type="free"))
        session.commit()

        session.add(ExhibitionAccess(user_id=buyer.id, exhibition_id=exhibition.id, access_type="paid"))
        with pytest.raises(IntegrityError):
            session.commit()
        session.rollback()

    def test_grant_access_translates_duplicates(self, session, buyer, make_exhibition):
        exhibition = make_exhibition()
        grant_access(session, user_id=buyer.id, exhibition_id=exhibition.id, access_type="free")

        with pytest.raises(HTTPException) as exc:
            grant_access(session, user_id=buyer.id, exhibition_id=exhibition.id, access_type="free")

        assert exc.value.status_code == 400
        assert len(session.exec(select(ExhibitionAccess)).all()) == 1

    def test_paid_exhibition_starts_checkout(self, client, session, gateway, buyer, make_exhibition):
        exhibition = make_exhibition(access_type="paid", price=25.0)
        headers = auth_headers(buyer)

        response = client.post(f"/exhibitions/{exhibition.id}/access", headers=headers)

        assert response.status_code == 200
        data = response.json()
        assert data["has_access"] is False
        order = session.get(Order, data["checkout"]["order_id"])
        assert order.exhibition_id == exhibition.id
        assert order.total_amount == 25.0
        assert order.items == []
        assert gateway.sessions[0]["amount"] == 25.0

        status = client.get(f"/exhibitions/{exhibition.id}/access", headers=headers).json()
        assert status["has_access"] is False

    def test_paid_access_granted_by_webhook(self, client, session, buyer, make_exhibition):
        exhibition = make_exhibition(access_type="paid", price=25.0)
        headers = auth_headers(buyer)
        checkout = client.post(f"/exhibitions/{exhibition.id}/access", headers=headers).json()["checkout"]

        post_webhook(client, paid_event(checkout["session_id"]))
        post_webhook(client, paid_event(checkout["session_id"]))

        access = session.exec(select(ExhibitionAccess)).all()
        assert len(access) == 1
        assert access[0].access_type == "paid"
        assert access[0].payment_method == "razorpay"
        assert access[0].payment_session_id == checkout["session_id"]
        assert access[0].order_id == checkout["order_id"]

        status = client.get(f"/exhibitions/{exhibition.id}/access", headers=headers).json()
        assert status["has_access"] is True
        assert status["access_type"] == "paid"
