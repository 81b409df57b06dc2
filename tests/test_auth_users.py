from datetime import datetime, timedelta

from sqlmodel import select

from arthub.models.exhibition import Exhibition
from arthub.models.follow import Follow
from arthub.models.user import User
from arthub.utils.token import create_access_token

from tests.helpers import PASSWORD, auth_headers


def register(client, **overrides):
    payload = {
        "name": "Maya Painter",
        "email": "maya@example.com",
        "password": "brushes1",
        "role": "artist",
        "specializations": ["Oil", " Watercolor "],
    }
    payload.update(overrides)
    return client.post("/auth/register", json=payload)


class TestAuth:
    def test_register_returns_user_and_token(self, client, session):
        response = register(client)

        assert response.status_code == 201
        data = response.json()
        assert data["token"]
        assert data["user"]["email"] == "maya@example.com"
        assert data["user"]["role"] == "artist"
        assert data["user"]["specializations"] == ["Oil", "Watercolor"]
        assert "password" not in data["user"]

        user = session.get(User, data["user"]["id"])
        assert user.password != "brushes1"

    def test_duplicate_email(self, client):
        register(client)

        response = register(client, email="MAYA@example.com")

        assert response.status_code == 400
        assert response.json()["detail"] == "Email already registered"

    def test_short_password(self, client):
        assert register(client, password="abc").status_code == 422

    def test_admin_role_cannot_be_self_assigned(self, client):
        assert register(client, role="admin").status_code == 422

    def test_login_and_me(self, client, buyer):
        response = client.post("/auth/login", json={"email": buyer.email, "password": PASSWORD})

        assert response.status_code == 200
        token = response.json()["access_token"]

        me = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.json()["id"] == buyer.id
        assert me.json()["last_login"] is not None

    def test_wrong_password(self, client, buyer):
        response = client.post("/auth/login", json={"email": buyer.email, "password": "nope"})
        assert response.status_code == 401

    def test_inactive_account_cannot_login(self, client, make_user):
        user = make_user(is_active=False)

        response = client.post("/auth/login", json={"email": user.email, "password": PASSWORD})

        assert response.status_code == 401

    def test_bad_token(self, client):
        response = client.get("/auth/me", headers={"Authorization": "Bearer not-a-token"})
        assert response.status_code == 401

    def test_non_numeric_subject_is_unauthorized(self, client):
        token = create_access_token({"sub": "maya@example.com"})

        response = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid token payload"

    def test_deactivated_user_token_is_refused(self, client, make_user):
        user = make_user(is_active=False)

        response = client.get("/auth/me", headers=auth_headers(user))

        assert response.status_code == 403


class TestArtists:
    def test_lists_active_artists_verified_first(self, client, make_user, buyer):
        make_user("artist", name="Plain", rating=4.9)
        make_user("artist", name="Verified", verified=True, rating=3.0)
        make_user("artist", name="Gone", is_active=False, verified=True)

        data = client.get("/users/artists").json()

        assert [a["name"] for a in data["artists"]] == ["Verified", "Plain"]
        assert data["pagination"]["total"] == 2

    def test_search_and_specialization(self, client, make_user):
        make_user("artist", name="Ravi", location="Goa", specializations="Sculpture")
        make_user("artist", name="Lena", location="Berlin", specializations="Oil,Portrait")

        assert [a["name"] for a in client.get("/users/artists", params={"search": "goa"}).json()["artists"]] == ["Ravi"]
        by_spec = client.get("/users/artists", params={"specialization": "portrait"}).json()["artists"]
        assert [a["name"] for a in by_spec] == ["Lena"]

    def test_artist_profile(self, client, artist, make_artwork):
        make_artwork(artist)

        data = client.get(f"/users/artists/{artist.id}").json()

        assert data["name"] == "Frida Artist"
        assert data["artwork_count"] == 1
        assert data["follower_count"] == 0

    def test_community_user_is_not_an_artist(self, client, buyer):
        assert client.get(f"/users/artists/{buyer.id}").status_code == 404


class TestProfile:
    def test_update_profile(self, client, buyer):
        response = client.put(
            "/users/me",
            json={"bio": "Collector of prints", "instagram": "@bob", "specializations": ["Prints"]},
            headers=auth_headers(buyer),
        )

        assert response.status_code == 200
        user = response.json()["user"]
        assert user["bio"] == "Collector of prints"
        assert user["instagram"] == "@bob"
        assert user["specializations"] == ["Prints"]

    def test_blank_name_is_rejected(self, client, buyer):
        response = client.put("/users/me", json={"name": "  "}, headers=auth_headers(buyer))
        assert response.status_code == 400


class TestAdmin:
    def test_list_users_requires_admin(self, client, buyer):
        assert client.get("/users/", headers=auth_headers(buyer)).status_code == 403

    def test_list_users_with_role_filter(self, client, admin, artist, buyer):
        data = client.get("/users/", params={"role": "artist"}, headers=auth_headers(admin)).json()

        assert [u["id"] for u in data["users"]] == [artist.id]

    def test_toggle_status(self, client, session, admin, buyer):
        response = client.patch(f"/users/{buyer.id}/toggle-status", headers=auth_headers(admin))

        assert response.json()["is_active"] is False
        session.refresh(buyer)
        assert buyer.is_active is False

    def test_admin_cannot_deactivate_self(self, client, admin):
        response = client.patch(f"/users/{admin.id}/toggle-status", headers=auth_headers(admin))
        assert response.status_code == 400

    def test_verify_artist(self, client, admin, artist, buyer):
        assert client.patch(f"/users/{artist.id}/verify", headers=auth_headers(admin)).json()["verified"] is True
        assert client.patch(f"/users/{buyer.id}/verify", headers=auth_headers(admin)).status_code == 400

    def test_stats(self, client, admin, artist, make_artwork):
        make_artwork(artist)
        make_artwork(artist, status="sold")

        data = client.get("/users/admin/stats", headers=auth_headers(admin)).json()

        assert data["users"] == 2
        assert data["artists"] == 1
        assert data["artworks"] == 2
        assert data["available_artworks"] == 1
        assert data["orders"] == 0
        assert data["revenue"] == 0.0

    def test_overview(self, client, session, admin, artist, buyer, make_artwork):
        make_artwork(artist)
        make_artwork(artist)
        make_artwork(artist, category="Sculpture")
        now = datetime.utcnow()
        session.add(Exhibition(
            title="Harbour Lights",
            description="Photographs of the old port.",
            start_date=now - timedelta(days=1),
            end_date=now + timedelta(days=3),
            location="Kochi",
            image="https://example.com/harbour.jpg",
            organizer_id=artist.id,
        ))
        session.commit()

        data = client.get("/users/admin/overview", headers=auth_headers(admin)).json()

        roles = {r["role"]: r["count"] for r in data["users_by_role"]}
        assert roles == {"admin": 1, "artist": 1, "community": 1}
        assert data["artworks_by_category"] == [
            {"category": "Painting", "count": 2},
            {"category": "Sculpture", "count": 1},
        ]
        statuses = {s["status"]: s["count"] for s in data["exhibitions_by_status"]}
        assert statuses == {"upcoming": 0, "ongoing": 1, "completed": 0}
        assert sum(d["count"] for d in data["daily_signups"]) == 3

    def test_overview_requires_admin(self, client, artist):
        assert client.get("/users/admin/overview", headers=auth_headers(artist)).status_code == 403

    def test_get_user(self, client, admin, buyer):
        data = client.get(f"/users/{buyer.id}", headers=auth_headers(admin)).json()

        assert data["email"] == buyer.email
        assert data["is_active"] is True
        assert client.get("/users/999", headers=auth_headers(admin)).status_code == 404
        assert client.get(f"/users/{admin.id}", headers=auth_headers(buyer)).status_code == 403

    def test_update_user(self, client, session, admin, buyer):
        response = client.put(
            f"/users/{buyer.id}",
            json={
                "role": "artist",
                "verified": True,
                "rating": 4.5,
                "total_ratings": 2,
                "specializations": ["Ink", " "],
            },
            headers=auth_headers(admin),
        )

        user = response.json()["user"]
        assert user["role"] == "artist"
        assert user["verified"] is True
        assert user["rating"] == 4.5
        assert user["specializations"] == ["Ink"]
        session.refresh(buyer)
        assert buyer.role == "artist"

    def test_update_user_validation(self, client, admin, buyer, artist):
        url = f"/users/{buyer.id}"
        headers = auth_headers(admin)

        assert client.put(url, json={"rating": 6}, headers=headers).status_code == 422
        assert client.put(url, json={"password": "x"}, headers=headers).status_code == 422
        assert client.put(url, json={"verified": None}, headers=headers).status_code == 400

        response = client.put(url, json={"email": artist.email}, headers=headers)
        assert response.status_code == 400
        assert response.json()["detail"] == "Email already registered"

    def test_admin_cannot_demote_self(self, client, admin):
        response = client.put(f"/users/{admin.id}", json={"role": "community"}, headers=auth_headers(admin))
        assert response.status_code == 400

    def test_delete_user_without_activity(self, client, session, admin, artist, buyer):
        client.post(f"/follows/{artist.id}", headers=auth_headers(buyer))
        buyer_id = buyer.id

        response = client.delete(f"/users/{buyer_id}", headers=auth_headers(admin))

        assert response.status_code == 200
        assert session.get(User, buyer_id) is None
        assert session.exec(select(Follow)).all() == []

    def test_delete_refuses_user_with_content(self, client, session, admin, artist, make_artwork):
        make_artwork(artist)

        response = client.delete(f"/users/{artist.id}", headers=auth_headers(admin))

        assert response.status_code == 400
        assert session.get(User, artist.id) is not None

    def test_admin_cannot_delete_self(self, client, admin):
        assert client.delete(f"/users/{admin.id}", headers=auth_headers(admin)).status_code == 400
