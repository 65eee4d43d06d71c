"""
IdeaFlow Backend — User API Tests
===================================

What:  Registration, login, caller resolution and profile endpoints over HTTP.
"""

import pytest
from sqlalchemy import select

from ideaflow.models.user import User
from ideaflow.services.user_service import verify_password


class TestRegister:

    @pytest.mark.asyncio
    async def test_register_returns_id_and_email(self, client):
        response = await client.post(
            "/api/register", json={"email": "ann@example.com", "password": "hunter22"}
        )
        assert response.status_code == 200
        body = response.json()
        assert body["email"] == "ann@example.com"
        assert isinstance(body["id"], int)

    @pytest.mark.asyncio
    async def test_password_is_stored_hashed(self, client, session):
        await client.post("/api/register", json={"email": "ann@example.com", "password": "hunter22"})

        user = (await session.execute(select(User))).scalar_one()
        assert user.password != "hunter22"
        assert verify_password("hunter22", user.password)

    @pytest.mark.asyncio
    async def test_duplicate_email_rejected(self, client):
        payload = {"email": "ann@example.com", "password": "hunter22"}
        first = await client.post("/api/register", json=payload)
        second = await client.post("/api/register", json=payload)

        assert first.status_code == 200
        assert second.status_code == 400
        assert second.json()["error"] == "conflict"
        assert second.json()["message"] == "Email is already registered"

    @pytest.mark.asyncio
    async def test_missing_fields_named_in_message(self, client):
        response = await client.post("/api/register", json={"email": ""})

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "validation_error"
        assert "email" in body["message"]
        assert "password" in body["message"]
        assert body["details"]["fields"] == ["email", "password"]


class TestLogin:

    @pytest.mark.asyncio
    async def test_login_returns_public_fields(self, client, register):
        user_id = await register("bob@example.com", "pa55word")

        response = await client.post(
            "/api/login", json={"email": "bob@example.com", "password": "pa55word"}
        )

        assert response.status_code == 200
        assert response.json() == {
            "id": user_id,
            "email": "bob@example.com",
            "firstName": None,
            "lastName": None,
            "photo": None,
        }

    @pytest.mark.asyncio
    async def test_wrong_password(self, client, register):
        await register("bob@example.com", "pa55word")

        response = await client.post(
            "/api/login", json={"email": "bob@example.com", "password": "nope"}
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Incorrect password"

    @pytest.mark.asyncio
    async def test_unknown_email(self, client):
        response = await client.post(
            "/api/login", json={"email": "ghost@example.com", "password": "whatever"}
        )
        assert response.status_code == 400
        assert response.json()["message"] == "User not found"

    @pytest.mark.asyncio
    async def test_missing_password(self, client):
        response = await client.post("/api/login", json={"email": "bob@example.com"})
        assert response.status_code == 400
        assert response.json()["details"]["fields"] == ["password"]


class TestCurrentUser:

    @pytest.mark.asyncio
    async def test_resolves_header(self, client, make_user):
        user_id = await make_user("cara@example.com", first_name="Cara")

        response = await client.get("/api/current-user", headers={"x-user-id": str(user_id)})

        assert response.status_code == 200
        assert response.json()["firstName"] == "Cara"
        assert "password" not in response.json()

    @pytest.mark.asyncio
    async def test_resolves_query_parameter(self, client, make_user):
        user_id = await make_user("cara@example.com")

        response = await client.get(f"/api/current-user?currentUserId={user_id}")
        assert response.status_code == 200
        assert response.json()["id"] == user_id

    @pytest.mark.asyncio
    async def test_missing_identity_is_unauthorized(self, client):
        response = await client.get("/api/current-user")
        assert response.status_code == 401
        assert response.json()["error"] == "unauthorized"

    @pytest.mark.asyncio
    async def test_unknown_or_malformed_id_is_unauthorized(self, client):
        unknown = await client.get("/api/current-user", headers={"x-user-id": "999"})
        malformed = await client.get("/api/current-user", headers={"x-user-id": "abc"})
        assert unknown.status_code == 401
        assert malformed.status_code == 401

    @pytest.mark.asyncio
    async def test_id_beyond_integer_column_is_unauthorized(self, client):
        response = await client.get("/api/current-user", headers={"x-user-id": str(2**63)})
        assert response.status_code == 401


class TestProfile:

    @pytest.mark.asyncio
    async def test_get_profile(self, client, make_user):
        user_id = await make_user("dan@example.com", description="Illustrator")

        response = await client.get(f"/api/profile/{user_id}")

        assert response.status_code == 200
        assert response.json() == {
            "id": user_id,
            "email": "dan@example.com",
            "firstName": None,
            "lastName": None,
            "photo": None,
            "description": "Illustrator",
        }

    @pytest.mark.asyncio
    async def test_get_unknown_profile(self, client):
        response = await client.get("/api/profile/42")
        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    @pytest.mark.asyncio
    async def test_update_only_sent_fields(self, client, make_user):
        user_id = await make_user("dan@example.com", first_name="Dan", description="Illustrator")

        response = await client.put(f"/api/profile/{user_id}", json={"lastName": "Brown"})

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Profile updated successfully"
        assert body["user"]["firstName"] == "Dan"
        assert body["user"]["lastName"] == "Brown"
        assert body["user"]["description"] == "Illustrator"

        reread = await client.get(f"/api/profile/{user_id}")
        assert reread.json()["lastName"] == "Brown"

    @pytest.mark.asyncio
    async def test_update_unknown_profile(self, client):
        response = await client.put("/api/profile/42", json={"firstName": "X"})
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_id_beyond_integer_column_is_not_found(self, client):
        assert (await client.get(f"/api/profile/{2**63}")).status_code == 404
        assert (await client.put(f"/api/profile/{2**63}", json={"firstName": "X"})).status_code == 404

    @pytest.mark.asyncio
    async def test_non_numeric_id_is_bad_request(self, client):
        response = await client.get("/api/profile/abc")
        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"


class TestPhotoUpload:

    @pytest.mark.asyncio
    async def test_upload_photo_returns_servable_path(self, client):
        response = await client.post(
            "/api/upload-photo",
            files={"photo": ("me.JPG", b"jpeg-bytes", "image/jpeg")},
        )

        assert response.status_code == 200
        path = response.json()["photoPath"]
        assert path.startswith("/uploads/")
        assert path.endswith(".jpg")

        served = await client.get(path)
        assert served.status_code == 200
        assert served.content == b"jpeg-bytes"

    @pytest.mark.asyncio
    async def test_upload_without_file(self, client):
        response = await client.post("/api/upload-photo", data={"other": "x"})
        assert response.status_code == 400
