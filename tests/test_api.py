"""
HTTP-level tests: routes, envelopes, authorization and status codes.
"""

import pytest
import uuid
from datetime import timedelta

from realestate.utils.auth import create_access_token, create_refresh_token, create_reset_token
from tests.conftest import (
    DEFAULT_PASSWORD,
    ImageFactory,
    OwnerFactory,
    PropertyFactory,
    TraceFactory,
    UserFactory,
)

API = "/api"


def assert_envelope(body: dict, status_code: int, success: bool = True) -> None:
    assert set(body) == {"success", "statusCode", "message", "data", "meta", "errors"}
    assert body["success"] is success
    assert body["statusCode"] == status_code


class TestPropertyEndpoints:

    @pytest.mark.asyncio
    async def test_list_envelope_and_meta(self, async_client, db_session, test_owner):
        for index in range(8):
            await PropertyFactory.create(db_session, test_owner.id, name=f"Casa {index}", code_internal=index + 1)

        response = await async_client.get(f"{API}/property", params={"page": 2, "limit": 6})

        assert response.status_code == 200
        body = response.json()
        assert_envelope(body, 200)
        assert body["meta"] == {"page": 2, "limit": 6, "total": 8, "lastPage": 2}
        assert [item["name"] for item in body["data"]] == ["Casa 6", "Casa 7"]
        assert body["errors"] == []

    @pytest.mark.asyncio
    async def test_list_items_use_camel_case(self, async_client, db_session, test_property):
        await ImageFactory.create(db_session, test_property.id)

        response = await async_client.get(f"{API}/property")

        item = response.json()["data"][0]
        assert item["codeInternal"] == 1001
        assert item["idOwner"] == str(test_property.id_owner)
        assert item["image"]["idProperty"] == str(test_property.id)
        assert "code_internal" not in item

    @pytest.mark.asyncio
    async def test_list_filters(self, async_client, db_session, test_owner):
        other_owner = await OwnerFactory.create(db_session, name="Pedro Ruiz")
        await PropertyFactory.create(db_session, test_owner.id, name="Casa Barata", price=100)
        await PropertyFactory.create(db_session, test_owner.id, name="Casa Cara", price=900)
        await PropertyFactory.create(db_session, other_owner.id, name="Casa Media", price=500)

        by_price = await async_client.get(f"{API}/property", params={"minPrice": 100, "maxPrice": 500})
        by_owner = await async_client.get(f"{API}/property", params={"idOwner": str(other_owner.id)})
        by_name = await async_client.get(f"{API}/property", params={"name": "CARA"})

        assert sorted(p["name"] for p in by_price.json()["data"]) == ["Casa Barata", "Casa Media"]
        assert [p["name"] for p in by_owner.json()["data"]] == ["Casa Media"]
        assert [p["name"] for p in by_name.json()["data"]] == ["Casa Cara"]

    @pytest.mark.asyncio
    async def test_list_refresh_flag(self, async_client, db_session, test_owner):
        await PropertyFactory.create(db_session, test_owner.id)
        await async_client.get(f"{API}/property")
        await PropertyFactory.create(db_session, test_owner.id, name="Nueva")

        cached = await async_client.get(f"{API}/property")
        refreshed = await async_client.get(f"{API}/property", params={"refresh": "true"})

        assert cached.json()["meta"]["total"] == 1
        assert refreshed.json()["meta"]["total"] == 2

    @pytest.mark.asyncio
    async def test_empty_list(self, async_client):
        response = await async_client.get(f"{API}/property")

        body = response.json()
        assert body["data"] == []
        assert body["meta"] == {"page": 1, "limit": 6, "total": 0, "lastPage": 0}

    @pytest.mark.asyncio
    async def test_get_by_id_includes_traces(self, async_client, db_session, test_property):
        await TraceFactory.create(db_session, test_property.id)

        response = await async_client.get(f"{API}/property/{test_property.id}")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["id"] == str(test_property.id)
        assert data["traces"][0]["dateSale"] == "2023-05-10"
        assert response.json()["meta"] is None

    @pytest.mark.asyncio
    async def test_get_missing_is_404_envelope(self, async_client):
        missing = uuid.uuid4()

        response = await async_client.get(f"{API}/property/{missing}")

        assert response.status_code == 404
        body = response.json()
        assert_envelope(body, 404, success=False)
        assert body["message"] == f"Property not found with ID: {missing}"
        assert body["data"] is None

    @pytest.mark.asyncio
    async def test_malformed_id_is_400(self, async_client):
        response = await async_client.get(f"{API}/property/not-an-id")

        assert response.status_code == 400
        body = response.json()
        assert body["message"] == "Request validation failed"
        assert body["errors"][0].startswith("property_id:")

    @pytest.mark.asyncio
    async def test_create_requires_authentication(self, async_client, test_owner):
        response = await async_client.post(f"{API}/property", json=PropertyFactory.payload(test_owner.id))

        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"
        assert_envelope(response.json(), 401, success=False)

    @pytest.mark.asyncio
    async def test_invalid_token_is_401(self, async_client, test_owner):
        response = await async_client.post(
            f"{API}/property",
            json=PropertyFactory.payload(test_owner.id),
            headers={"Authorization": "Bearer not-a-token"},
        )

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_refresh_token_is_not_an_access_token(self, async_client, test_owner, test_user):
        response = await async_client.post(
            f"{API}/property",
            json=PropertyFactory.payload(test_owner.id),
            headers={"Authorization": f"Bearer {create_refresh_token(test_user)}"},
        )

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_expired_token_is_401(self, async_client, test_owner, test_user):
        token = create_access_token(test_user, expires_delta=timedelta(seconds=-1))

        response = await async_client.post(
            f"{API}/property",
            json=PropertyFactory.payload(test_owner.id),
            headers={"Authorization": f"Bearer {token}"},
        )

        assert response.status_code == 401
        body = response.json()
        assert_envelope(body, 401, success=False)
        assert body["message"] == "Token has expired"

    @pytest.mark.asyncio
    async def test_create(self, async_client, user_headers, test_owner):
        payload = PropertyFactory.payload(
            test_owner.id,
            image={"file": "https://cdn.example.com/p.jpg"},
            traces=[{"dateSale": "2022-02-02", "name": "Venta", "value": 1000, "tax": 10}],
        )

        response = await async_client.post(f"{API}/property", json=payload, headers=user_headers)

        assert response.status_code == 201
        body = response.json()
        assert_envelope(body, 201)
        assert body["message"] == "Property created"
        assert body["data"]["image"]["file"] == "https://cdn.example.com/p.jpg"
        assert body["data"]["traces"][0]["value"] == 1000

    @pytest.mark.asyncio
    async def test_create_with_rule_violations(self, async_client, user_headers, test_owner):
        payload = PropertyFactory.payload(test_owner.id, price=0, year=1500)

        response = await async_client.post(f"{API}/property", json=payload, headers=user_headers)

        assert response.status_code == 400
        body = response.json()
        assert body["message"] == "Validation failed"
        assert "price must be greater than 0" in body["errors"]
        assert len(body["errors"]) == 2

    @pytest.mark.asyncio
    async def test_numbers_beyond_column_range_are_400(self, async_client, user_headers, test_owner, test_property):
        payload = PropertyFactory.payload(test_owner.id, codeInternal=10**20)

        created = await async_client.post(f"{API}/property", json=payload, headers=user_headers)
        patched = await async_client.patch(
            f"{API}/property/{test_property.id}", json={"price": 10**20}, headers=user_headers
        )

        assert created.status_code == 400
        assert created.json()["errors"] == [f"codeInternal must be at most {2**31 - 1}"]
        assert patched.status_code == 400
        assert patched.json()["errors"] == [f"price must be at most {2**63 - 1}"]

    @pytest.mark.asyncio
    async def test_create_with_missing_fields(self, async_client, user_headers):
        response = await async_client.post(f"{API}/property", json={"name": "Casa"}, headers=user_headers)

        assert response.status_code == 400
        errors = response.json()["errors"]
        assert any(e.startswith("codeInternal:") for e in errors)
        assert any(e.startswith("idOwner:") for e in errors)

    @pytest.mark.asyncio
    async def test_replace(self, async_client, user_headers, test_property, test_owner):
        payload = PropertyFactory.payload(test_owner.id, name="Casa Reemplazada", price=1)

        response = await async_client.put(f"{API}/property/{test_property.id}", json=payload, headers=user_headers)

        assert response.status_code == 200
        assert response.json()["data"]["name"] == "Casa Reemplazada"

    @pytest.mark.asyncio
    async def test_patch(self, async_client, user_headers, test_property):
        response = await async_client.patch(
            f"{API}/property/{test_property.id}",
            json={"Price": "123", "unknownField": True},
            headers=user_headers,
        )

        assert response.status_code == 200
        assert response.json()["data"]["price"] == 123

    @pytest.mark.asyncio
    async def test_patch_without_known_fields(self, async_client, user_headers, test_property):
        response = await async_client.patch(
            f"{API}/property/{test_property.id}",
            json={"color": "blue"},
            headers=user_headers,
        )

        assert response.status_code == 400
        assert response.json()["message"] == "No valid fields were sent"

    @pytest.mark.asyncio
    async def test_delete_requires_admin(self, async_client, user_headers, editor_headers, test_property):
        as_user = await async_client.delete(f"{API}/property/{test_property.id}", headers=user_headers)
        as_editor = await async_client.delete(f"{API}/property/{test_property.id}", headers=editor_headers)

        assert as_user.status_code == 403
        assert as_editor.status_code == 403
        assert_envelope(as_user.json(), 403, success=False)

    @pytest.mark.asyncio
    async def test_delete_as_admin(self, async_client, admin_headers, test_property):
        response = await async_client.delete(f"{API}/property/{test_property.id}", headers=admin_headers)
        follow_up = await async_client.get(f"{API}/property/{test_property.id}")

        assert response.status_code == 200
        assert response.json()["message"] == "Property deleted"
        assert response.json()["data"] is None
        assert follow_up.status_code == 404


class TestOtherEntityEndpoints:

    @pytest.mark.asyncio
    async def test_owner_crud(self, async_client, user_headers, admin_headers):
        created = await async_client.post(f"{API}/owner", json=OwnerFactory.data(), headers=user_headers)
        assert created.status_code == 201
        owner_id = created.json()["data"]["id"]

        patched = await async_client.patch(f"{API}/owner/{owner_id}", json={"name": "Laura G."}, headers=user_headers)
        assert patched.json()["data"]["name"] == "Laura G."

        listed = await async_client.get(f"{API}/owner", params={"name": "laura"})
        assert listed.json()["meta"]["total"] == 1

        deleted = await async_client.delete(f"{API}/owner/{owner_id}", headers=admin_headers)
        assert deleted.status_code == 200

    @pytest.mark.asyncio
    async def test_image_endpoints(self, async_client, user_headers, editor_headers, test_property):
        created = await async_client.post(
            f"{API}/propertyimage",
            json={"idProperty": str(test_property.id), "file": "a.jpg"},
            headers=user_headers,
        )
        assert created.status_code == 201
        image_id = created.json()["data"]["id"]

        by_property = await async_client.get(f"{API}/propertyimage/property/{test_property.id}")
        assert by_property.json()["data"]["id"] == image_id

        as_user = await async_client.patch(f"{API}/propertyimage/{image_id}", json={"enabled": False}, headers=user_headers)
        as_editor = await async_client.patch(f"{API}/propertyimage/{image_id}", json={"enabled": False}, headers=editor_headers)
        assert as_user.status_code == 403
        assert as_editor.status_code == 200
        assert as_editor.json()["data"]["enabled"] is False

    @pytest.mark.asyncio
    async def test_trace_endpoints(self, async_client, user_headers, test_property):
        created = await async_client.post(
            f"{API}/propertytrace",
            json={"idProperty": str(test_property.id), "dateSale": "2024-01-01", "name": "Venta", "value": 50},
            headers=user_headers,
        )
        assert created.status_code == 201
        assert created.json()["data"]["tax"] == 0

        listed = await async_client.get(f"{API}/propertytrace", params={"idProperty": str(test_property.id)})
        assert listed.json()["meta"]["total"] == 1


class TestUserEndpoints:

    @pytest.mark.asyncio
    async def test_list_is_admin_only(self, async_client, user_headers, admin_headers, test_user):
        as_user = await async_client.get(f"{API}/user", headers=user_headers)
        as_admin = await async_client.get(f"{API}/user", headers=admin_headers)

        assert as_user.status_code == 403
        assert as_admin.status_code == 200
        assert as_admin.json()["meta"]["total"] == 2
        assert all("hashedPassword" not in u for u in as_admin.json()["data"])

    @pytest.mark.asyncio
    async def test_self_or_admin(self, async_client, db_session, user_headers, admin_headers, test_user):
        other = await UserFactory.create(db_session, email="other@example.com", name="Other User")

        own = await async_client.get(f"{API}/user/{test_user.id}", headers=user_headers)
        foreign = await async_client.get(f"{API}/user/{other.id}", headers=user_headers)
        as_admin = await async_client.get(f"{API}/user/{other.id}", headers=admin_headers)
        by_email = await async_client.get(f"{API}/user/email/other@example.com", headers=user_headers)

        assert own.status_code == 200
        assert own.json()["data"]["email"] == "user@example.com"
        assert foreign.status_code == 403
        assert as_admin.status_code == 200
        assert by_email.status_code == 403

    @pytest.mark.asyncio
    async def test_user_cannot_promote_self(self, async_client, user_headers, test_user):
        response = await async_client.patch(
            f"{API}/user/{test_user.id}",
            json={"role": "admin"},
            headers=user_headers,
        )

        assert response.status_code == 403
        assert response.json()["message"] == "Only administrators can change roles"

    @pytest.mark.asyncio
    async def test_admin_creates_user_with_role(self, async_client, admin_headers):
        response = await async_client.post(
            f"{API}/user",
            json={"name": "Nuevo Editor", "email": "nuevo@example.com", "password": "secret123", "role": "editor"},
            headers=admin_headers,
        )

        assert response.status_code == 201
        assert response.json()["data"]["role"] == "editor"


class TestAuthEndpoints:

    @pytest.mark.asyncio
    async def test_login(self, async_client, test_user):
        response = await async_client.post(
            f"{API}/auth/login",
            json={"email": "user@example.com", "password": DEFAULT_PASSWORD},
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["tokenType"] == "bearer"
        assert data["expiresIn"] == 15 * 60
        assert data["user"]["email"] == "user@example.com"

        me = await async_client.get(
            f"{API}/user/{test_user.id}",
            headers={"Authorization": f"Bearer {data['accessToken']}"},
        )
        assert me.status_code == 200

    @pytest.mark.asyncio
    async def test_login_failure(self, async_client, test_user):
        response = await async_client.post(
            f"{API}/auth/login",
            json={"email": "user@example.com", "password": "wrong-password"},
        )

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid credentials"

    @pytest.mark.asyncio
    async def test_register(self, async_client):
        response = await async_client.post(
            f"{API}/auth/register",
            json={"name": "Ana Torres", "email": "ana@example.com", "password": "secret123", "role": "admin"},
        )

        assert response.status_code == 201
        assert response.json()["data"]["role"] == "user"

    @pytest.mark.asyncio
    async def test_register_duplicate(self, async_client, test_user):
        response = await async_client.post(
            f"{API}/auth/register",
            json={"name": "Ana Torres", "email": "user@example.com", "password": "secret123"},
        )

        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_refresh_and_validate(self, async_client, test_user):
        refreshed = await async_client.post(
            f"{API}/token/refresh",
            json={"refreshToken": create_refresh_token(test_user)},
        )
        assert refreshed.status_code == 200
        access_token = refreshed.json()["data"]["accessToken"]

        validated = await async_client.post(f"{API}/token/validate", json={"token": access_token})
        assert validated.status_code == 200
        data = validated.json()["data"]
        assert data["valid"] is True
        assert data["userId"] == str(test_user.id)
        assert data["type"] == "access"

        rejected = await async_client.post(f"{API}/token/validate", json={"token": "garbage"})
        assert rejected.status_code == 401


class TestPasswordEndpoints:

    @pytest.mark.asyncio
    async def test_recover_answers_the_same_for_unknown_email(self, async_client, test_user):
        known = await async_client.post(f"{API}/password/recover", json={"email": "user@example.com"})
        unknown = await async_client.post(f"{API}/password/recover", json={"email": "ghost@example.com"})

        assert known.status_code == unknown.status_code == 200
        assert known.json()["message"] == unknown.json()["message"]

    @pytest.mark.asyncio
    async def test_reset_flow(self, async_client, test_user):
        token = create_reset_token(test_user.id)

        checked = await async_client.get(f"{API}/password/reset/{token}")
        assert checked.status_code == 200
        assert checked.json()["data"]["userId"] == str(test_user.id)

        updated = await async_client.patch(
            f"{API}/password/update",
            json={"token": token, "newPassword": "another-secret"},
        )
        assert updated.status_code == 200

        login = await async_client.post(
            f"{API}/auth/login",
            json={"email": "user@example.com", "password": "another-secret"},
        )
        assert login.status_code == 200

    @pytest.mark.asyncio
    async def test_invalid_reset_token(self, async_client, test_user):
        response = await async_client.get(f"{API}/password/reset/not-a-token")

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid or expired reset token"


class TestAmbientEndpoints:

    @pytest.mark.asyncio
    async def test_health(self, async_client):
        response = await async_client.get("/health")

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "healthy"

    @pytest.mark.asyncio
    async def test_request_id_header(self, async_client):
        response = await async_client.get(f"{API}/property")

        assert len(response.headers["x-request-id"]) == 8
        assert response.headers["x-processing-time"].endswith("ms")

    @pytest.mark.asyncio
    async def test_unknown_route_uses_envelope(self, async_client):
        response = await async_client.get(f"{API}/nowhere")

        assert response.status_code == 404
        assert_envelope(response.json(), 404, success=False)

