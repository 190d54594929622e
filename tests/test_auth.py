from sqlalchemy import func, select

from conftest import auth_headers
from services.auth_service.models import User
from services.auth_service.schemas import ExternalIdentity
from services.auth_service.service import AuthService

NEW_USER = {"email": "jane@example.com", "password": "Secret123", "name": "Jane"}


async def test_register_creates_unapproved_customer(client):
    resp = await client.post("/auth/register", json=NEW_USER)

    assert resp.status_code == 201
    user = resp.json()["user"]
    assert user["role"] == "customer"
    assert user["is_approved"] is False
    assert "hashed_password" not in user


async def test_register_duplicate_email_conflicts_without_new_record(client, session_factory):
    first = await client.post("/auth/register", json=NEW_USER)
    assert first.status_code == 201

    resp = await client.post("/auth/register", json={**NEW_USER, "name": "Other Jane"})

    assert resp.status_code == 409
    async with session_factory() as session:
        count = await session.scalar(select(func.count(User.id)))
    assert count == 1


async def test_register_rejects_weak_password(client):
    resp = await client.post("/auth/register", json={**NEW_USER, "password": "password"})

    assert resp.status_code == 422
    assert resp.json()["detail"][0]["field"] == "password"


async def test_register_accepts_punctuation_in_password(client):
    resp = await client.post("/auth/register", json={**NEW_USER, "password": "Passw0rd!"})

    assert resp.status_code == 201


async def test_register_requires_a_name(client):
    resp = await client.post("/auth/register", json={**NEW_USER, "name": " "})

    assert resp.status_code == 422
    assert [e["field"] for e in resp.json()["detail"]] == ["name"]


async def test_login_blocked_until_admin_approves(client, admin):
    created = (await client.post("/auth/register", json=NEW_USER)).json()["user"]

    pending = await client.post("/auth/login", json={"email": NEW_USER["email"], "password": NEW_USER["password"]})
    assert pending.status_code == 403

    approve = await client.patch(
        f"/auth/users/{created['id']}/approval",
        json={"is_approved": True},
        headers=auth_headers(admin),
    )
    assert approve.status_code == 200
    assert approve.json()["is_approved"] is True

    resp = await client.post("/auth/login", json={"email": NEW_USER["email"], "password": NEW_USER["password"]})
    assert resp.status_code == 200
    body = resp.json()
    assert body["token_type"] == "bearer"
    assert body["user"]["email"] == NEW_USER["email"]

    me = await client.get("/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
    assert me.status_code == 200
    assert me.json()["id"] == created["id"]


async def test_login_with_wrong_password_is_unauthorized(client, make_user):
    await make_user("customer", email="sam@example.com", password="Secret123")

    resp = await client.post("/auth/login", json={"email": "sam@example.com", "password": "Wrong1234"})

    assert resp.status_code == 401


async def test_login_without_local_password_is_unauthorized(client, make_user):
    await make_user("customer", email="ext@example.com", google_id="g-1")

    resp = await client.post("/auth/login", json={"email": "ext@example.com", "password": "Secret123"})

    assert resp.status_code == 401


async def test_me_requires_valid_token(client):
    assert (await client.get("/auth/me")).status_code == 401
    assert (await client.get("/auth/me", headers={"Authorization": "Bearer garbage"})).status_code == 401


async def test_unapproved_token_holder_is_forbidden(client, make_user):
    user = await make_user("customer", approved=False)

    resp = await client.get("/auth/me", headers=auth_headers(user))

    assert resp.status_code == 403


async def test_only_admin_can_change_approval(client, customer):
    resp = await client.patch(
        f"/auth/users/{customer.id}/approval",
        json={"is_approved": False},
        headers=auth_headers(customer),
    )

    assert resp.status_code == 403


async def test_external_identity_login_creates_links_and_reuses(session_factory, make_user):
    existing = await make_user("customer", email="linked@example.com", approved=False)

    async with session_factory() as session:
        created = await AuthService.login_with_external_identity(
            session, ExternalIdentity(google_id="g-new", email="new@example.com", name="New")
        )
        assert created.is_approved is True
        assert created.hashed_password is None

        linked = await AuthService.login_with_external_identity(
            session, ExternalIdentity(google_id="g-linked", email="linked@example.com", name="Linked")
        )
        assert linked.id == existing.id
        assert linked.google_id == "g-linked"

        again = await AuthService.login_with_external_identity(
            session, ExternalIdentity(google_id="g-new", email="changed@example.com", name="New")
        )
        assert again.id == created.id
