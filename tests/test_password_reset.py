"""
Forgot / reset password tests over both channels.
"""

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy import select, update

from helpers import bearer, login, register
from taskforge.models.user import User

GENERIC_EMAIL = "If an account with that email exists, a password reset link has been sent."
GENERIC_SMS = "If an account with that sms exists, a password reset code has been sent."


async def add_phone(client, token: str, phone: str = "+254700000001") -> None:
    resp = await client.put("/api/users/profile", json={"phoneNumber": phone}, headers=bearer(token))
    assert resp.status_code == 200, resp.text


async def load_user(session_maker, email: str) -> User:
    async with session_maker() as s:
        return (await s.execute(select(User).where(User.email == email))).scalar_one()


# ---------------------------------------------------------------------------
# Forgot password
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_unknown_email_gets_generic_message_and_nothing_sent(client, dispatcher):
    resp = await client.post(
        "/api/auth/forgot-password", json={"method": "email", "email": "ghost@x.com"}
    )
    assert resp.status_code == 200
    assert resp.json()["message"] == GENERIC_EMAIL
    assert dispatcher.emails == []


@pytest.mark.asyncio
async def test_unknown_phone_gets_generic_message_and_nothing_sent(client, dispatcher):
    resp = await client.post(
        "/api/auth/forgot-password", json={"method": "sms", "phoneNumber": "+15550000000"}
    )
    assert resp.status_code == 200
    assert resp.json()["message"] == GENERIC_SMS
    assert dispatcher.sms == []


@pytest.mark.asyncio
async def test_known_email_gets_same_message(client, dispatcher):
    await register(client)
    resp = await client.post(
        "/api/auth/forgot-password", json={"method": "email", "email": "alice@x.com"}
    )
    assert resp.status_code == 200
    assert resp.json()["message"] == GENERIC_EMAIL
    assert len(dispatcher.emails) == 1
    to, token = dispatcher.emails[0]
    assert to == "alice@x.com"
    assert len(token) == 40


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [
    {"method": "email"},
    {"method": "sms", "email": "alice@x.com"},
    {"method": "pigeon", "email": "alice@x.com"},
    {"email": "alice@x.com"},
])
async def test_forgot_password_requires_method_and_matching_contact(client, body):
    resp = await client.post("/api/auth/forgot-password", json=body)
    assert resp.status_code == 400
    assert resp.json()["detail"]["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_failed_delivery_rolls_back_code(client, dispatcher, session_maker):
    await register(client)
    dispatcher.fail = True

    resp = await client.post(
        "/api/auth/forgot-password", json={"method": "email", "email": "alice@x.com"}
    )
    assert resp.status_code == 500
    assert resp.json()["detail"]["code"] == "EXTERNAL_DELIVERY_FAILED"

    user = await load_user(session_maker, "alice@x.com")
    assert user.reset_password_token is None
    assert user.reset_password_expires_at is None


@pytest.mark.asyncio
async def test_unexpected_delivery_error_also_rolls_back_code(client, dispatcher, session_maker, monkeypatch):
    await register(client)

    async def broken_send(to_email, reset_token):
        raise KeyError("id")

    monkeypatch.setattr(dispatcher, "send_password_reset_email", broken_send)

    resp = await client.post(
        "/api/auth/forgot-password", json={"method": "email", "email": "alice@x.com"}
    )
    assert resp.status_code == 500
    assert resp.json()["detail"]["code"] == "EXTERNAL_DELIVERY_FAILED"
    assert resp.json()["detail"]["message"] == "Failed to send reset email."

    user = await load_user(session_maker, "alice@x.com")
    assert user.reset_password_token is None
    assert user.reset_password_expires_at is None


@pytest.mark.asyncio
async def test_sms_code_held_by_another_user_is_regenerated(client, dispatcher, session_maker, monkeypatch):
    await register(client)
    await register(client, username="bob", email="bob@x.com")
    token = await login(client)
    await add_phone(client, token)

    async with session_maker() as s:
        await s.execute(
            update(User)
            .where(User.email == "bob@x.com")
            .values(
                verification_code="123456",
                verification_code_expires_at=datetime.now(UTC) + timedelta(minutes=5),
            )
        )
        await s.commit()

    codes = iter(["123456", "123456", "654321"])
    monkeypatch.setattr("taskforge.services.auth_service.create_sms_reset_code", lambda: next(codes))

    resp = await client.post(
        "/api/auth/forgot-password", json={"method": "sms", "phoneNumber": "+254700000001"}
    )
    assert resp.status_code == 200
    assert dispatcher.sms[0][1] == "654321"

    alice = await load_user(session_maker, "alice@x.com")
    assert alice.verification_code == "654321"


@pytest.mark.asyncio
async def test_whole_body_validation_message_has_no_field_prefix(client):
    resp = await client.post("/api/auth/forgot-password", json={"method": "email"})
    assert resp.status_code == 400
    assert resp.json()["detail"]["message"] == (
        "Email or phone number, and a valid method (email/sms) are required."
    )


# ---------------------------------------------------------------------------
# Reset password
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_email_reset_round_trip_is_single_use(client, dispatcher, session_maker):
    await register(client)
    await client.post("/api/auth/forgot-password", json={"method": "email", "email": "alice@x.com"})
    _, token = dispatcher.emails[0]

    resp = await client.post(
        "/api/auth/reset-password", json={"token": token, "newPassword": "brandnew1"}
    )
    assert resp.status_code == 200
    assert resp.json()["message"] == "Password has been reset successfully."

    await login(client, password="brandnew1")

    reuse = await client.post(
        "/api/auth/reset-password", json={"token": token, "newPassword": "another1"}
    )
    assert reuse.status_code == 400
    assert reuse.json()["detail"]["message"] == "Password reset token/code is invalid or has expired."

    user = await load_user(session_maker, "alice@x.com")
    assert user.reset_password_token is None
    assert user.verification_code is None


@pytest.mark.asyncio
async def test_sms_reset_round_trip(client, dispatcher):
    await register(client)
    token = await login(client)
    await add_phone(client, token)

    resp = await client.post(
        "/api/auth/forgot-password", json={"method": "sms", "phoneNumber": "+254700000001"}
    )
    assert resp.status_code == 200
    phone, code = dispatcher.sms[0]
    assert phone == "+254700000001"
    assert len(code) == 6 and code.isdigit()

    resp = await client.post("/api/auth/reset-password", json={"token": code, "newPassword": "viaSms1"})
    assert resp.status_code == 200
    await login(client, password="viaSms1")


@pytest.mark.asyncio
async def test_expired_code_rejected(client, dispatcher, session_maker):
    await register(client)
    await client.post("/api/auth/forgot-password", json={"method": "email", "email": "alice@x.com"})
    _, token = dispatcher.emails[0]

    async with session_maker() as s:
        await s.execute(
            update(User).values(reset_password_expires_at=datetime.now(UTC) - timedelta(minutes=1))
        )
        await s.commit()

    resp = await client.post("/api/auth/reset-password", json={"token": token, "newPassword": "late123"})
    assert resp.status_code == 400
    assert resp.json()["detail"]["code"] == "INVALID_RESET_TOKEN"


@pytest.mark.asyncio
async def test_new_code_supersedes_other_channel(client, dispatcher):
    await register(client)
    token = await login(client)
    await add_phone(client, token)

    await client.post("/api/auth/forgot-password", json={"method": "email", "email": "alice@x.com"})
    _, email_token = dispatcher.emails[0]
    await client.post("/api/auth/forgot-password", json={"method": "sms", "phoneNumber": "+254700000001"})
    _, sms_code = dispatcher.sms[0]

    stale = await client.post(
        "/api/auth/reset-password", json={"token": email_token, "newPassword": "newpass1"}
    )
    assert stale.status_code == 400

    fresh = await client.post(
        "/api/auth/reset-password", json={"token": sms_code, "newPassword": "newpass1"}
    )
    assert fresh.status_code == 200


@pytest.mark.asyncio
async def test_code_shared_by_two_users_is_ambiguous(client, session_maker):
    await register(client)
    await register(client, username="bob", email="bob@x.com")

    async with session_maker() as s:
        await s.execute(
            update(User).values(
                verification_code="123456",
                verification_code_expires_at=datetime.now(UTC) + timedelta(minutes=5),
            )
        )
        await s.commit()

    resp = await client.post("/api/auth/reset-password", json={"token": "123456", "newPassword": "hijack1"})
    assert resp.status_code == 400
    assert resp.json()["detail"]["code"] == "INVALID_RESET_TOKEN"


@pytest.mark.asyncio
async def test_short_new_password_rejected(client, dispatcher):
    await register(client)
    await client.post("/api/auth/forgot-password", json={"method": "email", "email": "alice@x.com"})
    _, token = dispatcher.emails[0]

    resp = await client.post("/api/auth/reset-password", json={"token": token, "newPassword": "123"})
    assert resp.status_code == 400
    assert resp.json()["detail"]["code"] == "VALIDATION_ERROR"
