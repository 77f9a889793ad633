"""
Shared request helpers for API tests.
"""

import httpx


async def register(
    client: httpx.AsyncClient,
    username: str = "alice",
    email: str = "alice@x.com",
    password: str = "secret1",
) -> dict:
    resp = await client.post("/api/auth/register", json={
        "username": username,
        "email": email,
        "password": password,
    })
    assert resp.status_code == 201, f"Register failed: {resp.text}"
    return resp.json()


async def login(client: httpx.AsyncClient, email: str = "alice@x.com", password: str = "secret1") -> str:
    """Log in and return the bearer token, leaving no cookie behind."""
    resp = await client.post("/api/auth/login", json={
        "email": email,
        "password": password,
    })
    assert resp.status_code == 200, f"Login failed: {resp.text}"
    client.cookies.clear()
    return resp.json()["token"]


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


async def create_task(client: httpx.AsyncClient, token: str, **fields) -> dict:
    body = {"title": "T1", **fields}
    resp = await client.post("/api/tasks", json=body, headers=bearer(token))
    assert resp.status_code == 201, f"Create task failed: {resp.text}"
    return resp.json()["task"]
