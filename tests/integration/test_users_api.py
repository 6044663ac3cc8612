"""Integration tests for the user endpoints."""

import uuid

import pytest_check as check
from httpx import AsyncClient
from sqlalchemy.orm import Session

from models import User
from services.users import UserService

NEW_USER = {"name": "Asha Rao", "email": "Asha.Rao@aura-project.com", "password": "s3cret-pass"}


class TestRegister:
    """Tests for POST /api/users/register."""

    async def test_register_returns_user_without_password(
        self, async_client: AsyncClient, db_session: Session
    ) -> None:
        response = await async_client.post("/api/users/register", json=NEW_USER)

        user = response.json()["data"]
        check.equal(response.status_code, 201)
        check.equal(user["name"], "Asha Rao")
        check.equal(user["email"], "asha.rao@aura-project.com")
        check.is_not_in("password", user)
        check.is_not_in("hashed_password", user)

        stored = db_session.query(User).one()
        check.not_equal(stored.hashed_password, NEW_USER["password"])
        check.is_true(UserService.verify_password(NEW_USER["password"], stored.hashed_password))

    async def test_duplicate_email_rejected(self, async_client: AsyncClient) -> None:
        await async_client.post("/api/users/register", json=NEW_USER)

        response = await async_client.post(
            "/api/users/register", json={**NEW_USER, "email": "asha.rao@AURA-project.com"}
        )

        check.equal(response.status_code, 400)
        check.equal(response.json()["error"], "Email already registered")

    async def test_short_password_is_validation_error(self, async_client: AsyncClient) -> None:
        response = await async_client.post("/api/users/register", json={**NEW_USER, "password": "abc"})

        assert response.status_code == 422


class TestLoginAndLookup:
    """Tests for POST /api/users/login and GET /api/users/{id}."""

    async def test_login_round_trip(self, async_client: AsyncClient) -> None:
        registered = (await async_client.post("/api/users/register", json=NEW_USER)).json()["data"]

        login = await async_client.post(
            "/api/users/login", json={"email": NEW_USER["email"], "password": NEW_USER["password"]}
        )
        lookup = await async_client.get(f"/api/users/{registered['id']}")

        check.equal(login.status_code, 200)
        check.equal(login.json()["data"]["id"], registered["id"])
        check.equal(lookup.status_code, 200)
        check.equal(lookup.json()["data"]["email"], "asha.rao@aura-project.com")

    async def test_wrong_password(self, async_client: AsyncClient) -> None:
        await async_client.post("/api/users/register", json=NEW_USER)

        response = await async_client.post(
            "/api/users/login", json={"email": NEW_USER["email"], "password": "wrong-pass"}
        )

        check.equal(response.status_code, 401)
        check.equal(response.json()["error"], "Incorrect email or password")

    async def test_unknown_email(self, async_client: AsyncClient) -> None:
        response = await async_client.post(
            "/api/users/login", json={"email": "nobody@aura-project.com", "password": "whatever"}
        )

        assert response.status_code == 401

    async def test_unknown_user_id(self, async_client: AsyncClient) -> None:
        response = await async_client.get(f"/api/users/{uuid.uuid4()}")

        check.equal(response.status_code, 404)
        check.equal(response.json()["error"], "User not found")
