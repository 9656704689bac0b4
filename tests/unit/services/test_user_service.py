"""Tests for account registration, login and profile updates."""

import pytest

from derra.core.auth import verify_token
from derra.core.exceptions import (
    AuthenticationError,
    ResourceAlreadyExistsError,
)
from derra.services.user_service import UserService


class TestRegistration:
    @pytest.mark.asyncio
    async def test_password_is_stored_hashed(self, storage):
        service = UserService(storage)

        user = await service.register("alice", "alice@example.com", "secret123", name="Alice")

        assert user.password != "secret123"
        assert (await service.authenticate("alice", "secret123")).id == user.id

    @pytest.mark.asyncio
    async def test_duplicate_username(self, storage):
        service = UserService(storage)
        await service.register("alice", "alice@example.com", "secret123")

        with pytest.raises(ResourceAlreadyExistsError) as exc_info:
            await service.register("alice", "other@example.com", "secret123")

        assert exc_info.value.message == "Username already exists"

    @pytest.mark.asyncio
    async def test_duplicate_email(self, storage):
        service = UserService(storage)
        await service.register("alice", "alice@example.com", "secret123")

        with pytest.raises(ResourceAlreadyExistsError) as exc_info:
            await service.register("alicia", "alice@example.com", "secret123")

        assert exc_info.value.message == "Email already exists"


class TestAuthentication:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("username, password", [("alice", "wrong"), ("nobody", "secret123")])
    async def test_invalid_credentials(self, storage, username, password):
        service = UserService(storage)
        await service.register("alice", "alice@example.com", "secret123")

        with pytest.raises(AuthenticationError) as exc_info:
            await service.authenticate(username, password)

        assert exc_info.value.message == "Invalid credentials"

    @pytest.mark.asyncio
    async def test_issued_token_identifies_user(self, storage):
        service = UserService(storage)
        user = await service.register("alice", "alice@example.com", "secret123")

        token, expires_in = service.issue_token(user)

        assert verify_token(token)["user_id"] == user.id
        assert expires_in == 24 * 60 * 60


class TestProfile:
    @pytest.mark.asyncio
    async def test_update_ignores_protected_fields(self, storage):
        service = UserService(storage)
        user = await service.register("alice", "alice@example.com", "secret123")

        updated = await service.update_profile(
            user, {"name": "Alice A.", "username": "mallory", "password": "x"}
        )

        assert updated.name == "Alice A."
        assert updated.username == "alice"
        assert updated.password == user.password

    @pytest.mark.asyncio
    async def test_email_taken_by_another_user(self, storage):
        service = UserService(storage)
        alice = await service.register("alice", "alice@example.com", "secret123")
        await service.register("bob", "bob@example.com", "secret123")

        with pytest.raises(ResourceAlreadyExistsError):
            await service.update_profile(alice, {"email": "bob@example.com"})

    @pytest.mark.asyncio
    async def test_requires_actor(self, storage):
        with pytest.raises(AuthenticationError):
            await UserService(storage).update_profile(None, {"name": "x"})
