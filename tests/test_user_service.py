"""
Cat Registry API — User Service Unit Tests
===========================================

What:  UserService handlers: registration, redaction, self-service
       update/delete, token introspection and login.
"""

import uuid

import pytest
from sqlalchemy.exc import InvalidRequestError

from catapi.exceptions import AuthenticationError, AuthorizationError, NotFoundError, ValidationError
from catapi.schemas.user import LoginRequest, UserCreate, UserUpdate
from catapi.security import decode_access_token, verify_password
from catapi.services.cat_service import cat_service
from catapi.services.file_service import file_service
from catapi.services.user_service import user_service
from catapi.stores import REDACTED, CatStore, UserStore


def _cat_form():
    return {"cat_name": "Mittens", "weight": "4.5", "birthdate": "2020-05-17", "lng": None, "lat": None}


class TestRegister:

    @pytest.mark.asyncio
    async def test_role_is_forced_to_user(self, db):
        body = UserCreate.model_validate(
            {"user_name": "mallory", "email": "mallory@example.com", "password": "secret", "role": "admin"}
        )
        result = await user_service.register(db, body)
        await db.commit()

        assert result.message == "User added"
        stored = await UserStore(db).find_by_email("mallory@example.com")
        assert stored.role == "user"

    @pytest.mark.asyncio
    async def test_password_is_hashed(self, db):
        body = UserCreate(user_name="carol", email="carol@example.com", password="plain-text")
        await user_service.register(db, body)

        stored = await UserStore(db).find_by_email("carol@example.com")
        assert stored.password != "plain-text"
        assert verify_password("plain-text", stored.password)

    @pytest.mark.asyncio
    async def test_response_has_no_password_or_role(self, db):
        body = UserCreate(user_name="carol", email="carol@example.com", password="plain-text")
        result = await user_service.register(db, body)

        payload = result.model_dump(by_alias=True)
        assert set(payload["data"]) == {"_id", "user_name", "email"}

    @pytest.mark.asyncio
    async def test_duplicate_email(self, db, alice):
        body = UserCreate(user_name="alice2", email="alice@example.com", password="secret")
        with pytest.raises(ValidationError, match="Email already in use"):
            await user_service.register(db, body)


class TestReads:

    @pytest.mark.asyncio
    async def test_list_users(self, db, alice, bob):
        users = await user_service.list_users(db)
        assert {user.email for user in users} == {"alice@example.com", "bob@example.com"}

    @pytest.mark.asyncio
    async def test_get_user(self, db, alice):
        user = await user_service.get_user(db, alice.id)
        assert user.user_name == "alice"

    @pytest.mark.asyncio
    async def test_get_missing_user(self, db):
        with pytest.raises(NotFoundError):
            await user_service.get_user(db, uuid.uuid4())

    @pytest.mark.asyncio
    async def test_redacted_columns_cannot_be_read(self, db, alice):
        user = await UserStore(db).find_by_id(alice.id, exclude=REDACTED)
        with pytest.raises(InvalidRequestError):
            _ = user.password


class TestUpdateCurrent:

    @pytest.mark.asyncio
    async def test_update_name_and_password(self, db, alice, alice_caller):
        result = await user_service.update_current(
            db, alice_caller, UserUpdate(user_name="alicia", password="new-pass")
        )
        assert result.message == "User updated"
        assert result.data.user_name == "alicia"

        stored = await UserStore(db).find_by_email("alice@example.com")
        assert verify_password("new-pass", stored.password)

    @pytest.mark.asyncio
    async def test_role_in_body_is_ignored(self, db, alice, alice_caller):
        body = UserUpdate.model_validate({"user_name": "alicia", "role": "admin"})
        await user_service.update_current(db, alice_caller, body)

        stored = await UserStore(db).find_by_email("alice@example.com")
        assert stored.role == "user"

    @pytest.mark.asyncio
    async def test_email_taken_by_someone_else(self, db, alice, bob, alice_caller):
        with pytest.raises(ValidationError, match="Email already in use"):
            await user_service.update_current(db, alice_caller, UserUpdate(email="bob@example.com"))

    @pytest.mark.asyncio
    async def test_no_caller(self, db):
        with pytest.raises(AuthorizationError, match="No user"):
            await user_service.update_current(db, None, UserUpdate(user_name="nobody"))

    @pytest.mark.asyncio
    async def test_empty_update(self, db, alice, alice_caller):
        with pytest.raises(ValidationError, match="No fields to update"):
            await user_service.update_current(db, alice_caller, UserUpdate())


class TestDeleteCurrent:

    @pytest.mark.asyncio
    async def test_delete_cascades_to_cats(self, db, alice, bob, alice_caller):
        for owner, name in ((alice, "Mittens"), (alice, "Tom"), (bob, "Rex")):
            await CatStore(db).create(
                {
                    "cat_name": name,
                    "weight": 3.0,
                    "owner_id": owner.id,
                    "filename": "2026/01/01/cat.jpg",
                    "longitude": 24.94,
                    "latitude": 60.17,
                }
            )
        await db.commit()

        result = await user_service.delete_current(db, alice_caller)
        await db.commit()

        assert result.message == "User deleted"
        assert result.data.id == alice.id
        assert await UserStore(db).find_by_id(alice.id) is None
        remaining = await CatStore(db).find()
        assert [cat.cat_name for cat in remaining] == ["Rex"]

    @pytest.mark.asyncio
    async def test_delete_removes_cat_images(self, db, alice_caller, bob_caller, sample_image_bytes):
        own = await cat_service.create_cat(db, alice_caller, _cat_form(), "kitty.jpg", sample_image_bytes)
        other = await cat_service.create_cat(db, bob_caller, _cat_form(), "rex.jpg", sample_image_bytes)
        await db.commit()

        await user_service.delete_current(db, alice_caller)

        assert not file_service.resolve(own.data.filename).exists()
        assert file_service.resolve(other.data.filename).exists()

    @pytest.mark.asyncio
    async def test_delete_twice(self, db, alice, alice_caller):
        await user_service.delete_current(db, alice_caller)
        with pytest.raises(NotFoundError):
            await user_service.delete_current(db, alice_caller)

    @pytest.mark.asyncio
    async def test_no_caller(self, db):
        with pytest.raises(AuthorizationError, match="No user"):
            await user_service.delete_current(db, None)


class TestTokenAndLogin:

    @pytest.mark.asyncio
    async def test_check_token_echoes_identity(self, alice_caller):
        result = user_service.check_token(alice_caller)
        assert result.id == alice_caller.id
        assert result.email == "alice@example.com"

    def test_check_token_without_caller(self):
        with pytest.raises(AuthorizationError, match="No user"):
            user_service.check_token(None)

    @pytest.mark.asyncio
    async def test_login(self, db, admin):
        result = await user_service.login(db, LoginRequest(username="admin@example.com", password="admin-pass"))
        assert result.user.id == admin.id

        claims = decode_access_token(result.token)
        assert claims["sub"] == str(admin.id)
        assert claims["role"] == "admin"

    @pytest.mark.asyncio
    async def test_login_wrong_password(self, db, alice):
        with pytest.raises(AuthenticationError):
            await user_service.login(db, LoginRequest(username="alice@example.com", password="wrong-pass"))

    @pytest.mark.asyncio
    async def test_login_unknown_user(self, db):
        with pytest.raises(AuthenticationError):
            await user_service.login(db, LoginRequest(username="nobody@example.com", password="whatever"))
