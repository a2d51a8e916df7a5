from __future__ import annotations

import pytest

from authcore.models import User
from authcore.services._shared.cache_keys import user_by_email_key, user_key
from authcore.services._shared.errors import ConflictError, NotFoundError
from authcore.services._shared.ports import InMemoryCacheStore
from authcore.services.users.dto import UserOut
from authcore.services.users.service import UserService
from tests.factories.refresh_token import RefreshTokenFactory
from tests.factories.user import UserFactory


@pytest.fixture()
def cache() -> InMemoryCacheStore:
    return InMemoryCacheStore()


@pytest.fixture()
def users(cache) -> UserService:
    return UserService(cache=cache)


class TestReads:
    def test_get_by_id_reads_through_the_cache(self, users, cache, session, monkeypatch):
        user = UserFactory(name="Ada")

        first = users.get_by_id(user.id)
        assert isinstance(first, UserOut)
        assert cache.get(user_key(user.id)).value["name"] == "Ada"

        monkeypatch.setattr(users, "_load", lambda **kw: pytest.fail("database hit"))
        assert users.get_by_id(user.id) == first

    def test_get_by_id_missing(self, users, cache, session):
        with pytest.raises(NotFoundError):
            users.get_by_id("missing")
        assert not cache.get(user_key("missing")).hit

    def test_find_by_email(self, users, cache, session):
        user = UserFactory(email="grace@example.com")

        found = users.find_by_email("Grace@Example.com")

        assert found is not None and found.id == user.id
        assert cache.get(user_by_email_key("grace@example.com")).hit
        assert users.find_by_email("nobody@example.com") is None

    def test_snapshot_round_trips_through_cache(self, users, session):
        user = UserFactory()

        cached = users.get_by_id(user.id)
        again = users.get_by_id(user.id)

        assert cached.created_at == again.created_at
        assert "password_hash" not in cached.to_cache()


class TestWrites:
    def test_create_primes_the_cache(self, users, cache, session):
        out = users.create(email="New@Example.com", password="long-enough", name="New")

        assert out.email == "new@example.com"
        assert cache.get(user_key(out.id)).value["email"] == "new@example.com"

    def test_create_duplicate_email(self, users, session):
        UserFactory(email="dup@example.com")

        with pytest.raises(ConflictError):
            users.create(email="DUP@example.com", password="long-enough")

    def test_set_active_invalidates(self, users, cache, session):
        user = UserFactory()
        users.get_by_id(user.id)
        users.find_by_email(user.email)

        out = users.set_active(user.id, False)

        assert out.is_active is False
        assert not cache.get(user_key(user.id)).hit
        assert not cache.get(user_by_email_key(user.email)).hit

    def test_update_profile(self, users, session):
        user = UserFactory()

        out = users.update(user.id, name="Renamed", role="ADMIN")

        assert out.name == "Renamed"
        assert out.role == "ADMIN"

    def test_update_missing_user(self, users, session):
        with pytest.raises(NotFoundError):
            users.update("missing", name="x")

    def test_delete_removes_user_and_tokens(self, users, cache, session):
        rt = RefreshTokenFactory()
        user_id = rt.user_id
        users.get_by_id(user_id)

        users.delete(user_id)

        assert session.get(User, user_id) is None
        assert not cache.get(user_key(user_id)).hit
