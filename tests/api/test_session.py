"""Tests for session management."""

import time
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import pytest_asyncio

from api import session as session_module
from api.session import (
    InMemorySessionStore,
    RedisSessionStore,
    SessionSigner,
    create_session,
    get_session_signer,
    get_session_store,
    reset_session_store,
)
from config import AppConfig, RedisConfig


class TestSessionSigner:
    """Tests for SessionSigner class."""

    def test_sign_and_unsign(self):
        signer = SessionSigner(secret_key="test-secret")
        token = signer.sign("session-123")
        assert token != "session-123"
        assert signer.unsign(token, max_age=3600) == "session-123"

    def test_invalid_token(self):
        assert SessionSigner(secret_key="test-secret").unsign("garbage", max_age=3600) is None

    def test_wrong_secret(self):
        token = SessionSigner(secret_key="one").sign("session")
        assert SessionSigner(secret_key="two").unsign(token, max_age=3600) is None

    def test_expired_token(self):
        signer = SessionSigner(secret_key="test-secret")
        token = signer.sign("session")
        later = time.time() + 7200
        with patch("time.time", lambda: later):
            assert signer.unsign(token, max_age=3600) is None


class TestInMemorySessionStore:
    """Tests for InMemorySessionStore class."""

    @pytest_asyncio.fixture
    async def store(self):
        return InMemorySessionStore()

    @pytest.mark.asyncio
    async def test_set_get_delete(self, store):
        await store.set("s1", {"balance": 1000}, ttl=3600)
        assert await store.get("s1") == {"balance": 1000}
        assert await store.exists("s1")

        await store.delete("s1")
        assert await store.get("s1") is None
        await store.delete("s1")

    @pytest.mark.asyncio
    async def test_expired_sessions_are_dropped(self, store):
        await store.set("old", {"v": 1}, ttl=1)
        await store.set("new", {"v": 2}, ttl=3600)
        store._sessions["old"] = (store._sessions["old"][0], store._sessions["old"][1].replace(year=2000))

        assert await store.cleanup_expired() == 1
        assert not await store.exists("old")
        assert await store.exists("new")

    @pytest.mark.asyncio
    async def test_create_session_id_is_signed(self, store):
        token = store.create_session_id()
        assert get_session_signer().unsign(token) is not None


class TestRedisSessionStore:
    """RedisSessionStore against a mocked client."""

    @pytest.fixture
    def client(self):
        client = MagicMock()
        client.get = AsyncMock(return_value=b'{"balance": 5}')
        client.setex = AsyncMock()
        client.delete = AsyncMock()
        client.exists = AsyncMock(return_value=1)
        return client

    @pytest.mark.asyncio
    async def test_get_decodes_json(self, client):
        store = RedisSessionStore(client)
        assert await store.get("abc") == {"balance": 5}
        client.get.assert_awaited_once_with("cardplay:session:abc")

    @pytest.mark.asyncio
    async def test_set_uses_ttl(self, client):
        store = RedisSessionStore(client)
        await store.set("abc", {"balance": 7}, ttl=60)
        client.setex.assert_awaited_once_with("cardplay:session:abc", 60, '{"balance": 7}')

    @pytest.mark.asyncio
    async def test_exists_and_delete(self, client):
        store = RedisSessionStore(client)
        assert await store.exists("abc")
        await store.delete("abc")
        client.delete.assert_awaited_once_with("cardplay:session:abc")


class TestStoreSelection:
    """The store is chosen by REDIS_ENABLED."""

    @pytest.fixture(autouse=True)
    def fresh_store(self):
        reset_session_store()
        yield
        reset_session_store()

    @pytest.mark.asyncio
    async def test_in_memory_when_disabled(self):
        with patch.object(session_module, "config", AppConfig(redis=RedisConfig(enabled=False))):
            assert isinstance(await get_session_store(), InMemorySessionStore)

    @pytest.mark.asyncio
    async def test_redis_when_enabled(self):
        client = MagicMock()
        client.ping = AsyncMock(return_value=True)
        with (
            patch.object(session_module, "config", AppConfig(redis=RedisConfig(enabled=True))),
            patch.object(session_module.redis, "from_url", return_value=client),
        ):
            assert isinstance(await get_session_store(), RedisSessionStore)

    @pytest.mark.asyncio
    async def test_unreachable_redis_falls_back_and_logs(self, caplog):
        client = MagicMock()
        client.ping = AsyncMock(side_effect=ConnectionError("refused"))
        with (
            patch.object(session_module, "config", AppConfig(redis=RedisConfig(enabled=True))),
            patch.object(session_module.redis, "from_url", return_value=client),
        ):
            store = await get_session_store()
        assert isinstance(store, InMemorySessionStore)
        assert "unreachable" in caplog.text

    @pytest.mark.asyncio
    async def test_create_and_get_session(self):
        token = await create_session({"balance": 1000})
        store = await get_session_store()
        assert await store.get(token) == {"balance": 1000}
