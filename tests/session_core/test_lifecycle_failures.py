"""Testes de exclusão mútua e recuperação do ciclo de vida.

Cobre: resume manual concorrente com bootstrap/logout, rollback e logout
com o Identity Store indisponível, e credencial recusada pelo /sync.
"""

from __future__ import annotations

import asyncio

import httpx
import pytest

from api.connectors.matrix import MatrixClientFactory
from config.settings import ClientSettings, StorageSettings
from fsm.states.status import ClientStatus
from session_core.bootstrap.dependencies import build_session_manager
from session_core.errors import (
    AuthenticationExpired,
    BootstrapInProgress,
    ClientConstructionFailed,
    LifecycleCancelled,
)
from session_core.identity.store import DEVICE_ID_KEY
from session_core.infra.stores import MemoryKeyValueStore
from session_core.protocols.models import SyncState
from session_core.services import SessionResumer
from session_core.sessions.manager import MatrixSessionManager
from session_core.sessions.state import ClientSessionState
from tests.fakes.fake_protocol_client import FakeClientFactory, FakeProtocolClient
from utils.errors import StoreUnavailableError

FAST_SETTINGS = ClientSettings(
    validation_timeout_seconds=0.5,
    request_timeout_seconds=0.5,
)


class FailingBackend(MemoryKeyValueStore):
    """Backend que simula Redis/arquivo indisponível quando `failing`."""

    def __init__(self) -> None:
        super().__init__()
        self.failing = False

    def get(self, key: str) -> str | None:
        if self.failing and key == DEVICE_ID_KEY:
            raise StoreUnavailableError("redis_get_failed")
        return super().get(key)

    def delete(self, key: str) -> bool:
        if self.failing:
            raise StoreUnavailableError("redis_delete_failed")
        return super().delete(key)


async def _awaiting_login(manager: MatrixSessionManager) -> FakeProtocolClient:
    manager.select_homeserver("https://example.org")
    await manager.bootstrap()
    assert manager.status == ClientStatus.IDLE
    client = manager.client
    assert isinstance(client, FakeProtocolClient)
    return client


async def _wait_for_status(manager: MatrixSessionManager, status: ClientStatus) -> None:
    for _ in range(500):
        if manager.status == status:
            return
        await asyncio.sleep(0.001)


class TestManualResumeExclusion:
    @pytest.mark.asyncio
    async def test_bootstrap_rejected_while_manual_resume_waits(
        self, manager: MatrixSessionManager, factory: FakeClientFactory
    ) -> None:
        client = await _awaiting_login(manager)
        client.whoami_gate = asyncio.Event()

        task = asyncio.create_task(manager.login_with_access_token("syt_manual"))
        await asyncio.sleep(0)
        assert manager.status == ClientStatus.CONNECTING

        with pytest.raises(BootstrapInProgress, match="connecting"):
            await manager.bootstrap()
        with pytest.raises(BootstrapInProgress):
            manager.select_homeserver("https://other.org")

        client.whoami_gate.set()
        await task

        assert manager.client is client
        assert len(factory.created) == 1
        assert client.started
        assert client.stop_calls == 0
        client.emit(SyncState.PREPARED)
        assert manager.status == ClientStatus.READY

    @pytest.mark.asyncio
    async def test_logout_during_manual_resume_cancels_it(self, manager: MatrixSessionManager) -> None:
        client = await _awaiting_login(manager)
        client.whoami_gate = asyncio.Event()

        task = asyncio.create_task(manager.login_with_access_token("syt_manual"))
        await asyncio.sleep(0)
        await manager.unset_current_homeserver()
        client.whoami_gate.set()

        with pytest.raises(LifecycleCancelled):
            await task
        assert manager.status == ClientStatus.IDLE
        assert manager.client is None
        assert not client.started

    @pytest.mark.asyncio
    async def test_failure_handling_ignores_replaced_client(self, state: ClientSessionState) -> None:
        current = FakeProtocolClient()
        stale = FakeProtocolClient()
        state.identity.save_access_token("syt_valid")
        state.attach_client(current)

        result = await SessionResumer(state).handle_failure(
            AuthenticationExpired("Access token was not accepted", credential_rejected=True),
            state.generation,
            stale,
        )

        assert not result.success
        assert state.identity.load_access_token() == "syt_valid"
        assert stale.stop_calls == 0
        assert current.stop_calls == 0


class TestUnavailableIdentityStore:
    @pytest.fixture
    def backend(self) -> FailingBackend:
        return FailingBackend()

    @pytest.mark.asyncio
    async def test_rollback_resets_status_even_if_store_fails(
        self, manager: MatrixSessionManager, backend: FailingBackend
    ) -> None:
        manager.select_homeserver("https://example.org")
        backend.failing = True

        with pytest.raises(ClientConstructionFailed, match="redis_get_failed"):
            await manager.bootstrap()

        assert manager.status == ClientStatus.IDLE
        assert manager.client is None

        await manager.unset_current_homeserver()
        assert manager.status == ClientStatus.IDLE

        backend.failing = False
        manager.select_homeserver("https://example.org")
        await manager.bootstrap()
        assert manager.client is not None

    @pytest.mark.asyncio
    async def test_logout_resets_status_even_if_store_fails(
        self,
        manager: MatrixSessionManager,
        backend: FailingBackend,
        factory: FakeClientFactory,
    ) -> None:
        manager.select_homeserver("https://example.org")
        manager.state.identity.save_access_token("syt_valid")
        await manager.bootstrap()
        assert manager.status == ClientStatus.SYNCING
        backend.failing = True

        await manager.unset_current_homeserver()

        assert manager.status == ClientStatus.IDLE
        assert manager.client is None
        assert factory.last.closed


class TestSyncRejection:
    @pytest.mark.asyncio
    async def test_stopped_sync_returns_to_idle_and_clears_token(
        self, manager: MatrixSessionManager, factory: FakeClientFactory
    ) -> None:
        manager.select_homeserver("https://example.org")
        manager.state.identity.save_access_token("syt_valid")
        await manager.bootstrap()
        client = factory.last
        client.emit(SyncState.PREPARED)
        assert manager.status == ClientStatus.READY

        client.emit(SyncState.STOPPED, SyncState.SYNCING)

        assert manager.status == ClientStatus.IDLE
        assert manager.access_token is None
        assert client.access_token is None
        assert manager.client is client
        assert client.listeners == []

    @pytest.mark.asyncio
    async def test_stop_after_logout_is_ignored(
        self, manager: MatrixSessionManager, factory: FakeClientFactory
    ) -> None:
        manager.select_homeserver("https://example.org")
        manager.state.identity.save_access_token("syt_valid")
        await manager.bootstrap()
        client = factory.last
        await manager.unset_current_homeserver()

        manager.select_homeserver("https://example.org")
        manager.state.identity.save_access_token("syt_other")
        client.emit(SyncState.STOPPED)

        assert manager.access_token == "syt_other"
        assert manager.status == ClientStatus.IDLE

    @pytest.mark.asyncio
    async def test_sync_401_with_real_client_recovers(self, backend: MemoryKeyValueStore) -> None:
        async def handler(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(0)
            path = request.url.path
            if path == "/_matrix/client/versions":
                return httpx.Response(200, json={"versions": ["v1.11"]})
            if path == "/_matrix/client/v3/account/whoami":
                return httpx.Response(200, json={"user_id": "@alice:example.org"})
            if path == "/_matrix/client/v3/sync":
                return httpx.Response(401, json={"errcode": "M_UNKNOWN_TOKEN", "error": "expired"})
            return httpx.Response(200, json={})

        manager = build_session_manager(
            backend=backend,
            client_factory=MatrixClientFactory(transport=httpx.MockTransport(handler), max_retries=0),
            client_settings=FAST_SETTINGS,
            storage_settings=StorageSettings(),
        )
        manager.select_homeserver("https://example.org")
        manager.state.identity.save_access_token("syt_expired")

        report = await manager.bootstrap()
        assert report.resumed is True
        await _wait_for_status(manager, ClientStatus.IDLE)

        assert manager.status == ClientStatus.IDLE
        assert manager.access_token is None

        report = await manager.bootstrap()
        assert report.resumed is False
        assert manager.status == ClientStatus.IDLE
        await manager.unset_current_homeserver()
