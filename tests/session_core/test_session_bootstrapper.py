"""Testes do Session Bootstrapper (via façade).

Cenários: sem homeserver, sem credencial, credencial válida e expirada,
homeserver inválido, falha de construção, guard de concorrência e
logout durante o bootstrap.
"""

from __future__ import annotations

import asyncio

import pytest

from fsm.states.status import ClientStatus
from session_core.errors import (
    BootstrapError,
    BootstrapInProgress,
    ClientConstructionFailed,
    InvalidHomeserver,
    LifecycleCancelled,
    NoHomeserverSelected,
)
from session_core.infra.stores import CryptoStore, SyncCache
from session_core.protocols.errors import ProtocolRequestError
from session_core.protocols.models import SyncState, VersionsResponse
from session_core.sessions.manager import MatrixSessionManager
from tests.fakes.fake_protocol_client import FakeClientFactory, FakeProtocolClient


def _statuses(manager: MatrixSessionManager) -> list[tuple[str, str]]:
    return [(t.from_status.value, t.to_status.value) for t in manager.history]


def _assert_rolled_back(manager: MatrixSessionManager) -> None:
    assert manager.status == ClientStatus.IDLE
    assert manager.homeserver is None
    assert manager.client is None
    assert manager.access_token is None


class TestBootstrapPreconditions:
    @pytest.mark.asyncio
    async def test_requires_selected_homeserver(self, manager: MatrixSessionManager) -> None:
        with pytest.raises(NoHomeserverSelected, match="no homeserver is selected"):
            await manager.bootstrap()
        assert manager.status == ClientStatus.IDLE
        assert manager.history == []


class TestBootstrapWithoutCredential:
    @pytest.mark.asyncio
    async def test_ends_idle_with_unauthenticated_client(
        self, manager: MatrixSessionManager, factory: FakeClientFactory
    ) -> None:
        manager.select_homeserver("https://example.org")

        report = await manager.bootstrap()

        assert report.resumed is False
        assert report.homeserver_url == "https://example.org"
        assert manager.status == ClientStatus.IDLE
        client = manager.client
        assert client is factory.last
        assert client.access_token is None
        assert client.calls == ["get_versions"]
        assert _statuses(manager) == [("idle", "connecting"), ("connecting", "idle")]

    @pytest.mark.asyncio
    async def test_client_bound_to_persisted_identity(
        self, manager: MatrixSessionManager, factory: FakeClientFactory
    ) -> None:
        manager.select_homeserver("https://example.org")
        await manager.bootstrap()

        config = factory.last.config
        assert config.base_url == "https://example.org"
        assert config.device_id == manager.device_id
        assert config.timeline_support is True
        assert "m.sas.v1" in config.verification_methods
        assert isinstance(config.store, SyncCache)
        assert isinstance(config.crypto_store, CryptoStore)


class TestBootstrapWithCredential:
    @pytest.mark.asyncio
    async def test_valid_credential_resumes_and_reaches_ready(
        self, manager: MatrixSessionManager, factory: FakeClientFactory
    ) -> None:
        manager.select_homeserver("https://example.org")
        manager.state.identity.save_access_token("syt_valid")

        report = await manager.bootstrap()

        assert report.resumed is True
        assert report.resume is not None
        assert manager.status == ClientStatus.SYNCING
        assert factory.last.access_token == "syt_valid"

        factory.last.emit(SyncState.PREPARED)

        assert manager.status == ClientStatus.READY
        assert _statuses(manager) == [
            ("idle", "connecting"),
            ("connecting", "syncing"),
            ("syncing", "ready"),
        ]

    @pytest.mark.asyncio
    async def test_expired_credential_returns_to_idle_and_clears_token(
        self, manager: MatrixSessionManager, factory: FakeClientFactory
    ) -> None:
        def configure(client: FakeProtocolClient) -> None:
            client.whoami_result = ProtocolRequestError(
                "Invalid access token", status_code=401, errcode="M_UNKNOWN_TOKEN"
            )

        factory.configure = configure
        manager.select_homeserver("https://example.org")
        manager.state.identity.save_access_token("syt_expired")

        report = await manager.bootstrap()

        assert report.resumed is False
        assert report.resume_failure is not None
        assert manager.status == ClientStatus.IDLE
        assert manager.access_token is None
        assert manager.homeserver is not None
        assert manager.client is factory.last
        assert "start_client" not in factory.last.calls


class TestBootstrapRollback:
    @pytest.mark.asyncio
    async def test_invalid_homeserver_rolls_back(
        self, manager: MatrixSessionManager, factory: FakeClientFactory
    ) -> None:
        factory.configure = lambda c: setattr(c, "versions_result", VersionsResponse(versions=[]))
        manager.select_homeserver("https://example.org")
        manager.state.identity.save_access_token("syt_valid")

        with pytest.raises(InvalidHomeserver, match=r"Homeserver \(example.org\)"):
            await manager.bootstrap()

        _assert_rolled_back(manager)
        assert factory.last.closed

    @pytest.mark.asyncio
    async def test_unreachable_homeserver_rolls_back(
        self, manager: MatrixSessionManager, factory: FakeClientFactory
    ) -> None:
        factory.configure = lambda c: setattr(c, "versions_result", ConnectionError("refused"))
        manager.select_homeserver("https://example.org")

        with pytest.raises(BootstrapError):
            await manager.bootstrap()
        _assert_rolled_back(manager)

    @pytest.mark.asyncio
    async def test_construction_failure_rolls_back(
        self, manager: MatrixSessionManager, factory: FakeClientFactory
    ) -> None:
        factory.error = OSError("disk full")
        manager.select_homeserver("https://example.org")

        with pytest.raises(ClientConstructionFailed, match="disk full"):
            await manager.bootstrap()
        _assert_rolled_back(manager)

    @pytest.mark.asyncio
    async def test_rollback_is_repeatable(
        self, manager: MatrixSessionManager, factory: FakeClientFactory
    ) -> None:
        factory.error = OSError("disk full")
        for _ in range(2):
            manager.select_homeserver("https://example.org")
            with pytest.raises(ClientConstructionFailed):
                await manager.bootstrap()
            _assert_rolled_back(manager)


class TestBootstrapConcurrency:
    @pytest.mark.asyncio
    async def test_second_bootstrap_rejected_while_connecting(
        self, manager: MatrixSessionManager, factory: FakeClientFactory
    ) -> None:
        gate = asyncio.Event()
        factory.configure = lambda c: setattr(c, "versions_gate", gate)
        manager.select_homeserver("https://example.org")

        first = asyncio.create_task(manager.bootstrap())
        await asyncio.sleep(0)
        assert manager.status == ClientStatus.CONNECTING

        with pytest.raises(BootstrapInProgress, match="connecting"):
            await manager.bootstrap()

        gate.set()
        await first
        assert manager.status == ClientStatus.IDLE
        assert len(factory.created) == 1

    @pytest.mark.asyncio
    async def test_logout_during_bootstrap_cancels_it(
        self, manager: MatrixSessionManager, factory: FakeClientFactory
    ) -> None:
        gate = asyncio.Event()
        factory.configure = lambda c: setattr(c, "versions_gate", gate)
        manager.select_homeserver("https://example.org")

        task = asyncio.create_task(manager.bootstrap())
        await asyncio.sleep(0)
        await manager.unset_current_homeserver()
        gate.set()

        with pytest.raises(LifecycleCancelled):
            await task
        assert manager.status == ClientStatus.IDLE
        assert manager.client is None
        assert factory.last.closed

    @pytest.mark.asyncio
    async def test_bootstrap_from_ready_replaces_client(
        self, manager: MatrixSessionManager, factory: FakeClientFactory
    ) -> None:
        manager.select_homeserver("https://example.org")
        manager.state.identity.save_access_token("syt_valid")
        await manager.bootstrap()
        old = factory.last
        old.emit(SyncState.PREPARED)
        assert manager.status == ClientStatus.READY

        await manager.bootstrap()

        assert old.closed
        assert manager.client is factory.last
        assert manager.client is not old
        assert ("ready", "connecting") in _statuses(manager)
