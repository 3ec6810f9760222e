"""Testes do MatrixClient e do sync loop (httpx.MockTransport)."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Awaitable, Callable
from typing import Any

import httpx
import pytest

from api.connectors.matrix import MatrixClient, MatrixClientFactory, MatrixHttpError
from api.connectors.matrix.events import SyncEventEmitter
from api.connectors.matrix.http_base import MatrixHttpConfig, MatrixHttpTransport
from api.connectors.matrix.sync_loop import SyncLoop
from session_core.infra.stores import CryptoStore, MemoryKeyValueStore, SyncCache
from session_core.protocols.models import ClientConfig, SyncState

BASE_URL = "https://example.org"
USER_ID = "@alice:example.org"


def _client(handler: Callable[[httpx.Request], httpx.Response], **config: Any) -> MatrixClient:
    return MatrixClient(
        ClientConfig(base_url=BASE_URL, **config),
        transport=httpx.MockTransport(handler),
        max_retries=0,
    )


def _routes(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if path == "/_matrix/client/versions":
        return httpx.Response(200, json={"versions": ["r0.6.1", "v1.11"], "unstable_features": {}})
    if path == "/_matrix/client/v3/account/whoami":
        return httpx.Response(200, json={"user_id": USER_ID, "device_id": "DEV1"})
    if path == "/_matrix/client/v3/login":
        return httpx.Response(200, json={"flows": [{"type": "m.login.password"}, {"type": "m.login.sso"}]})
    if path == "/_matrix/client/v3/keys/query":
        return httpx.Response(200, json={"device_keys": {USER_ID: {"DEV1": {"device_id": "DEV1"}}}})
    return httpx.Response(404, json={"errcode": "M_UNRECOGNIZED"})


class TestMatrixClientRest:
    @pytest.mark.asyncio
    async def test_versions_whoami_and_flows(self) -> None:
        client = _client(_routes, device_id="DEV1", access_token="syt_abc")

        versions = await client.get_versions()
        whoami = await client.whoami()
        flows = await client.login_flows()

        assert versions.is_compatible
        assert versions.supported_versions == ["r0.6.1", "v1.11"]
        assert whoami.user_id == USER_ID
        assert whoami.device_id == "DEV1"
        assert [flow.type for flow in flows] == ["m.login.password", "m.login.sso"]
        assert client.access_token == "syt_abc"
        await client.close()

    @pytest.mark.asyncio
    async def test_invalid_payload_becomes_matrix_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"user_id": ""})

        with pytest.raises(MatrixHttpError, match="invalid_response"):
            await _client(handler).whoami()

    @pytest.mark.asyncio
    async def test_init_crypto_requires_user(self) -> None:
        client = _client(_routes)
        with pytest.raises(RuntimeError):
            await client.init_crypto()
        assert client.crypto is None

    @pytest.mark.asyncio
    async def test_init_crypto_caches_own_keys(self) -> None:
        crypto_store = CryptoStore(MemoryKeyValueStore())
        client = _client(_routes, device_id="DEV1", access_token="syt_abc", crypto_store=crypto_store)
        client.set_credentials("syt_abc", USER_ID)

        await client.init_crypto()

        assert client.crypto is not None
        cached = crypto_store.load_device_keys(USER_ID)
        assert cached is not None
        assert "DEV1" in cached["device_keys"]

    def test_factory_builds_bound_client(self) -> None:
        client = MatrixClientFactory().create_client(ClientConfig(base_url=BASE_URL, device_id="DEV1"))
        assert client.base_url == BASE_URL
        assert client.device_id == "DEV1"
        assert client.user_id is None


def _sync_handler(
    responses: list[httpx.Response],
    seen: list[httpx.Request],
) -> Callable[[httpx.Request], Awaitable[httpx.Response]]:
    async def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        await asyncio.sleep(0)
        if responses:
            return responses.pop(0)
        await asyncio.sleep(3600)
        return httpx.Response(200, json={"next_batch": "never"})

    return handler


def _loop(
    handler: Callable[[httpx.Request], Awaitable[httpx.Response]],
    store: SyncCache | None = None,
) -> tuple[SyncLoop, SyncEventEmitter]:
    http = MatrixHttpTransport(
        MatrixHttpConfig(base_url=BASE_URL, max_retries=0),
        transport=httpx.MockTransport(handler),
    )
    emitter = SyncEventEmitter()
    return SyncLoop(http, emitter, store=store, timeout_ms=30000, backoff_base_seconds=0.0), emitter


async def _wait_for(states: list[SyncState], count: int) -> None:
    for _ in range(200):
        if len(states) >= count:
            return
        await asyncio.sleep(0.001)


class TestSyncLoop:
    @pytest.mark.asyncio
    async def test_prepared_then_syncing_and_token_persisted(self) -> None:
        seen: list[httpx.Request] = []
        store = SyncCache(MemoryKeyValueStore())
        loop, emitter = _loop(
            _sync_handler(
                [
                    httpx.Response(200, json={"next_batch": "s1"}),
                    httpx.Response(200, json={"next_batch": "s2"}),
                ],
                seen,
            ),
            store=store,
        )
        states: list[SyncState] = []
        emitter.add_listener(lambda state, previous: states.append(state))

        loop.start()
        await _wait_for(states, 2)
        await loop.stop()

        assert states == [SyncState.PREPARED, SyncState.SYNCING, SyncState.STOPPED]
        assert store.sync_token == "s2"
        assert "since" not in seen[0].url.params
        assert seen[0].url.params["timeout"] == "0"
        assert seen[1].url.params["since"] == "s1"
        assert not loop.running

    @pytest.mark.asyncio
    async def test_resumes_from_warm_cache_token(self) -> None:
        seen: list[httpx.Request] = []
        backend = MemoryKeyValueStore({"next_batch": "s_cached"})
        store = SyncCache(backend)
        await store.startup()
        loop, emitter = _loop(_sync_handler([httpx.Response(200, json={"next_batch": "s3"})], seen), store=store)
        states: list[SyncState] = []
        emitter.add_listener(lambda state, previous: states.append(state))

        loop.start()
        await _wait_for(states, 1)
        await loop.stop()

        assert seen[0].url.params["since"] == "s_cached"
        assert seen[0].url.params["timeout"] == "30000"

    @pytest.mark.asyncio
    async def test_errors_then_recovers(self) -> None:
        seen: list[httpx.Request] = []
        loop, emitter = _loop(
            _sync_handler(
                [httpx.Response(500), httpx.Response(200, json={"next_batch": "s1"})],
                seen,
            )
        )
        states: list[SyncState] = []
        emitter.add_listener(lambda state, previous: states.append(state))

        loop.start()
        await _wait_for(states, 2)
        await loop.stop()

        assert states[:2] == [SyncState.ERROR, SyncState.PREPARED]

    @pytest.mark.asyncio
    async def test_unexpected_error_is_reported_and_retried(self) -> None:
        class FlakyCache(SyncCache):
            def __init__(self) -> None:
                super().__init__(MemoryKeyValueStore())
                self.failures = 1

            def save_sync_token(self, token: str) -> None:
                if self.failures:
                    self.failures -= 1
                    raise RuntimeError("cache quebrado")
                super().save_sync_token(token)

        seen: list[httpx.Request] = []
        store = FlakyCache()
        loop, emitter = _loop(
            _sync_handler(
                [
                    httpx.Response(200, json={"next_batch": "s1"}),
                    httpx.Response(200, json={"next_batch": "s2"}),
                ],
                seen,
            ),
            store=store,
        )
        states: list[SyncState] = []
        emitter.add_listener(lambda state, previous: states.append(state))

        loop.start()
        await _wait_for(states, 2)
        assert loop.running
        await loop.stop()

        assert states[:2] == [SyncState.ERROR, SyncState.PREPARED]
        assert store.sync_token == "s2"

    @pytest.mark.asyncio
    async def test_rejected_token_stops_loop(self) -> None:
        seen: list[httpx.Request] = []
        loop, emitter = _loop(
            _sync_handler(
                [httpx.Response(401, json={"errcode": "M_UNKNOWN_TOKEN", "error": "gone"})],
                seen,
            )
        )
        states: list[SyncState] = []
        emitter.add_listener(lambda state, previous: states.append(state))

        loop.start()
        await _wait_for(states, 1)
        await asyncio.sleep(0)

        assert states == [SyncState.STOPPED]
        assert not loop.running
        await loop.stop()
        assert states == [SyncState.STOPPED]

    @pytest.mark.asyncio
    async def test_client_start_and_stop(self) -> None:
        seen: list[httpx.Request] = []
        client = MatrixClient(
            ClientConfig(base_url=BASE_URL, access_token="syt_abc"),
            transport=httpx.MockTransport(
                _sync_handler([httpx.Response(200, json={"next_batch": "s1"})], seen)
            ),
        )
        states: list[SyncState] = []
        subscription = client.add_sync_listener(lambda state, previous: states.append(state))

        await client.start_client()
        await client.start_client()
        await _wait_for(states, 1)
        assert client.syncing

        subscription.cancel()
        await client.close()

        assert states == [SyncState.PREPARED]
        assert not client.syncing
        assert seen[0].headers["Authorization"] == "Bearer syt_abc"


class TestSyncEventEmitter:
    def test_failing_listener_does_not_block_others(self) -> None:
        emitter = SyncEventEmitter()
        received: list[tuple[SyncState, SyncState | None]] = []

        def broken(state: SyncState, previous: SyncState | None) -> None:
            raise RuntimeError("listener quebrado")

        emitter.add_listener(broken)
        emitter.add_listener(lambda state, previous: received.append((state, previous)))

        emitter.emit(SyncState.PREPARED)
        emitter.emit(SyncState.SYNCING)

        assert received == [(SyncState.PREPARED, None), (SyncState.SYNCING, SyncState.PREPARED)]

    def test_subscription_cancel_is_idempotent(self) -> None:
        emitter = SyncEventEmitter()
        subscription = emitter.add_listener(lambda state, previous: None)
        subscription.cancel()
        subscription.cancel()
        assert not subscription.active
        assert emitter.listener_count == 0


@pytest.mark.asyncio
async def test_keys_query_payload_targets_user() -> None:
    bodies: list[dict[str, object]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return httpx.Response(200, json={})

    client = _client(handler)
    client.set_credentials("syt_abc", USER_ID)
    await client.init_crypto()
    assert bodies == [{"device_keys": {USER_ID: []}}]
