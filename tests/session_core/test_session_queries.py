"""Testes de Login Flow Discovery e Device Verification Check."""

from __future__ import annotations

import pytest

from session_core.errors import InvalidHomeserver
from session_core.protocols.models import ClientConfig, DeviceVerificationStatus, LoginFlow
from session_core.services import DeviceVerificationCheck, LoginFlowDiscovery
from session_core.sessions.state import ClientSessionState
from tests.fakes.fake_protocol_client import FakeProtocolClient


def _status(verified: bool) -> DeviceVerificationStatus:
    return DeviceVerificationStatus(
        user_id="@alice:example.org",
        device_id="DEV1",
        cross_signing_verified=verified,
        signed_by_owner=verified,
    )


class TestLoginFlowDiscovery:
    @pytest.mark.asyncio
    async def test_without_client_returns_empty_and_keeps_cache(self, state: ClientSessionState) -> None:
        cached = (LoginFlow(type="m.login.sso"),)
        state.cache_login_flows(cached)

        assert await LoginFlowDiscovery(state).discover() == ()
        assert state.login_flows == cached

    @pytest.mark.asyncio
    async def test_flows_are_returned_and_cached(self, state: ClientSessionState) -> None:
        client = FakeProtocolClient()
        client.login_flows_result = [LoginFlow(type="m.login.password"), LoginFlow(type="m.login.sso")]
        state.attach_client(client)

        flows = await LoginFlowDiscovery(state).discover()

        assert [flow.type for flow in flows] == ["m.login.password", "m.login.sso"]
        assert state.login_flows == flows

    @pytest.mark.asyncio
    async def test_each_call_requeries(self, state: ClientSessionState) -> None:
        client = FakeProtocolClient()
        state.attach_client(client)
        discovery = LoginFlowDiscovery(state)
        await discovery.discover()
        await discovery.discover()
        assert client.calls.count("login_flows") == 2

    @pytest.mark.asyncio
    async def test_network_failure_raises_invalid_homeserver(self, state: ClientSessionState) -> None:
        client = FakeProtocolClient()
        client.login_flows_result = ConnectionError("unreachable")
        state.attach_client(client)

        with pytest.raises(InvalidHomeserver, match="login flows"):
            await LoginFlowDiscovery(state).discover()
        assert state.login_flows == ()


class TestDeviceVerificationCheck:
    @pytest.mark.asyncio
    async def test_false_without_client(self, state: ClientSessionState) -> None:
        assert await DeviceVerificationCheck(state).is_device_verified() is False

    @pytest.mark.asyncio
    async def test_false_without_crypto(self, state: ClientSessionState) -> None:
        state.attach_client(FakeProtocolClient())
        assert await DeviceVerificationCheck(state).is_device_verified() is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("crypto_status", "expected"),
        [
            (_status(True), True),
            (_status(False), False),
            (None, False),
            (RuntimeError("olm unavailable"), False),
        ],
    )
    async def test_reflects_cross_signing_status(
        self,
        state: ClientSessionState,
        crypto_status: object,
        expected: bool,
    ) -> None:
        client = FakeProtocolClient(ClientConfig(base_url="https://example.org", device_id="DEV1"))
        client.crypto_status = crypto_status
        await client.init_crypto()
        state.attach_client(client)
        state.bind_user("@alice:example.org")

        assert await DeviceVerificationCheck(state).is_device_verified() is expected
