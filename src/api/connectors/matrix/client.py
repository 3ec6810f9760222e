"""Cliente Matrix sobre httpx.

Implementa ProtocolClientProtocol para o core da sessão: versões,
who-am-i, login flows, criptografia (verificação por cross-signing)
e o sync loop.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, TypeVar

from pydantic import BaseModel, ValidationError

from api.connectors.matrix.crypto import DeviceKeysCrypto
from api.connectors.matrix.events import ListenerSubscription, SyncEventEmitter
from api.connectors.matrix.http_base import MatrixHttpConfig, MatrixHttpTransport
from api.connectors.matrix.matrix_errors import MatrixHttpError
from api.connectors.matrix.sync_loop import SyncLoop
from session_core.protocols.models import (
    ClientConfig,
    LoginFlow,
    LoginFlowsResponse,
    VersionsResponse,
    WhoAmIResponse,
)

if TYPE_CHECKING:
    import httpx

    from session_core.protocols.protocol_client import SyncListener
    from session_core.protocols.stores import CryptoStoreProtocol, SyncCacheProtocol

logger = logging.getLogger(__name__)

VERSIONS_PATH = "/_matrix/client/versions"
WHOAMI_PATH = "/_matrix/client/v3/account/whoami"
LOGIN_PATH = "/_matrix/client/v3/login"

ModelT = TypeVar("ModelT", bound=BaseModel)


def _parse(model: type[ModelT], data: dict[str, Any], path: str) -> ModelT:
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise MatrixHttpError(f"invalid_response: {path}") from exc


class MatrixClient:
    """Client Session ligada a um homeserver."""

    def __init__(
        self,
        config: ClientConfig,
        transport: httpx.AsyncBaseTransport | None = None,
        max_retries: int = 2,
    ) -> None:
        self._config = config
        self._http = MatrixHttpTransport(
            MatrixHttpConfig(
                base_url=config.base_url,
                timeout_seconds=config.request_timeout_seconds,
                max_retries=max_retries,
            ),
            transport=transport,
        )
        self._http.access_token = config.access_token
        self._user_id: str | None = None
        self._crypto: DeviceKeysCrypto | None = None
        self._events = SyncEventEmitter()
        self._sync = SyncLoop(
            self._http,
            self._events,
            store=config.store,
            timeout_ms=config.sync_timeout_ms,
        )

    @property
    def base_url(self) -> str:
        return self._config.base_url

    @property
    def device_id(self) -> str | None:
        return self._config.device_id

    @property
    def user_id(self) -> str | None:
        return self._user_id

    @property
    def access_token(self) -> str | None:
        return self._http.access_token

    @property
    def store(self) -> SyncCacheProtocol | None:
        return self._config.store

    @property
    def crypto_store(self) -> CryptoStoreProtocol | None:
        return self._config.crypto_store

    @property
    def crypto(self) -> DeviceKeysCrypto | None:
        return self._crypto

    @property
    def syncing(self) -> bool:
        return self._sync.running

    def set_credentials(self, access_token: str | None, user_id: str | None = None) -> None:
        self._http.access_token = access_token
        self._user_id = user_id

    async def get_versions(self) -> VersionsResponse:
        data = await self._http.get(VERSIONS_PATH, authenticated=False)
        return _parse(VersionsResponse, data, VERSIONS_PATH)

    async def whoami(self) -> WhoAmIResponse:
        data = await self._http.get(WHOAMI_PATH)
        return _parse(WhoAmIResponse, data, WHOAMI_PATH)

    async def login_flows(self) -> list[LoginFlow]:
        data = await self._http.get(LOGIN_PATH, authenticated=False)
        return _parse(LoginFlowsResponse, data, LOGIN_PATH).flows

    async def init_crypto(self) -> None:
        """Inicializa o subsistema criptográfico e aquece as chaves próprias.

        Raises:
            RuntimeError: Se nenhum usuário estiver ligado ao cliente.
            MatrixHttpError: Falha ao consultar /keys/query.
        """
        if not self._user_id:
            raise RuntimeError("init_crypto requires an authenticated user")
        crypto = DeviceKeysCrypto(self._http, self._config.crypto_store)
        await crypto.query_keys(self._user_id)
        self._crypto = crypto
        logger.debug(
            "crypto_initialized",
            extra={"methods": list(self._config.verification_methods)},
        )

    def add_sync_listener(self, listener: SyncListener) -> ListenerSubscription:
        return self._events.add_listener(listener)

    async def start_client(self) -> None:
        self._sync.start()

    async def stop_client(self) -> None:
        await self._sync.stop()

    async def close(self) -> None:
        await self.stop_client()
        await self._http.aclose()


class MatrixClientFactory:
    """Fábrica de MatrixClient (transport injetável para testes)."""

    def __init__(
        self,
        transport: httpx.AsyncBaseTransport | None = None,
        max_retries: int = 2,
    ) -> None:
        self._transport = transport
        self._max_retries = max_retries

    def create_client(self, config: ClientConfig) -> MatrixClient:
        return MatrixClient(config, transport=self._transport, max_retries=self._max_retries)
