"""Contrato do cliente do protocolo consumido pelo core.

O core não implementa o protocolo: depende apenas desta interface.
A implementação concreta vive em api/connectors/matrix.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from session_core.protocols.models import (
        ClientConfig,
        DeviceVerificationStatus,
        LoginFlow,
        SyncState,
        VersionsResponse,
        WhoAmIResponse,
    )
    from session_core.protocols.stores import SyncCacheProtocol

SyncListener = Callable[["SyncState", "SyncState | None"], None]


class SubscriptionProtocol(Protocol):
    """Handle de inscrição cancelável."""

    @property
    def active(self) -> bool: ...

    def cancel(self) -> None: ...


class CryptoProtocol(Protocol):
    """Subsistema criptográfico exposto após init_crypto()."""

    async def get_device_verification_status(
        self,
        user_id: str,
        device_id: str,
    ) -> DeviceVerificationStatus | None: ...


class ProtocolClientProtocol(Protocol):
    """Cliente ativo ligado a um homeserver."""

    @property
    def base_url(self) -> str: ...

    @property
    def device_id(self) -> str | None: ...

    @property
    def user_id(self) -> str | None: ...

    @property
    def access_token(self) -> str | None: ...

    @property
    def store(self) -> SyncCacheProtocol | None: ...

    @property
    def crypto(self) -> CryptoProtocol | None: ...

    def set_credentials(self, access_token: str | None, user_id: str | None = None) -> None: ...

    async def get_versions(self) -> VersionsResponse: ...

    async def whoami(self) -> WhoAmIResponse: ...

    async def login_flows(self) -> list[LoginFlow]: ...

    async def init_crypto(self) -> None: ...

    def add_sync_listener(self, listener: SyncListener) -> SubscriptionProtocol: ...

    async def start_client(self) -> None: ...

    async def stop_client(self) -> None:
        """Encerra o sync loop; o cliente continua utilizável para REST."""
        ...

    async def close(self) -> None:
        """Libera o transporte HTTP. Idempotente."""
        ...


class ClientFactoryProtocol(Protocol):
    """Fábrica de clientes (createClient)."""

    def create_client(self, config: ClientConfig) -> ProtocolClientProtocol: ...
