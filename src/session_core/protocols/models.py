"""Modelos trocados com o cliente do protocolo.

Respostas do homeserver são validadas com pydantic; campos desconhecidos
são ignorados para tolerar extensões do servidor.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from session_core.protocols.stores import CryptoStoreProtocol, SyncCacheProtocol

# Versões estáveis da Client-Server API: r0.x.y (legado) e v1.x
_SUPPORTED_VERSION = re.compile(r"^(r0\.\d+\.\d+|v1\.\d+)$")


class VersionsResponse(BaseModel):
    """Resposta de GET /_matrix/client/versions."""

    model_config = ConfigDict(extra="ignore")

    versions: list[str]
    unstable_features: dict[str, bool] = Field(default_factory=dict)

    @property
    def supported_versions(self) -> list[str]:
        """Versões anunciadas que este cliente reconhece."""
        return [v for v in self.versions if _SUPPORTED_VERSION.match(v)]

    @property
    def is_compatible(self) -> bool:
        """True se anuncia ao menos uma versão suportada."""
        return bool(self.supported_versions)


class WhoAmIResponse(BaseModel):
    """Resposta de GET /_matrix/client/v3/account/whoami."""

    model_config = ConfigDict(extra="ignore")

    user_id: str = Field(min_length=1)
    device_id: str | None = None
    is_guest: bool = False


class LoginFlow(BaseModel):
    """Método de autenticação anunciado pelo homeserver."""

    model_config = ConfigDict(extra="ignore")

    type: str
    get_login_token: bool = False
    identity_providers: list[dict[str, Any]] = Field(default_factory=list)


class LoginFlowsResponse(BaseModel):
    """Resposta de GET /_matrix/client/v3/login."""

    model_config = ConfigDict(extra="ignore")

    flows: list[LoginFlow] = Field(default_factory=list)


class DeviceVerificationStatus(BaseModel):
    """Estado de verificação de um dispositivo.

    Attributes:
        cross_signing_verified: Assinado pela self-signing key, que é
            assinada pela master key do usuário
        signed_by_owner: Chave do dispositivo assinada pela self-signing key
    """

    model_config = ConfigDict(extra="ignore")

    user_id: str
    device_id: str
    cross_signing_verified: bool = False
    signed_by_owner: bool = False


class SyncState(StrEnum):
    """Estados emitidos pelo stream de sincronização."""

    PREPARED = "PREPARED"
    SYNCING = "SYNCING"
    ERROR = "ERROR"
    STOPPED = "STOPPED"


@dataclass(frozen=True, slots=True)
class ClientConfig:
    """Configuração de construção do cliente do protocolo.

    Attributes:
        base_url: URL do homeserver selecionado
        device_id: Identificador persistido do dispositivo
        access_token: Credencial persistida (None = não autenticado)
        store: Cache de sincronização local
        crypto_store: Store de chaves/estado de verificação
        timeline_support: Habilita suporte a timeline
        verification_methods: Métodos de verificação habilitados
        request_timeout_seconds: Timeout das chamadas REST
        sync_timeout_ms: Long-poll do /sync
    """

    base_url: str
    device_id: str | None = None
    access_token: str | None = None
    store: SyncCacheProtocol | None = None
    crypto_store: CryptoStoreProtocol | None = None
    timeline_support: bool = True
    verification_methods: tuple[str, ...] = field(default_factory=tuple)
    request_timeout_seconds: float = 30.0
    sync_timeout_ms: int = 30000
