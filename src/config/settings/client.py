"""Settings do cliente do protocolo.

Homeserver padrão, timeouts de rede e opções do cliente.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache

DEFAULT_HOMESERVER_URL = "https://matrix.org"
DEFAULT_HOMESERVER_NAME = "matrix.org"
DEFAULT_HOMESERVER_DESCRIPTION = "The biggest public homeserver on Matrix."
DEFAULT_VERIFICATION_METHODS: tuple[str, ...] = (
    "m.sas.v1",
    "m.qr_code.show.v1",
    "m.reciprocate.v1",
)


@dataclass(frozen=True)
class ClientSettings:
    """Configurações do cliente do protocolo.

    Attributes:
        default_homeserver_url: Homeserver semeado na lista de conhecidos
        default_homeserver_name: Nome de exibição do homeserver padrão
        default_homeserver_description: Descrição do homeserver padrão
        validation_timeout_seconds: Timeout da consulta de versões
        request_timeout_seconds: Timeout das demais chamadas (whoami, login flows)
        sync_timeout_ms: Long-poll do /sync
        verification_methods: Métodos de verificação habilitados no cliente
        timeline_support: Habilita suporte a timeline no cliente
    """

    default_homeserver_url: str = DEFAULT_HOMESERVER_URL
    default_homeserver_name: str = DEFAULT_HOMESERVER_NAME
    default_homeserver_description: str = DEFAULT_HOMESERVER_DESCRIPTION
    validation_timeout_seconds: float = 10.0
    request_timeout_seconds: float = 30.0
    sync_timeout_ms: int = 30000
    verification_methods: tuple[str, ...] = field(
        default_factory=lambda: DEFAULT_VERIFICATION_METHODS
    )
    timeline_support: bool = True

    def validate(self) -> list[str]:
        """Valida configurações do cliente.

        Returns:
            Lista de erros de validação.
        """
        errors: list[str] = []

        if not self.default_homeserver_url.startswith(("http://", "https://")):
            errors.append("MATRIX_DEFAULT_HOMESERVER_URL deve ser http(s)")

        if self.validation_timeout_seconds <= 0:
            errors.append("MATRIX_VALIDATION_TIMEOUT_SECONDS deve ser > 0")

        if self.request_timeout_seconds <= 0:
            errors.append("MATRIX_REQUEST_TIMEOUT_SECONDS deve ser > 0")

        if self.sync_timeout_ms < 0:
            errors.append("MATRIX_SYNC_TIMEOUT_MS deve ser >= 0")

        return errors


def _parse_methods(raw: str | None) -> tuple[str, ...]:
    """Converte lista separada por vírgulas em tupla de métodos."""
    if not raw:
        return DEFAULT_VERIFICATION_METHODS
    return tuple(item.strip() for item in raw.split(",") if item.strip())


def _load_client_from_env() -> ClientSettings:
    """Carrega ClientSettings de variáveis de ambiente."""
    return ClientSettings(
        default_homeserver_url=os.getenv(
            "MATRIX_DEFAULT_HOMESERVER_URL", DEFAULT_HOMESERVER_URL
        ),
        default_homeserver_name=os.getenv(
            "MATRIX_DEFAULT_HOMESERVER_NAME", DEFAULT_HOMESERVER_NAME
        ),
        default_homeserver_description=os.getenv(
            "MATRIX_DEFAULT_HOMESERVER_DESCRIPTION", DEFAULT_HOMESERVER_DESCRIPTION
        ),
        validation_timeout_seconds=float(
            os.getenv("MATRIX_VALIDATION_TIMEOUT_SECONDS", "10")
        ),
        request_timeout_seconds=float(os.getenv("MATRIX_REQUEST_TIMEOUT_SECONDS", "30")),
        sync_timeout_ms=int(os.getenv("MATRIX_SYNC_TIMEOUT_MS", "30000")),
        verification_methods=_parse_methods(os.getenv("MATRIX_VERIFICATION_METHODS")),
        timeline_support=os.getenv("MATRIX_TIMELINE_SUPPORT", "true").lower()
        in ("true", "1", "yes"),
    )


@lru_cache(maxsize=1)
def get_client_settings() -> ClientSettings:
    """Retorna instância cacheada de ClientSettings."""
    return _load_client_from_env()
