"""Conector Matrix — Client-Server API sobre httpx.

Módulos:
    - http_base: transporte com retry/backoff e bearer token
    - matrix_errors: MatrixHttpError e parsing de {errcode, error}
    - events: emissor de estados do sync
    - sync_loop: long-poll de /sync
    - crypto: verificação de dispositivos via cross-signing
    - client: MatrixClient (ProtocolClientProtocol) e fábrica
"""

from __future__ import annotations

from api.connectors.matrix.client import MatrixClient, MatrixClientFactory
from api.connectors.matrix.crypto import DeviceKeysCrypto
from api.connectors.matrix.http_base import MatrixHttpConfig, MatrixHttpTransport
from api.connectors.matrix.matrix_errors import MatrixHttpError

__all__ = [
    "DeviceKeysCrypto",
    "MatrixClient",
    "MatrixClientFactory",
    "MatrixHttpConfig",
    "MatrixHttpError",
    "MatrixHttpTransport",
]
