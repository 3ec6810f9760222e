"""Verificação de dispositivos via cross-signing.

Consulta /keys/query e valida a cadeia de assinaturas:
chave do dispositivo ← self-signing key ← master key do usuário.
As assinaturas são ed25519 sobre o JSON canônico do objeto (sem os
campos `signatures` e `unsigned`), codificadas em base64 sem padding.
"""

from __future__ import annotations

import base64
import json
import logging
from typing import TYPE_CHECKING, Any

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey

from api.connectors.matrix.matrix_errors import MatrixHttpError
from session_core.protocols.models import DeviceVerificationStatus

if TYPE_CHECKING:
    from api.connectors.matrix.http_base import MatrixHttpTransport
    from session_core.protocols.stores import CryptoStoreProtocol

logger = logging.getLogger(__name__)

KEYS_QUERY_PATH = "/_matrix/client/v3/keys/query"
ED25519 = "ed25519"


def canonical_json(value: dict[str, Any]) -> bytes:
    """Serialização canônica usada nas assinaturas do protocolo."""
    return json.dumps(
        value,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    ).encode("utf-8")


def decode_unpadded_base64(value: str) -> bytes:
    """Decodifica base64 sem padding.

    Raises:
        ValueError: Se o valor não for base64 válido.
    """
    return base64.b64decode(value + "=" * (-len(value) % 4), validate=True)


def verify_signature(
    signed: dict[str, Any],
    signer_user_id: str,
    public_key: str,
) -> bool:
    """Valida a assinatura ed25519 de `signer_user_id` com `public_key`."""
    signatures = signed.get("signatures")
    if not isinstance(signatures, dict):
        return False
    user_signatures = signatures.get(signer_user_id)
    if not isinstance(user_signatures, dict):
        return False
    signature = user_signatures.get(f"{ED25519}:{public_key}")
    if not isinstance(signature, str):
        return False

    payload = {k: v for k, v in signed.items() if k not in ("signatures", "unsigned")}
    try:
        key = Ed25519PublicKey.from_public_bytes(decode_unpadded_base64(public_key))
        key.verify(decode_unpadded_base64(signature), canonical_json(payload))
    except (InvalidSignature, ValueError):
        return False
    return True


def cross_signing_public_key(key_info: dict[str, Any] | None, usage: str) -> str | None:
    """Extrai a chave pública ed25519 de uma cross-signing key com `usage`."""
    if not isinstance(key_info, dict) or usage not in key_info.get("usage", []):
        return None
    keys = key_info.get("keys")
    if not isinstance(keys, dict):
        return None
    for key_id, public_key in keys.items():
        if key_id.startswith(f"{ED25519}:") and isinstance(public_key, str):
            return public_key
    return None


def evaluate_device(
    user_id: str,
    device_id: str,
    keys: dict[str, Any],
) -> DeviceVerificationStatus | None:
    """Avalia a cadeia de assinaturas de um dispositivo.

    Returns:
        None se o dispositivo não constar nas chaves do usuário.
    """
    device = keys.get("device_keys", {}).get(device_id)
    if not isinstance(device, dict):
        return None

    master_key = cross_signing_public_key(keys.get("master_key"), "master")
    self_signing = keys.get("self_signing_key")
    self_signing_key = cross_signing_public_key(self_signing, "self_signing")

    signed_by_owner = self_signing_key is not None and verify_signature(
        device, user_id, self_signing_key
    )
    chain_valid = (
        signed_by_owner
        and master_key is not None
        and verify_signature(self_signing, user_id, master_key)
    )
    return DeviceVerificationStatus(
        user_id=user_id,
        device_id=device_id,
        cross_signing_verified=chain_valid,
        signed_by_owner=signed_by_owner,
    )


class DeviceKeysCrypto:
    """Subsistema criptográfico exposto pelo cliente após init_crypto()."""

    def __init__(
        self,
        http: MatrixHttpTransport,
        store: CryptoStoreProtocol | None = None,
    ) -> None:
        self._http = http
        self._store = store

    async def query_keys(self, user_id: str) -> dict[str, Any]:
        """Busca chaves de dispositivo e de cross-signing de um usuário."""
        response = await self._http.post(KEYS_QUERY_PATH, json={"device_keys": {user_id: []}})
        keys = {
            "device_keys": response.get("device_keys", {}).get(user_id, {}),
            "master_key": response.get("master_keys", {}).get(user_id),
            "self_signing_key": response.get("self_signing_keys", {}).get(user_id),
        }
        if self._store is not None:
            self._store.save_device_keys(user_id, keys)
        return keys

    async def get_device_verification_status(
        self,
        user_id: str,
        device_id: str,
    ) -> DeviceVerificationStatus | None:
        try:
            keys = await self.query_keys(user_id)
        except MatrixHttpError:
            cached = self._store.load_device_keys(user_id) if self._store is not None else None
            if cached is None:
                raise
            logger.info("device_keys_from_cache", extra={"device_id": device_id})
            keys = cached
        return evaluate_device(user_id, device_id, keys)
