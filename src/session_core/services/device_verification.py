"""Device Verification Check — o dispositivo atual é verificado?"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from session_core.sessions.state import ClientSessionState

logger = logging.getLogger(__name__)


class DeviceVerificationCheck:
    """Consulta o subsistema criptográfico do cliente ativo.

    Sem cliente, sem criptografia inicializada, sem status ou com erro,
    responde False.
    """

    def __init__(self, state: ClientSessionState) -> None:
        self._state = state

    async def is_device_verified(self) -> bool:
        client = self._state.client
        if client is None or client.crypto is None:
            return False
        user_id = self._state.user_id or client.user_id
        device_id = client.device_id
        if not user_id or not device_id:
            return False

        try:
            status = await client.crypto.get_device_verification_status(user_id, device_id)
        except Exception as exc:
            logger.info(
                "device_verification_unavailable",
                extra={"device_id": device_id, "error_type": type(exc).__name__},
            )
            return False
        return bool(status is not None and status.cross_signing_verified)
