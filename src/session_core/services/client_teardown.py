"""Encerramento de sessões descartadas (rollback, logout, troca de cliente).

Nenhuma função aqui levanta: falhas viram StepResult degradado para que
o status já reiniciado nunca fique preso por erro de IO.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from config.logging import log_degraded
from session_core.results import StepResult
from utils.errors import InfrastructureError

if TYPE_CHECKING:
    from session_core.identity.store import IdentityStore
    from session_core.protocols.protocol_client import ProtocolClientProtocol

logger = logging.getLogger(__name__)


async def release_client(client: ProtocolClientProtocol, step: str = "client_release") -> StepResult:
    """Para o sync loop e libera o transporte; falhas viram StepResult."""
    try:
        await client.stop_client()
        await client.close()
    except Exception as exc:
        log_degraded(logger, step, type(exc).__name__)
        return StepResult.degraded(step, str(exc) or type(exc).__name__)
    return StepResult.ok(step)


def forget_identity(identity: IdentityStore, step: str = "identity_clear") -> StepResult:
    """Apaga seleção e credencial persistidas; o device id é mantido."""
    failures: list[str] = []
    for clear in (
        lambda: identity.save_selected_homeserver(None),
        lambda: identity.save_access_token(None),
    ):
        try:
            clear()
        except InfrastructureError as exc:
            failures.append(type(exc).__name__)
    if failures:
        reason = ",".join(failures)
        log_degraded(logger, step, reason)
        return StepResult.degraded(step, reason)
    return StepResult.ok(step)
