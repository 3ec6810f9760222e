"""Session Resume — retoma a sessão com a credencial persistida.

Etapas:
    1. Observers: primeiro PREPARED do sync → READY; STOPPED inesperado → IDLE
    2. who-am-i confirma a credencial e liga o user_id
    3. Status CONNECTING → SYNCING
    4. Init da criptografia (tolerado)
    5. Warm-up do cache local (tolerado)
    6. Início do sync loop

O caller reivindica a seção crítica (status CONNECTING) antes de chamar
resume(). READY chega de forma assíncrona pelo observer; retornar de
resume() não implica READY.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from config.logging import log_degraded
from fsm.states.status import SESSION_STATES, ClientStatus
from session_core.errors import (
    AuthenticationExpired,
    LifecycleCancelled,
    SessionNotInitialized,
)
from session_core.protocols.errors import ProtocolRequestError
from session_core.protocols.models import SyncState
from session_core.results import ResumeReport, StepResult
from session_core.sessions.subscription import OneShotSyncObserver
from utils.errors import InfrastructureError

if TYPE_CHECKING:
    from collections.abc import Callable

    from session_core.protocols.models import WhoAmIResponse
    from session_core.protocols.protocol_client import ProtocolClientProtocol
    from session_core.sessions.state import ClientSessionState

logger = logging.getLogger(__name__)


class SessionResumer:
    """Executa o resume sobre a Client Session do estado compartilhado."""

    def __init__(self, state: ClientSessionState, timeout_seconds: float = 30.0) -> None:
        self._state = state
        self._timeout = timeout_seconds

    async def resume(self) -> ResumeReport:
        """Retoma a sessão até iniciar o sync loop.

        Raises:
            SessionNotInitialized: Sem Client Session.
            AuthenticationExpired: who-am-i falhou ou devolveu outro dispositivo.
            LifecycleCancelled: Logout ou troca de cliente durante a espera pela rede.
        """
        client = self._state.client
        if client is None:
            raise SessionNotInitialized()

        generation = self._state.generation
        ready = OneShotSyncObserver(client, self._ready_callback(generation, client))
        stopped = OneShotSyncObserver(
            client,
            self._stopped_callback(generation, client, ready),
            target=SyncState.STOPPED,
        )
        try:
            whoami = await self._whoami(client)
            self._ensure_current(generation, client)
            self._check_device(client, whoami)

            client.set_credentials(client.access_token, whoami.user_id)
            self._state.bind_user(whoami.user_id)
            self._state.set_status(ClientStatus.SYNCING, "whoami_confirmed", user_id=whoami.user_id)

            steps = (
                await self._init_crypto(client),
                await self._warm_cache(client),
            )
            self._ensure_current(generation, client)
            await client.start_client()
        except BaseException:
            ready.cancel()
            stopped.cancel()
            raise

        logger.info(
            "session_resumed",
            extra={"user_id": whoami.user_id, "degraded_steps": [s.step for s in steps if not s.success]},
        )
        return ResumeReport(user_id=whoami.user_id, steps=steps)

    async def handle_failure(
        self,
        exc: BaseException,
        generation: int,
        client: ProtocolClientProtocol,
    ) -> StepResult:
        """Fallback do resume que falhou: volta a IDLE mantendo o cliente.

        Atua apenas se `client` ainda for a Client Session corrente. A
        credencial só é apagada quando o homeserver a recusou; falhas
        de rede a preservam para nova tentativa.
        """
        reason = str(exc) or type(exc).__name__
        if not self._is_current(generation, client):
            return StepResult.degraded("session_resume", reason)

        if isinstance(exc, AuthenticationExpired) and exc.credential_rejected:
            self._expire_credential(client, "credential_rejected")
        if self._state.status != ClientStatus.IDLE:
            self._state.set_status(ClientStatus.IDLE, "resume_failed", error_type=type(exc).__name__)
        try:
            await client.stop_client()
        except Exception as stop_exc:
            log_degraded(logger, "sync_stop", type(stop_exc).__name__)

        log_degraded(logger, "session_resume", reason)
        return StepResult.degraded("session_resume", reason)

    def _is_current(self, generation: int, client: ProtocolClientProtocol) -> bool:
        return self._state.generation == generation and self._state.client is client

    def _ready_callback(self, generation: int, client: ProtocolClientProtocol) -> Callable[[], None]:
        def on_prepared() -> None:
            if not self._is_current(generation, client):
                return
            self._state.try_set_status(ClientStatus.READY, "sync_prepared")

        return on_prepared

    def _stopped_callback(
        self,
        generation: int,
        client: ProtocolClientProtocol,
        ready: OneShotSyncObserver,
    ) -> Callable[[], None]:
        # paradas deliberadas acontecem fora de SYNCING/READY ou após reset
        def on_stopped() -> None:
            ready.cancel()
            if not self._is_current(generation, client) or self._state.status not in SESSION_STATES:
                return
            logger.warning("sync_stopped_unexpectedly", extra={"status": self._state.status.value})
            self._expire_credential(client, "sync_stopped")
            self._state.set_status(ClientStatus.IDLE, "sync_stopped")
            log_degraded(logger, "session_sync", "sync_stopped")

        return on_stopped

    def _expire_credential(self, client: ProtocolClientProtocol, reason: str) -> None:
        client.set_credentials(None)
        try:
            self._state.identity.save_access_token(None)
        except InfrastructureError as exc:
            log_degraded(logger, "access_token_clear", type(exc).__name__)
            return
        logger.info("access_token_cleared", extra={"reason": reason})

    def _ensure_current(self, generation: int, client: ProtocolClientProtocol) -> None:
        if not self._is_current(generation, client):
            raise LifecycleCancelled("Session was logged out while resuming.")

    async def _whoami(self, client: ProtocolClientProtocol) -> WhoAmIResponse:
        try:
            async with asyncio.timeout(self._timeout):
                return await client.whoami()
        except ProtocolRequestError as exc:
            raise AuthenticationExpired(
                f"Access token was not accepted: {exc}",
                credential_rejected=exc.is_auth_rejection,
            ) from exc
        except TimeoutError as exc:
            raise AuthenticationExpired(
                "Timed out confirming the access token.",
                credential_rejected=False,
            ) from exc
        except Exception as exc:
            raise AuthenticationExpired(
                f"Could not confirm the access token: {type(exc).__name__}",
                credential_rejected=False,
            ) from exc

    def _check_device(self, client: ProtocolClientProtocol, whoami: WhoAmIResponse) -> None:
        # credencial emitida para outro dispositivo não é reaproveitada
        if whoami.device_id and client.device_id and whoami.device_id != client.device_id:
            logger.warning(
                "access_token_device_mismatch",
                extra={"expected_device": client.device_id, "token_device": whoami.device_id},
            )
            raise AuthenticationExpired(
                "Access token belongs to a different device.",
                credential_rejected=True,
            )

    async def _init_crypto(self, client: ProtocolClientProtocol) -> StepResult:
        try:
            async with asyncio.timeout(self._timeout):
                await client.init_crypto()
        except Exception as exc:
            reason = str(exc) or type(exc).__name__
            log_degraded(logger, "crypto_init", reason)
            return StepResult.degraded("crypto_init", reason)
        return StepResult.ok("crypto_init")

    async def _warm_cache(self, client: ProtocolClientProtocol) -> StepResult:
        store = client.store
        if store is None:
            return StepResult.skip("cache_warmup")
        try:
            await store.startup()
        except Exception as exc:
            reason = str(exc) or type(exc).__name__
            log_degraded(logger, "cache_warmup", reason)
            return StepResult.degraded("cache_warmup", reason)
        return StepResult.ok("cache_warmup")
