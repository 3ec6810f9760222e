"""Loop de sincronização (long-poll de /sync).

Roda como asyncio.Task. O primeiro /sync bem-sucedido emite PREPARED;
os seguintes emitem SYNCING. Falhas transitórias emitem ERROR e
aguardam backoff exponencial; credencial recusada encerra com STOPPED.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import TYPE_CHECKING, Any

from api.connectors.matrix.matrix_errors import MatrixHttpError
from session_core.protocols.models import SyncState
from utils.errors import InfrastructureError

if TYPE_CHECKING:
    from api.connectors.matrix.events import SyncEventEmitter
    from api.connectors.matrix.http_base import MatrixHttpTransport
    from session_core.protocols.stores import SyncCacheProtocol

logger = logging.getLogger(__name__)

SYNC_PATH = "/_matrix/client/v3/sync"
# folga do timeout HTTP sobre o long-poll do servidor
SYNC_HTTP_MARGIN_SECONDS = 10.0


class SyncLoop:
    """Long-poll contínuo de /sync persistindo o next_batch."""

    def __init__(
        self,
        http: MatrixHttpTransport,
        emitter: SyncEventEmitter,
        store: SyncCacheProtocol | None = None,
        timeout_ms: int = 30000,
        backoff_base_seconds: float = 1.0,
        backoff_max_seconds: float = 30.0,
    ) -> None:
        self._http = http
        self._emitter = emitter
        self._store = store
        self._timeout_ms = timeout_ms
        self._backoff_base = backoff_base_seconds
        self._backoff_max = backoff_max_seconds
        self._task: asyncio.Task[None] | None = None
        self._since: str | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def since(self) -> str | None:
        return self._since

    def start(self) -> None:
        """Agenda o loop; chamada repetida com o loop ativo é no-op."""
        if self.running:
            return
        if self._store is not None:
            self._since = self._store.sync_token
        self._task = asyncio.create_task(self._run(), name="matrix-sync-loop")

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        if not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        if self._emitter.state != SyncState.STOPPED:
            self._emitter.emit(SyncState.STOPPED)

    async def sync_once(self) -> dict[str, Any]:
        """Executa um /sync e avança o token."""
        # sync inicial sem long-poll: responde assim que o snapshot fica pronto
        timeout_ms = self._timeout_ms if self._since else 0
        params: dict[str, Any] = {"timeout": timeout_ms}
        if self._since:
            params["since"] = self._since
        response = await self._http.get(
            SYNC_PATH,
            params=params,
            timeout=timeout_ms / 1000 + SYNC_HTTP_MARGIN_SECONDS,
            retries=0,
        )
        next_batch = response.get("next_batch")
        if isinstance(next_batch, str) and next_batch:
            self._since = next_batch
            if self._store is not None:
                self._store.save_sync_token(next_batch)
        return response

    async def _run(self) -> None:
        failures = 0
        prepared = False
        while True:
            try:
                await self.sync_once()
            except MatrixHttpError as exc:
                if exc.is_auth_rejection:
                    logger.warning(
                        "sync_auth_rejected",
                        extra={"status_code": exc.status_code, "errcode": exc.errcode},
                    )
                    self._emitter.emit(SyncState.STOPPED)
                    return
                failures += 1
                await self._on_failure(failures, str(exc))
                continue
            except InfrastructureError as exc:
                failures += 1
                await self._on_failure(failures, str(exc))
                continue
            except Exception as exc:
                failures += 1
                logger.exception("sync_unexpected_error", extra={"error_type": type(exc).__name__})
                await self._on_failure(failures, type(exc).__name__)
                continue

            failures = 0
            self._emitter.emit(SyncState.SYNCING if prepared else SyncState.PREPARED)
            prepared = True

    async def _on_failure(self, failures: int, reason: str) -> None:
        backoff = min(self._backoff_base * (2 ** (failures - 1)), self._backoff_max)
        logger.warning(
            "sync_failed",
            extra={"failures": failures, "backoff_seconds": backoff, "reason": reason},
        )
        self._emitter.emit(SyncState.ERROR)
        await asyncio.sleep(backoff)
