"""Transporte HTTP para a Client-Server API do Matrix.

Uma instância por Client Session: mantém um httpx.AsyncClient com
base_url fixa e injeta o bearer token quando a chamada é autenticada.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

import httpx

from api.connectors.matrix.matrix_errors import (
    MatrixHttpError,
    is_retryable_status,
    parse_matrix_error,
)

logger = logging.getLogger(__name__)


@dataclass
class MatrixHttpConfig:
    """Configuração do transporte HTTP."""

    base_url: str
    timeout_seconds: float = 30.0
    max_retries: int = 2
    backoff_base_seconds: float = 0.5
    backoff_max_seconds: float = 30.0
    verify_ssl: bool = True
    user_agent: str = "homeserver-session"


class MatrixHttpTransport:
    """Cliente HTTP com retry para chamadas ao homeserver."""

    def __init__(
        self,
        config: MatrixHttpConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._access_token: str | None = None
        self._client = httpx.AsyncClient(
            base_url=config.base_url,
            verify=config.verify_ssl,
            transport=transport,
            headers={"User-Agent": config.user_agent},
        )

    @property
    def base_url(self) -> str:
        return self._config.base_url

    @property
    def access_token(self) -> str | None:
        return self._access_token

    @access_token.setter
    def access_token(self, value: str | None) -> None:
        self._access_token = value or None

    @property
    def closed(self) -> bool:
        return self._client.is_closed

    async def get(self, path: str, **kwargs: Any) -> dict[str, Any]:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, json: dict[str, Any], **kwargs: Any) -> dict[str, Any]:
        return await self.request("POST", path, json=json, **kwargs)

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
        authenticated: bool = True,
        timeout: float | None = None,
        retries: int | None = None,
    ) -> dict[str, Any]:
        """Executa a chamada e devolve o corpo JSON.

        Raises:
            MatrixHttpError: Status de erro, corpo inválido ou falha de
                conexão após esgotar as tentativas.
        """
        max_retries = self._config.max_retries if retries is None else retries
        headers: dict[str, str] = {}
        if authenticated and self._access_token:
            headers["Authorization"] = f"Bearer {self._access_token}"

        for attempt in range(max_retries + 1):
            try:
                response = await self._client.request(
                    method,
                    path,
                    json=json,
                    params=params,
                    headers=headers,
                    timeout=timeout or self._config.timeout_seconds,
                )
                if response.status_code >= 400:
                    raise parse_matrix_error(response)
                return _decode_body(response, path)
            except MatrixHttpError as exc:
                if not exc.is_retryable or attempt >= max_retries:
                    raise
                await _backoff_sleep(
                    attempt,
                    self._config.backoff_base_seconds,
                    self._config.backoff_max_seconds,
                )
            except httpx.TransportError as exc:  # inclui TimeoutException
                if attempt >= max_retries:
                    raise MatrixHttpError(
                        f"http_connection_error: {type(exc).__name__}",
                        is_retryable=True,
                    ) from exc
                await _backoff_sleep(
                    attempt,
                    self._config.backoff_base_seconds,
                    self._config.backoff_max_seconds,
                )
        raise MatrixHttpError("http_retry_exhausted", is_retryable=True)

    async def aclose(self) -> None:
        if not self._client.is_closed:
            await self._client.aclose()


def _decode_body(response: httpx.Response, path: str) -> dict[str, Any]:
    try:
        body = response.json()
    except ValueError as exc:
        raise MatrixHttpError(
            f"invalid_json_response: {path}",
            status_code=response.status_code,
            is_retryable=is_retryable_status(response.status_code),
        ) from exc
    if not isinstance(body, dict):
        raise MatrixHttpError(f"unexpected_response_shape: {path}", status_code=response.status_code)
    return body


async def _backoff_sleep(attempt: int, base: float, max_seconds: float) -> None:
    backoff = min((2**attempt) * base, max_seconds)
    logger.info("http_backoff", extra={"backoff_seconds": backoff})
    await asyncio.sleep(backoff)
