"""Erros e helpers de parsing para a Client-Server API do Matrix."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from session_core.protocols.errors import ProtocolRequestError

if TYPE_CHECKING:
    import httpx


class MatrixHttpError(ProtocolRequestError):
    """Erro de requisição ao homeserver sem dados sensíveis.

    Attributes:
        status_code: Status HTTP (None para falhas de conexão)
        errcode: errcode Matrix do corpo da resposta (ex: M_UNKNOWN_TOKEN)
        is_retryable: True para 429, 5xx, timeout e falha de conexão
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        errcode: str | None = None,
        is_retryable: bool = False,
    ) -> None:
        super().__init__(message, status_code=status_code, errcode=errcode)
        self.is_retryable = is_retryable


def is_retryable_status(status_code: int) -> bool:
    """429 e 5xx são transitórios; demais 4xx são permanentes."""
    return status_code == 429 or status_code >= 500


def parse_matrix_error(response: httpx.Response) -> MatrixHttpError:
    """Converte uma resposta de erro em MatrixHttpError.

    O corpo padrão é {"errcode": "...", "error": "..."}; corpos não-JSON
    (ex: proxy reverso) viram um erro genérico com o status preservado.
    """
    errcode: str | None = None
    message = f"http_{response.status_code}"
    try:
        body: Any = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        raw_code = body.get("errcode")
        if isinstance(raw_code, str):
            errcode = raw_code
        raw_message = body.get("error")
        if isinstance(raw_message, str) and raw_message:
            message = raw_message
    return MatrixHttpError(
        message,
        status_code=response.status_code,
        errcode=errcode,
        is_retryable=is_retryable_status(response.status_code),
    )
