"""Erros de requisição expostos pelo cliente do protocolo.

O core inspeciona apenas estes atributos; o conector HTTP estende a
classe com detalhes de transporte.
"""

from __future__ import annotations

# errcodes que significam credencial recusada pelo homeserver
AUTH_REJECTION_ERRCODES = frozenset({
    "M_UNKNOWN_TOKEN",
    "M_MISSING_TOKEN",
    "M_FORBIDDEN",
    "M_USER_DEACTIVATED",
})


class ProtocolRequestError(Exception):
    """Falha de uma chamada ao homeserver.

    Attributes:
        status_code: Status HTTP (None para falhas de conexão)
        errcode: Código de erro do protocolo (ex: M_UNKNOWN_TOKEN)
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        errcode: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.errcode = errcode

    @property
    def is_auth_rejection(self) -> bool:
        """True se o homeserver recusou a credencial."""
        if self.status_code == 401:
            return True
        return self.status_code == 403 and self.errcode in AUTH_REJECTION_ERRCODES
