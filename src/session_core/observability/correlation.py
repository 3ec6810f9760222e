"""Correlation id por tentativa de ciclo de vida.

Cada bootstrap/resume roda sob um correlation_id próprio, injetado nos
logs pelo SessionContextFilter. Usa ContextVar, então tarefas asyncio
criadas dentro do escopo herdam o valor.

Uso:
    from session_core.observability import correlation_scope

    with correlation_scope("bootstrap") as correlation_id:
        ...
"""

from __future__ import annotations

import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token

_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")


def get_correlation_id() -> str:
    """Retorna o correlation_id do contexto atual (vazio se não definido)."""
    return _correlation_id.get()


def set_correlation_id(correlation_id: str | None = None) -> Token[str]:
    """Define o correlation_id no contexto atual.

    Args:
        correlation_id: ID a definir. Se None, gera um novo UUID.

    Returns:
        Token para reset posterior via reset_correlation_id().
    """
    return _correlation_id.set(correlation_id or str(uuid.uuid4()))


def reset_correlation_id(token: Token[str]) -> None:
    """Restaura o correlation_id ao valor anterior."""
    _correlation_id.reset(token)


@contextmanager
def correlation_scope(operation: str) -> Iterator[str]:
    """Abre escopo com correlation_id novo no formato `<operation>-<hex>`.

    Um escopo aninhado reaproveita o id do escopo externo, para que o
    resume disparado pelo bootstrap compartilhe o mesmo id.
    """
    current = _correlation_id.get()
    if current:
        yield current
        return
    token = set_correlation_id(f"{operation}-{uuid.uuid4().hex[:12]}")
    try:
        yield _correlation_id.get()
    finally:
        reset_correlation_id(token)
