"""Observabilidade — correlation id das tentativas de ciclo de vida.

Uso:
    from session_core.observability import correlation_scope, get_correlation_id
"""

from session_core.observability.correlation import (
    correlation_scope,
    get_correlation_id,
    reset_correlation_id,
    set_correlation_id,
)

__all__ = [
    "correlation_scope",
    "get_correlation_id",
    "reset_correlation_id",
    "set_correlation_id",
]
