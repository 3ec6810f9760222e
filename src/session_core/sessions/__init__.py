"""Sessões — estado compartilhado, observer de sync e façade do ciclo de vida.

A façade fica em session_core.sessions.manager (importada diretamente
para evitar ciclo com services/).
"""

from session_core.sessions.state import ClientSessionState
from session_core.sessions.subscription import OneShotSyncObserver

__all__ = [
    "ClientSessionState",
    "OneShotSyncObserver",
]
