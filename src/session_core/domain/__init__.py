"""Domínio — modelos puros, sem IO."""

from session_core.domain.homeserver import Homeserver, host_of, normalize_url

__all__ = [
    "Homeserver",
    "host_of",
    "normalize_url",
]
