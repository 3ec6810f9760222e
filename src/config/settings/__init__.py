"""Agregador de settings do homeserver-session.

Re-exporta settings e funções de cada módulo.
"""

from __future__ import annotations

# Base settings
from config.settings.base import (
    BaseSettings,
    Environment,
    get_base_settings,
)

# Cliente do protocolo
from config.settings.client import (
    DEFAULT_HOMESERVER_DESCRIPTION,
    DEFAULT_HOMESERVER_NAME,
    DEFAULT_HOMESERVER_URL,
    ClientSettings,
    get_client_settings,
)

# Persistência
from config.settings.storage import (
    IdentityStoreBackend,
    StorageSettings,
    get_storage_settings,
)

__all__ = [
    "DEFAULT_HOMESERVER_DESCRIPTION",
    "DEFAULT_HOMESERVER_NAME",
    "DEFAULT_HOMESERVER_URL",
    "BaseSettings",
    "ClientSettings",
    "Environment",
    "IdentityStoreBackend",
    "StorageSettings",
    "get_base_settings",
    "get_client_settings",
    "get_storage_settings",
]
