"""Identity Store — persistência de homeservers, credencial e dispositivo."""

from session_core.identity.store import (
    ACCESS_TOKEN_KEY,
    DEVICE_ID_KEY,
    HOMESERVERS_KEY,
    SELECTED_HOMESERVER_KEY,
    IdentityStore,
)

__all__ = [
    "ACCESS_TOKEN_KEY",
    "DEVICE_ID_KEY",
    "HOMESERVERS_KEY",
    "SELECTED_HOMESERVER_KEY",
    "IdentityStore",
]
