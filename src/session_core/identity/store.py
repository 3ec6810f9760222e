"""Identity Store — identidade e sessão persistidas localmente.

Quatro registros independentes sobre um key-value store durável:
    - matrix/homeservers: lista ordenada de homeservers conhecidos
    - matrix/homeserver: homeserver selecionado (JSON, com fallback de string crua)
    - matrix/token: credencial de acesso
    - matrix/deviceId: identificador do dispositivo, gerado uma única vez

Leituras nunca levantam exceção por conteúdo corrompido.
"""

from __future__ import annotations

import json
import logging
import uuid
from typing import TYPE_CHECKING

from session_core.domain.homeserver import Homeserver

if TYPE_CHECKING:
    from collections.abc import Iterable

    from session_core.protocols.stores import KeyValueStoreProtocol

logger = logging.getLogger(__name__)

HOMESERVERS_KEY = "matrix/homeservers"
SELECTED_HOMESERVER_KEY = "matrix/homeserver"
ACCESS_TOKEN_KEY = "matrix/token"
DEVICE_ID_KEY = "matrix/deviceId"


class IdentityStore:
    """Dono exclusivo da identidade persistida.

    Args:
        backend: Key-value store durável
        default_homeservers: Semente da lista de conhecidos no primeiro uso
    """

    __slots__ = ("_backend", "_defaults")

    def __init__(
        self,
        backend: KeyValueStoreProtocol,
        default_homeservers: Iterable[Homeserver] = (),
    ) -> None:
        self._backend = backend
        self._defaults = [hs.to_dict() for hs in default_homeservers]

    # Homeservers conhecidos

    def load_homeservers(self) -> list[Homeserver]:
        """Lista ordenada de conhecidos; semeia os defaults no primeiro uso."""
        raw = self._backend.get(HOMESERVERS_KEY)
        if raw is None:
            seeded = [Homeserver.from_dict(item) for item in self._defaults]
            self.save_homeservers(seeded)
            return seeded

        try:
            items = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("known_homeservers_corrupted")
            return [Homeserver.from_dict(item) for item in self._defaults]

        if not isinstance(items, list):
            logger.warning("known_homeservers_corrupted")
            return [Homeserver.from_dict(item) for item in self._defaults]

        homeservers: list[Homeserver] = []
        for item in items:
            if not isinstance(item, dict):
                continue
            try:
                homeservers.append(Homeserver.from_dict(item))
            except ValueError:
                logger.warning("known_homeserver_skipped", extra={"reason": "invalid_url"})
        return homeservers

    def save_homeservers(self, homeservers: Iterable[Homeserver]) -> None:
        payload = [hs.to_dict() for hs in homeservers]
        self._backend.set(HOMESERVERS_KEY, json.dumps(payload))

    # Homeserver selecionado

    def load_selected_homeserver(self) -> Homeserver | None:
        """Homeserver selecionado ou None.

        Conteúdo que não é JSON é tratado como a URL crua do homeserver.
        """
        raw = self._backend.get(SELECTED_HOMESERVER_KEY)
        if raw is None:
            return None

        try:
            value: object = json.loads(raw)
        except json.JSONDecodeError:
            value = raw

        try:
            if isinstance(value, dict):
                return Homeserver.from_dict(value)
            if isinstance(value, str) and value:
                return Homeserver.from_url(value)
        except ValueError:
            logger.warning("selected_homeserver_unreadable")
        return None

    def save_selected_homeserver(self, homeserver: Homeserver | None) -> None:
        if homeserver is None:
            self._backend.delete(SELECTED_HOMESERVER_KEY)
            return
        self._backend.set(SELECTED_HOMESERVER_KEY, json.dumps(homeserver.to_dict()))

    # Credencial

    def load_access_token(self) -> str | None:
        return self._backend.get(ACCESS_TOKEN_KEY) or None

    def save_access_token(self, token: str | None) -> None:
        if token:
            self._backend.set(ACCESS_TOKEN_KEY, token)
        else:
            self._backend.delete(ACCESS_TOKEN_KEY)

    # Dispositivo

    def device_id(self) -> str:
        """Identificador estável do dispositivo; gerado uma única vez."""
        existing = self._backend.get(DEVICE_ID_KEY)
        if existing:
            return existing
        generated = str(uuid.uuid4())
        self._backend.set(DEVICE_ID_KEY, generated)
        logger.info("device_id_generated")
        return generated
