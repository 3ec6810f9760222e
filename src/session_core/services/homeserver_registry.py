"""Homeserver Registry — lista de conhecidos e seleção.

A URL é a identidade de um registro: adicionar ou selecionar uma URL já
conhecida devolve o registro existente.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import TYPE_CHECKING

from session_core.domain.homeserver import Homeserver, normalize_url

if TYPE_CHECKING:
    from session_core.identity.store import IdentityStore

logger = logging.getLogger(__name__)


class HomeserverRegistry:
    """Operações sobre a lista de homeservers do Identity Store."""

    __slots__ = ("_identity",)

    def __init__(self, identity: IdentityStore) -> None:
        self._identity = identity

    def list_homeservers(self) -> list[Homeserver]:
        return self._identity.load_homeservers()

    def find(self, url: str) -> Homeserver | None:
        normalized = normalize_url(url)
        for homeserver in self._identity.load_homeservers():
            if homeserver.url == normalized:
                return homeserver
        return None

    def add_homeserver(self, url: str, favorite: bool = False) -> Homeserver:
        """Adiciona um homeserver se a URL ainda não for conhecida.

        Raises:
            ValueError: Se a URL for malformada.
        """
        homeservers = self._identity.load_homeservers()
        candidate = Homeserver.from_url(url, favorite=favorite)
        for existing in homeservers:
            if existing.url == candidate.url:
                return existing
        homeservers.append(candidate)
        self._identity.save_homeservers(homeservers)
        logger.info("homeserver_added", extra={"homeserver": candidate.url})
        return candidate

    def select_homeserver(self, url: str) -> Homeserver:
        """Seleciona (inserindo se necessário) o homeserver de `url`."""
        homeserver = self.add_homeserver(url)
        self._identity.save_selected_homeserver(homeserver)
        logger.info("homeserver_selected", extra={"homeserver": homeserver.url})
        return homeserver

    def set_favorite(self, url: str, favorite: bool = True) -> Homeserver | None:
        normalized = normalize_url(url)
        homeservers = self._identity.load_homeservers()
        updated: Homeserver | None = None
        for index, existing in enumerate(homeservers):
            if existing.url == normalized:
                updated = dataclasses.replace(existing, favorite=favorite)
                homeservers[index] = updated
                break
        if updated is None:
            return None
        self._identity.save_homeservers(homeservers)
        selected = self._identity.load_selected_homeserver()
        if selected is not None and selected.url == normalized:
            self._identity.save_selected_homeserver(updated)
        return updated

    def remove_homeserver(self, url: str) -> bool:
        """Remove da lista de conhecidos; a seleção atual não é alterada."""
        normalized = normalize_url(url)
        homeservers = self._identity.load_homeservers()
        remaining = [hs for hs in homeservers if hs.url != normalized]
        if len(remaining) == len(homeservers):
            return False
        self._identity.save_homeservers(remaining)
        logger.info("homeserver_removed", extra={"homeserver": normalized})
        return True
