"""Modelo de homeserver conhecido pelo cliente.

Um homeserver é identificado unicamente pela URL; o nome de exibição
é derivado do host quando não informado.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from urllib.parse import urlsplit


def normalize_url(url: str) -> str:
    """Normaliza URL de homeserver (sem espaços e sem barra final).

    Raises:
        ValueError: Se a URL não tiver esquema http(s) e host.
    """
    cleaned = url.strip().rstrip("/")
    parts = urlsplit(cleaned)
    if parts.scheme not in ("http", "https") or not parts.hostname:
        raise ValueError(f"URL de homeserver inválida: {url!r}")
    return cleaned


def host_of(url: str) -> str:
    """Retorna host[:porta] da URL, usado como nome de exibição."""
    parts = urlsplit(url)
    host = parts.hostname or ""
    if parts.port is not None:
        return f"{host}:{parts.port}"
    return host


@dataclass(slots=True)
class Homeserver:
    """Homeserver salvo na lista de conhecidos.

    Atributos:
        name: Nome de exibição
        url: URL base (identidade do registro)
        description: Descrição para a tela de seleção
        featured: Destaque na tela de seleção
        favorite: Marcado como favorito pelo usuário
    """

    name: str
    url: str
    description: str | None = None
    featured: bool = False
    favorite: bool = False

    @classmethod
    def from_url(cls, url: str, favorite: bool = False) -> Homeserver:
        """Cria registro mínimo com nome derivado do host."""
        normalized = normalize_url(url)
        return cls(name=host_of(normalized), url=normalized, favorite=favorite)

    def to_dict(self) -> dict[str, Any]:
        """Serializa para persistência; campos opcionais vazios são omitidos."""
        data: dict[str, Any] = {"name": self.name, "url": self.url}
        if self.description is not None:
            data["description"] = self.description
        if self.featured:
            data["featured"] = True
        if self.favorite:
            data["favorite"] = True
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Homeserver:
        """Deserializa de persistência.

        Raises:
            ValueError: Se o registro não tiver URL válida.
        """
        url = normalize_url(str(data.get("url", "")))
        return cls(
            name=str(data.get("name") or host_of(url)),
            url=url,
            description=data.get("description"),
            featured=bool(data.get("featured", False)),
            favorite=bool(data.get("favorite", False)),
        )
