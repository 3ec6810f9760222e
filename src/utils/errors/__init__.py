"""Exceções utilitárias compartilhadas."""

from .exceptions import (
    InfrastructureError,
    StoreCorruptedError,
    StoreUnavailableError,
)

__all__ = [
    "InfrastructureError",
    "StoreCorruptedError",
    "StoreUnavailableError",
]
