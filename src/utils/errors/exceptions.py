"""Exceções de domínio para falhas recuperáveis de infraestrutura."""

from __future__ import annotations


class InfrastructureError(RuntimeError):
    """Base para falhas de infraestrutura transitórias."""


class StoreUnavailableError(InfrastructureError):
    """Falha de conexão/timeout ao acessar o backend de persistência."""


class StoreCorruptedError(InfrastructureError):
    """Conteúdo persistido ilegível (arquivo de estado corrompido)."""
