"""Resultados explícitos das etapas toleradas do ciclo de vida.

Etapas cuja falha degrada a sessão sem abortá-la (init de criptografia,
warm-up do cache, resume silencioso) devolvem StepResult em vez de
suprimir exceções, para que o caller registre e os testes inspecionem.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class StepResult:
    """Resultado de uma etapa tolerada.

    Attributes:
        step: Nome da etapa (ex: 'crypto_init')
        success: Se a etapa concluiu
        error_reason: Motivo da falha (se success=False)
        skipped: Etapa não aplicável (ex: cliente sem cache local)
    """

    step: str
    success: bool
    error_reason: str | None = None
    skipped: bool = False

    def __post_init__(self) -> None:
        """Valida consistência do resultado."""
        if not self.success and self.error_reason is None:
            raise ValueError("Etapa com falha deve incluir error_reason")

    @classmethod
    def ok(cls, step: str) -> StepResult:
        return cls(step=step, success=True)

    @classmethod
    def skip(cls, step: str) -> StepResult:
        return cls(step=step, success=True, skipped=True)

    @classmethod
    def degraded(cls, step: str, reason: str) -> StepResult:
        return cls(step=step, success=False, error_reason=reason)


@dataclass(frozen=True, slots=True)
class ResumeReport:
    """Resultado de um resume bem-sucedido.

    O sync loop já foi iniciado; READY chega de forma assíncrona.
    """

    user_id: str
    steps: tuple[StepResult, ...] = ()

    @property
    def degraded_steps(self) -> tuple[StepResult, ...]:
        return tuple(step for step in self.steps if not step.success)


@dataclass(frozen=True, slots=True)
class BootstrapReport:
    """Resultado de um bootstrap concluído sem rollback.

    Attributes:
        homeserver_url: Homeserver ao qual o cliente foi ligado
        resumed: Se o resume silencioso iniciou a sincronização
        resume: Relatório do resume (se resumed=True)
        resume_failure: Resultado degradado do resume silencioso (se falhou)
    """

    homeserver_url: str
    resumed: bool = False
    resume: ResumeReport | None = None
    resume_failure: StepResult | None = None
