"""
Regras de transição válidas entre fases do ciclo de vida.

Este módulo define o grafo de transições do status do cliente.
READY só é alcançável a partir de SYNCING: a primeira sincronização
completa nunca é pulada.
"""

from fsm.states.status import ClientStatus

# Tipagem explícita do mapa de transições
TransitionMap = dict[ClientStatus, frozenset[ClientStatus]]

# Chave: status de origem
# Valor: conjunto de status de destino permitidos
VALID_TRANSITIONS: TransitionMap = {
    # IDLE: bootstrap ou resume manual; ambos passam por CONNECTING
    ClientStatus.IDLE: frozenset({
        ClientStatus.CONNECTING,
    }),

    # CONNECTING: credencial confirmada ou volta ao repouso
    ClientStatus.CONNECTING: frozenset({
        ClientStatus.SYNCING,
        ClientStatus.IDLE,
    }),

    # SYNCING: primeira sincronização completa ou falha do resume
    ClientStatus.SYNCING: frozenset({
        ClientStatus.READY,
        ClientStatus.IDLE,
    }),

    # READY: logout ou novo bootstrap
    ClientStatus.READY: frozenset({
        ClientStatus.IDLE,
        ClientStatus.CONNECTING,
    }),
}


def get_valid_targets(status: ClientStatus) -> frozenset[ClientStatus]:
    """
    Retorna os status de destino válidos para um status de origem.

    Args:
        status: Status de origem

    Returns:
        Conjunto de status de destino permitidos
    """
    return VALID_TRANSITIONS.get(status, frozenset())


def is_transition_valid(from_status: ClientStatus, to_status: ClientStatus) -> bool:
    """Verifica se a transição é permitida pelo grafo."""
    return to_status in get_valid_targets(from_status)


def validate_transition_map() -> list[str]:
    """
    Valida a integridade do mapa de transições.

    Verifica:
    - Todos os status do enum estão no mapa
    - Todo status pode voltar a IDLE
    - READY só é alcançável a partir de SYNCING

    Returns:
        Lista de erros encontrados (vazia se válido)
    """
    errors: list[str] = []

    for status in ClientStatus:
        if status not in VALID_TRANSITIONS:
            errors.append(f"Status {status.name} ausente em VALID_TRANSITIONS")

    for status, targets in VALID_TRANSITIONS.items():
        if status != ClientStatus.IDLE and ClientStatus.IDLE not in targets:
            errors.append(f"Status {status.name} não pode voltar a IDLE")
        if ClientStatus.READY in targets and status != ClientStatus.SYNCING:
            errors.append(f"Transição {status.name} → READY pula a sincronização")
        for target in targets:
            if not isinstance(target, ClientStatus):
                errors.append(f"Transição {status.name} → {target}: destino inválido")

    return errors
