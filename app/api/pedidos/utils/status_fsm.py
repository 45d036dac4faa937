# app/api/pedidos/utils/status_fsm.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from app.api.pedidos.models.model_pedido import StatusPedido


@dataclass(frozen=True)
class TransitionResult:
    ok: bool
    reason: str | None = None


# Cadeia operacional: cada status só avança para o próximo (ou cancela).
FLUXO = (
    StatusPedido.AGUARDANDO_PAGAMENTO,
    StatusPedido.PENDENTE,
    StatusPedido.CONFIRMADO,
    StatusPedido.PREPARANDO,
    StatusPedido.PRONTO,
    StatusPedido.SAIU_PARA_ENTREGA,
    StatusPedido.ENTREGUE,
)

STATUS_TERMINAIS = frozenset({StatusPedido.ENTREGUE, StatusPedido.CANCELADO})

# Fonte única das transições permitidas
ALLOWED_TRANSITIONS: dict[StatusPedido, set[StatusPedido]] = {
    atual: {proximo, StatusPedido.CANCELADO}
    for atual, proximo in zip(FLUXO, FLUXO[1:])
}
ALLOWED_TRANSITIONS[StatusPedido.ENTREGUE] = set()
ALLOWED_TRANSITIONS[StatusPedido.CANCELADO] = set()


def como_status(valor: StatusPedido | str) -> StatusPedido:
    return valor if isinstance(valor, StatusPedido) else StatusPedido(valor)


def can_transition(*, current: StatusPedido | str, new: StatusPedido | str) -> TransitionResult:
    current, new = como_status(current), como_status(new)
    if new in ALLOWED_TRANSITIONS.get(current, set()):
        return TransitionResult(ok=True)
    return TransitionResult(
        ok=False,
        reason=f"Transição de status inválida: {current.value} → {new.value}",
    )


def origens_permitidas(new: StatusPedido | str) -> set[StatusPedido]:
    """Status a partir dos quais `new` é alcançável em um passo (base do compare-and-set)."""
    new = como_status(new)
    return {atual for atual, destinos in ALLOWED_TRANSITIONS.items() if new in destinos}


def allowed_next_statuses(*, current: StatusPedido | str) -> Iterable[StatusPedido]:
    current = como_status(current)
    return sorted(ALLOWED_TRANSITIONS.get(current, set()), key=lambda s: s.value)


def is_terminal(status: StatusPedido | str) -> bool:
    return como_status(status) in STATUS_TERMINAIS


def ja_passou_de(status: StatusPedido | str, referencia: StatusPedido) -> bool:
    """True se o pedido já está além de `referencia` na cadeia (cancelado conta como além)."""
    status = como_status(status)
    if status == StatusPedido.CANCELADO:
        return True
    return FLUXO.index(status) > FLUXO.index(referencia)
