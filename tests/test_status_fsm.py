import pytest

from app.api.pedidos.models.model_pedido import StatusPedido as S
from app.api.pedidos.utils.status_fsm import (
    FLUXO,
    allowed_next_statuses,
    can_transition,
    is_terminal,
    ja_passou_de,
    origens_permitidas,
)


@pytest.mark.parametrize("atual, proximo", list(zip(FLUXO, FLUXO[1:])))
def test_avanca_um_passo(atual, proximo):
    assert can_transition(current=atual, new=proximo).ok


@pytest.mark.parametrize("atual", [s for s in FLUXO if s != S.ENTREGUE])
def test_cancelamento_permitido_em_status_nao_terminal(atual):
    assert can_transition(current=atual, new=S.CANCELADO).ok


@pytest.mark.parametrize(
    "atual, novo",
    [
        (S.PENDENTE, S.AGUARDANDO_PAGAMENTO),
        (S.PREPARANDO, S.CONFIRMADO),
        (S.ENTREGUE, S.CANCELADO),
        (S.CANCELADO, S.PENDENTE),
        (S.AGUARDANDO_PAGAMENTO, S.PREPARANDO),
        (S.PENDENTE, S.PENDENTE),
    ],
)
def test_transicoes_invalidas(atual, novo):
    resultado = can_transition(current=atual, new=novo)
    assert not resultado.ok
    assert atual.value in resultado.reason and novo.value in resultado.reason


def test_aceita_valores_string():
    assert can_transition(current="pending_payment", new="pending").ok


def test_origem_unica_do_pagamento_confirmado():
    assert origens_permitidas(S.PENDENTE) == {S.AGUARDANDO_PAGAMENTO}


def test_terminais():
    assert is_terminal(S.ENTREGUE)
    assert is_terminal("cancelled")
    assert not is_terminal(S.AGUARDANDO_PAGAMENTO)
    assert list(allowed_next_statuses(current=S.ENTREGUE)) == []


def test_ja_passou_de():
    assert ja_passou_de(S.CONFIRMADO, S.AGUARDANDO_PAGAMENTO)
    assert ja_passou_de(S.CANCELADO, S.AGUARDANDO_PAGAMENTO)
    assert not ja_passou_de(S.AGUARDANDO_PAGAMENTO, S.AGUARDANDO_PAGAMENTO)
