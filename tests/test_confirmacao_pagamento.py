import asyncio

import pytest

from app.api.pagamentos.services.service_confirmacao import ConfirmacaoPagamentoService
from app.api.pedidos.models.model_pedido import StatusPedido
from app.api.pedidos.repositories.repo_pedidos import PedidoRepository
from app.database.db_connection import SessionLocal
from app.integrations.mercadopago.client import StatusPagamentoMP

BUSCA = "/v1/payments/search"


def _confirmar(client, pedido_id):
    return client.post(f"/api/pagamentos/client/{pedido_id}/confirmar")


def test_sem_pagamento_retorna_not_found_e_nao_altera_pedido(client, mp, credencial, criar_pedido, status_do_pedido):
    pedido_id = criar_pedido()
    mp.on("GET", BUSCA, json={"results": []})

    resp = _confirmar(client, pedido_id)

    assert resp.status_code == 404, resp.text
    assert resp.json()["status"] == "not_found"
    assert status_do_pedido(pedido_id) == StatusPedido.AGUARDANDO_PAGAMENTO


def test_aprovado_confirma_uma_unica_vez(client, mp, db, credencial, criar_pedido, status_do_pedido, pagamento_mp):
    pedido_id = criar_pedido()
    mp.on("GET", BUSCA, json={"results": [pagamento_mp(pedido_id)]})

    primeira = _confirmar(client, pedido_id)
    segunda = _confirmar(client, pedido_id)

    assert primeira.status_code == 200, primeira.text
    assert primeira.json()["status"] == "approved"
    assert primeira.json()["pedido_status"] == "pending"
    assert primeira.json()["payment_id"] == "1001"
    assert primeira.json()["message"] == "Pagamento confirmado e pedido atualizado."

    assert segunda.status_code == 200
    assert segunda.json()["message"] == "Pagamento já confirmado."
    assert status_do_pedido(pedido_id) == StatusPedido.PENDENTE

    historico = [h for h in PedidoRepository(db).list_historico(pedido_id) if h.origem == "confirmacao"]
    assert len(historico) == 1
    assert (historico[0].status_anterior, historico[0].status_novo) == ("pending_payment", "pending")


def test_busca_usa_token_da_empresa_e_referencia_do_pedido(client, mp, credencial, criar_pedido, pagamento_mp):
    pedido_id = criar_pedido()
    mp.on("GET", BUSCA, json={"results": [pagamento_mp(pedido_id)]})

    _confirmar(client, pedido_id)

    chamada = mp.chamadas("GET", BUSCA)[0]
    assert chamada.headers["Authorization"] == "Bearer APP_USR-access-token"
    assert chamada.url.params["external_reference"] == pedido_id


def test_confirmacao_nunca_regride_pedido_ja_avancado(
    client, mp, credencial, criar_pedido, status_do_pedido, pagamento_mp, auth_headers
):
    pedido_id = criar_pedido()
    mp.on("GET", BUSCA, json={"results": [pagamento_mp(pedido_id)]})

    assert _confirmar(client, pedido_id).status_code == 200
    resp = client.patch(
        f"/api/pedidos/admin/{pedido_id}/status",
        json={"status": "confirmed"},
        headers=auth_headers,
    )
    assert resp.status_code == 200, resp.text

    resp = _confirmar(client, pedido_id)

    assert resp.status_code == 200
    assert resp.json()["pedido_status"] == "confirmed"
    assert status_do_pedido(pedido_id) == StatusPedido.CONFIRMADO


def test_aprovado_para_pedido_cancelado_nao_reabre(client, mp, credencial, criar_pedido, status_do_pedido, pagamento_mp):
    pedido_id = criar_pedido(status=StatusPedido.CANCELADO)
    mp.on("GET", BUSCA, json={"results": [pagamento_mp(pedido_id)]})

    resp = _confirmar(client, pedido_id)

    assert resp.status_code == 200
    assert resp.json()["status"] == "approved"
    assert resp.json()["pedido_status"] == "cancelled"
    assert status_do_pedido(pedido_id) == StatusPedido.CANCELADO


@pytest.mark.parametrize("status_mp", ["pending", "in_process", "rejected", "cancelled", "em_analise"])
def test_status_nao_aprovado_devolvido_sem_alterar_pedido(
    client, mp, credencial, criar_pedido, status_do_pedido, pagamento_mp, status_mp
):
    pedido_id = criar_pedido()
    mp.on("GET", BUSCA, json={"results": [pagamento_mp(pedido_id, status=status_mp)]})

    resp = _confirmar(client, pedido_id)

    assert resp.status_code == 200, resp.text
    assert resp.json()["status"] == status_mp
    assert resp.json()["pedido_status"] == "pending_payment"
    assert status_do_pedido(pedido_id) == StatusPedido.AGUARDANDO_PAGAMENTO


def test_pagamento_mais_recente_governa(client, mp, credencial, criar_pedido, status_do_pedido, pagamento_mp):
    pedido_id = criar_pedido()
    mp.on("GET", BUSCA, json={"results": [
        pagamento_mp(pedido_id, status="rejected", payment_id=2),
        pagamento_mp(pedido_id, status="approved", payment_id=1),
    ]})

    resp = _confirmar(client, pedido_id)

    assert resp.json()["status"] == "rejected"
    assert status_do_pedido(pedido_id) == StatusPedido.AGUARDANDO_PAGAMENTO


def test_sem_credencial_nao_chama_provedor(client, mp, criar_pedido):
    pedido_id = criar_pedido()

    resp = _confirmar(client, pedido_id)

    assert resp.status_code == 400
    assert resp.json() == {
        "status": "error",
        "code": "missing_credential",
        "message": "Mercado Pago não está configurado para esta loja.",
    }
    assert mp.requests == []


def test_pedido_inexistente(client, mp, credencial):
    resp = _confirmar(client, "nao-existe")

    assert resp.status_code == 404
    assert resp.json()["code"] == "order_not_found"
    assert mp.requests == []


def test_falha_do_provedor_vira_erro_estruturado(client, mp, credencial, criar_pedido, status_do_pedido):
    pedido_id = criar_pedido()
    mp.on("GET", BUSCA, status_code=500, json={"message": "internal_error"})

    resp = _confirmar(client, pedido_id)

    assert resp.status_code == 500
    assert resp.json()["status"] == "error"
    assert resp.json()["code"] == "provider_error"
    assert status_do_pedido(pedido_id) == StatusPedido.AGUARDANDO_PAGAMENTO


async def test_confirmacoes_concorrentes_aplicam_uma_transicao(mp, db, credencial, criar_pedido, pagamento_mp):
    pedido_id = criar_pedido()
    mp.on("GET", BUSCA, json={"results": [pagamento_mp(pedido_id)]})

    sessoes = [SessionLocal(), SessionLocal()]
    try:
        resultados = await asyncio.gather(*[
            ConfirmacaoPagamentoService(s, mercadopago_factory=mp.factory).confirmar(pedido_id)
            for s in sessoes
        ])
    finally:
        for s in sessoes:
            s.close()

    assert sorted(r.atualizado for r in resultados) == [False, True]
    assert all(r.status_pedido == StatusPedido.PENDENTE for r in resultados)
    historico = [h for h in PedidoRepository(db).list_historico(pedido_id) if h.origem == "confirmacao"]
    assert len(historico) == 1


def test_transicao_aplicada_sobrevive_a_rollback_da_requisicao(db, criar_pedido, status_do_pedido):
    pedido_id = criar_pedido()

    sessao = SessionLocal()
    try:
        servico = ConfirmacaoPagamentoService(sessao)
        aplicado = servico.aplicar_status_provedor(
            pedido_id, StatusPagamentoMP.APPROVED, origem="cobranca_direta", payment_id="5551"
        )
        sessao.rollback()
    finally:
        sessao.close()

    assert aplicado is True
    db.expire_all()
    assert status_do_pedido(pedido_id) == StatusPedido.PENDENTE
