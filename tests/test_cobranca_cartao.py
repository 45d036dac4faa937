import json

from app.api.pedidos.models.model_pedido import StatusPedido

PAGAMENTOS = "/v1/payments"


def _url(pedido_id):
    return f"/api/pagamentos/client/{pedido_id}/cartao"


def _payload(**extra):
    body = {
        "email_pagador": "maria@example.com",
        "dados_pagamento": {
            "token": "card-token-abc",
            "payment_method_id": "visa",
            "installments": 1,
            "issuer_id": "25",
            "payer": {"identification": {"type": "CPF", "number": "12345678909"}},
        },
    }
    body.update(extra)
    return body


def test_cartao_aprovado_confirma_pedido(client, mp, credencial, criar_pedido, status_do_pedido):
    pedido_id = criar_pedido()
    mp.on("POST", PAGAMENTOS, status_code=201, json={
        "id": 5551,
        "status": "approved",
        "status_detail": "accredited",
        "external_reference": pedido_id,
    })

    resp = client.post(_url(pedido_id), json=_payload())

    assert resp.status_code == 200, resp.text
    assert resp.json() == {
        "status": "approved",
        "status_detail": "accredited",
        "payment_id": "5551",
        "pedido_status": "pending",
    }
    assert status_do_pedido(pedido_id) == StatusPedido.PENDENTE

    enviado = json.loads(mp.chamadas("POST", PAGAMENTOS)[0].content)
    assert enviado["transaction_amount"] == 55.0
    assert enviado["token"] == "card-token-abc"
    assert enviado["installments"] == 1
    assert enviado["issuer_id"] == "25"
    assert enviado["external_reference"] == pedido_id
    assert enviado["description"] == f"Pedido #{pedido_id[-4:]}"
    assert enviado["payer"] == {
        "email": "maria@example.com",
        "identification": {"type": "CPF", "number": "12345678909"},
    }


def test_cartao_recusado_volta_status_sem_alterar_pedido(client, mp, credencial, criar_pedido, status_do_pedido):
    pedido_id = criar_pedido()
    mp.on("POST", PAGAMENTOS, status_code=400, json={
        "id": 5552,
        "status": "rejected",
        "status_detail": "cc_rejected_insufficient_amount",
        "message": "rejected",
    })

    resp = client.post(_url(pedido_id), json=_payload())

    assert resp.status_code == 200, resp.text
    assert resp.json()["status"] == "rejected"
    assert resp.json()["status_detail"] == "cc_rejected_insufficient_amount"
    assert resp.json()["pedido_status"] == "pending_payment"
    assert status_do_pedido(pedido_id) == StatusPedido.AGUARDANDO_PAGAMENTO


def test_cartao_recusado_sem_status_no_corpo(client, mp, credencial, criar_pedido):
    pedido_id = criar_pedido()
    mp.on("POST", PAGAMENTOS, status_code=400, json={
        "message": "bad_request",
        "cause": [{"code": 2006, "description": "Card Token not found"}],
    })

    resp = client.post(_url(pedido_id), json=_payload())

    assert resp.status_code == 200
    assert resp.json()["status"] == "rejected"
    assert resp.json()["status_detail"] == "Card Token not found"
    assert resp.json()["payment_id"] is None


def test_cartao_em_analise_nao_confirma(client, mp, credencial, criar_pedido, status_do_pedido):
    pedido_id = criar_pedido()
    mp.on("POST", PAGAMENTOS, status_code=201, json={
        "id": 5553,
        "status": "in_process",
        "status_detail": "pending_contingency",
    })

    resp = client.post(_url(pedido_id), json=_payload())

    assert resp.status_code == 200
    assert resp.json()["status"] == "in_process"
    assert status_do_pedido(pedido_id) == StatusPedido.AGUARDANDO_PAGAMENTO


def test_erro_5xx_do_provedor(client, mp, credencial, criar_pedido, status_do_pedido):
    pedido_id = criar_pedido()
    mp.on("POST", PAGAMENTOS, status_code=500, json={"message": "internal_error"})

    resp = client.post(_url(pedido_id), json=_payload())

    assert resp.status_code == 500
    assert resp.json()["code"] == "provider_error"
    assert status_do_pedido(pedido_id) == StatusPedido.AGUARDANDO_PAGAMENTO


def test_total_divergente_do_pedido(client, mp, credencial, criar_pedido):
    pedido_id = criar_pedido()

    resp = client.post(_url(pedido_id), json=_payload(total_amount="50.00"))

    assert resp.status_code == 400
    assert resp.json()["code"] == "invalid_order"
    assert mp.requests == []


def test_parcelamento_nao_permitido(client, mp, credencial, criar_pedido):
    pedido_id = criar_pedido()
    payload = _payload()
    payload["dados_pagamento"]["installments"] = 3

    resp = client.post(_url(pedido_id), json=payload)

    assert resp.status_code == 422
    assert resp.json()["code"] == "invalid_request"


def test_pedido_ja_pago(client, mp, credencial, criar_pedido):
    pedido_id = criar_pedido(status=StatusPedido.PENDENTE)

    resp = client.post(_url(pedido_id), json=_payload())

    assert resp.status_code == 409
    assert resp.json()["code"] == "payment_not_allowed"
    assert mp.requests == []


def test_chave_de_idempotencia_estavel_por_token(client, mp, credencial, criar_pedido):
    pedido_id = criar_pedido()
    mp.on("POST", PAGAMENTOS, status_code=201, json={"id": 5554, "status": "in_process"})

    client.post(_url(pedido_id), json=_payload())
    client.post(_url(pedido_id), json=_payload())
    outro = _payload()
    outro["dados_pagamento"]["token"] = "card-token-xyz"
    client.post(_url(pedido_id), json=outro)

    chaves = [r.headers.get("X-Idempotency-Key") for r in mp.chamadas("POST", PAGAMENTOS)]
    assert len(chaves) == 3
    assert chaves[0]
    assert chaves[0] == chaves[1]
    assert chaves[2] != chaves[0]
