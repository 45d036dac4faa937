import json

import httpx
import pytest

from app.integrations.mercadopago.client import MercadoPagoClient, StatusPagamentoMP
from app.integrations.mercadopago.errors import ProviderRejectedError, ProviderUnavailableError


def _cliente(handler) -> MercadoPagoClient:
    return MercadoPagoClient(
        access_token="TEST-token",
        base_url="https://api.mercadopago.test",
        transport=httpx.MockTransport(handler),
    )


async def test_create_preference_envia_token_e_devolve_init_point():
    recebidos = []

    def handler(request):
        recebidos.append(request)
        return httpx.Response(201, json={"id": "pref-1", "init_point": "https://mp.test/checkout/pref-1"})

    async with _cliente(handler) as client:
        preferencia = await client.create_preference({"items": []})

    assert preferencia.init_point == "https://mp.test/checkout/pref-1"
    assert recebidos[0].headers["Authorization"] == "Bearer TEST-token"
    assert recebidos[0].url.path == "/checkout/preferences"


@pytest.mark.parametrize(
    "body, motivo",
    [
        ({"message": "bad request", "cause": [{"code": 2067, "description": "invalid user identification"}]},
         "invalid user identification"),
        ({"message": "bad request", "cause": [{"code": "unit_price_invalid"}]}, "unit_price_invalid"),
        ({"message": "invalid access token", "cause": []}, "invalid access token"),
        ({"error": "x"}, "Bad Request"),
    ],
)
async def test_erro_estruturado_usa_primeira_causa(body, motivo):
    async with _cliente(lambda request: httpx.Response(400, json=body)) as client:
        with pytest.raises(ProviderRejectedError) as exc:
            await client.create_preference({})

    assert exc.value.reason == motivo
    assert exc.value.mensagem == f"Mercado Pago Error: {motivo}"
    assert exc.value.http_status == 400
    assert exc.value.status_code == 500


async def test_erro_sem_json_vira_indisponivel():
    async with _cliente(lambda request: httpx.Response(502, text="<html>Bad Gateway</html>")) as client:
        with pytest.raises(ProviderUnavailableError) as exc:
            await client.create_preference({})

    assert exc.value.codigo == "provider_error"
    assert exc.value.http_status == 502


async def test_sucesso_com_corpo_invalido_vira_indisponivel():
    async with _cliente(lambda request: httpx.Response(200, text="ok")) as client:
        with pytest.raises(ProviderUnavailableError):
            await client.get_payment("1")


async def test_erro_de_transporte_vira_indisponivel():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    async with _cliente(handler) as client:
        with pytest.raises(ProviderUnavailableError):
            await client.search_payments(external_reference="p1")


async def test_busca_de_pagamentos_ordena_por_data_desc():
    recebidos = []

    def handler(request):
        recebidos.append(request)
        return httpx.Response(200, json={"results": [
            {"id": 2, "status": "approved", "external_reference": "p1", "transaction_amount": 10.5},
            {"id": 1, "status": "rejected", "external_reference": "p1"},
        ]})

    async with _cliente(handler) as client:
        pagamentos = await client.search_payments(external_reference="p1")

    params = dict(recebidos[0].url.params)
    assert params == {"sort": "date_created", "criteria": "desc", "external_reference": "p1"}
    assert [p.id for p in pagamentos] == ["2", "1"]
    assert pagamentos[0].status == StatusPagamentoMP.APPROVED
    assert str(pagamentos[0].transaction_amount) == "10.5"


async def test_busca_com_falha_http_vira_indisponivel():
    async with _cliente(lambda request: httpx.Response(500, json={"message": "internal"})) as client:
        with pytest.raises(ProviderUnavailableError):
            await client.search_payments(external_reference="p1")


async def test_create_payment_recusado_preserva_corpo():
    body = {"id": 77, "status": "rejected", "status_detail": "cc_rejected_insufficient_amount"}

    async with _cliente(lambda request: httpx.Response(400, json=body)) as client:
        with pytest.raises(ProviderRejectedError) as exc:
            await client.create_payment({"token": "t"})

    assert exc.value.payload == body


async def test_verify_credentials():
    async with _cliente(lambda request: httpx.Response(200, json={"id": 1})) as client:
        assert await client.verify_credentials() is True
    async with _cliente(lambda request: httpx.Response(401, json={"message": "unauthorized"})) as client:
        assert await client.verify_credentials() is False


def test_status_desconhecido_vira_outro():
    assert StatusPagamentoMP.from_provider("approved") == StatusPagamentoMP.APPROVED
    assert StatusPagamentoMP.from_provider("em_analise") == StatusPagamentoMP.OUTRO
    assert StatusPagamentoMP.from_provider(None) == StatusPagamentoMP.OUTRO
    assert not StatusPagamentoMP.OUTRO.terminal
    assert not StatusPagamentoMP.IN_PROCESS.terminal
    assert StatusPagamentoMP.REFUNDED.terminal


def test_access_token_obrigatorio():
    with pytest.raises(ValueError):
        MercadoPagoClient(access_token="")


async def test_corpo_enviado_em_json():
    recebidos = []

    def handler(request):
        recebidos.append(json.loads(request.content))
        return httpx.Response(201, json={"id": "x", "init_point": "https://mp.test/x"})

    async with _cliente(handler) as client:
        await client.create_preference({"external_reference": "p9"})

    assert recebidos == [{"external_reference": "p9"}]


async def test_create_payment_envia_chave_de_idempotencia():
    recebidos = []

    def handler(request):
        recebidos.append(request.headers.get("X-Idempotency-Key"))
        return httpx.Response(201, json={"id": 1, "status": "approved"})

    async with _cliente(handler) as client:
        await client.create_payment({"token": "t"}, idempotency_key="chave-1")
        await client.create_payment({"token": "t"})

    assert recebidos == ["chave-1", None]
