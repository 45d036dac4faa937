import httpx
import pytest

from app.api.pagamentos.services.service_confirmacao import ResultadoConfirmacao, STATUS_NAO_ENCONTRADO
from app.api.pagamentos.services.service_polling import ConfirmacaoPoller, PoliticaPolling
from app.api.pedidos.models.model_pedido import StatusPedido
from app.integrations.mercadopago.client import StatusPagamentoMP
from app.integrations.mercadopago.errors import ProviderUnavailableError


def _resultado(status):
    if status is None:
        return ResultadoConfirmacao(
            pedido_id="p1",
            status=STATUS_NAO_ENCONTRADO,
            status_pagamento=None,
            status_pedido=StatusPedido.AGUARDANDO_PAGAMENTO,
        )
    return ResultadoConfirmacao(
        pedido_id="p1",
        status=status.value,
        status_pagamento=status,
        status_pedido=StatusPedido.AGUARDANDO_PAGAMENTO,
    )


class Roteiro:
    """Devolve (ou levanta) um item por chamada."""

    def __init__(self, *passos):
        self.passos = list(passos)
        self.chamadas = 0

    async def __call__(self, pedido_id):
        passo = self.passos[min(self.chamadas, len(self.passos) - 1)]
        self.chamadas += 1
        if isinstance(passo, Exception):
            raise passo
        return _resultado(passo)


class SonoFalso:
    def __init__(self):
        self.intervalos = []

    async def __call__(self, segundos):
        self.intervalos.append(segundos)


async def test_para_no_primeiro_status_terminal():
    roteiro = Roteiro(None, StatusPagamentoMP.PENDING, StatusPagamentoMP.APPROVED)
    sono = SonoFalso()
    poller = ConfirmacaoPoller(roteiro, PoliticaPolling(intervalo_segundos=2, max_tentativas=5), sleep=sono)

    polling = await poller.aguardar("p1")

    assert polling.resultado.status_pagamento == StatusPagamentoMP.APPROVED
    assert polling.tentativas == 3
    assert not polling.esgotado
    assert sono.intervalos == [2, 2]


async def test_recusado_tambem_e_terminal():
    poller = ConfirmacaoPoller(
        Roteiro(StatusPagamentoMP.REJECTED),
        PoliticaPolling(intervalo_segundos=1, max_tentativas=3),
        sleep=SonoFalso(),
    )

    polling = await poller.aguardar("p1")

    assert polling.tentativas == 1
    assert polling.resultado.status == "rejected"


async def test_esgota_tentativas_sem_dormir_depois_da_ultima():
    roteiro = Roteiro(StatusPagamentoMP.IN_PROCESS)
    sono = SonoFalso()
    poller = ConfirmacaoPoller(roteiro, PoliticaPolling(intervalo_segundos=3, max_tentativas=4), sleep=sono)

    polling = await poller.aguardar("p1")

    assert polling.esgotado
    assert polling.tentativas == 4
    assert roteiro.chamadas == 4
    assert len(sono.intervalos) == 3
    assert polling.resultado.status == "in_process"


async def test_provedor_indisponivel_conta_como_tentativa():
    roteiro = Roteiro(ProviderUnavailableError("fora do ar"), StatusPagamentoMP.APPROVED)
    poller = ConfirmacaoPoller(roteiro, PoliticaPolling(intervalo_segundos=0, max_tentativas=3), sleep=SonoFalso())

    polling = await poller.aguardar("p1")

    assert polling.tentativas == 2
    assert polling.resultado.terminal


async def test_provedor_indisponivel_na_ultima_tentativa_propaga():
    roteiro = Roteiro(ProviderUnavailableError("fora do ar"))
    poller = ConfirmacaoPoller(roteiro, PoliticaPolling(intervalo_segundos=0, max_tentativas=2), sleep=SonoFalso())

    with pytest.raises(ProviderUnavailableError):
        await poller.aguardar("p1")
    assert roteiro.chamadas == 2


async def test_predicado_terminal_customizado():
    poller = ConfirmacaoPoller(
        Roteiro(StatusPagamentoMP.PENDING),
        PoliticaPolling(intervalo_segundos=0, max_tentativas=5, terminal=lambda r: r.encontrado),
        sleep=SonoFalso(),
    )

    polling = await poller.aguardar("p1")

    assert polling.tentativas == 1
    assert not polling.esgotado


@pytest.mark.parametrize("kwargs", [{"max_tentativas": 0}, {"intervalo_segundos": -1}])
def test_politica_invalida(kwargs):
    with pytest.raises(ValueError):
        PoliticaPolling(**kwargs)


def test_endpoint_aguardar_confirma_na_segunda_tentativa(client, mp, credencial, criar_pedido, pagamento_mp):
    pedido_id = criar_pedido()
    respostas = iter([
        {"results": []},
        {"results": [pagamento_mp(pedido_id)]},
    ])
    mp.on("GET", "/v1/payments/search", handler=lambda request: httpx.Response(200, json=next(respostas)))

    resp = client.post(f"/api/pagamentos/client/{pedido_id}/aguardar")

    assert resp.status_code == 200, resp.text
    assert resp.json()["status"] == "approved"
    assert resp.json()["pedido_status"] == "pending"
    assert resp.json()["tentativas"] == 2
    assert resp.json()["esgotado"] is False


def test_endpoint_aguardar_sem_pagamento(client, mp, credencial, criar_pedido):
    pedido_id = criar_pedido()
    mp.on("GET", "/v1/payments/search", json={"results": []})

    resp = client.post(f"/api/pagamentos/client/{pedido_id}/aguardar")

    assert resp.status_code == 404
    assert resp.json()["status"] == "not_found"
    assert len(mp.chamadas("GET", "/v1/payments/search")) == 3
