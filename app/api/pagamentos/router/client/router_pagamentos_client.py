from fastapi import APIRouter, Body, Depends, Path, status
from fastapi.responses import JSONResponse

from app.api.pagamentos.schemas.schema_cobranca import CobrancaCartaoRequest, CobrancaCartaoResponse
from app.api.pagamentos.schemas.schema_confirmacao import (
    AguardarPagamentoResponse,
    ConfirmacaoResponse,
    NaoEncontradoResponse,
)
from app.api.pagamentos.schemas.schema_preferencia import CriarPreferenciaRequest, CriarPreferenciaResponse
from app.api.pagamentos.services.dependencies import get_pagamento_service
from app.api.pagamentos.services.service_confirmacao import ResultadoConfirmacao
from app.api.pagamentos.services.service_pagamento import PagamentoService
from app.utils.logger import logger

router = APIRouter(prefix="/api/pagamentos/client", tags=["Client - Pagamentos"])


def _nao_encontrado(resultado: ResultadoConfirmacao) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content=NaoEncontradoResponse(message=resultado.mensagem).model_dump(),
    )


def _confirmacao_response(resultado: ResultadoConfirmacao) -> ConfirmacaoResponse:
    return ConfirmacaoResponse(
        status=resultado.status,
        message=resultado.mensagem,
        pedido_id=resultado.pedido_id,
        pedido_status=resultado.status_pedido,
        payment_id=resultado.payment_id,
        status_detail=resultado.status_detail,
    )


@router.post("/preferencias", response_model=CriarPreferenciaResponse, status_code=status.HTTP_200_OK)
async def criar_preferencia(
    payload: CriarPreferenciaRequest = Body(...),
    svc: PagamentoService = Depends(get_pagamento_service),
):
    """Cria a preferência no Mercado Pago e devolve o `init_point` para redirecionar o cliente."""
    logger.info(f"[Pagamentos] Criar preferência - pedido_id={payload.pedido_id}")
    return await svc.criar_preferencia(payload)


@router.post(
    "/{pedido_id}/confirmar",
    response_model=ConfirmacaoResponse,
    status_code=status.HTTP_200_OK,
    responses={404: {"model": NaoEncontradoResponse}},
)
async def confirmar_pagamento(
    pedido_id: str = Path(..., description="ID do pedido", min_length=1, max_length=36),
    svc: PagamentoService = Depends(get_pagamento_service),
):
    """
    Reconsulta o pagamento no Mercado Pago e atualiza o pedido se aprovado.

    Pode ser chamado quantas vezes for preciso. `404 not_found` significa que o
    pagamento ainda não apareceu no provedor: tente de novo mais tarde.
    """
    logger.info(f"[Pagamentos] Confirmar pagamento - pedido_id={pedido_id}")
    resultado = await svc.confirmar(pedido_id)
    if not resultado.encontrado:
        return _nao_encontrado(resultado)
    return _confirmacao_response(resultado)


@router.post(
    "/{pedido_id}/aguardar",
    response_model=AguardarPagamentoResponse,
    status_code=status.HTTP_200_OK,
    responses={404: {"model": NaoEncontradoResponse}},
)
async def aguardar_pagamento(
    pedido_id: str = Path(..., description="ID do pedido", min_length=1, max_length=36),
    svc: PagamentoService = Depends(get_pagamento_service),
):
    """Repete a confirmação no servidor até um status terminal ou até esgotar as tentativas."""
    logger.info(f"[Pagamentos] Aguardar pagamento - pedido_id={pedido_id}")
    polling = await svc.aguardar_confirmacao(pedido_id)
    if not polling.resultado.encontrado:
        return _nao_encontrado(polling.resultado)
    base = _confirmacao_response(polling.resultado)
    return AguardarPagamentoResponse(
        **base.model_dump(),
        tentativas=polling.tentativas,
        esgotado=polling.esgotado,
    )


@router.post("/{pedido_id}/cartao", response_model=CobrancaCartaoResponse, status_code=status.HTTP_200_OK)
async def cobrar_cartao(
    pedido_id: str = Path(..., description="ID do pedido", min_length=1, max_length=36),
    payload: CobrancaCartaoRequest = Body(...),
    svc: PagamentoService = Depends(get_pagamento_service),
):
    """
    Cobra o cartão tokenizado na hora.

    Cartão recusado volta 200 com `status` e `status_detail` do provedor.
    """
    logger.info(f"[Pagamentos] Cobrança cartão - pedido_id={pedido_id}")
    return await svc.cobrar_cartao(pedido_id, payload)
