from fastapi import APIRouter, Body, Depends, Path, status

from app.api.pedidos.schemas.schema_pedido import (
    CheckoutRequest,
    PedidoResponse,
    PedidoStatusResponse,
)
from app.api.pedidos.services.dependencies import get_pedido_service
from app.api.pedidos.services.service_pedido import PedidoService
from app.utils.logger import logger

router = APIRouter(prefix="/api/pedidos/client", tags=["Client - Pedidos"])


@router.post("/checkout", response_model=PedidoResponse, status_code=status.HTTP_201_CREATED)
def finalizar_checkout(
    payload: CheckoutRequest = Body(...),
    svc: PedidoService = Depends(get_pedido_service),
):
    """
    Cria o pedido a partir do carrinho.

    Pedidos com pagamento online nascem em `pending_payment` e só avançam
    após a confirmação no Mercado Pago.
    """
    logger.info(
        f"[Pedidos] Finalizar checkout - empresa_id={payload.empresa_id} "
        f"tipo={payload.tipo_entrega.value} pagamento={payload.forma_pagamento.value}"
    )
    return svc.checkout(payload)


@router.get("/{pedido_id}/status", response_model=PedidoStatusResponse, status_code=status.HTTP_200_OK)
def status_pedido(
    pedido_id: str = Path(..., description="ID do pedido", min_length=1, max_length=36),
    svc: PedidoService = Depends(get_pedido_service),
):
    return svc.status(pedido_id)
