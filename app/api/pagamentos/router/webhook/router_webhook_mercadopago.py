import json

from fastapi import APIRouter, Depends, Path, Request, status

from app.api.pagamentos.services.dependencies import get_webhook_service
from app.api.pagamentos.services.service_webhook import NotificacaoPagamento, WebhookMercadoPagoService
from app.utils.logger import logger

router = APIRouter(prefix="/api/pagamentos/webhook", tags=["Webhook - Pagamentos"])


@router.post("/mercadopago/{empresa_id}", status_code=status.HTTP_200_OK)
async def webhook_mercadopago(
    request: Request,
    empresa_id: int = Path(..., description="ID da empresa", gt=0),
    svc: WebhookMercadoPagoService = Depends(get_webhook_service),
):
    raw = await request.body()
    try:
        body = json.loads(raw) if raw else {}
    except json.JSONDecodeError:
        logger.warning(f"[Pagamentos][Webhook] Corpo inválido empresa_id={empresa_id}")
        body = {}
    if not isinstance(body, dict):
        body = {}

    notificacao = NotificacaoPagamento.from_request(body, dict(request.query_params))
    resultado = await svc.processar(empresa_id, notificacao)
    if resultado is None:
        return {"status": "ignored"}
    return {
        "status": "processed",
        "pedido_id": resultado.pedido_id,
        "payment_status": resultado.status,
    }
