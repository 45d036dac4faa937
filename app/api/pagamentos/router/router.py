"""
Router principal do bounded context de Pagamentos.
"""
from fastapi import APIRouter

from app.api.pagamentos.router.client.router_pagamentos_client import router as router_pagamentos_client
from app.api.pagamentos.router.webhook.router_webhook_mercadopago import router as router_webhook_mercadopago

api_pagamentos = APIRouter(
    tags=["API - Pagamentos"]
)

# Routers client
api_pagamentos.include_router(router_pagamentos_client)

# Notificações do Mercado Pago
api_pagamentos.include_router(router_webhook_mercadopago)
