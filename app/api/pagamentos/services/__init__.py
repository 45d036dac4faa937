"""
Services do bounded context de Pagamentos.
"""

from .service_pagamento import PagamentoService
from .service_webhook import WebhookMercadoPagoService

__all__ = ["PagamentoService", "WebhookMercadoPagoService"]
