from fastapi import Depends
from sqlalchemy.orm import Session

from app.api.pagamentos.services.service_pagamento import PagamentoService
from app.api.pagamentos.services.service_polling import PoliticaPolling
from app.api.pagamentos.services.service_webhook import WebhookMercadoPagoService
from app.database.db_connection import get_db
from app.integrations.mercadopago.client import ClienteMercadoPagoFactory
from app.integrations.mercadopago.dependencies import get_mercadopago_factory


def get_politica_polling() -> PoliticaPolling:
    """Intervalo e tentativas vêm do settings (sobrescrita nos testes)."""
    return PoliticaPolling()


def get_pagamento_service(
    db: Session = Depends(get_db),
    mercadopago_factory: ClienteMercadoPagoFactory = Depends(get_mercadopago_factory),
    politica_polling: PoliticaPolling = Depends(get_politica_polling),
) -> PagamentoService:
    return PagamentoService(
        db,
        mercadopago_factory=mercadopago_factory,
        politica_polling=politica_polling,
    )


def get_webhook_service(
    db: Session = Depends(get_db),
    mercadopago_factory: ClienteMercadoPagoFactory = Depends(get_mercadopago_factory),
) -> WebhookMercadoPagoService:
    return WebhookMercadoPagoService(db, mercadopago_factory=mercadopago_factory)
