# app/api/empresas/router/admin/router_credenciais_admin.py
from fastapi import APIRouter, Body, Depends, Path, status
from sqlalchemy.orm import Session

from app.api.empresas.schemas.schema_credencial_pagamento import (
    SalvarCredencialRequest,
    SalvarCredencialResponse,
)
from app.api.empresas.services.service_credenciais import CredencialPagamentoService
from app.core.admin_dependencies import require_admin_da_empresa
from app.database.db_connection import get_db
from app.integrations.mercadopago.client import ClienteMercadoPagoFactory
from app.integrations.mercadopago.dependencies import get_mercadopago_factory
from app.utils.logger import logger

router = APIRouter(
    prefix="/api/empresas/admin",
    tags=["Admin - Empresas - Pagamentos"],
)


@router.put(
    "/{empresa_id}/pagamentos/credenciais",
    response_model=SalvarCredencialResponse,
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_admin_da_empresa)],
)
async def salvar_credenciais(
    empresa_id: int = Path(..., description="ID da empresa", gt=0),
    payload: SalvarCredencialRequest = Body(...),
    db: Session = Depends(get_db),
    mercadopago_factory: ClienteMercadoPagoFactory = Depends(get_mercadopago_factory),
):
    """Cria ou sobrescreve a credencial Mercado Pago da empresa e verifica o access token."""
    logger.info(f"[Empresas][Admin] Salvar credenciais de pagamento - empresa_id={empresa_id}")
    svc = CredencialPagamentoService(db, mercadopago_factory=mercadopago_factory)
    return await svc.salvar(empresa_id, payload)
