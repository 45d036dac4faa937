# app/api/empresas/router/client/router_credenciais_client.py
from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.orm import Session

from app.api.empresas.schemas.schema_credencial_pagamento import CredencialStatusResponse
from app.api.empresas.services.service_credenciais import CredencialPagamentoService
from app.database.db_connection import get_db

router = APIRouter(
    prefix="/api/empresas/client",
    tags=["Client - Empresas - Pagamentos"],
)


@router.get(
    "/{empresa_id}/pagamentos/credenciais/status",
    response_model=CredencialStatusResponse,
    status_code=status.HTTP_200_OK,
)
def status_credenciais(
    empresa_id: int = Path(..., description="ID da empresa", gt=0),
    db: Session = Depends(get_db),
):
    """Indica se a loja aceita pagamento online e devolve a public key do widget de cartão."""
    return CredencialPagamentoService(db).status(empresa_id)
