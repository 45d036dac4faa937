from fastapi import APIRouter

from app.api.empresas.router.admin.router_credenciais_admin import router as router_credenciais_admin
from app.api.empresas.router.client.router_credenciais_client import router as router_credenciais_client

api_empresas = APIRouter(
    tags=["API - Empresas"]
)

# Routers para clientes (sem autenticação)
api_empresas.include_router(router_credenciais_client)

# Routers para admin (Bearer JWT)
api_empresas.include_router(router_credenciais_admin)
