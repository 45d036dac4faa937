from fastapi import APIRouter, Body, Depends, Path, status

from app.api.empresas.models.usuario_model import UsuarioModel
from app.api.pedidos.schemas.schema_pedido import AtualizarStatusRequest, PedidoStatusResponse
from app.api.pedidos.services.dependencies import get_pedido_service
from app.api.pedidos.services.service_pedido import PedidoService
from app.core.admin_dependencies import get_current_user
from app.utils.logger import logger

router = APIRouter(prefix="/api/pedidos/admin", tags=["Admin - Pedidos"])


@router.patch("/{pedido_id}/status", response_model=PedidoStatusResponse, status_code=status.HTTP_200_OK)
def atualizar_status_pedido(
    pedido_id: str = Path(..., description="ID do pedido", min_length=1, max_length=36),
    payload: AtualizarStatusRequest = Body(...),
    current_user: UsuarioModel = Depends(get_current_user),
    svc: PedidoService = Depends(get_pedido_service),
):
    """Avança o pedido no fluxo operacional ou cancela. Nunca regride."""
    logger.info(
        f"[Pedidos][Admin] Atualizar status - pedido_id={pedido_id} "
        f"novo={payload.status.value} user_id={current_user.id}"
    )
    return svc.atualizar_status(
        pedido_id,
        payload.status,
        usuario=current_user,
        motivo=payload.motivo,
    )
