from typing import Optional

from pydantic import BaseModel

from app.api.pedidos.models.model_pedido import StatusPedido


class ConfirmacaoResponse(BaseModel):
    """`status` é o status bruto do Mercado Pago (approved, pending, rejected...)."""
    status: str
    message: str
    pedido_id: str
    pedido_status: StatusPedido
    payment_id: Optional[str] = None
    status_detail: Optional[str] = None


class NaoEncontradoResponse(BaseModel):
    status: str = "not_found"
    message: str


class AguardarPagamentoResponse(ConfirmacaoResponse):
    tentativas: int
    esgotado: bool
