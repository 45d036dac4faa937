"""
Schemas (DTOs) do bounded context de Pedidos.
"""

from .schema_pedido import (
    ItemPedidoRequest,
    CheckoutRequest,
    ItemPedidoResponse,
    PedidoResponse,
    PedidoStatusResponse,
    AtualizarStatusRequest,
)

__all__ = [
    "ItemPedidoRequest",
    "CheckoutRequest",
    "ItemPedidoResponse",
    "PedidoResponse",
    "PedidoStatusResponse",
    "AtualizarStatusRequest",
]
