"""
Models do bounded context de Pedidos.
"""

from .model_pedido import (
    PedidoModel,
    StatusPedido,
    TipoEntrega,
    FormaPagamento,
    StatusPedidoEnum,
    TipoEntregaEnum,
    FormaPagamentoEnum,
)
from .model_pedido_item import PedidoItemModel
from .model_pedido_historico import PedidoStatusHistoricoModel

__all__ = [
    "PedidoModel",
    "PedidoItemModel",
    "PedidoStatusHistoricoModel",
    "StatusPedido",
    "TipoEntrega",
    "FormaPagamento",
    "StatusPedidoEnum",
    "TipoEntregaEnum",
    "FormaPagamentoEnum",
]
