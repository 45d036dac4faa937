from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, condecimal, constr, field_validator, model_validator

from app.api.pedidos.models.model_pedido import FormaPagamento, StatusPedido, TipoEntrega


# ======================================================================
# ============================ CLIENT ==================================
# ======================================================================
class ItemPedidoRequest(BaseModel):
    produto_id: Optional[constr(max_length=64)] = None
    nome: constr(min_length=1, max_length=255)
    quantidade: int = Field(..., gt=0)
    preco_unitario: condecimal(ge=0, max_digits=18, decimal_places=2)
    observacao: Optional[constr(max_length=255)] = None


class CheckoutRequest(BaseModel):
    """
    Pedido do cardápio online.

    Totais são recalculados no servidor a partir dos itens; o cliente não envia
    subtotal nem valor total.
    """
    empresa_id: int = Field(..., gt=0)
    itens: List[ItemPedidoRequest] = Field(..., min_length=1)
    tipo_entrega: TipoEntrega = TipoEntrega.DELIVERY
    forma_pagamento: FormaPagamento = FormaPagamento.ONLINE
    taxa_entrega: condecimal(ge=0, max_digits=18, decimal_places=2) = Decimal("0")
    endereco_entrega: Optional[constr(max_length=500)] = None
    observacoes: Optional[constr(max_length=500)] = None

    cliente_nome: Optional[constr(max_length=120)] = None
    cliente_email: Optional[constr(max_length=255)] = None
    cliente_documento: Optional[str] = Field(default=None, description="CPF ou CNPJ")

    @field_validator("cliente_documento")
    @classmethod
    def _somente_digitos(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        digitos = "".join(ch for ch in v if ch.isdigit())
        if digitos and len(digitos) not in (11, 14):
            raise ValueError("documento deve ser CPF (11 dígitos) ou CNPJ (14 dígitos)")
        return digitos or None

    @model_validator(mode="after")
    def _endereco_obrigatorio_delivery(self):
        if self.tipo_entrega == TipoEntrega.DELIVERY and not (self.endereco_entrega or "").strip():
            raise ValueError("endereco_entrega é obrigatório para delivery")
        return self


class ItemPedidoResponse(BaseModel):
    id: int
    produto_id: Optional[str] = None
    nome: str
    quantidade: int
    preco_unitario: float
    subtotal: float
    observacao: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class PedidoResponse(BaseModel):
    id: str
    empresa_id: int
    status: StatusPedido
    tipo_entrega: TipoEntrega
    forma_pagamento: FormaPagamento
    endereco_entrega: Optional[str] = None
    observacoes: Optional[str] = None
    subtotal: float
    taxa_entrega: float
    valor_total: float
    created_at: datetime
    itens: List[ItemPedidoResponse] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class PedidoStatusResponse(BaseModel):
    """O que o cliente consulta em loop até chegar a um status terminal."""
    pedido_id: str
    status: StatusPedido
    terminal: bool


# ======================================================================
# ============================ ADMIN ===================================
# ======================================================================
class AtualizarStatusRequest(BaseModel):
    status: StatusPedido
    motivo: Optional[constr(max_length=500)] = None
