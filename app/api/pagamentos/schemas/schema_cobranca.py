from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, constr

from app.api.pedidos.models.model_pedido import StatusPedido


class IdentificacaoPagador(BaseModel):
    type: constr(min_length=1, max_length=10)
    number: constr(min_length=1, max_length=20)


class PagadorCartao(BaseModel):
    identification: Optional[IdentificacaoPagador] = None


class DadosPagamentoCartao(BaseModel):
    """Saída do Card Payment Brick: nenhum dado de cartão em claro chega aqui."""
    token: constr(min_length=1)
    payment_method_id: constr(min_length=1, max_length=50)
    installments: int = Field(default=1, ge=1, le=1)
    issuer_id: Optional[str] = None
    payer: Optional[PagadorCartao] = None


class CobrancaCartaoRequest(BaseModel):
    email_pagador: constr(min_length=3, max_length=255)
    dados_pagamento: DadosPagamentoCartao
    total_amount: Optional[Decimal] = Field(
        default=None,
        description="Opcional; se enviado precisa conferir com o total do pedido",
    )


class CobrancaCartaoResponse(BaseModel):
    status: str
    status_detail: Optional[str] = None
    payment_id: Optional[str] = None
    pedido_status: StatusPedido
