from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, constr


class ItemPreferenciaRequest(BaseModel):
    """Sem validação de faixa: itens inválidos são descartados na montagem da preferência."""
    title: constr(min_length=1, max_length=255)
    quantity: int
    unit_price: Decimal


class CriarPreferenciaRequest(BaseModel):
    """
    Quando `items` não é enviado, a preferência é montada a partir do snapshot
    do pedido (itens + taxa de entrega gravados no checkout).
    """
    pedido_id: constr(min_length=1, max_length=36)
    url_cliente: constr(min_length=1, max_length=500)
    items: Optional[List[ItemPreferenciaRequest]] = None
    total_amount: Optional[Decimal] = None
    nome_empresa: Optional[constr(max_length=255)] = None
    email_pagador: Optional[constr(max_length=255)] = None
    documento_pagador: Optional[constr(max_length=20)] = None


class CriarPreferenciaResponse(BaseModel):
    pedido_id: str
    init_point: str
    avisos: List[str] = Field(default_factory=list)
