"""
Montagem da preferência de pagamento (Checkout Pro) a partir do carrinho.

Regras de valor:
- itens com preço unitário ou quantidade não positivos são descartados (e logados);
- o subtotal é recalculado só com os itens que sobraram;
- a diferença `valor_total - subtotal` vira a linha "Taxa de Entrega" quando
  positiva; quando negativa é registrada como aviso (inconsistência do chamador).
"""
from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Optional
from urllib.parse import urlencode

from app.api.pagamentos.exceptions import SemItensValidosError
from app.config.settings import (
    MERCADOPAGO_STATEMENT_DESCRIPTOR_FALLBACK,
    MERCADOPAGO_STATEMENT_DESCRIPTOR_MAX,
    MOEDA_PADRAO,
)
from app.utils.database_utils import CENTAVOS, dinheiro
from app.utils.logger import logger

TITULO_TAXA_ENTREGA = "Taxa de Entrega"


@dataclass(frozen=True, slots=True)
class ItemCarrinho:
    titulo: str
    quantidade: Any
    preco_unitario: Any


@dataclass(frozen=True, slots=True)
class Pagador:
    email: Optional[str] = None
    documento: Optional[str] = None  # CPF/CNPJ


@dataclass(slots=True)
class PreferenciaMontada:
    pedido_id: str
    payload: Dict[str, Any]
    subtotal: Decimal
    taxa_entrega: Decimal
    itens_descartados: List[ItemCarrinho] = field(default_factory=list)
    avisos: List[str] = field(default_factory=list)


def sanitizar_descritor(
    nome: Optional[str],
    *,
    limite: int = MERCADOPAGO_STATEMENT_DESCRIPTOR_MAX,
    fallback: str = MERCADOPAGO_STATEMENT_DESCRIPTOR_FALLBACK,
) -> str:
    """Nome que aparece na fatura do cartão: ASCII, maiúsculo, sem símbolos e limitado."""
    texto = unicodedata.normalize("NFKD", nome or "")
    texto = texto.encode("ascii", "ignore").decode("ascii")
    texto = re.sub(r"[^a-zA-Z0-9 ]", "", texto).upper()[:limite].strip()
    return texto or fallback[:limite]


def identificacao_pagador(documento: Optional[str]) -> Optional[Dict[str, str]]:
    digitos = "".join(ch for ch in (documento or "") if ch.isdigit())
    if not digitos:
        return None
    return {"type": "CNPJ" if len(digitos) == 14 else "CPF", "number": digitos}


def _como_decimal(valor: Any) -> Optional[Decimal]:
    try:
        dec = Decimal(str(valor))
    except (InvalidOperation, ValueError, TypeError):
        return None
    return dec if dec.is_finite() else None


def _normalizar_item(item: ItemCarrinho) -> Optional[tuple[int, Decimal]]:
    preco = _como_decimal(item.preco_unitario)
    qtd = _como_decimal(item.quantidade)
    if preco is None or qtd is None:
        return None
    preco = dinheiro(preco)
    quantidade = int(qtd)
    if preco <= 0 or quantidade <= 0:
        return None
    return quantidade, preco


def _url_retorno(base: str, caminho: str, pedido_id: str, resultado: str) -> str:
    return f"{base}{caminho}?" + urlencode({"order_id": pedido_id, "status": resultado})


class ConstrutorPreferencia:
    """Converte o carrinho em payload de `POST /checkout/preferences`. Não faz I/O."""

    def __init__(self, *, moeda: str = MOEDA_PADRAO) -> None:
        self.moeda = moeda

    def build(
        self,
        pedido_id: str,
        itens: Iterable[ItemCarrinho],
        valor_total: Any,
        nome_empresa: Optional[str],
        url_cliente: str,
        *,
        pagador: Optional[Pagador] = None,
    ) -> PreferenciaMontada:
        descartados: List[ItemCarrinho] = []
        itens_mp: List[Dict[str, Any]] = []
        subtotal = Decimal("0.00")

        for item in itens:
            normalizado = _normalizar_item(item)
            if normalizado is None:
                logger.warning(
                    f"[Pagamentos][Preferencia] Item descartado pedido_id={pedido_id} "
                    f"titulo={item.titulo!r} preco={item.preco_unitario} qtd={item.quantidade}"
                )
                descartados.append(item)
                continue

            quantidade, preco = normalizado
            subtotal += preco * quantidade
            itens_mp.append(self._linha(item.titulo, quantidade, preco))

        if not itens_mp:
            logger.warning(f"[Pagamentos][Preferencia] Nenhum item válido pedido_id={pedido_id}")
            raise SemItensValidosError("Nenhum item válido para pagamento.")

        subtotal = subtotal.quantize(CENTAVOS)
        total = _como_decimal(valor_total)
        total = dinheiro(total) if total is not None else subtotal
        diferenca = total - subtotal

        avisos: List[str] = []
        taxa_entrega = Decimal("0.00")
        if diferenca >= CENTAVOS:
            taxa_entrega = diferenca
            itens_mp.append(self._linha(TITULO_TAXA_ENTREGA, 1, taxa_entrega))
        elif diferenca < 0:
            aviso = (
                f"Valor total ({total}) menor que o subtotal dos itens ({subtotal}); "
                f"diferença de {diferenca} ignorada."
            )
            logger.warning(f"[Pagamentos][Preferencia] pedido_id={pedido_id} {aviso}")
            avisos.append(aviso)

        base = (url_cliente or "").rstrip("/")
        payload: Dict[str, Any] = {
            "items": itens_mp,
            "payment_methods": {
                "excluded_payment_types": [{"id": "ticket"}],
                "installments": 1,
            },
            "back_urls": {
                "success": _url_retorno(base, f"/#/order-success/{pedido_id}", pedido_id, "approved"),
                "pending": _url_retorno(base, "/#/checkout", pedido_id, "pending"),
                "failure": _url_retorno(base, "/#/checkout", pedido_id, "failure"),
            },
            "auto_return": "approved",
            "external_reference": pedido_id,
            "statement_descriptor": sanitizar_descritor(nome_empresa),
        }

        if pagador and (pagador.email or pagador.documento):
            payer: Dict[str, Any] = {}
            if pagador.email:
                payer["email"] = pagador.email
            identificacao = identificacao_pagador(pagador.documento)
            if identificacao:
                payer["identification"] = identificacao
            if payer:
                payload["payer"] = payer

        return PreferenciaMontada(
            pedido_id=pedido_id,
            payload=payload,
            subtotal=subtotal,
            taxa_entrega=taxa_entrega,
            itens_descartados=descartados,
            avisos=avisos,
        )

    def _linha(self, titulo: str, quantidade: int, preco: Decimal) -> Dict[str, Any]:
        return {
            "title": titulo,
            "quantity": quantidade,
            "unit_price": float(preco),
            "currency_id": self.moeda,
        }
