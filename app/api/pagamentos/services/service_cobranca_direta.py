from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Optional
from uuid import NAMESPACE_URL, uuid5

from app.api.empresas.services.service_credenciais import CredencialResolvida
from app.integrations.mercadopago.client import (
    ClienteMercadoPagoFactory,
    StatusPagamentoMP,
    criar_cliente_mercadopago,
)
from app.integrations.mercadopago.errors import ProviderRejectedError
from app.utils.database_utils import dinheiro
from app.utils.logger import logger
from app.utils.prometheus_metrics import pagamentos_cobrancas_total


@dataclass(frozen=True, slots=True)
class DadosCartao:
    """Dados já tokenizados pelo widget do Mercado Pago no navegador."""

    token: str
    payment_method_id: str
    installments: int = 1
    issuer_id: Optional[str] = None
    tipo_documento: Optional[str] = None
    numero_documento: Optional[str] = None


@dataclass(frozen=True, slots=True)
class ResultadoCobranca:
    status: str
    status_pagamento: StatusPagamentoMP
    status_detail: Optional[str]
    payment_id: Optional[str]


def chave_idempotencia(pedido_id: str, token: str) -> str:
    """Mesmo pedido + mesmo token de cartão => mesma chave (o token é de uso único)."""
    return str(uuid5(NAMESPACE_URL, f"{pedido_id}:{token}"))


class CobrancaDiretaService:
    """
    Cobrança síncrona com cartão tokenizado (`POST /v1/payments`).

    Recusa do cartão (4xx do provedor) é resultado de negócio e volta como
    status; erro 5xx ou provedor fora do ar continua sendo exceção. Não
    altera o pedido.
    """

    def __init__(self, *, mercadopago_factory: ClienteMercadoPagoFactory = criar_cliente_mercadopago) -> None:
        self.mercadopago_factory = mercadopago_factory

    async def cobrar(
        self,
        *,
        credencial: CredencialResolvida,
        pedido_id: str,
        valor_total: Decimal,
        email_pagador: str,
        dados: DadosCartao,
    ) -> ResultadoCobranca:
        payload = self._montar_payload(pedido_id, valor_total, email_pagador, dados)
        chave = chave_idempotencia(pedido_id, dados.token)

        try:
            async with self.mercadopago_factory(credencial.access_token) as client:
                pagamento = await client.create_payment(payload, idempotency_key=chave)
        except ProviderRejectedError as e:
            if e.http_status is not None and e.http_status >= 500:
                raise
            corpo = e.payload if isinstance(e.payload, dict) else {}
            status_bruto = corpo.get("status") or "rejected"
            resultado = ResultadoCobranca(
                status=str(status_bruto),
                status_pagamento=StatusPagamentoMP.from_provider(status_bruto),
                status_detail=corpo.get("status_detail") or e.reason,
                payment_id=str(corpo["id"]) if corpo.get("id") is not None else None,
            )
        else:
            resultado = ResultadoCobranca(
                status=pagamento.status_bruto,
                status_pagamento=pagamento.status,
                status_detail=pagamento.status_detail,
                payment_id=pagamento.id,
            )

        pagamentos_cobrancas_total.labels(status=resultado.status_pagamento.value).inc()
        logger.info(
            f"[Pagamentos][Cartao] pedido_id={pedido_id} payment_id={resultado.payment_id} "
            f"status={resultado.status} detalhe={resultado.status_detail}"
        )
        return resultado

    def _montar_payload(
        self,
        pedido_id: str,
        valor_total: Decimal,
        email_pagador: str,
        dados: DadosCartao,
    ) -> Dict[str, Any]:
        payer: Dict[str, Any] = {"email": email_pagador}
        if dados.tipo_documento and dados.numero_documento:
            payer["identification"] = {
                "type": dados.tipo_documento,
                "number": dados.numero_documento,
            }

        payload: Dict[str, Any] = {
            "transaction_amount": float(dinheiro(valor_total)),
            "token": dados.token,
            "description": f"Pedido #{pedido_id[-4:]}",
            "installments": dados.installments,
            "payment_method_id": dados.payment_method_id,
            "payer": payer,
            "external_reference": pedido_id,
        }
        if dados.issuer_id:
            payload["issuer_id"] = dados.issuer_id
        return payload
