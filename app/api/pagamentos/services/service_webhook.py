from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from app.api.empresas.services.service_credenciais import ResolvedorCredenciais
from app.api.pagamentos.services.service_confirmacao import ConfirmacaoPagamentoService, ResultadoConfirmacao
from app.api.pedidos.repositories.repo_pedidos import PedidoRepository
from app.integrations.mercadopago.client import ClienteMercadoPagoFactory, criar_cliente_mercadopago
from app.integrations.mercadopago.errors import ProviderRejectedError
from app.utils.logger import logger


@dataclass(frozen=True, slots=True)
class NotificacaoPagamento:
    tipo: Optional[str]
    payment_id: Optional[str]

    @classmethod
    def from_request(cls, body: Dict[str, Any], query: Dict[str, str]) -> "NotificacaoPagamento":
        """
        Aceita os dois formatos do Mercado Pago:
        webhook (`{"type": "payment", "data": {"id": ...}}`) e IPN (`?topic=payment&id=...`).
        """
        data = body.get("data") if isinstance(body.get("data"), dict) else {}
        tipo = body.get("type") or body.get("topic") or query.get("type") or query.get("topic")
        payment_id = data.get("id") or query.get("data.id") or query.get("id")
        return cls(
            tipo=str(tipo) if tipo else None,
            payment_id=str(payment_id) if payment_id is not None else None,
        )


class WebhookMercadoPagoService:
    """
    Notificação push do provedor.

    O corpo da notificação não é confiável: só o id do pagamento é usado. O
    pagamento é buscado com a credencial da empresa e o pedido é confirmado
    pelo mesmo caminho idempotente do polling.
    """

    def __init__(
        self,
        db: Session,
        *,
        mercadopago_factory: ClienteMercadoPagoFactory = criar_cliente_mercadopago,
    ) -> None:
        self.repo = PedidoRepository(db)
        self.resolvedor = ResolvedorCredenciais(db)
        self.mercadopago_factory = mercadopago_factory
        self.confirmacao = ConfirmacaoPagamentoService(db, mercadopago_factory=mercadopago_factory)

    async def processar(self, empresa_id: int, notificacao: NotificacaoPagamento) -> Optional[ResultadoConfirmacao]:
        if notificacao.tipo != "payment" or not notificacao.payment_id:
            logger.info(
                f"[Pagamentos][Webhook] Notificação ignorada empresa_id={empresa_id} "
                f"tipo={notificacao.tipo} id={notificacao.payment_id}"
            )
            return None

        credencial = self.resolvedor.resolver(empresa_id)
        try:
            async with self.mercadopago_factory(credencial.access_token) as client:
                pagamento = await client.get_payment(notificacao.payment_id)
        except ProviderRejectedError as e:
            if e.http_status != 404:
                raise
            logger.warning(
                f"[Pagamentos][Webhook] Pagamento não encontrado no provedor empresa_id={empresa_id} "
                f"payment_id={notificacao.payment_id}"
            )
            return None

        pedido_id = pagamento.external_reference
        if not pedido_id or self.repo.get_empresa_id(pedido_id) != empresa_id:
            logger.warning(
                f"[Pagamentos][Webhook] Pagamento sem pedido desta empresa empresa_id={empresa_id} "
                f"payment_id={pagamento.id} external_reference={pedido_id}"
            )
            return None

        logger.info(
            f"[Pagamentos][Webhook] Pagamento notificado payment_id={pagamento.id} "
            f"pedido_id={pedido_id} status_mp={pagamento.status_bruto}"
        )
        return await self.confirmacao.confirmar(pedido_id)
