from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from app.api.empresas.services.service_credenciais import ResolvedorCredenciais
from app.api.pedidos.exceptions import PedidoNaoEncontradoError
from app.api.pedidos.models.model_pedido import StatusPedido
from app.api.pedidos.repositories.repo_pedidos import PedidoRepository
from app.api.pedidos.utils.status_fsm import ja_passou_de
from app.integrations.mercadopago.client import (
    ClienteMercadoPagoFactory,
    MercadoPagoPayment,
    StatusPagamentoMP,
    criar_cliente_mercadopago,
)
from app.integrations.mercadopago.errors import MercadoPagoError
from app.utils.logger import logger
from app.utils.prometheus_metrics import pagamentos_confirmacoes_total

STATUS_NAO_ENCONTRADO = "not_found"


@dataclass(frozen=True, slots=True)
class ResultadoConfirmacao:
    pedido_id: str
    status: str
    status_pagamento: Optional[StatusPagamentoMP]
    status_pedido: StatusPedido
    payment_id: Optional[str] = None
    status_detail: Optional[str] = None
    atualizado: bool = False

    @property
    def encontrado(self) -> bool:
        return self.status_pagamento is not None

    @property
    def terminal(self) -> bool:
        return self.status_pagamento is not None and self.status_pagamento.terminal

    @property
    def mensagem(self) -> str:
        if not self.encontrado:
            return "Pagamento não encontrado para este pedido."
        if self.status_pagamento == StatusPagamentoMP.APPROVED:
            if self.atualizado:
                return "Pagamento confirmado e pedido atualizado."
            return "Pagamento já confirmado."
        return "Pagamento ainda não aprovado."


class ConfirmacaoPagamentoService:
    """
    Confirma o pagamento de um pedido consultando o Mercado Pago.

    O provedor é a única fonte da verdade: o status informado pelo navegador
    (query string do retorno) nunca é usado. A única escrita possível é
    `pending_payment -> pending`, feita por compare-and-set; chamadas
    repetidas ou concorrentes para o mesmo pedido terminam no mesmo estado.
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

    async def confirmar(self, pedido_id: str) -> ResultadoConfirmacao:
        empresa_id = self.repo.get_empresa_id(pedido_id)
        if empresa_id is None:
            raise PedidoNaoEncontradoError("Pedido não encontrado")

        credencial = self.resolvedor.resolver(empresa_id)

        try:
            async with self.mercadopago_factory(credencial.access_token) as client:
                pagamentos = await client.search_payments(external_reference=pedido_id)
        except MercadoPagoError:
            pagamentos_confirmacoes_total.labels(resultado="erro").inc()
            raise

        if not pagamentos:
            pagamentos_confirmacoes_total.labels(resultado=STATUS_NAO_ENCONTRADO).inc()
            logger.info(f"[Pagamentos][Confirmacao] Nenhum pagamento ainda pedido_id={pedido_id}")
            return ResultadoConfirmacao(
                pedido_id=pedido_id,
                status=STATUS_NAO_ENCONTRADO,
                status_pagamento=None,
                status_pedido=self.repo.get_status(pedido_id),
            )

        # Busca ordenada por date_created desc: o mais recente governa.
        return self.aplicar_pagamento(pedido_id, pagamentos[0], origem="confirmacao")

    def aplicar_pagamento(
        self,
        pedido_id: str,
        pagamento: MercadoPagoPayment,
        *,
        origem: str,
    ) -> ResultadoConfirmacao:
        atualizado = self.aplicar_status_provedor(
            pedido_id,
            pagamento.status,
            origem=origem,
            payment_id=pagamento.id,
        )

        if pagamento.status == StatusPagamentoMP.APPROVED:
            resultado = "confirmado" if atualizado else "ja_confirmado"
        else:
            resultado = pagamento.status.value
        pagamentos_confirmacoes_total.labels(resultado=resultado).inc()

        logger.info(
            f"[Pagamentos][Confirmacao] pedido_id={pedido_id} payment_id={pagamento.id} "
            f"status_mp={pagamento.status_bruto} atualizado={atualizado}"
        )
        return ResultadoConfirmacao(
            pedido_id=pedido_id,
            status=pagamento.status_bruto,
            status_pagamento=pagamento.status,
            status_pedido=self.repo.get_status(pedido_id),
            payment_id=pagamento.id,
            status_detail=pagamento.status_detail,
            atualizado=atualizado,
        )

    def aplicar_status_provedor(
        self,
        pedido_id: str,
        status: StatusPagamentoMP,
        *,
        origem: str,
        payment_id: Optional[str] = None,
    ) -> bool:
        """
        Leva o pedido de `pending_payment` para `pending` se o pagamento foi aprovado.

        Qualquer outro status do provedor não altera o pedido. Retorna True só
        quando esta chamada efetivamente fez a transição.
        """
        if status != StatusPagamentoMP.APPROVED:
            return False

        aplicado = self.repo.transicionar_status(
            pedido_id,
            esperado=StatusPedido.AGUARDANDO_PAGAMENTO,
            novo=StatusPedido.PENDENTE,
            origem=origem,
            motivo=f"Pagamento aprovado no Mercado Pago (payment_id={payment_id})",
        )
        if aplicado:
            self.repo.commit()
            logger.info(f"[Pagamentos][Confirmacao] Pedido pago pedido_id={pedido_id} payment_id={payment_id}")
            return True

        atual = self.repo.get_status(pedido_id)
        if atual == StatusPedido.CANCELADO:
            logger.warning(
                f"[Pagamentos][Confirmacao] Pagamento aprovado para pedido cancelado "
                f"pedido_id={pedido_id} payment_id={payment_id}"
            )
        elif atual is not None and ja_passou_de(atual, StatusPedido.AGUARDANDO_PAGAMENTO):
            logger.info(
                f"[Pagamentos][Confirmacao] Pedido já confirmado, nada a fazer "
                f"pedido_id={pedido_id} status={atual.value}"
            )
        return False
