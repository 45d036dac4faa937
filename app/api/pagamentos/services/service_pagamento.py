from __future__ import annotations

from typing import Optional

from sqlalchemy.orm import Session

from app.api.empresas.services.service_credenciais import ResolvedorCredenciais
from app.api.pagamentos.exceptions import PagamentoNaoPermitidoError
from app.api.pagamentos.schemas.schema_cobranca import CobrancaCartaoRequest, CobrancaCartaoResponse
from app.api.pagamentos.schemas.schema_preferencia import CriarPreferenciaRequest, CriarPreferenciaResponse
from app.api.pagamentos.services.service_cobranca_direta import CobrancaDiretaService, DadosCartao
from app.api.pagamentos.services.service_confirmacao import ConfirmacaoPagamentoService, ResultadoConfirmacao
from app.api.pagamentos.services.service_gateway_preferencia import GatewayPreferencia
from app.api.pagamentos.services.service_polling import ConfirmacaoPoller, PoliticaPolling, ResultadoPolling
from app.api.pagamentos.services.service_preferencia import ConstrutorPreferencia, ItemCarrinho, Pagador
from app.api.pedidos.exceptions import PedidoInvalidoError, PedidoNaoEncontradoError
from app.api.pedidos.models.model_pedido import FormaPagamento, PedidoModel, StatusPedido
from app.api.pedidos.repositories.repo_pedidos import PedidoRepository
from app.integrations.mercadopago.client import ClienteMercadoPagoFactory, criar_cliente_mercadopago
from app.utils.database_utils import CENTAVOS, dinheiro
from app.utils.logger import logger


class PagamentoService:
    """Orquestra os fluxos de pagamento online de um pedido (preferência, cartão, confirmação)."""

    def __init__(
        self,
        db: Session,
        *,
        mercadopago_factory: ClienteMercadoPagoFactory = criar_cliente_mercadopago,
        politica_polling: Optional[PoliticaPolling] = None,
    ) -> None:
        self.repo = PedidoRepository(db)
        self.resolvedor = ResolvedorCredenciais(db)
        self.construtor = ConstrutorPreferencia()
        self.gateway = GatewayPreferencia(mercadopago_factory=mercadopago_factory)
        self.cobranca = CobrancaDiretaService(mercadopago_factory=mercadopago_factory)
        self.confirmacao = ConfirmacaoPagamentoService(db, mercadopago_factory=mercadopago_factory)
        self.politica_polling = politica_polling

    # ---------------- Checkout Pro ----------------
    async def criar_preferencia(self, payload: CriarPreferenciaRequest) -> CriarPreferenciaResponse:
        pedido = self._get_pedido_or_404(payload.pedido_id)
        credencial = self.resolvedor.resolver(pedido.empresa_id)
        self._garantir_aguardando_pagamento(pedido)

        if payload.items:
            itens = [ItemCarrinho(i.title, i.quantity, i.unit_price) for i in payload.items]
            valor_total = payload.total_amount if payload.total_amount is not None else pedido.valor_total
        else:
            itens = [ItemCarrinho(i.nome, i.quantidade, i.preco_unitario) for i in pedido.itens]
            valor_total = pedido.valor_total

        preferencia = self.construtor.build(
            pedido.id,
            itens,
            valor_total,
            payload.nome_empresa or pedido.empresa.nome,
            payload.url_cliente,
            pagador=Pagador(
                email=payload.email_pagador or pedido.cliente_email,
                documento=payload.documento_pagador or pedido.cliente_documento,
            ),
        )

        init_point = await self.gateway.criar_preferencia(preferencia, credencial)
        return CriarPreferenciaResponse(
            pedido_id=pedido.id,
            init_point=init_point,
            avisos=preferencia.avisos,
        )

    # ---------------- Cartão (Checkout Transparente) ----------------
    async def cobrar_cartao(self, pedido_id: str, payload: CobrancaCartaoRequest) -> CobrancaCartaoResponse:
        pedido = self._get_pedido_or_404(pedido_id)
        credencial = self.resolvedor.resolver(pedido.empresa_id)
        self._garantir_aguardando_pagamento(pedido)

        valor_total = dinheiro(pedido.valor_total)
        if payload.total_amount is not None and abs(dinheiro(payload.total_amount) - valor_total) >= CENTAVOS:
            raise PedidoInvalidoError(
                f"Valor informado ({dinheiro(payload.total_amount)}) não confere com o total do pedido ({valor_total})."
            )

        dados = payload.dados_pagamento
        identificacao = dados.payer.identification if dados.payer else None
        resultado = await self.cobranca.cobrar(
            credencial=credencial,
            pedido_id=pedido.id,
            valor_total=valor_total,
            email_pagador=payload.email_pagador,
            dados=DadosCartao(
                token=dados.token,
                payment_method_id=dados.payment_method_id,
                installments=dados.installments,
                issuer_id=dados.issuer_id,
                tipo_documento=identificacao.type if identificacao else None,
                numero_documento=identificacao.number if identificacao else None,
            ),
        )

        # Commit próprio: a transição fica gravada antes do commit de get_db.
        self.confirmacao.aplicar_status_provedor(
            pedido.id,
            resultado.status_pagamento,
            origem="cobranca_direta",
            payment_id=resultado.payment_id,
        )
        return CobrancaCartaoResponse(
            status=resultado.status,
            status_detail=resultado.status_detail,
            payment_id=resultado.payment_id,
            pedido_status=self.repo.get_status(pedido.id),
        )

    # ---------------- Confirmação ----------------
    async def confirmar(self, pedido_id: str) -> ResultadoConfirmacao:
        return await self.confirmacao.confirmar(pedido_id)

    async def aguardar_confirmacao(self, pedido_id: str) -> ResultadoPolling:
        poller = ConfirmacaoPoller(self.confirmacao.confirmar, self.politica_polling)
        return await poller.aguardar(pedido_id)

    # ---------------- Helpers ----------------
    def _get_pedido_or_404(self, pedido_id: str) -> PedidoModel:
        pedido = self.repo.get_pedido(pedido_id)
        if not pedido:
            raise PedidoNaoEncontradoError("Pedido não encontrado")
        return pedido

    def _garantir_aguardando_pagamento(self, pedido: PedidoModel) -> None:
        if pedido.forma_pagamento != FormaPagamento.ONLINE.value:
            raise PagamentoNaoPermitidoError("Pedido com pagamento na entrega não aceita pagamento online.")
        if pedido.status != StatusPedido.AGUARDANDO_PAGAMENTO.value:
            logger.info(
                f"[Pagamentos] Pagamento recusado para pedido fora de pending_payment "
                f"pedido_id={pedido.id} status={pedido.status}"
            )
            raise PagamentoNaoPermitidoError("Pedido não está aguardando pagamento.")
