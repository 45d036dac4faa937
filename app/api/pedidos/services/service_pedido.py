from __future__ import annotations

from decimal import Decimal

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.api.empresas.exceptions import EmpresaNaoEncontradaError
from app.api.empresas.models.usuario_model import UsuarioModel
from app.api.empresas.repositories.empresa_repo import EmpresaRepository
from app.api.pedidos.exceptions import PedidoNaoEncontradoError, TransicaoStatusInvalidaError
from app.api.pedidos.models.model_pedido import FormaPagamento, StatusPedido, TipoEntrega
from app.api.pedidos.repositories.repo_pedidos import PedidoRepository
from app.api.pedidos.schemas.schema_pedido import (
    CheckoutRequest,
    PedidoResponse,
    PedidoStatusResponse,
)
from app.api.pedidos.utils.status_fsm import allowed_next_statuses, can_transition, is_terminal
from app.utils.database_utils import dinheiro
from app.utils.logger import logger


class PedidoService:
    def __init__(self, db: Session) -> None:
        self.db = db
        self.repo = PedidoRepository(db)
        self.empresa_repo = EmpresaRepository(db)

    # ---------------- Checkout ----------------
    def checkout(self, payload: CheckoutRequest) -> PedidoResponse:
        empresa = self.empresa_repo.get_empresa_by_id(payload.empresa_id)
        if not empresa or not empresa.ativa:
            raise EmpresaNaoEncontradaError("Empresa não encontrada")

        itens = []
        subtotal = Decimal("0")
        for item in payload.itens:
            preco = dinheiro(item.preco_unitario)
            total_item = dinheiro(preco * item.quantidade)
            subtotal += total_item
            itens.append({
                "produto_id": item.produto_id,
                "nome": item.nome,
                "quantidade": item.quantidade,
                "preco_unitario": preco,
                "subtotal": total_item,
                "observacao": item.observacao,
            })

        retirada = payload.tipo_entrega == TipoEntrega.RETIRADA
        taxa_entrega = Decimal("0.00") if retirada else dinheiro(payload.taxa_entrega)
        valor_total = dinheiro(subtotal + taxa_entrega)

        # Pagamento na entrega não passa pelo Mercado Pago: já nasce aguardando a loja.
        status_inicial = (
            StatusPedido.AGUARDANDO_PAGAMENTO
            if payload.forma_pagamento == FormaPagamento.ONLINE
            else StatusPedido.PENDENTE
        )

        pedido = self.repo.criar_pedido(
            empresa_id=empresa.id,
            status=status_inicial,
            tipo_entrega=payload.tipo_entrega.value,
            forma_pagamento=payload.forma_pagamento.value,
            itens=itens,
            subtotal=dinheiro(subtotal),
            taxa_entrega=taxa_entrega,
            valor_total=valor_total,
            cliente_nome=payload.cliente_nome,
            cliente_email=payload.cliente_email,
            cliente_documento=payload.cliente_documento,
            endereco_entrega=None if retirada else payload.endereco_entrega,
            observacoes=payload.observacoes,
        )
        self.repo.commit()

        logger.info(
            f"[Pedidos] Pedido criado pedido_id={pedido.id} empresa_id={empresa.id} "
            f"status={status_inicial.value} total={valor_total}"
        )
        return PedidoResponse.model_validate(pedido)

    # ---------------- Acompanhamento ----------------
    def status(self, pedido_id: str) -> PedidoStatusResponse:
        atual = self.repo.get_status(pedido_id)
        if atual is None:
            raise PedidoNaoEncontradoError("Pedido não encontrado")
        return PedidoStatusResponse(pedido_id=pedido_id, status=atual, terminal=is_terminal(atual))

    # ---------------- Fluxo operacional (admin) ----------------
    def atualizar_status(
        self,
        pedido_id: str,
        novo: StatusPedido,
        *,
        usuario: UsuarioModel,
        motivo: str | None = None,
    ) -> PedidoStatusResponse:
        """
        Avança o pedido um passo na cadeia (ou cancela).

        A saída de `pending_payment` para `pending` é exclusiva da confirmação
        de pagamento; pela loja só é possível cancelar um pedido nesse status.
        """
        empresa_id = self.repo.get_empresa_id(pedido_id)
        if empresa_id is None:
            raise PedidoNaoEncontradoError("Pedido não encontrado")
        if empresa_id not in {e.id for e in usuario.empresas}:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Você não tem permissão para alterar este pedido",
            )

        atual = self.repo.get_status(pedido_id)
        if atual == StatusPedido.AGUARDANDO_PAGAMENTO and novo == StatusPedido.PENDENTE:
            raise TransicaoStatusInvalidaError(
                "Pagamento online só é confirmado pelo Mercado Pago."
            )

        resultado = can_transition(current=atual, new=novo)
        if not resultado.ok:
            permitidos = ", ".join(s.value for s in allowed_next_statuses(current=atual)) or "nenhum"
            raise TransicaoStatusInvalidaError(f"{resultado.reason} (permitidos: {permitidos})")

        aplicado = self.repo.transicionar_status(
            pedido_id,
            esperado=atual,
            novo=novo,
            origem="admin",
            motivo=motivo,
            usuario_id=usuario.id,
        )
        if not aplicado:
            self.repo.rollback()
            raise TransicaoStatusInvalidaError(
                "O status do pedido foi alterado por outra operação. Atualize e tente novamente."
            )
        self.repo.commit()

        logger.info(
            f"[Pedidos][Admin] Status alterado pedido_id={pedido_id} "
            f"{atual.value} -> {novo.value} user_id={usuario.id}"
        )
        return PedidoStatusResponse(pedido_id=pedido_id, status=novo, terminal=is_terminal(novo))
