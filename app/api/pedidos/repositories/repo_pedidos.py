# app/api/pedidos/repositories/repo_pedidos.py
from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Optional

from sqlalchemy.orm import Session, selectinload

from app.api.pedidos.models.model_pedido import PedidoModel, StatusPedido
from app.api.pedidos.models.model_pedido_item import PedidoItemModel
from app.api.pedidos.models.model_pedido_historico import PedidoStatusHistoricoModel
from app.utils.database_utils import now_trimmed


class PedidoRepository:
    """Order State Store: leitura e escrita de pedidos e do histórico de status."""

    def __init__(self, db: Session) -> None:
        self.db = db

    # ---------------- Consultas -----------------
    def get_pedido(self, pedido_id: str) -> Optional[PedidoModel]:
        return (
            self.db.query(PedidoModel)
            .options(selectinload(PedidoModel.itens))
            .filter(PedidoModel.id == pedido_id)
            .first()
        )

    def get_status(self, pedido_id: str) -> Optional[StatusPedido]:
        """Lê o status direto do banco (ignora objetos em cache na sessão)."""
        valor = (
            self.db.query(PedidoModel.status)
            .filter(PedidoModel.id == pedido_id)
            .scalar()
        )
        return StatusPedido(valor) if valor is not None else None

    def get_empresa_id(self, pedido_id: str) -> Optional[int]:
        return (
            self.db.query(PedidoModel.empresa_id)
            .filter(PedidoModel.id == pedido_id)
            .scalar()
        )

    def list_historico(self, pedido_id: str) -> list[PedidoStatusHistoricoModel]:
        return (
            self.db.query(PedidoStatusHistoricoModel)
            .filter(PedidoStatusHistoricoModel.pedido_id == pedido_id)
            .order_by(PedidoStatusHistoricoModel.id.asc())
            .all()
        )

    # ---------------- Mutations ------------------
    def criar_pedido(
        self,
        *,
        empresa_id: int,
        status: StatusPedido,
        tipo_entrega: str,
        forma_pagamento: str,
        itens: Iterable[dict],
        subtotal: Decimal,
        taxa_entrega: Decimal,
        valor_total: Decimal,
        cliente_nome: str | None = None,
        cliente_email: str | None = None,
        cliente_documento: str | None = None,
        endereco_entrega: str | None = None,
        observacoes: str | None = None,
    ) -> PedidoModel:
        pedido = PedidoModel(
            empresa_id=empresa_id,
            status=status.value,
            tipo_entrega=tipo_entrega,
            forma_pagamento=forma_pagamento,
            cliente_nome=cliente_nome,
            cliente_email=cliente_email,
            cliente_documento=cliente_documento,
            endereco_entrega=endereco_entrega,
            observacoes=observacoes,
            subtotal=subtotal,
            taxa_entrega=taxa_entrega,
            valor_total=valor_total,
        )
        pedido.itens = [PedidoItemModel(**item) for item in itens]
        self.db.add(pedido)
        self.db.flush()

        self.add_status_historico(
            pedido_id=pedido.id,
            status_anterior=None,
            status_novo=status,
            origem="checkout",
            motivo="Pedido criado",
        )
        return pedido

    def transicionar_status(
        self,
        pedido_id: str,
        *,
        esperado: StatusPedido,
        novo: StatusPedido,
        origem: str,
        motivo: str | None = None,
        usuario_id: int | None = None,
    ) -> bool:
        """
        Compare-and-set: grava `novo` somente se o status atual ainda for `esperado`.

        Retorna False (sem efeito) quando outra requisição já mudou o status.
        O histórico só é gravado quando a linha foi de fato alterada.
        """
        linhas = (
            self.db.query(PedidoModel)
            .filter(
                PedidoModel.id == pedido_id,
                PedidoModel.status == esperado.value,
            )
            .update(
                {
                    PedidoModel.status: novo.value,
                    PedidoModel.updated_at: now_trimmed(),
                },
                synchronize_session=False,
            )
        )
        if linhas == 0:
            return False

        self.add_status_historico(
            pedido_id=pedido_id,
            status_anterior=esperado,
            status_novo=novo,
            origem=origem,
            motivo=motivo or f"{esperado.value} → {novo.value}",
            usuario_id=usuario_id,
        )
        return True

    def add_status_historico(
        self,
        *,
        pedido_id: str,
        status_anterior: StatusPedido | None,
        status_novo: StatusPedido,
        origem: str | None = None,
        motivo: str | None = None,
        usuario_id: int | None = None,
    ) -> PedidoStatusHistoricoModel:
        historico = PedidoStatusHistoricoModel(
            pedido_id=pedido_id,
            status_anterior=status_anterior.value if status_anterior else None,
            status_novo=status_novo.value,
            origem=origem,
            motivo=motivo,
            usuario_id=usuario_id,
        )
        self.db.add(historico)
        self.db.flush()
        return historico

    # ---------------- Unidade de trabalho --------
    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
