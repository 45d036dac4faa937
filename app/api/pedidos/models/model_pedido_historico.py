# app/api/pedidos/models/model_pedido_historico.py
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, Index
from sqlalchemy.orm import relationship

from app.database.db_connection import Base
from app.utils.database_utils import now_trimmed


class PedidoStatusHistoricoModel(Base):
    """Uma linha por transição de status efetivamente aplicada."""
    __tablename__ = "pedidos_historico"
    __table_args__ = (
        Index("idx_pedidos_historico_pedido", "pedido_id"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)

    pedido_id = Column(String(36), ForeignKey("pedidos.id", ondelete="CASCADE"), nullable=False)
    pedido = relationship("PedidoModel", back_populates="historico")

    status_anterior = Column(String(20), nullable=True)
    status_novo = Column(String(20), nullable=False)

    # Ex.: "pagamento_confirmado", "admin", "checkout"
    origem = Column(String(40), nullable=True)
    motivo = Column(Text, nullable=True)

    usuario_id = Column(Integer, ForeignKey("usuarios.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime, default=now_trimmed, nullable=False)
