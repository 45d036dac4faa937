# app/api/pedidos/models/model_pedido_item.py
from sqlalchemy import Column, Integer, String, ForeignKey, Numeric, Index
from sqlalchemy.orm import relationship

from app.database.db_connection import Base


class PedidoItemModel(Base):
    """Item do pedido (snapshot de nome/preço no momento do checkout)."""
    __tablename__ = "pedidos_itens"
    __table_args__ = (
        Index("idx_pedidos_itens_pedido", "pedido_id"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)

    pedido_id = Column(String(36), ForeignKey("pedidos.id", ondelete="CASCADE"), nullable=False)
    pedido = relationship("PedidoModel", back_populates="itens")

    produto_id = Column(String(64), nullable=True)
    nome = Column(String(255), nullable=False)
    quantidade = Column(Integer, nullable=False)
    preco_unitario = Column(Numeric(18, 2), nullable=False)
    subtotal = Column(Numeric(18, 2), nullable=False)
    observacao = Column(String(255), nullable=True)
