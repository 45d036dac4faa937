# app/api/pedidos/models/model_pedido.py
import enum
import uuid

from sqlalchemy import (
    Column, String, DateTime, ForeignKey, Numeric, Enum as SAEnum, Index, Integer
)
from sqlalchemy.orm import relationship

from app.database.db_connection import Base
from app.utils.database_utils import now_trimmed


class StatusPedido(enum.Enum):
    """Status possíveis para um pedido, na ordem em que avançam.

    - AGUARDANDO_PAGAMENTO: pedido online criado, pagamento ainda não confirmado
    - PENDENTE: pagamento recebido (ou pagamento na entrega), aguardando a loja
    - CONFIRMADO / PREPARANDO / PRONTO / SAIU_PARA_ENTREGA / ENTREGUE: fluxo operacional
    - CANCELADO: absorvente
    """
    AGUARDANDO_PAGAMENTO = "pending_payment"
    PENDENTE = "pending"
    CONFIRMADO = "confirmed"
    PREPARANDO = "preparing"
    PRONTO = "ready"
    SAIU_PARA_ENTREGA = "delivering"
    ENTREGUE = "delivered"
    CANCELADO = "cancelled"


class TipoEntrega(enum.Enum):
    DELIVERY = "DELIVERY"
    RETIRADA = "RETIRADA"


class FormaPagamento(enum.Enum):
    """ONLINE passa pelo Mercado Pago; NA_ENTREGA é acertado com a loja."""
    ONLINE = "ONLINE"
    NA_ENTREGA = "NA_ENTREGA"


StatusPedidoEnum = SAEnum(
    *[s.value for s in StatusPedido],
    name="pedido_status_enum",
    native_enum=False,
    create_constraint=True,
    length=20,
)

TipoEntregaEnum = SAEnum(
    *[t.value for t in TipoEntrega],
    name="tipo_entrega_enum",
    native_enum=False,
    create_constraint=True,
    length=20,
)

FormaPagamentoEnum = SAEnum(
    *[f.value for f in FormaPagamento],
    name="forma_pagamento_enum",
    native_enum=False,
    create_constraint=True,
    length=20,
)


class PedidoModel(Base):
    """
    Pedido do cardápio online.

    O `id` (string) é também o `external_reference` enviado ao Mercado Pago:
    é a chave de junção entre o estado local e o pagamento remoto.
    Os itens são um snapshot do carrinho no momento do checkout.
    """
    __tablename__ = "pedidos"
    __table_args__ = (
        Index("idx_pedidos_empresa_status", "empresa_id", "status"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    empresa_id = Column(Integer, ForeignKey("empresas.id", ondelete="RESTRICT"), nullable=False)
    empresa = relationship("EmpresaModel", back_populates="pedidos", lazy="select")

    status = Column(StatusPedidoEnum, nullable=False, default=StatusPedido.AGUARDANDO_PAGAMENTO.value)
    tipo_entrega = Column(TipoEntregaEnum, nullable=False, default=TipoEntrega.DELIVERY.value)
    forma_pagamento = Column(FormaPagamentoEnum, nullable=False, default=FormaPagamento.ONLINE.value)

    # Cliente (snapshot)
    cliente_nome = Column(String(120), nullable=True)
    cliente_email = Column(String(255), nullable=True)
    cliente_documento = Column(String(20), nullable=True)  # CPF/CNPJ só dígitos

    # Entrega: endereço em texto (None quando RETIRADA)
    endereco_entrega = Column(String(500), nullable=True)
    observacoes = Column(String(500), nullable=True)

    subtotal = Column(Numeric(18, 2), nullable=False, default=0)
    taxa_entrega = Column(Numeric(18, 2), nullable=False, default=0)
    valor_total = Column(Numeric(18, 2), nullable=False)

    created_at = Column(DateTime, default=now_trimmed, nullable=False)
    updated_at = Column(DateTime, default=now_trimmed, onupdate=now_trimmed, nullable=False)

    itens = relationship(
        "PedidoItemModel",
        back_populates="pedido",
        cascade="all, delete-orphan",
        order_by="PedidoItemModel.id",
    )
    historico = relationship(
        "PedidoStatusHistoricoModel",
        back_populates="pedido",
        cascade="all, delete-orphan",
        order_by="PedidoStatusHistoricoModel.id",
    )
