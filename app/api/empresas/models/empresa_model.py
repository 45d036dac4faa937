# app/api/empresas/models/empresa_model.py
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Table, ForeignKey
from sqlalchemy.orm import relationship

from app.database.db_connection import Base
from app.utils.database_utils import now_trimmed


# Tabela de associação usuario-empresa
usuario_empresa = Table(
    "usuario_empresa",
    Base.metadata,
    Column("usuario_id", Integer, ForeignKey("usuarios.id", ondelete="CASCADE"), primary_key=True),
    Column("empresa_id", Integer, ForeignKey("empresas.id", ondelete="CASCADE"), primary_key=True),
)


class EmpresaModel(Base):
    """Loja/restaurante (tenant). Todo pagamento é escopado por empresa."""

    __tablename__ = "empresas"

    id = Column(Integer, primary_key=True, autoincrement=True)
    nome = Column(String(100), nullable=False)
    cnpj = Column(String(20), nullable=True, unique=True)
    slug = Column(String(50), nullable=False, unique=True)
    telefone = Column(String(255), nullable=True)
    ativa = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime, default=now_trimmed, nullable=False)
    updated_at = Column(DateTime, default=now_trimmed, onupdate=now_trimmed, nullable=False)

    credencial_pagamento = relationship(
        "CredencialPagamentoModel",
        back_populates="empresa",
        uselist=False,
        cascade="all, delete-orphan",
    )
    pedidos = relationship("PedidoModel", back_populates="empresa")
    usuarios = relationship(
        "UsuarioModel",
        secondary=usuario_empresa,
        back_populates="empresas",
    )
