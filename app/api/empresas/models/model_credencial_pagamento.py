from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from app.database.db_connection import Base
from app.utils.database_utils import now_trimmed


class CredencialPagamentoModel(Base):
    """
    Credencial Mercado Pago da empresa (public key + access token).

    No máximo um registro por empresa: gravações posteriores sobrescrevem a anterior.
    """

    __tablename__ = "credenciais_pagamento"
    __table_args__ = (
        UniqueConstraint("empresa_id", name="uq_credencial_pagamento_empresa"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    empresa_id = Column(Integer, ForeignKey("empresas.id", ondelete="CASCADE"), nullable=False)

    public_key = Column(String(255), nullable=True)
    access_token = Column(String(255), nullable=True)

    created_at = Column(DateTime, default=now_trimmed, nullable=False)
    updated_at = Column(DateTime, default=now_trimmed, onupdate=now_trimmed, nullable=False)

    empresa = relationship("EmpresaModel", back_populates="credencial_pagamento")
