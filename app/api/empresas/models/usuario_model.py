# app/api/empresas/models/usuario_model.py
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship

from app.database.db_connection import Base
from app.utils.database_utils import now_trimmed
from .empresa_model import usuario_empresa


class UsuarioModel(Base):
    """Usuário administrativo (dono/funcionário) vinculado a uma ou mais empresas."""

    __tablename__ = "usuarios"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(100), nullable=False, unique=True)
    type_user = Column(String(20), nullable=False, default="admin")
    created_at = Column(DateTime, default=now_trimmed, nullable=False)

    empresas = relationship(
        "EmpresaModel",
        secondary=usuario_empresa,
        back_populates="usuarios",
    )
