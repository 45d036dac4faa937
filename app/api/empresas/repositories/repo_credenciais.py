from __future__ import annotations

from typing import Optional

from sqlalchemy.orm import Session

from app.api.empresas.models.model_credencial_pagamento import CredencialPagamentoModel


class CredencialPagamentoRepository:
    """Repositório das credenciais de pagamento por empresa."""

    def __init__(self, db: Session) -> None:
        self.db = db

    # ---------------- Consultas -----------------
    def get_by_empresa_id(self, empresa_id: int) -> Optional[CredencialPagamentoModel]:
        return (
            self.db.query(CredencialPagamentoModel)
            .filter(CredencialPagamentoModel.empresa_id == empresa_id)
            .first()
        )

    # ---------------- Mutations ------------------
    def upsert(
        self,
        *,
        empresa_id: int,
        public_key: str,
        access_token: str,
    ) -> CredencialPagamentoModel:
        """Cria ou sobrescreve a credencial da empresa (last-write-wins)."""
        credencial = self.get_by_empresa_id(empresa_id)
        if credencial is None:
            credencial = CredencialPagamentoModel(empresa_id=empresa_id)
            self.db.add(credencial)

        credencial.public_key = public_key
        credencial.access_token = access_token
        self.db.flush()
        return credencial

    # ---------------- Unidade de trabalho --------
    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
