# app/api/empresas/repositories/empresa_repo.py
from typing import Optional

from sqlalchemy.orm import Session

from app.api.empresas.models.empresa_model import EmpresaModel


class EmpresaRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_empresa_by_id(self, empresa_id: int) -> Optional[EmpresaModel]:
        return self.db.get(EmpresaModel, empresa_id)
