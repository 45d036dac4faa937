"""
Erros de aplicação com código estável e status HTTP associado.

Os handlers em `app.core.exception_handlers` convertem qualquer `AppError`
em `{"status": "error", "code": ..., "message": ...}`.
"""
from __future__ import annotations

from typing import Any, Dict, Optional


class AppError(Exception):
    codigo: str = "internal_error"
    status_code: int = 500

    def __init__(self, mensagem: str, *, detalhes: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(mensagem)
        self.mensagem = mensagem
        self.detalhes = detalhes or {}

    def to_dict(self) -> Dict[str, Any]:
        return {"status": "error", "code": self.codigo, "message": self.mensagem}
