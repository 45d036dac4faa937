"""
Models do bounded context de Empresas.
"""

from .empresa_model import EmpresaModel, usuario_empresa
from .usuario_model import UsuarioModel
from .model_credencial_pagamento import CredencialPagamentoModel

__all__ = [
    "EmpresaModel",
    "UsuarioModel",
    "CredencialPagamentoModel",
    "usuario_empresa",
]
