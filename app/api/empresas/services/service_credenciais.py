from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.api.empresas.exceptions import (
    CredencialIndisponivelError,
    CredencialNaoConfiguradaError,
    EmpresaNaoEncontradaError,
)
from app.api.empresas.repositories.empresa_repo import EmpresaRepository
from app.api.empresas.repositories.repo_credenciais import CredencialPagamentoRepository
from app.api.empresas.schemas.schema_credencial_pagamento import (
    CredencialStatusResponse,
    SalvarCredencialRequest,
    SalvarCredencialResponse,
)
from app.integrations.mercadopago.client import ClienteMercadoPagoFactory, criar_cliente_mercadopago
from app.integrations.mercadopago.errors import MercadoPagoError
from app.utils.logger import logger


@dataclass(frozen=True, slots=True)
class CredencialResolvida:
    empresa_id: int
    public_key: str | None
    access_token: str

    def __repr__(self) -> str:
        return f"CredencialResolvida(empresa_id={self.empresa_id}, public_key={self.public_key!r})"


class ResolvedorCredenciais:
    """Resolve a credencial ativa da empresa. Somente leitura."""

    def __init__(self, db: Session) -> None:
        self.repo = CredencialPagamentoRepository(db)

    def resolver(self, empresa_id: int) -> CredencialResolvida:
        try:
            credencial = self.repo.get_by_empresa_id(empresa_id)
        except SQLAlchemyError as e:
            logger.error(f"[Credenciais] Falha ao ler credencial empresa_id={empresa_id}: {e}")
            raise CredencialIndisponivelError(
                "Não foi possível consultar a credencial de pagamento. Tente novamente."
            ) from e

        if credencial is None or not (credencial.access_token or "").strip():
            logger.warning(f"[Credenciais] Empresa sem credencial de pagamento empresa_id={empresa_id}")
            raise CredencialNaoConfiguradaError(
                "Mercado Pago não está configurado para esta loja."
            )

        return CredencialResolvida(
            empresa_id=empresa_id,
            public_key=credencial.public_key,
            access_token=credencial.access_token.strip(),
        )


class CredencialPagamentoService:
    """Cadastro (upsert) e status das credenciais de pagamento da empresa."""

    def __init__(
        self,
        db: Session,
        *,
        mercadopago_factory: ClienteMercadoPagoFactory = criar_cliente_mercadopago,
    ) -> None:
        self.repo = CredencialPagamentoRepository(db)
        self.empresa_repo = EmpresaRepository(db)
        self.mercadopago_factory = mercadopago_factory

    def status(self, empresa_id: int) -> CredencialStatusResponse:
        self._get_empresa_or_404(empresa_id)
        credencial = self.repo.get_by_empresa_id(empresa_id)
        configured = bool(credencial and (credencial.access_token or "").strip())
        return CredencialStatusResponse(
            empresa_id=empresa_id,
            configured=configured,
            public_key=credencial.public_key if credencial else None,
        )

    async def salvar(self, empresa_id: int, payload: SalvarCredencialRequest) -> SalvarCredencialResponse:
        self._get_empresa_or_404(empresa_id)

        try:
            self.repo.upsert(
                empresa_id=empresa_id,
                public_key=payload.public_key,
                access_token=payload.access_token,
            )
            self.repo.commit()
        except IntegrityError:
            # Outra requisição inseriu a credencial primeiro: a nossa gravação vira update.
            self.repo.rollback()
            self.repo.upsert(
                empresa_id=empresa_id,
                public_key=payload.public_key,
                access_token=payload.access_token,
            )
            self.repo.commit()

        logger.info(f"[Credenciais] Credencial salva empresa_id={empresa_id}")

        verified = await self._verificar_token(empresa_id, payload.access_token)
        return SalvarCredencialResponse(
            message="Credenciais salvas com sucesso.",
            verified=verified,
        )

    async def _verificar_token(self, empresa_id: int, access_token: str) -> bool:
        try:
            async with self.mercadopago_factory(access_token) as client:
                verified = await client.verify_credentials()
        except MercadoPagoError as e:
            logger.warning(f"[Credenciais] Não foi possível verificar o token empresa_id={empresa_id}: {e}")
            return False

        if not verified:
            logger.warning(f"[Credenciais] Access token recusado pelo Mercado Pago empresa_id={empresa_id}")
        return verified

    def _get_empresa_or_404(self, empresa_id: int):
        empresa = self.empresa_repo.get_empresa_by_id(empresa_id)
        if not empresa:
            raise EmpresaNaoEncontradaError("Empresa não encontrada")
        return empresa
