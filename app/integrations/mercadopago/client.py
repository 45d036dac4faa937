from __future__ import annotations

import json
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

import httpx

from app.config.settings import MERCADOPAGO_BASE_URL, MERCADOPAGO_TIMEOUT_SECONDS
from app.utils.logger import logger
from .errors import ProviderRejectedError, ProviderUnavailableError


class StatusPagamentoMP(str, Enum):
    """Status conhecidos de pagamento do Mercado Pago.

    Qualquer valor fora desta lista vira `OUTRO` (tratado como não terminal),
    o valor original continua disponível em `MercadoPagoPayment.status_bruto`.
    """

    APPROVED = "approved"
    AUTHORIZED = "authorized"
    PENDING = "pending"
    IN_PROCESS = "in_process"
    IN_MEDIATION = "in_mediation"
    REJECTED = "rejected"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"
    CHARGED_BACK = "charged_back"
    OUTRO = "other"

    @classmethod
    def from_provider(cls, valor: Any) -> "StatusPagamentoMP":
        try:
            status = cls(str(valor))
        except ValueError:
            return cls.OUTRO
        return status

    @property
    def terminal(self) -> bool:
        return self in _STATUS_TERMINAIS


_STATUS_TERMINAIS = frozenset({
    StatusPagamentoMP.APPROVED,
    StatusPagamentoMP.REJECTED,
    StatusPagamentoMP.CANCELLED,
    StatusPagamentoMP.REFUNDED,
    StatusPagamentoMP.CHARGED_BACK,
})


@dataclass(slots=True)
class MercadoPagoPayment:
    """Representa uma resposta simplificada de pagamento do Mercado Pago."""

    id: str
    status: StatusPagamentoMP
    status_bruto: str
    status_detail: str | None
    external_reference: str | None
    transaction_amount: Decimal | None
    date_created: str | None
    raw: Dict[str, Any]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MercadoPagoPayment":
        status_bruto = data.get("status") or "pending"
        amount = data.get("transaction_amount")
        return cls(
            id=str(data.get("id")),
            status=StatusPagamentoMP.from_provider(status_bruto),
            status_bruto=str(status_bruto),
            status_detail=data.get("status_detail"),
            external_reference=data.get("external_reference"),
            transaction_amount=Decimal(str(amount)) if amount is not None else None,
            date_created=data.get("date_created"),
            raw=data,
        )


@dataclass(slots=True)
class MercadoPagoPreference:
    id: str
    init_point: str
    sandbox_init_point: str | None
    raw: Dict[str, Any]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MercadoPagoPreference":
        return cls(
            id=str(data.get("id")),
            init_point=data.get("init_point") or "",
            sandbox_init_point=data.get("sandbox_init_point"),
            raw=data,
        )


def extrair_motivo_erro(body: Dict[str, Any], fallback: str) -> str:
    """Primeira causa reportada pelo provedor, senão a mensagem, senão o fallback."""
    motivo = body.get("message") or fallback
    causas = body.get("cause")
    if isinstance(causas, list) and causas:
        primeira = causas[0] or {}
        if isinstance(primeira, dict):
            motivo = primeira.get("description") or primeira.get("code") or motivo
    return str(motivo)


class MercadoPagoClient:
    """Cliente HTTP simples para acessar a API do Mercado Pago.

    Uma instância por access token (credencial da empresa). Não faz retry:
    a política de nova tentativa fica com quem chama.
    """

    def __init__(
        self,
        *,
        access_token: str,
        base_url: str = MERCADOPAGO_BASE_URL,
        timeout: int = MERCADOPAGO_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not access_token:
            raise ValueError("access_token é obrigatório para o Mercado Pago")

        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={
                "Authorization": f"Bearer {access_token}",
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "MercadoPagoClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    # ---------------- Preferências (Checkout Pro) ----------------
    async def create_preference(self, payload: Dict[str, Any]) -> MercadoPagoPreference:
        resp = await self._request("POST", "/checkout/preferences", json=payload)
        if not resp.is_success:
            self._raise_for_error(resp, contexto="create_preference")
        return MercadoPagoPreference.from_dict(self._json(resp))

    # ---------------- Pagamentos ----------------
    async def search_payments(self, *, external_reference: str) -> List[MercadoPagoPayment]:
        """Pagamentos do pedido, do mais recente para o mais antigo."""
        resp = await self._request(
            "GET",
            "/v1/payments/search",
            params={
                "sort": "date_created",
                "criteria": "desc",
                "external_reference": external_reference,
            },
        )
        if not resp.is_success:
            logger.error(
                f"[MercadoPago] Falha na busca de pagamentos external_reference={external_reference} "
                f"http={resp.status_code} body={resp.text}"
            )
            raise ProviderUnavailableError(
                "Falha ao buscar pagamento no Mercado Pago.",
                http_status=resp.status_code,
                payload=resp.text,
            )
        results = self._json(resp).get("results") or []
        return [MercadoPagoPayment.from_dict(item) for item in results]

    async def create_payment(
        self,
        payload: Dict[str, Any],
        *,
        idempotency_key: Optional[str] = None,
    ) -> MercadoPagoPayment:
        """Com `idempotency_key`, reenvios da mesma cobrança devolvem o mesmo pagamento."""
        headers = {"X-Idempotency-Key": idempotency_key} if idempotency_key else None
        resp = await self._request("POST", "/v1/payments", json=payload, headers=headers)
        if not resp.is_success:
            # 4xx aqui costuma ser recusa de cartão (resultado de negócio, não falha do sistema)
            self._raise_for_error(resp, contexto="create_payment", erro_sistema=resp.status_code >= 500)
        return MercadoPagoPayment.from_dict(self._json(resp))

    async def get_payment(self, payment_id: str) -> MercadoPagoPayment:
        resp = await self._request("GET", f"/v1/payments/{payment_id}")
        if not resp.is_success:
            self._raise_for_error(resp, contexto="get_payment")
        return MercadoPagoPayment.from_dict(self._json(resp))

    # ---------------- Conta ----------------
    async def verify_credentials(self) -> bool:
        """True se o access token é aceito pelo provedor."""
        resp = await self._request("GET", "/users/me")
        return resp.is_success

    # ---------------- Helpers ----------------
    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            return await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"[MercadoPago] Erro de transporte {method} {url}: {e}")
            raise ProviderUnavailableError(f"Mercado Pago indisponível: {e}") from e

    def _json(self, resp: httpx.Response) -> Dict[str, Any]:
        try:
            data = resp.json()
        except json.JSONDecodeError as e:
            raise ProviderUnavailableError(
                "Resposta inválida do Mercado Pago.",
                http_status=resp.status_code,
                payload=resp.text,
            ) from e
        if not isinstance(data, dict):
            raise ProviderUnavailableError(
                "Resposta inesperada do Mercado Pago.",
                http_status=resp.status_code,
                payload=data,
            )
        return data

    def _raise_for_error(self, resp: httpx.Response, *, contexto: str, erro_sistema: bool = True) -> None:
        try:
            body = resp.json()
        except json.JSONDecodeError:
            logger.error(
                f"[MercadoPago] {contexto}: resposta de erro não-JSON http={resp.status_code} body={resp.text}"
            )
            raise ProviderUnavailableError(
                f"Mercado Pago Error: {resp.reason_phrase}",
                http_status=resp.status_code,
                payload=resp.text,
            )

        if not isinstance(body, dict):
            raise ProviderUnavailableError(
                f"Mercado Pago Error: {resp.reason_phrase}",
                http_status=resp.status_code,
                payload=body,
            )

        if erro_sistema:
            logger.error(f"[MercadoPago] {contexto}: erro http={resp.status_code} payload={body}")
        else:
            logger.info(f"[MercadoPago] {contexto}: recusado http={resp.status_code} status_detail={body.get('status_detail')}")
        raise ProviderRejectedError(
            extrair_motivo_erro(body, resp.reason_phrase),
            http_status=resp.status_code,
            payload=body,
        )


ClienteMercadoPagoFactory = Callable[[str], MercadoPagoClient]


def criar_cliente_mercadopago(access_token: str) -> MercadoPagoClient:
    return MercadoPagoClient(access_token=access_token)
