from __future__ import annotations

from typing import Any, Dict, Optional

from app.core.exceptions import AppError


class MercadoPagoError(AppError):
    codigo = "provider_error"
    status_code = 500

    def __init__(
        self,
        mensagem: str,
        *,
        http_status: Optional[int] = None,
        payload: Any = None,
    ) -> None:
        detalhes: Dict[str, Any] = {"http_status": http_status, "payload": payload}
        super().__init__(mensagem, detalhes=detalhes)
        self.http_status = http_status
        self.payload = payload


class ProviderUnavailableError(MercadoPagoError):
    """Provedor inacessível ou resposta sem corpo de erro estruturado."""


class ProviderRejectedError(MercadoPagoError):
    """Provedor respondeu com erro estruturado; `reason` é a primeira causa reportada."""

    def __init__(
        self,
        reason: str,
        *,
        http_status: Optional[int] = None,
        payload: Any = None,
    ) -> None:
        super().__init__(f"Mercado Pago Error: {reason}", http_status=http_status, payload=payload)
        self.reason = reason
