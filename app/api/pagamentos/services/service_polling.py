from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional

from app.api.pagamentos.services.service_confirmacao import ResultadoConfirmacao
from app.config.settings import POLLING_INTERVALO_SEGUNDOS, POLLING_MAX_TENTATIVAS
from app.integrations.mercadopago.errors import ProviderUnavailableError
from app.utils.logger import logger

Confirmador = Callable[[str], Awaitable[ResultadoConfirmacao]]
Dormir = Callable[[float], Awaitable[None]]


def status_terminal(resultado: ResultadoConfirmacao) -> bool:
    """Aprovado, recusado, cancelado, estornado... `not_found` e status desconhecidos seguem em espera."""
    return resultado.terminal


@dataclass(frozen=True)
class PoliticaPolling:
    intervalo_segundos: float = POLLING_INTERVALO_SEGUNDOS
    max_tentativas: int = POLLING_MAX_TENTATIVAS
    terminal: Callable[[ResultadoConfirmacao], bool] = field(default=status_terminal)

    def __post_init__(self) -> None:
        if self.max_tentativas < 1:
            raise ValueError("max_tentativas deve ser >= 1")
        if self.intervalo_segundos < 0:
            raise ValueError("intervalo_segundos não pode ser negativo")


@dataclass(frozen=True, slots=True)
class ResultadoPolling:
    resultado: ResultadoConfirmacao
    tentativas: int
    esgotado: bool


class ConfirmacaoPoller:
    """
    Repete a confirmação até um status terminal ou até esgotar as tentativas.

    Provedor indisponível conta como tentativa; se a última também falhar o
    erro é propagado. Demais erros (pedido inexistente, credencial ausente)
    interrompem na hora.
    """

    def __init__(
        self,
        confirmar: Confirmador,
        politica: Optional[PoliticaPolling] = None,
        *,
        sleep: Dormir = asyncio.sleep,
    ) -> None:
        self.confirmar = confirmar
        self.politica = politica or PoliticaPolling()
        self.sleep = sleep

    async def aguardar(self, pedido_id: str) -> ResultadoPolling:
        ultimo: Optional[ResultadoConfirmacao] = None

        for tentativa in range(1, self.politica.max_tentativas + 1):
            try:
                ultimo = await self.confirmar(pedido_id)
            except ProviderUnavailableError as e:
                logger.warning(
                    f"[Pagamentos][Polling] Tentativa {tentativa}/{self.politica.max_tentativas} falhou "
                    f"pedido_id={pedido_id}: {e}"
                )
                if tentativa == self.politica.max_tentativas:
                    raise
            else:
                if self.politica.terminal(ultimo):
                    return ResultadoPolling(resultado=ultimo, tentativas=tentativa, esgotado=False)

            if tentativa < self.politica.max_tentativas:
                await self.sleep(self.politica.intervalo_segundos)

        logger.info(
            f"[Pagamentos][Polling] Tentativas esgotadas pedido_id={pedido_id} "
            f"ultimo_status={ultimo.status if ultimo else None}"
        )
        return ResultadoPolling(resultado=ultimo, tentativas=self.politica.max_tentativas, esgotado=True)
