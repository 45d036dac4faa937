from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from zoneinfo import ZoneInfo

CENTAVOS = Decimal("0.01")


def now_trimmed():
    """Retorna datetime atual em timezone de São Paulo, sem microsegundos"""
    tz_sp = ZoneInfo('America/Sao_Paulo')
    return datetime.now(tz_sp).replace(microsecond=0)


def dinheiro(valor) -> Decimal:
    """Normaliza um valor monetário para Decimal com 2 casas (arredondamento comercial)."""
    if isinstance(valor, Decimal):
        dec = valor
    else:
        dec = Decimal(str(valor))
    return dec.quantize(CENTAVOS, rounding=ROUND_HALF_UP)
