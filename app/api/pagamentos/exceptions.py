from app.core.exceptions import AppError


class SemItensValidosError(AppError):
    """Após descartar itens com preço ou quantidade inválidos, não sobrou nada para cobrar."""

    codigo = "no_valid_items"
    status_code = 400


class PagamentoNaoPermitidoError(AppError):
    """Pedido não está aguardando pagamento online (já pago, cancelado ou pagamento na entrega)."""

    codigo = "payment_not_allowed"
    status_code = 409
