from app.core.exceptions import AppError


class PedidoNaoEncontradoError(AppError):
    codigo = "order_not_found"
    status_code = 404


class TransicaoStatusInvalidaError(AppError):
    codigo = "invalid_status_transition"
    status_code = 409


class PedidoInvalidoError(AppError):
    codigo = "invalid_order"
    status_code = 400
