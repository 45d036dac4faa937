from app.integrations.mercadopago.client import ClienteMercadoPagoFactory, criar_cliente_mercadopago


def get_mercadopago_factory() -> ClienteMercadoPagoFactory:
    """Fábrica de clientes por access token (sobrescrita nos testes)."""
    return criar_cliente_mercadopago
