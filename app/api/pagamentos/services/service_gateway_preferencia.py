from __future__ import annotations

from app.api.empresas.services.service_credenciais import CredencialResolvida
from app.api.pagamentos.services.service_preferencia import PreferenciaMontada
from app.integrations.mercadopago.client import ClienteMercadoPagoFactory, criar_cliente_mercadopago
from app.integrations.mercadopago.errors import MercadoPagoError, ProviderUnavailableError
from app.utils.logger import logger
from app.utils.prometheus_metrics import pagamentos_preferencias_total


class GatewayPreferencia:
    """
    Uma única chamada a `POST /checkout/preferences` com o token da empresa.

    Sem retry: cada chamada pode criar uma nova preferência no provedor. Quem
    tentar de novo deve reutilizar o mesmo pedido como `external_reference`.
    """

    def __init__(self, *, mercadopago_factory: ClienteMercadoPagoFactory = criar_cliente_mercadopago) -> None:
        self.mercadopago_factory = mercadopago_factory

    async def criar_preferencia(self, preferencia: PreferenciaMontada, credencial: CredencialResolvida) -> str:
        try:
            async with self.mercadopago_factory(credencial.access_token) as client:
                criada = await client.create_preference(preferencia.payload)
        except MercadoPagoError:
            pagamentos_preferencias_total.labels(resultado="erro").inc()
            raise

        if not criada.init_point:
            pagamentos_preferencias_total.labels(resultado="erro").inc()
            logger.error(
                f"[Pagamentos][Gateway] Preferência sem init_point pedido_id={preferencia.pedido_id} payload={criada.raw}"
            )
            raise ProviderUnavailableError(
                "Mercado Pago não retornou o link de pagamento.",
                payload=criada.raw,
            )

        pagamentos_preferencias_total.labels(resultado="sucesso").inc()
        logger.info(
            f"[Pagamentos][Gateway] Preferência criada pedido_id={preferencia.pedido_id} "
            f"preference_id={criada.id} empresa_id={credencial.empresa_id}"
        )
        return criada.init_point
