import os
import tempfile
from decimal import Decimal
from pathlib import Path

# Configuração antes de importar a aplicação (settings/engine são lidos no import)
_DB_PATH = Path(tempfile.gettempdir()) / "pedidos_pagamentos_test.db"
os.environ["DATABASE_URL"] = f"sqlite:///{_DB_PATH}"
os.environ.setdefault("SECRET_KEY", "segredo-de-teste")

import httpx
import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.api.empresas.models import CredencialPagamentoModel, EmpresaModel, UsuarioModel
from app.api.pagamentos.services.dependencies import get_politica_polling
from app.api.pagamentos.services.service_polling import PoliticaPolling
from app.api.pedidos.models.model_pedido import FormaPagamento, StatusPedido, TipoEntrega
from app.api.pedidos.repositories.repo_pedidos import PedidoRepository
from app.core.security import create_access_token
from app.database.db_connection import Base, SessionLocal, engine
from app.database.init_db import importar_models
from app.integrations.mercadopago.client import MercadoPagoClient
from app.integrations.mercadopago.dependencies import get_mercadopago_factory

MP_BASE_URL = "https://api.mercadopago.test"


class FakeMercadoPago:
    """Mercado Pago em memória via httpx.MockTransport.

    Rotas são registradas por (método, path); cada valor é uma tupla
    (status, json) ou uma função que recebe o httpx.Request.
    """

    def __init__(self):
        self.rotas = {}
        self.requests = []
        self.tokens = []

    def on(self, method, path, status_code=200, json=None, handler=None):
        self.rotas[(method.upper(), path)] = handler or (status_code, json)

    def chamadas(self, method, path):
        return [r for r in self.requests if r.method == method.upper() and r.url.path == path]

    def _handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        rota = self.rotas.get((request.method, request.url.path))
        if rota is None:
            return httpx.Response(404, json={"message": "resource not found", "status": 404})
        if callable(rota):
            return rota(request)
        status_code, body = rota
        return httpx.Response(status_code, json=body)

    def factory(self, access_token: str) -> MercadoPagoClient:
        self.tokens.append(access_token)
        return MercadoPagoClient(
            access_token=access_token,
            base_url=MP_BASE_URL,
            transport=httpx.MockTransport(self._handler),
        )


@pytest.fixture(autouse=True)
def banco():
    importar_models()
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db(banco):
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def mp():
    fake = FakeMercadoPago()
    app.dependency_overrides[get_mercadopago_factory] = lambda: fake.factory
    app.dependency_overrides[get_politica_polling] = lambda: PoliticaPolling(
        intervalo_segundos=0,
        max_tentativas=3,
    )
    yield fake
    app.dependency_overrides.clear()


@pytest.fixture
def client(mp):
    return TestClient(app)


@pytest.fixture
def empresa(db):
    empresa = EmpresaModel(nome="Pizzaria São João & Cia", slug="pizzaria-sao-joao")
    db.add(empresa)
    db.commit()
    db.refresh(empresa)
    return empresa


@pytest.fixture
def outra_empresa(db):
    empresa = EmpresaModel(nome="Hamburgueria Central", slug="hamburgueria-central")
    db.add(empresa)
    db.commit()
    db.refresh(empresa)
    return empresa


@pytest.fixture
def credencial(db, empresa):
    credencial = CredencialPagamentoModel(
        empresa_id=empresa.id,
        public_key="APP_USR-public-key",
        access_token="APP_USR-access-token",
    )
    db.add(credencial)
    db.commit()
    return credencial


@pytest.fixture
def usuario(db, empresa):
    usuario = UsuarioModel(username="dono.pizzaria")
    usuario.empresas.append(empresa)
    db.add(usuario)
    db.commit()
    db.refresh(usuario)
    return usuario


@pytest.fixture
def auth_headers(usuario):
    token = create_access_token({"sub": usuario.id})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def criar_pedido(db, empresa):
    """Cria um pedido direto no banco e devolve o id."""

    def _criar(
        status: StatusPedido = StatusPedido.AGUARDANDO_PAGAMENTO,
        forma_pagamento: FormaPagamento = FormaPagamento.ONLINE,
        empresa_id: int | None = None,
    ) -> str:
        repo = PedidoRepository(db)
        pedido = repo.criar_pedido(
            empresa_id=empresa_id or empresa.id,
            status=status,
            tipo_entrega=TipoEntrega.DELIVERY.value,
            forma_pagamento=forma_pagamento.value,
            itens=[
                {
                    "produto_id": "pz-01",
                    "nome": "Pizza Margherita",
                    "quantidade": 2,
                    "preco_unitario": Decimal("25.00"),
                    "subtotal": Decimal("50.00"),
                },
            ],
            subtotal=Decimal("50.00"),
            taxa_entrega=Decimal("5.00"),
            valor_total=Decimal("55.00"),
            cliente_nome="Maria",
            cliente_email="maria@example.com",
            cliente_documento="12345678909",
            endereco_entrega="Rua das Flores, 100",
        )
        repo.commit()
        return pedido.id

    return _criar


@pytest.fixture
def status_do_pedido(db):
    def _status(pedido_id: str) -> StatusPedido:
        return PedidoRepository(db).get_status(pedido_id)

    return _status


@pytest.fixture
def pagamento_mp():
    """Corpo de pagamento no formato da API do Mercado Pago."""

    def _pagamento(pedido_id: str, status: str = "approved", payment_id: int = 1001, **extra) -> dict:
        body = {
            "id": payment_id,
            "status": status,
            "status_detail": "accredited" if status == "approved" else "pending_contingency",
            "external_reference": pedido_id,
            "transaction_amount": 55.0,
            "date_created": "2026-10-19T12:00:00.000-03:00",
        }
        body.update(extra)
        return body

    return _pagamento
