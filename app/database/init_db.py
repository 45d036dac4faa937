import logging

from sqlalchemy import inspect

from .db_connection import engine, Base

logger = logging.getLogger(__name__)


def importar_models():
    """Importa os models para que fiquem registrados no Base antes do create_all."""
    from app.api.empresas.models import (  # noqa: F401
        EmpresaModel,
        UsuarioModel,
        CredencialPagamentoModel,
    )
    from app.api.pedidos.models import (  # noqa: F401
        PedidoModel,
        PedidoItemModel,
        PedidoStatusHistoricoModel,
    )


def criar_tabelas():
    """Cria as tabelas que ainda não existem (checkfirst, não altera as existentes)."""
    importar_models()

    existentes = set(inspect(engine).get_table_names())
    todas = list(Base.metadata.tables.values())
    novas = [t.name for t in todas if t.name not in existentes]

    logger.info(f"📊 Total de tabelas registradas: {len(todas)}")
    if novas:
        logger.info(f"📋 Criando tabelas: {', '.join(novas)}")

    Base.metadata.create_all(bind=engine, checkfirst=True)


def inicializar_banco():
    logger.info("🚀 Iniciando processo de inicialização do banco de dados...")
    try:
        criar_tabelas()
    except Exception as e:
        logger.error(f"❌ Erro ao inicializar banco: {e}", exc_info=True)
        raise
    logger.info("✅ Banco de dados inicializado.")
