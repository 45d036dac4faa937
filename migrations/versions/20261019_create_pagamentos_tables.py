"""Create empresas, credenciais_pagamento and pedidos tables

Revision ID: 20261019_create_pagamentos_tables
Revises: 
Create Date: 2026-10-19 00:00:00.000000
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261019_create_pagamentos_tables"
down_revision = None
branch_labels = None
depends_on = None

STATUS_PEDIDO = (
    "pending_payment", "pending", "confirmed", "preparing",
    "ready", "delivering", "delivered", "cancelled",
)


def _in(coluna: str, valores) -> str:
    return f"{coluna} IN ({', '.join(repr(v) for v in valores)})"


def upgrade() -> None:
    op.create_table(
        "empresas",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("nome", sa.String(100), nullable=False),
        sa.Column("cnpj", sa.String(20), nullable=True, unique=True),
        sa.Column("slug", sa.String(50), nullable=False, unique=True),
        sa.Column("telefone", sa.String(255), nullable=True),
        sa.Column("ativa", sa.Boolean, nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime, server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime, server_default=sa.text("now()"), nullable=False),
    )

    op.create_table(
        "usuarios",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("username", sa.String(100), nullable=False, unique=True),
        sa.Column("type_user", sa.String(20), nullable=False, server_default="admin"),
        sa.Column("created_at", sa.DateTime, server_default=sa.text("now()"), nullable=False),
    )

    op.create_table(
        "usuario_empresa",
        sa.Column("usuario_id", sa.Integer, sa.ForeignKey("usuarios.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("empresa_id", sa.Integer, sa.ForeignKey("empresas.id", ondelete="CASCADE"), primary_key=True),
    )

    # Uma credencial por empresa (upsert sobrescreve)
    op.create_table(
        "credenciais_pagamento",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("empresa_id", sa.Integer, sa.ForeignKey("empresas.id", ondelete="CASCADE"), nullable=False),
        sa.Column("public_key", sa.String(255), nullable=True),
        sa.Column("access_token", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime, server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime, server_default=sa.text("now()"), nullable=False),
        sa.UniqueConstraint("empresa_id", name="uq_credencial_pagamento_empresa"),
    )

    op.create_table(
        "pedidos",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("empresa_id", sa.Integer, sa.ForeignKey("empresas.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending_payment"),
        sa.Column("tipo_entrega", sa.String(20), nullable=False, server_default="DELIVERY"),
        sa.Column("forma_pagamento", sa.String(20), nullable=False, server_default="ONLINE"),
        sa.Column("cliente_nome", sa.String(120), nullable=True),
        sa.Column("cliente_email", sa.String(255), nullable=True),
        sa.Column("cliente_documento", sa.String(20), nullable=True),
        sa.Column("endereco_entrega", sa.String(500), nullable=True),
        sa.Column("observacoes", sa.String(500), nullable=True),
        sa.Column("subtotal", sa.Numeric(18, 2), nullable=False, server_default="0"),
        sa.Column("taxa_entrega", sa.Numeric(18, 2), nullable=False, server_default="0"),
        sa.Column("valor_total", sa.Numeric(18, 2), nullable=False),
        sa.Column("created_at", sa.DateTime, server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime, server_default=sa.text("now()"), nullable=False),
        sa.CheckConstraint(_in("status", STATUS_PEDIDO), name="pedido_status_enum"),
        sa.CheckConstraint(_in("tipo_entrega", ("DELIVERY", "RETIRADA")), name="tipo_entrega_enum"),
        sa.CheckConstraint(_in("forma_pagamento", ("ONLINE", "NA_ENTREGA")), name="forma_pagamento_enum"),
    )
    op.create_index("idx_pedidos_empresa_status", "pedidos", ["empresa_id", "status"])

    op.create_table(
        "pedidos_itens",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("pedido_id", sa.String(36), sa.ForeignKey("pedidos.id", ondelete="CASCADE"), nullable=False),
        sa.Column("produto_id", sa.String(64), nullable=True),
        sa.Column("nome", sa.String(255), nullable=False),
        sa.Column("quantidade", sa.Integer, nullable=False),
        sa.Column("preco_unitario", sa.Numeric(18, 2), nullable=False),
        sa.Column("subtotal", sa.Numeric(18, 2), nullable=False),
        sa.Column("observacao", sa.String(255), nullable=True),
    )
    op.create_index("idx_pedidos_itens_pedido", "pedidos_itens", ["pedido_id"])

    op.create_table(
        "pedidos_historico",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("pedido_id", sa.String(36), sa.ForeignKey("pedidos.id", ondelete="CASCADE"), nullable=False),
        sa.Column("status_anterior", sa.String(20), nullable=True),
        sa.Column("status_novo", sa.String(20), nullable=False),
        sa.Column("origem", sa.String(40), nullable=True),
        sa.Column("motivo", sa.Text, nullable=True),
        sa.Column("usuario_id", sa.Integer, sa.ForeignKey("usuarios.id", ondelete="SET NULL"), nullable=True),
        sa.Column("created_at", sa.DateTime, server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("idx_pedidos_historico_pedido", "pedidos_historico", ["pedido_id"])


def downgrade() -> None:
    op.drop_index("idx_pedidos_historico_pedido", table_name="pedidos_historico")
    op.drop_table("pedidos_historico")
    op.drop_index("idx_pedidos_itens_pedido", table_name="pedidos_itens")
    op.drop_table("pedidos_itens")
    op.drop_index("idx_pedidos_empresa_status", table_name="pedidos")
    op.drop_table("pedidos")
    op.drop_table("credenciais_pagamento")
    op.drop_table("usuario_empresa")
    op.drop_table("usuarios")
    op.drop_table("empresas")
