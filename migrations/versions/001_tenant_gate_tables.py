"""Create accounts, account_members, custom_domains and api_keys

Revision ID: 001_tenant_gate_tables
Revises:
Create Date: 2026-10-18

Note: SQLite (testes/dev) usa SQLModel create_all; este schema é o de
produção no Postgres. Cada tabela com tenant tem duas policies de RLS:
tenant_isolation (lê app.current_account) e service_role_full_access para
o role pawmi_service. O gate faz lookups antes de existir tenant (domínio,
membership, API key), então o usuário do banco do gate precisa ser membro
de pawmi_service (GRANT pawmi_service TO <usuario>).
"""

from alembic import op
import sqlalchemy as sa

revision = "001_tenant_gate_tables"
down_revision = None
branch_labels = None
depends_on = None

SERVICE_ROLE = "pawmi_service"
TENANT_TABLES = ("account_members", "custom_domains", "api_keys")


def _is_postgres() -> bool:
    return op.get_bind().dialect.name == "postgresql"


def upgrade() -> None:
    op.create_table(
        "accounts",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("slug", sa.String(length=255), nullable=True, unique=True),
        sa.Column(
            "plan", sa.String(length=64), nullable=False, server_default="standard"
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )

    op.create_table(
        "account_members",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column(
            "account_id",
            sa.String(length=36),
            sa.ForeignKey("accounts.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("user_id", sa.String(length=36), nullable=False, index=True),
        sa.Column("role", sa.String(length=20), nullable=False, server_default="member"),
        sa.Column(
            "status",
            sa.String(length=20),
            nullable=False,
            server_default="accepted",
            index=True,
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.CheckConstraint(
            "role IN ('owner', 'admin', 'member')", name="ck_account_members_role"
        ),
        sa.CheckConstraint(
            "status IN ('pending', 'accepted', 'revoked')",
            name="ck_account_members_status",
        ),
    )
    op.create_index(
        "idx_account_members_user_status_created",
        "account_members",
        ["user_id", "status", "created_at"],
    )

    op.create_table(
        "custom_domains",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column(
            "account_id",
            sa.String(length=36),
            sa.ForeignKey("accounts.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("domain", sa.String(length=255), nullable=False),
        sa.Column("slug", sa.String(length=255), nullable=False),
        sa.Column(
            "status",
            sa.String(length=20),
            nullable=False,
            server_default="pending",
            index=True,
        ),
        sa.Column("verified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.UniqueConstraint("domain", name="uq_custom_domains_domain"),
        sa.CheckConstraint("domain = lower(domain)", name="ck_custom_domains_lower"),
        sa.CheckConstraint(
            "status IN ('pending', 'active', 'error', 'disabled')",
            name="ck_custom_domains_status",
        ),
    )

    op.create_table(
        "api_keys",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column(
            "account_id",
            sa.String(length=36),
            sa.ForeignKey("accounts.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("key_prefix", sa.String(length=32), nullable=False, index=True),
        sa.Column("key_hash", sa.String(length=64), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="active"),
        sa.Column("created_by", sa.String(length=36), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column("last_used_at", sa.DateTime(timezone=True), nullable=True),
    )

    if _is_postgres():
        op.execute(
            f"""
            DO $$
            BEGIN
                IF NOT EXISTS (SELECT 1 FROM pg_roles WHERE rolname = '{SERVICE_ROLE}') THEN
                    CREATE ROLE {SERVICE_ROLE} NOLOGIN;
                END IF;
            END
            $$
            """
        )
        for table in TENANT_TABLES:
            op.execute(f"ALTER TABLE {table} ENABLE ROW LEVEL SECURITY")
            op.execute(
                f"""
                CREATE POLICY tenant_isolation ON {table}
                USING (account_id = current_setting('app.current_account', true))
                """
            )
            op.execute(
                f"""
                CREATE POLICY service_role_full_access ON {table}
                FOR ALL TO {SERVICE_ROLE}
                USING (true) WITH CHECK (true)
                """
            )
            op.execute(
                f"GRANT SELECT, INSERT, UPDATE, DELETE ON {table} TO {SERVICE_ROLE}"
            )
        op.execute(f"GRANT SELECT ON accounts TO {SERVICE_ROLE}")


def downgrade() -> None:
    op.drop_table("api_keys")
    op.drop_table("custom_domains")
    op.drop_index("idx_account_members_user_status_created", table_name="account_members")
    op.drop_table("account_members")
    op.drop_table("accounts")
