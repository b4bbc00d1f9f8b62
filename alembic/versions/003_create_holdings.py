"""003: create holdings table

Revision ID: 003
Revises: 002
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE holdings (
            id              BIGSERIAL           PRIMARY KEY,
            user_id         VARCHAR(64)         NOT NULL,
            stock_symbol    VARCHAR(16)         NOT NULL,
            shares_owned    INT                 NOT NULL,
            average_price   DOUBLE PRECISION    NOT NULL,
            version         BIGINT              NOT NULL DEFAULT 0,
            created_at      TIMESTAMPTZ         NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ         NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_holdings_user_symbol      UNIQUE (user_id, stock_symbol),
            CONSTRAINT ck_holdings_shares_gt_0      CHECK (shares_owned > 0),
            CONSTRAINT ck_holdings_avg_price_gte_0  CHECK (average_price >= 0)
        );
    """)
    op.execute("CREATE INDEX idx_holdings_user ON holdings (user_id);")
    op.execute("""
        CREATE TRIGGER trg_holdings_updated_at
            BEFORE UPDATE ON holdings
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute(
        "COMMENT ON TABLE holdings IS "
        "'One row per (user, symbol); closed positions are deleted, never zeroed';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS holdings CASCADE;")
