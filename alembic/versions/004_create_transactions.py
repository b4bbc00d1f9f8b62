"""004: create transactions table (append-only trade ledger)

Revision ID: 004
Revises: 003
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE transactions (
            id              BIGSERIAL           PRIMARY KEY,
            user_id         VARCHAR(64)         NOT NULL,
            stock_symbol    VARCHAR(16)         NOT NULL,
            side            VARCHAR(4)          NOT NULL,
            quantity        INT                 NOT NULL,
            price           DOUBLE PRECISION    NOT NULL,
            executed_at     TIMESTAMPTZ         NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_transactions_side         CHECK (side IN ('BUY', 'SELL')),
            CONSTRAINT ck_transactions_quantity_gt_0 CHECK (quantity > 0),
            CONSTRAINT ck_transactions_price_gte_0  CHECK (price >= 0)
        );
    """)
    op.execute(
        "CREATE INDEX idx_transactions_user_id ON transactions (user_id, id DESC);"
    )
    op.execute(
        "CREATE INDEX idx_transactions_user_symbol ON transactions (user_id, stock_symbol, id DESC);"
    )
    op.execute("""
        CREATE TRIGGER trg_transactions_append_only
            BEFORE UPDATE OR DELETE ON transactions
            FOR EACH ROW EXECUTE FUNCTION fn_reject_mutation();
    """)
    op.execute("COMMENT ON TABLE transactions IS 'Trade history: append-only, never updated or deleted';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS transactions CASCADE;")
