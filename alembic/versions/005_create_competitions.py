"""005: create competitions table

Revision ID: 005
Revises: 004
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE competitions (
            id                  BIGSERIAL           PRIMARY KEY,
            name                VARCHAR(128)        NOT NULL,
            description         TEXT,
            start_date          TIMESTAMPTZ         NOT NULL,
            end_date            TIMESTAMPTZ         NOT NULL,
            starting_balance    DOUBLE PRECISION    NOT NULL,
            created_at          TIMESTAMPTZ         NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_competitions_dates            CHECK (end_date >= start_date),
            CONSTRAINT ck_competitions_balance_gte_0    CHECK (starting_balance >= 0)
        );
    """)
    op.execute("COMMENT ON TABLE competitions IS 'Timed trading competitions, immutable after creation';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS competitions CASCADE;")
