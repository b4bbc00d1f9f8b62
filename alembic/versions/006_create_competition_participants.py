"""006: create competition_participants table

No UNIQUE (competition_id, user_id): a user may join the same competition
more than once, each join adding a participant row.

Revision ID: 006
Revises: 005
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "006"
down_revision: Union[str, None] = "005"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE competition_participants (
            id                  BIGSERIAL           PRIMARY KEY,
            competition_id      BIGINT              NOT NULL REFERENCES competitions (id),
            user_id             VARCHAR(64)         NOT NULL,
            portfolio_value     DOUBLE PRECISION    NOT NULL,
            joined_at           TIMESTAMPTZ         NOT NULL DEFAULT NOW()
        );
    """)
    op.execute(
        "CREATE INDEX idx_participants_competition ON competition_participants (competition_id);"
    )
    op.execute("CREATE INDEX idx_participants_user ON competition_participants (user_id);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS competition_participants CASCADE;")
