"""007: seed a demo competition for local development

Revision ID: 007
Revises: 006
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "007"
down_revision: Union[str, None] = "006"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        INSERT INTO competitions (name, description, start_date, end_date, starting_balance)
        VALUES (
            'Demo Cup',
            'Open practice competition for new traders',
            NOW(),
            NOW() + INTERVAL '30 days',
            10000
        );
    """)


def downgrade() -> None:
    op.execute("""
        DELETE FROM competition_participants
        WHERE competition_id IN (SELECT id FROM competitions WHERE name = 'Demo Cup');
    """)
    op.execute("DELETE FROM competitions WHERE name = 'Demo Cup';")
