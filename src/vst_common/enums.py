"""Global enums — must match DB CHECK constraints exactly.

See alembic/versions/002_create_users.py and 004_create_transactions.py.
"""

from enum import Enum


class UserRole(str, Enum):
    USER = "USER"
    ADMIN = "ADMIN"


class TradeSide(str, Enum):
    BUY = "BUY"
    SELL = "SELL"
