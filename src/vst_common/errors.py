"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth/User
  5xxx: Holding / trade
  6xxx: Competition
  9xxx: System
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Auth/User ---

class UsernameExistsError(AppError):
    def __init__(self) -> None:
        super().__init__(1001, "Username already exists", 409)


class EmailExistsError(AppError):
    def __init__(self) -> None:
        super().__init__(1002, "Email already exists", 409)


class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Invalid email or password", 401)


class AccountDisabledError(AppError):
    def __init__(self) -> None:
        super().__init__(1004, "Account is disabled", 403)


class InvalidRefreshTokenError(AppError):
    def __init__(self) -> None:
        super().__init__(1005, "Refresh token is invalid or expired", 401)


class UnknownUserError(AppError):
    """Authenticated principal does not map to a user record."""

    def __init__(self) -> None:
        super().__init__(1006, "Unknown user for the supplied credentials", 401)


class AdminRequiredError(AppError):
    def __init__(self) -> None:
        super().__init__(1007, "Administrator role required", 403)


# --- 5xxx: Holding / trade ---

class InsufficientSharesError(AppError):
    def __init__(self, symbol: str, owned: int, requested: int) -> None:
        self.owned = owned
        self.requested = requested
        super().__init__(
            5001,
            f"Not enough shares of {symbol} to sell. Owned: {owned}, Tried to sell: {requested}",
            422,
        )


class NoSuchHoldingError(AppError):
    def __init__(self, symbol: str) -> None:
        super().__init__(5002, f"You don't own this stock: {symbol}", 404)


class HoldingConflictError(AppError):
    """Holding row changed underneath a trade; raised by the store on a lost CAS."""

    def __init__(self, symbol: str) -> None:
        super().__init__(
            5003,
            f"Concurrent update on holding {symbol}, please retry",
            409,
        )


# --- 6xxx: Competition ---

class NoSuchCompetitionError(AppError):
    def __init__(self, competition_id: int) -> None:
        super().__init__(6001, f"Competition not found with id: {competition_id}", 404)


# --- 9xxx: System ---

class RateLimitError(AppError):
    def __init__(self) -> None:
        super().__init__(9001, "Rate limit exceeded", 429)


class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)


class InvalidInputError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(9003, f"Invalid input: {detail}", 422)


class StorageError(AppError):
    def __init__(self, detail: str = "Storage temporarily unavailable") -> None:
        super().__init__(9004, detail, 503)
