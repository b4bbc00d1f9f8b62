"""Unit tests for the pure holding arithmetic in vst_portfolio.domain.trade_engine."""

import pytest

from src.vst_common.enums import TradeSide
from src.vst_common.errors import InsufficientSharesError, InvalidInputError, NoSuchHoldingError
from src.vst_portfolio.domain.models import Holding
from src.vst_portfolio.domain.trade_engine import (
    MAX_SHARES,
    apply_buy,
    apply_sell,
    build_transaction,
)


def _holding(shares: int = 10, avg: float = 100.0, version: int = 3) -> Holding:
    return Holding(
        id=7,
        user_id="user-1",
        stock_symbol="AAPL",
        shares_owned=shares,
        average_price=avg,
        version=version,
    )


class TestApplyBuy:
    def test_first_buy_creates_new_position(self) -> None:
        result = apply_buy(None, "user-1", "AAPL", 10, 100.0)
        assert result.id is None
        assert result.shares_owned == 10
        assert result.average_price == 100.0
        assert result.user_id == "user-1"
        assert result.stock_symbol == "AAPL"

    def test_ten_at_100_then_ten_at_200_averages_150(self) -> None:
        first = apply_buy(None, "user-1", "AAPL", 10, 100.0)
        second = apply_buy(first, "user-1", "AAPL", 10, 200.0)
        assert second.shares_owned == 20
        assert second.average_price == 150.0

    @pytest.mark.parametrize(
        ("shares", "avg", "qty", "price"),
        [(3, 10.0, 7, 20.0), (1, 0.0, 1, 5.5), (100, 12.34, 1, 0.0), (5, 99.99, 13, 101.01)],
    )
    def test_weighted_average_formula(
        self, shares: int, avg: float, qty: int, price: float
    ) -> None:
        result = apply_buy(_holding(shares, avg), "user-1", "AAPL", qty, price)
        assert result.shares_owned == shares + qty
        assert result.average_price == (shares * avg + qty * price) / (shares + qty)

    def test_keeps_id_and_version_for_compare_and_swap(self) -> None:
        result = apply_buy(_holding(version=9), "user-1", "AAPL", 1, 1.0)
        assert result.id == 7
        assert result.version == 9

    def test_does_not_mutate_existing(self) -> None:
        existing = _holding(10, 100.0)
        apply_buy(existing, "user-1", "AAPL", 10, 200.0)
        assert existing.shares_owned == 10
        assert existing.average_price == 100.0

    def test_zero_price_buy_dilutes_average(self) -> None:
        result = apply_buy(_holding(10, 100.0), "user-1", "AAPL", 10, 0.0)
        assert result.average_price == 50.0

    def test_overflowing_cost_basis_is_rejected(self) -> None:
        with pytest.raises(InvalidInputError) as exc_info:
            apply_buy(None, "user-1", "AAPL", 10, 1e308)
        assert exc_info.value.http_status == 422

    def test_overflow_against_existing_holding_is_rejected(self) -> None:
        with pytest.raises(InvalidInputError):
            apply_buy(_holding(10, 1e308), "user-1", "AAPL", 10, 1e308)

    def test_share_count_beyond_column_range_is_rejected(self) -> None:
        with pytest.raises(InvalidInputError):
            apply_buy(_holding(MAX_SHARES - 1, 1.0), "user-1", "AAPL", 2, 1.0)

    def test_share_count_at_column_limit_is_accepted(self) -> None:
        result = apply_buy(_holding(MAX_SHARES - 1, 1.0), "user-1", "AAPL", 1, 1.0)
        assert result.shares_owned == MAX_SHARES


class TestApplySell:
    def test_partial_sell_keeps_average(self) -> None:
        result = apply_sell(_holding(10, 123.45), "AAPL", 4)
        assert result.shares_owned == 6
        assert result.average_price == 123.45
        assert result.id == 7
        assert result.version == 3

    def test_full_sell_yields_zero_shares_at_old_average(self) -> None:
        result = apply_sell(_holding(10, 150.0), "AAPL", 10)
        assert result.shares_owned == 0
        assert result.average_price == 150.0

    def test_no_holding_raises(self) -> None:
        with pytest.raises(NoSuchHoldingError) as exc_info:
            apply_sell(None, "TSLA", 1)
        assert "TSLA" in exc_info.value.message

    def test_oversell_raises_with_owned_and_requested(self) -> None:
        existing = _holding(5, 10.0)
        with pytest.raises(InsufficientSharesError) as exc_info:
            apply_sell(existing, "AAPL", 6)
        assert exc_info.value.owned == 5
        assert exc_info.value.requested == 6
        assert existing.shares_owned == 5

    def test_fresh_cost_basis_after_full_liquidation(self) -> None:
        closed = apply_sell(_holding(10, 100.0), "AAPL", 10)
        assert closed.shares_owned == 0
        # The closed row is deleted, so the next buy starts from nothing
        reopened = apply_buy(None, "user-1", "AAPL", 5, 40.0)
        assert reopened.average_price == 40.0
        assert reopened.shares_owned == 5


class TestBuildTransaction:
    def test_records_request_exactly(self) -> None:
        tx = build_transaction("user-1", "AAPL", TradeSide.SELL, 3, 12.5)
        assert tx.side == "SELL"
        assert tx.quantity == 3
        assert tx.price == 12.5
        assert tx.id is None

    def test_is_immutable(self) -> None:
        tx = build_transaction("user-1", "AAPL", TradeSide.BUY, 3, 12.5)
        with pytest.raises(AttributeError):
            tx.quantity = 4  # type: ignore[misc]
