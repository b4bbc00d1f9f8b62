"""Router-level tests: envelope, status codes and error mapping.

Auth and the DB session are overridden; services run against mocked stores.
"""

import uuid
from collections.abc import AsyncGenerator
from dataclasses import replace
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from httpx import AsyncClient
from sqlalchemy.exc import OperationalError

from src.main import app
from src.vst_common.database import get_db_session
from src.vst_competition.application.service import CompetitionApplicationService
from src.vst_competition.domain.models import Competition, Participant
from src.vst_competition.infrastructure.persistence import CompetitionRepository
from src.vst_gateway.auth.dependencies import get_current_user
from src.vst_gateway.user.db_models import UserModel
from src.vst_portfolio.application.service import TradeApplicationService
from src.vst_portfolio.domain.models import Holding


def _make_user(role: str = "USER") -> UserModel:
    user = UserModel()
    user.id = uuid.uuid4()
    user.username = "alice"
    user.email = "alice@example.com"
    user.role = role
    user.is_active = True
    return user


@pytest.fixture
def db() -> MagicMock:
    session = MagicMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    return session


@pytest.fixture
def authed(db: MagicMock) -> UserModel:
    user = _make_user()

    async def _session() -> AsyncGenerator[MagicMock, None]:
        yield db

    app.dependency_overrides[get_db_session] = _session
    app.dependency_overrides[get_current_user] = lambda: user
    return user


async def _echo(db: object, holding: Holding) -> Holding:
    return replace(holding, id=holding.id or 1, version=holding.version + 1)


class TestPortfolioRoutes:
    async def test_buy_returns_holding_envelope(self, client: AsyncClient, authed: UserModel) -> None:
        holdings = AsyncMock()
        holdings.find.return_value = None
        holdings.upsert.side_effect = _echo
        svc = TradeApplicationService(holdings=holdings, ledger=AsyncMock(), retry_backoff_ms=0)

        with patch("src.vst_portfolio.api.router._service", svc):
            resp = await client.post(
                "/api/v1/portfolio/buy",
                json={"stockSymbol": "aapl", "quantity": 10, "price": 100.0},
            )

        assert resp.status_code == 200
        body = resp.json()
        assert body["code"] == 0
        assert body["data"] == {
            "id": 1, "stockSymbol": "AAPL", "sharesOwned": 10, "averagePrice": 100.0,
        }
        assert body["request_id"] == resp.headers["X-Request-ID"]
        assert holdings.find.call_args.args[1] == str(authed.id)

    async def test_sell_unowned_is_404(self, client: AsyncClient, authed: UserModel) -> None:
        holdings = AsyncMock()
        holdings.find.return_value = None
        svc = TradeApplicationService(holdings=holdings, ledger=AsyncMock(), retry_backoff_ms=0)

        with patch("src.vst_portfolio.api.router._service", svc):
            resp = await client.post(
                "/api/v1/portfolio/sell",
                json={"stockSymbol": "TSLA", "quantity": 1, "price": 1.0},
            )

        assert resp.status_code == 404
        body = resp.json()
        assert body["code"] == 5002
        assert body["message"] == "You don't own this stock: TSLA"
        assert body["data"] is None

    async def test_oversell_is_422(self, client: AsyncClient, authed: UserModel) -> None:
        holdings = AsyncMock()
        holdings.find.return_value = Holding(
            id=1, user_id=str(authed.id), stock_symbol="AAPL", shares_owned=2, average_price=5.0
        )
        svc = TradeApplicationService(holdings=holdings, ledger=AsyncMock(), retry_backoff_ms=0)

        with patch("src.vst_portfolio.api.router._service", svc):
            resp = await client.post(
                "/api/v1/portfolio/sell",
                json={"stockSymbol": "AAPL", "quantity": 3, "price": 1.0},
            )

        assert resp.status_code == 422
        assert resp.json()["code"] == 5001

    @pytest.mark.parametrize(
        "payload",
        [
            {"stockSymbol": "AAPL", "quantity": 0, "price": 1.0},
            {"stockSymbol": "AAPL", "quantity": 1, "price": -1.0},
            {"stockSymbol": "", "quantity": 1, "price": 1.0},
        ],
    )
    async def test_invalid_trade_is_invalid_input(
        self, client: AsyncClient, authed: UserModel, payload: dict
    ) -> None:
        resp = await client.post("/api/v1/portfolio/buy", json=payload)
        assert resp.status_code == 422
        body = resp.json()
        assert body["code"] == 9003
        assert body["message"].startswith("Invalid input:")

    async def test_overflowing_price_is_rejected_without_writes(
        self, client: AsyncClient, authed: UserModel
    ) -> None:
        holdings = AsyncMock()
        holdings.find.return_value = None
        ledger = AsyncMock()
        svc = TradeApplicationService(holdings=holdings, ledger=ledger, retry_backoff_ms=0)

        with patch("src.vst_portfolio.api.router._service", svc):
            resp = await client.post(
                "/api/v1/portfolio/buy",
                json={"stockSymbol": "AAPL", "quantity": 10, "price": 1e308},
            )

        assert resp.status_code == 422
        assert resp.json()["code"] == 9003
        holdings.upsert.assert_not_awaited()
        ledger.append.assert_not_awaited()

    async def test_quantity_beyond_column_range_is_invalid_input(
        self, client: AsyncClient, authed: UserModel
    ) -> None:
        resp = await client.post(
            "/api/v1/portfolio/buy",
            json={"stockSymbol": "AAPL", "quantity": 3_000_000_000, "price": 1.0},
        )
        assert resp.status_code == 422
        assert resp.json()["code"] == 9003

    async def test_list_holdings(self, client: AsyncClient, authed: UserModel) -> None:
        holdings = AsyncMock()
        holdings.list_by_user.return_value = []
        svc = TradeApplicationService(holdings=holdings, ledger=AsyncMock())

        with patch("src.vst_portfolio.api.router._service", svc):
            resp = await client.get("/api/v1/portfolio")

        assert resp.status_code == 200
        assert resp.json()["data"] == {"items": [], "total": 0}

    async def test_get_single_holding_normalizes_symbol(
        self, client: AsyncClient, authed: UserModel
    ) -> None:
        holdings = AsyncMock()
        holdings.find.return_value = Holding(
            id=4, user_id=str(authed.id), stock_symbol="MSFT", shares_owned=3, average_price=9.0
        )
        svc = TradeApplicationService(holdings=holdings, ledger=AsyncMock())

        with patch("src.vst_portfolio.api.router._service", svc):
            resp = await client.get("/api/v1/portfolio/msft")

        assert resp.status_code == 200
        assert resp.json()["data"]["sharesOwned"] == 3
        assert holdings.find.call_args.args[2] == "MSFT"

    async def test_transactions_route_is_not_a_symbol(
        self, client: AsyncClient, authed: UserModel
    ) -> None:
        ledger = AsyncMock()
        ledger.list_by_user.return_value = []
        svc = TradeApplicationService(holdings=AsyncMock(), ledger=ledger)

        with patch("src.vst_portfolio.api.router._service", svc):
            resp = await client.get("/api/v1/portfolio/transactions?symbol=aapl&limit=5")

        assert resp.status_code == 200
        assert resp.json()["data"] == {"items": [], "nextCursor": None, "hasMore": False}
        args = ledger.list_by_user.call_args.args
        assert args[2] == "AAPL"
        assert args[4] == 6

    async def test_storage_failure_is_503(self, client: AsyncClient, authed: UserModel) -> None:
        holdings = AsyncMock()
        holdings.list_by_user.side_effect = OperationalError("SELECT", {}, Exception("down"))
        svc = TradeApplicationService(holdings=holdings, ledger=AsyncMock())

        with patch("src.vst_portfolio.api.router._service", svc):
            resp = await client.get("/api/v1/portfolio")

        assert resp.status_code == 503
        assert resp.json()["code"] == 9004

    async def test_missing_token_is_401(self, client: AsyncClient, db: MagicMock) -> None:
        async def _session() -> AsyncGenerator[MagicMock, None]:
            yield db

        app.dependency_overrides[get_db_session] = _session
        resp = await client.get("/api/v1/portfolio")
        assert resp.status_code == 401


def _competition() -> Competition:
    return Competition(
        id=1,
        name="Demo Cup",
        description=None,
        start_date=datetime(2026, 1, 1, tzinfo=UTC),
        end_date=datetime(2026, 12, 31, tzinfo=UTC),
        starting_balance=10000.0,
    )


class TestCompetitionRoutes:
    async def test_join_returns_participant(self, client: AsyncClient, authed: UserModel) -> None:
        repo = AsyncMock()
        repo.get_by_id.return_value = _competition()

        async def _add(db: object, participant: Participant) -> Participant:
            return replace(participant, id=11)

        repo.add_participant.side_effect = _add
        svc = CompetitionApplicationService(repo=repo)

        with patch("src.vst_competition.api.router._service", svc):
            resp = await client.post("/api/v1/competitions/join/1")

        assert resp.status_code == 200
        assert resp.json()["data"] == {
            "id": 11,
            "competitionId": 1,
            "competitionName": "Demo Cup",
            "username": "alice",
            "portfolioValue": 10000.0,
        }

    async def test_join_unknown_is_404(self, client: AsyncClient, authed: UserModel) -> None:
        repo = AsyncMock()
        repo.get_by_id.return_value = None
        svc = CompetitionApplicationService(repo=repo)

        with patch("src.vst_competition.api.router._service", svc):
            resp = await client.post("/api/v1/competitions/join/999")

        assert resp.status_code == 404
        assert resp.json()["code"] == 6001

    async def test_join_id_beyond_bigint_is_404(
        self, client: AsyncClient, authed: UserModel, db: MagicMock
    ) -> None:
        db.get = AsyncMock()
        svc = CompetitionApplicationService(repo=CompetitionRepository())

        with patch("src.vst_competition.api.router._service", svc):
            resp = await client.post("/api/v1/competitions/join/99999999999999999999")

        assert resp.status_code == 404
        assert resp.json()["code"] == 6001
        db.get.assert_not_awaited()

    async def test_create_requires_admin(self, client: AsyncClient, authed: UserModel) -> None:
        resp = await client.post(
            "/api/v1/competitions",
            json={
                "name": "Cup",
                "startDate": "2026-01-01T00:00:00Z",
                "endDate": "2026-02-01T00:00:00Z",
                "startingBalance": 100,
            },
        )
        assert resp.status_code == 403
        assert resp.json()["code"] == 1007

    async def test_admin_creates_competition(self, client: AsyncClient, authed: UserModel) -> None:
        authed.role = "ADMIN"
        repo = AsyncMock()

        async def _create(db: object, competition: Competition) -> Competition:
            return replace(competition, id=2)

        repo.create.side_effect = _create
        svc = CompetitionApplicationService(repo=repo)

        with patch("src.vst_competition.api.router._service", svc):
            resp = await client.post(
                "/api/v1/competitions",
                json={
                    "name": "Cup",
                    "startDate": "2026-01-01T00:00:00Z",
                    "endDate": "2026-02-01T00:00:00Z",
                    "startingBalance": 100,
                },
            )

        assert resp.status_code == 201
        assert resp.json()["data"]["id"] == 2

    async def test_list_competitions(self, client: AsyncClient, authed: UserModel) -> None:
        repo = AsyncMock()
        repo.list_all.return_value = [_competition()]
        svc = CompetitionApplicationService(repo=repo)

        with patch("src.vst_competition.api.router._service", svc):
            resp = await client.get("/api/v1/competitions")

        assert resp.status_code == 200
        assert resp.json()["data"]["total"] == 1


async def test_health(client: AsyncClient) -> None:
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"
