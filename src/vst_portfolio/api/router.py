"""Portfolio REST API — buy/sell plus holdings and trade history reads.

All endpoints require JWT authentication; the resolved user is passed to the
service explicitly.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.vst_common.database import get_db_session
from src.vst_common.response import ApiResponse, success_response
from src.vst_gateway.auth.dependencies import get_current_user
from src.vst_gateway.user.db_models import UserModel
from src.vst_portfolio.application.schemas import TradeRequest, normalize_symbol
from src.vst_portfolio.application.service import TradeApplicationService

router = APIRouter(prefix="/portfolio", tags=["portfolio"])

_service = TradeApplicationService()


def _wrap(data: dict, request: Request) -> ApiResponse:
    resp = success_response(data)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("")
async def list_holdings(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.list_holdings(db, str(current_user.id))
    return _wrap(data.to_wire(), request)


@router.post("/buy")
async def buy_stock(
    body: TradeRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.buy(
        db, str(current_user.id), body.stock_symbol, body.quantity, body.price
    )
    return _wrap(data.to_wire(), request)


@router.post("/sell")
async def sell_stock(
    body: TradeRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.sell(
        db, str(current_user.id), body.stock_symbol, body.quantity, body.price
    )
    return _wrap(data.to_wire(), request)


@router.get("/transactions")
async def list_transactions(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    symbol: str | None = Query(None, description="Only trades of this symbol"),
    cursor: str | None = Query(None, description="Pagination cursor (opaque Base64)"),
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
) -> ApiResponse:
    data = await _service.list_transactions(
        db,
        str(current_user.id),
        normalize_symbol(symbol) if symbol else None,
        cursor,
        limit,
    )
    return _wrap(data.to_wire(), request)


@router.get("/{stock_symbol}")
async def get_holding(
    stock_symbol: str,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_holding(db, str(current_user.id), normalize_symbol(stock_symbol))
    return _wrap(data.to_wire(), request)
