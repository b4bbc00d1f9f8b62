"""Competitions REST API.

GET  /competitions                    — list (any authenticated user)
POST /competitions                    — create (ADMIN only)
POST /competitions/join/{competition_id} — enroll the current user
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.vst_common.database import get_db_session
from src.vst_common.response import ApiResponse, success_response
from src.vst_competition.application.schemas import CreateCompetitionRequest
from src.vst_competition.application.service import CompetitionApplicationService
from src.vst_gateway.auth.dependencies import get_current_user, require_admin
from src.vst_gateway.user.db_models import UserModel

router = APIRouter(prefix="/competitions", tags=["competitions"])

_service = CompetitionApplicationService()


@router.get("")
async def list_competitions(
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.list_competitions(db)
    resp = success_response(result.to_wire())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_competition(
    body: CreateCompetitionRequest,
    request: Request,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.create_competition(db, body)
    resp = success_response(result.to_wire())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    resp.message = "Competition created"
    return resp


@router.post("/join/{competition_id}")
async def join_competition(
    competition_id: int,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.join(
        db, competition_id, str(current_user.id), current_user.username
    )
    resp = success_response(result.to_wire())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
