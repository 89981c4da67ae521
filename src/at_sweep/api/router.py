"""Scheduler-facing endpoint.

GET|POST /cron/auction-end     run one sweep (Bearer CRON_SECRET)
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.at_common.database import get_db_session
from src.at_common.response import ApiResponse, success_response
from src.at_gateway.auth.dependencies import require_cron_secret
from src.at_sweep.application.service import SweepService

router = APIRouter(prefix="/cron", tags=["cron"])

_service = SweepService()


def get_sweep_service() -> SweepService:
    return _service


@router.api_route(
    "/auction-end",
    methods=["GET", "POST"],
    response_model=ApiResponse,
    dependencies=[Depends(require_cron_secret)],
    summary="Resolve expired auctions",
)
async def auction_end(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[SweepService, Depends(get_sweep_service)],
) -> ApiResponse:
    result = await service.sweep(db)
    return success_response(
        {"success": True, "processed": {"sold": result.sold, "void": result.void}}, request
    )
