"""at_bidding REST endpoints.

POST /bids      place a bid (the bidding protocol)
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.at_bidding.application.schemas import BidResponse, PlaceBidRequest, PlaceBidResponse
from src.at_bidding.application.service import BiddingService
from src.at_common.database import get_db_session
from src.at_common.response import ApiResponse, success_response
from src.at_gateway.auth.dependencies import CurrentUser, get_optional_user

router = APIRouter(prefix="/bids", tags=["bids"])

# One service per process: it owns the bid rate limiter's counters.
_service = BiddingService()


def get_bidding_service() -> BiddingService:
    return _service


@router.post("", response_model=ApiResponse, summary="Place a bid")
async def place_bid(
    request: Request,
    body: PlaceBidRequest,
    actor: Annotated[CurrentUser | None, Depends(get_optional_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[BiddingService, Depends(get_bidding_service)],
) -> ApiResponse:
    result = await service.place_bid(actor, body.auction_id, body.amount, db)

    data = PlaceBidResponse(
        bid=BidResponse.from_domain(result.bid),
        remaining=result.remaining,
        auction_status=result.auction.status,
        current_price=result.auction.current_price,
        unique_bidder_count=result.auction.unique_bidder_count,
    )
    return success_response(data.model_dump(mode="json"), request)
