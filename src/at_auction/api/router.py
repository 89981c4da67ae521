"""at_auction REST endpoints.

GET    /auctions                           list (filter by status / designer)
POST   /auctions                           list a new piece (designers)
GET    /auctions/{auction_id}              detail
GET    /auctions/{auction_id}/bids         bid ledger, newest first
DELETE /auctions/{auction_id}              remove an untouched LOCKED piece
POST   /auctions/{auction_id}/reactivate   put a SOLD piece back on the floor
PUT    /auctions/{auction_id}/shipping      winner checkout: leave the delivery address
GET    /auctions/{auction_id}/shipping      delivery address (winner or designer)
POST   /auctions/{auction_id}/ship          designer records dispatch + tracking number
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.at_auction.application.schemas import (
    CreateAuctionRequest,
    ReactivateAuctionRequest,
    ShipAuctionRequest,
    ShippingAddressRequest,
)
from src.at_auction.application.service import AuctionApplicationService
from src.at_bidding.application.schemas import BidResponse
from src.at_common.database import get_db_session
from src.at_common.enums import AuctionStatus
from src.at_common.response import ApiResponse, success_response
from src.at_gateway.auth.dependencies import CurrentUser, get_current_user

router = APIRouter(prefix="/auctions", tags=["auctions"])

_service = AuctionApplicationService()


def get_auction_service() -> AuctionApplicationService:
    return _service


ServiceDep = Annotated[AuctionApplicationService, Depends(get_auction_service)]
DbDep = Annotated[AsyncSession, Depends(get_db_session)]


@router.get("", response_model=ApiResponse)
async def list_auctions(
    request: Request,
    db: DbDep,
    service: ServiceDep,
    status_filter: AuctionStatus | None = Query(None, alias="status"),
    designer_id: str | None = Query(None),
    limit: int = Query(50, ge=1, le=200),
) -> ApiResponse:
    status_value = status_filter.value if status_filter else None
    result = await service.list_auctions(db, status_value, designer_id, limit)
    return success_response(result.model_dump(mode="json"), request)


@router.post("", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
async def create_auction(
    request: Request,
    body: CreateAuctionRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: DbDep,
    service: ServiceDep,
) -> ApiResponse:
    result = await service.create_auction(db, current_user, body)
    return success_response(result.model_dump(mode="json"), request)


@router.get("/{auction_id}", response_model=ApiResponse)
async def get_auction(
    auction_id: str, request: Request, db: DbDep, service: ServiceDep
) -> ApiResponse:
    result = await service.get_auction(db, auction_id)
    return success_response(result.model_dump(mode="json"), request)


@router.get("/{auction_id}/bids", response_model=ApiResponse)
async def list_bids(
    auction_id: str,
    request: Request,
    db: DbDep,
    service: ServiceDep,
    limit: int = Query(100, ge=1, le=500),
) -> ApiResponse:
    bids = await service.list_bids(db, auction_id, limit)
    items = [BidResponse.from_domain(b).model_dump(mode="json") for b in bids]
    return success_response({"items": items}, request)


@router.delete("/{auction_id}", response_model=ApiResponse)
async def delete_auction(
    auction_id: str,
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: DbDep,
    service: ServiceDep,
) -> ApiResponse:
    await service.delete_auction(db, current_user, auction_id)
    return success_response({"success": True}, request)


@router.post("/{auction_id}/reactivate", response_model=ApiResponse)
async def reactivate_auction(
    auction_id: str,
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: DbDep,
    service: ServiceDep,
    body: ReactivateAuctionRequest | None = None,
) -> ApiResponse:
    end_time = body.end_time if body else None
    result = await service.reactivate_auction(db, current_user, auction_id, end_time)
    return success_response(
        {"success": True, "auction": result.model_dump(mode="json")}, request
    )


@router.put("/{auction_id}/shipping", response_model=ApiResponse)
async def submit_shipping_address(
    auction_id: str,
    request: Request,
    body: ShippingAddressRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: DbDep,
    service: ServiceDep,
) -> ApiResponse:
    result = await service.submit_shipping_address(db, current_user, auction_id, body)
    return success_response(
        {"success": True, "auction": result.model_dump(mode="json")}, request
    )


@router.get("/{auction_id}/shipping", response_model=ApiResponse)
async def get_shipping_address(
    auction_id: str,
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: DbDep,
    service: ServiceDep,
) -> ApiResponse:
    result = await service.get_shipping_address(db, current_user, auction_id)
    return success_response(result.model_dump(mode="json"), request)


@router.post("/{auction_id}/ship", response_model=ApiResponse)
async def mark_shipped(
    auction_id: str,
    request: Request,
    body: ShipAuctionRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: DbDep,
    service: ServiceDep,
) -> ApiResponse:
    result = await service.mark_shipped(db, current_user, auction_id, body.tracking_number)
    return success_response(
        {"success": True, "auction": result.model_dump(mode="json")}, request
    )
