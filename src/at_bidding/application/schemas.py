# src/at_bidding/application/schemas.py
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from src.at_auction.domain.models import Bid


class PlaceBidRequest(BaseModel):
    """Accepts both `auctionId` (web client) and `auction_id`."""

    model_config = ConfigDict(populate_by_name=True)

    auction_id: str = Field(..., alias="auctionId", min_length=1)
    amount: int = Field(..., gt=0, description="Whole euros")


class BidResponse(BaseModel):
    id: str
    auction_id: str
    user_id: str
    amount: int
    created_at: datetime

    @classmethod
    def from_domain(cls, bid: Bid) -> "BidResponse":
        return cls(
            id=bid.id,
            auction_id=bid.auction_id,
            user_id=bid.user_id,
            amount=bid.amount,
            created_at=bid.created_at,
        )


class PlaceBidResponse(BaseModel):
    success: bool = True
    bid: BidResponse
    remaining: int
    auction_status: str
    current_price: int
    unique_bidder_count: int
