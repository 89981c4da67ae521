"""Pydantic schemas for at_auction API requests and responses."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from src.at_auction.domain.models import Auction, ShippingAddress
from src.at_common.money import suggested_min_bid


class CreateAuctionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., min_length=1, max_length=200)
    description: str | None = None
    materials: str | None = None
    sizing: str | None = None
    images: list[str] = Field(default_factory=list)
    start_price: int = Field(..., alias="startPrice", description="Whole euros")
    end_time: datetime | None = Field(None, alias="endTime")


class ReactivateAuctionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    end_time: datetime | None = Field(None, alias="endTime")


class AuctionDetail(BaseModel):
    id: str
    designer_id: str
    title: str
    description: str | None
    materials: str | None
    sizing: str | None
    images: list[str]
    start_price: int
    current_price: int
    min_next_bid: int
    status: str
    required_bidders: int
    unique_bidder_count: int
    bidders_needed: int
    end_time: datetime
    winner_id: str | None
    fulfillment_status: str | None
    tracking_number: str | None
    shipped_at: datetime | None
    created_at: datetime | None

    @classmethod
    def from_domain(cls, auction: Auction) -> "AuctionDetail":
        return cls(
            id=auction.id,
            designer_id=auction.designer_id,
            title=auction.title,
            description=auction.description,
            materials=auction.materials,
            sizing=auction.sizing,
            images=list(auction.images),
            start_price=auction.start_price,
            current_price=auction.current_price,
            min_next_bid=suggested_min_bid(auction.current_price),
            status=auction.status,
            required_bidders=auction.required_bidders,
            unique_bidder_count=auction.unique_bidder_count,
            bidders_needed=max(0, auction.required_bidders - auction.unique_bidder_count),
            end_time=auction.end_time,
            winner_id=auction.winner_id,
            fulfillment_status=auction.fulfillment_status,
            tracking_number=auction.tracking_number,
            shipped_at=auction.shipped_at,
            created_at=auction.created_at,
        )


class AuctionListResponse(BaseModel):
    items: list[AuctionDetail]


class ShippingAddressRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    full_name: str = Field(..., alias="fullName", min_length=1, max_length=200)
    address_line1: str = Field(..., alias="addressLine1", min_length=1, max_length=200)
    address_line2: str | None = Field(None, alias="addressLine2", max_length=200)
    city: str = Field(..., min_length=1, max_length=100)
    state: str | None = Field(None, max_length=100)
    postal_code: str = Field(..., alias="postalCode", min_length=1, max_length=32)
    country: str = Field("US", min_length=2, max_length=2, description="ISO 3166-1 alpha-2")
    phone: str | None = Field(None, max_length=32)


class ShipAuctionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    tracking_number: str = Field(..., alias="trackingNumber", min_length=1, max_length=128)


class ShippingAddressResponse(BaseModel):
    auction_id: str
    full_name: str
    address_line1: str
    address_line2: str | None
    city: str
    state: str | None
    postal_code: str
    country: str
    phone: str | None
    updated_at: datetime | None

    @classmethod
    def from_domain(cls, address: ShippingAddress) -> "ShippingAddressResponse":
        return cls(
            auction_id=address.auction_id,
            full_name=address.full_name,
            address_line1=address.address_line1,
            address_line2=address.address_line2,
            city=address.city,
            state=address.state,
            postal_code=address.postal_code,
            country=address.country,
            phone=address.phone,
            updated_at=address.updated_at,
        )
