"""Domain models for at_auction: plain dataclasses plus the unlock state machine."""

from dataclasses import dataclass, field, replace
from datetime import datetime

from src.at_common.enums import OPEN_STATUSES, AuctionStatus


@dataclass(frozen=True)
class Auction:
    id: str
    designer_id: str
    title: str
    start_price: int
    current_price: int
    status: str
    required_bidders: int
    unique_bidder_count: int
    end_time: datetime
    # Bids older than this belong to a previous round (before reactivation).
    cycle_started_at: datetime
    description: str | None = None
    materials: str | None = None
    sizing: str | None = None
    images: list[str] = field(default_factory=list)
    winner_id: str | None = None
    fulfillment_status: str | None = None
    tracking_number: str | None = None
    shipped_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def accepts_bids(self) -> bool:
        return self.status in OPEN_STATUSES

    def has_expired(self, now: datetime) -> bool:
        return now > self.end_time

    def with_accepted_bid(self, amount: int, unique_bidder_count: int) -> "Auction":
        """Return the auction as it stands after accepting a bid of `amount`.

        `unique_bidder_count` is the distinct bidder count of the current
        cycle, the new bid included. LOCKED flips to UNLOCKED once the
        threshold is reached; UNLOCKED never goes back.
        """
        status = self.status
        if status == AuctionStatus.LOCKED and unique_bidder_count >= self.required_bidders:
            status = AuctionStatus.UNLOCKED.value
        return replace(
            self,
            current_price=amount,
            unique_bidder_count=max(self.unique_bidder_count, unique_bidder_count),
            status=status,
        )


@dataclass(frozen=True)
class Bid:
    """Immutable ledger entry. Never updated, never deleted."""

    id: str
    auction_id: str
    user_id: str
    amount: int
    created_at: datetime


@dataclass(frozen=True)
class ShippingAddress:
    """Delivery details the winner leaves for a SOLD auction. One per auction."""

    auction_id: str
    user_id: str
    full_name: str
    address_line1: str
    city: str
    postal_code: str
    country: str
    address_line2: str | None = None
    state: str | None = None
    phone: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
