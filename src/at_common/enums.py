"""Global enums: must match DB CHECK constraints exactly.

Ref: alembic/versions/002_create_profiles.py, 003_create_auctions.py
"""

from enum import Enum


class AuctionStatus(str, Enum):
    LOCKED = "LOCKED"
    UNLOCKED = "UNLOCKED"
    SOLD = "SOLD"
    VOID = "VOID"


# Statuses in which the auction accepts bids.
OPEN_STATUSES: frozenset[str] = frozenset({AuctionStatus.LOCKED.value, AuctionStatus.UNLOCKED.value})


class FulfillmentStatus(str, Enum):
    PENDING_PAYMENT = "pending_payment"
    ADDRESS_COLLECTED = "address_collected"
    SHIPPED = "shipped"


class ProfileRole(str, Enum):
    COLLECTOR = "collector"
    DESIGNER = "designer"
    ADMIN = "admin"


class MailTemplate(str, Enum):
    BID_CONFIRMATION = "bid_confirmation"
    AUCTION_WON = "auction_won"
    AUCTION_SOLD = "auction_sold"
