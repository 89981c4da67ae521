"""Designers cannot bid on their own listing, whatever the amount."""
from src.at_auction.domain.models import Auction
from src.at_common.errors import InvalidBidderError


def is_self_bid(auction: Auction, actor_id: str) -> bool:
    # UUID comparison is case-insensitive.
    return auction.designer_id.lower() == str(actor_id).lower()


def check_not_designer(auction: Auction, actor_id: str) -> None:
    if is_self_bid(auction, actor_id):
        raise InvalidBidderError()
