from src.at_auction.domain.models import Auction
from src.at_common.errors import AuctionEndedError


def check_auction_open(auction: Auction) -> None:
    """Raise AuctionEndedError unless the auction is LOCKED or UNLOCKED."""
    if not auction.accepts_bids:
        raise AuctionEndedError()
