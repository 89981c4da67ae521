from datetime import datetime

from src.at_auction.domain.models import Auction
from src.at_common.errors import AuctionEndedError


def check_not_expired(auction: Auction, now: datetime) -> None:
    """Raise AuctionEndedError once end_time has passed.

    The sweep runs on a delay, so an expired auction can still read
    LOCKED/UNLOCKED here.
    """
    if auction.has_expired(now):
        raise AuctionEndedError()
