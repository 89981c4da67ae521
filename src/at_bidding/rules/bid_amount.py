from src.at_auction.domain.models import Auction
from src.at_common.errors import BidTooLowError


def check_exceeds_current_price(auction: Auction, amount: int) -> None:
    """Raise BidTooLowError unless amount is strictly above current_price.

    No minimum increment is enforced; the floor merely suggests +100.
    """
    if amount <= auction.current_price:
        raise BidTooLowError(auction.current_price)
