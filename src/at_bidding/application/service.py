# src/at_bidding/application/service.py
"""BiddingService: the bid placement protocol.

Steps, in order (each failure aborts with no mutation):
  1. caller must be signed in                      → UnauthorizedError
  2. per-actor rate limit                          → RateLimitError
  3. auction must exist                            → AuctionNotFoundError
  4. auction must not be SOLD/VOID                 → AuctionEndedError
  5. caller must not be the designer               → InvalidBidderError
  6. amount must exceed current_price              → BidTooLowError
  7. end_time must not have passed                 → AuctionEndedError
  8. insert the bid
  9. recompute current_price / unique_bidder_count / unlock
 10. bid confirmation mail (after commit, best effort)
 11. return bid + remaining rate budget

Steps 3-9 run in one transaction holding the auction row lock
(SELECT ... FOR UPDATE). The recompute is a compare-and-swap against the
row we read, so even without the lock two bids can never both be accepted
against the same current_price; the loser's bid insert is rolled back.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.at_auction.domain.models import Auction, Bid
from src.at_auction.domain.repository import (
    AuctionRepositoryProtocol,
    BidRepositoryProtocol,
)
from src.at_auction.infrastructure.bid_ledger import BidLedger
from src.at_auction.infrastructure.persistence import AuctionRepository
from src.at_bidding.rules.auction_state import check_auction_open
from src.at_bidding.rules.bid_amount import check_exceeds_current_price
from src.at_bidding.rules.expiry import check_not_expired
from src.at_bidding.rules.self_bid import check_not_designer
from src.at_common.datetime_utils import utc_now
from src.at_common.db_errors import to_persistence_error
from src.at_common.enums import AuctionStatus, MailTemplate
from src.at_common.errors import (
    AuctionNotFoundError,
    BidTooLowError,
    PersistenceError,
    RateLimitError,
    UnauthorizedError,
)
from src.at_common.ids import is_uuid, new_id
from src.at_gateway.auth.dependencies import CurrentUser
from src.at_gateway.middleware.rate_limit import RateLimiter
from src.at_notify.dispatcher import NotificationDispatcher, get_dispatcher

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlaceBidResult:
    bid: Bid
    auction: Auction
    remaining: int


class BiddingService:
    def __init__(
        self,
        auctions: AuctionRepositoryProtocol | None = None,
        bids: BidRepositoryProtocol | None = None,
        limiter: RateLimiter | None = None,
        notifier: NotificationDispatcher | None = None,
        clock: Callable[[], datetime] = utc_now,
        max_requests: int | None = None,
        window_ms: int | None = None,
    ) -> None:
        self._auctions: AuctionRepositoryProtocol = auctions or AuctionRepository()
        self._bids: BidRepositoryProtocol = bids or BidLedger()
        self._limiter = limiter or RateLimiter()
        self._notifier = notifier
        self._clock = clock
        self._max_requests = max_requests or settings.BID_RATE_LIMIT
        self._window_ms = window_ms or settings.BID_RATE_WINDOW_MS

    @property
    def notifier(self) -> NotificationDispatcher:
        return self._notifier or get_dispatcher()

    async def place_bid(
        self,
        actor: CurrentUser | None,
        auction_id: str,
        amount: int,
        db: AsyncSession,
    ) -> PlaceBidResult:
        if actor is None:
            raise UnauthorizedError()

        rate = self._limiter.attempt(f"bid:{actor.id}", self._max_requests, self._window_ms)
        if not rate.allowed:
            raise RateLimitError(rate.reset_time)

        if not is_uuid(auction_id):
            raise AuctionNotFoundError(auction_id)

        try:
            async with db.begin():
                auction, bid = await self._accept_bid(actor, auction_id, amount, db)
        except SQLAlchemyError as exc:
            logger.exception("Bid on auction %s by %s failed in storage", auction_id, actor.id)
            raise to_persistence_error(exc) from exc

        self.notifier.notify(
            actor.email,
            MailTemplate.BID_CONFIRMATION.value,
            {"amount": amount, "auction_title": auction.title, "auction_id": auction.id},
        )
        return PlaceBidResult(bid=bid, auction=auction, remaining=rate.remaining)

    async def _accept_bid(
        self, actor: CurrentUser, auction_id: str, amount: int, db: AsyncSession
    ) -> tuple[Auction, Bid]:
        now = self._clock()
        auction = await self._auctions.get_for_update(db, auction_id)
        if auction is None:
            raise AuctionNotFoundError(auction_id)

        check_auction_open(auction)
        check_not_designer(auction, actor.id)
        check_exceeds_current_price(auction, amount)
        check_not_expired(auction, now)

        bid = await self._bids.insert(
            db,
            Bid(
                id=new_id(),
                auction_id=auction.id,
                user_id=actor.id,
                amount=amount,
                created_at=now,
            ),
        )
        bidder_count = await self._bids.count_unique_bidders(
            db, auction.id, auction.cycle_started_at
        )
        updated = auction.with_accepted_bid(amount, bidder_count)
        if not await self._auctions.apply_bid(db, auction, updated):
            await self._raise_lost_race(db, auction_id, amount)

        if auction.status == AuctionStatus.LOCKED and updated.status == AuctionStatus.UNLOCKED:
            logger.info(
                "Auction %s unlocked: %d/%d bidders",
                auction.id,
                updated.unique_bidder_count,
                updated.required_bidders,
            )
        return updated, bid

    async def _raise_lost_race(self, db: AsyncSession, auction_id: str, amount: int) -> None:
        fresh = await self._auctions.get_by_id(db, auction_id)
        if fresh is None:
            raise AuctionNotFoundError(auction_id)
        if amount <= fresh.current_price:
            raise BidTooLowError(fresh.current_price)
        raise PersistenceError("Auction changed while the bid was being placed; please resubmit")
