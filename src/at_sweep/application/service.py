# src/at_sweep/application/service.py
"""SweepService: resolves expired auctions. Invoked by an external scheduler.

  UNLOCKED + expired → SOLD to the highest bid of the current cycle,
                       winner and designer notified
  LOCKED   + expired → VOID, nobody notified

Stateless and idempotent: candidates are re-selected by status each run and
every transition is a conditional write on the expected pre-state, so
overlapping runs cannot both resolve the same auction. A sale reads the top
bid under the same auction row lock bid placement takes. Each auction is
resolved in its own transaction; a failure is logged and the run moves on.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from src.at_auction.domain.models import Auction, Bid
from src.at_auction.domain.repository import (
    AuctionRepositoryProtocol,
    BidRepositoryProtocol,
)
from src.at_auction.infrastructure.bid_ledger import BidLedger
from src.at_auction.infrastructure.persistence import AuctionRepository
from src.at_common.datetime_utils import utc_now
from src.at_common.enums import AuctionStatus, MailTemplate
from src.at_gateway.profile.persistence import ProfileRepository, ProfileRepositoryProtocol
from src.at_notify.dispatcher import NotificationDispatcher, get_dispatcher

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SweepResult:
    sold: int
    void: int


class SweepService:
    def __init__(
        self,
        auctions: AuctionRepositoryProtocol | None = None,
        bids: BidRepositoryProtocol | None = None,
        profiles: ProfileRepositoryProtocol | None = None,
        notifier: NotificationDispatcher | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._auctions: AuctionRepositoryProtocol = auctions or AuctionRepository()
        self._bids: BidRepositoryProtocol = bids or BidLedger()
        self._profiles: ProfileRepositoryProtocol = profiles or ProfileRepository()
        self._notifier = notifier
        self._clock = clock

    @property
    def notifier(self) -> NotificationDispatcher:
        return self._notifier or get_dispatcher()

    async def sweep(self, db: AsyncSession) -> SweepResult:
        now = self._clock()

        async with db.begin():
            unlocked = await self._auctions.list_expired(db, AuctionStatus.UNLOCKED.value, now)
        sold = 0
        for auction in unlocked:
            try:
                if await self._resolve_sale(db, auction, now):
                    sold += 1
            except Exception:
                logger.exception("Sweep could not resolve sale of auction %s", auction.id)

        async with db.begin():
            locked = await self._auctions.list_expired(db, AuctionStatus.LOCKED.value, now)
        void = 0
        for auction in locked:
            try:
                async with db.begin():
                    voided = await self._auctions.mark_void(db, auction.id, now)
            except Exception:
                logger.exception("Sweep could not void auction %s", auction.id)
                continue
            if voided:
                void += 1
                logger.info(
                    "Auction %s voided: %d/%d bidders",
                    auction.id,
                    auction.unique_bidder_count,
                    auction.required_bidders,
                )

        logger.info("Sweep finished: sold=%d void=%d", sold, void)
        return SweepResult(sold=sold, void=void)

    async def _resolve_sale(self, db: AsyncSession, auction: Auction, now: datetime) -> bool:
        async with db.begin():
            # Same row lock the bid path takes: no bid can land between
            # reading the top bid and writing the winner.
            locked = await self._auctions.get_for_update(db, auction.id)
            if (
                locked is None
                or locked.status != AuctionStatus.UNLOCKED
                or not locked.has_expired(now)
            ):
                return False
            winning = await self._bids.top_bid(db, locked.id, locked.cycle_started_at)
            if winning is None:
                logger.warning(
                    "Auction %s expired UNLOCKED without bids; left unresolved", locked.id
                )
                return False
            if winning.amount != locked.current_price:
                logger.warning(
                    "Auction %s top bid %d does not match price %d; left for next run",
                    locked.id,
                    winning.amount,
                    locked.current_price,
                )
                return False
            if not await self._auctions.mark_sold(
                db, locked.id, winning.user_id, winning.amount, now
            ):
                return False

        logger.info(
            "Auction %s sold to %s for %d", locked.id, winning.user_id, winning.amount
        )
        await self._notify_sale(db, locked, winning)
        return True

    async def _notify_sale(self, db: AsyncSession, auction: Auction, winning: Bid) -> None:
        data = {
            "auction_title": auction.title,
            "amount": winning.amount,
            "auction_id": auction.id,
        }
        try:
            async with db.begin():
                winner = await self._profiles.get_by_id(db, winning.user_id)
                designer = await self._profiles.get_by_id(db, auction.designer_id)
        except Exception:
            logger.exception("Could not load recipients for sale of auction %s", auction.id)
            return
        self.notifier.notify(
            winner.email if winner else None, MailTemplate.AUCTION_WON.value, data
        )
        self.notifier.notify(
            designer.email if designer else None, MailTemplate.AUCTION_SOLD.value, data
        )
