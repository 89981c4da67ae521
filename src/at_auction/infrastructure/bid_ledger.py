"""BidLedger: insert-only persistence for bids.

Bids are never updated or deleted; the table is the auction's audit trail.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.at_auction.domain.models import Bid

_INSERT_BID_SQL = text("""
    INSERT INTO bids (id, auction_id, user_id, amount, created_at)
    VALUES (CAST(:id AS UUID), CAST(:auction_id AS UUID), CAST(:user_id AS UUID),
            :amount, :created_at)
    RETURNING id, auction_id, user_id, amount, created_at
""")

_COUNT_UNIQUE_BIDDERS_SQL = text("""
    SELECT COUNT(DISTINCT user_id)
    FROM bids
    WHERE auction_id = CAST(:auction_id AS UUID)
      AND created_at >= :since
""")

# Amounts strictly increase within a cycle, so the top amount is unique.
_TOP_BID_SQL = text("""
    SELECT id, auction_id, user_id, amount, created_at
    FROM bids
    WHERE auction_id = CAST(:auction_id AS UUID)
      AND created_at >= :since
    ORDER BY amount DESC, created_at ASC
    LIMIT 1
""")

_LIST_BIDS_SQL = text("""
    SELECT id, auction_id, user_id, amount, created_at
    FROM bids
    WHERE auction_id = CAST(:auction_id AS UUID)
    ORDER BY created_at DESC, id DESC
    LIMIT :limit
""")


def _row_to_bid(row: Any) -> Bid:
    return Bid(
        id=str(row.id),
        auction_id=str(row.auction_id),
        user_id=str(row.user_id),
        amount=row.amount,
        created_at=row.created_at,
    )


class BidLedger:
    """Concrete implementation of BidRepositoryProtocol using raw SQL."""

    async def insert(self, db: AsyncSession, bid: Bid) -> Bid:
        result = await db.execute(
            _INSERT_BID_SQL,
            {
                "id": bid.id,
                "auction_id": bid.auction_id,
                "user_id": bid.user_id,
                "amount": bid.amount,
                "created_at": bid.created_at,
            },
        )
        return _row_to_bid(result.fetchone())

    async def count_unique_bidders(
        self, db: AsyncSession, auction_id: str, since: datetime
    ) -> int:
        result = await db.execute(
            _COUNT_UNIQUE_BIDDERS_SQL, {"auction_id": auction_id, "since": since}
        )
        return int(result.scalar_one())

    async def top_bid(
        self, db: AsyncSession, auction_id: str, since: datetime
    ) -> Bid | None:
        result = await db.execute(_TOP_BID_SQL, {"auction_id": auction_id, "since": since})
        row = result.fetchone()
        return _row_to_bid(row) if row else None

    async def list_for_auction(
        self, db: AsyncSession, auction_id: str, limit: int
    ) -> list[Bid]:
        result = await db.execute(_LIST_BIDS_SQL, {"auction_id": auction_id, "limit": limit})
        return [_row_to_bid(row) for row in result.fetchall()]
