"""AuctionRepository: concrete implementation of AuctionRepositoryProtocol.

All queries use raw text() SQL (no ORM).
asyncpg NULL parameter pattern: CAST(:param AS TYPE) IS NULL required for None values.

Every status-changing write is conditioned on the expected pre-state
(`WHERE status = ...`) and reports via RETURNING whether it took effect, so
concurrent bid requests and overlapping sweeps cannot both win a transition.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.at_auction.domain.models import Auction

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_SELECT_COLUMNS = """
    id, designer_id, title, description, materials, sizing, images,
    start_price, current_price, status,
    required_bidders, unique_bidder_count,
    end_time, cycle_started_at,
    winner_id, fulfillment_status, tracking_number, shipped_at,
    created_at, updated_at
"""

_GET_AUCTION_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM auctions
    WHERE id = CAST(:auction_id AS UUID)
""")

_GET_AUCTION_FOR_UPDATE_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM auctions
    WHERE id = CAST(:auction_id AS UUID)
    FOR UPDATE
""")

_LIST_AUCTIONS_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM auctions
    WHERE
        (CAST(:status AS TEXT) IS NULL OR status = CAST(:status AS TEXT))
        AND (CAST(:designer_id AS UUID) IS NULL OR designer_id = CAST(:designer_id AS UUID))
    ORDER BY created_at DESC, id DESC
    LIMIT :limit
""")

_LIST_EXPIRED_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM auctions
    WHERE status = :status AND end_time < :now
    ORDER BY end_time ASC
""")

_INSERT_AUCTION_SQL = text(f"""
    INSERT INTO auctions (id, designer_id, title, description, materials, sizing, images,
        start_price, current_price, status, required_bidders, unique_bidder_count,
        end_time, cycle_started_at)
    VALUES (CAST(:id AS UUID), CAST(:designer_id AS UUID), :title, :description,
        :materials, :sizing, :images,
        :start_price, :start_price, 'LOCKED', :required_bidders, 0,
        :end_time, :cycle_started_at)
    RETURNING {_SELECT_COLUMNS}
""")

# Compare-and-swap: only applies if nobody else moved the auction since we read it.
_APPLY_BID_SQL = text("""
    UPDATE auctions
    SET current_price = :current_price,
        unique_bidder_count = :unique_bidder_count,
        status = :status,
        updated_at = NOW()
    WHERE id = CAST(:id AS UUID)
      AND current_price = :expected_price
      AND current_price < :current_price
      AND unique_bidder_count = :expected_count
      AND status = :expected_status
    RETURNING id
""")

_MARK_SOLD_SQL = text("""
    UPDATE auctions
    SET status = 'SOLD',
        winner_id = CAST(:winner_id AS UUID),
        fulfillment_status = 'pending_payment',
        updated_at = NOW()
    WHERE id = CAST(:id AS UUID)
      AND status = 'UNLOCKED'
      AND current_price = :amount
      AND end_time < :now
    RETURNING id
""")

_MARK_VOID_SQL = text("""
    UPDATE auctions
    SET status = 'VOID', updated_at = NOW()
    WHERE id = CAST(:id AS UUID)
      AND status = 'LOCKED'
      AND end_time < :now
    RETURNING id
""")

# A LOCKED auction with no bidders in its current cycle may still carry bids
# from a round before reactivation; the ledger keeps those, so no delete.
_DELETE_UNCLAIMED_SQL = text("""
    DELETE FROM auctions
    WHERE id = CAST(:id AS UUID)
      AND designer_id = CAST(:designer_id AS UUID)
      AND status = 'LOCKED'
      AND unique_bidder_count = 0
      AND NOT EXISTS (SELECT 1 FROM bids WHERE auction_id = CAST(:id AS UUID))
    RETURNING id
""")

_REACTIVATE_SQL = text(f"""
    UPDATE auctions
    SET status = 'LOCKED',
        end_time = :end_time,
        current_price = start_price,
        unique_bidder_count = 0,
        cycle_started_at = :now,
        winner_id = NULL,
        fulfillment_status = NULL,
        tracking_number = NULL,
        shipped_at = NULL,
        updated_at = NOW()
    WHERE id = CAST(:id AS UUID)
      AND status = 'SOLD'
    RETURNING {_SELECT_COLUMNS}
""")

# The winner may correct the address until the piece ships.
_ADDRESS_COLLECTED_SQL = text(f"""
    UPDATE auctions
    SET fulfillment_status = 'address_collected',
        updated_at = NOW()
    WHERE id = CAST(:id AS UUID)
      AND status = 'SOLD'
      AND winner_id = CAST(:winner_id AS UUID)
      AND fulfillment_status IN ('pending_payment', 'address_collected')
    RETURNING {_SELECT_COLUMNS}
""")

# Re-shipping only replaces the tracking number; shipped_at keeps the first dispatch.
_MARK_SHIPPED_SQL = text(f"""
    UPDATE auctions
    SET fulfillment_status = 'shipped',
        tracking_number = :tracking_number,
        shipped_at = COALESCE(shipped_at, :now),
        updated_at = NOW()
    WHERE id = CAST(:id AS UUID)
      AND status = 'SOLD'
      AND designer_id = CAST(:designer_id AS UUID)
      AND fulfillment_status IN ('address_collected', 'shipped')
    RETURNING {_SELECT_COLUMNS}
""")

# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _opt_str(value: Any) -> str | None:
    return str(value) if value is not None else None


def _row_to_auction(row: Any) -> Auction:
    """Convert a DB result row to an Auction domain object."""
    return Auction(
        id=str(row.id),
        designer_id=str(row.designer_id),
        title=row.title,
        description=row.description,
        materials=row.materials,
        sizing=row.sizing,
        images=list(row.images or []),
        start_price=row.start_price,
        current_price=row.current_price,
        status=row.status,
        required_bidders=row.required_bidders,
        unique_bidder_count=row.unique_bidder_count,
        end_time=row.end_time,
        cycle_started_at=row.cycle_started_at,
        winner_id=_opt_str(row.winner_id),
        fulfillment_status=row.fulfillment_status,
        tracking_number=row.tracking_number,
        shipped_at=row.shipped_at,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class AuctionRepository:
    """Concrete implementation of AuctionRepositoryProtocol using raw SQL."""

    async def get_by_id(self, db: AsyncSession, auction_id: str) -> Auction | None:
        result = await db.execute(_GET_AUCTION_SQL, {"auction_id": auction_id})
        row = result.fetchone()
        return _row_to_auction(row) if row else None

    async def get_for_update(self, db: AsyncSession, auction_id: str) -> Auction | None:
        """Read the auction and hold its row lock until the transaction ends."""
        result = await db.execute(_GET_AUCTION_FOR_UPDATE_SQL, {"auction_id": auction_id})
        row = result.fetchone()
        return _row_to_auction(row) if row else None

    async def list_auctions(
        self,
        db: AsyncSession,
        status: str | None,
        designer_id: str | None,
        limit: int,
    ) -> list[Auction]:
        result = await db.execute(
            _LIST_AUCTIONS_SQL,
            {"status": status, "designer_id": designer_id, "limit": limit},
        )
        return [_row_to_auction(row) for row in result.fetchall()]

    async def list_expired(
        self, db: AsyncSession, status: str, now: datetime
    ) -> list[Auction]:
        result = await db.execute(_LIST_EXPIRED_SQL, {"status": status, "now": now})
        return [_row_to_auction(row) for row in result.fetchall()]

    async def insert(self, db: AsyncSession, auction: Auction) -> Auction:
        result = await db.execute(
            _INSERT_AUCTION_SQL,
            {
                "id": auction.id,
                "designer_id": auction.designer_id,
                "title": auction.title,
                "description": auction.description,
                "materials": auction.materials,
                "sizing": auction.sizing,
                "images": list(auction.images),
                "start_price": auction.start_price,
                "required_bidders": auction.required_bidders,
                "end_time": auction.end_time,
                "cycle_started_at": auction.cycle_started_at,
            },
        )
        return _row_to_auction(result.fetchone())

    async def apply_bid(
        self, db: AsyncSession, expected: Auction, updated: Auction
    ) -> bool:
        result = await db.execute(
            _APPLY_BID_SQL,
            {
                "id": updated.id,
                "current_price": updated.current_price,
                "unique_bidder_count": updated.unique_bidder_count,
                "status": updated.status,
                "expected_price": expected.current_price,
                "expected_count": expected.unique_bidder_count,
                "expected_status": expected.status,
            },
        )
        return result.fetchone() is not None

    async def mark_sold(
        self, db: AsyncSession, auction_id: str, winner_id: str, amount: int, now: datetime
    ) -> bool:
        result = await db.execute(
            _MARK_SOLD_SQL,
            {"id": auction_id, "winner_id": winner_id, "amount": amount, "now": now},
        )
        return result.fetchone() is not None

    async def mark_void(self, db: AsyncSession, auction_id: str, now: datetime) -> bool:
        result = await db.execute(_MARK_VOID_SQL, {"id": auction_id, "now": now})
        return result.fetchone() is not None

    async def delete_if_unclaimed(
        self, db: AsyncSession, auction_id: str, designer_id: str
    ) -> bool:
        result = await db.execute(
            _DELETE_UNCLAIMED_SQL, {"id": auction_id, "designer_id": designer_id}
        )
        return result.fetchone() is not None

    async def reactivate(
        self, db: AsyncSession, auction_id: str, end_time: datetime, now: datetime
    ) -> Auction | None:
        result = await db.execute(
            _REACTIVATE_SQL, {"id": auction_id, "end_time": end_time, "now": now}
        )
        row = result.fetchone()
        return _row_to_auction(row) if row else None

    async def record_address_collected(
        self, db: AsyncSession, auction_id: str, winner_id: str
    ) -> Auction | None:
        result = await db.execute(
            _ADDRESS_COLLECTED_SQL, {"id": auction_id, "winner_id": winner_id}
        )
        row = result.fetchone()
        return _row_to_auction(row) if row else None

    async def mark_shipped(
        self,
        db: AsyncSession,
        auction_id: str,
        designer_id: str,
        tracking_number: str,
        now: datetime,
    ) -> Auction | None:
        result = await db.execute(
            _MARK_SHIPPED_SQL,
            {
                "id": auction_id,
                "designer_id": designer_id,
                "tracking_number": tracking_number,
                "now": now,
            },
        )
        row = result.fetchone()
        return _row_to_auction(row) if row else None
