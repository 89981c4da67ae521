# src/at_auction/domain/repository.py
"""Repository Protocols: dependency inversion for testability.

Unit tests inject in-memory fakes that conform to these Protocols.
Infrastructure layer provides the raw-SQL implementations.

Transaction ownership: the CALLER (application service) opens the
transaction via `async with db.begin()`. Repositories never commit.
"""

from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.at_auction.domain.models import Auction, Bid, ShippingAddress


class AuctionRepositoryProtocol(Protocol):
    async def get_by_id(self, db: AsyncSession, auction_id: str) -> Auction | None: ...

    async def get_for_update(self, db: AsyncSession, auction_id: str) -> Auction | None: ...

    async def list_auctions(
        self,
        db: AsyncSession,
        status: str | None,
        designer_id: str | None,
        limit: int,
    ) -> list[Auction]: ...

    async def list_expired(
        self, db: AsyncSession, status: str, now: datetime
    ) -> list[Auction]: ...

    async def insert(self, db: AsyncSession, auction: Auction) -> Auction: ...

    async def apply_bid(self, db: AsyncSession, expected: Auction, updated: Auction) -> bool: ...

    async def mark_sold(
        self, db: AsyncSession, auction_id: str, winner_id: str, amount: int, now: datetime
    ) -> bool: ...

    async def mark_void(self, db: AsyncSession, auction_id: str, now: datetime) -> bool: ...

    async def delete_if_unclaimed(
        self, db: AsyncSession, auction_id: str, designer_id: str
    ) -> bool: ...

    async def reactivate(
        self, db: AsyncSession, auction_id: str, end_time: datetime, now: datetime
    ) -> Auction | None: ...

    async def record_address_collected(
        self, db: AsyncSession, auction_id: str, winner_id: str
    ) -> Auction | None: ...

    async def mark_shipped(
        self,
        db: AsyncSession,
        auction_id: str,
        designer_id: str,
        tracking_number: str,
        now: datetime,
    ) -> Auction | None: ...


class BidRepositoryProtocol(Protocol):
    async def insert(self, db: AsyncSession, bid: Bid) -> Bid: ...

    async def count_unique_bidders(
        self, db: AsyncSession, auction_id: str, since: datetime
    ) -> int: ...

    async def top_bid(self, db: AsyncSession, auction_id: str, since: datetime) -> Bid | None: ...

    async def list_for_auction(self, db: AsyncSession, auction_id: str, limit: int) -> list[Bid]: ...


class ShippingAddressRepositoryProtocol(Protocol):
    async def upsert(self, db: AsyncSession, address: ShippingAddress) -> ShippingAddress: ...

    async def get_for_auction(
        self, db: AsyncSession, auction_id: str, user_id: str
    ) -> ShippingAddress | None: ...
