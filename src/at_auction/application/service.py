"""AuctionApplicationService: listing lifecycle outside the bidding protocol.

Read methods run without an explicit transaction. Mutations open their own
transaction and lock the auction row before checking preconditions, since
they race with bids and sweeps on the same fields.
"""

import logging
from collections.abc import Callable
from datetime import datetime, timedelta

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.at_auction.application.schemas import (
    AuctionDetail,
    AuctionListResponse,
    CreateAuctionRequest,
    ShippingAddressRequest,
    ShippingAddressResponse,
)
from src.at_auction.domain.models import Auction, Bid, ShippingAddress
from src.at_auction.domain.repository import (
    AuctionRepositoryProtocol,
    BidRepositoryProtocol,
    ShippingAddressRepositoryProtocol,
)
from src.at_auction.domain.schedule import resolve_end_time
from src.at_auction.infrastructure.bid_ledger import BidLedger
from src.at_auction.infrastructure.persistence import AuctionRepository
from src.at_auction.infrastructure.shipping import ShippingAddressRepository
from src.at_common.datetime_utils import utc_now
from src.at_common.db_errors import to_persistence_error
from src.at_common.enums import AuctionStatus, FulfillmentStatus
from src.at_common.errors import (
    AuctionNotDeletableError,
    AuctionNotFoundError,
    AuctionNotReactivatableError,
    ForbiddenError,
    FulfillmentStateError,
    InvalidStartPriceError,
)
from src.at_common.ids import is_uuid, new_id
from src.at_gateway.auth.dependencies import CurrentUser
from src.at_gateway.profile.persistence import ProfileRepository, ProfileRepositoryProtocol

logger = logging.getLogger(__name__)

_ADDRESS_EDITABLE = frozenset(
    {FulfillmentStatus.PENDING_PAYMENT.value, FulfillmentStatus.ADDRESS_COLLECTED.value}
)
_SHIPPABLE = frozenset({FulfillmentStatus.ADDRESS_COLLECTED.value, FulfillmentStatus.SHIPPED.value})


class AuctionApplicationService:
    def __init__(
        self,
        auctions: AuctionRepositoryProtocol | None = None,
        bids: BidRepositoryProtocol | None = None,
        profiles: ProfileRepositoryProtocol | None = None,
        addresses: ShippingAddressRepositoryProtocol | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._auctions: AuctionRepositoryProtocol = auctions or AuctionRepository()
        self._bids: BidRepositoryProtocol = bids or BidLedger()
        self._profiles: ProfileRepositoryProtocol = profiles or ProfileRepository()
        self._addresses: ShippingAddressRepositoryProtocol = (
            addresses or ShippingAddressRepository()
        )
        self._clock = clock
        self._max_duration = timedelta(hours=settings.MAX_AUCTION_DURATION_HOURS)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def list_auctions(
        self,
        db: AsyncSession,
        status: str | None,
        designer_id: str | None,
        limit: int,
    ) -> AuctionListResponse:
        if designer_id is not None and not is_uuid(designer_id):
            return AuctionListResponse(items=[])
        auctions = await self._auctions.list_auctions(db, status, designer_id, limit)
        return AuctionListResponse(items=[AuctionDetail.from_domain(a) for a in auctions])

    async def get_auction(self, db: AsyncSession, auction_id: str) -> AuctionDetail:
        return AuctionDetail.from_domain(await self._require(db, auction_id))

    async def list_bids(self, db: AsyncSession, auction_id: str, limit: int) -> list[Bid]:
        await self._require(db, auction_id)
        return await self._bids.list_for_auction(db, auction_id, limit)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def create_auction(
        self, db: AsyncSession, actor: CurrentUser, req: CreateAuctionRequest
    ) -> AuctionDetail:
        if req.start_price <= 0:
            raise InvalidStartPriceError()
        now = self._clock()
        end_time = resolve_end_time(req.end_time, now, self._max_duration)

        try:
            async with db.begin():
                profile = await self._profiles.get_by_id(db, actor.id)
                if profile is None or not profile.can_list_items:
                    raise ForbiddenError("Only designers can submit pieces")
                auction = await self._auctions.insert(
                    db,
                    Auction(
                        id=new_id(),
                        designer_id=actor.id,
                        title=req.title,
                        description=req.description,
                        materials=req.materials,
                        sizing=req.sizing,
                        images=list(req.images),
                        start_price=req.start_price,
                        current_price=req.start_price,
                        status=AuctionStatus.LOCKED.value,
                        required_bidders=settings.REQUIRED_BIDDERS,
                        unique_bidder_count=0,
                        end_time=end_time,
                        cycle_started_at=now,
                        created_at=now,
                        updated_at=now,
                    ),
                )
        except SQLAlchemyError as exc:
            raise to_persistence_error(exc) from exc

        logger.info("Auction %s listed by %s, ends %s", auction.id, actor.id, end_time.isoformat())
        return AuctionDetail.from_domain(auction)

    async def delete_auction(
        self, db: AsyncSession, actor: CurrentUser, auction_id: str
    ) -> None:
        """Remove a listing nobody has bid on. Only its designer may do so."""
        if not is_uuid(auction_id):
            raise AuctionNotFoundError(auction_id)
        try:
            async with db.begin():
                auction = await self._auctions.get_for_update(db, auction_id)
                if auction is None:
                    raise AuctionNotFoundError(auction_id)
                if auction.designer_id.lower() != actor.id.lower():
                    raise ForbiddenError("You can only remove your own auctions")
                if auction.status != AuctionStatus.LOCKED:
                    raise AuctionNotDeletableError(
                        f"status is {auction.status}, only LOCKED pieces can be removed"
                    )
                if auction.unique_bidder_count > 0:
                    raise AuctionNotDeletableError("collectors have already bid on it")
                if not await self._auctions.delete_if_unclaimed(db, auction_id, actor.id):
                    raise AuctionNotDeletableError("it has bid history")
        except SQLAlchemyError as exc:
            raise to_persistence_error(exc) from exc

        logger.info("Auction %s removed by its designer %s", auction_id, actor.id)

    async def reactivate_auction(
        self,
        db: AsyncSession,
        actor: CurrentUser,
        auction_id: str,
        end_time: datetime | None,
    ) -> AuctionDetail:
        """Put a SOLD piece back on the floor as a fresh LOCKED auction.

        Prior bids stay in the ledger but belong to the previous cycle: they
        no longer count towards the unlock threshold or the next sale.
        """
        if not is_uuid(auction_id):
            raise AuctionNotFoundError(auction_id)
        now = self._clock()
        new_end_time = resolve_end_time(end_time, now, self._max_duration)

        try:
            async with db.begin():
                auction = await self._auctions.get_for_update(db, auction_id)
                if auction is None:
                    raise AuctionNotFoundError(auction_id)
                if auction.designer_id.lower() != actor.id.lower():
                    raise ForbiddenError("You can only reactivate your own auctions")
                if auction.status != AuctionStatus.SOLD:
                    raise AuctionNotReactivatableError()
                reactivated = await self._auctions.reactivate(db, auction_id, new_end_time, now)
                if reactivated is None:
                    raise AuctionNotReactivatableError()
        except SQLAlchemyError as exc:
            raise to_persistence_error(exc) from exc

        logger.info("Auction %s reactivated until %s", auction_id, new_end_time.isoformat())
        return AuctionDetail.from_domain(reactivated)

    # ------------------------------------------------------------------
    # Fulfillment
    # ------------------------------------------------------------------

    async def submit_shipping_address(
        self,
        db: AsyncSession,
        actor: CurrentUser,
        auction_id: str,
        req: ShippingAddressRequest,
    ) -> AuctionDetail:
        """Winner checkout: store the delivery address, pending_payment → address_collected."""
        if not is_uuid(auction_id):
            raise AuctionNotFoundError(auction_id)
        try:
            async with db.begin():
                auction = await self._auctions.get_for_update(db, auction_id)
                if auction is None:
                    raise AuctionNotFoundError(auction_id)
                winner_id = auction.winner_id
                if winner_id is None or winner_id.lower() != actor.id.lower():
                    raise ForbiddenError("Only the winner can check out this piece")
                if auction.fulfillment_status not in _ADDRESS_EDITABLE:
                    raise FulfillmentStateError(
                        "Shipping address can no longer be changed", auction.fulfillment_status
                    )
                await self._addresses.upsert(
                    db,
                    ShippingAddress(
                        auction_id=auction.id,
                        user_id=winner_id,
                        full_name=req.full_name,
                        address_line1=req.address_line1,
                        address_line2=req.address_line2,
                        city=req.city,
                        state=req.state,
                        postal_code=req.postal_code,
                        country=req.country.upper(),
                        phone=req.phone,
                    ),
                )
                updated = await self._auctions.record_address_collected(
                    db, auction.id, winner_id
                )
                if updated is None:
                    raise FulfillmentStateError(
                        "Shipping address can no longer be changed", auction.fulfillment_status
                    )
        except SQLAlchemyError as exc:
            raise to_persistence_error(exc) from exc

        logger.info("Auction %s: shipping address collected from winner %s", auction_id, actor.id)
        return AuctionDetail.from_domain(updated)

    async def get_shipping_address(
        self, db: AsyncSession, actor: CurrentUser, auction_id: str
    ) -> ShippingAddressResponse:
        """Visible to the winner and to the designer who has to ship the piece."""
        auction = await self._require(db, auction_id)
        if not (
            _same_user(auction.winner_id, actor.id) or _same_user(auction.designer_id, actor.id)
        ):
            raise ForbiddenError("Only the winner and the designer can see the address")
        address = None
        if auction.winner_id is not None:
            address = await self._addresses.get_for_auction(db, auction.id, auction.winner_id)
        if address is None:
            raise FulfillmentStateError(
                "No shipping address has been provided yet", auction.fulfillment_status
            )
        return ShippingAddressResponse.from_domain(address)

    async def mark_shipped(
        self,
        db: AsyncSession,
        actor: CurrentUser,
        auction_id: str,
        tracking_number: str,
    ) -> AuctionDetail:
        """Designer records dispatch: address_collected → shipped.

        Calling it again on a shipped piece replaces the tracking number.
        """
        if not is_uuid(auction_id):
            raise AuctionNotFoundError(auction_id)
        now = self._clock()
        try:
            async with db.begin():
                auction = await self._auctions.get_for_update(db, auction_id)
                if auction is None:
                    raise AuctionNotFoundError(auction_id)
                if auction.designer_id.lower() != actor.id.lower():
                    raise ForbiddenError("You can only ship your own pieces")
                if auction.fulfillment_status not in _SHIPPABLE:
                    raise FulfillmentStateError(
                        "Piece cannot be shipped before the winner provides an address",
                        auction.fulfillment_status,
                    )
                updated = await self._auctions.mark_shipped(
                    db, auction.id, auction.designer_id, tracking_number, now
                )
                if updated is None:
                    raise FulfillmentStateError(
                        "Piece cannot be shipped in its current state", auction.fulfillment_status
                    )
        except SQLAlchemyError as exc:
            raise to_persistence_error(exc) from exc

        logger.info("Auction %s shipped by %s, tracking %s", auction_id, actor.id, tracking_number)
        return AuctionDetail.from_domain(updated)

    async def _require(self, db: AsyncSession, auction_id: str) -> Auction:
        if not is_uuid(auction_id):
            raise AuctionNotFoundError(auction_id)
        auction = await self._auctions.get_by_id(db, auction_id)
        if auction is None:
            raise AuctionNotFoundError(auction_id)
        return auction


def _same_user(left: str | None, right: str) -> bool:
    return left is not None and left.lower() == right.lower()
