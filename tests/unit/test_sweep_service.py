"""Unit tests for SweepService against the in-memory store."""

import logging
from dataclasses import replace
from datetime import timedelta

import pytest

from src.at_common.enums import ProfileRole
from src.at_sweep.application.service import SweepResult, SweepService
from tests.unit.fakes import (
    COLLECTOR_A,
    COLLECTOR_B,
    COLLECTOR_C,
    DESIGNER_ID,
    FakeAuctionRepository,
    FakeBidLedger,
    FakeClock,
    FakeProfileRepository,
    FakeStore,
    RecordingNotifier,
)


def _service(
    clock: FakeClock,
    notifier: RecordingNotifier,
    bids: FakeBidLedger | None = None,
) -> SweepService:
    return SweepService(
        auctions=FakeAuctionRepository(),
        bids=bids or FakeBidLedger(),
        profiles=FakeProfileRepository(),
        notifier=notifier,
        clock=clock,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def store() -> FakeStore:
    s = FakeStore()
    s.add_profile(DESIGNER_ID, ProfileRole.DESIGNER.value, "designer@example.com")
    s.add_profile(COLLECTOR_A, email="a@example.com")
    s.add_profile(COLLECTOR_B, email="b@example.com")
    s.add_profile(COLLECTOR_C, email="c@example.com")
    return s


def _expired_unlocked(store: FakeStore, clock: FakeClock, amounts: list[tuple[str, int]]):  # type: ignore[no-untyped-def]
    auction = store.add_auction(
        status="UNLOCKED",
        unique_bidder_count=len({u for u, _ in amounts}),
        current_price=max((a for _, a in amounts), default=1000),
        start_price=800,
        end_time=clock.now - timedelta(minutes=1),
        cycle_started_at=clock.now - timedelta(days=2),
    )
    for i, (user_id, amount) in enumerate(amounts):
        store.add_bid(auction.id, user_id, amount, clock.now - timedelta(days=1, minutes=-i))
    return auction


class TestSale:
    async def test_highest_bid_wins(
        self, store: FakeStore, clock: FakeClock, notifier: RecordingNotifier
    ) -> None:
        auction = _expired_unlocked(
            store, clock, [(COLLECTOR_A, 900), (COLLECTOR_B, 1200), (COLLECTOR_C, 1100)]
        )

        result = await _service(clock, notifier).sweep(store)

        assert result == SweepResult(sold=1, void=0)
        sold = store.auctions[auction.id]
        assert sold.status == "SOLD"
        assert sold.winner_id == COLLECTOR_B
        assert sold.fulfillment_status == "pending_payment"

    async def test_winner_and_designer_notified(
        self, store: FakeStore, clock: FakeClock, notifier: RecordingNotifier
    ) -> None:
        auction = _expired_unlocked(store, clock, [(COLLECTOR_A, 900), (COLLECTOR_B, 1200)])

        await _service(clock, notifier).sweep(store)

        data = {"auction_title": auction.title, "amount": 1200, "auction_id": auction.id}
        assert notifier.sent == [
            ("b@example.com", "auction_won", data),
            ("designer@example.com", "auction_sold", data),
        ]

    async def test_second_run_is_a_no_op(
        self, store: FakeStore, clock: FakeClock, notifier: RecordingNotifier
    ) -> None:
        _expired_unlocked(store, clock, [(COLLECTOR_A, 1100)])
        store.add_auction(end_time=clock.now - timedelta(hours=1))
        svc = _service(clock, notifier)

        first = await svc.sweep(store)
        second = await svc.sweep(store)

        assert first == SweepResult(sold=1, void=1)
        assert second == SweepResult(sold=0, void=0)
        assert len(notifier.sent) == 2

    async def test_unlocked_without_bids_gets_no_winner(
        self, store: FakeStore, clock: FakeClock, notifier: RecordingNotifier
    ) -> None:
        auction = _expired_unlocked(store, clock, [])

        result = await _service(clock, notifier).sweep(store)

        assert result == SweepResult(sold=0, void=0)
        assert store.auctions[auction.id].status == "UNLOCKED"
        assert store.auctions[auction.id].winner_id is None
        assert notifier.sent == []

    async def test_previous_cycle_bids_are_ignored(
        self, store: FakeStore, clock: FakeClock, notifier: RecordingNotifier
    ) -> None:
        auction = _expired_unlocked(store, clock, [(COLLECTOR_A, 900)])
        store.add_bid(auction.id, COLLECTOR_C, 5000, clock.now - timedelta(days=10))

        await _service(clock, notifier).sweep(store)

        assert store.auctions[auction.id].winner_id == COLLECTOR_A

    async def test_missing_profile_email_still_sells(
        self, store: FakeStore, clock: FakeClock, notifier: RecordingNotifier
    ) -> None:
        del store.profiles[COLLECTOR_A]
        auction = _expired_unlocked(store, clock, [(COLLECTOR_A, 1100)])

        result = await _service(clock, notifier).sweep(store)

        assert result.sold == 1
        assert store.auctions[auction.id].status == "SOLD"
        assert notifier.sent[0][0] is None


class TestVoid:
    async def test_expired_locked_is_voided_silently(
        self, store: FakeStore, clock: FakeClock, notifier: RecordingNotifier
    ) -> None:
        auction = store.add_auction(
            unique_bidder_count=2, end_time=clock.now - timedelta(seconds=1)
        )

        result = await _service(clock, notifier).sweep(store)

        assert result == SweepResult(sold=0, void=1)
        assert store.auctions[auction.id].status == "VOID"
        assert notifier.sent == []

    async def test_live_auctions_untouched(
        self, store: FakeStore, clock: FakeClock, notifier: RecordingNotifier
    ) -> None:
        locked = store.add_auction(end_time=clock.now + timedelta(hours=1))
        unlocked = store.add_auction(status="UNLOCKED", end_time=clock.now + timedelta(hours=1))

        result = await _service(clock, notifier).sweep(store)

        assert result == SweepResult(sold=0, void=0)
        assert store.auctions[locked.id].status == "LOCKED"
        assert store.auctions[unlocked.id].status == "UNLOCKED"


class TestPartialFailure:
    async def test_one_failing_auction_does_not_stop_the_run(
        self,
        store: FakeStore,
        clock: FakeClock,
        notifier: RecordingNotifier,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        broken = _expired_unlocked(store, clock, [(COLLECTOR_A, 1100)])
        healthy = _expired_unlocked(store, clock, [(COLLECTOR_B, 1300)])
        locked = store.add_auction(end_time=clock.now - timedelta(hours=1))

        class _FlakyLedger(FakeBidLedger):
            async def top_bid(self, db, auction_id, since):  # type: ignore[no-untyped-def]
                if auction_id == broken.id:
                    raise RuntimeError("ledger unavailable")
                return await super().top_bid(db, auction_id, since)

        with caplog.at_level(logging.ERROR):
            result = await _service(clock, notifier, bids=_FlakyLedger()).sweep(store)

        assert result == SweepResult(sold=1, void=1)
        assert store.auctions[broken.id].status == "UNLOCKED"
        assert store.auctions[healthy.id].status == "SOLD"
        assert store.auctions[locked.id].status == "VOID"
        assert broken.id in caplog.text


class TestLateBids:
    """Bids committed after the sweep listed its candidates."""

    async def test_bid_committed_before_row_lock_wins(
        self, store: FakeStore, clock: FakeClock, notifier: RecordingNotifier
    ) -> None:
        auction = _expired_unlocked(
            store, clock, [(COLLECTOR_A, 900), (COLLECTOR_B, 1200), (COLLECTOR_C, 1100)]
        )

        class _BidLandsFirst(FakeAuctionRepository):
            async def get_for_update(self, db, auction_id):  # type: ignore[no-untyped-def]
                current = db.auctions[auction_id]
                if current.current_price < 1500:
                    db.add_bid(auction_id, COLLECTOR_A, 1500, clock.now - timedelta(minutes=2))
                    db.auctions[auction_id] = replace(current, current_price=1500)
                return await super().get_for_update(db, auction_id)

        svc = SweepService(
            auctions=_BidLandsFirst(),
            bids=FakeBidLedger(),
            profiles=FakeProfileRepository(),
            notifier=notifier,
            clock=clock,
        )
        result = await svc.sweep(store)

        assert result.sold == 1
        assert store.auctions[auction.id].winner_id == COLLECTOR_A
        assert notifier.sent[0] == (
            "a@example.com",
            "auction_won",
            {"auction_title": auction.title, "amount": 1500, "auction_id": auction.id},
        )

    async def test_price_moved_after_top_bid_read_is_not_sold(
        self, store: FakeStore, clock: FakeClock, notifier: RecordingNotifier
    ) -> None:
        auction = _expired_unlocked(store, clock, [(COLLECTOR_A, 900), (COLLECTOR_B, 1200)])

        class _BidLandsAfterRead(FakeBidLedger):
            landed = False

            async def top_bid(self, db, auction_id, since):  # type: ignore[no-untyped-def]
                winning = await super().top_bid(db, auction_id, since)
                if not self.landed:
                    self.landed = True
                    db.add_bid(auction_id, COLLECTOR_A, 1500, clock.now - timedelta(minutes=2))
                    db.auctions[auction_id] = replace(db.auctions[auction_id], current_price=1500)
                return winning

        svc = _service(clock, notifier, bids=_BidLandsAfterRead())

        first = await svc.sweep(store)
        assert first.sold == 0
        assert store.auctions[auction.id].status == "UNLOCKED"
        assert store.auctions[auction.id].winner_id is None
        assert notifier.sent == []

        second = await svc.sweep(store)
        assert second.sold == 1
        assert store.auctions[auction.id].winner_id == COLLECTOR_A

    async def test_top_bid_below_price_is_left_for_next_run(
        self, store: FakeStore, clock: FakeClock, notifier: RecordingNotifier
    ) -> None:
        auction = _expired_unlocked(store, clock, [(COLLECTOR_A, 900), (COLLECTOR_B, 1200)])
        store.auctions[auction.id] = replace(store.auctions[auction.id], current_price=1500)

        result = await _service(clock, notifier).sweep(store)

        assert result.sold == 0
        assert store.auctions[auction.id].status == "UNLOCKED"

    async def test_auction_resolved_before_lock_is_skipped(
        self, store: FakeStore, clock: FakeClock, notifier: RecordingNotifier
    ) -> None:
        auction = _expired_unlocked(store, clock, [(COLLECTOR_A, 900), (COLLECTOR_B, 1200)])

        class _ResolvedElsewhere(FakeAuctionRepository):
            async def get_for_update(self, db, auction_id):  # type: ignore[no-untyped-def]
                db.auctions[auction_id] = replace(
                    db.auctions[auction_id], status="SOLD", winner_id=COLLECTOR_C
                )
                return await super().get_for_update(db, auction_id)

        svc = SweepService(
            auctions=_ResolvedElsewhere(),
            bids=FakeBidLedger(),
            profiles=FakeProfileRepository(),
            notifier=notifier,
            clock=clock,
        )
        result = await svc.sweep(store)

        assert result.sold == 0
        assert store.auctions[auction.id].winner_id == COLLECTOR_C
        assert notifier.sent == []
