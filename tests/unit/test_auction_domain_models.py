"""Unit tests for the Auction unlock state machine."""

from datetime import timedelta

import pytest

from src.at_common.enums import AuctionStatus
from tests.unit.fakes import T0, FakeStore


def _auction(**overrides):  # type: ignore[no-untyped-def]
    return FakeStore().add_auction(**overrides)


def test_accepted_bid_sets_price_and_count() -> None:
    updated = _auction().with_accepted_bid(1100, 1)
    assert updated.current_price == 1100
    assert updated.unique_bidder_count == 1
    assert updated.status == AuctionStatus.LOCKED


def test_reaching_threshold_unlocks() -> None:
    updated = _auction(unique_bidder_count=2).with_accepted_bid(1400, 3)
    assert updated.status == AuctionStatus.UNLOCKED


def test_unlocked_never_relocks() -> None:
    updated = _auction(status="UNLOCKED", unique_bidder_count=3).with_accepted_bid(1500, 1)
    assert updated.status == AuctionStatus.UNLOCKED
    assert updated.unique_bidder_count == 3


def test_original_is_unchanged() -> None:
    auction = _auction()
    auction.with_accepted_bid(1100, 1)
    assert auction.current_price == 1000
    assert auction.unique_bidder_count == 0


@pytest.mark.parametrize(
    ("status", "open_"),
    [("LOCKED", True), ("UNLOCKED", True), ("SOLD", False), ("VOID", False)],
)
def test_accepts_bids_only_while_open(status: str, open_: bool) -> None:
    assert _auction(status=status).accepts_bids is open_


def test_has_expired_is_strict() -> None:
    auction = _auction(end_time=T0)
    assert not auction.has_expired(T0)
    assert auction.has_expired(T0 + timedelta(microseconds=1))
