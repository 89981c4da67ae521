import pytest

from src.at_common.money import SUGGESTED_BID_INCREMENT, format_eur, suggested_min_bid


@pytest.mark.parametrize(
    ("amount", "expected"),
    [(0, "€0"), (950, "€950"), (1100, "€1,100"), (1_250_000, "€1,250,000"), (-50, "-€50")],
)
def test_format_eur(amount: int, expected: str) -> None:
    assert format_eur(amount) == expected


def test_suggested_min_bid() -> None:
    assert suggested_min_bid(1000) == 1000 + SUGGESTED_BID_INCREMENT == 1100
