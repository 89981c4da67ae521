"""Integer arithmetic utilities for euro amounts.

All prices and bid amounts are whole euros stored as int. No float, no Decimal.
"""

# The floor suggests this step above the current price; only "strictly
# greater" is enforced by the bidding protocol.
SUGGESTED_BID_INCREMENT = 100


def format_eur(amount: int) -> str:
    """Format a whole-euro amount for display: 1100 -> '€1,100', -50 -> '-€50'."""
    if amount < 0:
        return f"-€{-amount:,}"
    return f"€{amount:,}"


def suggested_min_bid(current_price: int) -> int:
    return current_price + SUGGESTED_BID_INCREMENT
