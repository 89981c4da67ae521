"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth/Profile
  3xxx: Auction
  4xxx: Bid
  9xxx: System

Messages are shown to collectors verbatim, so treat them as part of the API.
"""

from typing import Any

from src.at_common.money import format_eur


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        self.details = details
        super().__init__(message)


# --- 1xxx: Auth/Profile ---

class UnauthorizedError(AppError):
    def __init__(self) -> None:
        super().__init__(1001, "Unauthorized", 401)


class ForbiddenError(AppError):
    def __init__(self, detail: str = "Forbidden") -> None:
        super().__init__(1002, detail, 403)


# --- 3xxx: Auction ---

class AuctionNotFoundError(AppError):
    def __init__(self, auction_id: str) -> None:
        super().__init__(3001, "Auction not found", 404, {"auction_id": auction_id})


class AuctionEndedError(AppError):
    def __init__(self) -> None:
        super().__init__(3002, "This auction has ended", 400)


class AuctionNotDeletableError(AppError):
    def __init__(self, reason: str) -> None:
        super().__init__(3003, f"Auction cannot be removed: {reason}", 409)


class AuctionNotReactivatableError(AppError):
    def __init__(self) -> None:
        super().__init__(3004, "Can only reactivate SOLD items", 400)


class InvalidEndTimeError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(3005, detail, 400)


class InvalidStartPriceError(AppError):
    def __init__(self) -> None:
        super().__init__(3006, "Please enter a valid starting price", 400)


class FulfillmentStateError(AppError):
    def __init__(self, detail: str, fulfillment_status: str | None) -> None:
        super().__init__(3007, detail, 409, {"fulfillment_status": fulfillment_status})


# --- 4xxx: Bid ---

class InvalidBidderError(AppError):
    def __init__(self) -> None:
        super().__init__(4001, "You cannot bid on your own auction", 400)


class BidTooLowError(AppError):
    def __init__(self, current_price: int) -> None:
        self.current_price = current_price
        super().__init__(
            4002,
            f"Bid must be higher than current price of {format_eur(current_price)}",
            400,
            {"current_price": current_price},
        )


# --- 9xxx: System ---

class RateLimitError(AppError):
    def __init__(self, reset_time: int) -> None:
        self.reset_time = reset_time
        super().__init__(
            9001,
            "Too many requests. Please wait before placing another bid.",
            429,
            {"reset_time": reset_time},
        )


class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)


class PersistenceError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(9003, detail, 500)
