"""ShippingAddressRepository: the winner's delivery details, one row per auction.

A reactivated auction keeps the previous winner's row until the next winner
overwrites it, so reads are always scoped to the current winner.
"""

from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.at_auction.domain.models import ShippingAddress

_COLUMNS = """
    auction_id, user_id, full_name, address_line1, address_line2,
    city, state, postal_code, country, phone, created_at, updated_at
"""

_UPSERT_ADDRESS_SQL = text(f"""
    INSERT INTO shipping_addresses (auction_id, user_id, full_name, address_line1,
        address_line2, city, state, postal_code, country, phone)
    VALUES (CAST(:auction_id AS UUID), CAST(:user_id AS UUID), :full_name, :address_line1,
        :address_line2, :city, :state, :postal_code, :country, :phone)
    ON CONFLICT (auction_id) DO UPDATE SET
        user_id = EXCLUDED.user_id,
        full_name = EXCLUDED.full_name,
        address_line1 = EXCLUDED.address_line1,
        address_line2 = EXCLUDED.address_line2,
        city = EXCLUDED.city,
        state = EXCLUDED.state,
        postal_code = EXCLUDED.postal_code,
        country = EXCLUDED.country,
        phone = EXCLUDED.phone
    RETURNING {_COLUMNS}
""")

_GET_ADDRESS_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM shipping_addresses
    WHERE auction_id = CAST(:auction_id AS UUID)
      AND user_id = CAST(:user_id AS UUID)
""")


def _row_to_address(row: Any) -> ShippingAddress:
    return ShippingAddress(
        auction_id=str(row.auction_id),
        user_id=str(row.user_id),
        full_name=row.full_name,
        address_line1=row.address_line1,
        address_line2=row.address_line2,
        city=row.city,
        state=row.state,
        postal_code=row.postal_code,
        country=row.country,
        phone=row.phone,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class ShippingAddressRepository:
    async def upsert(self, db: AsyncSession, address: ShippingAddress) -> ShippingAddress:
        result = await db.execute(
            _UPSERT_ADDRESS_SQL,
            {
                "auction_id": address.auction_id,
                "user_id": address.user_id,
                "full_name": address.full_name,
                "address_line1": address.address_line1,
                "address_line2": address.address_line2,
                "city": address.city,
                "state": address.state,
                "postal_code": address.postal_code,
                "country": address.country,
                "phone": address.phone,
            },
        )
        return _row_to_address(result.fetchone())

    async def get_for_auction(
        self, db: AsyncSession, auction_id: str, user_id: str
    ) -> ShippingAddress | None:
        result = await db.execute(
            _GET_ADDRESS_SQL, {"auction_id": auction_id, "user_id": user_id}
        )
        row = result.fetchone()
        return _row_to_address(row) if row else None
