"""005: create shipping_addresses table

Revision ID: 005
Revises: 004
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE shipping_addresses (
            id              UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            auction_id      UUID            NOT NULL REFERENCES auctions (id) ON DELETE CASCADE,
            user_id         UUID            NOT NULL REFERENCES profiles (id),
            full_name       VARCHAR(200)    NOT NULL,
            address_line1   VARCHAR(200)    NOT NULL,
            address_line2   VARCHAR(200),
            city            VARCHAR(100)    NOT NULL,
            state           VARCHAR(100),
            postal_code     VARCHAR(32)     NOT NULL,
            country         VARCHAR(2)      NOT NULL,
            phone           VARCHAR(32),
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_shipping_addresses_auction UNIQUE (auction_id)
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_shipping_addresses_updated_at
            BEFORE UPDATE ON shipping_addresses
            FOR EACH ROW EXECUTE FUNCTION fn_touch_updated_at();
    """)
    op.execute(
        "COMMENT ON TABLE shipping_addresses IS 'Where the winner of a SOLD auction wants it sent';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS shipping_addresses CASCADE;")
