"""003: create auctions table

Revision ID: 003
Revises: 002
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE auctions (
            id                      UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            designer_id             UUID            NOT NULL REFERENCES profiles (id),
            title                   VARCHAR(200)    NOT NULL,
            description             TEXT,
            materials               TEXT,
            sizing                  TEXT,
            images                  TEXT[]          NOT NULL DEFAULT '{}',
            start_price             BIGINT          NOT NULL,
            current_price           BIGINT          NOT NULL,
            status                  VARCHAR(16)     NOT NULL DEFAULT 'LOCKED',
            required_bidders        INT             NOT NULL DEFAULT 3,
            unique_bidder_count     INT             NOT NULL DEFAULT 0,
            end_time                TIMESTAMPTZ     NOT NULL,
            cycle_started_at        TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            winner_id               UUID            REFERENCES profiles (id),
            fulfillment_status      VARCHAR(32),
            tracking_number         VARCHAR(128),
            shipped_at              TIMESTAMPTZ,
            created_at              TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at              TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_auctions_start_price_gt_0     CHECK (start_price > 0),
            CONSTRAINT ck_auctions_price_gte_start      CHECK (current_price >= start_price),
            CONSTRAINT ck_auctions_required_bidders     CHECK (required_bidders > 0),
            CONSTRAINT ck_auctions_bidder_count_gte_0   CHECK (unique_bidder_count >= 0),
            CONSTRAINT ck_auctions_status CHECK (
                status IN ('LOCKED', 'UNLOCKED', 'SOLD', 'VOID')
            ),
            CONSTRAINT ck_auctions_sold_has_winner CHECK (
                status <> 'SOLD' OR winner_id IS NOT NULL
            ),
            CONSTRAINT ck_auctions_fulfillment CHECK (
                fulfillment_status IS NULL OR fulfillment_status IN (
                    'pending_payment', 'address_collected', 'shipped'
                )
            )
        );
    """)
    op.execute("CREATE INDEX idx_auctions_status_end_time ON auctions (status, end_time);")
    op.execute("CREATE INDEX idx_auctions_designer ON auctions (designer_id);")
    op.execute("""
        CREATE TRIGGER trg_auctions_updated_at
            BEFORE UPDATE ON auctions
            FOR EACH ROW EXECUTE FUNCTION fn_touch_updated_at();
    """)
    op.execute("COMMENT ON TABLE auctions IS 'Listed pieces and their unlock/sale state';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS auctions CASCADE;")
