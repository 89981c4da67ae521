"""004: create bids table (append-only ledger)

Revision ID: 004
Revises: 003
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE bids (
            id              UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            auction_id      UUID            NOT NULL REFERENCES auctions (id) ON DELETE RESTRICT,
            user_id         UUID            NOT NULL REFERENCES profiles (id),
            amount          BIGINT          NOT NULL,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_bids_amount_gt_0 CHECK (amount > 0)
        );
    """)
    op.execute("CREATE INDEX idx_bids_auction_amount ON bids (auction_id, amount DESC);")
    op.execute("CREATE INDEX idx_bids_auction_created ON bids (auction_id, created_at DESC);")
    op.execute("""
        CREATE OR REPLACE FUNCTION fn_bids_immutable()
        RETURNS TRIGGER AS $$
        BEGIN
            RAISE EXCEPTION 'bids are append-only';
        END;
        $$ LANGUAGE plpgsql;
    """)
    op.execute("""
        CREATE TRIGGER trg_bids_immutable
            BEFORE UPDATE OR DELETE ON bids
            FOR EACH ROW EXECUTE FUNCTION fn_bids_immutable();
    """)
    op.execute("COMMENT ON TABLE bids IS 'Bid ledger, rows are never updated or deleted';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS bids CASCADE;")
    op.execute("DROP FUNCTION IF EXISTS fn_bids_immutable();")
