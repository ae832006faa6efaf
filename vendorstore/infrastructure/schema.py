"""
Schema management for the `vendors` table.

The DDL is idempotent so `apply_schema` can run on every start-up and from
test fixtures.
"""

from __future__ import annotations

from psycopg import Connection

from vendorstore.utils.logging import get_logger

log = get_logger(__name__)

VENDORS_DDL = """
CREATE TABLE IF NOT EXISTS public.vendors (
    id bigserial PRIMARY KEY,
    created_at timestamp(0) with time zone NOT NULL DEFAULT now(),
    title text NOT NULL,
    year integer NOT NULL,
    runtime integer NOT NULL,
    genres text[] NOT NULL,
    version integer NOT NULL DEFAULT 1,
    CONSTRAINT vendors_runtime_check CHECK (runtime > 0),
    CONSTRAINT vendors_year_check CHECK (year BETWEEN 1888 AND date_part('year', now())),
    CONSTRAINT genres_length_check CHECK (array_length(genres, 1) BETWEEN 1 AND 5)
);

CREATE INDEX IF NOT EXISTS vendors_title_idx
    ON public.vendors USING GIN (to_tsvector('simple', title));

CREATE INDEX IF NOT EXISTS vendors_genres_idx
    ON public.vendors USING GIN (genres);
"""


def apply_schema(conn: Connection) -> None:
    """Create the vendors table and its search indexes if missing."""
    with conn.cursor() as cur:
        cur.execute(VENDORS_DDL)
    conn.commit()
    log.info("Vendor schema applied")


def truncate_vendors(conn: Connection) -> None:
    """Remove every vendor and reset the id sequence."""
    with conn.cursor() as cur:
        cur.execute("TRUNCATE TABLE public.vendors RESTART IDENTITY;")
    conn.commit()


__all__ = ["VENDORS_DDL", "apply_schema", "truncate_vendors"]
