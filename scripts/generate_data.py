"""
Seed a development database with synthetic vendors.

Vendors are drawn from a seeded RNG, checked against the same validation the
CLI applies, written to CSV and bulk-loaded with PostgreSQL COPY.

    python scripts/generate_data.py --rows 50000 --init-schema --truncate
"""

from __future__ import annotations

import csv
import random
import sys
import tempfile
import time
from datetime import datetime
from pathlib import Path
from typing import Iterator

import typer

from vendorstore.config import build_dsn
from vendorstore.domain.models import MAX_GENRES, MIN_YEAR, Vendor, validate_vendor
from vendorstore.domain.validation import Validator
from vendorstore.infrastructure.db_factory import get_sync_connection
from vendorstore.infrastructure.schema import apply_schema, truncate_vendors

app = typer.Typer(help="Generate synthetic vendors and load them into Postgres (CSV + COPY).")

GENRES = [
    "Action",
    "Adventure",
    "Animation",
    "Comedy",
    "Crime",
    "Documentary",
    "Drama",
    "Fantasy",
    "Horror",
    "Romance",
    "Sci-Fi",
    "Thriller",
    "Western",
]
ADJECTIVES = ["Silent", "Crimson", "Last", "Hidden", "Golden", "Broken", "Distant", "Wild"]
NOUNS = ["Harbor", "Empire", "Signal", "Garden", "Frontier", "Mirror", "River", "Machine"]

CSV_HEADER = ["title", "year", "runtime", "genres"]

COPY_VENDORS = """
    COPY public.vendors (title, year, runtime, genres)
    FROM STDIN WITH (FORMAT csv, HEADER TRUE)"""


def _pg_array(values: list[str]) -> str:
    """Render a text[] literal for COPY; every element is quoted."""
    quoted = ['"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"' for value in values]
    return "{" + ",".join(quoted) + "}"


def _random_vendors(count: int, seed: int) -> Iterator[Vendor]:
    rng = random.Random(seed)
    current_year = datetime.now().year
    for n in range(1, count + 1):
        vendor = Vendor(
            title=f"The {rng.choice(ADJECTIVES)} {rng.choice(NOUNS)} {n}",
            year=rng.randint(MIN_YEAR, current_year),
            runtime=rng.randint(60, 210),
            genres=rng.sample(GENRES, rng.randint(1, MAX_GENRES)),
        )
        v = Validator()
        validate_vendor(v, vendor)
        v.raise_if_invalid()
        yield vendor


def _generate_rows_csv(csv_path: Path, rows: int, seed: int) -> None:
    with csv_path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(CSV_HEADER)
        writer.writerows(
            [vendor.title, vendor.year, vendor.runtime, _pg_array(vendor.genres)]
            for vendor in _random_vendors(rows, seed)
        )


def _copy_into_db(dsn: str, csv_path: Path, init_schema: bool, truncate: bool) -> int:
    with get_sync_connection(dsn) as conn:
        if init_schema:
            apply_schema(conn)
        if truncate:
            truncate_vendors(conn)
        with conn.cursor() as cur:
            with cur.copy(COPY_VENDORS) as copy:
                with csv_path.open("rb") as f:
                    while chunk := f.read(1 << 16):
                        copy.write(chunk)
            loaded = cur.rowcount
        conn.commit()
    return loaded


@app.command()
def main(
    rows: int = typer.Option(1_000, "--rows", "-r", help="Number of vendors to generate."),
    seed: int = typer.Option(42, "--seed", help="Deterministic RNG seed."),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="CSV output path (a temp file when omitted).",
    ),
    dsn: str | None = typer.Option(None, "--dsn", help="Optional DSN override for Postgres."),
    init_schema: bool = typer.Option(False, "--init-schema", help="Create the vendors table first."),
    truncate: bool = typer.Option(False, "--truncate", help="Remove existing vendors first."),
    no_load: bool = typer.Option(False, "--no-load", help="Only write the CSV."),
) -> None:
    """
    Generate synthetic vendors and optionally COPY them into Postgres.
    """
    if output is None:
        output = Path(tempfile.mkdtemp(prefix="vendor_csv_")) / "vendors.csv"
    output.parent.mkdir(parents=True, exist_ok=True)

    start = time.perf_counter()
    _generate_rows_csv(output, rows=rows, seed=seed)
    typer.echo(f"Wrote {rows:,} vendors to {output} in {time.perf_counter() - start:.2f}s")

    if no_load:
        return

    start = time.perf_counter()
    loaded = _copy_into_db(dsn or build_dsn(), output, init_schema=init_schema, truncate=truncate)
    typer.echo(f"Loaded {loaded:,} vendors in {time.perf_counter() - start:.2f}s")


if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)
