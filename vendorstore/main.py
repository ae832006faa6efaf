from __future__ import annotations

import json
import sys
from contextlib import contextmanager
from typing import Generator, List, Optional

import typer

from vendorstore.config import build_dsn, get_settings
from vendorstore.domain.errors import (
    EditConflictError,
    RecordNotFoundError,
    RetryableStoreError,
    StoreError,
    ValidationError,
)
from vendorstore.domain.filters import parse_list_query
from vendorstore.domain.models import Vendor, VendorPatch, merge_patch, validate_vendor
from vendorstore.domain.validation import Validator
from vendorstore.infrastructure.db_factory import get_sync_connection
from vendorstore.infrastructure.schema import apply_schema
from vendorstore.reporter import print_validation_errors, print_vendor, print_vendors
from vendorstore.store.abstract import ResourceStore
from vendorstore.store.postgres import VendorStore
from vendorstore.utils.logging import configure_logging

app = typer.Typer(help="Vendor store CLI.")

EXIT_INTERNAL = 1
EXIT_VALIDATION = 2
EXIT_NOT_FOUND = 3
EXIT_EDIT_CONFLICT = 4
EXIT_RETRYABLE = 5


def _split_genres(value: Optional[str]) -> Optional[List[str]]:
    if value is None:
        return None
    return [genre.strip() for genre in value.split(",") if genre.strip()]


def _store() -> ResourceStore:
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)
    return VendorStore.from_settings(settings)


@contextmanager
def _store_errors() -> Generator[None, None, None]:
    """Map store errors to messages and exit codes."""
    try:
        yield
    except ValidationError as exc:
        print_validation_errors(exc.errors)
        raise typer.Exit(EXIT_VALIDATION) from exc
    except RecordNotFoundError as exc:
        typer.echo("the requested vendor could not be found", err=True)
        raise typer.Exit(EXIT_NOT_FOUND) from exc
    except EditConflictError as exc:
        typer.echo(
            "unable to update the vendor due to an edit conflict, please try again",
            err=True,
        )
        raise typer.Exit(EXIT_EDIT_CONFLICT) from exc
    except RetryableStoreError as exc:
        typer.echo(f"store temporarily unavailable: {exc}", err=True)
        raise typer.Exit(EXIT_RETRYABLE) from exc
    except StoreError as exc:
        typer.echo("the store encountered a problem and could not process the request", err=True)
        raise typer.Exit(EXIT_INTERNAL) from exc


def _emit(vendor: Vendor, as_json: bool) -> None:
    if as_json:
        typer.echo(vendor.model_dump_json())
    else:
        print_vendor(vendor)


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"DB={settings.db_user}@{settings.db_host}:{settings.db_port}/{settings.db_name} | "
        f"statement_timeout={settings.db_statement_timeout_ms}ms "
        f"pool=({settings.db_pool_min_size},{settings.db_pool_max_size}) "
        f"pool_timeout={settings.db_pool_timeout_seconds}s"
    )


@app.command("init-db")
def init_db(
    dsn: Optional[str] = typer.Option(None, "--dsn", help="Optional DSN override for Postgres."),
) -> None:
    """
    Create the vendors table and its search indexes.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)
    with get_sync_connection(dsn or build_dsn(settings)) as conn:
        apply_schema(conn)
    typer.echo("Schema ready.")


@app.command()
def create(
    title: str = typer.Option(..., "--title", "-t"),
    year: int = typer.Option(..., "--year", "-y"),
    runtime: int = typer.Option(..., "--runtime", "-r", help="Runtime in minutes."),
    genres: str = typer.Option(..., "--genres", "-g", help="Comma-separated genres."),
    as_json: bool = typer.Option(False, "--json", help="Print the vendor as JSON."),
) -> None:
    """
    Validate and insert a new vendor.
    """
    vendor = Vendor(title=title, year=year, runtime=runtime, genres=_split_genres(genres) or [])
    with _store_errors():
        v = Validator()
        validate_vendor(v, vendor)
        v.raise_if_invalid()
        created = _store().insert(vendor)
    _emit(created, as_json)


@app.command()
def show(
    vendor_id: int = typer.Argument(..., help="Vendor id."),
    as_json: bool = typer.Option(False, "--json", help="Print the vendor as JSON."),
) -> None:
    """
    Show one vendor.
    """
    with _store_errors():
        vendor = _store().get(vendor_id)
    _emit(vendor, as_json)


@app.command()
def update(
    vendor_id: int = typer.Argument(..., help="Vendor id."),
    title: Optional[str] = typer.Option(None, "--title", "-t"),
    year: Optional[int] = typer.Option(None, "--year", "-y"),
    runtime: Optional[int] = typer.Option(None, "--runtime", "-r"),
    genres: Optional[str] = typer.Option(None, "--genres", "-g", help="Comma-separated genres."),
    expected_version: Optional[int] = typer.Option(
        None,
        "--expected-version",
        help="Version the change was based on; defaults to the version just fetched.",
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the vendor as JSON."),
) -> None:
    """
    Apply a partial change to a vendor, guarded by its version.
    """
    patch = VendorPatch(title=title, year=year, runtime=runtime, genres=_split_genres(genres))
    with _store_errors():
        store = _store()
        vendor = merge_patch(store.get(vendor_id), patch)
        if expected_version is not None:
            vendor = vendor.model_copy(update={"version": expected_version})
        v = Validator()
        validate_vendor(v, vendor)
        v.raise_if_invalid()
        updated = store.update(vendor)
    _emit(updated, as_json)


@app.command()
def delete(vendor_id: int = typer.Argument(..., help="Vendor id.")) -> None:
    """
    Delete a vendor permanently.
    """
    with _store_errors():
        _store().delete(vendor_id)
    typer.echo("vendor successfully deleted")


@app.command("list")
def list_vendors(
    title: str = typer.Option("", "--title", "-t", help="Full-text title query."),
    genres: str = typer.Option("", "--genres", "-g", help="Comma-separated required genres."),
    page: str = typer.Option("1", "--page", "-p"),
    page_size: Optional[str] = typer.Option(None, "--page-size", "-n"),
    sort: str = typer.Option("id", "--sort", "-s", help="Column, '-' prefix for descending."),
    as_json: bool = typer.Option(False, "--json", help="Print the page as JSON."),
) -> None:
    """
    Search, sort and paginate vendors.
    """
    settings = get_settings()
    params = {
        "title": title,
        "genres": genres,
        "page": page,
        "page_size": page_size or str(settings.default_page_size),
        "sort": sort,
    }
    with _store_errors():
        v = Validator()
        title_query, genre_filter, filters = parse_list_query(
            params, v, default_page_size=settings.default_page_size
        )
        v.raise_if_invalid()
        vendors, metadata = _store().get_all(title_query, genre_filter, filters)

    if as_json:
        payload = {
            "vendors": [vendor.model_dump(mode="json") for vendor in vendors],
            "metadata": metadata.model_dump(mode="json"),
        }
        typer.echo(json.dumps(payload, indent=2))
    else:
        print_vendors(vendors, metadata)


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
