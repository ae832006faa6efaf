from __future__ import annotations

from typing import Dict, List

from rich import box
from rich.console import Console
from rich.table import Table

from vendorstore.domain.metadata import Metadata
from vendorstore.domain.models import Vendor, format_runtime


def _vendor_table(title: str) -> Table:
    table = Table(title=title, box=box.ROUNDED, show_lines=False)
    table.add_column("ID", justify="right", style="cyan", no_wrap=True)
    table.add_column("Title", style="bold")
    table.add_column("Year", justify="right")
    table.add_column("Runtime", justify="right")
    table.add_column("Genres")
    table.add_column("Version", justify="right", style="magenta")
    return table


def _add_vendor_row(table: Table, vendor: Vendor) -> None:
    table.add_row(
        str(vendor.id),
        vendor.title,
        str(vendor.year),
        format_runtime(vendor.runtime),
        ", ".join(vendor.genres),
        str(vendor.version),
    )


def print_vendor(vendor: Vendor, console: Console | None = None) -> None:
    """Render a single vendor as a one-row table."""
    console = console or Console()
    table = _vendor_table(f"Vendor {vendor.id}")
    _add_vendor_row(table, vendor)
    console.print(table)


def print_vendors(
    vendors: List[Vendor], metadata: Metadata, console: Console | None = None
) -> None:
    """
    Render a listing page as a rich table followed by its paging metadata.
    """
    console = console or Console()

    if not vendors:
        console.print("[yellow]No vendors on this page.[/yellow]")
    else:
        table = _vendor_table("Vendors")
        for vendor in vendors:
            _add_vendor_row(table, vendor)
        console.print(table)

    if metadata.total_records == 0:
        console.print("[dim]0 matching records[/dim]")
        return
    console.print(
        f"[dim]page {metadata.current_page} of {metadata.last_page} "
        f"(page size {metadata.page_size}, {metadata.total_records} matching records)[/dim]"
    )


def print_validation_errors(errors: Dict[str, str], console: Console | None = None) -> None:
    console = console or Console(stderr=True)
    table = Table(title="Validation failed", box=box.SIMPLE, title_style="bold red")
    table.add_column("Field", style="red")
    table.add_column("Problem")
    for key, message in errors.items():
        table.add_row(key, message)
    console.print(table)


__all__ = ["print_validation_errors", "print_vendor", "print_vendors"]
