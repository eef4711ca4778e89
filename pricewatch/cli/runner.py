# pricewatch/cli/runner.py

"""Headless CLI commands: update prices, show history, health check."""

import json
import logging
import sys
from collections.abc import Callable, Sequence
from pathlib import Path

from rich.console import Console
from rich.table import Table

from pricewatch.config.settings import Settings
from pricewatch.errors import (
    CatalogError,
    HistoryFormatError,
    ProviderUnavailableError,
)
from pricewatch.models.product import Product
from pricewatch.models.snapshot import ProductSnapshot, RunSnapshot
from pricewatch.scrapers.page import PageProvider
from pricewatch.scrapers.page_provider import HttpPageProvider
from pricewatch.services.stats import compute_stats
from pricewatch.services.update_orchestrator import UpdateOrchestrator
from pricewatch.storage.catalog import load_catalog
from pricewatch.storage.file_manager import FileManager
from pricewatch.storage.history_ledger import load_ledger, save_ledger

logger = logging.getLogger("pricewatch.cli")

# Stderr console for status messages so stdout stays clean for JSON
_err = Console(stderr=True)

ProviderFactory = Callable[[Path | None], PageProvider]


def _default_provider(debug_dir: Path | None) -> PageProvider:
    return HttpPageProvider(debug_dir=debug_dir)


def _close(provider: PageProvider) -> None:
    close = getattr(provider, "close", None)
    if callable(close):
        close()


def _format_price(value: object, currency: str = "") -> str:
    if value is None:
        return "N/A"
    amount = f"{float(str(value)):,.2f}"
    return f"{amount} {currency}".strip()


def select_rows(
    products: Sequence[ProductSnapshot],
    sort: str = "name",
    only: str | None = None,
) -> list[ProductSnapshot]:
    """Filter (``priced`` / ``missing``) and sort (``best`` / ``name``)."""
    rows = list(products)
    if only == "priced":
        rows = [p for p in rows if p.best is not None]
    elif only == "missing":
        rows = [p for p in rows if p.best is None]

    if sort == "best":
        rows.sort(
            key=lambda p: (p.best is None, p.best.price if p.best else 0)
        )
    else:
        rows.sort(key=lambda p: p.name.casefold())
    return rows


def _print_snapshot_table(rows: Sequence[ProductSnapshot]) -> None:
    """Render a Rich table of the run's best prices to stdout."""
    table = Table(
        title="Best Prices",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("#", style="dim", width=4)
    table.add_column("Product", max_width=50)
    table.add_column("Best", justify="right", style="green")
    table.add_column("Store", style="magenta")
    table.add_column("Change", justify="right")
    table.add_column("Other offers / error", overflow="fold", style="dim")

    for idx, p in enumerate(rows, 1):
        change = p.trend.get("change_percent") if p.trend else None
        if p.best is not None:
            others = " • ".join(
                f"{o.store}: {_format_price(o.price)}"
                for o in p.offers
                if o.url != p.best.url
            )
        else:
            others = p.error or ""
        table.add_row(
            str(idx),
            p.name,
            _format_price(p.best.price if p.best else None, Settings.CURRENCY),
            p.best.store if p.best else "—",
            f"{change:+.2f}%" if isinstance(change, float) else "—",
            others or "—",
        )

    Console().print(table)


def _print_summary(snapshot: RunSnapshot) -> None:
    priced = sum(1 for p in snapshot.products if p.best is not None)
    missing = len(snapshot.products) - priced
    detail = f" ({missing} without price)" if missing else ""
    _err.print(
        f"[green]✓ {priced} of {len(snapshot.products)} products priced"
        f"{detail}[/green]"
    )


def run_update(
    catalog_path: Path | None = None,
    output_dir: Path | None = None,
    output_format: str = "json",
    export_csv: bool = False,
    sort: str = "name",
    only: str | None = None,
    provider_factory: ProviderFactory = _default_provider,
) -> int:
    """Run one price update and return an exit code (0=ok, 1=fatal)."""
    catalog = catalog_path or Settings.CATALOG_PATH
    try:
        products = load_catalog(catalog)
    except CatalogError as exc:
        logger.critical("Catalog unreadable: %s", exc)
        _err.print(f"[red]Catalog error: {exc}[/red]")
        return 1

    file_manager = FileManager(output_dir)
    try:
        ledger = load_ledger(file_manager.history_path)
    except HistoryFormatError as exc:
        logger.critical("History unreadable: %s", exc)
        _err.print(f"[red]History error: {exc}[/red]")
        return 1

    debug_dir = Settings.DEBUG_DIR if Settings.CAPTURE_DIAGNOSTICS else None
    try:
        provider = provider_factory(debug_dir)
    except ProviderUnavailableError as exc:
        logger.critical("Page provider unavailable: %s", exc)
        _err.print(f"[red]Page provider unavailable: {exc}[/red]")
        return 1

    _err.print(
        f"[bold]Updating {len(products)} products[/bold] "
        f"[dim]catalog={catalog}[/dim]"
    )
    try:
        snapshot = UpdateOrchestrator(provider, ledger).run(products)
    finally:
        _close(provider)

    snapshot_path = file_manager.save_snapshot(snapshot)
    history_path = save_ledger(ledger, file_manager.history_path)
    _err.print(f"[dim]Saved snapshot → {snapshot_path}[/dim]")
    _err.print(f"[dim]Saved history → {history_path}[/dim]")
    if export_csv:
        csv_path = file_manager.export_csv(snapshot)
        _err.print(f"[dim]Exported CSV → {csv_path}[/dim]")

    _print_summary(snapshot)

    if output_format == "table":
        _print_snapshot_table(select_rows(snapshot.products, sort, only))
    else:
        json.dump(snapshot.to_dict(), sys.stdout, ensure_ascii=False, indent=2)
        sys.stdout.write("\n")
    return 0


def show_history(
    product_id: str | None = None,
    output_dir: Path | None = None,
) -> int:
    """Print ledger statistics for one or all products."""
    file_manager = FileManager(output_dir)
    try:
        ledger = load_ledger(file_manager.history_path)
    except HistoryFormatError as exc:
        _err.print(f"[red]History error: {exc}[/red]")
        return 1

    product_ids = [product_id] if product_id else ledger.product_ids()
    if not product_ids or not any(ledger.entries(p) for p in product_ids):
        _err.print("[yellow]No price history recorded.[/yellow]")
        return 1

    table = Table(
        title="Price History",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("Product", style="bold")
    table.add_column("Entries", justify="right")
    table.add_column("First", justify="right")
    table.add_column("Latest", justify="right", style="green")
    table.add_column("Min", justify="right")
    table.add_column("Max", justify="right")
    table.add_column("Change", justify="right")
    table.add_column("Last Δ", justify="right")

    for pid in product_ids:
        stats = compute_stats(ledger.entries(pid))
        if stats is None:
            continue
        change = stats.change_percent
        delta = stats.last_delta
        table.add_row(
            pid,
            str(stats.count),
            _format_price(stats.first.price),
            f"{_format_price(stats.last.price)} ({stats.last.store})",
            f"{_format_price(stats.min_entry.price)} ({stats.min_entry.store})",
            f"{_format_price(stats.max_entry.price)} ({stats.max_entry.store})",
            f"{change:+.2f}%" if change is not None else "—",
            f"{delta:+,.2f}" if delta is not None else "—",
        )

    Console().print(table)
    return 0


def run_health_check(
    catalog_path: Path | None = None,
    provider_factory: ProviderFactory = _default_provider,
) -> int:
    """Probe every catalog source; exit 1 if any is down or blocked."""
    from pricewatch.services.health_checker import HealthChecker

    try:
        products: list[Product] = load_catalog(
            catalog_path or Settings.CATALOG_PATH
        )
        provider = provider_factory(None)
    except (CatalogError, ProviderUnavailableError) as exc:
        _err.print(f"[red]{exc}[/red]")
        return 1

    _err.print("[bold]Running source health check...[/bold]")
    try:
        results = HealthChecker(provider).check_all(products)
    finally:
        _close(provider)

    table = Table(
        title="Source Health Check",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("Product", style="bold")
    table.add_column("Store")
    table.add_column("Status", justify="center")
    table.add_column("Latency", justify="right")
    table.add_column("Notes", style="dim")

    any_down = False
    for r in results:
        if r.status == "ok":
            status = "[green]✅ OK[/green]"
        elif r.status == "slow":
            status = "[yellow]⚠️  SLOW[/yellow]"
        elif r.status == "blocked":
            status = "[red]⛔ BLOCKED[/red]"
            any_down = True
        else:
            status = "[red]❌ DOWN[/red]"
            any_down = True

        latency = f"{r.latency_ms:.0f}ms" if r.latency_ms > 0 else "—"
        table.add_row(r.product_id, r.store, status, latency, r.message)

    Console().print(table)
    return 1 if any_down else 0
