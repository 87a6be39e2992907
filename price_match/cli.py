from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import typer
from loguru import logger
from pydantic import ValidationError

from .calculators.totals import TotalsSettings, grand_total, items_subtotal
from .config import MatchSettings, load_settings
from .importers.price_list import load_price_list
from .importers.quote_items import read_line_items, write_line_items
from .matching.engine import apply_to_line_items, get_candidates
from .matching.index import validate_entries
from .matching.lint import near_duplicates, rejected_rows
from .models import ApplyOptions, CandidateOptions
from .utils import money


app = typer.Typer(help="Price-list matching for quote line items", no_args_is_help=True)


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Log matching decisions")):
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "WARNING")


def _settings(configs: Optional[str]) -> MatchSettings:
    try:
        return load_settings(Path(configs) if configs else None)
    except (ValidationError, ValueError) as e:
        typer.echo(f"Invalid settings in {configs}: {e}", err=True)
        raise typer.Exit(code=2)


def _price_list(path: str) -> list:
    try:
        return load_price_list(Path(path))
    except (FileNotFoundError, ValueError) as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=2)


@app.command()
def match(
    name: str = typer.Argument(..., help="Line item name to look up"),
    price_list: str = typer.Option(..., "--price-list", "-p", help="Price list (yaml, json or csv)"),
    unit: Optional[str] = typer.Option(None, help="Unit of the line item"),
    max_results: Optional[int] = typer.Option(None, min=1, help="Number of suggestions"),
    min_score: Optional[float] = typer.Option(None, min=0.0, max=1.0, help="Lowest score to show"),
    configs: Optional[str] = typer.Option(None, help="Settings file or configs folder"),
):
    """Show the best price-list suggestions for one line item name."""
    settings = _settings(configs)
    catalog = _price_list(price_list)
    options = CandidateOptions(
        max_results=max_results or settings.max_results,
        min_score=settings.suggest_min_score if min_score is None else min_score,
    )
    candidates = get_candidates(name, unit, catalog, options, settings)
    if not candidates:
        typer.echo(f"No match for '{name}'")
        raise typer.Exit(code=1)
    for rank, cand in enumerate(candidates, start=1):
        entry = cand.item
        auto = " *" if rank == 1 and cand.score >= settings.accept_score else ""
        unit_str = f" / {entry.unit}" if entry.unit else ""
        typer.echo(f"{rank}. {entry.name}  {money(entry.price)}{unit_str}  score={cand.score:.2f}{auto}")


@app.command()
def apply(
    items_file: str = typer.Argument(..., help="Quote line items JSON"),
    price_list: str = typer.Option(..., "--price-list", "-p", help="Price list (yaml, json or csv)"),
    out: Optional[str] = typer.Option(None, help="Output JSON (default: overwrite input)"),
    overwrite_prices: bool = typer.Option(False, help="Also reprice items that already have a price"),
    keep_empty_units: bool = typer.Option(False, help="Do not copy the catalog unit into blank units"),
    labor_hours: Optional[float] = typer.Option(None, min=0.0, help="Labor hours on the quote"),
    labor_rate: Optional[float] = typer.Option(None, min=0.0, help="Hourly labor rate"),
    tax_rate: float = typer.Option(0.0, min=0.0, help="Tax percent added on top (0 for none)"),
    tax_inclusive: bool = typer.Option(False, help="Prices already include tax"),
    configs: Optional[str] = typer.Option(None, help="Settings file or configs folder"),
):
    """Fill missing prices on quote line items from the saved price list."""
    settings = _settings(configs)
    catalog = _price_list(price_list)
    try:
        payload, rows, items = read_line_items(Path(items_file))
    except (FileNotFoundError, ValueError) as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=2)

    options = ApplyOptions(only_missing_price=not overwrite_prices, fill_empty_unit=not keep_empty_units)
    result = apply_to_line_items(items, catalog, options, settings)

    out_path = Path(out) if out else Path(items_file)
    write_line_items(out_path, payload, rows, items, result.items)
    subtotal = items_subtotal(result.items)
    totals = TotalsSettings(tax_enabled=tax_rate > 0, tax_rate=tax_rate, tax_inclusive=tax_inclusive)
    total = grand_total(subtotal, labor_hours, labor_rate, totals)
    typer.echo(f"Priced {result.matched_count} of {len(items)} items. Subtotal {money(subtotal)}. Total {money(total)}")
    typer.echo(f"Wrote {out_path}")


@app.command()
def validate(
    price_list: str = typer.Option(..., "--price-list", "-p", help="Price list (yaml, json or csv)"),
    threshold: int = typer.Option(90, min=0, max=100, help="Similarity (0-100) to report as duplicate"),
):
    """Report price-list rows that can never match and names that compete with each other."""
    catalog = _price_list(price_list)
    problems = rejected_rows(catalog)
    for pos, reason in problems:
        typer.echo(f"row {pos + 1}: skipped, {reason}")
    dupes = near_duplicates(validate_entries(catalog), threshold=threshold)
    for a, b, score in dupes:
        typer.echo(f"possible duplicate: '{a}' ~ '{b}' ({score})")
    if problems or dupes:
        raise typer.Exit(code=1)
    typer.echo(f"OK: {len(catalog)} entries usable.")


if __name__ == "__main__":  # pragma: no cover
    app()
