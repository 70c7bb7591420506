"""CLI interface for Cleanser."""

from __future__ import annotations

import json
import logging
import sys
import time
from pathlib import Path
from typing import Callable

import click

from cleanser.cache import ScanCache
from cleanser.core.cleaner import CleanEngine
from cleanser.core.engine import ScanEngine, ScanError
from cleanser.models.category import RiskLevel
from cleanser.models.clean_report import CleanAttempt, Outcome
from cleanser.models.scan_config import MIB, ScanConfig, ScanSpeed
from cleanser.models.scan_result import ScanItem, ScanResult
from cleanser.settings import Settings
from cleanser.utils import bytes_to_human, format_elapsed, format_relative_time

_RISK_COLORS = {RiskLevel.SAFE: "green", RiskLevel.MODERATE: "yellow", RiskLevel.RISKY: "red"}


def _setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


_SCAN_OPTIONS = (
    click.option("--speed", "-s", type=click.Choice([s.value for s in ScanSpeed]), default=None,
                 help="Scan depth: quick (3), normal (6) or thorough (unlimited)"),
    click.option("--paths", "-p", multiple=True, type=click.Path(path_type=Path),
                 help="Paths to scan (defaults to home directory)"),
    click.option("--min-size", type=click.IntRange(min=0), default=None,
                 help="Minimum size in MB for large file detection (0 disables)"),
    click.option("--max-depth", type=click.IntRange(min=1), default=None, help="Override traversal depth"),
    click.option("--find-duplicates", is_flag=True, help="Hash files to find duplicates"),
)


def _scan_options(func: Callable) -> Callable:
    """Options shared by ``scan`` and ``clean`` so both build the same config."""
    for option in reversed(_SCAN_OPTIONS):
        func = option(func)
    return func


def _build_config(
    speed: str | None,
    paths: tuple[Path, ...],
    min_size: int | None,
    max_depth: int | None,
    find_duplicates: bool,
) -> ScanConfig:
    """Merge command-line options over the user's settings."""
    base = Settings.instance().scan_config()
    return ScanConfig(
        roots=tuple(p.expanduser() for p in paths) or base.roots,
        speed=ScanSpeed(speed) if speed else base.speed,
        max_depth=max_depth,
        min_large_file_size=min_size * MIB if min_size is not None else base.min_large_file_size,
        find_duplicates=find_duplicates,
        skip_system=base.skip_system,
    )


def _run_scan(config: ScanConfig, quiet: bool) -> ScanResult:
    if not quiet:
        roots = ", ".join(str(r) for r in config.roots)
        click.echo(f"\n{click.style('🔍', bold=True)} Scanning {roots} ({config.speed} speed)...")

    start = time.monotonic()
    try:
        result = ScanEngine().scan(config)
    except ScanError as exc:
        click.echo(click.style(f"Error: {exc}", fg="red"), err=True)
        sys.exit(1)

    if not quiet:
        click.echo(f"  done in {format_elapsed(time.monotonic() - start)}")
        if result.warnings:
            click.echo(click.style(
                f"  {len(result.warnings):,} paths could not be read (use -vv for details)", fg="bright_black"
            ))
    return result


def _save_cache(cache: ScanCache, result: ScanResult, config: ScanConfig) -> None:
    try:
        cache.save(result, config)
    except OSError as exc:
        click.echo(click.style(f"Warning: Failed to save scan cache: {exc}", fg="yellow"), err=True)


@click.group()
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug)")
def main(verbose: int) -> None:
    """Cleanser: find and safely remove reclaimable disk space."""
    _setup_logging(verbose)


# ── scan ─────────────────────────────────────────────────────────────────

@main.command()
@_scan_options
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("--no-cache", is_flag=True, help="Don't save scan results to cache")
def scan(
    speed: str | None,
    paths: tuple[Path, ...],
    min_size: int | None,
    max_depth: int | None,
    find_duplicates: bool,
    as_json: bool,
    no_cache: bool,
) -> None:
    """Scan for cleanable files (preview only, never deletes)."""
    config = _build_config(speed, paths, min_size, max_depth, find_duplicates)
    result = _run_scan(config, quiet=as_json)

    if not no_cache and Settings.instance().cache_enabled:
        _save_cache(ScanCache(), result, config)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    _print_scan_result(result)


def _print_scan_result(result: ScanResult) -> None:
    click.echo(
        f"\nTotal reclaimable: {click.style(bytes_to_human(result.total_size_bytes), fg='green', bold=True)}\n"
    )
    if not result.items:
        click.echo("Nothing to clean.")
        return

    for risk, items in result.by_risk().items():
        total = sum(i.size_bytes for i in items)
        heading = click.style(f"{str(risk).capitalize()} risk", fg=_RISK_COLORS[risk], bold=True)
        click.echo(f"{heading} ({bytes_to_human(total)}, {len(items):,} items)")

        by_category: dict[str, list[ScanItem]] = {}
        for item in items:
            by_category.setdefault(item.category.label, []).append(item)

        for label, members in sorted(by_category.items()):
            cat_total = sum(i.size_bytes for i in members)
            click.echo(f"  {label:25s} {bytes_to_human(cat_total):>10s}  ({len(members):,} items)")
            for item in sorted(members, key=lambda i: i.size_bytes, reverse=True)[:3]:
                click.echo(f"    {bytes_to_human(item.size_bytes):>10s}  {click.style(str(item.path), fg='bright_black')}")
            if len(members) > 3:
                click.echo(f"    ... and {len(members) - 3} more")
        click.echo()

    if result.duplicate_groups:
        click.echo(f"{len(result.duplicate_groups):,} groups of duplicate files found (oldest copy kept).\n")

    click.echo(click.style("Run 'cleanser clean --risk <level>' to clean files", fg="cyan"))


# ── clean ────────────────────────────────────────────────────────────────

@main.command()
@_scan_options
@click.option("--risk", "-r", type=click.Choice([str(r) for r in RiskLevel]), default="safe",
              show_default=True, help="Maximum risk level to clean")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.option("--dry-run", is_flag=True, help="Show what would be cleaned without doing it")
@click.option("--force-scan", is_flag=True, help="Ignore cached scan results")
@click.option("--no-cache", is_flag=True, help="Don't save a fresh scan to cache")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def clean(
    speed: str | None,
    paths: tuple[Path, ...],
    min_size: int | None,
    max_depth: int | None,
    find_duplicates: bool,
    risk: str,
    yes: bool,
    dry_run: bool,
    force_scan: bool,
    no_cache: bool,
    as_json: bool,
) -> None:
    """Clean files up to the given risk level."""
    if as_json and not (yes or dry_run):
        raise click.UsageError("--json needs --yes or --dry-run, it cannot prompt")

    settings = Settings.instance()
    config = _build_config(speed, paths, min_size, max_depth, find_duplicates)
    cache = ScanCache()
    ceiling = RiskLevel.parse(risk)

    result = None
    if not force_scan:
        entry = cache.load(config)
        if entry is not None:
            result = entry.scan_result
            if not as_json:
                click.echo(click.style(
                    f"Using cached scan results from {format_relative_time(entry.created_at)}", fg="cyan"
                ))
                click.echo(click.style("Tip: Use --force-scan to run a fresh scan", fg="bright_black"))
    if result is None:
        result = _run_scan(config, quiet=as_json)
        if not no_cache and settings.cache_enabled:
            _save_cache(cache, result, config)

    engine = CleanEngine(size_tolerance=settings.size_tolerance)
    selected = engine.select(result, ceiling)

    if not selected:
        if as_json:
            click.echo(json.dumps({"status": "nothing_to_clean", "dry_run": dry_run, "attempted": []}))
        else:
            click.echo(click.style("No items found to clean.", fg="yellow"))
        return

    if not as_json:
        _print_selection(selected)

    if not dry_run and not yes:
        total = bytes_to_human(sum(i.size_bytes for i in selected))
        if not click.confirm(f"Delete {len(selected):,} items ({total})?", default=False):
            click.echo("Aborted.")
            return

    def on_attempt(attempt: CleanAttempt) -> None:
        if as_json or attempt.outcome is Outcome.SKIPPED_DRY_RUN:
            return
        if attempt.outcome is Outcome.CLEANED:
            click.echo(f"  {click.style('✓', fg='green')} {click.style(str(attempt.item.path), fg='bright_black')}")
        else:
            click.echo(f"  {click.style('✗', fg='red')} {attempt.item.path} — {attempt.reason}")

    if not dry_run and not as_json:
        click.echo(f"\n{click.style('🧹', bold=True)} Cleaning...\n")

    report = engine.clean(result, ceiling, dry_run=dry_run, on_attempt=on_attempt)

    if not dry_run:
        cache.invalidate()

    if as_json:
        click.echo(json.dumps({"status": "dry_run" if dry_run else "cleaned", **report.to_dict()}, indent=2))
        return

    if dry_run:
        click.echo(click.style("DRY RUN: No files were deleted.", fg="yellow", bold=True))
        return

    click.echo(f"\nCleaned: {click.style(str(len(report.cleaned)), fg='green', bold=True)} items")
    click.echo(f"Failed:  {click.style(str(len(report.failed)), fg='red', bold=True)} items")
    click.echo(f"Space freed: {click.style(bytes_to_human(report.bytes_freed), fg='green', bold=True)}\n")


def _print_selection(items: list[ScanItem]) -> None:
    total = sum(i.size_bytes for i in items)
    click.echo(f"\nItems to clean — {click.style(bytes_to_human(total), bold=True)}\n")
    for item in items:
        marker = click.style("✓" if item.risk is RiskLevel.SAFE else "⚠", fg=_RISK_COLORS[item.risk])
        click.echo(
            f"  {marker} {item.category.label:20s} {bytes_to_human(item.size_bytes):>10s}  "
            f"{click.style(str(item.path), fg='bright_black')}"
        )
    click.echo()


# ── cache ────────────────────────────────────────────────────────────────

@main.group("cache")
def cache_group() -> None:
    """Scan cache management."""


@cache_group.command("info")
def cache_info() -> None:
    """Show where the scan cache lives and how old it is."""
    cache = ScanCache()
    click.echo(f"  Path: {cache.path}")
    age = cache.age()
    if age is None:
        click.echo("  No cached scan.")
        return
    fresh = age < cache.freshness_window
    status = click.style("fresh", fg="green") if fresh else click.style("stale", fg="bright_black")
    click.echo(f"  Age:  {format_elapsed(age.total_seconds())} ({status})")


@cache_group.command("clear")
def cache_clear() -> None:
    """Delete the cached scan."""
    ScanCache().invalidate()
    click.echo("Scan cache cleared.")
