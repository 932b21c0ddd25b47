"""Click-based CLI for market-pulse.

Thin wrapper around library modules. No business logic here: every operation
delegates to the equities or tokens packages.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from datetime import datetime, timezone
from typing import NoReturn

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from market_pulse.core.exceptions import MarketPulseError

console = Console(stderr=True)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run_async(coro):
    """Run an async coroutine from synchronous Click code."""
    return asyncio.run(coro)


def _load_config(ctx: click.Context):
    """Load config lazily, caching on first call."""
    if "config" not in ctx.obj:
        from market_pulse.core import load_config

        ctx.obj["config"] = load_config(config_path=ctx.obj.get("config_path"))
    return ctx.obj["config"]


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(name)s: %(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _resolve_token(chain: str, address: str | None) -> tuple[str, str]:
    """Accept either ``CHAIN ADDRESS`` or a single ``dex:chain:address`` symbol."""
    from market_pulse.core.models import TokenRef

    try:
        if address is None:
            ref = TokenRef.from_symbol(chain)
        else:
            ref = TokenRef(chain=chain, address=address)
    except ValueError as e:
        raise click.UsageError(str(e)) from e
    return ref.chain, ref.address


def _fail(exc: MarketPulseError) -> NoReturn:
    console.print(f"[red]Error:[/red] {exc}")
    raise SystemExit(1)


def _echo_json(model) -> None:
    click.echo(json.dumps(model.model_dump(mode="json"), indent=2))


def _format_time(ms: int) -> str:
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc).strftime("%Y-%m-%d %H:%M")


def _print_candles(title: str, candles: list, limit: int) -> None:
    table = Table(title=title)
    table.add_column("Time (UTC)")
    for col in ("Open", "High", "Low", "Close", "Volume"):
        table.add_column(col, justify="right")

    for c in candles[-limit:]:
        table.add_row(
            _format_time(c.time),
            f"{c.open:.4f}",
            f"{c.high:.4f}",
            f"{c.low:.4f}",
            f"{c.close:.4f}",
            f"{c.volume:,}",
        )
    console.print(table)


_FORMAT_OPTION = click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format.",
)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True),
    envvar="MARKET_PULSE_CONFIG",
    default=None,
    help="Path to market-pulse.yml config file.",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    default=False,
    help="Enable debug logging.",
)
@click.version_option(package_name="market-pulse")
@click.pass_context
def cli(ctx: click.Context, config: str | None, verbose: bool) -> None:
    """Market Pulse: equity quotes and on-chain token prices."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config
    ctx.obj["verbose"] = verbose
    ctx.obj["console"] = console


def _prepare(ctx: click.Context):
    """Load config and configure logging for a data command."""
    try:
        config = _load_config(ctx)
    except MarketPulseError as e:
        _fail(e)
    _setup_logging("DEBUG" if ctx.obj.get("verbose") else config.logging.level)
    return config


# ---------------------------------------------------------------------------
# quote / candles
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("symbol")
@_FORMAT_OPTION
@click.pass_context
def quote(ctx: click.Context, symbol: str, output_format: str) -> None:
    """Show the session-aware quote for an equity SYMBOL."""
    from market_pulse.equities import YahooChartClient

    config = _prepare(ctx)
    client = YahooChartClient(config.yahoo)
    try:
        result = _run_async(client.fetch_quote(symbol.upper()))
    except MarketPulseError as e:
        _fail(e)

    if output_format == "json":
        _echo_json(result)
        return

    table = Table(title=f"{result.symbol} ({result.market_status.value})")
    table.add_column("Field", style="bold")
    table.add_column("Value", justify="right")
    table.add_row("Price", f"{result.price:.4f}")
    table.add_row("Change", f"{result.change:+.4f} ({result.change_percent:+.2f}%)")
    table.add_row("Day high", f"{result.high:.4f}")
    table.add_row("Day low", f"{result.low:.4f}")
    table.add_row("Volume", f"{result.volume:,}")
    console.print(table)


@cli.command()
@click.argument("symbol")
@click.option("--interval", "-i", default="1d", show_default=True, help="Bar interval.")
@click.option("--range", "range_", "-r", default="1mo", show_default=True, help="History range.")
@click.option("--limit", "-n", type=int, default=20, show_default=True, help="Rows to display.")
@_FORMAT_OPTION
@click.pass_context
def candles(
    ctx: click.Context,
    symbol: str,
    interval: str,
    range_: str,
    limit: int,
    output_format: str,
) -> None:
    """Show candle history and day summary for an equity SYMBOL."""
    from market_pulse.equities import YahooChartClient

    config = _prepare(ctx)
    client = YahooChartClient(config.yahoo)
    try:
        chart = _run_async(client.fetch_chart(symbol.upper(), interval, range_))
    except MarketPulseError as e:
        _fail(e)

    if output_format == "json":
        _echo_json(chart)
        return

    _print_candles(f"{symbol.upper()} {interval}/{range_}", chart.candles, limit)
    console.print(
        f"Current {chart.current_price:.4f}  |  Prev close {chart.previous_close:.4f}  |  "
        f"Day {chart.day_low:.4f}-{chart.day_high:.4f}  |  Volume {chart.volume:,}"
    )


# ---------------------------------------------------------------------------
# price / stats / pool-candles
# ---------------------------------------------------------------------------


def _print_token(title: str, result) -> None:
    table = Table(title=title)
    table.add_column("Field", style="bold")
    table.add_column("Value", justify="right")
    table.add_row("Price (USD)", f"{result.price:.10g}")
    table.add_row("24h change", f"{result.change_24h:+.2f}%")
    table.add_row("24h volume", f"{result.volume_24h:,.0f}")
    table.add_row("Pair", result.pair_address or "-")
    table.add_row("Source", result.source.value)
    console.print(table)


@cli.command()
@click.argument("chain")
@click.argument("address", required=False)
@click.option("--pair", "pair_address", default=None, help="Known pool/pair address.")
@click.option(
    "--prefer",
    "preferred_source",
    type=click.Choice(["gecko", "dexscreener"]),
    default=None,
    help="Provider to try before the default order (after Jupiter/Raydium on Solana).",
)
@_FORMAT_OPTION
@click.pass_context
def price(
    ctx: click.Context,
    chain: str,
    address: str | None,
    pair_address: str | None,
    preferred_source: str | None,
    output_format: str,
) -> None:
    """Resolve a token price. Accepts CHAIN ADDRESS or dex:CHAIN:ADDRESS."""
    from market_pulse.tokens import TokenPriceResolver

    chain, address = _resolve_token(chain, address)
    config = _prepare(ctx)
    resolver = TokenPriceResolver(config.tokens)
    try:
        result = _run_async(
            resolver.resolve(chain, address, pair_address, preferred_source)
        )
    except MarketPulseError as e:
        _fail(e)

    if output_format == "json":
        _echo_json(result)
        return
    _print_token(f"{chain}:{address}", result)


@cli.command()
@click.argument("chain")
@click.argument("address", required=False)
@click.option("--pair", "pair_address", default=None, help="Known pool/pair address.")
@_FORMAT_OPTION
@click.pass_context
def stats(
    ctx: click.Context,
    chain: str,
    address: str | None,
    pair_address: str | None,
    output_format: str,
) -> None:
    """Show 24h stats for a token. Accepts CHAIN ADDRESS or dex:CHAIN:ADDRESS."""
    from market_pulse.tokens import StatsResolver

    chain, address = _resolve_token(chain, address)
    config = _prepare(ctx)
    resolver = StatsResolver(config.tokens)
    try:
        result = _run_async(resolver.resolve_stats(chain, address, pair_address))
    except MarketPulseError as e:
        _fail(e)

    if output_format == "json":
        _echo_json(result)
        return
    _print_token(f"{chain}:{address} (24h)", result)


@cli.command("pool-candles")
@click.argument("chain")
@click.argument("address", required=False)
@click.option("--timeframe", "-t", default="1h", show_default=True, help="Candle timeframe.")
@click.option("--pool", "pool_address", default=None, help="Pool address to chart.")
@click.option("--limit", "-n", type=int, default=20, show_default=True, help="Rows to display.")
@_FORMAT_OPTION
@click.pass_context
def pool_candles(
    ctx: click.Context,
    chain: str,
    address: str | None,
    timeframe: str,
    pool_address: str | None,
    limit: int,
    output_format: str,
) -> None:
    """Show pool candles for a token. Accepts CHAIN ADDRESS or dex:CHAIN:ADDRESS."""
    from market_pulse.tokens import TIMEFRAMES, PoolCandleFetcher

    if timeframe not in TIMEFRAMES:
        raise click.UsageError(
            f"Unknown timeframe {timeframe!r}. Choose from: {', '.join(TIMEFRAMES)}"
        )

    chain, address = _resolve_token(chain, address)
    config = _prepare(ctx)
    fetcher = PoolCandleFetcher(config.tokens)
    try:
        result = _run_async(
            fetcher.fetch_candles(chain, address, timeframe, pool_address)
        )
    except MarketPulseError as e:
        _fail(e)

    if output_format == "json":
        click.echo(json.dumps([c.model_dump(mode="json") for c in result], indent=2))
        return
    _print_candles(f"{chain}:{address} {timeframe}", result, limit)


# ---------------------------------------------------------------------------
# serve
# ---------------------------------------------------------------------------


@cli.command()
@click.option("--host", type=str, default=None, help="Bind address (default from config).")
@click.option("--port", "-p", type=int, default=None, help="Port number (default from config).")
@click.option("--reload", is_flag=True, default=False, help="Auto-reload on code changes.")
@click.pass_context
def serve(ctx: click.Context, host: str | None, port: int | None, reload: bool) -> None:
    """Start the REST API server."""
    try:
        import uvicorn
    except ImportError:
        console.print(
            "[red]uvicorn not installed. Install with: "
            "pip install market-pulse[api][/red]"
        )
        raise SystemExit(1)

    config = _prepare(ctx)
    if ctx.obj.get("config_path"):
        # The app factory runs in uvicorn and reloads config from the environment
        os.environ["MARKET_PULSE_CONFIG"] = ctx.obj["config_path"]
    host = host or config.api.host
    port = port or config.api.port

    console.print(f"Starting market-pulse API on [bold]{host}:{port}[/bold]")
    console.print(f"API docs: http://{host}:{port}/docs")

    uvicorn.run(
        "market_pulse.api.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
    )


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
