"""
basenames.cli.main
==================

`basenames`: command-line access to basenames on Base Sepolia.

Commands
--------
    $ basenames node alice                 # derive the node (offline)
    $ basenames available alice            # exit 0 if available, 1 if taken
    $ basenames price alice --years 2
    $ basenames query alice.basetest.eth
    $ basenames verify alice --json
    $ basenames validate email=me@example.com phone=+14155551234
    $ basenames keys

Configuration
-------------
Defaults come from `basenames.config.Settings` (env `BASENAMES_*`, optionally
`.env.local`). `--rpc` and `--parent` override the RPC URL and parent domain
for this process.

Exit codes: 0 success, 1 negative answer (taken name, invalid records),
2 error (bad name, RPC failure).
"""

from __future__ import annotations

import asyncio
import json
import sys
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator, Dict, List, NoReturn, Optional

import typer
from pydantic import ValidationError
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..config import Settings, get_settings
from ..contracts.basenames import BasenamesReader
from ..contracts.reader import EthCallReader
from ..errors import BasenamesError
from ..logging import setup_logging
from ..names import ResolvedName, full_name, label_to_node
from ..query import query_basename
from ..records import (
    STANDARD_KEYS,
    RecordCategory,
    get_record_category,
    get_record_label,
    get_records_by_category,
    validate_records,
)
from ..register import MIN_DURATION
from ..rpc.http import RpcClient, RpcConfig
from ..verify import RecordStatus, VerificationResult, verify_basename
from ..version import __version__

app = typer.Typer(
    name="basenames",
    help="Query, verify and validate basenames records.",
    no_args_is_help=True,
    add_completion=False,
)

__all__ = ["app", "main", "run"]

_STATUS_STYLE = {
    RecordStatus.SET: "[green]set[/]",
    RecordStatus.EMPTY: "[dim]empty[/]",
    RecordStatus.ERROR: "[red]error[/]",
}


@dataclass
class Ctx:
    settings: Settings


def _print_json(obj: Any) -> None:
    typer.echo(json.dumps(obj, indent=2, ensure_ascii=False))


def _fail(message: str, code: int = 2) -> NoReturn:
    typer.echo(f"error: {message}", err=True)
    raise typer.Exit(code)


def _settings(ctx: typer.Context) -> Settings:
    c: Ctx = ctx.obj
    return c.settings


@asynccontextmanager
async def _open_reader(settings: Settings) -> AsyncIterator[BasenamesReader]:
    cfg = RpcConfig(
        url=settings.rpc_url,
        timeout_s=settings.request_timeout,
        max_retries=settings.max_retries,
        backoff_base_s=settings.backoff_base,
    )
    async with RpcClient(cfg) as rpc:
        await rpc.ensure_chain_id(settings.chain_id)
        yield BasenamesReader(EthCallReader(rpc), settings.contracts())


def _resolve(s: Settings, name: str) -> ResolvedName:
    try:
        return label_to_node(name, s.parent_node())
    except BasenamesError as e:
        _fail(str(e))


def _run(coro: Any) -> Any:
    try:
        return asyncio.run(coro)
    except BasenamesError as e:
        _fail(str(e))


@app.callback()
def _root(
    ctx: typer.Context,
    rpc: Optional[str] = typer.Option(None, "--rpc", help="Node HTTP JSON-RPC URL."),
    parent: Optional[str] = typer.Option(None, "--parent", help="Parent domain (default basetest.eth)."),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="DEBUG, INFO, WARNING, ERROR."),
) -> None:
    """Resolve effective settings for this process."""
    overrides: Dict[str, Any] = {}
    if rpc:
        overrides["rpc_url"] = rpc
    if parent:
        overrides["parent_domain"] = parent
    if log_level:
        overrides["log_level"] = log_level.upper()
    try:
        settings = Settings(**overrides) if overrides else get_settings()
    except ValidationError as e:
        _fail(f"invalid configuration: {e}")
    setup_logging(level=settings.log_level, log_format=settings.log_format)
    ctx.obj = Ctx(settings=settings)


@app.command("version")
def version() -> None:
    """Print the package version."""
    typer.echo(f"basenames {__version__}")


@app.command("node")
def node(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Label or full basename."),
    as_json: bool = typer.Option(False, "--json", help="Emit JSON."),
) -> None:
    """Derive the node for NAME under the parent domain (no network)."""
    s = _settings(ctx)
    resolved = _resolve(s, name)
    out = {
        "name": full_name(resolved.label, s.parent_domain),
        "label": resolved.label,
        "node": resolved.node_hex,
    }
    if as_json:
        _print_json(out)
    else:
        typer.echo(f"{out['name']}  {out['node']}")


@app.command("available")
def available(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Label to check."),
) -> None:
    """Check whether NAME can be registered. Exit 0 if available, 1 if taken."""
    s = _settings(ctx)
    label = _resolve(s, name).label

    async def _go() -> bool:
        async with _open_reader(s) as reader:
            return await reader.available(label)

    ok = _run(_go())
    fqdn = full_name(label, s.parent_domain)
    typer.echo(f"{fqdn} is {'available' if ok else 'taken'}")
    if not ok:
        raise typer.Exit(1)


@app.command("price")
def price(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Label to price."),
    years: int = typer.Option(1, "--years", min=1, help="Registration length in years."),
) -> None:
    """Print the registration price in wei and ETH."""
    s = _settings(ctx)
    duration = years * MIN_DURATION
    label = _resolve(s, name).label

    async def _go() -> int:
        async with _open_reader(s) as reader:
            return await reader.register_price(label, duration)

    wei = _run(_go())
    typer.echo(f"{wei} wei ({wei / 10**18:.6f} ETH) for {years} year(s)")


@app.command("query")
def query(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Label or full basename."),
    as_json: bool = typer.Option(False, "--json", help="Emit JSON."),
) -> None:
    """Show owner, resolver, address record, a few text records and the primary name."""
    s = _settings(ctx)

    async def _go():
        async with _open_reader(s) as reader:
            return await query_basename(name, reader, s.parent_node())

    rec = _run(_go())
    if as_json:
        _print_json(rec.to_dict())
        return

    console = Console()
    table = Table(box=box.SIMPLE, show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("Basename", rec.basename)
    table.add_row("Node", rec.to_dict()["node"])
    table.add_row("Owner", rec.owner or "-")
    table.add_row("Resolver", rec.resolver or "-")
    table.add_row("Address", rec.address_record or "-")
    table.add_row("Primary name", rec.primary_name or "-")
    for key, value in rec.records.items():
        table.add_row(key, value or "-")
    console.print(table)


def _render_verification(result: VerificationResult) -> None:
    console = Console()
    header = Table.grid(padding=(0, 2))
    header.add_column(style="bold")
    header.add_column()
    header.add_row("Basename", result.normalized_name or result.basename or "-")
    header.add_row("Node", result.node_hex)
    header.add_row("Owner", result.owner or "-")
    header.add_row("Resolver", result.resolver or "-")
    console.print(Panel(header, title="Basename", box=box.ROUNDED))

    table = Table(box=box.SIMPLE_HEAVY)
    table.add_column("Key")
    table.add_column("Label")
    table.add_column("Status")
    table.add_column("Value / error", overflow="fold")

    groups = get_records_by_category()
    addr = STANDARD_KEYS[0]
    rows = [(addr, result.records[addr])]
    for category in RecordCategory:
        rows.extend((k, result.records[k]) for k in groups[category])
    for key, rec in rows:
        table.add_row(
            f"{key.value} [dim]({get_record_category(key).value})[/]",
            get_record_label(key),
            _STATUS_STYLE[rec.status],
            rec.value or rec.error or "",
        )
    console.print(table)

    sm = result.summary
    console.print(
        Panel(
            f"[green]{sm.set}[/] set  [dim]{sm.empty}[/] empty  [red]{sm.error}[/] error  "
            f"of {sm.total}  ([bold]{sm.percentage}%[/] complete)",
            title="Summary",
            box=box.ROUNDED,
        )
    )


@app.command("verify")
def verify(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Label or full basename."),
    as_json: bool = typer.Option(False, "--json", help="Emit JSON."),
) -> None:
    """Report the status of all 17 standard records."""
    s = _settings(ctx)

    async def _go():
        async with _open_reader(s) as reader:
            return await verify_basename(name, reader, s.parent_node())

    result = _run(_go())
    if as_json:
        _print_json(result.to_dict())
    else:
        _render_verification(result)


@app.command("validate")
def validate(
    pairs: List[str] = typer.Argument(..., help="KEY=VALUE pairs."),
    as_json: bool = typer.Option(False, "--json", help="Emit JSON."),
) -> None:
    """Validate record values offline. Exit 1 if any value is invalid."""
    records: Dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"expected KEY=VALUE, got {pair!r}")
        records[key] = value

    result = validate_records(records)
    if as_json:
        _print_json(result.to_dict())
    elif result.valid:
        typer.echo("all records valid")
    else:
        for key, message in result.errors.items():
            typer.echo(f"{key}: {message}")
    if not result.valid:
        raise typer.Exit(1)


@app.command("keys")
def keys(as_json: bool = typer.Option(False, "--json", help="Emit JSON.")) -> None:
    """List the 17 standard record keys with their category and label."""
    rows = [
        {"key": k.value, "category": get_record_category(k).value, "label": get_record_label(k)}
        for k in STANDARD_KEYS
    ]
    if as_json:
        _print_json(rows)
        return
    table = Table(box=box.SIMPLE)
    table.add_column("Key")
    table.add_column("Category")
    table.add_column("Label")
    for r in rows:
        table.add_row(r["key"], r["category"], r["label"])
    Console().print(table)


# --- Entrypoints --------------------------------------------------------------


def main(argv: Optional[list[str]] = None) -> int:
    """
    Run the CLI. Returns an integer exit code.
    """
    try:
        app(prog_name="basenames", args=argv)
    except SystemExit as e:
        return int(e.code or 0)
    return 0


def run(argv: Optional[list[str]] = None) -> int:
    """Alias for :func:`main`."""
    return main(argv)


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
