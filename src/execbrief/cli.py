"""
ExecBrief CLI — command-line interface.

Usage:
    execbrief brief
    execbrief brief --customer "Acme Corp" --days 30 --output brief.txt
    execbrief brief --dry-run --sections tldr,risks
    execbrief customers

The rendered brief goes to stdout; progress, warnings, and errors go to
stderr so the brief can be piped.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from execbrief import __version__
from execbrief.errors import ConfigInvalid
from execbrief.models.record import DEFAULT_SECTIONS

app = typer.Typer(
    name="execbrief",
    help="📊 ExecBrief — revenue, support, and billing briefs per customer account",
    no_args_is_help=True,
    rich_markup_mode="rich",
)
console = Console(stderr=True)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"[bold]ExecBrief[/bold] v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version",
        callback=_version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show debug logging",
    ),
) -> None:
    """📊 ExecBrief — executive briefs from Tableau, Zendesk, and the billing agent."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False, show_time=False)],
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


@app.command()
def brief(
    customer: str = typer.Option(
        None,
        "--customer",
        "-c",
        help="Only brief the customer with exactly this name",
    ),
    days: int = typer.Option(
        None,
        "--days",
        "-d",
        min=1,
        help="Lookback window in days (default: output.default_days)",
    ),
    output: str = typer.Option(
        None,
        "--output",
        "-o",
        help="Also write the brief to this file",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Show what would be queried without calling any provider",
    ),
    sections: str = typer.Option(
        None,
        "--sections",
        "-s",
        help=f"Comma-separated sections: {','.join(DEFAULT_SECTIONS)}",
    ),
    fmt: str = typer.Option(
        None,
        "--format",
        "-f",
        help="Output format: text, markdown, json (default: output.format)",
    ),
    config: str = typer.Option(
        None,
        "--config",
        envvar="CONFIG_PATH",
        help="Path to config file (default: ./config/config.json)",
    ),
) -> None:
    """Generate executive briefs for the configured customers."""
    from execbrief.brief import ExecBrief
    from execbrief.exporters import FORMATS

    try:
        exec_brief = ExecBrief.from_config(config)
    except ConfigInvalid as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e

    if fmt and fmt.lower() not in FORMATS:
        console.print(f"[red]Error:[/red] Unknown format {fmt!r}; use one of {', '.join(FORMATS)}")
        raise typer.Exit(2)

    cfg = exec_brief.config
    console.print(
        f"📊 Executive Brief Generator\n"
        f"   Config: {config or 'default'} ({len(cfg.customers)} customers)\n"
        f"   Period: Last {days or cfg.output.default_days} days\n"
        f"   Sections: {','.join(_parse_sections(sections) or cfg.output.sections)}"
    )
    if dry_run:
        console.print("   Mode: [yellow]DRY RUN[/yellow]")

    async def _run() -> int:
        try:
            records = await exec_brief.run(
                customer=customer,
                days=days,
                sections=_parse_sections(sections),
                dry_run=dry_run,
            )
            text = exec_brief.render(records, fmt)

            if output:
                Path(output).write_text(text + "\n")
                console.print(f"[green]✓[/green] Brief saved to [bold]{output}[/bold]")

            typer.echo(text)

            if not dry_run and cfg.slack.channel:
                await exec_brief.deliver(text)
            return len(records)
        finally:
            await exec_brief.close()

    count = asyncio.run(_run())
    console.print(f"✅ Executive Brief completed for {count} customer(s)")


@app.command()
def customers(
    config: str = typer.Option(
        None,
        "--config",
        envvar="CONFIG_PATH",
        help="Path to config file (default: ./config/config.json)",
    ),
) -> None:
    """List configured customers and connector status."""
    from execbrief.brief import ExecBrief

    try:
        exec_brief = ExecBrief.from_config(config)
    except ConfigInvalid as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e

    table = Table(title="Configured Customers")
    table.add_column("Name", style="bold cyan")
    table.add_column("Org ID")
    table.add_column("Tableau Name")
    table.add_column("Zendesk Org")

    for account in exec_brief.config.customers:
        table.add_row(
            account.name,
            account.org_id,
            account.bi_name,
            account.zendesk_org if account.has_ticketing else "—",
        )
    console.print(table)

    status = Table(title="Connectors")
    status.add_column("Connector", style="bold")
    status.add_column("Status")
    for check in exec_brief.health():
        status.add_row(check["connector"], "✅ Configured" if check["configured"] else "⚠️  Not configured")
    console.print(status)


def _parse_sections(value: str | None) -> list[str] | None:
    """Split a ``--sections`` value, dropping names that are not brief sections."""
    if not value:
        return None
    requested = [s.strip().lower() for s in value.split(",") if s.strip()]
    unknown = [s for s in requested if s not in DEFAULT_SECTIONS]
    if unknown:
        console.print(f"[yellow]Ignoring unknown sections: {', '.join(unknown)}[/yellow]")
    return [s for s in requested if s in DEFAULT_SECTIONS] or None


if __name__ == "__main__":
    app()
