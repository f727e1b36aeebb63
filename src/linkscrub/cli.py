"""
linkscrub CLI - Command Line Interface

Entry point for cleaning URLs against a rule catalog and inspecting
the providers it defines.
"""

import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from linkscrub import __version__
from linkscrub.core.audit import AuditLogger
from linkscrub.core.config import load_catalog
from linkscrub.core.exceptions import LinkScrubError
from linkscrub.core.models import CleanerOptions, RequestContext
from linkscrub.orchestrator.engine import Orchestrator

# Create CLI app
app = typer.Typer(
    name="linkscrub",
    help="linkscrub - Strip tracking parameters and redirect wrappers from URLs",
    add_completion=False,
    no_args_is_help=True,
)

# Rich console for output
console = Console(soft_wrap=True, emoji=False)
err_console = Console(stderr=True, soft_wrap=True, emoji=False)


def _catalog_option():
    return typer.Option(
        None,
        "--catalog",
        "-c",
        help="Rule catalog file (.json, .yaml); defaults to $LINKSCRUB_CATALOG or configs/catalog.yaml",
    )


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
    )


def _load_engine(catalog: Optional[Path], options: Optional[CleanerOptions] = None) -> Orchestrator:
    try:
        registry = load_catalog(catalog)
    except LinkScrubError as e:
        err_console.print(f"[red]Error loading catalog:[/red] {e}")
        raise typer.Exit(code=1)
    return Orchestrator(registry, options)


# ============================================================================
# Main Commands
# ============================================================================

@app.command("clean")
def clean_command(
    urls: List[str] = typer.Argument(..., help="URLs to clean"),
    catalog: Optional[Path] = _catalog_option(),
    method: Optional[str] = typer.Option(
        None,
        "--method",
        "-m",
        help="HTTP method of the request (filters method-restricted providers)",
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print full results as a JSON list",
    ),
    table: bool = typer.Option(
        False,
        "--table",
        "-t",
        help="Print results as a table",
    ),
    audit_log: Optional[Path] = typer.Option(
        None,
        "--audit-log",
        "-a",
        help="Append every transformation to this JSON Lines file",
    ),
    no_local_skip: bool = typer.Option(
        False,
        "--no-local-skip",
        help="Also clean URLs pointing at local or private addresses",
    ),
    no_domain_blocking: bool = typer.Option(
        False,
        "--no-domain-blocking",
        help="Clean URLs of complete providers instead of blocking them",
    ),
    allow_referral_marketing: bool = typer.Option(
        False,
        "--allow-referral-marketing",
        help="Keep referral marketing parameters",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Verbose output",
    ),
) -> None:
    """
    Clean one or more URLs.

    Prints one cleaned URL per line unless --json or --table is given.
    """
    _configure_logging(verbose)

    options = CleanerOptions(
        local_hosts_skipping=not no_local_skip,
        domain_blocking=not no_domain_blocking,
        allow_referral_marketing=allow_referral_marketing,
    )
    engine = _load_engine(catalog, options)
    context = RequestContext(method=method.upper()) if method else None

    audit = None
    try:
        if audit_log:
            audit = AuditLogger(audit_log)
        results = engine.clean_many(urls, context, audit)
    except LinkScrubError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)
    finally:
        if audit is not None:
            audit.close()

    if as_json:
        payload = [result.to_dict() for result in results]
        console.print(json.dumps(payload, indent=2), markup=False, highlight=False)
        return

    if table:
        output = Table(title="Cleaned URLs")
        output.add_column("URL", style="cyan")
        output.add_column("Action", style="yellow")
        output.add_column("Providers", style="blue")
        for result in results:
            if result.cancel:
                action = "[red]blocked[/red]"
            elif result.redirect:
                action = "[magenta]redirect[/magenta]"
            elif result.changes:
                action = "[green]cleaned[/green]"
            else:
                action = "unchanged"
            output.add_row(result.url, action, ", ".join(result.providers) or "-")
        console.print(output)
        return

    for result in results:
        console.print(result.url, markup=False, highlight=False)


@app.command()
def providers(
    catalog: Optional[Path] = _catalog_option(),
) -> None:
    """List catalog providers in precedence order."""
    engine = _load_engine(catalog)

    output = Table(title="Providers")
    output.add_column("#", style="dim")
    output.add_column("Provider", style="cyan")
    output.add_column("Rules", style="green")
    output.add_column("Raw", style="green")
    output.add_column("Redirections", style="magenta")
    output.add_column("Exceptions", style="yellow")
    output.add_column("Blocking", style="red")

    for index, provider in enumerate(engine.registry, start=1):
        output.add_row(
            str(index),
            provider.get_name(),
            str(len(provider.get_rules())),
            str(len(provider.get_raw_rules())),
            str(len(provider.get_redirections())),
            str(len(provider.get_exceptions())),
            "yes" if provider.is_canceling() else "no",
        )

    console.print(output)
    console.print(f"[bold]{len(engine.registry)}[/bold] providers")


@app.command()
def check(
    url: str = typer.Argument(..., help="URL to match against the catalog"),
    catalog: Optional[Path] = _catalog_option(),
    method: Optional[str] = typer.Option(
        None,
        "--method",
        "-m",
        help="HTTP method of the request",
    ),
) -> None:
    """Show which providers match a URL without cleaning it."""
    engine = _load_engine(catalog)
    context = RequestContext(method=method.upper()) if method else None

    matched = engine.matching_providers(url, context)
    if not matched:
        console.print("[yellow]No provider matches this URL[/yellow]")
        return

    for name in matched:
        console.print(f"[green]✓[/green] {name}")


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"[bold cyan]linkscrub[/bold cyan] version [yellow]{__version__}[/yellow]")


# ============================================================================
# Entry Point
# ============================================================================

def main() -> None:
    """Main entry point for CLI."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        sys.exit(130)


if __name__ == "__main__":
    main()
