#!/usr/bin/env python3
"""Main CLI entry point for the cookie manager using Typer.

Evaluates a cookie string against a configuration file the same way the
consent middleware does, and validates configuration files.
"""

import json
import logging
from pathlib import Path
from urllib.parse import unquote

import typer
from typing_extensions import Annotated

from .. import __version__
from ..classification import CookieClassifier
from ..config import load_config_from_file
from ..evaluator import ConsentEvaluator
from ..models import CookieAction
from ..store import InMemoryCookieStore, parse_cookie_header


app = typer.Typer(
    name="cookie-manager",
    help="Cookie Manager - evaluate cookies against a consent manifest",
    add_completion=False,
    rich_markup_mode="rich"
)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s"
    )


@app.callback()
def main():
    """
    Cookie Manager - decide which cookies may exist given stored consent.
    """
    pass


@app.command(name="version")
def show_version():
    """Show version information."""
    typer.echo(f"Cookie Manager CLI v{__version__}")


@app.command()
def evaluate(
    config_path: Annotated[
        Path,
        typer.Option("--config", "-c", help="Path to cookie manager YAML configuration")
    ],
    cookies: Annotated[
        str,
        typer.Option("--cookies", help="Cookie string, e.g. \"a=1; b=2\"")
    ] = "",
    host: Annotated[
        str,
        typer.Option("--host", help="Host the cookies belong to")
    ] = "localhost",
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print decisions as JSON")
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging")
    ] = False,
):
    """Evaluate a cookie string and print the keep/delete decision of every cookie."""
    _configure_logging(verbose)

    try:
        config = load_config_from_file(config_path)
    except (FileNotFoundError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    store = InMemoryCookieStore(host)
    for cookie in parse_cookie_header(cookies):
        store.add(cookie.name, unquote(cookie.value))

    decisions = ConsentEvaluator(config).evaluate_store(store)

    if as_json:
        typer.echo(json.dumps([d.model_dump(mode='json') for d in decisions], indent=2))
        return

    if not decisions:
        typer.echo("No cookies to evaluate.")
        return

    for decision in decisions:
        marker = "DELETE" if decision.action == CookieAction.DELETE else "KEEP  "
        category = f" [{decision.category}]" if decision.category else ""
        typer.echo(f"{marker} {decision.cookie.name}{category} ({decision.reason.value})")

    deleted = sum(1 for d in decisions if d.should_delete)
    typer.echo(f"\n{len(decisions)} cookie(s) evaluated, {deleted} to delete.")

    names = [d.cookie.name for d in decisions if d.cookie.name != config.user_preference_cookie_name]
    unmatched = CookieClassifier(config.cookie_manifest).unmatched(names)
    if unmatched:
        typer.echo(f"Not in manifest: {', '.join(unmatched)}")


@app.command(name="validate-config")
def validate_config(
    config_path: Annotated[
        Path,
        typer.Argument(help="Path to cookie manager YAML configuration")
    ],
):
    """Validate a configuration file and report manifest issues."""
    try:
        config = load_config_from_file(config_path)
    except (FileNotFoundError, ValueError) as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(1)

    issues = config.validate_manifest()
    for issue in issues:
        typer.echo(f"warning: {issue}")

    optional = len(config.get_optional_categories())
    typer.echo(
        f"Configuration valid: {len(config.cookie_manifest)} categories "
        f"({optional} optional), preference cookie \"{config.user_preference_cookie_name}\""
    )


if __name__ == "__main__":
    app()
