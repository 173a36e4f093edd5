"""routeatlas command line interface.

Thin adapter over the engine: parse and flatten a routes file, check a
screen catalog for circular navigation, and report the blast radius of a
dependency change.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import typer
from dynaconf.vendor.ruamel.yaml.parser import ParserError as YamlParserError
from dynaconf.vendor.ruamel.yaml.scanner import ScannerError as YamlScannerError
from pydantic import ValidationError

from routeatlas import __version__
from routeatlas.contracts import CatalogError, Dialect, FlatRoute, RouteParseError, Screen
from routeatlas.core.catalog import load_catalog
from routeatlas.core.config import AtlasSettings, load_settings
from routeatlas.dialects import parse_routes_file
from routeatlas.engine.flatten import find_screen_id_collisions, flatten_routes
from routeatlas.engine.navigation import (
    analyze_impact,
    cycle_summary,
    detect_cycles,
    format_cycles,
    format_impact_json,
    format_impact_text,
)

__all__ = ["app"]

app = typer.Typer(
    name="routeatlas",
    help="routeatlas: static route analysis and screen navigation checks.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"routeatlas version {__version__}")
        raise typer.Exit()


def _load_dotenv(env_file: Path | None = None) -> bool:
    """Load environment variables from a .env file.

    Args:
        env_file: Explicit path to .env file. If None, searches for .env
                 in current directory and parent directories.

    Returns:
        True if .env was found and loaded, False otherwise.

    Raises:
        typer.Exit: If explicit env_file path doesn't exist.
    """
    from dotenv import load_dotenv

    if env_file is not None:
        if not env_file.exists():
            typer.secho(
                f"Error: .env file not found: {env_file}",
                fg=typer.colors.RED,
                err=True,
            )
            raise typer.Exit(1)
        return load_dotenv(env_file, override=False)

    return load_dotenv(override=False)


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    no_dotenv: bool = typer.Option(
        False,
        "--no-dotenv",
        help="Skip loading .env file.",
    ),
    env_file: Path | None = typer.Option(
        None,
        "--env-file",
        help="Path to .env file (skips automatic search).",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging.",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Output structured JSON logs (for machine processing).",
    ),
) -> None:
    """routeatlas: static route analysis and screen navigation checks."""
    from routeatlas.core.logging import configure_logging

    configure_logging(json_output=json_logs, level="DEBUG" if verbose else "WARNING")

    if not no_dotenv:
        _load_dotenv(env_file=env_file)
    elif env_file is not None:
        typer.secho(
            "Warning: --env-file ignored because --no-dotenv is set.",
            fg=typer.colors.YELLOW,
            err=True,
        )


def _settings_or_exit(settings: Path | None) -> AtlasSettings:
    """Load settings, turning every configuration failure into exit code 1."""
    try:
        return load_settings(settings.expanduser() if settings is not None else None)
    except (YamlParserError, YamlScannerError) as e:
        typer.echo(f"YAML syntax error in {settings}: {e.problem}", err=True)
        raise typer.Exit(1) from None
    except FileNotFoundError:
        typer.echo(f"Error: Settings file not found: {settings}", err=True)
        raise typer.Exit(1) from None
    except ValidationError as e:
        typer.echo("Configuration errors:", err=True)
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            typer.echo(f"  - {loc}: {error['msg']}", err=True)
        raise typer.Exit(1) from None


def _screens_or_exit(catalog: Path) -> list[Screen]:
    try:
        return load_catalog(catalog)
    except CatalogError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None


def _route_to_dict(route: FlatRoute) -> dict[str, Any]:
    component = route.component
    return {
        "fullPath": route.full_path,
        "screenId": route.screen_id,
        "screenTitle": route.screen_title,
        "name": route.name,
        "component": component.display if component is not None else None,
        "componentPath": component.path if component is not None else None,
        "lazy": component.lazy if component is not None else False,
        "depth": route.depth,
    }


@app.command()
def routes(
    file: Path | None = typer.Argument(
        None,
        help="Routes file to analyse (defaults to routes_file from settings).",
    ),
    dialect: Dialect | None = typer.Option(
        None,
        "--dialect",
        "-d",
        help="Router dialect (detected from content when omitted).",
        case_sensitive=False,
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output routes, warnings and collisions as JSON.",
    ),
    settings: Path | None = typer.Option(
        None,
        "--settings",
        "-s",
        help="Path to settings YAML file.",
    ),
) -> None:
    """Parse a routes file and list its flattened screens."""
    config = _settings_or_exit(settings)
    target = file or config.routes_file
    if target is None:
        typer.echo("Error: No routes file given and no routes_file in settings.", err=True)
        raise typer.Exit(1)

    try:
        result = parse_routes_file(
            target.expanduser(),
            dialect=dialect or config.dialect,
            max_depth=config.resolution.max_import_depth,
            extensions=config.resolution.extensions,
        )
    except RouteParseError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    flat = flatten_routes(result.routes)
    collisions = find_screen_id_collisions(flat)

    if json_output:
        payload = {
            "dialect": result.dialect.value,
            "routes": [_route_to_dict(route) for route in flat],
            "warnings": [diagnostic.to_dict() for diagnostic in result.diagnostics],
            "collisions": {sid: list(paths) for sid, paths in collisions.items()},
        }
        typer.echo(json.dumps(payload, indent=2))
        return

    typer.echo(f"{len(flat)} routes ({result.dialect.value})")
    for route in flat:
        component = f"  [{route.component.display}]" if route.component is not None else ""
        typer.echo(f"  {'  ' * route.depth}{route.full_path}  -> {route.screen_id}{component}")

    for diagnostic in result.diagnostics:
        if diagnostic.resolved:
            continue
        reason = f" ({diagnostic.failure_reason})" if diagnostic.failure_reason else ""
        typer.echo(f"Warning: {diagnostic.message}{reason}", err=True)
    for sid, paths in collisions.items():
        typer.echo(f"Warning: screen id '{sid}' is shared by {', '.join(paths)}", err=True)


@app.command()
def cycles(
    catalog: Path = typer.Argument(..., help="Screen catalog (JSON or YAML)."),
    strict: bool = typer.Option(
        False,
        "--strict",
        help="Exit with code 1 when a cycle without allowCycles is found.",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output the cycle report as JSON.",
    ),
) -> None:
    """Detect circular navigation in a screen catalog."""
    screens = _screens_or_exit(catalog.expanduser())
    result = detect_cycles(screens)

    if json_output:
        typer.echo(json.dumps(result.to_dict(), indent=2))
    else:
        typer.echo(cycle_summary(result))
        if result.has_cycles:
            typer.echo(format_cycles(result.cycles))

    if strict and result.disallowed_cycles:
        raise typer.Exit(1)


@app.command()
def impact(
    catalog: Path = typer.Argument(..., help="Screen catalog (JSON or YAML)."),
    api: str = typer.Argument(..., help="Dependency name, e.g. InvoiceAPI or InvoiceAPI.getDetail."),
    depth: int | None = typer.Option(
        None,
        "--depth",
        min=1,
        help="Maximum navigation hops to a direct dependent (defaults to impact.max_depth).",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output the impact report as JSON.",
    ),
    settings: Path | None = typer.Option(
        None,
        "--settings",
        "-s",
        help="Path to settings YAML file.",
    ),
) -> None:
    """Report the screens affected by a change to a dependency."""
    config = _settings_or_exit(settings)
    screens = _screens_or_exit(catalog.expanduser())
    result = analyze_impact(screens, api, max_depth=depth or config.impact.max_depth)
    typer.echo(format_impact_json(result) if json_output else format_impact_text(result))


if __name__ == "__main__":
    app()
