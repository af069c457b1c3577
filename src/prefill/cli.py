# src/prefill/cli.py
"""prefill Command Line Interface.

Entry point for the prefill CLI tool: inspect an intake graph and manage
the prefill mappings of its forms.
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

import typer
from pydantic import ValidationError

from prefill import __version__
from prefill.contracts import (
    DependencyCategory,
    GraphLoadError,
    LifecycleError,
    MappingDocumentError,
    Severity,
)
from prefill.core.config import PrefillSettings, default_settings, load_settings

if TYPE_CHECKING:
    from prefill.core.system import PrefillSystem

__all__ = [
    "app",
]

app = typer.Typer(
    name="prefill",
    help="prefill: configure field prefill for dependent intake forms.",
    no_args_is_help=True,
)

_SEVERITY_COLORS = {
    Severity.SUCCESS: typer.colors.GREEN,
    Severity.INFO: typer.colors.BLUE,
    Severity.WARNING: typer.colors.YELLOW,
    Severity.ERROR: typer.colors.RED,
}


@dataclass(frozen=True)
class _CliOptions:
    """Global options collected by the callback, read by every command."""

    settings: Path | None = None
    graph_file: Path | None = None
    store: Path | None = None


class ConsoleNotifier:
    """Notifier that prints operator messages to stderr, colored by severity."""

    def notify(self, message: str, severity: Severity = Severity.SUCCESS) -> None:
        typer.secho(message, fg=_SEVERITY_COLORS[severity], err=True)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"prefill version {__version__}")
        raise typer.Exit()


def _load_dotenv(env_file: Path | None = None) -> bool:
    """Load environment variables from .env file.

    Args:
        env_file: Explicit path to .env file. If None, searches for .env
                 in current directory and parent directories.

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
    ctx: typer.Context,
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
        exists=False,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose/debug logging.",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Output structured JSON logs (for machine processing).",
    ),
    settings: Path | None = typer.Option(
        None,
        "--settings",
        "-s",
        help="Path to settings YAML file.",
    ),
    graph_file: Path | None = typer.Option(
        None,
        "--graph-file",
        "-g",
        help="Read the intake graph from this JSON file instead of the API.",
    ),
    store: Path | None = typer.Option(
        None,
        "--store",
        help="Mapping document file (overrides storage.path).",
    ),
) -> None:
    """prefill: configure field prefill for dependent intake forms."""
    from prefill.core.logging import configure_logging

    configure_logging(json_output=json_logs, level="DEBUG" if verbose else "INFO")

    if not no_dotenv:
        _load_dotenv(env_file=env_file)
    elif env_file is not None:
        typer.secho(
            "Warning: --env-file ignored because --no-dotenv is set.",
            fg=typer.colors.YELLOW,
            err=True,
        )

    ctx.obj = _CliOptions(settings=settings, graph_file=graph_file, store=store)


# === Helpers ===


def _fail(message: str) -> typer.Exit:
    typer.secho(message, fg=typer.colors.RED, err=True)
    return typer.Exit(1)


def _resolve_settings(options: _CliOptions, request_url: str | None = None) -> PrefillSettings:
    """Load settings and apply command-line overrides."""
    if options.settings is None:
        config = default_settings()
    else:
        settings_path = options.settings.expanduser()
        try:
            config = load_settings(settings_path)
        except FileNotFoundError:
            raise _fail(f"Error: Settings file not found: {settings_path}") from None
        except ValidationError as e:
            typer.echo("Configuration errors:", err=True)
            for error in e.errors():
                loc = ".".join(str(x) for x in error["loc"])
                typer.echo(f"  - {loc}: {error['msg']}", err=True)
            raise typer.Exit(1) from None

    updates: dict[str, object] = {}
    if options.graph_file is not None:
        updates["graph"] = config.graph.model_copy(update={"file": options.graph_file})
    if options.store is not None:
        updates["storage"] = config.storage.model_copy(update={"path": options.store})
    if request_url is not None:
        updates["request_url"] = request_url
    return config.model_copy(update=updates) if updates else config


@contextmanager
def _errors_to_exit() -> Iterator[None]:
    """Report terminal errors in red and exit with status 1."""
    try:
        yield
    except GraphLoadError as e:
        raise _fail(f"Error loading graph: {e}") from None
    except MappingDocumentError as e:
        raise _fail(f"Error reading mapping document: {e}") from None
    except LifecycleError as e:
        raise _fail(f"Error: {e}") from None


def _build_system(ctx: typer.Context, request_url: str | None = None) -> PrefillSystem:
    from prefill.clients import load_graph
    from prefill.core.persistence import JsonFileMappingRepository
    from prefill.core.system import PrefillSystem

    config = _resolve_settings(ctx.obj, request_url)
    with _errors_to_exit():
        graph = load_graph(config)
        return PrefillSystem.create(
            graph,
            config,
            repository=JsonFileMappingRepository(config.storage.path),
            notifier=ConsoleNotifier(),
            load_plugins=True,
        )


def _require_form(system: PrefillSystem, form_id: str) -> None:
    if system.select_form(form_id) is None:
        raise _fail(f"Error: Unknown form: {form_id}")


# === Commands ===


@app.command()
def forms(
    ctx: typer.Context,
    as_json: bool = typer.Option(False, "--json", help="Output JSON."),
) -> None:
    """List the forms of the intake graph."""
    system = _build_system(ctx)
    summaries = system.list_forms()

    if as_json:
        rows = [
            {
                "id": s.form.id,
                "name": s.form.name,
                "direct": s.direct_count,
                "transitive": s.transitive_count,
                "fields": list(s.field_ids),
            }
            for s in summaries
        ]
        typer.echo(json.dumps(rows, indent=2))
        return

    if not summaries:
        typer.echo("No forms in graph.")
        return
    for s in summaries:
        typer.echo(
            f"{s.form.id}  {s.form.display_name}  "
            f"(direct: {s.direct_count}, transitive: {s.transitive_count}, fields: {len(s.field_ids)})"
        )


@app.command()
def deps(
    ctx: typer.Context,
    form_id: str = typer.Argument(..., help="Form to resolve."),
) -> None:
    """Show the direct and transitive dependencies of a form."""
    system = _build_system(ctx)
    _require_form(system, form_id)
    resolved = system.dependencies(form_id)

    for category, nodes in (
        (DependencyCategory.DIRECT, resolved.direct),
        (DependencyCategory.TRANSITIVE, resolved.transitive),
    ):
        typer.echo(f"{category}:")
        if not nodes:
            typer.echo("  (none)")
        for node in nodes:
            typer.echo(f"  {node.id}  {node.display_name}")


@app.command()
def fields(
    ctx: typer.Context,
    form_id: str = typer.Argument(..., help="Form whose fields to list."),
) -> None:
    """List a form's fields with their prefill state."""
    system = _build_system(ctx)
    _require_form(system, form_id)

    form_fields = system.fields()
    if not form_fields:
        typer.echo("No fields.")
        return
    for f in form_fields:
        marker = "*" if f.required else " "
        line = f"{marker} {f.id}  {f.name}  [{f.type}]  {system.state(f.id)}"
        display = system.display(f.id)
        if display is not None:
            line += f"  {display}"
        typer.echo(line)


@app.command()
def sources(
    ctx: typer.Context,
    form_id: str = typer.Argument(..., help="Form to enumerate sources for."),
    url: str | None = typer.Option(None, "--url", help="Request URL whose query parameters are offered."),
) -> None:
    """List the candidate data sources for a form."""
    system = _build_system(ctx, request_url=url)
    _require_form(system, form_id)

    for group in system.sources():
        typer.secho(f"{group.name}:", bold=True)
        if group.error is not None:
            typer.secho(f"  error: {group.error}", fg=typer.colors.RED)
            continue
        if not group.sources:
            typer.echo("  (none)")
        for category, items in group.by_category().items():
            typer.echo(f"  {category}")
            for source in items:
                field_type = source.field_type or "?"
                typer.echo(f"    {source.id}  {source.display_name}  [{field_type}]")


@app.command(name="map")
def map_field(
    ctx: typer.Context,
    form_id: str = typer.Argument(..., help="Form owning the target field."),
    field_id: str = typer.Argument(..., help="Field to prefill."),
    source_id: str = typer.Argument(..., help="Source id as listed by 'prefill sources'."),
    source_type: str | None = typer.Option(None, "--type", "-t", help="Restrict the lookup to one source type."),
    url: str | None = typer.Option(None, "--url", help="Request URL whose query parameters are offered."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Save even when validation warns."),
) -> None:
    """Map a field to a data source."""
    system = _build_system(ctx, request_url=url)
    _require_form(system, form_id)

    if system.field(field_id) is None:
        raise _fail(f"Error: Unknown field '{field_id}' on form {form_id}")
    source = system.find_source(source_id, source_type)
    if source is None:
        raise _fail(f"Error: Source not found: {source_id}")

    with _errors_to_exit():
        result = system.save(field_id, source)
        if not result.committed:
            for warning in result.warnings:
                typer.secho(f"Warning: {warning}", fg=typer.colors.YELLOW, err=True)
            if not yes:
                typer.echo("Not saved. Re-run with --yes to save anyway.", err=True)
                raise typer.Exit(1)
            result = system.save(field_id, source)

    typer.echo(f"{form_id}.{field_id}  {system.display(field_id)}")


@app.command()
def unmap(
    ctx: typer.Context,
    form_id: str = typer.Argument(..., help="Form owning the field."),
    field_id: str = typer.Argument(..., help="Field whose mapping to remove."),
) -> None:
    """Remove a field's prefill mapping."""
    system = _build_system(ctx)
    _require_form(system, form_id)

    if not system.remove(field_id):
        typer.echo(f"No mapping for {form_id}.{field_id}.")


@app.command()
def show(
    ctx: typer.Context,
    form_id: str | None = typer.Argument(None, help="Limit output to one form."),
    url: str | None = typer.Option(None, "--url", help="Request URL used to resolve URL-parameter mappings."),
    as_json: bool = typer.Option(False, "--json", help="Output the mapping document as JSON."),
) -> None:
    """Show saved mappings and what they resolve to."""
    system = _build_system(ctx, request_url=url)
    snapshot = system.snapshot()

    if as_json:
        document = snapshot.to_document()
        if form_id is not None:
            document = {form_id: document[form_id]} if form_id in document else {}
        typer.echo(json.dumps(document, indent=2, ensure_ascii=False))
        return

    rows = [row for row in snapshot.items() if form_id is None or row[0] == form_id]
    if not rows:
        typer.echo("No mappings.")
        return
    for mapped_form_id, mapped_field_id, mapping in rows:
        resolved = system.resolve_mapping(mapped_field_id, form_id=mapped_form_id)
        value = "unresolved" if resolved is None else repr(resolved.value)
        typer.echo(f"{mapped_form_id}.{mapped_field_id}  {mapping.describe()}  = {value}")


if __name__ == "__main__":
    app()
