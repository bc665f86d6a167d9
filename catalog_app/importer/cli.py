"""
CLI commands for running name imports and inspecting import history.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import click
from flask.cli import ScriptInfo

from catalog_app.importer.adapters import CSVAdapterError, read_csv_file
from catalog_app.importer.contracts import NAME_IMPORT_FIELDS
from catalog_app.importer.errors import ImportAbortedError, ImportValidationError
from catalog_app.importer.mapping import ColumnMapping, ImportOptions
from catalog_app.importer.pipeline.history_service import HistoryFilters, ImportHistoryService
from catalog_app.importer.pipeline.orchestrator import ImportSummary, run_import
from catalog_app.utils.importer import is_importer_enabled

_KNOWN_MAPPING_KEYS = {key for spec in NAME_IMPORT_FIELDS for key in spec.mapping_keys()}


@click.group(name="importer", invoke_without_command=True)
@click.pass_context
def importer_cli(ctx):
    """
    Name import commands.

    Shows the accepted mapping fields when invoked without a subcommand.
    """
    info = ctx.ensure_object(ScriptInfo)
    app = info.load_app()
    if not is_importer_enabled(app):
        raise click.ClickException(
            "Importer is disabled via IMPORTER_ENABLED=false. " "Enable it to run importer CLI commands."
        )
    if ctx.invoked_subcommand is None:
        click.echo("Mapping fields (use --map field=Header):")
        for spec in NAME_IMPORT_FIELDS:
            marker = " (required)" if spec.required else ""
            click.echo(f"  - {spec.name}{marker}")


def get_disabled_importer_group() -> click.Group:
    """
    Return a minimal command group that informs the operator the importer is disabled.
    """

    @click.group(name="importer", invoke_without_command=True)
    def disabled_group():
        raise click.ClickException("Importer commands are unavailable because IMPORTER_ENABLED=false.")

    return disabled_group


def _parse_mapping_options(values: tuple[str, ...]) -> dict[str, str]:
    mapping: dict[str, str] = {}
    for value in values:
        field, separator, header = value.partition("=")
        field = field.strip()
        if not separator or not field or not header.strip():
            raise click.BadParameter(f"Expected field=Header, received '{value}'.", param_hint="--map")
        if field not in _KNOWN_MAPPING_KEYS:
            raise click.BadParameter(f"Unknown mapping field '{field}'.", param_hint="--map")
        mapping[field] = header.strip()
    return mapping


def _format_summary(summary: ImportSummary) -> str:
    lines = [
        f"Import {summary.import_id} completed.",
        f"  total_rows          : {summary.total_rows}",
        f"  successful          : {summary.successful_count}",
        f"  failed              : {summary.failed_count}",
        f"  skipped             : {summary.skipped_count}",
        f"  religions_created   : {summary.new_religions_created}",
        f"  origins_created     : {summary.new_origins_created}",
    ]
    for outcome in summary.failed:
        lines.append(f"  row {outcome.row} ({outcome.name or 'n/a'}): {outcome.message}")
    return "\n".join(lines)


@importer_cli.command("run")
@click.option(
    "--file",
    "file_path",
    required=True,
    type=click.Path(path_type=Path, exists=True, dir_okay=False),
    help="Path to the CSV file to import.",
)
@click.option("--map", "mappings", multiple=True, help="Column mapping as field=Header; repeatable.")
@click.option("--auto-detect-gender", is_flag=True, help="Guess gender from the name when no column is mapped.")
@click.option("--skip-duplicates", is_flag=True, help="Skip rows whose name already exists.")
@click.option("--update-duplicates", is_flag=True, help="Update existing names in place instead of failing.")
@click.option("--importer-id", type=int, help="User id recorded as the importer.")
@click.option("--source-label", help="Label stored on the import record; defaults to the file name.")
@click.option("--summary-json", is_flag=True, help="Emit a machine-readable summary payload after completion.")
@click.pass_context
def importer_run(
    ctx,
    file_path: Path,
    mappings: tuple[str, ...],
    auto_detect_gender: bool,
    skip_duplicates: bool,
    update_duplicates: bool,
    importer_id: Optional[int],
    source_label: Optional[str],
    summary_json: bool,
):
    """
    Import names from a CSV file synchronously.
    """
    info = ctx.ensure_object(ScriptInfo)
    app = info.load_app()

    mapping = ColumnMapping.coerce(_parse_mapping_options(mappings))
    options = ImportOptions(
        auto_detect_gender=auto_detect_gender,
        skip_duplicates=skip_duplicates,
        update_duplicates=update_duplicates,
    )

    try:
        rows = read_csv_file(file_path)
    except (UnicodeDecodeError, CSVAdapterError) as exc:
        raise click.ClickException(f"Error parsing CSV file: {exc}") from exc

    with app.app_context():
        try:
            summary = run_import(
                rows,
                mapping,
                options,
                importer=importer_id,
                source_label=source_label or file_path.name,
            )
        except ImportValidationError as exc:
            raise click.ClickException(str(exc)) from exc
        except ImportAbortedError as exc:
            raise click.ClickException(f"Import {exc.import_id} failed: {exc.cause}") from exc

    if summary_json:
        click.echo(json.dumps(summary.as_dict(), indent=2))
    else:
        click.echo(_format_summary(summary))


@importer_cli.command("history")
@click.option("--page", default="1", show_default=True, help="Page number.")
@click.option("--limit", default=None, help="Imports per page (max 100).")
@click.option("--json", "as_json", is_flag=True, help="Emit JSON instead of a table.")
@click.pass_context
def importer_history(ctx, page: str, limit: Optional[str], as_json: bool):
    """
    List recent imports, newest first.
    """
    info = ctx.ensure_object(ScriptInfo)
    app = info.load_app()

    with app.app_context():
        filters = HistoryFilters.coerce(
            page=page,
            limit=limit,
            default_limit=int(app.config.get("IMPORTER_HISTORY_PAGE_SIZE", 10)),
        )
        result = ImportHistoryService().list_imports(filters)

    if as_json:
        payload = {
            "imports": [item.as_dict() for item in result.items],
            "pagination": result.pagination(),
        }
        click.echo(json.dumps(payload, indent=2))
        return

    if not result.items:
        click.echo("No imports recorded.")
        return
    for item in result.items:
        created = item.created_at.isoformat() if item.created_at else "n/a"
        click.echo(
            f"#{item.id} {item.status:<10} {item.filename} "
            f"total={item.total_rows} ok={item.successful_rows} failed={item.failed_rows} "
            f"skipped={item.skipped_rows} at {created}"
        )
    pagination = result.pagination()
    click.echo(f"Page {pagination['currentPage']} of {pagination['totalPages']} ({pagination['totalItems']} imports)")
