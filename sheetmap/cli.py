"""Typer based command line entry points for SheetMap."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Optional, Tuple, Union

import typer
from openpyxl.utils.cell import column_index_from_string, coordinate_from_string
from openpyxl.utils.exceptions import CellCoordinatesException

from sheetmap.config import list_catalogs, load_catalog
from sheetmap.core.errors import ExtractionPreconditionError, SheetMapError
from sheetmap.core.logger import get_logger
from sheetmap.core.settings import get_settings
from sheetmap.services.extraction import ensure_extractable, extract
from sheetmap.services.mapping import Mapping
from sheetmap.services.wizard import Configure, ReadyForExtraction, SelectHeaders, resume_wizard, start_wizard
from sheetmap_io import MappingStore, MappingStoreError, Workbook, export_records, load_workbook

app = typer.Typer(help="Map spreadsheet columns to catalog fields and extract typed records.")
mappings_app = typer.Typer(name="mappings", help="List and delete saved mappings.")
app.add_typer(mappings_app, name="mappings")


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        "INFO",
        "--log-level",
        help="Set global logging level (e.g. DEBUG/INFO/WARNING).",
    ),
) -> None:
    """Configure global CLI behaviour before executing commands."""

    logger = get_logger()

    level_value = getattr(logging, log_level.upper(), None)
    if not isinstance(level_value, int):
        raise typer.BadParameter(f"Unknown log level: {log_level}")

    logging.getLogger().setLevel(level_value)
    logger.setLevel(level_value)


def _fail(message: str, code: int) -> typer.Exit:
    typer.secho(message, fg=typer.colors.RED, err=True)
    return typer.Exit(code=code)


def _store(mapping_dir: Optional[Path]) -> MappingStore:
    return MappingStore(mapping_dir or get_settings().mapping_dir)


def _parse_cell(ref: str, default_sheet: str) -> Tuple[str, int, int]:
    """Turn ``B3`` or ``Sheet1!B3`` into zero-based ``(sheet, row, column)``."""

    sheet, _, coordinate = ref.rpartition("!")
    sheet = sheet.strip("'") or default_sheet
    try:
        letters, row = coordinate_from_string(coordinate.strip().upper())
        column = column_index_from_string(letters)
    except (CellCoordinatesException, ValueError) as exc:
        raise typer.BadParameter(f"Invalid cell reference: {ref}", param_hint="--cell") from exc
    return sheet, row - 1, column - 1


def _parse_indexed(item: str, count: int, option: str) -> Tuple[int, str]:
    """Split ``N=VALUE`` into a zero-based binding index and the value."""

    index_text, sep, value = item.partition("=")
    try:
        index = int(index_text) - 1
    except ValueError as exc:
        raise typer.BadParameter(f"Expected N=VALUE, got: {item}", param_hint=option) from exc
    if not sep or not value.strip():
        raise typer.BadParameter(f"Expected N=VALUE, got: {item}", param_hint=option)
    if not 0 <= index < count:
        raise typer.BadParameter(f"No binding number {index + 1}", param_hint=option)
    return index, value.strip()


def _apply_assignments(configure: Configure, assign: List[str]) -> None:
    for item in assign:
        index, field_name = _parse_indexed(item, len(configure.mapping), "--assign")
        if not configure.reassign(index, field_name):
            raise typer.BadParameter(f"Cannot assign {field_name!r} to binding {index + 1}", param_hint="--assign")


def _echo_bindings(step: Union[Configure, ReadyForExtraction]) -> None:
    for idx, binding in enumerate(step.bindings, start=1):
        label = binding.display_label or ""
        typer.echo(f"{idx:>3}. {binding.field_name:<28} <- {binding.position} ({label})")


@app.command("catalogs")
def cli_catalogs() -> None:
    """List the available field catalogs."""

    keys = list_catalogs()
    if not keys:
        typer.echo(f"No catalogs found in {get_settings().catalog_dir}")
        return
    for key in keys:
        typer.echo(key)


@app.command("fields")
def cli_fields(
    catalog: str = typer.Argument(..., help="Catalog key, e.g. 'salary'"),
) -> None:
    """Show the fields of one catalog in order."""

    try:
        fields = load_catalog(catalog)
    except SheetMapError as exc:
        raise _fail(f"Failed to load catalog: {exc}", code=2) from exc

    for idx, item in enumerate(fields, start=1):
        required = "required" if item.is_required else "optional"
        typer.echo(f"{idx:>3}. {item.field_name:<28} {item.type.name:<8} {required:<9} {item.display_label}")


@app.command("sheets")
def cli_sheets(
    workbook: Path = typer.Argument(..., exists=True, dir_okay=False, resolve_path=True, help="Workbook file"),
    include_hidden: bool = typer.Option(False, "--include-hidden", help="Also list hidden sheets"),
) -> None:
    """List the sheets of a workbook with their populated size."""

    try:
        book = load_workbook(workbook, include_hidden=include_hidden)
    except ValueError as exc:
        raise _fail(str(exc), code=2) from exc

    for sheet in book.sheets.values():
        suffix = " (hidden)" if sheet.hidden else ""
        typer.echo(f"{sheet.name}: {sheet.n_rows} rows x {sheet.n_columns} columns{suffix}")


@app.command("map")
def cli_map(
    workbook: Path = typer.Argument(..., exists=True, dir_okay=False, resolve_path=True, help="Source workbook"),
    catalog: str = typer.Option(..., "--catalog", "-c", help="Catalog key to map against"),
    name: str = typer.Option(..., "--name", "-n", help="Name to save the mapping under"),
    cells: List[str] = typer.Option(
        [],
        "--cell",
        help="Cell to select, e.g. B2 or 'Sheet1!B2' (repeat; fields are assigned in catalog order)",
    ),
    sheet: Optional[str] = typer.Option(None, "--sheet", help="Sheet for references without a sheet prefix"),
    header: bool = typer.Option(True, "--header/--no-header", help="Selected cells are headers (default) or data starts"),
    start_row: Optional[int] = typer.Option(
        None, "--start-row", min=1, help="Common 1-based data start row (header mode only)"
    ),
    assign: List[str] = typer.Option(
        [],
        "--assign",
        help="Reassign a binding as INDEX=FIELD (1-based index, repeatable)",
    ),
    mapping_dir: Optional[Path] = typer.Option(None, "--mapping-dir", help="Directory holding saved mappings"),
    overwrite: bool = typer.Option(False, "--overwrite/--no-overwrite", help="Replace an existing mapping"),
) -> None:
    """Build a mapping by selecting cells and save it."""

    logger = get_logger()

    if not cells:
        raise typer.BadParameter("At least one --cell is required")
    if start_row is not None and not header:
        raise typer.BadParameter("--start-row only applies with --header", param_hint="--start-row")

    try:
        fields = load_catalog(catalog)
        book = load_workbook(workbook)
    except (SheetMapError, ValueError) as exc:
        raise _fail(str(exc), code=2) from exc

    if not book.sheet_names:
        raise _fail(f"Workbook has no visible sheets: {workbook}", code=2)
    default_sheet = sheet or book.sheet_names[0]

    step = start_wizard(book, fields).choose(has_header=header)
    for ref in cells:
        sheet_name, row, column = _parse_cell(ref, default_sheet)
        if book.get(sheet_name) is None:
            raise typer.BadParameter(f"Unknown sheet in {ref}: {sheet_name}", param_hint="--cell")
        if not step.toggle(sheet_name, row, column):
            typer.secho(f"Skipped {ref}: column already mapped or catalog exhausted", fg=typer.colors.YELLOW)

    try:
        if isinstance(step, SelectHeaders):
            configure = step.confirm().apply(None if start_row is None else start_row - 1)
        else:
            configure = step.confirm()

        _apply_assignments(configure, assign)

        ready = configure.finish()
    except ExtractionPreconditionError as exc:
        raise _fail(str(exc), code=1) from exc
    except SheetMapError as exc:
        raise _fail(str(exc), code=2) from exc

    records = ready.records()
    try:
        path = _store(mapping_dir).save(
            name,
            catalog,
            records,
            template_file_name=workbook.name,
            has_header=header,
            overwrite=overwrite,
        )
    except MappingStoreError as exc:
        raise _fail(str(exc), code=2) from exc

    _echo_bindings(ready)
    logger.info("Mapping '%s' saved with %s bindings", name, len(records))
    typer.echo(f"Mapping saved: {path}")


@app.command("edit")
def cli_edit(
    name: str = typer.Argument(..., help="Saved mapping to edit"),
    workbook: Optional[Path] = typer.Option(
        None, "--workbook", "-w", exists=True, dir_okay=False, resolve_path=True, help="Template workbook for a preview"
    ),
    assign: List[str] = typer.Option([], "--assign", help="Reassign a binding as INDEX=FIELD (1-based, repeatable)"),
    start_rows: List[str] = typer.Option([], "--start-row", help="Move a binding's data start as INDEX=ROW (1-based)"),
    labels: List[str] = typer.Option([], "--label", help="Rename a binding as INDEX=TEXT"),
    remove: List[int] = typer.Option([], "--remove", min=1, help="Drop binding INDEX (1-based, repeatable)"),
    save_as: Optional[str] = typer.Option(None, "--save-as", help="Save under a new name instead of replacing"),
    mapping_dir: Optional[Path] = typer.Option(None, "--mapping-dir", help="Directory holding saved mappings"),
) -> None:
    """Reopen a saved mapping, adjust its bindings and save it again."""

    logger = get_logger()
    store = _store(mapping_dir)

    try:
        document = store.load(name)
        fields = load_catalog(document.catalog)
        saved = Mapping.from_records([entry.to_record() for entry in document.details], fields)
        book = load_workbook(workbook) if workbook is not None else Workbook()
        configure = resume_wizard(book, fields, saved.bindings, has_header=document.has_header)
    except (SheetMapError, MappingStoreError, ValueError) as exc:
        raise _fail(str(exc), code=2) from exc

    count = len(configure.mapping)
    _apply_assignments(configure, assign)
    for item in start_rows:
        index, row_text = _parse_indexed(item, count, "--start-row")
        if not row_text.isdigit() or int(row_text) < 1:
            raise typer.BadParameter(f"Start row must be a positive number, got: {row_text}", param_hint="--start-row")
        configure.set_start_row(index, int(row_text) - 1)
    for item in labels:
        index, label = _parse_indexed(item, count, "--label")
        configure.rename(index, label)
    for number in sorted(set(remove), reverse=True):
        if number > count:
            raise typer.BadParameter(f"No binding number {number}", param_hint="--remove")
        configure.remove(number - 1)

    if workbook is not None:
        preview = configure.preview()
        typer.echo(f"Preview: {len(preview.records)} records, {len(preview.errors)} cell errors")

    try:
        ready = configure.finish()
    except ExtractionPreconditionError as exc:
        raise _fail(str(exc), code=1) from exc

    target = save_as or name
    try:
        path = store.save(
            target,
            document.catalog,
            ready.records(),
            template_file_name=workbook.name if workbook is not None else document.template_file_name,
            has_header=document.has_header,
            overwrite=save_as is None,
        )
    except MappingStoreError as exc:
        raise _fail(str(exc), code=2) from exc

    _echo_bindings(ready)
    logger.info("Mapping '%s' edited and saved as '%s'", name, target)
    typer.echo(f"Mapping saved: {path}")


@mappings_app.command("list")
def cli_mappings_list(
    mapping_dir: Optional[Path] = typer.Option(None, "--mapping-dir", help="Directory holding saved mappings"),
) -> None:
    """List saved mappings with their catalog and binding count."""

    store = _store(mapping_dir)
    names = store.list()
    if not names:
        typer.echo(f"No mappings saved in {store.base_dir}")
        return
    for item in names:
        try:
            document = store.load(item)
        except MappingStoreError:
            typer.secho(f"{item}: (invalid)", fg=typer.colors.YELLOW)
            continue
        template = document.template_file_name or "-"
        typer.echo(f"{item}: catalog={document.catalog} bindings={len(document.details)} template={template}")


@mappings_app.command("delete")
def cli_mappings_delete(
    name: str = typer.Argument(..., help="Saved mapping to delete"),
    mapping_dir: Optional[Path] = typer.Option(None, "--mapping-dir", help="Directory holding saved mappings"),
) -> None:
    """Delete a saved mapping."""

    try:
        deleted = _store(mapping_dir).delete(name)
    except MappingStoreError as exc:
        raise _fail(str(exc), code=2) from exc
    if not deleted:
        raise _fail(f"Mapping '{name}' not found", code=2)
    typer.echo(f"Mapping deleted: {name}")


@app.command("extract")
def cli_extract(
    workbook: Path = typer.Argument(..., exists=True, dir_okay=False, resolve_path=True, help="Source workbook"),
    mapping: str = typer.Option(..., "--mapping", "-m", help="Name of a saved mapping"),
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="Export records to this .xlsx file"),
    as_json: bool = typer.Option(False, "--json", help="Print records and cell errors as JSON"),
    mapping_dir: Optional[Path] = typer.Option(None, "--mapping-dir", help="Directory holding saved mappings"),
) -> None:
    """Extract typed records from a workbook with a saved mapping."""

    logger = get_logger()

    try:
        document = _store(mapping_dir).load(mapping)
        fields = load_catalog(document.catalog)
        saved = Mapping.from_records([entry.to_record() for entry in document.details], fields)
        ensure_extractable(saved.bindings, fields)
        book = load_workbook(workbook)
    except ExtractionPreconditionError as exc:
        raise _fail(str(exc), code=1) from exc
    except (SheetMapError, MappingStoreError, ValueError) as exc:
        raise _fail(str(exc), code=2) from exc

    result = extract(book, saved.bindings, fields)
    errors = [err.to_dict() for err in result.errors]

    if as_json:
        payload = {"records": result.records, "errors": errors}
        typer.echo(json.dumps(payload, ensure_ascii=False, indent=2, default=str))
    else:
        typer.echo(result.to_dataframe().to_string(index=False))

    if out is not None:
        written = export_records(result.records, out, columns=result.columns, errors=errors)
        typer.echo(f"Exported: {written}")

    logger.info("Extraction with mapping '%s': %s records", mapping, len(result.records))
    if errors:
        for item in errors:
            typer.secho(f"{item['sheet']}!{item['cell']} [{item['field']}]: {item['message']}", fg=typer.colors.YELLOW, err=True)
        raise _fail(f"{len(errors)} cell(s) failed type conversion", code=1)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
