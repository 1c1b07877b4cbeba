"""CLI demo for the header-mode mapping wizard."""

# Module responsibilities:
# - Generate a placeholder insurance workbook when the requested source does not exist.
# - Drive the wizard over its header row, preview the extraction and export the records.

from __future__ import annotations

import argparse
import sys
from datetime import datetime
from pathlib import Path

import pandas as pd

from sheetmap.config import load_catalog
from sheetmap.services.wizard import start_wizard
from sheetmap_io import MappingStore, export_records, load_workbook
from sheetmap_io.utils.log import get_logger
from sheetmap_io.utils.paths import ensure_default_structure, prepare_output_path

logger = get_logger("tools.demo_mapping")

HEADER_ROW = 2


def _generate_source_example(path: Path) -> None:
    data = pd.DataFrame(
        [
            {
                "Full name": "Nguyen Van A",
                "Insurance code": "7901234567",
                "Date of birth": "15/03/1990",
                "Contribution base": 5200000.5,
                "New participant": "true",
                "Effective date": datetime(2024, 1, 1),
            },
            {
                "Full name": "Tran Thi B",
                "Insurance code": "7907654321",
                "Date of birth": "02-11-1985",
                "Contribution base": 6100000,
                "New participant": "false",
                "Effective date": datetime(2024, 2, 1),
            },
            {
                "Full name": "Le Van C",
                "Insurance code": "7905550000",
                "Date of birth": "not recorded",
                "Contribution base": "n/a",
                "New participant": "yes",
                "Effective date": "2024-03-01",
            },
        ]
    )
    path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        data.to_excel(writer, sheet_name="Declaration", index=False, startrow=HEADER_ROW)
        writer.sheets["Declaration"].cell(row=1, column=1, value="Social insurance declaration")
    logger.info("Generated example source workbook", extra={"path": str(path)})


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Mapping wizard demo")
    parser.add_argument("--source", type=Path, default=Path("samples/insurance_source.xlsx"))
    parser.add_argument("--catalog", default="insurance")
    parser.add_argument("--save-as", default=None, help="Also store the mapping under this name")
    parser.add_argument("--out", type=Path, default=None)
    parser.add_argument("--workspace", type=Path, default=None, help="Override SheetMap base directory")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv or sys.argv[1:])
    paths = ensure_default_structure(args.workspace)

    try:
        if not args.source.exists():
            _generate_source_example(args.source)
        catalog = load_catalog(args.catalog)
        workbook = load_workbook(args.source)
        sheet = workbook.sheet_names[0]

        step = start_wizard(workbook, catalog).choose(has_header=True)
        for column in range(workbook.sheets[sheet].n_columns):
            step.toggle(sheet, HEADER_ROW, column)
        configure = step.confirm().apply()

        preview = configure.preview()
        print(preview.to_dataframe().to_string(index=False))
        for err in preview.errors:
            print(f"  ! {err.position}: {err.message}")

        ready = configure.finish()
        result = ready.extract()

        if args.save_as:
            stored = MappingStore(paths["mappings"]).save(
                args.save_as,
                catalog.key,
                ready.records(),
                template_file_name=args.source.name,
                has_header=True,
            )
            print(f"Mapping saved: {stored}")

        out_path = args.out or prepare_output_path(f"{args.source.stem}_records.xlsx", args.workspace)
        export_records(
            result.records,
            out_path,
            columns=result.columns,
            errors=[err.to_dict() for err in result.errors],
        )
        logger.info(
            "Mapping demo complete",
            extra={"output": str(out_path), "row_count": len(result.records), "errors": len(result.errors)},
        )
        print(f"Records: {len(result.records)}  Cell errors: {len(result.errors)}")
        print(f"Output: {out_path}")
        return 0
    except Exception as exc:  # pylint: disable=broad-except
        logger.error("Mapping demo failed", extra={"error": str(exc)})
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
