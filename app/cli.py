import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from sheetimport.errors import ProfileNotFoundError, StructuralMismatch
from sheetimport.extractors.excel import ExcelReader
from sheetimport.logger import set_level
from sheetimport.pipeline import run_import
from sheetimport.profile_loader import list_profiles, load_profile
from sheetimport.template import generate_template
from sheetimport.upsert import InMemoryUpsertService, build_upsert_payload

EXIT_OK = 0
EXIT_INVALID_ROWS = 1
EXIT_ERROR = 1
EXIT_STRUCTURAL_MISMATCH = 2


def read_input(raw: str) -> Optional[bytes]:
    path = Path(raw).expanduser()
    if not path.is_file():
        print(f"[error] input not found: {raw}")
        return None
    return path.read_bytes()


def write_json_output(payload: Dict[str, Any], output: str) -> str:
    out = Path(output).expanduser().resolve()
    out.parent.mkdir(parents=True, exist_ok=True)
    with open(out, "w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False, indent=2, default=str)
    return str(out)


def cmd_parse(args: argparse.Namespace) -> int:
    data = read_input(args.input)
    if data is None:
        return EXIT_ERROR
    profile = load_profile(args.profile)
    try:
        result = run_import(data, profile, filename=Path(args.input).name)
    except StructuralMismatch as e:
        print(str(e))
        return EXIT_STRUCTURAL_MISMATCH

    payload = build_upsert_payload(result, profile.internal_keys)
    print(f"Rows: {len(result.rows)}")
    for message in result.validation.messages:
        print(message)
    for warning in result.warnings:
        print(f"[warn] {warning.message}")

    output: Dict[str, Any] = {
        "profile_id": result.profile_id,
        "rows": payload,
        "errors": [e.model_dump() for e in result.validation.errors],
        "warnings": [w.model_dump() for w in result.warnings],
    }
    if args.dry_run:
        counts = InMemoryUpsertService().upsert(payload)
        output["upsert"] = counts.model_dump()
        print(f"Dry run: {counts.total} total, {counts.inserted} inserted, {counts.updated} updated")
    if args.output:
        print("JSON:", write_json_output(output, args.output))

    if not result.validation.is_valid:
        return EXIT_INVALID_ROWS
    return EXIT_OK


def cmd_template(args: argparse.Namespace) -> int:
    profile = load_profile(args.profile)
    generate_template(profile.column_schema, sheet_name=profile.sheet_name, path=args.output)
    print("Template:", args.output)
    return EXIT_OK


def cmd_headers(args: argparse.Namespace) -> int:
    data = read_input(args.input)
    if data is None:
        return EXIT_ERROR
    for header in ExcelReader().read_headers(data, filename=Path(args.input).name):
        print(header)
    return EXIT_OK


def cmd_profiles(args: argparse.Namespace) -> int:
    for profile_id in list_profiles():
        print(profile_id)
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Import commodity spreadsheets against a column profile."
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Override SHEETIMPORT_LOG_LEVEL for this run.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("parse", help="Parse and validate a spreadsheet.")
    p.add_argument("--profile", required=True, help="Profile id or YAML path.")
    p.add_argument("--input", required=True, help="Spreadsheet file (.xlsx or .xls).")
    p.add_argument("--output", default=None, help="Write rows, errors and warnings as JSON.")
    p.add_argument("--dry-run", action="store_true", help="Count inserts/updates in memory.")
    p.set_defaults(func=cmd_parse)

    p = sub.add_parser("template", help="Write an import template for a profile.")
    p.add_argument("--profile", required=True, help="Profile id or YAML path.")
    p.add_argument("--output", required=True, help="Destination .xlsx path.")
    p.set_defaults(func=cmd_template)

    p = sub.add_parser("headers", help="Print the first row of a spreadsheet.")
    p.add_argument("--input", required=True, help="Spreadsheet file (.xlsx or .xls).")
    p.set_defaults(func=cmd_headers)

    p = sub.add_parser("profiles", help="List available import profiles.")
    p.set_defaults(func=cmd_profiles)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.log_level:
        set_level(getattr(logging, args.log_level))
    # ValueError covers unreadable workbooks and malformed profiles
    # (pydantic ValidationError).
    try:
        return args.func(args)
    except (ProfileNotFoundError, ValueError, yaml.YAMLError) as e:
        print(f"[error] {e}")
        return EXIT_ERROR


if __name__ == "__main__":
    raise SystemExit(main())
