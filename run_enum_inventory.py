#!/usr/bin/env python3
"""
Enum inventory for C# projects and solutions.

Scans every regular C# document of a project (or of every project in a
solution, concurrently), collects all enum declarations with their members'
initializer text and <summary> doc comments, and prints one table per enum
sorted by enum name.

Usage:
    python run_enum_inventory.py path/to/Demo.csproj
    python run_enum_inventory.py path/to/Demo.sln --max-workers 4
    python run_enum_inventory.py path/to/Demo.sln --continue-on-project-error --report-dir output/run_reports
"""

import argparse
import logging
import sys
from dataclasses import replace
from typing import List, Optional

from rich.console import Console

from core.run_artifacts import build_run_report, write_run_report
from core.settings import (
    ConfigValidationError,
    InventorySettings,
    load_inventory_settings,
    resolve_strict_config_validation,
)
from core.structured_logging import configure_structured_logging, set_run_id
from enum_extraction.extractor import InventoryResult, run_inventory
from enum_extraction.report import render_failures, render_inventory
from enum_extraction.workspace import is_solution_path

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed argument namespace.
    """
    parser = argparse.ArgumentParser(
        description="Inventory of C# enum declarations with member values and doc comments",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  python run_enum_inventory.py src/Demo/Demo.csproj\n"
            "  python run_enum_inventory.py Demo.sln --max-workers 4\n"
        ),
    )

    parser.add_argument(
        "project_path",
        nargs="?",
        default=None,
        help="Path to project or solution file.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Optional YAML settings file.",
    )
    parser.add_argument(
        "--max-workers",
        type=int,
        default=None,
        help="Parallel project workers for solutions. Default: executor default.",
    )
    parser.add_argument(
        "--continue-on-project-error",
        action="store_true",
        default=None,
        help="Report the projects that succeeded when another project fails.",
    )
    parser.add_argument(
        "--report-dir",
        default=None,
        help="Write a JSON run report to this directory.",
    )
    parser.add_argument(
        "--strict-config",
        action="store_true",
        default=resolve_strict_config_validation(default=False),
        help="Fail on invalid settings instead of falling back to defaults.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        default=False,
        help="Enable debug logging.",
    )

    return parser.parse_args(argv)


def _apply_cli_overrides(settings: InventorySettings, args: argparse.Namespace) -> InventorySettings:
    updates = {}
    if args.max_workers is not None:
        updates["max_workers"] = max(0, args.max_workers)
    if args.continue_on_project_error is not None:
        updates["continue_on_project_error"] = args.continue_on_project_error
    if args.report_dir is not None:
        updates["report_dir"] = args.report_dir
    if args.verbose:
        updates["log_level"] = "DEBUG"
    return replace(settings, **updates)


def _write_report(
    settings: InventorySettings,
    run_id: str,
    input_path: str,
    result: Optional[InventoryResult] = None,
    error: Optional[BaseException] = None,
) -> None:
    if not settings.report_dir:
        return
    if result is not None:
        report = build_run_report(
            run_id=run_id,
            input_path=input_path,
            status="partial_success" if result.failed_projects else "success",
            records=result.records,
            stats=result.stats.to_dict(),
            failed_projects=result.failed_projects,
            failed_documents=result.failed_documents,
        )
    else:
        report = build_run_report(
            run_id=run_id,
            input_path=input_path,
            status="failed",
            error=str(error),
        )
    path = write_run_report(report, run_id, output_dir=settings.report_dir)
    logger.info("Run report written: %s", path)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point; returns the process exit code."""
    args = parse_args(argv)
    console = Console()

    if not args.project_path:
        console.print("[red]ProjectPath is a required parameter[/]")
        return EXIT_USAGE

    configure_structured_logging(level=logging.INFO)
    run_id = set_run_id()

    try:
        settings = load_inventory_settings(args.config, strict=args.strict_config)
    except ConfigValidationError as e:
        logger.error("Invalid settings: %s", e)
        return EXIT_FAILURE
    settings = _apply_cli_overrides(settings, args)
    configure_structured_logging(level=getattr(logging, settings.log_level))

    kind = "solution" if is_solution_path(args.project_path) else "project"
    console.print(f"Opening {kind} {args.project_path}", markup=False)

    try:
        result = run_inventory(
            args.project_path,
            max_workers=settings.effective_max_workers,
            continue_on_project_error=settings.continue_on_project_error,
            extra_excluded_dirs=settings.extra_excluded_dirs,
        )
    except Exception as e:
        logger.error("Enum inventory failed: %s", e, exc_info=True)
        _write_report(settings, run_id, args.project_path, error=e)
        return EXIT_FAILURE

    render_inventory(result.records, console)
    render_failures(result.failed_projects, result.failed_documents)
    logger.info("Inventory complete: %d enums. %s", len(result.records), result.stats)

    _write_report(settings, run_id, args.project_path, result=result)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
