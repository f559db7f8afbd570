"""
CLI command implementations.

This module contains the implementation of the CLI commands:
- diff: Compute the replication diff from JSON files
- report: Render a report saved by a previous diff
"""

import argparse
import json
import logging
from typing import Any

from prometheus_client import CollectorRegistry

from utils.logging import ContextLogger
from utils.metrics import ReplicationMetrics, write_metrics_file

from ..diff import DiffOptions, compute_diff
from ..errors import ReplicationError, ReplicationSchemaError
from ..inventory import build_inventory_from_contract, build_payload_index, count_manifest_objects
from ..report import (
    ReportStatus,
    export_report_csv,
    export_report_json,
    format_report_console,
    generate_report,
)
from .options import comparison_options_from_args
from .schemas import (
    CONTRACT_SCHEMA,
    DESIRED_ITEMS_SCHEMA,
    MANIFEST_SCHEMA,
    REPORT_SCHEMA,
    validate_document,
)

logger = logging.getLogger(__name__)

EXIT_IN_SYNC = 0
EXIT_DRIFT = 1
EXIT_INVALID_INPUT = 2


def load_document(path: str, schema: dict[str, Any], name: str) -> Any:
    """
    Load and validate a JSON input file

    Args:
        path: File path
        schema: JSON schema the document must match
        name: Document name for messages

    Returns:
        Parsed document

    Raises:
        ReplicationSchemaError: If the file is not UTF-8 JSON or fails validation
        OSError: If the file cannot be read
    """
    logger.debug(f"Loading {name} from {path}")

    with open(path, encoding="utf-8") as f:
        try:
            document = json.load(f)
        except json.JSONDecodeError as e:
            raise ReplicationSchemaError(f"{path} is not valid JSON: {e}") from e
        except UnicodeDecodeError as e:
            raise ReplicationSchemaError(f"{path} is not valid UTF-8: {e}") from e

    validate_document(document, schema, name)
    return document


def write_report(report: dict[str, Any], output_format: str, output: str | None) -> None:
    """
    Render a report in the requested format

    Console and JSON go to stdout when no output file is given.

    Args:
        report: Report dictionary
        output_format: console, json or csv
        output: Output file path
    """
    if output_format == "csv":
        export_report_csv(report, output)
    elif output_format == "json":
        if output:
            export_report_json(report, output)
        else:
            print(json.dumps(report, indent=2))
    else:
        text = format_report_console(report)
        if output:
            with open(output, 'w') as f:
                f.write(text + "\n")
        else:
            print(text)

    if output:
        logger.info(f"Report exported to {output}")


def cmd_diff(args: argparse.Namespace) -> int:
    """
    Compute the replication diff and report it

    Args:
        args: Parsed command-line arguments

    Returns:
        Process exit code
    """
    logger.info("Starting replication diff")

    registry = CollectorRegistry() if args.metrics_file else None
    metrics = ReplicationMetrics(registry=registry) if registry is not None else None

    try:
        desired_items = load_document(args.desired, DESIRED_ITEMS_SCHEMA, "desired items")
        contract = load_document(args.contract, CONTRACT_SCHEMA, "contract")

        inventory = build_inventory_from_contract(contract)
        if args.manifest:
            manifest = load_document(args.manifest, MANIFEST_SCHEMA, "manifest")
            inventory = inventory.with_payloads(build_payload_index(manifest))
            logger.info(
                f"Edit detection enabled: {count_manifest_objects(manifest)} "
                f"manifest objects loaded"
            )

        options = DiffOptions(
            comparison=comparison_options_from_args(args),
            report_differences=args.report_differences,
            metrics=metrics,
        )
        diff = compute_diff(desired_items, inventory, options)

    except (ReplicationError, OSError) as e:
        logger.error(f"Replication diff failed: {e}")
        return EXIT_INVALID_INPUT

    finally:
        if registry is not None:
            write_metrics_file(args.metrics_file, registry)

    run_logger = ContextLogger(__name__, contract_anchor=inventory.contract_anchor or "unknown")

    report = generate_report(diff, inventory, desired_count=len(desired_items))
    write_report(report, args.format, args.output)

    if args.operations:
        with open(args.operations, 'w') as f:
            json.dump(diff.to_dict(), f, indent=2)
        run_logger.info(f"Operations exported to {args.operations}", total=diff.total)

    run_logger.info(
        f"Replication status: {report['status']}",
        creates=report["creates"],
        edits=report["edits"],
        deletes=report["deletes"],
        conflicts=report["conflicts"],
    )

    return EXIT_IN_SYNC if report["status"] == ReportStatus.IN_SYNC else EXIT_DRIFT


def cmd_report(args: argparse.Namespace) -> int:
    """
    Render a report saved by a previous diff run

    Args:
        args: Parsed command-line arguments

    Returns:
        Process exit code
    """
    logger.info(f"Loading replication report from {args.input}")

    try:
        report = load_document(args.input, REPORT_SCHEMA, "report")
    except (ReplicationError, OSError) as e:
        logger.error(f"Failed to process report: {e}")
        return EXIT_INVALID_INPUT

    write_report(report, args.format, args.output)
    return EXIT_IN_SYNC
