"""
Report formatting and export utilities.

This module provides functions to export replication reports
in various formats: JSON, CSV, and console/terminal output.
"""

import csv
import json
from typing import Any

CSV_HEADER = ["Entity Type", "ID", "Operation", "Security ID", "Message"]


def export_report_json(report: dict[str, Any], output_path: str) -> None:
    """
    Export report to JSON file

    Args:
        report: Report dictionary
        output_path: Path to output file
    """
    with open(output_path, 'w') as f:
        json.dump(report, f, indent=2)


def export_report_csv(report: dict[str, Any], output_path: str) -> None:
    """
    Export report to CSV file

    One row per operation, followed by one ``conflict`` row per conflict.

    Args:
        report: Report dictionary
        output_path: Path to output file
    """
    with open(output_path, 'w', newline='') as f:
        writer = csv.writer(f)
        writer.writerow(CSV_HEADER)

        for operation in report.get("operations", []):
            writer.writerow([
                operation.get("type", ""),
                operation.get("id", ""),
                operation.get("operation", ""),
                "",
                "",
            ])

        for conflict in report.get("conflict_details", []):
            writer.writerow([
                conflict.get("type", ""),
                conflict.get("id", ""),
                "conflict",
                conflict.get("secondary_key", ""),
                conflict.get("message", ""),
            ])


def format_report_console(report: dict[str, Any]) -> str:
    """
    Format report for console output

    Args:
        report: Report dictionary

    Returns:
        Formatted string for console display
    """
    lines = []

    lines.append("=" * 80)
    lines.append("REPLICATION REPORT")
    lines.append("=" * 80)
    lines.append(f"Status: {report['status']}")
    lines.append(f"Timestamp: {report['timestamp']}")
    if report.get("contract_anchor"):
        lines.append(f"Contract: {report['contract_anchor']}")
    if report.get("desired_items") is not None:
        lines.append(f"Desired Items: {report['desired_items']:,}")
    if report.get("ledger_entities") is not None:
        lines.append(f"Ledger Entities: {report['ledger_entities']:,}")
    lines.append(f"Creates: {report['creates']}")
    lines.append(f"Edits: {report['edits']}")
    lines.append(f"Deletes: {report['deletes']}")
    lines.append(f"Conflicts: {report['conflicts']}")
    lines.append("")

    lines.append("SUMMARY")
    lines.append("-" * 80)
    lines.append(report['summary'])
    lines.append("")

    if report.get('breakdown'):
        lines.append("BREAKDOWN")
        lines.append("-" * 80)
        for entry in report['breakdown']:
            lines.append(f"{entry['entity_type']}: {entry['description']}")
        lines.append("")

    if report.get('conflict_details'):
        lines.append("CONFLICTS")
        lines.append("-" * 80)
        for conflict in report['conflict_details']:
            lines.append(f"{conflict['type']} {conflict['id']}")
            lines.append(f"  security_id: {conflict['secondary_key']}")
            lines.append(f"  {conflict['message']}")
        lines.append("")

    if report.get('recommendations'):
        lines.append("RECOMMENDATIONS")
        lines.append("-" * 80)
        for i, rec in enumerate(report['recommendations'], 1):
            lines.append(f"{i}. {rec}")
        lines.append("")

    lines.append("=" * 80)

    return "\n".join(lines)
