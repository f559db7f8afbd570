"""
Command-line argument parser configuration.

This module sets up the argument parser for the ocf-replicate CLI tool,
defining all commands and their options.
"""

import argparse


def create_parser() -> argparse.ArgumentParser:
    """
    Create and configure the argument parser for the CLI.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog="ocf-replicate",
        description="Compute the operations that replicate an OCF cap table onto the ledger",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Diff desired items against the ledger ids (creates, deletes, conflicts)
  ocf-replicate diff --desired items.json --contract contract.json

  # Include a manifest of ledger objects to detect edits
  ocf-replicate diff --desired items.json --contract contract.json --manifest manifest.json

  # Log field-level differences of every edit
  ocf-replicate diff --desired items.json --contract contract.json \\
      --manifest manifest.json --report-differences

  # Save the report and the operations to submit
  ocf-replicate diff --desired items.json --contract contract.json \\
      --format json --output report.json --operations operations.json

  # Write Prometheus metrics for the node exporter textfile collector
  ocf-replicate diff --desired items.json --contract contract.json \\
      --metrics-file /var/lib/node_exporter/replication.prom

  # Re-render a saved report
  ocf-replicate report --input report.json --format console

Exit codes:
  0  ledger in sync
  1  operations pending or security_id conflicts
  2  invalid input
        """
    )

    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        default=None,
        help='Logging level (default: LOG_LEVEL or INFO)'
    )
    parser.add_argument(
        '--log-json',
        action='store_true',
        help='Emit JSON log lines (default: LOG_JSON)'
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # ========== Diff command ==========
    diff_parser = subparsers.add_parser('diff', help='Compute the replication diff')
    diff_parser.add_argument(
        '--desired',
        required=True,
        help='JSON file with the desired items ([{"id", "type", "payload"}, ...])'
    )
    diff_parser.add_argument(
        '--contract',
        required=True,
        help='JSON file with the cap table contract read from the ledger'
    )
    diff_parser.add_argument(
        '--manifest',
        help='JSON file with the ledger OCF objects (enables edit detection)'
    )
    diff_parser.add_argument(
        '--format',
        choices=['console', 'json', 'csv'],
        default='console',
        help='Output format (default: console)'
    )
    diff_parser.add_argument(
        '--output',
        help='Output file path for the report (required for csv format)'
    )
    diff_parser.add_argument(
        '--operations',
        help='Output file path for the operations to submit, payloads included'
    )
    diff_parser.add_argument(
        '--report-differences',
        action='store_true',
        help='Log field-level differences of every edit'
    )
    diff_parser.add_argument(
        '--ignored-fields',
        help='Comma-separated fields to skip during comparison (default: OCF_IGNORED_FIELDS)'
    )
    diff_parser.add_argument(
        '--deprecated-fields',
        help='Comma-separated deprecated fields to skip (default: OCF_DEPRECATED_FIELDS)'
    )
    diff_parser.add_argument(
        '--metrics-file',
        help='Write Prometheus metrics for this run to a text file'
    )

    # ========== Report command ==========
    report_parser = subparsers.add_parser('report', help='Render a saved JSON report')
    report_parser.add_argument(
        '--input',
        required=True,
        help='Input JSON report file'
    )
    report_parser.add_argument(
        '--format',
        choices=['console', 'json', 'csv'],
        default='console',
        help='Output format (default: console)'
    )
    report_parser.add_argument(
        '--output',
        help='Output file path (required for csv format)'
    )

    return parser
