"""
Replication report generation and formatting.

This submodule builds reports from replication diffs, with support for
console, JSON and CSV output.
"""

from .formatters import export_report_csv, export_report_json, format_report_console
from .generator import STATUSES, ReportStatus, format_timestamp, generate_report

__all__ = [
    'generate_report',
    'format_timestamp',
    'ReportStatus',
    'STATUSES',
    'export_report_json',
    'export_report_csv',
    'format_report_console',
]
