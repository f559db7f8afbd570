"""
Configuration for CLI runs.

Command-line flags take precedence over environment variables.

Environment variables:
    OCF_IGNORED_FIELDS: Comma-separated fields skipped during comparison,
        in addition to the internal defaults
    OCF_DEPRECATED_FIELDS: Comma-separated deprecated fields, in addition
        to the defaults
    OTLP_ENDPOINT: OTLP collector endpoint; enables tracing when set
    TRACE_CONSOLE: Print spans to the console when "true"
"""

import argparse
import os

from ocf.comparison import (
    DEFAULT_DEPRECATED_FIELDS,
    DEFAULT_INTERNAL_FIELDS,
    ComparisonOptions,
)

IGNORED_FIELDS_ENV = "OCF_IGNORED_FIELDS"
DEPRECATED_FIELDS_ENV = "OCF_DEPRECATED_FIELDS"


def parse_field_list(value: str | None) -> list[str]:
    """
    Split a comma-separated field list

    Args:
        value: Raw value such as ``"a, b,,c"``

    Returns:
        Field names with blanks removed
    """
    if not value:
        return []
    return [name.strip() for name in value.split(",") if name.strip()]


def comparison_options_from_args(args: argparse.Namespace) -> ComparisonOptions:
    """
    Build comparison options from flags and environment

    Args:
        args: Parsed command-line arguments

    Returns:
        ComparisonOptions with the extra fields added to the defaults
    """
    ignored = args.ignored_fields
    if ignored is None:
        ignored = os.getenv(IGNORED_FIELDS_ENV)

    deprecated = args.deprecated_fields
    if deprecated is None:
        deprecated = os.getenv(DEPRECATED_FIELDS_ENV)

    return ComparisonOptions.from_fields(
        ignored_fields=DEFAULT_INTERNAL_FIELDS | set(parse_field_list(ignored)),
        deprecated_fields=DEFAULT_DEPRECATED_FIELDS | set(parse_field_list(deprecated)),
    )


def tracing_enabled() -> bool:
    """Whether the environment asks for spans to be exported."""
    return bool(os.getenv("OTLP_ENDPOINT")) or (
        os.getenv("TRACE_CONSOLE", "").lower() == "true"
    )
