"""
Command-line interface for cap table replication.

Available commands:
- diff: Compute the operations that replicate the desired state
- report: Render a saved report
"""

import sys

from utils.logging import configure_from_env
from utils.tracing import initialize_tracing, shutdown_tracing

from .commands import EXIT_DRIFT, EXIT_IN_SYNC, EXIT_INVALID_INPUT, cmd_diff, cmd_report
from .options import tracing_enabled
from .parser import create_parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the ocf-replicate CLI"""
    parser = create_parser()
    args = parser.parse_args(argv)

    configure_from_env(level=args.log_level, json_format=True if args.log_json else None)

    if args.command is None:
        parser.print_help()
        sys.exit(EXIT_INVALID_INPUT)

    if args.format == 'csv' and not args.output:
        parser.error("--output is required for csv format")

    if tracing_enabled():
        initialize_tracing()

    try:
        if args.command == 'diff':
            exit_code = cmd_diff(args)
        else:
            exit_code = cmd_report(args)
    finally:
        shutdown_tracing()

    sys.exit(exit_code)


__all__ = [
    'main',
    'cmd_diff',
    'cmd_report',
    'create_parser',
    'EXIT_IN_SYNC',
    'EXIT_DRIFT',
    'EXIT_INVALID_INPUT',
]


if __name__ == '__main__':
    main()
