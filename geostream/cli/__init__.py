"""
GeoStream CLI Entry Points

Provides command-line interface for:
- validate: Deserialize and initialize a workflow file
- run: Query a workflow and report the result chunks
"""

import argparse
import logging
import sys

from geostream.core.settings import get_settings


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="geostream",
        description="GeoStream - Streaming geospatial operator graphs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  geostream validate workflow.json                       Print the result descriptor
  geostream run workflow.json --bbox 0 0 10 10           Run a query over a box
  geostream run workflow.json --bbox 0 0 10 10 --time 0 1000 --chunk-byte-size 4096
  geostream run workflow.json --bbox 0 0 10 10 --datasets datasets.json
        """,
    )

    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Validate command
    validate_parser = subparsers.add_parser("validate", help="Validate a workflow file")
    validate_parser.add_argument("workflow", help="Workflow JSON file")
    validate_parser.add_argument("--datasets", help="Dataset JSON file for dataset sources")

    # Run command
    run_parser = subparsers.add_parser("run", help="Run a query against a workflow file")
    run_parser.add_argument("workflow", help="Workflow JSON file")
    run_parser.add_argument("--datasets", help="Dataset JSON file for dataset sources")
    run_parser.add_argument(
        "--bbox",
        type=float,
        nargs=4,
        required=True,
        metavar=("MINX", "MINY", "MAXX", "MAXY"),
        help="Query bounding box",
    )
    run_parser.add_argument(
        "--time",
        type=int,
        nargs=2,
        metavar=("START", "END"),
        help="Query time interval in epoch milliseconds (default: all time)",
    )
    run_parser.add_argument(
        "--resolution",
        type=float,
        nargs=2,
        default=(1.0, 1.0),
        metavar=("X", "Y"),
        help="Spatial resolution (default: 1 1)",
    )
    run_parser.add_argument(
        "--chunk-byte-size",
        type=int,
        default=None,
        help="Target chunk size in bytes (default: from settings)",
    )

    return parser


def main(argv: list[str] | None = None):
    """Main CLI entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)

    level = logging.DEBUG if args.verbose else get_settings().logging.log_level.upper()
    logging.basicConfig(
        level=level, format="%(message)s" if not args.verbose else "%(levelname)s: %(message)s"
    )

    if args.command == "validate":
        from geostream.cli.validate import run_validate

        exit_code = run_validate(args)
    elif args.command == "run":
        from geostream.cli.run import run_query

        exit_code = run_query(args)
    else:
        parser.print_help()
        sys.exit(1)

    if exit_code:
        sys.exit(exit_code)


if __name__ == "__main__":
    main()
