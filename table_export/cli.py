"""
Command line entry point.

Non-interactive:
    table-export OUTPUT TABLE ATTR [ATTR ...]

Interactive (no positional arguments):
    table-export

The interactive flow lists tables, samples the chosen table for attribute
names and lets the user pick columns before the export starts.
"""
import argparse
import logging
import sys
from contextlib import closing
from typing import Callable, List, Optional, Sequence, TextIO

from table_export.adapters.dynamodb import DynamoDBRowSource, create_client
from table_export.core.config import settings
from table_export.core.errors import ExportError
from table_export.core.logging_config import LOG_LEVELS, setup_logger
from table_export.ports.row_source import RowSource
from table_export.services.discovery_service import discover_attributes, list_tables
from table_export.services.export_service import ExportService

logger = logging.getLogger(__name__)

USAGE_HINT = (
    "Non-Interactive Usage: table-export [outputFile] [tableName] [attribute1] [attribute2] ...\n"
    "Interactive Usage: table-export"
)

InputFn = Callable[[str], str]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="table-export",
        description="Export a DynamoDB table to CSV using parallel segment scans.",
    )
    parser.add_argument(
        "positionals",
        nargs="*",
        metavar="OUTPUT TABLE ATTR",
        help="output file, table name, then one or more attributes",
    )
    parser.add_argument("--region", default=None, help=f"AWS region (default {settings.AWS_REGION})")
    parser.add_argument("--endpoint-url", default=None, help="custom DynamoDB endpoint")
    parser.add_argument("--segments", type=int, default=None, help="number of scan segments")
    parser.add_argument("--workers", type=int, default=None, help="scan worker pool size")
    parser.add_argument("--queue-capacity", type=int, default=None, help="relay queue capacity")
    parser.add_argument(
        "--consistent-read",
        action="store_true",
        default=None,
        help="use strongly consistent reads (costs more)",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=None,
        help="log verbosity (default from LOG_LEVEL)",
    )
    return parser


def prompt(input_fn: InputFn, message: str) -> str:
    return input_fn(message).strip()


def select_table(tables: Sequence[str], input_fn: InputFn, out: TextIO) -> Optional[str]:
    """Show numbered tables and read a selection until it is valid."""
    if not tables:
        print("No tables found.", file=out)
        return None

    print("\nAvailable tables:", file=out)
    for i, table in enumerate(tables, start=1):
        print(f"{i}. {table}", file=out)

    while True:
        choice = prompt(input_fn, "\nSelect table (enter number): ")
        try:
            selection = int(choice)
        except ValueError:
            print("Please enter a valid number.", file=out)
            continue
        if 1 <= selection <= len(tables):
            return tables[selection - 1]
        print(
            f"Invalid selection. Please enter a number between 1 and {len(tables)}",
            file=out,
        )


def select_attributes(available: Sequence[str], input_fn: InputFn, out: TextIO) -> List[str]:
    """
    Pick attributes by number, then optionally add names missing from the sample.

    Selection order is preserved and becomes the column order.
    """
    attributes = sorted(available)
    print("\nAvailable attributes:", file=out)
    for i, attribute in enumerate(attributes, start=1):
        print(f"{i}. {attribute}", file=out)

    selected: List[str] = []
    while True:
        choice = prompt(
            input_fn,
            "\nSelect attributes (enter numbers separated by commas, or 'done' to finish): ",
        )
        if choice.lower() == "done":
            break
        try:
            indexes = [int(part.strip()) for part in choice.split(",")]
        except ValueError:
            print("Please enter valid numbers separated by commas.", file=out)
            continue
        for index in indexes:
            if not 1 <= index <= len(attributes):
                print(f"Invalid selection: {index}", file=out)
                continue
            attribute = attributes[index - 1]
            if attribute not in selected:
                selected.append(attribute)
                print(f"Added: {attribute}", file=out)

    answer = prompt(
        input_fn,
        "\nWould you like to add any additional attributes not found in the sample? (y/n): ",
    )
    if answer.lower().startswith("y"):
        while True:
            attribute = prompt(input_fn, "Enter attribute name (or 'done' to finish): ")
            if attribute.lower() == "done":
                break
            if attribute and attribute not in selected:
                selected.append(attribute)
                print(f"Added: {attribute}", file=out)

    print(f"\nSelected attributes: {selected}", file=out)
    return selected


def run_interactive(
    source: RowSource, service: ExportService, input_fn: InputFn, out: TextIO
) -> int:
    output_file = prompt(input_fn, "Enter output CSV file name: ")

    print("Listing tables...", file=out)
    table = select_table(list_tables(source), input_fn, out)
    if table is None:
        print("No table selected. Exiting.", file=out)
        return 0

    print("Scanning table to discover attributes...", file=out)
    available = discover_attributes(source, table)
    print(f"Found {len(available)} unique attributes from sample data.", file=out)
    if not available:
        print("No attributes found in table. Exiting.", file=out)
        return 0

    attributes = select_attributes(available, input_fn, out)
    if not attributes:
        print("No attributes selected. Exiting.", file=out)
        return 0

    result = service.export_table(table, attributes, output_file)
    print(f"Export completed: {result.output_path} ({result.rows_written} rows)", file=out)
    return 0


def main(
    argv: Optional[Sequence[str]] = None,
    source_factory: Optional[Callable[[argparse.Namespace], RowSource]] = None,
    input_fn: InputFn = input,
    out: TextIO = sys.stdout,
) -> int:
    """
    Run the CLI.

    Args:
        argv: Arguments (defaults to sys.argv[1:])
        source_factory: Builds the row source from parsed args (defaults to DynamoDB)
        input_fn: Prompt reader for the interactive flow
        out: Stream for user-facing messages

    Returns:
        Process exit code
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    positionals = args.positionals

    if 0 < len(positionals) < 3:
        parser.error("expected OUTPUT TABLE and at least one ATTR")

    setup_logger(level=args.log_level)

    if not positionals:
        print(USAGE_HINT, file=out)

    factory = source_factory or _dynamodb_source
    try:
        with closing(factory(args)) as source:
            service = ExportService(
                source,
                queue_capacity=args.queue_capacity,
                segment_count=args.segments,
                max_workers=args.workers,
            )
            if positionals:
                output_file, table, *attributes = positionals
                result = service.export_table(table, attributes, output_file)
                print(f"Export completed: {result.output_path} ({result.rows_written} rows)", file=out)
                return 0
            return run_interactive(source, service, input_fn, out)
    except ExportError as e:
        print(f"Export failed: {e}", file=sys.stderr)
        return 1
    except (EOFError, KeyboardInterrupt):
        print("\nAborted.", file=sys.stderr)
        return 130


def _dynamodb_source(args: argparse.Namespace) -> RowSource:
    pool_size = max(10, args.workers or args.segments or 0)
    client = create_client(
        region=args.region,
        endpoint_url=args.endpoint_url,
        max_pool_connections=pool_size,
    )
    return DynamoDBRowSource(client, consistent_read=args.consistent_read)


if __name__ == "__main__":
    raise SystemExit(main())
