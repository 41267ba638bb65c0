import argparse
import json
import logging
import sys

from canlii_client import urls
from canlii_client.client import CanLIIClient
from canlii_client.errors import CanLIIError, QuotaExceeded, ValidationError
from canlii_client.formatting import format_table
from canlii_client.sinks.base import Sink
from canlii_client.sinks.csv_file import CSVSink
from canlii_client.sinks.json_file import JSONFileSink

logger = logging.getLogger("canlii_client")

EXIT_VALIDATION = 1
EXIT_ERROR = 2
EXIT_QUOTA = 3


class _Output:
    """Collects command results and renders them in the requested format.

    ``jsonl``, ``csv`` and ``--output-dir`` write each record as it arrives;
    ``table`` and ``json`` need every row first and render on close.
    """

    def __init__(self, fmt: str, output_dir: str | None = None, stream=None):
        self.fmt = fmt
        self.stream = stream or sys.stdout
        self.rows: list[dict] = []
        self.sink: Sink | None = None
        if output_dir:
            self.sink = JSONFileSink(output_dir)
        elif fmt == "csv":
            self.sink = CSVSink(self.stream)

    def write(self, kind: str, record: dict) -> None:
        if self.sink is not None:
            self.sink.write(kind, record)
        elif self.fmt == "jsonl":
            print(json.dumps(record, ensure_ascii=False), file=self.stream)
        else:
            self.rows.append(record)

    def close(self) -> None:
        if self.sink is not None or self.fmt == "jsonl":
            return
        if self.fmt == "json":
            print(json.dumps(self.rows, indent=2, ensure_ascii=False), file=self.stream)
        else:
            print(format_table(self.rows), file=self.stream)


def _make_client(args) -> CanLIIClient:
    return CanLIIClient.from_settings(
        api_key=getattr(args, "api_key", "") or "",
        language=getattr(args, "language", "") or "",
    )


def _read_stdin_records(stream=None) -> list[dict]:
    """Read records piped in as JSON lines or as one JSON array."""
    text = (stream or sys.stdin).read().strip()
    if not text:
        return []
    if text.startswith("["):
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Invalid JSON on stdin: {e}") from e
    records = []
    for lineno, line in enumerate(text.splitlines(), start=1):
        line = line.strip()
        if not line:
            continue
        try:
            records.append(json.loads(line))
        except json.JSONDecodeError as e:
            raise ValidationError(f"Invalid JSON on stdin line {lineno}: {e}") from e
    return records


def _targets(args, id_key: str) -> list[tuple[str, str]]:
    """(database_id, item_id) pairs from positional args or piped records."""
    if args.database_id or args.item_id:
        if not (args.database_id and args.item_id):
            raise ValidationError("Both DATABASE_ID and ITEM_ID are required")
        return [(args.database_id, args.item_id)]

    if sys.stdin.isatty():
        raise ValidationError("Pass DATABASE_ID and ITEM_ID, or pipe JSON records on stdin")

    targets = []
    for record in _read_stdin_records():
        if not isinstance(record, dict) or not record.get("databaseId"):
            raise ValidationError(f"Piped record has no databaseId: {record!r}")
        if not record.get(id_key):
            raise ValidationError(f"Piped record has no {id_key}: {record!r}")
        targets.append((record["databaseId"], record[id_key]))
    return targets


# --- Commands ---


def cmd_databases(args, out: _Output):
    with _make_client(args) as client:
        if args.kind == "legislation":
            databases = client.list_legislation_databases()
        else:
            databases = client.list_case_databases()
    for db in databases:
        out.write("databases", db.to_dict())


def cmd_cases(args, out: _Output):
    date_filter = urls.date_filter_from_options(
        published=args.published,
        modified=args.modified,
        changed=args.changed,
        decision_date=args.decision_date,
    )
    with _make_client(args) as client:
        cases = client.browse_cases(
            args.database_id, date_filter=date_filter, result_count=args.result_count
        )
    for case in cases:
        out.write("cases", case.to_dict())


def cmd_legislation(args, out: _Output):
    with _make_client(args) as client:
        items = client.browse_legislation(args.database_id)
    for item in items:
        out.write("legislation", item.to_dict())


def cmd_metadata(args, out: _Output):
    id_key = "legislationId" if args.kind == "legislation" else "caseId"
    targets = _targets(args, id_key)
    with _make_client(args) as client:
        for database_id, item_id in targets:
            if args.kind == "legislation":
                metadata = client.get_legislation_metadata(database_id, item_id)
            else:
                metadata = client.get_case_metadata(database_id, item_id)
            out.write("metadata", metadata)


def cmd_citator(args, out: _Output):
    targets = _targets(args, "caseId")
    with _make_client(args) as client:
        for database_id, case_id in targets:
            for edge in client.get_case_citator(database_id, case_id, args.cite_type):
                out.write(args.cite_type, edge)


def run_command(func, args, stream=None) -> int:
    """Run one command, translating client errors into exit codes."""
    out = _Output(args.format, getattr(args, "output_dir", None), stream=stream)
    exit_code = 0
    try:
        func(args, out)
    except ValidationError as e:
        logger.error("Invalid arguments: %s", e)
        exit_code = EXIT_VALIDATION
    except QuotaExceeded as e:
        logger.error("CanLII quota exceeded, aborting: %s", e)
        exit_code = EXIT_QUOTA
    except CanLIIError as e:
        logger.error("CanLII request failed: %s", e)
        exit_code = EXIT_ERROR
    except ValueError as e:
        # Missing configuration (e.g. CANLII_API_KEY)
        logger.error("%s", e)
        exit_code = EXIT_VALIDATION

    # A failed call renders nothing; rows from earlier piped records still do.
    if exit_code == 0 or out.rows:
        out.close()
    return exit_code


def _date_range_arg(parser, name: str, label: str):
    parser.add_argument(
        f"--{name}",
        nargs=2,
        metavar=("AFTER", "BEFORE"),
        help=f"Only cases with a {label} between AFTER and BEFORE (YYYY-MM-DD)",
    )


def main():
    parser = argparse.ArgumentParser(
        prog="canlii", description="CanLII REST API client"
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--api-key",
        default="",
        help="CanLII API key (env: CANLII_API_KEY)",
    )
    parser.add_argument(
        "--language",
        choices=list(urls.LANGUAGES),
        help="Response language (env: CANLII_LANGUAGE, default: en)",
    )
    parser.add_argument(
        "--format",
        choices=["table", "json", "jsonl", "csv"],
        default="table",
        help="Output format (default: table; use jsonl to pipe into another command)",
    )
    parser.add_argument(
        "--output-dir",
        help="Write each record as a JSON file under this directory",
    )
    subparsers = parser.add_subparsers(dest="command")

    databases_parser = subparsers.add_parser(
        "databases", help="List case or legislation databases"
    )
    databases_parser.add_argument(
        "--kind",
        choices=["case", "legislation"],
        default="case",
        help="Database kind (default: case)",
    )

    cases_parser = subparsers.add_parser("cases", help="List cases in a database")
    cases_parser.add_argument("database_id", help="Database id (e.g. sklgb)")
    cases_parser.add_argument(
        "--result-count",
        type=int,
        default=urls.MAX_RESULT_COUNT,
        help=f"Number of cases to return, 1-{urls.MAX_RESULT_COUNT} "
        f"(default: {urls.MAX_RESULT_COUNT})",
    )
    _date_range_arg(cases_parser, "published", "publication date")
    _date_range_arg(cases_parser, "modified", "modification date")
    _date_range_arg(cases_parser, "changed", "change date")
    _date_range_arg(cases_parser, "decision-date", "decision date")

    legislation_parser = subparsers.add_parser(
        "legislation", help="List legislation in a database"
    )
    legislation_parser.add_argument("database_id", help="Database id (e.g. onstat)")

    metadata_parser = subparsers.add_parser(
        "metadata",
        help="Fetch case or legislation metadata (ids as arguments or JSON lines on stdin)",
    )
    metadata_parser.add_argument(
        "--kind",
        choices=["case", "legislation"],
        default="case",
        help="Item kind (default: case)",
    )
    metadata_parser.add_argument("database_id", nargs="?", help="Database id")
    metadata_parser.add_argument("item_id", nargs="?", help="Case or legislation id")

    citator_parser = subparsers.add_parser(
        "citator",
        help="Fetch citator relations for a case (ids as arguments or JSON lines on stdin)",
    )
    citator_parser.add_argument("cite_type", choices=list(urls.CITE_TYPES))
    citator_parser.add_argument("database_id", nargs="?", help="Database id")
    citator_parser.add_argument("item_id", nargs="?", help="Case id")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )

    if not args.command:
        parser.print_help()
        sys.exit(1)

    commands = {
        "databases": cmd_databases,
        "cases": cmd_cases,
        "legislation": cmd_legislation,
        "metadata": cmd_metadata,
        "citator": cmd_citator,
    }

    exit_code = run_command(commands[args.command], args)
    if exit_code:
        sys.exit(exit_code)


if __name__ == "__main__":
    main()
