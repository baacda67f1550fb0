"""Command-line interface for sqlt."""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from sqlt.config import Config
from sqlt.exceptions import (
    ConfigError,
    EmptyCollectionError,
    NoPrimaryKeyError,
    SqltError,
)
from sqlt.introspect import pull_schema
from sqlt.schema.exporter import (
    export_schema_to_directory,
    export_schema_yaml,
    export_table_yaml,
)
from sqlt.schema.loader import load_schema
from sqlt.schema.table import Table

logger = logging.getLogger(__name__)


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="sqlt",
        description="Relational schema model: introspect, validate, export",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    pull_parser = subparsers.add_parser("pull", help="Introspect a live database")
    pull_parser.add_argument("--dsn", help="e.g. sqlite:///app.db, postgresql://host/db")
    pull_parser.add_argument("--user", help="Database user (overrides DSN)")
    pull_parser.add_argument("--password", help="Database password (overrides DSN)")
    pull_parser.add_argument("--db-schema", help="Database schema to introspect")
    pull_parser.add_argument("--catalog", help="Unity Catalog catalog (Databricks)")
    pull_parser.add_argument("--profile", help="~/.databrickscfg profile")
    pull_parser.add_argument(
        "--output",
        type=Path,
        help="Output YAML file, or directory for one file per table (default: stdout)",
    )

    validate_parser = subparsers.add_parser("validate", help="Validate schema files")
    validate_parser.add_argument(
        "--schema-path", type=Path, default=Path("schema")
    )

    show_parser = subparsers.add_parser("show", help="Print table definitions")
    show_parser.add_argument("--schema-path", type=Path, default=Path("schema"))
    show_parser.add_argument("--table", help="Only this table")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO, format="%(message)s"
    )

    if args.command == "pull":
        return cmd_pull(args)
    elif args.command == "validate":
        return cmd_validate(args)
    elif args.command == "show":
        return cmd_show(args)
    else:
        print(f"Command '{args.command}' not yet implemented", file=sys.stderr)
        return 1


def cmd_pull(args: argparse.Namespace) -> int:
    """Introspect a database, validate the result and write it as YAML."""
    try:
        config = Config.from_env(
            dsn=args.dsn,
            db_user=args.user,
            db_password=args.password,
            db_schema=args.db_schema,
            catalog=args.catalog,
            profile=args.profile,
        )
        schema = pull_schema(config)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2
    except SqltError as e:
        print(f"Introspection error: {e}", file=sys.stderr)
        return 1

    if not schema.is_valid():
        print(f"Validation error: {schema.error}", file=sys.stderr)
        return 1

    output: Optional[Path] = args.output
    if output is None:
        print(export_schema_yaml(schema), end="")
    elif output.suffix in (".yaml", ".yml"):
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(export_schema_yaml(schema))
        logger.info(f"Wrote {len(schema.table_names())} tables to {output}")
    else:
        files = export_schema_to_directory(schema, output)
        logger.info(f"Wrote {len(files)} table files to {output}")
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    """Validate schema files."""
    try:
        schema = load_schema(args.schema_path)
        schema.validate()
    except SqltError as e:
        print(f"Validation error: {e}", file=sys.stderr)
        return 1

    print(f"Validated {len(schema.table_names())} tables:")
    for table in schema.get_tables():
        print(f"  - {table.name} ({_describe(table)})")
    return 0


def cmd_show(args: argparse.Namespace) -> int:
    """Print schema files back as normalised YAML."""
    try:
        schema = load_schema(args.schema_path)
        if args.table is None:
            output = export_schema_yaml(schema)
        else:
            table = schema.get_table(args.table)
            if table is None:
                print(f"Table '{args.table}' not found", file=sys.stderr)
                return 1
            output = export_table_yaml(table)
    except SqltError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(output, end="")
    return 0


def _describe(table: Table) -> str:
    parts = [f"{len(table.field_names())} fields"]
    try:
        parts.append(f"primary key: {', '.join(table.primary_key().fields)}")
    except NoPrimaryKeyError:
        pass
    for label, getter in (
        ("indices", table.get_indices),
        ("constraints", table.get_constraints),
    ):
        try:
            parts.append(f"{len(getter())} {label}")
        except EmptyCollectionError:
            continue
    return ", ".join(parts)


if __name__ == "__main__":
    sys.exit(main())
