"""CLI interface for CSV to SQL."""

import sys
from pathlib import Path
from typing import Optional

import click

from shared.cli import (
    create_table,
    error,
    handle_errors,
    info,
    print_table,
    success,
    use_stderr,
    warning,
)
from shared.logger import setup_logger

from .config import GeneratorConfig, build_config
from .errors import ConfigError, IngestError
from .generator import StatementGenerator
from .ingestor import IngestResult, Ingestor


def display_schema(result: IngestResult, config: GeneratorConfig) -> None:
    """Show the inferred columns as a table."""
    table = create_table(title=f"{config.table} ({config.dialect.value})")
    table.add_column("#", justify="right", style="cyan", width=4)
    table.add_column("Column", style="bold")
    table.add_column("Type", style="yellow")
    table.add_column("Mismatches", justify="right", style="dim")

    for idx, col in enumerate(result.columns, 1):
        table.add_row(
            str(idx),
            col.name,
            config.engine.sql_type(col.data_type),
            str(result.type_conflicts.get(col.name, 0)),
        )

    print_table(table)


def run(config: GeneratorConfig, verbose: bool = False) -> str:
    """
    Ingest the input, generate SQL and write it out.

    Returns:
        Generated SQL
    """
    ingestor = Ingestor(
        config.engine,
        sample_size=config.sample_size,
        delimiter=config.delimiter,
        encoding=config.encoding,
    )
    result = ingestor.ingest(config.input_path)
    info(f"Processed CSV file '{config.input_path}' for '{config.dialect.value}' database")

    if not result.columns:
        raise IngestError(f"No data rows in {config.input_path}")

    if verbose:
        display_schema(result, config)

    for name, count in result.type_conflicts.items():
        warning(f"Column '{name}' has {count} value(s) that do not match its inferred type")

    generator = StatementGenerator(
        config.engine,
        config.database,
        config.table,
        batch_size=config.batch_size,
    )
    sql = generator.generate(result.rows, result.columns, schema_only=config.schema_only)
    info(f"Generated SQL statements for {len(result.rows)} rows and {len(result.columns)} columns")

    if config.output_path:
        with open(config.output_path, "w", encoding="utf-8") as f:
            f.write(sql)
        success(f"Written SQL statements to '{config.output_path}'")

    return sql


@click.command()
@click.argument("csv_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output SQL file (print to stdout if not specified)",
)
@click.option(
    "--engine",
    "-e",
    envvar="CSV2SQL_ENGINE",
    help="SQL engine: postgresql (or postgres) or mysql [default: postgresql]",
)
@click.option(
    "--database",
    "-d",
    envvar="CSV2SQL_DATABASE",
    help="Database name [default: test]",
)
@click.option(
    "--table",
    "-t",
    envvar="CSV2SQL_TABLE",
    help="Table name [default: CSV file name without extension]",
)
@click.option(
    "--batch-size",
    "-b",
    type=int,
    envvar="CSV2SQL_BATCH_SIZE",
    help="Rows per INSERT statement [default: 1000]",
)
@click.option(
    "--sample-size",
    type=int,
    envvar="CSV2SQL_SAMPLE_SIZE",
    help="Rows used to infer column types, 0 for all rows [default: 1]",
)
@click.option("--delimiter", help="Field delimiter [default: ,]")
@click.option("--encoding", help="Input file encoding [default: utf-8]")
@click.option(
    "--schema-only",
    "-s",
    is_flag=True,
    help="Generate only CREATE statements (no INSERTs)",
)
@click.option(
    "--config",
    "-c",
    "config_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    envvar="CSV2SQL_CONFIG",
    help="TOML config file with a [csv2sql] table",
)
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@handle_errors
def main(
    csv_file: Path,
    output: Optional[Path],
    engine: Optional[str],
    database: Optional[str],
    table: Optional[str],
    batch_size: Optional[int],
    sample_size: Optional[int],
    delimiter: Optional[str],
    encoding: Optional[str],
    schema_only: bool,
    config_file: Optional[Path],
    verbose: bool,
):
    """
    CSV to SQL - Generate CREATE and INSERT statements from a CSV file.

    Infers a SQL type for every column from the first row and writes
    batched INSERT statements for PostgreSQL or MySQL.

    Examples:

        \b
        # PostgreSQL, printed to stdout
        csv2sql users.csv --table users

        \b
        # MySQL into a file
        csv2sql users.csv --engine mysql --database shop --output users.sql

        \b
        # Infer types from the first 100 rows
        csv2sql data.csv --sample-size 100 --output data.sql

        \b
        # Schema only
        csv2sql large.csv --table big_table --schema-only

        \b
        # Settings from a config file
        csv2sql data.csv --config csv2sql.toml
    """
    # Setup logging
    log_level = "DEBUG" if verbose else "INFO"
    setup_logger(__name__, level=log_level)

    # Progress goes to stdout unless stdout carries the SQL
    use_stderr(output is None)

    try:
        # Validate before touching the input
        config = build_config(
            csv_file,
            output_path=output,
            config_file=config_file,
            engine=engine,
            database=database,
            table=table,
            batch_size=batch_size,
            sample_size=sample_size,
            delimiter=delimiter,
            encoding=encoding,
            schema_only=schema_only or None,
        )
    except ConfigError as e:
        error(str(e))
        sys.exit(1)

    try:
        sql = run(config, verbose=verbose)

        # Print to stdout if no output file
        if not config.output_path:
            click.echo(sql)

        sys.exit(0)

    except (OSError, ValueError) as e:
        if verbose:
            # handle_errors lets it through with the traceback
            raise
        error(f"Conversion failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
