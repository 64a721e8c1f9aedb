"""Render CREATE and batched INSERT statements from ingested rows."""

from typing import Any, Iterator, List, Sequence

from shared.logger import get_logger

from .engines import ColumnType, Engine
from .ingestor import ColumnDescriptor, Row

logger = get_logger(__name__)


def check_batch_size(batch_size: int) -> int:
    """Return batch_size if it is a positive integer, else raise ValueError."""
    if isinstance(batch_size, bool) or not isinstance(batch_size, int) or batch_size < 1:
        raise ValueError(f"batch_size must be a positive integer, got {batch_size!r}")
    return batch_size


def batch_rows(rows: Sequence[Row], batch_size: int) -> Iterator[Sequence[Row]]:
    """
    Split rows into consecutive batches of at most batch_size rows.

    Raises:
        ValueError: If batch_size is not a positive integer
    """
    check_batch_size(batch_size)

    for start in range(0, len(rows), batch_size):
        yield rows[start : start + batch_size]


def raw_value(value: Any) -> str:
    """Text of a cell as written into SQL without quoting."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class StatementGenerator:
    """
    Generate SQL for one table.

    Holds the target engine and names; rows and columns are passed to each
    call, so the same generator can be reused and always gives the same text
    for the same input.
    """

    def __init__(
        self,
        engine: Engine,
        database_name: str,
        table_name: str,
        batch_size: int = 1000,
    ):
        """
        Initialize statement generator.

        Args:
            engine: Target engine profile
            database_name: Database created and switched to
            table_name: Table created and inserted into
            batch_size: Maximum rows per INSERT statement
        """
        self.engine = engine
        self.database_name = database_name
        self.table_name = table_name
        self.batch_size = check_batch_size(batch_size)

    def column_clause(self, column: ColumnDescriptor) -> str:
        """Render `<quoted-name> <TYPE>[ <parameters>]`."""
        clause = f"{self.engine.quote_identifier(column.name)} {self.engine.sql_type(column.data_type)}"
        if column.parameters:
            clause += f" {column.parameters}"
        return clause

    def create_statement(self, columns: List[ColumnDescriptor]) -> str:
        """Render the schema block."""
        return self.engine.create_statement(
            self.database_name,
            self.table_name,
            [self.column_clause(col) for col in columns],
        )

    def render_cell(self, value: Any, column: ColumnDescriptor) -> str:
        """
        Render one cell.

        TEXT cells become escaped string literals. Cells of other types are
        written unquoted exactly as read; an empty one becomes NULL.
        """
        if value is None:
            return "NULL"

        if column.data_type == ColumnType.TEXT:
            return self.engine.quote_text(raw_value(value))

        if value == "":
            return "NULL"

        return raw_value(value)

    def render_row(self, row: Row, columns: List[ColumnDescriptor]) -> str:
        """Render a row as a parenthesized tuple."""
        return "(" + ",".join(self.render_cell(cell, col) for cell, col in zip(row, columns)) + ")"

    def insert_statements(self, rows: Sequence[Row], columns: List[ColumnDescriptor]) -> List[str]:
        """
        Render one INSERT statement per batch.

        Args:
            rows: Rows in output order
            columns: Column descriptors matching each row

        Returns:
            List of INSERT statements in batch order
        """
        statements = []
        for batch in batch_rows(rows, self.batch_size):
            tuples = ",\n  ".join(self.render_row(row, columns) for row in batch)
            statements.append(f"INSERT INTO {self.table_name} VALUES\n  {tuples};")

        logger.debug(f"Rendered {len(statements)} INSERT statement(s) (batch size: {self.batch_size})")
        return statements

    def generate(
        self,
        rows: Sequence[Row],
        columns: List[ColumnDescriptor],
        schema_only: bool = False,
    ) -> str:
        """
        Generate the full SQL text.

        Args:
            rows: Rows in output order
            columns: Column descriptors
            schema_only: Leave out the INSERT statements

        Returns:
            Schema block followed by the INSERT statements, newline-joined
        """
        create = self.create_statement(columns)
        if schema_only:
            return create

        return create + "\n" + "\n".join(self.insert_statements(rows, columns))


def generate_sql(
    rows: Sequence[Row],
    columns: List[ColumnDescriptor],
    engine: Engine,
    database_name: str,
    table_name: str,
    batch_size: int,
    schema_only: bool = False,
) -> str:
    """Generate the schema block and batched INSERT statements."""
    generator = StatementGenerator(engine, database_name, table_name, batch_size=batch_size)
    return generator.generate(rows, columns, schema_only=schema_only)
