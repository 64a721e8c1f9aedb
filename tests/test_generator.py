"""Tests for SQL statement generation."""

import io
import math

import pytest

from csv2sql.engines import ColumnType, MySQLEngine, PostgreSQLEngine
from csv2sql.generator import StatementGenerator, batch_rows, generate_sql, raw_value
from csv2sql.ingestor import ColumnDescriptor, ingest

USERS_CSV = "id,name,active\n1,Alice,true\n2,Bob,false\n"

POSTGRES_USERS_SQL = (
    "SELECT 'CREATE DATABASE test' WHERE NOT EXISTS "
    "(SELECT FROM pg_database WHERE datname = 'test')\\gexec\n"
    '\\c "test";\n'
    'CREATE TABLE IF NOT EXISTS "users" ("id" INT NULL,\n'
    '"name" TEXT NULL,\n'
    '"active" BOOLEAN NULL);\n'
    "INSERT INTO users VALUES\n"
    "  (1,'Alice',true);\n"
    "INSERT INTO users VALUES\n"
    "  (2,'Bob',false);"
)

MYSQL_USERS_SQL = (
    "CREATE DATABASE IF NOT EXISTS `test`;\n"
    "USE `test`;\n"
    "CREATE TABLE IF NOT EXISTS `users` (\n"
    "  `id` INT NULL,\n"
    "  `name` TEXT NULL,\n"
    "  `active` BIT NULL\n"
    ");\n"
    "INSERT INTO users VALUES\n"
    "  (1,'Alice',true),\n"
    "  (2,'Bob',false);"
)


def run_pipeline(csv_text, engine, batch_size=1000, table="users"):
    result = ingest(io.StringIO(csv_text), engine)
    return generate_sql(result.rows, result.columns, engine, "test", table, batch_size)


def numbered_rows(count):
    return [[str(i), f"name{i}"] for i in range(count)]


NUMBERED_COLUMNS = [
    ColumnDescriptor(name="id", data_type=ColumnType.INTEGER),
    ColumnDescriptor(name="name", data_type=ColumnType.TEXT),
]


class TestBatchRows:
    """Test row batching."""

    @pytest.mark.parametrize("count,size", [(0, 3), (1, 1), (5, 2), (6, 3), (7, 100), (1000, 7)])
    def test_batch_count_and_order(self, count, size):
        """Batch count is ceil(N / B) and order is preserved."""
        rows = numbered_rows(count)
        batches = list(batch_rows(rows, size))

        assert len(batches) == math.ceil(count / size)
        assert all(len(batch) <= size for batch in batches)
        assert [row for batch in batches for row in batch] == rows

    @pytest.mark.parametrize("size", [0, -1, 1.5, True, "10"])
    def test_invalid_batch_size(self, size):
        """Batch size must be a positive integer."""
        with pytest.raises(ValueError):
            list(batch_rows(numbered_rows(3), size))


class TestRenderCell:
    """Test cell rendering."""

    def setup_method(self):
        self.generator = StatementGenerator(PostgreSQLEngine(), "test", "t")
        self.text = ColumnDescriptor(name="s", data_type=ColumnType.TEXT)
        self.integer = ColumnDescriptor(name="n", data_type=ColumnType.INTEGER)
        self.boolean = ColumnDescriptor(name="b", data_type=ColumnType.BOOLEAN)

    def test_text_is_quoted(self):
        """Text cells are single-quoted."""
        assert self.generator.render_cell("Alice", self.text) == "'Alice'"
        assert self.generator.render_cell("42", self.text) == "'42'"

    def test_text_quotes_escaped(self):
        """Embedded quotes are escaped."""
        assert self.generator.render_cell("it's", self.text) == "'it''s'"

    def test_other_types_unquoted(self):
        """Non-text cells are written as read."""
        assert self.generator.render_cell("42", self.integer) == "42"
        assert self.generator.render_cell("true", self.boolean) == "true"
        assert self.generator.render_cell(3.5, self.integer) == "3.5"
        assert self.generator.render_cell(False, self.boolean) == "false"

    def test_mismatched_value_passes_through(self):
        """A value contradicting the column type is not re-validated."""
        assert self.generator.render_cell("abc", self.integer) == "abc"

    def test_null_cells(self):
        """Missing cells and empty non-text cells are NULL."""
        assert self.generator.render_cell(None, self.text) == "NULL"
        assert self.generator.render_cell(None, self.integer) == "NULL"
        assert self.generator.render_cell("", self.integer) == "NULL"
        assert self.generator.render_cell("", self.text) == "''"

    def test_raw_value(self):
        """Test raw value text."""
        assert raw_value(True) == "true"
        assert raw_value(7) == "7"
        assert raw_value("x") == "x"


class TestStatementGenerator:
    """Test full SQL generation."""

    def test_postgres_users(self):
        """PostgreSQL with batch size 1 gives one INSERT per row."""
        sql = run_pipeline(USERS_CSV, PostgreSQLEngine(), batch_size=1)

        assert sql == POSTGRES_USERS_SQL
        assert sql.count("INSERT INTO") == 2

    def test_mysql_users(self):
        """MySQL uses back quotes, USE and BIT."""
        sql = run_pipeline(USERS_CSV, MySQLEngine(), batch_size=1000)

        assert sql == MYSQL_USERS_SQL
        assert "\\c" not in sql

    def test_batch_larger_than_rows(self):
        """Batch size above the row count gives exactly one INSERT."""
        sql = run_pipeline(USERS_CSV, PostgreSQLEngine(), batch_size=50)
        assert sql.count("INSERT INTO") == 1

    def test_decimal_then_integer(self):
        """A later integer value in a DECIMAL column renders unquoted."""
        engine = PostgreSQLEngine()
        sql = run_pipeline("price\n3.14\n2\n", engine, table="prices")

        assert '"price" DOUBLE PRECISION NULL' in sql
        assert "  (3.14),\n  (2);" in sql

    def test_non_ascii_digits_are_quoted(self):
        """Digits outside ASCII are text and get quoted."""
        sql = run_pipeline("n\n\uff11\uff12\n", PostgreSQLEngine(), table="t")

        assert '"n" TEXT NULL' in sql
        assert "INSERT INTO t VALUES\n  ('\uff11\uff12');" in sql

    def test_decimal_mysql(self):
        """MySQL spells DECIMAL columns DOUBLE."""
        sql = run_pipeline("price\n3.14\n", MySQLEngine())
        assert "`price` DOUBLE NULL" in sql

    def test_rows_keep_order_across_batches(self):
        """Concatenated tuples reproduce the input order."""
        generator = StatementGenerator(MySQLEngine(), "test", "t", batch_size=3)
        statements = generator.insert_statements(numbered_rows(10), NUMBERED_COLUMNS)

        assert len(statements) == 4
        tuples = [
            line.strip().rstrip(",;")
            for statement in statements
            for line in statement.splitlines()[1:]
        ]
        assert tuples == [f"({i},'name{i}')" for i in range(10)]

    def test_text_round_trip(self):
        """Quoted literals decode back to the original text."""
        engine = PostgreSQLEngine()
        generator = StatementGenerator(engine, "test", "t")
        column = ColumnDescriptor(name="s", data_type=ColumnType.TEXT)

        for value in ["plain", "with space", "semi;colon", "comma,here", "it's", "''"]:
            literal = generator.render_cell(value, column)
            assert literal[0] == literal[-1] == "'"
            assert literal[1:-1].replace("''", "'") == value

    def test_schema_only(self):
        """schema_only leaves out the INSERT statements."""
        generator = StatementGenerator(PostgreSQLEngine(), "test", "t")
        sql = generator.generate(numbered_rows(3), NUMBERED_COLUMNS, schema_only=True)

        assert "CREATE TABLE IF NOT EXISTS" in sql
        assert "INSERT" not in sql

    def test_column_without_parameters(self):
        """Columns without parameters render name and type only."""
        generator = StatementGenerator(MySQLEngine(), "test", "t")
        column = ColumnDescriptor(name="id", data_type=ColumnType.INTEGER, parameters=None)

        assert generator.column_clause(column) == "`id` INT"

    def test_idempotent(self):
        """The same input gives byte-identical output."""
        first = run_pipeline(USERS_CSV, MySQLEngine(), batch_size=1)
        second = run_pipeline(USERS_CSV, MySQLEngine(), batch_size=1)
        assert first == second

    def test_invalid_batch_size(self):
        """The generator rejects a non-positive batch size."""
        with pytest.raises(ValueError):
            StatementGenerator(PostgreSQLEngine(), "test", "t", batch_size=0)
