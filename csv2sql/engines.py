"""SQL engine profiles: type inference, quoting and schema templates."""

import math
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, List, Union

from .errors import UnsupportedEngine


class ColumnType(str, Enum):
    """Logical column types inferred from CSV values."""

    INTEGER = "INTEGER"
    DECIMAL = "DECIMAL"
    BOOLEAN = "BOOLEAN"
    TEXT = "TEXT"


class SQLDialect(str, Enum):
    """Supported SQL dialects."""

    POSTGRESQL = "postgresql"
    MYSQL = "mysql"


DIALECT_ALIASES = {
    "postgres": SQLDialect.POSTGRESQL,
    "pg": SQLDialect.POSTGRESQL,
}

BOOLEAN_LITERALS = ("true", "false")


def classify_value(value: Any) -> ColumnType:
    """
    Classify a decoded cell value.

    Numbers are INTEGER when they have no fractional part, else DECIMAL.
    Strings that fully parse as a finite number are treated like numbers.
    Booleans and the strings "true"/"false" are BOOLEAN. Everything else,
    including the empty string, is TEXT.
    """
    # bool is a subclass of int, check it first
    if isinstance(value, bool):
        return ColumnType.BOOLEAN

    if isinstance(value, (int, float)):
        return _classify_number(value)

    # float() accepts non-ASCII digits such as "１２"; SQL does not
    if not isinstance(value, str) or not value.isascii():
        return ColumnType.TEXT

    if value.strip().lower() in BOOLEAN_LITERALS:
        return ColumnType.BOOLEAN

    # nor "1_000"
    if value.strip() and "_" not in value:
        try:
            number = float(value)
        except ValueError:
            return ColumnType.TEXT
        if math.isfinite(number):
            return _classify_number(number)

    return ColumnType.TEXT


def _classify_number(number: Union[int, float]) -> ColumnType:
    if isinstance(number, float) and not number.is_integer():
        return ColumnType.DECIMAL
    return ColumnType.INTEGER


class Engine(ABC):
    """
    Rules for one target SQL dialect.

    Subclasses spell the logical column types, quote identifiers and text
    literals, and render the schema block.
    """

    dialect: SQLDialect
    type_map: Dict[ColumnType, str]

    def classify(self, value: Any) -> ColumnType:
        """Infer the column type of a single cell value."""
        return classify_value(value)

    def sql_type(self, column_type: ColumnType) -> str:
        """Spell a logical column type for this dialect."""
        return self.type_map[column_type]

    @abstractmethod
    def quote_identifier(self, name: str) -> str:
        """Quote a database, table or column name."""

    @abstractmethod
    def quote_text(self, value: str) -> str:
        """Render a string as a quoted SQL literal."""

    @abstractmethod
    def create_statement(
        self,
        database_name: str,
        table_name: str,
        column_clauses: List[str],
    ) -> str:
        """Render the database and table creation block."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class PostgreSQLEngine(Engine):
    """PostgreSQL, driven through psql (\\gexec and \\c meta-commands)."""

    dialect = SQLDialect.POSTGRESQL
    type_map = {
        ColumnType.INTEGER: "INT",
        ColumnType.DECIMAL: "DOUBLE PRECISION",
        ColumnType.BOOLEAN: "BOOLEAN",
        ColumnType.TEXT: "TEXT",
    }

    def quote_identifier(self, name: str) -> str:
        return '"' + name.replace('"', '""') + '"'

    def quote_text(self, value: str) -> str:
        # standard_conforming_strings: backslashes are literal
        if "\x00" in value:
            raise ValueError("PostgreSQL text cannot contain NUL characters")
        return "'" + value.replace("'", "''") + "'"

    def create_statement(self, database_name, table_name, column_clauses):
        create_database = self.quote_text(f"CREATE DATABASE {database_name}")
        columns = ",\n".join(column_clauses)
        return (
            f"SELECT {create_database} WHERE NOT EXISTS "
            f"(SELECT FROM pg_database WHERE datname = {self.quote_text(database_name)})\\gexec\n"
            f"\\c {self.quote_identifier(database_name)};\n"
            f"CREATE TABLE IF NOT EXISTS {self.quote_identifier(table_name)} ({columns});"
        )


class MySQLEngine(Engine):
    """MySQL. Has no native boolean type, so booleans become BIT."""

    dialect = SQLDialect.MYSQL
    type_map = {
        ColumnType.INTEGER: "INT",
        ColumnType.DECIMAL: "DOUBLE",
        ColumnType.BOOLEAN: "BIT",
        ColumnType.TEXT: "TEXT",
    }

    # Backslash is an escape character in MySQL string literals by default
    _escapes = {
        "\\": "\\\\",
        "'": "''",
        "\x00": "\\0",
        "\n": "\\n",
        "\r": "\\r",
        "\x1a": "\\Z",
    }

    def quote_identifier(self, name: str) -> str:
        return "`" + name.replace("`", "``") + "`"

    def quote_text(self, value: str) -> str:
        return "'" + "".join(self._escapes.get(ch, ch) for ch in value) + "'"

    def create_statement(self, database_name, table_name, column_clauses):
        database = self.quote_identifier(database_name)
        columns = ",\n  ".join(column_clauses)
        return (
            f"CREATE DATABASE IF NOT EXISTS {database};\n"
            f"USE {database};\n"
            f"CREATE TABLE IF NOT EXISTS {self.quote_identifier(table_name)} (\n"
            f"  {columns}\n"
            f");"
        )


ENGINES: Dict[SQLDialect, Engine] = {
    SQLDialect.POSTGRESQL: PostgreSQLEngine(),
    SQLDialect.MYSQL: MySQLEngine(),
}


def parse_dialect(name: Union[str, SQLDialect]) -> SQLDialect:
    """
    Resolve a dialect name.

    Raises:
        UnsupportedEngine: If the name is not a known dialect or alias
    """
    if isinstance(name, SQLDialect):
        return name

    key = str(name).strip().lower()
    if key in DIALECT_ALIASES:
        return DIALECT_ALIASES[key]

    try:
        return SQLDialect(key)
    except ValueError:
        raise UnsupportedEngine(str(name)) from None


def get_engine(name: Union[str, SQLDialect]) -> Engine:
    """Get the engine profile for a dialect name."""
    return ENGINES[parse_dialect(name)]
