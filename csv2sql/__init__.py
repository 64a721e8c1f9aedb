"""CSV to SQL - Generate CREATE and INSERT statements from CSV files."""

from .engines import ColumnType, Engine, MySQLEngine, PostgreSQLEngine, SQLDialect, get_engine
from .errors import ConfigError, CSV2SQLError, IngestError, UnsupportedEngine
from .generator import StatementGenerator, batch_rows, generate_sql
from .ingestor import ColumnDescriptor, IngestResult, Ingestor, ingest

__version__ = "1.0.0"

__all__ = [
    "ColumnDescriptor",
    "ColumnType",
    "ConfigError",
    "CSV2SQLError",
    "Engine",
    "IngestError",
    "IngestResult",
    "Ingestor",
    "MySQLEngine",
    "PostgreSQLEngine",
    "SQLDialect",
    "StatementGenerator",
    "UnsupportedEngine",
    "batch_rows",
    "generate_sql",
    "get_engine",
    "ingest",
]
