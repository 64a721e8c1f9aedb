"""Read CSV input and infer a column type for every field."""

import csv
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, TextIO, Union

from shared.logger import get_logger

from .engines import ColumnType, Engine
from .errors import IngestError

logger = get_logger(__name__)

Row = List[Any]


@dataclass
class ColumnDescriptor:
    """Inferred name and type of one CSV field."""

    name: str
    data_type: ColumnType
    parameters: Optional[str] = "NULL"


@dataclass
class IngestResult:
    """Rows read from the input plus their column descriptors."""

    rows: List[Row]
    columns: List[ColumnDescriptor]
    type_conflicts: Dict[str, int] = field(default_factory=dict)


def widen_type(current: ColumnType, other: ColumnType) -> ColumnType:
    """
    Combine two inferred types into one that holds both.

    INTEGER and DECIMAL widen to DECIMAL; any other disagreement is TEXT.
    """
    if current == other:
        return current
    if {current, other} == {ColumnType.INTEGER, ColumnType.DECIMAL}:
        return ColumnType.DECIMAL
    return ColumnType.TEXT


def is_blank(value: Any) -> bool:
    """Missing or empty cell."""
    return value is None or value == ""


def fits_type(value: Any, column_type: ColumnType, engine: Engine) -> bool:
    """Check whether a cell can be rendered in a column of the given type."""
    if column_type == ColumnType.TEXT or is_blank(value):
        return True
    return widen_type(column_type, engine.classify(value)) == column_type


class Ingestor:
    """
    Read a header-first CSV source into rows and column descriptors.

    Column types come from the first `sample_size` data records (one by
    default). With more than one sampled record the types are widened.
    Blank cells do not take part; a column with only blank samples is TEXT.
    Records after the sample are trusted as-is.
    """

    def __init__(
        self,
        engine: Engine,
        sample_size: int = 1,
        delimiter: str = ",",
        encoding: str = "utf-8",
    ):
        """
        Initialize ingestor.

        Args:
            engine: Engine profile used to classify values
            sample_size: Records used for type inference (0 = all records)
            delimiter: Field delimiter
            encoding: Encoding used when opening a path
        """
        if sample_size < 0:
            raise ValueError(f"sample_size must be >= 0, got {sample_size}")

        self.engine = engine
        self.sample_size = sample_size
        self.delimiter = delimiter
        self.encoding = encoding

    def ingest(self, source: Union[str, Path, TextIO]) -> IngestResult:
        """
        Read the whole source.

        Args:
            source: Path to a CSV file or an open text stream

        Returns:
            IngestResult with rows in input order

        Raises:
            FileNotFoundError: If the path does not exist
            IngestError: If the input cannot be decoded or parsed
        """
        if isinstance(source, (str, Path)):
            logger.info(f"Reading {source}")
            with open(source, "r", encoding=self.encoding, newline="") as f:
                return self._ingest_stream(f)

        return self._ingest_stream(source)

    def _ingest_stream(self, stream: TextIO) -> IngestResult:
        reader = csv.reader(stream, delimiter=self.delimiter)

        try:
            header = next(reader, None)
            if header is None:
                logger.warning("Input is empty")
                return IngestResult(rows=[], columns=[])

            positions = self._field_positions(header)
            rows = [self._to_row(record, positions) for record in reader if record]

        except csv.Error as e:
            raise IngestError(f"Malformed CSV at line {reader.line_num}: {e}") from e
        except UnicodeDecodeError as e:
            raise IngestError(f"Cannot decode input near line {reader.line_num + 1}: {e}") from e

        if not rows:
            logger.warning("Input has a header but no data rows")
            return IngestResult(rows=[], columns=[])

        names = list(positions)
        columns = self.infer_columns(names, rows)
        conflicts = self.find_conflicts(columns, rows)

        logger.debug(f"Read {len(rows)} rows with {len(columns)} columns")
        return IngestResult(rows=rows, columns=columns, type_conflicts=conflicts)

    def _field_positions(self, header: List[str]) -> Dict[str, int]:
        # Duplicate header names collapse into one column; the last one wins
        positions: Dict[str, int] = {}
        for index, name in enumerate(header):
            if name in positions:
                logger.warning(f"Duplicate column name {name!r}, keeping the last occurrence")
            positions[name] = index
        return positions

    @staticmethod
    def _to_row(record: List[str], positions: Dict[str, int]) -> Row:
        return [record[index] if index < len(record) else None for index in positions.values()]

    def _sample(self, rows: List[Row]) -> List[Row]:
        if self.sample_size == 0:
            return rows
        return rows[: self.sample_size]

    def infer_columns(self, names: List[str], rows: List[Row]) -> List[ColumnDescriptor]:
        """
        Infer one descriptor per column from the sampled rows.

        Args:
            names: Column names in header order
            rows: All rows; only the sampled prefix is inspected

        Returns:
            List of ColumnDescriptor in header order
        """
        sample = self._sample(rows)

        columns = []
        for index, name in enumerate(names):
            data_type = None
            for row in sample:
                if is_blank(row[index]):
                    continue
                cell_type = self.engine.classify(row[index])
                data_type = cell_type if data_type is None else widen_type(data_type, cell_type)

            if data_type is None:
                data_type = ColumnType.TEXT

            columns.append(ColumnDescriptor(name=name, data_type=data_type))

        logger.debug(
            "Inferred columns: "
            + ", ".join(f"{c.name}={self.engine.sql_type(c.data_type)}" for c in columns)
        )
        return columns

    def find_conflicts(self, columns: List[ColumnDescriptor], rows: List[Row]) -> Dict[str, int]:
        """
        Count rows outside the sample whose value does not fit its column.

        The values are kept as they are; callers decide how to report the counts.
        """
        if self.sample_size == 0:
            return {}

        conflicts: Dict[str, int] = {}
        for row in rows[self.sample_size:]:
            for index, column in enumerate(columns):
                if not fits_type(row[index], column.data_type, self.engine):
                    conflicts[column.name] = conflicts.get(column.name, 0) + 1

        for name, count in conflicts.items():
            logger.debug(f"Column {name!r}: {count} value(s) do not match the inferred type")

        return conflicts


def ingest(
    source: Union[str, Path, TextIO],
    engine: Engine,
    sample_size: int = 1,
    delimiter: str = ",",
    encoding: str = "utf-8",
) -> IngestResult:
    """Read a CSV source with the given engine's inference rules."""
    return Ingestor(engine, sample_size=sample_size, delimiter=delimiter, encoding=encoding).ingest(source)

