"""
Export Loader

Reads table exports (CSV, JSON, NDJSON, Parquet) with Polars and validates
each row into a typed record model, so reports can be built from files
dumped out of the storefront database.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Generic, List, Type, TypeVar, Union

import polars as pl
import structlog
from pydantic import ValidationError

from storefront_analytics.exceptions import UnsupportedFormatError
from storefront_analytics.models.records import StorefrontRecord

logger = structlog.get_logger(__name__)

RecordT = TypeVar("RecordT", bound=StorefrontRecord)

NULL_VALUES = ["", "NULL", "null", "None", "NA", "N/A"]


class FileFormat(str, Enum):
    """Supported export formats"""
    CSV = "csv"
    JSON = "json"
    JSONL = "jsonl"
    PARQUET = "parquet"


SUFFIXES = {
    ".csv": FileFormat.CSV,
    ".json": FileFormat.JSON,
    ".jsonl": FileFormat.JSONL,
    ".ndjson": FileFormat.JSONL,
    ".parquet": FileFormat.PARQUET,
}


@dataclass
class LoadResult(Generic[RecordT]):
    """Validated records plus the rows that failed validation"""
    file_path: str
    records: List[RecordT] = field(default_factory=list)
    rejected_rows: int = 0
    errors: List[str] = field(default_factory=list)


def detect_format(file_path: Union[str, Path]) -> FileFormat:
    suffix = Path(file_path).suffix.lower()
    try:
        return SUFFIXES[suffix]
    except KeyError:
        raise UnsupportedFormatError(f"Unsupported file format: {suffix or file_path}") from None


def read_frame(file_path: Union[str, Path]) -> pl.DataFrame:
    """Read an export into a DataFrame, dropping rows that are entirely null"""
    file_format = detect_format(file_path)

    if file_format == FileFormat.CSV:
        df = pl.read_csv(file_path, null_values=NULL_VALUES, try_parse_dates=True)
    elif file_format == FileFormat.JSON:
        df = pl.read_json(file_path)
    elif file_format == FileFormat.JSONL:
        df = pl.read_ndjson(file_path)
    else:
        df = pl.read_parquet(file_path)

    if df.width:
        df = df.filter(~pl.all_horizontal(pl.all().is_null()))
    return df


def records_from_frame(
    df: pl.DataFrame,
    record_type: Type[RecordT],
    strict: bool = True,
    source: str = "<frame>",
) -> LoadResult[RecordT]:
    """
    Validate DataFrame rows into ``record_type``.

    Args:
        df: Rows to validate
        record_type: Record model each row must satisfy
        strict: Raise on the first invalid row instead of skipping it
        source: Name used in logs and the result

    Returns:
        LoadResult with the valid records and rejection details
    """
    result: LoadResult[RecordT] = LoadResult(file_path=source)

    for index, row in enumerate(df.iter_rows(named=True)):
        try:
            result.records.append(record_type.model_validate(row))
        except ValidationError as e:
            if strict:
                raise
            result.rejected_rows += 1
            result.errors.append(f"row {index}: {e.error_count()} validation error(s)")

    if result.rejected_rows:
        logger.warning(
            "Rejected invalid rows",
            source=source,
            record_type=record_type.__name__,
            rejected=result.rejected_rows,
            loaded=len(result.records),
        )
    return result


def load_records(
    file_path: Union[str, Path],
    record_type: Type[RecordT],
    strict: bool = True,
) -> LoadResult[RecordT]:
    """
    Load an export file as typed records.

    Example:
        orders = load_records("exports/orders.csv", OrderRecord).records
    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")

    df = read_frame(file_path)
    result = records_from_frame(df, record_type, strict=strict, source=str(file_path))

    logger.info(
        "Export loaded",
        file=str(file_path),
        record_type=record_type.__name__,
        rows=len(df),
        loaded=len(result.records),
    )
    return result
