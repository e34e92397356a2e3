"""
Data Ingestion Module
"""
from .loader import FileFormat, LoadResult, load_records, read_frame, records_from_frame

__all__ = [
    "FileFormat",
    "LoadResult",
    "load_records",
    "read_frame",
    "records_from_frame",
]
