"""
Ingestion adapter: CSV exports to Transaction records.
"""

from .column_mapping import COLUMN_CANDIDATES, ColumnMapping, find_column
from .readers import TransactionCSVReader

__all__ = ["COLUMN_CANDIDATES", "ColumnMapping", "TransactionCSVReader", "find_column"]
