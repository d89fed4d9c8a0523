"""
Spark-backed readers for transaction files.
"""

from .csv_reader import TransactionCSVReader

__all__ = ["TransactionCSVReader"]
