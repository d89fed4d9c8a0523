"""
CSV reader using Spark for transaction exports.
"""

from pyspark.sql import DataFrame, SparkSession

from psp_analytics.core.models import Transaction
from psp_analytics.observability.logger import get_logger

from ..column_mapping import ColumnMapping, clean_value

logger = get_logger(__name__)


class TransactionCSVReader:
    """
    Reads a transaction CSV into Transaction records.

    Every column is read as a string so identifiers keep leading zeros and
    malformed amounts or dates reach the Transaction model, which degrades
    them to None instead of failing the file.
    """

    def __init__(self, spark: SparkSession):
        """
        Initialize CSV reader.

        Args:
            spark: Active Spark session
        """
        self.spark = spark

    def read_dataframe(self, file_path: str, delimiter: str = ",") -> DataFrame:
        """
        Read CSV file into a Spark DataFrame of string columns.

        Args:
            file_path: Path to CSV file
            delimiter: Field delimiter

        Returns:
            Spark DataFrame
        """
        return self.spark.read \
            .option("header", "true") \
            .option("inferSchema", "false") \
            .option("delimiter", delimiter) \
            .option("mode", "PERMISSIVE") \
            .option("ignoreLeadingWhiteSpace", "true") \
            .option("ignoreTrailingWhiteSpace", "true") \
            .csv(file_path)

    def read(self, file_path: str, delimiter: str = ",") -> list[Transaction]:
        """
        Read CSV file into Transaction records.

        Args:
            file_path: Path to CSV file
            delimiter: Field delimiter

        Returns:
            One Transaction per non-blank data row, in file order

        Raises:
            ValueError: If the file has no data rows
        """
        df = self.read_dataframe(file_path, delimiter=delimiter)
        mapping = ColumnMapping.from_headers(df.columns)
        if mapping.missing:
            logger.debug(
                "Transaction fields without a matching column",
                extra={"missing_fields": mapping.missing}
            )

        # Keep the raw header names as row keys after cleaning
        raw_columns = {clean_value(column) or "": column for column in df.columns}

        transactions = []
        for row in df.toLocalIterator():
            values = row.asDict()
            if all(clean_value(value) is None for value in values.values()):
                continue
            cleaned_row = {header: values[raw] for header, raw in raw_columns.items()}
            transactions.append(mapping.to_transaction(cleaned_row))

        if not transactions:
            raise ValueError(
                f"CSV file must have at least a header row and one data row: {file_path}"
            )

        logger.info(
            f"Read {len(transactions)} transactions from {file_path}",
            extra={"file_path": file_path, "transactions": len(transactions)}
        )
        return transactions
