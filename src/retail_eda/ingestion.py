# ========================
# src/retail_eda/ingestion.py
# ========================

"""
Data Ingestion Module

Reads the transaction log in chunks of row dictionaries and profiles
missing values per column on the way through.
"""

import csv
import logging
from collections import Counter
from typing import Dict, Any, Iterator, List, Sequence

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = (
    'InvoiceNo', 'Description', 'Quantity', 'UnitPrice',
    'CustomerID', 'Country', 'InvoiceDate'
)

UTF8_BOM = b"\xef\xbb\xbf"

MISSING_TOKENS = {'', 'na', 'nan'}


def is_missing(value: Any) -> bool:
    """True for None, blank strings and the NA / NaN markers."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip().lower() in MISSING_TOKENS
    return False


class CSVReader:
    """
    A memory-efficient CSV reader that reads the order-line log in chunks.
    """

    def __init__(self, file_path, encoding: str = 'latin-1',
                 required_columns: Sequence[str] = REQUIRED_COLUMNS):
        """
        Initialize the CSV reader.

        Args:
            file_path (str): Path to the CSV file to read
            encoding (str): Text encoding of the file
            required_columns (sequence): Columns the header must contain
        """
        self.file_path = file_path
        self.encoding = encoding
        self.required_columns = tuple(required_columns)
        self.header = []
        self.rows_read = 0
        self.missing_counts = Counter()
        logger.info(f"Initialized CSVReader for file: {file_path}")

    def read_in_chunks(self, chunk_size: int) -> Iterator[List[Dict[str, str]]]:
        """
        A generator that yields a list of dictionaries for each chunk of data.

        Args:
            chunk_size (int): The number of rows to yield per chunk.

        Yields:
            list[dict]: A list of dictionaries representing a chunk of rows.

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the header lacks a required column
        """
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")

        self.rows_read = 0
        self.missing_counts = Counter()

        try:
            with open(self.file_path, 'r', newline='', encoding=self._detect_encoding()) as f:
                reader = csv.DictReader(f)
                self.header = [name.strip() for name in reader.fieldnames or []]
                if not self.header:
                    logger.warning(f"File '{self.file_path}' is empty")
                    return
                reader.fieldnames = self.header
                logger.info(f"CSV header: {self.header}")
                self._check_columns()

                chunk = []
                for row in reader:
                    self._profile_row(row)
                    chunk.append(row)
                    self.rows_read += 1

                    if len(chunk) == chunk_size:
                        logger.debug(f"Yielding chunk with {len(chunk)} rows")
                        yield chunk
                        chunk = []

                if chunk:
                    logger.debug(f"Yielding final chunk with {len(chunk)} rows")
                    yield chunk

                logger.info(f"Total rows read: {self.rows_read:,}")

        except FileNotFoundError:
            logger.error(f"File '{self.file_path}' was not found")
            raise
        except (csv.Error, UnicodeDecodeError) as e:
            logger.error(f"Malformed CSV file '{self.file_path}' near row {self.rows_read + 1}: {e}")
            raise

    def _detect_encoding(self) -> str:
        """Files saved as UTF-8 with a byte-order mark are read as utf-8-sig."""
        with open(self.file_path, 'rb') as f:
            if f.read(len(UTF8_BOM)) == UTF8_BOM:
                logger.info(f"Byte-order mark found in '{self.file_path}', reading as utf-8-sig")
                return 'utf-8-sig'
        return self.encoding

    def _check_columns(self) -> None:
        missing = [col for col in self.required_columns if col not in self.header]
        if missing:
            logger.error(f"Missing required columns: {missing}")
            raise ValueError(f"Missing columns: {missing}")

    def _profile_row(self, row: Dict[str, Any]) -> None:
        for column in self.header:
            if is_missing(row.get(column)):
                self.missing_counts[column] += 1

    def get_profile(self) -> Dict[str, Any]:
        """Header, row count and missing values per column of the last read."""
        return {
            'columns': list(self.header),
            'rows_read': self.rows_read,
            'missing_values': {column: self.missing_counts.get(column, 0) for column in self.header}
        }
