# ========================
# tests/test_ingestion.py
# ========================

import unittest
import tempfile
import os
import sys
import csv

# Add the project root to Python path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.retail_eda.ingestion import CSVReader, is_missing

HEADER = ['InvoiceNo', 'StockCode', 'Description', 'Quantity', 'InvoiceDate',
          'UnitPrice', 'CustomerID', 'Country']


class TestDataIngestion(unittest.TestCase):
    """Test the CSV ingestion module."""

    def _write_csv(self, rows, encoding='latin-1'):
        with tempfile.NamedTemporaryFile(mode='w', suffix='.csv', delete=False,
                                         newline='', encoding=encoding) as f:
            csv.writer(f).writerows(rows)
            path = f.name
        self.addCleanup(os.unlink, path)
        return path

    def test_csv_reader_chunked_processing(self):
        """Test that CSVReader properly chunks data."""
        path = self._write_csv([
            HEADER,
            ['536365', '85123A', 'WHITE HANGING HEART T-LIGHT HOLDER', '6', '01-12-2010 08:26', '2.55', '17850', 'United Kingdom'],
            ['536365', '71053', 'WHITE METAL LANTERN', '6', '01-12-2010 08:26', '3.39', '17850', 'United Kingdom'],
            ['536366', '22633', 'HAND WARMER UNION JACK', '6', '01-12-2010 08:28', '1.85', '17850', 'United Kingdom'],
            ['C536379', 'D', 'Discount', '-1', '01-12-2010 09:41', '27.5', '14527', 'United Kingdom'],
        ])

        reader = CSVReader(path)
        chunks = list(reader.read_in_chunks(chunk_size=2))

        self.assertEqual(len(chunks), 2)
        self.assertEqual(len(chunks[0]), 2)
        self.assertEqual(len(chunks[1]), 2)
        self.assertEqual(reader.header, HEADER)
        self.assertEqual(reader.rows_read, 4)

        first_record = chunks[0][0]
        self.assertEqual(first_record['InvoiceNo'], '536365')
        self.assertEqual(first_record['Description'], 'WHITE HANGING HEART T-LIGHT HOLDER')
        self.assertEqual(chunks[1][1]['Quantity'], '-1')

    def test_csv_reader_utf8_with_byte_order_mark(self):
        """Excel's "CSV UTF-8" export starts with a byte-order mark."""
        path = self._write_csv([
            HEADER,
            ['536365', '21232', 'CAFÉ CERAMIC MUG', '6', '01-12-2010 08:26', '2.55', '17850', 'France'],
        ], encoding='utf-8-sig')

        reader = CSVReader(path)
        chunks = list(reader.read_in_chunks(chunk_size=10))

        self.assertEqual(reader.header, HEADER)
        self.assertEqual(chunks[0][0]['InvoiceNo'], '536365')
        self.assertEqual(chunks[0][0]['Description'], 'CAFÉ CERAMIC MUG')

    def test_csv_reader_file_not_found(self):
        """A missing file propagates FileNotFoundError."""
        reader = CSVReader("non_existent_file.csv")

        with self.assertRaises(FileNotFoundError):
            list(reader.read_in_chunks(chunk_size=10))

    def test_csv_reader_empty_file(self):
        """An empty file yields no chunks."""
        path = self._write_csv([])

        reader = CSVReader(path)
        chunks = list(reader.read_in_chunks(chunk_size=10))

        self.assertEqual(chunks, [])
        self.assertEqual(reader.rows_read, 0)

    def test_csv_reader_missing_columns(self):
        """A header without the required columns is rejected."""
        path = self._write_csv([
            ['InvoiceNo', 'Description', 'Quantity'],
            ['536365', 'WHITE METAL LANTERN', '6'],
        ])

        reader = CSVReader(path)
        with self.assertRaises(ValueError) as ctx:
            list(reader.read_in_chunks(chunk_size=10))
        self.assertIn('UnitPrice', str(ctx.exception))

    def test_csv_reader_header_whitespace(self):
        """Column names are stripped before the required-column check."""
        path = self._write_csv([
            [' ' + name for name in HEADER],
            ['536365', '71053', 'WHITE METAL LANTERN', '6', '01-12-2010 08:26', '3.39', '17850', 'United Kingdom'],
        ])

        reader = CSVReader(path)
        chunks = list(reader.read_in_chunks(chunk_size=10))
        self.assertEqual(chunks[0][0]['Country'], 'United Kingdom')

    def test_csv_reader_large_chunk_size(self):
        """Chunk size larger than the data gives a single chunk."""
        path = self._write_csv([
            HEADER,
            ['536365', '71053', 'WHITE METAL LANTERN', '6', '01-12-2010 08:26', '3.39', '17850', 'United Kingdom'],
            ['536366', '22633', 'HAND WARMER UNION JACK', '6', '01-12-2010 08:28', '1.85', '17850', 'United Kingdom'],
        ])

        reader = CSVReader(path)
        chunks = list(reader.read_in_chunks(chunk_size=100))

        self.assertEqual(len(chunks), 1)
        self.assertEqual(len(chunks[0]), 2)

    def test_invalid_chunk_size(self):
        reader = CSVReader("whatever.csv")
        with self.assertRaises(ValueError):
            list(reader.read_in_chunks(chunk_size=0))

    def test_missing_value_profile(self):
        """Blank and NA fields are counted per column."""
        path = self._write_csv([
            HEADER,
            ['536365', '71053', 'WHITE METAL LANTERN', '6', '01-12-2010 08:26', '3.39', '', 'United Kingdom'],
            ['536366', '22633', '', '6', '01-12-2010 08:28', '1.85', 'NA', 'United Kingdom'],
            ['536367', '84879', 'ASSORTED COLOUR BIRD ORNAMENT', '32', '01-12-2010 08:34', '1.69', '13047', 'United Kingdom'],
        ])

        reader = CSVReader(path)
        list(reader.read_in_chunks(chunk_size=2))
        profile = reader.get_profile()

        self.assertEqual(profile['rows_read'], 3)
        self.assertEqual(profile['missing_values']['CustomerID'], 2)
        self.assertEqual(profile['missing_values']['Description'], 1)
        self.assertEqual(profile['missing_values']['Quantity'], 0)

    def test_is_missing(self):
        for value in [None, '', '   ', 'NA', 'nan', 'NaN']:
            self.assertTrue(is_missing(value), f"Expected missing: {value!r}")
        for value in ['0', 'N/A shop', 17850, 0.0]:
            self.assertFalse(is_missing(value), f"Expected present: {value!r}")


if __name__ == '__main__':
    unittest.main()
