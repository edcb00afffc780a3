# ========================
# src/retail_eda/cleaning.py
# ========================

"""
Data Cleaning Module

Filters order lines that break the validity rules, types the fields that
survive and derives line revenue.
"""

import re
import math
import logging
from collections import Counter
from datetime import datetime
from typing import Dict, Optional, Any

from .ingestion import is_missing

logger = logging.getLogger(__name__)

# day-month-year hour:minute, with '-', '/' or '.' between the date parts
INVOICE_DATE_PATTERN = re.compile(
    r'^\s*(\d{1,2})[-/.](\d{1,2})[-/.](\d{2}|\d{4})\s+(\d{1,2}):(\d{2})(?::(\d{2}))?\s*$'
)


class MalformedRecordError(ValueError):
    """A field is present but cannot be interpreted."""

    def __init__(self, message: str, row_number: Optional[int] = None):
        self.row_number = row_number
        if row_number is not None:
            message = f"row {row_number}: {message}"
        super().__init__(message)


def parse_number(value: Any, field: str) -> Optional[float]:
    """Parse a numeric field; None when missing, MalformedRecordError when garbage."""
    if is_missing(value):
        return None
    try:
        number = float(value) if isinstance(value, (int, float)) else float(str(value).strip())
    except (ValueError, OverflowError):
        raise MalformedRecordError(f"{field} is not numeric: {value!r}") from None
    if not math.isfinite(number):
        raise MalformedRecordError(f"{field} is not a finite number: {value!r}")
    return number


def parse_quantity(value: Any) -> Optional[int]:
    """Quantities are whole units; '6' and '6.0' both read as 6."""
    number = parse_number(value, 'Quantity')
    if number is None:
        return None
    if not number.is_integer():
        raise MalformedRecordError(f"Quantity is not a whole number: {value!r}")
    return int(number)


def parse_invoice_date(value: Any) -> datetime:
    """
    Parse a day-month-year hour:minute timestamp.

    Two-digit years are read as 20xx.

    Raises:
        MalformedRecordError: If the value does not match the format or
            names an impossible date.
    """
    if isinstance(value, datetime):
        return value
    match = INVOICE_DATE_PATTERN.match(value) if isinstance(value, str) else None
    if match is None:
        raise MalformedRecordError(f"InvoiceDate is not day-month-year hour:minute: {value!r}")

    day, month, year, hour, minute, second = match.groups()
    year = int(year)
    if year < 100:
        year += 2000
    try:
        return datetime(year, int(month), int(day), int(hour), int(minute), int(second or 0))
    except ValueError as e:
        raise MalformedRecordError(f"InvoiceDate {value!r} is not a valid date: {e}") from None


def normalize_customer_id(value: Any) -> str:
    """'17850.0' -> '17850'; other ids are returned stripped."""
    text = str(value).strip()
    if re.fullmatch(r'\d+\.0+', text):
        return text.split('.', 1)[0]
    return text


class OrderLineCleaner:
    """
    Applies the validity rules to raw order lines.

    A line is kept only if it has a customer id and a description and a
    strictly positive quantity and unit price. Kept lines get a parsed
    ``InvoiceDate``, their ``Month`` and ``TotalPrice = Quantity * UnitPrice``.
    """

    def __init__(self):
        self.records_processed = 0
        self.records_dropped = 0
        self.drop_reasons = Counter()
        logger.info("OrderLineCleaner initialized")

    def clean_record(self, record: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Applies all cleaning rules to a single record and returns the cleaned version.

        Args:
            record (dict): A dictionary representing a single raw row.

        Returns:
            dict or None: The cleaned record, or None if the line is dropped.

        Raises:
            MalformedRecordError: If a numeric field or the timestamp of a
                kept line cannot be parsed.
        """
        self.records_processed += 1
        row_number = self.records_processed

        try:
            reason = self._drop_reason(record)
            if reason is not None:
                self.records_dropped += 1
                self.drop_reasons[reason] += 1
                logger.debug(f"Record {row_number} dropped ({reason}): {record}")
                return None

            quantity = parse_quantity(record.get('Quantity'))
            unit_price = parse_number(record.get('UnitPrice'), 'UnitPrice')
            invoice_date = parse_invoice_date(record.get('InvoiceDate'))
        except MalformedRecordError as e:
            logger.error(f"Malformed record {row_number}: {e}")
            raise MalformedRecordError(str(e), row_number) from e

        cleaned_record = dict(record)
        cleaned_record['InvoiceNo'] = str(record['InvoiceNo']).strip()
        cleaned_record['Description'] = str(record['Description']).strip()
        cleaned_record['CustomerID'] = normalize_customer_id(record['CustomerID'])
        country = record.get('Country')
        cleaned_record['Country'] = 'Unknown' if is_missing(country) else str(country).strip()
        cleaned_record['Quantity'] = quantity
        cleaned_record['UnitPrice'] = unit_price
        cleaned_record['InvoiceDate'] = invoice_date
        cleaned_record['Month'] = invoice_date.replace(day=1, hour=0, minute=0, second=0)
        cleaned_record['TotalPrice'] = quantity * unit_price

        return cleaned_record

    def _drop_reason(self, record: Dict[str, Any]) -> Optional[str]:
        """First rule the record breaks, or None if it passes."""
        if is_missing(record.get('CustomerID')):
            return 'missing_customer'
        if is_missing(record.get('Description')):
            return 'missing_description'

        quantity = parse_quantity(record.get('Quantity'))
        if quantity is None:
            return 'missing_quantity'
        if quantity <= 0:
            return 'non_positive_quantity'

        unit_price = parse_number(record.get('UnitPrice'), 'UnitPrice')
        if unit_price is None:
            return 'missing_price'
        if unit_price <= 0:
            return 'non_positive_price'

        return None

    def get_statistics(self) -> Dict[str, Any]:
        """Get cleaning statistics."""
        records_cleaned = self.records_processed - self.records_dropped
        return {
            'records_processed': self.records_processed,
            'records_dropped': self.records_dropped,
            'records_cleaned': records_cleaned,
            'success_rate': records_cleaned / self.records_processed * 100 if self.records_processed > 0 else 0,
            'drop_reasons': dict(self.drop_reasons)
        }
