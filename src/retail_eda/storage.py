# ========================
# src/retail_eda/storage.py
# ========================

"""
Data Storage Module

Writes the aggregate tables of a run as CSV, plus a JSON summary and a
data dictionary describing every file.
"""

import csv
import json
import logging
from datetime import datetime
from typing import Dict, List, Any
from pathlib import Path

logger = logging.getLogger(__name__)

STATISTIC_COLUMNS = ['count', 'min', 'q1', 'median', 'mean', 'q3', 'max']


def _format_value(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.strftime('%Y-%m-%d %H:%M:%S')
    return value


class TableSaver:
    """
    Saves the tables held by a finalized RetailAggregator.
    """

    def __init__(self, output_dir: str = "reports"):
        """
        Initialize the table saver.

        Args:
            output_dir (str): Directory to save output files
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        logger.info(f"TableSaver initialized with output directory: {self.output_dir}")

    def save_all_data(self, aggregator) -> Dict[str, str]:
        """
        Save all aggregate tables to files.

        Args:
            aggregator: Finalized RetailAggregator

        Returns:
            dict: Mapping of table name to saved file path
        """
        saved_files = {
            'top_products_by_quantity': self._save_ranking(
                "top_products_by_quantity.csv", ['Description', 'TotalQuantity'],
                aggregator.top_products_by_quantity),
            'top_products_by_revenue': self._save_ranking(
                "top_products_by_revenue.csv", ['Description', 'Revenue'],
                aggregator.top_products_by_revenue),
            'top_customers': self._save_ranking(
                "top_customers_by_revenue.csv", ['CustomerID', 'TotalRevenue'],
                aggregator.top_customers),
            'top_countries': self._save_ranking(
                "top_countries_by_revenue.csv", ['Country', 'Revenue'],
                aggregator.top_countries),
            'monthly_revenue': self.save_monthly_revenue(aggregator.monthly_trend),
            'cancellations_by_country': self._save_ranking(
                "cancelled_orders_by_country.csv", ['Country', 'CancelledOrders'],
                aggregator.top_cancellation_countries),
            'lost_revenue_by_country': self._save_ranking(
                "lost_revenue_by_country.csv", ['Country', 'TotalLostRevenue'],
                aggregator.top_lost_revenue_countries),
            'transaction_types': self._save_ranking(
                "transaction_types.csv", ['TransactionType', 'Count'],
                sorted(aggregator.transaction_types.items())),
            'order_values': self._save_ranking(
                "order_values.csv", ['InvoiceNo', 'OrderValue'],
                aggregator.order_values.items()),
            'summary_statistics': self.save_summary_statistics(aggregator.summary_statistics),
            'summary': self._save_summary(aggregator.get_aggregation_summary())
        }

        logger.info(f"All data saved successfully to {len(saved_files)} files")
        return saved_files

    def _save_ranking(self, file_name: str, headers: List[str], pairs) -> str:
        file_path = self.output_dir / file_name
        rows = [dict(zip(headers, (key, value))) for key, value in pairs]
        self._write_csv(file_path, headers, rows)
        return str(file_path)

    def save_monthly_revenue(self, monthly_trend: List) -> str:
        """Save monthly revenue in calendar order."""
        file_path = self.output_dir / "monthly_revenue.csv"
        headers = ['Month', 'MonthlyRevenue']
        rows = [{'Month': month.strftime('%Y-%m-%d'), 'MonthlyRevenue': revenue}
                for month, revenue in monthly_trend]
        self._write_csv(file_path, headers, rows)
        return str(file_path)

    def save_summary_statistics(self, statistics: Dict[str, Dict[str, float]]) -> str:
        """Save the min/quartile/mean/max block, one row per field."""
        file_path = self.output_dir / "summary_statistics.csv"
        headers = ['Field'] + STATISTIC_COLUMNS
        rows = [{'Field': field, **stats} for field, stats in statistics.items() if stats]
        self._write_csv(file_path, headers, rows)
        return str(file_path)

    def _save_summary(self, summary_data: Dict) -> str:
        """Save aggregation summary as JSON."""
        file_path = self.output_dir / "analysis_summary.json"
        formatted = {key: _format_value(value) for key, value in summary_data.items()}

        with open(file_path, 'w', encoding='utf-8') as f:
            json.dump(formatted, f, indent=2, ensure_ascii=False)

        logger.info(f"Summary saved to {file_path}")
        return str(file_path)

    def _write_csv(self, file_path: Path, headers: List[str], data_items: List[Dict]) -> None:
        try:
            with open(file_path, 'w', newline='', encoding='utf-8') as f:
                writer = csv.DictWriter(f, fieldnames=headers)
                writer.writeheader()
                writer.writerows(data_items)

            logger.info(f"Saved {len(data_items)} records to {file_path}")

        except OSError as e:
            logger.error(f"Error writing CSV file {file_path}: {e}")
            raise

    def create_data_dictionary(self) -> str:
        """Create a data dictionary explaining all output files."""
        file_path = self.output_dir / "DATA_DICTIONARY.md"

        content = """# Data Dictionary

Tables produced by one run of the retail analysis pipeline. Revenue columns
are in the currency of the input file. Unless noted, tables are built from
cleaned order lines only (customer id and description present, quantity and
unit price strictly positive).

Ranked tables are ordered by descending value; ties keep the order in which
the key first appeared in the input.

| File | Columns | Description |
|------|---------|-------------|
| top_products_by_quantity.csv | Description, TotalQuantity | Products by units sold |
| top_products_by_revenue.csv | Description, Revenue | Products by revenue |
| top_customers_by_revenue.csv | CustomerID, TotalRevenue | Customers by spend |
| top_countries_by_revenue.csv | Country, Revenue | Countries by revenue |
| monthly_revenue.csv | Month, MonthlyRevenue | Revenue per calendar month (first day of month) |
| cancelled_orders_by_country.csv | Country, CancelledOrders | Raw lines with negative quantity, per country |
| lost_revenue_by_country.csv | Country, TotalLostRevenue | Absolute value of quantity x unit price over cancellations |
| transaction_types.csv | TransactionType, Count | Raw lines split into Valid (quantity > 0) and Cancelled |
| order_values.csv | InvoiceNo, OrderValue | Sum of line revenue per invoice, every invoice |
| summary_statistics.csv | Field, count, min, q1, median, mean, q3, max | Distribution of Quantity, UnitPrice, TotalPrice, OrderValue |
| analysis_summary.json | | Headline counts, revenue totals, date range, cancellation totals |

## Notes

- TotalPrice = Quantity x UnitPrice for every cleaned line.
- Cancellation tables are computed on the raw rows, before cleaning.
- TotalLostRevenue in analysis_summary.json keeps its sign (negative).
"""

        with open(file_path, 'w', encoding='utf-8') as f:
            f.write(content)

        logger.info(f"Data dictionary created at {file_path}")
        return str(file_path)
