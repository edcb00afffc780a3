# ========================
# src/retail_eda/transformation.py
# ========================

"""
Data Transformation Module

Group-by-reduce aggregations over the order-line log. Cleaned lines feed
the sales tables; raw lines feed the cancellation statistics.
"""

import logging
import statistics
from collections import defaultdict, Counter
from typing import Dict, List, Any, Iterable, Tuple, Optional

from .cleaning import MalformedRecordError, parse_quantity, parse_number
from .ingestion import is_missing

logger = logging.getLogger(__name__)


def rank_top(totals: Dict[Any, float], limit: Optional[int] = None) -> List[Tuple[Any, float]]:
    """
    Rank (key, value) pairs by descending value.

    ``sorted`` is stable even with ``reverse=True``, so equal values keep
    the order in which their keys were first seen.
    """
    ranked = sorted(totals.items(), key=lambda item: item[1], reverse=True)
    return ranked if limit is None else ranked[:limit]


def describe(values: Iterable[float]) -> Dict[str, float]:
    """
    Min, quartiles, mean and max of a sample.

    Quartiles use linear interpolation between order statistics.
    """
    data = sorted(values)
    if not data:
        return {}
    if len(data) == 1:
        q1 = median = q3 = data[0]
    else:
        q1, median, q3 = statistics.quantiles(data, n=4, method='inclusive')
    return {
        'count': len(data),
        'min': data[0],
        'q1': q1,
        'median': median,
        'mean': statistics.fmean(data),
        'q3': q3,
        'max': data[-1]
    }


class RetailAggregator:
    """
    Performs in-memory aggregations on order-line chunks.
    """

    def __init__(self, top_n: int = 10):
        """
        Initialize the aggregator.

        Args:
            top_n (int): Length of every ranked table
        """
        self.top_n = top_n
        self._reset_aggregations()
        logger.info(f"RetailAggregator initialized with top_n={top_n}")

    def _reset_aggregations(self):
        """Reset all aggregation data structures."""
        self.product_sales = defaultdict(lambda: {'quantity': 0, 'revenue': 0.0})
        self.customer_revenue = defaultdict(float)
        self.country_revenue = defaultdict(float)
        self.monthly_revenue = defaultdict(float)
        self.order_values = defaultdict(float)

        self.quantity_values = []
        self.price_values = []
        self.total_price_values = []

        self.customers = set()
        self.countries = set()
        self.total_revenue = 0.0
        self.first_invoice_date = None
        self.last_invoice_date = None
        self.records_processed = 0

        # raw-row statistics
        self.raw_records_processed = 0
        self.transaction_types = Counter()
        self.cancelled_orders = 0
        self.total_lost_revenue = 0.0
        self.cancellations_by_country = Counter()
        self.lost_revenue_by_country = defaultdict(float)

    def process_raw_chunk(self, chunk: List[Dict[str, Any]]) -> None:
        """
        Update transaction-type and cancellation statistics from raw rows.

        Args:
            chunk (list[dict]): Rows exactly as read from the file.
        """
        for record in chunk:
            self.raw_records_processed += 1
            try:
                quantity = parse_quantity(record.get('Quantity'))

                if quantity is None:
                    self.transaction_types['Unknown'] += 1
                    continue
                self.transaction_types['Valid' if quantity > 0 else 'Cancelled'] += 1

                if quantity < 0:
                    self._record_cancellation(record, quantity)
            except MalformedRecordError as e:
                logger.error(f"Malformed record {self.raw_records_processed}: {e}")
                raise MalformedRecordError(str(e), self.raw_records_processed) from e

    def _record_cancellation(self, record: Dict[str, Any], quantity: int) -> None:
        country = record.get('Country')
        country = 'Unknown' if is_missing(country) else country.strip()
        unit_price = parse_number(record.get('UnitPrice'), 'UnitPrice') or 0.0
        lost_revenue = quantity * unit_price

        self.cancelled_orders += 1
        self.total_lost_revenue += lost_revenue
        self.cancellations_by_country[country] += 1
        self.lost_revenue_by_country[country] += abs(lost_revenue)

    def process_chunk(self, chunk: List[Dict[str, Any]]) -> None:
        """
        Process a cleaned chunk and update all sales aggregations.

        Args:
            chunk (list[dict]): Cleaned records from OrderLineCleaner.
        """
        logger.debug(f"Processing chunk with {len(chunk)} records")

        for record in chunk:
            self._process_single_record(record)
            self.records_processed += 1

        logger.debug(f"Chunk processed. Total records so far: {self.records_processed}")

    def _process_single_record(self, record: Dict[str, Any]) -> None:
        quantity = record['Quantity']
        unit_price = record['UnitPrice']
        revenue = record['TotalPrice']
        invoice_date = record['InvoiceDate']

        product = self.product_sales[record['Description']]
        product['quantity'] += quantity
        product['revenue'] += revenue

        self.customer_revenue[record['CustomerID']] += revenue
        self.country_revenue[record['Country']] += revenue
        self.monthly_revenue[record['Month']] += revenue
        self.order_values[record['InvoiceNo']] += revenue

        self.customers.add(record['CustomerID'])
        self.countries.add(record['Country'])
        self.total_revenue += revenue

        self.quantity_values.append(quantity)
        self.price_values.append(unit_price)
        self.total_price_values.append(revenue)

        if self.first_invoice_date is None or invoice_date < self.first_invoice_date:
            self.first_invoice_date = invoice_date
        if self.last_invoice_date is None or invoice_date > self.last_invoice_date:
            self.last_invoice_date = invoice_date

    def finalize_aggregations(self) -> None:
        """
        Build the ranked tables and summary statistics once all chunks are in.
        """
        logger.info("Finalizing aggregations...")

        product_quantity = {name: data['quantity'] for name, data in self.product_sales.items()}
        product_revenue = {name: data['revenue'] for name, data in self.product_sales.items()}

        self.top_products_by_quantity = rank_top(product_quantity, self.top_n)
        self.top_products_by_revenue = rank_top(product_revenue, self.top_n)
        self.top_customers = rank_top(self.customer_revenue, self.top_n)
        self.top_countries = rank_top(self.country_revenue, self.top_n)
        self.monthly_trend = sorted(self.monthly_revenue.items())

        self.top_cancellation_countries = rank_top(self.cancellations_by_country, self.top_n)
        self.top_lost_revenue_countries = rank_top(self.lost_revenue_by_country, self.top_n)

        self.summary_statistics = {
            'Quantity': describe(self.quantity_values),
            'UnitPrice': describe(self.price_values),
            'TotalPrice': describe(self.total_price_values),
            'OrderValue': describe(self.order_values.values())
        }

        logger.info(f"Aggregation complete. Processed {self.records_processed:,} clean records "
                    f"and {self.raw_records_processed:,} raw rows")
        self._log_summary_statistics()

    def _log_summary_statistics(self) -> None:
        logger.info(f"Unique products: {len(self.product_sales)}")
        logger.info(f"Customers: {len(self.customers)}")
        logger.info(f"Countries: {len(self.countries)}")
        logger.info(f"Invoices: {len(self.order_values)}")
        logger.info(f"Months: {len(self.monthly_revenue)}")
        logger.info(f"Cancelled order lines: {self.cancelled_orders:,}")
        if self.records_processed > 0:
            logger.info(f"Average line revenue: {self.total_revenue / self.records_processed:,.2f}")

    def get_cancellation_summary(self) -> Dict[str, Any]:
        return {
            'CancelledOrders': self.cancelled_orders,
            'TotalLostRevenue': self.total_lost_revenue
        }

    def get_aggregation_summary(self) -> Dict[str, Any]:
        """Headline numbers of the run."""
        return {
            'records_processed': self.records_processed,
            'raw_records_processed': self.raw_records_processed,
            'total_orders': len(self.order_values),
            'total_customers': len(self.customers),
            'total_revenue': self.total_revenue,
            'unique_products': len(self.product_sales),
            'unique_countries': len(self.countries),
            'months': len(self.monthly_revenue),
            'first_invoice_date': self.first_invoice_date,
            'last_invoice_date': self.last_invoice_date,
            'transaction_types': dict(self.transaction_types),
            **self.get_cancellation_summary()
        }
