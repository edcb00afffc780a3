# ========================
# src/utils/data_generator.py
# ========================

"""
Data Generation Utilities

Synthetic order-line logs in the Online Retail layout, with the usual
quirks of the real export injected: cancellations, anonymous customers,
zero-price lines and blank descriptions.
"""

import csv
import random
import logging
from datetime import datetime, timedelta
from typing import List, Dict, Any, Optional
from pathlib import Path

logger = logging.getLogger(__name__)

HEADER = [
    'InvoiceNo', 'StockCode', 'Description', 'Quantity',
    'InvoiceDate', 'UnitPrice', 'CustomerID', 'Country'
]

DATE_FORMAT = "%d-%m-%Y %H:%M"


class DataGenerator:
    """
    Generates realistic retail transaction logs for demos and tests.
    """

    def __init__(self, seed: Optional[int] = None):
        """
        Initialize data generator.

        Args:
            seed (int): Random seed for reproducible data generation
        """
        self._random = random.Random(seed)
        self._initialize_data_patterns()
        logger.info(f"DataGenerator initialized with seed: {seed}")

    def _initialize_data_patterns(self) -> None:
        """Initialize catalog, customer base and country mix."""
        self.products = [
            {"code": "85123A", "description": "WHITE HANGING HEART T-LIGHT HOLDER", "base_price": 2.55},
            {"code": "71053", "description": "WHITE METAL LANTERN", "base_price": 3.39},
            {"code": "84406B", "description": "CREAM CUPID HEARTS COAT HANGER", "base_price": 2.75},
            {"code": "22423", "description": "REGENCY CAKESTAND 3 TIER", "base_price": 12.75},
            {"code": "85099B", "description": "JUMBO BAG RED RETROSPOT", "base_price": 1.95},
            {"code": "84879", "description": "ASSORTED COLOUR BIRD ORNAMENT", "base_price": 1.69},
            {"code": "47566", "description": "PARTY BUNTING", "base_price": 4.95},
            {"code": "20725", "description": "LUNCH BAG RED RETROSPOT", "base_price": 1.65},
            {"code": "22197", "description": "SMALL POPCORN HOLDER", "base_price": 0.85},
            {"code": "21212", "description": "PACK OF 72 RETROSPOT CAKE CASES", "base_price": 0.55},
            {"code": "23084", "description": "RABBIT NIGHT LIGHT", "base_price": 2.08},
            {"code": "22086", "description": "PAPER CHAIN KIT 50'S CHRISTMAS", "base_price": 2.95},
        ]

        self.countries = [
            {"name": "United Kingdom", "weight": 0.82},
            {"name": "Germany", "weight": 0.04},
            {"name": "France", "weight": 0.04},
            {"name": "EIRE", "weight": 0.03},
            {"name": "Spain", "weight": 0.02},
            {"name": "Netherlands", "weight": 0.02},
            {"name": "Belgium", "weight": 0.015},
            {"name": "Switzerland", "weight": 0.015},
        ]

        self.customers = [str(12346 + i * 7) for i in range(400)]

        # Month -> demand multiplier, Q4 gift season peaks
        self.seasonal_patterns = {
            1: 0.8, 2: 0.8, 3: 0.9, 4: 0.9, 5: 1.0, 6: 1.0,
            7: 1.0, 8: 1.0, 9: 1.2, 10: 1.3, 11: 1.5, 12: 1.1
        }

    def generate_dataset(self,
                         file_path: str,
                         num_rows: int,
                         error_rate: float = 0.15,
                         lines_per_invoice: int = 4,
                         start_date: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Generate an order-line CSV with controlled anomaly injection.

        Args:
            file_path (str): Output CSV file path
            num_rows (int): Number of order lines to generate
            error_rate (float): Fraction of lines carrying an anomaly
            lines_per_invoice (int): Average number of lines per invoice
            start_date (datetime): Start of the one-year date range

        Returns:
            dict: Generation statistics
        """
        logger.info(f"Generating {num_rows:,} rows with {error_rate:.1%} anomaly rate...")

        if start_date is None:
            start_date = datetime(2010, 12, 1, 8, 0)

        stats = {
            'total_rows': num_rows,
            'error_rate': error_rate,
            'start_date': start_date,
            'records_with_errors': 0,
            'error_types': {}
        }

        Path(file_path).parent.mkdir(parents=True, exist_ok=True)

        with open(file_path, 'w', newline='', encoding='utf-8') as f:
            writer = csv.writer(f)
            writer.writerow(HEADER)

            invoice = self._new_invoice(536365, start_date)
            for i in range(num_rows):
                if invoice['lines_left'] == 0:
                    invoice = self._new_invoice(invoice['number'] + 1, start_date)
                    invoice['lines_left'] = self._random.randint(1, max(1, lines_per_invoice * 2 - 1))
                writer.writerow(self._generate_single_record(invoice, error_rate, stats))
                invoice['lines_left'] -= 1

                if (i + 1) % 10000 == 0:
                    logger.debug(f"Generated {i + 1:,} records")

        stats['error_rate_actual'] = stats['records_with_errors'] / num_rows if num_rows else 0.0

        logger.info(f"Dataset generated: {file_path}")
        logger.info(f"Actual anomaly rate: {stats['error_rate_actual']:.1%}")
        logger.info(f"Anomaly breakdown: {stats['error_types']}")

        return stats

    def _new_invoice(self, number: int, start_date: datetime) -> Dict[str, Any]:
        country = self._random.choices(
            self.countries, weights=[c["weight"] for c in self.countries]
        )[0]["name"]
        invoice_date = start_date + timedelta(
            days=self._random.randint(0, 364),
            hours=self._random.randint(0, 10),
            minutes=self._random.randint(0, 59)
        )
        return {
            'number': number,
            'date': invoice_date,
            'country': country,
            'customer': self._random.choice(self.customers),
            'lines_left': 1
        }

    def _generate_single_record(self,
                                invoice: Dict[str, Any],
                                error_rate: float,
                                stats: Dict[str, Any]) -> List[Any]:
        """Generate a single order line with a potential anomaly."""
        product = self._random.choice(self.products)
        seasonal_multiplier = self.seasonal_patterns.get(invoice['date'].month, 1.0)

        line = {
            'invoice_no': str(invoice['number']),
            'stock_code': product["code"],
            'description': product["description"],
            'quantity': max(1, int(self._random.randint(1, 24) * seasonal_multiplier)),
            'unit_price': round(product["base_price"] * self._random.uniform(0.9, 1.1), 2),
            'customer_id': invoice['customer'],
        }

        if self._random.random() < error_rate:
            stats['records_with_errors'] += 1
            self._inject_anomaly(line, stats)

        return [
            line['invoice_no'], line['stock_code'], line['description'], line['quantity'],
            invoice['date'].strftime(DATE_FORMAT), line['unit_price'],
            line['customer_id'], invoice['country']
        ]

    def _inject_anomaly(self, line: Dict[str, Any], stats: Dict[str, Any]) -> None:
        """Inject one of the anomalies found in the real export."""
        error_type = self._random.choice([
            'cancellation', 'missing_customer', 'zero_price', 'missing_description'
        ])

        if error_type == 'cancellation':
            line['invoice_no'] = f"C{line['invoice_no']}"
            line['quantity'] = -self._random.randint(1, 12)
        elif error_type == 'missing_customer':
            line['customer_id'] = ''
        elif error_type == 'zero_price':
            line['unit_price'] = 0.0
        elif error_type == 'missing_description':
            line['description'] = ''
            line['customer_id'] = ''

        stats['error_types'][error_type] = stats['error_types'].get(error_type, 0) + 1
