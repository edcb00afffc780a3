#!/usr/bin/env python3
# ========================
# scripts/generate_sample_data.py
# ========================

"""
Generate a synthetic Online Retail order-line log and run the analysis on it.

Usage: python scripts/generate_sample_data.py [num_rows]
"""

import sys
import os

# Add project root to Python path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.retail_eda.orchestrator import RetailAnalysisPipeline
from src.utils.config import Config
from src.utils.data_generator import DataGenerator
from src.utils.logging_setup import setup_logging

EXPECTED_CHARTS = [
    'top_5_products.png',
    'top_10_revenue_countries.png',
    'monthly_revenue_trend.png',
    'top_10_customers_by_revenue.png',
    'cancelled_orders_by_country.png',
    'transaction_type_pie_chart.png',
    'top_countries_revenue_lost_cancellations.png',
    'distribution_order_values_boxplot.png',
    'histogram_totalprice_log.png',
]


def main():
    """Generate sample data, run the pipeline and check the charts exist."""
    config = Config()

    if len(sys.argv) > 1:
        try:
            num_rows = int(sys.argv[1])
        except ValueError:
            print("Usage: python scripts/generate_sample_data.py [num_rows]")
            print("Example: python scripts/generate_sample_data.py 50000")
            sys.exit(1)
    else:
        num_rows = config.DEFAULT_SAMPLE_ROWS

    setup_logging(log_level=config.LOG_LEVEL)

    input_file = 'data/raw/sample_online_retail.csv'
    output_dir = 'reports/sample'

    print("=" * 60)
    print("SAMPLE RETAIL ANALYSIS")
    print("=" * 60)
    print(f"Rows to generate: {num_rows:,}")
    print(f"Input file: {input_file}")
    print(f"Output directory: {output_dir}")
    print("=" * 60)

    print(f"\n🔄 Step 1: Generating {num_rows:,} order lines...")
    stats = DataGenerator(seed=42).generate_dataset(input_file, num_rows, error_rate=0.15)
    print(f"   Anomalies injected: {stats['error_types']}")

    print("\n🔄 Step 2: Running the analysis...")
    pipeline = RetailAnalysisPipeline(input_file, output_dir, config.DEFAULT_CHUNK_SIZE, config)
    results = pipeline.run()

    print("\n🔄 Step 3: Verifying charts...")
    missing_files = []
    for filename in EXPECTED_CHARTS:
        filepath = os.path.join(pipeline.chart_dir, filename)
        if os.path.exists(filepath):
            print(f"✅ {filename}: {os.path.getsize(filepath):,} bytes")
        else:
            missing_files.append(filename)
            print(f"❌ {filename}: MISSING")

    if missing_files:
        print(f"\n⚠️  Warning: {len(missing_files)} charts are missing!")
        sys.exit(1)

    cancelled = results['summary']['CancelledOrders']
    print(f"\n✅ All charts generated. Cancelled order lines: {cancelled:,}")


if __name__ == '__main__':
    main()
