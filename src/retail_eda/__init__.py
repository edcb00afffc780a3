# ========================
# src/retail_eda/__init__.py
# ========================

"""
Retail Transaction Analysis Package

Components of the one-shot analysis of an order-line log:
- ingestion: chunked CSV reading and missing-value profiling
- cleaning: validity rules, typing and line revenue
- transformation: group-by aggregations and rankings
- storage: CSV/JSON tables
- charts: PNG charts
- reporting: console report and summary dashboard
- orchestrator: pipeline coordination
"""

from .ingestion import CSVReader
from .cleaning import OrderLineCleaner, MalformedRecordError
from .transformation import RetailAggregator
from .storage import TableSaver
from .charts import ChartRenderer
from .orchestrator import RetailAnalysisPipeline

__all__ = [
    'CSVReader',
    'OrderLineCleaner',
    'MalformedRecordError',
    'RetailAggregator',
    'TableSaver',
    'ChartRenderer',
    'RetailAnalysisPipeline'
]

__version__ = "1.0.0"
