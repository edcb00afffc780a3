# ========================
# src/retail_eda/orchestrator.py
# ========================

"""
Pipeline Orchestrator Module

Runs ingest, clean, aggregate and report once, top to bottom.
"""

import logging
from typing import Optional
from pathlib import Path

from .ingestion import CSVReader
from .cleaning import OrderLineCleaner
from .transformation import RetailAggregator
from .storage import TableSaver
from .charts import ChartRenderer
from .reporting import print_report
from ..utils.performance_monitor import monitor_performance
from ..utils.config import Config

logger = logging.getLogger(__name__)


class RetailAnalysisPipeline:
    """
    Orchestrates the retail analysis.
    Coordinates reading, cleaning, aggregating and reporting.
    """

    def __init__(self,
                 input_file: str,
                 output_dir: str,
                 chunk_size: int = 1000,
                 config: Optional[Config] = None,
                 chart_dir: Optional[str] = None):
        """
        Initialize the pipeline.

        Args:
            input_file (str): Path to the order-line CSV
            output_dir (str): Directory for tables
            chunk_size (int): Number of rows to process per chunk
            config (Config): Configuration object
            chart_dir (str): Directory for charts, defaults to <output_dir>/charts
        """
        self.input_file = input_file
        self.output_dir = output_dir
        self.chunk_size = chunk_size
        self.config = config or Config()
        self.chart_dir = chart_dir or str(Path(output_dir) / "charts")

        self.reader = CSVReader(self.input_file, encoding=self.config.CSV_ENCODING)
        self.cleaner = OrderLineCleaner()
        self.aggregator = RetailAggregator(top_n=self.config.TOP_N)
        self.saver = TableSaver(self.output_dir)

        logger.info("RetailAnalysisPipeline initialized:")
        logger.info(f"  Input: {self.input_file}")
        logger.info(f"  Output: {self.output_dir}")
        logger.info(f"  Charts: {self.chart_dir}")
        logger.info(f"  Chunk size: {self.chunk_size}")

    def run(self, print_summary: bool = True) -> dict:
        """
        Execute the complete pipeline from start to finish.

        Args:
            print_summary (bool): Print the console report when done

        Returns:
            dict: Summary of processing results and saved files
        """
        logger.info(f"Starting retail analysis for '{self.input_file}'...")

        with monitor_performance("Retail analysis") as monitor:
            self._process_chunks(monitor)
            monitor.add_checkpoint("ingested", {'rows': self.reader.rows_read})

            self.aggregator.finalize_aggregations()
            monitor.add_checkpoint("aggregated")

            logger.info("Saving aggregate tables...")
            saved_files = self.saver.save_all_data(self.aggregator)
            saved_files['data_dictionary'] = self.saver.create_data_dictionary()
            monitor.add_checkpoint("tables_saved", {'files': len(saved_files)})

            chart_files = {}
            if self.config.RENDER_CHARTS:
                logger.info("Rendering charts...")
                renderer = ChartRenderer(
                    self.chart_dir,
                    dpi=self.config.CHART_DPI,
                    currency_symbol=self.config.CURRENCY_SYMBOL,
                    top_chart_products=self.config.TOP_CHART_PRODUCTS
                )
                chart_files = renderer.render_all(self.aggregator)
                monitor.add_checkpoint("charts_rendered", {'files': len(chart_files)})

        results = {
            'pipeline_status': 'completed',
            'input_file': self.input_file,
            'output_directory': self.output_dir,
            'saved_files': saved_files,
            'chart_files': chart_files,
            'summary': self.aggregator.get_aggregation_summary(),
            'ingestion_profile': self.reader.get_profile(),
            'data_quality_stats': self.cleaner.get_statistics(),
            'performance': monitor.summary
        }

        logger.info("Pipeline finished successfully.")
        self._log_final_summary(results)

        if print_summary:
            print_report(self.aggregator, self.config.CURRENCY_SYMBOL)

        return results

    def _process_chunks(self, monitor) -> None:
        """Feed raw rows to the cancellation pass and cleaned rows to the sales pass."""
        chunk_num = 0

        for raw_chunk in self.reader.read_in_chunks(self.chunk_size):
            chunk_num += 1
            logger.debug(f"Processing chunk {chunk_num} with {len(raw_chunk)} rows...")

            self.aggregator.process_raw_chunk(raw_chunk)

            cleaned_chunk = []
            for record in raw_chunk:
                cleaned_record = self.cleaner.clean_record(record)
                if cleaned_record is not None:
                    cleaned_chunk.append(cleaned_record)

            logger.debug(f"Chunk {chunk_num}: {len(cleaned_chunk)}/{len(raw_chunk)} records passed validation")

            if cleaned_chunk:
                self.aggregator.process_chunk(cleaned_chunk)

            monitor.update_progress(len(raw_chunk))

        logger.info(f"Read {chunk_num} chunks")

    def _log_final_summary(self, results: dict) -> None:
        logger.info("=" * 60)
        logger.info("PIPELINE EXECUTION SUMMARY")
        logger.info("=" * 60)

        profile = results['ingestion_profile']
        quality_stats = results['data_quality_stats']

        logger.info(f"Input file: {results['input_file']}")
        logger.info(f"Rows read: {profile['rows_read']:,}")
        logger.info(f"Missing values: {profile['missing_values']}")
        logger.info(f"Clean records: {quality_stats['records_cleaned']:,} "
                    f"({quality_stats['success_rate']:.1f}%)")
        logger.info(f"Drop reasons: {quality_stats['drop_reasons']}")
        logger.info(f"Tables written: {len(results['saved_files'])}")
        logger.info(f"Charts written: {len(results['chart_files'])}")

        for dataset_type, file_path in {**results['saved_files'], **results['chart_files']}.items():
            logger.info(f"  - {dataset_type}: {file_path}")

        logger.info("=" * 60)

    def validate_input(self) -> bool:
        """
        Validate input file exists and is readable.

        Returns:
            bool: True if input is valid
        """
        input_path = Path(self.input_file)
        if not input_path.exists():
            logger.error(f"Input file does not exist: {self.input_file}")
            return False

        if not input_path.is_file():
            logger.error(f"Input path is not a file: {self.input_file}")
            return False

        try:
            with open(self.input_file, 'r', encoding=self.config.CSV_ENCODING) as f:
                f.readline()
        except OSError as e:
            logger.error(f"Cannot read input file: {e}")
            return False

        logger.info(f"Input validation passed: {self.input_file}")
        return True
