#!/usr/bin/env python3
# ========================
# main.py
# ========================

"""
Main Entry Point for the Retail Transaction Analysis

Runs the analysis once on the configured order-line CSV: cleaning,
aggregation, tables, charts and the printed summary dashboard.
"""

import os
import sys
import logging
from pathlib import Path

# Add src to Python path
sys.path.insert(0, str(Path(__file__).parent / 'src'))

from src.retail_eda import RetailAnalysisPipeline
from src.utils import Config, setup_logging


def main():
    """Main execution function."""
    config_file = os.environ.get("RETAIL_CONFIG_FILE")
    config = Config.load_from_file(config_file) if config_file else Config()

    setup_logging(
        log_level=config.LOG_LEVEL,
        log_file="retail_analysis.log",
        log_dir=config.LOG_DIR
    )

    logger = logging.getLogger(__name__)
    logger.info("=" * 60)
    logger.info("RETAIL TRANSACTION ANALYSIS - MAIN EXECUTION")
    logger.info("=" * 60)
    logger.debug(str(config))

    try:
        invalid = [name for name, ok in config.validate_config().items() if not ok]
        if invalid:
            logger.error(f"Invalid configuration values: {invalid}")
            return 1

        config.ensure_directories()

        pipeline = RetailAnalysisPipeline(
            input_file=config.DEFAULT_INPUT_FILE,
            output_dir=config.DEFAULT_OUTPUT_DIR,
            chunk_size=config.DEFAULT_CHUNK_SIZE,
            config=config,
            chart_dir=config.CHART_DIR
        )

        if not pipeline.validate_input():
            return 1

        config.save_to_file(str(Path(config.DEFAULT_OUTPUT_DIR) / "run_config.json"))

        results = pipeline.run()
        _print_output_listing(results)

        logger.info("Analysis completed successfully!")
        return 0

    except Exception as e:
        logger.error(f"Analysis failed: {e}", exc_info=True)
        return 1


def _print_output_listing(results: dict) -> None:
    """List the files a run produced."""
    print("\n📁 Generated Outputs:")
    for dataset_type, file_path in results['saved_files'].items():
        print(f"   • {dataset_type.replace('_', ' ').title()}: {Path(file_path).name}")
    for chart_name, file_path in results['chart_files'].items():
        print(f"   • Chart - {chart_name.replace('_', ' ')}: {Path(file_path).name}")


if __name__ == '__main__':
    exit_code = main()
    sys.exit(exit_code)
