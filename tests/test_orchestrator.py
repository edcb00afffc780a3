# ========================
# tests/test_orchestrator.py
# ========================

import unittest
import tempfile
import shutil
import csv
import os
import sys
from unittest import mock

# Add the project root to Python path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.retail_eda.orchestrator import RetailAnalysisPipeline
from src.retail_eda.cleaning import MalformedRecordError
from src.utils.config import Config
from src.utils.data_generator import DataGenerator, HEADER
import main


class TestRetailAnalysisPipeline(unittest.TestCase):
    """End-to-end runs on generated order-line logs."""

    def setUp(self):
        self.work_dir = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, self.work_dir, ignore_errors=True)
        self.input_file = os.path.join(self.work_dir, 'online_retail.csv')
        self.output_dir = os.path.join(self.work_dir, 'reports')
        self.config = Config({'chart_dpi': 60, 'top_n': 10})

    def _raw_rows(self):
        with open(self.input_file, newline='', encoding='utf-8') as f:
            return list(csv.DictReader(f))

    def test_full_run(self):
        DataGenerator(seed=7).generate_dataset(self.input_file, 400, error_rate=0.3)

        pipeline = RetailAnalysisPipeline(self.input_file, self.output_dir, chunk_size=64, config=self.config)
        results = pipeline.run(print_summary=False)

        self.assertEqual(results['pipeline_status'], 'completed')
        self.assertEqual(results['ingestion_profile']['rows_read'], 400)

        raw_rows = self._raw_rows()
        negative = sum(1 for row in raw_rows if int(row['Quantity']) < 0)
        self.assertGreater(negative, 0)
        self.assertEqual(results['summary']['CancelledOrders'], negative)

        quality = results['data_quality_stats']
        self.assertEqual(quality['records_processed'], 400)
        self.assertEqual(quality['records_cleaned'], pipeline.aggregator.records_processed)
        self.assertGreater(quality['records_dropped'], 0)

        total = results['summary']['total_revenue']
        self.assertAlmostEqual(sum(pipeline.aggregator.customer_revenue.values()), total, places=6)
        self.assertAlmostEqual(sum(pipeline.aggregator.monthly_revenue.values()), total, places=6)

        self.assertEqual(len(results['chart_files']), 9)
        for path in list(results['saved_files'].values()) + list(results['chart_files'].values()):
            self.assertTrue(os.path.exists(path), f"Missing output {path}")
        self.assertTrue(pipeline.chart_dir.startswith(self.output_dir))

        checkpoint_names = [c['name'] for c in results['performance']['checkpoints']]
        self.assertEqual(checkpoint_names, ['ingested', 'aggregated', 'tables_saved', 'charts_rendered'])

    def test_run_without_charts(self):
        DataGenerator(seed=3).generate_dataset(self.input_file, 50)
        config = Config({'render_charts': False})

        results = RetailAnalysisPipeline(self.input_file, self.output_dir, config=config).run(print_summary=False)

        self.assertEqual(results['chart_files'], {})
        self.assertFalse(os.path.exists(os.path.join(self.output_dir, 'charts')))

    def test_run_prints_dashboard(self):
        DataGenerator(seed=5).generate_dataset(self.input_file, 30)
        config = Config({'render_charts': False})

        with mock.patch('sys.stdout') as stdout:
            RetailAnalysisPipeline(self.input_file, self.output_dir, config=config).run()

        printed = ''.join(call.args[0] for call in stdout.write.call_args_list)
        self.assertIn('SUMMARY DASHBOARD', printed)

    def test_missing_input_file(self):
        pipeline = RetailAnalysisPipeline(os.path.join(self.work_dir, 'absent.csv'), self.output_dir,
                                          config=self.config)

        self.assertFalse(pipeline.validate_input())
        with self.assertRaises(FileNotFoundError):
            pipeline.run(print_summary=False)

    def test_malformed_row_stops_the_run(self):
        with open(self.input_file, 'w', newline='', encoding='utf-8') as f:
            writer = csv.writer(f)
            writer.writerow(HEADER)
            writer.writerow(['536365', '71053', 'WHITE METAL LANTERN', '6', '01-12-2010 08:26', '3.39', '17850', 'United Kingdom'])
            writer.writerow(['536366', '22633', 'HAND WARMER UNION JACK', '6', '2010-12-01 08:28', '1.85', '17850', 'United Kingdom'])

        pipeline = RetailAnalysisPipeline(self.input_file, self.output_dir, config=self.config)

        self.assertTrue(pipeline.validate_input())
        with self.assertRaises(MalformedRecordError) as ctx:
            pipeline.run(print_summary=False)
        self.assertEqual(ctx.exception.row_number, 2)


    def test_non_finite_price_stops_the_run(self):
        with open(self.input_file, 'w', newline='', encoding='utf-8') as f:
            writer = csv.writer(f)
            writer.writerow(HEADER)
            writer.writerow(['536365', '71053', 'WHITE METAL LANTERN', '6', '01-12-2010 08:26', '3.39', '17850', 'United Kingdom'])
            writer.writerow(['536366', '22633', 'HAND WARMER UNION JACK', '6', '01-12-2010 08:28', 'Infinity', '17850', 'United Kingdom'])

        pipeline = RetailAnalysisPipeline(self.input_file, self.output_dir, config=self.config)

        with self.assertRaises(MalformedRecordError) as ctx:
            pipeline.run(print_summary=False)
        self.assertEqual(ctx.exception.row_number, 2)
        self.assertEqual(os.listdir(self.output_dir), [])


class TestMain(unittest.TestCase):
    """The command-line entry point."""

    def setUp(self):
        self.work_dir = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, self.work_dir, ignore_errors=True)
        self.output_dir = os.path.join(self.work_dir, 'reports')
        self.input_file = os.path.join(self.work_dir, 'online_retail.csv')
        self.config_file = os.path.join(self.work_dir, 'config.json')

    def _write_config(self, input_file):
        Config({
            'default_input_file': input_file,
            'default_output_dir': self.output_dir,
            'chart_dir': os.path.join(self.output_dir, 'charts'),
            'log_dir': os.path.join(self.work_dir, 'logs'),
            'render_charts': False
        }).save_to_file(self.config_file)

    def _run_main(self):
        with mock.patch.dict(os.environ, {'RETAIL_CONFIG_FILE': self.config_file}), \
                mock.patch('main.setup_logging'), mock.patch('sys.stdout'):
            return main.main()

    def test_main_runs_from_config_file(self):
        DataGenerator(seed=11).generate_dataset(self.input_file, 40)
        self._write_config(self.input_file)

        self.assertEqual(self._run_main(), 0)

        self.assertTrue(os.path.exists(os.path.join(self.output_dir, 'analysis_summary.json')))
        saved = Config.load_from_file(os.path.join(self.output_dir, 'run_config.json'))
        self.assertEqual(saved.DEFAULT_INPUT_FILE, self.input_file)
        self.assertFalse(saved.RENDER_CHARTS)

    def test_main_rejects_missing_input(self):
        self._write_config(os.path.join(self.work_dir, 'absent.csv'))

        self.assertEqual(self._run_main(), 1)
        self.assertFalse(os.path.exists(os.path.join(self.output_dir, 'run_config.json')))


class TestConfig(unittest.TestCase):

    def test_defaults(self):
        with mock.patch.dict(os.environ, {}, clear=True):
            config = Config()
        self.assertEqual(config.DEFAULT_CHUNK_SIZE, 1000)
        self.assertEqual(config.TOP_N, 10)
        self.assertEqual(config.TOP_CHART_PRODUCTS, 5)
        self.assertTrue(config.RENDER_CHARTS)
        self.assertTrue(all(config.validate_config().values()))

    def test_environment_overrides(self):
        env = {'RETAIL_CHUNK_SIZE': '250', 'RENDER_CHARTS': 'false', 'RETAIL_INPUT_FILE': 'x.csv'}
        with mock.patch.dict(os.environ, env, clear=True):
            config = Config()
        self.assertEqual(config.DEFAULT_CHUNK_SIZE, 250)
        self.assertFalse(config.RENDER_CHARTS)
        self.assertEqual(config.DEFAULT_INPUT_FILE, 'x.csv')

    def test_dict_overrides_and_validation(self):
        config = Config({'top_n': 3, 'top_chart_products': 5, 'unknown_key': 1})
        self.assertEqual(config.TOP_N, 3)
        self.assertFalse(hasattr(config, 'UNKNOWN_KEY'))
        self.assertFalse(config.validate_config()['top_chart_products'])

    def test_save_and_load(self):
        work_dir = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, work_dir, ignore_errors=True)
        path = os.path.join(work_dir, 'config.json')

        Config({'top_n': 7}).save_to_file(path)
        self.assertEqual(Config.load_from_file(path).TOP_N, 7)


if __name__ == '__main__':
    unittest.main()
