# ========================
# src/utils/config.py
# ========================

"""
Configuration Management

Centralized configuration for the retail analysis pipeline with environment support.
"""

import os
import json
from pathlib import Path
from typing import Dict, Any, Optional


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    """
    Configuration class for the retail analysis pipeline.
    Supports environment variables and default values.
    """

    def __init__(self, config_dict: Optional[Dict[str, Any]] = None):
        """
        Initialize configuration.

        Args:
            config_dict (dict): Optional configuration overrides
        """
        # Ingestion
        self.DEFAULT_INPUT_FILE = os.getenv('RETAIL_INPUT_FILE', 'data/raw/OnlineRetail.csv')
        self.DEFAULT_CHUNK_SIZE = int(os.getenv('RETAIL_CHUNK_SIZE', '1000'))
        self.CSV_ENCODING = os.getenv('RETAIL_CSV_ENCODING', 'latin-1')

        # Outputs
        self.DEFAULT_OUTPUT_DIR = os.getenv('RETAIL_OUTPUT_DIR', 'reports')
        self.CHART_DIR = os.getenv('RETAIL_CHART_DIR', 'reports/charts')
        self.RENDER_CHARTS = _env_flag('RENDER_CHARTS', 'true')
        self.CHART_DPI = int(os.getenv('CHART_DPI', '150'))

        # Ranking
        self.TOP_N = int(os.getenv('TOP_N', '10'))
        self.TOP_CHART_PRODUCTS = int(os.getenv('TOP_CHART_PRODUCTS', '5'))

        # Sample data
        self.DEFAULT_SAMPLE_ROWS = int(os.getenv('SAMPLE_ROWS', '10000'))

        # Presentation
        self.CURRENCY_SYMBOL = os.getenv('CURRENCY_SYMBOL', '£')

        # Logging
        self.LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
        self.LOG_DIR = os.getenv('LOG_DIR', 'logs')

        if config_dict:
            self._update_from_dict(config_dict)

    def _update_from_dict(self, config_dict: Dict[str, Any]) -> None:
        """Update configuration from dictionary."""
        for key, value in config_dict.items():
            if hasattr(self, key.upper()):
                setattr(self, key.upper(), value)

    def get_data_paths(self) -> Dict[str, Path]:
        """Get all configured data paths as Path objects."""
        return {
            'input_file': Path(self.DEFAULT_INPUT_FILE),
            'output_dir': Path(self.DEFAULT_OUTPUT_DIR),
            'chart_dir': Path(self.CHART_DIR),
            'logs_dir': Path(self.LOG_DIR)
        }

    def ensure_directories(self) -> None:
        """Create necessary directories if they don't exist."""
        for path_name, path in self.get_data_paths().items():
            if path_name.endswith('_dir'):
                path.mkdir(parents=True, exist_ok=True)

    def validate_config(self) -> Dict[str, bool]:
        """
        Validate configuration values.

        Returns:
            dict: Validation results for each setting
        """
        validations = {}

        validations['chunk_size'] = self.DEFAULT_CHUNK_SIZE > 0
        validations['sample_rows'] = self.DEFAULT_SAMPLE_ROWS > 0
        validations['top_n'] = self.TOP_N > 0
        validations['top_chart_products'] = 0 < self.TOP_CHART_PRODUCTS <= self.TOP_N
        validations['chart_dpi'] = 50 <= self.CHART_DPI <= 600

        valid_log_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        validations['log_level'] = self.LOG_LEVEL.upper() in valid_log_levels

        return validations

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            attr: getattr(self, attr)
            for attr in dir(self)
            if not attr.startswith('_') and not callable(getattr(self, attr))
        }

    def save_to_file(self, file_path: str) -> None:
        """Save configuration to JSON file."""
        with open(file_path, 'w', encoding='utf-8') as f:
            json.dump(self.to_dict(), f, indent=2, default=str, ensure_ascii=False)

    @classmethod
    def load_from_file(cls, file_path: str) -> 'Config':
        """Load configuration from JSON file."""
        with open(file_path, 'r', encoding='utf-8') as f:
            config_dict = json.load(f)
        return cls(config_dict)

    def __str__(self) -> str:
        lines = ["Configuration Settings:"]
        for key, value in sorted(self.to_dict().items()):
            lines.append(f"  {key}: {value}")
        return "\n".join(lines)
