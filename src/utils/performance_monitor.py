# ========================
# src/utils/performance_monitor.py
# ========================

"""
Performance Monitoring Utilities

Tracks wall time, throughput and process memory for a pipeline run.
"""

import os
import time
import logging
from contextlib import contextmanager
from typing import Dict, Any, Optional

import psutil

logger = logging.getLogger(__name__)


class PerformanceMonitor:
    """
    Performance monitoring utility for the pipeline.
    Tracks memory usage, processing time, and throughput.
    """

    def __init__(self, name: str = "Pipeline", log_every_chunks: int = 100):
        """
        Initialize performance monitor.

        Args:
            name (str): Name for this monitoring session
            log_every_chunks (int): Log a progress line every N chunks
        """
        self.name = name
        self.log_every_chunks = log_every_chunks
        self.start_time = None
        self.end_time = None
        self.peak_memory_mb = 0.0
        self.rows_processed = 0
        self.chunks_processed = 0
        self.checkpoints = []
        self._process = psutil.Process(os.getpid())

        logger.debug(f"PerformanceMonitor initialized: {name}")

    def start_monitoring(self) -> None:
        """Start performance monitoring."""
        self.start_time = time.time()
        self.peak_memory_mb = self._get_memory_usage_mb()

        logger.info(f"{self.name} - Performance monitoring started")
        logger.info(f"Initial memory usage: {self.peak_memory_mb:.2f} MB")

    def update_progress(self, rows_in_chunk: int) -> None:
        """
        Update progress tracking.

        Args:
            rows_in_chunk (int): Number of raw rows read in this chunk
        """
        self.rows_processed += rows_in_chunk
        self.chunks_processed += 1
        current_memory = self._get_memory_usage_mb()
        self.peak_memory_mb = max(self.peak_memory_mb, current_memory)

        if self.chunks_processed % self.log_every_chunks == 0:
            self._log_progress(current_memory)

    def add_checkpoint(self, name: str, metadata: Optional[Dict[str, Any]] = None) -> None:
        """
        Add a performance checkpoint.

        Args:
            name (str): Checkpoint name
            metadata (dict): Optional metadata to store
        """
        memory_mb = self._get_memory_usage_mb()
        self.peak_memory_mb = max(self.peak_memory_mb, memory_mb)
        checkpoint = {
            'name': name,
            'elapsed_seconds': time.time() - self.start_time if self.start_time else 0.0,
            'memory_mb': memory_mb,
            'rows_processed': self.rows_processed,
            'metadata': metadata or {}
        }
        self.checkpoints.append(checkpoint)
        logger.debug(f"Checkpoint '{name}': {checkpoint}")

    def _log_progress(self, current_memory: float) -> None:
        if self.start_time:
            elapsed = time.time() - self.start_time
            throughput = self.rows_processed / elapsed if elapsed > 0 else 0

            logger.info(
                f"{self.name} - Progress: {self.chunks_processed} chunks, "
                f"{self.rows_processed:,} rows, "
                f"{throughput:.0f} rows/sec, "
                f"Memory: {current_memory:.2f} MB"
            )

    def stop_monitoring(self) -> Dict[str, Any]:
        """
        Stop monitoring and return performance summary.

        Returns:
            dict: Performance statistics
        """
        self.end_time = time.time()
        total_time = self.end_time - self.start_time if self.start_time else 0
        throughput = self.rows_processed / total_time if total_time > 0 else 0

        summary = {
            'name': self.name,
            'total_processing_time_seconds': total_time,
            'rows_processed': self.rows_processed,
            'chunks_processed': self.chunks_processed,
            'average_throughput_rows_per_second': throughput,
            'peak_memory_usage_mb': self.peak_memory_mb,
            'checkpoints': self.checkpoints
        }

        self._log_summary(summary)
        return summary

    def _log_summary(self, summary: Dict[str, Any]) -> None:
        logger.info(
            f"{summary['name']} - {summary['rows_processed']:,} rows in "
            f"{summary['chunks_processed']:,} chunks, "
            f"{summary['total_processing_time_seconds']:.2f}s "
            f"({summary['average_throughput_rows_per_second']:.0f} rows/sec), "
            f"peak memory {summary['peak_memory_usage_mb']:.2f} MB"
        )
        for checkpoint in summary['checkpoints']:
            logger.info(
                f"  checkpoint {checkpoint['name']}: "
                f"{checkpoint['elapsed_seconds']:.2f}s, {checkpoint['memory_mb']:.2f} MB"
            )

    def _get_memory_usage_mb(self) -> float:
        """Get current resident memory in MB."""
        try:
            memory_bytes = self._process.memory_info().rss
        except psutil.Error as e:
            logger.debug(f"Could not get memory usage: {e}")
            return 0.0
        return memory_bytes / (1024 * 1024)


@contextmanager
def monitor_performance(name: str = "Pipeline"):
    """
    Context manager for easy performance monitoring.

    The summary is attached to the monitor as ``monitor.summary`` on exit.

    Args:
        name (str): Name for this monitoring session

    Yields:
        PerformanceMonitor: Monitor instance
    """
    monitor = PerformanceMonitor(name)
    monitor.start_monitoring()
    try:
        yield monitor
    finally:
        monitor.summary = monitor.stop_monitoring()
