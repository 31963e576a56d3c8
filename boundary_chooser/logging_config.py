"""
Logging configuration for the boundary chooser.

This module provides the logger used by the command line tool, with
configurable level, optional file output, and helpers for build progress and
data quality messages.
"""

import logging
import sys
from pathlib import Path
from typing import Optional
from datetime import datetime


class ChooserLogger:
    """Custom logger for boundary load and index build operations."""

    def __init__(self, name: str = "boundary_chooser", level: str = "INFO",
                 log_file: Optional[str] = None):
        """
        Initialize the chooser logger.

        Args:
            name: Logger name
            level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_file: Optional file path for log output
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper()))

        # Clear any existing handlers
        self.logger.handlers.clear()

        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        self.logger.addHandler(console_handler)

        if log_file:
            self._setup_file_handler(log_file, formatter)

    def _setup_file_handler(self, log_file: str, formatter: logging.Formatter):
        """Set up file logging handler."""
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
        file_handler.setFormatter(formatter)
        self.logger.addHandler(file_handler)

    def info(self, message: str):
        self.logger.info(message)

    def debug(self, message: str):
        self.logger.debug(message)

    def warning(self, message: str):
        self.logger.warning(message)

    def error(self, message: str):
        self.logger.error(message)

    def critical(self, message: str):
        self.logger.critical(message)

    def log_build_start(self, state_file: str, lga_file: str, ward_file: str, district_file: str):
        """Log the start of a load with its inputs."""
        self.info("=" * 60)
        self.info("BOUNDARY LOAD STARTED")
        self.info("=" * 60)
        self.info(f"States: {state_file}")
        self.info(f"LGAs: {lga_file}")
        self.info(f"Wards: {ward_file}")
        self.info(f"Senatorial districts: {district_file}")
        self.info(f"Started at: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")

    def log_build_complete(self, stats):
        """Log build completion with statistics."""
        self.info("=" * 60)
        self.info("BOUNDARY LOAD COMPLETED")
        self.info("=" * 60)
        self.info(f"States: {stats.state_count:,}")
        self.info(f"LGAs: {stats.lga_count:,}")
        self.info(f"Wards: {stats.ward_count:,}")
        self.info(f"District records: {stats.district_records:,} "
                  f"({stats.districts:,} districts)")
        self.info(f"District LGA names matched: {stats.matched_candidates:,}")
        self.info(f"District LGA names unmatched: {stats.unmatched_candidates:,}")
        self.info(f"District match rate: {stats.get_match_rate():.2f}%")
        self.info(f"Skipped records: {stats.skipped_records:,}")
        self.info(f"Unresolved references: {stats.unresolved_references:,}")
        self.info(f"Build time: {stats.build_time:.2f} seconds")
        self.info(f"Completed at: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")

    def log_phase_start(self, phase_name: str):
        """Log the start of a processing phase."""
        self.info("-" * 40)
        self.info(f"Starting {phase_name}")
        self.info("-" * 40)

    def log_phase_complete(self, phase_name: str, count: int, duration: float):
        """Log the completion of a processing phase."""
        self.info(f"Completed {phase_name}")
        self.info(f"Records processed: {count:,}")
        self.info(f"Duration: {duration:.2f} seconds")

    def log_data_quality_warning(self, message: str):
        self.warning(f"DATA QUALITY: {message}")

    def log_file_operation(self, operation: str, file_path: str, record_count: int):
        self.info(f"{operation}: {file_path} ({record_count:,} records)")


def setup_logging(config) -> ChooserLogger:
    """
    Set up logging based on configuration.

    Args:
        config: ChooserConfig instance

    Returns:
        Configured ChooserLogger instance
    """
    log_file = None
    if config.log_file:
        log_file = config.log_file
    elif config.output_directory:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = Path(config.output_directory) / f"boundary_load_{timestamp}.txt"

    return ChooserLogger(
        name="boundary_chooser",
        level=config.log_level,
        log_file=str(log_file) if log_file else None
    )
