"""
Main entry point for the boundary chooser.

This script loads the State, LGA and Ward boundaries and the senatorial
district table, builds the chooser indices, and reports data quality issues.
"""

import argparse
import sys
import time
from pathlib import Path

import psutil

from boundary_chooser.config import ChooserConfig
from boundary_chooser.logging_config import setup_logging
from boundary_chooser.store import BoundaryStore
from boundary_chooser.data_loader import BoundaryDataLoader
from boundary_chooser.output.report_generator import ReportGenerator
from boundary_chooser.exceptions import (
    ConfigurationError, LoadFailureError, LoadInProgressError
)


def parse_arguments(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Boundary Chooser - build State/LGA/Ward lookup indices"
    )

    parser.add_argument("--states", required=True, help="Path to State GeoJSON file")
    parser.add_argument("--lgas", required=True, help="Path to LGA GeoJSON file")
    parser.add_argument("--wards", required=True, help="Path to Ward GeoJSON file")
    parser.add_argument(
        "--districts",
        required=True,
        help="Path to senatorial district table (JSON, CSV or .xlsx)"
    )

    parser.add_argument(
        "--corrections",
        help="Path to LGA name correction table (JSON or CSV)"
    )

    parser.add_argument(
        "--output",
        help="Output directory for reports (reports are skipped when omitted)"
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default="INFO",
        help="Logging level (default: INFO)"
    )

    parser.add_argument("--log-file", help="Write log output to this file as well")

    parser.add_argument(
        "--progress",
        action="store_true",
        help="Show progress bars while building indices"
    )

    return parser.parse_args(argv)


class PerformanceMonitor:
    """Monitor and log timing and memory usage of load phases."""

    def __init__(self, logger=None):
        self.logger = logger
        self.process = psutil.Process()
        self.start_time = time.time()
        self.checkpoints = {}
        self.memory_snapshots = []

    def _emit(self, message: str):
        if self.logger:
            self.logger.info(message)
        else:
            print(message)

    def log_memory_usage(self, checkpoint_name: str):
        """Log current memory usage."""
        memory_mb = self.process.memory_info().rss / 1024 / 1024
        self.memory_snapshots.append({
            'checkpoint': checkpoint_name,
            'timestamp': time.time(),
            'memory_mb': memory_mb
        })
        self._emit(f"Memory usage at {checkpoint_name}: {memory_mb:.1f} MB")

    def start_checkpoint(self, name: str):
        self.checkpoints[name] = {'start': time.time()}
        self.log_memory_usage(f"{name}_start")

    def end_checkpoint(self, name: str):
        if name in self.checkpoints:
            duration = time.time() - self.checkpoints[name]['start']
            self.checkpoints[name]['duration'] = duration
            self.log_memory_usage(f"{name}_end")
            self._emit(f"Checkpoint {name} completed in {duration:.2f} seconds")

    def get_peak_memory(self) -> float:
        if not self.memory_snapshots:
            return 0.0
        return max(snapshot['memory_mb'] for snapshot in self.memory_snapshots)

    def get_performance_summary(self) -> dict:
        return {
            'total_execution_time': time.time() - self.start_time,
            'peak_memory_mb': self.get_peak_memory(),
            'checkpoints': self.checkpoints.copy()
        }


def print_load_summary(store, result):
    """Print a summary of the load to the console."""
    stats = result.stats

    print("\n" + "=" * 60)
    print("BOUNDARY LOAD COMPLETED")
    print("=" * 60)

    print(f"\nBoundaries (generation {store.generation}):")
    print(f"  States: {stats.state_count:,}")
    print(f"  LGAs: {stats.lga_count:,}")
    print(f"  Wards: {stats.ward_count:,}")

    print(f"\nSenatorial Districts:")
    print(f"  Districts: {stats.districts:,} from {stats.district_records:,} records")
    print(f"  Match rate: {stats.get_match_rate():.2f}%")

    if result.has_issues():
        print(f"\nData Quality Issues:")
        for kind, count in result.get_issue_summary().items():
            if count:
                print(f"  {kind.replace('_', ' ')}: {count:,}")
        unmatched = store.unmatched_names()
        if unmatched:
            shown = ', '.join(unmatched[:10])
            more = '...' if len(unmatched) > 10 else ''
            print(f"  Unmatched LGA names: {shown}{more}")


def main(argv=None):
    """Main application entry point."""
    args = parse_arguments(argv)

    try:
        config = ChooserConfig(
            state_file=args.states,
            lga_file=args.lgas,
            ward_file=args.wards,
            district_file=args.districts,
            correction_file=args.corrections,
            output_directory=args.output,
            show_progress=args.progress,
            log_level=args.log_level,
            log_file=args.log_file
        )

        logger = setup_logging(config)
        perf_monitor = PerformanceMonitor(logger.logger)

        logger.info(f"Configuration: {config.to_dict()}")
        logger.log_build_start(config.state_file, config.lga_file,
                               config.ward_file, config.district_file)

        store = BoundaryStore(
            loader=BoundaryDataLoader(logger.logger),
            logger=logger.logger
        )

        logger.log_phase_start("boundary load")
        perf_monitor.start_checkpoint("load")
        result = store.load_from_config(config)
        perf_monitor.end_checkpoint("load")

        stats = result.stats
        logger.log_phase_complete("boundary load",
                                  stats.state_count + stats.lga_count + stats.ward_count,
                                  stats.build_time)
        if result.has_issues():
            issues = ', '.join(f"{k}={v}" for k, v in result.get_issue_summary().items())
            logger.log_data_quality_warning(f"Load finished with issues: {issues}")

        logger.log_build_complete(stats)

        if config.output_directory:
            report_generator = ReportGenerator(config.output_directory, logger)
            if not report_generator.validate_output_directory():
                raise ConfigurationError(
                    "Output directory is not writable",
                    config_key='output_directory',
                    config_value=config.output_directory
                )
            perf_monitor.start_checkpoint("reports")
            generated_files = report_generator.generate_all(result, store, config)
            perf_monitor.end_checkpoint("reports")

            print(f"\nGenerated Report Files:")
            for report_type, file_path in generated_files.items():
                print(f"  {report_type}: {Path(file_path).name}")

        print_load_summary(store, result)

        perf_summary = perf_monitor.get_performance_summary()
        print(f"\nPerformance Summary:")
        print(f"  Total execution time: {perf_summary['total_execution_time']:.2f} seconds")
        print(f"  Peak memory usage: {perf_summary['peak_memory_mb']:.1f} MB")

        logger.info("Application completed successfully")
        return 0

    except (LoadFailureError, LoadInProgressError) as e:
        print(f"\nLoad Error: {e}", file=sys.stderr)
        if getattr(e, 'source', None):
            print(f"Failed input: {e.source}", file=sys.stderr)
        return 3

    except ConfigurationError as e:
        print(f"\nConfiguration Error: {e}", file=sys.stderr)
        return 2

    except FileNotFoundError as e:
        print(f"\nFile Error: {e}", file=sys.stderr)
        print("Please check that all input files exist and are accessible.", file=sys.stderr)
        return 4

    except KeyboardInterrupt:
        print("\nProcess interrupted by user", file=sys.stderr)
        return 130

    except Exception as e:
        print(f"\nError: Unexpected error: {e}", file=sys.stderr)
        print("Please check the log files for more details.", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
