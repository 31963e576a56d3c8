"""
Report generation for boundary loads.

This module writes the data quality diagnostics, the unmatched district
names, the built indices and a text summary of a load into an output
directory, with timestamped file names.
"""

import json
import os
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional, Sequence

import pandas as pd

from ..config import ChooserConfig
from ..logging_config import ChooserLogger
from ..models import BuildResult, Diagnostic, UnmatchedName
from ..store import BoundaryStore


class ReportGenerator:
    """
    Generates report files for a boundary load.

    Empty reports (no diagnostics, no unmatched names) are not written.
    """

    def __init__(self, output_directory: str, logger: Optional[ChooserLogger] = None):
        """
        Initialize the ReportGenerator.

        Args:
            output_directory: Directory receiving the report files
            logger: Optional logger instance for logging operations
        """
        self.output_directory = output_directory
        self.logger = logger or ChooserLogger()
        self.timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

        Path(self.output_directory).mkdir(parents=True, exist_ok=True)

        self.file_patterns = {
            'diagnostics': 'diagnostics_{timestamp}.csv',
            'unmatched': 'unmatched_lga_names_{timestamp}.csv',
            'indices': 'boundary_indices_{timestamp}.json',
            'summary_report': 'load_summary_report_{timestamp}.txt'
        }

    def _path_for(self, report_type: str) -> str:
        filename = self.file_patterns[report_type].format(timestamp=self.timestamp)
        return os.path.join(self.output_directory, filename)

    def generate_all(self, result: BuildResult, store: BoundaryStore,
                     config: Optional[ChooserConfig] = None) -> Dict[str, str]:
        """
        Generate every report for a load.

        Args:
            result: BuildResult returned by the load
            store: Store holding the loaded generation
            config: Optional configuration echoed in the summary

        Returns:
            Dictionary mapping report type to generated file path
        """
        self.logger.info("Starting report generation")
        generated_files = {}

        diagnostics_file = self.write_diagnostics_csv(result.diagnostics)
        if diagnostics_file:
            generated_files['diagnostics'] = diagnostics_file

        unmatched_file = self.write_unmatched_csv(result.reconciliation.unmatched)
        if unmatched_file:
            generated_files['unmatched'] = unmatched_file

        generated_files['indices'] = self.write_index_json(store)
        generated_files['summary_report'] = self.write_summary(result, config)

        self.logger.info(f"Generated {len(generated_files)} report files")
        return generated_files

    def write_diagnostics_csv(self, diagnostics: Sequence[Diagnostic]) -> Optional[str]:
        """Write diagnostics as CSV; returns None when there are none."""
        if not diagnostics:
            self.logger.info("No diagnostics to write")
            return None

        file_path = self._path_for('diagnostics')
        df = pd.DataFrame([d.to_dict() for d in diagnostics],
                          columns=['kind', 'level', 'field_name', 'value', 'row', 'message'])
        df.to_csv(file_path, index=False, encoding='utf-8')
        self.logger.log_file_operation("Wrote diagnostics", file_path, len(df))
        return file_path

    def write_unmatched_csv(self, unmatched: Sequence[UnmatchedName]) -> Optional[str]:
        """Write unmatched district LGA names as CSV; returns None when there are none."""
        if not unmatched:
            self.logger.info("No unmatched LGA names to write")
            return None

        file_path = self._path_for('unmatched')
        df = pd.DataFrame([u.to_dict() for u in unmatched],
                          columns=['district', 'raw_name', 'candidate', 'suggestion', 'suggestion_score'])
        df = df.sort_values(['district', 'raw_name'], kind='stable')
        df.to_csv(file_path, index=False, encoding='utf-8')
        self.logger.log_file_operation("Wrote unmatched LGA names", file_path, len(df))
        return file_path

    def write_index_json(self, store: BoundaryStore) -> str:
        """Write the current indices of the store as JSON."""
        file_path = self._path_for('indices')
        data = store.to_dict()
        with open(file_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        self.logger.log_file_operation("Wrote indices", file_path, len(data.get('lga_to_state', {})))
        return file_path

    def write_summary(self, result: BuildResult, config: Optional[ChooserConfig] = None) -> str:
        """Write a human-readable summary of the load."""
        file_path = self._path_for('summary_report')
        stats = result.stats
        issues = result.get_issue_summary()

        with open(file_path, 'w', encoding='utf-8') as f:
            f.write("BOUNDARY LOAD SUMMARY REPORT\n")
            f.write("=" * 50 + "\n\n")

            f.write(f"Report Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}\n")
            f.write(f"Build Time: {stats.build_time:.2f} seconds\n")
            if config is not None:
                f.write("Configuration:\n")
                f.write(f"  States: {config.state_file}\n")
                f.write(f"  LGAs: {config.lga_file}\n")
                f.write(f"  Wards: {config.ward_file}\n")
                f.write(f"  Senatorial Districts: {config.district_file}\n")
                f.write(f"  Corrections: {config.correction_file or 'Not specified'}\n")
            f.write("\n")

            f.write("BOUNDARIES\n")
            f.write("-" * 10 + "\n")
            f.write(f"States: {stats.state_count:,}\n")
            f.write(f"LGAs: {stats.lga_count:,}\n")
            f.write(f"Wards: {stats.ward_count:,}\n\n")

            f.write("SENATORIAL DISTRICTS\n")
            f.write("-" * 20 + "\n")
            f.write(f"Records: {stats.district_records:,}\n")
            f.write(f"Districts: {stats.districts:,}\n")
            f.write(f"Matched LGA Names: {stats.matched_candidates:,}\n")
            f.write(f"Unmatched LGA Names: {stats.unmatched_candidates:,}\n")
            f.write(f"Match Rate: {stats.get_match_rate():.2f}%\n\n")

            f.write("DATA QUALITY\n")
            f.write("-" * 12 + "\n")
            for kind, count in issues.items():
                f.write(f"{kind.replace('_', ' ').title()}: {count:,}\n")
            f.write(f"Reverse Index Conflicts: {stats.reverse_conflicts:,}\n")
            f.write(f"Canonical Name Collisions: {stats.canonical_collisions:,}\n")

            if result.reconciliation.unmatched:
                f.write("\nUNMATCHED LGA NAMES\n")
                f.write("-" * 19 + "\n")
                for item in result.reconciliation.unmatched:
                    hint = f" (closest: {item.suggestion})" if item.suggestion else ""
                    f.write(f"  {item.district}: {item.raw_name}{hint}\n")

        self.logger.info(f"Generated summary report: {file_path}")
        return file_path

    def validate_output_directory(self) -> bool:
        """
        Validate that output directory is writable.

        Returns:
            True if directory is writable, False otherwise
        """
        try:
            test_file = os.path.join(self.output_directory, f'test_write_{self.timestamp}.tmp')
            with open(test_file, 'w') as f:
                f.write('test')
            os.remove(test_file)
            return True
        except OSError as e:
            self.logger.error(f"Output directory not writable: {e}")
            return False
