"""
Configuration management for the boundary chooser.

This module provides dataclasses for the input file locations, the property
keys read from each boundary level, and build statistics.
"""

from dataclasses import dataclass, field, asdict
from typing import Dict, List, Optional
import os
from pathlib import Path

from .exceptions import ConfigurationError


VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

# Header spellings seen in spreadsheet exports of the senatorial district table
DEFAULT_DISTRICT_LABEL_KEYS = ['Senatorial_District', 'district', 'senatorial_district']
DEFAULT_DISTRICT_LGA_KEYS = ['LGAs', 'lga', 'LGA']


@dataclass(frozen=True)
class FieldNames:
    """Property keys read from boundary features."""

    state_name: str = 'statename'
    lga_name: str = 'lganame'
    lga_code: str = 'lgacode'
    ward_name: str = 'wardname'
    ward_code: str = 'wardcode'

    @classmethod
    def from_dict(cls, values: Dict[str, str]) -> 'FieldNames':
        """Create field names from dictionary, ignoring unknown keys."""
        known = {k: v for k, v in values.items() if k in cls.__dataclass_fields__}
        return cls(**known)


@dataclass
class ChooserConfig:
    """Configuration for a boundary load."""

    # Input file paths
    state_file: str
    lga_file: str
    ward_file: str
    district_file: str

    # Optional flat-file correction table (JSON or CSV)
    correction_file: Optional[str] = None

    # Report output
    output_directory: Optional[str] = None

    fields: FieldNames = field(default_factory=FieldNames)
    district_label_keys: List[str] = field(
        default_factory=lambda: list(DEFAULT_DISTRICT_LABEL_KEYS))
    district_lga_keys: List[str] = field(
        default_factory=lambda: list(DEFAULT_DISTRICT_LGA_KEYS))

    show_progress: bool = False

    # Logging configuration
    log_level: str = "INFO"
    log_file: Optional[str] = None

    def __post_init__(self):
        """Validate configuration after initialization."""
        if isinstance(self.fields, dict):
            self.fields = FieldNames.from_dict(self.fields)
        self._validate_paths()
        self._validate_keys()
        self._validate_log_level()
        self._ensure_output_directory()

    def _validate_paths(self):
        """Validate that input files exist."""
        inputs = {
            'state_file': self.state_file,
            'lga_file': self.lga_file,
            'ward_file': self.ward_file,
            'district_file': self.district_file,
        }
        for name, path in inputs.items():
            if not os.path.exists(path):
                raise FileNotFoundError(f"Input file not found ({name}): {path}")

        if self.correction_file and not os.path.exists(self.correction_file):
            raise FileNotFoundError(f"Correction table not found: {self.correction_file}")

    def _validate_keys(self):
        """Validate that at least one spelling is accepted for each district field."""
        if not self.district_label_keys:
            raise ConfigurationError(
                "At least one district label key must be specified",
                config_key='district_label_keys',
                config_value=self.district_label_keys
            )
        if not self.district_lga_keys:
            raise ConfigurationError(
                "At least one district LGA key must be specified",
                config_key='district_lga_keys',
                config_value=self.district_lga_keys
            )

    def _validate_log_level(self):
        """Normalize and validate the log level."""
        self.log_level = str(self.log_level).upper()
        if self.log_level not in VALID_LOG_LEVELS:
            raise ConfigurationError(
                f"Invalid log level: {self.log_level}",
                config_key='log_level',
                config_value=self.log_level,
                valid_values=VALID_LOG_LEVELS
            )

    def _ensure_output_directory(self):
        """Create output directory if it doesn't exist."""
        if self.output_directory:
            Path(self.output_directory).mkdir(parents=True, exist_ok=True)

    @classmethod
    def from_dict(cls, config_dict: Dict) -> 'ChooserConfig':
        """Create configuration from dictionary."""
        return cls(**config_dict)

    def to_dict(self) -> Dict:
        """Convert configuration to dictionary."""
        return {
            'state_file': self.state_file,
            'lga_file': self.lga_file,
            'ward_file': self.ward_file,
            'district_file': self.district_file,
            'correction_file': self.correction_file,
            'output_directory': self.output_directory,
            'fields': asdict(self.fields),
            'district_label_keys': list(self.district_label_keys),
            'district_lga_keys': list(self.district_lga_keys),
            'show_progress': self.show_progress,
            'log_level': self.log_level,
            'log_file': self.log_file
        }


@dataclass
class BuildStats:
    """Statistics tracking for one index build."""

    state_count: int = 0
    lga_count: int = 0
    ward_count: int = 0
    district_records: int = 0
    districts: int = 0
    matched_candidates: int = 0
    unmatched_candidates: int = 0
    skipped_records: int = 0
    unresolved_references: int = 0
    reverse_conflicts: int = 0
    canonical_collisions: int = 0
    build_time: float = 0.0

    def get_match_rate(self) -> float:
        """Calculate the district reconciliation match rate percentage."""
        total = self.matched_candidates + self.unmatched_candidates
        if total == 0:
            return 0.0

        return (self.matched_candidates / total) * 100
