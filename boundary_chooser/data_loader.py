"""
Data loading and validation module.

This module provides the BoundaryDataLoader class for reading the State, LGA
and Ward GeoJSON files and the senatorial district table. The four inputs are
read concurrently and joined; any failure aborts the whole load.
"""

import json
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from .exceptions import LoadFailureError, ValidationError, create_load_failure
from .models import BoundaryCollection, STATE, LGA, WARD
from .utils.error_handler import create_error_context, log_error_details


@dataclass
class LoadedInputs:
    """The four raw inputs of one load."""

    states: BoundaryCollection
    lgas: BoundaryCollection
    wards: BoundaryCollection
    district_records: List[Dict[str, Any]] = field(default_factory=list)


class BoundaryDataLoader:
    """
    Handles reading and structural validation of the boundary inputs.

    Content problems inside individual features are left to the index builder;
    the loader only rejects inputs that cannot be read or do not have the
    expected overall shape.
    """

    def __init__(self, logger: Optional[logging.Logger] = None, max_workers: int = 4):
        """
        Initialize the BoundaryDataLoader.

        Args:
            logger: Optional logger instance for logging operations
            max_workers: Number of threads used to read inputs concurrently
        """
        self.logger = logger or logging.getLogger(__name__)
        self.max_workers = max_workers

    def load_feature_collection(self, file_path: str, level: str) -> BoundaryCollection:
        """
        Load a GeoJSON FeatureCollection for one administrative level.

        Args:
            file_path: Path to the GeoJSON file
            level: Administrative level of the features

        Returns:
            BoundaryCollection for the level

        Raises:
            LoadFailureError: If the file cannot be read or is not a FeatureCollection
        """
        self.logger.info(f"Loading {level} boundaries from: {file_path}")

        path = Path(file_path)
        if not path.is_file():
            raise LoadFailureError(
                f"{level} boundary file not found: {file_path}",
                source=level,
                file_path=file_path
            )

        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            collection = BoundaryCollection.from_geojson(data, level)
        except (OSError, ValueError, ValidationError) as e:
            raise create_load_failure(level, file_path, e)

        self.logger.info(f"Loaded {len(collection)} {level} features")
        return collection

    def load_district_records(self, file_path: str) -> List[Dict[str, Any]]:
        """
        Load the senatorial district table.

        Supports a JSON list of objects (or an object with a ``records`` list),
        and CSV or Excel (.xlsx) exports of the same table.

        Args:
            file_path: Path to the district table

        Returns:
            List of raw record dicts, with empty cells left as None

        Raises:
            LoadFailureError: If the file cannot be read or has an unexpected shape
        """
        self.logger.info(f"Loading district records from: {file_path}")

        path = Path(file_path)
        if not path.is_file():
            raise LoadFailureError(
                f"District table not found: {file_path}",
                source='districts',
                file_path=file_path
            )

        suffix = path.suffix.lower()
        try:
            if suffix == '.json':
                records = self._read_json_records(path)
            elif suffix == '.csv':
                records = self._records_from_dataframe(pd.read_csv(path, dtype=str))
            elif suffix == '.xlsx':
                records = self._records_from_dataframe(pd.read_excel(path, dtype=str))
            else:
                raise ValidationError(
                    f"Unsupported district table format: {suffix}",
                    field_name='district_file',
                    invalid_value=suffix,
                    validation_rules=['supported formats: .json, .csv, .xlsx']
                )
        except (OSError, ValueError, ImportError, ValidationError,
                pd.errors.EmptyDataError, pd.errors.ParserError) as e:
            raise create_load_failure('districts', file_path, e)

        self.logger.info(f"Loaded {len(records)} district records")
        return records

    def _read_json_records(self, path: Path) -> List[Dict[str, Any]]:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)

        if isinstance(data, dict) and isinstance(data.get('records'), list):
            data = data['records']

        if not isinstance(data, list) or not all(isinstance(r, dict) for r in data):
            raise ValidationError(
                "District table must be a list of objects",
                field_name='records',
                invalid_value=type(data).__name__,
                validation_rules=['JSON must be a list of objects or {"records": [...]}']
            )
        return data

    @staticmethod
    def _records_from_dataframe(df: pd.DataFrame) -> List[Dict[str, Any]]:
        df = df.astype(object).where(pd.notna(df), None)
        return df.to_dict('records')

    def load_all(self, state_file: str, lga_file: str, ward_file: str,
                 district_file: str) -> LoadedInputs:
        """
        Read all four inputs concurrently and wait for every one of them.

        Raises:
            LoadFailureError: If any input fails; the other results are discarded
        """
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = {
                'states': executor.submit(self.load_feature_collection, state_file, STATE),
                'lgas': executor.submit(self.load_feature_collection, lga_file, LGA),
                'wards': executor.submit(self.load_feature_collection, ward_file, WARD),
                'districts': executor.submit(self.load_district_records, district_file),
            }

            results = {}
            failures = []
            for name, future in futures.items():
                try:
                    results[name] = future.result()
                except LoadFailureError as e:
                    failures.append(e)

        if failures:
            first = failures[0]
            context = create_error_context(
                operation="load_all",
                failed_inputs=[f.source for f in failures]
            )
            log_error_details(self.logger, first, context)
            if len(failures) > 1:
                raise LoadFailureError(
                    f"{len(failures)} inputs failed to load; first: {first.message}",
                    source=first.source,
                    file_path=first.file_path,
                    original_error=first
                )
            raise first

        return LoadedInputs(
            states=results['states'],
            lgas=results['lgas'],
            wards=results['wards'],
            district_records=results['districts']
        )
