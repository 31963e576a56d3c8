"""
Correction table for known transcription errors in the district dataset.

The table is flat data: a mapping from a dirty name to one corrected name, or
to several when a single source row covers more than one present-day LGA. It
is loaded from a JSON or CSV file so it can be maintained without code changes.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import pandas as pd

from ..exceptions import CorrectionTableError
from ..utils.data_utils import normalize_name, is_null_or_empty, safe_string_conversion


Correction = Union[str, List[str]]


class CorrectionTable:
    """
    Static lookup of normalized dirty names to corrected names.

    Keys are normalized on construction; values are kept as written and are
    normalized by the caller at match time.
    """

    def __init__(self, corrections: Optional[Mapping[str, Correction]] = None,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize the correction table.

        Args:
            corrections: Mapping of dirty name to corrected name(s)
            logger: Optional logger instance
        """
        self.logger = logger or logging.getLogger(__name__)
        self._table: Dict[str, List[str]] = {}

        for source, target in (corrections or {}).items():
            key = normalize_name(source)
            if not key:
                self.logger.warning(f"Ignoring correction with empty source name: {source!r}")
                continue
            if key in self._table:
                self.logger.debug(f"Correction for '{key}' defined more than once, merging targets")
            targets = self._table.setdefault(key, [])
            for name in self._as_list(target):
                if name not in targets:
                    targets.append(name)

    @staticmethod
    def _as_list(target: Any) -> List[str]:
        if isinstance(target, (list, tuple)):
            values = target
        else:
            values = [target]
        return [safe_string_conversion(v) for v in values if not is_null_or_empty(v)]

    def lookup(self, normalized_name: str) -> List[str]:
        """
        Get the corrected names for a normalized name.

        Returns:
            Zero or more corrected names; empty when there is no entry
        """
        return list(self._table.get(normalized_name, []))

    def candidates(self, normalized_name: str) -> List[str]:
        """
        Get the names to try for a normalized name.

        Returns:
            The corrected names, or the input itself when there is no correction
        """
        return self.lookup(normalized_name) or [normalized_name]

    def __contains__(self, normalized_name: str) -> bool:
        return normalized_name in self._table

    def __len__(self) -> int:
        return len(self._table)

    def to_dict(self) -> Dict[str, List[str]]:
        return {k: list(v) for k, v in self._table.items()}

    @classmethod
    def from_file(cls, file_path: str, logger: Optional[logging.Logger] = None) -> 'CorrectionTable':
        """
        Load a correction table from a JSON or CSV file.

        JSON files hold an object of ``{source: corrected | [corrected, ...]}``.
        CSV files need ``source`` and ``corrected`` columns; repeating a source
        on several rows fans it out to several corrected names.

        Raises:
            CorrectionTableError: If the file is missing or malformed
        """
        path = Path(file_path)
        suffix = path.suffix.lower()

        if suffix == '.json':
            corrections = load_corrections_from_json(file_path)
        elif suffix == '.csv':
            corrections = load_corrections_from_csv(file_path)
        else:
            raise CorrectionTableError(
                f"Unsupported correction table format: {suffix}. Supported: .json, .csv",
                file_path=file_path
            )

        table = cls(corrections, logger=logger)
        table.logger.info(f"Loaded {len(table)} corrections from {file_path}")
        return table


def load_corrections_from_json(file_path: str) -> Dict[str, Correction]:
    """
    Load corrections from a JSON object file.

    Raises:
        CorrectionTableError: If the file cannot be read or is not an object
    """
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise CorrectionTableError(
            f"Error loading correction table: {str(e)}",
            file_path=file_path,
            original_error=e
        )

    if not isinstance(data, dict):
        raise CorrectionTableError(
            f"Correction table must be a JSON object, got {type(data).__name__}",
            file_path=file_path
        )

    for source, target in data.items():
        if not isinstance(target, (str, list)):
            raise CorrectionTableError(
                f"Correction for '{source}' must be a string or a list of strings",
                file_path=file_path
            )
    return data


def load_corrections_from_csv(file_path: str) -> Dict[str, Correction]:
    """
    Load corrections from a CSV file with ``source`` and ``corrected`` columns.

    Raises:
        CorrectionTableError: If the file cannot be read or lacks the columns
    """
    try:
        df = pd.read_csv(file_path, dtype=str)
    except (OSError, ValueError, pd.errors.EmptyDataError) as e:
        raise CorrectionTableError(
            f"Error loading correction table: {str(e)}",
            file_path=file_path,
            original_error=e
        )

    required_columns = ['source', 'corrected']
    missing_columns = [col for col in required_columns if col not in df.columns]
    if missing_columns:
        raise CorrectionTableError(
            f"Missing required columns in correction table: {missing_columns}",
            file_path=file_path
        )

    corrections: Dict[str, List[str]] = {}
    for _, row in df.iterrows():
        source = row['source']
        corrected = row['corrected']
        if is_null_or_empty(source) or is_null_or_empty(corrected):
            continue  # Skip incomplete rows
        corrections.setdefault(source.strip(), []).append(corrected.strip())

    return corrections
