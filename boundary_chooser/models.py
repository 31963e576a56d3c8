"""
Data models for the boundary chooser.

This module defines the core data structures used throughout the load and
index build: boundary features and collections, external district records,
and the structured results of a build.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

from .config import BuildStats
from .exceptions import ValidationError
from .utils.data_utils import first_present, is_null_or_empty


STATE = 'state'
LGA = 'lga'
WARD = 'ward'
LEVELS = (STATE, LGA, WARD)

MISSING_FIELD = 'missing_field'
UNRESOLVED_REFERENCE = 'unresolved_reference'


@dataclass(frozen=True)
class BoundaryFeature:
    """One polygon/multipolygon boundary with its properties bag."""

    level: str
    properties: Mapping[str, Any]
    geometry: Optional[Dict[str, Any]] = None

    def get(self, key: str) -> Optional[str]:
        """
        Read a property as a string, exactly as written in the source.

        Returns:
            The value, or None when the property is absent, null or blank
        """
        value = self.properties.get(key)
        if is_null_or_empty(value):
            return None
        return value if isinstance(value, str) else str(value)

    def to_geojson(self) -> Dict[str, Any]:
        """Convert back to a GeoJSON Feature dict."""
        return {
            'type': 'Feature',
            'properties': dict(self.properties),
            'geometry': self.geometry
        }

    @classmethod
    def from_geojson(cls, feature: Any, level: str) -> 'BoundaryFeature':
        """
        Create a feature from a GeoJSON Feature dict.

        Raises:
            ValidationError: If the value is not a Feature-shaped dict
        """
        if not isinstance(feature, dict):
            raise ValidationError(
                f"{level} feature must be an object, got {type(feature).__name__}",
                field_name='features',
                invalid_value=type(feature).__name__,
                validation_rules=['feature must be a GeoJSON Feature object']
            )

        properties = feature.get('properties') or {}
        if not isinstance(properties, dict):
            raise ValidationError(
                f"{level} feature properties must be an object",
                field_name='properties',
                invalid_value=type(properties).__name__,
                validation_rules=['properties must be an object or null']
            )

        return cls(
            level=level,
            properties=MappingProxyType(dict(properties)),
            geometry=feature.get('geometry')
        )


@dataclass(frozen=True)
class BoundaryCollection:
    """Ordered sequence of boundary features for one administrative level."""

    level: str
    features: Tuple[BoundaryFeature, ...] = ()

    def __iter__(self) -> Iterator[BoundaryFeature]:
        return iter(self.features)

    def __len__(self) -> int:
        return len(self.features)

    def filter(self, key: str, value: str) -> List[BoundaryFeature]:
        """Features whose property ``key`` equals ``value`` exactly."""
        return [f for f in self.features if f.get(key) == value]

    def names(self, key: str) -> List[str]:
        """Unique non-empty values of ``key`` in first-seen order."""
        seen = []
        for feature in self.features:
            value = feature.get(key)
            if value is not None and value not in seen:
                seen.append(value)
        return seen

    def to_geojson(self) -> Dict[str, Any]:
        """Convert back to a GeoJSON FeatureCollection dict."""
        return {
            'type': 'FeatureCollection',
            'features': [f.to_geojson() for f in self.features]
        }

    @classmethod
    def empty(cls, level: str) -> 'BoundaryCollection':
        return cls(level=level)

    @classmethod
    def from_features(cls, features: Sequence[Any], level: str) -> 'BoundaryCollection':
        """Create a collection from a sequence of GeoJSON Feature dicts."""
        return cls(
            level=level,
            features=tuple(BoundaryFeature.from_geojson(f, level) for f in features)
        )

    @classmethod
    def from_geojson(cls, data: Any, level: str) -> 'BoundaryCollection':
        """
        Create a collection from a GeoJSON FeatureCollection dict.

        Raises:
            ValidationError: If the structure is not a FeatureCollection
        """
        if not isinstance(data, dict) or data.get('type') != 'FeatureCollection':
            raise ValidationError(
                f"{level} data is not a GeoJSON FeatureCollection",
                field_name='type',
                invalid_value=data.get('type') if isinstance(data, dict) else type(data).__name__,
                validation_rules=["type must be 'FeatureCollection'"]
            )

        features = data.get('features')
        if not isinstance(features, list):
            raise ValidationError(
                f"{level} FeatureCollection has no features list",
                field_name='features',
                invalid_value=type(features).__name__,
                validation_rules=['features must be a list']
            )

        return cls.from_features(features, level)


@dataclass(frozen=True)
class ExternalDistrictRecord:
    """A row of the senatorial district table."""

    district: Optional[str]
    lga_name: Optional[str]
    row: Optional[int] = None

    def is_valid(self) -> bool:
        """Check if the record has both a district label and an LGA name."""
        return self.district is not None and self.lga_name is not None

    def get_missing_fields(self) -> List[str]:
        missing = []
        if self.district is None:
            missing.append('district')
        if self.lga_name is None:
            missing.append('lga')
        return missing

    @classmethod
    def from_record(cls, record: Mapping[str, Any], label_keys: Sequence[str],
                    lga_keys: Sequence[str], row: Optional[int] = None) -> 'ExternalDistrictRecord':
        """Read a raw record, accepting any of the configured key spellings."""
        return cls(
            district=first_present(record, label_keys),
            lga_name=first_present(record, lga_keys),
            row=row
        )


@dataclass(frozen=True)
class Diagnostic:
    """
    A data quality issue found during a build.

    ``kind`` is either ``missing_field`` (the record was skipped) or
    ``unresolved_reference`` (a name or code did not resolve to a canonical
    entry).
    """

    kind: str
    level: str
    message: str
    field_name: Optional[str] = None
    value: Optional[str] = None
    row: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'kind': self.kind,
            'level': self.level,
            'message': self.message,
            'field_name': self.field_name,
            'value': self.value,
            'row': self.row
        }


@dataclass(frozen=True)
class UnmatchedName:
    """A district table LGA name that did not resolve to a canonical LGA."""

    district: str
    raw_name: str
    candidate: str
    suggestion: Optional[str] = None
    suggestion_score: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'district': self.district,
            'raw_name': self.raw_name,
            'candidate': self.candidate,
            'suggestion': self.suggestion,
            'suggestion_score': self.suggestion_score
        }


@dataclass
class HierarchyIndex:
    """Forward and reverse lookups for State -> LGA -> Ward."""

    state_to_lga: Dict[str, List[str]] = field(default_factory=dict)
    lga_to_ward: Dict[str, List[str]] = field(default_factory=dict)
    lga_to_state: Dict[str, str] = field(default_factory=dict)
    ward_to_lga: Dict[str, str] = field(default_factory=dict)


@dataclass
class ReconciliationResult:
    """Senatorial district index plus what could not be matched."""

    senatorial_to_lga: Dict[str, List[str]] = field(default_factory=dict)
    unmatched: List[UnmatchedName] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def unmatched_names(self) -> List[str]:
        """Unmatched normalized candidates, unique, in first-seen order."""
        names = []
        for item in self.unmatched:
            if item.candidate not in names:
                names.append(item.candidate)
        return names


@dataclass
class BuildResult:
    """Everything produced by one build pass."""

    index: HierarchyIndex
    reconciliation: ReconciliationResult
    diagnostics: List[Diagnostic] = field(default_factory=list)
    stats: BuildStats = field(default_factory=BuildStats)

    def has_issues(self) -> bool:
        """Check if the build recorded any diagnostics or unmatched names."""
        return bool(self.diagnostics or self.reconciliation.unmatched)

    def get_issue_summary(self) -> Dict[str, int]:
        """Count diagnostics by kind, plus unmatched district names."""
        summary = {MISSING_FIELD: 0, UNRESOLVED_REFERENCE: 0}
        for diagnostic in self.diagnostics:
            summary[diagnostic.kind] = summary.get(diagnostic.kind, 0) + 1
        summary['unmatched_names'] = len(self.reconciliation.unmatched)
        return summary
