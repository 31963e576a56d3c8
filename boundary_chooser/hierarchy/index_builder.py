"""
Hierarchical index builder for the boundary chooser.

This module builds the State -> LGA -> Ward lookup indices from the boundary
feature collections, inverts them for child -> parent lookups, and reconciles
the senatorial district table against the canonical LGA names.
"""

import logging
import time
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from rapidfuzz import fuzz, process
from tqdm import tqdm

from ..config import (
    BuildStats, FieldNames, DEFAULT_DISTRICT_LABEL_KEYS, DEFAULT_DISTRICT_LGA_KEYS
)
from ..matching.correction_table import CorrectionTable
from ..models import (
    BoundaryFeature, Diagnostic, ExternalDistrictRecord, HierarchyIndex,
    ReconciliationResult, BuildResult, UnmatchedName,
    STATE, LGA, WARD, MISSING_FIELD, UNRESOLVED_REFERENCE
)
from ..utils.data_utils import normalize_name


FeatureInput = Union[BoundaryFeature, Mapping[str, Any]]
RecordInput = Union[ExternalDistrictRecord, Mapping[str, Any]]


class HierarchicalIndexBuilder:
    """
    Builds forward, reverse and senatorial district indices in a single pass.

    Forward indices use the names exactly as they appear in the boundary data;
    only the district reconciliation normalizes names. Records with missing
    fields are skipped and reported as diagnostics, never raised.
    """

    def __init__(self, fields: Optional[FieldNames] = None,
                 correction_table: Optional[CorrectionTable] = None,
                 district_label_keys: Optional[Sequence[str]] = None,
                 district_lga_keys: Optional[Sequence[str]] = None,
                 logger: Optional[logging.Logger] = None,
                 show_progress: bool = False,
                 suggestion_cutoff: float = 80.0):
        """
        Initialize the index builder.

        Args:
            fields: Property keys read from the boundary features
            correction_table: Known corrections for district table LGA names
            district_label_keys: Accepted spellings of the district label column
            district_lga_keys: Accepted spellings of the LGA name column
            logger: Optional logger instance
            show_progress: Show tqdm progress bars while building
            suggestion_cutoff: Minimum similarity (0-100) for the closest-name
                hint attached to unmatched names
        """
        self.fields = fields or FieldNames()
        self.correction_table = correction_table or CorrectionTable()
        self.district_label_keys = list(district_label_keys or DEFAULT_DISTRICT_LABEL_KEYS)
        self.district_lga_keys = list(district_lga_keys or DEFAULT_DISTRICT_LGA_KEYS)
        self.logger = logger or logging.getLogger(__name__)
        self.show_progress = show_progress
        self.suggestion_cutoff = suggestion_cutoff
        self._stats = BuildStats()

    def get_statistics(self) -> BuildStats:
        """
        Statistics of the most recent call to ``build``, ``invert``,
        ``reconcile_districts`` or ``build_all``; each call starts from zero.
        """
        return self._stats

    # ------------------------------------------------------------------
    # Forward and reverse indices
    # ------------------------------------------------------------------

    def build(self, state_features: Iterable[FeatureInput],
              lga_features: Iterable[FeatureInput],
              ward_features: Iterable[FeatureInput],
              diagnostics: Optional[List[Diagnostic]] = None) -> HierarchyIndex:
        """
        Build the State -> LGA and LGA -> Ward indices and their inversions.

        Args:
            state_features: State boundary features
            lga_features: LGA boundary features
            ward_features: Ward boundary features
            diagnostics: Optional list that receives data quality issues

        Returns:
            HierarchyIndex with forward and reverse lookups
        """
        self._stats = BuildStats()
        return self._build_index(state_features, lga_features, ward_features, diagnostics)

    def _build_index(self, state_features: Iterable[FeatureInput],
                     lga_features: Iterable[FeatureInput],
                     ward_features: Iterable[FeatureInput],
                     diagnostics: Optional[List[Diagnostic]] = None) -> HierarchyIndex:
        if diagnostics is None:
            diagnostics = []

        states = self._as_features(state_features, STATE)
        lgas = self._as_features(lga_features, LGA)
        wards = self._as_features(ward_features, WARD)

        state_to_lga = self._build_state_to_lga(lgas, diagnostics)
        self._check_state_references(states, lgas, diagnostics)
        lga_to_ward = self._build_lga_to_ward(lgas, wards, diagnostics)

        index = HierarchyIndex(
            state_to_lga=state_to_lga,
            lga_to_ward=lga_to_ward,
            lga_to_state=self._invert(state_to_lga),
            ward_to_lga=self._invert(lga_to_ward)
        )

        self.logger.info(
            f"Built hierarchy index: {len(state_to_lga)} states with LGAs, "
            f"{len(lga_to_ward)} LGAs with wards"
        )
        return index

    def _build_state_to_lga(self, lgas: List[BoundaryFeature],
                            diagnostics: List[Diagnostic]) -> Dict[str, List[str]]:
        state_to_lga: Dict[str, List[str]] = {}

        with tqdm(total=len(lgas), desc="State -> LGA index",
                  disable=not self.show_progress) as pbar:
            for row, feature in enumerate(lgas):
                state_name = feature.get(self.fields.state_name)
                lga_name = feature.get(self.fields.lga_name)

                if state_name is None or lga_name is None:
                    missing = self.fields.state_name if state_name is None else self.fields.lga_name
                    self._record(diagnostics, Diagnostic(
                        kind=MISSING_FIELD,
                        level=LGA,
                        message=f"LGA feature at row {row} has no '{missing}' property, skipped",
                        field_name=missing,
                        value=lga_name or state_name,
                        row=row
                    ))
                else:
                    children = state_to_lga.setdefault(state_name, [])
                    if lga_name not in children:
                        children.append(lga_name)

                pbar.update(1)

        return state_to_lga

    def _build_lga_to_ward(self, lgas: List[BoundaryFeature], wards: List[BoundaryFeature],
                           diagnostics: List[Diagnostic]) -> Dict[str, List[str]]:
        code_to_lga = self._build_code_lookup(lgas)
        lga_to_ward: Dict[str, List[str]] = {}

        with tqdm(total=len(wards), desc="LGA -> Ward index",
                  disable=not self.show_progress) as pbar:
            for row, feature in enumerate(wards):
                pbar.update(1)
                ward_name = feature.get(self.fields.ward_name)
                if ward_name is None:
                    self._record(diagnostics, Diagnostic(
                        kind=MISSING_FIELD,
                        level=WARD,
                        message=f"Ward feature at row {row} has no '{self.fields.ward_name}' property, skipped",
                        field_name=self.fields.ward_name,
                        row=row
                    ))
                    continue

                lga_name = feature.get(self.fields.lga_name)
                if lga_name is None:
                    lga_code = feature.get(self.fields.lga_code)
                    if lga_code is None:
                        self._record(diagnostics, Diagnostic(
                            kind=MISSING_FIELD,
                            level=WARD,
                            message=(
                                f"Ward '{ward_name}' has neither '{self.fields.lga_name}' nor "
                                f"'{self.fields.lga_code}', skipped"
                            ),
                            field_name=self.fields.lga_code,
                            value=ward_name,
                            row=row
                        ))
                        continue

                    lga_name = code_to_lga.get(lga_code)
                    if lga_name is None:
                        self._record(diagnostics, Diagnostic(
                            kind=UNRESOLVED_REFERENCE,
                            level=WARD,
                            message=f"Ward '{ward_name}' references unknown LGA code '{lga_code}', skipped",
                            field_name=self.fields.lga_code,
                            value=lga_code,
                            row=row
                        ))
                        continue

                children = lga_to_ward.setdefault(lga_name, [])
                if ward_name not in children:
                    children.append(ward_name)

        return lga_to_ward

    def _build_code_lookup(self, lgas: List[BoundaryFeature]) -> Dict[str, str]:
        """Map LGA code to LGA name; a repeated code keeps the later name."""
        code_to_lga: Dict[str, str] = {}
        for feature in lgas:
            code = feature.get(self.fields.lga_code)
            name = feature.get(self.fields.lga_name)
            if code is None or name is None:
                continue
            if code in code_to_lga and code_to_lga[code] != name:
                self.logger.debug(
                    f"LGA code '{code}' used by '{code_to_lga[code]}' and '{name}', keeping '{name}'"
                )
            code_to_lga[code] = name
        return code_to_lga

    def _check_state_references(self, states: List[BoundaryFeature], lgas: List[BoundaryFeature],
                                diagnostics: List[Diagnostic]):
        """Flag LGAs whose state does not resolve to exactly one State feature."""
        if not states:
            self.logger.debug("No state features supplied, skipping LGA -> State reference check")
            return

        state_counts: Dict[str, int] = {}
        for feature in states:
            key = normalize_name(feature.get(self.fields.state_name))
            if key:
                state_counts[key] = state_counts.get(key, 0) + 1

        reported = set()
        for row, feature in enumerate(lgas):
            state_name = feature.get(self.fields.state_name)
            if state_name is None or state_name in reported:
                continue

            count = state_counts.get(normalize_name(state_name), 0)
            if count != 1:
                reported.add(state_name)
                problem = "no State feature" if count == 0 else f"{count} State features"
                self._record(diagnostics, Diagnostic(
                    kind=UNRESOLVED_REFERENCE,
                    level=LGA,
                    message=f"State '{state_name}' referenced by LGAs matches {problem}",
                    field_name=self.fields.state_name,
                    value=state_name,
                    row=row
                ))

    def invert(self, forward: Mapping[str, Sequence[str]]) -> Dict[str, str]:
        """
        Invert a parent -> children index into child -> parent.

        A child listed under several parents keeps the last parent written.

        Args:
            forward: Forward index to invert

        Returns:
            Reverse index
        """
        self._stats = BuildStats()
        return self._invert(forward)

    def _invert(self, forward: Mapping[str, Sequence[str]]) -> Dict[str, str]:
        reverse: Dict[str, str] = {}
        for parent, children in forward.items():
            for child in children:
                previous = reverse.get(child)
                if previous is not None and previous != parent:
                    self._stats.reverse_conflicts += 1
                    self.logger.debug(
                        f"'{child}' appears under '{previous}' and '{parent}', keeping '{parent}'"
                    )
                reverse[child] = parent
        return reverse

    # ------------------------------------------------------------------
    # Senatorial district reconciliation
    # ------------------------------------------------------------------

    def reconcile_districts(self, external_records: Iterable[RecordInput],
                            lga_features: Iterable[FeatureInput],
                            diagnostics: Optional[List[Diagnostic]] = None) -> ReconciliationResult:
        """
        Match district table LGA names to canonical LGA names.

        Each raw LGA name is normalized, passed through the correction table,
        and every resulting candidate is looked up among the normalized
        canonical names. Candidates that do not resolve are reported in
        ``unmatched`` and left out of the index.

        Args:
            external_records: District table rows
            lga_features: LGA boundary features providing canonical names
            diagnostics: Optional list that receives data quality issues

        Returns:
            ReconciliationResult with the district -> LGA index
        """
        self._stats = BuildStats()
        return self._reconcile(external_records, lga_features, diagnostics)

    def _reconcile(self, external_records: Iterable[RecordInput],
                   lga_features: Iterable[FeatureInput],
                   diagnostics: Optional[List[Diagnostic]] = None) -> ReconciliationResult:
        result = ReconciliationResult()
        if diagnostics is None:
            diagnostics = result.diagnostics

        canonical = self._build_canonical_lookup(self._as_features(lga_features, LGA))
        records = self._as_records(external_records)

        with tqdm(total=len(records), desc="District reconciliation",
                  disable=not self.show_progress) as pbar:
            for record in records:
                pbar.update(1)
                if not record.is_valid():
                    missing = record.get_missing_fields()
                    self._record(diagnostics, Diagnostic(
                        kind=MISSING_FIELD,
                        level='district',
                        message=f"District record at row {record.row} has no {' or '.join(missing)}, skipped",
                        field_name=missing[0],
                        value=record.district or record.lga_name,
                        row=record.row
                    ))
                    continue

                for candidate in self._candidates_for(record.lga_name):
                    matched = canonical.get(candidate)
                    if matched is None:
                        self._stats.unmatched_candidates += 1
                        unmatched = self._unmatched(record, candidate, canonical)
                        result.unmatched.append(unmatched)
                        self.logger.warning(
                            f"DATA QUALITY: Could not find a matching LGA for "
                            f"'{record.lga_name}' in district '{record.district}'"
                            + (f" (closest: '{unmatched.suggestion}')" if unmatched.suggestion else "")
                        )
                        continue

                    self._stats.matched_candidates += 1
                    lgas = result.senatorial_to_lga.setdefault(record.district, [])
                    if matched not in lgas:
                        lgas.append(matched)

        if diagnostics is not result.diagnostics:
            result.diagnostics = [d for d in diagnostics if d.level == 'district']

        self.logger.info(
            f"Reconciled {len(records)} district records into {len(result.senatorial_to_lga)} "
            f"districts, {len(result.unmatched)} unmatched names"
        )
        return result

    def _build_canonical_lookup(self, lgas: List[BoundaryFeature]) -> Dict[str, str]:
        """Map normalized LGA name to canonical name; later features overwrite earlier."""
        canonical: Dict[str, str] = {}
        for feature in lgas:
            name = feature.get(self.fields.lga_name)
            if name is None:
                continue
            key = normalize_name(name)
            if key in canonical and canonical[key] != name:
                self._stats.canonical_collisions += 1
                self.logger.debug(
                    f"LGA names '{canonical[key]}' and '{name}' both normalize to '{key}', keeping '{name}'"
                )
            canonical[key] = name
        return canonical

    def _candidates_for(self, raw_name: str) -> List[str]:
        normalized = normalize_name(raw_name)
        corrected = self.correction_table.lookup(normalized)
        if corrected:
            return [normalize_name(name) for name in corrected]
        return [normalized]

    def _unmatched(self, record: ExternalDistrictRecord, candidate: str,
                   canonical: Dict[str, str]) -> UnmatchedName:
        """Describe an unmatched candidate with an informational closest-name hint."""
        suggestion = None
        score = None
        if candidate and canonical:
            best = process.extractOne(
                candidate, list(canonical.keys()),
                scorer=fuzz.ratio, score_cutoff=self.suggestion_cutoff
            )
            if best is not None:
                suggestion = canonical[best[0]]
                score = round(float(best[1]), 1)

        return UnmatchedName(
            district=record.district,
            raw_name=record.lga_name,
            candidate=candidate,
            suggestion=suggestion,
            suggestion_score=score
        )

    # ------------------------------------------------------------------
    # Full build
    # ------------------------------------------------------------------

    def build_all(self, state_features: Iterable[FeatureInput],
                  lga_features: Iterable[FeatureInput],
                  ward_features: Iterable[FeatureInput],
                  external_records: Iterable[RecordInput]) -> BuildResult:
        """
        Run the complete build: hierarchy indices plus district reconciliation.

        Returns:
            BuildResult with indices, diagnostics and statistics
        """
        start_time = time.time()
        self._stats = BuildStats()

        states = self._as_features(state_features, STATE)
        lgas = self._as_features(lga_features, LGA)
        wards = self._as_features(ward_features, WARD)
        records = self._as_records(external_records)

        diagnostics: List[Diagnostic] = []
        index = self._build_index(states, lgas, wards, diagnostics)
        reconciliation = self._reconcile(records, lgas, diagnostics)

        stats = self._stats
        stats.state_count = len(states)
        stats.lga_count = len(lgas)
        stats.ward_count = len(wards)
        stats.district_records = len(records)
        stats.districts = len(reconciliation.senatorial_to_lga)
        stats.skipped_records = sum(1 for d in diagnostics if d.kind == MISSING_FIELD)
        stats.unresolved_references = sum(1 for d in diagnostics if d.kind == UNRESOLVED_REFERENCE)
        stats.build_time = time.time() - start_time

        return BuildResult(
            index=index,
            reconciliation=reconciliation,
            diagnostics=diagnostics,
            stats=stats
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _record(self, diagnostics: List[Diagnostic], diagnostic: Diagnostic):
        diagnostics.append(diagnostic)
        self.logger.warning(f"DATA QUALITY: {diagnostic.message}")

    @staticmethod
    def _as_features(items: Iterable[FeatureInput], level: str) -> List[BoundaryFeature]:
        if items is None:
            return []
        features = []
        for item in items:
            if isinstance(item, BoundaryFeature):
                features.append(item)
            elif isinstance(item, Mapping) and item.get('type') != 'Feature' and 'properties' not in item:
                # Bare properties bag
                features.append(BoundaryFeature.from_geojson({'properties': dict(item)}, level))
            else:
                features.append(BoundaryFeature.from_geojson(item, level))
        return features

    def _as_records(self, items: Iterable[RecordInput]) -> List[ExternalDistrictRecord]:
        if items is None:
            return []
        records = []
        for row, item in enumerate(items):
            if isinstance(item, ExternalDistrictRecord):
                records.append(item)
            else:
                records.append(ExternalDistrictRecord.from_record(
                    item, self.district_label_keys, self.district_lga_keys, row=row
                ))
        return records
