"""
Selection helpers used by the chooser UI.

These functions turn a dropdown choice or a free-text query into the set of
boundary features to highlight, plus their merged outline and bounds for
zooming. They only read from a BoundaryStore.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from rapidfuzz import fuzz

from .models import BoundaryFeature, LEVELS, STATE, LGA, WARD
from .store import BoundaryStore, StoreGeneration
from .utils.data_utils import normalize_name
from .utils.geometry_utils import Bounds, geometry_bounds, merge_geometries


@dataclass(frozen=True)
class Selection:
    """Features chosen for highlighting at one level."""

    level: str
    key: Optional[str]
    features: Tuple[BoundaryFeature, ...] = ()

    def is_empty(self) -> bool:
        return not self.features

    @property
    def bounds(self) -> Optional[Bounds]:
        """Combined (min_x, min_y, max_x, max_y) of the selection, for zooming."""
        return geometry_bounds(f.geometry for f in self.features)

    def merged_geometry(self) -> Optional[Dict[str, Any]]:
        """Union of the selected geometries as a single GeoJSON geometry."""
        return merge_geometries(f.geometry for f in self.features)

    def to_geojson(self) -> Dict[str, Any]:
        return {
            'type': 'FeatureCollection',
            'features': [f.to_geojson() for f in self.features]
        }


@dataclass(frozen=True)
class SearchHit:
    """One free-text search result."""

    level: str
    name: str
    score: float
    feature: BoundaryFeature
    parent: Optional[str] = None


class BoundarySelector:
    """
    Resolves chooser selections and searches against a BoundaryStore.

    Every call reads a single store generation, so a reload running at the
    same time never mixes features from two loads into one result.
    """

    def __init__(self, store: BoundaryStore, logger: Optional[logging.Logger] = None):
        self.store = store
        self.logger = logger or logging.getLogger(__name__)

    def _snapshot(self) -> Optional[StoreGeneration]:
        return self.store.current

    def select_state(self, state_name: Optional[str]) -> Selection:
        """
        Select one state, or every state when no name is given.
        """
        generation = self._snapshot()
        if generation is None:
            return Selection(level=STATE, key=state_name)

        if not state_name:
            return Selection(level=STATE, key=None, features=generation.states.features)

        features = generation.states.filter(generation.fields.state_name, state_name)
        if not features:
            self.logger.warning(f"No state found named: {state_name}")
        return Selection(level=STATE, key=state_name, features=tuple(features))

    def select_lgas_in_state(self, state_name: str) -> Selection:
        generation = self._snapshot()
        if generation is None:
            return Selection(level=LGA, key=state_name)

        features = generation.lgas.filter(generation.fields.state_name, state_name)
        if not features:
            self.logger.warning(f"No LGAs found for state: {state_name}")
        return Selection(level=LGA, key=state_name, features=tuple(features))

    def select_lga(self, lga_name: str) -> Selection:
        generation = self._snapshot()
        if generation is None:
            return Selection(level=LGA, key=lga_name)

        features = generation.lgas.filter(generation.fields.lga_name, lga_name)
        return Selection(level=LGA, key=lga_name, features=tuple(features))

    def select_wards_in_lga(self, lga: str) -> Selection:
        """
        Select the wards of an LGA given either its code or its name.
        """
        generation = self._snapshot()
        if generation is None:
            return Selection(level=WARD, key=lga)

        fields = generation.fields
        wards = generation.wards
        features = wards.filter(fields.lga_code, lga)

        if not features:
            features = wards.filter(fields.lga_name, lga)

        if not features:
            # Name given but wards only carry the LGA code
            for lga_feature in generation.lgas.filter(fields.lga_name, lga):
                code = lga_feature.get(fields.lga_code)
                if code is not None:
                    features.extend(wards.filter(fields.lga_code, code))

        if not features:
            self.logger.warning(f"No wards found for LGA: {lga}")
        return Selection(level=WARD, key=lga, features=tuple(features))

    def select_ward(self, ward_code: str) -> Selection:
        """Select a single ward by its code."""
        generation = self._snapshot()
        if generation is None:
            return Selection(level=WARD, key=ward_code)

        features = generation.wards.filter(generation.fields.ward_code, ward_code)
        if not features:
            self.logger.warning(f"No ward found for ward code: {ward_code}")
        return Selection(level=WARD, key=ward_code, features=tuple(features[:1]))

    def select_district(self, district: str) -> Selection:
        """Select the LGAs making up a senatorial district."""
        generation = self._snapshot()
        if generation is None:
            return Selection(level=LGA, key=district)

        members = set(generation.senatorial_to_lga.get(district, ()))
        features = [
            f for f in generation.lgas
            if f.get(generation.fields.lga_name) in members
        ]
        return Selection(level=LGA, key=district, features=tuple(features))

    def search(self, query: str, limit: int = 10) -> List[SearchHit]:
        """
        Free-text search over state, LGA and ward names.

        A name matches when the normalized query is contained in the
        normalized name. Matches are ranked by similarity, then by level
        (states first).

        Args:
            query: Text typed by the user
            limit: Maximum number of hits

        Returns:
            Ranked search hits
        """
        needle = normalize_name(query)
        generation = self._snapshot()
        if not needle or limit <= 0 or generation is None:
            return []

        fields = generation.fields
        name_keys = {
            STATE: fields.state_name,
            LGA: fields.lga_name,
            WARD: fields.ward_name,
        }
        collections = {
            STATE: generation.states,
            LGA: generation.lgas,
            WARD: generation.wards,
        }

        hits = []
        for level in LEVELS:
            for feature in collections[level]:
                name = feature.get(name_keys[level])
                if name is None:
                    continue
                normalized = normalize_name(name)
                if needle not in normalized:
                    continue
                hits.append(SearchHit(
                    level=level,
                    name=name,
                    score=float(fuzz.WRatio(needle, normalized)),
                    feature=feature,
                    parent=self._parent_of(generation, level, name, feature)
                ))

        hits.sort(key=lambda h: (-h.score, LEVELS.index(h.level), h.name))
        return hits[:limit]

    @staticmethod
    def _parent_of(generation: StoreGeneration, level: str, name: str,
                   feature: BoundaryFeature) -> Optional[str]:
        fields = generation.fields
        if level == LGA:
            return feature.get(fields.state_name) or generation.lga_to_state.get(name)
        if level == WARD:
            return feature.get(fields.lga_name) or generation.ward_to_lga.get(name)
        return None
