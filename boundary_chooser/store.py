"""
Boundary store: the query surface over one loaded generation of boundaries.

A store is created by the application and handed to whatever needs it. Each
load builds a complete new generation and swaps it in; a failed load leaves
the previous generation in place. Loads are serialized and a load requested
while another is running is rejected.
"""

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from .config import BuildStats, ChooserConfig, FieldNames
from .data_loader import BoundaryDataLoader
from .exceptions import (
    BoundaryChooserError, ConfigurationError, LoadFailureError, LoadInProgressError
)
from .hierarchy.index_builder import HierarchicalIndexBuilder
from .matching.correction_table import CorrectionTable
from .models import (
    BoundaryCollection, BuildResult, Diagnostic, UnmatchedName, STATE, LGA, WARD
)
from .utils.error_handler import create_error_context, log_error_details


CollectionInput = Union[BoundaryCollection, Mapping[str, Any], Sequence[Any]]


def _freeze(index: Mapping[str, Sequence[str]]) -> Mapping[str, Tuple[str, ...]]:
    return MappingProxyType({k: tuple(v) for k, v in index.items()})


@dataclass(frozen=True)
class StoreGeneration:
    """One immutable load of boundaries and derived indices."""

    number: int
    fields: FieldNames
    states: BoundaryCollection
    lgas: BoundaryCollection
    wards: BoundaryCollection
    state_to_lga: Mapping[str, Tuple[str, ...]]
    lga_to_ward: Mapping[str, Tuple[str, ...]]
    lga_to_state: Mapping[str, str]
    ward_to_lga: Mapping[str, str]
    senatorial_to_lga: Mapping[str, Tuple[str, ...]]
    unmatched: Tuple[UnmatchedName, ...] = ()
    diagnostics: Tuple[Diagnostic, ...] = ()
    stats: BuildStats = field(default_factory=BuildStats)
    loaded_at: datetime = field(default_factory=datetime.now)

    @classmethod
    def from_build(cls, number: int, fields: FieldNames, states: BoundaryCollection,
                   lgas: BoundaryCollection, wards: BoundaryCollection,
                   result: BuildResult) -> 'StoreGeneration':
        return cls(
            number=number,
            fields=fields,
            states=states,
            lgas=lgas,
            wards=wards,
            state_to_lga=_freeze(result.index.state_to_lga),
            lga_to_ward=_freeze(result.index.lga_to_ward),
            lga_to_state=MappingProxyType(dict(result.index.lga_to_state)),
            ward_to_lga=MappingProxyType(dict(result.index.ward_to_lga)),
            senatorial_to_lga=_freeze(result.reconciliation.senatorial_to_lga),
            unmatched=tuple(result.reconciliation.unmatched),
            diagnostics=tuple(result.diagnostics),
            stats=result.stats
        )


class BoundaryStore:
    """
    Holds the current boundary generation and answers lookups against it.

    All lookups return an empty result for unknown keys, including before the
    first load; callers use ``is_loaded`` to tell the two apart.
    """

    def __init__(self, builder: Optional[HierarchicalIndexBuilder] = None,
                 loader: Optional[BoundaryDataLoader] = None,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize an empty store.

        Args:
            builder: Index builder used by ``load``
            loader: Data loader used by ``load_from_config``
            logger: Optional logger instance
        """
        self.logger = logger or logging.getLogger(__name__)
        self.builder = builder or HierarchicalIndexBuilder(logger=self.logger)
        self.loader = loader or BoundaryDataLoader(self.logger)
        self._generation: Optional[StoreGeneration] = None
        self._load_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    @contextmanager
    def _exclusive_load(self):
        if not self._load_lock.acquire(blocking=False):
            raise LoadInProgressError(generation=self.generation)
        try:
            yield
        finally:
            self._load_lock.release()

    def load(self, states: CollectionInput, lgas: CollectionInput, wards: CollectionInput,
             district_records: Iterable[Mapping[str, Any]]) -> BuildResult:
        """
        Build a new generation from already-fetched inputs and make it current.

        Args:
            states: State features (collection, FeatureCollection dict or list)
            lgas: LGA features
            wards: Ward features
            district_records: Senatorial district table rows

        Returns:
            BuildResult of the new generation

        Raises:
            LoadInProgressError: If another load is running
            LoadFailureError: If the inputs are malformed or the build fails
        """
        with self._exclusive_load():
            return self._load_generation(self.builder, states, lgas, wards, district_records)

    def load_from_config(self, config: ChooserConfig) -> BuildResult:
        """
        Read the inputs named in a configuration and load them.

        The four inputs are read concurrently; the build starts only after all
        of them have arrived.

        Raises:
            LoadInProgressError: If another load is running
            LoadFailureError: If any input fails to load
            CorrectionTableError: If the correction table file is malformed
        """
        with self._exclusive_load():
            inputs = self.loader.load_all(
                config.state_file, config.lga_file, config.ward_file, config.district_file
            )

            correction_table = None
            if config.correction_file:
                correction_table = CorrectionTable.from_file(config.correction_file, logger=self.logger)

            builder = HierarchicalIndexBuilder(
                fields=config.fields,
                correction_table=correction_table,
                district_label_keys=config.district_label_keys,
                district_lga_keys=config.district_lga_keys,
                logger=self.logger,
                show_progress=config.show_progress
            )
            result = self._load_generation(
                builder, inputs.states, inputs.lgas, inputs.wards, inputs.district_records
            )
            self.builder = builder
            return result

    def _load_generation(self, builder: HierarchicalIndexBuilder, states: CollectionInput,
                         lgas: CollectionInput, wards: CollectionInput,
                         district_records: Iterable[Mapping[str, Any]]) -> BuildResult:
        try:
            state_collection = self._as_collection(states, STATE)
            lga_collection = self._as_collection(lgas, LGA)
            ward_collection = self._as_collection(wards, WARD)
            records = list(district_records or [])

            result = builder.build_all(state_collection, lga_collection, ward_collection, records)
        except (LoadFailureError, ConfigurationError):
            raise
        except BoundaryChooserError as e:
            raise LoadFailureError(
                f"Malformed boundary input: {e.message}",
                source='build',
                original_error=e
            )
        except Exception as e:
            context = create_error_context(operation="build_indices", error_type=type(e).__name__)
            log_error_details(self.logger, e, context)
            raise LoadFailureError(
                f"Unexpected error building boundary indices: {str(e)}",
                source='build',
                original_error=e
            )

        number = self.generation + 1
        self._generation = StoreGeneration.from_build(
            number, builder.fields, state_collection, lga_collection, ward_collection, result
        )
        self.logger.info(
            f"Boundary generation {number} loaded: {len(state_collection)} states, "
            f"{len(lga_collection)} LGAs, {len(ward_collection)} wards"
        )
        return result

    @staticmethod
    def _as_collection(data: CollectionInput, level: str) -> BoundaryCollection:
        if isinstance(data, BoundaryCollection):
            return data
        if isinstance(data, Mapping):
            return BoundaryCollection.from_geojson(dict(data), level)
        return BoundaryCollection.from_features(list(data or []), level)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def is_loaded(self) -> bool:
        return self._generation is not None

    @property
    def generation(self) -> int:
        """Number of the current generation, 0 before the first load."""
        return self._generation.number if self._generation else 0

    @property
    def current(self) -> Optional[StoreGeneration]:
        return self._generation

    @property
    def fields(self) -> FieldNames:
        if self._generation is not None:
            return self._generation.fields
        return self.builder.fields

    @property
    def stats(self) -> BuildStats:
        return self._generation.stats if self._generation else BuildStats()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def states(self) -> Tuple[str, ...]:
        """State names in feature order."""
        if self._generation is None:
            return ()
        names = self._generation.states.names(self._generation.fields.state_name)
        return tuple(names) if names else tuple(self._generation.state_to_lga.keys())

    def lgas_in_state(self, state_name: str) -> Tuple[str, ...]:
        if self._generation is None:
            return ()
        return self._generation.state_to_lga.get(state_name, ())

    def wards_in_lga(self, lga_name: str) -> Tuple[str, ...]:
        if self._generation is None:
            return ()
        return self._generation.lga_to_ward.get(lga_name, ())

    def state_of_lga(self, lga_name: str) -> Optional[str]:
        if self._generation is None:
            return None
        return self._generation.lga_to_state.get(lga_name)

    def lga_of_ward(self, ward_name: str) -> Optional[str]:
        if self._generation is None:
            return None
        return self._generation.ward_to_lga.get(ward_name)

    def districts(self) -> Tuple[str, ...]:
        if self._generation is None:
            return ()
        return tuple(self._generation.senatorial_to_lga.keys())

    def lgas_in_district(self, district: str) -> Tuple[str, ...]:
        if self._generation is None:
            return ()
        return self._generation.senatorial_to_lga.get(district, ())

    def unmatched(self) -> Tuple[UnmatchedName, ...]:
        return self._generation.unmatched if self._generation else ()

    def unmatched_names(self) -> Tuple[str, ...]:
        """Normalized district table names that did not resolve, unique."""
        names: List[str] = []
        for item in self.unmatched():
            if item.candidate not in names:
                names.append(item.candidate)
        return tuple(names)

    def diagnostics(self) -> Tuple[Diagnostic, ...]:
        return self._generation.diagnostics if self._generation else ()

    def state_features(self) -> BoundaryCollection:
        return self._generation.states if self._generation else BoundaryCollection.empty(STATE)

    def lga_features(self) -> BoundaryCollection:
        return self._generation.lgas if self._generation else BoundaryCollection.empty(LGA)

    def ward_features(self) -> BoundaryCollection:
        return self._generation.wards if self._generation else BoundaryCollection.empty(WARD)

    def to_dict(self) -> Dict[str, Any]:
        """Plain-dict view of the current indices."""
        if self._generation is None:
            return {}
        generation = self._generation
        return {
            'generation': generation.number,
            'loaded_at': generation.loaded_at.isoformat(),
            'state_to_lga': {k: list(v) for k, v in generation.state_to_lga.items()},
            'lga_to_ward': {k: list(v) for k, v in generation.lga_to_ward.items()},
            'lga_to_state': dict(generation.lga_to_state),
            'ward_to_lga': dict(generation.ward_to_lga),
            'senatorial_to_lga': {k: list(v) for k, v in generation.senatorial_to_lga.items()},
            'unmatched_names': list(self.unmatched_names())
        }
