"""
Unit tests for the hierarchical index builder and district reconciliation.
"""

import logging
import unittest

from boundary_chooser.config import FieldNames
from boundary_chooser.hierarchy.index_builder import HierarchicalIndexBuilder
from boundary_chooser.matching.correction_table import CorrectionTable
from boundary_chooser.models import (
    BoundaryFeature, ExternalDistrictRecord, MISSING_FIELD, UNRESOLVED_REFERENCE, LGA
)

from tests.fixtures import kano_states, kano_lgas, kano_wards, kano_districts


def quiet_logger():
    logger = logging.getLogger('tests.index_builder')
    logger.addHandler(logging.NullHandler())
    logger.propagate = False
    return logger


def lga(name, state='Kano', code=None):
    props = {'statename': state, 'lganame': name}
    if code is not None:
        props['lgacode'] = code
    return props


class TestHierarchyIndex(unittest.TestCase):
    """Test cases for the forward and reverse indices."""

    def setUp(self):
        self.builder = HierarchicalIndexBuilder(logger=quiet_logger())

    def test_kano_scenario(self):
        index = self.builder.build(
            kano_states()['features'], kano_lgas()['features'], kano_wards()['features']
        )

        self.assertEqual(index.state_to_lga, {'Kano': ['Kano Municipal', 'Fagge']})
        self.assertEqual(index.lga_to_ward, {'Fagge': ['Fagge A', 'Fagge B']})
        self.assertEqual(index.lga_to_state['Kano Municipal'], 'Kano')
        self.assertEqual(index.lga_to_state['Fagge'], 'Kano')
        self.assertEqual(index.ward_to_lga['Fagge A'], 'Fagge')
        self.assertEqual(index.ward_to_lga['Fagge B'], 'Fagge')

    def test_children_unique_in_first_seen_order(self):
        lgas = [lga('Dala'), lga('Fagge'), lga('Dala'), lga('Ungogo')]
        index = self.builder.build([], lgas, [])
        self.assertEqual(index.state_to_lga['Kano'], ['Dala', 'Fagge', 'Ungogo'])

    def test_forward_keys_are_not_normalized(self):
        lgas = [lga('Fagge'), lga('FAGGE')]
        index = self.builder.build([], lgas, [])
        self.assertEqual(index.state_to_lga['Kano'], ['Fagge', 'FAGGE'])

    def test_whitespace_variants_are_distinct_names(self):
        index = self.builder.build([], [lga('Fagge'), lga('Fagge ')], [])
        self.assertEqual(index.state_to_lga['Kano'], ['Fagge', 'Fagge '])
        self.assertEqual(index.lga_to_state['Fagge '], 'Kano')

    def test_reverse_is_consistent_with_forward(self):
        lgas = [lga('Dala'), lga('Fagge'), lga('Ikeja', state='Lagos')]
        index = self.builder.build([], lgas, [])
        for state, children in index.state_to_lga.items():
            for child in children:
                self.assertEqual(index.lga_to_state[child], state)

    def test_accepts_boundary_features_and_property_bags(self):
        lgas = [
            BoundaryFeature.from_geojson({'properties': lga('Dala')}, LGA),
            lga('Fagge'),
        ]
        index = self.builder.build([], lgas, [])
        self.assertEqual(index.state_to_lga['Kano'], ['Dala', 'Fagge'])

    def test_empty_inputs(self):
        index = self.builder.build([], [], [])
        self.assertEqual(index.state_to_lga, {})
        self.assertEqual(index.lga_to_ward, {})
        self.assertEqual(index.lga_to_state, {})
        self.assertEqual(index.ward_to_lga, {})

    def test_custom_field_names(self):
        builder = HierarchicalIndexBuilder(
            fields=FieldNames(state_name='STATE', lga_name='LGA_NAME'),
            logger=quiet_logger()
        )
        index = builder.build([], [{'STATE': 'Oyo', 'LGA_NAME': 'Ibadan North'}], [])
        self.assertEqual(index.state_to_lga, {'Oyo': ['Ibadan North']})


class TestInvert(unittest.TestCase):
    """Test cases for inverting a forward index."""

    def setUp(self):
        self.builder = HierarchicalIndexBuilder(logger=quiet_logger())

    def test_invert(self):
        reverse = self.builder.invert({'Kano': ['Dala', 'Fagge'], 'Lagos': ['Ikeja']})
        self.assertEqual(reverse, {'Dala': 'Kano', 'Fagge': 'Kano', 'Ikeja': 'Lagos'})

    def test_child_under_two_parents_keeps_the_last(self):
        reverse = self.builder.invert({'Kano': ['Fagge'], 'Jigawa': ['Fagge']})
        self.assertEqual(reverse['Fagge'], 'Jigawa')
        self.assertEqual(self.builder.get_statistics().reverse_conflicts, 1)

    def test_same_parent_twice_is_not_a_conflict(self):
        self.builder.invert({'Kano': ['Fagge', 'Fagge']})
        self.assertEqual(self.builder.get_statistics().reverse_conflicts, 0)

    def test_repeated_calls_do_not_accumulate_conflicts(self):
        self.builder.invert({'Kano': ['Fagge'], 'Jigawa': ['Fagge']})
        self.builder.invert({'Kano': ['Fagge'], 'Jigawa': ['Fagge']})
        self.assertEqual(self.builder.get_statistics().reverse_conflicts, 1)


class TestBuildDiagnostics(unittest.TestCase):
    """Test cases for records skipped or flagged during the build."""

    def setUp(self):
        self.builder = HierarchicalIndexBuilder(logger=quiet_logger())

    def test_lga_without_state_is_skipped(self):
        diagnostics = []
        index = self.builder.build([], [{'lganame': 'Dala'}, lga('Fagge')], [], diagnostics)

        self.assertEqual(index.state_to_lga, {'Kano': ['Fagge']})
        self.assertEqual(len(diagnostics), 1)
        self.assertEqual(diagnostics[0].kind, MISSING_FIELD)
        self.assertEqual(diagnostics[0].field_name, 'statename')
        self.assertEqual(diagnostics[0].row, 0)

    def test_lga_with_empty_name_is_skipped(self):
        diagnostics = []
        index = self.builder.build([], [{'statename': 'Kano', 'lganame': '  '}], [], diagnostics)
        self.assertEqual(index.state_to_lga, {})
        self.assertEqual(diagnostics[0].field_name, 'lganame')

    def test_ward_without_name_is_skipped(self):
        diagnostics = []
        wards = [{'lganame': 'Fagge'}, {'lganame': 'Fagge', 'wardname': 'Fagge A'}]
        index = self.builder.build([], [lga('Fagge')], wards, diagnostics)

        self.assertEqual(index.lga_to_ward, {'Fagge': ['Fagge A']})
        self.assertEqual([d.kind for d in diagnostics], [MISSING_FIELD])

    def test_ward_resolves_parent_through_lga_code(self):
        lgas = [lga('Fagge', code='20002')]
        wards = [{'lgacode': '20002', 'wardname': 'Fagge A'}]
        index = self.builder.build([], lgas, wards)
        self.assertEqual(index.lga_to_ward, {'Fagge': ['Fagge A']})
        self.assertEqual(index.ward_to_lga['Fagge A'], 'Fagge')

    def test_numeric_lga_code_matches_string_code(self):
        lgas = [lga('Fagge', code=20002)]
        wards = [{'lgacode': '20002', 'wardname': 'Fagge A'}]
        index = self.builder.build([], lgas, wards)
        self.assertEqual(index.lga_to_ward, {'Fagge': ['Fagge A']})

    def test_ward_with_unknown_lga_code(self):
        diagnostics = []
        wards = [{'lgacode': '99999', 'wardname': 'Nowhere'}]
        index = self.builder.build([], [lga('Fagge', code='20002')], wards, diagnostics)

        self.assertEqual(index.lga_to_ward, {})
        self.assertEqual(diagnostics[0].kind, UNRESOLVED_REFERENCE)
        self.assertEqual(diagnostics[0].value, '99999')

    def test_ward_without_any_parent(self):
        diagnostics = []
        self.builder.build([], [lga('Fagge')], [{'wardname': 'Orphan'}], diagnostics)
        self.assertEqual(diagnostics[0].kind, MISSING_FIELD)
        self.assertEqual(diagnostics[0].field_name, 'lgacode')

    def test_lga_state_not_among_state_features(self):
        diagnostics = []
        states = [{'statename': 'Kano'}]
        lgas = [lga('Ikeja', state='Lagos'), lga('Epe', state='Lagos'), lga('Fagge')]
        index = self.builder.build(states, lgas, [], diagnostics)

        # Still indexed, reported once per state
        self.assertEqual(index.state_to_lga['Lagos'], ['Ikeja', 'Epe'])
        unresolved = [d for d in diagnostics if d.kind == UNRESOLVED_REFERENCE]
        self.assertEqual(len(unresolved), 1)
        self.assertEqual(unresolved[0].value, 'Lagos')

    def test_lga_state_matching_two_state_features(self):
        diagnostics = []
        states = [{'statename': 'Kano'}, {'statename': 'KANO'}]
        self.builder.build(states, [lga('Fagge')], [], diagnostics)
        self.assertEqual([d.kind for d in diagnostics], [UNRESOLVED_REFERENCE])

    def test_state_check_skipped_without_state_features(self):
        diagnostics = []
        self.builder.build([], [lga('Fagge')], [], diagnostics)
        self.assertEqual(diagnostics, [])


class TestReconcileDistricts(unittest.TestCase):
    """Test cases for senatorial district reconciliation."""

    def setUp(self):
        self.builder = HierarchicalIndexBuilder(logger=quiet_logger())

    def test_spelling_variants_resolve_to_canonical_names(self):
        result = self.builder.reconcile_districts(kano_districts(), kano_lgas()['features'])
        self.assertEqual(result.senatorial_to_lga, {'Kano Central': ['Kano Municipal', 'Fagge']})
        self.assertEqual(result.unmatched, [])

    def test_identity_when_names_already_match(self):
        records = [{'district': 'Kano Central', 'lga': 'Kano Municipal'},
                   {'district': 'Kano Central', 'lga': 'Fagge'}]
        result = self.builder.reconcile_districts(records, kano_lgas()['features'])
        self.assertEqual(result.senatorial_to_lga['Kano Central'], ['Kano Municipal', 'Fagge'])

    def test_unmatched_name_is_reported_and_excluded(self):
        records = [{'district': 'Lagos West', 'lga': 'Ikejaa'}]
        result = self.builder.reconcile_districts(records, [lga('Ikeja', state='Lagos')])

        self.assertEqual(result.senatorial_to_lga.get('Lagos West', []), [])
        self.assertIn('ikejaa', result.unmatched_names)
        self.assertEqual(result.unmatched[0].raw_name, 'Ikejaa')
        self.assertEqual(result.unmatched[0].district, 'Lagos West')

    def test_unmatched_name_carries_closest_suggestion(self):
        records = [{'district': 'Lagos West', 'lga': 'Ikejaa'}]
        result = self.builder.reconcile_districts(records, [lga('Ikeja', state='Lagos')])
        self.assertEqual(result.unmatched[0].suggestion, 'Ikeja')
        self.assertGreaterEqual(result.unmatched[0].suggestion_score, 80.0)

    def test_repeated_calls_do_not_accumulate_counts(self):
        records = [{'district': 'Lagos West', 'lga': 'Ikejaa'}]
        self.builder.reconcile_districts(records, [lga('Ikeja', state='Lagos')])
        self.builder.reconcile_districts(records, [lga('Ikeja', state='Lagos')])
        self.assertEqual(self.builder.get_statistics().unmatched_candidates, 1)

    def test_suggestion_is_never_used_as_a_match(self):
        records = [{'district': 'Lagos West', 'lga': 'Ikejaa'}]
        result = self.builder.reconcile_districts(records, [lga('Ikeja', state='Lagos')])
        self.assertNotIn('Lagos West', result.senatorial_to_lga)

    def test_correction_fans_out_to_two_lgas(self):
        builder = HierarchicalIndexBuilder(
            correction_table=CorrectionTable({'old-lga': ['new-lga-a', 'new-lga-b']}),
            logger=quiet_logger()
        )
        records = [{'district': 'North', 'lga': 'old-lga'}]
        lgas = [lga('new-lga-a'), lga('new-lga-b')]
        result = builder.reconcile_districts(records, lgas)
        self.assertEqual(result.senatorial_to_lga['North'], ['new-lga-a', 'new-lga-b'])

    def test_correction_with_one_missing_target(self):
        builder = HierarchicalIndexBuilder(
            correction_table=CorrectionTable({'old-lga': ['new-lga-a', 'new-lga-c']}),
            logger=quiet_logger()
        )
        records = [{'district': 'North', 'lga': 'old-lga'}]
        result = builder.reconcile_districts(records, [lga('new-lga-a')])
        self.assertEqual(result.senatorial_to_lga['North'], ['new-lga-a'])
        self.assertEqual(result.unmatched_names, ['new lga c'])

    def test_accepted_key_spellings(self):
        records = [
            {'Senatorial_District': 'Kano Central', 'LGAs': 'Fagge'},
            {'senatorial_district': 'Kano Central', 'LGA': 'Kano Municipal'},
            {'district': 'Kano Central', 'lga': 'Fagge'},
        ]
        result = self.builder.reconcile_districts(records, kano_lgas()['features'])
        self.assertEqual(result.senatorial_to_lga['Kano Central'], ['Fagge', 'Kano Municipal'])

    def test_record_missing_a_field_is_skipped(self):
        records = [{'district': 'Kano Central'}, {'lga': 'Fagge'}]
        result = self.builder.reconcile_districts(records, kano_lgas()['features'])

        self.assertEqual(result.senatorial_to_lga, {})
        self.assertEqual(len(result.diagnostics), 2)
        self.assertEqual([d.field_name for d in result.diagnostics], ['lga', 'district'])
        self.assertTrue(all(d.kind == MISSING_FIELD for d in result.diagnostics))

    def test_accepts_record_objects(self):
        records = [ExternalDistrictRecord(district='Kano Central', lga_name='FAGGE', row=0)]
        result = self.builder.reconcile_districts(records, kano_lgas()['features'])
        self.assertEqual(result.senatorial_to_lga['Kano Central'], ['Fagge'])

    def test_canonical_collision_keeps_the_later_name(self):
        records = [{'district': 'Kano Central', 'lga': 'fagge'}]
        result = self.builder.reconcile_districts(records, [lga('Fagge'), lga('FAGGE')])
        self.assertEqual(result.senatorial_to_lga['Kano Central'], ['FAGGE'])
        self.assertEqual(self.builder.get_statistics().canonical_collisions, 1)


class TestBuildAll(unittest.TestCase):
    """Test cases for the complete build."""

    def setUp(self):
        self.builder = HierarchicalIndexBuilder(logger=quiet_logger())

    def test_build_all_kano(self):
        result = self.builder.build_all(
            kano_states()['features'], kano_lgas()['features'],
            kano_wards()['features'], kano_districts()
        )

        self.assertEqual(result.index.state_to_lga['Kano'], ['Kano Municipal', 'Fagge'])
        self.assertEqual(result.reconciliation.senatorial_to_lga['Kano Central'],
                         ['Kano Municipal', 'Fagge'])
        self.assertFalse(result.has_issues())

        stats = result.stats
        self.assertEqual(stats.state_count, 1)
        self.assertEqual(stats.lga_count, 2)
        self.assertEqual(stats.ward_count, 2)
        self.assertEqual(stats.district_records, 2)
        self.assertEqual(stats.districts, 1)
        self.assertEqual(stats.get_match_rate(), 100.0)

    def test_build_all_collects_every_diagnostic(self):
        result = self.builder.build_all(
            [], [{'lganame': 'Dala'}, lga('Fagge')],
            [{'lgacode': 'X', 'wardname': 'Lost'}],
            [{'district': 'Kano Central'}, {'district': 'Kano Central', 'lga': 'Fagga Town'}]
        )

        summary = result.get_issue_summary()
        self.assertEqual(summary[MISSING_FIELD], 2)
        self.assertEqual(summary[UNRESOLVED_REFERENCE], 1)
        self.assertEqual(summary['unmatched_names'], 1)
        self.assertEqual(result.stats.skipped_records, 2)
        self.assertEqual(result.stats.unresolved_references, 1)
        self.assertEqual(len(result.reconciliation.diagnostics), 1)

    def test_statistics_reset_between_builds(self):
        self.builder.invert({'A': ['x'], 'B': ['x']})
        result = self.builder.build_all([], [lga('Fagge')], [], [])
        self.assertEqual(result.stats.reverse_conflicts, 0)


if __name__ == '__main__':
    unittest.main()
