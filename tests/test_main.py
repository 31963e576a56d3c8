"""
Tests for the command line entry point.
"""

import io
import os
import shutil
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout

from main import main
from tests.fixtures import write_kano_inputs


class TestMain(unittest.TestCase):
    """Test cases for main()."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.states, self.lgas, self.wards, self.districts = write_kano_inputs(self.temp_dir)

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def _run(self, *extra):
        argv = ['--states', self.states, '--lgas', self.lgas, '--wards', self.wards,
                '--districts', self.districts, '--log-level', 'ERROR'] + list(extra)
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            code = main(argv)
        return code, out.getvalue(), err.getvalue()

    def test_successful_load(self):
        code, out, _ = self._run()
        self.assertEqual(code, 0)
        self.assertIn('BOUNDARY LOAD COMPLETED', out)
        self.assertIn('States: 1', out)

    def test_reports_written_to_output_directory(self):
        output = os.path.join(self.temp_dir, 'out')
        code, out, _ = self._run('--output', output)

        self.assertEqual(code, 0)
        names = os.listdir(output)
        self.assertTrue(any(n.startswith('boundary_indices_') for n in names))
        self.assertTrue(any(n.startswith('load_summary_report_') for n in names))

    def test_missing_input_file(self):
        os.remove(self.wards)
        code, _, err = self._run()
        self.assertEqual(code, 4)
        self.assertIn('File Error', err)

    def test_malformed_input(self):
        with open(self.lgas, 'w', encoding='utf-8') as f:
            f.write('{')
        code, _, err = self._run()
        self.assertEqual(code, 3)
        self.assertIn('Load Error', err)

    def test_input_not_utf8(self):
        with open(self.wards, 'wb') as f:
            f.write(b'{"type":"FeatureCollection","features":[],"x":"\xff\xfe"}')
        code, _, err = self._run()
        self.assertEqual(code, 3)
        self.assertIn('Failed input: ward', err)

    def test_bad_correction_table(self):
        path = os.path.join(self.temp_dir, 'corrections.json')
        with open(path, 'w', encoding='utf-8') as f:
            f.write('[]')
        code, _, err = self._run('--corrections', path)
        self.assertEqual(code, 2)
        self.assertIn('Configuration Error', err)


if __name__ == '__main__':
    unittest.main()
