"""
Tests for the HeadModel result class.

Run with: pytest test_headmodel.py -v
"""
import unittest
import tempfile
from pathlib import Path
import numpy as np

from headmodel import HeadModel, Boundary
from fake_engine import tetrahedron_struct


class TestHeadModel(unittest.TestCase):

    def test_singlesphere(self):
        vol = HeadModel(
            fields={'type': 'singlesphere', 'o': np.array([0., 0., 4.]), 'r': 9.0, 'c': 0.33, 'unit': 'cm'},
            method='singlesphere',
        )
        self.assertEqual(vol.type, 'singlesphere')
        self.assertEqual(vol.unit, 'cm')
        self.assertEqual(vol.conductivity, 0.33)
        self.assertEqual(vol['r'], 9.0)
        self.assertIn('o', vol)
        self.assertEqual(vol.boundaries, [])

    def test_bem(self):
        vol = HeadModel(
            fields={'type': 'dipoli', 'bnd': [tetrahedron_struct(3.0), tetrahedron_struct(2.0)],
                    'cond': np.array([0.33, 0.0042]), 'mat': np.eye(8)},
            method='bem_dipoli',
        )
        boundaries = vol.boundaries
        self.assertEqual(len(boundaries), 2)
        self.assertIsInstance(boundaries[0], Boundary)
        self.assertEqual(boundaries[0].tri.min(), 0)
        np.testing.assert_allclose(vol.conductivity, [0.33, 0.0042])
        self.assertIn('boundaries=2', repr(vol))

    def test_type_falls_back_to_method(self):
        vol = HeadModel(fields={}, method='infinite')
        self.assertEqual(vol.type, 'infinite')
        self.assertIsNone(vol.unit)
        self.assertIsNone(vol.conductivity)

    def test_validation(self):
        with self.assertRaises(ValueError):
            HeadModel(fields=[1, 2, 3])

    def test_to_dict(self):
        vol = HeadModel(fields={'type': 'infinite'}, method='infinite', cfg={'method': 'infinite'})
        d = vol.to_dict()
        self.assertEqual(d['vol'], {'type': 'infinite'})
        self.assertEqual(d['method'], 'infinite')
        self.assertEqual(d['cfg'], {'method': 'infinite'})

    def test_save_load(self):
        vol = HeadModel(
            fields={'type': 'singlesphere', 'o': np.array([0., 0., 4.]), 'r': 9.0, 'c': 0.33, 'unit': 'cm'},
            method='singlesphere',
            cfg={'method': 'singlesphere', 'conductivity': 0.33, 'hdmfile': None},
        )
        with tempfile.TemporaryDirectory() as tmpdir:
            filepath = Path(tmpdir) / 'vol.mat'
            vol.save(filepath)
            loaded = HeadModel.load(filepath)

        self.assertEqual(loaded.type, 'singlesphere')
        self.assertEqual(loaded.method, 'singlesphere')
        self.assertEqual(loaded.unit, 'cm')
        np.testing.assert_allclose(loaded['o'], [0., 0., 4.])
        np.testing.assert_allclose(loaded['r'], 9.0)
        self.assertEqual(loaded.cfg['method'], 'singlesphere')

    def test_unsupported_format(self):
        vol = HeadModel(fields={'type': 'infinite'})
        with self.assertRaisesRegex(ValueError, 'Unsupported file format'):
            vol.save('vol.npz')
        with self.assertRaisesRegex(ValueError, 'Unsupported file format'):
            HeadModel.load('vol.h5')


if __name__ == '__main__':
    unittest.main()
