import unittest
import numpy as np

from headmodel import Boundary
from utils import (
    MatlabVar,
    to_matlab,
    from_matlab,
    assign,
    assign_struct_array,
    wrap_struct,
    pull,
    call_function,
)
from fake_engine import FakeEngine, tetrahedron_struct


class TestToMatlab(unittest.TestCase):

    def test_none_is_empty_matrix(self):
        self.assertEqual(to_matlab(None).shape, (0, 0))

    def test_scalars(self):
        self.assertIsInstance(to_matlab(3), float)
        self.assertIs(to_matlab(True), True)
        self.assertIs(to_matlab(np.bool_(False)), False)
        self.assertEqual(to_matlab('cm'), 'cm')

    def test_arrays(self):
        ints = to_matlab(np.arange(3))
        self.assertEqual(ints.dtype, np.float64)
        mask = to_matlab(np.ones((2, 2), dtype=bool))
        self.assertEqual(mask.dtype, bool)
        self.assertEqual(to_matlab(np.array(['Fz', 'Cz'])), ['Fz', 'Cz'])

    def test_sequences(self):
        numbers = to_matlab([1, 2, 3])
        self.assertIsInstance(numbers, np.ndarray)
        self.assertEqual(numbers.dtype, np.float64)
        self.assertEqual(to_matlab(['brain', 'skull']), ['brain', 'skull'])
        self.assertEqual(to_matlab([True, False]), [True, False])

    def test_nested_mapping(self):
        grad = to_matlab({'label': ['MEG0111'], 'chanpos': [[0, 0, 12]], 'balance': {'current': 'none'}})
        self.assertEqual(grad['label'], ['MEG0111'])
        np.testing.assert_array_equal(grad['chanpos'], [[0.0, 0.0, 12.0]])
        self.assertEqual(grad['balance'], {'current': 'none'})

    def test_objects_with_to_dict(self):
        bnd = Boundary(pnt=np.eye(3), tri=[[0, 1, 2]])
        d = to_matlab(bnd)
        np.testing.assert_array_equal(d['tri'], [[1, 2, 3]])
        self.assertEqual(d['unit'].shape, (0, 0))

    def test_unsupported_type(self):
        with self.assertRaises(TypeError):
            to_matlab(object())


class TestFromMatlab(unittest.TestCase):

    def test_nested(self):
        value = from_matlab({'type': 'dipoli', 'cond': [0.33, 0.0042], 'bnd': [{'pnt': ((0., 1., 2.),)}]})
        self.assertEqual(value['type'], 'dipoli')
        self.assertEqual(value['cond'], [0.33, 0.0042])
        np.testing.assert_array_equal(value['bnd'][0]['pnt'], [[0., 1., 2.]])


class TestWorkspace(unittest.TestCase):

    def test_assign(self):
        eng = FakeEngine()
        var = assign(eng, 'x', [1, 2])
        self.assertEqual(var, MatlabVar('x'))
        np.testing.assert_array_equal(eng.workspace['x'], [1., 2.])

    def test_assign_struct_array(self):
        eng = FakeEngine()
        var = assign_struct_array(eng, 'bnd', [tetrahedron_struct(), tetrahedron_struct(2.0)])
        self.assertEqual(var.name, 'bnd')
        self.assertEqual(list(eng.workspace), ['bnd'])
        self.assertEqual(len(eng.workspace['bnd']), 2)
        self.assertIn("bnd = [bnd_1, bnd_2];", eng.evals)

    def test_assign_empty_struct_array(self):
        eng = FakeEngine()
        assign_struct_array(eng, 'bnd', [])
        self.assertEqual(eng.workspace['bnd'].shape, (0, 0))

    def test_wrap_struct(self):
        eng = FakeEngine()
        inner = assign_struct_array(eng, 'bnd', [tetrahedron_struct()])
        wrap_struct(eng, 'geom', 'bnd', inner)
        self.assertIn("geom = struct('bnd', bnd);", eng.evals)
        self.assertEqual(len(eng.workspace['geom']['bnd']), 1)

    def test_pull_struct_array(self):
        eng = FakeEngine()
        eng.workspace['vol'] = {
            'type': 'bemcp',
            'bnd': [tetrahedron_struct(), tetrahedron_struct(2.0)],
            'cond': np.array([0.33, 0.0042]),
        }
        vol = pull(eng, 'vol')
        self.assertEqual(vol['type'], 'bemcp')
        self.assertEqual(len(vol['bnd']), 2)
        np.testing.assert_allclose(vol['bnd'][1]['pnt'].max(), 2.0)
        self.assertIn("isstruct(vol.bnd)", eng.evals)


class TestCallFunction(unittest.TestCase):

    def test_no_arguments(self):
        eng = FakeEngine()
        vol = call_function(eng, 'ft_headmodel_infinite')
        self.assertEqual(vol, {'type': 'infinite'})
        self.assertIn("ft_out = ft_headmodel_infinite();", eng.evals)
        self.assertEqual(eng.workspace, {})

    def test_arguments_and_references(self):
        eng = FakeEngine()
        assign(eng, 'pnt', np.eye(3))
        call_function(eng, 'ft_headmodel_singlesphere', MatlabVar('pnt'), 'conductivity', 0.33)

        self.assertIn("ft_out = ft_headmodel_singlesphere(pnt, ft_arg2, ft_arg3);", eng.evals)
        args = eng.args_of('ft_headmodel_singlesphere')
        self.assertEqual(args[1:], ['conductivity', 0.33])
        # referenced variables are left alone, temporaries are cleared
        self.assertEqual(list(eng.workspace), ['pnt'])

    def test_cleans_up_on_error(self):
        eng = FakeEngine(results={'ft_headmodel_bemcp': RuntimeError('BEM matrix is singular')})
        with self.assertRaisesRegex(RuntimeError, 'singular'):
            call_function(eng, 'ft_headmodel_bemcp', None, 'conductivity', [1, 0.0125, 1])
        self.assertEqual(eng.workspace, {})


if __name__ == '__main__':
    unittest.main()
