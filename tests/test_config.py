import unittest
import numpy as np

from headmodel import HeadModelConfig, ConfigurationError
from headmodel.config import isempty


class TestIsEmpty(unittest.TestCase):

    def test_empty_values(self):
        for value in (None, '', [], (), {}, np.empty((0, 0))):
            with self.subTest(value=value):
                self.assertTrue(isempty(value))

    def test_non_empty_values(self):
        for value in (0, 0.0, False, 'cm', [0], np.zeros(3)):
            with self.subTest(value=value):
                self.assertFalse(isempty(value))


class TestHeadModelConfig(unittest.TestCase):

    def test_copies_input(self):
        options = {'method': 'singlesphere'}
        cfg = HeadModelConfig(options)
        cfg['conductivity'] = 0.33
        self.assertEqual(options, {'method': 'singlesphere'})

    def test_keyword_options_override(self):
        cfg = HeadModelConfig({'method': 'singlesphere'}, method='infinite')
        self.assertEqual(cfg['method'], 'infinite')

    def test_rejects_non_mapping(self):
        with self.assertRaises(TypeError):
            HeadModelConfig(['method', 'infinite'])

    def test_getopt_default(self):
        cfg = HeadModelConfig({'radius': None, 'baseline': []})
        self.assertEqual(cfg.getopt('radius', 8.5), 8.5)
        self.assertEqual(cfg.getopt('baseline', 5), 5)
        self.assertEqual(cfg.getopt('maxradius', 20), 20)
        self.assertEqual(cfg.to_dict(), {'radius': 8.5, 'baseline': 5, 'maxradius': 20})

    def test_getopt_keeps_given_value(self):
        cfg = HeadModelConfig({'feedback': False})
        self.assertIs(cfg.getopt('feedback', True), False)

    def test_require(self):
        cfg = HeadModelConfig({'method': 'localspheres'})
        self.assertEqual(cfg.require('method'), 'localspheres')
        with self.assertRaisesRegex(ConfigurationError, 'for cfg.method = localspheres, you need to supply a cfg.grad structure'):
            cfg.require('grad', method='localspheres', what='a cfg.grad structure')

    def test_require_all_reports_every_missing_option(self):
        cfg = HeadModelConfig({'tissue': ['brain'], 'unit': ''})
        with self.assertRaisesRegex(ConfigurationError, 'missing: cfg.tissueval, cfg.unit'):
            cfg.require_all(['tissue', 'tissueval', 'unit'], method='simbio')

    def test_unused(self):
        cfg = HeadModelConfig({'method': 'infinite', 'radius': 3, 'smooth': 5})
        cfg.require('method')
        self.assertEqual(cfg.unused(), ['radius', 'smooth'])
        with self.assertWarnsRegex(UserWarning, 'radius, smooth'):
            cfg.warn_unused()

    def test_deprecated(self):
        cfg = HeadModelConfig({'geom': object()})
        with self.assertWarnsRegex(DeprecationWarning, 'cfg.geom'):
            self.assertTrue(cfg.deprecated('geom'))
        self.assertFalse(HeadModelConfig().deprecated('geom'))


if __name__ == '__main__':
    unittest.main()
