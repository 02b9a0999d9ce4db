"""
Head model preparation for pyheadmodel.

This package builds volume conduction models (head models) for EEG and
MEG forward modelling with FieldTrip, driven from Python through the
MATLAB engine.

Available forward methods:
- Spherical: singlesphere, concentricspheres, localspheres
- Boundary element: bem_asa, bem_cp, bem_dipoli, bem_openmeeg
- Realistic single shell (MEG): singleshell
- Volumetric: simbio (FEM), fns (FDM)
- Analytical: infinite, halfspace, slab_monopole

Quick Start
-----------
>>> from headmodel import prepare_headmodel, Boundary
>>>
>>> scalp = Boundary(pnt=points, tri=triangles, unit='cm')
>>> vol = prepare_headmodel({'method': 'singlesphere', 'conductivity': 0.33}, scalp)
>>> print(vol.type, vol['r'])
"""

from .errors import HeadModelError, ConfigurationError, UnsupportedMethodError
from .config import HeadModelConfig, MESH_DEFAULTS, LOCALSPHERES_DEFAULTS
from .geometry import Boundary, SegmentedMRI, is_volume, as_boundaries
from .model import HeadModel

# MATLAB callers
from .mesh import prepare_mesh, read_headshape
from .prepare import prepare_headmodel, SUPPORTED_METHODS


__all__ = [
    # Core classes
    'HeadModel',
    'HeadModelConfig',
    'Boundary',
    'SegmentedMRI',

    # Errors
    'HeadModelError',
    'ConfigurationError',
    'UnsupportedMethodError',

    # MATLAB callers
    'prepare_headmodel',
    'prepare_mesh',
    'read_headshape',

    'SUPPORTED_METHODS',
    'MESH_DEFAULTS',
    'LOCALSPHERES_DEFAULTS',
    'is_volume',
    'as_boundaries',
]

# Version info
__version__ = '0.1.0'
