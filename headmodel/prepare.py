"""
Construction of volume conduction models.

:func:`prepare_headmodel` takes a configuration and a geometrical
description of the head and hands them to the FieldTrip constructor that
implements the requested forward method. If a segmented anatomical MRI
is passed, the surface boundaries are derived from it first.

EEG methods
    singlesphere, bem_asa, bem_cp, bem_dipoli, bem_openmeeg,
    concentricspheres, halfspace, infinite, slab_monopole (infinite_slab)
MEG methods
    singlesphere, localspheres, singleshell, infinite
Volumetric solvers
    simbio (FEM), fns (FDM)
"""

from typing import Callable, Dict, List, Mapping, Optional
import warnings

from .config import (
    HeadModelConfig,
    MESH_DEFAULTS,
    LOCALSPHERES_DEFAULTS,
    CONCENTRICSPHERES_DEFAULTS,
    VOLUME_CONDUCTOR_OPTIONS,
)
from .errors import ConfigurationError, UnsupportedMethodError
from .geometry import Boundary, GeometryLike, as_boundaries, is_volume
from .mesh import prepare_mesh, read_headshape
from .model import HeadModel
from utils import (
    EngineWrapper,
    MatlabVar,
    assign_struct_array,
    call_function,
    with_matlab_engine,
    wrap_struct,
)

BEM_FUNCTIONS = {
    'bem_cp': 'ft_headmodel_bemcp',
    'bem_dipoli': 'ft_headmodel_bem_dipoli',
    'bem_openmeeg': 'ft_headmodel_bem_openmeeg',
}

VOLUME_CONDUCTOR_FUNCTIONS = {
    'simbio': 'ft_headmodel_fem_simbio',
    'fns': 'ft_headmodel_fdm_fns',
}

METHOD_ALIASES = {
    'infinite_slab': 'slab_monopole',
}

VOLUME_METHODS = ('fns',)
"""Methods that consume the segmented MRI directly instead of a surface mesh"""

REQUIRED_OPTIONS = {
    'bem_asa': ('hdmfile',),
    'localspheres': ('grad',),
    'halfspace': ('point',),
    'simbio': VOLUME_CONDUCTOR_OPTIONS,
    'fns': VOLUME_CONDUCTOR_OPTIONS,
}

_REQUIRED_DESCRIPTIONS = {
    'hdmfile': 'a cfg.hdmfile',
    'grad': 'a cfg.grad structure',
    'point': 'a cfg.point',
}


def _push_boundaries(eng, boundaries: List[Boundary], name: str = 'ft_bnd') -> MatlabVar:
    return assign_struct_array(eng, name, boundaries)


def _bem_asa(cfg, boundaries, eng, verbose):
    hdmfile = cfg.getopt('hdmfile')
    return call_function(eng, 'ft_headmodel_bem_asa', str(hdmfile), verbose=verbose)


def _bem(cfg, boundaries, eng, verbose):
    method = cfg['method']
    funname = BEM_FUNCTIONS[method]
    hdmfile = cfg.getopt('hdmfile')
    conductivity = cfg.getopt('conductivity')
    isolatedsource = cfg.getopt('isolatedsource')

    if hdmfile is not None:
        return call_function(eng, funname, None, 'hdmfile', str(hdmfile),
                             'conductivity', conductivity,
                             'isolatedsource', isolatedsource, verbose=verbose)
    if boundaries:
        geom = wrap_struct(eng, 'ft_geom', 'bnd', _push_boundaries(eng, boundaries))
        try:
            return call_function(eng, funname, geom,
                                 'conductivity', conductivity,
                                 'isolatedsource', isolatedsource, verbose=verbose)
        finally:
            eng.eval("clear ft_geom ft_bnd;", nargout=0)
    raise ConfigurationError(
        f"for cfg.method = {method}, you need to supply a data mesh or a cfg.hdmfile"
    )


def _with_boundaries(eng, boundaries, call):
    """Push the boundaries (or [] when there are none) and run `call` with them."""
    if not boundaries:
        return call(None)
    bnd = _push_boundaries(eng, boundaries)
    try:
        return call(bnd)
    finally:
        eng.eval(f"clear {bnd.name};", nargout=0)


def _concentricspheres(cfg, boundaries, eng, verbose):
    conductivity = cfg.getopt('conductivity')
    fitind = cfg.getopt('fitind', CONCENTRICSPHERES_DEFAULTS['fitind'])
    return _with_boundaries(eng, boundaries, lambda bnd: call_function(
        eng, 'ft_headmodel_concentricspheres', bnd,
        'conductivity', conductivity, 'fitind', fitind, verbose=verbose))


def _halfspace(cfg, boundaries, eng, verbose):
    point = cfg.getopt('point')
    submethod = cfg.getopt('submethod')
    conductivity = cfg.getopt('conductivity')
    return _with_boundaries(eng, boundaries, lambda bnd: call_function(
        eng, 'ft_headmodel_halfspace', bnd, point,
        'conductivity', conductivity, 'submethod', submethod, verbose=verbose))


def _infinite(cfg, boundaries, eng, verbose):
    return call_function(eng, 'ft_headmodel_infinite', verbose=verbose)


def _localspheres(cfg, boundaries, eng, verbose):
    grad = cfg.getopt('grad')
    options = {key: cfg.getopt(key, default) for key, default in LOCALSPHERES_DEFAULTS.items()}
    args = []
    for key, value in options.items():
        args.extend([key, value])
    return _with_boundaries(eng, boundaries, lambda bnd: call_function(
        eng, 'ft_headmodel_localspheres', bnd, grad, *args, verbose=verbose))


def _singleshell(cfg, boundaries, eng, verbose):
    return _with_boundaries(eng, boundaries, lambda bnd: call_function(
        eng, 'ft_headmodel_singleshell', bnd, verbose=verbose))


def _singlesphere(cfg, boundaries, eng, verbose):
    conductivity = cfg.getopt('conductivity')
    hdmfile = cfg.getopt('hdmfile')
    if boundaries:
        if len(boundaries) > 1:
            warnings.warn(
                f"{len(boundaries)} boundaries supplied, fitting the single sphere "
                f"to the points of the first one"
            )
        pnt = boundaries[0].pnt
    elif hdmfile is not None:
        pnt = read_headshape(hdmfile, verbose=verbose, eng=eng).pnt
    else:
        raise ConfigurationError(
            "for cfg.method = singlesphere, you need to supply a geometry or a cfg.hdmfile"
        )
    return call_function(eng, 'ft_headmodel_singlesphere', pnt,
                         'conductivity', conductivity, verbose=verbose)


def _volume_conductor(cfg, boundaries, eng, verbose):
    funname = VOLUME_CONDUCTOR_FUNCTIONS[cfg['method']]
    tissue, tissueval, tissuecond, elec, transform, unit = cfg.require_all(
        VOLUME_CONDUCTOR_OPTIONS, method=cfg['method'])
    return call_function(eng, funname,
                         'tissue', tissue, 'tissueval', tissueval,
                         'tissuecond', tissuecond, 'sens', elec,
                         'transform', transform, 'unit', unit, verbose=verbose)


def _slab_monopole(cfg, boundaries, eng, verbose):
    if len(boundaries) != 2:
        raise ConfigurationError(
            f"geometry should be described by exactly 2 sets of points, got {len(boundaries)}"
        )
    samplepoint = cfg.getopt('samplepoint')
    geom1, geom2 = boundaries
    return call_function(eng, 'ft_headmodel_slab', geom1, geom2, samplepoint,
                         'sourcemodel', 'monopole', verbose=verbose)


METHODS: Dict[str, Callable] = {
    'bem_asa': _bem_asa,
    'bem_cp': _bem,
    'bem_dipoli': _bem,
    'bem_openmeeg': _bem,
    'concentricspheres': _concentricspheres,
    'halfspace': _halfspace,
    'infinite': _infinite,
    'localspheres': _localspheres,
    'singleshell': _singleshell,
    'singlesphere': _singlesphere,
    'simbio': _volume_conductor,
    'fns': _volume_conductor,
    'slab_monopole': _slab_monopole,
}

SUPPORTED_METHODS = tuple(METHODS) + tuple(METHOD_ALIASES)


def _check_required(cfg: HeadModelConfig, method: str):
    required = REQUIRED_OPTIONS.get(method, ())
    if len(required) == 1:
        key = required[0]
        cfg.require(key, method=method, what=_REQUIRED_DESCRIPTIONS.get(key))
    elif required:
        cfg.require_all(required, method=method)


@with_matlab_engine
def prepare_headmodel(
    cfg: Mapping,
    geometry: Optional[GeometryLike] = None,
    verbose: bool = False,
    eng: EngineWrapper = None
) -> HeadModel:
    """
    Construct a volume conduction model from the geometry of the head.

    The volume conduction model specifies how currents generated by
    sources in the brain (e.g. dipoles) propagate through the tissue and
    give rise to measurable EEG potentials or MEG fields.

    Parameters
    ----------
    cfg : Mapping
        Configuration. ``cfg['method']`` selects the forward solution, see
        :data:`SUPPORTED_METHODS`. Method-specific options:

        - 'bem_asa': ``hdmfile`` (required)
        - 'bem_cp', 'bem_dipoli', 'bem_openmeeg': ``conductivity``,
          ``isolatedsource``, ``hdmfile`` (used instead of the geometry)
        - 'concentricspheres': ``conductivity``, ``fitind`` (default 1)
        - 'localspheres': ``grad`` (required), ``feedback`` (True),
          ``radius`` (8.5), ``maxradius`` (20), ``baseline`` (5)
        - 'halfspace': ``point`` (required), ``submethod``, ``conductivity``
        - 'singlesphere': ``conductivity``, ``hdmfile`` (head shape used
          when no geometry is given)
        - 'simbio', 'fns': ``tissue``, ``tissueval``, ``tissuecond``,
          ``elec``, ``transform``, ``unit`` (all required)
        - 'slab_monopole' / 'infinite_slab': ``samplepoint``

        When a segmented MRI is given, ``smooth`` (5), ``sourceunits``
        ('cm'), ``threshold`` (0.5) and ``numvertices`` (4000) control the
        mesh derivation.
    geometry : Boundary, sequence of Boundary, SegmentedMRI or Mapping, optional
        Surface mesh (one or more boundaries) or segmented anatomical MRI.
        Not modified.
    verbose : bool, default=False
        If True, print progress messages during execution.

    Returns
    -------
    HeadModel
        The constructed model; its structure depends on the method.

    Raises
    ------
    ConfigurationError
        If ``method`` or a method-specific required option is missing, or
        the geometry does not suit the method. Raised before any model is
        constructed.
    UnsupportedMethodError
        If ``method`` is not one of :data:`SUPPORTED_METHODS`.
    RuntimeError
        If the FieldTrip constructor fails.

    Examples
    --------
    >>> vol = prepare_headmodel({'method': 'singlesphere', 'conductivity': 0.33}, scalp)
    >>> vol = prepare_headmodel({'method': 'bem_dipoli', 'conductivity': [0.33, 0.0042, 0.33]}, segmented_mri)
    """
    cfg = HeadModelConfig(cfg)
    requested = cfg.require('method')
    method = METHOD_ALIASES.get(requested, requested) if isinstance(requested, str) else requested
    if not isinstance(method, str) or method not in METHODS:
        raise UnsupportedMethodError(requested, SUPPORTED_METHODS)
    cfg['method'] = method

    _check_required(cfg, method)

    if cfg.deprecated('geom'):
        geom = cfg.pop('geom')
        if geometry is None:
            geometry = geom

    if geometry is not None and is_volume(geometry) and method not in VOLUME_METHODS:
        mesh_cfg = {key: cfg.getopt(key, default) for key, default in MESH_DEFAULTS.items()}
        boundaries = prepare_mesh(mesh_cfg, geometry, verbose=verbose, eng=eng)
    elif geometry is not None:
        if verbose:
            print("using the specified geometrical description")
        boundaries = [] if is_volume(geometry) else as_boundaries(geometry)
    else:
        boundaries = []

    try:
        vol = METHODS[method](cfg, boundaries, eng, verbose)
    except (ConfigurationError, FileNotFoundError):
        raise
    except Exception as e:
        raise RuntimeError(f"Error preparing head model with method {method}: {e}") from e

    cfg.warn_unused()
    return HeadModel(fields=vol if isinstance(vol, dict) else {'vol': vol},
                     method=method, cfg=cfg.to_dict())


if __name__ == '__main__':
    vol = prepare_headmodel({'method': 'infinite'}, verbose=True)
    print("head model prepared successfully.")
    print(vol)
