from typing import List, Mapping, Optional, Union
from pathlib import Path

from .config import HeadModelConfig, MESH_DEFAULTS
from .geometry import Boundary, SegmentedMRI, as_boundaries, is_volume
from utils import EngineWrapper, call_function, with_matlab_engine


@with_matlab_engine
def prepare_mesh(
    cfg: Optional[Mapping],
    mri: Union[SegmentedMRI, Mapping],
    verbose: bool = False,
    eng: EngineWrapper = None
) -> List[Boundary]:
    """
    Derive surface boundaries from a segmented MRI with ``ft_prepare_mesh``.

    Parameters
    ----------
    cfg : Mapping or None
        Mesh options; missing ones take the defaults in
        :data:`headmodel.config.MESH_DEFAULTS`:

        - ``smooth`` (5): smoothing kernel applied to the tissue masks
        - ``sourceunits`` ('cm'): geometrical unit of the resulting mesh
        - ``threshold`` (0.5): iso-value for the surface extraction
        - ``numvertices`` (4000): target number of vertices per surface
    mri : SegmentedMRI or Mapping
        Segmented volume (anything with ``dim`` and ``transform``).
    verbose : bool, default=False
        If True, print progress messages.

    Returns
    -------
    List[Boundary]
        One boundary per segmented compartment, in the order returned by
        FieldTrip.

    Raises
    ------
    ValueError
        If `mri` is not a volume.
    RuntimeError
        If the MATLAB call fails.
    """
    if not is_volume(mri):
        raise ValueError("mri must be a segmented volume with 'dim' and 'transform'")

    cfg = HeadModelConfig(cfg)
    mesh_cfg = {key: cfg.getopt(key, default) for key, default in MESH_DEFAULTS.items()}

    if verbose:
        print("computing the geometrical description from the segmented MRI")

    try:
        bnd = call_function(eng, 'ft_prepare_mesh', mesh_cfg, mri, verbose=verbose)
    except Exception as e:
        raise RuntimeError(f"Error preparing mesh from segmented MRI: {e}") from e
    return as_boundaries(bnd)


@with_matlab_engine
def read_headshape(
    filename: Union[str, Path],
    verbose: bool = False,
    eng: EngineWrapper = None
) -> Boundary:
    """
    Read a head shape (digitized points or a surface) with ``ft_read_headshape``.

    Raises
    ------
    FileNotFoundError
        If `filename` does not exist.
    RuntimeError
        If FieldTrip cannot read the file.
    """
    filename = Path(filename)
    if not filename.is_file():
        raise FileNotFoundError(f"Head shape file not found: {filename}")

    if verbose:
        print(f"reading head shape from {filename}")
    try:
        shape = call_function(eng, 'ft_read_headshape', str(filename), verbose=verbose)
    except Exception as e:
        raise RuntimeError(f"Error reading head shape from {filename}: {e}") from e
    return Boundary.from_dict(shape)
