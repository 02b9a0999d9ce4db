"""
Moving values between Python and the MATLAB workspace.

The engine converts scalars, strings, dicts (scalar structs), lists
(cell arrays) and numpy arrays, but it cannot represent ``None``, struct
arrays, or integer arrays the way the toolbox expects them. The helpers
here normalize values on the way in, assemble struct arrays inside the
workspace, and read results back field by field.
"""

from collections.abc import Mapping
from numbers import Number
from typing import Any, List, NamedTuple
import numpy as np
from tqdm import tqdm

EMPTY = np.empty((0, 0))
"""MATLAB ``[]``"""


class MatlabVar(NamedTuple):
    """Reference to a variable that already lives in the MATLAB workspace."""
    name: str


def to_matlab(value: Any) -> Any:
    """
    Convert a Python value into something the MATLAB engine accepts.

    - ``None`` becomes an empty double matrix (``[]``)
    - numbers become doubles, booleans stay logical
    - numeric arrays and numeric sequences become float64 arrays
    - sequences of anything else become cell arrays
    - mappings become structs (recursively)
    - objects with a ``to_dict`` method (geometry, sensors) are converted
      through it
    """
    if value is None:
        return EMPTY
    if isinstance(value, (bool, np.bool_)):
        return bool(value)
    if isinstance(value, str):
        return value
    if isinstance(value, Number):
        return float(value)
    if isinstance(value, np.ndarray):
        if value.dtype == bool:
            return value
        if value.dtype.kind in 'OUS':
            return [to_matlab(v) for v in value.tolist()]
        return value.astype(np.float64)
    if hasattr(value, 'to_dict'):
        return to_matlab(value.to_dict())
    if isinstance(value, Mapping):
        return {str(k): to_matlab(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        if _is_numeric(value):
            return np.asarray(value, dtype=np.float64)
        return [to_matlab(v) for v in value]
    raise TypeError(f"Cannot pass value of type {type(value).__name__} to MATLAB")


def _is_numeric(seq) -> bool:
    """Whether a (possibly nested) sequence forms a rectangular numeric array."""
    try:
        arr = np.asarray(seq)
    except ValueError:
        # ragged nesting
        return False
    return arr.size > 0 and arr.dtype.kind in 'iuf'


def from_matlab(value: Any) -> Any:
    """Convert an engine return value into plain Python / numpy objects."""
    if value is None or isinstance(value, (bool, str, int, float)):
        return value
    if isinstance(value, Mapping):
        return {k: from_matlab(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [from_matlab(v) for v in value]
    # matlab.double, matlab.logical, ... expose a buffer that numpy understands
    return np.array(value)


def assign(eng, name: str, value: Any) -> MatlabVar:
    """Put `value` into the MATLAB workspace as `name`."""
    eng.workspace[name] = to_matlab(value)
    return MatlabVar(name)


def assign_struct_array(eng, name: str, items: List[Any]) -> MatlabVar:
    """
    Build a 1xN struct array `name` in the MATLAB workspace.

    Every item must convert to a struct with the same fields.
    """
    if len(items) == 0:
        return assign(eng, name, None)
    parts = [assign(eng, f'{name}_{i + 1}', item).name for i, item in enumerate(items)]
    eng.eval(f"{name} = [{', '.join(parts)}];", nargout=0)
    eng.eval(f"clear {' '.join(parts)};", nargout=0)
    return MatlabVar(name)


def wrap_struct(eng, name: str, field: str, var: MatlabVar) -> MatlabVar:
    """Create a scalar struct `name` whose `field` holds workspace variable `var`."""
    eng.eval(f"{name} = struct('{field}', {var.name});", nargout=0)
    return MatlabVar(name)


def pull(eng, expr: str, verbose: bool = False) -> Any:
    """
    Read a MATLAB expression back into Python.

    Scalar structs become dicts, struct arrays become lists of dicts,
    everything else goes through :func:`from_matlab`.
    """
    if eng.eval(f"isstruct({expr})"):
        n = int(eng.eval(f"numel({expr})"))
        if n == 1:
            return _pull_struct(eng, expr, verbose)
        return [
            _pull_struct(eng, f"{expr}({i + 1})", verbose)  # remember that matlab indexing starts at 1
            for i in tqdm(range(n), desc=f"Loading {expr}", ncols=100, disable=not verbose)
        ]
    return from_matlab(eng.eval(expr))


def _pull_struct(eng, expr: str, verbose: bool) -> dict:
    names = eng.eval(f"fieldnames({expr})'")
    if isinstance(names, str):
        names = [names]
    return {name: pull(eng, f"{expr}.{name}", verbose) for name in names}


def call_function(eng, funname: str, *args, out: str = 'ft_out', verbose: bool = False) -> Any:
    """
    Call MATLAB function `funname` and return its (single) output.

    Arguments that are :class:`MatlabVar` are passed by reference to the
    existing workspace variable; all others are assigned to temporary
    workspace variables first. Temporaries and the output variable are
    cleared afterwards.
    """
    names, temporaries = [], []
    for i, arg in enumerate(args):
        if isinstance(arg, MatlabVar):
            names.append(arg.name)
        else:
            name = assign(eng, f'ft_arg{i + 1}', arg).name
            names.append(name)
            temporaries.append(name)

    if verbose:
        print(f"calling {funname}")
    try:
        eng.eval(f"{out} = {funname}({', '.join(names)});", nargout=0)
        result = pull(eng, out, verbose=verbose)
    finally:
        eng.eval(f"clear {' '.join(temporaries + [out])};", nargout=0)
    return result
