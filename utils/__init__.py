

from .engine_wrapper import (
    EngineWrapper,
    TempWD,
    start_matlab,
    with_matlab_engine,
    FIELDTRIP_DIR
)
from .matlab_io import (
    MatlabVar,
    to_matlab,
    from_matlab,
    assign,
    assign_struct_array,
    wrap_struct,
    pull,
    call_function
)

__all__ = [
    'EngineWrapper',
    'TempWD',
    'start_matlab',
    'with_matlab_engine',
    'FIELDTRIP_DIR',
    'MatlabVar',
    'to_matlab',
    'from_matlab',
    'assign',
    'assign_struct_array',
    'wrap_struct',
    'pull',
    'call_function'
]
