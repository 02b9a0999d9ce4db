import os
from functools import wraps
from typing import Optional, Union, Callable
from pathlib import Path

FIELDTRIP_DIR = os.environ.get('FIELDTRIP_DIR')


def _matlab_engine_module():
    # matlab.engine needs a local MATLAB installation, only import it when an engine is started
    from matlab import engine
    return engine


def start_matlab(working_dir=None, fieldtrip_dir=None):
    """Start MATLAB engine with optional working directory and initialize FieldTrip."""
    with TempWD(working_dir or Path.cwd()):
        eng = _matlab_engine_module().start_matlab()

    fieldtrip_dir = fieldtrip_dir or FIELDTRIP_DIR
    try:
        if fieldtrip_dir:
            eng.addpath(str(Path(fieldtrip_dir).resolve()), nargout=0)
        eng.ft_defaults(nargout=0)
    except Exception as e:
        eng.quit()
        raise RuntimeError(
            f"Could not initialize FieldTrip (fieldtrip_dir={fieldtrip_dir}). "
            f"Add FieldTrip to the MATLAB path or set FIELDTRIP_DIR: {e}"
        ) from e
    return eng


class EngineWrapper():
    """
    Wraps a matlab.engine instance to do lazy loading.

    The engine is only started when first accessed, so importing the
    package does not require MATLAB. On start the FieldTrip directory is
    added to the MATLAB path and ``ft_defaults`` is run.

    Parameters
    ----------
    working_dir : Path or str, optional
        Working directory for MATLAB engine
    fieldtrip_dir : Path or str, optional
        FieldTrip installation directory. Defaults to the ``FIELDTRIP_DIR``
        environment variable; if neither is set FieldTrip must already be
        on the MATLAB path.

    Examples
    --------
    >>> wrapper = EngineWrapper(fieldtrip_dir='~/toolboxes/fieldtrip')
    >>> # Engine not yet started
    >>> wrapper.eval("vol = ft_headmodel_infinite();", nargout=0)  # Engine starts here
    """

    def __init__(self,
                 working_dir: Optional[Union[Path, str]] = None,
                 fieldtrip_dir: Optional[Union[Path, str]] = None):
        self.eng = None
        self.is_started = False
        self.working_dir = working_dir
        self.fieldtrip_dir = fieldtrip_dir

    def __getattr__(self, item):
        if item in ('eng', 'is_started', 'working_dir', 'fieldtrip_dir'):
            return object.__getattribute__(self, item)
        if self.is_started is False:
            self.eng = start_matlab(working_dir=self.working_dir,
                                    fieldtrip_dir=self.fieldtrip_dir)
            self.is_started = True
        return getattr(self.eng, item)

    def shutdown_engine(self):
        if self.is_started:
            self.eng.quit()
            self.eng = None
            self.is_started = False

    def __del__(self):
        if self.__dict__.get('is_started'):
            try:
                self.eng.quit()
            except Exception:
                # interpreter shutdown may already have torn the engine down
                pass


class TempWD():
    """Context manager to temporarily switch cwd to `dir_path`."""

    def __init__(self, dir_path):
        self.dir_path = Path(dir_path)
        self.cwd = None

    def __enter__(self):
        self.cwd = Path.cwd()
        os.chdir(self.dir_path.resolve())
        return self.dir_path

    def __exit__(self, type, value, traceback):
        os.chdir(self.cwd.resolve())


_default_engine = EngineWrapper()  # global (default) engine wrapper instance


def with_matlab_engine(func: Callable = None, engine_wrapper: EngineWrapper = None):
    """
    Decorator that injects a MATLAB engine into functions.

    Parameters
    ----------
    func : callable, optional
        Function to decorate (when used without arguments)
    engine_wrapper : EngineWrapper
        The engine wrapper to inject. Defaults to the module-level wrapper.

    Returns
    -------
    decorator : callable
        Decorator function

    Examples
    --------
    >>> @with_matlab_engine
    ... def headmodel_type(cfg, eng=None):
    ...     return eng.eval("ft_headmodeltype(vol)")
    >>>
    >>> # 'eng' is automatically provided
    >>> headmodel_type(cfg)
    """
    def decorator(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            if kwargs.get('eng') is None:
                kwargs['eng'] = engine_wrapper or _default_engine
            return f(*args, **kwargs)
        return wrapper
    if func is not None:
        return decorator(func)
    return decorator
