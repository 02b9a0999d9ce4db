"""
Configuration record for head model preparation.

A :class:`HeadModelConfig` behaves like a dict of options (``method``,
``conductivity``, ``grad``, ...). Reading an option through
:meth:`HeadModelConfig.getopt` fills in the documented default and marks
the option as used, so options that were supplied but never looked at
can be reported afterwards.
"""

import warnings
from collections.abc import Mapping, MutableMapping
from typing import Any, Dict, Iterable, List, Optional
import numpy as np

from .errors import ConfigurationError

MESH_DEFAULTS = {
    'smooth': 5,
    'sourceunits': 'cm',
    'threshold': 0.5,
    'numvertices': 4000,
}
"""Defaults for deriving a surface mesh from a segmented MRI"""

LOCALSPHERES_DEFAULTS = {
    'feedback': True,
    'radius': 8.5,
    'maxradius': 20,
    'baseline': 5,
}

CONCENTRICSPHERES_DEFAULTS = {
    'fitind': 1,
}

VOLUME_CONDUCTOR_OPTIONS = ('tissue', 'tissueval', 'tissuecond', 'elec', 'transform', 'unit')
"""Options that the FEM (simbio) and FDM (fns) solvers all require"""


def isempty(value: Any) -> bool:
    """True for None and for empty strings, sequences and arrays."""
    if value is None:
        return True
    if isinstance(value, np.ndarray):
        return value.size == 0
    if isinstance(value, (str, list, tuple, dict)):
        return len(value) == 0
    return False


class HeadModelConfig(MutableMapping):
    """
    Option mapping with default filling and usage tracking.

    Parameters
    ----------
    cfg : Mapping, optional
        Options supplied by the caller. The mapping is copied; the caller's
        object is never modified.
    **options
        Additional options, overriding those in `cfg`.

    Examples
    --------
    >>> cfg = HeadModelConfig({'method': 'localspheres', 'grad': grad})
    >>> cfg.getopt('radius', 8.5)
    8.5
    >>> cfg['radius']
    8.5
    """

    def __init__(self, cfg: Optional[Mapping] = None, **options):
        if cfg is not None and not isinstance(cfg, Mapping):
            raise TypeError(f"cfg must be a mapping of options, got {type(cfg).__name__}")
        self._data: Dict[str, Any] = dict(cfg or {})
        self._data.update(options)
        self._used = set()

    def __getitem__(self, key):
        self._used.add(key)
        return self._data[key]

    def __setitem__(self, key, value):
        self._data[key] = value

    def __delitem__(self, key):
        del self._data[key]

    def __iter__(self):
        return iter(self._data)

    def __len__(self):
        return len(self._data)

    def __contains__(self, key):
        return key in self._data

    def getopt(self, key: str, default: Any = None) -> Any:
        """
        Return option `key`, or `default` when it is absent or empty.

        The resolved value is stored back, so the config ends up holding
        the effective value of every option that was read.
        """
        self._used.add(key)
        value = self._data.get(key)
        if isempty(value):
            value = default
        self._data[key] = value
        return value

    def require(self, key: str, method: Optional[str] = None, what: Optional[str] = None) -> Any:
        """Return option `key`, raising :class:`ConfigurationError` when it is missing or empty."""
        self._used.add(key)
        value = self._data.get(key)
        if isempty(value):
            what = what or f'cfg.{key}'
            if method is None:
                raise ConfigurationError(f"the configuration option {what} is required")
            raise ConfigurationError(f"for cfg.method = {method}, you need to supply {what}")
        return value

    def require_all(self, keys: Iterable[str], method: Optional[str] = None) -> List[Any]:
        """Return several required options at once, reporting every missing one."""
        missing = []
        for key in keys:
            self._used.add(key)
            if isempty(self._data.get(key)):
                missing.append(key)
        if missing:
            raise ConfigurationError(
                f"Not all the required fields have been provided for cfg.method = {method}, "
                f"missing: {', '.join('cfg.' + k for k in missing)}"
            )
        return [self._data[key] for key in keys]

    def deprecated(self, key: str) -> bool:
        """Warn when the deprecated option `key` is present."""
        if key in self._data:
            warnings.warn(f"the option cfg.{key} is deprecated", DeprecationWarning, stacklevel=3)
            return True
        return False

    def unused(self) -> List[str]:
        """Options that were supplied but never read."""
        return sorted(k for k in self._data if k not in self._used)

    def warn_unused(self):
        unused = self.unused()
        if unused:
            warnings.warn(
                f"the following config options were not used: {', '.join(unused)}",
                UserWarning, stacklevel=3
            )

    def to_dict(self) -> Dict[str, Any]:
        return dict(self._data)

    def __repr__(self) -> str:
        return f"HeadModelConfig({self._data!r})"
