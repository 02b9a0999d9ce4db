from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from pathlib import Path

from .geometry import Boundary, as_boundaries
from utils import to_matlab


@dataclass
class HeadModel:
    """
    Volume conduction model returned by one of FieldTrip's
    ``ft_headmodel_*`` constructors.

    The structure of `fields` depends on the forward method: a single
    sphere has an origin ``o``, radius ``r`` and conductivity ``c``; BEM
    models carry the boundaries ``bnd``, conductivities ``cond`` and the
    system matrix ``mat``; an infinite medium carries little more than its
    type. The object does not interpret the fields beyond the few
    accessors below.

    Attributes
    ----------
    fields : Dict[str, Any]
        The MATLAB head model structure, converted to Python.
    method : str
        Configuration method used to build the model (e.g. 'bem_dipoli').
    cfg : Dict[str, Any]
        Effective configuration, with defaults filled in.
    """

    fields: Dict[str, Any]
    """Head model structure"""

    method: str = 'unknown'
    """Forward method the model was prepared with"""

    cfg: Dict[str, Any] = field(default_factory=dict)
    """Effective configuration"""

    def __post_init__(self):
        if not isinstance(self.fields, dict):
            raise ValueError(
                f"Head model must be a structure, got {type(self.fields).__name__}"
            )

    @property
    def type(self) -> str:
        """Head model type as reported by FieldTrip (e.g. 'singlesphere', 'dipoli')."""
        value = self.fields.get('type')
        return value if isinstance(value, str) else self.method

    @property
    def unit(self) -> Optional[str]:
        value = self.fields.get('unit')
        return value if isinstance(value, str) and value else None

    @property
    def boundaries(self) -> List[Boundary]:
        """Boundaries of a surface-based model; empty for analytical models."""
        return as_boundaries(self.fields.get('bnd'))

    @property
    def conductivity(self) -> Any:
        """Compartment conductivities, whatever name the constructor stored them under."""
        for key in ('cond', 'c', 'cond_sheet'):
            if key in self.fields:
                return self.fields[key]
        return None

    def __getitem__(self, key):
        return self.fields[key]

    def __contains__(self, key):
        return key in self.fields

    def keys(self):
        return self.fields.keys()

    def to_dict(self) -> Dict:
        """Convert head model to dictionary for serialization."""
        return {
            'vol': self.fields,
            'method': self.method,
            'cfg': self.cfg,
        }

    def save(self, filepath: str):
        """
        Save head model to a MATLAB file.

        The file holds the head model as variable ``vol`` so that it can be
        loaded directly into FieldTrip.
        """
        filepath = Path(filepath)
        if filepath.suffix != '.mat':
            raise ValueError(f"Unsupported file format: {filepath.suffix}. Use .mat")

        from scipy.io import savemat
        savemat(str(filepath), to_matlab(self.to_dict()))

    @classmethod
    def load(cls, filepath: str) -> 'HeadModel':
        """Load a head model saved with :meth:`save` (or any .mat file with a ``vol`` variable)."""
        filepath = Path(filepath)
        if filepath.suffix != '.mat':
            raise ValueError(f"Unsupported file format: {filepath.suffix}")

        from scipy.io import loadmat
        data = loadmat(str(filepath), simplify_cells=True)
        if 'vol' not in data:
            raise ValueError(f"No head model variable 'vol' in {filepath}")
        method = data.get('method')
        cfg = data.get('cfg')
        return cls(
            fields=data['vol'],
            method=method if isinstance(method, str) else 'unknown',
            cfg=cfg if isinstance(cfg, dict) else {},
        )

    def __repr__(self) -> str:
        return (
            f"HeadModel(\n"
            f"  type='{self.type}',\n"
            f"  method='{self.method}',\n"
            f"  unit={self.unit!r},\n"
            f"  boundaries={len(self.boundaries)},\n"
            f"  fields={sorted(self.fields)}\n"
            f")"
        )
