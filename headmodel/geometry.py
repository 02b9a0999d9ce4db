from dataclasses import dataclass, field
from collections.abc import Mapping
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union
import numpy as np


@dataclass
class Boundary:
    """
    A closed triangulated surface separating two compartments of the head
    (e.g. scalp, outer skull, inner skull).

    Triangle indices are zero-based on the Python side and shifted to
    MATLAB's one-based indexing by :meth:`to_dict`.
    """
    pnt: np.ndarray
    """Vertex positions [n_vertices x 3]"""

    tri: Optional[np.ndarray] = None
    """Triangles as vertex indices [n_triangles x 3], zero-based"""

    unit: Optional[str] = None
    """Geometrical unit of the vertex positions (e.g. 'mm', 'cm')"""

    def __post_init__(self):
        self.pnt = np.atleast_2d(np.asarray(self.pnt, dtype=np.float64))
        if self.pnt.ndim != 2 or self.pnt.shape[1] != 3:
            raise ValueError(f"Boundary points must have shape (n, 3), got {self.pnt.shape}")
        if self.tri is not None:
            self.tri = np.atleast_2d(np.asarray(self.tri, dtype=np.int64))
            if self.tri.size == 0:
                self.tri = None
            elif self.tri.ndim != 2 or self.tri.shape[1] != 3:
                raise ValueError(f"Boundary triangles must have shape (m, 3), got {self.tri.shape}")
            elif self.tri.min() < 0 or self.tri.max() >= self.n_vertices:
                raise ValueError(
                    f"Triangle indices out of range [0, {self.n_vertices}). "
                    f"Got min={self.tri.min()}, max={self.tri.max()}"
                )

    @property
    def n_vertices(self) -> int:
        return self.pnt.shape[0]

    @property
    def n_triangles(self) -> int:
        return 0 if self.tri is None else self.tri.shape[0]

    def to_dict(self) -> Dict:
        """Convert to a FieldTrip ``bnd`` structure (one-based triangles)."""
        return {
            'pnt': self.pnt,
            'tri': None if self.tri is None else self.tri + 1,
            'unit': self.unit,
        }

    @classmethod
    def from_dict(cls, bnd: Mapping) -> 'Boundary':
        """Create a boundary from a FieldTrip ``bnd`` structure (one-based triangles)."""
        # newer FieldTrip versions call the vertices 'pos'
        pnt = bnd['pnt'] if 'pnt' in bnd else bnd['pos']
        tri = bnd.get('tri')
        if tri is not None and np.size(tri) > 0:
            tri = np.atleast_2d(np.asarray(tri, dtype=np.int64)) - 1
        else:
            tri = None
        unit = bnd.get('unit')
        return cls(pnt=pnt, tri=tri, unit=unit if isinstance(unit, str) and unit else None)

    def __repr__(self) -> str:
        return f"Boundary(vertices={self.n_vertices}, triangles={self.n_triangles}, unit={self.unit!r})"


@dataclass
class SegmentedMRI:
    """
    A segmented anatomical MRI, as produced by FieldTrip's ``ft_volumesegment``.

    Each tissue is a boolean mask on the voxel grid, e.g.
    ``{'brain': ..., 'skull': ..., 'scalp': ...}``.
    """
    dim: Tuple[int, int, int]
    """Voxel grid dimensions"""

    transform: np.ndarray
    """Homogeneous voxel-to-head coordinate transformation [4 x 4]"""

    tissues: Dict[str, np.ndarray] = field(default_factory=dict)
    """Tissue masks, each of shape `dim`"""

    unit: str = 'mm'

    coordsys: Optional[str] = None

    def __post_init__(self):
        self.dim = tuple(int(d) for d in self.dim)
        if len(self.dim) != 3:
            raise ValueError(f"dim must have 3 elements, got {self.dim}")
        self.transform = np.asarray(self.transform, dtype=np.float64)
        if self.transform.shape != (4, 4):
            raise ValueError(f"transform must have shape (4, 4), got {self.transform.shape}")
        for name, mask in self.tissues.items():
            mask = np.asarray(mask)
            if mask.shape != self.dim:
                raise ValueError(
                    f"Tissue '{name}' has shape {mask.shape}, expected {self.dim}"
                )
            self.tissues[name] = mask.astype(bool)

    def to_dict(self) -> Dict:
        d = {
            'dim': np.asarray(self.dim, dtype=np.float64),
            'transform': self.transform,
            'unit': self.unit,
        }
        if self.coordsys is not None:
            d['coordsys'] = self.coordsys
        d.update(self.tissues)
        return d


GeometryLike = Union[Boundary, SegmentedMRI, Mapping, Sequence[Union[Boundary, Mapping]]]


def is_volume(geometry: Any) -> bool:
    """
    Whether `geometry` is a volumetric (voxel) description of the head.

    Anything with a voxel grid size and a voxel-to-head transformation
    counts, mirroring FieldTrip's ``ft_datatype(x, 'volume')``.
    """
    if isinstance(geometry, SegmentedMRI):
        return True
    return isinstance(geometry, Mapping) and 'dim' in geometry and 'transform' in geometry


def as_boundaries(geometry: Any) -> List[Boundary]:
    """
    Coerce a mesh description into a list of boundaries.

    Accepts a :class:`Boundary`, a ``bnd``-like mapping with a ``pnt`` (or
    ``pos``) entry, a mapping holding such boundaries under ``bnd``, or a
    sequence of any of these. ``None`` gives an empty list.
    """
    if geometry is None:
        return []
    if isinstance(geometry, Boundary):
        return [geometry]
    if isinstance(geometry, Mapping):
        if 'bnd' in geometry:
            return as_boundaries(geometry['bnd'])
        if 'pnt' in geometry or 'pos' in geometry:
            return [Boundary.from_dict(geometry)]
        raise ValueError("Mesh mapping must contain 'pnt' (or 'pos') or 'bnd'")
    if isinstance(geometry, np.ndarray) and geometry.dtype == object:
        geometry = geometry.ravel().tolist()
    if isinstance(geometry, (list, tuple)):
        boundaries = []
        for item in geometry:
            boundaries.extend(as_boundaries(item))
        return boundaries
    raise TypeError(f"Cannot interpret {type(geometry).__name__} as a surface mesh")
