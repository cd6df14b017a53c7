"""
Static Element Grid

The population of point-like elements the field sizes and colors. Positions
are fixed for the lifetime of a session; a different grid size means a new
Grid, never an in-place resize.
"""

import numpy as np

MAX_DISTANCE_MARGIN = 1.1


class Grid:
    """Immutable element ids and (N, 3) positions.

    Args:
        positions: (N, 3) array-like of element positions
        ids: Optional element ids (default: "element-<i>")
        half_extents: Optional per-axis half size of the grid. Defaults to
            the largest absolute coordinate on each axis.
    """

    def __init__(self, positions, ids=None, half_extents=None):
        pos = np.array(positions, dtype=np.float64).reshape(-1, 3)
        pos.flags.writeable = False
        self.positions = pos

        if ids is None:
            ids = [f"element-{i}" for i in range(len(pos))]
        if len(ids) != len(pos):
            raise ValueError(f"{len(ids)} ids for {len(pos)} positions")
        self.ids = tuple(ids)

        if half_extents is None:
            if len(pos):
                half_extents = np.abs(pos).max(axis=0)
            else:
                half_extents = np.zeros(3)
        self.half_extents = np.array(half_extents, dtype=np.float64).reshape(3)

    def __len__(self):
        return len(self.positions)

    @property
    def half_extent(self):
        """Largest half extent over the three axes (focal center roaming unit)."""
        return float(self.half_extents.max())

    def max_distance(self, margin=MAX_DISTANCE_MARGIN):
        """Normalization distance: the half diagonal plus a safety margin."""
        return float(np.sqrt(np.sum(self.half_extents ** 2)) * margin)


def build_grid(rows=12, cols=12, layers=12, spacing=1.2):
    """Regular lattice centred on the origin.

    Element ids are "sphere-<x>-<y>-<z>". The half extent per axis is
    count * spacing / 2, half a spacing beyond the outermost element.
    """
    offset = np.array([rows - 1, cols - 1, layers - 1], dtype=np.float64) * spacing / 2.0
    xs, ys, zs = np.meshgrid(np.arange(rows), np.arange(cols), np.arange(layers),
                             indexing="ij")
    idx = np.stack([xs.ravel(), ys.ravel(), zs.ravel()], axis=1)
    positions = idx * spacing - offset
    ids = [f"sphere-{x}-{y}-{z}" for x, y, z in idx]
    half_extents = np.array([rows, cols, layers], dtype=np.float64) * spacing / 2.0
    return Grid(positions, ids=ids, half_extents=half_extents)
