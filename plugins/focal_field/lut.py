"""
Scale Lookup Table

Pre-samples the falloff curve at LUT_SIZE evenly spaced normalized distances
so the per-element work at render time is a single index instead of a
bisection solve. Each entry is the final instance scale:

    lut[i] = min_scale + curve_y(i / (LUT_SIZE - 1)) * (max_scale - min_scale)

The curve value is not clamped, so an overshooting curve gives scales
outside [min_scale, max_scale].
"""

import logging
import math

import numpy as np

from .curve import sample_bezier_y

logger = logging.getLogger(__name__)

LUT_SIZE = 256


def lut_index(t, size=LUT_SIZE):
    """Index of normalized distance t in a table of `size` entries."""
    return int(math.floor(t * (size - 1)))


def generate_scale_lut(spec, size=LUT_SIZE):
    """Build a read-only (size,) float32 scale table from a FalloffSpec.

    Deterministic: no random state, so equal specs give bit-identical tables.
    """
    cp = spec.control_points
    span = spec.max_scale - spec.min_scale
    lut = np.zeros(size, dtype=np.float32)

    for i in range(size):
        t = i / (size - 1)
        normalized = sample_bezier_y(t, cp.p1x, cp.p1y, cp.p2x, cp.p2y,
                                     spec.start_y, spec.end_y)
        lut[i] = spec.min_scale + normalized * span

    lut.flags.writeable = False
    return lut


class LutBuilder:
    """Holds the current scale LUT and rebuilds it only when the falloff changes.

    The returned array is never modified afterwards. A rebuild swaps in a new
    array, so a frame that already grabbed the old one keeps a consistent
    table.
    """

    def __init__(self, size=LUT_SIZE):
        self.size = size
        self.lut = None
        self._lut_key = None  # Cache key for LUT rebuild
        self.rebuilds = 0

    def get(self, spec):
        key = spec.cache_key()
        if self.lut is None or key != self._lut_key:
            self.lut = generate_scale_lut(spec, self.size)
            self._lut_key = key
            self.rebuilds += 1
            logger.debug("Rebuilt scale LUT (%d): lut[0]=%.4f lut[-1]=%.4f",
                         self.rebuilds, self.lut[0], self.lut[-1])
        return self.lut
