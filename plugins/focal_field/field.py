"""
Distance Field: focal centers -> per-element scale and color

For every grid element:

1. distance to each focal center whose weight is at least WEIGHT_EPSILON,
   divided by that weight (a fading center's distance grows toward infinity)
2. the minimum of those weighted distances
3. t = min(1, distance / max_distance)
4. scale = lut[floor(t * (LUT_SIZE - 1))], falling back to min_scale when
   the index is out of range or the entry is zero
5. color = near + (far - near) * t, a plain linear gradient that does not
   follow the falloff curve

With no qualifying center every element gets t = 1 (far scale, far tint).
"""

import math
from collections import namedtuple
from dataclasses import dataclass
from typing import Tuple

import numpy as np
from scipy.spatial.distance import cdist

from .lut import LUT_SIZE

WEIGHT_EPSILON = 0.001

FieldSample = namedtuple("FieldSample", ["scales", "colors", "t"])


@dataclass(frozen=True)
class SceneConfig:
    """Read-only per-frame snapshot of everything the field evaluation reads.

    Replaced wholesale when configuration changes, never mutated.
    """
    max_distance: float
    opacity: float
    lut: np.ndarray
    min_scale: float
    max_scale: float
    tint_near: Tuple[float, float, float]
    tint_far: Tuple[float, float, float]


def blend_tint(near, far, t):
    """Linear blend of two RGB triples at t in [0, 1]."""
    return tuple(n + (f - n) * t for n, f in zip(near, far))


def lookup_scale(lut, t, min_scale):
    """LUT scale for normalized distance t, min_scale when missing or zero."""
    idx = int(math.floor(t * (LUT_SIZE - 1)))
    if idx < 0 or idx >= len(lut):
        return min_scale
    scale = float(lut[idx])
    return scale if scale else min_scale


def sample_element(position, center_positions, weights, config):
    """Scale, color and t for a single element.

    Args:
        position: (3,) element position
        center_positions: Sequence of (3,) center positions
        weights: Sequence of center weights, same length
        config: SceneConfig

    Returns:
        (scale, (r, g, b), t)
    """
    dist = math.inf
    for center, w in zip(center_positions, weights):
        if w < WEIGHT_EPSILON:
            continue
        d = math.dist(position, center) / w
        if d < dist:
            dist = d
    if config.max_distance > 0:
        t = min(1.0, dist / config.max_distance)
    else:
        t = 1.0 if dist > 0 else 0.0
    scale = lookup_scale(config.lut, t, config.min_scale)
    return scale, blend_tint(config.tint_near, config.tint_far, t), t


class DistanceField:
    """Vectorized field evaluation over a fixed set of element positions.

    Work buffers are allocated once per grid. The arrays in the returned
    FieldSample are those buffers: they stay valid until the next evaluate()
    call, so copy them if they must outlive the frame.

    Args:
        positions: (N, 3) element positions (not modified)
    """

    def __init__(self, positions):
        self.positions = np.ascontiguousarray(positions, dtype=np.float64).reshape(-1, 3)
        n = len(self.positions)

        # Pre-allocate work buffers
        self._dist_buffers = {}  # center count -> (N, M) float64
        self._t = np.zeros(n, dtype=np.float64)
        self._scratch = np.zeros(n, dtype=np.float64)
        self._idx = np.zeros(n, dtype=np.intp)
        self._scales = np.zeros(n, dtype=np.float32)
        self._colors = np.zeros((n, 3), dtype=np.float32)

    def _dist_buffer(self, m):
        buf = self._dist_buffers.get(m)
        if buf is None:
            buf = np.empty((len(self.positions), m), dtype=np.float64)
            self._dist_buffers[m] = buf
        return buf

    def normalized_distance(self, center_positions, weights, max_distance):
        """(N,) t = min(1, weighted nearest distance / max_distance)."""
        centers = np.asarray(center_positions, dtype=np.float64).reshape(-1, 3)
        w = np.asarray(weights, dtype=np.float64).reshape(-1)
        if len(w) != len(centers):
            raise ValueError(f"{len(w)} weights for {len(centers)} centers")

        t = self._t
        qualify = w >= WEIGHT_EPSILON
        if len(self.positions) == 0:
            return t
        if not qualify.any():
            t.fill(1.0)
            return t

        dist = self._dist_buffer(len(centers))
        cdist(self.positions, centers, out=dist)
        dist /= np.where(qualify, w, 1.0)
        dist[:, ~qualify] = np.inf
        np.min(dist, axis=1, out=t)

        if max_distance > 0:
            t /= max_distance
        else:
            t[:] = np.where(t > 0, 1.0, 0.0)
        np.minimum(t, 1.0, out=t)
        return t

    def evaluate(self, center_positions, weights, config):
        """Scales and colors for every element.

        Args:
            center_positions: (M, 3) focal center positions
            weights: (M,) focal center weights
            config: SceneConfig snapshot for this frame

        Returns:
            FieldSample(scales (N,) float32, colors (N, 3) float32, t (N,))
        """
        t = self.normalized_distance(center_positions, weights, config.max_distance)

        # Scale: LUT lookup with min_scale fallback
        lut = np.asarray(config.lut)
        idx = self._idx
        scratch = self._scratch
        np.multiply(t, LUT_SIZE - 1, out=scratch)
        np.floor(scratch, out=scratch)
        idx[:] = scratch
        valid = (idx >= 0) & (idx < len(lut))
        scales = self._scales
        scales.fill(config.min_scale)
        scales[valid] = lut[idx[valid]]
        scales[scales == 0] = config.min_scale

        # Color: linear near -> far gradient over t
        near = np.asarray(config.tint_near, dtype=np.float32)
        far = np.asarray(config.tint_far, dtype=np.float32)
        colors = self._colors
        np.multiply(t[:, np.newaxis], far - near, out=colors)
        colors += near

        return FieldSample(scales, colors, t)

