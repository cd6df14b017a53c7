"""
Focal Center Animator

Up to MAX_CENTERS focal centers roam around the grid on Lissajous-like
orbits. Each center carries:

- a smoothed weight chasing 1.0 (active) or 0.0 (inactive), so changing the
  active count fades centers in and out instead of popping
- random phase, amplitude and frequency jitter fixed at creation time

The global randomness level blends every center from perfectly synchronized
motion (0) to its own idiosyncratic orbit (100). Amplitude jitter is never
above 1, so no coordinate ever leaves [-bound, bound].

Centers are never destroyed. Inactive ones keep orbiting with a decaying
weight, so re-activating one resumes from where it would have been.
"""

import logging
import math

import numpy as np

from .config import MAX_CENTERS, AnimationSettings
from .smoothing import SmoothedParameter

logger = logging.getLogger(__name__)

WEIGHT_RATE = 6.0
RANDOMNESS_RATE = 3.0
BASE_FREQUENCY = 0.2
Y_AMPLITUDE = 0.85
MARKER_THRESHOLD = 0.05

# Jitter ranges drawn once per center: [low, high)
PHASE_RANGE = (0.0, 2.0 * math.pi)
AMP_JITTER_RANGE = (0.6, 1.0)
FREQ_JITTER_RANGE = (1.0, 1.3)


def base_frequencies(index):
    """Per-axis frequency multipliers, offset per center to desynchronize them."""
    return (1.0 + index * 0.1, 1.35 + index * 0.1, 0.8 + index * 0.08)


def _lerp(a, b, f):
    return a + (b - a) * f


class FocalCenter:
    """One moving focal center.

    Args:
        index: Slot index (0-based), selects the base frequencies
        position: Initial (3,) position. Stored as given when it is a float64
            array, so the animator can hand in a row view of its buffer.
        phase: (3,) per-axis phase offsets in radians
        amp_jitter: (3,) amplitude jitter factors
        freq_jitter: (3,) frequency jitter factors
        weight: Initial weight (target starts equal to it)
    """

    def __init__(self, index, position, phase, amp_jitter, freq_jitter, weight=0.0):
        self.index = index
        if isinstance(position, np.ndarray) and position.dtype == np.float64:
            self.position = position
        else:
            self.position = np.array(position, dtype=np.float64)
        self.phase = tuple(float(p) for p in phase)
        self.amp_jitter = tuple(float(a) for a in amp_jitter)
        self.freq_jitter = tuple(float(f) for f in freq_jitter)
        self._weight = SmoothedParameter(float(weight), rate=WEIGHT_RATE)

    @classmethod
    def random(cls, index, rng, position):
        """Center with jitter drawn from rng."""
        phase = rng.uniform(*PHASE_RANGE, size=3)
        amp = rng.uniform(*AMP_JITTER_RANGE, size=3)
        freq = rng.uniform(*FREQ_JITTER_RANGE, size=3)
        return cls(index, position, phase, amp, freq)

    @property
    def weight(self):
        return self._weight.get_value()

    @property
    def weight_target(self):
        return self._weight.target

    @weight_target.setter
    def weight_target(self, value):
        self._weight.set_target(value)

    def update_weight(self, dt):
        self._weight.update(dt)

    def snap_weight(self, value=None):
        self._weight.snap(self.weight_target if value is None else value)

    def orbit(self, t, randomness, bound, out=None):
        """Write the orbit position at time t into out (default: self.position).

        Args:
            t: Animation time (already speed-scaled)
            randomness: Jitter blend in [0, 1]
            bound: Roaming bound (grid half extent * bounds scale)
            out: Optional (3,) array to write into

        Returns:
            The written array
        """
        if out is None:
            out = self.position
        fx, fy, fz = base_frequencies(self.index)
        jx, jy, jz = self.freq_jitter
        ax, ay, az = self.amp_jitter
        px, py, pz = self.phase

        fx *= _lerp(1.0, jx, randomness)
        fy *= _lerp(1.0, jy, randomness)
        fz *= _lerp(1.0, jz, randomness)

        out[0] = math.sin(t * BASE_FREQUENCY * fx + px) * bound * _lerp(1.0, ax, randomness)
        out[1] = math.sin(t * BASE_FREQUENCY * fy + py) * bound * Y_AMPLITUDE * _lerp(1.0, ay, randomness)
        out[2] = math.cos(t * BASE_FREQUENCY * fz + pz) * bound * _lerp(1.0, az, randomness)
        return out


class AnimatorState:
    """Cross-tick animation state: speed-scaled time and smoothed randomness.

    Time only advances while animation is enabled and is never reset, so
    pausing and resuming continues from the same point on every orbit.
    """

    def __init__(self, elapsed_time=0.0, randomness=0.0):
        self.elapsed_time = elapsed_time
        self._randomness = SmoothedParameter(randomness, rate=RANDOMNESS_RATE)

    @property
    def smoothed_randomness(self):
        return self._randomness.get_value()

    def set_randomness_target(self, value):
        self._randomness.set_target(value)

    def update_randomness(self, dt):
        self._randomness.update(dt)


def apply_weight_targets(centers, center_count):
    """Target 1.0 for the first center_count centers, 0.0 for the rest."""
    active = max(1, min(MAX_CENTERS, int(center_count)))
    for c in centers:
        c.weight_target = 1.0 if c.index < active else 0.0
    return active


def advance(state, centers, settings, dt, bound):
    """Advance animation by one tick.

    Weights always fade toward their targets. Time, randomness and positions
    only move while settings.enabled is true; positions are written in place.

    Args:
        state: AnimatorState to advance
        centers: Sequence of FocalCenter
        settings: AnimationSettings (speed, center_count, randomness, enabled)
        dt: Real time since the previous tick. Non-positive dt is a no-op.
        bound: Roaming bound for this tick

    Returns:
        True if positions were updated
    """
    if dt <= 0:
        return False

    apply_weight_targets(centers, settings.center_count)
    for c in centers:
        c.update_weight(dt)

    if not settings.enabled:
        return False

    state.elapsed_time += dt * settings.speed
    state.set_randomness_target(settings.randomness)
    state.update_randomness(dt)
    randomness = state.smoothed_randomness / 100.0

    t = state.elapsed_time
    for c in centers:
        c.orbit(t, randomness, bound)
    return True


class FocalCenterAnimator:
    """Owns the MAX_CENTERS focal centers and their AnimatorState.

    Center positions live in one (MAX_CENTERS, 3) buffer; each FocalCenter's
    position is a row view into it, so ticks allocate nothing.

    Args:
        half_extent: Grid half extent (roaming unit before bounds scaling)
        settings: Initial AnimationSettings
        seed: Seed for the jitter/reseed random source
        rng: numpy Generator to use instead of seeding a new one
    """

    def __init__(self, half_extent, settings=None, seed=None, rng=None):
        self.half_extent = float(half_extent)
        self.settings = settings if settings is not None else AnimationSettings()
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.state = AnimatorState(randomness=self.settings.randomness)

        self._positions = np.zeros((MAX_CENTERS, 3), dtype=np.float64)
        self._weights = np.zeros(MAX_CENTERS, dtype=np.float64)
        self.centers = []
        for i in range(MAX_CENTERS):
            row = self._positions[i]
            if i > 0:
                row[:] = (self.rng.random(3) - 0.5) * self.bound
            self.centers.append(FocalCenter.random(i, self.rng, row))
        apply_weight_targets(self.centers, self.settings.center_count)

    @property
    def bound(self):
        return self.half_extent * self.settings.bounds_scale

    @property
    def active_count(self):
        return self.settings.center_count

    def configure(self, settings):
        """Swap in new AnimationSettings.

        A new active count retargets weights; a new bounds scale reseeds
        positions.
        """
        old = self.settings
        self.settings = settings
        if settings.center_count != old.center_count:
            apply_weight_targets(self.centers, settings.center_count)
            logger.info("Active focal centers: %d -> %d",
                        old.center_count, settings.center_count)
        if settings.bounds_scale != old.bounds_scale:
            self.reseed_positions()

    def set_center_count(self, count):
        """Change the active count. Clamped to [1, MAX_CENTERS]."""
        self.configure(self.settings.model_copy(
            update={"center_count": max(1, min(MAX_CENTERS, int(count)))}))

    def reseed_positions(self):
        """Scatter all centers uniformly in (-0.5, 0.5) * bound per axis."""
        bound = self.bound
        for c in self.centers:
            c.position[:] = (self.rng.random(3) - 0.5) * bound
        logger.debug("Reseeded focal centers within bound %.3f", bound)

    def snap_weights(self):
        """Jump every weight to its target (e.g. at startup, skipping the fade)."""
        for c in self.centers:
            c.snap_weight()

    def tick(self, dt):
        return advance(self.state, self.centers, self.settings, dt, self.bound)

    def positions(self):
        """(MAX_CENTERS, 3) center positions. Shared buffer, do not modify."""
        return self._positions

    def weights(self):
        """(MAX_CENTERS,) current weights. Shared buffer, do not modify."""
        for i, c in enumerate(self.centers):
            self._weights[i] = c.weight
        return self._weights

    def marker_positions(self, threshold=MARKER_THRESHOLD):
        """Copies of the positions of centers whose weight is above threshold."""
        return [c.position.copy() for c in self.centers if c.weight > threshold]
