"""
FrameDriver: per-tick orchestration of the focal field

Owns the grid, the configuration snapshot, the scale LUT, the focal center
animator and the distance field. The host renderer calls step(dt) once per
display frame and consumes the returned FrameOutput (or registers a
listener).

Usage:
    from focal_field.driver import FrameDriver
    driver = FrameDriver.from_preset("swarm", seed=7)
    out = driver.step(0.016)
    out.scales, out.colors, out.center_positions

Single-threaded: configuration changes and ticks must come from the same
thread. A configuration change swaps in a new SceneConfig (and, when the
curve or scale bounds changed, a new LUT array), so a frame never mixes old
and new tables.
"""

import logging

import numpy as np

from .animator import FocalCenterAnimator
from .colors import tint_from_hsv
from .config import (DEFAULT_HUE, DEFAULT_SATURATION, DEFAULT_VALUE,
                     FieldConfig, anchors_for, preset_params)
from .field import DistanceField, SceneConfig
from .grid import build_grid
from .lut import LutBuilder
from .presets import get_preset

logger = logging.getLogger(__name__)

# Color picker knobs (turned into tint_near / tint_far)
_HSV_KEYS = ("hue", "saturation", "value", "far_hue")


class FrameOutput:
    """Everything the renderer needs for one frame.

    scales and colors are the distance field's work buffers: valid until the
    next step(). Copy them to keep a frame around.
    """

    def __init__(self, frame, elapsed_time, positions, scales, colors, opacity,
                 center_positions, sphere_segments):
        self.frame = frame
        self.elapsed_time = elapsed_time
        self.positions = positions
        self.scales = scales
        self.colors = colors
        self.opacity = opacity
        self.center_positions = center_positions
        self.sphere_segments = sphere_segments

    def __len__(self):
        return len(self.scales)

    def transforms(self):
        """(N, 4, 4) instance matrices: uniform scale, fixed translation."""
        n = len(self.scales)
        m = np.zeros((n, 4, 4), dtype=np.float32)
        m[:, 0, 0] = self.scales
        m[:, 1, 1] = self.scales
        m[:, 2, 2] = self.scales
        m[:, :3, 3] = self.positions
        m[:, 3, 3] = 1.0
        return m

    @property
    def stats(self):
        return {
            "frame": self.frame,
            "time": float(self.elapsed_time),
            "scale_mean": float(self.scales.mean()) if len(self.scales) else 0.0,
            "scale_min": float(self.scales.min()) if len(self.scales) else 0.0,
            "scale_max": float(self.scales.max()) if len(self.scales) else 0.0,
            "centers": len(self.center_positions),
        }


class FrameDriver:
    """Headless focal field core.

    Args:
        config: Initial FieldConfig (default: FieldConfig())
        grid: Grid to animate (default: built from config.grid_size/spacing)
        seed: Seed for focal center jitter
        rng: numpy Generator used instead of seed
        snap_weights: Start with centers at full weight instead of fading in
    """

    def __init__(self, config=None, grid=None, seed=None, rng=None, snap_weights=False):
        self.config = config if config is not None else FieldConfig()
        self._custom_grid = grid is not None
        self.grid = grid if grid is not None else self._build_grid(self.config)
        self.field = DistanceField(self.grid.positions)
        self.lut_builder = LutBuilder()
        self.animator = FocalCenterAnimator(
            self.grid.half_extent, self.config.animation, seed=seed, rng=rng)
        if snap_weights:
            self.animator.snap_weights()

        # Color picker state. far_hue stays None until set, so the default
        # far tint (darker value) is left alone by near-tint edits.
        self._hsv = {"hue": DEFAULT_HUE, "saturation": DEFAULT_SATURATION,
                     "value": DEFAULT_VALUE, "far_hue": None}
        self.frame = 0
        self._listeners = []
        self._latest = None
        self.scene = self._build_scene()

    @classmethod
    def from_preset(cls, key, **kwargs):
        driver = cls(config=FieldConfig.from_preset(key), **kwargs)
        driver._load_picker(get_preset(key))
        return driver

    # -----------------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------------

    def apply_preset(self, key):
        """Switch to a named preset. Unknown keys are logged and ignored."""
        preset = get_preset(key)
        if preset is None:
            logger.warning("Unknown preset: %s", key)
            return False
        self.apply_config(self.config.with_updates(**preset_params(preset)))
        self._load_picker(preset)
        logger.info("Applied preset %s", key)
        return True

    def set_runtime_params(self, **kwargs):
        """Set runtime parameters by flat name.

        Supported keys:
            preset: Switch to named preset (applied first)
            reversed: Boolean curve mode, sets start_y/end_y
            hue, saturation, value: Near tint from HSV (hue in degrees)
            far_hue: Far tint hue, same saturation/value
            any FieldConfig.with_updates() name: p1x..p2y, start_y, end_y,
                min_scale, max_scale, enabled, speed, center_count,
                randomness, bounds_scale, opacity, tint_near, tint_far,
                grid_size, spacing, sphere_segments

        Raises:
            KeyError: for unknown parameter names
        """
        kwargs = dict(kwargs)
        preset = kwargs.pop("preset", None)
        if preset is not None:
            self.apply_preset(getattr(preset, "value", preset))

        updates = {}
        hsv = dict(self._hsv)
        hsv_changed = False
        for key, val in kwargs.items():
            if key == "reversed":
                updates["start_y"], updates["end_y"] = anchors_for(bool(val))
            elif key in _HSV_KEYS:
                hsv[key] = float(val)
                hsv_changed = True
            else:
                updates[key] = val

        if hsv_changed:
            sat, value = hsv["saturation"], hsv["value"]
            updates.setdefault("tint_near", tint_from_hsv(hsv["hue"], sat, value))
            if hsv["far_hue"] is not None:
                updates.setdefault("tint_far", tint_from_hsv(hsv["far_hue"], sat, value))

        if updates:
            # Picker state only sticks once the whole batch validated
            self.apply_config(self.config.with_updates(**updates))
            self._hsv = hsv

    def apply_config(self, config):
        """Swap in a whole new FieldConfig."""
        old = self.config
        self.config = config
        if not self._custom_grid and (config.grid_size != old.grid_size
                                      or config.spacing != old.spacing):
            self._rebuild_grid(config)
        if config.animation != old.animation:
            self.animator.configure(config.animation)
        self.scene = self._build_scene()

    def step(self, dt):
        """Advance by one rendered frame and publish the result.

        Animation time and center positions only move while animation is
        enabled; weights keep fading and the field is always re-evaluated,
        so config changes show up while paused.

        Args:
            dt: Real time elapsed since the previous frame (seconds)

        Returns:
            FrameOutput
        """
        self.animator.tick(dt)
        scene = self.scene
        sample = self.field.evaluate(self.animator.positions(),
                                     self.animator.weights(), scene)
        out = FrameOutput(
            frame=self.frame,
            elapsed_time=self.animator.state.elapsed_time,
            positions=self.grid.positions,
            scales=sample.scales,
            colors=sample.colors,
            opacity=scene.opacity,
            center_positions=self.animator.marker_positions(),
            sphere_segments=self.config.sphere_segments,
        )
        self.frame += 1
        self._latest = out
        for callback in self._listeners:
            callback(out)
        return out

    def refresh(self):
        """Re-evaluate the field without advancing time."""
        return self.step(0.0)

    def add_listener(self, callback):
        """Register callback(FrameOutput), called after every step()."""
        self._listeners.append(callback)

    def remove_listener(self, callback):
        self._listeners.remove(callback)

    @property
    def latest_frame(self):
        return self._latest

    @property
    def lut(self):
        return self.scene.lut

    # -----------------------------------------------------------------------
    # Internals
    # -----------------------------------------------------------------------

    def _load_picker(self, preset):
        if "hues" not in preset:
            return
        near_hue, far_hue = preset["hues"]
        self._hsv = {"hue": float(near_hue),
                     "saturation": float(preset.get("saturation", DEFAULT_SATURATION)),
                     "value": float(preset.get("value", DEFAULT_VALUE)),
                     "far_hue": float(far_hue)}

    @staticmethod
    def _build_grid(config):
        n = config.grid_size
        return build_grid(n, n, n, config.spacing)

    def _rebuild_grid(self, config):
        self.grid = self._build_grid(config)
        self.field = DistanceField(self.grid.positions)
        self.animator.half_extent = self.grid.half_extent
        self.animator.reseed_positions()
        logger.info("Rebuilt grid: %d elements", len(self.grid))

    def _build_scene(self):
        cfg = self.config
        return SceneConfig(
            max_distance=self.grid.max_distance(),
            opacity=cfg.opacity,
            lut=self.lut_builder.get(cfg.falloff),
            min_scale=cfg.falloff.min_scale,
            max_scale=cfg.falloff.max_scale,
            tint_near=cfg.tint_near,
            tint_far=cfg.tint_far,
        )
