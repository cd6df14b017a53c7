"""
Focal Field Configuration

Everything the surrounding application can change at runtime arrives here
first. Values are clamped into range instead of rejected: the core has no
way to report a bad slider value back to a user, so it normalizes at this
boundary and logs a warning. Only values of the wrong type (e.g. a string
for speed) raise pydantic's ValidationError.

All models are frozen. A configuration change produces a new snapshot via
FieldConfig.with_updates(), so nothing reading the old one sees a half
update.
"""

import logging
from typing import Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .colors import dual_hue_tints, tint_from_hsv
from .presets import get_preset

logger = logging.getLogger(__name__)

MAX_CENTERS = 3
MIN_CONTROL_GAP = 0.02
MIN_SCALE_FLOOR = 0.001
MIN_SCALE_SPAN = 0.001
MIN_SPEED = 0.01

DEFAULT_HUE = 220.0
DEFAULT_SATURATION = 0.75
DEFAULT_VALUE = 0.65

DEFAULT_TINT_NEAR = tint_from_hsv(DEFAULT_HUE, DEFAULT_SATURATION, DEFAULT_VALUE)
DEFAULT_TINT_FAR = tint_from_hsv(260, DEFAULT_SATURATION, 0.30)

Color = Tuple[float, float, float]


def _clamp(name, value, lo=None, hi=None):
    clamped = value
    if lo is not None and clamped < lo:
        clamped = lo
    if hi is not None and clamped > hi:
        clamped = hi
    if clamped != value:
        logger.warning("%s=%r out of range, clamped to %r", name, value, clamped)
    return clamped


def _number(value, cast=float):
    try:
        return cast(value)
    except TypeError as exc:
        raise ValueError(str(exc)) from exc


def _clamp_color(name, value):
    try:
        rgb = tuple(float(c) for c in value)
    except TypeError as exc:
        raise ValueError(f"{name} must be an RGB triple") from exc
    if len(rgb) != 3:
        raise ValueError(f"{name} must be an RGB triple, got {len(rgb)} values")
    return tuple(_clamp(name, c, 0.0, 1.0) for c in rgb)


def anchors_for(reversed_=False):
    """(start_y, end_y) for the boolean curve mode.

    Normal: large near the center, small far away (1 -> 0).
    Reversed: small near the center, large far away (0 -> 1).
    """
    return (0.0, 1.0) if reversed_ else (1.0, 0.0)


def enforce_gap(p1x, p2x, gap=MIN_CONTROL_GAP):
    """Keep p1x at least `gap` left of p2x (curve editor helper).

    Moves whichever point has room; the pair stays inside [0, 1].
    """
    p1x = min(1.0, max(0.0, p1x))
    p2x = min(1.0, max(0.0, p2x))
    if p2x - p1x >= gap:
        return p1x, p2x
    p2x = min(1.0, p1x + gap)
    p1x = min(p1x, p2x - gap)
    return p1x, p2x


class CurveControlPoints(BaseModel):
    """Interior control points of the falloff Bezier."""

    model_config = ConfigDict(frozen=True)

    p1x: float = Field(default=0.33, description="First control point X")
    p1y: float = Field(default=0.8, description="First control point Y")
    p2x: float = Field(default=0.66, description="Second control point X")
    p2y: float = Field(default=0.2, description="Second control point Y")

    @field_validator("p1x", "p1y", "p2x", "p2y", mode="before")
    @classmethod
    def _unit_range(cls, v, info):
        return _clamp(info.field_name, _number(v), 0.0, 1.0)


class FalloffSpec(BaseModel):
    """Everything the scale LUT depends on. Equal specs build equal LUTs."""

    model_config = ConfigDict(frozen=True)

    control_points: CurveControlPoints = Field(default_factory=CurveControlPoints)
    start_y: float = Field(default=1.0, description="Curve Y at distance 0")
    end_y: float = Field(default=0.0, description="Curve Y at max distance")
    min_scale: float = Field(default=0.03, description="Scale for normalized value 0")
    max_scale: float = Field(default=2.0, description="Scale for normalized value 1")

    @field_validator("start_y", "end_y", mode="before")
    @classmethod
    def _anchor_range(cls, v, info):
        return _clamp(info.field_name, _number(v), 0.0, 1.0)

    @field_validator("min_scale", mode="before")
    @classmethod
    def _positive_min(cls, v):
        return _clamp("min_scale", _number(v), MIN_SCALE_FLOOR)

    @model_validator(mode="after")
    def _ordered_bounds(self):
        if self.max_scale <= self.min_scale:
            widened = self.min_scale + MIN_SCALE_SPAN
            logger.warning("max_scale=%r <= min_scale=%r, widened to %r",
                           self.max_scale, self.min_scale, widened)
            object.__setattr__(self, "max_scale", widened)  # model is frozen
        return self

    def cache_key(self):
        cp = self.control_points
        return (cp.p1x, cp.p1y, cp.p2x, cp.p2y,
                self.start_y, self.end_y, self.min_scale, self.max_scale)


class AnimationSettings(BaseModel):
    """Focal center motion knobs."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = Field(default=True, description="Dynamic mode on/off")
    speed: float = Field(default=3.0, description="Time multiplier")
    center_count: int = Field(default=1, description="Active focal centers")
    randomness: float = Field(default=0.0, description="Per-center jitter, percent")
    bounds_scale: float = Field(default=2.0, description="Roaming bound multiplier")

    @field_validator("speed", mode="before")
    @classmethod
    def _positive_speed(cls, v):
        return _clamp("speed", _number(v), MIN_SPEED)

    @field_validator("center_count", mode="before")
    @classmethod
    def _count_range(cls, v):
        return _clamp("center_count", _number(v, int), 1, MAX_CENTERS)

    @field_validator("randomness", mode="before")
    @classmethod
    def _percent(cls, v):
        return _clamp("randomness", _number(v), 0.0, 100.0)

    @field_validator("bounds_scale", mode="before")
    @classmethod
    def _bounds_floor(cls, v):
        return _clamp("bounds_scale", _number(v), 1.0)


_FALLOFF_KEYS = {"start_y", "end_y", "min_scale", "max_scale"}
_CURVE_KEYS = {"p1x", "p1y", "p2x", "p2y"}
_ANIMATION_KEYS = set(AnimationSettings.model_fields)


class FieldConfig(BaseModel):
    """Full runtime configuration of the focal field."""

    model_config = ConfigDict(frozen=True)

    falloff: FalloffSpec = Field(default_factory=FalloffSpec)
    animation: AnimationSettings = Field(default_factory=AnimationSettings)
    opacity: float = Field(default=0.5, description="Instance opacity")
    tint_near: Color = Field(default=DEFAULT_TINT_NEAR, description="Color at distance 0")
    tint_far: Color = Field(default=DEFAULT_TINT_FAR, description="Color at max distance")
    # Load-time: changing these means recreating the grid
    grid_size: int = Field(default=12, description="Elements per axis")
    spacing: float = Field(default=1.2, description="Distance between elements")
    # Renderer-only, passed through untouched
    sphere_segments: int = Field(default=16, description="Mesh detail")

    @field_validator("opacity", mode="before")
    @classmethod
    def _opacity_range(cls, v):
        return _clamp("opacity", _number(v), 0.0, 1.0)

    @field_validator("tint_near", "tint_far", mode="before")
    @classmethod
    def _color_range(cls, v, info):
        return _clamp_color(info.field_name, v)

    @field_validator("grid_size", mode="before")
    @classmethod
    def _grid_floor(cls, v):
        return _clamp("grid_size", _number(v, int), 1)

    @field_validator("spacing", mode="before")
    @classmethod
    def _spacing_floor(cls, v):
        return _clamp("spacing", _number(v), 1e-3)

    @classmethod
    def from_preset(cls, key):
        preset = get_preset(key)
        if preset is None:
            raise KeyError(f"Unknown preset: {key}")
        return cls().with_updates(**preset_params(preset))

    def with_updates(self, **kwargs):
        """New FieldConfig with flat parameter names applied.

        Accepts p1x/p1y/p2x/p2y, start_y/end_y/min_scale/max_scale, every
        AnimationSettings field, and the top-level fields. Unknown names
        raise KeyError.
        """
        data = self.model_dump()
        for key, val in kwargs.items():
            if key in _CURVE_KEYS:
                data["falloff"]["control_points"][key] = val
            elif key in _FALLOFF_KEYS:
                data["falloff"][key] = val
            elif key in _ANIMATION_KEYS:
                data["animation"][key] = val
            elif key in FieldConfig.model_fields:
                data[key] = val
            else:
                raise KeyError(f"Unknown parameter: {key}")
        return FieldConfig.model_validate(data)


def preset_params(preset):
    """Flatten a preset dict into with_updates() keyword arguments."""
    params = {}
    for key, val in preset.items():
        if key in ("group", "name", "description"):
            continue
        if key == "reversed":
            params["start_y"], params["end_y"] = anchors_for(val)
        elif key == "hues":
            near_hue, far_hue = val
            sat = preset.get("saturation", 0.75)
            value = preset.get("value", 0.65)
            params["tint_near"], params["tint_far"] = dual_hue_tints(
                near_hue, far_hue, sat, value)
        elif key in ("saturation", "value"):
            continue
        else:
            params[key] = val
    return params
