"""
Tint Color Helpers

The renderer's color pickers hand over hue/saturation/value (or two hues for
the dual-hue picker). These helpers turn them into the RGB triples in [0, 1]
that the distance field blends between.
"""

import numpy as np


def hsv_to_rgb(h, s, v):
    """Convert HSV to an RGB tuple. h in [0, 1) (wraps), s/v in [0, 1]."""
    h = h % 1.0
    i = int(h * 6.0)
    f = h * 6.0 - i
    p = v * (1.0 - s)
    q = v * (1.0 - f * s)
    t = v * (1.0 - (1.0 - f) * s)
    i %= 6
    if i == 0:
        r, g, b = v, t, p
    elif i == 1:
        r, g, b = q, v, p
    elif i == 2:
        r, g, b = p, v, t
    elif i == 3:
        r, g, b = p, q, v
    elif i == 4:
        r, g, b = t, p, v
    else:
        r, g, b = v, p, q
    return (r, g, b)


def tint_from_hsv(hue_deg, saturation, value):
    """Tint from a hue in degrees plus saturation/value (clamped to [0, 1])."""
    s = min(1.0, max(0.0, saturation))
    v = min(1.0, max(0.0, value))
    return hsv_to_rgb(hue_deg / 360.0, s, v)


def dual_hue_tints(near_hue_deg, far_hue_deg, saturation=0.75, value=0.65):
    """Near/far tint pair for the dual-hue picker (shared saturation/value)."""
    return (tint_from_hsv(near_hue_deg, saturation, value),
            tint_from_hsv(far_hue_deg, saturation, value))


def to_uint8(colors):
    """(N, 3) float colors in [0, 1] -> uint8 [0, 255]."""
    out = np.clip(np.asarray(colors, dtype=np.float32) * 255.0, 0, 255)
    return out.astype(np.uint8)
