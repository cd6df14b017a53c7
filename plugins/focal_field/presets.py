"""
Focal Field Presets

Each preset is a named configuration known to look good on the default
12x12x12 grid. Keys are flat FieldConfig parameter names, plus:

- "reversed": boolean curve mode, expands to start_y/end_y (1,0) or (0,1)
- "hues": (near, far) hue pair in degrees, with optional "saturation" and
  "value", expands to tint_near/tint_far

The "group" field only orders presets for listing.
"""

PRESETS = {
    # =====================================================================
    # SINGLE CENTER
    # =====================================================================
    "classic": {
        "group": "single",
        "name": "Classic",
        "description": "One slow center, soft S-curve falloff",
        "p1x": 0.33, "p1y": 0.8, "p2x": 0.66, "p2y": 0.2,
        "reversed": False, "min_scale": 0.03, "max_scale": 2.0,
        "speed": 3.0, "center_count": 1, "randomness": 0.0, "bounds_scale": 2.0,
        "hues": (220, 260), "saturation": 0.75, "value": 0.65,
    },
    "linear": {
        "group": "single",
        "name": "Linear",
        "description": "Straight-line falloff, scale tracks distance exactly",
        "p1x": 0.33, "p1y": 0.67, "p2x": 0.67, "p2y": 0.33,
        "reversed": False, "min_scale": 0.1, "max_scale": 1.0,
        "speed": 2.0, "center_count": 1, "randomness": 0.0, "bounds_scale": 1.5,
        "hues": (0, 240),
    },
    "spotlight": {
        "group": "single",
        "name": "Spotlight",
        "description": "Tight bright core, everything else shrinks away",
        "p1x": 0.05, "p1y": 0.1, "p2x": 0.25, "p2y": 0.0,
        "reversed": False, "min_scale": 0.02, "max_scale": 2.4,
        "speed": 2.5, "center_count": 1, "randomness": 10.0, "bounds_scale": 1.5,
        "hues": (45, 200), "saturation": 0.85, "value": 0.8,
    },
    "bulge": {
        "group": "single",
        "name": "Bulge",
        "description": "Wide plateau with a late drop-off, overshoots near the center",
        "p1x": 0.4, "p1y": 1.0, "p2x": 0.75, "p2y": 1.0,
        "reversed": False, "min_scale": 0.05, "max_scale": 1.4,
        "speed": 1.5, "center_count": 1, "randomness": 0.0, "bounds_scale": 2.0,
        "hues": (300, 190),
    },

    # =====================================================================
    # SWARM (multiple centers)
    # =====================================================================
    "swarm": {
        "group": "swarm",
        "name": "Swarm",
        "description": "Three centers on their own orbits",
        "p1x": 0.25, "p1y": 0.9, "p2x": 0.55, "p2y": 0.1,
        "reversed": False, "min_scale": 0.03, "max_scale": 1.6,
        "speed": 3.0, "center_count": 3, "randomness": 80.0, "bounds_scale": 2.0,
        "hues": (170, 280),
    },
    "twins": {
        "group": "swarm",
        "name": "Twins",
        "description": "Two centers in near lockstep",
        "p1x": 0.33, "p1y": 0.8, "p2x": 0.66, "p2y": 0.2,
        "reversed": False, "min_scale": 0.03, "max_scale": 1.8,
        "speed": 2.0, "center_count": 2, "randomness": 20.0, "bounds_scale": 1.5,
        "hues": (20, 340),
    },

    # =====================================================================
    # INVERTED (small near the centers)
    # =====================================================================
    "hollow": {
        "group": "inverted",
        "name": "Hollow",
        "description": "Centers carve empty bubbles out of the grid",
        "p1x": 0.2, "p1y": 0.9, "p2x": 0.5, "p2y": 1.0,
        "reversed": True, "min_scale": 0.02, "max_scale": 0.9,
        "speed": 2.0, "center_count": 2, "randomness": 40.0, "bounds_scale": 1.2,
        "hues": (200, 30),
    },
    "ripple": {
        "group": "inverted",
        "name": "Ripple",
        "description": "Reversed S-curve with a single fast center",
        "p1x": 0.33, "p1y": 0.8, "p2x": 0.66, "p2y": 0.2,
        "reversed": True, "min_scale": 0.03, "max_scale": 1.2,
        "speed": 5.0, "center_count": 1, "randomness": 0.0, "bounds_scale": 1.0,
        "hues": (120, 220),
    },
}

GROUP_ORDER = ["single", "swarm", "inverted"]

PRESET_ORDER = [k for g in GROUP_ORDER for k, p in PRESETS.items() if p["group"] == g]


def get_preset(name):
    """Get a preset by name. Returns None if not found."""
    return PRESETS.get(name)


def list_presets(group=None):
    """Return list of (key, name, description) for presets.
    If group is specified, filter to that group only."""
    return [(k, PRESETS[k]["name"], PRESETS[k]["description"])
            for k in PRESET_ORDER
            if group is None or PRESETS[k]["group"] == group]
