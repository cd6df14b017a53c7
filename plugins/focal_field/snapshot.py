"""
Headless Preview Snapshot

Draws one FrameOutput to an RGBA image with Pillow: an orthographic view
down the Z axis, each element a disc whose radius follows its scale, painted
back to front so nearer elements cover farther ones. Meant for eyeballing
presets from the CLI, not as a renderer.
"""

import numpy as np
from PIL import Image, ImageDraw

from .colors import to_uint8

BACKGROUND = (10, 10, 14, 255)
MARKER_COLOR = (255, 255, 255, 255)


def render_snapshot(frame, size=768, extent=None, element_radius=0.5, show_centers=True):
    """Render a FrameOutput to a PIL Image.

    Args:
        frame: FrameOutput from FrameDriver.step()
        size: Image width/height in pixels
        extent: World half-width mapped to the image (default: fits the grid)
        element_radius: World radius of an element at scale 1.0
        show_centers: Draw focal center markers

    Returns:
        PIL.Image.Image (RGBA)
    """
    positions = np.asarray(frame.positions)
    scales = np.asarray(frame.scales)
    if extent is None:
        extent = float(np.abs(positions[:, :2]).max()) * 1.15 if len(positions) else 1.0
        extent = max(extent, 1e-6)
    px_per_unit = size / (2.0 * extent)

    img = Image.new("RGBA", (size, size), BACKGROUND)
    overlay = Image.new("RGBA", (size, size), (0, 0, 0, 0))
    draw = ImageDraw.Draw(overlay)

    rgb = to_uint8(frame.colors)
    alpha = int(round(np.clip(frame.opacity, 0.0, 1.0) * 255))

    # Painter's order: far (low z) first
    order = np.argsort(positions[:, 2], kind="stable")
    cx = (positions[:, 0] + extent) * px_per_unit
    cy = (extent - positions[:, 1]) * px_per_unit
    radius = np.maximum(scales, 0.0) * element_radius * px_per_unit

    for i in order:
        r = radius[i]
        if r < 0.5:
            continue
        color = (int(rgb[i, 0]), int(rgb[i, 1]), int(rgb[i, 2]), alpha)
        draw.ellipse([cx[i] - r, cy[i] - r, cx[i] + r, cy[i] + r], fill=color)

    if show_centers:
        for p in frame.center_positions:
            mx = (p[0] + extent) * px_per_unit
            my = (extent - p[1]) * px_per_unit
            draw.ellipse([mx - 4, my - 4, mx + 4, my + 4], outline=MARKER_COLOR, width=2)

    return Image.alpha_composite(img, overlay)


def save_snapshot(frame, path, **kwargs):
    """Render and save as PNG. Returns the path."""
    render_snapshot(frame, **kwargs).save(path)
    return path
