"""
Cubic Bezier Falloff Curve

The falloff curve is a cubic Bezier anchored at (0, start_y) and (1, end_y)
with two interior control points (p1x, p1y) and (p2x, p2y). X is the
normalized distance, Y the normalized scale multiplier.

To read Y for a given X the parametric X(t) is inverted by bisection, which
relies on X(t) being monotonic. That holds whenever p1x <= p2x; the curve
editor keeps a minimum gap between the two X coordinates. If a caller breaks
that invariant the solver still stops after its fixed iteration budget and
returns its best estimate.
"""

BISECT_ITERATIONS = 24
BISECT_TOLERANCE = 1e-4


def clamp01(v):
    return min(1.0, max(0.0, v))


def cubic_bezier_coord(t, p0, p1, p2, p3):
    """One coordinate of a cubic Bezier at parameter t (coefficient form)."""
    c = 3.0 * (p1 - p0)
    b = 3.0 * (p2 - p1) - c
    a = p3 - p0 - c - b
    return a * t ** 3 + b * t ** 2 + c * t + p0


def solve_t_for_x(u, p1x, p2x):
    """Find the curve parameter t with X(t) ~= u by bisection.

    Runs at most BISECT_ITERATIONS halvings, stopping early once
    |X(mid) - u| < BISECT_TOLERANCE.

    Args:
        u: Target X, clamped to [0, 1]
        p1x: X of the first interior control point
        p2x: X of the second interior control point

    Returns:
        Parameter t in [0, 1]
    """
    target = clamp01(u)
    low = 0.0
    high = 1.0
    t = target

    for _ in range(BISECT_ITERATIONS):
        mid = (low + high) / 2.0
        x = cubic_bezier_coord(mid, 0.0, p1x, p2x, 1.0)
        t = mid
        if abs(x - target) < BISECT_TOLERANCE:
            break
        if x < target:
            low = mid
        else:
            high = mid

    return t


def sample_bezier_y(u, p1x, p1y, p2x, p2y, start_y=1.0, end_y=0.0):
    """Sample the falloff curve's Y at normalized X u.

    Args:
        u: Normalized X (distance), clamped to [0, 1]
        p1x, p1y: First interior control point
        p2x, p2y: Second interior control point
        start_y: Y of the anchor at X=0
        end_y: Y of the anchor at X=1

    Returns:
        Y value. Not clamped: control points can make the curve overshoot
        [0, 1], and that overshoot is passed through.
    """
    t = solve_t_for_x(u, p1x, p2x)
    return cubic_bezier_coord(t, start_y, p1y, p2y, end_y)


def solve(points, u, start_y=1.0, end_y=0.0):
    """sample_bezier_y for a CurveControlPoints-like object."""
    return sample_bezier_y(u, points.p1x, points.p1y, points.p2x, points.p2y,
                           start_y, end_y)
