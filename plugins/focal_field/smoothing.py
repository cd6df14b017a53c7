"""
EMA-Smoothed Values

Frame-rate independent exponential smoothing used for everything that
should glide rather than snap:

- focal center weights fading in/out when the active count changes
- the global randomness level when the slider moves live

Smoothing is expressed as a rate (1/seconds): after dt seconds the value has
covered 1 - exp(-dt * rate) of the remaining distance to its target.
"""

import math


class SmoothedParameter:
    """EMA wrapper for a single numeric value chasing a target.

    Rate controls the "feel":
    - rate=6: fast fade, ~5/6 of the way after 0.3s of simulated time
    - rate=3: slower drift for live slider changes
    """

    def __init__(self, initial_value, rate=6.0):
        """Initialize smoothed value.

        Args:
            initial_value: Starting value (both current and target)
            rate: Exponential smoothing rate in 1/seconds
        """
        self.target = initial_value
        self.current = initial_value
        self.rate = rate

    def set_target(self, new_target):
        self.target = new_target

    def update(self, dt):
        """Advance by delta-time.

        alpha = 1 - exp(-dt * rate)
        current += alpha * (target - current)

        alpha stays in [0, 1), so the value never overshoots its target.

        Args:
            dt: Time elapsed since last update
        """
        if dt <= 0:
            return
        alpha = 1.0 - math.exp(-dt * self.rate)
        self.current += alpha * (self.target - self.current)

    def get_value(self):
        return self.current

    def snap(self, value):
        """Immediately set both target and current (no smoothing)."""
        self.target = value
        self.current = value
