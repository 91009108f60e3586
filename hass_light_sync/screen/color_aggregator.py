"""
color_aggregator.py

Reduces a captured frame to a single average RGB color.
"""

import numpy as np

from hass_light_sync.errors import ConfigError


class ColorAggregator:
    def __init__(self, width, height, skip_pixels=1):
        """
        Args:
            width, height: Monitor geometry read once at startup.
            skip_pixels: Only every nth pixel in capture order is summed.
        Raises:
            ConfigError: skip_pixels < 1, or it leaves no pixels to divide by.
        """
        if skip_pixels < 1:
            raise ConfigError(f"skip_pixels must be >= 1, got {skip_pixels}")
        self.skip_pixels = int(skip_pixels)
        self.size = (int(width) * int(height)) // self.skip_pixels
        if self.size == 0:
            raise ConfigError(
                f"skip_pixels={skip_pixels} is larger than the {width}x{height} frame"
            )

    def aggregate(self, frame):
        """
        Average every skip_pixels-th pixel of the frame.
        Args:
            frame: (height, width, 3) RGB array, or anything reshapeable to (-1, 3).
        Returns:
            tuple: (r, g, b) channel sums floor-divided by self.size, not clamped.
        """
        pixels = np.asarray(frame).reshape(-1, 3)
        # position % skip_pixels == 0
        sampled = pixels[::self.skip_pixels]
        totals = sampled.sum(axis=0, dtype=np.uint64)
        # Divisor is fixed at startup, even when skip_pixels leaves one extra sample
        return tuple(int(total) // self.size for total in totals)
