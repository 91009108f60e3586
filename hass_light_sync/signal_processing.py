"""
signal_processing.py
Temporal smoothing of the per-cycle screen color.
"""
import numpy as np


class ColorSmoother:
    """
    Exponential moving average applied independently to R, G and B.

    new = factor * previous + (1 - factor) * current, computed in float32 and
    truncated to int before it is stored. A factor near 1 damps heavily
    (slow fades, no flicker); a factor of 0 passes the input straight through.
    The state starts at black, so the first cycles ramp up from (0, 0, 0).
    """

    def __init__(self, factor):
        self.factor = np.float32(factor)
        self.value = (0, 0, 0)

    def update(self, color):
        prev = np.array(self.value, dtype=np.float32)
        current = np.array(color, dtype=np.float32)
        blended = self.factor * prev + (np.float32(1.0) - self.factor) * current
        # Truncate toward zero, never round
        self.value = tuple(int(c) for c in blended)
        return self.value

    def reset(self):
        self.value = (0, 0, 0)
