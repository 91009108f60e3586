"""
frame_source.py

Grabs full-resolution frames from one monitor using mss.
"""

import logging

import mss
import numpy as np
from mss.exception import ScreenShotError

from hass_light_sync.errors import CaptureError, ConfigError

log = logging.getLogger(__name__)


class FrameSource:
    def __init__(self, monitor_id=0):
        """
        Args:
            monitor_id: Zero-based physical monitor index. mss keeps the virtual
                union of all screens at index 0, so monitor n is sct.monitors[n + 1].
        """
        self.monitor_id = monitor_id
        self.monitor = self._resolve_monitor(monitor_id)

    @staticmethod
    def _resolve_monitor(monitor_id):
        try:
            with mss.mss() as sct:
                monitors = sct.monitors[1:]
        except ScreenShotError as e:
            raise ConfigError(f"Failed to get capture object: {e}") from e
        if not 0 <= monitor_id < len(monitors):
            raise ConfigError(
                f"Monitor {monitor_id} not found ({len(monitors)} monitor(s) available)"
            )
        monitor = dict(monitors[monitor_id])
        log.debug("Capturing monitor %d: %s", monitor_id, monitor)
        return monitor

    def geometry(self):
        """Return (width, height) of the captured monitor in pixels."""
        return int(self.monitor['width']), int(self.monitor['height'])

    def capture_frame(self):
        """
        Capture the monitor.
        Returns:
            np.ndarray: (height, width, 3) uint8 image in RGB order.
        Raises:
            CaptureError: the grab failed; the caller may retry.
        """
        try:
            with mss.mss() as sct:
                img = np.array(sct.grab(self.monitor))
        except ScreenShotError as e:
            raise CaptureError(f"Failed to grab frame: {e}") from e
        # Convert BGRA to RGB
        return img[..., :3][..., ::-1]
