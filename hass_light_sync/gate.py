"""
gate.py
Boolean "armed" flag shared by the event listener (writer) and the sampling loop (reader).
"""

import threading


class SharedGate:
    def __init__(self, armed=False):
        self._lock = threading.Lock()
        self._armed = bool(armed)

    def set(self, armed):
        with self._lock:
            self._armed = bool(armed)

    def get(self):
        with self._lock:
            return self._armed
