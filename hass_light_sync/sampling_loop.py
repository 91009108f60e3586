"""
sampling_loop.py
Capture -> aggregate -> smooth -> emit cycle, gated by the trigger entity.

Two states: idle (gate off, back off and re-check) and active (one capture and
at most one light command per cycle). Command failures propagate to the caller.
"""

import logging
import time

from hass_light_sync.errors import CaptureError

log = logging.getLogger(__name__)

IDLE_BACKOFF_S = 0.5
CAPTURE_COOLDOWN_S = 0.1

IDLE = 'idle'
ACTIVE = 'active'

# step() outcomes
STEP_IDLE = 'idle'
STEP_CAPTURE_FAILED = 'capture_failed'
STEP_EMITTED = 'emitted'


class SamplingLoop:
    def __init__(self, gate, frame_source, aggregator, smoother, builder, emitter,
                 grab_interval_ms, sleep=time.sleep, clock=time.monotonic):
        self.gate = gate
        self.frame_source = frame_source
        self.aggregator = aggregator
        self.smoother = smoother
        self.builder = builder
        self.emitter = emitter
        self.grab_interval_s = grab_interval_ms / 1000.0
        self._sleep = sleep
        self._clock = clock
        self.state = IDLE
        self.last_command = None
        self.fps = 0.0
        self._last_timestamp = clock()
        self._last_status_print = None

    def step(self):
        armed = self.gate.get()
        if armed != (self.state == ACTIVE):
            self.state = ACTIVE if armed else IDLE
            log.info("Light sync %s", "armed" if armed else "paused")
        if not armed:
            self._sleep(IDLE_BACKOFF_S)
            return STEP_IDLE

        try:
            frame = self.frame_source.capture_frame()
        except CaptureError as e:
            log.warning("%s", e)
            self._sleep(CAPTURE_COOLDOWN_S)
            return STEP_CAPTURE_FAILED

        average = self.aggregator.aggregate(frame)
        color = self.smoother.update(average)
        command = self.builder.build(color)

        now = self._clock()
        elapsed = now - self._last_timestamp
        self._last_timestamp = now
        self.fps = 1.0 / elapsed if elapsed > 0 else 0.0
        self._print_status(command, now)

        self.emitter.send(command)
        self.last_command = command
        self._sleep(self.grab_interval_s)
        return STEP_EMITTED

    def _print_status(self, command, now):
        if self._last_status_print is not None and now - self._last_status_print < 1.0:
            return
        self._last_status_print = now
        log.info(
            "Current average color: %s - Brightness: %d - FPS: %.1f",
            list(command.rgb_color), command.brightness, self.fps,
        )

    def run(self):
        while True:
            self.step()
