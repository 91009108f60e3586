"""soak_test_synthetic_screen.py

Long-run synthetic stress test for the sampling loop.
- Generates deterministic synthetic frames (no real screen capture)
- Flips the trigger gate on a schedule (no real Home Assistant)
- Injects spurious capture failures
- Validates every light command and writes an optional JSON summary

Usage:
  pip install -e .
  python tools/soak_test_synthetic_screen.py --seconds 180 --fps 25 --json-out logs/soak.json
  python tools/soak_test_synthetic_screen.py --matrix --seconds 1800 --json-out logs/soak_matrix.json
"""

from __future__ import annotations

import argparse
import json
import time
from pathlib import Path

import numpy as np

from hass_light_sync.command_builder import CommandBuilder
from hass_light_sync.command_emitter import CommandEmitter
from hass_light_sync.config import Config
from hass_light_sync.errors import CaptureError
from hass_light_sync.gate import SharedGate
from hass_light_sync.sampling_loop import STEP_CAPTURE_FAILED, STEP_EMITTED, SamplingLoop
from hass_light_sync.screen.color_aggregator import ColorAggregator
from hass_light_sync.signal_processing import ColorSmoother


def make_frame_pattern(t: float, w: int = 64, h: int = 36) -> np.ndarray:
    """Cycle through solid colors, gradients, and noise."""
    phase = int(t) % 8

    if phase in (0, 1):
        colors = ([255, 0, 0], [0, 255, 0], [0, 0, 255])
        c = colors[int(t * 2) % len(colors)]
        img = np.zeros((h, w, 3), dtype=np.uint8)
        img[:, :, :] = np.array(c, dtype=np.uint8)
        return img

    if phase == 2:
        # Pure white, max brightness
        return np.full((h, w, 3), 255, dtype=np.uint8)

    if phase == 3:
        # Black screen
        return np.zeros((h, w, 3), dtype=np.uint8)

    if phase in (4, 5):
        img = np.zeros((h, w, 3), dtype=np.uint8)
        x = np.linspace(0, 1, w, dtype=np.float32)
        img[:, :, 0] = (255 * (0.5 + 0.5 * np.sin(2 * np.pi * (x + 0.05 * t)))).astype(np.uint8)[None, :]
        img[:, :, 1] = (255 * (0.5 + 0.5 * np.sin(2 * np.pi * (x + 0.05 * t + 0.33)))).astype(np.uint8)[None, :]
        img[:, :, 2] = (255 * (0.5 + 0.5 * np.sin(2 * np.pi * (x + 0.05 * t + 0.66)))).astype(np.uint8)[None, :]
        return img

    rng = np.random.default_rng(int(t * 1000) & 0xFFFF)
    return rng.integers(0, 256, size=(h, w, 3), dtype=np.uint8)


class SyntheticFrameSource:
    def __init__(self, start: float, failure_rate: float, w: int = 64, h: int = 36):
        self.start = start
        self.w = w
        self.h = h
        self.failure_rate = failure_rate
        self.rng = np.random.default_rng(7)

    def geometry(self):
        return self.w, self.h

    def capture_frame(self):
        if self.rng.random() < self.failure_rate:
            raise CaptureError("synthetic capture failure")
        return make_frame_pattern(time.time() - self.start, self.w, self.h)


class RecordingHub:
    def __init__(self, max_channel=255):
        self.max_channel = max_channel
        self.calls = 0
        self.last = None

    def call_service(self, domain, service, service_data=None):
        if (domain, service) != ('light', 'turn_on'):
            raise AssertionError(f"Unexpected service {domain}.{service}")
        validate_service_data(service_data, self.max_channel)
        self.calls += 1
        self.last = service_data


def validate_service_data(data: dict, max_channel: int = 255) -> None:
    rgb = data['rgb_color']
    if len(rgb) != 3 or not all(isinstance(c, int) and 0 <= c <= max_channel for c in rgb):
        raise AssertionError(f"Bad rgb_color {rgb}")
    if data['brightness'] != max(rgb):
        raise AssertionError(f"Brightness {data['brightness']} != max({rgb})")


def channel_ceiling(w: int, h: int, skip_pixels: int) -> int:
    # An unclamped mean may exceed 255 when skip_pixels leaves one extra sample
    sampled = -(-(w * h) // skip_pixels)
    return 255 * sampled // ((w * h) // skip_pixels)


# (name, share of --seconds, skip_pixels, smoothing)
MATRIX = (
    ('raw', 0.2, 1, 0.0),
    ('default', 0.4, 3, 0.8),
    ('heavy', 0.4, 97, 0.97),
)


def run_soak(seconds, fps, skip_pixels, smoothing, failure_rate, gate_period, verbose=True):
    cfg = Config.from_dict({
        'api_endpoint': 'ws://localhost:8123/api/websocket',
        'light_entity_name': 'light.soak_test',
        'trigger_entity_name': 'input_boolean.soak_test',
        'token': 'synthetic',
        'transition': 0.2,
        'grab_interval': int(1000 / max(fps, 1e-3)),
        'skip_pixels': skip_pixels,
        'smoothing_factor': smoothing,
        'monitor_id': 0,
    })

    start = time.time()
    source = SyntheticFrameSource(start, failure_rate)
    width, height = source.geometry()
    hub = RecordingHub(channel_ceiling(width, height, cfg.skip_pixels))
    gate = SharedGate(True)
    loop = SamplingLoop(
        gate=gate,
        frame_source=source,
        aggregator=ColorAggregator(width, height, cfg.skip_pixels),
        smoother=ColorSmoother(cfg.smoothing_factor),
        builder=CommandBuilder(cfg),
        emitter=CommandEmitter(cfg, hub),
        grab_interval_ms=cfg.grab_interval,
    )

    counts = {}
    end = start + seconds
    last_print = start
    while time.time() < end:
        now = time.time()
        gate.set(int((now - start) / gate_period) % 2 == 0)
        outcome = loop.step()
        counts[outcome] = counts.get(outcome, 0) + 1
        if outcome == STEP_EMITTED and hub.last != loop.last_command.service_data():
            raise AssertionError(f"Hub saw {hub.last}, loop built {loop.last_command}")

        if verbose and now - last_print > 5.0:
            print(
                f"t={now - start:6.1f}s state={loop.state} color={hub.last and hub.last['rgb_color']} "
                f"fps={loop.fps:5.1f} commands={hub.calls}"
            )
            last_print = now

    if counts.get(STEP_EMITTED, 0) != hub.calls:
        raise AssertionError(f"Emitted {counts.get(STEP_EMITTED, 0)} cycles but hub saw {hub.calls} commands")
    if failure_rate > 0 and hub.calls > 100 and not counts.get(STEP_CAPTURE_FAILED):
        print("Warning: no capture failures were injected")

    return {
        'seconds': seconds,
        'fps': fps,
        'skip_pixels': skip_pixels,
        'smoothing': smoothing,
        'steps': counts,
        'commands': hub.calls,
        'last_command': hub.last,
    }


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument('--seconds', type=float, default=180.0)
    ap.add_argument('--fps', type=float, default=25.0)
    ap.add_argument('--skip-pixels', type=int, default=3)
    ap.add_argument('--smoothing', type=float, default=0.8)
    ap.add_argument('--failure-rate', type=float, default=0.02)
    ap.add_argument('--gate-period', type=float, default=10.0,
                    help="Seconds between trigger flips (armed half the time)")
    ap.add_argument('--matrix', action='store_true',
                    help="Split --seconds across raw, default and heavy-smoothing scenarios")
    ap.add_argument('--json-out', type=str, default=None)
    args = ap.parse_args()

    if args.matrix:
        summary = {}
        for name, share, stride, smoothing in MATRIX:
            print(f"--- {name}: skip_pixels={stride} smoothing={smoothing}")
            summary[name] = run_soak(args.seconds * share, args.fps, stride, smoothing,
                                     args.failure_rate, args.gate_period)
    else:
        summary = run_soak(args.seconds, args.fps, args.skip_pixels, args.smoothing,
                           args.failure_rate, args.gate_period)

    if args.json_out:
        out = Path(args.json_out)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(json.dumps(summary, indent=2), encoding='utf-8')
    print(f"DONE. {json.dumps(summary)}")


if __name__ == '__main__':
    main()
