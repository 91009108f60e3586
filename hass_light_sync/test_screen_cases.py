"""test_screen_cases.py

Synthetic, deterministic tests for the screen color algorithm.
These tests avoid real screen capture and validate the averaging and smoothing invariants.
"""

import unittest
from unittest import mock

import numpy as np

from hass_light_sync.errors import CaptureError, ConfigError
from hass_light_sync.screen.color_aggregator import ColorAggregator
from hass_light_sync.screen.frame_source import FrameSource
from hass_light_sync.signal_processing import ColorSmoother


def _make_solid_frame(rgb, w=64, h=36):
    img = np.zeros((h, w, 3), dtype=np.uint8)
    img[:, :, :] = np.array(rgb, dtype=np.uint8)
    return img


def _make_alternating_frame(even_rgb, odd_rgb, w=64, h=36):
    img = np.zeros((h * w, 3), dtype=np.uint8)
    img[0::2] = np.array(even_rgb, dtype=np.uint8)
    img[1::2] = np.array(odd_rgb, dtype=np.uint8)
    return img.reshape(h, w, 3)


class TestColorAggregator(unittest.TestCase):
    def test_uniform_frame_averages_to_itself_for_every_stride(self):
        for rgb in ([255, 0, 0], [0, 255, 0], [12, 34, 56], [255, 255, 255], [0, 0, 0]):
            img = _make_solid_frame(rgb)
            for stride in (1, 2, 3, 5, 7, 64, 256, 2304):
                agg = ColorAggregator(64, 36, stride)
                self.assertEqual(agg.aggregate(img), tuple(rgb), msg=f"rgb={rgb} stride={stride}")

    def test_divisor_is_fixed_by_startup_geometry(self):
        # 2x2 at stride 3 samples positions 0 and 3 but size = 4 // 3 = 1
        img = _make_solid_frame([100, 100, 100], w=2, h=2)
        agg = ColorAggregator(2, 2, 3)
        self.assertEqual(agg.size, 1)
        self.assertEqual(agg.aggregate(img), (200, 200, 200))

    def test_extra_sample_on_full_hd_frame(self):
        # 1920 * 1080 // 7 = 296228 while 296229 pixels are sampled
        img = _make_solid_frame([100, 100, 100], w=1920, h=1080)
        img[0, 0] = 0
        agg = ColorAggregator(1920, 1080, 7)
        self.assertEqual(agg.size, 296228)
        self.assertEqual(agg.aggregate(img), (100, 100, 100))

    def test_stride_samples_only_even_positions(self):
        img = _make_alternating_frame([200, 10, 10], [0, 0, 250])
        for stride in (2, 4, 6):
            agg = ColorAggregator(64, 36, stride)
            self.assertEqual(agg.aggregate(img), (200, 10, 10))

    def test_stride_one_averages_everything(self):
        img = _make_alternating_frame([200, 0, 0], [0, 0, 100])
        agg = ColorAggregator(64, 36, 1)
        self.assertEqual(agg.aggregate(img), (100, 0, 50))

    def test_average_truncates(self):
        # (0 + 255) / 2 = 127.5 -> 127
        img = np.array([[[0, 0, 0], [255, 255, 1]]], dtype=np.uint8)
        agg = ColorAggregator(2, 1, 1)
        self.assertEqual(agg.aggregate(img), (127, 127, 0))

    def test_full_hd_frame_does_not_overflow(self):
        img = _make_solid_frame([255, 255, 255], w=1920, h=1080)
        agg = ColorAggregator(1920, 1080, 1)
        self.assertEqual(agg.aggregate(img), (255, 255, 255))

    def test_stride_larger_than_frame_is_config_error(self):
        with self.assertRaises(ConfigError):
            ColorAggregator(2, 2, 5)

    def test_zero_stride_is_config_error(self):
        with self.assertRaises(ConfigError):
            ColorAggregator(64, 36, 0)

    def test_random_frames_stay_in_range(self):
        rng = np.random.default_rng(123)
        agg = ColorAggregator(64, 36, 3)
        for _ in range(50):
            img = rng.integers(0, 256, size=(36, 64, 3), dtype=np.uint8)
            out = agg.aggregate(img)
            self.assertEqual(len(out), 3)
            self.assertTrue(all(0 <= c <= 255 for c in out))


class TestColorSmoother(unittest.TestCase):
    def test_starts_black(self):
        self.assertEqual(ColorSmoother(0.5).value, (0, 0, 0))

    def test_factor_zero_passes_through(self):
        smoother = ColorSmoother(0.0)
        for rgb in ((255, 0, 0), (1, 2, 3), (0, 0, 0), (200, 100, 50)):
            self.assertEqual(smoother.update(rgb), rgb)

    def test_factor_one_freezes_initial_value(self):
        smoother = ColorSmoother(1.0)
        for rgb in ((255, 0, 0), (1, 2, 3), (200, 100, 50)):
            self.assertEqual(smoother.update(rgb), (0, 0, 0))

    def test_first_cycle_is_damped_and_truncated(self):
        smoother = ColorSmoother(0.5)
        # 0.5 * 0 + 0.5 * 255 = 127.5 -> 127
        self.assertEqual(smoother.update((255, 101, 0)), (127, 50, 0))

    def test_converges_monotonically_toward_constant_input(self):
        target = (250, 120, 30)
        for factor in (0.25, 0.5, 0.75, 0.875):
            smoother = ColorSmoother(factor)
            prev = smoother.value
            for _ in range(500):
                cur = smoother.update(target)
                for p, c, t in zip(prev, cur, target):
                    self.assertGreaterEqual(c, p)
                    self.assertLessEqual(c, t)
                prev = cur
            # Truncation stalls the approach once a step is worth less than one unit
            tolerance = 1.0 / (1.0 - factor)
            for c, t in zip(prev, target):
                self.assertLessEqual(t - c, tolerance, msg=f"factor={factor}")

    def test_reset(self):
        smoother = ColorSmoother(0.0)
        smoother.update((9, 9, 9))
        smoother.reset()
        self.assertEqual(smoother.value, (0, 0, 0))


class TestFrameSource(unittest.TestCase):
    def setUp(self):
        patcher = mock.patch('hass_light_sync.screen.frame_source.mss.mss')
        self.mss_factory = patcher.start()
        self.addCleanup(patcher.stop)
        self.sct = mock.MagicMock()
        self.sct.monitors = [
            {'left': 0, 'top': 0, 'width': 3840, 'height': 1080},
            {'left': 0, 'top': 0, 'width': 1920, 'height': 1080},
            {'left': 1920, 'top': 0, 'width': 1280, 'height': 1024},
        ]
        self.mss_factory.return_value.__enter__.return_value = self.sct

    def test_geometry_skips_virtual_monitor(self):
        self.assertEqual(FrameSource(0).geometry(), (1920, 1080))
        self.assertEqual(FrameSource(1).geometry(), (1280, 1024))

    def test_unknown_monitor_is_config_error(self):
        with self.assertRaises(ConfigError):
            FrameSource(2)

    def test_capture_converts_bgra_to_rgb(self):
        bgra = np.zeros((2, 2, 4), dtype=np.uint8)
        bgra[..., 0] = 10  # B
        bgra[..., 1] = 20  # G
        bgra[..., 2] = 30  # R
        bgra[..., 3] = 255
        self.sct.grab.return_value = bgra
        frame = FrameSource(0).capture_frame()
        self.assertEqual(frame.shape, (2, 2, 3))
        self.assertEqual(frame[0, 0].tolist(), [30, 20, 10])

    def test_grab_failure_is_capture_error(self):
        from mss.exception import ScreenShotError
        source = FrameSource(0)
        self.sct.grab.side_effect = ScreenShotError("busy")
        with self.assertRaises(CaptureError):
            source.capture_frame()


if __name__ == '__main__':
    unittest.main()
