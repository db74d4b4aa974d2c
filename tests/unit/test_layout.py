import math
import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "renderer"))

from gifmoji_renderer.layout import FONT_FLOOR_PX, MIN_FONT_PX, base_font_size, compute_layout, split_lines
from gifmoji_renderer.models import AnimationKind
from gifmoji_renderer.presets import list_presets
from gifmoji_renderer.surface import DrawingSurface


def mono(text: str, size: float) -> float:
    return len(text) * size * 0.6


class LayoutTests(unittest.TestCase):
    def test_text_is_uppercased_and_split(self):
        result = compute_layout("hi\nthere", 128, 128, mono)
        self.assertEqual(result.lines, ("HI", "THERE"))

    def test_empty_text_yields_single_empty_line(self):
        result = compute_layout("", 128, 128, mono)
        self.assertEqual(result.lines, ("",))
        self.assertEqual(result.longest_line_width_px, 0.0)
        self.assertGreater(result.font_size_px, 0)

    def test_base_size_steps_down_with_length(self):
        self.assertEqual(base_font_size(("WOW",)), 40)
        self.assertEqual(base_font_size(("GOODBYE",)), 30)
        self.assertEqual(base_font_size(("FANTASTIC",)), 20)
        self.assertEqual(base_font_size(("FANTASTIC", "OK")), 30)
        self.assertEqual(base_font_size(("A" * 21,)), 14)

    def test_line_count_caps(self):
        self.assertEqual(base_font_size(("A", "B")), 32)
        self.assertEqual(base_font_size(("A", "B", "C")), 24)
        self.assertEqual(base_font_size(("A", "B", "C", "D")), 18)

    def test_font_offset_is_additive_and_clamped(self):
        self.assertEqual(base_font_size(("WOW",), 5), 45)
        self.assertEqual(base_font_size(("WOW",), -100), 4)

    def test_size_norm_scales_font(self):
        small = compute_layout("WOW", 128, 128, mono)
        large = compute_layout("WOW", 256, 256, mono)
        self.assertAlmostEqual(small.font_size_px, 40.0)
        self.assertAlmostEqual(large.font_size_px, 80.0)
        self.assertAlmostEqual(large.size_norm, 2.0)
        self.assertAlmostEqual(large.line_height_px, 88.0)

    def test_two_lines_shrink_relative_to_one(self):
        single = compute_layout("HELLO", 300, 200, mono)
        double = compute_layout("HELLO\nWORLD", 300, 200, mono)
        self.assertEqual(len(double.lines), 2)
        self.assertLess(double.font_size_px, single.font_size_px)

    def test_width_fit_guarantee(self):
        for text in ("ABCDEFGHIJKLMNOPQRST", "WWWWWWWWWW", "SUPERCALIFRAGILISTIC\nOK", "HI"):
            for width, height in ((128, 128), (300, 200), (480, 270), (256, 96)):
                for kind in AnimationKind:
                    if kind is AnimationKind.SLIDE:
                        continue
                    result = compute_layout(text, width, height, mono, animation=kind)
                    self.assertLessEqual(result.longest_line_width_px, 0.9 * width, msg=f"{text!r} {width}x{height}")

    def test_longest_allowed_lines_fit_with_real_fonts(self):
        surface = DrawingSurface(128, 128)
        texts = ("ABCDEFGHIJKLMNOPQRSTUVWXYZ", "W" * 30, "MMMMMMMMMMMMMMMMMMMMMMMMM", "W" * 30 + "\nOK")
        for text in texts:
            for preset in list_presets():
                for kind in (AnimationKind.PULSE, AnimationKind.BOUNCE, AnimationKind.SPIN):
                    result = compute_layout(text, preset.width, preset.height, surface.measure_text, animation=kind)
                    self.assertLessEqual(
                        result.longest_line_width_px, 0.9 * preset.width, msg=f"{text!r} {preset.id} {kind.value}"
                    )
                    self.assertGreaterEqual(result.font_size_px, FONT_FLOOR_PX)

    def test_long_lines_may_shrink_below_readable_minimum(self):
        result = compute_layout("W" * 30, 128, 128, lambda text, size: len(text) * size)
        self.assertLess(result.font_size_px, MIN_FONT_PX)
        self.assertLessEqual(result.longest_line_width_px, 0.9 * 128)

    def test_slide_is_exempt_from_width_fit(self):
        fitted = compute_layout("ABCDEFGHIJKLMNOPQRST", 128, 128, mono, animation=AnimationKind.PULSE)
        sliding = compute_layout("ABCDEFGHIJKLMNOPQRST", 128, 128, mono, animation=AnimationKind.SLIDE)
        self.assertGreater(sliding.font_size_px, fitted.font_size_px)
        self.assertGreater(sliding.longest_line_width_px, 0.9 * 128)

    def test_block_height_fits(self):
        result = compute_layout("A\nB\nC\nD\nE", 200, 60, mono, font_size_offset=30)
        self.assertLessEqual(result.block_height_px, 0.9 * 60 + 1e-9)

    def test_pathological_measurement_clamps(self):
        result = compute_layout("WOW", 128, 128, lambda text, size: float("nan"))
        self.assertEqual(result.font_size_px, MIN_FONT_PX)
        self.assertEqual(result.longest_line_width_px, 0.0)

        result = compute_layout("WOW", 128, 128, lambda text, size: float("inf"))
        self.assertEqual(result.font_size_px, MIN_FONT_PX)
        self.assertTrue(math.isfinite(result.line_height_px))

    def test_crlf_line_breaks(self):
        self.assertEqual(split_lines("a\r\nb"), ("A", "B"))


if __name__ == "__main__":
    unittest.main()
