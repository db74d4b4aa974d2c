import io
import sys
import unittest
from pathlib import Path

from PIL import Image

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "renderer"))
sys.path.insert(0, str(ROOT / "packages" / "core"))

from gifmoji_core.codec import TRANSPARENT_INDEX, CodecError, PillowGifCodec


def two_color_frame(width: int = 4, height: int = 2) -> bytearray:
    # Left half opaque red, right half fully transparent.
    pixels = bytearray()
    for _ in range(height):
        for x in range(width):
            pixels += bytes([255, 0, 0, 255]) if x < width // 2 else bytes([0, 0, 0, 0])
    return pixels


class PillowGifCodecTests(unittest.TestCase):
    def test_transparent_palette_reserves_index_zero(self):
        codec = PillowGifCodec()
        pixels = two_color_frame()
        palette = codec.quantize(pixels, 4, 2, 256, transparent=True)
        self.assertEqual(palette[0], (0, 0, 0))
        self.assertIn((255, 0, 0), palette[1:])

        index = codec.apply_palette(pixels, 4, 2, palette, transparent=True)
        self.assertEqual(len(index), 8)
        self.assertEqual(index[2], TRANSPARENT_INDEX)
        self.assertEqual(palette[index[0]], (255, 0, 0))

    def test_opaque_black_is_not_transparent(self):
        codec = PillowGifCodec()
        pixels = bytearray([0, 0, 0, 255] * 4)
        palette = codec.quantize(pixels, 2, 2, 256, transparent=True)
        index = codec.apply_palette(pixels, 2, 2, palette, transparent=True)
        self.assertNotIn(TRANSPARENT_INDEX, set(index))

    def test_opaque_palette_maps_exact_colors(self):
        codec = PillowGifCodec()
        pixels = bytearray([255, 0, 0, 255, 0, 255, 0, 255, 0, 0, 255, 255, 255, 255, 255, 255])
        palette = codec.quantize(pixels, 2, 2, 16)
        index = codec.apply_palette(pixels, 2, 2, palette)
        self.assertEqual([palette[i] for i in index], [(255, 0, 0), (0, 255, 0), (0, 0, 255), (255, 255, 255)])

    def test_fully_transparent_frame(self):
        codec = PillowGifCodec()
        pixels = bytearray(4 * 4 * 4)
        palette = codec.quantize(pixels, 4, 4, 256, transparent=True)
        self.assertEqual(palette, [(0, 0, 0)])
        self.assertEqual(codec.apply_palette(pixels, 4, 4, palette, transparent=True), bytes(16))

    def test_writes_looping_gif(self):
        codec = PillowGifCodec()
        for color in ((255, 0, 0, 255), (0, 0, 255, 255)):
            pixels = bytearray(bytes(color) * 16)
            palette = codec.quantize(pixels, 4, 4)
            index = codec.apply_palette(pixels, 4, 4, palette)
            codec.write_frame(index, 4, 4, palette=palette, delay_ms=50)
        codec.finish()
        data = codec.bytes()
        self.assertTrue(data.startswith(b"GIF8"))
        with Image.open(io.BytesIO(data)) as image:
            self.assertEqual(image.size, (4, 4))
            self.assertEqual(image.n_frames, 2)
            self.assertEqual(image.info.get("loop"), 0)
            self.assertEqual(image.info.get("duration"), 50)

    def test_bytes_before_finish_fails(self):
        with self.assertRaises(CodecError):
            PillowGifCodec().bytes()

    def test_finish_without_frames_fails(self):
        with self.assertRaises(CodecError):
            PillowGifCodec().finish()

    def test_rejects_mismatched_buffer(self):
        codec = PillowGifCodec()
        with self.assertRaises(CodecError):
            codec.quantize(bytearray(10), 2, 2)
        with self.assertRaises(CodecError):
            codec.write_frame(bytes(3), 2, 2, palette=[(0, 0, 0)], delay_ms=50)

    def test_rejects_bad_color_budget(self):
        with self.assertRaises(CodecError):
            PillowGifCodec().quantize(bytearray(16), 2, 2, max_colors=1)


if __name__ == "__main__":
    unittest.main()
