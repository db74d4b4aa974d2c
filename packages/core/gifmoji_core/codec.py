"""Pillow-backed GIF codec: palette quantization, index mapping and container writing."""

from __future__ import annotations

from io import BytesIO

import numpy as np
from PIL import Image

Palette = list[tuple[int, int, int]]

TRANSPARENT_INDEX = 0
ALPHA_CUTOFF = 128


class CodecError(RuntimeError):
    pass


def _rgba_array(pixels: bytes | bytearray | memoryview, width: int, height: int) -> np.ndarray:
    if len(pixels) != width * height * 4:
        raise CodecError(f"expected {width * height * 4} RGBA bytes for {width}x{height}, got {len(pixels)}")
    return np.frombuffer(bytes(pixels), dtype=np.uint8).reshape((-1, 4))


def _padded_palette_image(colors: Palette) -> Image.Image:
    # Pad with the last real colour so padding never introduces a new match.
    padded = list(colors) + [colors[-1]] * (256 - len(colors))
    pal_img = Image.new("P", (1, 1))
    pal_img.putpalette([channel for rgb in padded for channel in rgb])
    return pal_img


class PillowGifCodec:
    """Collects indexed frames and writes a looping GIF.

    In transparent mode palette entry 0 is reserved for transparent pixels
    and real colours start at index 1.
    """

    def __init__(self, loop: int = 0) -> None:
        self.loop = loop
        self._frames: list[Image.Image] = []
        self._durations: list[int] = []
        self._transparent = False
        self._data: bytes | None = None

    @property
    def frame_count(self) -> int:
        return len(self._frames)

    def quantize(
        self,
        pixels: bytes | bytearray | memoryview,
        width: int,
        height: int,
        max_colors: int = 256,
        transparent: bool = False,
    ) -> Palette:
        if not 2 <= max_colors <= 256:
            raise CodecError(f"max_colors must be within 2..256, got {max_colors}")
        arr = _rgba_array(pixels, width, height)
        colors = max_colors - 1 if transparent else max_colors
        rgb = arr[arr[:, 3] >= ALPHA_CUTOFF][:, :3] if transparent else arr[:, :3]

        palette: Palette = [(0, 0, 0)] if transparent else []
        if len(rgb) == 0:
            return palette or [(0, 0, 0)]

        sample = Image.fromarray(np.ascontiguousarray(rgb).reshape((1, -1, 3)))
        quantized = sample.quantize(colors=colors, method=Image.Quantize.MEDIANCUT, dither=Image.Dither.NONE)
        used = max(index for _, index in quantized.getcolors(maxcolors=256)) + 1
        flat = quantized.getpalette() or []
        palette.extend(tuple(flat[i * 3 : i * 3 + 3]) for i in range(used))
        return palette

    def apply_palette(
        self,
        pixels: bytes | bytearray | memoryview,
        width: int,
        height: int,
        palette: Palette,
        transparent: bool = False,
    ) -> bytes:
        arr = _rgba_array(pixels, width, height)
        colors = palette[1:] if transparent else palette
        if not colors:
            return bytes(width * height)

        image = Image.frombytes("RGBA", (width, height), bytes(pixels)).convert("RGB")
        mapped = image.quantize(palette=_padded_palette_image(colors), dither=Image.Dither.NONE)
        index = np.frombuffer(mapped.tobytes(), dtype=np.uint8).copy()
        np.minimum(index, len(colors) - 1, out=index)
        if transparent:
            index += 1
            index[arr[:, 3] < ALPHA_CUTOFF] = TRANSPARENT_INDEX
        return index.tobytes()

    def write_frame(
        self,
        index: bytes,
        width: int,
        height: int,
        palette: Palette,
        delay_ms: float,
        transparent: bool = False,
    ) -> None:
        if self._data is not None:
            raise CodecError("encoder already finished")
        if len(index) != width * height:
            raise CodecError(f"expected {width * height} index bytes, got {len(index)}")
        if not 1 <= len(palette) <= 256:
            raise CodecError(f"palette must hold 1..256 colours, got {len(palette)}")
        frame = Image.frombytes("P", (width, height), bytes(index))
        frame.putpalette([channel for rgb in palette for channel in rgb])
        if transparent:
            frame.info["transparency"] = TRANSPARENT_INDEX
        self._frames.append(frame)
        self._durations.append(max(1, int(round(delay_ms))))
        self._transparent = self._transparent or transparent

    def finish(self) -> None:
        if not self._frames:
            raise CodecError("no frames written")
        options = {
            "format": "GIF",
            "save_all": True,
            "append_images": self._frames[1:],
            "duration": self._durations,
            "loop": self.loop,
            "disposal": 2,
            "optimize": False,
        }
        if self._transparent:
            options["transparency"] = TRANSPARENT_INDEX
        buf = BytesIO()
        self._frames[0].save(buf, **options)
        self._data = buf.getvalue()

    def bytes(self) -> bytes:
        if self._data is None:
            raise CodecError("finish() must be called before bytes()")
        return self._data
