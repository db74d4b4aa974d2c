"""Alpha clean-up applied to transparent frames before palette quantization."""

from __future__ import annotations

import numpy as np

ALPHA_THRESHOLD = 128


def binarize_alpha(pixels: bytearray | memoryview | bytes) -> bytearray | memoryview | bytes:
    """Snap every alpha to 0 or 255 so quantized edges carry no halo.

    Mutable buffers are rewritten in place and returned; immutable ``bytes``
    come back as a new object.
    """
    if len(pixels) % 4 != 0:
        raise ValueError("RGBA8 data length must be divisible by 4")
    if isinstance(pixels, bytes):
        out = bytearray(pixels)
        binarize_alpha(out)
        return bytes(out)

    arr = np.frombuffer(pixels, dtype=np.uint8).reshape((-1, 4))
    alpha = arr[:, 3]
    alpha[:] = np.where(alpha < ALPHA_THRESHOLD, 0, 255).astype(np.uint8)
    return pixels
