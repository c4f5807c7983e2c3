from __future__ import annotations
from dataclasses import dataclass
import numpy as np


@dataclass
class Image:
    """
    Decoded pixels of one dataset image, kept only for the duration of an export.
    Codec logic lives in ImageRepository.
    """
    pixels: np.ndarray  # Shape (H, W, 3), dtype uint8, RGB order.
    source: str | None = None  # Reference the bytes were fetched from.

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])
