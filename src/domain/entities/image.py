from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class RasterImage:
    """In-memory raster owned by the pipeline.

    Pixels are float32 normalized to [0, 1]:
    - Grayscale: (H, W)
    - RGB: (H, W, 3)

    The backing array is marked read-only so nothing downstream can mutate an
    image the pipeline has handed out.
    """

    pixels: np.ndarray

    def __post_init__(self) -> None:
        if self.pixels.ndim not in (2, 3):
            raise ValueError(f"Expected a 2D or 3D pixel array, got {self.pixels.ndim}D")
        if self.pixels.flags.writeable:
            self.pixels.flags.writeable = False

    @classmethod
    def from_array(cls, array: np.ndarray) -> RasterImage:
        """Copy `array` into a new float32 image clipped to [0, 1]."""
        pixels = np.clip(np.asarray(array, dtype=np.float32), 0.0, 1.0).copy()
        return cls(pixels)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def channels(self) -> int:
        return 1 if self.pixels.ndim == 2 else int(self.pixels.shape[2])

    def copy(self) -> RasterImage:
        return RasterImage(self.pixels.copy())

    def same_pixels(self, other: RasterImage) -> bool:
        return self.pixels.shape == other.pixels.shape and bool(
            np.array_equal(self.pixels, other.pixels)
        )
