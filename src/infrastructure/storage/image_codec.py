from __future__ import annotations

from dataclasses import dataclass
from io import BytesIO

import numpy as np
from PIL import Image, UnidentifiedImageError

from src.domain.entities.image import RasterImage


@dataclass
class EncodedImage:
    data: bytes
    width: int
    height: int
    content_type: str

    @property
    def size(self) -> int:
        return len(self.data)


class ImageCodec:
    """Converts between encoded image files and pipeline images using Pillow."""

    def decode(self, data: bytes) -> RasterImage:
        if not data:
            raise ValueError("Empty image payload")
        try:
            img = Image.open(BytesIO(data)).convert("RGB")
        except UnidentifiedImageError as exc:
            raise ValueError(f"Unrecognized image format: {exc}") from exc
        arr = np.asarray(img).astype(np.float32) / 255.0
        return RasterImage.from_array(arr)

    def encode(self, image: RasterImage, ext: str = "png") -> EncodedImage:
        arr = np.clip(image.pixels, 0.0, 1.0).astype(np.float32)
        # Pillow infers "L" for uint8 (H, W) and "RGB" for (H, W, 3)
        if arr.ndim == 2:
            pil_arr = np.rint(arr * 255.0).astype("uint8")
        else:
            pil_arr = np.rint(arr[..., :3] * 255.0).astype("uint8")
        img = Image.fromarray(pil_arr)
        buf = BytesIO()
        fmt = "JPEG" if ext.lower().lstrip(".") in ("jpg", "jpeg") else "PNG"
        img.save(buf, format=fmt, quality=95)
        content_type = f"image/{'png' if fmt == 'PNG' else 'jpeg'}"
        return EncodedImage(
            data=buf.getvalue(),
            width=image.width,
            height=image.height,
            content_type=content_type,
        )
