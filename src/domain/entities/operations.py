"""Image operations.

Each operation is an immutable value object: a tag plus validated parameters,
with a single capability, `apply`, that turns one image into a new one. Pixel
math is delegated to `ProcessingService`; this module only checks that the
parameters make sense for the concrete image and names the result.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar

import numpy as np

from src.domain.entities.image import RasterImage
from src.domain.errors import ErrorKind, PipelineError, ProcessingError
from src.domain.services.processing_service import ProcessingService

MAX_CONTRAST_FACTOR = 5.0


class OperationType(str, Enum):
    BRIGHTNESS = "brightness"
    CONTRAST = "contrast"
    CROP = "crop"
    ROTATE = "rotate"
    BLUR = "blur"
    FLIP = "flip"
    MIRROR = "mirror"
    GRAYSCALE = "grayscale"
    SATURATION = "saturation"
    BATCH = "batch"
    # Recognized but not backed by an implementation yet
    AI_ENHANCE = "ai_enhance"
    BACKGROUND_REMOVAL = "background_removal"
    ARTISTIC_STYLE = "artistic_style"


class Operation(ABC):
    """Base class for all operations.

    `apply` never mutates its input and is safe to call from several threads at
    once. Any failure surfaces as `ProcessingError` with the original cause
    chained.
    """

    tag: ClassVar[OperationType]

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable description used in history listings."""

    @abstractmethod
    def _transform(self, pixels: np.ndarray) -> np.ndarray: ...

    def apply(self, image: RasterImage) -> RasterImage:
        try:
            pixels = self._transform(image.pixels)
        except PipelineError:
            raise
        except MemoryError as exc:
            raise ProcessingError(
                f"Not enough memory to apply {self.name}",
                kind=ErrorKind.OUT_OF_MEMORY,
                operation=self.tag.value,
            ) from exc
        except Exception as exc:
            raise ProcessingError(
                f"{self.name} failed: {exc}", operation=self.tag.value
            ) from exc
        pixels = np.asarray(pixels, dtype=np.float32)
        if not np.isfinite(pixels).all():
            raise ProcessingError(
                f"{self.name} produced non-finite pixel values", operation=self.tag.value
            )
        return RasterImage(pixels)

    def _invalid(self, message: str, parameter: str | None = None) -> ProcessingError:
        return ProcessingError(
            message,
            kind=ErrorKind.INVALID_PARAMETERS,
            operation=self.tag.value,
            parameter=parameter,
        )


class BrightnessMode(str, Enum):
    INCREASE = "increase"
    DECREASE = "decrease"


@dataclass(frozen=True)
class BrightnessOperation(Operation):
    mode: BrightnessMode
    intensity: float  # 0.5 = 50%; decreasing by 1.0 or more yields black

    tag: ClassVar[OperationType] = OperationType.BRIGHTNESS

    @classmethod
    def increase(cls, intensity: float) -> BrightnessOperation:
        return cls(BrightnessMode.INCREASE, intensity)

    @classmethod
    def decrease(cls, intensity: float) -> BrightnessOperation:
        return cls(BrightnessMode.DECREASE, intensity)

    @property
    def name(self) -> str:
        sign = "+" if self.mode is BrightnessMode.INCREASE else "-"
        return f"Brightness {sign}{self.intensity:.0%}"

    @property
    def scale(self) -> float:
        if self.mode is BrightnessMode.INCREASE:
            return 1.0 + self.intensity
        return max(0.0, 1.0 - self.intensity)

    def _transform(self, pixels: np.ndarray) -> np.ndarray:
        if not self.intensity >= 0:
            raise self._invalid("Brightness intensity must not be negative", "brightness")
        return ProcessingService.scale_brightness(pixels, self.scale)


@dataclass(frozen=True)
class ContrastOperation(Operation):
    factor: float  # 1.0 keeps the original contrast

    tag: ClassVar[OperationType] = OperationType.CONTRAST

    @property
    def name(self) -> str:
        if self.factor > 1.0:
            return f"Contrast +{self.factor - 1.0:.0%}"
        if self.factor < 1.0:
            return f"Contrast -{1.0 - self.factor:.0%}"
        return "Contrast"

    def _transform(self, pixels: np.ndarray) -> np.ndarray:
        if not self.factor > 0:
            raise self._invalid("Contrast factor must be greater than 0", "contrast")
        if self.factor > MAX_CONTRAST_FACTOR:
            raise self._invalid(
                f"Contrast factor must not exceed {MAX_CONTRAST_FACTOR}", "contrast"
            )
        return ProcessingService.adjust_linear_contrast(pixels, self.factor)


@dataclass(frozen=True)
class CropOperation(Operation):
    x: int
    y: int
    width: int
    height: int

    tag: ClassVar[OperationType] = OperationType.CROP

    @property
    def name(self) -> str:
        return f"Crop [x={self.x}, y={self.y}, w={self.width}, h={self.height}]"

    def _transform(self, pixels: np.ndarray) -> np.ndarray:
        img_h, img_w = pixels.shape[:2]
        if self.width <= 0 or self.height <= 0:
            raise self._invalid(
                f"Invalid crop size: width={self.width}, height={self.height}",
                "width" if self.width <= 0 else "height",
            )
        if self.x < 0 or self.y < 0:
            raise self._invalid(
                f"Crop origin must not be negative: x={self.x}, y={self.y}",
                "x" if self.x < 0 else "y",
            )
        if self.x + self.width > img_w or self.y + self.height > img_h:
            raise self._invalid(
                f"Crop rectangle ({self.x}, {self.y}, {self.width}x{self.height}) "
                f"exceeds image bounds {img_w}x{img_h}"
            )
        return ProcessingService.crop(pixels, self.x, self.y, self.width, self.height)


class RotationAngle(int, Enum):
    DEGREES_90 = 90
    DEGREES_180 = 180
    DEGREES_270 = 270

    @property
    def description(self) -> str:
        return {
            RotationAngle.DEGREES_90: "90° clockwise",
            RotationAngle.DEGREES_180: "180°",
            RotationAngle.DEGREES_270: "90° counter-clockwise",
        }[self]


@dataclass(frozen=True)
class RotateOperation(Operation):
    angle: RotationAngle

    tag: ClassVar[OperationType] = OperationType.ROTATE

    @classmethod
    def rotate_90(cls) -> RotateOperation:
        return cls(RotationAngle.DEGREES_90)

    @classmethod
    def rotate_180(cls) -> RotateOperation:
        return cls(RotationAngle.DEGREES_180)

    @classmethod
    def rotate_270(cls) -> RotateOperation:
        return cls(RotationAngle.DEGREES_270)

    @property
    def name(self) -> str:
        return f"Rotate {self.angle.description}"

    def _transform(self, pixels: np.ndarray) -> np.ndarray:
        return ProcessingService.rotate_quarter_turns(pixels, int(self.angle))


class BlurIntensity(str, Enum):
    LIGHT = "light"
    MEDIUM = "medium"
    STRONG = "strong"

    @property
    def kernel_size(self) -> int:
        return {BlurIntensity.LIGHT: 3, BlurIntensity.MEDIUM: 5, BlurIntensity.STRONG: 7}[self]


@dataclass(frozen=True)
class BlurOperation(Operation):
    intensity: BlurIntensity

    tag: ClassVar[OperationType] = OperationType.BLUR

    @property
    def name(self) -> str:
        return f"Blur [{self.intensity.value}]"

    def _transform(self, pixels: np.ndarray) -> np.ndarray:
        return ProcessingService.gaussian_blur(pixels, self.intensity.kernel_size)


class FlipDirection(str, Enum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


@dataclass(frozen=True)
class FlipOperation(Operation):
    direction: FlipDirection

    tag: ClassVar[OperationType] = OperationType.FLIP

    @classmethod
    def horizontal(cls) -> FlipOperation:
        return cls(FlipDirection.HORIZONTAL)

    @classmethod
    def vertical(cls) -> FlipOperation:
        return cls(FlipDirection.VERTICAL)

    @property
    def name(self) -> str:
        return f"Flip {self.direction.value}"

    def _transform(self, pixels: np.ndarray) -> np.ndarray:
        axis = 1 if self.direction is FlipDirection.HORIZONTAL else 0
        return ProcessingService.flip(pixels, axis)


class MirrorSide(str, Enum):
    """The half that is kept and reflected onto the opposite half."""

    LEFT = "left"
    RIGHT = "right"
    TOP = "top"
    BOTTOM = "bottom"


@dataclass(frozen=True)
class MirrorOperation(Operation):
    side: MirrorSide

    tag: ClassVar[OperationType] = OperationType.MIRROR

    @property
    def name(self) -> str:
        return f"Mirror [{self.side.value}]"

    def _transform(self, pixels: np.ndarray) -> np.ndarray:
        return ProcessingService.mirror_half(pixels, self.side.value)


class GrayscaleAlgorithm(str, Enum):
    AVERAGE = "average"
    LUMINOSITY = "luminosity"
    DESATURATION = "desaturation"


@dataclass(frozen=True)
class GrayscaleOperation(Operation):
    algorithm: GrayscaleAlgorithm = GrayscaleAlgorithm.LUMINOSITY

    tag: ClassVar[OperationType] = OperationType.GRAYSCALE

    @property
    def name(self) -> str:
        return f"Grayscale [{self.algorithm.value}]"

    def _transform(self, pixels: np.ndarray) -> np.ndarray:
        if self.algorithm is GrayscaleAlgorithm.AVERAGE:
            return ProcessingService.grayscale_average(pixels)
        if self.algorithm is GrayscaleAlgorithm.DESATURATION:
            return ProcessingService.grayscale_midgray(pixels)
        return ProcessingService.grayscale_luminosity(pixels)


@dataclass(frozen=True)
class SaturationOperation(Operation):
    factor: float  # 1.0 keeps the original saturation, 0.0 removes it

    tag: ClassVar[OperationType] = OperationType.SATURATION

    @property
    def name(self) -> str:
        if self.factor > 1.0:
            return f"Saturation +{self.factor - 1.0:.0%}"
        if self.factor < 1.0:
            return f"Saturation -{1.0 - self.factor:.0%}"
        return "Saturation"

    def _transform(self, pixels: np.ndarray) -> np.ndarray:
        if not self.factor >= 0:
            raise self._invalid("Saturation factor must not be negative", "saturation")
        return ProcessingService.scale_saturation(pixels, self.factor)


@dataclass(frozen=True)
class CompositeOperation(Operation):
    """Several operations applied in order as a single history step."""

    operations: tuple[Operation, ...]

    tag: ClassVar[OperationType] = OperationType.BATCH

    @property
    def name(self) -> str:
        steps = ", ".join(op.name for op in self.operations)
        return f"Batch [{len(self.operations)} operations]: {steps}"

    def _transform(self, pixels: np.ndarray) -> np.ndarray:
        if not self.operations:
            raise self._invalid("Batch contains no operations", "operations")
        for op in self.operations:
            pixels = op._transform(pixels)
        return pixels
