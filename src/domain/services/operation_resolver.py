"""Turns an operation tag plus a loosely-typed parameter bag into an Operation.

Resolution validates the *shape* of the parameters only. Whether they make
sense for a concrete image (e.g. a crop rectangle inside the bounds) is checked
by the operation when it is applied.
"""
from __future__ import annotations

import math
from collections.abc import Callable, Mapping
from enum import Enum
from typing import Any, TypeVar

from src.domain.entities.operations import (
    BlurIntensity,
    BlurOperation,
    BrightnessMode,
    BrightnessOperation,
    CompositeOperation,
    ContrastOperation,
    CropOperation,
    FlipDirection,
    FlipOperation,
    GrayscaleAlgorithm,
    GrayscaleOperation,
    MirrorOperation,
    MirrorSide,
    Operation,
    OperationType,
    RotateOperation,
    RotationAngle,
    SaturationOperation,
)
from src.domain.errors import UnsupportedOperationError, ValidationError

# Integer blur scale buckets: <= 3 light, <= 6 medium, otherwise strong
BLUR_LIGHT_MAX = 3
BLUR_MEDIUM_MAX = 6

_ROTATION_BY_NAME = {
    "90": RotationAngle.DEGREES_90,
    "180": RotationAngle.DEGREES_180,
    "270": RotationAngle.DEGREES_270,
}

Resolver = Callable[[OperationType, Mapping[str, Any]], Operation]
E = TypeVar("E", bound=Enum)


def _is_number(value: Any) -> bool:
    # bool is an int subclass but never a valid numeric parameter
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _require(op: OperationType, params: Mapping[str, Any], key: str) -> Any:
    value = params.get(key)
    if value is None:
        raise ValidationError(
            f"Missing required parameter '{key}' for {op.value}",
            operation=op.value,
            parameter=key,
        )
    return value


def _number(op: OperationType, params: Mapping[str, Any], key: str) -> float:
    value = _require(op, params, key)
    if not _is_number(value):
        raise ValidationError(
            f"Parameter '{key}' must be a number, got {type(value).__name__}",
            operation=op.value,
            parameter=key,
        )
    try:
        number = float(value)
    except OverflowError:
        number = math.inf
    if not math.isfinite(number):
        raise ValidationError(
            f"Parameter '{key}' must be a finite number",
            operation=op.value,
            parameter=key,
        )
    return number


def _integer(op: OperationType, params: Mapping[str, Any], key: str) -> int:
    value = _require(op, params, key)
    if isinstance(value, float) and _is_number(value) and value.is_integer():
        return int(value)
    if not _is_number(value) or isinstance(value, float):
        raise ValidationError(
            f"Parameter '{key}' must be an integer, got {value!r}",
            operation=op.value,
            parameter=key,
        )
    return int(value)


def resolve_brightness(op: OperationType, params: Mapping[str, Any]) -> Operation:
    value = _number(op, params, "brightness")
    mode = BrightnessMode.INCREASE if value >= 0 else BrightnessMode.DECREASE
    return BrightnessOperation(mode, abs(value))


def resolve_contrast(op: OperationType, params: Mapping[str, Any]) -> Operation:
    return ContrastOperation(_number(op, params, "contrast"))


def resolve_crop(op: OperationType, params: Mapping[str, Any]) -> Operation:
    return CropOperation(
        x=_integer(op, params, "x"),
        y=_integer(op, params, "y"),
        width=_integer(op, params, "width"),
        height=_integer(op, params, "height"),
    )


def resolve_rotate(op: OperationType, params: Mapping[str, Any]) -> Operation:
    """Fixed angles by name; numeric degrees snap to the nearest quarter turn.

    Numeric values are normalized modulo 360 and rounded to the nearest multiple
    of 90 with ties going up (45 -> 90, 135 -> 180). A value that snaps to 0 has
    no supported rotation and is rejected.
    """
    value = _require(op, params, "angle")
    if isinstance(value, str):
        angle = _ROTATION_BY_NAME.get(value.strip())
        if angle is None:
            raise ValidationError(
                f"Unsupported rotation angle '{value}' (expected 90, 180 or 270)",
                operation=op.value,
                parameter="angle",
            )
        return RotateOperation(angle)
    degrees = _number(op, params, "angle") % 360.0
    snapped = int(math.floor(degrees / 90.0 + 0.5)) * 90 % 360
    if snapped == 0:
        raise ValidationError(
            f"Angle {value} does not map to a supported rotation (90, 180 or 270)",
            operation=op.value,
            parameter="angle",
        )
    return RotateOperation(RotationAngle(snapped))


def resolve_blur(op: OperationType, params: Mapping[str, Any]) -> Operation:
    value = _require(op, params, "intensity")
    if isinstance(value, str):
        try:
            return BlurOperation(BlurIntensity(value.strip().lower()))
        except ValueError:
            raise ValidationError(
                f"Unknown blur intensity '{value}' (expected light, medium or strong)",
                operation=op.value,
                parameter="intensity",
            ) from None
    level = _integer(op, params, "intensity")
    if level <= BLUR_LIGHT_MAX:
        return BlurOperation(BlurIntensity.LIGHT)
    if level <= BLUR_MEDIUM_MAX:
        return BlurOperation(BlurIntensity.MEDIUM)
    return BlurOperation(BlurIntensity.STRONG)


def _choice(
    op: OperationType,
    params: Mapping[str, Any],
    key: str,
    enum: type[E],
    default: E | None = None,
) -> E:
    if params.get(key) is None and default is not None:
        return default
    value = _require(op, params, key)
    by_value = {member.value: member for member in enum}
    member = by_value.get(value.strip().lower()) if isinstance(value, str) else None
    if member is None:
        raise ValidationError(
            f"Parameter '{key}' must be one of {', '.join(by_value)}, got {value!r}",
            operation=op.value,
            parameter=key,
        )
    return member


def resolve_flip(op: OperationType, params: Mapping[str, Any]) -> Operation:
    return FlipOperation(_choice(op, params, "direction", FlipDirection))


def resolve_mirror(op: OperationType, params: Mapping[str, Any]) -> Operation:
    return MirrorOperation(_choice(op, params, "side", MirrorSide))


def resolve_grayscale(op: OperationType, params: Mapping[str, Any]) -> Operation:
    return GrayscaleOperation(
        _choice(op, params, "algorithm", GrayscaleAlgorithm, GrayscaleAlgorithm.LUMINOSITY)
    )


def resolve_saturation(op: OperationType, params: Mapping[str, Any]) -> Operation:
    return SaturationOperation(_number(op, params, "saturation"))


def resolve_unsupported(op: OperationType, params: Mapping[str, Any]) -> Operation:
    raise UnsupportedOperationError(
        f"Operation '{op.value}' is not implemented yet", operation=op.value
    )


def resolve_artistic_style(op: OperationType, params: Mapping[str, Any]) -> Operation:
    style = params.get("style")
    if not isinstance(style, str) or not style.strip():
        raise ValidationError(
            "Parameter 'style' must be a non-empty string",
            operation=op.value,
            parameter="style",
        )
    return resolve_unsupported(op, params)


class OperationResolver:
    """Maps operation tags to per-tag resolver functions."""

    def __init__(self) -> None:
        self._resolvers: dict[OperationType, Resolver] = {
            OperationType.BRIGHTNESS: resolve_brightness,
            OperationType.CONTRAST: resolve_contrast,
            OperationType.CROP: resolve_crop,
            OperationType.ROTATE: resolve_rotate,
            OperationType.BLUR: resolve_blur,
            OperationType.FLIP: resolve_flip,
            OperationType.MIRROR: resolve_mirror,
            OperationType.GRAYSCALE: resolve_grayscale,
            OperationType.SATURATION: resolve_saturation,
            OperationType.BATCH: self._resolve_batch,
            OperationType.AI_ENHANCE: resolve_unsupported,
            OperationType.BACKGROUND_REMOVAL: resolve_unsupported,
            OperationType.ARTISTIC_STYLE: resolve_artistic_style,
        }

    def resolve(self, tag: str | OperationType, params: Mapping[str, Any] | None = None) -> Operation:
        op = self._parse_tag(tag)
        if params is None:
            params = {}
        if not isinstance(params, Mapping):
            raise ValidationError(
                f"Parameters must be a mapping, got {type(params).__name__}",
                operation=op.value,
            )
        return self._resolvers[op](op, params)

    @staticmethod
    def _parse_tag(tag: str | OperationType) -> OperationType:
        if isinstance(tag, OperationType):
            return tag
        if not isinstance(tag, str):
            raise ValidationError(f"Operation tag must be a string, got {tag!r}")
        try:
            return OperationType(tag.strip().lower())
        except ValueError:
            raise ValidationError(f"Unsupported operation type: {tag}", operation=tag) from None

    def _resolve_batch(self, op: OperationType, params: Mapping[str, Any]) -> Operation:
        entries = _require(op, params, "operations")
        if not isinstance(entries, list) or not entries:
            raise ValidationError(
                "Parameter 'operations' must be a non-empty list",
                operation=op.value,
                parameter="operations",
            )
        steps: list[Operation] = []
        for index, entry in enumerate(entries):
            location = f"operations[{index}]"
            if not isinstance(entry, Mapping) or not isinstance(entry.get("operation"), str):
                raise ValidationError(
                    f"{location} must be an object with an 'operation' string",
                    operation=op.value,
                    parameter=location,
                )
            try:
                step_tag = self._parse_tag(entry["operation"])
            except ValidationError:
                raise ValidationError(
                    f"{location}: unsupported operation type {entry['operation']}",
                    operation=op.value,
                    parameter=location,
                ) from None
            if step_tag is OperationType.BATCH:
                raise ValidationError(
                    f"{location}: nested batches are not supported",
                    operation=op.value,
                    parameter=location,
                )
            try:
                steps.append(self.resolve(step_tag, entry.get("params") or {}))
            except ValidationError as exc:
                raise ValidationError(
                    f"{location}: {exc.message}",
                    operation=exc.operation,
                    parameter=exc.parameter,
                ) from exc
        return CompositeOperation(tuple(steps))
