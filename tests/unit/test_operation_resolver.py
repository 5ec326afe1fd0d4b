import pytest

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
    RotateOperation,
    RotationAngle,
    SaturationOperation,
)
from src.domain.errors import UnsupportedOperationError, ValidationError
from src.domain.services.operation_resolver import OperationResolver


@pytest.fixture()
def resolver():
    return OperationResolver()


def test_brightness_sign_picks_mode(resolver):
    up = resolver.resolve("brightness", {"brightness": 0.5})
    down = resolver.resolve("brightness", {"brightness": -0.5})
    assert up == BrightnessOperation(BrightnessMode.INCREASE, 0.5)
    assert down == BrightnessOperation(BrightnessMode.DECREASE, 0.5)


def test_brightness_magnitude_is_intensity(resolver):
    assert resolver.resolve("brightness", {"brightness": -5}) == BrightnessOperation.decrease(5.0)
    assert resolver.resolve("brightness", {"brightness": 5}) == BrightnessOperation.increase(5.0)


def test_brightness_missing_key(resolver):
    with pytest.raises(ValidationError) as exc_info:
        resolver.resolve("brightness", {"factor": 1.2})
    assert exc_info.value.parameter == "brightness"
    assert exc_info.value.operation == "brightness"


@pytest.mark.parametrize("value", ["0.5", True, float("nan"), [1]])
def test_brightness_rejects_non_numbers(resolver, value):
    with pytest.raises(ValidationError):
        resolver.resolve("brightness", {"brightness": value})


@pytest.mark.parametrize(
    "tag, key",
    [("brightness", "brightness"), ("contrast", "contrast"), ("saturation", "saturation"), ("rotate", "angle")],
)
@pytest.mark.parametrize("value", [10**400, -(10**400), float("inf")])
def test_numbers_must_be_finite(resolver, tag, key, value):
    with pytest.raises(ValidationError) as exc_info:
        resolver.resolve(tag, {key: value})
    assert exc_info.value.parameter == key
    assert exc_info.value.operation == tag


def test_huge_finite_numbers_resolve(resolver):
    assert resolver.resolve("brightness", {"brightness": 1e307}) == BrightnessOperation.increase(1e307)
    assert resolver.resolve("blur", {"intensity": 10**400}) == BlurOperation(BlurIntensity.STRONG)
    assert resolver.resolve("blur", {"intensity": 1e300}) == BlurOperation(BlurIntensity.STRONG)


def test_tag_is_case_insensitive(resolver):
    op = resolver.resolve("  Contrast ", {"contrast": 1.5})
    assert op == ContrastOperation(1.5)


def test_unknown_tag(resolver):
    with pytest.raises(ValidationError, match="Unsupported operation type"):
        resolver.resolve("sharpen", {})


def test_params_must_be_mapping(resolver):
    with pytest.raises(ValidationError):
        resolver.resolve("contrast", [("contrast", 1.5)])


def test_crop_integers(resolver):
    op = resolver.resolve("crop", {"x": 1, "y": 2.0, "width": 10, "height": 20})
    assert op == CropOperation(1, 2, 10, 20)


def test_crop_rejects_fractional(resolver):
    with pytest.raises(ValidationError) as exc_info:
        resolver.resolve("crop", {"x": 0, "y": 0, "width": 10.5, "height": 20})
    assert exc_info.value.parameter == "width"


def test_crop_bounds_are_checked_later(resolver):
    # resolution only checks shape; the rectangle is validated against the image on apply
    op = resolver.resolve("crop", {"x": 500, "y": 500, "width": 10, "height": 10})
    assert isinstance(op, CropOperation)


@pytest.mark.parametrize(
    "angle, expected",
    [
        ("90", RotationAngle.DEGREES_90),
        ("180", RotationAngle.DEGREES_180),
        ("270", RotationAngle.DEGREES_270),
        (90, RotationAngle.DEGREES_90),
        (45, RotationAngle.DEGREES_90),
        (100, RotationAngle.DEGREES_90),
        (135, RotationAngle.DEGREES_180),
        (-90, RotationAngle.DEGREES_270),
        (450.0, RotationAngle.DEGREES_90),
    ],
)
def test_rotate_angles(resolver, angle, expected):
    assert resolver.resolve("rotate", {"angle": angle}) == RotateOperation(expected)


@pytest.mark.parametrize("angle", ["45", "ninety", 10, 315, 0])
def test_rotate_rejects_unsupported(resolver, angle):
    with pytest.raises(ValidationError) as exc_info:
        resolver.resolve("rotate", {"angle": angle})
    assert exc_info.value.parameter == "angle"


@pytest.mark.parametrize(
    "intensity, expected",
    [
        ("light", BlurIntensity.LIGHT),
        ("STRONG", BlurIntensity.STRONG),
        (1, BlurIntensity.LIGHT),
        (3, BlurIntensity.LIGHT),
        (4, BlurIntensity.MEDIUM),
        (6, BlurIntensity.MEDIUM),
        (7, BlurIntensity.STRONG),
        (100, BlurIntensity.STRONG),
    ],
)
def test_blur_buckets(resolver, intensity, expected):
    assert resolver.resolve("blur", {"intensity": intensity}) == BlurOperation(expected)


def test_blur_unknown_name(resolver):
    with pytest.raises(ValidationError):
        resolver.resolve("blur", {"intensity": "extreme"})


@pytest.mark.parametrize("tag", ["ai_enhance", "background_removal"])
def test_recognized_but_unsupported(resolver, tag):
    with pytest.raises(UnsupportedOperationError) as exc_info:
        resolver.resolve(tag, {})
    assert exc_info.value.operation == tag


def test_artistic_style_validates_before_unsupported(resolver):
    with pytest.raises(ValidationError):
        resolver.resolve("artistic_style", {})
    with pytest.raises(UnsupportedOperationError):
        resolver.resolve("artistic_style", {"style": "van_gogh"})


def test_batch(resolver):
    op = resolver.resolve(
        "batch",
        {
            "operations": [
                {"operation": "rotate", "params": {"angle": "180"}},
                {"operation": "blur", "params": {"intensity": 5}},
            ]
        },
    )
    assert op == CompositeOperation(
        (RotateOperation.rotate_180(), BlurOperation(BlurIntensity.MEDIUM))
    )


def test_batch_step_error_names_index(resolver):
    entries = [
        {"operation": "rotate", "params": {"angle": "90"}},
        {"operation": "contrast", "params": {}},
    ]
    with pytest.raises(ValidationError, match=r"operations\[1\]") as exc_info:
        resolver.resolve("batch", {"operations": entries})
    assert exc_info.value.parameter == "contrast"
    assert exc_info.value.operation == "contrast"


@pytest.mark.parametrize(
    "operations",
    [[], "blur", [{"params": {}}], [{"operation": "batch", "params": {"operations": []}}]],
)
def test_batch_rejects_malformed(resolver, operations):
    with pytest.raises(ValidationError):
        resolver.resolve("batch", {"operations": operations})


def test_flip_directions(resolver):
    assert resolver.resolve("flip", {"direction": "horizontal"}) == FlipOperation.horizontal()
    assert resolver.resolve("flip", {"direction": " Vertical "}) == FlipOperation(FlipDirection.VERTICAL)


@pytest.mark.parametrize(
    "tag, params, parameter",
    [
        ("flip", {}, "direction"),
        ("flip", {"direction": "diagonal"}, "direction"),
        ("flip", {"direction": 1}, "direction"),
        ("mirror", {"side": "middle"}, "side"),
        ("grayscale", {"algorithm": "sepia"}, "algorithm"),
        ("saturation", {}, "saturation"),
        ("saturation", {"saturation": "2"}, "saturation"),
    ],
)
def test_choice_and_number_errors(resolver, tag, params, parameter):
    with pytest.raises(ValidationError) as exc_info:
        resolver.resolve(tag, params)
    assert exc_info.value.parameter == parameter


def test_mirror_sides(resolver):
    for side in MirrorSide:
        assert resolver.resolve("mirror", {"side": side.value}) == MirrorOperation(side)


def test_grayscale_algorithm_defaults_to_luminosity(resolver):
    assert resolver.resolve("grayscale", {}) == GrayscaleOperation(GrayscaleAlgorithm.LUMINOSITY)
    assert resolver.resolve("grayscale", {"algorithm": "average"}) == GrayscaleOperation(
        GrayscaleAlgorithm.AVERAGE
    )


def test_saturation(resolver):
    assert resolver.resolve("saturation", {"saturation": 0}) == SaturationOperation(0.0)
    assert resolver.resolve("saturation", {"saturation": 1.5}) == SaturationOperation(1.5)
