from types import SimpleNamespace

import pytest

from wastesnap.image_processing.bounding_box import normalize_bounding_box, to_pixel_box


def test_box_2d_converts_to_normalized_xywh() -> None:
    box = normalize_bounding_box([100, 200, 300, 600])
    assert box == pytest.approx({"x": 0.2, "y": 0.1, "width": 0.4, "height": 0.2})


@pytest.mark.parametrize("box_2d", [None, [1, 2, 3], [1, 2, 3, 4, 5], "100,200,300,600", [1, "a", 3, 4]])
def test_unusable_box_yields_zero_geometry(box_2d) -> None:
    assert normalize_bounding_box(box_2d) == {"x": 0.0, "y": 0.0, "width": 0.0, "height": 0.0}


def test_overflowing_box_is_not_clamped() -> None:
    box = normalize_bounding_box([900, 900, 1200, 1100])
    assert box["x"] + box["width"] == pytest.approx(1.1)


def test_pixel_box_is_clamped_to_image() -> None:
    detection = SimpleNamespace(x=0.5, y=0.5, width=0.8, height=0.8)
    assert to_pixel_box(detection, 100, 50) == {"left": 50, "top": 25, "right": 99, "bottom": 49}
