import cv2
import numpy as np
import pytest

from gradesnap.alignment import AlignmentSettings, orient_image, side_lengths
from gradesnap.calibration import find_calib_corners
from gradesnap.models import CornerSet
from gradesnap.regions import find_answer_regions, find_name_regions
from gradesnap.template import DEFAULT_TEMPLATE

from conftest import SCALE, draw_sheet, frame_corners_expected


def test_side_lengths_upright():
    corners = CornerSet(ul=(0, 0), ur=(300, 0), ll=(0, 400), lr=(300, 400))
    assert side_lengths(corners) == pytest.approx((300, 400))


def test_side_lengths_swaps_when_sideways():
    corners = CornerSet(ul=(0, 0), ur=(400, 0), ll=(0, 300), lr=(400, 300))
    assert side_lengths(corners) == pytest.approx((300, 400))


def test_orient_image_crops_to_frame():
    gray = draw_sheet()
    corners = find_calib_corners(gray)
    result = orient_image(gray, corners)
    assert result is not None

    rows, cols = result.image.shape
    assert cols == pytest.approx(DEFAULT_TEMPLATE.frame_width * SCALE, abs=8)
    assert rows == pytest.approx(DEFAULT_TEMPLATE.frame_height * SCALE, abs=8)
    assert result.ratios.width_ratio == pytest.approx(cols / DEFAULT_TEMPLATE.frame_width)
    assert result.ratios.height_ratio == pytest.approx(rows / DEFAULT_TEMPLATE.frame_height)

    h_length, v_length = side_lengths(corners)
    assert result.corners == CornerSet.canonical(h_length, v_length)
    assert result.corners.ul == (0.0, 0.0)


def test_orient_image_maps_back_to_detected_corners():
    gray = draw_sheet()
    corners = find_calib_corners(gray)
    result = orient_image(gray, corners)
    assert result.transform_point((0.0, 0.0)) == pytest.approx(corners.ul, abs=1.5)
    expected_ul = frame_corners_expected()[0]
    assert result.transform_point((0.0, 0.0)) == pytest.approx(expected_ul, abs=5)


def test_orient_image_frame_outside_image():
    gray = np.full((200, 200), 255, dtype=np.uint8)
    corners = CornerSet(ul=(-50, 10), ur=(150, 10), ll=(-50, 190), lr=(150, 190))
    assert orient_image(gray, corners) is None


def test_orient_image_degenerate_corners():
    gray = np.full((200, 200), 255, dtype=np.uint8)
    corners = CornerSet(ul=(50, 50), ur=(50, 50), ll=(50, 50), lr=(50, 50))
    assert orient_image(gray, corners) is None


def test_orient_image_canvas_too_small():
    gray = draw_sheet()
    corners = find_calib_corners(gray)
    assert orient_image(gray, corners, AlignmentSettings(canvas_scale=0.5)) is None


def _tilt(img, degrees):
    padded = cv2.copyMakeBorder(img, 250, 250, 250, 250, cv2.BORDER_CONSTANT, value=255)
    rows, cols = padded.shape
    m = cv2.getRotationMatrix2D((cols / 2, rows / 2), degrees, 1.0)
    return cv2.warpAffine(padded, m, (cols, rows), borderValue=255)


@pytest.mark.parametrize(
    "transform",
    [
        lambda img: img,
        lambda img: _tilt(img, 9),
        lambda img: cv2.rotate(img, cv2.ROTATE_90_CLOCKWISE),
    ],
    ids=["derecha", "inclinada", "girada"],
)
def test_regions_map_back_inside_calibration_frame(transform):
    gray = transform(draw_sheet())
    corners = find_calib_corners(gray)
    assert corners is not None
    result = orient_image(gray, corners)
    assert result is not None

    bx, by, bw, bh = cv2.boundingRect(np.array(corners.as_quad(), dtype=np.float32))
    ul = result.corners.ul
    regions = find_answer_regions(ul, result.ratios, 100)
    regions += find_name_regions(ul, result.ratios)
    assert len(regions) == 117

    tolerance = 2.0
    for region in regions:
        for point in (
            (region.x, region.y),
            (region.x1, region.y),
            (region.x, region.y1),
            (region.x1, region.y1),
        ):
            px, py = result.transform_point(point)
            assert bx - tolerance <= px <= bx + bw + tolerance
            assert by - tolerance <= py <= by + bh + tolerance
