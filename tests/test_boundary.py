"""Tests for the OpenCV boundary decomposition."""

import numpy as np
import pytest

from puzzle_sides.core.boundary import OpenCVBoundaryDecomposer, signed_area

from conftest import make_mask


@pytest.fixture
def decomposer():
    return OpenCVBoundaryDecomposer()


@pytest.fixture
def rectangle_mask():
    return make_mask((20, 30), [(5, 4, 24, 15)])


def test_signed_area_is_positive_for_clockwise_on_screen():
    clockwise = np.array([(0, 0), (4, 0), (4, 3), (0, 3)])
    assert signed_area(clockwise) == pytest.approx(12.0)
    assert signed_area(clockwise[::-1]) == pytest.approx(-12.0)


def test_trace_is_clockwise_and_starts_top_left(decomposer, rectangle_mask):
    contour = decomposer.trace(rectangle_mask)

    assert contour.shape[1] == 2
    assert contour[0].tolist() == [5, 4]
    assert contour[1].tolist() == [6, 4]
    assert signed_area(contour) > 0
    # Every perimeter pixel exactly once
    assert len(contour) == 2 * 20 + 2 * 12 - 4
    assert len({tuple(p) for p in contour.tolist()}) == len(contour)


def test_corners_of_rectangle(decomposer, rectangle_mask):
    contour = decomposer.trace(rectangle_mask)
    corners = decomposer.find_corners(contour, 4)
    assert corners.tolist() == [[5, 4], [24, 4], [24, 15], [5, 15]]


def test_rectangle_splits_into_four_clockwise_sides(decomposer, rectangle_mask):
    boundary = decomposer.decompose(rectangle_mask)

    top, right, bottom, left = boundary.sides
    assert np.all(top[:, 1] == 4) and len(top) == 20
    assert np.all(right[:, 0] == 24) and len(right) == 12
    assert np.all(bottom[:, 1] == 15) and len(bottom) == 20
    assert np.all(left[:, 0] == 5) and len(left) == 12

    # Consecutive sides share their corner
    for side, following in zip(boundary.sides, boundary.sides[1:] + boundary.sides[:1]):
        assert side[-1].tolist() == following[0].tolist()
    assert sum(len(side) for side in boundary.sides) == len(boundary.contour) + 4


def test_split_rejects_corner_off_contour(decomposer, rectangle_mask):
    contour = decomposer.trace(rectangle_mask)
    with pytest.raises(ValueError, match="not on the contour"):
        decomposer.split_by_corners(contour, np.array([(5, 4), (10, 10), (24, 15), (5, 15)]))


def test_find_corners_only_supports_four(decomposer, rectangle_mask):
    contour = decomposer.trace(rectangle_mask)
    with pytest.raises(ValueError, match="rectangular"):
        decomposer.find_corners(contour, 3)


def test_trace_rejects_empty_mask(decomposer):
    with pytest.raises(ValueError, match="no foreground"):
        decomposer.trace(np.zeros((10, 10), dtype=np.uint8))


def test_trace_keeps_largest_object(decomposer):
    mask = make_mask((40, 40), [(2, 2, 4, 4), (10, 10, 30, 30)])
    contour = decomposer.trace(mask)
    assert contour[0].tolist() == [10, 10]
