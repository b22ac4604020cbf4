"""Tests for connected-component extraction."""

import numpy as np
import pytest

from puzzle_sides.core.bbox import BoundingBox
from puzzle_sides.core.disjoint_set import DisjointSetUnion
from puzzle_sides.core.segmentation import label_components, split_objects

from conftest import make_mask


def test_disjoint_set_unites_and_finds():
    dsu = DisjointSetUnion(6)
    dsu.unite(0, 1)
    dsu.unite(2, 3)
    dsu.unite(1, 3)

    assert dsu.find(0) == dsu.find(2)
    assert dsu.find(4) != dsu.find(0)
    assert dsu.find(5) == 5


def test_disjoint_set_equal_rank_keeps_first_root():
    dsu = DisjointSetUnion(4)
    assert dsu.unite(2, 3) == 2
    assert dsu.unite(1, 2) == 2  # rank 1 root beats rank 0 root


def test_bounding_box_grows():
    box = BoundingBox()
    assert box.is_empty()
    assert box.width == 0

    box.include_pixel(5, 7)
    box.include_pixel(2, 9)

    assert not box.is_empty()
    assert box.min == (2, 7)
    assert (box.width, box.height) == (4, 3)


def test_two_rectangles_give_two_ordered_components():
    mask = make_mask((40, 50), [(30, 20, 39, 29), (5, 3, 14, 9)])
    image = np.dstack([mask // 2, mask // 3, mask // 4])

    components = split_objects(image, mask)

    assert len(components) == 2
    first, second = components
    assert first.offset == (5, 3)
    assert second.offset == (30, 20)
    assert first.mask.shape == (7, 10)
    assert second.mask.shape == (10, 10)
    assert first.area == 70
    assert first.image.shape == (7, 10, 3)


def test_order_is_row_first_then_column():
    mask = make_mask((30, 30), [(20, 2, 25, 6), (2, 2, 6, 6), (2, 15, 6, 20)])
    offsets = [c.offset for c in split_objects(mask, mask)]
    assert offsets == [(2, 2), (20, 2), (2, 15)]


def test_crops_contain_only_their_own_pixels():
    # An L shape whose bounding box encloses a separate small square
    mask = make_mask((30, 30), [(2, 2, 4, 25), (2, 23, 25, 25), (10, 8, 14, 12)])

    components = split_objects(mask, mask)

    assert len(components) == 2
    big, small = components
    assert big.offset == (2, 2)
    assert small.offset == (10, 8)
    # The small square lies inside the L's box but is not part of its mask
    assert np.all(big.mask[6:11, 8:13] == 0)
    # The crop of the source image still shows it
    assert np.all(big.image[6:11, 8:13] == 255)
    assert small.area == 25


@pytest.mark.parametrize("anti_diagonal", [False, True])
def test_diagonal_pixels_are_connected(anti_diagonal):
    mask = np.zeros((10, 10), dtype=np.uint8)
    for i in range(8):
        mask[i, 7 - i if anti_diagonal else i] = 255

    components = split_objects(mask, mask)

    assert len(components) == 1
    assert components[0].area == 8


def test_u_shape_is_one_component():
    # Arms first meet at the bottom row, after both were labelled separately
    mask = make_mask((20, 20), [(2, 2, 4, 15), (12, 2, 14, 15), (2, 13, 14, 15)])
    assert len(split_objects(mask, mask)) == 1


def test_empty_mask_gives_no_components():
    mask = np.zeros((12, 9), dtype=np.uint8)
    assert split_objects(mask, mask) == []


def test_rejects_multichannel_mask():
    mask = np.zeros((8, 8, 3), dtype=np.uint8)
    with pytest.raises(ValueError, match="1 channel"):
        split_objects(mask, mask)


def test_rejects_mismatched_sizes():
    with pytest.raises(ValueError, match="does not match"):
        split_objects(np.zeros((8, 9, 3), dtype=np.uint8), np.zeros((8, 8), dtype=np.uint8))


def test_label_components_round_trip():
    mask = make_mask((40, 50), [(30, 20, 39, 29), (5, 3, 14, 9)])
    components = split_objects(mask, mask)

    labels = label_components(mask.shape, components)

    assert set(np.unique(labels).tolist()) == {0, 1, 2}
    assert labels[3, 5] == 1
    assert labels[20, 30] == 2
    assert np.array_equal(labels > 0, mask == 255)


def test_rejects_non_binary_mask_pixels():
    mask = make_mask((20, 20), [(2, 2, 6, 6)])
    mask[10:13, 10:13] = 128
    with pytest.raises(ValueError, match="row=10 column=10"):
        split_objects(mask, mask)
