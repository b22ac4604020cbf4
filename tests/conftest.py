"""Pytest configuration and shared synthetic images for the side matcher tests."""

import logging
import sys
from pathlib import Path

import numpy as np
import pytest

# Add the project root to Python path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

# Disable some verbose loggers during testing
logging.getLogger('PIL').setLevel(logging.WARNING)
logging.getLogger('matplotlib').setLevel(logging.WARNING)

TILE = 60
ROWS, COLS = 2, 3
MARGIN = 30
GAP = 30
STRIPE = 10
PAPER = (200, 200, 200)

# BGR, pairwise far apart and far from PAPER
VERTICAL_CUT_COLORS = [(255, 0, 0), (0, 255, 0), (0, 0, 255), (255, 255, 0)]
HORIZONTAL_CUT_COLORS = [(255, 0, 255), (0, 255, 255), (0, 128, 255)]

# (dx, dy) to the neighbouring tile
DIRECTIONS = {'left': (-1, 0), 'right': (1, 0), 'up': (0, -1), 'down': (0, 1)}
OPPOSITE = {'left': 'right', 'right': 'left', 'up': 'down', 'down': 'up'}


def make_mask(shape, rectangles):
    """0/255 mask with the given inclusive (x0, y0, x1, y1) rectangles set."""
    mask = np.zeros(shape, dtype=np.uint8)
    for x0, y0, x1, y1 in rectangles:
        mask[y0:y1 + 1, x0:x1 + 1] = 255
    return mask


def make_source_picture():
    """The uncut picture: paper with a unique color stripe over every cut."""
    picture = np.full((ROWS * TILE, COLS * TILE, 3), PAPER, dtype=np.uint8)
    half = STRIPE // 2

    color = iter(VERTICAL_CUT_COLORS)
    for row in range(ROWS):
        for cut in range(1, COLS):
            x = cut * TILE
            picture[row * TILE:(row + 1) * TILE, x - half:x + half] = next(color)

    color = iter(HORIZONTAL_CUT_COLORS)
    for cut in range(1, ROWS):
        y = cut * TILE
        for col in range(COLS):
            picture[y - half:y + half, col * TILE:(col + 1) * TILE] = next(color)

    return picture


def tile_offset(row, col):
    """(x, y) of a tile's top-left corner on the photo."""
    return MARGIN + col * (TILE + GAP), MARGIN + row * (TILE + GAP)


def make_puzzle_photo():
    """Photo of the cut picture: tiles spread apart on a black background."""
    picture = make_source_picture()
    height = 2 * MARGIN + ROWS * TILE + (ROWS - 1) * GAP
    width = 2 * MARGIN + COLS * TILE + (COLS - 1) * GAP
    photo = np.zeros((height, width, 3), dtype=np.uint8)

    for row in range(ROWS):
        for col in range(COLS):
            x, y = tile_offset(row, col)
            photo[y:y + TILE, x:x + TILE] = picture[row * TILE:(row + 1) * TILE,
                                                    col * TILE:(col + 1) * TILE]
    return photo


def side_direction(side, mask_shape):
    """Which way a side faces, judged from its mean pixel and the crop center."""
    h, w = mask_shape[:2]
    mean_x, mean_y = np.asarray(side, dtype=np.float64).mean(axis=0)
    dx = mean_x - (w - 1) / 2.0
    dy = mean_y - (h - 1) / 2.0
    if abs(dx) > abs(dy):
        return 'right' if dx > 0 else 'left'
    return 'down' if dy > 0 else 'up'


def true_neighbors(components, boundaries):
    """(piece, side) -> (piece, side) for every side that faces another tile.

    Pieces are numbered row-major, the order the segmentation produces.
    """
    direction_to_side = []
    for component, boundary in zip(components, boundaries):
        direction_to_side.append({side_direction(side, component.mask.shape): index
                                  for index, side in enumerate(boundary.sides)})

    expected = {}
    for piece in range(ROWS * COLS):
        row, col = divmod(piece, COLS)
        for direction, (dx, dy) in DIRECTIONS.items():
            other_row, other_col = row + dy, col + dx
            if not (0 <= other_row < ROWS and 0 <= other_col < COLS):
                continue
            other = other_row * COLS + other_col
            expected[(piece, direction_to_side[piece][direction])] = (
                other, direction_to_side[other][OPPOSITE[direction]])
    return expected


@pytest.fixture
def puzzle_photo():
    """Synthetic 2x3 puzzle photo (BGR uint8)."""
    return make_puzzle_photo()


@pytest.fixture
def puzzle_photo_path(tmp_path, puzzle_photo):
    """The synthetic photo written losslessly to disk."""
    import cv2

    path = tmp_path / "synthetic_six_parts.png"
    assert cv2.imwrite(str(path), puzzle_photo)
    return path


@pytest.fixture
def random_mask():
    """Reproducible noisy 0/255 mask."""
    rng = np.random.default_rng(7)
    return np.where(rng.random((97, 83)) < 0.55, 255, 0).astype(np.uint8)
