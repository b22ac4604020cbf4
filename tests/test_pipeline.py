"""End-to-end tests on a synthetic six-piece puzzle photo."""

import cv2
import numpy as np
import pytest

from puzzle_sides.core.pipeline import process_image
from puzzle_sides.core.thresholding import (
    background_threshold, border_intensities, threshold_mask, to_grayscale_float
)

from conftest import COLS, ROWS, tile_offset, true_neighbors


def test_border_intensities_visit_each_frame_pixel_once():
    gray = np.arange(20, dtype=np.float32).reshape(4, 5)
    border = border_intensities(gray)
    assert len(border) == 2 * 5 + 2 * 4 - 4
    assert sorted(border.tolist()) == [0, 1, 2, 3, 4, 5, 9, 10, 14, 15, 16, 17, 18, 19]


def test_background_threshold_scales_border_percentile():
    gray = np.full((10, 10), 20, dtype=np.float32)
    gray[3:7, 3:7] = 250
    assert background_threshold(gray) == pytest.approx(30.0)


def test_threshold_mask_is_strict():
    gray = np.array([[10.0, 30.0, 30.5]], dtype=np.float32)
    assert threshold_mask(gray, 30.0).tolist() == [[0, 0, 255]]


def test_grayscale_of_color_image():
    image = np.zeros((2, 2, 3), dtype=np.uint8)
    image[0, 0] = (255, 255, 255)
    gray = to_grayscale_float(image)
    assert gray.dtype == np.float32
    assert gray[0, 0] == pytest.approx(255.0)
    assert gray[1, 1] == 0.0


def test_pipeline_finds_pieces_in_row_major_order(puzzle_photo_path, tmp_path):
    result = process_image(str(puzzle_photo_path), debug_dir=str(tmp_path / "debug"),
                           expected_counts=(6,), parallel=False)

    assert result.image_name == "synthetic_six_parts"
    assert len(result.components) == ROWS * COLS
    for index, component in enumerate(result.components):
        x, y = tile_offset(*divmod(index, COLS))
        # The final erosion pulls every border in by two pixels
        assert component.offset == (x + 2, y + 2)
        assert component.mask.shape == (56, 56)
        assert all(len(side) == 56 for side in result.boundaries[index].sides)


def test_pipeline_pairs_inner_sides_with_their_neighbours(puzzle_photo_path, tmp_path):
    result = process_image(str(puzzle_photo_path), debug_dir=str(tmp_path / "debug"),
                           expected_counts=(6,), parallel=True, max_workers=2)

    expected = true_neighbors(result.components, result.boundaries)
    # 2x3 grid: 7 shared cuts, each seen from both sides
    assert len(expected) == 14
    for (piece, side), target in expected.items():
        assert result.matches[piece][side].to_record()[:2] == target


def test_pipeline_evaluates_against_known_answers(puzzle_photo_path, tmp_path):
    first = process_image(str(puzzle_photo_path), expected_counts=(6,))
    expected = true_neighbors(first.components, first.boundaries)

    result = process_image(str(puzzle_photo_path), expected_counts=(6,),
                           expected_matches=expected)

    # Every inner side is right; the 10 border sides still get some match
    assert result.evaluation.correct == 14
    assert result.evaluation.incorrect == 10
    assert all(target == (-1, -1) for _, target, _ in result.evaluation.mismatches)


def test_pipeline_writes_debug_files(puzzle_photo_path, tmp_path):
    debug_dir = tmp_path / "debug"
    debug_dir.mkdir()
    stale = debug_dir / "stale.txt"
    stale.write_text("old run")

    process_image(str(puzzle_photo_path), debug_dir=str(debug_dir), expected_counts=(6,))

    assert not stale.exists()
    for name in ("00_input.jpg", "02_is_foreground_mask.png", "07_colorized_objects.jpg",
                 "08_matched_sides.jpg", "matches.txt"):
        assert (debug_dir / name).is_file()
    assert (debug_dir / "objects" / "object5" / "06_sides.jpg").is_file()
    assert "obj0-side" in (debug_dir / "matches.txt").read_text(encoding='utf-8')


def test_pipeline_rejects_unexpected_piece_count(puzzle_photo_path):
    with pytest.raises(ValueError, match="extracted 6 objects"):
        process_image(str(puzzle_photo_path), expected_counts=(8,))


def test_pipeline_rejects_grayscale_photo(puzzle_photo, tmp_path):
    path = tmp_path / "gray.png"
    assert cv2.imwrite(str(path), cv2.cvtColor(puzzle_photo, cv2.COLOR_BGR2GRAY))

    with pytest.raises(ValueError, match="3-channel"):
        process_image(str(path))


def test_pipeline_reports_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        process_image(str(tmp_path / "missing.png"))
