"""End-to-end processing of one puzzle photo: pieces, sides and side matches."""

import logging
import os
import shutil
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from .boundary import BoundaryDecomposer, OpenCVBoundaryDecomposer, PieceBoundary
from .morphology import clean_foreground_mask
from .segmentation import Component, label_components, split_objects
from .thresholding import background_threshold, threshold_mask, to_grayscale_float
from ..config.settings import (
    BLUR_STRENGTH, DEBUG_SUBDIRS, EXPECTED_PIECE_COUNTS, EXTRA_EROSION, MORPHOLOGY_STRENGTH
)
from ..features.side_matching import MatchCandidate, SideComparison, match_sides
from ..utils import stats
from ..utils.image_utils import channel_count, read_image, save_image
from ..utils.io_operations import (
    MatchEvaluation, evaluate_matches, format_match, write_match_report
)
from ..utils.parallel import Timer
from ..utils.visualization import (
    colorize_labels, comparison_filename, draw_contour_order, draw_corners, draw_matches,
    draw_sides, plot_side_comparison
)

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Everything computed for one photo."""
    image_name: str
    components: List[Component]
    boundaries: List[PieceBoundary]
    matches: List[List[MatchCandidate]]
    background_threshold: float
    evaluation: Optional[MatchEvaluation] = None

    @property
    def offsets(self) -> List[Tuple[int, int]]:
        return [component.offset for component in self.components]

    @property
    def sides(self) -> List[List[np.ndarray]]:
        return [boundary.sides for boundary in self.boundaries]


class _DebugWriter:
    """Writes debug images under one directory; does nothing without a directory."""

    def __init__(self, debug_dir: Optional[str]):
        self.debug_dir = debug_dir

    @property
    def enabled(self) -> bool:
        return self.debug_dir is not None

    def reset(self) -> None:
        # Stale files from an older run would be misleading
        if self.enabled and os.path.exists(self.debug_dir):
            shutil.rmtree(self.debug_dir)

    def path(self, *parts: str) -> str:
        return os.path.join(self.debug_dir, *parts)

    def dump(self, image: np.ndarray, *parts: str) -> None:
        if self.enabled:
            save_image(image, self.path(*parts))


def process_image(image_path: str, debug_dir: Optional[str] = None,
                  strength: int = MORPHOLOGY_STRENGTH, extra_erosion: int = EXTRA_EROSION,
                  blur_strength: float = BLUR_STRENGTH,
                  expected_counts: Sequence[int] = EXPECTED_PIECE_COUNTS,
                  expected_matches: Optional[Dict[Tuple[int, int], Tuple[int, int]]] = None,
                  parallel: bool = False, max_workers: Optional[int] = None,
                  draw_plots: bool = False,
                  decomposer: Optional[BoundaryDecomposer] = None) -> PipelineResult:
    """Find the pieces of a photo and match their sides.

    Args:
        image_path: Path of the photo (3-channel)
        debug_dir: Directory for debug images, cleared first; None disables them
        strength: Radius of the mask cleanup morphology
        extra_erosion: Final erosion radius that keeps sides off the background
        blur_strength: Smoothing of the side color sequences
        expected_counts: Accepted numbers of pieces; empty accepts any count
        expected_matches: Known answers (piece, side) -> (piece, side) to score against
        parallel: Use worker pools for morphology and matching
        max_workers: Number of workers
        draw_plots: Save one comparison plot per side pair (slow; needs debug_dir)
        decomposer: Boundary decomposition, OpenCV-based by default

    Returns:
        PipelineResult with components, sides, matches and optional evaluation
    """
    image_name = os.path.splitext(os.path.basename(image_path))[0]
    decomposer = decomposer or OpenCVBoundaryDecomposer()
    debug = _DebugWriter(debug_dir)
    debug.reset()

    with Timer("image loaded"):
        image = read_image(image_path)
    h, w = image.shape[:2]
    if channel_count(image) != 3:
        raise ValueError(f"{image_path}: expected a 3-channel image, got {channel_count(image)}")
    if image.dtype != np.uint8:
        raise ValueError(f"{image_path}: expected 8-bit pixels, got {image.dtype}")
    debug.dump(image, "00_input.jpg")

    grayscale = to_grayscale_float(image)
    debug.dump(grayscale, "01_grayscale.jpg")

    threshold = background_threshold(grayscale)
    foreground = threshold_mask(grayscale, threshold)
    foreground_pixels = stats.total(foreground) / 255.0
    logger.info(f"thresholded background: {stats.to_percent(w * h - foreground_pixels, w * h)}")
    debug.dump(foreground, "02_is_foreground_mask.png")

    with Timer("full morphology"):
        stages = clean_foreground_mask(foreground, strength, extra_erosion, parallel, max_workers)
    debug.dump(stages.dilated, "03_is_foreground_dilated.png")
    debug.dump(stages.dilated_eroded, "04_is_foreground_dilated_eroded.png")
    debug.dump(stages.dilated_eroded_eroded, "05_is_foreground_dilated_eroded_eroded.png")
    debug.dump(stages.dilated_eroded_eroded_dilated,
               "06_is_foreground_dilated_eroded_eroded_dilated.png")

    with Timer("objects extraction"):
        components = split_objects(image, stages.final)
    logger.info(f"{len(components)} objects extracted")
    if expected_counts and len(components) not in expected_counts:
        raise ValueError(f"{image_name}: extracted {len(components)} objects, "
                         f"expected one of {tuple(expected_counts)}")
    debug.dump(colorize_labels(label_components(image.shape, components)),
               "07_colorized_objects.jpg")

    with Timer("sides extraction"):
        boundaries = []
        for index, component in enumerate(components):
            boundary = decomposer.decompose(component.mask)
            boundaries.append(boundary)
            logger.debug(f"object{index}: {len(boundary.contour)} contour pixels, "
                         f"side lengths {stats.preview_values([len(s) for s in boundary.sides])}")
            _dump_object(debug, index, component, boundary)

    images = [component.image for component in components]
    sides = [boundary.sides for boundary in boundaries]

    observer = None
    if draw_plots and debug.enabled:
        def observer(piece_a: int, side_a: int, piece_b: int, side_b: int,
                     comparison: SideComparison) -> None:
            plot_side_comparison(
                images[piece_a], sides[piece_a][side_a], images[piece_b], sides[piece_b][side_b],
                comparison,
                debug.path(DEBUG_SUBDIRS['objects'], f"object{piece_a}", f"side{side_a}",
                           comparison_filename(comparison.score, piece_b, side_b)),
                title=f"obj{piece_a}-side{side_a} vs obj{piece_b}-side{side_b}")

    with Timer("sides matching"):
        matches = match_sides(images, sides, blur_strength, parallel=parallel,
                              max_workers=max_workers, observer=observer)

    for piece_a, piece_matches in enumerate(matches):
        for side_a, candidate in enumerate(piece_matches):
            if candidate.is_matched:
                logger.info(format_match(piece_a, side_a, candidate))

    evaluation = None
    if expected_matches:
        evaluation = evaluate_matches(matches, expected_matches)
        logger.info(f"correct matches: {evaluation.correct}")
        logger.info(f"incorrect matches: {evaluation.incorrect}")

    if debug.enabled:
        offsets = [component.offset for component in components]
        debug.dump(draw_matches(image, offsets, sides, matches), "08_matched_sides.jpg")
        write_match_report(matches, debug.path("matches.txt"))

    return PipelineResult(
        image_name=image_name,
        components=components,
        boundaries=boundaries,
        matches=matches,
        background_threshold=threshold,
        evaluation=evaluation
    )


def _dump_object(debug: _DebugWriter, index: int, component: Component,
                 boundary: PieceBoundary) -> None:
    if not debug.enabled:
        return
    folder = (DEBUG_SUBDIRS['objects'], f"object{index}")
    shape = component.mask.shape
    debug.dump(component.image, *folder, "01_image.jpg")
    debug.dump(component.mask, *folder, "02_mask.jpg")
    debug.dump(draw_contour_order(shape, boundary.contour), *folder, "04_mask_contour_clockwise.jpg")
    debug.dump(draw_corners(shape, boundary.corners), *folder, "05_corners_visualization.jpg")
    debug.dump(draw_sides(shape, boundary.sides), *folder, "06_sides.jpg")
