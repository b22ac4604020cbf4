"""Pairwise color matching of puzzle piece sides."""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple, Union

import numpy as np

from .color_sampling import blur_colors, color_differences, extract_colors, resample_sequence
from ..config.settings import BLUR_STRENGTH
from ..utils import stats
from ..utils.image_utils import channel_count
from ..utils.parallel import parallel_map

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Unmatched:
    """No candidate has been evaluated for the side."""
    is_matched = False

    def to_record(self) -> Tuple[int, int, float, float]:
        return -1, -1, -1.0, -1.0


@dataclass(frozen=True)
class Matched:
    """Best counterpart found so far for a side.

    Attributes:
        target_piece: Index of the matched piece
        target_side: Index of the matched side on that piece
        difference: Score of the match (0 means identical colors)
        second_best: Score of the previous best match, None if there was none
    """
    target_piece: int
    target_side: int
    difference: float
    second_best: Optional[float] = None
    is_matched = True

    def to_record(self) -> Tuple[int, int, float, float]:
        second = -1.0 if self.second_best is None else self.second_best
        return self.target_piece, self.target_side, self.difference, second


MatchCandidate = Union[Unmatched, Matched]
UNMATCHED = Unmatched()


def update_candidate(current: MatchCandidate, target_piece: int, target_side: int,
                     difference: float) -> MatchCandidate:
    """Streaming min-selection step.

    The new candidate wins when there is no match yet or when its score is
    less than or equal to the current best; the old best score then becomes
    the second best. A losing candidate is dropped.
    """
    if not current.is_matched:
        return Matched(target_piece, target_side, difference, None)
    if difference <= current.difference:
        return Matched(target_piece, target_side, difference, current.difference)
    return current


@dataclass(frozen=True)
class SideComparison:
    """Aligned colors of two sides and how much they differ."""
    colors_a: np.ndarray
    colors_b: np.ndarray
    differences: np.ndarray
    score: float


def compare_sides(image_a: np.ndarray, side_a: np.ndarray,
                  image_b: np.ndarray, side_b: np.ndarray,
                  blur_strength: float = BLUR_STRENGTH) -> SideComparison:
    """Compare the colors along side A with the colors along side B.

    Both sides run clockwise around their own piece, so two sides that touch
    run in opposite directions; side B is read backwards to line them up
    like the two halves of a zipper. Both sequences are smoothed and
    resampled to the shorter length before the per-position comparison, and
    the median of the per-position differences is the score.
    """
    channels = channel_count(image_a)
    if channel_count(image_b) != channels:
        raise ValueError(f"compare_sides: images have {channels} and {channel_count(image_b)} channels")

    colors_a = extract_colors(image_a, side_a)
    colors_b = extract_colors(image_b, np.asarray(side_b)[::-1])

    n = min(len(colors_a), len(colors_b))
    if n == 0:
        raise ValueError("compare_sides: cannot compare an empty side")

    a = resample_sequence(blur_colors(colors_a, blur_strength), n)
    b = resample_sequence(blur_colors(colors_b, blur_strength), n)

    differences = color_differences(a, b)
    return SideComparison(colors_a=a, colors_b=b, differences=differences,
                          score=stats.median(differences))


ComparisonObserver = Callable[[int, int, int, int, SideComparison], None]


def match_side(piece_a: int, side_a: int, images: Sequence[np.ndarray],
               sides: Sequence[Sequence[np.ndarray]], blur_strength: float = BLUR_STRENGTH,
               observer: Optional[ComparisonObserver] = None) -> MatchCandidate:
    """Best and second best counterpart of one side among all other pieces' sides."""
    candidate: MatchCandidate = UNMATCHED
    pixels_a = sides[piece_a][side_a]

    for piece_b in range(len(images)):
        if piece_b == piece_a:
            continue
        for side_b, pixels_b in enumerate(sides[piece_b]):
            comparison = compare_sides(images[piece_a], pixels_a, images[piece_b], pixels_b,
                                       blur_strength)
            candidate = update_candidate(candidate, piece_b, side_b, comparison.score)
            if observer is not None:
                observer(piece_a, side_a, piece_b, side_b, comparison)

    return candidate


def match_sides(images: Sequence[np.ndarray], sides: Sequence[Sequence[np.ndarray]],
                blur_strength: float = BLUR_STRENGTH, parallel: bool = False,
                max_workers: Optional[int] = None,
                observer: Optional[ComparisonObserver] = None) -> List[List[MatchCandidate]]:
    """Match every side of every piece against the sides of all other pieces.

    Each (piece, side) target is independent, so targets may run on a
    thread pool; every task only fills its own slot. ``observer`` is called
    for every evaluated pair and forces sequential execution.

    Args:
        images: Cropped color image of each piece
        sides: For each piece, its ordered side pixel sequences
        blur_strength: Smoothing applied to the color sequences
        parallel: Evaluate targets on a worker pool
        max_workers: Number of workers for the parallel path
        observer: Optional callback(piece_a, side_a, piece_b, side_b, comparison)

    Returns:
        ``result[piece][side]`` is the MatchCandidate of that side
    """
    if len(images) != len(sides):
        raise ValueError(f"match_sides: {len(images)} images but {len(sides)} side lists")

    targets = [(piece, side) for piece in range(len(sides)) for side in range(len(sides[piece]))]
    logger.info(f"matching {len(targets)} sides with each other")

    def run(target: Tuple[int, int]) -> MatchCandidate:
        return match_side(target[0], target[1], images, sides, blur_strength, observer)

    if parallel and observer is None:
        flat = parallel_map(run, targets, max_workers=max_workers)
    else:
        flat = [run(target) for target in targets]

    matches: List[List[MatchCandidate]] = [[] for _ in sides]
    for (piece, _), candidate in zip(targets, flat):
        matches[piece].append(candidate)
    return matches
