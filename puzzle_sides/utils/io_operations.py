"""Text reports of side matching results."""

import logging
import os
from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Tuple

logger = logging.getLogger(__name__)

SideKey = Tuple[int, int]
NO_MATCH: SideKey = (-1, -1)


def format_match(piece_a: int, side_a: int, candidate) -> str:
    """One report line for a side, in the legacy -1 sentinel notation."""
    piece_b, side_b, best, second = candidate.to_record()
    return (f"obj{piece_a}-side{side_a} -> obj{piece_b}-side{side_b} "
            f"with difference={best:g} (second best: {second:g})")


def write_match_report(matches: Sequence[Sequence], output_file: str) -> None:
    """Write every side's best match, one line per side.

    Args:
        matches: ``matches[piece][side]`` MatchCandidate records
        output_file: Path of the report file
    """
    directory = os.path.dirname(output_file)
    if directory:
        os.makedirs(directory, exist_ok=True)

    with open(output_file, 'w', encoding='utf-8') as f:
        f.write("Side Matching Summary\n")
        f.write("=" * 50 + "\n\n")
        f.write(f"Pieces: {len(matches)}\n")
        f.write(f"Sides: {sum(len(piece) for piece in matches)}\n\n")

        for piece_a, piece_matches in enumerate(matches):
            for side_a, candidate in enumerate(piece_matches):
                if candidate.is_matched:
                    f.write(format_match(piece_a, side_a, candidate) + "\n")
                else:
                    f.write(f"obj{piece_a}-side{side_a} -> unmatched\n")


@dataclass
class MatchEvaluation:
    """Comparison of found matches with hand-verified answers."""
    correct: int = 0
    incorrect: int = 0
    mismatches: List[Tuple[SideKey, SideKey, Tuple]] = field(default_factory=list)


def evaluate_matches(matches: Sequence[Sequence],
                     expected: Dict[SideKey, SideKey]) -> MatchEvaluation:
    """Count sides whose best match equals the expected (piece, side).

    Every side is judged. Sides missing from ``expected`` are border sides
    whose right answer is "no match" (-1, -1), so any match found for them
    counts as incorrect.
    """
    for piece_a, side_a in expected:
        if piece_a >= len(matches) or side_a >= len(matches[piece_a]):
            raise ValueError(f"evaluate_matches: no side obj{piece_a}-side{side_a} in the results")

    evaluation = MatchEvaluation()
    for piece_a, piece_matches in enumerate(matches):
        for side_a, candidate in enumerate(piece_matches):
            expected_target = tuple(expected.get((piece_a, side_a), NO_MATCH))
            record = candidate.to_record()
            if record[:2] == expected_target:
                evaluation.correct += 1
            else:
                evaluation.incorrect += 1
                evaluation.mismatches.append(((piece_a, side_a), expected_target, record))
                logger.warning(f"EXPECTED: obj{piece_a}-side{side_a} -> obj{expected_target[0]}"
                               f"-side{expected_target[1]} - BUT FOUND: "
                               f"{format_match(piece_a, side_a, candidate)}")

    return evaluation
