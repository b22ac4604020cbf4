"""Side color features and side matching."""

from .side_matching import (
    Matched,
    MatchCandidate,
    SideComparison,
    Unmatched,
    UNMATCHED,
    compare_sides,
    match_sides,
    update_candidate
)

__all__ = [
    'Matched',
    'MatchCandidate',
    'SideComparison',
    'Unmatched',
    'UNMATCHED',
    'compare_sides',
    'match_sides',
    'update_candidate'
]
