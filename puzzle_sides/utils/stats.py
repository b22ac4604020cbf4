"""Numeric summaries used for thresholds, match scores and log messages."""

import math
from typing import Sequence, Union

import numpy as np

Number = Union[int, float]


def _as_array(values: Sequence[Number]) -> np.ndarray:
    return np.asarray(values).ravel()


def _is_float_data(values: np.ndarray) -> bool:
    return values.dtype.kind == 'f'


def _round_half_away(x: float) -> int:
    return int(math.copysign(math.floor(abs(x) + 0.5), x))


def _format_fixed(x: float, decimals: int) -> str:
    s = f"{x:.{decimals}f}"
    if s.startswith('-') and float(s) == 0.0:
        s = "0"
    return s


def _format_pretty(x: float, max_decimals: int = 10) -> str:
    s = f"{x:.{max_decimals}f}".rstrip('0').rstrip('.')
    if s in ("", "-0"):
        s = "0"
    return s


def _format_value(x: Number, as_float: bool) -> str:
    if as_float:
        return _format_pretty(float(x))
    return str(int(x))


def min_value(values: Sequence[Number]) -> Number:
    """Smallest value. Raises ValueError on empty input."""
    v = _as_array(values)
    if v.size == 0:
        raise ValueError("min_value: empty input")
    return v.min().item()


def max_value(values: Sequence[Number]) -> Number:
    """Largest value. Raises ValueError on empty input."""
    v = _as_array(values)
    if v.size == 0:
        raise ValueError("max_value: empty input")
    return v.max().item()


def total(values: Sequence[Number]) -> float:
    """Sum of the values as a float (0.0 for empty input)."""
    v = _as_array(values)
    return float(np.sum(v, dtype=np.float64))


def percentile(values: Sequence[Number], p: float) -> float:
    """Percentile with linear interpolation between order statistics.

    ``p`` is in [0, 100]. The position ``p / 100 * (n - 1)`` in sorted order
    is located with partial selection, and the two bracketing values are
    blended by the fractional part of the position.

    Raises:
        ValueError: if ``values`` is empty or ``p`` is out of range
    """
    v = _as_array(values)
    if v.size == 0:
        raise ValueError("percentile: empty input")
    if not (0.0 <= p <= 100.0):
        raise ValueError(f"percentile: p={p} out of range [0,100]")

    n = v.size
    if n == 1:
        return float(v[0])

    v = v.astype(np.float64)
    if p <= 0.0:
        return float(v.min())
    if p >= 100.0:
        return float(v.max())

    pos = p / 100.0 * (n - 1)
    i = int(math.floor(pos))
    j = int(math.ceil(pos))

    selected = np.partition(v, (i, j))
    a = float(selected[i])
    if j == i:
        return a
    b = float(selected[j])
    t = pos - i
    return a + t * (b - a)


def median(values: Sequence[Number]) -> float:
    """50th percentile."""
    return percentile(values, 50.0)


def to_percent(part: Number, whole: Number) -> str:
    """Format ``part / whole`` as a rounded integer percentage, e.g. ``"42%"``."""
    if whole == 0:
        raise ValueError("to_percent: total is 0")
    return f"{_round_half_away(part * 100.0 / whole)}%"


def preview_values(values: Sequence[Number]) -> str:
    """Short listing: every value up to 10, otherwise the first and last five."""
    v = _as_array(values)
    n = v.size
    as_float = _is_float_data(v)

    if n <= 10:
        items = ", ".join(_format_value(x, as_float) for x in v.tolist())
        return f"{n} values - [{items}]"

    head = ", ".join(_format_value(x, as_float) for x in v[:5].tolist())
    tail = ", ".join(_format_value(x, as_float) for x in v[-5:].tolist())
    return f"{n} values - [{head}, ... {tail}]"


def summary_stats(values: Sequence[Number], decimals: int = 2) -> str:
    """Five-number summary line: min, 10%, median, 90% and max.

    Float data is printed with ``decimals`` fixed digits, integer data prints
    min/max as integers and the percentiles without trailing zeros.
    """
    v = _as_array(values)
    n = v.size
    if n == 0:
        return "0 values - (empty)"

    p10 = percentile(v, 10.0)
    med = median(v)
    p90 = percentile(v, 90.0)

    if _is_float_data(v):
        fields = [_format_fixed(float(x), decimals)
                  for x in (min_value(v), p10, med, p90, max_value(v))]
    else:
        fields = [str(int(min_value(v))), _format_pretty(p10), _format_pretty(med),
                  _format_pretty(p90), str(int(max_value(v)))]

    return (f"{n} values - (min={fields[0]} 10%={fields[1]} median={fields[2]} "
            f"90%={fields[3]} max={fields[4]})")
