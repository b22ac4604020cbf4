"""Debug visualizations for segmentation, sides and side matching."""

import os
from typing import List, Optional, Sequence, Tuple

import cv2
import matplotlib
matplotlib.use('Agg')  # figures are only written to files
import matplotlib.pyplot as plt
import numpy as np
from matplotlib.gridspec import GridSpec

from ..config.settings import DEBUG_COLOR_SEED, DIFFERENCE_PLOT_SCALE
from .image_utils import channel_count

Color = Tuple[int, int, int]

# BGR order, matching OpenCV images
CHANNEL_PLOT_COLORS = ('blue', 'green', 'red')


def random_colors(count: int, seed: int = DEBUG_COLOR_SEED) -> List[Color]:
    """Reproducible random BGR colors."""
    rng = np.random.default_rng(seed)
    return [tuple(int(c) for c in rng.integers(0, 256, size=3)) for _ in range(count)]


def to_bgr(image: np.ndarray) -> np.ndarray:
    """Three-channel uint8 copy of a gray or color image."""
    if image.dtype != np.uint8:
        image = np.clip(np.rint(image), 0, 255).astype(np.uint8)
    if channel_count(image) == 1:
        return cv2.cvtColor(image.reshape(image.shape[:2]), cv2.COLOR_GRAY2BGR)
    return image.copy()


def colorize_labels(labels: np.ndarray, background: int = 0,
                    seed: int = DEBUG_COLOR_SEED) -> np.ndarray:
    """One random color per label value, black for ``background``."""
    values = [int(v) for v in np.unique(labels) if v != background]
    palette = dict(zip(values, random_colors(len(values), seed)))

    result = np.zeros(labels.shape[:2] + (3,), dtype=np.uint8)
    for value, color in palette.items():
        result[labels == value] = color
    return result


def draw_contour_order(shape: Sequence[int], contour: np.ndarray) -> np.ndarray:
    """Contour pixels whose brightness grows along the contour.

    Makes the traversal direction visible: the dark end is the start.
    """
    canvas = np.zeros(tuple(shape[:2]), dtype=np.float32)
    n = len(contour)
    for i, (x, y) in enumerate(contour):
        canvas[y, x] = i * 255.0 / n
    return canvas


def draw_corners(shape: Sequence[int], corners: np.ndarray, radius: int = 10) -> np.ndarray:
    canvas = np.zeros(tuple(shape[:2]), dtype=np.uint8)
    for x, y in corners:
        cv2.circle(canvas, (int(x), int(y)), radius, 255, -1)
    return canvas


def draw_sides(shape: Sequence[int], sides: Sequence[np.ndarray],
               seed: int = DEBUG_COLOR_SEED) -> np.ndarray:
    """Every side in its own random color on a black canvas."""
    canvas = np.zeros(tuple(shape[:2]) + (3,), dtype=np.uint8)
    for side, color in zip(sides, random_colors(len(sides), seed)):
        canvas[side[:, 1], side[:, 0]] = color
    return canvas


def mark_side(image: np.ndarray, side: np.ndarray, color: Color = (0, 0, 255),
              radius: int = 5) -> np.ndarray:
    """Copy of ``image`` with the side pixels drawn as thick dots."""
    marked = to_bgr(image)
    for x, y in side:
        cv2.circle(marked, (int(x), int(y)), radius, color, -1)
    return marked


def draw_matches(image: np.ndarray, offsets: Sequence[Tuple[int, int]],
                 sides: Sequence[Sequence[np.ndarray]], matches: Sequence[Sequence],
                 thickness: int = 5, seed: int = DEBUG_COLOR_SEED) -> np.ndarray:
    """Segments from the middle of every side to the middle of its best match.

    All segments leaving one piece share a random color. Each piece also
    gets a small random shift so that two opposite segments between the
    same sides stay distinguishable.
    """
    canvas = to_bgr(image)
    rng = np.random.default_rng(seed)

    for piece_a, piece_matches in enumerate(matches):
        color = tuple(int(c) for c in rng.integers(0, 256, size=3))
        shift = rng.integers(-thickness, thickness + 1, size=2)

        for side_a, candidate in enumerate(piece_matches):
            if not candidate.is_matched:
                continue
            start = _side_center(offsets[piece_a], sides[piece_a][side_a]) + shift
            end = _side_center(offsets[candidate.target_piece],
                               sides[candidate.target_piece][candidate.target_side]) + shift
            cv2.circle(canvas, tuple(int(v) for v in start), 4 * thickness, color, -1)
            cv2.line(canvas, tuple(int(v) for v in start), tuple(int(v) for v in end),
                     color, thickness)

    return canvas


def _side_center(offset: Tuple[int, int], side: np.ndarray) -> np.ndarray:
    return np.asarray(offset) + side[len(side) // 2]


def comparison_filename(score: float, piece_b: int, side_b: int, width: int = 5) -> str:
    """Zero-padded score first, so a directory listing sorts matches by quality."""
    return f"diff={score:0{width}.0f}_with_object{piece_b}_side{side_b}.png"


def _plot_channels(ax, colors: np.ndarray, title: str) -> None:
    positions = np.arange(len(colors))
    channels = colors.shape[1]
    for channel in range(channels):
        plot_color = CHANNEL_PLOT_COLORS[channel] if channels == 3 else 'black'
        ax.plot(positions, colors[:, channel], color=plot_color, linewidth=1)
    ax.set_ylim(0, 255)
    ax.set_xlim(0, max(1, len(colors) - 1))
    ax.set_title(title, fontsize=9)


def _color_strip(colors: np.ndarray) -> np.ndarray:
    strip = colors.reshape(1, len(colors), -1).astype(np.uint8)
    if strip.shape[2] == 3:
        return strip[:, :, ::-1]  # BGR -> RGB
    return np.repeat(strip, 3, axis=2)


def plot_side_comparison(image_a: np.ndarray, side_a: np.ndarray,
                         image_b: np.ndarray, side_b: np.ndarray,
                         comparison, output_path: str,
                         title: Optional[str] = None) -> str:
    """Save a figure explaining one side comparison.

    Left: both pieces with the compared side marked. Right: the aligned
    color strips, the per-channel intensity graphs of each side and the
    per-position difference on a fixed 0..DIFFERENCE_PLOT_SCALE scale.

    Returns:
        Path to the saved figure
    """
    fig = plt.figure(figsize=(12, 8))
    gs = GridSpec(4, 3, figure=fig, hspace=0.5, wspace=0.3)

    for row, (image, side, label) in enumerate(((image_a, side_a, 'A'), (image_b, side_b, 'B'))):
        ax = fig.add_subplot(gs[2 * row:2 * row + 2, 0])
        ax.imshow(cv2.cvtColor(mark_side(image, side), cv2.COLOR_BGR2RGB))
        ax.set_title(f"piece {label}", fontsize=9)
        ax.axis('off')

    ax_strip = fig.add_subplot(gs[0, 1:])
    ax_strip.imshow(np.vstack([_color_strip(comparison.colors_a)] * 10
                              + [_color_strip(comparison.colors_b)] * 10), aspect='auto')
    ax_strip.set_title("colors (A top, B bottom)", fontsize=9)
    ax_strip.axis('off')

    _plot_channels(fig.add_subplot(gs[1, 1:]), comparison.colors_a, "side A")
    _plot_channels(fig.add_subplot(gs[2, 1:]), comparison.colors_b, "side B (reversed)")

    ax_diff = fig.add_subplot(gs[3, 1:])
    ax_diff.plot(np.arange(len(comparison.differences)), comparison.differences,
                 color='black', linewidth=1)
    ax_diff.axhline(comparison.score, color='red', linestyle='--', linewidth=1)
    ax_diff.set_ylim(0, DIFFERENCE_PLOT_SCALE)
    ax_diff.set_title(f"difference (median={comparison.score:.1f})", fontsize=9)

    if title:
        fig.suptitle(title, fontsize=12, fontweight='bold')

    os.makedirs(os.path.dirname(output_path) or '.', exist_ok=True)
    plt.savefig(output_path, dpi=80, bbox_inches='tight')
    plt.close(fig)

    return output_path
