"""Color sequences along piece sides."""

from typing import Any

import numpy as np
from scipy.ndimage import gaussian_filter1d


def extract_colors(image: np.ndarray, pixels: np.ndarray) -> np.ndarray:
    """Colors of ``image`` at the (x, y) ``pixels``, one row per pixel.

    Returns:
        uint8 array of shape (N, C); one-channel images give C == 1
    """
    pixels = np.asarray(pixels, dtype=np.int64).reshape(-1, 2)
    xs, ys = pixels[:, 0], pixels[:, 1]
    h, w = image.shape[:2]
    if pixels.size and (xs.min() < 0 or ys.min() < 0 or xs.max() >= w or ys.max() >= h):
        raise ValueError(f"extract_colors: side pixels fall outside the {w}x{h} image")

    colors = image[ys, xs]
    return colors.reshape(len(pixels), -1)


def blur_colors(colors: np.ndarray, strength: float) -> np.ndarray:
    """Gaussian smoothing along the sequence, each channel separately.

    ``strength`` is the standard deviation in samples; 0 returns a copy.
    Sequence ends are extended with their edge value.
    """
    colors = np.asarray(colors)
    if strength <= 0 or len(colors) == 0:
        return colors.copy()

    smoothed = gaussian_filter1d(colors.astype(np.float64), sigma=strength, axis=0, mode='nearest')
    return np.clip(np.rint(smoothed), 0, 255).astype(np.uint8)


def resample_sequence(sequence: Any, target_length: int) -> np.ndarray:
    """Resample a sequence to a target length using linear interpolation.

    Args:
        sequence: Source sequence, 1D or (N, C)
        target_length: Desired length

    Returns:
        Resampled sequence with the dtype of the source (rounded for integers)
    """
    sequence = np.asarray(sequence)
    if len(sequence) == 0 or target_length <= 0:
        return sequence[:0].copy()

    if len(sequence) == target_length:
        return sequence.copy()

    orig_indices = np.arange(len(sequence))
    target_indices = np.linspace(0, len(sequence) - 1, target_length)

    # Handle 1D sequences
    if sequence.ndim == 1:
        result = np.interp(target_indices, orig_indices, sequence)
    else:
        result = np.empty((target_length, sequence.shape[1]), dtype=np.float64)
        for channel in range(sequence.shape[1]):
            result[:, channel] = np.interp(target_indices, orig_indices, sequence[:, channel])

    if np.issubdtype(sequence.dtype, np.integer):
        result = np.rint(result)
    return result.astype(sequence.dtype)


def color_differences(colors_a: np.ndarray, colors_b: np.ndarray) -> np.ndarray:
    """Per-position sum of absolute channel differences of two equal-length sequences."""
    a = np.asarray(colors_a, dtype=np.int32)
    b = np.asarray(colors_b, dtype=np.int32)
    if a.shape != b.shape:
        raise ValueError(f"color_differences: shapes differ, {a.shape} vs {b.shape}")
    return np.abs(a - b).reshape(len(a), -1).sum(axis=1).astype(np.float32)
