"""Foreground/background separation by a global intensity threshold."""

import logging

import cv2
import numpy as np

from ..config.settings import BACKGROUND_FACTOR, BACKGROUND_PERCENTILE
from ..utils import stats
from ..utils.image_utils import channel_count

logger = logging.getLogger(__name__)


def to_grayscale_float(image: np.ndarray) -> np.ndarray:
    """Grayscale intensities in [0, 255] as float32 (BGR input)."""
    channels = channel_count(image)
    if channels == 3:
        gray = cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
    elif channels == 1:
        gray = image.reshape(image.shape[:2])
    else:
        raise ValueError(f"to_grayscale_float: expected 1 or 3 channels, got {channels}")
    return gray.astype(np.float32)


def border_intensities(grayscale: np.ndarray) -> np.ndarray:
    """Intensities of the one-pixel frame around the image, each pixel once."""
    h, w = grayscale.shape[:2]
    if h < 2 or w < 2:
        values = grayscale.ravel()
    else:
        values = np.concatenate([
            grayscale[0, :],
            grayscale[h - 1, :],
            grayscale[1:h - 1, 0],
            grayscale[1:h - 1, w - 1],
        ])
        if values.size != 2 * w + 2 * h - 4:
            raise ValueError(f"border_intensities: got {values.size} values for {w}x{h} image")
    return values


def background_threshold(grayscale: np.ndarray, percentile: float = BACKGROUND_PERCENTILE,
                         factor: float = BACKGROUND_FACTOR) -> float:
    """Cutoff between background and pieces estimated from the image frame.

    Pieces never touch the photo border, so the frame is pure background and
    a margin above its bright tail separates it from the pieces.
    """
    border = border_intensities(grayscale)
    logger.info(f"intensities on border: {stats.summary_stats(border)}")
    threshold = factor * stats.percentile(border, percentile)
    logger.info(f"background threshold={threshold:g}")
    return threshold


def threshold_mask(grayscale: np.ndarray, threshold: float) -> np.ndarray:
    """255 where the intensity is strictly above ``threshold``, 0 elsewhere."""
    return np.where(grayscale > threshold, 255, 0).astype(np.uint8)
