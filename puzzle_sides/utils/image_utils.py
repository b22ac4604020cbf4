"""
Image I/O and small array helpers shared by the pipeline stages.
"""

import os

import cv2
import numpy as np

OBJECT = 255
BACKGROUND = 0


def read_image(path: str) -> np.ndarray:
    """
    Read an image file as stored, without converting its channels.

    Args:
        path: Path to the image file

    Returns:
        Image as a NumPy array

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the image cannot be decoded
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Image file not found: {path}")

    image = cv2.imread(path, cv2.IMREAD_UNCHANGED)
    if image is None:
        raise ValueError(f"Could not read image from {path}")

    return image


def save_image(image: np.ndarray, path: str) -> None:
    """
    Write an image, creating the parent directory when needed.

    Float images are clipped to [0, 255] before writing.

    Args:
        image: Image as a NumPy array
        path: Destination path
    """
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    if image.dtype != np.uint8:
        image = np.clip(np.rint(image), 0, 255).astype(np.uint8)

    if not cv2.imwrite(path, image):
        raise ValueError(f"Could not write image to {path}")


def channel_count(image: np.ndarray) -> int:
    """Number of channels of an (H, W) or (H, W, C) array."""
    if image.ndim == 2:
        return 1
    if image.ndim == 3:
        return image.shape[2]
    raise ValueError(f"Expected a 2D or 3D image array, got shape {image.shape}")


def as_single_channel(image: np.ndarray) -> np.ndarray:
    """View of a one-channel image as an (H, W) array."""
    if image.ndim == 3 and image.shape[2] == 1:
        return image[:, :, 0]
    return image


def check_binary_mask(mask: np.ndarray, operation: str) -> None:
    """Raise ValueError unless ``mask`` has one channel and only 0/255 pixels."""
    channels = channel_count(mask)
    if channels != 1:
        raise ValueError(f"{operation}: expected 1-channel mask, got {channels} channels")

    values = as_single_channel(mask)
    invalid = (values != BACKGROUND) & (values != OBJECT)
    if np.any(invalid):
        j, i = np.argwhere(invalid)[0]
        raise ValueError(f"{operation}: expected binary pixels {{0,255}}, "
                         f"got {values[j, i]} at row={j} column={i}")
