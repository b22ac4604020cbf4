"""Boundary decomposition of a piece mask into four clockwise sides.

Points are (x, y) pixel coordinates in the piece crop, stored as int32
arrays of shape (N, 2). "Clockwise" is meant as seen on screen, with the y
axis pointing down.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List

import cv2
import numpy as np

from ..config.settings import CORNERS_PER_PIECE
from ..utils.image_utils import as_single_channel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PieceBoundary:
    """Traced contour of one piece with its corners and sides."""
    contour: np.ndarray
    corners: np.ndarray
    sides: List[np.ndarray]


def signed_area(contour: np.ndarray) -> float:
    """Shoelace area; positive for clockwise order in image coordinates."""
    pts = np.asarray(contour, dtype=np.float64)
    x, y = pts[:, 0], pts[:, 1]
    return 0.5 * float(np.sum(x * np.roll(y, -1) - np.roll(x, -1) * y))


class BoundaryDecomposer(ABC):
    """Turns a piece mask into an ordered contour, its corners and its sides."""

    @abstractmethod
    def trace(self, mask: np.ndarray) -> np.ndarray:
        """Ordered clockwise boundary pixels of the mask's object."""

    @abstractmethod
    def find_corners(self, contour: np.ndarray, count: int) -> np.ndarray:
        """``count`` contour points that act as the piece's corners, in contour order."""

    @abstractmethod
    def split_by_corners(self, contour: np.ndarray, corners: np.ndarray) -> List[np.ndarray]:
        """Contour runs between consecutive corners, both ends included."""

    def decompose(self, mask: np.ndarray) -> PieceBoundary:
        contour = self.trace(mask)
        corners = self.find_corners(contour, CORNERS_PER_PIECE)
        if len(corners) != CORNERS_PER_PIECE:
            raise ValueError(f"expected {CORNERS_PER_PIECE} corners, found {len(corners)}")

        sides = self.split_by_corners(contour, corners)
        if len(sides) != CORNERS_PER_PIECE:
            raise ValueError(f"expected {CORNERS_PER_PIECE} sides, got {len(sides)}")

        return PieceBoundary(contour=contour, corners=corners, sides=sides)


class OpenCVBoundaryDecomposer(BoundaryDecomposer):
    """Rectangular-piece decomposition built on cv2 contour functions."""

    def trace(self, mask: np.ndarray) -> np.ndarray:
        binary = np.ascontiguousarray(as_single_channel(mask), dtype=np.uint8)
        # Piece crops touch every edge; a blank frame keeps those pixels on the contour
        binary = cv2.copyMakeBorder(binary, 1, 1, 1, 1, cv2.BORDER_CONSTANT, value=0)
        contours, _ = cv2.findContours(binary, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_NONE,
                                       offset=(-1, -1))
        if not contours:
            raise ValueError("trace: mask has no foreground pixels")

        # Use the largest contour (should be the only one)
        contour = max(contours, key=lambda c: (cv2.contourArea(c), len(c)))
        contour = contour.reshape(-1, 2).astype(np.int32)

        if signed_area(contour) < 0:
            # Reverse the direction but keep the starting pixel
            contour = np.concatenate([contour[:1], contour[1:][::-1]])

        return contour

    def find_corners(self, contour: np.ndarray, count: int) -> np.ndarray:
        if count != 4:
            raise ValueError(f"find_corners: only rectangular pieces are supported, got count={count}")

        box = cv2.boxPoints(cv2.minAreaRect(contour.astype(np.float32)))

        # The closest contour point to each box corner
        indices = set()
        for box_corner in box:
            distances = np.linalg.norm(contour - box_corner, axis=1)
            indices.add(int(np.argmin(distances)))

        return contour[sorted(indices)]

    def split_by_corners(self, contour: np.ndarray, corners: np.ndarray) -> List[np.ndarray]:
        indices = []
        for corner in corners:
            hits = np.flatnonzero(np.all(contour == corner, axis=1))
            if hits.size == 0:
                raise ValueError(f"split_by_corners: corner {tuple(corner)} is not on the contour")
            indices.append(int(hits[0]))
        indices.sort()

        sides = []
        for k, start in enumerate(indices):
            if k + 1 < len(indices):
                sides.append(contour[start:indices[k + 1] + 1].copy())
            else:
                sides.append(np.concatenate([contour[start:], contour[:indices[0] + 1]]))
        return sides
