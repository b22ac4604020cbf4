"""Inclusive integer bounding box grown pixel by pixel."""

from typing import Tuple


class BoundingBox:
    """Inclusive pixel rectangle; starts empty and only grows."""

    __slots__ = ('min_x', 'min_y', 'max_x', 'max_y')

    def __init__(self):
        self.min_x = 0
        self.min_y = 0
        self.max_x = -1
        self.max_y = -1

    def is_empty(self) -> bool:
        return self.max_x < self.min_x

    def include_pixel(self, x: int, y: int) -> None:
        if self.is_empty():
            self.min_x = self.max_x = x
            self.min_y = self.max_y = y
            return
        self.min_x = min(self.min_x, x)
        self.min_y = min(self.min_y, y)
        self.max_x = max(self.max_x, x)
        self.max_y = max(self.max_y, y)

    @property
    def min(self) -> Tuple[int, int]:
        """Top-left corner as (x, y)."""
        return self.min_x, self.min_y

    @property
    def width(self) -> int:
        return 0 if self.is_empty() else self.max_x - self.min_x + 1

    @property
    def height(self) -> int:
        return 0 if self.is_empty() else self.max_y - self.min_y + 1

    def __repr__(self) -> str:
        if self.is_empty():
            return "BoundingBox(empty)"
        return f"BoundingBox(({self.min_x}, {self.min_y}) - ({self.max_x}, {self.max_y}))"
