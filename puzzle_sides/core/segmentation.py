"""Connected-component extraction of puzzle pieces from a foreground mask."""

import logging
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

import numpy as np

from .bbox import BoundingBox
from .disjoint_set import DisjointSetUnion
from ..utils.image_utils import OBJECT, as_single_channel, channel_count, check_binary_mask

logger = logging.getLogger(__name__)

# Already-visited neighbours in raster order as (dx, dy): left, up, up-left, up-right
VISITED_NEIGHBORS = ((-1, 0), (0, -1), (-1, -1), (1, -1))


@dataclass(frozen=True)
class Component:
    """One connected piece cut out of the source image.

    Attributes:
        root: Union-find root id of the component (internal)
        offset: (x, y) of the bounding box top-left corner in the source image
        image: Crop of the source image over the bounding box
        mask: Crop of the mask with only this component's pixels set to 255
    """
    root: int
    offset: Tuple[int, int]
    image: np.ndarray
    mask: np.ndarray

    @property
    def width(self) -> int:
        return self.mask.shape[1]

    @property
    def height(self) -> int:
        return self.mask.shape[0]

    @property
    def area(self) -> int:
        return int(np.count_nonzero(self.mask == OBJECT))


def _visited_neighbor_pairs(foreground: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """(pixel, neighbour) id pairs to unite, in raster order of the pixel.

    For every foreground pixel the foreground neighbours that a raster scan
    has already visited are listed in VISITED_NEIGHBORS order. Applying the
    unions in this order reaches every 8-neighbour relation by transitivity.
    """
    h, w = foreground.shape
    ids = np.arange(h * w, dtype=np.int64).reshape(h, w)

    pixel_ids, neighbor_ids, directions = [], [], []
    for direction, (dx, dy) in enumerate(VISITED_NEIGHBORS):
        y0 = max(0, -dy)
        x0 = max(0, -dx)
        x1 = w - max(0, dx)
        if y0 >= h or x0 >= x1:
            continue

        current = foreground[y0:, x0:x1]
        neighbor = foreground[y0 + dy:h + dy, x0 + dx:x1 + dx]
        both = current & neighbor

        pixels = ids[y0:, x0:x1][both]
        pixel_ids.append(pixels)
        neighbor_ids.append(pixels + dy * w + dx)
        directions.append(np.full(pixels.shape, direction, dtype=np.int8))

    if not pixel_ids:
        empty = np.zeros(0, dtype=np.int64)
        return empty, empty

    pixel_ids = np.concatenate(pixel_ids)
    neighbor_ids = np.concatenate(neighbor_ids)
    order = np.lexsort((np.concatenate(directions), pixel_ids))
    return pixel_ids[order], neighbor_ids[order]


def split_objects(image: np.ndarray, objects_mask: np.ndarray) -> List[Component]:
    """Split the 255-pixels of ``objects_mask`` into 8-connected components.

    Components are ordered by the top-left corner of their bounding box,
    row first, then column, so numbering is reproducible.

    Args:
        image: Source image (H, W) or (H, W, C)
        objects_mask: One-channel mask of the same height and width

    Returns:
        List of components (empty if the mask has no foreground)

    Raises:
        ValueError: If the mask has several channels, holds pixels other than 0/255
            or its size differs from the image
    """
    if channel_count(objects_mask) != 1:
        raise ValueError(f"split_objects: mask must have 1 channel, got {channel_count(objects_mask)}")
    if image.shape[:2] != objects_mask.shape[:2]:
        raise ValueError(f"split_objects: image size {image.shape[1]}x{image.shape[0]} "
                         f"does not match mask size {objects_mask.shape[1]}x{objects_mask.shape[0]}")
    check_binary_mask(objects_mask, "split_objects")

    mask = as_single_channel(objects_mask)
    h, w = mask.shape
    foreground = mask == OBJECT

    dsu = DisjointSetUnion(h * w)
    for pixel, neighbor in zip(*_visited_neighbor_pairs(foreground)):
        dsu.unite(int(pixel), int(neighbor))

    # Resolve roots and grow one bounding box per root
    root_of_pixel = np.full(h * w, -1, dtype=np.int64)
    boxes: Dict[int, BoundingBox] = {}
    for pixel in np.flatnonzero(foreground).tolist():
        root = dsu.find(pixel)
        root_of_pixel[pixel] = root
        box = boxes.get(root)
        if box is None:
            box = boxes[root] = BoundingBox()
        box.include_pixel(pixel % w, pixel // w)
    root_of_pixel = root_of_pixel.reshape(h, w)

    roots = [root for root, box in boxes.items() if not box.is_empty()]
    roots.sort(key=lambda r: (boxes[r].min_y, boxes[r].min_x))

    components = []
    for root in roots:
        box = boxes[root]
        rows = slice(box.min_y, box.max_y + 1)
        cols = slice(box.min_x, box.max_x + 1)

        belongs = foreground[rows, cols] & (root_of_pixel[rows, cols] == root)
        part_mask = np.where(belongs, OBJECT, 0).astype(np.uint8)
        part_image = image[rows, cols].copy()

        components.append(Component(root=root, offset=box.min, image=part_image, mask=part_mask))

    logger.debug(f"split_objects: {len(components)} components in {w}x{h} mask")
    return components


def label_components(shape: Sequence[int], components: Sequence[Component]) -> np.ndarray:
    """Label image with 0 for background and i + 1 for pixels of component i."""
    labels = np.zeros(tuple(shape[:2]), dtype=np.int32)
    for index, component in enumerate(components):
        x, y = component.offset
        view = labels[y:y + component.height, x:x + component.width]
        view[component.mask == OBJECT] = index + 1
    return labels
