"""
Median-cut color quantization.

Boxes live in an arena (a list indexed by box id) and own a contiguous range
of a single permutation array over the sampled pixels, so splitting a box only
reorders its own slice and never copies pixel data.

Policy:
    - the box with the largest population is split next; ties go to the larger
      volume, then to the earlier-created box
    - a box is split along its longest channel range; ties go R, then G, then B
    - the cut is made at pixel ceil(n/2) of the sorted box, moved to the
      nearest change of value on that channel so that pixels of one color
      never end up in two boxes
    - a box whose pixels are all the same color is never split
    - representatives are the rounded channel means, ordered by descending
      population, ties by the box's earliest sample index

Two rules differ from textbook median cut and follow color-thief: box volume
counts inclusive extents, prod(range + 1), so flat boxes still order by their
other axes; and the cut leaves the exact index ceil(n/2) when that index falls
inside a run of equal channel values.
"""
import heapq
import warnings
from dataclasses import dataclass
from typing import List, Sequence, Tuple, Union

import numpy as np
from loguru import logger

from palette_extractor.errors import EmptyImageError, InsufficientColorsWarning, InvalidKError
from palette_extractor.services.colors.hex_codec import Pixel

CHANNEL_NAMES = ("R", "G", "B")

PixelsLike = Union[np.ndarray, Sequence[Tuple[int, int, int]]]


@dataclass
class ColorBox:
    """An axis-aligned RGB box over ``order[start:end]``."""
    box_id: int
    start: int
    end: int
    lo: np.ndarray
    hi: np.ndarray
    first_index: int

    @property
    def population(self) -> int:
        return self.end - self.start

    @property
    def ranges(self) -> np.ndarray:
        return self.hi.astype(np.int64) - self.lo.astype(np.int64)

    @property
    def volume(self) -> int:
        # Inclusive extents, so a flat box still orders by its other axes
        return int(np.prod(self.ranges + 1))

    @property
    def splittable(self) -> bool:
        return self.population >= 2 and int(self.ranges.max()) > 0

    def longest_axis(self) -> int:
        # argmax returns the first maximum, which gives R > G > B on ties
        return int(np.argmax(self.ranges))


def _as_pixel_array(pixels: PixelsLike) -> np.ndarray:
    array = np.asarray(pixels)
    if array.size == 0:
        return np.empty((0, 3), dtype=np.uint8)
    if array.ndim != 2 or array.shape[1] != 3:
        raise ValueError(f"Expected (N, 3) pixels, got shape {array.shape}")
    if array.min() < 0 or array.max() > 255:
        raise ValueError("Pixel channels must be within 0-255")
    return array.astype(np.uint8, copy=False)


def _make_box(pixels: np.ndarray, order: np.ndarray, box_id: int, start: int, end: int) -> ColorBox:
    members = order[start:end]
    values = pixels[members]
    return ColorBox(
        box_id=box_id,
        start=start,
        end=end,
        lo=values.min(axis=0),
        hi=values.max(axis=0),
        first_index=int(members.min()),
    )


def _priority(box: ColorBox) -> Tuple[int, int, int]:
    return (-box.population, -box.volume, box.box_id)


def _cut_position(sorted_values: np.ndarray) -> int:
    """Offset within a sorted box at which to split it in two."""
    n = len(sorted_values)
    cut = (n + 1) // 2
    if sorted_values[cut - 1] != sorted_values[cut]:
        return cut

    # The median run straddles the cut; move to whichever end of it is closer
    value = sorted_values[cut]
    left = int(np.searchsorted(sorted_values, value, side="left"))
    right = int(np.searchsorted(sorted_values, value, side="right"))
    candidates = [pos for pos in (left, right) if 0 < pos < n]
    return min(candidates, key=lambda pos: (abs(pos - cut), pos))


def _split(pixels: np.ndarray, order: np.ndarray, box: ColorBox,
           next_id: int) -> Tuple[ColorBox, ColorBox]:
    axis = box.longest_axis()
    segment = order[box.start:box.end]
    # Stable sort keeps sample order among equal channel values
    segment = segment[np.argsort(pixels[segment, axis], kind="stable")]
    order[box.start:box.end] = segment

    cut = box.start + _cut_position(pixels[segment, axis])
    logger.debug(
        f"Split box {box.box_id} (n={box.population}) on {CHANNEL_NAMES[axis]} "
        f"at {cut - box.start}"
    )
    return (
        _make_box(pixels, order, next_id, box.start, cut),
        _make_box(pixels, order, next_id + 1, cut, box.end),
    )


def median_cut(pixels: PixelsLike, k: int) -> Tuple[np.ndarray, np.ndarray, List[ColorBox]]:
    """
    Partition pixels into at most k boxes.

    Args:
        pixels: Sampled RGB pixels (N, 3)
        k: Number of boxes wanted

    Returns:
        Tuple of (pixel array, permutation array, boxes in output order).
        A box's members are ``pixels[order[box.start:box.end]]``.

    Raises:
        InvalidKError: If k < 1
        EmptyImageError: If there are no pixels
    """
    if isinstance(k, bool) or not isinstance(k, (int, np.integer)) or k < 1:
        raise InvalidKError(f"k must be an integer >= 1, got {k!r}")

    array = _as_pixel_array(pixels)
    if len(array) == 0:
        raise EmptyImageError("No pixels to quantize")

    order = np.arange(len(array), dtype=np.int64)
    arena: List[ColorBox] = [_make_box(array, order, 0, 0, len(array))]
    heap = [(_priority(arena[0]), 0)]
    finished: List[int] = []

    while heap and len(heap) + len(finished) < k:
        _, box_id = heapq.heappop(heap)
        box = arena[box_id]
        if not box.splittable:
            finished.append(box_id)
            continue

        for child in _split(array, order, box, len(arena)):
            arena.append(child)
            heapq.heappush(heap, (_priority(child), child.box_id))

    leaves = [arena[box_id] for box_id in finished] + [arena[box_id] for _, box_id in heap]
    leaves.sort(key=lambda b: (-b.population, b.first_index))
    return array, order, leaves


def box_mean(pixels: np.ndarray, order: np.ndarray, box: ColorBox) -> Pixel:
    """Rounded (half up) per-channel mean of a box's pixels."""
    members = pixels[order[box.start:box.end]].astype(np.float64)
    means = np.floor(members.mean(axis=0) + 0.5)
    r, g, b = (int(c) for c in np.clip(means, 0, 255))
    return Pixel(r, g, b)


def quantize_with_populations(pixels: PixelsLike, k: int) -> Tuple[List[Pixel], List[int]]:
    """
    Median-cut quantization returning each color with its box population.

    Emits InsufficientColorsWarning when fewer than k colors come out.
    """
    array, order, boxes = median_cut(pixels, k)
    colors = [box_mean(array, order, box) for box in boxes]

    if len(colors) < k:
        message = f"Only {len(colors)} distinct color group(s) available, {k} requested"
        logger.warning(message)
        warnings.warn(message, InsufficientColorsWarning, stacklevel=2)

    return colors, [box.population for box in boxes]


def quantize(pixels: PixelsLike, k: int) -> List[Pixel]:
    """
    Reduce pixels to at most k representative colors with median cut.

    Returns exactly k colors when the pixels contain at least k distinct
    colors, otherwise one color per distinct color and an
    InsufficientColorsWarning. Output order is deterministic for equal input.

    Raises:
        InvalidKError: If k < 1
        EmptyImageError: If there are no pixels
    """
    colors, _ = quantize_with_populations(pixels, k)
    return colors
