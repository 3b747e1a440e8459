"""
Axis-aligned rectangles, spans and grid helpers.

All coordinates are integers in database units (nm for sky130).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from cellgen.errors import InvalidSpecError


class Dir(Enum):
    """Axis of a layout quantity."""
    HORIZ = 'h'
    VERT = 'v'

    @property
    def short_form(self) -> str:
        return self.value


def round_to_grid(value: int, grid: int) -> int:
    """Round value to the nearest multiple of grid. Ties round up."""
    if grid <= 0:
        raise InvalidSpecError(f"Grid must be positive, got {grid}")
    lo = (value // grid) * grid
    hi = lo + grid
    return lo if value - lo < hi - value else hi


def round_up_to_grid(value: int, grid: int) -> int:
    return -((-value) // grid) * grid


def round_down_to_grid(value: int, grid: int) -> int:
    return (value // grid) * grid


@dataclass(frozen=True)
class Span:
    """A closed interval [start, stop] along one axis."""
    start: int
    stop: int

    def __post_init__(self):
        if self.stop < self.start:
            raise ValueError(f"Span stop {self.stop} < start {self.start}")

    @property
    def length(self) -> int:
        return self.stop - self.start

    @property
    def center(self) -> int:
        return (self.start + self.stop) // 2

    @classmethod
    def from_center_span_gridded(cls, center: int, span: int, grid: int) -> 'Span':
        """
        Span of length *span* centered on *center*, with both ends on grid.

        The span itself must be a multiple of the grid.
        """
        if span % grid != 0:
            raise InvalidSpecError(f"Span {span} is not a multiple of grid {grid}")
        start = round_to_grid(center - span // 2, grid)
        return cls(start, start + span)


@dataclass(frozen=True)
class Rect:
    """
    Axis-aligned rectangle given by its lower-left and upper-right corners.

    Attributes:
        x0, y0: Lower-left corner
        x1, y1: Upper-right corner
    """
    x0: int
    y0: int
    x1: int
    y1: int

    def __post_init__(self):
        if self.x1 < self.x0 or self.y1 < self.y0:
            raise ValueError(f"Malformed rectangle {self.bounds}")

    @classmethod
    def from_bounds(cls, bounds) -> 'Rect':
        x0, y0, x1, y1 = bounds
        return cls(int(x0), int(y0), int(x1), int(y1))

    @property
    def bounds(self) -> Tuple[int, int, int, int]:
        return (self.x0, self.y0, self.x1, self.y1)

    @property
    def width(self) -> int:
        return self.x1 - self.x0

    @property
    def height(self) -> int:
        return self.y1 - self.y0

    @property
    def center(self) -> Tuple[int, int]:
        return ((self.x0 + self.x1) // 2, (self.y0 + self.y1) // 2)

    def length(self, direction: Dir) -> int:
        """Extent of the rectangle along *direction*."""
        return self.width if direction is Dir.HORIZ else self.height

    def union(self, other: 'Rect') -> 'Rect':
        """Bounding box of both rectangles."""
        return Rect(min(self.x0, other.x0), min(self.y0, other.y0),
                    max(self.x1, other.x1), max(self.y1, other.y1))

    def expand(self, amount: int) -> 'Rect':
        """Grow every side by *amount*."""
        return Rect(self.x0 - amount, self.y0 - amount,
                    self.x1 + amount, self.y1 + amount)

    def expand_dir(self, direction: Dir, amount: int) -> 'Rect':
        """Grow both sides along *direction* by *amount*."""
        if direction is Dir.HORIZ:
            return Rect(self.x0 - amount, self.y0, self.x1 + amount, self.y1)
        return Rect(self.x0, self.y0 - amount, self.x1, self.y1 + amount)

    def translate(self, dx: int, dy: int) -> 'Rect':
        return Rect(self.x0 + dx, self.y0 + dy, self.x1 + dx, self.y1 + dy)

    def fits_within(self, other: 'Rect') -> bool:
        """True if this rectangle's width and height fit inside *other*'s."""
        return self.width <= other.width and self.height <= other.height

    def on_grid(self, grid: int) -> bool:
        return all(v % grid == 0 for v in self.bounds)


def expand_box_min_width(rect: Rect, width: int, grid: int) -> Rect:
    """
    Grow *rect* symmetrically until it is at least *width* wide and tall.

    Each side moves by a multiple of *grid*, so a gridded rectangle stays
    gridded.
    """
    for direction in (Dir.HORIZ, Dir.VERT):
        short = width - rect.length(direction)
        if short > 0:
            rect = rect.expand_dir(direction, round_up_to_grid(-(-short // 2), grid))
    return rect


def bbox_union(rects) -> Rect:
    """Bounding box of a non-empty iterable of rectangles."""
    rects = list(rects)
    if not rects:
        raise ValueError("bbox_union requires at least one rectangle")
    result = rects[0]
    for r in rects[1:]:
        result = result.union(r)
    return result
