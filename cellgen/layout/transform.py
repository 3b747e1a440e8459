"""
Transform - Placement offset for instances.

Generated primitives are only ever translated; rotation and mirroring are
not used.
"""

from dataclasses import dataclass
from typing import Tuple

import shapely
from shapely import affinity


@dataclass(frozen=True)
class Transform:
    """
    2D translation.

    All coordinates in database units (integers).
    """
    x: int = 0
    y: int = 0

    def apply(self, geom: shapely.Geometry) -> shapely.Geometry:
        """Apply transform to a Shapely geometry."""
        if self.x == 0 and self.y == 0:
            return geom
        return affinity.translate(geom, self.x, self.y)

    def apply_point(self, px: int, py: int) -> Tuple[int, int]:
        """Apply transform to a point."""
        return px + self.x, py + self.y

    def compose(self, other: 'Transform') -> 'Transform':
        """Compose two transforms (self applied first, then other)."""
        return Transform(self.x + other.x, self.y + other.y)
