"""
Shape and Layer classes for layout geometry.
"""

from dataclasses import dataclass, field
from typing import Iterator, Optional, Tuple, TYPE_CHECKING

import numpy as np
import shapely
from shapely import box

from cellgen.errors import ConfigError
from cellgen.layout.geometry import Rect

if TYPE_CHECKING:
    from cellgen.layout.transform import Transform


@dataclass
class Layer:
    """
    Layer definition.

    Attributes:
        name: Technology layer name (e.g., 'li', 'm1', 'licon')
        purpose: Layer purpose (e.g., 'drawing', 'pin', 'label')
        connectivity: Whether this layer carries electrical connectivity.
    """
    name: str
    purpose: str = 'drawing'
    connectivity: bool = False

    def __hash__(self):
        return hash((self.name, self.purpose))

    def __eq__(self, other):
        if isinstance(other, Layer):
            return self.name == other.name and self.purpose == other.purpose
        return False

    def __str__(self):
        return f"{self.name}:{self.purpose}"


@dataclass
class LayerMap:
    """
    Maps technology layer names to Layer objects and GDS numbers.

    Example:
        layer_map = LayerMap('sky130', {
            'm1': {'gds': (68, 20)},
            'via': {'gds': (68, 44)},
        })
    """
    pdk_name: str
    mapping: dict = field(default_factory=dict)

    def __post_init__(self):
        self._layers = {
            name: Layer(name, info.get('purpose', 'drawing'), info.get('connectivity', False))
            for name, info in self.mapping.items()
        }

    def layer(self, name: str) -> Layer:
        """Get the Layer for a technology layer name."""
        try:
            return self._layers[name]
        except KeyError:
            raise ConfigError(f"{self.pdk_name}: unknown layer '{name}'") from None

    def __contains__(self, name: str) -> bool:
        return name in self._layers

    def __iter__(self) -> Iterator[Layer]:
        return iter(self._layers.values())

    def get_gds(self, layer: Layer) -> Tuple[int, int]:
        """Get GDS layer and datatype."""
        if layer.name in self.mapping:
            info = self.mapping[layer.name]
            if isinstance(info, dict) and 'gds' in info:
                return tuple(info['gds'])
        return (0, 0)


@dataclass
class Shape:
    """
    A geometric shape with layer and net information.

    Uses Shapely for geometry operations internally. A shape may hold a
    single polygon or a multipolygon (e.g. a whole array of contact cuts).

    Attributes:
        geometry: Shapely geometry (Polygon or MultiPolygon of rectangles)
        layer: Layer this shape is on
        net: Net name for connectivity (optional)
    """
    geometry: shapely.Geometry
    layer: Layer
    net: Optional[str] = None

    @classmethod
    def rect(cls, layer: Layer, x0: int, y0: int, x1: int, y1: int,
             net: Optional[str] = None) -> 'Shape':
        """
        Create a rectangular shape.

        Args:
            layer: Layer for this shape
            x0, y0: Lower-left corner
            x1, y1: Upper-right corner
            net: Optional net name
        """
        geom = box(x0, y0, x1, y1)
        return cls(geometry=geom, layer=layer, net=net)

    @classmethod
    def from_rect(cls, layer: Layer, rect: Rect, net: Optional[str] = None) -> 'Shape':
        return cls.rect(layer, *rect.bounds, net=net)

    @classmethod
    def array(cls, layer: Layer, x0s, y0s, x1s, y1s,
              net: Optional[str] = None) -> 'Shape':
        """
        Create one shape holding many rectangles.

        Coordinates are array-likes of equal length; the boxes are built
        in a single vectorized call.
        """
        boxes = box(np.asarray(x0s), np.asarray(y0s), np.asarray(x1s), np.asarray(y1s))
        geom = shapely.multipolygons(np.atleast_1d(boxes))
        return cls(geometry=geom, layer=layer, net=net)

    @property
    def bounds(self) -> Tuple[int, int, int, int]:
        """Return bounding box as (x0, y0, x1, y1)."""
        b = self.geometry.bounds
        return (int(b[0]), int(b[1]), int(b[2]), int(b[3]))

    @property
    def bbox(self) -> Rect:
        return Rect.from_bounds(self.bounds)

    @property
    def width(self) -> int:
        """Width of bounding box."""
        b = self.bounds
        return b[2] - b[0]

    @property
    def height(self) -> int:
        """Height of bounding box."""
        b = self.bounds
        return b[3] - b[1]

    def polygons(self) -> list:
        """Individual polygons making up this shape."""
        return list(shapely.get_parts(self.geometry))

    def transformed(self, transform: 'Transform') -> 'Shape':
        """Return a new Shape with transform applied.

        Preserves net and layer.
        """
        new_geom = transform.apply(self.geometry)
        return Shape(geometry=new_geom, layer=self.layer, net=self.net)

    def __repr__(self):
        return f"Shape({self.layer}, bounds={self.bounds}, net={self.net})"
