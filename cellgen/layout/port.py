"""
Port - A named connection point on a layout cell.

A port groups the shapes, per layer, through which a cell is contacted
(e.g. a transistor's gate contact metal or a source/drain strap).
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, TYPE_CHECKING

from cellgen.layout.geometry import Rect

if TYPE_CHECKING:
    from cellgen.layout.shape import Layer


@dataclass
class Port:
    """
    A named port on a layout cell.

    Attributes:
        name: Port name (e.g., 'gate_0', 'sd_1_2', 'psdm_0')
        shapes: Rectangles making up the port, keyed by layer
        net: Net name (defaults to the port name)
    """
    name: str
    shapes: Dict['Layer', List[Rect]] = field(default_factory=dict)
    net: Optional[str] = None

    def __post_init__(self):
        if self.net is None:
            self.net = self.name

    def add_shape(self, layer: 'Layer', rect: Rect) -> 'Port':
        self.shapes.setdefault(layer, []).append(rect)
        return self

    @property
    def layer(self) -> Optional['Layer']:
        """Layer of the first shape."""
        return next(iter(self.shapes), None)

    @property
    def rect(self) -> Optional[Rect]:
        """First rectangle of the port."""
        layer = self.layer
        return self.shapes[layer][0] if layer is not None else None

    @property
    def center(self) -> Tuple[int, int]:
        """Center of the first rectangle."""
        return self.rect.center

    def __repr__(self):
        layers = ', '.join(l.name for l in self.shapes)
        return f"Port({self.name}, layers=[{layers}])"
