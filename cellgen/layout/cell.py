"""
LayoutCell - Container for generated layout.
"""

from typing import Dict, List, Optional, Tuple

from cellgen.layout.geometry import Rect
from cellgen.layout.instance import Instance
from cellgen.layout.port import Port
from cellgen.layout.shape import Shape, Layer
from cellgen.layout.transform import Transform


class LayoutCell:
    """
    A layout cell.

    Contains shapes, ports, instances of other cells and an optional
    outline. All coordinates are in database units.
    """

    def __init__(self, cell_name: str):
        self.cell_name = cell_name

        # Contents
        self.shapes: List[Shape] = []
        self.ports: Dict[str, Port] = {}
        self.instances: Dict[str, Instance] = {}

        # Abstract view
        self.outline: Optional[Shape] = None
        self.blockages: Dict[Layer, List[Rect]] = {}

    def __repr__(self):
        return f"LayoutCell({self.cell_name})"

    def add_shape(self, shape: Shape) -> Shape:
        """Add a shape to this cell."""
        self.shapes.append(shape)
        return shape

    def add_rect(self, layer: Layer, rect: Rect, net: Optional[str] = None) -> Shape:
        """
        Add a rectangle shape.

        Args:
            layer: Layer for this shape
            rect: Rectangle to draw
            net: Optional net name for connectivity

        Returns:
            The created Shape
        """
        shape = Shape.from_rect(layer, rect, net=net)
        self.shapes.append(shape)
        return shape

    def add_port(self, port: Port) -> Port:
        if port.name in self.ports:
            raise ValueError(f"Port '{port.name}' already exists in {self}")
        self.ports[port.name] = port
        return port

    def get_port(self, name: str) -> Port:
        """Get port by name."""
        if name not in self.ports:
            raise ValueError(f"No port named '{name}' in {self}")
        return self.ports[name]

    def add_instance(self, inst_name: str, cell: 'LayoutCell',
                     loc: Tuple[int, int] = (0, 0)) -> Instance:
        """Place *cell* at *loc* under the name *inst_name*."""
        if inst_name in self.instances:
            raise ValueError(f"Instance '{inst_name}' already exists in {self}")
        inst = Instance(inst_name, cell, Transform(*loc))
        self.instances[inst_name] = inst
        return inst

    def add_blockage(self, layer: Layer, rect: Rect) -> None:
        self.blockages.setdefault(layer, []).append(rect)

    def shapes_on(self, layer: Layer) -> List[Shape]:
        """Shapes drawn directly in this cell on *layer*."""
        return [s for s in self.shapes if s.layer == layer]

    def get_dependencies(self) -> List['LayoutCell']:
        """Distinct cells referenced (recursively) by this cell, bottom-up."""
        seen = {}

        def visit(cell):
            for inst in cell.instances.values():
                if inst.cell.cell_name not in seen:
                    visit(inst.cell)
                    seen[inst.cell.cell_name] = inst.cell

        visit(self)
        return list(seen.values())

    def bbox(self) -> Tuple[int, int, int, int]:
        """
        Get bounding box of this cell (local coordinates).

        Includes all shapes and instances.

        Returns:
            (x0, y0, x1, y1)
        """
        if not self.shapes and not self.instances:
            return (0, 0, 0, 0)

        x0, y0, x1, y1 = None, None, None, None

        # Shapes
        for shape in self.shapes:
            b = shape.bounds
            if x0 is None:
                x0, y0, x1, y1 = b
            else:
                x0 = min(x0, b[0])
                y0 = min(y0, b[1])
                x1 = max(x1, b[2])
                y1 = max(y1, b[3])

        # Instances (transformed)
        for inst in self.instances.values():
            sb = inst.cell.bbox()
            corners = [
                inst.transform.apply_point(sb[0], sb[1]),
                inst.transform.apply_point(sb[2], sb[3]),
            ]
            for cx, cy in corners:
                if x0 is None:
                    x0, y0, x1, y1 = cx, cy, cx, cy
                else:
                    x0 = min(x0, cx)
                    y0 = min(y0, cy)
                    x1 = max(x1, cx)
                    y1 = max(y1, cy)

        return (x0, y0, x1, y1)

    def get_all_shapes(self, transform: Optional[Transform] = None) -> List[Shape]:
        """
        Get all shapes flattened with transforms applied.

        Args:
            transform: Additional transform to apply (for hierarchy).

        Returns:
            List of Shape objects in this cell's coordinates
        """
        if transform is None:
            transform = Transform()

        result = [shape.transformed(transform) for shape in self.shapes]

        # Instance shapes (recursively)
        for inst in self.instances.values():
            result.extend(inst.cell.get_all_shapes(inst.transform.compose(transform)))

        return result


def collect_cells(cells) -> List[LayoutCell]:
    """All distinct cells reachable from *cells*, children before parents."""
    seen = {}
    for cell in cells:
        for dep in cell.get_dependencies():
            seen.setdefault(dep.cell_name, dep)
        seen.setdefault(cell.cell_name, cell)
    return list(seen.values())
