"""GDS layout writer - generates GDSII files from LayoutCell hierarchy."""

from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Optional

import gdstk

from cellgen.backends.base import LayoutWriter
from cellgen.layout.shape import LayerMap
from cellgen.logging import logger

if TYPE_CHECKING:
    from cellgen.layout.cell import LayoutCell
    from cellgen.layout.shape import Layer


class GDSWriter(LayoutWriter):
    """
    Write LayoutCell hierarchies to GDSII files.

    Coordinates are integer database units, written unscaled.

    Attributes:
        layer_map: LayerMap for converting layers to GDS layer/datatype
        unit: GDS database unit in meters (default 1e-9 = 1nm)
        precision: GDS precision in meters (default 1e-12)
        pin_texttype: GDS texttype for port labels (default 16, common for LVS)
    """

    def __init__(self,
                 layer_map: Optional[LayerMap] = None,
                 unit: float = 1e-9,
                 precision: float = 1e-12,
                 pin_texttype: int = 16):
        self.layer_map = layer_map
        self.unit = unit
        self.precision = precision
        self.pin_texttype = pin_texttype

    def build_library(self, cells: Iterable['LayoutCell']) -> gdstk.Library:
        """In-memory gdstk library holding *cells* and their dependencies."""
        lib = gdstk.Library(unit=self.unit, precision=self.precision)
        for cell in self._collect_cells(cells):
            lib.add(self._build_cell(cell))
        return lib

    def write(self, cells: Iterable['LayoutCell'], path: str | Path) -> Path:
        """Write cells to a single GDS file, creating parent directories."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        lib = self.build_library(cells)
        lib.write_gds(str(path))
        logger.info(f"Wrote {len(lib.cells)} cells to {path}")
        return path

    def _build_cell(self, cell: 'LayoutCell') -> gdstk.Cell:
        gds_cell = gdstk.Cell(cell.cell_name)

        # Shapes; a multipolygon becomes one GDS polygon per part
        for shape in cell.shapes:
            layer, datatype = self._get_gds_layer(shape.layer)
            for poly in shape.polygons():
                points = list(poly.exterior.coords)[:-1]
                gds_cell.add(gdstk.Polygon(points, layer=layer, datatype=datatype))

        # Instances
        for inst in cell.instances.values():
            gds_cell.add(gdstk.Reference(inst.cell.cell_name, origin=inst.loc))

        # Port labels (pin texttype for LVS port recognition)
        for net, port_layer, cx, cy in self._labels_from_ports(cell):
            layer, _ = self._get_gds_layer(port_layer)
            gds_cell.add(gdstk.Label(net, (cx, cy), layer=layer, texttype=self.pin_texttype))

        return gds_cell

    def _get_gds_layer(self, layer: 'Layer') -> tuple[int, int]:
        """Get GDS layer and datatype for a Layer."""
        if self.layer_map:
            return self.layer_map.get_gds(layer)
        return (0, 0)
