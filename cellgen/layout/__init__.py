from cellgen.layout.geometry import Dir, Rect, Span, expand_box_min_width, round_to_grid
from cellgen.layout.shape import Layer, LayerMap, Shape
from cellgen.layout.transform import Transform
from cellgen.layout.port import Port
from cellgen.layout.instance import Instance
from cellgen.layout.cell import LayoutCell, collect_cells
