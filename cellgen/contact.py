"""
Contact generation.

A contact is a rows x cols array of cuts on a stack's cut layer, enclosed
by the stack's bottom and top layers, plus implant/well/npc geometry for
the device contact stacks. Contacts are pure functions of the design rules
and their ContactParams, so every Pdk builds each distinct one exactly once
and shares the result.
"""

import threading
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Dict, Mapping, Optional, TYPE_CHECKING

import numpy as np
from cachetools import Cache, cached

from cellgen.errors import ConfigError, InvalidSpecError
from cellgen.layout.cell import LayoutCell
from cellgen.layout.geometry import Dir, Rect, expand_box_min_width
from cellgen.layout.port import Port
from cellgen.layout.shape import Layer, LayerMap, Shape
from cellgen.logging import logger

if TYPE_CHECKING:
    from cellgen.tech.config import TechConfig

# Largest number of cuts along either axis of a contact array.
MAX_UNITS = 1023

# Net name given to the shapes of a contact cell.
CONTACT_NET = 'x'

# Implant drawn around the bottom layer of source/drain and tap contacts.
_IMPLANTS = {
    'ndiffc': 'nsdm',
    'ntap': 'nsdm',
    'ptap': 'psdm',
    'pdiffc': 'psdm',
}


@dataclass(frozen=True)
class ContactParams:
    """
    Full description of a contact; used as the cache key.

    Two params are equal only if every field matches. A 2x3 and a 3x2
    contact are different contacts.

    Attributes:
        stack: Name of the stack to draw (e.g. 'viali', 'ndiffc')
        rows: Number of cut rows
        cols: Number of cut columns
        dir: The "relaxed" direction, i.e. the direction with more margin.
            Bottom and top layers grow along it to meet one-sided
            enclosure rules.
    """
    stack: str
    rows: int = 1
    cols: int = 1
    dir: Dir = Dir.HORIZ

    def __post_init__(self):
        if not isinstance(self.dir, Dir):
            object.__setattr__(self, 'dir', Dir(self.dir))

    def validate(self) -> None:
        for name in ('rows', 'cols'):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise InvalidSpecError(f"Contact {name} must be a positive integer, got {value!r}")

    def __str__(self):
        return f"{self.stack}_{self.rows}x{self.cols}{self.dir.short_form}"


@dataclass(frozen=True, eq=False)
class Contact:
    """
    A drawn contact. Shared between the cache and all users; never mutated.

    Attributes:
        cell: LayoutCell holding the contact geometry
        rows: Number of cut rows
        cols: Number of cut columns
        bboxes: Bounding box of the contact on each drawn layer
    """
    cell: LayoutCell
    rows: int
    cols: int
    bboxes: Mapping[Layer, Rect]

    def bbox(self, layer: Layer) -> Rect:
        try:
            return self.bboxes[layer]
        except KeyError:
            raise ConfigError(f"Contact {self.cell.cell_name} has no geometry on {layer}") from None

    @property
    def name(self) -> str:
        return self.cell.cell_name


def _relax(laybox: Rect, ct_bbox: Rect, direction: Dir, ose: int) -> Rect:
    """Extend laybox along direction until it clears the cuts by ose on both sides."""
    if direction is Dir.HORIZ:
        return Rect(min(laybox.x0, ct_bbox.x0 - ose), laybox.y0,
                    max(laybox.x1, ct_bbox.x1 + ose), laybox.y1)
    return Rect(laybox.x0, min(laybox.y0, ct_bbox.y0 - ose),
                laybox.x1, max(laybox.y1, ct_bbox.y1 + ose))


def draw_contact(tc: 'TechConfig', layers: LayerMap, params: ContactParams) -> Contact:
    """
    Draw the contact described by *params*.

    Raises:
        InvalidSpecError: rows or cols is not positive
        ConfigError: unknown stack or layer, or a stack without 3 layers
    """
    params.validate()
    stack = tc.stack(params.stack)
    if len(stack.layers) != 3:
        raise ConfigError(f"Stack '{stack.name}' must have exactly 3 layers, got {len(stack.layers)}")

    rows, cols = params.rows, params.cols
    ct_rules = tc.layer(stack.cut)
    ctlay = layers.layer(stack.cut)
    cell = LayoutCell(str(params))

    ctw = ct_rules.width
    cts = ct_rules.space
    ctbw = ctw * cols + cts * (cols - 1)
    ctbh = ctw * rows + cts * (rows - 1)
    ct_bbox = Rect(0, 0, ctbw, ctbh)

    # Cut array, one multipolygon for all cuts
    xs, ys = np.meshgrid(np.arange(cols) * (ctw + cts), np.arange(rows) * (ctw + cts))
    xs, ys = xs.ravel(), ys.ravel()
    cell.add_shape(Shape.array(ctlay, xs, ys, xs + ctw, ys + ctw, net=CONTACT_NET))

    bboxes: Dict[Layer, Rect] = {ctlay: ct_bbox}
    port = Port(CONTACT_NET)

    for lay_name in (stack.bottom, stack.top):
        lay = layers.layer(lay_name)
        laybox = ct_bbox.expand(ct_rules.enclosure(lay_name))
        laybox = expand_box_min_width(laybox, tc.layer(lay_name).width, tc.grid)
        laybox = _relax(laybox, ct_bbox, params.dir, ct_rules.one_side_enclosure(lay_name))

        bboxes[lay] = laybox
        port.add_shape(lay, laybox)
        cell.add_rect(lay, laybox, net=CONTACT_NET)

    bot_box = bboxes[layers.layer(stack.bottom)]
    top_box = bboxes[layers.layer(stack.top)]

    implant = _IMPLANTS.get(params.stack)
    if implant is not None:
        src = tc.layer(stack.bottom)
        _add_extra(cell, bboxes, layers.layer(implant), bot_box.expand(src.enclosure(implant)))
        if params.stack == 'pdiffc':
            _add_extra(cell, bboxes, layers.layer('nwell'), bot_box.expand(src.enclosure('nwell')))
    elif params.stack == 'polyc':
        npc = layers.layer('npc')
        _add_extra(cell, bboxes, npc, ct_bbox.expand(ct_rules.enclosure('npc')))
        cell.add_blockage(npc, bboxes[npc])

    cell.add_port(port)
    cell.outline = Shape.from_rect(layers.layer(stack.bottom), bot_box.union(top_box),
                                   net=CONTACT_NET)

    return Contact(cell=cell, rows=rows, cols=cols, bboxes=MappingProxyType(bboxes))


def _add_extra(cell: LayoutCell, bboxes: Dict[Layer, Rect], layer: Layer, rect: Rect) -> None:
    bboxes[layer] = rect
    cell.add_rect(layer, rect)


class ContactCache:
    """
    Memoizes contacts by their params.

    A params being built is pending; other callers for it wait on the
    condition and then read the stored contact, so each params is built at
    most once. Different params may build at the same time.
    """

    def __init__(self, builder: Callable[[ContactParams], Contact]):
        self._builder = builder
        self._cache: Cache = Cache(maxsize=float('inf'))
        self._cond = threading.Condition()
        self._get = cached(self._cache, key=lambda params: params,
                           lock=self._cond, condition=self._cond)(self._build)
        self.builds = 0

    def _build(self, params: ContactParams) -> Contact:
        logger.debug(f"Drawing contact {params}")
        ct = self._builder(params)
        with self._cond:
            self.builds += 1
        return ct

    def get(self, params: ContactParams) -> Contact:
        return self._get(params)

    def peek(self, params: ContactParams) -> Optional[Contact]:
        """Cached contact for params, without building it."""
        with self._cond:
            return self._cache.get(params)

    def __len__(self) -> int:
        with self._cond:
            return len(self._cache)

    def __contains__(self, params: ContactParams) -> bool:
        with self._cond:
            return params in self._cache