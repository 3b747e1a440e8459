"""
Pdk - Technology context for primitive generation.

A Pdk owns one technology's design rules, its layer map and the cache of
every contact drawn for it. Independent Pdk objects share nothing.
"""

from typing import Optional, Tuple, TYPE_CHECKING

from cellgen.bus import ContactPolicy
from cellgen.contact import MAX_UNITS, Contact, ContactCache, ContactParams, draw_contact
from cellgen.errors import InvalidSpecError
from cellgen.layout.geometry import Dir, Rect, Span
from cellgen.layout.shape import Layer, LayerMap
from cellgen.logging import logger
from cellgen.tech.config import TechConfig

if TYPE_CHECKING:
    from cellgen.library import PdkLib


class Pdk:
    """
    Technology context.

    Attributes:
        tech: Technology name (selects the transistor generator)
        config: Design rules
        layers: Layer map built from the design rules
    """

    def __init__(self, tech: str, config: TechConfig):
        self.tech = tech
        self.config = config
        self.layers: LayerMap = config.get_layers()
        self.contacts = ContactCache(self.draw_contact)

    def __repr__(self):
        return f"Pdk({self.tech})"

    # ------------------------------------------------------------------
    # Technology queries
    # ------------------------------------------------------------------

    @property
    def grid(self) -> int:
        return self.config.grid

    @property
    def units(self) -> str:
        return self.config.units

    def layer(self, name: str) -> Layer:
        return self.layers.layer(name)

    def gridded_center_span(self, center: int, span: int) -> Tuple[int, int]:
        """(start, stop) of a gridded span of length *span* centered near *center*."""
        s = Span.from_center_span_gridded(center, span, self.grid)
        return s.start, s.stop

    def metal_name(self, i: int) -> str:
        """Name of routing metal *i*; 0 is the lowest."""
        metals = self.config.metals
        if not 0 <= i < len(metals):
            raise InvalidSpecError(f"{self.tech} has no metal layer numbered {i}")
        return metals[i]

    def stack_name(self, i: int) -> str:
        """The name of the stack connecting metal *i* to metal *i+1*."""
        stacks = self.config.metal_stacks
        if not 0 <= i < len(stacks):
            raise InvalidSpecError(f"{self.tech} has no stack above metal {i}")
        return stacks[i]

    def via_name(self, i: int) -> str:
        """The name of the cut layer connecting metal *i* to metal *i+1*."""
        return self.config.stack(self.stack_name(i)).cut

    def metal(self, i: int) -> Layer:
        return self.layer(self.metal_name(i))

    def via(self, i: int) -> Layer:
        return self.layer(self.via_name(i))

    def create_pdk_lib(self, name: str) -> 'PdkLib':
        from cellgen.library import PdkLib
        return PdkLib(name, self)

    # ------------------------------------------------------------------
    # Contacts
    # ------------------------------------------------------------------

    def draw_contact(self, params: ContactParams) -> Contact:
        """Draw a contact without consulting the cache."""
        return draw_contact(self.config, self.layers, params)

    def get_contact(self, params: ContactParams) -> Contact:
        """The contact for *params*, drawn on first use and shared afterwards."""
        return self.contacts.get(params)

    def get_contact_sized(self, stack: str, direction: Dir, layer: Layer,
                          width: int) -> Optional[Contact]:
        """
        Gets the largest single-row (HORIZ) or single-column (VERT) contact
        whose extent on *layer* along *direction* is at most *width*.

        Returns None if even a single cut does not fit.
        """
        low, high = 1, MAX_UNITS
        result = None

        while low <= high:
            mid = (low + high) // 2
            if direction is Dir.HORIZ:
                params = ContactParams(stack, rows=1, cols=mid, dir=direction)
            else:
                params = ContactParams(stack, rows=mid, cols=1, dir=direction)
            ct = self.get_contact(params)

            if ct.bbox(layer).length(direction) <= width:
                result = ct
                low = mid + 1
            else:
                high = mid - 1

        if result is None:
            logger.debug(f"No {stack} contact fits {width} on {layer.name}")
        elif max(result.rows, result.cols) == MAX_UNITS:
            logger.warning(f"{stack} contact sized to {width} hit the {MAX_UNITS} cut limit")
        else:
            logger.debug(f"Sized {stack} to {result.name} for {width} on {layer.name}")
        return result

    def get_contact_within(self, stack: str, layer: Layer, bbox: Rect) -> Optional[Contact]:
        """
        Gets the largest contact whose boundary on *layer* fits within the
        provided Rect's width and height.

        Contacts with more than MAX_UNITS x MAX_UNITS cuts are not supported.
        """
        low_r, high_r = 1, MAX_UNITS
        low_c, high_c = 1, MAX_UNITS
        direction = Dir.HORIZ if bbox.width > bbox.height else Dir.VERT

        result = None

        while high_r >= low_r and high_c >= low_c:
            r = (low_r + high_r + 1) // 2
            c = (low_c + high_c + 1) // 2

            ct = self.get_contact(ContactParams(stack, rows=r, cols=c, dir=direction))
            outline = ct.bbox(layer)
            fits_w = outline.width <= bbox.width
            fits_h = outline.height <= bbox.height

            if fits_w and fits_h:
                result = ct
                low_r, low_c = r, c
                if r == high_r and c == high_c:
                    break
            elif fits_w:
                low_c = c
                high_r = r - 1
            elif fits_h:
                low_r = r
                high_c = c - 1
            else:
                high_r = r - 1
                high_c = c - 1

        if result is None:
            logger.debug(f"No {stack} contact fits within {bbox.width}x{bbox.height}")
        else:
            logger.debug(f"Fit {result.name} within {bbox.width}x{bbox.height}")
        return result

    # ------------------------------------------------------------------
    # Buses
    # ------------------------------------------------------------------

    def bus_min_spacing(self, metal: int, width: int, policy: ContactPolicy) -> int:
        """
        The minimum spacing between tracks of *width* on a bus on routing
        metal *metal*, assuming minimum sized contacts are used.
        """
        space = self.config.layer(self.metal_name(metal)).space
        min_space = space
        bus_layer = self.metal(metal)

        sides = []
        if policy.above is not None:
            sides.append((self.stack_name(metal), policy.above))
        if policy.below is not None:
            if metal == 0:
                raise InvalidSpecError("Cannot contact the lowest metal layer from below")
            sides.append((self.stack_name(metal - 1), policy.below))

        for stack, position in sides:
            ct = self.get_contact(ContactParams(stack, rows=1, cols=1, dir=Dir.VERT))
            # Footprint on the bus metal, enclosure included, not the bare cuts
            rect = ct.bbox(bus_layer)
            ct_width = min(rect.width, rect.height)
            min_space = max(min_space, space + position.overhang(ct_width, width))

        return min_space
