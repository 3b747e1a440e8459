"""
Bus contact policies.

A bus is a set of parallel, equally spaced tracks on one metal layer. The
minimum track spacing depends on whether contacts land on the tracks from
the layer above or below, and how contacts on neighbouring tracks are
staggered. See Pdk.bus_min_spacing.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ContactPosition(Enum):
    """Specifies how contacts should be placed on any given layer."""

    # Contacts are centered on the bus, but can be placed on adjacent traces.
    CENTERED_ADJACENT = 'adjacent'
    # Contacts are centered on the bus, and cannot be placed in the same
    # position on adjacent traces.
    CENTERED_NON_ADJACENT = 'nonadjacent'

    def overhang(self, contact_width: int, trace_width: int) -> int:
        """Extra clearance a contact of contact_width needs on a trace_width track."""
        excess = max(contact_width - trace_width, 0)
        if self is ContactPosition.CENTERED_ADJACENT:
            return excess
        # Staggered contacts only face a plain track on the neighbour.
        return -(-excess // 2)


@dataclass(frozen=True)
class ContactPolicy:
    """Specifies how contacts should be placed on a bus."""
    above: Optional[ContactPosition] = None
    below: Optional[ContactPosition] = None

    def __post_init__(self):
        for side in ('above', 'below'):
            value = getattr(self, side)
            if value is not None and not isinstance(value, ContactPosition):
                object.__setattr__(self, side, ContactPosition(value))
