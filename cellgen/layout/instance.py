"""
Instance - A placement of a layout cell inside another cell.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from cellgen.layout.transform import Transform

if TYPE_CHECKING:
    from cellgen.layout.cell import LayoutCell


@dataclass
class Instance:
    """
    A named reference to a cell, placed with a transform.

    The referenced cell is shared, not copied: many instances may point at
    the same cached contact cell.

    Attributes:
        inst_name: Instance name (unique within the parent cell)
        cell: The referenced LayoutCell
        transform: Placement relative to the parent
    """
    inst_name: str
    cell: 'LayoutCell'
    transform: Transform = field(default_factory=Transform)

    @property
    def loc(self):
        return (self.transform.x, self.transform.y)

    def __repr__(self):
        return f"Instance({self.inst_name}, cell={self.cell.cell_name}, loc={self.loc})"
