"""
Abstract base class for layout backends.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, List, Tuple

from cellgen.layout.cell import collect_cells

if TYPE_CHECKING:
    from cellgen.layout.cell import LayoutCell
    from cellgen.layout.shape import Layer


class LayoutWriter(ABC):
    """
    Abstract base class for layout generation.

    Each backend implements this to write a set of layout cells to its
    specific format.
    """

    @abstractmethod
    def write(self, cells: Iterable['LayoutCell'], path: str | Path) -> Path:
        """
        Write cells, and every cell they reference, to one file.

        Args:
            cells: Top-level LayoutCells
            path: Output file path

        Returns:
            Path to the written file
        """
        pass

    def _collect_cells(self, cells: Iterable['LayoutCell']) -> List['LayoutCell']:
        """All distinct cells reachable from *cells*, children before parents."""
        return collect_cells(cells)

    def _labels_from_ports(self, cell: 'LayoutCell') -> List[Tuple[str, 'Layer', int, int]]:
        """One (net, layer, x, y) label per port, at the center of its first shape."""
        labels = []
        for port in cell.ports.values():
            if port.rect is None:
                continue
            cx, cy = port.center
            labels.append((port.net, port.layer, cx, cy))
        return labels
