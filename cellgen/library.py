"""
PdkLib - A named library of generated cells bound to one Pdk.

Example:
    from cellgen.tech import sky130

    lib = sky130.pdk_lib('ptx')
    ptx = lib.draw_mos(MosParams(length=150, fingers=4,
                                 devices=[MosDevice(MosType.NMOS, 1000)]))
    lib.save_gds('build/ptx.gds')
"""

import threading
from pathlib import Path
from typing import Callable, Dict, List, TYPE_CHECKING

import gdstk
from cachetools import Cache, cached

from cellgen.backends.gds.layout_writer import GDSWriter
from cellgen.contact import Contact, ContactParams
from cellgen.errors import ConfigError
from cellgen.layout.cell import LayoutCell, collect_cells
from cellgen.logging import logger
from cellgen.mos import LayoutTransistors, MosParams
from cellgen.tech.sky130.mos import draw_sky130_mos

if TYPE_CHECKING:
    from cellgen.pdk import Pdk

# Transistor generators by technology name
MOS_GENERATORS: Dict[str, Callable[['Pdk', MosParams], LayoutTransistors]] = {
    'sky130': draw_sky130_mos,
}


class PdkLib:
    """
    A cell library.

    Attributes:
        name: Library name
        pdk: Technology context the cells are drawn with
        cells: Top-level cells by name, in insertion order. Writes go
            through add_cell.
    """

    def __init__(self, name: str, pdk: 'Pdk'):
        self.name = name
        self.pdk = pdk
        self.cells: Dict[str, LayoutCell] = {}
        self._cells_lock = threading.Lock()
        self._ptx: Cache = Cache(maxsize=float('inf'))
        self._ptx_cond = threading.Condition()
        self._get_ptx = cached(self._ptx, key=lambda params: params,
                               lock=self._ptx_cond, condition=self._ptx_cond)(self._build_mos)

    def __repr__(self):
        return f"PdkLib({self.name}, {self.pdk.tech}, cells={len(self.cells)})"

    def add_cell(self, cell: LayoutCell) -> LayoutCell:
        with self._cells_lock:
            return self.cells.setdefault(cell.cell_name, cell)

    def cell(self, name: str) -> LayoutCell:
        try:
            return self.cells[name]
        except KeyError:
            raise KeyError(f"No cell named '{name}' in library {self.name}") from None

    def draw_contact(self, params: ContactParams) -> Contact:
        """Get a contact from the Pdk cache and add its cell to this library."""
        ct = self.pdk.get_contact(params)
        self.add_cell(ct.cell)
        return ct

    def draw_mos(self, params: MosParams) -> LayoutTransistors:
        """
        Draw a transistor group, or return the one already drawn in this
        library for equal params. Params are validated before the cache
        lookup, so an invalid group never hits an equal-comparing entry.

        Raises:
            ConfigError: no transistor generator for this technology
            InvalidSpecError: params can never be drawn
        """
        if self.pdk.tech not in MOS_GENERATORS:
            raise ConfigError(f"No transistor generator for technology '{self.pdk.tech}'")
        params.validate(self.pdk.grid)
        return self._get_ptx(params)

    def _build_mos(self, params: MosParams) -> LayoutTransistors:
        ptx = MOS_GENERATORS[self.pdk.tech](self.pdk, params)
        self.add_cell(ptx.cell)
        logger.info(f"Drew transistor group {ptx.cell.cell_name} in {self.name}")
        return ptx

    @property
    def num_ptx(self) -> int:
        with self._ptx_cond:
            return len(self._ptx)

    def _top_cells(self) -> List[LayoutCell]:
        with self._cells_lock:
            return list(self.cells.values())

    def all_cells(self) -> List[LayoutCell]:
        """Every cell in the library, including referenced contacts, children first."""
        return collect_cells(self._top_cells())

    def export_gds(self) -> gdstk.Library:
        """The library as an in-memory gdstk library."""
        writer = GDSWriter(layer_map=self.pdk.layers, unit=self.pdk.config.database_unit)
        return writer.build_library(self._top_cells())

    def save_gds(self, path: str | Path) -> Path:
        """Write the library to a GDS file, creating parent directories."""
        writer = GDSWriter(layer_map=self.pdk.layers, unit=self.pdk.config.database_unit)
        return writer.write(self._top_cells(), path)
