"""GDS layout backend for cellgen."""

from cellgen.backends.gds.layout_writer import GDSWriter

__all__ = ['GDSWriter']
