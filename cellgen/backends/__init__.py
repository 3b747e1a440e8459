"""
Layout output backends for cellgen.

Each backend provides a LayoutWriter that turns a LayoutCell hierarchy
into a file format (currently GDSII only).
"""

from cellgen.backends.base import LayoutWriter

__all__ = [
    'LayoutWriter',
]
