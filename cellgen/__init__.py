# Units
from pint import UnitRegistry
ureg = UnitRegistry(case_sensitive=True)
Q_ = ureg.Quantity

from cellgen.logging import logger, set_log_level
from cellgen.errors import CellgenError, ConfigError, InvalidSpecError, InfeasibleContactError
from cellgen.layout.geometry import Dir, Rect, Span
from cellgen.contact import Contact, ContactParams, MAX_UNITS
from cellgen.bus import ContactPolicy, ContactPosition
from cellgen.mos import MosType, MosDevice, MosParams, LayoutTransistors
from cellgen.pdk import Pdk
from cellgen.library import PdkLib

__version__ = '0.1.0'
