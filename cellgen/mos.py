"""
Transistor group parameters and results.

A transistor group is a row of devices drawn side by side, sharing gate
length and finger count. Fingers run horizontally across all devices;
source/drain gaps are numbered 0..fingers from the bottom.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Mapping, Optional, Tuple

from cellgen.errors import InvalidSpecError
from cellgen.layout.cell import LayoutCell
from cellgen.layout.geometry import Rect
from cellgen.layout.shape import Layer


class MosType(Enum):
    NMOS = 'n'
    PMOS = 'p'

    @property
    def sd_stack(self) -> str:
        """Contact stack for this device's source/drain regions."""
        return 'ndiffc' if self is MosType.NMOS else 'pdiffc'


@dataclass(frozen=True)
class MosDevice:
    """
    One device of a transistor group.

    Attributes:
        mos_type: NMOS or PMOS
        width: Gate width (diffusion width)
        skip_sd_metal: Gap indices where no source/drain contact is drawn
    """
    mos_type: MosType
    width: int
    skip_sd_metal: FrozenSet[int] = field(default_factory=frozenset)

    def __post_init__(self):
        if not isinstance(self.mos_type, MosType):
            object.__setattr__(self, 'mos_type', MosType(self.mos_type))
        if not isinstance(self.skip_sd_metal, frozenset):
            object.__setattr__(self, 'skip_sd_metal', frozenset(self.skip_sd_metal))

    def name(self) -> str:
        name = f"{self.mos_type.value}{self.width}"
        if self.skip_sd_metal:
            name += 's' + '-'.join(str(i) for i in sorted(self.skip_sd_metal))
        return name


@dataclass(frozen=True)
class MosParams:
    """
    A transistor group; used as the per-library cache key.

    Attributes:
        length: Gate length shared by all devices
        fingers: Number of gate fingers shared by all devices
        devices: Devices, left to right
    """
    length: int
    fingers: int
    devices: Tuple[MosDevice, ...] = ()

    def __post_init__(self):
        if not isinstance(self.devices, tuple):
            object.__setattr__(self, 'devices', tuple(self.devices))

    def validate(self, grid: int = 1) -> None:
        """
        Reject groups that cannot be drawn.

        Raises:
            InvalidSpecError: on a non-positive or off-grid dimension, an empty
                group, or a skip index outside 0..fingers
        """
        if _not_positive_int(self.fingers):
            raise InvalidSpecError(f"Number of fingers must be >= 1, got {self.fingers!r}")
        if _not_positive_int(self.length):
            raise InvalidSpecError(f"Gate length must be positive, got {self.length!r}")
        if self.length % grid != 0:
            raise InvalidSpecError(f"Gate length {self.length} is not on the {grid} grid")
        if not self.devices:
            raise InvalidSpecError("A transistor group needs at least one device")
        for j, d in enumerate(self.devices):
            if _not_positive_int(d.width):
                raise InvalidSpecError(f"Device {j}: width must be positive, got {d.width!r}")
            if d.width % grid != 0:
                raise InvalidSpecError(f"Device {j}: width {d.width} is not on the {grid} grid")
            bad = [i for i in d.skip_sd_metal if not 0 <= i <= self.fingers]
            if bad:
                raise InvalidSpecError(
                    f"Device {j}: skipped gaps {sorted(bad)} outside 0..{self.fingers}")

    def name(self) -> str:
        devices = '_'.join(d.name() for d in self.devices)
        return f"ptx_l{self.length}_nf{self.fingers}_{devices}"


@dataclass(frozen=True, eq=False)
class LayoutTransistors:
    """
    A drawn transistor group.

    Attributes:
        cell: LayoutCell holding the group
        sd_metal: Layer of the source/drain ports
        gate_metal: Layer of the gate ports
        sd_pins: Per device, source/drain port rectangle by gap index.
            Skipped gaps have no entry.
        gate_pins: Gate port rectangle per finger
        num_fingers: Number of fingers
        num_devices: Number of devices
    """
    cell: LayoutCell
    sd_metal: Layer
    gate_metal: Layer
    sd_pins: Tuple[Mapping[int, Rect], ...]
    gate_pins: Tuple[Rect, ...]
    num_fingers: int
    num_devices: int

    def sd_pin(self, device: int, gap: int) -> Optional[Rect]:
        """Source/drain rectangle of *device* at *gap*, or None if skipped."""
        return self.sd_pins[device].get(gap)


def _not_positive_int(value) -> bool:
    return isinstance(value, bool) or not isinstance(value, int) or value <= 0
