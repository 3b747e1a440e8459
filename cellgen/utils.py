import numpy as np

from cellgen import Q_
from cellgen.errors import InvalidSpecError


def parse_length(value, units: str = 'nm') -> int:
    """
    Convert a length to integer database units.

    Plain numbers (or numeric strings) are taken as database units already;
    strings with a unit, e.g. '0.42um' or '420 nm', are converted with pint.
    The result must be a whole number of database units.
    """
    if isinstance(value, bool):
        raise InvalidSpecError(f"Invalid length: {value!r}")
    try:
        q = Q_(value) if isinstance(value, str) else Q_(value, units)
        if q.dimensionless:
            q = Q_(q.magnitude, units)
        mag = float(q.to(units).magnitude)
    except Exception as err:
        raise InvalidSpecError(f"Invalid length {value!r}: {err}") from err

    rounded = int(np.round(mag))
    if not np.isclose(mag, rounded, rtol=0, atol=1e-6):
        raise InvalidSpecError(f"Length {value!r} is not a whole number of {units}")
    return rounded
