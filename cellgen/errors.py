"""
Exception types raised by cellgen.

Configuration and specification errors are unrecoverable at the call site:
they indicate a broken rule file or a caller bug, not a transient condition.
Searches that cannot fit a contact return None instead of raising.
"""


class CellgenError(Exception):
    """Base class for all cellgen errors."""


class ConfigError(CellgenError, KeyError):
    """Unknown layer, stack or rule, or a malformed technology description."""

    def __str__(self):
        # KeyError quotes its argument; keep the message readable.
        return str(self.args[0]) if self.args else ''


class InvalidSpecError(CellgenError, ValueError):
    """A contact, transistor or bus request that can never be built."""


class InfeasibleContactError(CellgenError):
    """No contact of the required stack fits the available space.

    Attributes:
        stack: Contact stack that was searched
        width: Available width that could not be filled
    """

    def __init__(self, message: str, stack: str = None, width: int = None):
        super().__init__(message)
        self.stack = stack
        self.width = width
