"""
Exception types raised by the vCard codec.

Every error derives from ValueError so callers that already guard codec calls
with ``except ValueError`` keep working.
"""


class VCardError(ValueError):
    """Base class for every codec failure."""


class VCardFormatError(VCardError):
    """
    The text does not follow the vCard line structure.

    Raised for malformed lines, missing BEGIN/END markers, a missing or
    unsupported VERSION, tokens without a value and property values whose
    shape cannot be interpreted (dates, photo encodings).
    """


class VCardValidationError(VCardError):
    """A value was rejected by the contact model or an encode-time check."""
