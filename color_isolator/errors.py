class ColorIsolatorError(Exception):
    """Base class for every precondition failure raised by the core."""


class OutOfBounds(ColorIsolatorError, IndexError):
    """Coordinate lies outside the buffer's width × height grid."""


class EmptyBuffer(ColorIsolatorError, ValueError):
    """Buffer has zero width or zero height."""


class DimensionMismatch(ColorIsolatorError, ValueError):
    """Buffer data or output buffer does not match the expected shape."""


class ImageDecodeError(ColorIsolatorError, ValueError):
    """Raw bytes could not be decoded into an image."""
