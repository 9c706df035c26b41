"""
Configuration errors raised by the kernel and the indicator layer.

Insufficient history is never an error: it shows up as NaN in the output.
Everything here signals a caller mistake (bad length, empty input, misaligned
series, unknown indicator or input) and is raised before any computation.
"""


class KernelConfigError(ValueError):
    """Base class for invalid kernel or indicator configuration."""
    pass


class InvalidLengthError(KernelConfigError):
    """Raised when a window or smoothing length is not an integer >= 1."""
    pass


class EmptySeriesError(KernelConfigError):
    """Raised when a Series would be built from zero bars or values."""
    pass


class SeriesAlignmentError(KernelConfigError):
    """Raised when two Series of different lengths are combined."""
    pass


class InvalidInputError(KernelConfigError):
    """Raised for unknown indicator inputs or out-of-range input values."""
    pass


class UnknownIndicatorError(KeyError):
    """Raised when an indicator id is not in the registry."""
    pass


def validate_length(length, name: str = "length", minimum: int = 1) -> int:
    """Return length if it is an integer >= minimum, else raise InvalidLengthError."""
    # bool is an int subclass; True must not pass as a length of 1
    if isinstance(length, bool) or not isinstance(length, int):
        try:
            is_integral = float(length).is_integer()
        except (TypeError, ValueError):
            is_integral = False
        if isinstance(length, bool) or not is_integral:
            raise InvalidLengthError(f"{name} must be an integer >= {minimum}, got {length!r}")
        length = int(length)
    if length < minimum:
        raise InvalidLengthError(f"{name} must be >= {minimum}, got {length}")
    return length
