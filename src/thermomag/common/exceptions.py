"""Common exception types for thermomag property models."""


class MissingPropertyData(RuntimeError):
    """Raised when a parameter file lacks data required by a property model."""


class InvalidMagneticParameters(ValueError):
    """Raised when magnetic inputs would make the Hillert-Jarl terms non-finite."""


class InvalidExponent(InvalidMagneticParameters):
    """Raised when the structure exponent p is zero or not finite."""


class InvalidMagneticMoment(InvalidMagneticParameters):
    """Raised when the mean magnetic moment is <= -1 (ln(1 + B) undefined)."""


class InconsistentPhaseCoefficients(InvalidMagneticParameters):
    """Raised when species of one phase disagree on structure factor or p."""


class NonContiguousOrEmptyRange(ValueError):
    """Raised when a phase's species range is empty, reversed or out of bounds."""
