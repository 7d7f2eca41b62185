"""
Exception types raised by the analysis routines
"""


class ArgumentError(ValueError):
    """malformed arguments: wrong shapes, unknown options, out-of-domain settings"""


class DimensionMismatch(ArgumentError):
    """paired sequences that must have equal length do not"""


class RangeError(ValueError):
    """a derived range is empty or reversed (e.g. lower >= upper)"""


class NumericError(ArithmeticError):
    """a quantity is mathematically undefined for the given input"""
