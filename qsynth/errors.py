"""
Exception types raised by qsynth.

All errors are fatal for the call that raised them; nothing in the package
retries or falls back to an approximation.
"""


class QsynthError(Exception):
    """Base class for all qsynth errors."""


class PreconditionError(QsynthError, ValueError):
    """Input violates a documented precondition (shape, unitarity, register size)."""


class UnsupportedSizeError(PreconditionError):
    """Non-diagonal matrix of a size no synthesizer handles."""


class StructuralError(QsynthError, ValueError):
    """Malformed circuit gate: arity mismatch, repeated or non-positive wire."""


class NumericalError(QsynthError, ArithmeticError):
    """A decomposition identity failed beyond tolerance."""
