"""
Error taxonomy for the CGP engine.

Every error derives from CGPError and from the builtin exception family it
naturally belongs to, so existing `except ValueError` handlers keep working.
None of these are recoverable at the point of detection.
"""


class CGPError(Exception):
    """Root of all engine errors."""


class UnsupportedType(CGPError, TypeError):
    """Element or genome dtype incompatible with the representation or function set."""


class OutOfRange(CGPError, IndexError):
    """Genome position, node number or gene value outside its defined domain."""


class UnknownOpcode(CGPError, ValueError):
    """Opcode not defined by the function set."""


class LengthMismatch(CGPError, ValueError):
    """Vector length disagrees with the configured input or output count."""


class LengthError(LengthMismatch):
    """Phenotype has the wrong length for a fixed-size benchmark."""


class InvalidConfig(CGPError, ValueError):
    """Parameter combination that cannot describe a valid run."""


class UnsupportedOperation(CGPError, RuntimeError):
    """Operation invoked on the wrong genome representation."""
