"""
Error taxonomy for field synthesis and isosurface extraction.

Parameter problems (``InvalidDimensions``, ``InvalidParameter``) are raised to
the immediate caller. ``InvalidCaseTable`` and ``OutOfBoundsSample`` signal a
broken build or a violated border invariant and are never recovered from.
"""


class IsogenError(Exception):
    """Base class for all errors raised by py_isogen."""


class InvalidDimensions(IsogenError, ValueError):
    """Grid extents are non-positive or too small for the requested operation."""


class InvalidParameter(IsogenError, ValueError):
    """A noise or chunk parameter is outside its valid range."""


class InvalidCaseTable(IsogenError, RuntimeError):
    """A static case table entry is malformed."""


class OutOfBoundsSample(IsogenError, IndexError):
    """A sample index lies outside the grid."""
