"""Exception hierarchy shared by the bookwright build pipeline.

Structural problems abort a build and surface the specific missing item;
content warnings are never raised (see :mod:`bookwright.validation`), and
converter failures are absorbed by the fallback chain in
:mod:`bookwright.converters` until every option is exhausted.
"""

from __future__ import annotations


class BookwrightError(Exception):
    """Base class for errors raised by bookwright."""


class StructuralError(BookwrightError):
    """Raised when the book structure is unusable and the build must stop."""


class BookConfigError(StructuralError, ValueError):
    """Raised when book metadata is invalid or incomplete."""


class ConversionError(BookwrightError):
    """Raised when a converter chain could not produce any artifact."""


__all__ = [
    "BookConfigError",
    "BookwrightError",
    "ConversionError",
    "StructuralError",
]
