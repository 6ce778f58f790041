"""Build websites, manuscripts, and ebooks from a directory of chapters.

This package exposes the CLI entry points used by the ``bookwright`` console
script to render a book project into its output targets.

Exports
-------
- ``app``: Cyclopts application holding the ``build``, ``validate``, and
  ``wordcount`` subcommands.
- ``main``: Convenience function that invokes the Cyclopts app.

Examples
--------
>>> from bookwright import main
>>> main()  # doctest: +SKIP
"""

from __future__ import annotations

from .cli import app, main

__all__ = ["app", "main"]
