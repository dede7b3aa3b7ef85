"""Exceptions raised by the cleaning pipeline.

Both errors abort the batch run. They subclass ``ValueError`` so callers that
only care about "bad input" can catch the builtin.
"""

from __future__ import annotations

from typing import Any


class LayoffPipelineError(Exception):
    """Base class for all pipeline errors."""


class SchemaViolationError(LayoffPipelineError, ValueError):
    """Raised when raw input is missing a column or a value has the wrong shape.

    Carries a message naming the column (and row, where known) so the source
    file can be fixed quickly.
    """


class MalformedDateError(LayoffPipelineError, ValueError):
    """Raised when a ``date`` value cannot be parsed as ``month/day/year``.

    Attributes:
        values: The distinct offending text values (at most a handful).
    """

    def __init__(self, values: list[Any]) -> None:
        self.values = values
        super().__init__(f"Unparseable date values (expected %m/%d/%Y): {values!r}")
