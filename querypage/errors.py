"""Errors raised while composing lazy queries.

Failures raised by the underlying engine when a query is executed are not
wrapped; they reach the caller unchanged.
"""


class QueryCompositionError(Exception):
    """Base class for errors detected while building a query."""


class MissingRequiredArgument(QueryCompositionError, ValueError):
    """A required argument was explicitly passed as ``None``."""

    def __init__(self, argument: str):
        self.argument = argument
        super().__init__(f"Argument '{argument}' is required and cannot be None")


class InvalidArgument(QueryCompositionError, ValueError):
    """An argument is present but outside its accepted range or type."""


class UnsupportedComposition(QueryCompositionError, TypeError):
    """The requested operation cannot be composed onto this query."""


class UnboundQueryError(QueryCompositionError, RuntimeError):
    """A SQL query was executed without a session to run it on."""
