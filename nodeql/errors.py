from __future__ import annotations


class NodeQLError(Exception):
    """Base class for errors raised by NodeQL."""


class UnsupportedQueryError(NodeQLError, TypeError):
    """Raised when a query targets a type that cannot be queried (e.g. a union)."""


class SchemaBuildError(NodeQLError, ValueError):
    """Raised when resolvers are registered against unknown types or fields."""
