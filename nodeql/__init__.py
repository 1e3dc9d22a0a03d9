"""NodeQL public API.

Exposes:
- LocalNodeModel: query facade with lazy field resolution and dependency tracking
- NodeSchema: descriptor graph built from SDL, graphql-core or strawberry schemas
- InMemoryNodeStore, SQLNodeStore, NodeStore: node stores
- FieldResolver, FunctionResolver, ResolveInfo: resolver capability types
- NeedsResolve: strawberry schema directive (resolved lazily, imports strawberry)
"""
from __future__ import annotations

from .adapters import InMemoryNodeStore, NodeStore, SQLNodeStore, get_store
from .config import NodeModelConfig
from .core.fields import FieldDef, FieldResolver, FunctionResolver, ResolveInfo, TypeDef
from .errors import NodeQLError, SchemaBuildError, UnsupportedQueryError
from .node_model import LocalNodeModel
from .registry import NodeSchema


def __getattr__(name: str):  # PEP 562 lazy exports
    if name == 'NeedsResolve':
        from .directives import NeedsResolve as _NeedsResolve
        return _NeedsResolve
    raise AttributeError(name)


__all__ = [
    'LocalNodeModel', 'NodeSchema', 'NodeModelConfig',
    'NodeStore', 'InMemoryNodeStore', 'SQLNodeStore', 'get_store',
    'FieldDef', 'TypeDef', 'FieldResolver', 'FunctionResolver', 'ResolveInfo',
    'NodeQLError', 'SchemaBuildError', 'UnsupportedQueryError',
    'NeedsResolve',
]
