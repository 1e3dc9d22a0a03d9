from __future__ import annotations
import inspect
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Tuple


@dataclass
class ResolveInfo:
    """Field metadata handed to resolvers as their fourth argument."""

    field_name: str
    parent_type: str
    return_type: Any
    schema: Any


class FieldResolver:
    """Resolver capability attached to a field at schema-build time.

    Subclasses implement :meth:`resolve`, which receives the owning node (or the
    nested object being resolved), an empty argument mapping, a context mapping
    holding ``node_model`` for nested queries, and a :class:`ResolveInfo`. The
    return value may be a plain value or an awaitable.
    """

    def resolve(self, source: Any, args: Dict[str, Any], context: Dict[str, Any], info: ResolveInfo) -> Any:
        raise NotImplementedError

    async def __call__(self, source: Any, args: Dict[str, Any], context: Dict[str, Any], info: ResolveInfo) -> Any:
        value = self.resolve(source, args, context, info)
        if inspect.isawaitable(value):
            value = await value
        return value


class FunctionResolver(FieldResolver):
    """Adapts a plain callable ``fn(source, args, context, info)``; may be sync or async."""

    def __init__(self, fn: Callable[..., Any]):
        self.fn = fn

    def resolve(self, source, args, context, info):
        return self.fn(source, args, context, info)

    def __repr__(self) -> str:  # pragma: no cover - debugging aid
        return f"FunctionResolver({getattr(self.fn, '__name__', self.fn)!r})"


def as_resolver(value: Any) -> FieldResolver:
    if isinstance(value, FieldResolver):
        return value
    if callable(value):
        return FunctionResolver(value)
    raise TypeError(f"Unsupported resolver: {value!r}")


@dataclass
class FieldDef:
    """Normalized field description collected by :class:`~nodeql.registry.NodeSchema`.

    Attributes:
        name: Field name on the declaring type.
        return_type: The declared graphql-core output type (wrappers included).
        type_name: Name of the innermost named type.
        is_list: True when the nullable-unwrapped declared type is a list.
        is_composite: True when the named type is an object, interface or union.
        resolver: Optional resolver capability; ``None`` means plain property read.
        needs_resolve: Whether queries touching the field must run the resolver
            before the store can match on it.
    """

    name: str
    return_type: Any
    type_name: str
    is_list: bool = False
    is_composite: bool = False
    resolver: Optional[FieldResolver] = None
    needs_resolve: bool = False


@dataclass
class TypeDef:
    name: str
    kind: str  # 'object' | 'interface' | 'union' | 'scalar' | 'enum' | 'input'
    fields: Dict[str, FieldDef] = field(default_factory=dict)
    interfaces: Tuple[str, ...] = ()
    possible_types: Tuple[str, ...] = ()

    @property
    def is_abstract(self) -> bool:
        return self.kind in ('interface', 'union')

    def get_fields(self) -> Dict[str, FieldDef]:
        return self.fields
