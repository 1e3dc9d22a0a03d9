from __future__ import annotations
import logging
import re
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from graphql import (
    GraphQLField,
    GraphQLNamedType,
    GraphQLSchema,
    build_schema,
    get_named_type,
    get_nullable_type,
    is_abstract_type,
    is_composite_type,
    is_enum_type,
    is_input_object_type,
    is_interface_type,
    is_list_type,
    is_object_type,
    is_union_type,
)

from .config import DEFAULT_CONFIG, NodeModelConfig
from .core.fields import FieldDef, FieldResolver, TypeDef, as_resolver
from .errors import SchemaBuildError

_logger = logging.getLogger("nodeql")

NEEDS_RESOLVE_DIRECTIVE = 'needsResolve'
NEEDS_RESOLVE_EXTENSION = 'needs_resolve'
_NEEDS_RESOLVE_SDL = f"directive @{NEEDS_RESOLVE_DIRECTIVE} on FIELD_DEFINITION"
_NEEDS_RESOLVE_DECLARED = re.compile(r"directive\s+@" + NEEDS_RESOLVE_DIRECTIVE + r"\b")

ResolverMap = Mapping[str, Mapping[str, Union[Callable[..., Any], FieldResolver]]]
TypeOrTypeName = Union[str, TypeDef, GraphQLNamedType]


def _kind_of(gql_type: GraphQLNamedType) -> str:
    if is_object_type(gql_type):
        return 'object'
    if is_interface_type(gql_type):
        return 'interface'
    if is_union_type(gql_type):
        return 'union'
    if is_enum_type(gql_type):
        return 'enum'
    if is_input_object_type(gql_type):
        return 'input'
    return 'scalar'


def _has_needs_resolve_marker(gql_field: GraphQLField) -> bool:
    if (gql_field.extensions or {}).get(NEEDS_RESOLVE_EXTENSION):
        return True
    ast_node = gql_field.ast_node
    if ast_node is None:
        return False
    return any(d.name.value == NEEDS_RESOLVE_DIRECTIVE for d in (ast_node.directives or ()))


def _build_field_def(name: str, gql_field: GraphQLField) -> FieldDef:
    named = get_named_type(gql_field.type)
    return FieldDef(
        name=name,
        return_type=gql_field.type,
        type_name=named.name,
        is_list=is_list_type(get_nullable_type(gql_field.type)),
        is_composite=is_composite_type(named),
        needs_resolve=_has_needs_resolve_marker(gql_field),
    )


def _build_type_def(schema: GraphQLSchema, gql_type: GraphQLNamedType) -> TypeDef:
    kind = _kind_of(gql_type)
    tdef = TypeDef(name=gql_type.name, kind=kind)
    if kind in ('object', 'interface'):
        tdef.fields = {name: _build_field_def(name, f) for name, f in gql_type.fields.items()}
        tdef.interfaces = tuple(i.name for i in (getattr(gql_type, 'interfaces', None) or ()))
    if is_abstract_type(gql_type):
        tdef.possible_types = tuple(t.name for t in schema.get_possible_types(gql_type))
    return tdef


class NodeSchema:
    """Pre-built descriptor graph over a graphql-core schema.

    Field kinds (list/composite), resolver capabilities and the needs-resolve
    marker are computed once here, so query-time code never introspects
    graphql-core wrappers again.

    A field needs resolution when a resolver was registered for it, when its
    SDL definition carries ``@needsResolve``, or when a programmatic
    ``GraphQLField`` has ``extensions={"needs_resolve": True}``.

    Example:
        schema = NodeSchema.from_sdl(
            '''
            interface Node { id: ID! }
            type Post implements Node { id: ID! title: String excerpt: String }
            ''',
            resolvers={'Post': {'excerpt': lambda node, args, ctx, info: node['body'][:20]}},
        )
    """

    def __init__(
        self,
        types: Dict[str, TypeDef],
        *,
        config: Optional[NodeModelConfig] = None,
        graphql_schema: Optional[GraphQLSchema] = None,
    ):
        self.types = types
        self.config = config or DEFAULT_CONFIG
        self.graphql_schema = graphql_schema

    # ----- builders -----
    @classmethod
    def from_graphql(
        cls,
        schema: GraphQLSchema,
        resolvers: Optional[ResolverMap] = None,
        *,
        config: Optional[NodeModelConfig] = None,
    ) -> "NodeSchema":
        types: Dict[str, TypeDef] = {}
        for name, gql_type in schema.type_map.items():
            if name.startswith('__'):
                continue
            types[name] = _build_type_def(schema, gql_type)
        for type_name, field_resolvers in (resolvers or {}).items():
            tdef = types.get(type_name)
            if tdef is None or not tdef.fields:
                raise SchemaBuildError(f"Cannot attach resolvers to unknown or fieldless type '{type_name}'")
            for field_name, fn in field_resolvers.items():
                fdef = tdef.fields.get(field_name)
                if fdef is None:
                    raise SchemaBuildError(f"Unknown field '{type_name}.{field_name}'")
                fdef.resolver = as_resolver(fn)
                fdef.needs_resolve = True
        _logger.debug("nodeql: built schema with %d types", len(types))
        return cls(types, config=config, graphql_schema=schema)

    @classmethod
    def from_sdl(
        cls,
        sdl: str,
        resolvers: Optional[ResolverMap] = None,
        *,
        config: Optional[NodeModelConfig] = None,
    ) -> "NodeSchema":
        if not _NEEDS_RESOLVE_DECLARED.search(sdl):
            sdl = f"{_NEEDS_RESOLVE_SDL}\n\n{sdl}"
        return cls.from_graphql(build_schema(sdl), resolvers, config=config)

    @classmethod
    def from_strawberry(
        cls,
        schema: Any,
        resolvers: Optional[ResolverMap] = None,
        *,
        config: Optional[NodeModelConfig] = None,
    ) -> "NodeSchema":
        """Build from a ``strawberry.Schema``.

        Strawberry resolvers take ``(self, info)`` and run against typed Python
        instances, so they are not reused; fields computed on plain node dicts
        are passed through ``resolvers`` and fields can be marked with the
        :class:`~nodeql.directives.NeedsResolve` schema directive.
        """
        return cls.from_sdl(schema.as_str(), resolvers, config=config)

    # ----- lookups -----
    def get_type(self, type: Optional[TypeOrTypeName]) -> Optional[TypeDef]:
        if type is None:
            return None
        if isinstance(type, TypeDef):
            return type
        name = type if isinstance(type, str) else getattr(type, 'name', None)
        return self.types.get(name) if name else None

    def get_possible_types(self, type: Optional[TypeOrTypeName]) -> List[TypeDef]:
        tdef = self.get_type(type)
        if tdef is None:
            return []
        if not tdef.is_abstract:
            return [tdef]
        return [self.types[name] for name in tdef.possible_types if name in self.types]

    def to_node_type_names(self, type: Optional[TypeOrTypeName]) -> List[str]:
        """Names of the concrete node-bearing types a query on ``type`` covers."""
        iface = self.config.node_interface
        return [t.name for t in self.get_possible_types(type) if iface in t.interfaces]

    def needs_resolve(self, type_name: str, field_name: str) -> bool:
        tdef = self.types.get(type_name)
        fdef = tdef.fields.get(field_name) if tdef is not None else None
        return bool(fdef is not None and fdef.needs_resolve)
