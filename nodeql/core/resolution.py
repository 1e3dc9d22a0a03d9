from __future__ import annotations
import asyncio
from typing import Any, Dict

from .fields import FieldDef, ResolveInfo
from .utils import is_tree, node_type_of, read_field


async def resolve_field(node_model: Any, schema: Any, source: Any, parent_type: str, fdef: FieldDef) -> Any:
    info = ResolveInfo(
        field_name=fdef.name,
        parent_type=parent_type,
        return_type=fdef.return_type,
        schema=schema,
    )
    return await fdef.resolver(source, {}, {'node_model': node_model}, info)


async def resolve_recursive(
    node_model: Any,
    schema: Any,
    source: Any,
    type: Any,
    query_fields: Any,
    fields_to_resolve: Any,
) -> Dict[str, Any]:
    """Compute the resolvable fields of ``source`` and keep the required ones.

    Fields in ``fields_to_resolve`` go through their resolver (or a plain read
    when none is attached) and composite values are resolved recursively, list
    elements concurrently. Remaining required fields are copied as-is. The
    result only holds keys required by ``query_fields``; ``None`` values are
    left out.
    """
    query_fields = query_fields if is_tree(query_fields) else {}
    fields_to_resolve = fields_to_resolve if is_tree(fields_to_resolve) else {}
    tdef = _concrete_type(schema, schema.get_type(type), source)
    type_fields = tdef.get_fields() if tdef is not None else {}
    resolved: Dict[str, Any] = {}

    for field_name, to_resolve in fields_to_resolve.items():
        fdef = type_fields.get(field_name)
        if fdef is None:
            continue
        if fdef.resolver is not None:
            value = await resolve_field(node_model, schema, source, tdef.name, fdef)
        else:
            value = read_field(source, field_name)
        if value is None:
            continue
        if fdef.is_composite:
            query_field = query_fields.get(field_name)
            inner_to_resolve = to_resolve if is_tree(to_resolve) else query_field
            if not fdef.is_list:
                value = await resolve_recursive(
                    node_model, schema, value, fdef.type_name, query_field, inner_to_resolve
                )
            elif isinstance(value, (list, tuple)):
                value = await _resolve_items(
                    node_model, schema, value, fdef.type_name, query_field, inner_to_resolve
                )
        resolved[field_name] = value

    for field_name in query_fields:
        if fields_to_resolve.get(field_name):
            continue
        value = read_field(source, field_name)
        if value is not None:
            resolved[field_name] = value

    return {k: v for k, v in resolved.items() if query_fields.get(k)}


def _concrete_type(schema, tdef, source):
    # Abstract field types resolve against the value's concrete type when it has one.
    if tdef is None or not tdef.is_abstract:
        return tdef
    concrete = schema.get_type(node_type_of(source))
    if concrete is not None and concrete.name in tdef.possible_types:
        return concrete
    return tdef


async def _resolve_items(node_model, schema, items, type_name, query_field, to_resolve) -> list:
    async def _one(item):
        if item is None:
            return None
        return await resolve_recursive(node_model, schema, item, type_name, query_field, to_resolve)

    return list(await asyncio.gather(*(_one(item) for item in items)))
