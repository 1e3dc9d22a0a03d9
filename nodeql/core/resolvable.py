from __future__ import annotations
from typing import Any, Dict, Mapping

from .utils import is_tree


def determine_resolvable_fields(schema, type: Any, fields: Mapping[str, Any]) -> Dict[str, Any]:
    """Reduce a requirement tree to the fields that need a resolver.

    Args:
        schema: The :class:`~nodeql.registry.NodeSchema` the type belongs to.
        type: Type name or ``TypeDef`` the requirement tree applies to.
        fields: Requirement tree for that type.

    Returns:
        A tree with ``True`` for fields computed by their own resolver and a
        nested tree for composite fields with resolvable descendants. Plain-data
        fields, and fields the type does not declare, are absent.
    """
    tdef = schema.get_type(type)
    if tdef is None:
        return {}
    type_fields = tdef.get_fields()
    fields_to_resolve: Dict[str, Any] = {}
    for field_name, required in fields.items():
        fdef = type_fields.get(field_name)
        if fdef is None:
            continue
        if fdef.is_composite and is_tree(required) and required:
            inner = determine_resolvable_fields(schema, fdef.type_name, required)
            if inner:
                fields_to_resolve[field_name] = inner
            elif schema.needs_resolve(tdef.name, field_name):
                fields_to_resolve[field_name] = True
        elif schema.needs_resolve(tdef.name, field_name):
            fields_to_resolve[field_name] = True
    return fields_to_resolve
