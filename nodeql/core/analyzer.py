from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from .resolvable import determine_resolvable_fields
from .utils import is_tree, merge_trees, path_to_tree

ELEM_MATCH = 'elemMatch'


@dataclass
class QueryPlan:
    query_fields: Dict[str, Any]
    fields_to_resolve: Dict[str, Any]


def drop_query_operators(filter: Mapping[str, Any]) -> Dict[str, Any]:
    """Reduce a filter to its field-path skeleton.

    ``{"frontmatter": {"date": {"gt": "2020"}}}`` becomes
    ``{"frontmatter": {"date": True}}``; ``elemMatch`` wrappers are unwrapped.
    Only the first key of each level decides whether the level is an operator
    object or a nested field object.
    """
    out: Dict[str, Any] = {}
    for key, value in filter.items():
        if is_tree(value) and value:
            op, operand = next(iter(value.items()))
            if is_tree(operand):
                out[key] = drop_query_operators(operand if op == ELEM_MATCH else value)
                continue
        out[key] = True
    return out


def _as_path_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def _sort_paths(sort: Any) -> List[Any]:
    if is_tree(sort):
        return _as_path_list(sort.get('fields'))
    return _as_path_list(sort)


def get_query_fields(
    filter: Optional[Mapping[str, Any]] = None,
    sort: Any = None,
    group: Any = None,
    distinct: Any = None,
) -> Dict[str, Any]:
    """Merge every field path read by filter/sort/group/distinct into one tree."""
    filter_fields = drop_query_operators(filter) if is_tree(filter) else {}
    paths = _sort_paths(sort) + _as_path_list(group) + _as_path_list(distinct)
    return merge_trees(filter_fields, *(path_to_tree(p) for p in paths))


class QueryAnalyzer:
    """Turns query arguments into a compact resolution plan for one type."""

    def __init__(self, schema):
        self.schema = schema

    def analyze(self, type: Any, query: Optional[Mapping[str, Any]]) -> QueryPlan:
        query = query or {}
        query_fields = get_query_fields(
            filter=query.get('filter'),
            sort=query.get('sort'),
            group=query.get('group'),
            distinct=query.get('distinct'),
        )
        fields_to_resolve = determine_resolvable_fields(self.schema, type, query_fields)
        return QueryPlan(query_fields=query_fields, fields_to_resolve=fields_to_resolve)
