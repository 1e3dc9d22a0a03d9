from __future__ import annotations
import fnmatch
import re
from collections.abc import Mapping
from typing import Any, Callable, Dict, Iterable, List, Optional

from .utils import RESOLVED_KEY, read_field

ELEM_MATCH = 'elemMatch'


def _safe(cmp: Callable[[Any, Any], bool]) -> Callable[[Any, Any], bool]:
    def _op(value, operand):
        if value is None or operand is None:
            return False
        try:
            return bool(cmp(value, operand))
        except TypeError:
            return False
    return _op


def _as_list(v: Any) -> list:
    return list(v) if isinstance(v, (list, tuple, set)) else [v]


def _regex(value: Any, pattern: Any) -> bool:
    if not isinstance(value, str):
        return False
    if isinstance(pattern, str) and len(pattern) > 1 and pattern.startswith('/'):
        # "/body/i" style literals
        end = pattern.rfind('/')
        flags = re.IGNORECASE if 'i' in pattern[end + 1:] else 0
        pattern = re.compile(pattern[1:end], flags)
    return re.search(pattern, value) is not None


# Global operator registry (extensible). Operators receive a single value; list
# values are expanded by `_apply` before reaching them.
OPERATOR_REGISTRY: Dict[str, Callable[[Any, Any], bool]] = {
    'eq': lambda v, x: v == x,
    'ne': lambda v, x: v != x,
    'lt': _safe(lambda v, x: v < x),
    'lte': _safe(lambda v, x: v <= x),
    'gt': _safe(lambda v, x: v > x),
    'gte': _safe(lambda v, x: v >= x),
    'in': lambda v, x: v in _as_list(x),
    'nin': lambda v, x: v not in _as_list(x),
    'regex': _regex,
    'glob': lambda v, x: isinstance(v, str) and fnmatch.fnmatchcase(v, str(x)),
}

# Operators that must hold for every element of a list value instead of any.
_NEGATED = {'ne', 'nin'}


def register_operator(name: str, fn: Callable[[Any, Any], bool]):
    OPERATOR_REGISTRY[name] = fn


def _apply(op: str, value: Any, operand: Any) -> bool:
    fn = OPERATOR_REGISTRY[op]
    if isinstance(value, list):
        if op in _NEGATED:
            return all(fn(v, operand) for v in value)
        return any(fn(v, operand) for v in value)
    return fn(value, operand)


def _match_condition(value: Any, cond: Any) -> bool:
    if not isinstance(cond, Mapping):
        return _apply('eq', value, cond)
    for key, operand in cond.items():
        if key == ELEM_MATCH:
            if not isinstance(value, list) or not any(match_filter(item, operand) for item in value):
                return False
        elif key in OPERATOR_REGISTRY:
            if not _apply(key, value, operand):
                return False
        elif not _match_condition(_read(value, key), operand):
            return False
    return True


def _read(value: Any, key: str) -> Any:
    if isinstance(value, list):
        # Nested field on a list of objects: collect the values of every element.
        out: list = []
        for item in value:
            v = read_field(item, key)
            out.extend(v if isinstance(v, list) else [v])
        return out
    return read_field(value, key)


def node_field(node: Any, name: str, resolved_fields: Optional[Mapping[str, Any]] = None) -> Any:
    """Top-level field of ``node``, read from the ``$resolved`` cache when it was resolved."""
    if resolved_fields and name in resolved_fields:
        return read_field(read_field(node, RESOLVED_KEY), name)
    return read_field(node, name)


def get_path(node: Any, path: str, resolved_fields: Optional[Mapping[str, Any]] = None) -> Any:
    head, *rest = path.split('.')
    value = node_field(node, head, resolved_fields)
    for key in rest:
        value = _read(value, key)
    return value


def match_filter(data: Any, filter: Mapping[str, Any], resolved_fields: Optional[Mapping[str, Any]] = None) -> bool:
    """Check ``data`` against a ``{field: {op: operand}}`` filter."""
    for field_name, cond in (filter or {}).items():
        if resolved_fields is not None:
            value = node_field(data, field_name, resolved_fields)
        else:
            value = read_field(data, field_name)
        if not _match_condition(value, cond):
            return False
    return True


def _sort_keys(sort: Any) -> List[tuple]:
    if not sort:
        return []
    if isinstance(sort, Mapping):
        fields = _as_list(sort.get('fields') or [])
        orders = _as_list(sort.get('order') or [])
    else:
        fields, orders = _as_list(sort), []
    keys = []
    for i, path in enumerate(fields):
        order = str(orders[i] if i < len(orders) else 'ASC').lower()
        keys.append((path, order == 'desc'))
    return keys


def sort_nodes(nodes: Iterable[Any], sort: Any, resolved_fields: Optional[Mapping[str, Any]] = None) -> List[Any]:
    """Stable multi-key sort; nodes missing a key always go last."""
    out = list(nodes)
    for path, descending in reversed(_sort_keys(sort)):
        present = [n for n in out if get_path(n, path, resolved_fields) is not None]
        missing = [n for n in out if get_path(n, path, resolved_fields) is None]
        present.sort(key=lambda n: get_path(n, path, resolved_fields), reverse=descending)
        out = present + missing
    return out


def run_filter(
    nodes: Iterable[Any],
    query: Optional[Mapping[str, Any]],
    *,
    resolved_fields: Optional[Mapping[str, Any]] = None,
    first_only: bool = False,
) -> List[Any]:
    """Filter, sort and paginate ``nodes`` in process."""
    query = query or {}
    flt = query.get('filter') or {}
    matched = [n for n in nodes if match_filter(n, flt, resolved_fields or {})]
    matched = sort_nodes(matched, query.get('sort'), resolved_fields)
    skip = query.get('skip') or 0
    limit = 1 if first_only else query.get('limit')
    matched = matched[skip:]
    if limit is not None:
        matched = matched[:limit]
    return matched
