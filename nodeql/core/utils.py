from __future__ import annotations
from collections.abc import Mapping
from typing import Any, Dict, Optional

# Reserved node keys
RESOLVED_KEY = '$resolved'
METADATA_KEY = 'internal'


def is_tree(value: Any) -> bool:
    return isinstance(value, Mapping)


def merge_trees(*trees: Any) -> Dict[str, Any]:
    """Deep-merge field trees left to right without mutating the inputs.

    Mapping + mapping merges recursively. A mapping absorbs a ``True`` leaf no
    matter which side the leaf is on; any other conflict is won by the later
    value. Falsy inputs are skipped, so ``merge_trees(None, {...})`` works.
    """
    out: Dict[str, Any] = {}
    for tree in trees:
        if not tree:
            continue
        out = _merge_pair(out, tree)
    return out


def _merge_pair(target: Mapping, source: Mapping) -> Dict[str, Any]:
    merged = dict(target)
    for key, value in source.items():
        current = merged.get(key)
        if is_tree(value) and is_tree(current):
            merged[key] = _merge_pair(current, value)
        elif is_tree(current) and value is True:
            continue
        else:
            merged[key] = value
    return merged


def path_to_tree(path: Any) -> Dict[str, Any]:
    """Turn ``"a.b.c"`` into ``{"a": {"b": {"c": True}}}``; non-strings give ``{}``."""
    if not path or not isinstance(path, str):
        return {}
    tree: Any = True
    for key in reversed(path.split('.')):
        tree = {key: tree}
    return tree


def read_field(source: Any, name: str) -> Any:
    """Plain property read used when a field has no resolver."""
    if source is None:
        return None
    if isinstance(source, Mapping):
        return source.get(name)
    return getattr(source, name, None)


def node_type_of(node: Any) -> Optional[str]:
    meta = read_field(node, METADATA_KEY)
    return read_field(meta, 'type')


def get_node_by_id(store: Any, id: Any) -> Optional[Dict[str, Any]]:
    # A node may already have been resolved in place of its id, e.g. when the
    # filter input matched on `parent { id }` and `parent` is also selected.
    if isinstance(id, Mapping) and id.get('id'):
        return id  # type: ignore[return-value]
    return store.get_node(id) if id is not None else None
