from __future__ import annotations
from collections.abc import Mapping
from typing import Any, Callable, Dict, Optional, Set, Tuple

from .utils import METADATA_KEY

KeyPath = Tuple[Any, ...]


def _is_inline(value: Any) -> bool:
    return isinstance(value, (Mapping, list))


def _follow(root: Any, path: KeyPath) -> Any:
    value = root
    for key in path:
        if isinstance(value, Mapping):
            if key not in value:
                return None
            value = value[key]
        elif isinstance(value, list) and isinstance(key, int) and 0 <= key < len(value):
            value = value[key]
        else:
            return None
    return value


class OwnershipIndex:
    """Identity-keyed index from inline dicts/lists to the node containing them.

    Plain dicts and lists cannot be weakly referenced, so the index stores
    ``id(obj) -> (node_id, key_path)`` and never the objects themselves. When a
    ``get_node`` callable is given, lookups check that the key path still leads
    to the very same object in the store's copy of the node; entries that no
    longer do, or whose node is gone from the store, are dropped. Re-tracking
    a node replaces its previous entries.

    Args:
        get_node: Optional ``get_node(node_id)`` used to verify lookups.
    """

    def __init__(self, get_node: Optional[Callable[[Any], Any]] = None):
        self._get_node = get_node
        self._owners: Dict[int, Tuple[Any, KeyPath]] = {}
        self._by_root: Dict[Any, Set[int]] = {}

    def __len__(self) -> int:
        return len(self._owners)

    def track(self, node: Mapping) -> Mapping:
        """Register every inline object/array of ``node`` except its metadata block."""
        node_id = node.get('id')
        if node_id is None:
            return node
        registered: Set[int] = set()
        for key, value in node.items():
            if key == METADATA_KEY:
                continue
            self._track_value(value, node_id, (key,), registered)
        for stale in self._by_root.get(node_id, set()) - registered:
            owner = self._owners.get(stale)
            if owner is not None and owner[0] == node_id:
                del self._owners[stale]
        self._by_root[node_id] = registered
        return node

    def _track_value(self, value: Any, node_id: Any, path: KeyPath, registered: Set[int]) -> None:
        if not _is_inline(value) or id(value) in registered:
            return
        registered.add(id(value))
        self._owners[id(value)] = (node_id, path)
        items = value.items() if isinstance(value, Mapping) else enumerate(value)
        for key, child in items:
            self._track_value(child, node_id, path + (key,), registered)

    def get(self, obj: Any) -> Optional[Any]:
        """Return the id of the node owning ``obj``, or ``None`` when unknown."""
        if not _is_inline(obj):
            return None
        entry = self._owners.get(id(obj))
        if entry is None:
            return None
        node_id, path = entry
        if self._get_node is not None:
            root = self._get_node(node_id)
            if root is None:
                self.forget(node_id)
                self._owners.pop(id(obj), None)
                return None
            if _follow(root, path) is not obj:
                del self._owners[id(obj)]
                return None
        return node_id

    def forget(self, node_id: Any) -> None:
        """Drop every entry registered for ``node_id``."""
        for obj_id in self._by_root.pop(node_id, set()):
            owner = self._owners.get(obj_id)
            if owner is not None and owner[0] == node_id:
                del self._owners[obj_id]

    def __contains__(self, obj: Any) -> bool:
        return self.get(obj) is not None
