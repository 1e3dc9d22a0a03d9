from __future__ import annotations
import asyncio
import logging
from typing import Any, Dict, Iterable, List, Optional

from ..core.utils import node_type_of
from .base import Node, NodeStore, NodeUpdater

logger = logging.getLogger(__name__)


class InMemoryNodeStore(NodeStore):
    """Dict-backed node store keeping insertion order."""

    name = 'memory'

    def __init__(self, nodes: Optional[Iterable[Node]] = None):
        self._nodes: Dict[Any, Node] = {}
        for node in nodes or ():
            self.add_node(node)

    def add_node(self, node: Node) -> Node:
        if node.get('id') is None:
            raise ValueError("Node is missing an 'id'")
        if node_type_of(node) is None:
            raise ValueError(f"Node {node['id']!r} is missing 'internal.type'")
        self._nodes[node['id']] = node
        return node

    def delete_node(self, id: Any) -> Optional[Node]:
        return self._nodes.pop(id, None)

    def get_node(self, id: Any) -> Optional[Node]:
        return self._nodes.get(id)

    def get_nodes(self) -> List[Node]:
        return list(self._nodes.values())

    def get_nodes_by_type(self, type_name: str) -> List[Node]:
        return [n for n in self._nodes.values() if node_type_of(n) == type_name]

    def get_types(self) -> List[str]:
        return list(dict.fromkeys(node_type_of(n) for n in self._nodes.values()))

    async def update_nodes_by_type(self, type_name: str, updater: NodeUpdater) -> None:
        nodes = self.get_nodes_by_type(type_name)
        updated = await asyncio.gather(*(updater(n) for n in nodes))
        for node in updated:
            self._nodes[node['id']] = node
        logger.debug("nodeql: updated %d %s node(s)", len(updated), type_name)
