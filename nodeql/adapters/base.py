from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Mapping, Optional

from ..core.filters import run_filter

Node = Dict[str, Any]
NodeUpdater = Callable[[Node], Awaitable[Node]]


class NodeStore(ABC):
    """Storage contract consumed by :class:`~nodeql.node_model.LocalNodeModel`.

    Implementations own the nodes; the node model only reads them and replaces
    whole nodes through :meth:`update_nodes_by_type`. Lookups must return the
    same node objects across calls while a node is unchanged, since inline
    ownership tracking is keyed by object identity.
    """

    name = 'base'

    @abstractmethod
    def get_node(self, id: Any) -> Optional[Node]:
        """Return the node with ``id`` or ``None``."""

    @abstractmethod
    def get_nodes(self) -> List[Node]:
        """Return every node."""

    @abstractmethod
    def get_nodes_by_type(self, type_name: str) -> List[Node]:
        """Return every node whose ``internal.type`` is ``type_name``."""

    @abstractmethod
    def get_types(self) -> List[str]:
        """Return the distinct node type names present in the store."""

    @abstractmethod
    async def update_nodes_by_type(self, type_name: str, updater: NodeUpdater) -> None:
        """Replace every node of ``type_name`` with ``await updater(node)``."""

    async def run_query(
        self,
        query: Optional[Mapping[str, Any]],
        *,
        type_names: Iterable[str],
        resolved_fields: Optional[Mapping[str, Any]] = None,
        first_only: bool = False,
    ) -> List[Node]:
        """Match ``query`` (filter/sort/skip/limit) against nodes of ``type_names``.

        Top-level fields named in ``resolved_fields`` are read from the node's
        ``$resolved`` cache instead of the node itself.
        """
        nodes: List[Node] = []
        for type_name in type_names:
            nodes.extend(self.get_nodes_by_type(type_name))
        return run_filter(nodes, query, resolved_fields=resolved_fields, first_only=first_only)
