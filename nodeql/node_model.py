from __future__ import annotations
import asyncio
import logging
from typing import Any, Callable, Dict, List, Mapping, Optional

from .config import NodeModelConfig
from .core.analyzer import QueryAnalyzer
from .core.batching import ResolutionBatcher
from .core.dependencies import CreatePageDependency, PageDependencyTracker
from .core.ownership import OwnershipIndex
from .core.resolution import resolve_recursive
from .core.utils import RESOLVED_KEY, get_node_by_id as _get_node_by_id, merge_trees, node_type_of, read_field
from .errors import UnsupportedQueryError

# Project logger
_logger = logging.getLogger("nodeql")

PageDependencies = Mapping[str, Any]
NodePredicate = Callable[[Any], bool]


class LocalNodeModel:
    """Query facade over a node store with lazy field resolution.

    Before a query runs, fields it filters, sorts, groups or dedupes on that
    need a resolver are computed for every node of the queried type and cached
    under ``node["$resolved"]``, where the store reads them while matching.
    Concurrent queries on the same type share a single resolution pass.

    Every returned node has its inline objects registered in an ownership
    index (see :meth:`find_root_node_ancestor`) and is recorded as a page
    dependency of ``path`` (or of the path passed with the call).

    Args:
        schema: :class:`~nodeql.registry.NodeSchema` describing node types.
        node_store: A :class:`~nodeql.adapters.base.NodeStore`.
        create_page_dependency: Sink receiving ``{"path", "node_id"}`` or
            ``{"path", "connection"}`` dicts.
        path: Default page path for dependency tracking.
        reporter: Callable receiving diagnostic error messages; defaults to the
            ``nodeql`` logger.
        config: Overrides ``schema.config``.

    Example:
        model = LocalNodeModel(schema, InMemoryNodeStore(nodes), path='/blog')
        posts = await model.run_query('Post', {'filter': {'excerpt': {'regex': '/hello/i'}}})
    """

    def __init__(
        self,
        schema: Any,
        node_store: Any,
        *,
        create_page_dependency: Optional[CreatePageDependency] = None,
        path: Optional[str] = None,
        reporter: Optional[Callable[[str], Any]] = None,
        config: Optional[NodeModelConfig] = None,
    ):
        self.schema = schema
        self.node_store = node_store
        self.config = config or schema.config
        self.reporter = reporter or _logger.error
        self.dependencies = PageDependencyTracker(create_page_dependency, path)
        self.ownership = OwnershipIndex(node_store.get_node)
        self.analyzer = QueryAnalyzer(schema)
        self.batcher = ResolutionBatcher(self._resolve_nodes)

    @property
    def path(self) -> Optional[str]:
        return self.dependencies.path

    # ----- lookups -----
    def get_node_by_id(self, id: Any, type: Any = None, page_dependencies: Optional[PageDependencies] = None):
        """Get a node by id (or pass-through of an already resolved node), optionally restricted to ``type``."""
        node = _get_node_by_id(self.node_store, id)
        if node is None:
            result = None
        elif type is None:
            result = node
        else:
            result = node if node_type_of(node) in self.schema.to_node_type_names(type) else None
        if result is not None:
            self.track_inline_objects_in_root_node(result)
        return self.track_page_dependencies(result, page_dependencies)

    def get_nodes_by_ids(self, ids: Any, type: Any = None, page_dependencies: Optional[PageDependencies] = None):
        nodes = []
        if isinstance(ids, (list, tuple)):
            nodes = [n for n in (_get_node_by_id(self.node_store, i) for i in ids) if n is not None]
        if nodes and type is not None:
            type_names = self.schema.to_node_type_names(type)
            nodes = [n for n in nodes if node_type_of(n) in type_names]
        for node in nodes:
            self.track_inline_objects_in_root_node(node)
        return self.track_page_dependencies(nodes, page_dependencies)

    def get_all_nodes(self, type: Any = None, page_dependencies: Optional[PageDependencies] = None):
        """All nodes, or all nodes of ``type``.

        Unlike the other lookups, dependencies are only recorded when
        ``page_dependencies`` is passed.
        """
        if type is None:
            nodes = list(self.node_store.get_nodes())
        else:
            nodes = []
            for type_name in self.schema.to_node_type_names(type):
                nodes.extend(n for n in self.node_store.get_nodes_by_type(type_name) if n is not None)
        for node in nodes:
            self.track_inline_objects_in_root_node(node)
        if page_dependencies:
            return self.track_page_dependencies(nodes, page_dependencies)
        return nodes

    def get_types(self) -> List[str]:
        return self.node_store.get_types()

    # ----- querying -----
    async def run_query(
        self,
        type: Any,
        query: Optional[Mapping[str, Any]] = None,
        first_only: bool = False,
        page_dependencies: Optional[PageDependencies] = None,
    ):
        """Run ``query`` (filter/sort/group/distinct/skip/limit) against nodes of ``type``.

        Returns a list of nodes, or a single node (or ``None``) with
        ``first_only``. Union types cannot be queried since their members need
        not share any fields.
        """
        query = query or {}
        tdef = self.schema.get_type(type)
        if tdef is not None and tdef.kind == 'union':
            raise UnsupportedQueryError("Querying GraphQLUnion types is not supported.")
        if tdef is None:
            return self.track_page_dependencies(None if first_only else [], page_dependencies)

        plan = self.analyzer.analyze(tdef, query)
        await self.prepare_nodes(tdef, plan.query_fields, plan.fields_to_resolve)

        nodes = await self.node_store.run_query(
            query,
            type_names=self.schema.to_node_type_names(tdef),
            resolved_fields=plan.fields_to_resolve,
            first_only=first_only,
        )
        if first_only:
            result = nodes[0] if nodes else None
            if result is not None:
                self.track_inline_objects_in_root_node(result)
        else:
            result = list(nodes or [])
            for node in result:
                self.track_inline_objects_in_root_node(node)
        return self.track_page_dependencies(result, page_dependencies)

    def prepare_nodes(self, type: Any, query_fields: Dict[str, Any], fields_to_resolve: Dict[str, Any]):
        """Schedule resolution of ``fields_to_resolve`` for every node of ``type``.

        An interface or union is batched per concrete node type, so a query on
        ``Content`` and one on ``Post`` share the ``Post`` pass. Returns a
        future completing once every concrete pass is done.
        """
        futures = [
            self.batcher.schedule(self.schema.get_type(type_name), query_fields, fields_to_resolve)
            for type_name in self.schema.to_node_type_names(type)
        ]
        return asyncio.gather(*futures)

    async def _resolve_nodes(self, tdef: Any, query_fields: Dict[str, Any], fields_to_resolve: Dict[str, Any]) -> None:
        async def _update(node):
            self.track_inline_objects_in_root_node(node)
            resolved = await resolve_recursive(self, self.schema, node, tdef, query_fields, fields_to_resolve)
            return {**node, RESOLVED_KEY: merge_trees(node.get(RESOLVED_KEY), resolved)}

        await self.node_store.update_nodes_by_type(tdef.name, _update)

    # ----- tracking -----
    def track_inline_objects_in_root_node(self, node: Any) -> Any:
        """Link every inline object/array of ``node`` back to ``node["id"]``."""
        return self.ownership.track(node)

    def find_root_node_ancestor(self, obj: Any, predicate: Optional[NodePredicate] = None):
        """Find the topmost node containing ``obj``, or the first ancestor matching ``predicate``.

        Follows the ``parent`` field of nodes first and the ownership index of
        inline objects second. The walk is capped at
        ``config.max_ancestor_depth`` hops; hitting the cap is reported as a
        node that is its own ancestor and ``None`` is returned.
        """
        node = obj
        for _ in range(self.config.max_ancestor_depth):
            if predicate is not None and predicate(node):
                return node
            parent_id = read_field(node, 'parent') if isinstance(node, Mapping) else None
            parent = _get_node_by_id(self.node_store, parent_id) if parent_id else None
            owner_id = self.ownership.get(node)
            tracked_parent = _get_node_by_id(self.node_store, owner_id) if owner_id is not None else None
            if parent is None and tracked_parent is None:
                return node
            node = parent if parent is not None else tracked_parent

        self.reporter(f"It looks like you have a node that's set its parent as itself:\n\n{node!r}")
        return None

    def track_page_dependencies(self, result: Any, page_dependencies: Optional[PageDependencies] = None) -> Any:
        """Record ``result`` (node or list of nodes) as dependencies of the page path; returns ``result``."""
        return self.dependencies.track(result, page_dependencies)
