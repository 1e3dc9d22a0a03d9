from __future__ import annotations
from collections.abc import Mapping
from typing import Any, Callable, Dict, Optional

from .utils import read_field

CreatePageDependency = Callable[[Dict[str, Any]], Any]


class PageDependencyTracker:
    """Records which page (path) depends on which nodes or connections.

    Args:
        create_page_dependency: Sink called with ``{"path", "node_id"}`` or
            ``{"path", "connection"}`` once per edge.
        path: Default page path used when the caller does not pass one.
    """

    def __init__(self, create_page_dependency: Optional[CreatePageDependency] = None, path: Optional[str] = None):
        self.create_page_dependency = create_page_dependency
        self.path = path

    def track(self, result: Any, page_dependencies: Optional[Mapping[str, Any]] = None) -> Any:
        deps: Dict[str, Any] = {'path': self.path, **(page_dependencies or {})}
        path = deps.get('path')
        if not path or self.create_page_dependency is None:
            return result
        connection_type = deps.get('connection_type')
        if connection_type:
            self.create_page_dependency({'path': path, 'connection': connection_type})
            return result
        nodes = result if isinstance(result, (list, tuple)) else [result]
        for node in nodes:
            if node is None:
                continue
            self.create_page_dependency({'path': path, 'node_id': read_field(node, 'id')})
        return result
