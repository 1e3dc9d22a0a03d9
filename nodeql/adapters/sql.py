from __future__ import annotations
import asyncio
import logging
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Union

from sqlalchemy import JSON, Column, String, create_engine, delete, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from ..core.filters import run_filter
from ..core.utils import node_type_of
from .base import Node, NodeStore, NodeUpdater

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


class NodeRecord(Base):
    """One node per row; the full node dict lives in ``data``."""
    __tablename__ = 'nodeql_nodes'

    id = Column(String, primary_key=True)
    type = Column(String, nullable=False, index=True)
    parent = Column(String, nullable=True)
    data = Column(JSON, nullable=False)


def _is_memory_sqlite(engine: Engine) -> bool:
    url = engine.url
    return url.get_backend_name() == 'sqlite' and url.database in (None, '', ':memory:')


class SQLNodeStore(NodeStore):
    """Node store persisting nodes as JSON rows through SQLAlchemy.

    Loaded node dicts are kept in an identity map so repeated lookups return
    the same objects until the node is written again.

    Lookups are synchronous. The async query and update paths run their
    database calls in a worker thread (``offload_io``), except for in-memory
    SQLite, whose database exists on a single connection per thread.

    Args:
        bind: An ``Engine`` or a database URL. Defaults to in-memory SQLite.
        create_tables: Create the ``nodeql_nodes`` table when missing.
    """

    name = 'sql'

    def __init__(self, bind: Union[Engine, str] = 'sqlite://', *, create_tables: bool = True, nodes: Optional[Iterable[Node]] = None):
        self.engine = create_engine(bind) if isinstance(bind, str) else bind
        if create_tables:
            Base.metadata.create_all(self.engine)
        self._session = sessionmaker(self.engine, expire_on_commit=False)
        self._identity: Dict[str, Node] = {}
        self.offload_io = not _is_memory_sqlite(self.engine)
        for node in nodes or ():
            self.add_node(node)

    @staticmethod
    def _record(node: Node) -> NodeRecord:
        parent = node.get('parent')
        return NodeRecord(
            id=str(node['id']),
            type=node_type_of(node),
            parent=str(parent) if parent is not None else None,
            data=node,
        )

    def _materialize(self, id: str, data: Node) -> Node:
        return self._identity.setdefault(id, data)

    def _write(self, nodes: List[Node]) -> None:
        with self._session.begin() as session:
            for node in nodes:
                session.merge(self._record(node))
        for node in nodes:
            self._identity[str(node['id'])] = node

    def add_node(self, node: Node) -> Node:
        if node.get('id') is None:
            raise ValueError("Node is missing an 'id'")
        if node_type_of(node) is None:
            raise ValueError(f"Node {node['id']!r} is missing 'internal.type'")
        self._write([node])
        return node

    def delete_node(self, id: Any) -> Optional[Node]:
        node = self.get_node(id)
        with self._session.begin() as session:
            session.execute(delete(NodeRecord).where(NodeRecord.id == str(id)))
        self._identity.pop(str(id), None)
        return node

    def get_node(self, id: Any) -> Optional[Node]:
        key = str(id)
        if key in self._identity:
            return self._identity[key]
        with self._session() as session:
            record = session.get(NodeRecord, key)
            if record is None:
                return None
            return self._materialize(key, record.data)

    def _load(self, stmt) -> List[Node]:
        with self._session() as session:
            rows = session.execute(stmt).all()
        return [self._materialize(row.id, row.data) for row in rows]

    def get_nodes(self) -> List[Node]:
        return self._load(select(NodeRecord.id, NodeRecord.data).order_by(NodeRecord.id))

    def get_nodes_by_type(self, type_name: str) -> List[Node]:
        stmt = (
            select(NodeRecord.id, NodeRecord.data)
            .where(NodeRecord.type == type_name)
            .order_by(NodeRecord.id)
        )
        return self._load(stmt)

    def get_types(self) -> List[str]:
        with self._session() as session:
            return list(session.execute(select(NodeRecord.type).distinct().order_by(NodeRecord.type)).scalars())

    async def _run_io(self, fn: Callable[..., Any], *args: Any) -> Any:
        if not self.offload_io:
            return fn(*args)
        return await asyncio.to_thread(fn, *args)

    def _load_types(self, type_names: List[str]) -> List[Node]:
        nodes: List[Node] = []
        for type_name in type_names:
            nodes.extend(self.get_nodes_by_type(type_name))
        return nodes

    async def run_query(
        self,
        query: Optional[Mapping[str, Any]],
        *,
        type_names: Iterable[str],
        resolved_fields: Optional[Mapping[str, Any]] = None,
        first_only: bool = False,
    ) -> List[Node]:
        nodes = await self._run_io(self._load_types, list(type_names))
        return run_filter(nodes, query, resolved_fields=resolved_fields, first_only=first_only)

    async def update_nodes_by_type(self, type_name: str, updater: NodeUpdater) -> None:
        nodes = await self._run_io(self.get_nodes_by_type, type_name)
        updated = list(await asyncio.gather(*(updater(n) for n in nodes)))
        await self._run_io(self._write, updated)
        logger.debug("nodeql: persisted %d %s node(s)", len(updated), type_name)
