from __future__ import annotations
import asyncio
import logging
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, FrozenSet, List, Set, Tuple

from .utils import merge_trees

logger = logging.getLogger(__name__)

# Type names whose resolution pass is running in the current task tree.
_running_passes: ContextVar[FrozenSet[str]] = ContextVar('nodeql_running_passes', default=frozenset())

RunPass = Callable[[Any, Dict[str, Any], Dict[str, Any]], Awaitable[None]]


@dataclass
class PendingBatch:
    future: asyncio.Future
    requests: List[Tuple[Dict[str, Any], Dict[str, Any]]] = field(default_factory=list)

    def merged(self) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        query_fields = merge_trees(*(q for q, _ in self.requests))
        fields_to_resolve = merge_trees(*(r for _, r in self.requests))
        return query_fields, fields_to_resolve


class ResolutionBatcher:
    """Coalesces resolution requests per type into single-flight passes.

    Requests for a type made before its pass starts share one future and one
    merged pass. The per-type worker starts on the next loop iteration, so every
    request issued in the current synchronous stretch joins the same batch.
    Requests made while a pass runs go to the next batch, which the worker runs
    as soon as the current pass finishes. At most one pass per type is in
    flight.

    A request issued from inside a running pass for a type whose pass is
    already in flight is not queued. It completes at once and the caller reads
    current node data, since the in-flight pass may itself be waiting on it.

    Args:
        run_pass: Coroutine function ``run_pass(type_def, query_fields,
            fields_to_resolve)`` performing the actual pass. It is not called
            when the merged resolvable tree is empty.
    """

    def __init__(self, run_pass: RunPass):
        self._run_pass = run_pass
        self._pending: Dict[str, PendingBatch] = {}
        self._workers: Dict[str, asyncio.Task] = {}
        self._in_flight: Set[str] = set()

    def schedule(self, type_def: Any, query_fields: Dict[str, Any], fields_to_resolve: Dict[str, Any]) -> asyncio.Future:
        name = type_def.name
        loop = asyncio.get_running_loop()
        running = _running_passes.get()
        if name in running or (running and name in self._in_flight):
            # Waiting from inside a pass on a pass already in flight can wait on
            # ourselves, directly or through the other type's resolvers.
            logger.warning(
                "nodeql: nested query on %s while its resolution pass is running; using current node data", name
            )
            done = loop.create_future()
            done.set_result(None)
            return done
        batch = self._pending.get(name)
        if batch is None:
            batch = self._pending[name] = PendingBatch(future=loop.create_future())
        batch.requests.append((query_fields, fields_to_resolve))
        if name not in self._workers:
            self._workers[name] = loop.create_task(self._work(type_def))
        return batch.future

    def is_running(self, type_name: str) -> bool:
        return type_name in self._workers

    def in_flight(self, type_name: str) -> bool:
        return type_name in self._in_flight

    def pending_requests(self, type_name: str) -> int:
        batch = self._pending.get(type_name)
        return len(batch.requests) if batch is not None else 0

    async def _work(self, type_def: Any) -> None:
        name = type_def.name
        try:
            while name in self._pending:
                await self._run_batch(type_def, self._pending.pop(name))
        finally:
            self._workers.pop(name, None)

    async def _run_batch(self, type_def: Any, batch: PendingBatch) -> None:
        query_fields, fields_to_resolve = batch.merged()
        token = _running_passes.set(_running_passes.get() | {type_def.name})
        self._in_flight.add(type_def.name)
        try:
            if fields_to_resolve:
                logger.debug(
                    "nodeql: resolving %s for %d request(s): %s",
                    type_def.name, len(batch.requests), fields_to_resolve,
                )
                await self._run_pass(type_def, query_fields, fields_to_resolve)
        except Exception as exc:
            logger.debug("nodeql: resolution pass for %s failed: %r", type_def.name, exc)
            if not batch.future.done():
                batch.future.set_exception(exc)
        else:
            if not batch.future.done():
                batch.future.set_result(None)
        finally:
            self._in_flight.discard(type_def.name)
            _running_passes.reset(token)
            if not batch.future.done():
                batch.future.cancel()
