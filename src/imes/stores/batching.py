"""
Batching store decorator.

Coalesces point reads issued during one event-loop turn into a single
request to the wrapped store. Projections whose handlers look up many
items per event benefit most, since a store backed by a database can
answer ``get_many`` in one round trip.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic

from imes.observability import Tracer, create_tracer
from imes.observability.attributes import ATTR_BATCH_SIZE, ATTR_STORE_TYPE
from imes.stores.interface import Query, QueryResult, Store, TItem

logger = logging.getLogger(__name__)


class JobStatus(Enum):
    WAITING = "waiting"
    IN_FLIGHT = "in_flight"
    COMPLETE = "complete"


@dataclass
class _BatchJob(Generic[TItem]):
    key: Any
    future: "asyncio.Future[TItem | None]"
    status: JobStatus = field(default=JobStatus.WAITING)


class BatchingStore(Store[TItem]):
    """
    Store decorator that batches concurrent ``get`` calls.

    Every ``get`` registers a job keyed by canonical key and schedules a
    dispatch for the next loop iteration. The dispatch takes all waiting
    jobs: one job goes to the wrapped store's ``get``, several go to
    ``get_many`` in a single call. Repeated reads of a key that is already
    waiting or in flight share its result.

    If the wrapped read fails, every caller in that batch receives the
    same exception.

    Example:
        >>> store = BatchingStore(InMemoryStore())
        >>> a, b = await asyncio.gather(store.get("a"), store.get("b"))
        >>> # the wrapped store saw one get_many(["a", "b"])
    """

    def __init__(
        self,
        store: Store[TItem],
        *,
        tracer: Tracer | None = None,
        enable_tracing: bool = False,
    ) -> None:
        """
        Initialize the batching store.

        Args:
            store: The store to wrap
            tracer: Optional custom Tracer instance
            enable_tracing: If True, emit OpenTelemetry spans. Ignored if
                tracer is explicitly provided.
        """
        self._store = store
        self._jobs: dict[str, _BatchJob[TItem]] = {}
        self._scheduled = False
        self._dispatch_tasks: set[asyncio.Task[None]] = set()
        self._tracer = tracer or create_tracer(__name__, enable_tracing)

    @property
    def store(self) -> Store[TItem]:
        """The wrapped store."""
        return self._store

    def get_item_key(self, item: TItem) -> Any:
        return self._store.get_item_key(item)

    def key_to_string(self, key: Any) -> str:
        return self._store.key_to_string(key)

    async def get(self, key: Any) -> TItem | None:
        string_key = self.key_to_string(key)

        job = self._jobs.get(string_key)
        if job is None:
            loop = asyncio.get_running_loop()
            job = _BatchJob(key=key, future=loop.create_future())
            self._jobs[string_key] = job
            self._schedule(loop)

        return await asyncio.shield(job.future)

    def _schedule(self, loop: asyncio.AbstractEventLoop) -> None:
        if self._scheduled:
            return
        self._scheduled = True
        loop.call_soon(self._start_dispatch)

    def _start_dispatch(self) -> None:
        task = asyncio.ensure_future(self._dispatch())
        self._dispatch_tasks.add(task)
        task.add_done_callback(self._dispatch_tasks.discard)

    async def _dispatch(self) -> None:
        self._scheduled = False

        batch = [job for job in self._jobs.values() if job.status is JobStatus.WAITING]
        for job in batch:
            job.status = JobStatus.IN_FLIGHT

        if batch:
            with self._tracer.span(
                "imes.store.batch_get",
                {ATTR_STORE_TYPE: type(self._store).__name__, ATTR_BATCH_SIZE: len(batch)},
            ):
                await self._load(batch)

        for job in batch:
            job.status = JobStatus.COMPLETE
        self._jobs = {
            string_key: job
            for string_key, job in self._jobs.items()
            if job.status is not JobStatus.COMPLETE
        }

    async def _load(self, batch: list[_BatchJob[TItem]]) -> None:
        try:
            if len(batch) == 1:
                items = [await self._store.get(batch[0].key)]
            else:
                items = await self._store.get_many([job.key for job in batch])
            if len(items) != len(batch):
                raise RuntimeError(
                    f"{type(self._store).__name__}.get_many returned {len(items)} "
                    f"result(s) for {len(batch)} key(s)"
                )
        except Exception as e:
            logger.debug(
                "Batched read of %d key(s) failed: %s",
                len(batch),
                e,
                extra={"batch_size": len(batch), "error": str(e)},
            )
            for job in batch:
                if not job.future.done():
                    job.future.set_exception(e)
            return

        for job, item in zip(batch, items):
            if not job.future.done():
                job.future.set_result(item)

    async def create(self, item: TItem) -> None:
        await self._store.create(item)

    async def update(self, item: TItem) -> None:
        await self._store.update(item)

    async def find(self, query: Query | None = None) -> QueryResult[TItem]:
        return await self._store.find(query)

    async def clear(self) -> None:
        await self._store.clear()

    async def setup(self) -> None:
        await self._store.setup()

    async def teardown(self) -> None:
        await self._store.teardown()
