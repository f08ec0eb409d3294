import asyncio
import logging
from typing import Awaitable, Dict

logger = logging.getLogger(__name__)

class IndexingTasks:
    """
    Fire-and-forget registry for background indexing runs.

    The event loop only keeps weak references to tasks, so the registry holds
    each one until it finishes. Progress is observed through the document's
    ``status`` field, not through the task.
    """

    def __init__(self):
        self._tasks: Dict[str, asyncio.Task] = {}

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def spawn(self, doc_id: str, coro: Awaitable) -> asyncio.Task:
        task = asyncio.create_task(coro, name=f"index-{doc_id}")
        self._tasks[doc_id] = task
        task.add_done_callback(lambda t: self._finished(doc_id, t))
        return task

    def _finished(self, doc_id: str, task: asyncio.Task):
        self._tasks.pop(doc_id, None)
        if task.cancelled():
            logger.warning(f"Indexing task for {doc_id} was cancelled")
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"Indexing task for {doc_id} crashed", exc_info=exc)

    async def drain(self):
        """Wait for every in-flight run to finish."""
        while True:
            running = [t for t in self._tasks.values() if not t.done()]
            if not running:
                break
            await asyncio.gather(*running, return_exceptions=True)
        # let done callbacks clear the registry
        await asyncio.sleep(0)
