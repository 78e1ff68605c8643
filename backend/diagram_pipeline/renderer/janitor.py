"""
Error-node janitor.

The rendering engine may drop error artwork into the document at any time,
including after a render has already been reported as failed. The janitor
belongs to one DiagramView and keeps that view (and optionally the whole
document) free of such nodes for as long as it runs:

- one sweep immediately on start
- one sweep every ``interval`` seconds, up to ``max_sweeps``
- one sweep whenever nodes are added to the document
"""

import asyncio
import logging
from typing import Callable, Optional

from diagram_pipeline.config import PURGE_CLEAN_DOCUMENT, PURGE_INTERVAL_SECONDS, PURGE_MAX_SWEEPS
from diagram_pipeline.renderer.document import DiagramView, MutationRecord
from diagram_pipeline.renderer.sanitizer import is_document_error_node, is_error_node, local_name

logger = logging.getLogger(__name__)


class ErrorNodeJanitor:
    def __init__(
        self,
        view: DiagramView,
        interval: float = PURGE_INTERVAL_SECONDS,
        max_sweeps: Optional[int] = PURGE_MAX_SWEEPS,
        clean_document: bool = PURGE_CLEAN_DOCUMENT,
    ):
        self.view = view
        self.interval = interval
        self.max_sweeps = max_sweeps
        self.clean_document = clean_document

        self.sweeps = 0
        self.removed = 0
        self._task: Optional[asyncio.Task] = None
        self._unsubscribe: Optional[Callable[[], None]] = None

    @property
    def running(self) -> bool:
        return self._unsubscribe is not None

    def _in_container(self, element) -> bool:
        if is_error_node(element):
            return True
        # Anything but the diagram itself directly under the container is engine debris
        return element in self.view.children and local_name(element.tag) != "svg"

    def sweep(self) -> int:
        """Remove every matching node now. Returns how many were removed."""
        document = self.view.document
        container = self.view.container

        targets = document.find_all(self._in_container, within=container)
        if self.clean_document:
            targets.extend(
                e for e in document.find_all(is_document_error_node)
                if e is not container and not document.contains(e, within=container)
            )

        removed = sum(1 for element in targets if document.remove(element))
        self.sweeps += 1
        self.removed += removed
        if removed:
            logger.info("[JANITOR] Removed %d error node(s)", removed)
        return removed

    def _on_mutation(self, record: MutationRecord) -> None:
        if record.kind == "added":
            self.sweep()

    async def _poll(self) -> None:
        while self.max_sweeps is None or self.sweeps < self.max_sweeps:
            await asyncio.sleep(self.interval)
            self.sweep()
        logger.debug("[JANITOR] Stopped polling after %s sweeps", self.max_sweeps)

    def start(self) -> "ErrorNodeJanitor":
        """Sweep now, watch mutations and poll. Polling needs a running event loop."""
        if self.running:
            return self

        self.sweep()
        self._unsubscribe = self.view.document.subscribe(self._on_mutation)
        try:
            self._task = asyncio.get_running_loop().create_task(self._poll())
        except RuntimeError:
            logger.debug("[JANITOR] No running event loop, polling disabled")
            self._task = None
        return self

    def stop(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        if self._task is not None:
            self._task.cancel()

    async def wait_stopped(self) -> None:
        if self._task is None:
            return
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        finally:
            self._task = None

    async def __aenter__(self) -> "ErrorNodeJanitor":
        return self.start()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.stop()
        await self.wait_stopped()
