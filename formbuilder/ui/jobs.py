"""Run export and flatten off the interaction thread."""

from __future__ import annotations

from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
import logging

from PySide6.QtCore import QObject, Signal

from formbuilder.model.field import FormField
from formbuilder.pdf.flattener import flatten_pdf
from formbuilder.pdf.writer import emit_form_pdf

logger = logging.getLogger(__name__)


class JobRunner(QObject):
    """Single-worker executor whose results are delivered as Qt signals.

    Signals carry the job tag so the window knows which download a result
    belongs to. Emitting from the worker thread queues delivery onto the
    thread that owns this object.
    """

    succeeded = Signal(str, object, str)
    failed = Signal(str, object)

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="formbuilder-job")

    def export_form(self, fields: list[FormField], filename: str) -> Future:
        # Caller passes a snapshot; later edits must not leak into this export.
        return self._submit("export", lambda: emit_form_pdf(fields), filename)

    def flatten(self, data: bytes, filename: str) -> Future:
        return self._submit("flatten", lambda: flatten_pdf(data), filename)

    def shutdown(self) -> None:
        self._executor.shutdown(wait=True)

    def _submit(self, tag: str, work: Callable[[], bytes], filename: str) -> Future:
        logger.info("Starting %s job for %s", tag, filename)
        future = self._executor.submit(work)
        future.add_done_callback(lambda done: self._deliver(tag, filename, done))
        return future

    def _deliver(self, tag: str, filename: str, future: Future) -> None:
        error = future.exception()
        if error is not None:
            logger.error("%s job for %s failed: %s", tag, filename, error)
            self.failed.emit(tag, error)
            return
        self.succeeded.emit(tag, future.result(), filename)
