from __future__ import annotations

import concurrent.futures as _fut
import enum
import logging
import threading
from typing import Any, Callable, Optional

from . import pipeline
from .cancel import CancellationToken
from .result import Result


_log = logging.getLogger(__name__)


class Operation(enum.Enum):
    CREATE = "create"
    VERIFY = "verify"
    EXTRACT = "extract"


def _empty_payload(operation: Operation) -> Any:
    if operation is Operation.EXTRACT:
        return []
    return "" if operation is Operation.CREATE else False


Sink = Callable[[Operation, Result[Any]], None]


def run_operation(
    operation: Operation,
    text: str,
    *,
    token: Optional[CancellationToken] = None,
    logger: Optional[logging.Logger] = None,
) -> Result[Any]:
    if operation is Operation.CREATE:
        return pipeline.create(text, token=token, logger=logger)
    if operation is Operation.VERIFY:
        return pipeline.verify(text, token=token, logger=logger)
    if operation is Operation.EXTRACT:
        return pipeline.extract(text, token=token, logger=logger)
    raise ValueError(f"unknown operation: {operation!r}")


class OperationRunner:
    """Runs pipeline operations off the caller's thread, newest request wins.

    Every ``submit`` cancels whatever is still in flight. Jobs run one at a
    time behind a single-slot lock, and only results of jobs that were not
    superseded reach ``sink``. Cancelled results are dropped without a report.
    """

    def __init__(self, sink: Sink, *, logger: Optional[logging.Logger] = None):
        self.sink = sink
        self.logger = logger or _log
        self._executor = _fut.ThreadPoolExecutor(max_workers=1, thread_name_prefix="loaf")
        self._slot = threading.Lock()
        self._state_lock = threading.RLock()
        self._token: Optional[CancellationToken] = None
        self._future: Optional[_fut.Future] = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def submit(self, operation: Operation, text: str) -> _fut.Future:
        with self._state_lock:
            if self._token is not None:
                self._token.cancel()
            token = CancellationToken()
            self._token = token
            self._future = self._executor.submit(self._run, operation, text, token)
            return self._future

    def cancel(self) -> None:
        with self._state_lock:
            if self._token is not None:
                self._token.cancel()

    def wait(self, timeout: Optional[float] = None) -> None:
        """Block until the most recently submitted job has finished."""
        with self._state_lock:
            fut = self._future
        if fut is not None:
            fut.result(timeout=timeout)

    def close(self) -> None:
        self.cancel()
        self._executor.shutdown(wait=True)

    def _run(self, operation: Operation, text: str, token: CancellationToken) -> Optional[Result[Any]]:
        with self._slot:
            if token.cancelled:
                return None
            if not text or not text.strip():
                result: Result[Any] = Result(_empty_payload(operation), False)
            else:
                result = run_operation(operation, text, token=token, logger=self.logger)
            if result.cancelled:
                self.logger.debug("%s superseded; result dropped", operation.value)
                return None
            # submit cancels under the same lock, so a superseded result never publishes
            with self._state_lock:
                if token.cancelled:
                    self.logger.debug("%s superseded; result dropped", operation.value)
                    return None
                try:
                    self.sink(operation, result)
                except Exception as exc:
                    self.logger.error("Result sink failed for %s", operation.value, exc_info=exc)
            return result
