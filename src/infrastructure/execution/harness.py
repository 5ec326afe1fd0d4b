"""Runs coordinator calls off the caller's thread.

Every session gets a FIFO lane. At most one task per lane is in flight, so
applies, undos, redos and queries on a session never interleave, while
different sessions share a small worker pool. Outcomes are delivered by
resolving a Future on a single "home" context, so whoever consumes them needs
no locking of their own.
"""
from __future__ import annotations

import threading
from collections import deque
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, TypeVar

from loguru import logger

from src.domain.entities.operations import Operation
from src.domain.errors import IllegalStateError
from src.domain.services.history_coordinator import HistoryCoordinator

T = TypeVar("T")

DEFAULT_MAX_WORKERS = 2

Dispatch = Callable[[Callable[[], None]], Any]


@dataclass
class _Task:
    fn: Callable[..., Any]
    args: tuple[Any, ...]
    future: Future


@dataclass
class _Lane:
    pending: deque[_Task] = field(default_factory=deque)
    running: bool = False
    # the session ended while work was still queued
    forgotten: bool = False


class ExecutionHarness:
    def __init__(
        self,
        max_workers: int = DEFAULT_MAX_WORKERS,
        dispatch: Dispatch | None = None,
    ) -> None:
        if max_workers < 1:
            raise ValueError("max_workers must be >= 1")
        self._pool = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="imgedit-worker")
        self._home: ThreadPoolExecutor | None = None
        if dispatch is None:
            self._home = ThreadPoolExecutor(max_workers=1, thread_name_prefix="imgedit-home")
            dispatch = self._home.submit
        self._dispatch = dispatch
        self._lanes: dict[str, _Lane] = {}
        self._lock = threading.Lock()
        self._closed = False

    # --------- submission ---------
    def submit(self, session_id: str, fn: Callable[..., T], *args: Any) -> Future:
        """Queue `fn(*args)` on the session's lane and return its Future."""
        task = _Task(fn, args, Future())
        with self._lock:
            if self._closed:
                raise IllegalStateError("Execution harness is shut down")
            lane = self._lanes.setdefault(session_id, _Lane())
            lane.forgotten = False
            lane.pending.append(task)
            if lane.running:
                return task.future
            lane.running = True
        self._schedule(session_id, lane)
        return task.future

    def submit_apply(self, session_id: str, coordinator: HistoryCoordinator, operation: Operation) -> Future:
        return self.submit(session_id, coordinator.apply, operation)

    def submit_undo(self, session_id: str, coordinator: HistoryCoordinator) -> Future:
        return self.submit(session_id, coordinator.undo)

    def submit_redo(self, session_id: str, coordinator: HistoryCoordinator) -> Future:
        return self.submit(session_id, coordinator.redo)

    def submit_query(self, session_id: str, fn: Callable[[], T]) -> Future:
        return self.submit(session_id, fn)

    def forget(self, session_id: str) -> None:
        """Drop a session's lane once its session has ended.

        A busy lane finishes what is already queued and is dropped when it drains.
        """
        with self._lock:
            lane = self._lanes.get(session_id)
            if lane is None:
                return
            if lane.running or lane.pending:
                lane.forgotten = True
            else:
                del self._lanes[session_id]

    def shutdown(self, wait: bool = True) -> None:
        with self._lock:
            self._closed = True
        self._pool.shutdown(wait=wait)
        if self._home is not None:
            self._home.shutdown(wait=wait)

    # --------- internals ---------
    def _schedule(self, session_id: str, lane: _Lane) -> None:
        try:
            self._pool.submit(self._run_next, session_id, lane)
        except RuntimeError as exc:
            # pool already shut down; fail everything still queued on this lane
            with self._lock:
                stranded = list(lane.pending)
                lane.pending.clear()
                lane.running = False
            logger.error(f"Could not schedule work for session {session_id}: {exc}")
            for task in stranded:
                if task.future.set_running_or_notify_cancel():
                    self._deliver(task.future, None, IllegalStateError("Execution harness is shut down"))

    def _run_next(self, session_id: str, lane: _Lane) -> None:
        with self._lock:
            task = lane.pending.popleft()
        # a caller may cancel a task that has not started yet
        if task.future.set_running_or_notify_cancel():
            try:
                result = task.fn(*task.args)
            except Exception as exc:
                self._deliver(task.future, None, exc)
            else:
                self._deliver(task.future, result, None)
        with self._lock:
            if not lane.pending:
                lane.running = False
                if lane.forgotten and self._lanes.get(session_id) is lane:
                    del self._lanes[session_id]
                return
        self._schedule(session_id, lane)

    def _deliver(self, future: Future, result: Any, error: BaseException | None) -> None:
        def complete() -> None:
            if error is not None:
                future.set_exception(error)
            else:
                future.set_result(result)

        try:
            self._dispatch(complete)
        except RuntimeError:
            # home context already gone; resolve in place rather than lose the outcome
            complete()
