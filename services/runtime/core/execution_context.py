"""
Execution context.

A cooperative cancellation scope with a chain of request-scoped values, passed
to handler code for every invoke. Cancellation is a signal only: handler code
has to observe ``cancelled`` or ``wait()`` to stop early.
"""

import threading
from datetime import datetime, timezone
from typing import Any, Optional, Set

CANCELLED = "context canceled"
DEADLINE_EXCEEDED = "context deadline exceeded"

# Value keys
LAMBDA_CONTEXT_KEY = "lambda-context"
TRACE_ID_KEY = "x-amzn-trace-id"
POST_INVOKE_SIGNAL_KEY = "post-invoke-signal"


class _CancelScope:
    """Cancellation state shared by a context and the value contexts derived from it."""

    def __init__(self, parent: Optional["_CancelScope"] = None, deadline: Optional[datetime] = None):
        self.parent = parent
        self.event = threading.Event()
        self.reason: Optional[str] = None
        self.children: Set["_CancelScope"] = set()
        self.lock = threading.Lock()
        self.timer: Optional[threading.Timer] = None

        if parent is not None and parent.deadline is not None:
            if deadline is None or parent.deadline < deadline:
                deadline = parent.deadline
        self.deadline = deadline

        if parent is not None:
            parent.attach(self)

        if deadline is not None:
            delay = (deadline - datetime.now(timezone.utc)).total_seconds()
            if delay <= 0:
                self.cancel(DEADLINE_EXCEEDED)
            else:
                with self.lock:
                    if self.reason is None:
                        self.timer = threading.Timer(delay, self.cancel, args=(DEADLINE_EXCEEDED,))
                        self.timer.daemon = True
                        self.timer.start()

    def attach(self, child: "_CancelScope") -> None:
        with self.lock:
            if self.reason is None:
                self.children.add(child)
                return
            reason = self.reason
        child.cancel(reason)

    def detach(self, child: "_CancelScope") -> None:
        with self.lock:
            self.children.discard(child)

    def cancel(self, reason: str = CANCELLED) -> None:
        with self.lock:
            if self.reason is not None:
                return
            self.reason = reason
            children, self.children = self.children, set()
            timer, self.timer = self.timer, None
        self.event.set()
        if timer is not None:
            timer.cancel()
        for child in children:
            child.cancel(reason)
        if self.parent is not None:
            self.parent.detach(self)

    def check_deadline(self) -> None:
        # Timer threads may fire late; observers never see a live context past its deadline.
        if self.deadline is not None and self.reason is None:
            if datetime.now(timezone.utc) >= self.deadline:
                self.cancel(DEADLINE_EXCEEDED)


class ExecutionContext:
    """
    Per-invoke execution context.

    ``with_deadline`` derives a context that is cancelled at the deadline (or
    when its parent is cancelled, whichever happens first). ``with_value``
    derives a context carrying one more value and sharing the cancellation of
    its parent.
    """

    def __init__(
        self,
        parent: Optional["ExecutionContext"] = None,
        key: Any = None,
        value: Any = None,
        scope: Optional[_CancelScope] = None,
    ):
        self._parent = parent
        self._key = key
        self._value = value
        if scope is None:
            scope = parent._scope if parent is not None else _CancelScope()
        self._scope = scope

    def value(self, key: Any, default: Any = None) -> Any:
        ctx: Optional[ExecutionContext] = self
        while ctx is not None:
            if ctx._key is not None and ctx._key == key:
                return ctx._value
            ctx = ctx._parent
        return default

    def with_value(self, key: Any, value: Any) -> "ExecutionContext":
        return ExecutionContext(parent=self, key=key, value=value)

    def with_deadline(self, deadline: datetime) -> "ExecutionContext":
        return ExecutionContext(parent=self, scope=_CancelScope(self._scope, deadline))

    @property
    def deadline(self) -> Optional[datetime]:
        return self._scope.deadline

    @property
    def cancelled(self) -> bool:
        self._scope.check_deadline()
        return self._scope.event.is_set()

    @property
    def reason(self) -> Optional[str]:
        """Why the context was cancelled, or None while it is live."""
        self._scope.check_deadline()
        return self._scope.reason

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the context is cancelled; returns False on timeout."""
        return self._scope.event.wait(timeout)

    def cancel(self) -> None:
        self._scope.cancel(CANCELLED)


class PostInvokeSignal:
    """
    Single-shot slot handler code can arm to hold the loop after an invoke.

    Register one in the base context under ``POST_INVOKE_SIGNAL_KEY``; handler
    code calls ``arm()`` and sets the returned event once its background work
    is done. The loop waits for the event (bounded) after reporting the invoke
    and clears the slot.
    """

    def __init__(self):
        self._event: Optional[threading.Event] = None
        self._lock = threading.Lock()

    def arm(self) -> threading.Event:
        with self._lock:
            self._event = threading.Event()
            return self._event

    @property
    def armed(self) -> bool:
        return self._event is not None

    def wait(self, timeout: float) -> bool:
        """Wait for the armed event, then clear the slot. Returns whether it fired."""
        with self._lock:
            event = self._event
        try:
            if event is None:
                return False
            return event.wait(timeout)
        finally:
            with self._lock:
                self._event = None
