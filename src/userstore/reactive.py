"""
Single-shot result containers for database queries.

``Maybe[T]`` completes with zero or one value; ``Single[T]`` completes with
exactly one value or fails. Both are *cold* and *lazy*: building one runs
nothing, and every subscription, ``blocking_get()`` or ``await`` re-runs
the wrapped callable and reads a fresh snapshot.

Where the callable runs is decided by a :class:`QueryExecutor`:

* synchronous consumption (``subscribe``, ``blocking_get``, ``test``) runs
  inline on the calling thread, after checking that the caller is not an
  event-loop thread (unless the executor allows it);
* ``await`` runs the callable on a worker thread via ``asyncio.to_thread``,
  or inline when the executor allows event-loop access.

Examples:
    >>> Maybe.just(5).map(lambda x: x + 1).blocking_get()
    6
    >>> Maybe.empty().test().assert_no_values().assert_complete()
    TestObserver(values=[], errors=[], completions=1)
    >>> Single.from_callable(lambda: True).test().assert_value(True)
    TestObserver(values=[True], errors=[], completions=1)

Tags:
    reactive, maybe, single, asyncio, test-observer, userstore
"""

from __future__ import annotations

import asyncio
import threading
from typing import Any, Callable, Generator, Generic, TypeVar

from userstore.core.errors import EmptyResultError, MainThreadQueryError
from userstore.core.result import Err, Result, try_result


T = TypeVar("T")
U = TypeVar("U")


def _on_event_loop_thread() -> bool:
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return False
    return True


class QueryExecutor:
    """Runs query callables with the database's threading policy.

    Parameters:
        allow_main_thread: Allow blocking calls from a thread that is
            running an asyncio event loop, and run awaited work inline.
        lock: Lock serializing access to the underlying resource. A fresh
            ``RLock`` is created when omitted.
    """

    def __init__(
        self,
        *,
        allow_main_thread: bool = True,
        lock: threading.RLock | None = None,
    ) -> None:
        self.allow_main_thread = allow_main_thread
        self._lock = lock or threading.RLock()

    def assert_not_on_event_loop(self) -> None:
        """Raise ``MainThreadQueryError`` for a disallowed blocking call."""
        if not self.allow_main_thread and _on_event_loop_thread():
            raise MainThreadQueryError()

    def run(self, fn: Callable[[], T]) -> T:
        """Run *fn* on the calling thread."""
        self.assert_not_on_event_loop()
        return self._call(fn)

    async def run_async(self, fn: Callable[[], T]) -> T:
        """Run *fn* without blocking the running event loop."""
        if self.allow_main_thread:
            return self._call(fn)
        return await asyncio.to_thread(self._call, fn)

    def _call(self, fn: Callable[[], T]) -> T:
        with self._lock:
            return fn()


_IMMEDIATE = QueryExecutor(allow_main_thread=True)


class _SingleShot(Generic[T]):
    """Shared machinery for ``Maybe`` and ``Single``."""

    def __init__(
        self,
        source: Callable[[], Any],
        executor: QueryExecutor | None = None,
    ) -> None:
        self._source = source
        self._executor = executor or _IMMEDIATE

    def _resolve(self, value: Any) -> Any:
        return value

    def _evaluate(self) -> Any:
        return self._resolve(self._executor.run(self._source))

    async def _evaluate_async(self) -> Any:
        return self._resolve(await self._executor.run_async(self._source))

    def __await__(self) -> Generator[Any, None, Any]:
        return self._evaluate_async().__await__()

    def to_result(self) -> Result[Any]:
        """Evaluate once and capture the outcome as ``Ok`` / ``Err``."""
        return try_result(self._evaluate)

    def blocking_get(self) -> Any:
        """Evaluate once on the calling thread; raise on failure."""
        return self._evaluate()

    def test(self) -> TestObserver[T]:
        """Subscribe a fresh :class:`TestObserver` and return it."""
        observer: TestObserver[T] = TestObserver()
        self._dispatch(self.to_result(), observer.on_success, observer.on_error, observer.on_complete)
        return observer

    def _dispatch(
        self,
        result: Result[Any],
        on_success: Callable[[T], None],
        on_error: Callable[[Exception], None] | None,
        on_complete: Callable[[], None] | None,
    ) -> None:
        if isinstance(result, Err):
            if on_error is None:
                raise result.error
            on_error(result.error)
        elif result.value is None:
            if on_complete is not None:
                on_complete()
        else:
            on_success(result.value)


class Maybe(_SingleShot[T]):
    """A lazy computation that completes with at most one value.

    The wrapped callable returns ``None`` for "no value".
    """

    @classmethod
    def from_callable(
        cls, fn: Callable[[], T | None], executor: QueryExecutor | None = None
    ) -> Maybe[T]:
        return cls(fn, executor)

    @classmethod
    def just(cls, value: T) -> Maybe[T]:
        return cls(lambda: value)

    @classmethod
    def empty(cls) -> Maybe[T]:
        return cls(lambda: None)

    def blocking_get(self) -> T | None:
        """Return the value, or ``None`` when the Maybe completes empty."""
        return self._evaluate()

    def subscribe(
        self,
        on_success: Callable[[T], None],
        on_error: Callable[[Exception], None] | None = None,
        on_complete: Callable[[], None] | None = None,
    ) -> None:
        """Evaluate once and dispatch to exactly one of the callbacks.

        ``on_complete`` is called when there is no value. Without
        ``on_error`` a failure is raised to the caller.
        """
        self._dispatch(self.to_result(), on_success, on_error, on_complete)

    def map(self, fn: Callable[[T], U]) -> Maybe[U]:
        source = self._source

        def mapped() -> U | None:
            value = source()
            return None if value is None else fn(value)

        return Maybe(mapped, self._executor)

    def __repr__(self) -> str:
        return f"Maybe({self._source!r})"


class Single(_SingleShot[T]):
    """A lazy computation that completes with exactly one value or fails.

    A wrapped callable returning ``None`` fails with ``EmptyResultError``.
    """

    @classmethod
    def from_callable(
        cls, fn: Callable[[], T], executor: QueryExecutor | None = None
    ) -> Single[T]:
        return cls(fn, executor)

    @classmethod
    def just(cls, value: T) -> Single[T]:
        return cls(lambda: value)

    def _resolve(self, value: Any) -> Any:
        if value is None:
            raise EmptyResultError("Query returned empty result set")
        return value

    def blocking_get(self) -> T:
        return self._evaluate()

    def subscribe(
        self,
        on_success: Callable[[T], None],
        on_error: Callable[[Exception], None] | None = None,
    ) -> None:
        """Evaluate once and dispatch to ``on_success`` or ``on_error``."""
        self._dispatch(self.to_result(), on_success, on_error, None)

    def map(self, fn: Callable[[T], U]) -> Single[U]:
        source = self._source
        resolve = self._resolve
        return Single(lambda: fn(resolve(source())), self._executor)

    def __repr__(self) -> str:
        return f"Single({self._source!r})"


class TestObserver(Generic[T]):
    """Records what a container emitted and offers fluent assertions.

    Every assertion returns ``self`` so checks can be chained::

        dao.get_user_by_id("id").test().assert_no_errors().assert_value(user)
    """

    __test__ = False  # not a pytest test class

    def __init__(self) -> None:
        self.values: list[T] = []
        self.errors: list[Exception] = []
        self.completions = 0

    # -- observer callbacks -----------------------------------------------

    def on_success(self, value: T) -> None:
        self.values.append(value)
        self.completions += 1

    def on_error(self, error: Exception) -> None:
        self.errors.append(error)

    def on_complete(self) -> None:
        self.completions += 1

    # -- assertions --------------------------------------------------------

    def _fail(self, message: str) -> None:
        raise AssertionError(f"{message} (values={self.values!r}, errors={self.errors!r}, completions={self.completions})")

    def assert_value(self, expected: T | Callable[[T], bool]) -> TestObserver[T]:
        """Assert exactly one value was emitted and it equals (or satisfies) *expected*."""
        if len(self.values) != 1:
            self._fail(f"Expected exactly one value, got {len(self.values)}")
        value = self.values[0]
        if callable(expected):
            if not expected(value):
                self._fail(f"Value {value!r} does not match predicate")
        elif value != expected:
            self._fail(f"Expected {expected!r}, got {value!r}")
        return self

    def assert_no_values(self) -> TestObserver[T]:
        if self.values:
            self._fail("Expected no values")
        return self

    def assert_value_count(self, count: int) -> TestObserver[T]:
        if len(self.values) != count:
            self._fail(f"Expected {count} values, got {len(self.values)}")
        return self

    def assert_complete(self) -> TestObserver[T]:
        if self.completions != 1:
            self._fail(f"Expected one completion, got {self.completions}")
        return self

    def assert_not_complete(self) -> TestObserver[T]:
        if self.completions:
            self._fail("Expected no completion")
        return self

    def assert_no_errors(self) -> TestObserver[T]:
        if self.errors:
            self._fail("Expected no errors")
        return self

    def assert_error(
        self, expected: type[BaseException] | Callable[[Exception], bool]
    ) -> TestObserver[T]:
        """Assert exactly one error was emitted, of type (or satisfying) *expected*."""
        if len(self.errors) != 1:
            self._fail(f"Expected exactly one error, got {len(self.errors)}")
        error = self.errors[0]
        if isinstance(expected, type):
            if not isinstance(error, expected):
                self._fail(f"Expected {expected.__name__}, got {type(error).__name__}")
        elif not expected(error):
            self._fail(f"Error {error!r} does not match predicate")
        return self

    def __repr__(self) -> str:
        return f"TestObserver(values={self.values!r}, errors={self.errors!r}, completions={self.completions})"


__all__ = [
    "QueryExecutor",
    "Maybe",
    "Single",
    "TestObserver",
]
