"""
Lazy, memoized, immutable streams.

A stream is either EMPTY or a CONS cell holding two thunks: one producing the
head element and one producing the rest of the stream. Each thunk runs at most
once and caches its result, so a stream behaves like a call-by-need list.

Streams are not safe for concurrent forcing: memo cells assume a single
writer.
"""

import logging
from enum import Enum
from typing import Any, Callable, Generic, Iterable, Iterator, List, Optional, Tuple, TypeVar, Union

from models import TraceConfig

T = TypeVar("T")
U = TypeVar("U")
B = TypeVar("B")
S = TypeVar("S")


class StreamKind(str, Enum):
    """Tag of a stream node"""
    EMPTY = "empty"
    CONS = "cons"


class Thunk(Generic[T]):
    """
    A deferred zero-argument computation that runs at most once.

    The first call to force() runs the function, caches the result and drops
    the function reference. Later calls return the cached result. If the
    function raises, the cell stays unevaluated and the next force retries.
    """

    __slots__ = ("_fn", "_value", "_evaluated")

    def __init__(self, fn: Optional[Callable[[], T]]):
        self._fn = fn
        self._value = None
        self._evaluated = False

    @classmethod
    def of(cls, value: T) -> "Thunk[T]":
        """Already-evaluated cell holding value"""
        thunk = cls(None)
        thunk._value = value
        thunk._evaluated = True
        return thunk

    @property
    def evaluated(self) -> bool:
        return self._evaluated

    def force(self) -> T:
        if not self._evaluated:
            value = self._fn()
            self._value = value
            self._evaluated = True
            self._fn = None
        return self._value

    __call__ = force

    def __repr__(self):
        if self._evaluated:
            return f"Thunk(evaluated={self._value!r})"
        return "Thunk(<pending>)"


def _as_thunk(value) -> Thunk:
    if isinstance(value, Thunk):
        return value
    return Thunk(value)


def _trace(trace: Optional[TraceConfig], message: str, *args):
    if trace is None or not trace.enabled:
        return
    trace_logger = logging.getLogger(trace.logger_name)
    if not trace_logger.isEnabledFor(trace.levelno):
        return
    # render() only looks at evaluated cells, so tracing never forces anything
    rendered = tuple(
        arg.render(trace.max_repr_items) if isinstance(arg, LazyStream) else arg
        for arg in args
    )
    trace_logger.log(trace.levelno, message, *rendered)


class LazyStream(Generic[T]):
    """
    Immutable singly linked lazy sequence.

    Build streams with empty(), cons(), of(), from_iterable(), constant(),
    count_from() or unfold() rather than calling the constructor.
    """

    __slots__ = ("kind", "_head", "_tail")

    def __init__(self, kind: StreamKind, head: Optional[Thunk] = None, tail: Optional[Thunk] = None):
        object.__setattr__(self, "kind", kind)
        object.__setattr__(self, "_head", head)
        object.__setattr__(self, "_tail", tail)

    def __setattr__(self, name, value):
        raise TypeError(f"'{type(self).__name__}' object does not support attribute assignment")

    def __delattr__(self, name):
        raise TypeError(f"'{type(self).__name__}' object does not support attribute deletion")

    def __copy__(self):
        return self

    def __deepcopy__(self, memodict=None):
        return self

    # --------- structure ----------
    def is_empty(self) -> bool:
        return self.kind is StreamKind.EMPTY

    def __bool__(self):
        return self.kind is StreamKind.CONS

    @property
    def head(self) -> Thunk[T]:
        """Memo cell of the first element"""
        if self.kind is StreamKind.EMPTY:
            raise IndexError("head of empty stream")
        return self._head

    @property
    def tail(self) -> "Thunk[LazyStream[T]]":
        """Memo cell of the remaining stream"""
        if self.kind is StreamKind.EMPTY:
            raise IndexError("tail of empty stream")
        return self._tail

    # --------- folds and queries ----------
    def fold_right(self, zero: B, combine: Callable[[T, Callable[[], B]], B],
                   trace: Optional[TraceConfig] = None) -> B:
        """
        Right fold where the folded tail is passed to combine as a zero-argument
        callable. If combine never calls it, the rest of the stream is never
        visited, which is what lets exists() and for_all() stop early.

        Every forced tail fold adds a level of recursion, so folding a long
        stream all the way through raises RecursionError.
        """
        if self.kind is StreamKind.EMPTY:
            _trace(trace, "fold_right reached %s, returning zero %r", self, zero)
            return zero
        _trace(trace, "fold_right at %s", self)
        tail = self._tail
        return combine(self._head(), lambda: tail().fold_right(zero, combine, trace))

    def exists(self, predicate: Callable[[T], Any], trace: Optional[TraceConfig] = None) -> bool:
        return self.fold_right(False, lambda value, rest: bool(predicate(value)) or rest(), trace)

    def for_all(self, predicate: Callable[[T], Any], trace: Optional[TraceConfig] = None) -> bool:
        return self.fold_right(True, lambda value, rest: bool(predicate(value)) and rest(), trace)

    def find(self, predicate: Callable[[T], Any], default: Optional[T] = None,
             trace: Optional[TraceConfig] = None) -> Optional[T]:
        """First element matching predicate, or default"""
        node = self
        while node.kind is StreamKind.CONS:
            _trace(trace, "find at %s", node)
            value = node._head()
            if predicate(value):
                return value
            node = node._tail()
        return default

    def head_option(self, default: Optional[T] = None) -> Optional[T]:
        return self.fold_right(default, lambda value, _rest: value)

    def starts_with(self, prefix: "LazyStream") -> bool:
        node, other = self, prefix
        while other.kind is StreamKind.CONS:
            if node.kind is StreamKind.EMPTY:
                return False
            if node._head() != other._head():
                return False
            node, other = node._tail(), other._tail()
        return True

    # --------- bounded traversal ----------
    def take(self, n: int, trace: Optional[TraceConfig] = None) -> "LazyStream[T]":
        """
        Lazy prefix of at most n elements. Negative n counts as zero.

        take(0) looks at nothing, and the last cell of the prefix ends in EMPTY
        directly so the element after the prefix is never forced.
        """
        if n <= 0 or self.kind is StreamKind.EMPTY:
            _trace(trace, "take n=%d on %s -> empty", n, self)
            return EMPTY
        if n == 1:
            _trace(trace, "take n=1 on %s -> single cell", self)
            return LazyStream(StreamKind.CONS, self._head, Thunk.of(EMPTY))
        _trace(trace, "take n=%d on %s", n, self)
        tail = self._tail
        return LazyStream(StreamKind.CONS, self._head, Thunk(lambda: tail().take(n - 1, trace)))

    def drop(self, n: int, trace: Optional[TraceConfig] = None) -> "LazyStream[T]":
        """Skip the first n elements. Negative n counts as zero."""
        node = self
        while n > 0 and node.kind is StreamKind.CONS:
            _trace(trace, "drop n=%d at %s", n, node)
            node = node._tail()
            n -= 1
        return node

    def take_while(self, predicate: Callable[[T], Any],
                   trace: Optional[TraceConfig] = None) -> "LazyStream[T]":
        if self.kind is StreamKind.EMPTY:
            return EMPTY
        _trace(trace, "take_while at %s", self)
        if not predicate(self._head()):
            return EMPTY
        tail = self._tail
        return LazyStream(StreamKind.CONS, self._head, Thunk(lambda: tail().take_while(predicate, trace)))

    def take_while_via_fold(self, predicate: Callable[[T], Any],
                            trace: Optional[TraceConfig] = None) -> "LazyStream[T]":
        """take_while() expressed as a right fold"""
        def step(value, rest):
            if predicate(value):
                return cons(lambda: value, rest)
            return EMPTY

        return self.fold_right(EMPTY, step, trace)

    # --------- transformations ----------
    def map(self, fn: Callable[[T], U]) -> "LazyStream[U]":
        return self.fold_right(EMPTY, lambda value, rest: cons(lambda: fn(value), rest))

    def filter(self, predicate: Callable[[T], Any]) -> "LazyStream[T]":
        # rejected elements are skipped in a loop
        node = self
        while node.kind is StreamKind.CONS:
            if predicate(node._head()):
                tail = node._tail
                return LazyStream(StreamKind.CONS, node._head, Thunk(lambda: tail().filter(predicate)))
            node = node._tail()
        return EMPTY

    def append(self, other: Union["LazyStream[T]", Callable[[], "LazyStream[T]"]]) -> "LazyStream[T]":
        """
        This stream followed by other. other may be a stream or a zero-argument
        callable returning one; the callable runs only once this stream is
        exhausted.
        """
        if not isinstance(other, LazyStream):
            other = _as_thunk(other)
        if self.kind is StreamKind.EMPTY:
            return other if isinstance(other, LazyStream) else other()
        tail = self._tail
        return LazyStream(StreamKind.CONS, self._head, Thunk(lambda: tail().append(other)))

    def flat_map(self, fn: Callable[[T], "LazyStream[U]"]) -> "LazyStream[U]":
        return self.fold_right(EMPTY, lambda value, rest: fn(value).append(rest))

    # --------- materialization ----------
    def to_list(self, trace: Optional[TraceConfig] = None) -> List[T]:
        """All elements in order. Loops, so any finite length is fine."""
        items = []
        node = self
        while node.kind is StreamKind.CONS:
            _trace(trace, "to_list at %s, %d collected", node, len(items))
            items.append(node._head())
            node = node._tail()
        _trace(trace, "to_list done, %d collected", len(items))
        return items

    def to_list_recursive(self, trace: Optional[TraceConfig] = None) -> List[T]:
        """Naive recursive materialization. Raises RecursionError on long streams."""
        if self.kind is StreamKind.EMPTY:
            _trace(trace, "to_list_recursive reached end")
            return []
        _trace(trace, "to_list_recursive at %s", self)
        return [self._head()] + self._tail().to_list_recursive(trace)

    def __iter__(self) -> Iterator[T]:
        node = self
        while node.kind is StreamKind.CONS:
            yield node._head()
            node = node._tail()

    # --------- display ----------
    def render(self, max_items: int = 10) -> str:
        """
        Text form showing only cells that are already evaluated. Unevaluated
        heads show as '?', an unevaluated tail as '...'.
        """
        parts = []
        node = self
        while node.kind is StreamKind.CONS:
            if len(parts) >= max_items:
                parts.append("...")
                break
            parts.append(repr(node._head._value) if node._head.evaluated else "?")
            if not node._tail.evaluated:
                parts.append("...")
                break
            node = node._tail._value
        return "LazyStream(" + ", ".join(parts) + ")"

    def __repr__(self):
        return self.render()


EMPTY: LazyStream = LazyStream(StreamKind.EMPTY)


def empty() -> LazyStream:
    return EMPTY


def cons(head: Callable[[], T], tail: Callable[[], LazyStream[T]]) -> LazyStream[T]:
    """
    Cell whose head and tail are produced on demand. Neither callable is run
    here, and each runs at most once however often the cell is read.
    """
    return LazyStream(StreamKind.CONS, _as_thunk(head), _as_thunk(tail))


def _from_index(items: Tuple, index: int) -> LazyStream:
    if index >= len(items):
        return EMPTY
    return LazyStream(StreamKind.CONS, Thunk.of(items[index]), Thunk(lambda: _from_index(items, index + 1)))


def of(*items: T) -> LazyStream[T]:
    """Finite stream of the given items"""
    return _from_index(items, 0)


def from_iterable(iterable: Iterable[T]) -> LazyStream[T]:
    """
    Stream pulling from an iterator one element per forced cell. The first
    element is pulled immediately; infinite iterators are fine.
    """
    iterator = iter(iterable)

    def next_cell():
        try:
            value = next(iterator)
        except StopIteration:
            return EMPTY
        return LazyStream(StreamKind.CONS, Thunk.of(value), Thunk(next_cell))

    return next_cell()


def constant(value: T) -> LazyStream[T]:
    """Infinite stream of value, a single cell whose tail is itself"""
    cell = None

    def itself():
        return cell

    cell = LazyStream(StreamKind.CONS, Thunk.of(value), Thunk(itself))
    return cell


def unfold(state: S, step: Callable[[S], Optional[Tuple[T, S]]]) -> LazyStream[T]:
    """
    Stream generated from a seed. step(state) returns None to stop, or an
    (element, next_state) pair.
    """
    result = step(state)
    if result is None:
        return EMPTY
    value, next_state = result
    return LazyStream(StreamKind.CONS, Thunk.of(value), Thunk(lambda: unfold(next_state, step)))


def count_from(n: int) -> LazyStream[int]:
    """n, n + 1, n + 2, ..."""
    return unfold(n, lambda i: (i, i + 1))


ONES: LazyStream[int] = constant(1)
