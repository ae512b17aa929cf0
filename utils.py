"""
Utility functions for lazy streams

Logging setup, operation metrics, and the helpers that turn request models
into streams, predicates and queries for the HTTP demo.
"""

import logging
import operator
import sys
import time
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from lazy import LazyStream, constant, count_from, from_iterable, of
from models import (
    Arithmetic, Comparison, MapSpec, OperationSpec, OperationType, PredicateSpec,
    QueryType, SourceKind, SourceSpec, TraceConfig
)


# ---------- Logging Setup ----------

def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """Configure root logging once and return the project logger"""
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - [%(funcName)s:%(lineno)d] - %(message)s',
        handlers=[logging.StreamHandler(sys.stdout)]
    )
    return logging.getLogger('lazy_stream')


logger = setup_logging()


# ---------- Errors ----------

class StreamLimitExceeded(Exception):
    """Raised when a stream has more elements than a materialization allows."""

    def __init__(self, limit: int):
        super().__init__(f"Stream has more than {limit} elements")
        self.limit = limit


class UnknownOperationError(ValueError):
    """Raised for pipeline steps or queries that are not supported."""
    pass


# ---------- Performance Metrics ----------

_performance_metrics = {
    "operations": [],
    "total_time_ms": 0.0,
    "operation_count": 0,
    "failed_count": 0
}


def record_operation(operation_name: str, execution_time_ms: float, success: bool = True,
                     result_size: Optional[int] = None) -> Dict[str, Any]:
    """Add one operation to the metrics registry"""
    performance_info = {
        "operation": operation_name,
        "execution_time_ms": execution_time_ms,
        "success": success,
        "result_size": result_size,
        "timestamp": time.time()
    }
    _performance_metrics["operations"].append(performance_info)
    _performance_metrics["total_time_ms"] += execution_time_ms
    _performance_metrics["operation_count"] += 1
    if not success:
        _performance_metrics["failed_count"] += 1
    return performance_info


def measure_performance(operation_name: str, func: Callable, *args, **kwargs) -> Tuple[Any, Dict[str, Any]]:
    """Run func, record its timing, return (result, performance_info)"""
    start_time = time.perf_counter()
    try:
        result = func(*args, **kwargs)
    except Exception:
        execution_time_ms = (time.perf_counter() - start_time) * 1000
        record_operation(operation_name, execution_time_ms, success=False)
        logger.warning(f"{operation_name} failed after {execution_time_ms:.2f} ms")
        raise

    execution_time_ms = (time.perf_counter() - start_time) * 1000
    result_size = len(result) if hasattr(result, "__len__") else None
    info = record_operation(operation_name, execution_time_ms, success=True, result_size=result_size)
    logger.debug(f"{operation_name} completed in {execution_time_ms:.2f} ms")
    return result, info


def get_performance_summary() -> Dict[str, Any]:
    """Get summary of all performance metrics"""
    count = _performance_metrics["operation_count"]
    return {
        "total_operations": count,
        "total_time_ms": _performance_metrics["total_time_ms"],
        "avg_time_ms": _performance_metrics["total_time_ms"] / count if count else 0.0,
        "failed_operations": _performance_metrics["failed_count"],
        "operations": sorted({op["operation"] for op in _performance_metrics["operations"]})
    }


def clear_performance_metrics():
    """Clear all performance metrics"""
    global _performance_metrics
    _performance_metrics = {
        "operations": [],
        "total_time_ms": 0.0,
        "operation_count": 0,
        "failed_count": 0
    }


def get_system_health() -> Dict[str, Any]:
    return {
        "healthy": True,
        "trace_enabled_by_default": TraceConfig.from_env().enabled,
        "performance": get_performance_summary()
    }


# ---------- Predicates and Functions ----------

_COMPARISONS = {
    Comparison.EQ: operator.eq,
    Comparison.NE: operator.ne,
    Comparison.GT: operator.gt,
    Comparison.GE: operator.ge,
    Comparison.LT: operator.lt,
    Comparison.LE: operator.le,
}

_ARITHMETIC = {
    Arithmetic.ADD: operator.add,
    Arithmetic.SUB: operator.sub,
    Arithmetic.MUL: operator.mul,
    Arithmetic.FLOORDIV: operator.floordiv,
    Arithmetic.MOD: operator.mod,
}


def _integral(number):
    if isinstance(number, float) and number.is_integer():
        return int(number)
    return number


def build_predicate(spec: PredicateSpec) -> Callable[[Any], bool]:
    """Turn a PredicateSpec into a callable"""
    if spec.op == Comparison.EVEN:
        return lambda x: x % 2 == 0
    if spec.op == Comparison.ODD:
        return lambda x: x % 2 != 0
    compare = _COMPARISONS[spec.op]
    operand = spec.value
    return lambda x: compare(x, operand)


def build_function(spec: MapSpec) -> Callable[[Any], Any]:
    """Turn a MapSpec into a callable"""
    if spec.op == Arithmetic.NEG:
        return operator.neg
    if spec.op == Arithmetic.SQUARE:
        return lambda x: x * x
    apply = _ARITHMETIC[spec.op]
    operand = _integral(spec.operand)
    return lambda x: apply(x, operand)


# ---------- Sources and Pipelines ----------

class ForceCounter:
    """Counts how many elements of a stream are actually evaluated."""

    def __init__(self):
        self.count = 0

    def wrap(self, stream: LazyStream) -> LazyStream:
        return stream.map(self._tick)

    def _tick(self, value):
        self.count += 1
        return value


def build_source(spec: SourceSpec) -> LazyStream:
    """Create the stream described by a SourceSpec"""
    if spec.kind == SourceKind.ITEMS:
        return of(*spec.items)
    if spec.kind == SourceKind.CONSTANT:
        return constant(spec.value)
    if spec.kind == SourceKind.COUNT_FROM:
        return count_from(spec.start)
    if spec.kind == SourceKind.RANGE:
        return from_iterable(range(spec.start, spec.stop, spec.step))
    raise UnknownOperationError(f"Unknown source: {spec.kind}")


def apply_operation(stream: LazyStream, spec: OperationSpec,
                    trace: Optional[TraceConfig] = None) -> LazyStream:
    """Apply one lazy pipeline step"""
    op = spec.op
    if op == OperationType.TAKE:
        return stream.take(spec.n, trace)
    elif op == OperationType.DROP:
        return stream.drop(spec.n, trace)
    elif op == OperationType.TAKE_WHILE:
        return stream.take_while(build_predicate(spec.predicate), trace)
    elif op == OperationType.TAKE_WHILE_FOLD:
        return stream.take_while_via_fold(build_predicate(spec.predicate), trace)
    elif op == OperationType.MAP:
        return stream.map(build_function(spec.function))
    elif op == OperationType.FILTER:
        return stream.filter(build_predicate(spec.predicate))
    else:
        raise UnknownOperationError(f"Unknown op: {op}")


def build_pipeline(source: LazyStream, operations: List[OperationSpec],
                   trace: Optional[TraceConfig] = None) -> LazyStream:
    stream = source
    for spec in operations:
        stream = apply_operation(stream, spec, trace)
    return stream


def materialize(stream: LazyStream, limit: int, trace: Optional[TraceConfig] = None) -> List[Any]:
    """
    Collect a stream into a list, refusing streams longer than limit.

    Only limit + 1 elements are ever evaluated, so infinite streams fail
    fast instead of hanging.
    """
    items = stream.take(limit + 1).to_list(trace)
    if len(items) > limit:
        raise StreamLimitExceeded(limit)
    return items


def run_query(stream: LazyStream, query: QueryType, predicate: Optional[PredicateSpec] = None,
              prefix: Optional[List[Any]] = None,
              trace: Optional[TraceConfig] = None) -> Tuple[Any, Optional[bool]]:
    """Run a consuming query; returns (result, found) where found is set for find/head_option"""
    if query == QueryType.EXISTS:
        return stream.exists(build_predicate(predicate), trace), None
    if query == QueryType.FOR_ALL:
        return stream.for_all(build_predicate(predicate), trace), None
    if query == QueryType.FIND:
        missing = object()
        result = stream.find(build_predicate(predicate), missing, trace)
        if result is missing:
            return None, False
        return result, True
    if query == QueryType.HEAD_OPTION:
        if stream.is_empty():
            return None, False
        return stream.head_option(), True
    if query == QueryType.STARTS_WITH:
        return stream.starts_with(of(*prefix)), None
    raise UnknownOperationError(f"Unknown query: {query}")


# ---------- Trace Capture ----------

class _ListHandler(logging.Handler):
    def __init__(self, lines: List[str]):
        super().__init__()
        self.lines = lines

    def emit(self, record):
        self.lines.append(record.getMessage())


@contextmanager
def capture_trace(config: TraceConfig) -> Iterator[List[str]]:
    """
    Collect trace lines emitted on config.logger_name into a list.

    The logger is opened to config.level and detached from its parents for
    the duration, then restored.
    """
    lines: List[str] = []
    trace_logger = logging.getLogger(config.logger_name)
    handler = _ListHandler(lines)
    previous_level = trace_logger.level
    previous_propagate = trace_logger.propagate

    trace_logger.addHandler(handler)
    trace_logger.setLevel(config.levelno)
    trace_logger.propagate = False
    try:
        yield lines
    finally:
        trace_logger.removeHandler(handler)
        trace_logger.setLevel(previous_level)
        trace_logger.propagate = previous_propagate
