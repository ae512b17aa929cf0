"""
Pydantic Models

Trace configuration for stream traversals and the request/response schemas of
the HTTP demo.
"""

import logging
import os
from typing import Any, List, Optional
from pydantic import BaseModel, Field, field_validator, model_validator
from datetime import datetime
from enum import Enum


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
TRUTHY = ("1", "true", "yes", "on")


class TraceConfig(BaseModel):
    """Per-call switch for logging the recursive steps of a traversal"""
    enabled: bool = Field(
        False,
        description="Whether traversal steps are logged"
    )
    logger_name: str = Field(
        "lazy_stream.trace",
        description="Logger receiving trace lines"
    )
    level: str = Field(
        "DEBUG",
        description="Log level of trace lines",
        examples=["DEBUG", "INFO"]
    )
    max_repr_items: int = Field(
        10,
        description="Maximum number of elements shown when a stream is rendered",
        ge=1,
        le=1000
    )

    @field_validator('level')
    @classmethod
    def validate_level(cls, v):
        """Normalize and check the log level name"""
        level = v.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Invalid log level: {v}. Valid levels: {list(LOG_LEVELS)}")
        return level

    @field_validator('logger_name')
    @classmethod
    def validate_logger_name(cls, v):
        if not v or not v.strip():
            raise ValueError("Logger name cannot be empty")
        return v.strip()

    @property
    def levelno(self) -> int:
        return logging.getLevelName(self.level)

    @classmethod
    def from_env(cls) -> "TraceConfig":
        """Build from LAZY_STREAM_TRACE and LAZY_STREAM_TRACE_LEVEL"""
        enabled = os.environ.get("LAZY_STREAM_TRACE", "").strip().lower() in TRUTHY
        level = os.environ.get("LAZY_STREAM_TRACE_LEVEL", "DEBUG")
        return cls(enabled=enabled, level=level)


class SourceKind(str, Enum):
    """Supported stream sources"""
    ITEMS = "items"
    CONSTANT = "constant"
    COUNT_FROM = "count_from"
    RANGE = "range"


class OperationType(str, Enum):
    """Lazy pipeline steps"""
    TAKE = "take"
    DROP = "drop"
    TAKE_WHILE = "take_while"
    TAKE_WHILE_FOLD = "take_while_fold"
    MAP = "map"
    FILTER = "filter"


class QueryType(str, Enum):
    """Queries that consume a stream"""
    EXISTS = "exists"
    FOR_ALL = "for_all"
    FIND = "find"
    HEAD_OPTION = "head_option"
    STARTS_WITH = "starts_with"


class Comparison(str, Enum):
    """Predicate operators"""
    EQ = "eq"
    NE = "ne"
    GT = "gt"
    GE = "ge"
    LT = "lt"
    LE = "le"
    EVEN = "even"
    ODD = "odd"


class Arithmetic(str, Enum):
    """Element transformations"""
    ADD = "add"
    SUB = "sub"
    MUL = "mul"
    FLOORDIV = "floordiv"
    MOD = "mod"
    NEG = "neg"
    SQUARE = "square"


UNARY_COMPARISONS = (Comparison.EVEN, Comparison.ODD)
UNARY_ARITHMETIC = (Arithmetic.NEG, Arithmetic.SQUARE)


class PredicateSpec(BaseModel):
    """Predicate described as operator + operand"""
    op: Comparison = Field(
        ...,
        description="Comparison operator",
        examples=["gt"]
    )
    value: Optional[Any] = Field(
        None,
        description="Right-hand operand (not used by even/odd)"
    )

    @model_validator(mode='after')
    def validate_operand(self):
        """Binary comparisons need an operand"""
        if self.op not in UNARY_COMPARISONS and self.value is None:
            raise ValueError(f"Comparison '{self.op.value}' requires a value")
        return self


class MapSpec(BaseModel):
    """Element transformation described as operator + operand"""
    op: Arithmetic = Field(
        ...,
        description="Arithmetic operator",
        examples=["mul"]
    )
    operand: Optional[float] = Field(
        None,
        description="Right-hand operand (not used by neg/square)"
    )

    @model_validator(mode='after')
    def validate_operand(self):
        if self.op not in UNARY_ARITHMETIC and self.operand is None:
            raise ValueError(f"Operation '{self.op.value}' requires an operand")
        if self.op in (Arithmetic.FLOORDIV, Arithmetic.MOD) and self.operand == 0:
            raise ValueError("Division by zero")
        return self


class SourceSpec(BaseModel):
    """Where the stream comes from"""
    kind: SourceKind = Field(
        SourceKind.ITEMS,
        description="Type of source"
    )
    items: List[Any] = Field(
        default_factory=list,
        description="Elements of an 'items' source"
    )
    value: Optional[Any] = Field(
        None,
        description="Repeated element of a 'constant' source"
    )
    start: int = Field(
        0,
        description="First number of a 'count_from' or 'range' source"
    )
    stop: Optional[int] = Field(
        None,
        description="Exclusive end of a 'range' source"
    )
    step: int = Field(
        1,
        description="Step of a 'range' source"
    )

    @model_validator(mode='after')
    def validate_source(self):
        """Check each kind has what it needs"""
        if self.kind == SourceKind.RANGE:
            if self.stop is None:
                raise ValueError("A 'range' source requires stop")
            if self.step == 0:
                raise ValueError("Range step cannot be zero")
        if self.kind == SourceKind.CONSTANT and self.value is None:
            raise ValueError("A 'constant' source requires value")
        return self

    def is_infinite(self) -> bool:
        return self.kind in (SourceKind.CONSTANT, SourceKind.COUNT_FROM)


class OperationSpec(BaseModel):
    """One lazy pipeline step"""
    op: OperationType = Field(
        ...,
        description="Operation to apply",
        examples=["take"]
    )
    n: Optional[int] = Field(
        None,
        description="Count for take/drop",
        ge=0
    )
    predicate: Optional[PredicateSpec] = Field(
        None,
        description="Predicate for take_while/take_while_fold/filter"
    )
    function: Optional[MapSpec] = Field(
        None,
        description="Transformation for map"
    )

    @model_validator(mode='after')
    def validate_arguments(self):
        """Check the step carries the argument its operation needs"""
        if self.op in (OperationType.TAKE, OperationType.DROP) and self.n is None:
            raise ValueError(f"Operation '{self.op.value}' requires n")
        if self.op in (OperationType.TAKE_WHILE, OperationType.TAKE_WHILE_FOLD, OperationType.FILTER) \
                and self.predicate is None:
            raise ValueError(f"Operation '{self.op.value}' requires a predicate")
        if self.op == OperationType.MAP and self.function is None:
            raise ValueError("Operation 'map' requires a function")
        return self


class PipelineRequest(BaseModel):
    """Build a stream, apply lazy steps, materialize the result"""
    source: SourceSpec = Field(
        ...,
        description="Stream source"
    )
    operations: List[OperationSpec] = Field(
        default_factory=list,
        description="Lazy steps applied in order"
    )
    limit: int = Field(
        1000,
        description="Maximum number of elements materialized",
        ge=1,
        le=100000
    )
    trace: bool = Field(
        False,
        description="Capture traversal trace lines"
    )


class PipelineResponse(BaseModel):
    """Materialized pipeline result"""
    ok: bool = True
    items: List[Any]
    count: int
    forced: int = Field(..., description="Number of source elements actually evaluated")
    trace_lines: List[str] = Field(default_factory=list)
    timestamp: datetime = Field(default_factory=datetime.now)


class QueryRequest(BaseModel):
    """Run a consuming query over a (bounded) pipeline"""
    source: SourceSpec
    operations: List[OperationSpec] = Field(default_factory=list)
    query: QueryType = Field(
        ...,
        description="Query to run",
        examples=["exists"]
    )
    predicate: Optional[PredicateSpec] = None
    prefix: Optional[List[Any]] = Field(
        None,
        description="Expected prefix for starts_with"
    )
    limit: int = Field(
        200,
        description="Queries only look at the first 'limit' elements",
        ge=1,
        le=100000
    )
    trace: bool = False

    @model_validator(mode='after')
    def validate_query(self):
        """Check the query has its argument"""
        if self.query in (QueryType.EXISTS, QueryType.FOR_ALL, QueryType.FIND) and self.predicate is None:
            raise ValueError(f"Query '{self.query.value}' requires a predicate")
        if self.query == QueryType.STARTS_WITH and self.prefix is None:
            raise ValueError("Query 'starts_with' requires a prefix")
        return self


class QueryResponse(BaseModel):
    """Query result"""
    ok: bool = True
    query: QueryType
    result: Optional[Any] = None
    found: Optional[bool] = Field(
        None,
        description="For find/head_option: whether an element was present"
    )
    forced: int
    trace_lines: List[str] = Field(default_factory=list)
    timestamp: datetime = Field(default_factory=datetime.now)


class PerformanceResponse(BaseModel):
    """Operation metrics summary"""
    total_operations: int
    total_time_ms: float
    avg_time_ms: float
    failed_operations: int
    operations: List[str] = Field(default_factory=list)


class StatusResponse(BaseModel):
    """Service banner"""
    ok: bool = True
    message: str
    timestamp: datetime = Field(default_factory=datetime.now)


class HealthResponse(BaseModel):
    """Health summary"""
    healthy: bool
    trace_enabled_by_default: bool
    performance: PerformanceResponse
    timestamp: datetime = Field(default_factory=datetime.now)


class ErrorResponse(BaseModel):
    """Error body"""
    ok: bool = False
    error: str
    detail: str
    type: str
