"""FastAPI app exposing lazy stream pipelines and queries for demonstration."""

import logging
import uuid
from contextlib import nullcontext
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from models import (
    ErrorResponse, HealthResponse, PerformanceResponse, PipelineRequest, PipelineResponse,
    QueryRequest, QueryResponse, StatusResponse, TraceConfig
)
from utils import (
    ForceCounter,
    StreamLimitExceeded,
    UnknownOperationError,
    build_pipeline,
    build_source,
    capture_trace,
    clear_performance_metrics,
    get_performance_summary,
    get_system_health,
    materialize,
    measure_performance,
    run_query,
)

logger = logging.getLogger('lazy_stream.app')

app = FastAPI(
    title="Lazy Stream Explorer",
    description="Memoized call-by-need streams with short-circuiting folds and bounded traversal",
    version="1.0.0"
)


def _request_trace(enabled: bool):
    """Per-request trace config on its own logger so concurrent requests don't mix lines"""
    if not enabled:
        return None
    return TraceConfig(enabled=True, logger_name=f"lazy_stream.trace.request.{uuid.uuid4().hex}")


@app.get("/", response_model=StatusResponse)
async def root():
    """Basic service banner."""
    return StatusResponse(
        ok=True,
        message="Lazy Stream Explorer operational - Features: memoized thunks, short-circuit folds, bounded traversal",
        timestamp=datetime.now()
    )


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Return health + metrics summary."""
    health = get_system_health()
    return HealthResponse(
        healthy=health["healthy"],
        trace_enabled_by_default=health["trace_enabled_by_default"],
        performance=PerformanceResponse(**health["performance"]),
        timestamp=datetime.now()
    )


@app.post("/streams/evaluate", response_model=PipelineResponse)
async def evaluate_pipeline(request: PipelineRequest):
    """Build the source, apply the lazy steps and materialize at most `limit` elements."""
    trace = _request_trace(request.trace)
    counter = ForceCounter()
    source = counter.wrap(build_source(request.source))

    with (capture_trace(trace) if trace else nullcontext([])) as trace_lines:
        stream = build_pipeline(source, request.operations, trace)
        items, _ = measure_performance("evaluate", materialize, stream, request.limit, trace)

    logger.info(f"Evaluated pipeline with {len(request.operations)} steps: "
                f"{len(items)} items, {counter.count} source elements forced")
    return PipelineResponse(
        items=items,
        count=len(items),
        forced=counter.count,
        trace_lines=trace_lines
    )


@app.post("/streams/query", response_model=QueryResponse)
async def query_stream(request: QueryRequest):
    """Run exists/for_all/find/head_option/starts_with over the first `limit` elements."""
    trace = _request_trace(request.trace)
    counter = ForceCounter()
    source = counter.wrap(build_source(request.source))

    with (capture_trace(trace) if trace else nullcontext([])) as trace_lines:
        stream = build_pipeline(source, request.operations, trace).take(request.limit)
        (result, found), _ = measure_performance(
            f"query:{request.query.value}", run_query,
            stream, request.query, request.predicate, request.prefix, trace
        )

    return QueryResponse(
        query=request.query,
        result=result,
        found=found,
        forced=counter.count,
        trace_lines=trace_lines
    )


@app.get("/metrics", response_model=PerformanceResponse)
async def get_metrics():
    """Return operation metrics."""
    return PerformanceResponse(**get_performance_summary())


@app.delete("/metrics")
async def reset_metrics():
    """Clear operation metrics."""
    clear_performance_metrics()
    return {"ok": True, "message": "Metrics cleared"}


# Exception handlers
@app.exception_handler(StreamLimitExceeded)
async def stream_limit_handler(request: Request, exc: StreamLimitExceeded):
    body = ErrorResponse(
        error="Stream Limit Exceeded",
        detail=f"{exc} - add a take step or raise the limit",
        type="stream_limit_exceeded"
    )
    return JSONResponse(status_code=422, content=body.model_dump())


@app.exception_handler(RecursionError)
async def recursion_handler(request: Request, exc: RecursionError):
    logger.warning(f"Right fold exhausted the stack on {request.url.path}")
    body = ErrorResponse(
        error="Traversal Too Deep",
        detail="Right fold recursed past the interpreter stack limit - lower the limit or use find",
        type="recursion_limit"
    )
    return JSONResponse(status_code=422, content=body.model_dump())


@app.exception_handler(UnknownOperationError)
async def unknown_operation_handler(request: Request, exc: UnknownOperationError):
    body = ErrorResponse(
        error="Unknown Operation",
        detail=str(exc),
        type="unknown_operation"
    )
    return JSONResponse(status_code=400, content=body.model_dump())


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
