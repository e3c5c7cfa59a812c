from __future__ import annotations
import time
import functools
import inspect
from typing import Callable, Dict, Optional
from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode
from sdkgen.obs.metrics import record_duration
from sdkgen.obs.logging_setup import get_logger

logger = get_logger(__name__)

def traced(
    operation_name: Optional[str] = None,
    include_args: bool = False,
    include_result: bool = False,
):
    """Decorator to add OpenTelemetry tracing to functions."""

    def decorator(func: Callable) -> Callable:
        tracer = trace.get_tracer(__name__)
        span_name = operation_name or f"{func.__module__}.{func.__name__}"

        def _start(span, args, kwargs):
            span.set_attribute("function.name", func.__name__)
            span.set_attribute("function.module", func.__module__)
            if include_args:
                span.set_attribute("function.args", str(args)[:500])
                span.set_attribute("function.kwargs", str(kwargs)[:500])

        def _succeed(span, result):
            span.set_status(Status(StatusCode.OK))
            if include_result:
                span.set_attribute("function.result", str(result)[:500])

        def _fail(span, e: Exception):
            span.record_exception(e)
            span.set_status(Status(StatusCode.ERROR, str(e)))
            logger.warning(
                f"Function {func.__name__} failed",
                error=str(e),
                function=func.__name__
            )

        def _finish(start_time: float):
            duration_ms = (time.time() - start_time) * 1000
            record_duration(
                "function_duration_ms",
                duration_ms,
                {"function": func.__name__, "module": func.__module__}
            )

        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs):
            with tracer.start_as_current_span(span_name) as span:
                _start(span, args, kwargs)
                start_time = time.time()
                try:
                    result = await func(*args, **kwargs)
                    _succeed(span, result)
                    return result
                except Exception as e:
                    _fail(span, e)
                    raise
                finally:
                    _finish(start_time)

        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs):
            with tracer.start_as_current_span(span_name) as span:
                _start(span, args, kwargs)
                start_time = time.time()
                try:
                    result = func(*args, **kwargs)
                    _succeed(span, result)
                    return result
                except Exception as e:
                    _fail(span, e)
                    raise
                finally:
                    _finish(start_time)

        return async_wrapper if inspect.iscoroutinefunction(func) else sync_wrapper

    return decorator

def timed(metric_name: Optional[str] = None, labels: Optional[Dict[str, str]] = None):
    """Decorator to time function execution and record metrics."""

    def decorator(func: Callable) -> Callable:
        name = metric_name or f"{func.__name__}_duration_ms"

        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs):
            start_time = time.time()
            try:
                return await func(*args, **kwargs)
            finally:
                duration_ms = (time.time() - start_time) * 1000
                record_duration(name, duration_ms, labels)

        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs):
            start_time = time.time()
            try:
                return func(*args, **kwargs)
            finally:
                duration_ms = (time.time() - start_time) * 1000
                record_duration(name, duration_ms, labels)

        return async_wrapper if inspect.iscoroutinefunction(func) else sync_wrapper

    return decorator
