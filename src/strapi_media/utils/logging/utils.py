# ABOUTME: Structured logger helpers for the media pipeline
# ABOUTME: get_logger, an async API call decorator, and a pipeline context bound through contextvars

import functools
import inspect
import time
import uuid
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any, TypeVar

import structlog

F = TypeVar("F", bound=Callable[..., Any])


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger named after ``name`` or, if omitted, the calling module."""
    if name is None:
        frame = inspect.currentframe()
        if frame and frame.f_back:
            name = frame.f_back.f_globals.get("__name__")

    return structlog.get_logger(name or "strapi_media")


def generate_operation_id() -> str:
    """Short random id that ties the log lines of one operation together."""
    return uuid.uuid4().hex[:8]


def _first_url(args: tuple[Any, ...]) -> str | None:
    return next((arg for arg in args if isinstance(arg, str) and arg.startswith(("http://", "https://", "/"))), None)


def log_api_call(api_name: str, **context) -> Callable[[F], F]:
    """Log duration and outcome of an async API call.

    Successes are logged at debug level, failures as warnings before the
    exception propagates. The first URL-like positional argument is bound as
    ``url``.

    Args:
        api_name: Name of the API being called
        **context: Additional fields bound to every line
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            bound_logger = get_logger(func.__module__).bind(
                api_name=api_name,
                call_id=generate_operation_id(),
                url=_first_url(args),
                **context,
            )
            started = time.perf_counter()
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                bound_logger.warning(
                    f"API call to {api_name} failed",
                    duration_seconds=round(time.perf_counter() - started, 3),
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise

            bound_logger.debug(
                f"API call to {api_name} succeeded", duration_seconds=round(time.perf_counter() - started, 3)
            )
            return result

        return wrapper  # type: ignore[return-value]

    return decorator


@contextmanager
def with_pipeline_context(pipeline_name: str, **context) -> Iterator[structlog.stdlib.BoundLogger]:
    """Bind pipeline name, a fresh operation id, and ``context`` to every log line in the block.

    The fields live in structlog's contextvars, so tasks spawned inside the
    block (``asyncio.gather``) log them too. Exceptions are logged and re-raised.
    """
    fields = {"pipeline": pipeline_name, "operation_id": generate_operation_id(), **context}
    logger = get_logger("strapi_media.pipeline")
    with structlog.contextvars.bound_contextvars(**fields):
        try:
            yield logger
        except Exception as e:
            logger.error("Pipeline failed", error=str(e), error_type=type(e).__name__)
            raise
