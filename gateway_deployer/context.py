"""Timed spans for following a single reconciliation in the debug log.

Spans nest within an asyncio task, so the log of concurrent reconciliations
of different Gateways can be told apart by their labels:

```
[Trace] > Render ns1/gw
[Trace] < Render ns1/gw (0.42s)
[Trace] > Apply Deployment ns1/gloo-proxy-gw
[Trace] ! Apply Deployment ns1/gloo-proxy-gw: admission webhook denied
```
"""

import contextvars
from contextlib import contextmanager
from dataclasses import dataclass, field
import logging
from time import perf_counter
from typing import Generator


_LOGGER = logging.getLogger(__name__)

# No public API
__all__: list[str] = []

SEPARATOR = " > "

_spans: contextvars.ContextVar[tuple[str, ...]] = contextvars.ContextVar(
    "spans", default=()
)


@dataclass
class Span:
    """A named unit of work and the spans enclosing it."""

    names: tuple[str, ...]
    start: float = field(default_factory=perf_counter)

    @property
    def label(self) -> str:
        return SEPARATOR.join(self.names)

    @property
    def elapsed(self) -> float:
        return perf_counter() - self.start


def current_spans() -> tuple[str, ...]:
    """Return the names of the open spans of the current task, outermost first."""
    return _spans.get()


@contextmanager
def trace_context(name: str) -> Generator[Span, None, None]:
    """Open a span nested in the current one for the duration of the block."""
    span = Span(current_spans() + (name,))
    token = _spans.set(span.names)
    _LOGGER.debug("[Trace] > %s", span.label)
    try:
        yield span
    except Exception as err:
        _LOGGER.debug("[Trace] ! %s: %s", span.label, err)
        raise
    else:
        _LOGGER.debug("[Trace] < %s (%0.2fs)", span.label, span.elapsed)
    finally:
        _spans.reset(token)
