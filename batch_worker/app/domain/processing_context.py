"""Domain value object for request-scoped processing context. Passed to every handler call unchanged."""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable

from batch_worker.app.ports.invocation_context import InvocationContext


@dataclass(frozen=True)
class ProcessingContext:
    """Per-invocation processing context."""

    request_id: str
    started_at: datetime
    function_name: str = ""
    invocation: Any = None
    remaining_time_millis: Callable[[], int] | None = field(default=None, repr=False, compare=False)

    def remaining_time_seconds(self) -> float | None:
        """Seconds left before the runtime deadline, or None when the runtime imposes none."""
        if self.remaining_time_millis is None:
            return None
        return self.remaining_time_millis() / 1000.0

    @staticmethod
    def from_invocation(invocation: InvocationContext | None) -> "ProcessingContext":
        """Build from a runtime context (see ports.invocation_context). Attributes are read by duck typing."""
        request_id = str(getattr(invocation, "aws_request_id", "") or "") or str(uuid.uuid4())
        remaining = getattr(invocation, "get_remaining_time_in_millis", None)
        return ProcessingContext(
            request_id=request_id,
            started_at=datetime.now(timezone.utc),
            function_name=str(getattr(invocation, "function_name", "") or ""),
            invocation=invocation,
            remaining_time_millis=remaining if callable(remaining) else None,
        )
