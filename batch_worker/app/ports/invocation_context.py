"""Port: the runtime-supplied invocation context (e.g. the AWS Lambda context object)."""
from __future__ import annotations

from typing import Protocol


class InvocationContext(Protocol):
    """Subset of the Lambda context the worker reads. Other runtimes may duck-type it."""

    @property
    def aws_request_id(self) -> str: ...

    @property
    def function_name(self) -> str: ...

    def get_remaining_time_in_millis(self) -> int: ...
