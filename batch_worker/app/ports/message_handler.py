"""Port: per-message business logic supplied by the application. Injected into the dispatcher."""
from __future__ import annotations

from typing import Any, Awaitable, Protocol, TypeVar

PayloadT_contra = TypeVar("PayloadT_contra", contravariant=True)


class MessageHandler(Protocol[PayloadT_contra]):
    """Processes exactly one decoded message.

    Returning normally means success. Raising any exception marks the message for
    redelivery. `process` may be a coroutine function or a plain function.
    """

    def process(self, payload: PayloadT_contra, context: Any) -> Awaitable[None] | None: ...
