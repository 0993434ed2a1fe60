"""Worker composition root: build the codec and dispatcher from settings and the application's handler.

Composition may: import concrete classes, read settings, store interface types.
"""
from __future__ import annotations

from typing import Any

from batch_worker.app.application.batch_dispatcher import BatchDispatcher
from batch_worker.app.config.settings import Settings
from batch_worker.app.domain.message_codec import MessageCodec
from batch_worker.app.ports.message_handler import MessageHandler


class WorkerDependencies:
    """Holds wired worker dependencies."""

    def __init__(
        self,
        *,
        settings: Settings,
        handler: MessageHandler[Any],
        payload_type: Any,
    ) -> None:
        self._settings = settings
        self._handler = handler
        self._payload_type = payload_type
        self._codec: MessageCodec[Any] | None = None
        self._dispatcher: BatchDispatcher[Any] | None = None

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def codec(self) -> MessageCodec[Any]:
        if self._codec is None:
            raise RuntimeError("codec is not initialized")
        return self._codec

    @property
    def dispatcher(self) -> BatchDispatcher[Any]:
        if self._dispatcher is None:
            raise RuntimeError("dispatcher is not initialized")
        return self._dispatcher

    def build(self) -> "WorkerDependencies":
        self._codec = MessageCodec(self._payload_type)
        self._dispatcher = BatchDispatcher(
            self._codec,
            self._handler,
            max_concurrency=self._settings.max_concurrency,
            message_timeout_seconds=self._settings.message_timeout_seconds,
            deadline_margin_seconds=self._settings.deadline_margin_seconds,
        )
        return self


def create_worker_dependencies(
    handler: MessageHandler[Any],
    payload_type: Any,
    settings: Settings | None = None,
) -> WorkerDependencies:
    return WorkerDependencies(
        settings=settings or Settings(),
        handler=handler,
        payload_type=payload_type,
    ).build()
