from __future__ import annotations

import asyncio
import inspect
from typing import Any, Generic, Sequence, TypeVar

from loguru import logger

from batch_worker.app.constants import MESSAGE_STATE
from batch_worker.app.core import SERVICE_NAME
from batch_worker.app.domain.message_codec import DecodeError, MessageCodec
from batch_worker.app.domain.models import (
    Batch,
    BatchResult,
    FailureRecord,
    MessageEnvelope,
    MessageOutcome,
)
from batch_worker.app.ports.message_handler import MessageHandler

PayloadT = TypeVar("PayloadT")


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


def _log_failure(event: str, exc: BaseException, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).opt(exception=exc).error("{}", exc)


class HandlerError(Exception):
    """The per-message handler signalled failure. The original exception is the __cause__."""

    def __init__(self, identifier: str, cause: BaseException) -> None:
        super().__init__(f"message {identifier}: {type(cause).__name__}: {cause}")
        self.identifier = identifier
        self.__cause__ = cause


class FatalAssemblyError(RuntimeError):
    """The batch result could not be assembled. Fails the whole invocation."""


class BatchDispatcher(Generic[PayloadT]):
    """
    Runs one batch of envelopes through decode + handler and reports which ones failed.

    Every envelope ends in exactly one terminal state:
      PENDING -> DECODING -> DECODED -> PROCESSING -> SUCCEEDED | FAILED | TIMED_OUT
      PENDING -> DECODING -> DECODE_FAILED
      PENDING -> SKIPPED (invocation deadline exhausted before the envelope started)
    Anything but SUCCEEDED becomes a FailureRecord. Per-message errors never escape
    `handle`; only FatalAssemblyError and non-Exception BaseExceptions do.

    With max_concurrency > 1 envelopes run as tasks bounded by a semaphore; outcomes
    are still reported in envelope order. No per-call state is kept on the instance.
    """

    def __init__(
        self,
        codec: MessageCodec[PayloadT],
        handler: MessageHandler[PayloadT],
        *,
        max_concurrency: int = 1,
        message_timeout_seconds: float | None = None,
        deadline_margin_seconds: float = 0.0,
    ) -> None:
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be >= 1")
        self._codec = codec
        self._handler = handler
        self._max_concurrency = int(max_concurrency)
        self._message_timeout = (
            float(message_timeout_seconds) if message_timeout_seconds and message_timeout_seconds > 0 else None
        )
        self._deadline_margin = max(float(deadline_margin_seconds), 0.0)

    async def handle(self, batch: Batch, context: Any = None) -> BatchResult:
        request_id = getattr(context, "request_id", None)
        _log("batch_received", request_id=request_id, size=len(batch))

        if self._max_concurrency == 1 or len(batch) <= 1:
            outcomes = await self._run_sequential(batch, context)
        else:
            outcomes = await self._run_concurrent(batch, context)

        result = self._assemble_result(batch, outcomes)
        _log(
            "batch_completed",
            request_id=request_id,
            size=len(batch),
            failed=len(result.failures),
            failed_ids=list(result.failed_identifiers),
        )
        return result

    async def _run_sequential(self, batch: Batch, context: Any) -> list[MessageOutcome]:
        outcomes: list[MessageOutcome] = []
        for envelope in batch:
            outcomes.append(await self._process_envelope(envelope, context))
        return outcomes

    async def _run_concurrent(self, batch: Batch, context: Any) -> list[MessageOutcome]:
        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def bounded(envelope: MessageEnvelope) -> MessageOutcome:
            async with semaphore:
                return await self._process_envelope(envelope, context)

        # gather preserves argument order, so outcomes line up with the batch.
        return list(await asyncio.gather(*(bounded(envelope) for envelope in batch)))

    async def _process_envelope(self, envelope: MessageEnvelope, context: Any) -> MessageOutcome:
        """Single catch boundary for one envelope. Returns its outcome instead of raising."""
        identifier = envelope.identifier
        _log("message_received", source=envelope.source, message_id=identifier)

        budget = self._time_budget(context)
        if budget is not None and budget <= 0:
            logger.bind(
                service_name=SERVICE_NAME,
                event="message_skipped_deadline",
                source=envelope.source,
                message_id=identifier,
            ).warning("invocation deadline exhausted; message not attempted")
            return MessageOutcome(identifier=identifier, state=MESSAGE_STATE.SKIPPED)

        try:
            payload = self._codec.decode(envelope.body, identifier=identifier)
        except DecodeError as exc:
            _log_failure("message_decode_failed", exc, source=envelope.source, message_id=identifier)
            return MessageOutcome(identifier=identifier, state=MESSAGE_STATE.DECODE_FAILED, error=exc)

        scope = asyncio.timeout(budget)
        try:
            async with scope:
                await self._call_handler(payload, context)
        except Exception as exc:
            if scope.expired():
                _log_failure(
                    "message_timed_out",
                    exc,
                    source=envelope.source,
                    message_id=identifier,
                    timeout_seconds=budget,
                )
                return MessageOutcome(identifier=identifier, state=MESSAGE_STATE.TIMED_OUT, error=exc)
            error = HandlerError(identifier, exc)
            _log_failure("message_failed", error, source=envelope.source, message_id=identifier)
            return MessageOutcome(identifier=identifier, state=MESSAGE_STATE.FAILED, error=error)

        _log("message_processed", source=envelope.source, message_id=identifier)
        return MessageOutcome(identifier=identifier, state=MESSAGE_STATE.SUCCEEDED)

    async def _call_handler(self, payload: PayloadT, context: Any) -> None:
        result = self._handler.process(payload, context)
        if inspect.isawaitable(result):
            await result

    def _time_budget(self, context: Any) -> float | None:
        """Seconds this envelope may use: the per-message timeout capped by the invocation deadline."""
        budget = self._message_timeout
        remaining_fn = getattr(context, "remaining_time_seconds", None)
        if callable(remaining_fn):
            remaining = remaining_fn()
            if remaining is not None:
                remaining = float(remaining) - self._deadline_margin
                budget = remaining if budget is None else min(budget, remaining)
        return budget

    @staticmethod
    def _assemble_result(batch: Batch, outcomes: Sequence[MessageOutcome]) -> BatchResult:
        if len(outcomes) != len(batch):
            raise FatalAssemblyError(f"expected {len(batch)} outcomes, got {len(outcomes)}")

        failures: list[FailureRecord] = []
        for envelope, outcome in zip(batch, outcomes):
            if outcome.identifier != envelope.identifier:
                raise FatalAssemblyError(
                    f"outcome for {outcome.identifier!r} does not match envelope {envelope.identifier!r}"
                )
            if outcome.failed:
                failures.append(FailureRecord(identifier=envelope.identifier))
        return BatchResult(failures=tuple(failures))
