"""Fakes and builders shared by unit and integration tests."""
from __future__ import annotations

import asyncio
from typing import Any, Callable

from batch_worker.app.domain.models import Batch, MessageEnvelope


class RecordingHandler:
    """Implements MessageHandler for tests; records every call in order and optionally fails or sleeps."""

    def __init__(
        self,
        *,
        fail_when: Callable[[Any], bool] | None = None,
        exc: Exception | None = None,
        delay_seconds: float = 0.0,
    ) -> None:
        self.calls: list[tuple[Any, Any]] = []
        self.completed: list[Any] = []
        self._fail_when = fail_when
        self._exc = exc or RuntimeError("handler failed")
        self._delay_seconds = delay_seconds
        self.in_flight = 0
        self.max_in_flight = 0

    async def process(self, payload: Any, context: Any) -> None:
        self.calls.append((payload, context))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self._delay_seconds:
                await asyncio.sleep(self._delay_seconds)
            if self._fail_when is not None and self._fail_when(payload):
                raise self._exc
            self.completed.append(payload)
        finally:
            self.in_flight -= 1

    @property
    def payloads(self) -> list[Any]:
        return [payload for payload, _ in self.calls]


class SyncRecordingHandler:
    """Plain (non-async) handler; the dispatcher accepts both."""

    def __init__(self, fail_when: Callable[[Any], bool] | None = None) -> None:
        self.payloads: list[Any] = []
        self._fail_when = fail_when

    def process(self, payload: Any, context: Any) -> None:
        self.payloads.append(payload)
        if self._fail_when is not None and self._fail_when(payload):
            raise ValueError("sync handler failed")


class FakeLambdaContext:
    """Implements InvocationContext for tests. Remaining time is fixed unless a callable is given."""

    def __init__(
        self,
        *,
        aws_request_id: str = "req-1",
        function_name: str = "batch-worker",
        remaining_ms: int | Callable[[], int] = 300_000,
    ) -> None:
        self.aws_request_id = aws_request_id
        self.function_name = function_name
        self._remaining_ms = remaining_ms

    def get_remaining_time_in_millis(self) -> int:
        if callable(self._remaining_ms):
            return self._remaining_ms()
        return self._remaining_ms


def make_batch(*bodies: str, source: str = "aws:sqs") -> Batch:
    """Batch whose envelope identifiers are "1".."n" in body order."""
    return Batch.of(
        MessageEnvelope(identifier=str(index), body=body, source=source)
        for index, body in enumerate(bodies, start=1)
    )


def make_sqs_event(*records: tuple[str, str]) -> dict[str, Any]:
    return {
        "Records": [
            {
                "messageId": message_id,
                "receiptHandle": f"handle-{message_id}",
                "body": body,
                "attributes": {"ApproximateReceiveCount": "1"},
                "messageAttributes": {},
                "eventSource": "aws:sqs",
                "eventSourceARN": "arn:aws:sqs:us-east-1:123456789012:employees",
                "awsRegion": "us-east-1",
            }
            for message_id, body in records
        ]
    }
