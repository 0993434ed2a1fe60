"""Adapter: SQS event source mapping payloads <-> domain Batch / BatchResult.

Inbound:  {"Records": [{"messageId": ..., "body": ..., "eventSource": "aws:sqs", ...}, ...]}
Outbound: {"batchItemFailures": [{"itemIdentifier": ...}, ...]}  (ReportBatchItemFailures)
The outbound list is always present; an empty list tells the queue the whole batch succeeded.
"""
from __future__ import annotations

from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from batch_worker.app.domain.models import Batch, BatchResult, MessageEnvelope


class InvalidEventError(ValueError):
    """Raised when the invocation payload is not an SQS event. Fails the whole invocation."""


class SqsRecord(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    message_id: str = Field(..., min_length=1, alias="messageId")
    body: str
    event_source: str = Field("", alias="eventSource")
    event_source_arn: str | None = Field(None, alias="eventSourceARN")
    receipt_handle: str | None = Field(None, alias="receiptHandle")
    attributes: dict[str, str] = Field(default_factory=dict)
    message_attributes: dict[str, Any] = Field(default_factory=dict, alias="messageAttributes")


class SqsEvent(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    records: list[SqsRecord] = Field(default_factory=list, alias="Records")


def batch_from_sqs_event(event: Mapping[str, Any]) -> Batch:
    try:
        parsed = SqsEvent.model_validate(event)
    except ValidationError as exc:
        raise InvalidEventError(f"invocation payload is not an SQS event: {exc.error_count()} error(s)") from exc

    try:
        return Batch.of(
            MessageEnvelope(
                identifier=record.message_id,
                body=record.body,
                source=record.event_source,
                attributes=dict(record.attributes),
            )
            for record in parsed.records
        )
    except ValueError as exc:
        raise InvalidEventError(str(exc)) from exc


def to_batch_response(result: BatchResult) -> dict[str, list[dict[str, str]]]:
    return {
        "batchItemFailures": [{"itemIdentifier": record.identifier} for record in result.failures],
    }
