from __future__ import annotations

from datetime import timezone

import pytest

from batch_worker.app.constants import MESSAGE_STATE
from batch_worker.app.domain.models import Batch, BatchResult, FailureRecord, MessageEnvelope, MessageOutcome
from batch_worker.app.domain.processing_context import ProcessingContext
from tests.helpers import FakeLambdaContext


def test_batch_preserves_order_and_exposes_identifiers():
    batch = Batch.of(MessageEnvelope(identifier=i, body="{}") for i in ("b", "a", "c"))

    assert batch.identifiers == ("b", "a", "c")
    assert [envelope.identifier for envelope in batch] == ["b", "a", "c"]
    assert len(batch) == 3


def test_batch_rejects_duplicate_identifiers():
    with pytest.raises(ValueError, match="duplicate message identifier"):
        Batch.of([MessageEnvelope(identifier="1", body=""), MessageEnvelope(identifier="1", body="")])


def test_envelope_validates_fields():
    with pytest.raises(TypeError, match="identifier"):
        MessageEnvelope(identifier="", body="{}")
    with pytest.raises(TypeError, match="body"):
        MessageEnvelope(identifier="1", body=b"{}")  # type: ignore[arg-type]


def test_batch_result_defaults_to_empty_failures():
    result = BatchResult()

    assert result.failures == ()
    assert result.failed_identifiers == ()
    assert not result.has_failures


def test_batch_result_failed_identifiers():
    result = BatchResult(failures=(FailureRecord("2"), FailureRecord("5")))

    assert result.failed_identifiers == ("2", "5")
    assert result.has_failures


@pytest.mark.parametrize(
    "state,failed",
    [
        (MESSAGE_STATE.SUCCEEDED, False),
        (MESSAGE_STATE.FAILED, True),
        (MESSAGE_STATE.DECODE_FAILED, True),
        (MESSAGE_STATE.TIMED_OUT, True),
        (MESSAGE_STATE.SKIPPED, True),
    ],
)
def test_message_outcome_failed_flag(state, failed):
    assert MessageOutcome(identifier="1", state=state).failed is failed


def test_processing_context_from_lambda_context():
    ctx = ProcessingContext.from_invocation(FakeLambdaContext(aws_request_id="abc", remaining_ms=1500))

    assert ctx.request_id == "abc"
    assert ctx.function_name == "batch-worker"
    assert ctx.started_at.tzinfo == timezone.utc
    assert ctx.remaining_time_seconds() == 1.5


def test_processing_context_without_runtime_context_has_no_deadline():
    ctx = ProcessingContext.from_invocation(None)

    assert ctx.request_id
    assert ctx.invocation is None
    assert ctx.remaining_time_seconds() is None
