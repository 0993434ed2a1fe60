"""Worker-level constants shared across modules."""
from __future__ import annotations


class MESSAGE_STATE:
    PENDING = "PENDING"
    DECODING = "DECODING"
    DECODED = "DECODED"
    PROCESSING = "PROCESSING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
    DECODE_FAILED = "DECODE_FAILED"
    TIMED_OUT = "TIMED_OUT"
    SKIPPED = "SKIPPED"


# Terminal states that require the queue to redeliver the message.
FAILURE_STATES = frozenset(
    {
        MESSAGE_STATE.FAILED,
        MESSAGE_STATE.DECODE_FAILED,
        MESSAGE_STATE.TIMED_OUT,
        MESSAGE_STATE.SKIPPED,
    }
)
