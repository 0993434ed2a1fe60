"""Domain models."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator, Mapping

from batch_worker.app.constants import FAILURE_STATES


@dataclass(frozen=True)
class MessageEnvelope:
    """One queue entry as delivered by the trigger. Read-only during processing."""

    identifier: str
    body: str
    source: str = ""
    attributes: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.identifier, str) or not self.identifier:
            raise TypeError("envelope.identifier must be a non-empty str")
        if not isinstance(self.body, str):
            raise TypeError("envelope.body must be a str")
        if not isinstance(self.source, str):
            raise TypeError("envelope.source must be a str")


@dataclass(frozen=True)
class Batch:
    """Ordered, immutable set of envelopes handled by one invocation."""

    envelopes: tuple[MessageEnvelope, ...] = ()

    def __post_init__(self) -> None:
        seen: set[str] = set()
        for envelope in self.envelopes:
            if envelope.identifier in seen:
                raise ValueError(f"duplicate message identifier in batch: {envelope.identifier}")
            seen.add(envelope.identifier)

    @staticmethod
    def of(envelopes: Iterable[MessageEnvelope]) -> "Batch":
        return Batch(envelopes=tuple(envelopes))

    @property
    def identifiers(self) -> tuple[str, ...]:
        return tuple(envelope.identifier for envelope in self.envelopes)

    def __len__(self) -> int:
        return len(self.envelopes)

    def __iter__(self) -> Iterator[MessageEnvelope]:
        return iter(self.envelopes)


@dataclass(frozen=True)
class FailureRecord:
    """Identifier of a message the queue must redeliver."""

    identifier: str


@dataclass(frozen=True)
class BatchResult:
    """Aggregated outcome of one batch. `failures` is empty, never absent, when all succeeded."""

    failures: tuple[FailureRecord, ...] = ()

    @property
    def failed_identifiers(self) -> tuple[str, ...]:
        return tuple(record.identifier for record in self.failures)

    @property
    def has_failures(self) -> bool:
        return bool(self.failures)


@dataclass(frozen=True)
class MessageOutcome:
    """Terminal state of a single envelope, returned by the per-envelope boundary."""

    identifier: str
    state: str
    error: BaseException | None = None

    @property
    def failed(self) -> bool:
        return self.state in FAILURE_STATES
