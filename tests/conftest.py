from __future__ import annotations

from typing import Any, Iterator

import pytest
from loguru import logger


@pytest.fixture()
def log_events() -> Iterator[list[dict[str, Any]]]:
    """Captures loguru records as {"event", "level", "message", **extra} dicts."""
    captured: list[dict[str, Any]] = []

    def sink(message: Any) -> None:
        record = message.record
        captured.append(
            {
                **record["extra"],
                "level": record["level"].name,
                "message": record["message"],
            }
        )

    sink_id = logger.add(sink, level="DEBUG")
    yield captured
    logger.remove(sink_id)
