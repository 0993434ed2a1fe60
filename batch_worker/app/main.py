"""Lambda entrypoint: SQS event in, partial batch response out.

`lambda_handler` is the deployable handler wired to the sample employee handler.
Applications wire their own handler with `create_lambda_handler(MyHandler(), MyPayload)`.
"""
import asyncio
import json
import sys
from functools import lru_cache
from pathlib import Path
from typing import Any, Callable

from loguru import logger

from batch_worker.app.composition import create_worker_dependencies
from batch_worker.app.config.settings import Settings
from batch_worker.app.core import SERVICE_NAME
from batch_worker.app.core.logging import configure_logging
from batch_worker.app.domain.processing_context import ProcessingContext
from batch_worker.app.handlers.employee import Employee, ProcessEmployeeHandler
from batch_worker.app.infrastructure.lambda_runtime.sqs_event import batch_from_sqs_event, to_batch_response
from batch_worker.app.ports.message_handler import MessageHandler

LambdaHandler = Callable[[dict[str, Any], Any], dict[str, Any]]


def _log(event: str, **kwargs) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


def create_lambda_handler(
    handler: MessageHandler[Any],
    payload_type: Any,
    settings: Settings | None = None,
    *,
    configure_logs: bool = True,
) -> LambdaHandler:
    dependencies = create_worker_dependencies(handler, payload_type, settings)
    if configure_logs:
        configure_logging(dependencies.settings)

    def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
        processing_context = ProcessingContext.from_invocation(context)
        try:
            batch = batch_from_sqs_event(event)
            result = asyncio.run(dependencies.dispatcher.handle(batch, processing_context))
        except Exception as e:
            logger.bind(
                service_name=SERVICE_NAME,
                event="invocation_failed",
                request_id=processing_context.request_id,
            ).opt(exception=e).error("invocation failed: {}", e)
            raise
        return to_batch_response(result)

    return lambda_handler


@lru_cache(maxsize=1)
def _default_handler() -> LambdaHandler:
    return create_lambda_handler(ProcessEmployeeHandler(), Employee)


def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    return _default_handler()(event, context)


def main() -> None:
    """Local invoke: read an SQS event from the path in argv[1] (or stdin) and print the response."""
    raw = Path(sys.argv[1]).read_text() if len(sys.argv) > 1 else sys.stdin.read()
    try:
        response = lambda_handler(json.loads(raw), None)
    except KeyboardInterrupt:
        _log("worker_interrupted")
        return
    except Exception as e:
        logger.exception("worker failed: {}", e)
        raise
    print(json.dumps(response, indent=2))


if __name__ == "__main__":
    main()
