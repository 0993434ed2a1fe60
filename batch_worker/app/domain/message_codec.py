"""Message codec: turns a raw message body into the payload type expected by the handler.

Validation is delegated to a pydantic TypeAdapter, so the payload type may be a
BaseModel, a dataclass, a TypedDict or a plain container type. Defaults declared
on the payload type are applied the way pydantic applies them; anything else that
does not match is a decoding failure, never a partially filled payload.
"""
from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import TypeAdapter, ValidationError

PayloadT = TypeVar("PayloadT")


class DecodeError(ValueError):
    """Raised when a message body does not conform to the expected payload schema."""

    def __init__(
        self,
        message: str,
        *,
        identifier: str | None = None,
        body_length: int = 0,
        errors: list[dict[str, Any]] | None = None,
    ) -> None:
        super().__init__(message)
        self.identifier = identifier
        self.body_length = body_length
        self.errors = errors or []


class MessageCodec(Generic[PayloadT]):
    """Decodes JSON message bodies into `payload_type`. Stateless apart from the compiled adapter."""

    def __init__(self, payload_type: type[PayloadT] | Any) -> None:
        self._payload_type = payload_type
        self._adapter: TypeAdapter[PayloadT] = TypeAdapter(payload_type)

    @property
    def payload_type(self) -> Any:
        return self._payload_type

    def decode(self, body: str, *, identifier: str | None = None) -> PayloadT:
        if not isinstance(body, str):
            raise DecodeError(
                f"message {identifier or '<unknown>'}: body must be str, got {type(body).__name__}",
                identifier=identifier,
            )
        try:
            return self._adapter.validate_json(body)
        except ValidationError as exc:
            # The body is never echoed into the error message.
            raise DecodeError(
                f"message {identifier or '<unknown>'}: body of length {len(body)} "
                f"does not match {self._type_name()} ({exc.error_count()} error(s))",
                identifier=identifier,
                body_length=len(body),
                errors=exc.errors(include_input=False),
            ) from exc
        except Exception as exc:
            # Payload validators may raise arbitrary errors; pydantic passes those through.
            raise DecodeError(
                f"message {identifier or '<unknown>'}: body of length {len(body)} "
                f"could not be decoded into {self._type_name()}: {type(exc).__name__}: {exc}",
                identifier=identifier,
                body_length=len(body),
            ) from exc

    def _type_name(self) -> str:
        return getattr(self._payload_type, "__name__", None) or repr(self._payload_type)
