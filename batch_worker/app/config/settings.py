from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    log_level: str = Field("INFO", validation_alias="LOG_LEVEL")
    log_json: bool = Field(True, validation_alias="LOG_JSON")

    # 1 keeps the batch strictly sequential.
    max_concurrency: int = Field(1, ge=1, validation_alias="MAX_CONCURRENCY")
    # Upper bound for a single handler call; 0 disables it.
    message_timeout_seconds: float = Field(0.0, ge=0, validation_alias="MESSAGE_TIMEOUT_SECONDS")
    # Time kept in reserve before the invocation deadline for building the response.
    deadline_margin_ms: int = Field(500, ge=0, validation_alias="DEADLINE_MARGIN_MS")

    @property
    def deadline_margin_seconds(self) -> float:
        return self.deadline_margin_ms / 1000.0
