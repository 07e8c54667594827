import os
from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

_TRUTHY = {"1", "true", "yes", "on"}


class Settings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    recipe_generator: Literal["stub", "openai"] = "stub"
    openai_api_key: str | None = None
    openai_model: str = "gpt-4.1-mini"
    openai_fallback_to_stub: bool = True
    generation_timeout_seconds: float = Field(default=30.0, gt=0)
    max_output_tokens: int = Field(default=1200, gt=0)
    log_level: str = "INFO"

    @model_validator(mode="after")
    def _validate_openai(self) -> "Settings":
        if (
            self.recipe_generator == "openai"
            and not self.openai_api_key
            and not self.openai_fallback_to_stub
        ):
            raise ValueError("OPENAI_API_KEY is required when RECIPE_GENERATOR=openai")
        return self


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in _TRUTHY


@lru_cache
def get_settings() -> Settings:
    raw = {
        "recipe_generator": os.getenv("RECIPE_GENERATOR", "stub").strip().lower(),
        "openai_api_key": os.getenv("OPENAI_API_KEY") or None,
        "openai_model": os.getenv("OPENAI_MODEL", "gpt-4.1-mini"),
        "openai_fallback_to_stub": _env_flag("OPENAI_FALLBACK_TO_STUB", "1"),
        "generation_timeout_seconds": os.getenv("GENERATION_TIMEOUT_SECONDS", "30"),
        "max_output_tokens": os.getenv("MAX_OUTPUT_TOKENS", "1200"),
        "log_level": os.getenv("LOG_LEVEL", "INFO").strip().upper(),
    }
    try:
        return Settings.model_validate(raw)
    except ValidationError as exc:
        raise RuntimeError(f"Invalid configuration: {exc}") from exc
