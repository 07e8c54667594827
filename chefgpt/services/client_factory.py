import logging

from chefgpt.core.config import Settings, get_settings
from chefgpt.services.client_base import ModelClient
from chefgpt.services.client_openai import OpenAIModelClient
from chefgpt.services.client_stub import StubModelClient

logger = logging.getLogger(__name__)

client_factory_counters = {
    "fallback": 0,
}


def get_model_client(settings: Settings | None = None) -> ModelClient:
    config = settings or get_settings()

    if config.recipe_generator == "openai":
        if not config.openai_api_key and config.openai_fallback_to_stub:
            client_factory_counters["fallback"] += 1
            logger.warning("model_client_fallback", extra={"client_mode": "stub"})
            return StubModelClient()
        return OpenAIModelClient(
            api_key=config.openai_api_key or "",
            model=config.openai_model,
            max_output_tokens=config.max_output_tokens,
            timeout_seconds=config.generation_timeout_seconds,
        )

    return StubModelClient()
