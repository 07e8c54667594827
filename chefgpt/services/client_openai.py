from typing import Any

from chefgpt.core.errors import GenerationError
from chefgpt.services.client_base import ModelCall

SYSTEM_PROMPT = (
    "You are ChefGPT, a recipe assistant. Reply with a single JSON object that strictly "
    "matches the provided JSON schema. No extra keys."
)


class OpenAIModelClient:
    mode = "openai"

    def __init__(
        self,
        api_key: str,
        model: str,
        max_output_tokens: int = 1200,
        timeout_seconds: float = 30.0,
        client: Any | None = None,
    ) -> None:
        self._model = model
        self._max_output_tokens = max_output_tokens
        self._timeout_seconds = timeout_seconds
        if client is not None:
            self._client = client
            return

        try:
            from openai import AsyncOpenAI  # type: ignore[import-not-found]
        except ModuleNotFoundError as exc:
            raise RuntimeError("openai package is required for RECIPE_GENERATOR=openai") from exc

        self._client = AsyncOpenAI(api_key=api_key)

    async def complete(self, call: ModelCall) -> str | None:
        request_kwargs = {
            "model": self._model,
            "input": [
                {"role": "system", "content": [{"type": "input_text", "text": SYSTEM_PROMPT}]},
                {"role": "user", "content": [{"type": "input_text", "text": call.prompt}]},
            ],
            "text": {
                "format": {
                    "type": "json_schema",
                    "name": call.capability,
                    "strict": True,
                    "schema": to_strict_schema(call.output_schema),
                }
            },
            "max_output_tokens": self._max_output_tokens,
            "timeout": self._timeout_seconds,
        }
        try:
            response = await self._client.responses.create(**request_kwargs)
        except Exception as exc:
            raise GenerationError(
                call.capability, classify_api_error(exc), "OpenAI API request failed"
            ) from exc
        return extract_output_text(response)


def classify_api_error(exc: Exception) -> str:
    error_name = exc.__class__.__name__
    if error_name == "APITimeoutError":
        return "timeout"
    if error_name == "APIConnectionError":
        return "transport"
    if error_name == "RateLimitError":
        return "rate_limit"
    if error_name == "InternalServerError":
        return "server_error"

    status_code = getattr(exc, "status_code", None)
    if not isinstance(status_code, int):
        response = getattr(exc, "response", None)
        status_code = getattr(response, "status_code", None)
    if isinstance(status_code, int):
        if status_code == 429:
            return "rate_limit"
        if status_code >= 500:
            return "server_error"

    return "api_error"


def to_strict_schema(node: Any) -> Any:
    """Copy a pydantic JSON schema into the form strict structured output accepts.

    Every object lists all of its properties as required and is closed to extra
    keys. Optional fields stay nullable through their `anyOf` branch.
    """
    if isinstance(node, list):
        return [to_strict_schema(item) for item in node]
    if not isinstance(node, dict):
        return node

    strict = {key: to_strict_schema(value) for key, value in node.items()}
    if isinstance(strict.get("properties"), dict):
        strict["required"] = list(strict["properties"])
        strict.setdefault("additionalProperties", False)
    return strict


def _field(item: Any, name: str) -> Any:
    if isinstance(item, dict):
        return item.get(name)
    return getattr(item, name, None)


def extract_output_text(response: Any) -> str | None:
    text = _field(response, "output_text")
    if isinstance(text, str) and text:
        return text

    # Responses without the convenience field: join the output_text parts.
    parts = []
    for item in _field(response, "output") or []:
        for part in _field(item, "content") or []:
            part_text = _field(part, "text")
            if _field(part, "type") == "output_text" and isinstance(part_text, str):
                parts.append(part_text)
    return "".join(parts) or None
