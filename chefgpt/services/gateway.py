import asyncio
import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from chefgpt.core.config import Settings, get_settings
from chefgpt.core.errors import GenerationError, ValidationError
from chefgpt.schemas.recipe import (
    ModificationRequest,
    ModificationResponse,
    RecipeDetailsRequest,
    RecipeDetailsResponse,
    RecipeNameRequest,
    RecipeNameResponse,
    RecipeRequest,
    RecipeResponse,
    RecipeSuggestionsRequest,
    RecipeSuggestionsResponse,
    split_ingredients,
)
from chefgpt.schemas.validation import check, validate
from chefgpt.services.client_base import ModelCall, ModelClient
from chefgpt.services.client_factory import get_model_client
from chefgpt.services.client_openai import classify_api_error
from chefgpt.services.prompts import (
    GENERATE_RECIPE,
    GENERATE_RECIPE_DETAILS,
    SUGGEST_RECIPE_MODIFICATIONS,
    SUGGEST_RECIPE_NAME,
    SUGGEST_RECIPES,
    PromptTemplate,
    render,
)

logger = logging.getLogger(__name__)

InputT = TypeVar("InputT", bound=BaseModel)
OutputT = TypeVar("OutputT", bound=BaseModel)

generation_counters = {
    "success": 0,
    "failure": 0,
    "rejected": 0,
}

_CODE_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


@dataclass(frozen=True)
class Capability(Generic[InputT, OutputT]):
    """One generation flow: validate input, render, call the model, validate the reply.

    Each call is a single round trip. Nothing is retried or cached, and a reply
    that does not match ``output_schema`` is never returned.
    """

    template: PromptTemplate
    input_schema: type[InputT]
    output_schema: type[OutputT]

    @property
    def name(self) -> str:
        return self.template.name

    async def __call__(
        self,
        payload: Any,
        client: ModelClient | None = None,
        settings: Settings | None = None,
    ) -> OutputT:
        try:
            request = validate(self.input_schema, payload)
        except ValidationError as exc:
            generation_counters["rejected"] += 1
            logger.info(
                "recipe_generation",
                extra={
                    "capability": self.name,
                    "outcome": "rejected",
                    "invalid_fields": exc.fields,
                },
            )
            raise

        config = settings or get_settings()
        model_client = client or get_model_client(config)
        fields = request.model_dump(by_alias=True)
        call = ModelCall(
            capability=self.name,
            prompt=render(self.template, fields),
            output_schema=self.output_schema.model_json_schema(by_alias=True),
            fields=fields,
        )

        try:
            reply = await asyncio.wait_for(
                model_client.complete(call), timeout=config.generation_timeout_seconds
            )
            result = self._parse_reply(reply)
        except GenerationError as exc:
            self._log_failure(request, model_client, exc.error_class)
            raise
        except TimeoutError as exc:
            self._log_failure(request, model_client, "timeout")
            raise GenerationError(self.name, "timeout", "Model call timed out") from exc
        except Exception as exc:
            error_class = classify_api_error(exc)
            self._log_failure(request, model_client, error_class)
            raise GenerationError(self.name, error_class, "Model call failed") from exc

        generation_counters["success"] += 1
        logger.info(
            "recipe_generation",
            extra={
                "capability": self.name,
                "outcome": "success",
                "client_mode": getattr(model_client, "mode", "custom"),
                **_request_shape_fields(request),
            },
        )
        return result

    def _parse_reply(self, reply: str | None) -> OutputT:
        if reply is None or not reply.strip():
            raise GenerationError(self.name, "empty_reply", "Model returned an empty reply")

        text = reply.strip()
        fenced = _CODE_FENCE.match(text)
        if fenced:
            text = fenced.group(1)
        try:
            parsed = json.loads(text)
        except json.JSONDecodeError as exc:
            raise GenerationError(
                self.name, "invalid_model_output", "Model reply was not valid JSON"
            ) from exc
        if not isinstance(parsed, dict):
            raise GenerationError(
                self.name, "invalid_model_output", "Model reply was not a JSON object"
            )

        outcome = check(self.output_schema, parsed)
        if outcome.value is None:
            failed = ", ".join(issue.field for issue in outcome.issues)
            raise GenerationError(
                self.name,
                "invalid_model_output",
                f"Model reply did not match {self.output_schema.__name__}: {failed}",
            )
        return outcome.value

    def _log_failure(self, request: BaseModel, client: ModelClient, error_class: str) -> None:
        generation_counters["failure"] += 1
        logger.warning(
            "recipe_generation",
            extra={
                "capability": self.name,
                "outcome": "failure",
                "client_mode": getattr(client, "mode", "custom"),
                "error_class": error_class,
                **_request_shape_fields(request),
            },
        )


def _request_shape_fields(request: BaseModel) -> dict[str, Any]:
    ingredients = getattr(request, "ingredients", None) or ""
    preferences = getattr(request, "dietary_preferences", None) or getattr(
        request, "dietary_restrictions", None
    )
    return {
        "ingredients_count": len(split_ingredients(ingredients)),
        "has_dietary_preferences": bool(preferences),
    }


generate_recipe = Capability(GENERATE_RECIPE, RecipeRequest, RecipeResponse)
suggest_recipe_modifications = Capability(
    SUGGEST_RECIPE_MODIFICATIONS, ModificationRequest, ModificationResponse
)
suggest_recipe_name = Capability(SUGGEST_RECIPE_NAME, RecipeNameRequest, RecipeNameResponse)
suggest_recipes = Capability(SUGGEST_RECIPES, RecipeSuggestionsRequest, RecipeSuggestionsResponse)
generate_recipe_details = Capability(
    GENERATE_RECIPE_DETAILS, RecipeDetailsRequest, RecipeDetailsResponse
)

CAPABILITIES: dict[str, Capability[Any, Any]] = {
    capability.name: capability
    for capability in (
        generate_recipe,
        suggest_recipe_modifications,
        suggest_recipe_name,
        suggest_recipes,
        generate_recipe_details,
    )
}
