import asyncio

import httpx

from chefgpt.core.errors import GenerationError
from chefgpt.main import app


class BrokenClient:
    mode = "broken"

    def __init__(self) -> None:
        self.calls = []

    async def complete(self, call):
        self.calls.append(call)
        raise GenerationError(call.capability, "server_error", "backend secret details")


async def _post(path: str, payload: dict) -> httpx.Response:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        return await client.post(path, json=payload)


def test_generate_happy_path_returns_200_and_schema_shape() -> None:
    payload = {"ingredients": "chicken, broccoli, garlic", "dietaryPreferences": "gluten-free"}

    resp = asyncio.run(_post("/generate", payload))

    assert resp.status_code == 200
    body = resp.json()
    assert isinstance(body["title"], str)
    assert body["title"]
    assert isinstance(body["ingredients"], list)
    assert isinstance(body["instructions"], list)
    assert body["instructions"]
    assert "nutritionalInformation" in body


def test_generate_rejects_empty_ingredients_with_issue_list() -> None:
    resp = asyncio.run(_post("/generate", {"ingredients": ""}))

    assert resp.status_code == 422
    detail = resp.json()["detail"]
    assert detail["code"] == "invalid_request"
    assert detail["issues"][0]["field"] == "ingredients"
    assert detail["issues"][0]["constraint"] == "non_empty"


def test_generate_rejects_invalid_payload_shape() -> None:
    resp = asyncio.run(_post("/generate", {"ingredients": ["not", "text"]}))

    assert resp.status_code == 422
    assert resp.json()["detail"]["issues"][0]["constraint"] == "type"


def test_generate_returns_503_with_stable_error_when_generation_unavailable(
    monkeypatch,
) -> None:
    broken = BrokenClient()
    monkeypatch.setattr("chefgpt.api.generate.get_model_client", lambda _settings=None: broken)

    resp = asyncio.run(_post("/generate", {"ingredients": "chicken"}))

    assert resp.status_code == 503
    body = resp.json()
    assert body["detail"]["code"] == "generation_unavailable"
    assert body["detail"]["message"] == (
        "Recipe generation is temporarily unavailable. Please try again."
    )
    assert "backend secret details" not in resp.text
    assert len(broken.calls) == 1


def test_generate_does_not_call_model_for_invalid_input(monkeypatch) -> None:
    broken = BrokenClient()
    monkeypatch.setattr("chefgpt.api.generate.get_model_client", lambda _settings=None: broken)

    resp = asyncio.run(_post("/generate", {"ingredients": "  "}))

    assert resp.status_code == 422
    assert broken.calls == []


def test_generate_logs_safe_structured_fields_without_sensitive_data(monkeypatch, caplog) -> None:
    monkeypatch.setattr(
        "chefgpt.api.generate.get_model_client", lambda _settings=None: BrokenClient()
    )

    with caplog.at_level("WARNING", logger="chefgpt.api.generate"):
        resp = asyncio.run(_post("/generate", {"ingredients": "chicken"}))
    assert resp.status_code == 503

    records = [r for r in caplog.records if r.msg == "api_recipe_generation"]
    assert records
    record = records[-1]
    assert record.outcome == "failure"
    assert record.capability == "generate_recipe"
    assert record.generator_mode == "stub"
    assert record.error_class == "server_error"
    assert "backend secret details" not in caplog.text


def test_modify_endpoint_returns_modified_recipe() -> None:
    resp = asyncio.run(
        _post("/modify", {"recipe": "Pasta with cream sauce", "dietaryRestrictions": "vegan"})
    )

    assert resp.status_code == 200
    assert "cream" not in resp.json()["modifiedRecipe"].lower()


def test_suggest_name_endpoint() -> None:
    resp = asyncio.run(_post("/suggest-name", {"ingredients": "salmon, dill"}))

    assert resp.status_code == 200
    assert resp.json() == {"recipeName": "Salmon & Dill Skillet"}


def test_suggest_recipes_endpoint() -> None:
    resp = asyncio.run(
        _post("/suggest-recipes", {"ingredients": "egg, rice", "dietaryPreferences": "vegetarian"})
    )

    assert resp.status_code == 200
    recipes = resp.json()["recipes"]
    assert len(recipes) == 3
    assert recipes[0]["name"] == "Vegetarian Egg & Rice Skillet"


def test_details_endpoint_uses_camel_case_keys() -> None:
    resp = asyncio.run(_post("/details", {"recipeName": "Egg Fried Rice", "ingredients": "egg, rice"}))

    assert resp.status_code == 200
    body = resp.json()
    assert body["title"] == "Egg Fried Rice"
    assert body["prepTime"] == "10 minutes"
    assert body["cookTime"] == "15 minutes"
    assert body["servings"] == 2


def test_details_endpoint_requires_recipe_name() -> None:
    resp = asyncio.run(_post("/details", {"ingredients": "egg"}))

    assert resp.status_code == 422
    assert resp.json()["detail"]["issues"][0] == {
        "field": "recipeName",
        "constraint": "required",
        "message": "Field required",
    }


def test_generate_rejects_separator_only_ingredients() -> None:
    resp = asyncio.run(_post("/generate", {"ingredients": " , ,\n"}))

    assert resp.status_code == 422
    issue = resp.json()["detail"]["issues"][0]
    assert issue["field"] == "ingredients"
    assert issue["constraint"] == "non_empty"
