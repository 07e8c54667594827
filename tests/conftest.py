import sys
from pathlib import Path

import pytest

# Ensure project root is importable when pytest is invoked from non-root directories.
ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture(autouse=True)
def _force_stub_client(monkeypatch: pytest.MonkeyPatch) -> None:
    from chefgpt.core.config import get_settings

    # Keep API/UI tests deterministic regardless of caller shell environment.
    monkeypatch.setenv("RECIPE_GENERATOR", "stub")
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    for name in (
        "OPENAI_MODEL",
        "OPENAI_FALLBACK_TO_STUB",
        "GENERATION_TIMEOUT_SECONDS",
        "MAX_OUTPUT_TOKENS",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
