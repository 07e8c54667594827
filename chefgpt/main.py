from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from chefgpt.api.generate import router as generate_router
from chefgpt.api.ui import router as ui_router
from chefgpt.core.config import get_settings
from chefgpt.core.logging import configure_logging
from chefgpt.services.client_factory import get_model_client

STATIC_DIR = Path(__file__).resolve().parent / "static"


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    configure_logging(settings)
    get_model_client(settings)
    yield


app = FastAPI(title="ChefGPT", version="0.1.0", lifespan=lifespan)
app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")
app.include_router(ui_router)
app.include_router(generate_router)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}
