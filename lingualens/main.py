from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from lingualens.config import get_settings
from lingualens.constants import SUPPORTED_LANGUAGES
from lingualens.infra.redis import close_redis, ping_redis
from lingualens.routes.camera import router as camera_router
from lingualens.routes.flows import router as flows_router
from lingualens.routes.sessions import router as sessions_router
from lingualens.schemas.session import LanguageOption
from lingualens.services.camera import get_camera_probe


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    if get_settings().probe_camera_on_startup:
        await get_camera_probe().probe()
    yield
    close_redis()


app = FastAPI(title="LinguaLens", lifespan=lifespan)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type"],
    max_age=600,
)

app.include_router(sessions_router)
app.include_router(camera_router)
app.include_router(flows_router)


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok", "redis": "ok" if ping_redis() else "unavailable"}


@app.get("/languages", response_model=list[LanguageOption])
def languages() -> list[LanguageOption]:
    return [LanguageOption(code=code, label=label) for code, label in SUPPORTED_LANGUAGES.items()]
