from typing import Mapping, Optional
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from .config import Settings, get_settings
from fastapi import APIRouter

# API routers
from .api.v1.models import router as models_router
from .api.v1.chat import router as chat_router
from .api.v1.providers import router as providers_router
from .core.logging import setup_logging
from .db.provider_keys import ProviderKeyStore
from .db.session import create_engine, init_db, make_session_factory
from .providers.base import ProviderAdapter
from .providers.mock import EchoProvider
from .providers.registry import ProviderRegistry
from .routing.credentials import CredentialResolver
from .routing.identifiers import ProviderTag
from .routing.service import ModelRouter


def create_app(
    settings: Optional[Settings] = None,
    registry_overrides: Optional[Mapping[ProviderTag, ProviderAdapter]] = None,
) -> FastAPI:
    # Setup logging early
    setup_logging()
    app = FastAPI(title="Praxis Model Router", version="0.1.0")

    settings = settings or get_settings()

    if registry_overrides is None and settings.mock_providers:
        echo = EchoProvider()
        registry_overrides = {tag: echo for tag in ProviderTag}

    engine = create_engine(settings.database_url)
    key_store = ProviderKeyStore(make_session_factory(engine))
    registry = ProviderRegistry(settings, overrides=registry_overrides)
    app.state.settings = settings
    app.state.key_store = key_store
    app.state.model_router = ModelRouter(settings, registry, CredentialResolver(settings, key_store))

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[str(o).rstrip("/") for o in settings.allowed_origins],
        # Robust local dev: allow both localhost and 127.0.0.1 on port 3000 via regex
        allow_origin_regex=r"https?://(localhost|127\.0\.0\.1):3000",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Mount API v1
    api_v1 = APIRouter()
    api_v1.include_router(models_router, prefix="/v1")
    api_v1.include_router(chat_router, prefix="/v1")
    api_v1.include_router(providers_router, prefix="/v1")
    app.include_router(api_v1, prefix="/api")

    @app.on_event("startup")
    async def _startup() -> None:
        # Ensure tables exist
        await init_db(engine)

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        await engine.dispose()

    @app.get("/healthz")
    def healthz():
        return {"status": "ok"}

    @app.get("/")
    def root():
        return {"service": "praxis", "version": "0.1.0"}

    return app


app = create_app()
