from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from docversion.api.http import auth_router, documents_router, health_router, versions_router
from docversion.api.http.errors import register_exception_handlers
from docversion.core.config import settings
from docversion.core.db import init_models
from docversion.core.logging import configure_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    if settings.create_tables_on_startup:
        await init_models()
    yield


def create_app() -> FastAPI:
    app = FastAPI(
        title="DocVersion",
        description="Документы с историей версий, структурными диффами и восстановлением",
        version="1.0.0",
        lifespan=lifespan
    )

    # Настройка CORS для работы с frontend
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # В продакшене указать конкретные домены
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Подключаем роутеры
    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(documents_router)
    app.include_router(versions_router)

    return app


app = create_app()
