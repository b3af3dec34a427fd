from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from academy.api.v1.auth.router import router as auth_router
from academy.api.v1.sessions.router import router as sessions_router
from academy.core.config import settings
from academy.core.error_handlers import register_exception_handlers
from academy.core.logging_config import configure_logging


def create_app() -> FastAPI:
    configure_logging(settings.log_level)
    app = FastAPI(title="Academy Sessions Backend")

    # CORS: allow the faculty frontend to call this API
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Routers
    app.include_router(auth_router)
    app.include_router(sessions_router)

    return app


app = create_app()
