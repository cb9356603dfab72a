"""
Main FastAPI application entry point.
"""
from contextlib import asynccontextmanager
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

from qbank_sharing.api.auth import router as auth_router
from qbank_sharing.api.banks import router as banks_router
from qbank_sharing.api.courses import question_router, router as courses_router
from qbank_sharing.api.fragments import router as fragments_router
from qbank_sharing.api.navigation import router as navigation_router
from qbank_sharing.core.config import get_settings
from qbank_sharing.core.database import SessionLocal, init_db
from qbank_sharing.core.exceptions import QBankError
from qbank_sharing.core.logging_setup import configure_logging
from qbank_sharing.services.plugins import PluginTypeRegistry

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    """
    if getattr(app.state, "plugin_registry", None) is None:
        logger.info("Starting QBank Sharing API...")
        init_db()
        with SessionLocal() as db:
            app.state.plugin_registry = PluginTypeRegistry.build(db)
    yield
    logger.info("Shutting down QBank Sharing API...")


async def qbank_error_handler(request: Request, exc: QBankError):
    logger.warning("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


def create_app(registry: Optional[PluginTypeRegistry] = None) -> FastAPI:
    settings = get_settings()
    configure_logging(settings)

    if settings.SENTRY_DSN:
        sentry_sdk.init(
            dsn=settings.SENTRY_DSN,
            environment=settings.ENVIRONMENT,
            integrations=[FastApiIntegration(transaction_style="endpoint"), SqlalchemyIntegration()],
            traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
        )

    app = FastAPI(title=settings.APP_NAME, version=settings.APP_VERSION, lifespan=lifespan)
    app.state.plugin_registry = registry
    app.add_middleware(CORSMiddleware, allow_origins=settings.CORS_ORIGINS, allow_credentials=True, allow_methods=["*"], allow_headers=["*"])
    app.add_exception_handler(QBankError, qbank_error_handler)

    prefix = settings.API_V1_PREFIX
    app.include_router(auth_router, prefix=f"{prefix}/auth", tags=["auth"])
    app.include_router(banks_router, prefix=f"{prefix}/banks", tags=["banks"])
    app.include_router(courses_router, prefix=f"{prefix}/courses", tags=["courses"])
    app.include_router(navigation_router, prefix=f"{prefix}/navigation", tags=["navigation"])
    app.include_router(question_router, prefix="/question", tags=["question"])
    app.include_router(fragments_router, prefix="/fragment", tags=["fragments"])

    @app.get("/health")
    def health(): return {"status": "ok"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "qbank_sharing.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.RELOAD,
        log_level=settings.LOG_LEVEL.lower(),
    )
