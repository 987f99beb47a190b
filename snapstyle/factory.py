"""
FastAPI application factory.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .core.config import get_settings
from .models.session import InvalidTransition
from .services.session_store import SessionNotFound
from .api.router import router

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title="SnapStyle",
        description="Photo restyling studio: analyze, render, caption",
        version="1.0.0",
        debug=settings.debug,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
    )

    # ── CORS ─────────────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Startup ──────────────────────────────────────────────────
    @app.on_event("startup")
    async def on_startup():
        logging.basicConfig(
            level=getattr(logging, settings.log_level.upper(), logging.INFO),
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        )
        logger.info("Starting SnapStyle (env=%s)", settings.env)

        from .core.flags import get_flags
        flags = get_flags()
        logger.info(
            "Flags: credential_check=%s high_quality=%s captions=%s",
            flags.use_credential_check, flags.enable_high_quality, flags.enable_captions,
        )
        if not settings.gemini_api_key:
            logger.warning("GEMINI_API_KEY is not set: analysis and captions will use defaults")

        logger.info("SnapStyle is ready")

    # ── Shutdown ─────────────────────────────────────────────────
    @app.on_event("shutdown")
    async def on_shutdown():
        from .services.gemini import reset_client
        reset_client()
        logger.info("SnapStyle shut down")

    # ── Errors ───────────────────────────────────────────────────
    @app.exception_handler(SessionNotFound)
    async def session_not_found(request: Request, exc: SessionNotFound):
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"detail": f"Session not found: {exc.args[0]}"},
        )

    @app.exception_handler(InvalidTransition)
    async def invalid_transition(request: Request, exc: InvalidTransition):
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={"detail": str(exc), "phase": exc.phase.value},
        )

    # ── Routes ───────────────────────────────────────────────────
    app.include_router(router)

    return app
