"""IdeaForge Backend — FastAPI application entry point."""

import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from backend.ai.analyst import IdeaAnalyst
from backend.database import SessionLocal, init_db
from backend.middleware.rate_limit import RateLimitMiddleware
from backend.routes import admin, assistant, auth, ideas
from ideaengine.errors import IdeaForgeError, NotFound, ValidationError

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

_STATUS_KINDS = {
    400: "ValidationError",
    401: "InvalidToken",
    403: "Forbidden",
    404: "NotFound",
    405: "MethodNotAllowed",
    429: "RateLimitExceeded",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown."""
    if app.state.create_tables:
        init_db()
    logger.info("IdeaForge API started")
    yield
    logger.info("IdeaForge API shutting down")


async def ideaforge_error_handler(request: Request, exc: IdeaForgeError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else first.get("msg")
    else:
        message = None
    return JSONResponse(status_code=400, content=ValidationError(message).to_dict())


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404 and exc.detail == "Not Found":
        content = NotFound("Route not found").to_dict()
    else:
        content = {"error": _STATUS_KINDS.get(exc.status_code, "InternalError"), "message": str(exc.detail)}
    return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content=IdeaForgeError().to_dict())


def create_app(
    analyst: IdeaAnalyst = None,
    session_factory=SessionLocal,
    create_tables: bool = True,
    requests_per_window: int = 100,
    window_seconds: float = 15 * 60,
    ai_requests_per_window: int = 10,
    ai_window_seconds: float = 60,
) -> FastAPI:
    app = FastAPI(
        title="IdeaForge API",
        description="Collaborative idea sharing with AI-assisted analysis",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.analyst = analyst or IdeaAnalyst()
    app.state.session_factory = session_factory
    app.state.create_tables = create_tables

    app.add_exception_handler(IdeaForgeError, ideaforge_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    # CORS: allow the configured frontend plus local dev origins
    _frontend_url = os.getenv("FRONTEND_URL")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[_frontend_url] if _frontend_url else [],
        allow_origin_regex=r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Rate limiting: general budget plus a stricter budget for AI routes
    app.add_middleware(
        RateLimitMiddleware,
        requests_per_window=requests_per_window,
        window_seconds=window_seconds,
        ai_requests_per_window=ai_requests_per_window,
        ai_window_seconds=ai_window_seconds,
    )

    # Register route modules
    app.include_router(auth.router, prefix="/api", tags=["Auth"])
    app.include_router(ideas.router, prefix="/api", tags=["Ideas"])
    app.include_router(assistant.router, prefix="/api", tags=["AI Assistant"])
    app.include_router(admin.router, prefix="/api", tags=["Admin"])

    @app.get("/api/health")
    async def health_check():
        return {"status": "healthy", "service": "ideaforge-backend"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("backend.main:app", host="0.0.0.0", port=int(os.getenv("PORT", "8000")), reload=os.getenv("ENV") == "dev")
