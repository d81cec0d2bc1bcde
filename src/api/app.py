"""FastAPI application for the fundraising Q&A assistant.

Logging: Uses structured JSON logging for Grafana Loki.
Set LOG_FORMAT=pretty for development-friendly output.
"""

import os
from contextlib import asynccontextmanager

# Configure structured logging BEFORE importing anything else
from src.utils.logging import configure_logging, get_logger, log  # noqa: E402

configure_logging()

MODULE = "api"
logger = get_logger()

from fastapi import FastAPI, Request  # noqa: E402
from fastapi.exceptions import RequestValidationError  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402
from fastapi.responses import JSONResponse  # noqa: E402
from starlette.exceptions import HTTPException  # noqa: E402

from src.api.routes.ask import router as ask_router  # noqa: E402
from src.api.routes.health import router as health_router  # noqa: E402
from src.db.history import HistoryStore  # noqa: E402
from src.db.session import Database  # noqa: E402
from src.knowledge.loader import KnowledgeBase  # noqa: E402
from src.llm.invoker import AnswerInvoker  # noqa: E402
from src.llm.providers import GeminiProvider, OpenRouterProvider  # noqa: E402

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]


def _warn_missing_config(
    primary: OpenRouterProvider,
    secondary: GeminiProvider,
    database: Database,
) -> None:
    if not primary.is_configured:
        log.warning(logger, MODULE, "config_missing", "OPENROUTER_API_KEY is not set")
    if not secondary.is_configured:
        log.warning(logger, MODULE, "config_missing",
                    "GOOGLE_AI_API_KEY is not set (no fallback provider)")
    if not database.configured:
        log.warning(logger, MODULE, "config_missing",
                    "DATABASE_URL is not set, history features are disabled")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup/shutdown."""
    knowledge = KnowledgeBase()
    knowledge.load()

    primary = OpenRouterProvider()
    secondary = GeminiProvider()
    database = Database()
    _warn_missing_config(primary, secondary, database)

    app.state.invoker = AnswerInvoker(primary, secondary, knowledge)
    app.state.database = database
    app.state.history = HistoryStore(database)
    log.info(logger, MODULE, "startup_done", "Application ready",
             primary=primary.model, secondary=secondary.model)

    yield

    # Cleanup
    await database.dispose()
    log.info(logger, MODULE, "shutdown", "Application shutdown complete")


app = FastAPI(
    title="Fundraising Q&A",
    description="Question answering over a startup fundraising guide",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Every error body has the same shape as an error answer so the UI can
# render it the same way.

@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"type": "error", "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    messages = "; ".join(str(err.get("msg", "invalid value")) for err in exc.errors())
    log.info(logger, MODULE, "bad_request", "Request body rejected",
             path=request.url.path, errors=messages)
    return JSONResponse(
        status_code=400,
        content={"type": "error", "message": messages or "Invalid request."},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    log.error(logger, MODULE, "unhandled", "Unhandled error",
              error=str(exc), error_type=type(exc).__name__, path=request.url.path)
    return JSONResponse(
        status_code=500,
        content={"type": "error", "message": "Internal Server Error"},
    )


app.include_router(health_router)
app.include_router(ask_router, prefix="/api", tags=["ask"])
