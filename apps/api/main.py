"""Catalog FastAPI application.

Run with:
    uvicorn apps.api.main:app --reload

Or through the configured HOST and PORT:
    python -m apps.api.main
"""

from __future__ import annotations

import logging
import sys
import uuid
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.engine import make_url

from .core.config import settings
from .core.errors import register_exception_handlers
from .core.responses import success_response
from .routers import auth, authors, books, categories

REQUEST_ID_HEADER = "x-request-id"

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Catalog API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def attach_request_id(request: Request, call_next):
    request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
    request.state.request_id = request_id
    response = await call_next(request)
    response.headers[REQUEST_ID_HEADER] = request_id
    return response


register_exception_handlers(app)

app.include_router(auth.router)
app.include_router(books.router)
app.include_router(authors.router)
app.include_router(categories.router)


@app.on_event("startup")
async def startup_event():
    logger.info("%s starting (environment=%s)", settings.SERVICE_NAME, settings.ENVIRONMENT)
    logger.info("CORS origins: %s", settings.CORS_ORIGINS)
    logger.info("Database: %s", make_url(settings.DATABASE_URL).render_as_string(hide_password=True))


@app.get("/health")
def health_check():
    return success_response({
        "status": "healthy",
        "service": settings.SERVICE_NAME,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    })


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "apps.api.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload="--reload" in sys.argv[1:],
    )
