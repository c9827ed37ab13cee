from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager

from dotenv import load_dotenv

# 1) .env is loaded as early as possible
load_dotenv()

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse

from backend.app.api.applicants import router as applicants_router
from backend.app.api.health import router as health_router
from backend.app.api.progress import router as progress_router
from backend.app.api.reviewers import router as reviewers_router
from backend.app.api.reviews import router as reviews_router
from backend.app.config import settings
from backend.app.database import get_db_session, init_database
from backend.app.errors import register_exception_handlers

logger = logging.getLogger("backend.app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.AUTO_CREATE_TABLES:
        init_database()
    if settings.SEED_ON_STARTUP:
        from backend.tools.seed_demo import seed_sample_data

        with get_db_session() as db:
            seed_sample_data(db)
    logger.info("%s started for site %s", settings.SERVICE_NAME, settings.SITE_NAME)
    yield


app = FastAPI(
    title="Residency Review API",
    description="Applicant distribution, reviewer scoring and review progress for residency selection",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info("%s %s -> %s (%.1f ms)", request.method, request.url.path, response.status_code, elapsed_ms)
    return response


API_PREFIX = "/api"

# routers are mounted without a trailing '/'
app.include_router(applicants_router,
                   prefix=f"{API_PREFIX}/applicants", tags=["Applicants"])
app.include_router(reviewers_router,
                   prefix=f"{API_PREFIX}/reviewers",  tags=["Reviewers"])
app.include_router(reviews_router,
                   prefix=f"{API_PREFIX}/reviews",    tags=["Reviews"])
app.include_router(progress_router,
                   prefix=f"{API_PREFIX}/progress",   tags=["Progress"])
app.include_router(health_router, prefix=API_PREFIX, tags=["Health"])
app.include_router(health_router, include_in_schema=False)


# empty favicon so browsers don't fill the log with 404s
@app.get("/favicon.ico", include_in_schema=False)
async def favicon():
    return HTMLResponse(content="", status_code=204)


@app.get("/")
async def root():
    return {
        "message": "Residency Review API",
        "docs": "/docs",
        "health": f"{API_PREFIX}/health",
        "endpoints": {
            "applicants": f"{API_PREFIX}/applicants",
            "reviewers": f"{API_PREFIX}/reviewers",
            "reviews": f"{API_PREFIX}/reviews",
            "progress": f"{API_PREFIX}/progress",
        },
    }


# local run as a module
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
