"""
FastAPI REST API for Jobly.

Companies and jobs can be listed and read by anyone; creating, patching and
deleting them requires an admin token. Listing endpoints accept validated
filters that are turned into parameterized WHERE clauses by sql_db.query_builder.
"""

import uvicorn
from fastapi import Depends, FastAPI, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from typing import Annotated, Optional
from contextlib import asynccontextmanager
import redis.asyncio as redis

from api.auth import ensure_admin
from api.cache_redis import (
    init_redis,
    close_redis,
    cache_get_company,
    cache_set_company,
    cache_invalidate_company,
    cache_get_job,
    cache_set_job,
    cache_invalidate_job,
)
from api.companies import (
    create_company,
    find_all_companies,
    get_company,
    update_company,
    remove_company,
)
from api.db_postgres import init_db, close_db, get_db, ping
from api.errors import JoblyError
from api.jobs import create_job, find_all_jobs, get_job, update_job, remove_job
from api.metrics import setup_metrics, update_service_health
from api.schemas import (
    CompanyDetailResponse,
    CompanyListResponse,
    CompanyNew,
    CompanyResponse,
    CompanySearchQuery,
    CompanyUpdate,
    DeletedResponse,
    HealthResponse,
    JobListResponse,
    JobNew,
    JobResponse,
    JobSearchQuery,
    JobUpdate,
)
from config.settings import API_CONFIG
from sql_db.exceptions import InvalidArgumentError
from logging_config.logger import get_logger

logger = get_logger(__name__)

# Global state managed via lifespan
redis_client: Optional[redis.Redis] = None


# Application lifespan management

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Open the database pool and Redis cache on startup; close both on shutdown.
    """
    global redis_client

    try:
        logger.info("Starting Jobly API")

        await init_db()
        logger.info("Database initialized")

        redis_client = await init_redis()
        logger.info("Redis cache initialized")

        logger.info("Application startup complete")

    except Exception as e:
        logger.error(f"Failed to initialize application: {e}")
        raise

    yield

    try:
        logger.info("Shutting down Jobly API")

        if redis_client:
            await close_redis(redis_client)
            logger.info("Redis connections closed")

        await close_db()
        logger.info("Application shutdown complete")

    except Exception as e:
        logger.error(f"Error during shutdown: {e}")


# FastAPI app initialization

app = FastAPI(
    title=API_CONFIG["title"],
    description="REST API for companies and the jobs they list.",
    version=API_CONFIG["version"],
    lifespan=lifespan,
)

setup_metrics(app)
logger.info("Prometheus metrics instrumentation configured")


# Error handlers

def _error_response(status_code: int, message) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": {"message": message, "status": status_code}},
    )


@app.exception_handler(JoblyError)
async def jobly_error_handler(request: Request, exc: JoblyError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return _error_response(exc.status_code, exc.message)


@app.exception_handler(InvalidArgumentError)
async def invalid_argument_handler(request: Request, exc: InvalidArgumentError):
    return _error_response(status.HTTP_400_BAD_REQUEST, str(exc))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Schema failures are reported as 400 with one message per problem."""
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part not in ("body", "query"))
        messages.append(f"{location}: {error['msg']}" if location else error["msg"])
    logger.debug(f"Rejected {request.method} {request.url.path}: {messages}")
    return _error_response(status.HTTP_400_BAD_REQUEST, messages)


# Dependencies

async def db_connection():
    """Yield a pooled database connection for one request."""
    async with get_db() as db:
        yield db


# API Endpoints

@app.get("/", response_model=dict)
async def root():
    """Root endpoint with API information."""
    return {
        "service": API_CONFIG["title"],
        "version": API_CONFIG["version"],
        "endpoints": {
            "health": "/health",
            "metrics": "/metrics",
            "companies": "/companies",
            "jobs": "/jobs",
        }
    }


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Report database and cache connectivity and update the health gauges.
    """
    health_status = {
        "status": "healthy",
        "database": "unknown",
        "cache": "unknown",
    }

    try:
        await ping()
        health_status["database"] = "connected"
        update_service_health("database", True)
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        health_status["database"] = "error"
        health_status["status"] = "degraded"
        update_service_health("database", False)

    try:
        if redis_client:
            await redis_client.ping()  # type: ignore
            health_status["cache"] = "connected"
            update_service_health("cache", True)
        else:
            health_status["cache"] = "not_initialized"
            health_status["status"] = "degraded"
            update_service_health("cache", False)
    except Exception as e:
        logger.error(f"Redis health check failed: {e}")
        health_status["cache"] = "error"
        health_status["status"] = "degraded"
        update_service_health("cache", False)

    return health_status


# ---------- Companies ----------

@app.post(
    "/companies",
    response_model=CompanyResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(ensure_admin)],
)
async def post_company(body: CompanyNew, db=Depends(db_connection)):
    """
    Create a company.

    Authorization required: admin
    """
    company = await create_company(db, body.model_dump())
    return {"company": company}


@app.get("/companies", response_model=CompanyListResponse)
async def list_companies(
    query: Annotated[CompanySearchQuery, Query()],
    db=Depends(db_connection),
):
    """
    List companies, ordered by name.

    Optional filters: nameLike (case-insensitive partial match),
    minEmployees, maxEmployees.
    """
    companies = await find_all_companies(db, query.to_filter())
    return {"companies": companies}


@app.get("/companies/{handle}", response_model=CompanyDetailResponse)
async def read_company(handle: str, db=Depends(db_connection)):
    """Get a company with its jobs."""
    if redis_client:
        cached = await cache_get_company(redis_client, handle)
        if cached:
            return {"company": cached}

    company = await get_company(db, handle)

    if redis_client:
        await cache_set_company(redis_client, company)
    return {"company": company}


@app.patch(
    "/companies/{handle}",
    response_model=CompanyResponse,
    dependencies=[Depends(ensure_admin)],
)
async def patch_company(handle: str, body: CompanyUpdate, db=Depends(db_connection)):
    """
    Update some of a company's fields. The handle cannot change.

    Authorization required: admin
    """
    company = await update_company(db, handle, body.changes())

    if redis_client:
        await cache_invalidate_company(redis_client, handle)
    return {"company": company}


@app.delete(
    "/companies/{handle}",
    response_model=DeletedResponse,
    dependencies=[Depends(ensure_admin)],
)
async def delete_company(handle: str, db=Depends(db_connection)):
    """
    Delete a company and its jobs.

    Authorization required: admin
    """
    removed_titles = await remove_company(db, handle)

    if redis_client:
        await cache_invalidate_company(redis_client, handle)
        for title in removed_titles:
            await cache_invalidate_job(redis_client, title)
    return {"deleted": handle}


# ---------- Jobs ----------

@app.post(
    "/jobs",
    response_model=JobResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(ensure_admin)],
)
async def post_job(body: JobNew, db=Depends(db_connection)):
    """
    Create a job for an existing company.

    Authorization required: admin
    """
    job = await create_job(db, body.model_dump())

    if redis_client:
        await cache_invalidate_company(redis_client, job["companyHandle"])
        await cache_invalidate_job(redis_client, job["title"])
    return {"job": job}


@app.get("/jobs", response_model=JobListResponse)
async def list_jobs(
    query: Annotated[JobSearchQuery, Query()],
    db=Depends(db_connection),
):
    """
    List jobs, ordered by title.

    Optional filters: title (case-insensitive partial match), minSalary,
    hasEquity (true keeps only jobs with non-zero equity; false is ignored).
    """
    jobs = await find_all_jobs(db, query.to_filter())
    return {"jobs": jobs}


@app.get("/jobs/{title}", response_model=JobResponse)
async def read_job(title: str, db=Depends(db_connection)):
    """Get a job by title."""
    if redis_client:
        cached = await cache_get_job(redis_client, title)
        if cached:
            return {"job": cached}

    job = await get_job(db, title)

    if redis_client:
        await cache_set_job(redis_client, job)
    return {"job": job}


@app.patch(
    "/jobs/{title}",
    response_model=JobResponse,
    dependencies=[Depends(ensure_admin)],
)
async def patch_job(title: str, body: JobUpdate, db=Depends(db_connection)):
    """
    Update some of a job's fields (title, salary, equity).

    Every job with this title changes; the response carries the first one
    by company handle.

    Authorization required: admin
    """
    updated = await update_job(db, title, body.changes())
    job = updated[0]

    if redis_client:
        await cache_invalidate_job(redis_client, title)
        if job["title"] != title:
            await cache_invalidate_job(redis_client, job["title"])
        for handle in dict.fromkeys(row["companyHandle"] for row in updated):
            await cache_invalidate_company(redis_client, handle)
    return {"job": job}


@app.delete(
    "/jobs/{title}",
    response_model=DeletedResponse,
    dependencies=[Depends(ensure_admin)],
)
async def delete_job(title: str, db=Depends(db_connection)):
    """
    Delete every job with this title.

    Authorization required: admin
    """
    removed = await remove_job(db, title)

    if redis_client:
        await cache_invalidate_job(redis_client, title)
        for handle in dict.fromkeys(row["companyHandle"] for row in removed):
            await cache_invalidate_company(redis_client, handle)
    return {"deleted": title}


if __name__ == "__main__":
    uvicorn.run("api.api:app", host=API_CONFIG["host"], port=API_CONFIG["port"], reload=True)
