# archeval/main.py
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
import os
import time
import uuid

from archeval.config import API_VERSION, ADMIN_PASSWORD_ENV, LOG_DIR
from archeval.api import routes
from archeval.engine.decision import InvalidAnswersError
from archeval.observability.logger import (
    setup_logging,
    get_logger,
    set_request_id,
    reset_request_id,
)
from archeval.observability.metrics import metrics_tracker
from archeval.observability.posthog_client import posthog_client

# Logging before anything else emits records
setup_logging(log_level=os.getenv("ARCHEVAL_LOG_LEVEL", "INFO"))
logger = get_logger(__name__)

app = FastAPI(
    title="ArchEval API",
    description="SLM vs LLM architecture decision assessment",
    version=API_VERSION,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """
    Tag the request with an id, time it and count it.

    The id is bound to the logging context, so the background
    narrative step logs under the same request_id.
    """

    request_id = str(uuid.uuid4())
    request.state.request_id = request_id
    token = set_request_id(request_id)

    posthog_client.identify_request(
        distinct_id=request_id,
        properties={"entry_point": request.url.path, "method": request.method},
    )

    route = f"{request.method} {request.url.path}"
    start_time = time.time()

    try:
        response = await call_next(request)

    except Exception as e:

        metrics_tracker.record_failure()

        posthog_client.track_error(
            distinct_id=request_id,
            error_type=type(e).__name__,
            error_message=str(e),
            endpoint=request.url.path,
        )

        logger.error(
            "request_failed",
            extra={
                "route": route,
                "latency_seconds": round(time.time() - start_time, 3),
                "error_type": type(e).__name__,
            },
            exc_info=True,
        )

        raise

    finally:
        reset_request_id(token)

    latency = time.time() - start_time

    metrics_tracker.record_success(latency)

    logger.info(
        "request_completed",
        extra={
            "request_id": request_id,
            "route": route,
            "status_code": response.status_code,
            "latency_seconds": round(latency, 3),
            "client_ip": request.client.host if request.client else None,
        },
    )

    return response


app.include_router(routes.router)


@app.on_event("startup")
async def startup_event():

    routes.load_submission_history()

    missing = [
        name
        for name, configured in (
            ("llm", routes.llm_client.available),
            ("store", routes.submission_store.configured),
            ("admin", bool(os.getenv(ADMIN_PASSWORD_ENV))),
            ("analytics", posthog_client.enabled),
        )
        if not configured
    ]

    logger.info(
        "application_startup",
        extra={"version": API_VERSION, "log_dir": LOG_DIR},
    )

    if missing:
        # Each of these degrades instead of failing
        logger.warning(
            "running_degraded",
            extra={
                "disabled": missing,
                "warning_detail": (
                    "llm: fallback explanation text, no scenarios; "
                    "store: mock history, nothing persisted; "
                    f"admin: set {ADMIN_PASSWORD_ENV} to open /submissions"
                ),
            },
        )


@app.on_event("shutdown")
async def shutdown_event():

    logger.info("application_shutdown")


@app.exception_handler(InvalidAnswersError)
async def invalid_answers_handler(request: Request, exc: InvalidAnswersError):

    logger.warning(
        "invalid_answers",
        extra={"path": request.url.path, "problems": exc.problems},
    )

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": exc.problems},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):

    request_id = getattr(request.state, "request_id", "unknown")

    logger.error(
        "unhandled_exception",
        extra={
            "request_id": request_id,
            "path": request.url.path,
            "error_type": type(exc).__name__,
        },
        exc_info=True,
    )

    posthog_client.track_error(
        distinct_id=request_id,
        error_type=type(exc).__name__,
        error_message=str(exc),
        endpoint=request.url.path,
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": "An internal error occurred. Please try again.",
            "request_id": request_id,
        },
    )


@app.get("/")
async def root():

    return {
        "service": "ArchEval API",
        "version": API_VERSION,
        "docs": "/docs",
        "questions": "/questions",
        "assess": "/assessments",
        "health": "/health",
    }
