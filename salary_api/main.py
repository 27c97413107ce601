"""Application entrypoint.

Centralized settings + structured logging + request metrics + rate limiting.
"""
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
import logging
import json

from salary_api.core.settings import settings
from salary_api.middleware.rate_limit import limiter, _rate_limit_exceeded_handler
from salary_api.routes import salary_routes

# Extra fields attached by routes via logger.*(..., extra={...})
EXTRA_LOG_FIELDS = ("request_id", "error", "params")

class JsonFormatter(logging.Formatter):
    def format(self, record):
        log_record = {
            "level": record.levelname,
            "ts": record.created,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for field in EXTRA_LOG_FIELDS:
            if hasattr(record, field):
                log_record[field] = getattr(record, field)
        if record.exc_info:
            log_record["exc"] = self.formatException(record.exc_info)
        return json.dumps(log_record, default=str)

def configure_logging(level: str = settings.log_level, json_logs: bool = settings.json_logs):
    logging.basicConfig(
        level=level.upper(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    if json_logs:
        for handler in logging.getLogger().handlers:
            handler.setFormatter(JsonFormatter())

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name, version="v1", openapi_tags=[
    {"name": "salary", "description": "Glassdoor salary estimates"},
    {"name": "ops", "description": "Health and metrics"},
])

# Attach rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

REQUEST_COUNT = Counter("http_requests_total", "Total HTTP requests", ["method", "path", "status"])
REQUEST_LATENCY = Histogram("http_request_duration_seconds", "Request latency", ["path"])

@app.middleware("http")
async def metrics_middleware(request: Request, call_next):
    path = request.url.path
    method = request.method
    logger.info(f"{method} {request.url}")
    with REQUEST_LATENCY.labels(path=path).time():
        response = await call_next(request)
    REQUEST_COUNT.labels(method=method, path=path, status=response.status_code).inc()
    return response

app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in settings.cors_allow_origins.split(',')],
    allow_credentials=False,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Include routers
app.include_router(salary_routes.router, tags=["salary"])

@app.get("/health", tags=["ops"])
async def health():
    """Liveness probe."""
    return {"status": "ok", "version": app.version}

@app.get("/metrics", tags=["ops"])
def metrics():
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
