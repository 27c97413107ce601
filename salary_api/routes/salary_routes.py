# salary_api/routes/salary_routes.py
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from datetime import datetime, timezone
import logging
import time
import uuid

from salary_api.schemas import CacheStats, ErrorResponse, SalaryResponse
from salary_api.services.salary_service import SalaryService, get_salary_service

router = APIRouter()
logger = logging.getLogger(__name__)

DEFAULT_LOCATION = "All locations"
# Every verb is routed here so that non-GET requests get the JSON 404 below instead of a 405.
ROUTED_METHODS = ["GET", "HEAD", "OPTIONS", "POST", "PUT", "PATCH", "DELETE"]


def _error(status_code: int, **fields) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(**fields).model_dump(exclude_none=True))


def _salary_body(data: dict, location: str | None, request_time_ms: int) -> SalaryResponse:
    salary_count = data["job"]["salaryCount"]
    return SalaryResponse(
        jobTitle=data["job"]["title"],
        company=data["company"]["name"],
        companyRating=data["company"]["rating"],
        location=location or DEFAULT_LOCATION,
        averageSalary=data["salary"]["median"],
        salaryRange=data["salary"]["range"],
        salaryCount=salary_count,
        source=f"{data['source']} ({salary_count} salary reports)",
        timestamp=datetime.now(timezone.utc).isoformat(),
        requestTimeMs=request_time_ms,
    )


@router.api_route(
    "/",
    methods=ROUTED_METHODS,
    response_model=SalaryResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def find_glassdoor_salary(request: Request, service: SalaryService = Depends(get_salary_service)):
    """
    Salary estimate for ``companyName`` + ``jobTitle``.
    Optional ``location`` is echoed back; ``showCacheStats=true`` attaches cache statistics.
    """
    if request.method != "GET":
        return _error(404, error="NOT FOUND", message="API Not Found")

    params = request.query_params
    company_name = params.get("companyName")
    job_title = params.get("jobTitle")

    if not job_title:
        return _error(400, error="Missing required parameter: jobTitle")
    if not company_name:
        return _error(400, error="Missing required parameter: companyName")

    start = time.perf_counter()
    try:
        data = service.get_salary_info(company_name, job_title)
        request_time_ms = int((time.perf_counter() - start) * 1000)
        body = _salary_body(data, params.get("location"), request_time_ms)
        if params.get("showCacheStats") == "true":
            body.cacheStats = CacheStats(**service.cache.stats())
        content = body.model_dump()
        if body.cacheStats is None:
            content.pop("cacheStats")
        return JSONResponse(status_code=200, content=content)
    except Exception as e:
        request_id = uuid.uuid4().hex
        logger.exception(
            "Error processing salary request",
            extra={
                "request_id": request_id,
                "error": str(e),
                "params": {
                    "companyName": company_name,
                    "jobTitle": job_title,
                    "method": request.method,
                    "path": request.url.path,
                },
            },
        )
        # Masked response: the underlying error stays in the logs
        return _error(
            500,
            error="Internal Server Error",
            message="Unable to retrieve salary data. Please try again later.",
            requestId=request_id,
            timestamp=datetime.now(timezone.utc).isoformat(),
        )
