# services/salary_service.py

import logging
from datetime import datetime, timedelta, timezone
import threading
from typing import Any, Dict, List, Optional

from salary_api.core.cache import CacheStore
from salary_api.core.errors import NoMatchError
from salary_api.core.settings import settings
from salary_api.services.glassdoor import GlassdoorClient
from salary_api.utils.formatting import format_name, format_salary

logger = logging.getLogger(__name__)

SALARY_NAMESPACE = "salary"
SOURCE_NAME = "Glassdoor"


def _percentile(percentiles: List[Dict[str, Any]], ident: str) -> Optional[float]:
    """Value of the percentile whose ``ident`` matches (e.g. "P50"), or None."""
    for item in percentiles:
        if item.get("ident") == ident:
            return item.get("value")
    return None


class SalaryService:
    """Company -> job title -> salary pipeline with a cache on the composed result."""

    def __init__(
        self,
        client: GlassdoorClient,
        cache: CacheStore,
        result_ttl: timedelta = timedelta(days=15),
    ):
        self.client = client
        self.cache = cache
        self.result_ttl = result_ttl

    def get_salary_info(self, company_name: str, job_title: str) -> Dict[str, Any]:
        formatted_company = format_name(company_name)
        formatted_job = format_name(job_title)

        cache_key = self.cache.make_key(SALARY_NAMESPACE, formatted_company, formatted_job)
        cached = self.cache.get(cache_key)
        if cached:
            logger.info(f"Using cached salary data for {company_name} - {job_title}")
            return cached

        logger.info(f"Fetching salary data for {company_name} - {job_title}")

        # Step 1: company
        companies = self.client.fetch_companies(formatted_company)
        if not companies:
            raise NoMatchError(f"No company found matching '{company_name}'")
        company = companies[0]
        company_id = company.get("id")
        company_display_name = company.get("name")
        company_rating = company.get("overallRating")

        # Step 2: job title
        jobs = self.client.fetch_job_titles(formatted_job)
        if not jobs:
            raise NoMatchError(f"No job titles found matching '{job_title}'")
        job_id = jobs[0].get("id")
        job_name = jobs[0].get("label")

        # Step 3: salary; an empty result still produces a (blank) estimate
        salaries = self.client.fetch_salaries(company_id, job_id, job_name)
        if not salaries:
            logger.warning(f"No salary data found for {company_display_name} and {job_name}")
        salary = salaries[0] if salaries else {}

        currency = (salary.get("currency") or {}).get("code")
        percentiles = (salary.get("totalPayStatistics") or {}).get("percentiles") or []
        low = format_salary(_percentile(percentiles, "P25"), currency)
        median = format_salary(_percentile(percentiles, "P50"), currency)
        high = format_salary(_percentile(percentiles, "P75"), currency)

        result = {
            "company": {
                "name": company_display_name,
                "rating": company_rating,
            },
            "job": {
                "title": job_name,
                "salaryCount": salary.get("salaryCount") or 0,
            },
            "salary": {
                "currency": currency,
                "low": low,
                "median": median,
                "high": high,
                "range": f"{low} - {high}",
            },
            "source": SOURCE_NAME,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

        self.cache.set(cache_key, result, self.result_ttl)
        return result


_service: Optional[SalaryService] = None
_service_lock = threading.Lock()


def get_salary_service() -> SalaryService:
    """FastAPI dependency: the process-wide service and its cache, built on first use."""
    global _service
    with _service_lock:
        if _service is None:
            _service = _build_salary_service()
    return _service


def _build_salary_service() -> SalaryService:
    cache = CacheStore(
        default_ttl=settings.cache_default_ttl_seconds,
        max_entries=settings.cache_max_entries,
    )
    client = GlassdoorClient.from_settings(settings, cache)
    return SalaryService(client, cache, result_ttl=timedelta(days=settings.salary_cache_ttl_days))
