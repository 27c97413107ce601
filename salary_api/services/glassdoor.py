# services/glassdoor.py

"""Glassdoor upstream lookups.

Three calls, always made in this order by the salary service:

1. company search  (plain GET, cached per company name)
2. job-title autocomplete  (GraphQL, cached per job title)
3. salary aggregation  (GraphQL, never cached here)

Company and job-title results are cached only when non-empty, so a miss
upstream is retried on the next request.
"""
import logging
from datetime import timedelta
from typing import Any, Dict, List, Optional

import requests

from salary_api.core.cache import CacheStore
from salary_api.core.errors import (
    ConfigurationError,
    UpstreamPayloadError,
    UpstreamTransportError,
)

logger = logging.getLogger(__name__)

COMPANY_NAMESPACE = "company"
JOB_NAMESPACE = "job"

JOB_TITLE_QUERY = """query jobTitleAutocomplete($input: String!, $enableUFJT: Boolean) {
  jobTitleAutocomplete(term: $input, returnUserFriendlyJobTitle: $enableUFJT) {
    id
    label
    __typename
  }
}
"""

_PERCENTILES = """{
        percentiles {
          ident
          value
          __typename
        }
        __typename
      }"""

SALARY_QUERY = f"""query EiSalariesGraphQuery($employerId: Int!, $stateId: Int, $countryId: Int, $cityId: Int, $metroId: Int, $jobTitle: String!, $jobTitleId: Int!, $page: Int!, $sgoc: Int, $sort: SalariesSortOrder, $payPeriod: PayPeriodEnum, $enableUfjt: Boolean, $pageSize: Int!) {{
  aggregatedSalaryEstimates(
    aggregatedSalaryEstimatesInput: {{employer: {{id: $employerId}}, jobTitle: {{text: $jobTitle}}, location: {{cityId: $cityId, metroId: $metroId, stateId: $stateId, countryId: $countryId}}, viewAsPayPeriodId: $payPeriod, sort: $sort, goc: {{sgocId: $sgoc}}, page: {{num: $page, size: $pageSize}}, enableUfjt: $enableUfjt}}
  ) {{
    numPages
    jobTitleCount
    salaryCount
    mostRecent
    estimateSourceName
    results {{
      currency {{
        code
        __typename
      }}
      jobTitle {{
        id
        text
        __typename
      }}
      salaryCount
      basePayStatistics {_PERCENTILES}
      totalAdditionalPayStatistics {_PERCENTILES}
      totalPayStatistics {_PERCENTILES}
      __typename
    }}
    __typename
  }}
  jobTitle(id: $jobTitleId) {{
    mgocId
    __typename
  }}
}}
"""


class GlassdoorClient:
    def __init__(
        self,
        cache: CacheStore,
        base_url: Optional[str] = None,
        graph_url: Optional[str] = None,
        graph_headers: Optional[Dict[str, str]] = None,
        country_id: int = 115,
        lookup_ttl: timedelta = timedelta(days=30),
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.cache = cache
        self.base_url = base_url
        self.graph_url = graph_url
        self.graph_headers = graph_headers
        self.country_id = country_id
        self.lookup_ttl = lookup_ttl
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings, cache: CacheStore, session: Optional[requests.Session] = None):
        return cls(
            cache,
            base_url=settings.glassdoor_base_url,
            graph_url=settings.glassdoor_graph_url,
            graph_headers=settings.glassdoor_graph_url_headers,
            country_id=settings.salary_country_id,
            lookup_ttl=timedelta(days=settings.lookup_cache_ttl_days),
            timeout=settings.upstream_timeout_seconds,
            session=session,
        )

    def require_config(self):
        """Raise ConfigurationError unless every upstream endpoint is configured.

        Checked before the first outbound call of a lookup so a half-configured
        client never reaches the network.
        """
        if not self.base_url:
            raise ConfigurationError("Glassdoor base URL is not configured")
        if not self.graph_url:
            raise ConfigurationError("Glassdoor graph URL is not configured")
        if not self.graph_headers:
            raise ConfigurationError("Glassdoor graph URL headers are not configured")

    # --- Lookups ---

    def fetch_companies(self, company_name: str) -> List[Dict[str, Any]]:
        """Search employers by name. Returns the raw employer records, best match first."""
        cache_key = self.cache.make_key(COMPANY_NAMESPACE, company_name)
        cached = self.cache.get(cache_key)
        if cached:
            logger.info(f"Using cached company data for {company_name}")
            return cached

        logger.info(f"Fetching fresh company data for {company_name}")
        self.require_config()
        payload = self._send("GET", self.base_url, params={"company": company_name})
        try:
            companies = payload["json"]["response"]["employers"] or []
        except (KeyError, TypeError) as e:
            raise UpstreamPayloadError(f"Unexpected company search payload: missing {e}") from e
        if not isinstance(companies, list):
            raise UpstreamPayloadError("Unexpected company search payload: employers is not a list")

        if companies:
            self.cache.set(cache_key, companies, self.lookup_ttl)
        return companies

    def fetch_job_titles(self, job_title: str) -> List[Dict[str, Any]]:
        """Autocomplete a free-text job title into Glassdoor job-title records."""
        cache_key = self.cache.make_key(JOB_NAMESPACE, job_title)
        cached = self.cache.get(cache_key)
        if cached:
            logger.info(f"Using cached job title data for {job_title}")
            return cached

        logger.info(f"Fetching fresh job title data for {job_title}")
        data = self._graph_query(
            "jobTitleAutocomplete",
            {"input": job_title, "enableUFJT": False},
            JOB_TITLE_QUERY,
        )
        jobs = data.get("jobTitleAutocomplete") or []

        if jobs:
            self.cache.set(cache_key, jobs, self.lookup_ttl)
        return jobs

    def fetch_salaries(self, company_id: int, job_id: int, job_title: str) -> List[Dict[str, Any]]:
        """Aggregated annual pay estimates for one employer and job title (live call)."""
        logger.info(f"Fetching salary data for employer {company_id}, job title {job_id}")
        data = self._graph_query(
            "EiSalariesGraphQuery",
            {
                "employerId": company_id,
                "countryId": self.country_id,
                "jobTitle": job_title,
                "jobTitleId": job_id,
                "page": 1,
                "pageSize": 1,
                "sort": "UGC_SALARY_COUNT_DESC",
                "payPeriod": "ANNUAL",
                "enableUfjt": False,
            },
            SALARY_QUERY,
        )
        estimates = data.get("aggregatedSalaryEstimates") or {}
        return estimates.get("results") or []

    # --- Transport ---

    def _graph_query(self, operation: str, variables: Dict[str, Any], query: str) -> Dict[str, Any]:
        """Send a single-operation batch and return the ``data`` of its first element."""
        self.require_config()
        body = [{"operationName": operation, "variables": variables, "query": query}]
        payload = self._send("POST", self.graph_url, json=body, headers=self.graph_headers)

        if not isinstance(payload, list):
            raise UpstreamPayloadError(f"{operation}: expected a batched (list) response")
        if not payload:
            return {}
        first = payload[0]
        if not isinstance(first, dict):
            raise UpstreamPayloadError(f"{operation}: unexpected batch element")
        data = first.get("data")
        if data is None and first.get("errors"):
            messages = "; ".join(
                str(err.get("message", err)) if isinstance(err, dict) else str(err)
                for err in first["errors"]
            )
            raise UpstreamPayloadError(f"{operation} returned errors: {messages}")
        return data or {}

    def _send(self, method: str, url: str, **kwargs) -> Any:
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise UpstreamTransportError(f"{method} request to Glassdoor failed: {e}") from e

        if not response.ok:
            raise UpstreamTransportError(
                f"API request failed with status {response.status_code}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamPayloadError(f"Glassdoor returned a non-JSON body: {e}") from e
