import pytest
import requests

from salary_api.core.cache import CacheStore
from salary_api.services.glassdoor import GlassdoorClient
from salary_api.services.salary_service import SalaryService


class FakeClock:
    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=None):
        self.status_code = status_code
        self._payload = payload
        self._text = text

    @property
    def ok(self):
        return 200 <= self.status_code < 400

    def json(self):
        if self._text is not None:
            raise requests.JSONDecodeError("Expecting value", self._text, 0)
        return self._payload


class FakeSession:
    """Stands in for requests.Session; answers by URL / GraphQL operation name."""

    def __init__(self, employers=None, job_titles=None, salaries=None):
        self.employers = employers if employers is not None else []
        self.job_titles = job_titles if job_titles is not None else []
        self.salaries = salaries if salaries is not None else []
        self.overrides = {}
        self.calls = []

    def request(self, method, url, timeout=None, **kwargs):
        operation = "companies" if method == "GET" else kwargs["json"][0]["operationName"]
        self.calls.append((operation, kwargs))
        if operation in self.overrides:
            override = self.overrides[operation]
            if isinstance(override, Exception):
                raise override
            return override
        if operation == "companies":
            return FakeResponse(payload={"json": {"response": {"employers": self.employers}}})
        if operation == "jobTitleAutocomplete":
            return FakeResponse(payload=[{"data": {"jobTitleAutocomplete": self.job_titles}}])
        return FakeResponse(payload=[{"data": {"aggregatedSalaryEstimates": {"results": self.salaries}}}])

    def operations(self):
        return [operation for operation, _ in self.calls]


def salary_record(p25, p50, p75, currency="USD", salary_count=42):
    return {
        "currency": {"code": currency},
        "salaryCount": salary_count,
        "totalPayStatistics": {
            "percentiles": [
                {"ident": "P75", "value": p75},
                {"ident": "P25", "value": p25},
                {"ident": "P50", "value": p50},
            ]
        },
    }


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return CacheStore(clock=clock)


@pytest.fixture
def session():
    return FakeSession(
        employers=[{"id": 1, "name": "Acme", "overallRating": 4.2}],
        job_titles=[{"id": 9, "label": "Engineer"}],
        salaries=[salary_record(80000, 100000, 120000)],
    )


@pytest.fixture
def glassdoor_client(cache, session):
    return GlassdoorClient(
        cache,
        base_url="https://glassdoor.test/companies",
        graph_url="https://glassdoor.test/graph",
        graph_headers={"gd-csrf-token": "test"},
        session=session,
    )


@pytest.fixture
def salary_service(glassdoor_client, cache):
    return SalaryService(glassdoor_client, cache)
