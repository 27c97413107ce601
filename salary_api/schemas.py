# salary_api/schemas.py
from pydantic import BaseModel
from typing import Dict

class CacheStats(BaseModel):
    totalEntries: int
    byPrefix: Dict[str, int]
    memoryUsageEstimate: int

class SalaryResponse(BaseModel):
    jobTitle: str | None = None
    company: str | None = None
    companyRating: float | None = None
    location: str
    averageSalary: str
    salaryRange: str
    salaryCount: int
    source: str
    timestamp: str
    requestTimeMs: int
    cacheStats: CacheStats | None = None

class ErrorResponse(BaseModel):
    error: str
    message: str | None = None
    requestId: str | None = None
    timestamp: str | None = None
