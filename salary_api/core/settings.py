from pydantic_settings import BaseSettings
from typing import Dict, List

class Settings(BaseSettings):
    # Core
    app_name: str = "Glassdoor Salary API"
    environment: str = "development"
    host: str = "0.0.0.0"
    port: int = 8080

    # Upstream (Glassdoor). Required before any outbound call is made.
    glassdoor_base_url: str | None = None
    glassdoor_graph_url: str | None = None
    glassdoor_graph_url_headers: Dict[str, str] | None = None  # JSON object in env
    salary_country_id: int = 115
    upstream_timeout_seconds: float | None = None  # None = transport default

    # Cache
    cache_default_ttl_seconds: int = 24 * 60 * 60
    lookup_cache_ttl_days: int = 30
    salary_cache_ttl_days: int = 15
    cache_max_entries: int | None = None

    # Rate limiting
    rate_limit: str = "200/minute"

    # Logging
    log_level: str = "INFO"
    json_logs: bool = True

    # CORS
    cors_allow_origins: str = "*"
    cors_allow_methods: List[str] = ["GET"]
    cors_allow_headers: List[str] = ["*"]

    class Config:
        env_file = ".env"
        case_sensitive = False

settings = Settings()
