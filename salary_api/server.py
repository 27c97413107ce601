"""Run the API locally: ``python -m salary_api.server`` (or the ``salary-api`` script)."""
import logging

import uvicorn

from salary_api.core.settings import settings
from salary_api.main import app

logger = logging.getLogger(__name__)


def main():
    logger.info(f"Server running at http://localhost:{settings.port}")
    logger.info(f"Try: http://localhost:{settings.port}?companyName=Google&jobTitle=Software+Engineer")
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
