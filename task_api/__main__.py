"""Run the API with uvicorn: ``python -m task_api``."""

import logging

import uvicorn

from task_api.config import Settings, configure_logging
from task_api.main import create_app

logger = logging.getLogger(__name__)


def main() -> None:
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    logger.info("Starting server on http://%s:%d", settings.host, settings.port)
    uvicorn.run(
        create_app(settings=settings),
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
