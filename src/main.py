"""Run the GraphQL gateway with uvicorn."""

import uvicorn

from src.api.app import create_app
from src.utils.config import get_settings
from src.utils.logging_config import get_logger, setup_logging


def run() -> None:
    """Start the server on HOST:PORT."""
    settings = get_settings()
    setup_logging()
    get_logger(__name__).info(f"Playground: http://localhost:{settings.PORT}")

    uvicorn.run(
        create_app(),
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
        # Server logs go through the root handler installed above
        log_config=None,
    )


if __name__ == "__main__":
    run()
