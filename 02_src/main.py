"""Main entry point for the show messaging backend."""

import os
from pathlib import Path

import uvicorn
from dotenv import load_dotenv

from showcomms.api import create_fastapi_app
from showcomms.logging_config import get_logger, log_context, setup_logging


def main():
    """Run the messaging API."""
    project_root = Path(__file__).resolve().parent.parent
    load_dotenv(project_root / ".env")
    setup_logging()
    logger = get_logger("showcomms.main")

    api_host = os.getenv("API_HOST", "localhost")
    api_port = int(os.getenv("API_PORT", "8000"))

    app = create_fastapi_app()
    logger.info(
        "Starting messaging API",
        extra=log_context(
            host=api_host,
            port=api_port,
            database=os.getenv("DATABASE_URL"),
            translation=bool(os.getenv("ANTHROPIC_API_KEY")),
        ),
    )

    # Logging is already configured; keep uvicorn from replacing it
    uvicorn.run(
        app,
        host=api_host,
        port=api_port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
