"""Application entry point for the License Field OCR API server."""

import uvicorn

from src.api.app import app
from src.utils.config import load_config
from src.utils.logger import setup_logging


def main() -> None:
    """Start the FastAPI application server on the configured address."""
    config = load_config()
    setup_logging(config.log_level)
    uvicorn.run(app, host=config.server.host, port=config.server.port)


if __name__ == "__main__":
    main()
