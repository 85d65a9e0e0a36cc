"""
FarmLink server entry point.

Configures logging from the application config, builds the FastAPI app and
runs it under uvicorn:

    python -m farmlink.main
    uvicorn farmlink.main:app
"""

import uvicorn

from .app.factory import create_app
from .config import get_config
from .structured_logging.enhanced_logging_config import get_logger, setup_enhanced_logging

config = get_config()
setup_enhanced_logging(config.to_legacy_dict())

logger = get_logger(__name__)
logger.info("Logging setup completed", environment=config.logging.environment)

app = create_app(config)


def main() -> None:
    """Run the server on the configured host and port."""
    logger.info("Starting uvicorn", host=config.server.host, port=config.server.port)
    # log_config=None keeps uvicorn on the handlers installed by setup_enhanced_logging
    uvicorn.run(app, host=config.server.host, port=config.server.port, log_config=None)


if __name__ == "__main__":
    main()
