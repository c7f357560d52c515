import logging
import sys


def setup_logging(level: str = "INFO"):
    """
    Configures the root logger for the application.
    Called once from the app factory; repeated calls are harmless.
    """
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s - %(name)s - [%(levelname)s] - %(message)s",
        stream=sys.stdout,
    )
    # uvicorn already logs every request line
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
