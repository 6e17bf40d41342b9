# src/logging_config.py
import logging
import sys

from src.settings import settings


def setup_logging():
    """
    Set up logging configuration for the application.
    """
    # Create a logger
    logger = logging.getLogger()
    logger.setLevel(settings.LOG_LEVEL)

    # Create a console handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(settings.LOG_LEVEL)

    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    console_handler.setFormatter(formatter)

    logger.addHandler(console_handler)

    # Request logs from the identity client are noisy
    logging.getLogger("httpx").setLevel(logging.WARNING)

    return logging.getLogger("grade_simulator")


# Call the setup function to configure logging
app_logger = setup_logging()
