"""
Tagged logging for SparkStudio.

All loggers live under the "SparkStudio" namespace so one handler
configuration (see config.py) covers the whole app:

    SparkStudio          untagged messages
    SparkStudio.AI       generation requests and results
    SparkStudio.API      outbound HTTP requests/responses
    SparkStudio.User     user actions
    SparkStudio.Performance

A SUCCESS level sits between INFO and WARNING.
"""

import logging
import time
from contextlib import contextmanager
from typing import Optional

APP_NAME = "SparkStudio"

SUCCESS = 25
logging.addLevelName(SUCCESS, "SUCCESS")


def get_logger(tag: Optional[str] = None) -> logging.Logger:
    """Return the SparkStudio logger, optionally scoped to a tag."""
    return logging.getLogger(f"{APP_NAME}.{tag}" if tag else APP_NAME)


def success(message: str, tag: Optional[str] = None) -> None:
    get_logger(tag).log(SUCCESS, message)


def api_request(method: str, url: str, body=None) -> None:
    """Log an outbound API request (body at DEBUG)."""
    logger = get_logger("API")
    logger.info(f"{method} {url}")
    if body is not None:
        logger.debug(f"Request body: {body}")


def api_response(method: str, url: str, status_code: int, response=None) -> None:
    """Log an API response; non-2xx statuses are warnings."""
    logger = get_logger("API")
    ok = 200 <= status_code < 300
    level = logging.INFO if ok else logging.WARNING
    logger.log(level, f"{method} {url} -> {status_code}")
    if response is not None:
        logger.debug(f"Response: {response}")


def ai_generation(kind: str, prompt: str, result: Optional[str] = None) -> None:
    logger = get_logger("AI")
    logger.info(f'AI {kind}: "{prompt}"')
    if result is not None:
        logger.debug(f"Result: {result}")


def user_action(action: str, metadata: Optional[dict] = None) -> None:
    logger = get_logger("User")
    logger.info(action)
    if metadata:
        logger.debug(f"Metadata: {metadata}")


def performance(operation: str, duration_seconds: float) -> None:
    get_logger("Performance").debug(
        f"{operation} took {int(duration_seconds * 1000)}ms"
    )


@contextmanager
def timed(operation: str):
    """Log how long the wrapped block took."""
    start = time.perf_counter()
    try:
        yield
    finally:
        performance(operation, time.perf_counter() - start)
