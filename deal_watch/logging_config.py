"""
Logging setup

The pipeline logs through loguru. The Kafka wrapper and third-party libraries
(uvicorn, kafka-python, httpx) log through stdlib logging, so those records
are intercepted and forwarded to the loguru sink.
"""

import logging
import sys

from loguru import logger

_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)


class InterceptHandler(logging.Handler):
    """Forward stdlib logging records to loguru"""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Walk back to the frame that issued the logging call
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(level: str = "INFO") -> None:
    """
    Configure the loguru sink and route stdlib logging into it

    Args:
        level: Minimum level name for the stderr sink
    """
    logger.remove()
    logger.add(sys.stderr, level=level.upper(), format=_FORMAT, backtrace=False)

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for noisy in ("kafka", "httpx"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logger.info(f"Logging initialised at level {level.upper()}")
