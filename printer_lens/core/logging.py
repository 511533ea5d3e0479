import sys
import logging
from loguru import logger
from printer_lens.core.config import settings, Settings
from types import FrameType

# stdlib loggers that should end up in the loguru stream
INTERCEPTED_LOGGERS = ("uvicorn", "uvicorn.access", "uvicorn.error", "fastapi", "onnxruntime")

TEXT_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)


class InterceptHandler(logging.Handler):
    """
    Forwards stdlib logging records (uvicorn, fastapi, onnxruntime) to loguru
    so the service writes a single log stream.
    """
    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Walk out of the logging module so loguru reports the real caller
        current: FrameType | None = logging.currentframe()
        depth = 2
        while current is not None and current.f_code.co_filename == logging.__file__:
            current = current.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(config: Settings = settings) -> None:
    """
    Configures loguru sinks and hijacks stdlib logging. Call once at startup.
    """
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    logger.remove()

    # JSON lines for log shippers, colored text for local runs
    if config.LOG_JSON:
        log_format, serialize = "{message}", True
    else:
        log_format, serialize = TEXT_FORMAT, False

    logger.add(
        sys.stderr,
        level=config.LOG_LEVEL,
        format=log_format,
        serialize=serialize,
        backtrace=True,
        diagnose=False,
    )

    # Only warnings and errors go to disk
    if config.LOG_FILE:
        logger.add(
            config.LOG_FILE,
            rotation="10 MB",
            retention="1 week",
            level="WARNING",
            compression="zip",
        )

    for name in INTERCEPTED_LOGGERS:
        std_logger = logging.getLogger(name)
        std_logger.handlers = [InterceptHandler()]
        std_logger.propagate = False
