import logging
import sys

_QUIET_LOGGERS = ("sqlalchemy.engine", "aiosqlite", "httpx", "opentelemetry")


def setup_logging(level: int | str = logging.INFO) -> None:
    """Send service logs to stdout; safe to call more than once."""
    root_logger = logging.getLogger()
    if not any(getattr(handler, "_erp_metrics", False) for handler in root_logger.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(
            logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
        )
        handler._erp_metrics = True  # type: ignore[attr-defined]
        root_logger.addHandler(handler)
    root_logger.setLevel(level.upper() if isinstance(level, str) else level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
