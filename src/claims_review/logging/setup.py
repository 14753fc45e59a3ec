"""Logging configuration using loguru — colored console or structured JSON."""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

from loguru import logger

if TYPE_CHECKING:
    from omegaconf import DictConfig


# ---------------------------------------------------------------------------
# Intercept stdlib logging → loguru
# ---------------------------------------------------------------------------

class _InterceptHandler(logging.Handler):
    """Route standard-library log records (uvicorn, starlette) through loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno  # type: ignore[assignment]

        # Walk past logging's own frames so loguru reports the real caller.
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


_PRETTY_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)

# uvicorn's access log duplicates RequestLoggingMiddleware
_QUIET_LOGGERS = ("uvicorn.access", "httpx", "httpcore")


def setup_logging(cfg: DictConfig) -> None:
    """Configure loguru from the ``logging`` config section.

    Parameters
    ----------
    cfg:
        Sub-config with keys ``level``, ``colored`` and ``format``
        (``"pretty"`` for colored console output, ``"structured"`` for JSON
        lines).
    """
    logger.remove()

    level: str = getattr(cfg, "level", "INFO").upper()
    use_json: bool = getattr(cfg, "format", "pretty") == "structured"
    colorize: bool = getattr(cfg, "colored", True)

    if use_json:
        logger.add(sys.stderr, level=level, serialize=True, colorize=False)
    else:
        logger.add(sys.stderr, level=level, format=_PRETTY_FORMAT, colorize=colorize)

    logging.basicConfig(handlers=[_InterceptHandler()], level=0, force=True)
    for name in ("uvicorn", "uvicorn.error"):
        uv = logging.getLogger(name)
        uv.handlers = [_InterceptHandler()]
        uv.propagate = False
    for noisy in _QUIET_LOGGERS:
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logger.debug("Logging configured", level=level, json_mode=use_json)
