"""Loguru sinks and the auditor's logging facade."""

from __future__ import annotations

import os
import sys
from typing import Any

from loguru import logger

from .config import config

_CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | "
    "<level>{level:<8}</level> | "
    "<magenta>{extra[component]}</magenta> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)
_FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<8} | {extra[component]} | {name}:{function}:{line} | {message}"


def _configure_sinks(logs_dir: str) -> None:
    logger.remove()
    logger.configure(extra={"component": "-"})
    os.makedirs(logs_dir, exist_ok=True)

    logger.add(sys.stdout, format=_CONSOLE_FORMAT, level=config.log_level, colorize=True)
    logger.add(
        os.path.join(logs_dir, "arauditor_{time:YYYY-MM-DD}.log"),
        format=_FILE_FORMAT,
        level="DEBUG",
        rotation="1 day",
        retention="14 days",
        compression="zip",
    )
    # Inference and camera failures land here as well as in the main log
    logger.add(
        os.path.join(logs_dir, "arauditor_errors_{time:YYYY-MM-DD}.log"),
        format=_FILE_FORMAT,
        level="ERROR",
        rotation="1 day",
        retention="60 days",
        compression="zip",
    )


class Logger:
    """Thin facade over a component-bound loguru logger.

    Records are emitted one frame up so the sink reports the caller's module
    and line rather than this wrapper.
    """

    def __init__(self, name: str = "ARAuditor") -> None:
        self.name = name
        _configure_sinks(config.logs_dir)
        self._bound = logger.bind(component=name)

    def _emit(self, level: str, message: str, **kwargs: Any) -> None:
        self._bound.opt(depth=2).log(level, message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._emit("INFO", message, **kwargs)

    def debug(self, message: str, **kwargs: Any) -> None:
        self._emit("DEBUG", message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._emit("WARNING", message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._emit("ERROR", message, **kwargs)

    def success(self, message: str, **kwargs: Any) -> None:
        self._emit("SUCCESS", message, **kwargs)

    # ------------------------------------------------------------------
    # Audit events
    # ------------------------------------------------------------------
    def log_scan(self, kind: str, issues: int, score: int) -> None:
        self._bound.opt(depth=1).info(f"SCAN {kind.upper()} applied: {issues} issue(s), score {score}%")

    def log_remediation(self, instruction: str, rendered: bool) -> None:
        outcome = "rendered" if rendered else "no image returned"
        self._bound.opt(depth=1).info(f"REMEDIATION {outcome}: {instruction[:80]!r}")

    def log_performance(self, operation: str, duration_ms: float) -> None:
        """Debug-level timing for one inference round-trip."""
        self._bound.opt(depth=1).debug(f"TIMING {operation}: {duration_ms:.1f}ms")


# Global logger instance
log = Logger()
