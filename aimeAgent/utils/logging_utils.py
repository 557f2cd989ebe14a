"""Logging utilities for aimeAgent."""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from aimeAgent.config.settings import ObservabilitySettings

ROOT_LOGGER_NAME = "aimeAgent"

_preview_length = 500


def setup_logging(settings: Optional[ObservabilitySettings] = None, verbose: bool = False) -> logging.Logger:
    """Setup logging configuration for aimeAgent.

    A timestamped file under ``settings.log_dir`` receives everything at DEBUG;
    the console only shows warnings unless ``verbose`` is set.

    Args:
        settings: Observability settings (defaults are used when omitted)
        verbose: Show INFO records on the console

    Returns:
        Configured package logger
    """
    global _preview_length

    settings = settings or ObservabilitySettings()
    _preview_length = settings.log_prompt_max_length

    logs_dir = Path(settings.log_dir)
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_file = logs_dir / f"aime_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(logging.DEBUG)  # Child loggers inherit; handlers filter
    logger.propagate = False

    for handler in list(logger.handlers):
        handler.close()
    logger.handlers = []

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )

    if verbose:
        console_level = logging.INFO
    else:
        console_level = getattr(logging, settings.log_level.upper(), logging.WARNING)
    console_handler = logging.StreamHandler()
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))

    logger.addHandler(file_handler)
    logger.addHandler(console_handler)

    logger.info("=" * 80)
    logger.info("aimeAgent session started")
    logger.info(f"Log file: {log_file}")
    logger.info("=" * 80)

    return logger


def truncate(text: Any, limit: Optional[int] = None) -> str:
    """Return a single preview string cut to the configured length."""
    limit = limit or _preview_length
    text = str(text)
    if len(text) > limit:
        return text[:limit] + "... (truncated)"
    return text


def log_turn(logger: logging.Logger, turn: int, max_turns: int, tree: str) -> None:
    """Log the start of an orchestrator turn with the current task tree."""
    logger.info("=" * 80)
    logger.info(f"Turn {turn}/{max_turns}")
    for line in tree.splitlines():
        logger.info(f"  {line}")
    logger.info("=" * 80)


def log_decision(logger: logging.Logger, task_id: int, decision: str, reason: str = "") -> None:
    """Log a decompose-vs-execute decision."""
    logger.info(f"Decision for task #{task_id}: {decision}")
    if reason:
        logger.debug(f"  Reason: {reason}")


def log_tool_call(logger: logging.Logger, tool_name: str, args: Any) -> None:
    """Log tool invocation."""
    logger.info(f"Tool call: {tool_name}")
    if isinstance(args, (dict, list)):
        rendered = json.dumps(args, ensure_ascii=False, indent=2)
    else:
        rendered = str(args)
    logger.debug(f"  Arguments: {truncate(rendered)}")


def log_tool_result(logger: logging.Logger, tool_name: str, result: Any, success: bool = True) -> None:
    """Log tool execution result."""
    status = "✓ Success" if success else "✗ Failed"
    logger.info(f"Tool result: {tool_name} - {status}")
    logger.debug(f"  Result: {truncate(result)}")


def log_error(logger: logging.Logger, error: Exception, context: str = "") -> None:
    """Log error with context and traceback."""
    logger.error(f"Error occurred: {type(error).__name__}: {error}")
    if context:
        logger.error(f"  Context: {context}")
    logger.debug("Full traceback:", exc_info=error)
