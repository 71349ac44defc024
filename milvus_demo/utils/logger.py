#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Logging utility for the Milvus demo.
Provides consistent logging throughout the application.
"""

import os
import logging
import sys
from pathlib import Path
from datetime import datetime
from typing import Optional


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
PACKAGE_LOGGER = "milvus_demo"


def _in_package(name: str) -> bool:
    return name == PACKAGE_LOGGER or name.startswith(PACKAGE_LOGGER + ".")


def _level_from_env(default: int = logging.INFO) -> int:
    level_name = os.environ.get("LOG_LEVEL", "").upper()
    return getattr(logging, level_name, default) if level_name else default


def setup_logger(
    name: str = "milvus_demo",
    level: Optional[int] = None,
    log_file: Optional[str] = None,
    console_output: bool = True,
    file_output: bool = False
) -> logging.Logger:
    """
    Setup and configure a logger.

    Args:
        name: Name of the logger.
        level: Logging level. Defaults to LOG_LEVEL from the environment, else INFO.
        log_file: Path to the log file. If None, a timestamped file under logs/ is used.
        console_output: Whether to output logs to stdout.
        file_output: Whether to output logs to a file.

    Returns:
        Configured logger object.
    """
    if level is None:
        level = _level_from_env()

    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    log_format = logging.Formatter(LOG_FORMAT)

    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(log_format)
        console_handler.setLevel(level)
        logger.addHandler(console_handler)

    if file_output:
        if log_file is None:
            # logs/ at the repository root
            project_root = Path(__file__).resolve().parent.parent.parent
            logs_dir = project_root / "logs"
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            log_file = str(logs_dir / f"{name}_{timestamp}.log")

        try:
            os.makedirs(os.path.dirname(os.path.abspath(log_file)), exist_ok=True)
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setFormatter(log_format)
            file_handler.setLevel(level)
            logger.addHandler(file_handler)
        except OSError as e:
            if console_output:
                logger.warning(f"Could not setup file logging: {e}")
            else:
                raise

    return logger


def get_logger(name: str = "milvus_demo") -> logging.Logger:
    """
    Get an existing logger or create a new one.

    Loggers under the package name (e.g. "milvus_demo.main") carry no
    handlers of their own and propagate to the package logger, so the
    handlers installed by setup_logger("milvus_demo") receive their records.

    Args:
        name: Name of the logger.

    Returns:
        Logger object.
    """
    if name != PACKAGE_LOGGER and _in_package(name):
        if not logging.getLogger(PACKAGE_LOGGER).handlers:
            setup_logger(PACKAGE_LOGGER)
        return logging.getLogger(name)

    logger = logging.getLogger(name)

    if not logger.handlers:
        logger = setup_logger(name)

    return logger


def set_level(level: int) -> None:
    """Apply a level to the package logger and its children."""
    for logger_name in [PACKAGE_LOGGER] + list(logging.root.manager.loggerDict):
        if not _in_package(logger_name):
            continue
        candidate = logging.getLogger(logger_name)
        candidate.setLevel(level)
        for handler in candidate.handlers:
            handler.setLevel(level)
