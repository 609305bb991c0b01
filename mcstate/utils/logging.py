"""Centralized logging utilities for the mcstate package."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional


class McstateLogger:
    """
    Factory class for mcstate loggers.

    Handlers live on the package logger ("mcstate") only. Module loggers are
    its children and propagate records up to it, so a single call to
    configure() controls the level and destinations of the whole package.
    """

    ROOT_NAME = "mcstate"

    _formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    @classmethod
    def configure(
        cls,
        level: Optional[int] = None,
        log_file: Optional[str] = None,
        propagate: bool = False,
    ) -> logging.Logger:
        """Attach the package handlers (once) and optionally set the level or a log file."""
        root = logging.getLogger(cls.ROOT_NAME)
        root.propagate = propagate
        if level is not None:
            root.setLevel(level)
        elif root.level == logging.NOTSET:
            root.setLevel(logging.INFO)

        if not any(isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
                   for h in root.handlers):
            stream_handler = logging.StreamHandler()
            stream_handler.setFormatter(cls._formatter)
            root.addHandler(stream_handler)

        if log_file is not None:
            log_path = Path(log_file)
            has_file_handler = any(
                isinstance(handler, logging.FileHandler) and Path(handler.baseFilename) == Path(os.path.abspath(log_path))
                for handler in root.handlers
            )
            if not has_file_handler:
                log_path.parent.mkdir(parents=True, exist_ok=True)
                file_handler = logging.FileHandler(log_path)
                file_handler.setFormatter(cls._formatter)
                root.addHandler(file_handler)

        return root

    @classmethod
    def get_logger(cls, name: str = ROOT_NAME) -> logging.Logger:
        """Return the logger for `name`, placed under the package logger."""
        root = logging.getLogger(cls.ROOT_NAME)
        if not root.handlers:
            cls.configure()
        if name != cls.ROOT_NAME and not name.startswith(cls.ROOT_NAME + "."):
            name = f"{cls.ROOT_NAME}.{name}"
        return logging.getLogger(name)

    @classmethod
    def set_level(cls, level: int) -> None:
        """Change the level of every mcstate logger at once."""
        logging.getLogger(cls.ROOT_NAME).setLevel(level)
