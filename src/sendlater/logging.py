"""
Logging factory.

All loggers are children of the ``sendlater`` logger,
which owns exactly one rich stream handler and one rotating file handler,
no matter how many times :func:`.init_logger` is called.
"""

import logging
import multiprocessing as mp
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

from rich.logging import RichHandler

from sendlater.config import get_config

LOGGER_ROOT = "sendlater"


def init_logger(
    name: str,
    log_dir: Union[Optional[Path], bool] = None,
    level: Optional[str] = None,
    file_level: Optional[str] = None,
    log_file_n: Optional[int] = None,
    log_file_size: Optional[int] = None,
) -> logging.Logger:
    """
    Make a logger.

    Log to a rotating file in ``log_dir`` and to stdout with rich formatting.
    Unset params are taken from the active config.

    Args:
        name (str): Name of this logger. Ideally names are hierarchical
            and indicate what they are logging for, eg. ``scheduler.timers``
            and don't contain metadata like timestamps, etc. (which are in the logs)
        log_dir (:class:`pathlib.Path`): Directory to store file-based logs in. If ``None``,
            get from :class:`.Config`. If ``False`` , disable file logging.
        level (str): Level to use for stdout logging. If ``None`` , get from :class:`.Config`
        file_level (str): Level to use for file-based logging.
             If ``None`` , get from :class:`.Config`
        log_file_n (int): Number of rotating file logs to use.
            If ``None`` , get from :class:`.Config`
        log_file_size (int): Maximum size of logfiles before rotation.
            If ``None`` , get from :class:`.Config`

    Returns:
        :class:`logging.Logger`
    """
    config = get_config()
    if log_dir is None:
        log_dir = config.paths.logs
    if level is None:
        level = config.logs.level_stdout if config.logs.level_stdout else config.logs.level
    if file_level is None:
        file_level = config.logs.level_file if config.logs.level_file else config.logs.level
    if log_file_n is None:
        log_file_n = config.logs.file_n
    if log_file_size is None:
        log_file_size = config.logs.file_size

    if not name.startswith(LOGGER_ROOT):
        name = ".".join([LOGGER_ROOT, name])

    # the root logger has to pass everything through, handlers do the filtering
    min_level = min(getattr(logging, level), getattr(logging, file_level))
    _init_root(
        stdout_level=level,
        log_dir=log_dir,
        file_level=file_level,
        log_file_n=log_file_n,
        log_file_size=log_file_size,
    )

    logger = logging.getLogger(name)
    logger.setLevel(min_level)
    return logger


def _init_root(
    stdout_level: str,
    log_dir: Union[Path, bool],
    file_level: str,
    log_file_n: int = 5,
    log_file_size: int = 2**22,
) -> None:
    root_logger = logging.getLogger(LOGGER_ROOT)
    file_handlers = [
        handler for handler in root_logger.handlers if isinstance(handler, RotatingFileHandler)
    ]
    stream_handlers = [
        handler for handler in root_logger.handlers if isinstance(handler, RichHandler)
    ]

    if log_dir is not False and not file_handlers:
        root_logger.addHandler(
            _file_handler(LOGGER_ROOT, file_level, Path(log_dir), log_file_n, log_file_size)
        )
    else:
        for file_handler in file_handlers:
            file_handler.setLevel(file_level)

    if not stream_handlers:
        root_logger.addHandler(_rich_handler(stdout_level))
    else:
        for stream_handler in stream_handlers:
            stream_handler.setLevel(stdout_level)

    root_logger.setLevel(min(getattr(logging, stdout_level), getattr(logging, file_level)))


def _file_handler(
    name: str,
    file_level: str,
    log_dir: Path,
    log_file_n: int = 5,
    log_file_size: int = 2**22,
) -> RotatingFileHandler:
    # subprocesses (eg. spawned workers) get their own file
    # so rotation in one process can't clobber another's open file
    if mp.current_process().name == "MainProcess":
        filename = Path(log_dir) / f"{name}.log"
    else:
        filename = Path(log_dir) / f"{name}.{mp.current_process().pid}.log"
    filename.parent.mkdir(parents=True, exist_ok=True)
    file_handler = RotatingFileHandler(
        str(filename), mode="a", maxBytes=log_file_size, backupCount=log_file_n
    )
    file_formatter = logging.Formatter("[%(asctime)s] %(levelname)s [%(name)s]: %(message)s")
    file_handler.setLevel(file_level)
    file_handler.setFormatter(file_formatter)
    return file_handler


def _rich_handler(level: str) -> RichHandler:
    rich_handler = RichHandler(rich_tracebacks=True, markup=True)
    rich_formatter = logging.Formatter(
        "[bold green]\\[%(name)s][/bold green] %(message)s",
        datefmt="[%y-%m-%dT%H:%M:%S]",
    )
    rich_handler.setFormatter(rich_formatter)
    rich_handler.setLevel(level)
    return rich_handler
