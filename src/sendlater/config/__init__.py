from sendlater.config.db import DBConfig  # noqa: I001
from sendlater.config.logs import LogConfig
from sendlater.config.mail import MailConfig
from sendlater.config.paths import DEFAULT_DB_PATHS, PathConfig
from sendlater.config.scheduler import SchedulerConfig
from sendlater.config.server import ServerConfig

from sendlater.config.main import (
    Config,
    get_config,
    set_config,
)  # noqa: I001 - has to come last, since it imports the others

__all__ = [
    "DEFAULT_DB_PATHS",
    "Config",
    "DBConfig",
    "get_config",
    "LogConfig",
    "MailConfig",
    "PathConfig",
    "SchedulerConfig",
    "ServerConfig",
    "set_config",
]
