import sys
from pathlib import Path
from typing import Literal, Self

from pydantic import model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from sendlater.config.db import DBConfig
from sendlater.config.logs import LogConfig
from sendlater.config.mail import MailConfig
from sendlater.config.paths import DEFAULT_DB_PATHS, PathConfig
from sendlater.config.scheduler import SchedulerConfig
from sendlater.config.server import ServerConfig

_config: "Config" = None


def get_config(reload: bool = False) -> "Config":
    """
    Get the global singleton config, loading it if it's not already created.

    Args:
        reload (bool): If ``True``, reload the config from default sources.
    """
    global _config
    if _config is None:
        _config = Config()
    elif reload:
        _config = _config.reload()

    return _config


def set_config(config: "Config") -> "Config":
    """
    Set an instantiated config object as the active config that will be returned by `get_config`.

    Setting individual values on a config object is not supported and should not be done.
    """
    global _config
    _config = config
    return _config


class Config(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="sendlater_",
        env_nested_delimiter="__",
        extra="ignore",
        nested_model_default_partial_update=True,
        yaml_file="sendlater.yaml",
        use_enum_values=True,
    )
    env: Literal["dev", "prod", "test"] = "dev"
    """
    dev: local development, emails are logged rather than sent by default
    test: when running pytest
    prod: when serving a live instance
    """
    api_prefix: str = "/api"
    """Prefix for all JSON API endpoints."""

    # --------------------------------------------------
    # Configuration sub-models
    # --------------------------------------------------
    db: DBConfig = DBConfig()
    """Detailed database configuration"""
    logs: LogConfig = LogConfig()
    """Logging, levels, formatting, etc."""
    mail: MailConfig = MailConfig()
    """Outbound mail transport"""
    paths: PathConfig = PathConfig()
    """All the paths used by sendlater"""
    scheduler: SchedulerConfig = SchedulerConfig()
    """Scheduling engine mode and job queue parameters"""
    server: ServerConfig = ServerConfig()
    """Configuration of the API server"""

    _yaml_source: Path | None = None

    @property
    def reload_uvicorn(self) -> bool:
        """whether to reload the asgi server ie. when in dev mode"""
        return self.env == "dev"

    @model_validator(mode="before")
    def default_db(cls, value: dict) -> dict:
        """Add a default db path to args, if not present"""
        if "db" not in value.get("paths", {}):
            if "paths" not in value:
                value["paths"] = {}
            value["paths"]["db"] = DEFAULT_DB_PATHS[value.get("env", "dev")]
        return value

    @model_validator(mode="after")
    def sendgrid_needs_key(self) -> Self:
        """The sendgrid transport can't do anything without an api key"""
        if self.mail.transport == "sendgrid":
            assert (
                self.mail.sendgrid_api_key is not None
            ), "mail.sendgrid_api_key must be set when mail.transport is sendgrid"
        return self

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """
        Read from the following sources,
        in order such that later sources in the list override earlier sources

        - `sendlater.yaml` (in cwd)
        - `.env` (in cwd)
        - environment variables prefixed with `SENDLATER_`
        - arguments passed on config object initialization

        See [pydantic settings docs](https://docs.pydantic.dev/latest/concepts/pydantic_settings/#customise-settings-sources)
        """
        return init_settings, env_settings, dotenv_settings, YamlConfigSettingsSource(settings_cls)

    @classmethod
    def load(cls, path: Path) -> Self:
        """Load a config file from an explicit path"""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"config file {path} does not exist")

        if path.suffix in (".yaml", ".yml"):
            import yaml

            with open(path) as f:
                cfg = yaml.safe_load(f) or {}
            config = Config(**cfg)
            config._yaml_source = path.resolve()
            return config
        elif path.name == ".env" or path.suffix == ".env":
            return Config(_env_file=path)
        else:
            raise ValueError("Path must be a .yaml/.yml or .env file")

    def reload(self) -> "Config":
        """
        If instantiated from a custom yaml source with `.load`,
        recreate a new `Config` object from that source.

        Otherwise equivalent to instantiating without arguments.
        """
        if self._yaml_source is not None:
            return Config.load(self._yaml_source)
        return Config()


def _lifespan_load_config() -> None:
    """
    Load a config file passed as `sendlater start -c custom_config` from within the app.

    uvicorn re-imports the app in a fresh interpreter when reloading,
    so the cli params have to be re-read from argv.

    If we can't or no custom config was passed, does nothing and allows
    `get_config` to work as normal.
    """
    args = sys.argv
    try:
        start_idx = args.index("start")
    except ValueError:
        # not run via the `start` command
        return

    args = args[start_idx:]
    if "-c" in args:
        flag_idx = args.index("-c")
    elif "--config" in args:
        flag_idx = args.index("--config")
    else:
        return

    config_path = None
    try:
        config_path = args[flag_idx + 1]
        cfg = Config.load(Path(config_path))
        set_config(cfg)

        from sendlater.logging import init_logger

        logger = init_logger("config")
        logger.info(f"Using config from custom path: {config_path}")
    except Exception as e:
        from sendlater.logging import init_logger

        logger = init_logger("config")
        logger.warning(
            f"Detected config passed with -c or --config, but got error when loading. "
            f"Attempting to continue with config loaded from standard locations.\n"
            f"Got config arg: {config_path}\n"
            f"Got error:\n{str(e)}"
        )
