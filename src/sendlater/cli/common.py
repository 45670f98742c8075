from pathlib import Path
from typing import Optional

import click

from sendlater.config import Config, get_config, set_config


def config_option(f: click.Command) -> click.Command:
    f = click.option(
        "-c",
        "--config",
        type=click.Path(exists=True, dir_okay=False),
        help="Path to sendlater.yaml or .env file. If none, look in current directory",
    )(f)
    return f


def load_config(config: Optional[Path] = None) -> Config:
    """Load the config passed with ``-c`` , or the default one, and make it the active config"""
    if config is None:
        return get_config()
    return set_config(Config.load(Path(config)))
