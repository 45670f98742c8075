from pathlib import Path
from typing import Optional

import click

from sendlater.cli.common import config_option, load_config


@click.command()
@config_option
@click.option("--port", required=False, type=int)
def start(port: Optional[int] = None, config: Optional[Path] = None) -> None:
    """Start the sendlater api server"""
    from sendlater.main import main

    cfg = load_config(config)
    if port is not None:
        cfg.server.port = port

    main(config=cfg)
