from pathlib import Path
from typing import Optional

import click

from sendlater.cli.common import config_option, load_config


@click.command()
@config_option
@click.option(
    "--burst", is_flag=True, default=False, help="Exit once the queue is empty, rather than waiting"
)
def worker(burst: bool = False, config: Optional[Path] = None) -> None:
    """
    Run a queue worker that delivers scheduled emails.

    Only needed when scheduler.use_queue is enabled,
    otherwise emails are delivered by the api server process itself.
    """
    from sendlater.scheduler.worker import run_worker

    cfg = load_config(config)
    if not cfg.scheduler.use_queue:
        click.echo(
            "Warning: scheduler.use_queue is disabled, "
            "the api server will not enqueue jobs for this worker",
            err=True,
        )
    run_worker(burst=burst)
