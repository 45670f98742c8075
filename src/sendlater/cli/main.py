import click

from sendlater.cli.start import start
from sendlater.cli.worker import worker


@click.group(name="sendlater")
@click.version_option(package_name="sendlater")
def main() -> None:
    """Sendlater CLI"""
    pass


def _main() -> None:
    main(max_content_width=100)


main.add_command(start, "start")
main.add_command(worker, "worker")
