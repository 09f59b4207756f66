import logging
import sys

import click

from rogue._internal.logging import init_logger, log_exception
from rogue._internal.logging import logger as rogue_logger
from rogue._versions import pkg_version

from .debug_command import debug
from .options import common_options


@click.group(context_settings=dict(help_option_names=["-h", "--help"]))
@click.version_option(
    str(pkg_version),
    prog_name="rogue",
)
@common_options
def cli(**kwargs):
    """
    Generate Dockerfiles for model-serving images.
    """
    pass


cli.add_command(debug, "debug")


def main():
    sys.excepthook = _excepthook
    init_logger("INFO")
    cli()


def _excepthook(exctype, value, tb):
    log_exception(
        exctype=exctype,
        exc=value,
        tb=tb,
        show_rogue_exc_tb=rogue_logger.level <= logging.DEBUG,
    )
