import click

from rogue._internal.logging import init_logger


def _set_log_level(ctx: click.Context, param: click.Parameter, debug: bool):
    if debug:
        init_logger("DEBUG")
    return debug


def common_options(f):
    return click.option(
        "--debug",
        is_flag=True,
        default=False,
        expose_value=False,
        is_eager=True,
        callback=_set_log_level,
        help="Show debug logs and tracebacks",
    )(f)
