import logging
import traceback
import typing as t
from typing import Any, Dict

from rich.console import Console
from rich.logging import RichHandler

from rogue.exceptions import RogueException

if t.TYPE_CHECKING:
    from types import TracebackType

FORMAT = "%(message)s"
LOGGER_NAME = "rogue"

logger = logging.getLogger(LOGGER_NAME)


def init_logger(level: str):
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    level = level.upper()
    # Keep stdout for generated files
    handler = RichHandler(
        level=level,
        console=Console(stderr=True),
        show_level=False,
        show_path=False,
        show_time=False,
    )
    handler.setFormatter(logging.Formatter(FORMAT, datefmt="[%X]"))
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False


init_logger("INFO")


def _extras(pretty: bool) -> Dict[str, Any]:
    extras: Dict[str, Any] = {"markup": pretty}
    if not pretty:
        extras["highlighter"] = None
    return extras


def log_info(msg: str, pretty: bool = True):
    logger.info(msg, extra=_extras(pretty))


def log_debug(msg: str, pretty: bool = True):
    logger.debug(msg, extra=_extras(pretty))


def log_warning(msg: str, format: bool = True, pretty: bool = True):
    if format:
        if pretty:
            msg = "[bold yellow]Warning:[/bold yellow] " + msg
        else:
            msg = "Warning: " + msg

    logger.warning(msg, extra=_extras(pretty))


def log_exception(
    exctype: t.Type[BaseException],
    exc: BaseException,
    tb: t.Optional["TracebackType"],
    show_rogue_exc_tb: bool,
):
    logger.error("")
    if not isinstance(exc, RogueException) or show_rogue_exc_tb:
        logger.error("Traceback:")
        formatted_tb = "".join(traceback.format_tb(tb))
        logger.error(formatted_tb, extra={"markup": False, "highlighter": None})

    displayed_cls_name = (
        exctype.__name__
        if exctype.__module__ == "builtins" or isinstance(exc, RogueException)
        else f"{exctype.__module__}.{exctype.__name__}"
    )
    exc_info_str = f"[bold red]{displayed_cls_name}[/bold red]"
    exc_msg = str(exc)
    if exc_msg:
        # Messages may quote user commands containing brackets
        exc_info_str += ": " + exc_msg.replace("[", r"\[")
    logger.error(exc_info_str, extra={"markup": True, "highlighter": None})
