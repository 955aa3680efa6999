"""Logging setup for dockcore."""

import logging


class c:
    """Terminal colors."""

    _ = "\033[0m"  # reset
    p = "\033[38;5;204m"  # pink
    b = "\033[38;5;39m"  # blue
    g = "\033[38;5;47m"  # green
    grey = "\033[90m"
    r = "\033[38;5;1m"  # red
    br = "\x1b[31;1m"  # bold red
    y = "\033[38;5;226m"  # yellow


class LevelPrefixFormatter(logging.Formatter):
    """
    Formatter that prefixes each record with a level marker.

    ``[+]`` debug, ``[*]`` info, ``[-]`` warning, ``[!]`` error and critical.
    Warnings and errors also carry a timestamp and the emitting source line.
    """

    log_format_detailed = (
        f"{c.grey}%(asctime)s{c._} %(message)s {c.p}(%(filename)s:%(lineno)d){c._}"
    )
    log_format_basic = "%(message)s"

    FORMATS = {
        logging.DEBUG: f"{c.g}[+]{c._} {log_format_basic}",
        logging.INFO: f"{c.b}[*]{c._} {log_format_basic}",
        logging.WARNING: f"{c.y}[-]{c._} {log_format_detailed}",
        logging.ERROR: f"{c.r}[!]{c._} {log_format_detailed}",
        logging.CRITICAL: f"{c.br}[!]{c._} {log_format_detailed}",
    }

    def format(self, record: logging.LogRecord) -> str:
        formatter = logging.Formatter(self.FORMATS.get(record.levelno))
        return formatter.format(record)


logger = logging.getLogger("dockcore")
logger.setLevel(logging.INFO)

ch = logging.StreamHandler()
ch.setLevel(logging.DEBUG)
ch.setFormatter(LevelPrefixFormatter())
logger.addHandler(ch)


def set_verbosity(level: int | str) -> None:
    """Set the level of the ``dockcore`` logger (e.g. ``logging.DEBUG``)."""
    logger.setLevel(level)
