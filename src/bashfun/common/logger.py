from __future__ import annotations

import logging
import sys

from bashfun.common.core import ActionCore

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class TruncatingFormatter(logging.Formatter):
    def __init__(self, fmt: str | None = None, max_line_length: int | None = None):
        super().__init__(fmt)
        self.max_line_length = max_line_length

    def format(self, record: logging.LogRecord) -> str:
        msg = super().format(record)
        if self.max_line_length is not None and len(msg) > self.max_line_length:
            return msg[: self.max_line_length] + "... (truncated)"
        return msg


class ActionLogHandler(logging.Handler):
    """Writes log records as workflow commands of the matching severity.

    DEBUG records only show up in the job log when step debugging is on,
    INFO records are plain lines, WARNING and above become annotations.
    """

    def __init__(self, core: ActionCore, level: int = logging.NOTSET):
        super().__init__(level)
        self.core = core

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
            if record.levelno >= logging.ERROR:
                self.core.error(msg)
            elif record.levelno >= logging.WARNING:
                self.core.warning(msg)
            elif record.levelno >= logging.INFO:
                # Plain lines stay on one line so no continuation can start with "::"
                self.core.info(msg.replace("\r", "%0D").replace("\n", "%0A"))
            else:
                self.core.debug(msg)
        except Exception:
            self.handleError(record)


def setup_package_logger(
    application_name: str,
    package_name: str,
    log_level: str = "info",
    max_line_length: int | None = None,
    core: ActionCore | None = None,
) -> logging.Logger:
    """Configures the top-level logger of ``package_name``.

    Args:
        application_name: Name reported in the startup record
        package_name: Any module name inside the package, usually ``__name__``
        log_level: Level name, case insensitive
        max_line_length: Truncate formatted records longer than this
        core: Route records through the workflow command protocol of this step
            instead of writing them to stderr
    """
    logger = logging.getLogger(package_name.split(".")[0])
    logger.setLevel(log_level.upper())
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler: logging.Handler
    if core is not None:
        handler = ActionLogHandler(core)
        handler.setFormatter(TruncatingFormatter("%(message)s", max_line_length))
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(TruncatingFormatter(LOG_FORMAT, max_line_length))
    logger.addHandler(handler)

    logger.debug(f"Logging configured for {application_name} at level {log_level}")
    return logger
