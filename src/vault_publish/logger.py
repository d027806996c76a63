import json
import logging
import os
import sys

_DATEFMT = "%Y-%m-%d %H:%M:%S"
_TEXT_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"
_NAMED_TEXT_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s %(message)s"

# Chatty dependencies kept at WARNING unless debugging.
_QUIET_LOGGERS = ("charset_normalizer",)


class JsonFormatter(logging.Formatter):
    """One JSON object per line: ``ts``, ``level``, ``logger``, ``msg``.

    A traceback, when the record has one, goes into ``exc``.  Non-ASCII
    text (note titles, vault paths) is written as is.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str, ensure_ascii=False)


def _formatter(debug_format: str, with_name: bool = False) -> logging.Formatter:
    if debug_format == "json":
        return JsonFormatter(datefmt=_DATEFMT)
    return logging.Formatter(
        _NAMED_TEXT_FORMAT if with_name else _TEXT_FORMAT, datefmt=_DATEFMT
    )


def _resolve_level(debug: bool, level: str | None) -> int:
    if debug:
        return logging.DEBUG
    name = os.getenv("LOG_LEVEL") or level or "INFO"
    resolved = logging.getLevelName(name.upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def _file_handler(path: str, debug_format: str) -> logging.Handler:
    handler = logging.FileHandler(path, mode="a")
    handler.setFormatter(_formatter(debug_format, with_name=True))
    return handler


def setup_logging(
    debug: bool = False,
    log_file: str | None = None,
    debug_format: str = "text",
    level: str | None = None,
) -> None:
    """
    Configure the root logger for a command line run.

    Records go to stderr, so stdout stays free for the report.  A log file,
    when one is given, gets a second handler that also names the logger.

    Args:
        debug: Force DEBUG regardless of any configured level.
        log_file: Log file path.  Defaults to the LOG_FILE env var.
        debug_format: "text" (default) or "json".
        level: Level name from the config file.

    Environment variables:
        LOG_LEVEL: Level name; takes precedence over ``level``.
        LOG_FILE: Log file used when ``log_file`` is not given.
    """
    log_level = _resolve_level(debug, level)

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(_formatter(debug_format))
    handlers: list[logging.Handler] = [console]
    target = log_file or os.getenv("LOG_FILE")
    if target:
        handlers.append(_file_handler(target, debug_format))

    logging.basicConfig(level=log_level, handlers=handlers)

    if log_level != logging.DEBUG:
        for name in _QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
