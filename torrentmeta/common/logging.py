import datetime as dt
import json
import copy
from typing import override
import logging
import logging.config
import logging.handlers
import atexit
from pathlib import Path

DEFAULT_LOG_DIR = Path("data") / "logs"

# attributes every LogRecord carries; anything else came in through extra={...}
LOG_RECORD_BUILTIN_ATTRS = set(
    vars(logging.LogRecord("", logging.NOTSET, "", 0, "", None, None))
) | {"message", "asctime"}


class JSONLogFormatter(logging.Formatter):
    # fmt_keys maps output key -> LogRecord attribute
    def __init__(
        self,
        *,
        fmt_keys: dict[str, str] | None = None,
    ):
        super().__init__()
        self.fmt_keys = fmt_keys if fmt_keys is not None else {}

    @override
    def format(self, record: logging.LogRecord) -> str:
        message = self._prepare_log_dict(record)
        return json.dumps(message, default=str)

    def _prepare_log_dict(self, record: logging.LogRecord) -> dict:
        always_fields = {
            "message": record.getMessage(),
            "timestamp": dt.datetime.fromtimestamp(
                record.created, tz=dt.timezone.utc
            ).isoformat(),
        }

        if record.exc_info is not None:
            always_fields["exc_info"] = self.formatException(record.exc_info)

        if record.stack_info is not None:
            always_fields["stack_info"] = self.formatStack(record.stack_info)

        message = {
            key: msg_val
            if (msg_val := always_fields.pop(val, None)) is not None
            else getattr(record, val)
            for key, val in self.fmt_keys.items()
        }
        message.update(always_fields)

        # anything passed through extra={...}, e.g. the byte offset of a decode error
        for key, val in record.__dict__.items():
            if key not in LOG_RECORD_BUILTIN_ATTRS:
                message[key] = val

        return message


LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {
            "format": "[%(levelname)s|%(module)s|L%(lineno)d] %(asctime)s: %(message)s",
            "datefmt": "%Y-%m-%dT%H:%M:%S%z",
        },
        "json": {
            "()": JSONLogFormatter,
            "fmt_keys": {
                "level": "levelname",
                "message": "message",
                "timestamp": "timestamp",
                "logger": "name",
                "module": "module",
                "function": "funcName",
                "line": "lineno",
            },
        },
    },
    "handlers": {
        "stderr": {
            "class": "logging.StreamHandler",
            "level": "WARNING",
            "formatter": "simple",
            "stream": "ext://sys.stderr",
        },
        "file_json": {
            "class": "logging.handlers.RotatingFileHandler",
            "level": "DEBUG",
            "formatter": "json",
            "filename": "default",
            "maxBytes": 1000000,
            "backupCount": 3,
        },
        "queue_handler": {
            "class": "logging.handlers.QueueHandler",
            "handlers": ["stderr", "file_json"],
            "respect_handler_level": True,
        },
    },
    "loggers": {
        "torrentmeta": {"level": "DEBUG"},
        "root": {"level": "INFO", "handlers": ["queue_handler"]},
    },
}


def config_logging(
    file_name: str,
    log_dir: Path = DEFAULT_LOG_DIR,
    console_level: str = "WARNING",
) -> logging.handlers.QueueListener | None:
    """
    Route records through a queue to stderr and a rotating JSON-lines file.

    Decoder rejections are logged at DEBUG, so they only reach the file
    unless ``console_level`` is lowered.
    """
    log_path = Path(log_dir) / file_name
    log_path.parent.mkdir(parents=True, exist_ok=True)
    d_config = copy.deepcopy(LOGGING_CONFIG)
    d_config["handlers"]["file_json"]["filename"] = str(log_path)
    d_config["handlers"]["stderr"]["level"] = console_level
    logging.config.dictConfig(d_config)

    queue_handler = logging.getHandlerByName("queue_handler")
    if queue_handler is None:
        return None
    queue_handler.listener.start()
    atexit.register(stop_listener, queue_handler.listener)
    return queue_handler.listener


def stop_listener(listener: logging.handlers.QueueListener):
    """Flush and stop a queue listener; safe to call more than once."""
    # QueueListener.stop() on 3.12.1 fails when the thread is already gone
    if listener._thread is not None:
        listener.stop()
