"""TehLogger — Singleton JSON logger with console and optional rotating file output.

Provides a single, library-wide logger that writes structured JSON to stderr
and, when ``TEH_LOG_FILE`` is set, to a rotating log file as well.
"""

import json
import logging
import os
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from typing import Optional


class _JsonFormatter(logging.Formatter):
    """Format every log record as a single-line JSON object.

    Standard fields (timestamp, level, logger, message, module, func_name)
    are always present.  Keys passed through ``extra=`` are merged in, so
    dispatch code can attach ``update_id``, ``api_method``, ``offset`` and
    similar context without string formatting.

    Example::

        logger.warning("getUpdates failed", extra={"api_method": "getUpdates", "offset": 42})

    Produces::

        {"timestamp": "…", "level": "WARNING", …, "api_method": "getUpdates", "offset": 42}
    """

    # Keys that belong to the standard LogRecord; everything else is extra.
    _BUILTIN_ATTRS: frozenset[str] = frozenset(vars(logging.LogRecord(
        name="", level=0, pathname="", lineno=0, msg="", args=(), exc_info=None,
    ))) | {"message", "asctime", "taskName"}

    def format(self, record: logging.LogRecord) -> str:
        """Serialize *record* to a JSON string."""
        log_entry: dict = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "func_name": record.funcName,
        }

        for key, value in record.__dict__.items():
            if key not in self._BUILTIN_ATTRS and key not in log_entry:
                log_entry[key] = value

        if record.exc_info:
            log_entry["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, ensure_ascii=False, default=str)


class TehLogger:
    """Singleton logger shared by the SDK and the dispatch layer.

    Usage::

        from tehcore.logger import TehLogger

        logger = TehLogger.get_logger()
        logger.info("Polling started", extra={"offset": 0})
    """

    _instance: Optional["TehLogger"] = None
    _logger: Optional[logging.Logger] = None

    _LOGGER_NAME: str = "tehbot"
    _LOG_FILE_ENV: str = "TEH_LOG_FILE"
    _LOG_LEVEL_ENV: str = "TEH_LOG_LEVEL"
    _MAX_BYTES: int = 5 * 1024 * 1024  # 5 MB
    _BACKUP_COUNT: int = 5

    def __new__(cls, level: Optional[int] = None) -> "TehLogger":
        """Ensure only one instance is ever created (Singleton)."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._init_logger(level)
        return cls._instance

    # ------------------------------------------------------------------
    # Initialisation helpers
    # ------------------------------------------------------------------

    def _init_logger(self, level: Optional[int]) -> None:
        """Create the underlying :class:`logging.Logger` and attach handlers."""
        if level is None:
            level = logging.getLevelName(os.environ.get(self._LOG_LEVEL_ENV, "INFO").upper())
            if not isinstance(level, int):
                level = logging.INFO

        self._logger = logging.getLogger(self._LOGGER_NAME)
        self._logger.setLevel(level)

        # Host applications may have configured the logger already.
        if self._logger.handlers:
            return

        formatter = _JsonFormatter()

        stream_handler = logging.StreamHandler()
        stream_handler.setLevel(level)
        stream_handler.setFormatter(formatter)
        self._logger.addHandler(stream_handler)

        log_path = os.environ.get(self._LOG_FILE_ENV)
        if log_path:
            log_dir = os.path.dirname(log_path)
            if log_dir:
                os.makedirs(log_dir, exist_ok=True)
            file_handler = RotatingFileHandler(
                log_path,
                maxBytes=self._MAX_BYTES,
                backupCount=self._BACKUP_COUNT,
                encoding="utf-8",
            )
            file_handler.setLevel(level)
            file_handler.setFormatter(formatter)
            self._logger.addHandler(file_handler)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @staticmethod
    def get_logger(level: Optional[int] = None) -> logging.Logger:
        """Return the shared :class:`logging.Logger` instance.

        The first call decides the level (argument, then ``TEH_LOG_LEVEL``,
        then INFO); later calls return the same logger unchanged.
        """
        instance = TehLogger(level)
        assert instance._logger is not None  # guaranteed by __new__
        return instance._logger

    def cleanup(self) -> None:
        """Flush and close all handlers attached to the logger."""
        if self._logger is None:
            return
        for handler in list(self._logger.handlers):
            handler.flush()
            handler.close()
            self._logger.removeHandler(handler)
