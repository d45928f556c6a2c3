"""
JSON logging for the statement import.

Every record carries the id of the import it belongs to. StatementImporter.parse
binds a fresh id to the current thread for the duration of one file (unless the
caller already bound one, e.g. an upload id) so all reader, engine and
classifier records of that file can be grouped. Records outside an import are
tagged "GLOBAL".
"""
import logging
import json
import os
import uuid
import datetime
from typing import Any, Optional
from threading import local

# import id of the file currently being processed by this thread
_context = local()


class JSONFormatter(logging.Formatter):
    """
    Renders a record as one JSON line: standard fields, the current import
    id and the keyword fields passed through StructuredLoggerAdapter.
    """
    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "import_id": getattr(_context, "import_id", "GLOBAL"),
        }

        if hasattr(record, "extra_fields") and isinstance(record.extra_fields, dict):
            log_data.update(record.extra_fields)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, ensure_ascii=False, default=str)


def setup_logging(log_level: int = logging.INFO, log_file: Optional[str] = None):
    """
    Configure the root logger with JSON output on the console and,
    optionally, in a log file.
    StatementImporter(configure_logging=True) calls it with the log_level
    and log_file settings.

    Args:
        log_level: Level for the root logger (int or level name)
        log_file: Path of the JSON log file, or None for console only
    """
    if isinstance(log_level, str):
        log_level = logging.getLevelName(log_level.upper())

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    if root_logger.handlers:
        root_logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(JSONFormatter())
    root_logger.addHandler(console_handler)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(file_handler)

    logging.getLogger(__name__).debug(
        "Logging configured.", extra={"extra_fields": {"level": logging.getLevelName(log_level)}}
    )


def set_import_id(import_id: Optional[str] = None) -> str:
    """
    Bind an import id to the current thread. Generates one when omitted.

    Callers that bind an id own it and clear it again with clear_import_id().
    """
    _context.import_id = import_id or uuid.uuid4().hex
    return _context.import_id


def get_import_id() -> Optional[str]:
    """Return the import id bound to the current thread, if any."""
    return getattr(_context, "import_id", None)


def clear_import_id():
    if hasattr(_context, "import_id"):
        del _context.import_id


class StructuredLoggerAdapter(logging.LoggerAdapter):
    """
    Adapter that turns keyword arguments into structured JSON fields:

        logger.info("Template matched", template="ING CSV", movements=12)
    """
    def process(self, msg: Any, kwargs: Any) -> tuple[Any, Any]:
        extra = kwargs.get("extra", {})
        if "extra_fields" not in extra:
            extra["extra_fields"] = {}

        standard_args = {'exc_info', 'stack_info', 'stacklevel', 'extra'}
        new_kwargs = {}
        for key, value in kwargs.items():
            if key in standard_args:
                new_kwargs[key] = value
            else:
                extra["extra_fields"][key] = value

        new_kwargs["extra"] = extra
        return msg, new_kwargs


def get_logger(name: str) -> StructuredLoggerAdapter:
    """
    Module loggers of the package: logger = get_logger(__name__)
    """
    return StructuredLoggerAdapter(logging.getLogger(name), {})
