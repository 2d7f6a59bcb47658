import logging
import json
import os
from pathlib import Path
import threading

ROOT_LOGGER_NAME = "loan_inventory"


class SingletonLogger:
    """
    Configures the `loan_inventory` logger hierarchy once per process.

    Modules ask for `loan_inventory.<layer>.<name>` children; records
    propagate to the handlers installed here on the root of the hierarchy.
    """
    _instance = None
    _lock = threading.Lock()
    _root = None

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super(SingletonLogger, cls).__new__(cls)
        return cls._instance

    def get_logger(self, name: str = ROOT_LOGGER_NAME) -> logging.Logger:
        """
        Args:
            name (str): Dotted logger name; names outside the hierarchy are
                placed under it

        Returns:
            logging.Logger: A logger sharing the configured handlers
        """
        if self._root is None:
            with self._lock:
                if self._root is None:
                    self._root = self._configure_root()

        if name == ROOT_LOGGER_NAME:
            return self._root
        if not name.startswith(ROOT_LOGGER_NAME + "."):
            name = f"{ROOT_LOGGER_NAME}.{name}"
        return logging.getLogger(name)

    @staticmethod
    def _configure_root() -> logging.Logger:
        logger = logging.getLogger(ROOT_LOGGER_NAME)
        logger.setLevel(logging.DEBUG)
        logger.propagate = False
        logger.handlers.clear()

        formatter = JsonFormatter({
            "timestamp": "asctime",
            "level": "levelname",
            "logger": "name",
            "function": "funcName",
            "line": "lineno",
            "message": "message"
        })
        request_filter = RequestContextFilter()
        console_level = getattr(logging, os.environ.get("LOG_LEVEL", "DEBUG").upper(), logging.DEBUG)

        logs_dir = Path(os.environ.get("LOG_DIR", "logs"))
        logs_dir.mkdir(parents=True, exist_ok=True)

        handlers = [
            (logging.FileHandler(logs_dir / "loan_inventory.log", mode='w', encoding='utf-8'), logging.INFO),
            (logging.FileHandler(logs_dir / "errors.log", mode='w', encoding='utf-8'), logging.ERROR),
            (logging.StreamHandler(), console_level),
        ]
        for handler, level in handlers:
            handler.setLevel(level)
            handler.setFormatter(formatter)
            handler.addFilter(request_filter)
            logger.addHandler(handler)

        return logger


class RequestContextFilter(logging.Filter):
    """Attach method, path, client address and user id of the current request"""

    def filter(self, record) -> bool:
        from flask import g, has_request_context, request

        if has_request_context():
            record.request = {
                "method": request.method,
                "path": request.path,
                "remote_addr": request.remote_addr,
            }
            # Only read a user Flask-Login already loaded; never trigger a load from here
            user = getattr(g, "_login_user", None)
            if user is not None and getattr(user, "is_authenticated", False):
                record.request["user_id"] = user.id
        return True


class JsonFormatter(logging.Formatter):
    """
    One JSON object per record.

    @param dict fmt_dict: Output key -> LogRecord attribute. Defaults to {"message": "message"}.
    @param str time_format: time.strftime() format string. Default: "%Y-%m-%dT%H:%M:%S"
    @param str msec_format: Millisecond suffix format. Default: "%s.%03dZ"
    """
    def __init__(self, fmt_dict: dict = None, time_format: str = "%Y-%m-%dT%H:%M:%S", msec_format: str = "%s.%03dZ"):
        super().__init__()
        self.fmt_dict = fmt_dict if fmt_dict is not None else {"message": "message"}
        self.default_time_format = time_format
        self.default_msec_format = msec_format
        self.datefmt = None

    def usesTime(self) -> bool:
        return "asctime" in self.fmt_dict.values()

    def format(self, record) -> str:
        record.message = record.getMessage()
        if self.usesTime():
            record.asctime = self.formatTime(record, self.datefmt)

        payload = {key: getattr(record, attribute, None) for key, attribute in self.fmt_dict.items()}

        request_info = getattr(record, "request", None)
        if request_info:
            payload["request"] = request_info

        if record.exc_info and not record.exc_text:
            record.exc_text = self.formatException(record.exc_info)
        if record.exc_text:
            payload["exc_info"] = record.exc_text
        if record.stack_info:
            payload["stack_info"] = self.formatStack(record.stack_info)

        return json.dumps(payload, default=str, ensure_ascii=False)


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """
    Get a logger of the `loan_inventory` hierarchy.

    Args:
        name (str): Dotted name, e.g. "loan_inventory.routes.loans"

    Returns:
        logging.Logger: Logger writing to the shared JSON handlers
    """
    return SingletonLogger().get_logger(name)
