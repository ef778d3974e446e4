"""
Logging configuration with structured logging
"""

import logging
import logging.handlers
import sys
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import structlog


class JSONFormatter(logging.Formatter):
    """JSON formatter for the rotating log files"""

    EXTRA_FIELDS = ("user_id", "ip_address", "endpoint", "method", "status_code", "response_time")

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        for field in self.EXTRA_FIELDS:
            if hasattr(record, field):
                log_entry[field] = getattr(record, field)

        return json.dumps(log_entry, ensure_ascii=False, default=str)


class LoggingConfig:
    """Centralized logging configuration"""

    def __init__(self, log_level: str = "INFO", log_dir: Optional[str] = "logs"):
        self.log_level = getattr(logging, log_level.upper(), logging.INFO)
        self.log_dir = Path(log_dir) if log_dir else None

    def apply(self):
        self._configure_structlog()
        self._configure_standard_logging()

    def _configure_structlog(self):
        """Configure structlog for structured logging"""
        structlog.configure(
            processors=[
                structlog.stdlib.filter_by_level,
                structlog.stdlib.add_logger_name,
                structlog.stdlib.add_log_level,
                structlog.stdlib.PositionalArgumentsFormatter(),
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.UnicodeDecoder(),
                structlog.processors.JSONRenderer()
            ],
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )

    def _configure_standard_logging(self):
        root_logger = logging.getLogger()
        root_logger.setLevel(self.log_level)

        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(self.log_level)
        console_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        ))
        root_logger.addHandler(console_handler)

        if self.log_dir is not None:
            self._setup_file_handlers(root_logger)

        self._configure_specific_loggers()

    def _setup_file_handlers(self, root_logger: logging.Logger):
        """Setup rotating file handlers"""
        self.log_dir.mkdir(parents=True, exist_ok=True)

        app_handler = logging.handlers.RotatingFileHandler(
            self.log_dir / "app.log",
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5
        )
        app_handler.setLevel(self.log_level)
        app_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(app_handler)

        error_handler = logging.handlers.RotatingFileHandler(
            self.log_dir / "error.log",
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=10
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(error_handler)

        access_handler = logging.handlers.RotatingFileHandler(
            self.log_dir / "access.log",
            maxBytes=50 * 1024 * 1024,  # 50MB
            backupCount=7
        )
        access_handler.setLevel(logging.INFO)
        access_handler.setFormatter(JSONFormatter())

        access_logger = logging.getLogger("access")
        access_logger.addHandler(access_handler)
        access_logger.setLevel(logging.INFO)
        access_logger.propagate = False

    def _configure_specific_loggers(self):
        """Turn down noisy third-party loggers"""
        for name in ("sqlalchemy.engine", "sqlalchemy.pool", "sqlalchemy.orm", "asyncio",
                     "botocore", "boto3", "urllib3", "uvicorn.access"):
            logging.getLogger(name).setLevel(logging.WARNING)
        logging.getLogger("uvicorn.error").setLevel(logging.INFO)


class RequestLogger:
    """Writes one access-log line per request"""

    def __init__(self):
        self.access_logger = logging.getLogger("access")

    def log_request(
        self,
        method: str,
        path: str,
        status_code: int,
        response_time: float,
        ip_address: str = "",
        user_id: str = ""
    ):
        extra = {
            "method": method,
            "endpoint": path,
            "status_code": status_code,
            "response_time": response_time,
            "ip_address": ip_address,
            "user_id": user_id,
        }

        message = f"{method} {path} - {status_code} - {response_time:.3f}s"

        if status_code >= 500:
            self.access_logger.error(message, extra=extra)
        elif status_code >= 400:
            self.access_logger.warning(message, extra=extra)
        else:
            self.access_logger.info(message, extra=extra)


request_logger = RequestLogger()


def configure_logging(log_level: str = "INFO", log_dir: Optional[str] = "logs") -> LoggingConfig:
    """Configure structlog and stdlib logging once, at application start"""
    config = LoggingConfig(log_level=log_level, log_dir=log_dir)
    config.apply()
    return config
