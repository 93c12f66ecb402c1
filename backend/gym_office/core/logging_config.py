"""
Centralized logging configuration for the gym office API.

- JSON formatting for production and log files
- Colored console formatting for development
- Optional SQL timing through SQLAlchemy engine events
- Request/response logging hooks on the Flask app

Usage:
    from gym_office.core.logging_config import setup_logging

    setup_logging(app, log_level="INFO")

    logger = logging.getLogger(__name__)
    logger.info("Rental approved", extra={"context": {"rental_request_id": 7}})
"""

import json
import logging
import logging.handlers
import sys
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Union

from flask import Flask, g, request
from flask_login import current_user
from sqlalchemy import event
from sqlalchemy.engine import Engine

LOG_DIR = Path(__file__).parent.parent.parent / "logs"
_sql_timing_registered = False


class JSONFormatter(logging.Formatter):
    """Outputs one JSON object per record, including ``extra={"context": ...}``."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if hasattr(record, "context"):
            log_data["context"] = getattr(record, "context", {})

        return json.dumps(log_data, ensure_ascii=False, default=str)


class ConsoleFormatter(logging.Formatter):
    """Human-readable console formatter with colors for development."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.RESET)
        levelname = record.levelname
        record.levelname = f"{color}{levelname:8}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = levelname


def _add_rotating_handler(
    root_logger: logging.Logger,
    fallback: logging.Handler,
    filename: str,
    level: int,
) -> None:
    try:
        handler = logging.handlers.RotatingFileHandler(
            LOG_DIR / filename,
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=5,
            encoding="utf-8",
        )
    except OSError as e:
        fallback.handle(
            logging.LogRecord(
                name="gym_office.logging",
                level=logging.WARNING,
                pathname=__file__,
                lineno=0,
                msg=f"Failed to create file handler for {filename}: {e}. "
                "Falling back to console-only logging.",
                args=(),
                exc_info=None,
            )
        )
        return

    handler.setLevel(level)
    handler.setFormatter(JSONFormatter())
    root_logger.addHandler(handler)


def _register_sql_timing() -> None:
    global _sql_timing_registered
    if _sql_timing_registered:
        return

    @event.listens_for(Engine, "before_cursor_execute")
    def before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        conn.info.setdefault("query_start_time", []).append(time.time())

    @event.listens_for(Engine, "after_cursor_execute")
    def after_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        total_time = time.time() - conn.info["query_start_time"].pop(-1)
        logging.getLogger("sqlalchemy.performance").info(
            f"Query executed in {total_time * 1000:.2f}ms",
            extra={
                "context": {
                    "sql_query": statement[:500],
                    "sql_duration_ms": round(total_time * 1000, 2),
                }
            },
        )

    _sql_timing_registered = True


def _register_request_hooks(app: Flask) -> None:
    @app.before_request
    def log_request():
        g.request_start_time = time.time()
        g.request_id = f"{time.time()}-{id(request)}"
        g.user_id = None
        if current_user.is_authenticated:
            g.user_id = getattr(current_user, "id", None)

        logging.getLogger("flask.request").info(
            f"{request.method} {request.path}",
            extra={
                "context": {
                    "request_id": g.request_id,
                    "method": request.method,
                    "path": request.path,
                    "user_id": g.user_id,
                    "remote_addr": request.remote_addr,
                }
            },
        )

    @app.after_request
    def log_response(response):
        if hasattr(g, "request_start_time"):
            duration_ms = (time.time() - g.request_start_time) * 1000
            logging.getLogger("flask.response").info(
                f"{request.method} {request.path} {response.status_code} in {duration_ms:.2f}ms",
                extra={
                    "context": {
                        "request_id": g.get("request_id"),
                        "method": request.method,
                        "path": request.path,
                        "status_code": response.status_code,
                        "duration_ms": round(duration_ms, 2),
                    }
                },
            )
        return response


def setup_logging(
    app: Optional[Flask] = None,
    log_level: Union[int, str] = "INFO",
    enable_sql_echo: bool = False,
    log_to_file: bool = True,
    use_json_format: bool = False,
) -> None:
    """
    Configure logging for the Flask application.

    Args:
        app: Flask application instance (enables request/response hooks)
        log_level: Logging level (int like logging.INFO or string "INFO")
        enable_sql_echo: Log SQL statements with their duration
        log_to_file: Write JSON logs to rotating files under ``logs/``
        use_json_format: Use JSON instead of the colored console format
    """
    if isinstance(log_level, int):
        level = log_level
    else:
        level = getattr(logging, str(log_level).upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        handler.close()
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    if use_json_format:
        console_handler.setFormatter(JSONFormatter())
    else:
        console_handler.setFormatter(
            ConsoleFormatter(
                "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
    root_logger.addHandler(console_handler)

    if log_to_file:
        try:
            LOG_DIR.mkdir(exist_ok=True)
        except OSError as e:
            root_logger.warning(
                f"Failed to create logs directory: {e}. Logging will only go to console.",
                extra={"context": {"component": "logging_setup"}},
            )
        else:
            _add_rotating_handler(root_logger, console_handler, "app.log", level)
            _add_rotating_handler(
                root_logger, console_handler, "gym_office_errors.log", logging.ERROR
            )

    if enable_sql_echo:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)
        _register_sql_timing()

    if app is not None:
        _register_request_hooks(app)

    logging.getLogger("werkzeug").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    logging.getLogger("gym_office").info(
        f"Logging configured: level={level}, sql_echo={enable_sql_echo}, "
        f"log_to_file={log_to_file}, json_format={use_json_format}"
    )
