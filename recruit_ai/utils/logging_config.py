"""
Logging setup for the Recruit AI scoring service

One dictConfig profile per ENVIRONMENT. Loggers are named recruit_ai.<module>,
and API/service calls are traced by the candidate and job they concern.
"""
import functools
import logging
import logging.config
import os
import time
from datetime import date
from pathlib import Path
from typing import Any, Dict

FORMATS = {
    "simple": "%(levelname)s - %(name)s - %(message)s",
    "detailed": "%(asctime)s | %(levelname)-8s | %(name)-30s | %(funcName)-20s:%(lineno)-4d | %(message)s",
}

# ENVIRONMENT -> (level, write log files, console format); None level means LOG_LEVEL
PROFILES = {
    "production": (None, True, "detailed"),
    "development": ("DEBUG", True, "detailed"),
    "testing": ("WARNING", False, "simple"),
}

CONTEXT_FIELDS = ("candidate_id", "job_id")


def _rotating_file(path: Path, level: str) -> Dict[str, Any]:
    return {
        "class": "logging.handlers.RotatingFileHandler",
        "level": level,
        "formatter": "file",
        "filename": str(path),
        "maxBytes": 10 * 1024 * 1024,
        "backupCount": 5,
        "encoding": "utf8",
    }


def setup_logging(level: str = "INFO", enable_file: bool = True, format_style: str = "detailed") -> None:
    """
    Configure console logging and, optionally, daily rotating log files

    Args:
        level: Logging level for the service loggers
        enable_file: Also write recruit_ai_<date>.log and an errors-only file under LOG_DIR
        format_style: Console format, 'simple' or 'detailed'
    """
    handlers: Dict[str, Dict[str, Any]] = {
        "console": {
            "class": "logging.StreamHandler",
            "level": level,
            "formatter": "console",
            "stream": "ext://sys.stdout",
        }
    }
    if enable_file:
        log_dir = Path(os.getenv("LOG_DIR", "logs"))
        log_dir.mkdir(parents=True, exist_ok=True)
        stamp = date.today().strftime("%Y%m%d")
        handlers["file"] = _rotating_file(log_dir / f"recruit_ai_{stamp}.log", level)
        handlers["error_file"] = _rotating_file(log_dir / f"recruit_ai_errors_{stamp}.log", "ERROR")

    names = list(handlers)
    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "console": {"format": FORMATS.get(format_style, FORMATS["detailed"]), "datefmt": "%Y-%m-%d %H:%M:%S"},
            "file": {"format": FORMATS["detailed"], "datefmt": "%Y-%m-%d %H:%M:%S"},
        },
        "handlers": handlers,
        "loggers": {
            "": {"level": level, "handlers": names},
            "uvicorn": {"level": "INFO", "handlers": names, "propagate": False},
            "uvicorn.access": {"level": "INFO", "handlers": ["console"], "propagate": False},
        },
    })
    get_logger("logging").info(f"Logging configured - level {level}, log files {'on' if enable_file else 'off'}")


def configure_for_environment():
    """Apply the profile for ENVIRONMENT (development when unset)"""
    environment = os.getenv("ENVIRONMENT", "development").lower()
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    level, enable_file, style = PROFILES.get(environment, (log_level, True, "detailed"))
    setup_logging(level=level or log_level, enable_file=enable_file, format_style=style)


def get_logger(name: str) -> logging.Logger:
    if name.startswith("recruit_ai"):
        return logging.getLogger(name)
    return logging.getLogger(f"recruit_ai.{name}")


def request_context(kwargs: Dict[str, Any]) -> Dict[str, Any]:
    """Candidate/job ids, batch size and route of an endpoint call, taken from its arguments"""
    context: Dict[str, Any] = {}
    for name, value in kwargs.items():
        if name in CONTEXT_FIELDS and isinstance(value, str):
            context[name] = value
        elif hasattr(value, "method") and hasattr(value, "url"):
            context["method"] = value.method
            context["path"] = value.url.path
        else:
            for field in CONTEXT_FIELDS:
                found = getattr(value, field, None)
                if isinstance(found, str) and found:
                    context[field] = found
            resumes = getattr(value, "resumes", None)
            if isinstance(resumes, list):
                context["resumes"] = len(resumes)
    return context


def _describe(context: Dict[str, Any]) -> str:
    return " ".join(f"{k}={v}" for k, v in context.items())


def log_api_call(operation: str):
    """
    Decorator for async endpoints: logs start, duration and outcome with the request context
    """
    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            logger = get_logger(f"api.{func.__module__}")
            context = request_context(kwargs)
            label = f" [{_describe(context)}]" if context else ""
            start = time.perf_counter()
            logger.info(f"API {operation} started{label}", extra=context)

            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                elapsed = time.perf_counter() - start
                # client errors (4xx) are routine for this API
                status = getattr(e, "status_code", 500)
                log = logger.warning if status < 500 else logger.error
                log(f"API {operation} failed with {status} after {elapsed:.3f}s{label}: {e}",
                    extra={**context, "execution_time": elapsed})
                raise

            elapsed = time.perf_counter() - start
            logger.info(f"API {operation} completed in {elapsed:.3f}s{label}",
                        extra={**context, "execution_time": elapsed})
            return result

        return wrapper
    return decorator


def log_function_call(func):
    """Debug-log entry and duration of a synchronous service call"""
    logger = get_logger(func.__module__)

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        context = {k: kwargs[k] for k in CONTEXT_FIELDS if kwargs.get(k)}
        start = time.perf_counter()
        logger.debug(f"Entering {func.__name__} {_describe(context)}".rstrip())
        try:
            result = func(*args, **kwargs)
        except Exception as e:
            logger.error(f"Error in {func.__name__} after {time.perf_counter() - start:.3f}s: {e}")
            raise
        logger.debug(f"Completed {func.__name__} in {time.perf_counter() - start:.3f}s")
        return result

    return wrapper


class PerformanceMonitor:
    """Times a block of work; slower than threshold_ms logs a warning"""

    def __init__(self, operation_name: str, logger: logging.Logger = None, threshold_ms: float = 1000):
        self.operation_name = operation_name
        self.logger = logger or get_logger("performance")
        self.threshold_ms = threshold_ms
        self.elapsed_ms = None
        self._start = None

    def __enter__(self):
        self._start = time.perf_counter()
        self.logger.debug(f"Starting {self.operation_name}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.elapsed_ms = (time.perf_counter() - self._start) * 1000
        if exc_type is not None:
            self.logger.error(f"{self.operation_name} failed after {self.elapsed_ms:.2f}ms: {exc_val}")
        elif self.elapsed_ms > self.threshold_ms:
            self.logger.warning(f"{self.operation_name} took {self.elapsed_ms:.2f}ms (threshold {self.threshold_ms}ms)")
        else:
            self.logger.info(f"{self.operation_name} completed in {self.elapsed_ms:.2f}ms")
        return False
