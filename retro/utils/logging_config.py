import logging
import logging.config
import os
from pathlib import Path
from typing import Any, Dict

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _rotating_file(path: Path, level: str, max_bytes: int, backup_count: int) -> Dict[str, Any]:
    return {
        "class": "logging.handlers.RotatingFileHandler",
        "formatter": "default",
        "filename": str(path),
        "maxBytes": max_bytes,
        "backupCount": backup_count,
        "level": level,
        "encoding": "utf8",
    }


def build_logging_config(
    log_dir: Path,
    *,
    level: str = "INFO",
    max_bytes: int = 5 * 1024 * 1024,
    backup_count: int = 3,
) -> Dict[str, Any]:
    """Return the dictConfig mapping for the retro service.

    Policy modules log under ``retro.*``; refused activations reach the app
    log at INFO and failures land in ``error.log`` as well.
    """
    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "default",
            "level": level,
        },
        "file_app": _rotating_file(log_dir / "app.log", level, max_bytes, backup_count),
        "file_error": _rotating_file(
            log_dir / "error.log", "ERROR", max_bytes, backup_count
        ),
    }
    server_loggers = {
        name: {"handlers": ["console", "file_app"], "level": "INFO", "propagate": False}
        for name in ("uvicorn", "uvicorn.access")
    }
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"default": {"format": _FORMAT}},
        "handlers": handlers,
        "loggers": {
            "": {"handlers": ["console", "file_error"], "level": "WARNING"},
            **server_loggers,
            "uvicorn.error": {
                "handlers": ["console", "file_error"],
                "level": "INFO",
                "propagate": False,
            },
            "retro": {
                "handlers": ["console", "file_app", "file_error"],
                "level": "DEBUG",
                "propagate": False,
            },
        },
    }


def setup_logging():
    """
    Configures logging for the retro service.
    ``LOG_DIR``, ``LOG_LEVEL``, ``LOG_MAX_BYTES`` and ``LOG_BACKUP_COUNT``
    override the defaults.
    """
    log_dir = Path(os.getenv("LOG_DIR", "logs"))
    log_dir.mkdir(parents=True, exist_ok=True)
    logging.config.dictConfig(
        build_logging_config(
            log_dir,
            level=os.getenv("LOG_LEVEL", "INFO").upper(),
            max_bytes=int(os.getenv("LOG_MAX_BYTES", str(5 * 1024 * 1024))),
            backup_count=int(os.getenv("LOG_BACKUP_COUNT", "3")),
        )
    )
    logging.getLogger("retro").info("Logging configured in %s", log_dir)
