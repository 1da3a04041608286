from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from upload_relay.core.config import Settings

ERROR_LOG_NAME = "errors.log"
_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(settings: Settings) -> Path:
    """
    Console + файл ошибок с ротацией (<log_dir>/errors.log).
    Повторный вызов не дублирует хендлеры.
    """
    log_dir = Path(settings.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    error_log = (log_dir / ERROR_LOG_NAME).resolve()

    logger = logging.getLogger("upload_relay")
    logger.setLevel(settings.log_level.upper())

    for handler in list(logger.handlers):
        if getattr(handler, "_upload_relay", False):
            logger.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter(_FORMAT)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    console._upload_relay = True  # type: ignore[attr-defined]
    logger.addHandler(console)

    file_handler = RotatingFileHandler(
        error_log, maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8"
    )
    file_handler.setLevel(logging.ERROR)
    file_handler.setFormatter(formatter)
    file_handler._upload_relay = True  # type: ignore[attr-defined]
    logger.addHandler(file_handler)

    return error_log
