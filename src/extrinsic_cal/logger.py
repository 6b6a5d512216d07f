import logging
import logging.handlers
import sys
from pathlib import Path

from extrinsic_cal import APP_SETTINGS_PATH, LOG_FILE_PATH
from extrinsic_cal.settings import Settings, load_settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-15s | %(lineno)4d | %(message)s"


def handle_exception(exc_type, exc_value, exc_traceback):
    """
    Global exception hook to log unhandled exceptions.
    """
    if issubclass(exc_type, KeyboardInterrupt):
        sys.__excepthook__(exc_type, exc_value, exc_traceback)
        return
    logging.critical("Unhandled exception", exc_info=(exc_type, exc_value, exc_traceback))


def setup_logging(settings: Settings | None = None, settings_path: Path = APP_SETTINGS_PATH):
    """
    Configures the root logger for the entire application.

    Unless `settings` are given, they are loaded from `settings_path`
    (defaults apply when that file does not exist).
    """
    root_logger = logging.getLogger()
    if root_logger.hasHandlers():
        return

    if settings is None:
        settings = load_settings(settings_path)

    root_logger.setLevel(settings.log_level)
    formatter = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    # 1. File Handler
    if settings.log_to_file:
        settings.log_dir.mkdir(parents=True, exist_ok=True)
        log_file = settings.log_dir / LOG_FILE_PATH.name
        file_handler = logging.handlers.RotatingFileHandler(
            filename=log_file, maxBytes=5 * 1024 * 1024, backupCount=5, encoding="utf-8"
        )
        file_handler.setFormatter(formatter)
        file_handler.setLevel(settings.log_level)
        root_logger.addHandler(file_handler)

    # 2. Console Handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(settings.log_level)
    root_logger.addHandler(console_handler)

    sys.excepthook = handle_exception

    root_logger.info("Logging configured.")
