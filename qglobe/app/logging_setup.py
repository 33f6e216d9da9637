from __future__ import annotations

import faulthandler
import logging
import logging.config
import os
import queue
import sys
import traceback
from dataclasses import dataclass
from logging.handlers import QueueHandler, QueueListener, RotatingFileHandler
from pathlib import Path

from qglobe.app.app_settings_manager import AppSettingsManager, RunMode
from qglobe.utils.log_util import level_from_name


@dataclass(frozen=True)
class LogPaths:
    log_file: Path
    crash_file: Path
    log_dir: Path


def _project_root_from_package() -> Path:
    """
    In development, the project root directory.
    qglobe/app/logging_setup.py -> parents[2] is the project root.
    """
    return Path(__file__).resolve().parents[2]


def _app_base_dir() -> Path:
    """
    Directory next to the executable when frozen, the project root otherwise.
    """
    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve().parent
    return _project_root_from_package()


def _find_writable_log_dir(app_name: str) -> Path:
    """
    First, app_base_dir/logs
    Second, user's home directory
    Finally, the current directory
    """
    candidates = [
        _app_base_dir() / "logs",
        Path.home() / f".{app_name.lower()}" / "logs",
    ]
    for d in candidates:
        try:
            d.mkdir(parents=True, exist_ok=True)
            test = d / ".write_test"
            test.write_text("ok", encoding="utf-8")
            test.unlink(missing_ok=True)
            return d
        except OSError:
            continue
    d = Path.cwd() / "logs"
    d.mkdir(parents=True, exist_ok=True)
    return d


def setup_startup_logging(
        app_name: str,
        *,
        level_file: int = logging.DEBUG,
        level_console: int = logging.INFO,
        max_bytes: int = 2_000_000,
        backup_count: int = 5,
        log_dir: Path | None = None,
    ) -> LogPaths:
    """
    Startup logging setup.
    - Rotating file handler
    - uncaught exception logging
    - faulthandler (crash logging)
    """
    log_dir = log_dir or _find_writable_log_dir(app_name)
    log_file = log_dir / f"{app_name}.log"
    crash_file = log_dir / f"{app_name}.crash.log"

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    # Prevent duplicate registration of handlers.
    if root.handlers:
        root.handlers.clear()

    fmt = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    fh = RotatingFileHandler(
        log_file,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    fh.setLevel(level_file)
    fh.setFormatter(fmt)
    root.addHandler(fh)

    ch = logging.StreamHandler(sys.stdout)
    ch.setLevel(level_console)
    ch.setFormatter(fmt)
    root.addHandler(ch)

    try:
        crash_file.parent.mkdir(parents=True, exist_ok=True)
        f = open(crash_file, "w", encoding="utf-8")
        faulthandler.enable(file=f)
        # Keep the file object alive for faulthandler.
        root._qglobe_crash_fh = f
    except OSError:
        logging.getLogger(__name__).warning("Crash log unavailable: %s", crash_file)

    def _excepthook(exc_type, exc, tb):
        logging.critical(
            "Uncaught exception: \n%s",
            "".join(traceback.format_exception(exc_type, exc, tb)),
        )

    sys.excepthook = _excepthook

    logging.info("=================================================")
    logging.info("%s starting...", app_name)
    logging.info("frozen=%s", getattr(sys, "frozen", False))
    logging.info("sys.executable=%s", sys.executable)
    logging.info("cwd=%s", os.getcwd())
    logging.info("log_file=%s", log_file)
    logging.info("crash_file=%s", crash_file)
    logging.info("=================================================")

    return LogPaths(log_file=log_file, crash_file=crash_file, log_dir=log_dir)


def default_log_dir(app_name: str) -> Path:
    base = Path.home() / f".{app_name.lower()}" / "logs"
    base.mkdir(parents=True, exist_ok=True)
    return base


def build_config(app_name: str, root_level: int | str | None = None,
                 console_level: int | str = "INFO", log_dir: Path | None = None) -> dict:
    """Build a logging config dict."""
    root_level = root_level or os.getenv("QGLOBE_LOG_LEVEL", "INFO").upper()
    log_dir = log_dir or default_log_dir(app_name)
    log_file = str(log_dir / f"{app_name}.log")

    fmt = "%(asctime)s.%(msecs)03dZ %(levelname)s %(process)d %(threadName)s %(name)s %(message)s"
    datefmt = "%Y-%m-%dT%H:%M:%S"
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": fmt, "datefmt": datefmt,
            },
        },
        "handlers": {
            # Records go through a queue; the file is written by the listener.
            "queue": {"class": "logging.handlers.QueueHandler", "queue": queue.Queue(-1)},
            "console": {"class": "logging.StreamHandler", "formatter": "standard", "level": console_level},
        },
        "root": {"level": root_level, "handlers": ["queue", "console"]},
        "_file_settings": {
            "filename": log_file,
            "maxBytes": 1024 * 1024 * 5,
            "backupCount": int(os.getenv("QGLOBE_LOG_BACKUP_COUNT", 5)),
            "encoding": "utf-8",
            "format": fmt,
            "datefmt": datefmt
        },
    }


class LogSystem:
    """Thin wrapper owning the QueueListener that writes the log file."""
    def __init__(self, app_name: str, level: int | str | None = None,
                 console_level: int | str = "INFO"):
        cfg = build_config(app_name, level, console_level)
        # dictConfig ignores "_file_settings"; it is read back below.
        logging.config.dictConfig(cfg)

        qh: QueueHandler | None = None
        for h in logging.getLogger().handlers:
            if isinstance(h, QueueHandler):
                qh = h
                break
        if qh is None:
            raise RuntimeError("QueueHandler not found.")

        self._console_handler: logging.Handler | None = None
        for h in logging.getLogger().handlers:
            if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler):
                self._console_handler = h
                break

        file_settings = cfg["_file_settings"]
        self._file_handler = RotatingFileHandler(
            file_settings["filename"],
            maxBytes=file_settings["maxBytes"],
            backupCount=file_settings["backupCount"],
            encoding=file_settings["encoding"],
        )
        self._file_handler.setFormatter(
            logging.Formatter(file_settings["format"], file_settings["datefmt"]))

        self.listener = QueueListener(qh.queue, self._file_handler, respect_handler_level=True)
        self.listener.start()

    @classmethod
    def from_levels(cls, app_name: str, *, root_level: int,
                    console_level: int | None = None) -> LogSystem:
        logs = cls(app_name, level=root_level, console_level=console_level or root_level)
        logs.apply_levels(root_level, console_level=console_level)
        return logs

    def apply_levels(self, root_level: int, console_level: int | None = None,
                     file_level: int | None = None) -> None:
        """Update log levels after startup."""
        logging.getLogger().setLevel(root_level)
        if self._console_handler is not None and console_level is not None:
            self._console_handler.setLevel(console_level)
        if file_level is not None:
            self._file_handler.setLevel(file_level)

    def stop(self):
        self.listener.stop()
        self._file_handler.close()


def apply_logging_policy(logs: LogSystem, settings: AppSettingsManager) -> None:
    """Switch log levels according to the run mode."""
    mode = getattr(settings, "run_mode", None)
    if mode is None:
        mode = RunMode.DEVELOPMENT if getattr(settings, "dev_mode", False) else RunMode.PRODUCTION

    if mode == RunMode.DEVELOPMENT or mode == RunMode.VERBOSE:
        root = logging.DEBUG
        console = logging.DEBUG
        file = logging.DEBUG
    else:
        root = logging.DEBUG
        console = level_from_name(settings.logging_level)
        file = logging.DEBUG

    logs.apply_levels(root_level=root, console_level=console, file_level=file)


def install_qt_message_handler():
    try:
        from PySide6.QtCore import qInstallMessageHandler

        def handler(msg_type, context, message):
            logging.getLogger("Qt").error(message)

        qInstallMessageHandler(handler)
        logging.getLogger("Qt").info("Qt message handler installed.")
    except Exception:
        logging.getLogger(__name__).exception("Failed to install Qt message handler.")
