from __future__ import annotations
import logging
from logging.handlers import RotatingFileHandler
import os, functools, time
from pathlib import Path

_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


class _LoggerManager:
    def __init__(self) -> None:
        self._configured = False
        self._module_handlers: dict[str, logging.Handler] = {}

    @property
    def level(self) -> int:
        return getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)

    @property
    def log_dir(self) -> str:
        return os.getenv("LOG_DIR", "./logs")

    @property
    def to_file(self) -> bool:
        return os.getenv("LOG_TO_FILE", "true").lower() == "true"

    def _ensure(self) -> None:
        if self._configured:
            return

        root = logging.getLogger()
        root.setLevel(self.level)
        if not any(isinstance(h, logging.StreamHandler) for h in root.handlers):
            sh = logging.StreamHandler()
            sh.setLevel(self.level)
            sh.setFormatter(logging.Formatter(fmt=_FORMAT, datefmt=_DATEFMT))
            root.addHandler(sh)

        if self.to_file:
            Path(self.log_dir).mkdir(parents=True, exist_ok=True)
        self._configured = True

    def setup_logger(self, name: str) -> logging.Logger:
        self._ensure()
        logger = logging.getLogger(name)

        if self.to_file and name not in self._module_handlers:
            safe_name = name.replace(".", "_").replace("/", "_")
            file_path = os.path.join(self.log_dir, f"{safe_name}.log")
            try:
                fh = RotatingFileHandler(
                    file_path,
                    maxBytes=int(os.getenv("LOG_MAX_BYTES", "1048576")),
                    backupCount=int(os.getenv("LOG_BACKUP_COUNT", "3")),
                    encoding="utf-8",
                )
                fh.setLevel(self.level)
                fh.setFormatter(logging.Formatter(
                    fmt="%(asctime)s | %(levelname)s | %(message)s",
                    datefmt=_DATEFMT
                ))
                self._module_handlers[name] = fh
                logger.addHandler(fh)
                logger.propagate = True  # conserva salida a consola
            except OSError as e:
                logging.getLogger(__name__).warning(f"No se pudo crear el log de {name}: {e}")

        return logger


logger_manager = _LoggerManager()


def log_function(func):
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        logger = logger_manager.setup_logger(func.__module__)
        logger.debug(f"→ {func.__qualname__} args={args} kwargs={kwargs}")
        t0 = time.time()
        try:
            result = func(*args, **kwargs)
            logger.debug(f"← {func.__qualname__} ({(time.time()-t0)*1000:.1f} ms)")
            return result
        except Exception as e:
            logger.debug(f"✗ {func.__qualname__}: {e}")
            raise
    return wrapper
