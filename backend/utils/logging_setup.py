# backend/utils/logging_setup.py
import logging
import logging.handlers
from pathlib import Path

FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"

def setup_logging(settings) -> None:
    """Configure the root logger: console always, rotating file when LOG_FILE is set."""
    level = getattr(logging, (settings.LOG_LEVEL or "INFO").upper(), logging.INFO)
    fmt = logging.Formatter(FORMAT)

    root = logging.getLogger()
    root.setLevel(level)

    # avoid duplicate handlers on reload
    if not any(getattr(h, "_brandops", False) for h in root.handlers):
        console = logging.StreamHandler()
        console.setFormatter(fmt)
        console._brandops = True
        root.addHandler(console)

        if settings.LOG_FILE:
            log_path = Path(settings.LOG_FILE).expanduser()
            log_path.parent.mkdir(parents=True, exist_ok=True)
            handler = logging.handlers.RotatingFileHandler(log_path, maxBytes=5_000_000, backupCount=3, encoding="utf-8")
            handler.setFormatter(fmt)
            handler._brandops = True
            root.addHandler(handler)

    # uvicorn keeps its own handlers; only align the level
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(name).setLevel(level)
