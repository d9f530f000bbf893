import logging
import logging.handlers
from pathlib import Path
from typing import Optional


def setup_logging(log_level: str = "INFO", log_dir: Optional[Path] = None) -> None:
    """Configure logging for the Guandan scorer.

    Rounds, saves and rejected input go to the console at *log_level*;
    the rotating file under *log_dir* (default ``logs/``) keeps everything
    down to DEBUG, including per-round engine decisions.
    """
    root_logger = logging.getLogger()
    if root_logger.handlers:
        return  # Already configured

    log_dir = Path(log_dir) if log_dir else Path(__file__).parent.parent / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    level = getattr(logging, log_level.upper(), logging.INFO)

    root_logger.setLevel(logging.DEBUG)

    # 1MB per file, keep 5 backups
    file_handler = logging.handlers.RotatingFileHandler(
        log_dir / "guandan_scorer.log",
        maxBytes=1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.setLevel(logging.DEBUG)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    file_handler.setFormatter(formatter)
    console_handler.setFormatter(formatter)

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    logging.getLogger(__name__).debug(
        "Logging initialized (console=%s, dir=%s)", log_level, log_dir
    )
