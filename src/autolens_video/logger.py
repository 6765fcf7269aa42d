"""
Logging for AutoLens Video.

One package logger ("autolens_video") shared by every module:
- console output on stdout; INFO lines are printed bare so CLI progress
  reads cleanly, other levels carry a clock and level tag
- LOG_LEVEL selects the console threshold (default INFO)
- a compile job can mirror everything, DEBUG included, into
  OUTPUT_DIR/compile_<job_id>.log

Usage:
    from autolens_video.logger import logger, log_step

    log_step("Compiling 3 clips")
    logger.debug("ffmpeg -hide_banner -i scene1.mp4 ...")
"""

import logging
import os
import sys
from pathlib import Path
from typing import Optional

LOGGER_NAME = "autolens_video"

CLOCK_FORMAT = "%H:%M:%S"
JOB_LOG_PATTERN = "compile_{job_id}.log"


def get_log_level() -> int:
    """Console threshold from LOG_LEVEL; unknown names mean INFO."""
    name = os.environ.get("LOG_LEVEL", "INFO").strip().upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


class ConsoleFormatter(logging.Formatter):
    """Bare INFO lines; everything else prefixed with time and level tag."""

    TAGS = {
        logging.DEBUG: "DEBUG",
        logging.WARNING: "WARN",
        logging.ERROR: "ERROR",
        logging.CRITICAL: "CRITICAL",
    }

    def __init__(self):
        super().__init__(datefmt=CLOCK_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"

        tag = self.TAGS.get(record.levelno)
        if tag is None:
            return message

        clock = self.formatTime(record, self.datefmt)
        if record.levelno == logging.DEBUG:
            return f"{clock} [{tag}] {record.name}: {message}"
        return f"{clock} [{tag}] {message}"


class JobFileFormatter(logging.Formatter):
    """Full timestamp, level and source location for job log files."""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s | %(levelname)-8s | %(module)s:%(lineno)d | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )


def setup_logger(name: str = LOGGER_NAME, level: Optional[int] = None) -> logging.Logger:
    """Attach the console handler once; later calls return the same logger."""
    configured = logging.getLogger(name)
    if configured.handlers:
        return configured

    threshold = level or get_log_level()
    # File handlers need DEBUG records even when the console is quieter
    configured.setLevel(logging.DEBUG)
    configured.propagate = False

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(threshold)
    console.setFormatter(ConsoleFormatter())
    configured.addHandler(console)
    return configured


def configure_file_logging(output_dir: Path, job_id: str) -> Path:
    """
    Start mirroring the package log into the job's log file.

    Returns:
        The log file path; pass it to remove_file_logging when the job ends.
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    log_file = output_dir / JOB_LOG_PATTERN.format(job_id=job_id)

    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(JobFileFormatter())
    logger.addHandler(handler)
    return log_file


def remove_file_logging(log_file: Path) -> None:
    """Detach and close the handler writing `log_file`."""
    target = os.path.abspath(log_file)
    for handler in list(logger.handlers):
        if isinstance(handler, logging.FileHandler) and handler.baseFilename == target:
            logger.removeHandler(handler)
            handler.close()


logger = setup_logger()


# Progress helpers used by the compiler, post-processing and CLI

def log_step(message: str, marker: str = "▶") -> None:
    logger.info(f"{marker} {message}")


def log_success(message: str) -> None:
    logger.info(f"   ✅ {message}")


def log_warning(message: str) -> None:
    logger.warning(f"   ⚠️  {message}")


def log_error(message: str) -> None:
    logger.error(f"   ❌ {message}")
