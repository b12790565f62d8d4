import logging
import os
import uuid
import gzip
import shutil
from pathlib import Path
from logging.handlers import TimedRotatingFileHandler
from time import perf_counter
from typing import Optional


LOG_DIR_ENV = "SCAN_TARGETS_LOG_DIR"


# ----------------------------------------------------------------------
# Custom Filters
# ----------------------------------------------------------------------
class CorrelationFilter(logging.Filter):
    """Attach correlation/run ID to every log record."""

    def __init__(self, run_id: str):
        super().__init__()
        self.run_id = run_id

    def filter(self, record: logging.LogRecord) -> bool:
        record.run_id = self.run_id
        return True


# ----------------------------------------------------------------------
# Log rotation with gzip compression
# ----------------------------------------------------------------------
def _rotator(source, dest):
    with open(source, "rb") as sf, gzip.open(dest + ".gz", "wb") as df:
        shutil.copyfileobj(sf, df)
    Path(source).unlink()


def _log_dir() -> Path:
    return Path(os.environ.get(LOG_DIR_ENV, "logs"))


# ----------------------------------------------------------------------
# Logger Setup
# ----------------------------------------------------------------------
def get_logger(
    name: str,
    log_level: str = "INFO",
    log_file: str = "scan_targets.log",
    run_id: Optional[str] = None,
    retention_days: int = 30,
) -> logging.Logger:
    """
    Create or retrieve a logger:
    - Console + file rotated daily, old files gzipped, N days retained
    - Correlation ID (run_id) on every record

    Handlers are attached once per logger name; later calls only adjust the level.
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))
    if logger.handlers:
        return logger

    log_dir = _log_dir()
    log_dir.mkdir(parents=True, exist_ok=True)

    corr_filter = CorrelationFilter(run_id or str(uuid.uuid4()))
    fmt = logging.Formatter(
        "%(asctime)s | %(levelname)s | %(name)s | run_id=%(run_id)s | "
        "%(filename)s:%(lineno)d | %(message)s"
    )

    ch = logging.StreamHandler()
    ch.setLevel(logging.DEBUG)
    ch.setFormatter(fmt)
    ch.addFilter(corr_filter)

    fh = TimedRotatingFileHandler(
        log_dir / log_file, when="midnight", backupCount=retention_days, encoding="utf-8"
    )
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(fmt)
    fh.rotator = _rotator
    fh.addFilter(corr_filter)

    logger.addHandler(ch)
    logger.addHandler(fh)
    return logger


# ----------------------------------------------------------------------
# Metrics Logging Helper
# ----------------------------------------------------------------------
def log_metric(logger: logging.Logger, name: str, value: int, **labels):
    """Log a structured metric in a consistent format."""
    label_str = " ".join(f"{k}={v}" for k, v in labels.items())
    logger.info("METRIC | %s=%s %s", name, value, label_str)


# ----------------------------------------------------------------------
# Stage Timing Context Manager
# ----------------------------------------------------------------------
class log_stage:
    """Context manager for timing a validation stage."""

    def __init__(self, logger: logging.Logger, stage: str):
        self.logger = logger
        self.stage = stage

    def __enter__(self):
        self.start = perf_counter()
        self.logger.debug("Stage '%s' started", self.stage)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        duration = perf_counter() - self.start
        if exc_type is not None:
            self.logger.error("Stage '%s' failed after %.2fs: %s", self.stage, duration, exc_val)
        else:
            self.logger.info("Stage '%s' completed in %.2fs", self.stage, duration)
