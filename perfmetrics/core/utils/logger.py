"""
Logging utility for performance metric collection.
Logs store activity, report generation and export paths to the console and,
when a logs directory is configured, to a per-run file.
"""
import logging
from datetime import datetime
from pathlib import Path

LOGGER_NAME = "perfmetrics"

_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'
_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_performance_logger(run_name: str = None, logs_dir: str | Path | None = None) -> logging.Logger:
    """
    Set up the package logger for one test run.

    Args:
        run_name: Name of the run (e.g., the suite name), used in the log filename
        logs_dir: Directory for the log file. When None, only the console
            handler is installed.

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.INFO)

    # Remove existing handlers to avoid duplicates
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    log_filename = None
    if logs_dir is not None:
        logs_path = Path(logs_dir)
        logs_path.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        if run_name:
            # Sanitize run name for filename
            safe_run_name = run_name.replace("/", "_").replace("\\", "_").replace(" ", "_")
            log_filename = logs_path / f"performance_{safe_run_name}_{timestamp}.log"
        else:
            log_filename = logs_path / f"performance_{timestamp}.log"

        file_handler = logging.FileHandler(log_filename, mode='w', encoding='utf-8')
        file_handler.setLevel(logging.INFO)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.info("=" * 80)
    logger.info(f"Performance logging started for run: {run_name or 'Unknown'}")
    if log_filename:
        logger.info(f"Log file: {log_filename}")
    logger.info("=" * 80)

    return logger


def get_performance_logger() -> logging.Logger:
    """
    Get the package logger. Handlers are only installed by
    setup_performance_logger(); until then records propagate to the root logger.
    """
    return logging.getLogger(LOGGER_NAME)
