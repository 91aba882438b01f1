"""
Logging Configuration and Utilities

Provides the synchronizer's event sink: producers on any thread enqueue
records, and a single background listener writes each one, in arrival
order, to the console and to an append-only log file.

Author: JobSync Project
License: MIT
"""

import logging
import os
import queue
import sys
import threading
from logging.handlers import QueueHandler, QueueListener
from pathlib import Path
from pythonjsonlogger.json import JsonFormatter

DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Verbosity -> minimum level accepted by the sink
VERBOSITY_LEVELS = {
    0: logging.ERROR,
    1: logging.INFO,
    2: logging.DEBUG,
}


class LineFormatter(logging.Formatter):
    """
    Formats records as "[<timestamp>]: <text>", prefixing errors with "ERROR: ".
    """

    def __init__(self):
        super().__init__('[%(asctime)s]: %(message)s', datefmt=DATE_FORMAT)

    def formatMessage(self, record):
        """Add the error prefix without touching the shared record."""
        prefix = "ERROR: " if record.levelno >= logging.ERROR else ""
        return f"[{record.asctime}]: {prefix}{record.message}"


_CRITICAL_FORMATTER = LineFormatter()


class SyncLogger:
    """
    Asynchronous, ordered log sink.

    log/log_important/log_error may be called from any number of threads.
    Records go through a FIFO queue to one QueueListener thread, which
    writes stdout (or stderr for errors) and the log file for each record
    before taking the next one, so lines never interleave.
    """

    def __init__(self, log_file_path: str, verbose: int = 1, json_format: bool = False):
        """
        Open the log file and start the consumer thread.

        Args:
            log_file_path: File the log is appended to
            verbose: 0 = errors only, 1 = + important, 2 = + all
            json_format: Write the log file as JSON lines
        """
        if verbose not in VERBOSITY_LEVELS:
            raise ValueError(f"Verbosity must be 0, 1 or 2, got {verbose}")

        self.log_file_path = os.path.abspath(log_file_path)
        self.verbose = verbose
        Path(self.log_file_path).parent.mkdir(parents=True, exist_ok=True)

        self._queue = queue.SimpleQueue()
        # Reentrant: a signal handler may log while the main thread is mid-emit
        self._lock = threading.RLock()
        self._closed = False

        # Standalone logger: not registered with logging.getLogger()
        self._logger = logging.Logger(f"jobsync.sink.{id(self)}")
        self._logger.setLevel(VERBOSITY_LEVELS[verbose])
        self._logger.propagate = False
        self._logger.addHandler(QueueHandler(self._queue))

        formatter = LineFormatter()

        stdout_handler = logging.StreamHandler(sys.stdout)
        stdout_handler.setLevel(logging.DEBUG)
        stdout_handler.addFilter(lambda record: record.levelno < logging.ERROR)
        stdout_handler.setFormatter(formatter)

        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setLevel(logging.ERROR)
        stderr_handler.setFormatter(formatter)

        self._file_handler = logging.FileHandler(self.log_file_path, mode='a', encoding='utf-8')
        self._file_handler.setLevel(logging.DEBUG)
        if json_format:
            self._file_handler.setFormatter(JsonFormatter(
                '%(asctime)s %(levelname)s %(message)s',
                datefmt=DATE_FORMAT
            ))
        else:
            self._file_handler.setFormatter(formatter)

        self._listener = QueueListener(
            self._queue,
            stdout_handler,
            stderr_handler,
            self._file_handler,
            respect_handler_level=True
        )
        self._listener.start()

        self.log(f"Log started in file {self.log_file_path}")

    def log(self, message: str):
        """Emit a routine message (verbosity 2)."""
        self._emit(logging.DEBUG, message)

    def log_important(self, message: str):
        """Emit an important message (verbosity >= 1)."""
        self._emit(logging.INFO, message)

    def log_error(self, message: str):
        """Emit an error message (always)."""
        self._emit(logging.ERROR, message)

    def _emit(self, level: int, message: str):
        with self._lock:
            if self._closed:
                return
            self._logger.log(level, message)

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self):
        """
        Stop accepting records, drain the queue and close the log file.

        Blocks until every record already queued has been written.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True

        self._listener.stop()
        for handler in self._listener.handlers:
            handler.flush()
        self._file_handler.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    @staticmethod
    def log_critical_error(message: str):
        """
        Write an error line straight to stderr.

        For failures that happen before a SyncLogger exists.
        """
        record = logging.makeLogRecord({
            'msg': message,
            'levelno': logging.ERROR,
            'levelname': 'ERROR',
        })
        sys.stderr.write(_CRITICAL_FORMATTER.format(record) + '\n')
        sys.stderr.flush()


def get_logger(name: str) -> logging.Logger:
    """
    Get a diagnostics logger for a specific module.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    if name.startswith("jobsync"):
        return logging.getLogger(name)
    return logging.getLogger(f"jobsync.{name}")
