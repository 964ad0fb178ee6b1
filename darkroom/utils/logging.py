"""
Logging utilities for darkroom
Provides structured logging and render statistics
"""

import logging
import sys
from typing import Optional, Dict, Any, List
from datetime import datetime
import json

import colorlog

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
CONSOLE_HANDLER_NAME = "darkroom-console"


class StructuredLogger:
    """Provides structured logging with metadata"""

    def __init__(self, name: str, metadata: Optional[Dict[str, Any]] = None):
        """
        Initialize structured logger

        Args:
            name: Logger name
            metadata: Default metadata to include in all logs
        """
        self.logger = logging.getLogger(name)
        self.metadata = metadata or {}

    def _format_message(self, message: str, **kwargs) -> str:
        """Format message with metadata"""
        data = {**self.metadata, **kwargs}
        if data:
            return f"{message} | {json.dumps(data, default=str)}"
        return message

    def debug(self, message: str, **kwargs):
        self.logger.debug(self._format_message(message, **kwargs))

    def info(self, message: str, **kwargs):
        self.logger.info(self._format_message(message, **kwargs))

    def warning(self, message: str, **kwargs):
        self.logger.warning(self._format_message(message, **kwargs))

    def error(self, message: str, **kwargs):
        self.logger.error(self._format_message(message, **kwargs))


class RenderStats:
    """Tracks statistics for a batch of renders"""

    def __init__(self):
        self.start_time = datetime.now()
        self.total_files = 0
        self.rendered_files = 0
        self.failed_files = 0
        self.errors: List[Dict[str, Any]] = []
        self.render_times: List[float] = []

    def set_total(self, total: int):
        self.total_files = total

    def add_success(self, render_time: Optional[float] = None):
        self.rendered_files += 1
        if render_time:
            self.render_times.append(render_time)

    def add_error(self, file_path: str, error: str):
        self.failed_files += 1
        self.errors.append({
            'file': file_path,
            'error': error,
            'time': datetime.now()
        })

    def get_elapsed_time(self) -> float:
        """Get elapsed time in seconds"""
        return (datetime.now() - self.start_time).total_seconds()

    def get_average_render_time(self) -> float:
        if not self.render_times:
            return 0.0
        return sum(self.render_times) / len(self.render_times)

    def get_summary(self) -> Dict[str, Any]:
        """Get render summary"""
        elapsed = self.get_elapsed_time()
        processed = self.rendered_files + self.failed_files

        return {
            'total_files': self.total_files,
            'rendered_files': self.rendered_files,
            'failed_files': self.failed_files,
            'errors': len(self.errors),
            'elapsed_time': elapsed,
            'average_time_per_file': self.get_average_render_time(),
            'files_per_second': processed / elapsed if elapsed > 0 else 0
        }

    def summary_lines(self) -> List[str]:
        """Human readable summary, one entry per line"""
        summary = self.get_summary()
        lines = [
            "=" * 60,
            "RENDER SUMMARY",
            "=" * 60,
            f"Total files:      {summary['total_files']}",
            f"Rendered:         {summary['rendered_files']}",
            f"Failed:           {summary['failed_files']}",
            f"Elapsed time:     {summary['elapsed_time']:.1f}s",
            f"Avg time/file:    {summary['average_time_per_file']:.2f}s",
            "=" * 60,
        ]
        for error in self.errors[:10]:  # Show first 10 errors
            lines.append(f"  - {error['file']}: {error['error']}")
        if len(self.errors) > 10:
            lines.append(f"  ... and {len(self.errors) - 10} more errors")
        return lines


def setup_console_logging(level: str = "INFO", color: bool = True):
    """
    Setup console logging with optional color support

    Args:
        level: Logging level name
        color: Whether to use colored output when attached to a terminal
    """
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.set_name(CONSOLE_HANDLER_NAME)

    if color and sys.stderr.isatty():
        formatter = colorlog.ColoredFormatter(
            '%(log_color)s%(asctime)s - %(name)s - %(levelname)s%(reset)s - %(message)s',
            log_colors={
                'DEBUG': 'cyan',
                'INFO': 'green',
                'WARNING': 'yellow',
                'ERROR': 'red',
                'CRITICAL': 'red,bg_white',
            }
        )
    else:
        formatter = logging.Formatter(LOG_FORMAT)

    console_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    # Replace the handler from an earlier call instead of stacking another
    for handler in list(root_logger.handlers):
        if handler.get_name() == CONSOLE_HANDLER_NAME:
            root_logger.removeHandler(handler)
    root_logger.addHandler(console_handler)
