"""
Minimal logging context for SceneSift.
Single place to control all output: screen + file, with flush.
"""
import json
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Mapping, Optional

from rich.console import Console
from rich.text import Text

_PREFIX_STYLES = {
    "[INFO]": "cyan",
    "[WARNING]": "yellow",
    "[ERROR]": "red",
    "[DEBUG]": "grey50",
}
_EVENT_LEVELS = ("debug", "info", "warning", "error")


class SceneSiftLogger:
    """Minimal logger: print to screen + file, always flush"""

    def __init__(self, log_file: Optional[Path] = None, debug: bool = False):
        self.log_file = log_file
        self._file_handle = None
        self._start_time = datetime.now()
        self.debug_mode = debug
        self._console = Console(highlight=False, soft_wrap=True)
        self._sink_failure_reported = False

        if log_file:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            self._file_handle = open(log_file, 'w', buffering=1, encoding='utf-8')  # Line buffered, UTF-8

            from scenesift.__version__ import __version__
            welcome = f"({self._start_time.strftime('%H:%M:%S')}  Started SceneSift {__version__})"
            self.log(welcome)

    def log(self, msg: str, prefix: str = ""):
        """Log to screen and file"""
        output = f"{prefix}{msg}" if prefix else msg

        self._console.print(self._screen_text(output))

        if self._file_handle:
            self._file_handle.write(output + "\n")
            self._file_handle.flush()
            os.fsync(self._file_handle.fileno())

    def _screen_text(self, line: str) -> Text:
        """Style level prefixes and category tags without parsing markup."""
        text = Text(line)
        for token, style in _PREFIX_STYLES.items():
            text.highlight_words([token], style=style)
        text.highlight_regex(r"\[[a-z][a-z_-]*\]", style="magenta")
        return text

    def info(self, msg: str):
        """Info message"""
        self.log(msg, "[INFO] ")

    def warning(self, msg: str):
        """Warning message"""
        self.log(msg, "[WARNING] ")

    def error(self, msg: str):
        """Error message"""
        self.log(msg, "[ERROR] ")

    def debug(self, msg: str):
        """Debug message (only shown in debug mode)"""
        if self.debug_mode:
            timestamp = datetime.now().strftime('%H:%M:%S.%f')[:-3]
            self.log(msg, f"[{timestamp}] [DEBUG] ")

    def event(
        self,
        level: str,
        category: str,
        message: str,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """Structured log entry. Never raises: matching must not abort on a logging failure."""
        try:
            level_key = level.lower()
            if level_key not in _EVENT_LEVELS:
                level_key = "info"
            line = f"[{category}] {message}"
            if metadata:
                line = f"{line} {json.dumps(dict(metadata), default=str, sort_keys=True)}"
            getattr(self, level_key)(line)
        except Exception as exc:
            if not self._sink_failure_reported:
                self._sink_failure_reported = True
                sys.stderr.write(f"scenesift: log sink failed ({exc!r}); further failures suppressed\n")

    def close(self):
        """Close file handle with goodbye message"""
        if self._file_handle:
            end_time = datetime.now()
            elapsed = end_time - self._start_time
            goodbye = f"({end_time.strftime('%H:%M:%S')}  Ended session, elapsed {elapsed.total_seconds():.1f}s)"
            self.log(goodbye)
            self._file_handle.close()
            self._file_handle = None

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


# Global instance (set by the embedding application)
_logger: Optional[SceneSiftLogger] = None

def set_logger(logger: SceneSiftLogger):
    """Set global logger instance"""
    global _logger
    _logger = logger

def get_logger() -> SceneSiftLogger:
    """Get global logger instance"""
    global _logger
    if _logger is None:
        # Fallback: create stdout-only logger
        _logger = SceneSiftLogger()
    return _logger

# Convenience functions
def log(msg: str):
    get_logger().log(msg)

def info(msg: str):
    get_logger().info(msg)

def warning(msg: str):
    get_logger().warning(msg)

def error(msg: str):
    get_logger().error(msg)

def event(level: str, category: str, message: str, metadata: Optional[Mapping[str, Any]] = None):
    get_logger().event(level, category, message, metadata)
