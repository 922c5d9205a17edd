"""
Centralized Logger with Rich Console
====================================
Static logging facade shared by every SDK module.

Usage:
    from socean.shared.system.logging import Logger

    Logger.info("[POOL] Fetched stake pool")
    Logger.success("[EXECUTOR] Stage 2/4 confirmed")
    Logger.warning("Something concerning")
    Logger.error("Something broke")
    Logger.section("Withdraw Stake")

Console output is suppressed while Settings.SILENT_MODE is on (the default for
library use). A per-run rotating log file is written when Settings.LOG_DIR is set.
"""

import os
import logging
from datetime import datetime
from logging.handlers import RotatingFileHandler

from rich.console import Console
from rich.text import Text

from socean.config.settings import Settings

file_logger = logging.getLogger("Socean")
file_logger.setLevel(logging.DEBUG)
file_logger.propagate = False
file_logger.addHandler(logging.NullHandler())

_console = Console(stderr=True)


def _attach_file_handler() -> None:
    """Attach the per-run file handler once, only when a log dir is configured."""
    if not Settings.LOG_DIR or any(isinstance(h, RotatingFileHandler) for h in file_logger.handlers):
        return
    os.makedirs(Settings.LOG_DIR, exist_ok=True)
    run_id = datetime.now().strftime("%Y%m%d_%H%M%S")
    handler = RotatingFileHandler(
        os.path.join(Settings.LOG_DIR, f"socean_{run_id}.log"),
        maxBytes=5 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    handler.setFormatter(
        logging.Formatter("%(asctime)s [%(levelname)s] %(message)s", datefmt="%Y-%m-%d %H:%M:%S")
    )
    file_logger.addHandler(handler)


# =============================================================================
# SOURCE ICONS (for visual scanning)
# =============================================================================

SOURCE_ICONS = {
    "SYSTEM": "🌊",
    "POOL": "🏊",
    "ALLOCATOR": "⚖️",
    "SEQUENCE": "🧱",
    "EXECUTOR": "🚀",
    "RPC": "📡",
    "WALLET": "👛",
    "CLI": "📋",
}

LEVEL_STYLES = {
    "INFO": "cyan",
    "SUCCESS": "green bold",
    "WARNING": "yellow",
    "ERROR": "red bold",
    "DEBUG": "dim",
    "CRITICAL": "red bold reverse",
    "SECTION": "magenta bold",
}

_FILE_LEVELS = {
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "DEBUG": logging.DEBUG,
}


# =============================================================================
# LOGGER CLASS
# =============================================================================

class Logger:
    """
    Centralized logger with Rich console output.

    Features:
    - Color-coded console output with Rich
    - File logging with rotation
    - Source-based icon prefixes parsed from a leading [SOURCE] tag
    """

    _silent_mode = None  # None = follow Settings.SILENT_MODE

    @staticmethod
    def _timestamp() -> str:
        """High-precision timestamp (HH:MM:SS.ms)."""
        now = datetime.now()
        return f"{now.strftime('%H:%M:%S')}.{now.microsecond // 1000:03d}"

    @staticmethod
    def _parse_source(message: str) -> tuple:
        """Extract [SOURCE] tag from message if present."""
        stripped = message.strip()
        if stripped.startswith("[") and "]" in stripped:
            tag_end = stripped.index("]")
            source = stripped[1:tag_end].upper()
            if len(source) < 15:
                return source, stripped[tag_end + 1:].strip()
        return "SYSTEM", message

    @staticmethod
    def _is_silent() -> bool:
        if Logger._silent_mode is not None:
            return Logger._silent_mode
        return Settings.SILENT_MODE

    @staticmethod
    def _format_console(level: str, message: str, source: str) -> None:
        if Logger._is_silent():
            return

        icon = SOURCE_ICONS.get(source, "")
        msg_with_icon = f"{icon} {message}" if icon else message

        line = Text()
        line.append(f"{Logger._timestamp()} ", style="dim")
        line.append(f"| {level[:8].ljust(8)} ", style=LEVEL_STYLES.get(level, "white"))
        line.append(f"| {source[:10].ljust(10)} | ", style="dim")
        line.append(msg_with_icon)
        _console.print(line)

    @staticmethod
    def _log_to_file(level: str, message: str, source: str = "") -> None:
        _attach_file_handler()
        full_msg = f"[{source}] {message}" if source else message
        file_logger.log(_FILE_LEVELS.get(level, logging.INFO), full_msg)

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    @staticmethod
    def info(message: str) -> None:
        source, msg = Logger._parse_source(message)
        Logger._format_console("INFO", msg, source)
        Logger._log_to_file("INFO", msg, source)

    @staticmethod
    def success(message: str) -> None:
        source, msg = Logger._parse_source(message)
        Logger._format_console("SUCCESS", msg, source)
        Logger._log_to_file("INFO", f"✅ {msg}", source)

    @staticmethod
    def warning(message: str) -> None:
        source, msg = Logger._parse_source(message)
        Logger._format_console("WARNING", msg, source)
        Logger._log_to_file("WARNING", msg, source)

    @staticmethod
    def error(message: str) -> None:
        source, msg = Logger._parse_source(message)
        Logger._format_console("ERROR", msg, source)
        Logger._log_to_file("ERROR", msg, source)

    @staticmethod
    def debug(message: str) -> None:
        source, msg = Logger._parse_source(message)
        Logger._log_to_file("DEBUG", msg, source)

    @staticmethod
    def critical(message: str) -> None:
        source, msg = Logger._parse_source(message)
        Logger._format_console("CRITICAL", f"🛑 {msg}", source)
        Logger._log_to_file("ERROR", f"🛑 {msg}", source)

    @staticmethod
    def section(title: str) -> None:
        """Print a section header."""
        if not Logger._is_silent():
            _console.print()
            _console.rule(f"[bold magenta]{title}[/]", style="dim")
        Logger._log_to_file("INFO", f"=== {title} ===", "SYSTEM")

    @staticmethod
    def set_silent(silent: bool) -> None:
        """Enable/disable console output (overrides Settings.SILENT_MODE)."""
        Logger._silent_mode = silent
