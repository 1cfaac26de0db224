"""Logging utilities for Geocoin sessions.

Provides color-coded output to distinguish deterministic world generation from
player-driven state changes and degraded (absorbed) failures.
"""

import os
from enum import Enum


class Color(Enum):
    """ANSI color codes for terminal output."""

    # Colors for operation types
    BLUE = "\033[94m"      # Deterministic operations (spawning, materialization)
    YELLOW = "\033[93m"    # Player actions (moves, transfers)
    RED = "\033[91m"       # Absorbed errors
    GREEN = "\033[92m"     # Success/completion
    CYAN = "\033[96m"      # Info/metadata

    # Formatting
    BOLD = "\033[1m"
    RESET = "\033[0m"


# Markers for operation types (color-blind accessible)
LOG_TAG_DETERMINISTIC = "[•]"
LOG_TAG_PLAYER = "[>]"
LOG_TAG_ERROR = "[!]"
LOG_TAG_SUCCESS = "[✓]"
LOG_TAG_INFO = "[i]"


def colored(text: str, color: Color, bold: bool = False) -> str:
    """Wrap text in ANSI color codes if colors are enabled.

    Args:
        text: Text to colorize
        color: Color to apply
        bold: Whether to make text bold

    Returns:
        Colorized text if GEOCOIN_NO_COLOR is not set, otherwise plain text
    """
    if os.getenv("GEOCOIN_NO_COLOR"):
        return text

    prefix = color.value
    if bold:
        prefix = Color.BOLD.value + prefix

    return f"{prefix}{text}{Color.RESET.value}"


def is_verbose() -> bool:
    """Return True when GEOCOIN_VERBOSE asks for per-operation chatter."""
    return os.getenv("GEOCOIN_VERBOSE", "").lower() in ("1", "true", "yes")


def log_deterministic(message: str) -> None:
    """Log a deterministic operation (blue). Only printed in verbose mode."""
    if is_verbose():
        print(colored(f"{LOG_TAG_DETERMINISTIC} {message}", Color.BLUE))


def log_player(message: str) -> None:
    """Log a player-driven operation (yellow). Only printed in verbose mode."""
    if is_verbose():
        print(colored(f"{LOG_TAG_PLAYER} {message}", Color.YELLOW))


def log_error(message: str) -> None:
    """Log an absorbed error (red)."""
    print(colored(f"{LOG_TAG_ERROR} {message}", Color.RED))


def log_success(message: str) -> None:
    """Log a success (green)."""
    print(colored(f"{LOG_TAG_SUCCESS} {message}", Color.GREEN))


def log_info(message: str) -> None:
    """Log metadata/info (cyan)."""
    print(colored(f"{LOG_TAG_INFO} {message}", Color.CYAN))
