"""
Environment driven settings for the interpreter.
"""

import logging
import os

DEFAULT_PROMPT = "myshell> "
DEFAULT_MAX_LINE_LENGTH = 512
DEFAULT_MAX_ARGS = 127
DEFAULT_LOG_LEVEL = "WARNING"


class ShellConfig:
    """
    Reads interpreter settings from environment variables on demand.
    """

    def get_prompt(self) -> str:
        """Get the interactive prompt"""
        return os.environ.get("MYSHELL_PROMPT", DEFAULT_PROMPT)

    def get_max_line_length(self) -> int:
        """Get the number of meaningful bytes accepted per input line"""
        return self._get_positive_int("MYSHELL_MAX_LINE_LENGTH", DEFAULT_MAX_LINE_LENGTH)

    def get_max_args(self) -> int:
        """Get the maximum number of argv entries passed to a program"""
        return self._get_positive_int("MYSHELL_MAX_ARGS", DEFAULT_MAX_ARGS)

    def get_log_level(self) -> int:
        """Get the logging level, falling back to WARNING for unknown names"""
        name = os.environ.get("MYSHELL_LOG_LEVEL", DEFAULT_LOG_LEVEL).strip().upper()
        level = logging.getLevelName(name)
        if not isinstance(level, int):
            logging.warning(f"Invalid log level '{name}'. Using {DEFAULT_LOG_LEVEL}.")
            return logging.WARNING
        return level

    def _get_positive_int(self, name: str, default: int) -> int:
        raw = os.environ.get(name)
        if raw is None or not raw.strip():
            return default
        try:
            value = int(raw)
        except ValueError:
            logging.warning(f"Invalid value for {name}: '{raw}'. Using {default}.")
            return default
        if value <= 0:
            logging.warning(f"{name} must be positive, got {value}. Using {default}.")
            return default
        return value
