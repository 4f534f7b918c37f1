import re
from typing import List, Optional

from myshell.config import DEFAULT_MAX_ARGS

_WHITESPACE = " \t"
_TOKEN_PATTERN = re.compile(r"[^ \t]+")


class CommandPreProcessor:
    """
    Splits input lines into commands and commands into argument words
    """

    def __init__(self, max_args: Optional[int] = DEFAULT_MAX_ARGS):
        """
        Args:
            max_args (Optional[int]): Maximum number of argument words kept per
                command. Words beyond the limit are dropped. None disables the cap.
        """
        self.max_args = max_args

    def trim(self, text: str) -> str:
        """Strip leading and trailing spaces and tabs."""
        return text.strip(_WHITESPACE)

    def has_non_whitespace(self, line: bytes) -> bool:
        """
        Check whether a raw input line holds anything besides spaces, tabs
        and newlines.
        """
        return bool(line.strip(b" \t\n"))

    def split_commands(self, line: str) -> List[str]:
        """
        Split a line on ';' into trimmed, non-empty command strings.

        Args:
            line (str): Input line without its terminator

        Returns:
            List[str]: Commands in left-to-right order
        """
        commands = []
        for fragment in line.split(";"):
            fragment = self.trim(fragment)
            if fragment:
                commands.append(fragment)
        return commands

    def tokenize(self, command: str) -> List[str]:
        """
        Split a command on runs of spaces and tabs.

        Args:
            command (str): Command part of a command string

        Returns:
            List[str]: Non-empty argument words, at most max_args of them. An
                empty list means there is nothing to execute.
        """
        tokens = _TOKEN_PATTERN.findall(command)
        if self.max_args is not None:
            del tokens[self.max_args :]
        return tokens
