"""
Provides validation for built-in commands.
"""

from typing import List

from myshell.io_redirection_handler import Redirection, RedirectKind

BUILTIN_COMMANDS = ("exit", "cd", "pwd")


class CommandValidator:
    """
    Checks that built-in commands are invoked in a form they accept.
    """

    def is_builtin(self, name: str) -> bool:
        """Check if a command name is implemented by the interpreter itself"""
        return name in BUILTIN_COMMANDS

    def validate_builtin(self, argv: List[str], redirection: Redirection) -> None:
        """
        Validate a built-in invocation.

        Built-ins never accept a redirection clause. exit and pwd take no
        arguments, cd takes at most one.

        Args:
            argv (List[str]): Built-in name and its arguments
            redirection (Redirection): Redirection attached to the command

        Raises:
            ValueError: If the command is empty, not a built-in, or malformed
        """
        if not argv:
            raise ValueError("Empty command")

        name = argv[0]
        if not self.is_builtin(name):
            raise ValueError(f"Not a built-in command: {name}")

        if redirection.kind is not RedirectKind.NONE:
            raise ValueError(f"Redirection is not allowed for {name}")

        max_args = 1 if name == "cd" else 0
        if len(argv) - 1 > max_args:
            raise ValueError(f"Too many arguments for {name}")
