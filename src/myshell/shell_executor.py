import logging
import os
import sys
from dataclasses import dataclass, field
from typing import BinaryIO, List, Optional

from myshell.command_preprocessor import CommandPreProcessor
from myshell.command_validator import CommandValidator
from myshell.config import ShellConfig
from myshell.directory_manager import DirectoryManager
from myshell.io_redirection_handler import (
    IORedirectionHandler,
    Redirection,
    RedirectKind,
)
from myshell.process_manager import ERROR_MESSAGE, ProcessManager

logger = logging.getLogger(__name__)


class ExitRequest(Exception):
    """Raised by the exit built-in to stop the interpreter."""


@dataclass
class ParsedCommand:
    argv: List[str]
    redirection: Redirection = field(default_factory=Redirection)


class ShellExecutor:
    """
    Executes a single command string: built-ins in process, everything else
    as a child process with optional output redirection.
    """

    def __init__(
        self,
        process_manager: Optional[ProcessManager] = None,
        output: Optional[BinaryIO] = None,
        config: Optional[ShellConfig] = None,
    ):
        """
        Initialize the executor with its parser, validator, directory manager,
        IO handler and process manager.

        Args:
            process_manager (Optional[ProcessManager]): Launcher for child processes
            output (Optional[BinaryIO]): Stream for pwd output and diagnostics,
                standard output when None
            config (Optional[ShellConfig]): Settings source
        """
        self.config = config or ShellConfig()
        self.preprocessor = CommandPreProcessor(max_args=self.config.get_max_args())
        self.validator = CommandValidator()
        self.directory_manager = DirectoryManager()
        self.io_handler = IORedirectionHandler()
        self.process_manager = process_manager or ProcessManager()
        self._output = output

    @property
    def output(self) -> BinaryIO:
        return self._output if self._output is not None else sys.stdout.buffer

    def write(self, data: bytes) -> None:
        """Write to the output stream, flushing so children see the same order."""
        self.output.write(data)
        self.output.flush()

    def report_error(self, error: Optional[BaseException] = None) -> None:
        if error is not None:
            logger.debug(f"Command failed: {error}")
        self.write(ERROR_MESSAGE)

    def parse(self, command: str) -> ParsedCommand:
        """
        Parse a command string into its argument vector and redirection.

        Raises:
            ValueError: If the redirection clause is malformed
        """
        command_part, redirection = self.io_handler.parse_redirection(command)
        return ParsedCommand(self.preprocessor.tokenize(command_part), redirection)

    async def execute(self, command: str) -> None:
        """
        Execute one command string to completion.

        Errors are reported on the output stream and never propagate, so the
        caller can go on with the next command.

        Args:
            command (str): Command string, without ';'

        Raises:
            ExitRequest: If the command is a valid exit
        """
        try:
            parsed = self.parse(command)
            if not parsed.argv:
                return

            if self.validator.is_builtin(parsed.argv[0]):
                self._run_builtin(parsed)
            else:
                await self._launch(parsed)
        except ValueError as e:
            self.report_error(e)

    def _run_builtin(self, parsed: ParsedCommand) -> None:
        self.validator.validate_builtin(parsed.argv, parsed.redirection)
        name = parsed.argv[0]

        if name == "exit":
            raise ExitRequest()

        if name == "cd":
            path = parsed.argv[1] if len(parsed.argv) > 1 else None
            self.directory_manager.change_directory(path)
            return

        if name == "pwd":
            cwd = self.directory_manager.current_directory()
            self.write(os.fsencode(cwd) + b"\n")

    async def _launch(self, parsed: ParsedCommand) -> None:
        argv = parsed.argv
        redirection = parsed.redirection

        if redirection.kind is RedirectKind.NONE:
            status = await self.process_manager.run(argv)
            logger.debug(f"{argv[0]} exited with status {status}")
            return

        target = redirection.target or ""

        if redirection.kind is RedirectKind.OVERWRITE:
            self.io_handler.validate_overwrite_target(target)
            with self.io_handler.open_output_file(target) as handle:
                status = await self.process_manager.run_redirected(argv, handle)
            logger.debug(f"{argv[0]} exited with status {status}")
            return

        new_output = await self.process_manager.run_merged(
            argv, self.io_handler.capture_output
        )
        self.io_handler.merge_prepend(target, new_output)
