"""Read loop and program invocation for myshell."""

import logging
import os
import sys
from typing import BinaryIO, List, Optional

from myshell.config import ShellConfig
from myshell.shell_executor import ExitRequest, ShellExecutor

logger = logging.getLogger(__name__)


class Interpreter:
    """
    Reads lines interactively or from a script and runs the commands on them
    one at a time.
    """

    def __init__(
        self,
        executor: Optional[ShellExecutor] = None,
        config: Optional[ShellConfig] = None,
    ):
        self.config = config or ShellConfig()
        self.executor = executor or ShellExecutor(config=self.config)
        self.preprocessor = self.executor.preprocessor

    async def run(self, stream: BinaryIO, interactive: bool = True) -> int:
        """
        Process every line of stream until end of input or exit.

        Args:
            stream (BinaryIO): Source of command lines
            interactive (bool): Print a prompt before each read instead of
                echoing script lines

        Returns:
            int: Exit status for the interpreter, always 0
        """
        prompt = os.fsencode(self.config.get_prompt())
        max_length = self.config.get_max_line_length()

        try:
            while True:
                if interactive:
                    self.executor.write(prompt)
                line = stream.readline()
                if not line:
                    break
                await self.process_line(line, interactive, max_length)
        except ExitRequest:
            logger.debug("Exit requested")
        finally:
            await self.executor.process_manager.cleanup_all()
        return 0

    async def process_line(
        self,
        line: bytes,
        interactive: bool = False,
        max_length: Optional[int] = None,
    ) -> None:
        """
        Run all commands on one physical input line.

        In batch mode the line is echoed verbatim first. A line missing its
        terminator or longer than max_length bytes is echoed again without
        its terminator, reported and skipped.

        Args:
            line (bytes): Line as read, including its terminator
            interactive (bool): Whether the line came from an interactive session
            max_length (Optional[int]): Maximum meaningful bytes per line

        Raises:
            ExitRequest: If one of the commands is a valid exit
        """
        if max_length is None:
            max_length = self.config.get_max_line_length()

        if not interactive and self.preprocessor.has_non_whitespace(line):
            self.executor.write(line)

        terminated = line.endswith(b"\n")
        content = line[:-1] if terminated else line
        if not terminated or len(content) > max_length:
            self.executor.write(content)
            self.executor.report_error(
                ValueError("Input line is unterminated or too long")
            )
            return

        for command in self.preprocessor.split_commands(os.fsdecode(content)):
            await self.executor.execute(command)


async def main(argv: Optional[List[str]] = None) -> int:
    """
    Run the interpreter.

    With no arguments commands are read interactively from standard input.
    With one argument they are read from the named script file.

    Returns:
        int: Process exit status
    """
    config = ShellConfig()
    logging.basicConfig(
        level=config.get_log_level(),
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    args = sys.argv[1:] if argv is None else argv
    interpreter = Interpreter(config=config)

    if len(args) > 1:
        interpreter.executor.report_error(ValueError("Usage: myshell [script]"))
        return 1

    if len(args) == 1:
        try:
            stream = open(args[0], "rb")
        except OSError as e:
            interpreter.executor.report_error(e)
            return 1
        with stream:
            return await interpreter.run(stream, interactive=False)

    return await interpreter.run(sys.stdin.buffer, interactive=True)
