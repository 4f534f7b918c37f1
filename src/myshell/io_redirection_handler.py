"""IO redirection handling module for myshell."""

import asyncio
import enum
import logging
import os
from dataclasses import dataclass
from typing import IO, Optional, Tuple, Union

logger = logging.getLogger(__name__)

# Read size used while draining a child's output pipe
CHUNK_SIZE = 1024

_WHITESPACE = " \t"


class RedirectKind(enum.Enum):
    """Output redirection disciplines."""

    NONE = "none"
    OVERWRITE = ">"
    MERGE_PREPEND = ">+"


@dataclass(frozen=True)
class Redirection:
    kind: RedirectKind = RedirectKind.NONE
    target: Optional[str] = None


class IORedirectionHandler:
    """Handles output redirection for shell commands."""

    def parse_redirection(self, command: str) -> Tuple[str, Redirection]:
        """
        Split a command string into its command part and redirection clause.

        Only the first '>' is an operator. '>+' selects merge-prepend mode,
        a bare '>' selects overwrite mode. Any further '>' after the operator
        is rejected, even when it would sit inside a filename.

        Args:
            command (str): Raw command string

        Returns:
            Tuple[str, Redirection]: Trimmed command part and the redirection

        Raises:
            ValueError: If the redirection syntax is invalid
        """
        position = command.find(">")
        if position < 0:
            return command.strip(_WHITESPACE), Redirection()

        if command[position + 1 : position + 2] == "+":
            kind = RedirectKind.MERGE_PREPEND
            file_start = position + 2
        else:
            kind = RedirectKind.OVERWRITE
            file_start = position + 1

        if ">" in command[file_start:]:
            raise ValueError("Invalid redirection syntax: multiple redirection operators")

        command_part = command[:position].strip(_WHITESPACE)
        target = command[file_start:].strip(_WHITESPACE)
        if not target:
            raise ValueError("Missing path for output redirection")
        if any(char in target for char in _WHITESPACE):
            raise ValueError(f"Invalid redirection target: {target}")

        return command_part, Redirection(kind, target)

    def validate_overwrite_target(self, path: str) -> None:
        """
        Overwrite redirection only ever creates new files.

        Raises:
            ValueError: If something already exists at path
        """
        if os.path.exists(path):
            raise ValueError(f"Output file already exists: {path}")

    def open_output_file(self, path: str) -> IO[bytes]:
        """
        Create (or truncate) the file a child's standard output goes to.

        Raises:
            ValueError: If the file cannot be opened
        """
        try:
            return open(path, "wb")
        except OSError as e:
            raise ValueError("Failed to open output file") from e

    async def capture_output(self, reader: asyncio.StreamReader) -> Optional[bytearray]:
        """
        Drain a pipe until the writing side closes.

        The pipe is always read to EOF so the child never blocks on a full
        pipe buffer. If the buffer cannot grow, what was captured so far is
        dropped and the remaining output is read and discarded.

        Returns:
            Optional[bytearray]: Captured output, or None if capture failed
        """
        buffer: Optional[bytearray] = bytearray()
        while True:
            chunk = await reader.read(CHUNK_SIZE)
            if not chunk:
                break
            if buffer is None:
                continue
            try:
                buffer += chunk
            except MemoryError:
                logger.debug("Out of memory while capturing output, discarding it")
                buffer = None
        return buffer

    def read_existing(self, path: str) -> Optional[bytes]:
        """
        Read the current content of path, if there is a file there.

        Returns:
            Optional[bytes]: File content, or None when the file is missing,
                unreadable, or too large to hold in memory
        """
        if not os.path.exists(path):
            return None
        try:
            with open(path, "rb") as file:
                return file.read()
        except MemoryError:
            logger.debug(f"Out of memory while reading {path}, dropping old content")
            return None
        except OSError as e:
            logger.debug(f"Failed to read existing content of {path}: {e}")
            return None

    def prepend_to_file(
        self,
        path: str,
        new_output: Optional[Union[bytes, bytearray]],
        old_content: Optional[bytes],
    ) -> None:
        """
        Rewrite path as new_output followed by old_content.

        Raises:
            ValueError: If the file cannot be created or written
        """
        try:
            with open(path, "wb") as file:
                if new_output:
                    file.write(new_output)
                if old_content:
                    file.write(old_content)
        except OSError as e:
            raise ValueError("Failed to write output file") from e

    def merge_prepend(
        self, path: str, new_output: Optional[Union[bytes, bytearray]]
    ) -> None:
        """
        Put output collected from a finished child in front of path's content.

        Args:
            path (str): Redirection target, created if missing
            new_output: Captured output, None if capture failed

        Raises:
            ValueError: If the target cannot be rewritten
        """
        old_content = self.read_existing(path)
        self.prepend_to_file(path, new_output, old_content)
