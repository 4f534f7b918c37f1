"""Process management for shell command execution."""

import asyncio
import logging
import os
import signal
from typing import (
    IO,
    Any,
    Awaitable,
    Callable,
    Dict,
    List,
    Optional,
    Sequence,
    Set,
    Tuple,
)
from weakref import WeakSet

logger = logging.getLogger(__name__)

# The only diagnostic users ever see, whatever went wrong
ERROR_MESSAGE = b"An error has occurred\n"


class ProcessManager:
    """Manages process creation, execution, and cleanup for shell commands."""

    def __init__(self):
        """Initialize ProcessManager with signal handling setup."""
        self._processes: Set[asyncio.subprocess.Process] = WeakSet()
        self._original_sigint_handler = None
        self._original_sigterm_handler = None
        self._setup_signal_handlers()

    def _setup_signal_handlers(self) -> None:
        """Set up signal handlers for graceful process management."""
        if os.name != "posix":
            return

        def handle_termination(signum: int, _: Any) -> None:
            """Handle termination signals by cleaning up processes."""
            if self._processes:
                for process in self._processes:
                    try:
                        if process.returncode is None:
                            process.terminate()
                    except Exception as e:
                        logger.warning(
                            f"Error terminating process on signal {signum}: {e}"
                        )

            # Restore original handler and re-raise signal
            if signum == signal.SIGINT and self._original_sigint_handler:
                signal.signal(signal.SIGINT, self._original_sigint_handler)
            elif signum == signal.SIGTERM and self._original_sigterm_handler:
                signal.signal(signal.SIGTERM, self._original_sigterm_handler)

            # Re-raise signal
            os.kill(os.getpid(), signum)

        # Store original handlers
        self._original_sigint_handler = signal.signal(signal.SIGINT, handle_termination)
        self._original_sigterm_handler = signal.signal(
            signal.SIGTERM, handle_termination
        )

    async def create_process(
        self,
        argv: Sequence[str],
        directory: Optional[str] = None,
        stdin_handle: Any = None,
        stdout_handle: Any = None,
        stderr_handle: Any = None,
        envs: Optional[Dict[str, str]] = None,
    ) -> asyncio.subprocess.Process:
        """Create a new subprocess running argv[0] looked up on PATH.

        Streams left as None are inherited from the interpreter.

        Args:
            argv (Sequence[str]): Program name followed by its arguments
            directory (Optional[str]): Working directory
            stdin_handle: File handle, PIPE, DEVNULL or None for stdin
            stdout_handle: File handle, PIPE or None for stdout
            stderr_handle: File handle, PIPE or None for stderr
            envs (Optional[Dict[str, str]]): Additional environment variables

        Returns:
            asyncio.subprocess.Process: Created process

        Raises:
            ValueError: If process creation fails
        """
        if not argv:
            raise ValueError("Empty command")

        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdin=stdin_handle,
                stdout=stdout_handle,
                stderr=stderr_handle,
                env={**os.environ, **(envs or {})},
                cwd=directory,
            )

            # Add process to tracked set
            self._processes.add(process)
            return process

        except OSError as e:
            raise ValueError(f"Failed to create process: {str(e)}") from e

    async def run(self, argv: Sequence[str], stdout_handle: Any = None) -> int:
        """Run a program to completion.

        Args:
            argv (Sequence[str]): Program name followed by its arguments
            stdout_handle: File handle for stdout, or None to inherit it

        Returns:
            int: Exit status of the child

        Raises:
            ValueError: If the program cannot be started
        """
        process = await self.create_process(argv, stdout_handle=stdout_handle)
        try:
            return await process.wait()
        finally:
            if process.returncode is None:
                await self.cleanup_processes([process])

    async def run_redirected(self, argv: Sequence[str], stdout_handle: IO[bytes]) -> int:
        """Run a program to completion with stdout going to an open file.

        A program that cannot be started reports the failure on the
        redirected stdout, the way an exec failure in the child would.

        Returns:
            int: Exit status of the child, 1 if it could not be started
        """
        try:
            return await self.run(argv, stdout_handle=stdout_handle)
        except ValueError as e:
            logger.debug(f"Launch failed under redirection: {e}")
            stdout_handle.write(ERROR_MESSAGE)
            stdout_handle.flush()
            return 1

    async def run_merged(
        self,
        argv: Sequence[str],
        capture: Callable[[asyncio.StreamReader], Awaitable[Optional[bytearray]]],
    ) -> Optional[bytearray]:
        """Run a program with stdout on a pipe and collect what it writes.

        Args:
            argv (Sequence[str]): Program name followed by its arguments
            capture: Coroutine draining the pipe to EOF, returning the output
                or None if it could not be kept

        Returns:
            Optional[bytearray]: Captured output. A program that cannot be
                started yields the diagnostic as its output.
        """
        try:
            process = await self.create_process(
                argv, stdout_handle=asyncio.subprocess.PIPE
            )
        except ValueError as e:
            logger.debug(f"Launch failed under redirection: {e}")
            return bytearray(ERROR_MESSAGE)

        try:
            output = None
            if process.stdout is not None:
                output = await capture(process.stdout)
            status = await process.wait()
            logger.debug(f"{argv[0]} exited with status {status}")
            return output
        finally:
            if process.returncode is None:
                await self.cleanup_processes([process])

    async def cleanup_processes(
        self, processes: List[asyncio.subprocess.Process]
    ) -> None:
        """Clean up processes by killing them if they're still running.

        Args:
            processes: List of processes to clean up
        """
        cleanup_tasks = []
        for process in processes:
            if process.returncode is None:
                try:
                    process.kill()
                    cleanup_tasks.append(asyncio.create_task(process.wait()))
                except Exception as e:
                    logger.warning(f"Error killing process: {e}")

        if cleanup_tasks:
            try:
                # Wait for all processes to be killed
                await asyncio.wait(cleanup_tasks, timeout=5)
            except Exception as e:
                logger.error(f"Error during process cleanup: {e}")

    async def cleanup_all(self) -> None:
        """Clean up all tracked processes."""
        if self._processes:
            processes = list(self._processes)
            await self.cleanup_processes(processes)
            self._processes.clear()

    async def execute_with_timeout(
        self,
        process: asyncio.subprocess.Process,
        stdin: Optional[str] = None,
        timeout: Optional[int] = None,
    ) -> Tuple[bytes, bytes]:
        """Collect the output of a process with timeout handling.

        Args:
            process: Process to execute
            stdin (Optional[str]): Input to pass to the process
            timeout (Optional[int]): Timeout in seconds

        Returns:
            Tuple[bytes, bytes]: Tuple of (stdout, stderr)

        Raises:
            asyncio.TimeoutError: If execution times out
        """
        stdin_bytes = stdin.encode() if stdin else None

        async def _kill_process():
            if process.returncode is not None:
                return

            try:
                # Try graceful termination first
                process.terminate()
                for _ in range(5):  # Wait up to 0.5 seconds
                    if process.returncode is not None:
                        return
                    await asyncio.sleep(0.1)

                # Force kill if still running
                if process.returncode is None:
                    process.kill()
                    await asyncio.wait_for(process.wait(), timeout=1.0)
            except Exception as e:
                logger.warning(f"Error killing process: {e}")

        try:
            if timeout:
                try:
                    return await asyncio.wait_for(
                        process.communicate(input=stdin_bytes), timeout=timeout
                    )
                except asyncio.TimeoutError:
                    await _kill_process()
                    raise
            return await process.communicate(input=stdin_bytes)
        except Exception as e:
            await _kill_process()
            raise e
