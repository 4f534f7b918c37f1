"""
Test configuration and fixtures.
"""

import io
import signal
from unittest.mock import AsyncMock, MagicMock

import pytest

from myshell.process_manager import ProcessManager
from myshell.shell_executor import ShellExecutor


@pytest.fixture
def output():
    """Provide an in-memory output stream for the interpreter."""
    return io.BytesIO()


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """Run the test inside a fresh temporary working directory."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def process_manager():
    """Provide a real ProcessManager, restoring the signal handlers it installs."""
    original_sigint = signal.getsignal(signal.SIGINT)
    original_sigterm = signal.getsignal(signal.SIGTERM)
    yield ProcessManager()
    signal.signal(signal.SIGINT, original_sigint)
    signal.signal(signal.SIGTERM, original_sigterm)


@pytest.fixture
def mock_process_manager():
    """Provide a mock process manager."""
    manager = MagicMock()

    async def create_process_side_effect(*args, **kwargs):
        process = MagicMock()
        process.returncode = 0
        process.stdout = None
        process.wait = AsyncMock(return_value=0)
        return process

    manager.create_process = AsyncMock(side_effect=create_process_side_effect)
    manager.run = AsyncMock(return_value=0)
    manager.run_redirected = AsyncMock(return_value=0)
    manager.run_merged = AsyncMock(return_value=bytearray())
    manager.cleanup_processes = AsyncMock()
    manager.cleanup_all = AsyncMock()
    return manager


@pytest.fixture
def shell_executor_with_mock(mock_process_manager, output):
    """Provide a shell executor with mock process manager."""
    return ShellExecutor(process_manager=mock_process_manager, output=output)


@pytest.fixture
def shell_executor(output):
    """Provide a shell executor that starts real processes."""
    return ShellExecutor(output=output)
