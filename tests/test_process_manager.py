"""Tests for the ProcessManager class."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from myshell.process_manager import ERROR_MESSAGE


def create_mock_process():
    """Create a mock process with all required attributes."""
    process = MagicMock()
    process.returncode = 0
    process.communicate = AsyncMock(return_value=(b"output", b"error"))
    process.wait = AsyncMock(return_value=0)
    process.terminate = MagicMock()
    process.kill = MagicMock()
    return process


@pytest.mark.asyncio
async def test_create_process(process_manager):
    """Test creating a process with an argument vector."""
    mock_proc = create_mock_process()
    with patch(
        "myshell.process_manager.asyncio.create_subprocess_exec",
        new_callable=AsyncMock,
        return_value=mock_proc,
    ) as mock_create:
        process = await process_manager.create_process(
            ["echo", "test"],
            directory="/tmp",
        )

        assert process == mock_proc
        mock_create.assert_called_once()
        assert mock_create.call_args.args == ("echo", "test")
        assert mock_create.call_args.kwargs["cwd"] == "/tmp"
        # Streams are inherited unless given
        assert mock_create.call_args.kwargs["stdin"] is None
        assert mock_create.call_args.kwargs["stdout"] is None
        assert mock_create.call_args.kwargs["stderr"] is None


@pytest.mark.asyncio
async def test_create_process_with_error(process_manager):
    """Test creating a process that fails to start."""
    with patch(
        "myshell.process_manager.asyncio.create_subprocess_exec",
        new_callable=AsyncMock,
        side_effect=OSError("No such file or directory"),
    ):
        with pytest.raises(ValueError, match="Failed to create process"):
            await process_manager.create_process(["no-such-program"])


@pytest.mark.asyncio
async def test_create_process_empty(process_manager):
    with pytest.raises(ValueError, match="Empty command"):
        await process_manager.create_process([])


@pytest.mark.asyncio
async def test_run_missing_program(process_manager):
    with pytest.raises(ValueError, match="Failed to create process"):
        await process_manager.run(["myshell-test-no-such-program-xyz"])


@pytest.mark.asyncio
async def test_run_returns_exit_status(process_manager):
    assert await process_manager.run(["sh", "-c", "exit 0"]) == 0
    assert await process_manager.run(["sh", "-c", "exit 3"]) == 3


@pytest.mark.asyncio
async def test_run_with_stdout_handle(process_manager, tmp_path):
    target = tmp_path / "out.txt"
    with open(target, "wb") as handle:
        await process_manager.run(["echo", "to file"], stdout_handle=handle)
    assert target.read_bytes() == b"to file\n"


@pytest.mark.asyncio
async def test_run_redirected(process_manager, tmp_path):
    target = tmp_path / "out.txt"
    with open(target, "wb") as handle:
        status = await process_manager.run_redirected(["echo", "to file"], handle)
    assert status == 0
    assert target.read_bytes() == b"to file\n"


@pytest.mark.asyncio
async def test_run_redirected_missing_program(process_manager, tmp_path):
    """A launch failure is reported in the redirected file, not raised."""
    target = tmp_path / "out.txt"
    with open(target, "wb") as handle:
        status = await process_manager.run_redirected(
            ["myshell-test-no-such-program-xyz"], handle
        )
    assert status == 1
    assert target.read_bytes() == ERROR_MESSAGE


@pytest.mark.asyncio
async def test_run_merged(process_manager):
    async def capture(reader):
        return bytearray(await reader.read())

    output = await process_manager.run_merged(["echo", "merged"], capture)
    assert output == b"merged\n"


@pytest.mark.asyncio
async def test_run_merged_missing_program(process_manager):
    capture = AsyncMock()
    output = await process_manager.run_merged(
        ["myshell-test-no-such-program-xyz"], capture
    )
    assert output == ERROR_MESSAGE
    capture.assert_not_awaited()


@pytest.mark.asyncio
async def test_execute_with_timeout_success(process_manager):
    """Test executing a process with successful completion."""
    mock_proc = create_mock_process()

    stdout, stderr = await process_manager.execute_with_timeout(
        mock_proc,
        stdin="input",
        timeout=10,
    )

    assert stdout == b"output"
    assert stderr == b"error"
    mock_proc.communicate.assert_called_once_with(input=b"input")


@pytest.mark.asyncio
async def test_execute_with_timeout_timeout(process_manager):
    """Test executing a process that times out."""
    mock_proc = create_mock_process()
    mock_proc.communicate.side_effect = asyncio.TimeoutError("Process timed out")
    mock_proc.returncode = None

    def set_returncode():
        mock_proc.returncode = -15  # SIGTERM

    mock_proc.terminate.side_effect = set_returncode

    with pytest.raises(asyncio.TimeoutError):
        await process_manager.execute_with_timeout(mock_proc, timeout=1)

    mock_proc.terminate.assert_called_once()


@pytest.mark.asyncio
async def test_cleanup_processes(process_manager):
    """Test cleaning up processes."""
    running_proc = create_mock_process()
    running_proc.returncode = None

    completed_proc = create_mock_process()
    completed_proc.returncode = 0

    await process_manager.cleanup_processes([running_proc, completed_proc])

    # Verify running process was killed and waited for
    running_proc.kill.assert_called_once()
    running_proc.wait.assert_awaited_once()

    # Verify completed process was not killed or waited for
    completed_proc.kill.assert_not_called()
    completed_proc.wait.assert_not_called()


@pytest.mark.asyncio
async def test_cleanup_all(process_manager):
    process = await process_manager.create_process(["sleep", "30"])
    await process_manager.cleanup_all()
    assert process.returncode is not None
