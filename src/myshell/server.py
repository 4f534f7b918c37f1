import asyncio
import logging
import os
import sys
import tempfile
import traceback
from collections.abc import Sequence
from typing import Any

from mcp.server import Server
from mcp.types import TextContent, Tool

from .directory_manager import DirectoryManager
from .process_manager import ProcessManager
from .version import __version__

logger = logging.getLogger("myshell-mcp")

app = Server("myshell-mcp")


class RunScriptToolHandler:
    """Handler for running myshell scripts"""

    name = "shell_run_script"
    description = "Run command lines through myshell in batch mode"

    def __init__(self):
        self.directory_manager = DirectoryManager()
        self.process_manager = ProcessManager()

    def get_tool_description(self) -> Tool:
        """Get the tool description for the run script command"""
        return Tool(
            name=self.name,
            description=(
                f"{self.description}\n"
                "Commands are separated by newlines or ';'. "
                "Use 'cmd > file' to create a file and 'cmd >+ file' to "
                "prepend output to a file."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "script": {
                        "type": "string",
                        "description": "One or more myshell command lines",
                    },
                    "directory": {
                        "type": "string",
                        "description": "Working directory where the script starts",
                    },
                    "timeout": {
                        "type": "integer",
                        "description": "Maximum execution time in seconds",
                        "minimum": 0,
                    },
                },
                "required": ["script", "directory"],
            },
        )

    def _write_script(self, script: str) -> str:
        """Write script to a temporary file, ending it with a newline"""
        if not script.endswith("\n"):
            script += "\n"
        fd, path = tempfile.mkstemp(prefix="myshell-", suffix=".sh")
        with os.fdopen(fd, "wb") as file:
            file.write(os.fsencode(script))
        return path

    async def run_tool(self, arguments: dict) -> Sequence[TextContent]:
        """Run the script with the given arguments"""
        script = arguments.get("script")
        directory = arguments.get("directory")
        timeout = arguments.get("timeout")

        if not script:
            raise ValueError("No script provided")

        if not isinstance(script, str):
            raise ValueError("'script' must be a string")

        self.directory_manager.validate_directory(directory)

        path = self._write_script(script)
        try:
            process = await self.process_manager.create_process(
                [sys.executable, "-m", "myshell", path],
                directory=directory,
                stdin_handle=asyncio.subprocess.DEVNULL,
                stdout_handle=asyncio.subprocess.PIPE,
                stderr_handle=asyncio.subprocess.PIPE,
            )
            try:
                stdout, stderr = await self.process_manager.execute_with_timeout(
                    process, timeout=timeout
                )
            except asyncio.TimeoutError as e:
                raise ValueError("Command execution timed out") from e
        finally:
            os.unlink(path)

        if process.returncode != 0:
            raise ValueError(
                f"myshell exited with status {process.returncode}: "
                f"{stdout.decode('utf-8', errors='replace').strip()}"
            )

        content: list[TextContent] = []
        if stdout:
            content.append(
                TextContent(type="text", text=stdout.decode("utf-8", errors="replace"))
            )
        if stderr:
            content.append(
                TextContent(type="text", text=stderr.decode("utf-8", errors="replace"))
            )
        return content


# Initialize tool handlers
tool_handler = RunScriptToolHandler()


@app.list_tools()
async def list_tools() -> list[Tool]:
    """List available tools."""
    return [tool_handler.get_tool_description()]


@app.call_tool()
async def call_tool(name: str, arguments: Any) -> Sequence[TextContent]:
    """Handle tool calls"""
    try:
        if name != tool_handler.name:
            raise ValueError(f"Unknown tool: {name}")

        if not isinstance(arguments, dict):
            raise ValueError("Arguments must be a dictionary")

        return await tool_handler.run_tool(arguments)

    except Exception as e:
        logger.error(traceback.format_exc())
        raise RuntimeError(f"Error executing command: {str(e)}") from e


async def main() -> None:
    """Main entry point for the myshell MCP server"""
    logging.basicConfig(level=logging.INFO)
    logger.info(f"Starting myshell MCP server v{__version__}")
    try:
        from mcp.server.stdio import stdio_server

        async with stdio_server() as (read_stream, write_stream):
            await app.run(
                read_stream, write_stream, app.create_initialization_options()
            )
    except Exception as e:
        logger.error(f"Server error: {str(e)}")
        raise
