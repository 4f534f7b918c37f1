"""myshell - a small command-line interpreter."""

import asyncio
import sys

from . import interpreter
from .version import __version__


def main():
    """Main entry point for the interpreter."""
    sys.exit(asyncio.run(interpreter.main()))


def serve():
    """Entry point for the MCP server exposing the interpreter as a tool."""
    from . import server

    asyncio.run(server.main())


__all__ = ["main", "serve", "interpreter", "__version__"]
