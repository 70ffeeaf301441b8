#!/usr/bin/env python3
"""
Canvas Bridge CLI

Usage:
    canvas-bridge serve              # Serve Canvas tools to an MCP host over stdio
    canvas-bridge list-courses       # Print active courses
    canvas-bridge list-tools         # Print the tools the server exposes

Environment (or a .env file in the current directory, a parent directory,
or ~/.canvas-bridge.env):
    CANVAS_BASE_URL / CANVAS_DOMAIN  Canvas instance
    CANVAS_API_TOKEN                 API token
    CANVAS_TIMEOUT                   Optional request timeout in seconds
    CANVAS_ANONYMIZATION_POLICY      Optional YAML file with extra identity fields
"""

import argparse
import logging
import sys

from . import __version__
from .config import load_env
from .exceptions import CanvasBridgeError
from .registry import MCPToolRegistry
from .tools import ListCoursesArgs, list_courses_tool, register_all_tools

logger = logging.getLogger("canvas_bridge.cli")


def setup_logging(verbose: bool = False) -> None:
    """Log to stderr; stdout carries the MCP stream."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        stream=sys.stderr,
        force=True,
    )


def build_registry() -> MCPToolRegistry:
    """Create the MCP registry with every Canvas tool registered."""
    registry = MCPToolRegistry("canvas-bridge")
    register_all_tools(registry)
    return registry


def cmd_serve(args: argparse.Namespace) -> int:
    """Serve tools over stdio."""
    registry = build_registry()
    print("Starting Canvas Bridge MCP Server...", file=sys.stderr)
    print("NOTE: Student data is anonymized by default. Tools accept anonymous=false "
          "only for local use.", file=sys.stderr)
    registry.run()
    return 0


def cmd_list_courses(args: argparse.Namespace) -> int:
    """Print active courses."""
    print(list_courses_tool(ListCoursesArgs()))
    return 0


def cmd_list_tools(args: argparse.Namespace) -> int:
    """Print registered tool names and descriptions."""
    registry = build_registry()
    width = max(len(tool.name) for tool in registry.tools)
    for tool in registry.tools:
        print(f"{tool.name.ljust(width)}  {tool.description}")
    return 0


def main() -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Canvas Bridge - Canvas LMS tools for MCP hosts",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    subparsers.add_parser("serve", help="Run MCP server over stdio")
    subparsers.add_parser("list-courses", help="List active courses")
    subparsers.add_parser("list-tools", help="List MCP tools")

    args = parser.parse_args()
    setup_logging(args.verbose)
    load_env()

    commands = {
        "serve": cmd_serve,
        "list-courses": cmd_list_courses,
        "list-tools": cmd_list_tools,
    }
    command = commands.get(args.command or "serve")

    try:
        return command(args)
    except CanvasBridgeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
