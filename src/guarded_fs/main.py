"""Main entry point for the guarded-fs CLI.

Builds the security policy, then either serves the tools over HTTP,
lists them, or runs a single tool call from the command line.
"""

import argparse
import asyncio
import json
import os
import sys

import yaml

from .config import build_policy, get_settings
from .core.guard import CallbackConfirmationProvider, prompt_on_terminal
from .dispatcher import ToolDispatcher
from .logging import get_logger, setup_logging
from .types import SecurityPolicy

logger = get_logger(__name__)

DEFAULT_CONFIG_FILE = "guarded_fs.yaml"


def load_yaml_config(path: str = DEFAULT_CONFIG_FILE) -> dict:
    """Load configuration from the yaml file if it exists."""
    try:
        with open(path, "r") as f:
            return yaml.safe_load(f) or {}
    except FileNotFoundError:
        return {}


def check_allowed_dirs(directories: list[str]) -> list[str]:
    """Reject relative directories passed on the command line.

    Raises:
        ValueError: If any directory is not absolute
    """
    for directory in directories:
        if not os.path.isabs(os.path.expanduser(directory)):
            raise ValueError(f"Allowed directory must be an absolute path: {directory}")
    return directories


def _start_server(policy: SecurityPolicy, host: str, port: int) -> None:
    """Start the API server."""
    try:
        import uvicorn
        from .api import create_app
    except ImportError:
        print("Error: API dependencies not installed.")
        print("Install with: pip install 'guarded-fs[api]'")
        sys.exit(1)

    # http callers cannot answer a prompt; force deletes are rejected unless
    # they arrive over the websocket endpoint
    app = create_app(ToolDispatcher.from_policy(policy))

    print(f"Starting API server at http://{host}:{port}")
    print(f"API docs available at http://{host}:{port}/docs")
    uvicorn.run(app, host=host, port=port)


def run_call(dispatcher: ToolDispatcher, tool_name: str, raw_args: str) -> int:
    """Run one tool call and print the response text.

    Returns:
        Process exit code (1 if the call reported an error)
    """
    try:
        arguments = json.loads(raw_args) if raw_args else {}
    except json.JSONDecodeError as e:
        print(f"Error: --args is not valid JSON: {e}", file=sys.stderr)
        return 2
    if not isinstance(arguments, dict):
        print("Error: --args must be a JSON object", file=sys.stderr)
        return 2

    response = asyncio.run(dispatcher.call(tool_name, arguments))
    print(response.text)
    return 1 if response.is_error else 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the guarded-fs CLI."""
    parser = argparse.ArgumentParser(description="Guarded filesystem tools")
    parser.add_argument(
        "allowed_dirs",
        nargs="*",
        help="Absolute directories the tools may touch (overrides config and FS_ALLOWED_DIRS)"
    )
    parser.add_argument(
        "--config",
        default=DEFAULT_CONFIG_FILE,
        help=f"YAML config file (default: {DEFAULT_CONFIG_FILE})"
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (also settable via GUARDED_FS_LOG_LEVEL env var)"
    )
    parser.add_argument(
        "--log-file",
        help="Also write logs to this file"
    )
    parser.add_argument(
        "--list-tools",
        action="store_true",
        help="Print the tool schemas as JSON and exit"
    )
    parser.add_argument(
        "--call",
        metavar="TOOL",
        help="Run a single tool call"
    )
    parser.add_argument(
        "--args",
        default="{}",
        help="JSON object of arguments for --call"
    )
    parser.add_argument(
        "--serve",
        action="store_true",
        help="Start the API server"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port for the API server (default: 8000)"
    )
    parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Host for the API server (default: 127.0.0.1)"
    )
    args = parser.parse_args(argv)

    # setup logging early
    setup_logging(args.log_level or get_settings().log_level, args.log_file)

    try:
        allowed_dirs = check_allowed_dirs(args.allowed_dirs)
    except ValueError as e:
        parser.error(str(e))

    yaml_config = load_yaml_config(args.config)
    policy = build_policy(allowed_dirs=allowed_dirs or None, yaml_config=yaml_config)
    logger.info("Allowed directories: %s", ", ".join(policy.allowed_directories))

    if args.serve:
        _start_server(policy, args.host, args.port)
        return 0

    dispatcher = ToolDispatcher.from_policy(
        policy, CallbackConfirmationProvider(prompt_on_terminal)
    )

    if args.list_tools:
        print(json.dumps(dispatcher.list_schemas(), indent=2, ensure_ascii=False))
        return 0

    if args.call:
        return run_call(dispatcher, args.call, args.args)

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
