"""Tool dispatch: name + raw arguments in, ToolResponse out.

This is the only place that knows about the response envelope. Tools and
core components raise; the dispatcher catches and formats.
"""

import json
from typing import Any

from pydantic import ValidationError

from .core.guard import ConfirmationProvider
from .exceptions import FileSystemError
from .logging import get_logger
from .tools import BaseTool, ToolContext, get_default_tools
from .types import SecurityPolicy, ToolResponse

logger = get_logger(__name__)

ERROR_PREFIX = "❌ "


def success_response(value: Any) -> ToolResponse:
    """Wrap a tool result; non-string values are rendered as JSON."""
    if isinstance(value, str):
        return ToolResponse(text=value)
    if hasattr(value, "to_dict"):
        value = value.to_dict()
    return ToolResponse(text=json.dumps(value, indent=2, ensure_ascii=False, default=str))


def error_response(error: BaseException | str) -> ToolResponse:
    message = error.message if isinstance(error, FileSystemError) else str(error)
    return ToolResponse(text=f"{ERROR_PREFIX}{message}", is_error=True)


def format_validation_error(tool_name: str, error: ValidationError) -> str:
    problems = []
    for item in error.errors():
        location = ".".join(str(part) for part in item.get("loc", ())) or "arguments"
        problems.append(f"{location}: {item.get('msg')}")
    return f"Invalid arguments for '{tool_name}': " + "; ".join(problems)


class ToolDispatcher:
    """Routes tool calls to tools and wraps the outcome.

    Example:
        dispatcher = ToolDispatcher(ToolContext.from_policy(policy))
        response = await dispatcher.call("file-info", {"path": "/work/a.txt"})
        print(response.text, response.is_error)
    """

    def __init__(self, context: ToolContext, tools: list[BaseTool] | None = None):
        """Initialize the dispatcher.

        Args:
            context: Shared authorizer/ops/batch context
            tools: Tools to expose (defaults to get_default_tools())
        """
        self.context = context
        self.tools: dict[str, BaseTool] = {
            tool.name: tool for tool in (tools if tools is not None else get_default_tools())
        }

    @classmethod
    def from_policy(
        cls,
        policy: SecurityPolicy,
        provider: ConfirmationProvider | None = None,
    ) -> "ToolDispatcher":
        return cls(ToolContext.from_policy(policy, provider))

    def get_tool(self, name: str) -> BaseTool | None:
        return self.tools.get(name)

    def has_tool(self, name: str) -> bool:
        return name in self.tools

    def list_schemas(self) -> list[dict[str, Any]]:
        """Schemas of every registered tool, for host registration."""
        return [tool.to_schema() for tool in self.tools.values()]

    async def call(
        self,
        name: str,
        arguments: dict[str, Any] | None = None,
        provider: ConfirmationProvider | None = None,
    ) -> ToolResponse:
        """Validate arguments, run the tool and wrap the result.

        Args:
            name: Tool name
            arguments: Raw argument object
            provider: Confirmation channel for this call only (e.g. the
                WebSocket the call arrived on); defaults to the context's

        Returns:
            ToolResponse; errors never propagate out of this method
        """
        tool = self.tools.get(name)
        if tool is None:
            return error_response(f"Tool '{name}' not found")

        try:
            args = tool.validate(arguments or {})
        except ValidationError as e:
            return error_response(format_validation_error(name, e))

        context = self.context.with_provider(provider) if provider else self.context
        logger.info("Executing tool: %s", name)
        try:
            return success_response(await tool.execute(context, args))
        except FileSystemError as e:
            logger.info("Tool %s failed: [%s] %s", name, e.kind.value, e.message)
            return error_response(e)
        except Exception as e:
            logger.exception("Tool %s crashed", name)
            return error_response(e)
