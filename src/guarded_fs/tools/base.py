from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel

from ..core.authorizer import PathAuthorizer
from ..core.batch import BatchExecutor
from ..core.file_ops import AtomicFileOps
from ..core.guard import ConfirmationProvider, SensitiveOperationGuard
from ..types import SecurityPolicy


@dataclass
class ToolContext:
    """Everything a tool needs to do its work, built from one SecurityPolicy."""

    ops: AtomicFileOps
    batch: BatchExecutor

    @classmethod
    def from_policy(
        cls,
        policy: SecurityPolicy,
        provider: ConfirmationProvider | None = None,
    ) -> "ToolContext":
        authorizer = PathAuthorizer(policy)
        ops = AtomicFileOps(authorizer, SensitiveOperationGuard(policy, provider))
        return cls(ops=ops, batch=BatchExecutor(ops))

    @property
    def policy(self) -> SecurityPolicy:
        return self.ops.policy

    def with_provider(self, provider: ConfirmationProvider) -> "ToolContext":
        """Same authorizer and policy, different confirmation channel."""
        ops = AtomicFileOps(self.ops.authorizer, self.ops.guard.with_provider(provider))
        return ToolContext(ops=ops, batch=BatchExecutor(ops))


class BaseTool(ABC):
    """Abstract base class for all tools.

    A tool is one named operation: a pydantic model validates its arguments
    and execute() runs it against a ToolContext. Tools that can destroy
    data set DESTRUCTIVE = True so hosts can flag them.
    """

    DESTRUCTIVE: bool = False

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the tool name."""
        pass

    @property
    @abstractmethod
    def title(self) -> str:
        """Return a short human-readable title."""
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        """Return the tool description."""
        pass

    @property
    @abstractmethod
    def args_model(self) -> type[BaseModel]:
        """Return the pydantic model validating the arguments."""
        pass

    @abstractmethod
    async def execute(self, context: ToolContext, args: Any) -> Any:
        """Run the tool with validated arguments.

        Returns:
            A string report, or any JSON-serializable value
        """
        pass

    @property
    def parameters(self) -> dict[str, Any]:
        """Return the JSON schema for tool parameters (wire field names)."""
        return self.args_model.model_json_schema(by_alias=True)

    def validate(self, arguments: dict[str, Any]) -> BaseModel:
        """Validate raw arguments.

        Raises:
            pydantic.ValidationError: If the arguments don't match the schema
        """
        return self.args_model.model_validate(arguments)

    def to_schema(self) -> dict[str, Any]:
        """Return the tool schema for registration with a host."""
        return {
            "name": self.name,
            "title": self.title,
            "description": self.description,
            "inputSchema": self.parameters,
            "destructive": self.DESTRUCTIVE,
        }
