"""Pydantic models for API requests and responses."""

from typing import Any

from pydantic import BaseModel, Field


class ToolCallResponse(BaseModel):
    """Envelope returned for a tool call."""

    text: str
    is_error: bool = False


class ToolSchema(BaseModel):
    """Registration info for one tool."""

    name: str
    title: str
    description: str
    input_schema: dict[str, Any] = Field(alias="inputSchema")
    destructive: bool = False

    model_config = {"populate_by_name": True}


class CallMessage(BaseModel):
    """WebSocket message asking for a tool call."""

    type: str = "call"
    id: str | None = None
    tool: str
    arguments: dict[str, Any] = Field(default_factory=dict)


class ConfirmationPrompt(BaseModel):
    """WebSocket message asking the client to confirm a destructive action."""

    type: str = "confirmation"
    request_id: str
    message: str
    affected_paths: list[str]
    requested_schema: dict[str, Any]


class ConfirmMessage(BaseModel):
    """WebSocket reply to a ConfirmationPrompt."""

    type: str = "confirm"
    request_id: str
    action: str
    content: dict[str, Any] = Field(default_factory=dict)
