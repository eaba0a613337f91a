"""FastAPI server exposing the filesystem tools."""

from fastapi import FastAPI, HTTPException, Request, WebSocket
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..dispatcher import ToolDispatcher
from ..types import SecurityPolicy
from .schemas import ToolCallResponse, ToolSchema
from .websocket import handle_websocket


def create_app(dispatcher: ToolDispatcher | None = None, policy: SecurityPolicy | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Plain HTTP calls have no way to ask a human anything, so the dispatcher
    used here should fail closed on confirmation; confirmations are only
    possible over the WebSocket endpoint.

    Args:
        dispatcher: Dispatcher to serve (built from `policy` if omitted)
        policy: Policy used when no dispatcher is given (defaults to settings)
    """
    if dispatcher is None:
        if policy is None:
            from ..config import build_policy
            policy = build_policy()
        dispatcher = ToolDispatcher.from_policy(policy)

    app = FastAPI(
        title="Guarded FS API",
        description="Filesystem tools behind a directory allow-list",
        version=__version__,
    )
    app.state.dispatcher = dispatcher

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # restrict in production
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/api/tools", response_model=list[ToolSchema])
    def list_tools(request: Request) -> list[dict]:
        """List the registered tools and their argument schemas."""
        return request.app.state.dispatcher.list_schemas()

    @app.post("/api/tools/{tool_name}", response_model=ToolCallResponse)
    async def call_tool(tool_name: str, request: Request) -> ToolCallResponse:
        """Call a tool with the JSON body as its argument object."""
        dispatcher: ToolDispatcher = request.app.state.dispatcher
        if not dispatcher.has_tool(tool_name):
            raise HTTPException(status_code=404, detail=f"Tool '{tool_name}' not found")

        try:
            arguments = await request.json()
        except ValueError:
            raise HTTPException(status_code=400, detail="Request body must be a JSON object")
        if not isinstance(arguments, dict):
            raise HTTPException(status_code=400, detail="Request body must be a JSON object")

        response = await dispatcher.call(tool_name, arguments)
        return ToolCallResponse(text=response.text, is_error=response.is_error)

    @app.websocket("/api/tools/stream")
    async def websocket_endpoint(websocket: WebSocket) -> None:
        """WebSocket endpoint for tool calls with confirmation round trips."""
        await handle_websocket(websocket, websocket.app.state.dispatcher)

    return app
