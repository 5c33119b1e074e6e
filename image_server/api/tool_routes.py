"""HTTP routes for the tool dispatcher.

Each request is independent; the ToolContext on ``app.state`` is read-only and
shared by all requests.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

from image_server.tools.dispatcher import dispatch
from image_server.tools.tool_schemas import generate_all_tool_schemas

router = APIRouter(prefix="/tools", tags=["tools"])


class ToolRequest(BaseModel):
    tool: str = Field(description="Tool name to invoke")
    input: dict[str, Any] = Field(default_factory=dict, description="Tool parameters")


class ToolResponse(BaseModel):
    content: list[dict[str, Any]]
    isError: bool = False
    errorKind: str | None = None


@router.get("/list")
async def list_tools() -> dict[str, list[dict[str, Any]]]:
    return {"tools": generate_all_tool_schemas()}


@router.post("/invoke", response_model=ToolResponse)
async def invoke_tool(req: ToolRequest, request: Request) -> ToolResponse:
    result = await dispatch(req.tool, req.input, request.app.state.tool_context)
    wire = result.to_wire()
    return ToolResponse(
        content=wire["content"],
        isError=wire["isError"],
        errorKind=result.error_kind.value if result.error_kind else None,
    )
