from __future__ import annotations

from fastapi import APIRouter, Request

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(request: Request) -> dict[str, str]:
    store = request.app.state.tool_context.store
    images_dir = "present" if store.exists() else "missing"
    status = "ok" if images_dir == "present" else "degraded"
    return {"status": status, "images_dir": images_dir}
