"""FastAPI app exposing the chatwire boundary over HTTP.

The HTTP layer lives under `apps/` and can depend on heavier deps (FastAPI, uvicorn).
Request decoding, inference and result encoding are all delegated to
`chatwire.engine.boundary`; this layer only moves text in and out.
"""

from __future__ import annotations

import asyncio
import json
import threading
import time
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from starlette.responses import JSONResponse, Response

from chatwire.engine.adapters.base import BaseAdapter
from chatwire.engine.boundary import BoundaryConfig, complete, complete_into, embed


def create_app(
    *,
    adapter: BaseAdapter,
    model_id: str,
    config: BoundaryConfig | None = None,
    http_max_concurrency: int | None = None,
) -> FastAPI:
    app = FastAPI(title="chatwire", version="0.1.0")

    config = config or BoundaryConfig()
    config.validate()

    _adapter_lock = threading.Lock()

    http_semaphore: asyncio.Semaphore | None = None
    if http_max_concurrency is not None:
        try:
            http_max_concurrency = int(http_max_concurrency)
        except Exception as exc:
            raise ValueError("http_max_concurrency must be an integer") from exc
        if http_max_concurrency > 0:
            http_semaphore = asyncio.Semaphore(http_max_concurrency)
        elif http_max_concurrency < 0:
            raise ValueError("http_max_concurrency must be >= 0")

    async def _try_acquire_semaphore() -> None:
        if http_semaphore is None:
            return
        try:
            await asyncio.wait_for(http_semaphore.acquire(), timeout=0.001)
        except asyncio.TimeoutError as exc:
            raise HTTPException(status_code=429, detail="Server is busy") from exc

    async def _json_dict(request: Request) -> dict[str, Any]:
        try:
            payload = await request.json()
        except Exception as exc:
            raise HTTPException(status_code=400, detail="Request body must be valid JSON.") from exc
        if isinstance(payload, dict):
            return payload
        raise HTTPException(status_code=400, detail="Request body must be a JSON object.")

    def _run_complete(messages_json: str, options_json: str, tools_json: str) -> str:
        with _adapter_lock:
            if config.max_response_bytes is None:
                return complete(adapter, messages_json, options_json, tools_json, config=config)
            buffer = bytearray(config.max_response_bytes)
            complete_into(buffer, adapter, messages_json, options_json, tools_json, config=config)
        end = buffer.find(b"\0")
        return bytes(buffer[: end if end != -1 else 0]).decode("utf-8")

    def _run_embed(text: str) -> str:
        with _adapter_lock:
            return embed(adapter, text)

    # -------------------------------------------------------------------------
    # Health & Models
    # -------------------------------------------------------------------------

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/v1/models")
    async def list_models() -> dict[str, Any]:
        now = int(time.time())
        return {
            "object": "list",
            "data": [
                {
                    "id": model_id,
                    "object": "model",
                    "created": now,
                    "owned_by": "chatwire",
                    "info": adapter.model_info,
                }
            ],
        }

    # -------------------------------------------------------------------------
    # Completion
    # -------------------------------------------------------------------------

    @app.post("/v1/complete")
    async def complete_endpoint(request: Request) -> Response:
        """Run one completion.

        Body: {"messages": [...], "options": {...}, "tools": [...]}. Each part
        may also be given as already-serialized JSON text.
        """
        payload = await _json_dict(request)
        messages_json = _wire_text(payload.get("messages"))
        options_json = _wire_text(payload.get("options"))
        tools_json = _wire_text(payload.get("tools"))

        await _try_acquire_semaphore()
        try:
            document = await asyncio.to_thread(_run_complete, messages_json, options_json, tools_json)
        finally:
            if http_semaphore is not None:
                http_semaphore.release()
        if not document:
            raise HTTPException(status_code=500, detail="Response buffer too small to hold a result.")
        return Response(content=document, media_type="application/json")

    @app.post("/v1/stop")
    async def stop_endpoint() -> JSONResponse:
        """Ask an in-flight completion to finish early.

        Does not take the adapter lock; it must reach a generation that holds it.
        """
        adapter.stop()
        return JSONResponse({"status": "stopping"})

    # -------------------------------------------------------------------------
    # Embeddings
    # -------------------------------------------------------------------------

    @app.post("/v1/embed")
    async def embed_endpoint(request: Request) -> Response:
        """Body: {"text": "..."}."""
        payload = await _json_dict(request)
        text = payload.get("text")
        if not isinstance(text, str):
            raise HTTPException(status_code=400, detail="'text' must be a string.")

        await _try_acquire_semaphore()
        try:
            document = await asyncio.to_thread(_run_embed, text)
        finally:
            if http_semaphore is not None:
                http_semaphore.release()
        return Response(content=document, media_type="application/json")

    return app


def _wire_text(value: Any) -> str:
    """Serialize one request part to the text form the codec decodes."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)
