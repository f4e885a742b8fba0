"""chatwire server entrypoint (FastAPI + uvicorn).

Example:
    python -m apps.server.main --model Qwen/Qwen2.5-0.5B-Instruct --host 0.0.0.0 --port 8788
"""

from __future__ import annotations

import argparse
import logging
import os
from typing import Any

from apps.server.app import create_app
from chatwire.engine.boundary import BoundaryConfig
from chatwire.engine.registry import get_adapter, list_adapters


def _parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="chatwire inference server")
    p.add_argument("--model", required=True, help="Model path or HF repo id")
    p.add_argument(
        "--adapter",
        default="transformers",
        choices=list_adapters(),
        help="Engine adapter (default: transformers)",
    )
    p.add_argument("--host", default="0.0.0.0", help="Bind host (default: 0.0.0.0)")
    p.add_argument("--port", type=int, default=8788, help="Bind port (default: 8788)")
    p.add_argument("--device", default="cpu", help="Device / device_map (default: cpu)")
    p.add_argument("--dtype", default="float32", help="Torch dtype: float16|bfloat16|float32 (default: float32)")
    p.add_argument(
        "--max-response-bytes",
        type=int,
        default=0,
        help="Fixed response buffer size in bytes (0 = unbounded)",
    )
    p.add_argument(
        "--http-max-concurrency",
        type=int,
        default=0,
        help="Max in-flight /v1/complete requests (0 = unlimited)",
    )
    p.add_argument("--trust-remote-code", action="store_true", help="Allow custom model code from the hub")
    p.add_argument("--reload", action="store_true", help="Enable uvicorn reload (dev only)")
    return p.parse_args()


def _dtype_from_string(dtype: str) -> Any:
    try:
        import torch
    except Exception as exc:  # pragma: no cover
        raise RuntimeError("torch is required to run the server.") from exc

    dt = dtype.strip().lower()
    if dt in {"fp16", "float16", "half"}:
        return torch.float16
    if dt in {"bf16", "bfloat16"}:
        return torch.bfloat16
    if dt in {"fp32", "float32"}:
        return torch.float32
    raise ValueError(f"Unknown dtype: {dtype!r}")


def main() -> None:
    args = _parse_args()
    logging.basicConfig(
        level=os.environ.get("CHATWIRE_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = BoundaryConfig(
        max_response_bytes=None if args.max_response_bytes <= 0 else int(args.max_response_bytes),
    )
    config.validate()

    adapter = get_adapter(args.adapter)
    print(
        "[server] loading model... "
        f"model={args.model!r} adapter={args.adapter!r} device={args.device!r} dtype={args.dtype!r}",
        flush=True,
    )
    adapter.load(
        args.model,
        device=args.device,
        dtype=_dtype_from_string(args.dtype),
        trust_remote_code=bool(args.trust_remote_code),
    )
    print("[server] model loaded", flush=True)

    model_id = os.path.basename(args.model.rstrip("/")) or "chatwire"
    app = create_app(
        adapter=adapter,
        model_id=model_id,
        config=config,
        http_max_concurrency=None if args.http_max_concurrency <= 0 else int(args.http_max_concurrency),
    )

    try:
        import uvicorn
    except Exception as exc:  # pragma: no cover
        raise RuntimeError("uvicorn is required to run the server.") from exc

    uvicorn.run(
        app,
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level="info",
    )


if __name__ == "__main__":
    main()
