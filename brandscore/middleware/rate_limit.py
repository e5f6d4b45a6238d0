"""
brandscore/middleware/rate_limit.py — Sliding-window per-IP rate limiter.
Only applies to the expensive POST endpoints. Limit configurable via RATE_LIMIT_PER_MINUTE.
"""
import time
from collections import deque
from typing import Callable, Dict
from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from brandscore.config import get_settings

WINDOW = 60
LIMITED = {"/api/audit", "/api/leads"}

_log: Dict[str, deque] = {}
_last_sweep = 0.0


def _ip(request: Request) -> str:
    fwd = request.headers.get("X-Forwarded-For")
    if fwd:
        return fwd.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def sweep(now: float) -> int:
    """Forget clients whose newest hit has left the window. Returns how many were dropped."""
    stale = [key for key, q in _log.items() if not q or now - q[-1] > WINDOW]
    for key in stale:
        del _log[key]
    return len(stale)


def reset() -> None:
    global _last_sweep
    _log.clear()
    _last_sweep = 0.0


def hit(key: str, limit: int, now: float) -> int:
    """Record a request for `key`. Returns 0 when allowed, else seconds until retry."""
    global _last_sweep
    if now - _last_sweep > WINDOW:
        sweep(now)
        _last_sweep = now

    q = _log.setdefault(key, deque())
    while q and now - q[0] > WINDOW:
        q.popleft()
    if len(q) >= limit:
        return int(WINDOW - (now - q[0])) + 1
    q.append(now)
    return 0


class RateLimitMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.method == "POST" and request.url.path in LIMITED:
            limit = get_settings().rate_limit_per_minute
            retry = hit(f"{_ip(request)}:{request.url.path}", limit, time.monotonic())
            if retry:
                return JSONResponse(
                    status_code=429,
                    content={"detail": f"Rate limit exceeded. Max {limit}/min per IP.", "retry_after_seconds": retry},
                    headers={"Retry-After": str(retry)},
                )
        return await call_next(request)
