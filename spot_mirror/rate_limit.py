"""
IP Rate Limit Middleware

클라이언트 IP별 고정 윈도우 요청 제한 (기본 60초당 100회).

Emitted headers:
    RateLimit-Limit, RateLimit-Remaining, RateLimit-Reset, Retry-After (429 시)
"""

import logging
import math
import time
from dataclasses import dataclass
from typing import Callable, Dict

from fastapi import Request
from starlette import status
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import PlainTextResponse, Response
from starlette.types import ASGIApp

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = "Too many requests from this IP, please try again later."


@dataclass
class _Window:
    """IP별 윈도우 상태"""
    started_at: float
    count: int = 0


class IPRateLimitMiddleware(BaseHTTPMiddleware):
    """
    IP별 고정 윈도우 rate limiter (프로세스 메모리)

    Args:
        app: ASGI application
        max_requests: 윈도우당 허용 요청 수
        window_seconds: 윈도우 길이 (초)
        clock: 테스트용 시계 (기본값: time.monotonic)
    """

    def __init__(
        self,
        app: ASGIApp,
        max_requests: int = 100,
        window_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic
    ) -> None:
        super().__init__(app)
        self.max_requests = max_requests
        self.window_seconds = float(window_seconds)
        self._clock = clock
        self._windows: Dict[str, _Window] = {}
        self._last_sweep = clock()

    def _client_ip(self, request: Request) -> str:
        return request.client.host if request.client else "unknown"

    def _sweep(self, now: float) -> None:
        """만료된 윈도우 정리 (윈도우 길이마다 1회)"""
        if now - self._last_sweep < self.window_seconds:
            return
        expired = [
            ip for ip, window in self._windows.items()
            if now - window.started_at >= self.window_seconds
        ]
        for ip in expired:
            del self._windows[ip]
        self._last_sweep = now

    def _headers(self, window: _Window, now: float) -> Dict[str, str]:
        reset = max(0, math.ceil(window.started_at + self.window_seconds - now))
        return {
            "RateLimit-Limit": str(self.max_requests),
            "RateLimit-Remaining": str(max(0, self.max_requests - window.count)),
            "RateLimit-Reset": str(reset),
        }

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        now = self._clock()
        self._sweep(now)

        ip = self._client_ip(request)
        window = self._windows.get(ip)
        if window is None or now - window.started_at >= self.window_seconds:
            window = _Window(started_at=now)
            self._windows[ip] = window

        window.count += 1
        headers = self._headers(window, now)

        if window.count > self.max_requests:
            logger.warning(f"⚠️ {ip} 요청 제한 초과 ({self.max_requests}/{self.window_seconds:.0f}s)")
            headers["Retry-After"] = headers["RateLimit-Reset"]
            return PlainTextResponse(
                RATE_LIMIT_MESSAGE,
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                headers=headers
            )

        response = await call_next(request)
        response.headers.update(headers)
        return response
