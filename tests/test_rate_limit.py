"""
IPRateLimitMiddleware 테스트

pytest tests/test_rate_limit.py -v
"""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from spot_mirror.rate_limit import IPRateLimitMiddleware


class SecondsClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def limiter_clock():
    return SecondsClock()


@pytest.fixture
def client(limiter_clock):
    app = FastAPI()
    app.add_middleware(IPRateLimitMiddleware, max_requests=2, window_seconds=60, clock=limiter_clock)

    @app.get("/ping")
    async def ping():
        return {"pong": True}

    return TestClient(app)


def test_headers_on_allowed_requests(client):
    response = client.get("/ping")

    assert response.status_code == 200
    assert response.headers["RateLimit-Limit"] == "2"
    assert response.headers["RateLimit-Remaining"] == "1"
    assert response.headers["RateLimit-Reset"] == "60"


def test_blocks_after_limit(client, limiter_clock):
    client.get("/ping")
    limiter_clock.now += 15
    client.get("/ping")

    response = client.get("/ping")

    assert response.status_code == 429
    assert response.headers["Retry-After"] == "45"
    assert response.headers["RateLimit-Remaining"] == "0"


def test_window_resets(client, limiter_clock):
    for _ in range(3):
        client.get("/ping")
    assert client.get("/ping").status_code == 429

    limiter_clock.now += 60

    response = client.get("/ping")
    assert response.status_code == 200
    assert response.headers["RateLimit-Remaining"] == "1"
