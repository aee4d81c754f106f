"""
공통 테스트 픽스처
"""

import pytest

from spot_mirror.config import Settings
from spot_mirror.models import FailureReason, FetchOutcome

PAIRS = [
    'BTC-USD', 'BTC-EUR', 'BTC-CAD', 'BTC-BRL', 'BTC-MXP',
    'BTC-GBP', 'BTC-CHF', 'BTC-JPY', 'BTC-AUD'
]


class FakeClock:
    """테스트용 시계 (ms)"""

    def __init__(self, start: float = 1_700_000_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


def ok(pair: str, amount: str = "50000.00", currency: str = "USD") -> FetchOutcome:
    return FetchOutcome.ok(pair, amount=amount, base="BTC", currency=currency)


def limited(pair: str) -> FetchOutcome:
    return FetchOutcome.failed(pair, FailureReason.RATE_LIMITED, status_code=429)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def test_settings():
    """업스트림/간격 기본값을 고정한 설정"""
    return Settings(
        UPSTREAM_BASE_URL="https://api.coinbase.com/v2/prices",
        CURRENCY_PAIRS=",".join(PAIRS),
        MIN_POLL_INTERVAL_MS=2500,
        MAX_POLL_INTERVAL_MS=20000,
        BACKOFF_MULTIPLIER=2.0,
        STALENESS_THRESHOLD_MS=60000,
        CLIENT_RATE_LIMIT=100,
        CLIENT_RATE_LIMIT_WINDOW=60,
    )
