"""
Price Fetcher

추적 통화쌍 전체를 동시에 조회하고, 429 응답 여부에 따라
폴링 간격을 조정합니다.

Polling Strategy:
1. 모든 통화쌍을 동시에 조회 (asyncio.gather, 일부 실패해도 전체 대기)
2. 성공 → 캐시 갱신 + 간격 축소 (÷ multiplier, 최소 2.5초)
3. 429 → 간격 확대 (× multiplier, 최대 20초)
4. 사이클 요약 반환 (success / failed / rate_limited)

Note:
- 간격 조정은 사이클 단위가 아니라 결과(outcome) 단위로 적용됨
  (429가 3건이면 한 사이클 안에서 ×2가 3번 누적)
"""

import asyncio
import logging
from typing import Iterable, List, Optional

from spot_mirror.config import settings
from spot_mirror.coinbase_client import CoinbaseClient
from spot_mirror.models import CycleSummary, FetchOutcome, SpotPrice
from spot_mirror.price_cache import PriceCache

logger = logging.getLogger(__name__)


def backoff(current_ms: float, max_ms: float, multiplier: float) -> float:
    """429 1건에 대한 간격 확대"""
    return min(current_ms * multiplier, max_ms)


def recover(current_ms: float, min_ms: float, multiplier: float) -> float:
    """성공 1건에 대한 간격 축소"""
    if current_ms > min_ms:
        return max(current_ms / multiplier, min_ms)
    return current_ms


def next_interval(
    current_ms: float,
    outcomes: Iterable[FetchOutcome],
    min_ms: float,
    max_ms: float,
    multiplier: float
) -> float:
    """
    결과 목록을 순서대로 적용한 다음 폴링 간격 (순수 함수)

    PriceFetcher가 조회 중에 적용하는 규칙과 동일합니다.
    결과 순서에 따라 최종 값이 달라질 수 있습니다.

    Example:
        >>> next_interval(2500, [rate_limited] * 3 + [ok] * 6, 2500, 20000, 2)
        2500.0
    """
    for outcome in outcomes:
        if outcome.is_rate_limited:
            current_ms = backoff(current_ms, max_ms, multiplier)
        elif outcome.success:
            current_ms = recover(current_ms, min_ms, multiplier)
    return current_ms


class PriceFetcher:
    """폴링 사이클 실행 및 적응형 간격 관리"""

    def __init__(
        self,
        cache: PriceCache,
        client: CoinbaseClient,
        pairs: Optional[List[str]] = None,
        min_interval_ms: Optional[float] = None,
        max_interval_ms: Optional[float] = None,
        backoff_multiplier: Optional[float] = None
    ):
        self.cache = cache
        self.client = client
        self.pairs = [pair.upper() for pair in (pairs or settings.currency_pairs)]

        self.min_interval_ms = min_interval_ms or settings.MIN_POLL_INTERVAL_MS
        self.max_interval_ms = max_interval_ms or settings.MAX_POLL_INTERVAL_MS
        self.backoff_multiplier = backoff_multiplier or settings.BACKOFF_MULTIPLIER

        self.current_interval_ms = self.min_interval_ms
        self.rate_limited = False

    async def fetch_one(self, pair: str) -> FetchOutcome:
        """
        단일 통화쌍 조회

        429 → handle_rate_limit(), 성공 → handle_success() + 캐시 갱신

        Args:
            pair: 통화쌍 (예: 'BTC-USD')

        Returns:
            FetchOutcome
        """
        outcome = await self.client.get_spot_price(pair)

        if outcome.is_rate_limited:
            self.handle_rate_limit()
        elif outcome.success:
            self.handle_success()
            self.cache.set(pair, SpotPrice(
                amount=outcome.amount,
                base=outcome.base,
                currency=outcome.currency
            ))

        return outcome

    async def fetch_all_prices(self) -> CycleSummary:
        """
        전체 통화쌍 동시 조회 (사이클 1회)

        Returns:
            CycleSummary (success + failed == 추적 통화쌍 수)
        """
        # return_exceptions=True: 일부 실패해도 나머지 조회는 계속 진행
        tasks = [self.fetch_one(pair) for pair in self.pairs]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        summary = CycleSummary()
        for pair, result in zip(self.pairs, results):
            if isinstance(result, BaseException):
                logger.warning(f"⚠️ {pair} 조회 중 예외 발생: {result!r}")
                summary.failed += 1
            elif result.success:
                summary.success += 1
            else:
                if result.is_rate_limited:
                    summary.rate_limited = True
                summary.failed += 1

        return summary

    def handle_rate_limit(self):
        """429 1건 처리: rate_limited 플래그 설정 + 간격 확대"""
        if not self.rate_limited:
            self.rate_limited = True
            logger.warning("⚠️ Rate limit 감지 - 폴링 간격 확대")

        self.current_interval_ms = backoff(
            self.current_interval_ms, self.max_interval_ms, self.backoff_multiplier
        )

    def handle_success(self):
        """성공 1건 처리: rate_limited 해제 + 간격 축소"""
        if self.rate_limited:
            self.rate_limited = False
            logger.info("✅ Rate limit 해제 - 폴링 간격 축소")

        self.current_interval_ms = recover(
            self.current_interval_ms, self.min_interval_ms, self.backoff_multiplier
        )

    def get_current_interval(self) -> float:
        """다음 사이클까지 대기할 시간 (ms)"""
        return self.current_interval_ms
