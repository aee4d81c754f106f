"""
Price Cache

통화쌍별 최신 시세를 메모리에 보관하고, 조회 시점에 stale 여부를 판정합니다.

Note:
- 추적 통화쌍이 고정되어 있으므로 eviction/TTL sweep 없음
- stale 판정은 get() 호출 시 lazy하게 계산
"""

import logging
import time
from typing import Callable, Dict, List, Optional

from spot_mirror.models import CachedQuote, CacheLookup, SpotPrice

logger = logging.getLogger(__name__)

STALE_THRESHOLD_MS = 60000  # 60초


def now_ms() -> float:
    """현재 시각 (ms)"""
    return time.time() * 1000


class PriceCache:
    """통화쌍 → 최신 시세 캐시"""

    def __init__(
        self,
        stale_threshold_ms: float = STALE_THRESHOLD_MS,
        clock: Callable[[], float] = now_ms
    ):
        self.stale_threshold_ms = stale_threshold_ms
        self._clock = clock
        self._entries: Dict[str, CachedQuote] = {}

    @staticmethod
    def normalize(pair: str) -> str:
        return pair.upper()

    def set(self, pair: str, quote: SpotPrice) -> None:
        """
        시세 저장 (기존 엔트리를 통째로 교체)

        amount 형식 검증은 하지 않습니다 (PriceFetcher 책임).

        Args:
            pair: 통화쌍 (대소문자 무관)
            quote: 시세 (amount, base, currency)
        """
        key = self.normalize(pair)
        self._entries[key] = CachedQuote(
            pair=key,
            amount=quote.amount,
            base=quote.base,
            currency=quote.currency,
            written_at=self._clock()
        )
        logger.debug(f"{key} 캐시 갱신: {quote.amount} {quote.currency}")

    def get(self, pair: str) -> Optional[CacheLookup]:
        """
        시세 조회

        Args:
            pair: 통화쌍 (대소문자 무관)

        Returns:
            CacheLookup(data, age, is_stale)
            or None if 한 번도 조회되지 않은 통화쌍
        """
        entry = self._entries.get(self.normalize(pair))

        if entry is None:
            return None

        age = self._clock() - entry.written_at
        return CacheLookup(
            data=SpotPrice(amount=entry.amount, base=entry.base, currency=entry.currency),
            age=age,
            is_stale=age > self.stale_threshold_ms
        )

    def has(self, pair: str) -> bool:
        return self.normalize(pair) in self._entries

    def pairs(self) -> List[str]:
        """캐시된 통화쌍 목록"""
        return sorted(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
