"""
Polling Manager

PriceFetcher의 사이클을 반복 실행하고, 사이클 사이에는
PriceFetcher가 보고하는 간격만큼 대기합니다.

Polling Strategy:
1. 사이클 실행 (fetch_all_prices)
2. 사이클 요약 로깅 (rate limited / 부분 실패 / 전체 성공)
3. get_current_interval() 만큼 대기 (stop() 호출 시 즉시 해제)
4. 반복

Note:
- 이전 사이클이 완전히 끝나기 전에는 다음 사이클을 시작하지 않음
- 사이클 중 예외가 발생해도 루프는 계속 진행 (캐시는 stale 상태로 남음)
- stop()은 진행 중인 요청을 취소하지 않음 (종료 데드라인은 호출 측 책임)
- poll_forever 태스크가 첫 실행되기 전에 stop()이 호출돼도 중지 상태가 유지됨
"""

import asyncio
import logging
import time
from typing import Optional

from spot_mirror.models import CycleSummary
from spot_mirror.price_fetcher import PriceFetcher

logger = logging.getLogger(__name__)


class PollingManager:
    """폴링 관리자"""

    def __init__(self, fetcher: PriceFetcher):
        self.fetcher = fetcher

        self.is_running = False
        # stop()은 한 번 호출되면 되돌리지 않음 (태스크 시작 전 호출도 유효)
        self._stopped = False
        # 이벤트는 실행 중인 루프 안에서 생성 (poll_forever 참고)
        self._stop_event: Optional[asyncio.Event] = None
        self.cycles_completed = 0
        self.last_summary: Optional[CycleSummary] = None

    async def poll_forever(self):
        """
        무한 폴링 루프

        stop() 호출 전까지 사이클 실행 → 대기를 반복합니다.
        첫 사이클은 대기 없이 즉시 실행됩니다.
        태스크가 스케줄되기 전에 stop()이 호출됐다면 사이클 없이 종료합니다.
        """
        if self._stopped:
            logger.info("Polling loop stopped before first cycle")
            return

        self._stop_event = asyncio.Event()
        self.is_running = True
        logger.info(f"🚀 폴링 시작 ({len(self.fetcher.pairs)}개 통화쌍)")

        while self.is_running:
            await self.run_cycle()

            if not self.is_running:
                break

            interval_ms = self.fetcher.get_current_interval()
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=interval_ms / 1000)
            except asyncio.TimeoutError:
                pass

        logger.info("Polling loop stopped")

    async def run_cycle(self) -> Optional[CycleSummary]:
        """
        사이클 1회 실행 + 요약 로깅

        Returns:
            CycleSummary or None if 사이클 자체가 예외로 실패
        """
        cycle_start = time.time()

        try:
            summary = await self.fetcher.fetch_all_prices()
        except Exception as e:
            logger.error(f"❌ 시세 조회 사이클 실패: {e}", exc_info=True)
            return None

        cycle_time = time.time() - cycle_start
        self.cycles_completed += 1
        self.last_summary = summary

        if summary.rate_limited:
            logger.warning(
                f"⚠️ Rate limited - {summary.success} succeeded, {summary.failed} failed "
                f"(다음 간격 {self.fetcher.get_current_interval():.0f}ms)"
            )
        elif summary.failed > 0:
            logger.warning(f"⚠️ {summary.success} succeeded, {summary.failed} failed")
        else:
            logger.info(f"✅ Successfully updated {summary.success} prices ({cycle_time:.2f}초)")

        return summary

    def stop(self):
        """폴링 중지 (대기 중인 다음 사이클 예약 취소)"""
        logger.info("🛑 폴링 중지 요청")
        self._stopped = True
        self.is_running = False
        if self._stop_event is not None:
            self._stop_event.set()
