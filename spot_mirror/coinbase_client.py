"""
Coinbase REST API Client

Coinbase v2 prices API(`GET {base_url}/{PAIR}/spot`)로 현물 시세를 조회합니다.

Features:
- 통화쌍당 1회 요청, 요청 전체에 하드 타임아웃 적용 (기본 5초)
- 응답을 FetchOutcome으로 분류 (성공 / rate_limited / http_<status> /
  timeout / malformed_response / network_error)
- 재시도 없음 (다음 폴링 사이클이 재시도 역할)
"""

import asyncio
import httpx
import logging
from typing import Any, Optional

from spot_mirror.config import settings
from spot_mirror.models import FailureReason, FetchOutcome

logger = logging.getLogger(__name__)

DEFAULT_BASE = "BTC"


class CoinbaseClient:
    """Coinbase 현물 시세 클라이언트"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        user_agent: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None
    ):
        self.base_url = (base_url or settings.UPSTREAM_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.REQUEST_TIMEOUT
        self.user_agent = user_agent or settings.USER_AGENT

        # 외부에서 주입된 클라이언트는 소유하지 않음 (close 책임 없음)
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient()

    async def close(self):
        """Close HTTP client"""
        if self._owns_client:
            await self.client.aclose()

    def spot_url(self, pair: str) -> str:
        return f"{self.base_url}/{pair}/spot"

    async def get_spot_price(self, pair: str) -> FetchOutcome:
        """
        현물 시세 조회

        Args:
            pair: 통화쌍 (예: 'BTC-USD')

        Returns:
            FetchOutcome (성공 시 amount/base/currency 포함)

        Raises:
            httpx/OS 계열이 아닌 예상치 못한 예외는 그대로 전파
        """
        url = self.spot_url(pair)

        try:
            # httpx timeout은 단계별(connect/read)이므로 요청 전체를 wait_for로 제한
            response = await asyncio.wait_for(
                self.client.get(url, headers={"User-Agent": self.user_agent}),
                timeout=self.timeout
            )
        except (asyncio.TimeoutError, httpx.TimeoutException):
            logger.debug(f"⏱️ {pair} 요청 타임아웃 ({self.timeout}s)")
            return FetchOutcome.failed(pair, FailureReason.TIMEOUT)
        except (httpx.HTTPError, OSError) as e:
            logger.debug(f"❌ {pair} 네트워크 오류: {e}")
            return FetchOutcome.failed(pair, FailureReason.NETWORK_ERROR, message=str(e))

        if response.status_code == 429:
            logger.debug(f"⚠️ {pair} API 호출 제한 초과 (429)")
            return FetchOutcome.failed(pair, FailureReason.RATE_LIMITED, status_code=429)

        if not response.is_success:
            logger.debug(f"❌ {pair} API 응답 실패 ({response.status_code})")
            return FetchOutcome.failed(
                pair, FailureReason.HTTP_ERROR, status_code=response.status_code
            )

        try:
            # 숫자는 JSON 원문 그대로 문자열로 파싱 (float 변환 시 정밀도 손실)
            body = response.json(parse_float=str, parse_int=str)
        except ValueError as e:
            logger.debug(f"⚠️ {pair} JSON 파싱 실패: {e}")
            return FetchOutcome.failed(pair, FailureReason.MALFORMED_RESPONSE, message=str(e))

        return self._parse_spot(pair, body)

    def _parse_spot(self, pair: str, body: Any) -> FetchOutcome:
        """
        응답 본문 파싱

        기대 형식: {"data": {"amount": "50000.00", "base": "BTC", "currency": "USD"}}
        """
        data = body.get("data") if isinstance(body, dict) else None
        if not isinstance(data, dict):
            logger.debug(f"⚠️ {pair} 응답에 data 객체 없음")
            return FetchOutcome.failed(pair, FailureReason.MALFORMED_RESPONSE)

        # amount는 문자열 그대로 보관 (정밀도 손실 방지)
        amount = data.get("amount")
        if not amount or not isinstance(amount, str):
            logger.debug(f"⚠️ {pair} data.amount 누락: {data}")
            return FetchOutcome.failed(pair, FailureReason.MALFORMED_RESPONSE)

        return FetchOutcome.ok(
            pair=pair,
            amount=amount,
            base=data.get("base") or DEFAULT_BASE,
            currency=data.get("currency")
        )
