"""
폴링 사이클 데이터 모델

통화쌍별 조회 결과(FetchOutcome)와 사이클 요약(CycleSummary)을 정의합니다.
두 모델 모두 사이클 동안만 존재하며 저장되지 않습니다.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class FailureReason(Enum):
    """조회 실패 사유"""
    RATE_LIMITED = "rate_limited"              # HTTP 429
    HTTP_ERROR = "http_error"                  # 그 외 non-2xx
    TIMEOUT = "timeout"                        # 요청 타임아웃
    MALFORMED_RESPONSE = "malformed_response"  # data.amount 누락
    NETWORK_ERROR = "network_error"            # DNS, 연결 끊김 등


@dataclass(frozen=True)
class FetchOutcome:
    """통화쌍 1개에 대한 조회 결과 (성공 또는 실패)"""
    pair: str
    amount: Optional[str] = None
    base: Optional[str] = None
    currency: Optional[str] = None
    reason: Optional[FailureReason] = None
    status_code: Optional[int] = None
    message: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.reason is None

    @property
    def is_rate_limited(self) -> bool:
        return self.reason is FailureReason.RATE_LIMITED

    @property
    def error(self) -> Optional[str]:
        """로그/요약용 에러 코드 (예: 'rate_limited', 'http_503')"""
        if self.reason is None:
            return None
        if self.reason is FailureReason.HTTP_ERROR:
            return f"http_{self.status_code}"
        return self.reason.value

    @classmethod
    def ok(cls, pair: str, amount: str, base: str, currency: str) -> "FetchOutcome":
        return cls(pair=pair, amount=amount, base=base, currency=currency)

    @classmethod
    def failed(
        cls,
        pair: str,
        reason: FailureReason,
        status_code: Optional[int] = None,
        message: Optional[str] = None
    ) -> "FetchOutcome":
        return cls(pair=pair, reason=reason, status_code=status_code, message=message)


@dataclass
class CycleSummary:
    """사이클 1회 요약"""
    success: int = 0
    failed: int = 0
    rate_limited: bool = False

    @property
    def total(self) -> int:
        return self.success + self.failed
