"""
시세 데이터 모델

캐시 엔트리와 API 응답 형식(Coinbase 호환)을 정의합니다.
"""

from dataclasses import dataclass
from typing import Optional
from pydantic import BaseModel, Field


class SpotPrice(BaseModel):
    """현물 시세 (Coinbase `data` 객체와 동일한 형식)"""

    amount: str = Field(..., description="가격 (업스트림 문자열 그대로, float 변환 금지)")
    base: str = Field("BTC", description="기준 자산 (예: BTC)")
    currency: Optional[str] = Field(None, description="호가 통화 (예: USD)")

    class Config:
        json_schema_extra = {
            "example": {
                "amount": "50000.00",
                "base": "BTC",
                "currency": "USD"
            }
        }


@dataclass(frozen=True)
class CachedQuote:
    """캐시 엔트리 (통화쌍당 1개, 쓰기 시 통째로 교체)"""
    pair: str
    amount: str
    base: str
    currency: Optional[str]
    written_at: float  # 마지막 성공 쓰기 시각 (ms)


@dataclass(frozen=True)
class CacheLookup:
    """캐시 조회 결과"""
    data: SpotPrice
    age: float  # ms
    is_stale: bool


class SpotPriceResponse(BaseModel):
    """GET /v2/prices/{pair}/spot 정상 응답"""

    data: SpotPrice

    class Config:
        json_schema_extra = {
            "example": {
                "data": {"amount": "50000.00", "base": "BTC", "currency": "USD"}
            }
        }


class ErrorResponse(BaseModel):
    """에러 응답 (stale 시 마지막 시세를 data로 첨부)"""

    error: str = Field(..., description="에러 메시지")
    data: Optional[SpotPrice] = Field(None, description="stale 상태의 마지막 시세")


class HealthResponse(BaseModel):
    """헬스 체크 응답"""

    status: str = Field("ok", description="서비스 상태")
    timestamp: str = Field(..., description="응답 시각 (ISO-8601, UTC)")
