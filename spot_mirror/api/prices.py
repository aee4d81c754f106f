"""
시세 API 엔드포인트

Coinbase v2 prices API와 동일한 경로/응답 형식으로 캐시된 시세를 제공합니다.
"""

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
import logging

from spot_mirror.api.dependencies import get_price_cache
from spot_mirror.models import ErrorResponse, SpotPriceResponse
from spot_mirror.price_cache import PriceCache

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v2/prices", tags=["prices"])

NOT_FOUND_MESSAGE = "Currency pair not found"
STALE_MESSAGE = "Service temporarily unavailable - data too stale"


@router.get(
    "/{pair}/spot",
    response_model=SpotPriceResponse,
    response_model_exclude_none=True,
    responses={
        status.HTTP_404_NOT_FOUND: {"model": ErrorResponse},
        status.HTTP_503_SERVICE_UNAVAILABLE: {"model": ErrorResponse},
    }
)
async def get_spot_price(
    pair: str,
    price_cache: PriceCache = Depends(get_price_cache)
):
    """
    현물 시세 조회

    Args:
        pair: 통화쌍 (대소문자 무관, 예: BTC-USD)

    Returns:
        200: {"data": {"amount": "...", "base": "BTC", "currency": "..."}}
        404: 한 번도 조회되지 않은 통화쌍
        503: 60초 이상 갱신되지 않음 (마지막 시세를 data로 첨부)

    Example:
        GET /v2/prices/BTC-USD/spot

        Response:
        {
            "data": {"amount": "50000.00", "base": "BTC", "currency": "USD"}
        }
    """
    cached = price_cache.get(pair)

    if cached is None:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"error": NOT_FOUND_MESSAGE}
        )

    if cached.is_stale:
        logger.debug(f"{pair.upper()} stale 응답 (age {cached.age:.0f}ms)")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "error": STALE_MESSAGE,
                "data": cached.data.model_dump(exclude_none=True)
            }
        )

    return SpotPriceResponse(data=cached.data)
