"""
API 의존성 주입 (Dependency Injection)

lifespan에서 생성해 app.state에 보관한 인스턴스를 FastAPI Depends로 주입합니다.
"""

from fastapi import Request

from spot_mirror.price_cache import PriceCache


def get_price_cache(request: Request) -> PriceCache:
    """
    PriceCache 의존성 주입

    Returns:
        PriceCache: 앱 단위 시세 캐시
    """
    return request.app.state.price_cache
