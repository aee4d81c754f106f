"""API router"""

from fastapi import APIRouter
from .prices import router as prices_router

api_router = APIRouter()

# 서브 라우터 등록
api_router.include_router(prices_router)

__all__ = ["api_router"]
