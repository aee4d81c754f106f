"""
Spot Price Mirror Service - Main Entry Point

Coinbase 현물 시세를 백그라운드에서 폴링하고, 캐시된 값을
Coinbase 호환 REST 엔드포인트로 제공하는 FastAPI 애플리케이션입니다.

Architecture:
- lifespan 시작 시 폴링 태스크 실행 (첫 사이클 즉시)
- GET /v2/prices/{pair}/spot, GET /health
- CORS (GET, OPTIONS), IP별 요청 제한 (60초당 100회)
- 종료 시 폴링 중지 → 진행 중인 사이클 최대 10초 대기 → 강제 취소

Usage:
    python3 -m spot_mirror.main
"""

import asyncio
import logging
import sys
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from spot_mirror import __version__
from spot_mirror.config import Settings, settings
from spot_mirror.coinbase_client import CoinbaseClient
from spot_mirror.models import HealthResponse
from spot_mirror.polling_manager import PollingManager
from spot_mirror.price_cache import PriceCache
from spot_mirror.price_fetcher import PriceFetcher
from spot_mirror.rate_limit import IPRateLimitMiddleware

# Logging setup
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)

# httpx 로그 레벨을 WARNING으로 설정 (HTTP 요청 로그 숨기기)
logging.getLogger('httpx').setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


def _log_polling_crash(task: asyncio.Task) -> None:
    """폴링 태스크가 예외로 종료된 경우 로깅"""
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error(f"❌ 폴링 태스크 비정상 종료: {exc}", exc_info=exc)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    FastAPI 앱의 생명주기 관리

    시작 시: HTTP 클라이언트, PriceFetcher, PollingManager 생성 + 폴링 시작
    종료 시: 폴링 중지 → 진행 중인 사이클 대기 (데드라인 초과 시 취소) → 클라이언트 종료
    """
    app_settings: Settings = app.state.settings

    logger.info("=" * 60)
    logger.info("🚀 Spot Price Mirror Service Starting...")
    logger.info(f"Environment: {app_settings.ENVIRONMENT}")
    logger.info(f"Upstream: {app_settings.UPSTREAM_BASE_URL}")
    logger.info(f"Currency Pairs: {len(app_settings.currency_pairs)}")
    logger.info(
        f"Polling Interval: {app_settings.MIN_POLL_INTERVAL_MS}~{app_settings.MAX_POLL_INTERVAL_MS}ms "
        f"(x{app_settings.BACKOFF_MULTIPLIER:g})"
    )
    logger.info("=" * 60)

    http_client = httpx.AsyncClient()
    coinbase_client = CoinbaseClient(
        base_url=app_settings.UPSTREAM_BASE_URL,
        timeout=app_settings.REQUEST_TIMEOUT,
        user_agent=app_settings.USER_AGENT,
        client=http_client
    )
    fetcher = PriceFetcher(
        cache=app.state.price_cache,
        client=coinbase_client,
        pairs=app_settings.currency_pairs,
        min_interval_ms=app_settings.MIN_POLL_INTERVAL_MS,
        max_interval_ms=app_settings.MAX_POLL_INTERVAL_MS,
        backoff_multiplier=app_settings.BACKOFF_MULTIPLIER
    )
    polling_manager = PollingManager(fetcher)
    app.state.fetcher = fetcher
    app.state.polling_manager = polling_manager

    polling_task: Optional[asyncio.Task] = None
    if app.state.start_polling:
        polling_task = asyncio.create_task(polling_manager.poll_forever())
        polling_task.add_done_callback(_log_polling_crash)

    yield  # 앱 실행 중

    logger.info("🛑 Stopping Spot Price Mirror Service...")
    polling_manager.stop()

    if polling_task is not None and not polling_task.done():
        done, _ = await asyncio.wait({polling_task}, timeout=app_settings.SHUTDOWN_TIMEOUT)
        if not done:
            logger.error("❌ 종료 데드라인 초과 - 폴링 태스크 강제 취소")
            polling_task.cancel()
            try:
                await polling_task
            except asyncio.CancelledError:
                pass

    await http_client.aclose()
    logger.info("✅ Spot Price Mirror Service stopped")


def create_app(app_settings: Optional[Settings] = None, start_polling: bool = True) -> FastAPI:
    """
    FastAPI 애플리케이션 생성 및 설정

    Args:
        app_settings: 설정 (기본값: 환경 변수 기반 전역 settings)
        start_polling: lifespan 시작 시 폴링 태스크 실행 여부

    Returns:
        FastAPI: 설정된 FastAPI 인스턴스
    """
    app_settings = app_settings or settings

    app = FastAPI(
        title="Spot Price Mirror",
        description="Coinbase 호환 현물 시세 미러 API",
        version=__version__,
        lifespan=lifespan
    )

    app.state.settings = app_settings
    app.state.start_polling = start_polling
    app.state.price_cache = PriceCache(stale_threshold_ms=app_settings.STALENESS_THRESHOLD_MS)

    # 미들웨어 설정
    setup_middleware(app, app_settings)

    # 라우터 등록
    setup_routers(app)

    return app


def setup_middleware(app: FastAPI, app_settings: Settings) -> None:
    """
    미들웨어 설정 (요청 제한, CORS)

    나중에 추가된 미들웨어가 바깥쪽에서 실행되므로 CORS preflight는
    요청 제한에 집계되지 않습니다.
    """
    app.add_middleware(
        IPRateLimitMiddleware,
        max_requests=app_settings.CLIENT_RATE_LIMIT,
        window_seconds=app_settings.CLIENT_RATE_LIMIT_WINDOW
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.allowed_origins,
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["Content-Type"]
    )


def setup_routers(app: FastAPI) -> None:
    """API 라우터 등록"""
    from spot_mirror.api import api_router
    app.include_router(api_router)

    @app.get("/health", response_model=HealthResponse)
    async def health_check():
        """헬스 체크 엔드포인트"""
        return HealthResponse(
            status="ok",
            timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        )


# 앱 인스턴스 생성
app = create_app()


def run() -> None:
    """uvicorn으로 서비스 실행 (SIGINT/SIGTERM 시 graceful shutdown)"""
    import uvicorn

    uvicorn.run(
        app,
        host=settings.HOST,
        port=settings.PORT,
        log_config=None,
        timeout_graceful_shutdown=int(settings.SHUTDOWN_TIMEOUT)
    )


if __name__ == "__main__":
    try:
        run()
    except KeyboardInterrupt:
        logger.info("⚠️ Keyboard interrupt received")
    except Exception as e:
        logger.error(f"❌ Fatal error: {e}", exc_info=True)
        sys.exit(1)
