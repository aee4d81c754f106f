"""
Configuration settings for Spot Price Mirror Service

환경 변수를 통해 설정을 관리합니다.
"""

from pydantic import model_validator
from pydantic_settings import BaseSettings
from pathlib import Path
from typing import List

PROJECT_ROOT = Path(__file__).resolve().parent.parent
ENV_FILE = PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """Application settings"""

    # Environment
    ENVIRONMENT: str = "production"
    LOG_LEVEL: str = "INFO"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8888
    SHUTDOWN_TIMEOUT: float = 10.0  # 강제 종료까지 대기 시간 (초)

    # Upstream (Coinbase v2 prices)
    UPSTREAM_BASE_URL: str = "https://api.coinbase.com/v2/prices"
    CURRENCY_PAIRS: str = "BTC-USD,BTC-EUR,BTC-CAD,BTC-BRL,BTC-MXP,BTC-GBP,BTC-CHF,BTC-JPY,BTC-AUD"
    USER_AGENT: str = "spot-price-mirror/1.0"
    REQUEST_TIMEOUT: float = 5.0  # 요청당 하드 타임아웃 (초)

    # Polling settings (밀리초)
    MIN_POLL_INTERVAL_MS: int = 2500
    MAX_POLL_INTERVAL_MS: int = 20000
    BACKOFF_MULTIPLIER: float = 2.0

    # Data staleness
    STALENESS_THRESHOLD_MS: int = 60000  # 60초

    # Client-facing limits
    CLIENT_RATE_LIMIT: int = 100  # IP당 허용 요청 수
    CLIENT_RATE_LIMIT_WINDOW: int = 60  # 윈도우 (초)

    # CORS
    ALLOWED_ORIGINS: str = "*"

    @property
    def currency_pairs(self) -> List[str]:
        """추적 통화쌍 목록 (대문자 정규화)"""
        return [pair.strip().upper() for pair in self.CURRENCY_PAIRS.split(",") if pair.strip()]

    @property
    def allowed_origins(self) -> List[str]:
        """CORS 허용 origin 목록"""
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",") if origin.strip()] or ["*"]

    @model_validator(mode="after")
    def check_polling_bounds(self) -> "Settings":
        if self.MIN_POLL_INTERVAL_MS <= 0:
            raise ValueError("MIN_POLL_INTERVAL_MS must be positive")
        if self.MAX_POLL_INTERVAL_MS < self.MIN_POLL_INTERVAL_MS:
            raise ValueError("MAX_POLL_INTERVAL_MS must be >= MIN_POLL_INTERVAL_MS")
        if self.BACKOFF_MULTIPLIER <= 1:
            raise ValueError("BACKOFF_MULTIPLIER must be greater than 1")
        if not self.currency_pairs:
            raise ValueError("CURRENCY_PAIRS must name at least one pair")
        return self

    class Config:
        env_file = str(ENV_FILE)
        case_sensitive = True
        extra = "ignore"


settings = Settings()
